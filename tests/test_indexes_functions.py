# ============================================================================
# INDEX AND FUNCTION BUILDER TESTS
# ============================================================================
# STATUS: Tests - CREATE/DROP/ALTER INDEX, CREATE/ALTER/DROP FUNCTION
# PURPOSE: Verify index column forms and function option rendering
# ============================================================================
"""
Index and Function Builder Tests

Covers:
1. Index column definitions (expressions, opclass, ordering, nulls)
2. Index storage options and partial indexes
3. DROP INDEX option conflicts
4. CREATE FUNCTION bodies and options, FunctionAlterer chains

Run with:
    pytest tests/test_indexes_functions.py -v
"""

import pytest

from core.config import reset_defaults
from core.ddl.functions import FunctionAlterer, FunctionBuilder, FunctionDefinition
from core.ddl.indexes import IndexBuilder, IndexDefinition
from core.errors import (
    InvalidFunctionAction,
    InvalidFunctionBehavior,
    InvalidFunctionSecurityType,
    InvalidIndexColumnDefinition,
    InvalidIndexFillFactor,
    InvalidIndexOptions,
)


def render(stmt):
    return stmt.as_string(None)


# ============================================================================
# INDEXES
# ============================================================================

class TestIndexDefinition:
    """CREATE INDEX rendering."""

    def test_simple(self):
        assert str(IndexDefinition("foo_idx", "foo", ["a", "b"])) == (
            'CREATE INDEX "foo_idx" ON "foo"("a", "b");'
        )

    def test_column_forms(self):
        idx = IndexDefinition(
            "foo_idx",
            "foo",
            [
                {"column": "name", "opclass": "text_pattern_ops"},
                {"expression": "COALESCE(bar_id, 0)"},
                {"column": "created", "order": "desc", "nulls": "last"},
            ],
            using="btree",
        )
        assert str(idx) == (
            'CREATE INDEX "foo_idx" ON "foo" USING "btree"('
            '"name" "text_pattern_ops", (COALESCE(bar_id, 0)), "created" DESC NULLS LAST);'
        )

    def test_unique_concurrent_partial(self):
        idx = IndexDefinition(
            "foo_idx", "foo", "a",
            unique=True, concurrently=True, fill_factor=10, tablespace="fast", conditions="a > 0",
        )
        assert str(idx) == (
            'CREATE UNIQUE INDEX CONCURRENTLY "foo_idx" ON "foo"("a") '
            'WITH (FILLFACTOR = 10) TABLESPACE "fast" WHERE (a > 0);'
        )

    def test_rejects_column_and_expression(self):
        with pytest.raises(InvalidIndexColumnDefinition):
            IndexDefinition("i", "foo", {"column": "a", "expression": "lower(a)"})

    def test_rejects_empty_column_mapping(self):
        with pytest.raises(InvalidIndexColumnDefinition):
            IndexDefinition("i", "foo", {"order": "asc"})

    def test_rejects_bad_order(self):
        with pytest.raises(InvalidIndexColumnDefinition):
            IndexDefinition("i", "foo", {"column": "a", "order": "sideways"})

    def test_fill_factor_range(self):
        with pytest.raises(InvalidIndexFillFactor):
            IndexDefinition("i", "foo", "a", fill_factor=101)
        with pytest.raises(InvalidIndexFillFactor):
            IndexDefinition("i", "foo", "a", fill_factor="lots")


class TestIndexBuilder:
    """DROP and ALTER INDEX."""

    def test_drop(self):
        assert render(IndexBuilder.drop("a", "b", if_exists=True, cascade=True)) == (
            'DROP INDEX IF EXISTS "a", "b" CASCADE;'
        )

    def test_drop_concurrently(self):
        assert render(IndexBuilder.drop("a", concurrently=True)) == 'DROP INDEX CONCURRENTLY "a";'

    def test_concurrently_conflicts(self):
        with pytest.raises(InvalidIndexOptions):
            IndexBuilder.drop("a", concurrently=True, cascade=True)
        with pytest.raises(InvalidIndexOptions):
            IndexBuilder.drop("a", "b", concurrently=True)

    def test_rename_and_tablespace(self):
        assert render(IndexBuilder.rename("a", "b")) == 'ALTER INDEX "a" RENAME TO "b";'
        assert render(IndexBuilder.set_tablespace("a", "fast")) == (
            'ALTER INDEX "a" SET TABLESPACE "fast";'
        )


# ============================================================================
# FUNCTIONS
# ============================================================================

class TestFunctionDefinition:
    """CREATE FUNCTION rendering."""

    def test_minimal(self):
        fn = FunctionDefinition("test", "integer", "integer", "sql", "select 10;")
        assert render(fn.to_sql()) == (
            'CREATE FUNCTION "test"(integer) RETURNS integer AS $$\n'
            "select 10;\n"
            "$$\n"
            'LANGUAGE "sql";'
        )

    def test_options(self):
        fn = FunctionDefinition(
            "test", "integer", "integer", "sql", "select 10;",
            force=True,
            delimiter="$fn$",
            behavior="immutable",
            on_null_input="strict",
            security="definer",
            cost=1,
            rows=10,
            set={"search_path": "from_current", "TIME ZONE": "UTC"},
        )
        assert render(fn.to_sql()) == (
            'CREATE OR REPLACE FUNCTION "test"(integer) RETURNS integer AS $fn$\n'
            "select 10;\n"
            "$fn$\n"
            'LANGUAGE "sql"\n'
            "    IMMUTABLE\n"
            "    STRICT\n"
            "    SECURITY DEFINER\n"
            "    COST 1\n"
            "    ROWS 10\n"
            '    SET "search_path" FROM CURRENT\n'
            '    SET TIME ZONE "UTC";'
        )

    def test_zero_cost_and_rows(self):
        fn = FunctionDefinition("test", "", "setof integer", "sql", "select 1;", cost=0, rows=0)
        assert render(fn.to_sql()).endswith('LANGUAGE "sql"\n    COST 0\n    ROWS 0;')

    def test_c_language_body(self):
        fn = FunctionDefinition("test", "", "integer", "c", ("test.so", "test_fn"))
        assert render(fn.to_sql()) == (
            'CREATE FUNCTION "test"() RETURNS integer AS '
            "'test.so', 'test_fn'\n"
            'LANGUAGE "c";'
        )

    def test_delimiter_from_env(self, monkeypatch):
        monkeypatch.setenv("DDL_FUNCTION_DELIMITER", "$body$")
        reset_defaults()

        fn = FunctionDefinition("test", None, "void", "sql", "select 1;")
        assert "AS $body$\n" in render(fn.to_sql())

    def test_invalid_options(self):
        with pytest.raises(InvalidFunctionBehavior):
            FunctionDefinition("f", "", "void", "sql", "", behavior="sometimes")
        with pytest.raises(InvalidFunctionSecurityType):
            FunctionDefinition("f", "", "void", "sql", "", security="nobody")


class TestFunctionAlterer:
    """ALTER FUNCTION chains."""

    def test_statements_follow_rename(self):
        alterer = FunctionAlterer("my_function", "integer")
        alterer.rename_to("another_function").owner_to("jdoe").behavior("stable")

        assert render(alterer.to_sql()) == (
            'ALTER FUNCTION "my_function"(integer) RENAME TO "another_function";\n'
            'ALTER FUNCTION "another_function"(integer) OWNER TO "jdoe";\n'
            'ALTER FUNCTION "another_function"(integer) STABLE;'
        )

    def test_keyword_actions(self):
        alterer = FunctionAlterer("f", set_schema="geo", cost=5, reset="all")
        assert render(alterer.to_sql()) == (
            'ALTER FUNCTION "f"() SET SCHEMA "geo";\n'
            'ALTER FUNCTION "f"() COST 5;\n'
            'ALTER FUNCTION "f"() RESET ALL;'
        )

    def test_empty(self):
        alterer = FunctionAlterer("f")
        assert alterer.empty()
        assert render(alterer.to_sql()) == ""

    def test_unknown_action(self):
        with pytest.raises(InvalidFunctionAction):
            FunctionAlterer("f", explode=True)


class TestFunctionBuilder:
    """DROP FUNCTION."""

    def test_drop(self):
        assert render(FunctionBuilder.drop("f", "integer", if_exists=True, cascade=True)) == (
            'DROP FUNCTION IF EXISTS "f"(integer) CASCADE;'
        )
