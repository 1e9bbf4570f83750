# ============================================================================
# SCHEMA, SEQUENCE AND TABLESPACE BUILDER TESTS
# ============================================================================
# STATUS: Tests - Namespace and storage object DDL
# PURPOSE: Verify schema, sequence and tablespace statements
# ============================================================================
"""
Schema, Sequence and Tablespace Builder Tests

Covers:
1. CREATE/DROP/ALTER SCHEMA, including IF NOT EXISTS gating
2. Sequence options, OWNED BY forms, setval
3. Tablespace creation and parameter validation

Run with:
    pytest tests/test_schemas_sequences.py -v
"""

import pytest

from core.ddl.schemas import SchemaBuilder
from core.ddl.sequences import SequenceBuilder, SequenceDefinition
from core.ddl.tablespaces import TablespaceBuilder
from core.errors import (
    FeatureNotSupportedError,
    InvalidSequenceAction,
    InvalidSequenceOptions,
    InvalidTablespaceParameter,
)
from core.quoting import with_schema


def render(stmt):
    return stmt.as_string(None)


# ============================================================================
# SCHEMAS
# ============================================================================

class TestSchemaBuilder:
    """Schema DDL."""

    def test_create(self):
        assert render(SchemaBuilder.create("geo", authorization="jdoe")) == (
            'CREATE SCHEMA "geo" AUTHORIZATION "jdoe";'
        )

    def test_create_if_not_exists(self, modern):
        stmt = SchemaBuilder.create("geo", if_not_exists=True, features=modern)
        assert render(stmt) == 'CREATE SCHEMA IF NOT EXISTS "geo";'

    def test_if_not_exists_is_version_gated(self, legacy):
        with pytest.raises(FeatureNotSupportedError):
            SchemaBuilder.create("geo", if_not_exists=True, features=legacy)

    def test_create_authorization(self):
        assert render(SchemaBuilder.create_authorization("jdoe")) == (
            'CREATE SCHEMA AUTHORIZATION "jdoe";'
        )

    def test_drop(self):
        assert render(SchemaBuilder.drop("a", "b", if_exists=True, cascade=True)) == (
            'DROP SCHEMA IF EXISTS "a", "b" CASCADE;'
        )

    def test_rename_and_owner(self):
        assert render(SchemaBuilder.rename("geo", "gis")) == 'ALTER SCHEMA "geo" RENAME TO "gis";'
        assert render(SchemaBuilder.owner_to("geo", "jdoe")) == 'ALTER SCHEMA "geo" OWNER TO "jdoe";'


# ============================================================================
# SEQUENCES
# ============================================================================

class TestSequenceDefinition:
    """CREATE and ALTER SEQUENCE."""

    def test_create(self):
        seq = SequenceDefinition("create", "foo_id_seq", increment=2, owned_by=("foo", "id"))
        assert str(seq) == 'CREATE SEQUENCE "foo_id_seq" INCREMENT BY 2 OWNED BY "foo"."id";'

    def test_create_all_options(self):
        seq = SequenceDefinition(
            "create",
            "foo_id_seq",
            temporary=True,
            min_value=1,
            max_value=None,
            start=10,
            cache=5,
            cycle=False,
        )
        assert str(seq) == (
            'CREATE TEMPORARY SEQUENCE "foo_id_seq" MINVALUE 1 NO MAXVALUE '
            "START WITH 10 CACHE 5 NO CYCLE;"
        )

    def test_zero_values_are_rendered(self):
        seq = SequenceDefinition("create", "s", min_value=-10, start=0, cache=0)
        assert str(seq) == 'CREATE SEQUENCE "s" MINVALUE -10 START WITH 0 CACHE 0;'

        seq = SequenceDefinition("alter", "s", increment=0)
        assert str(seq) == 'ALTER SEQUENCE "s" INCREMENT BY 0;'

    def test_alter_restart_and_owned_by_none(self):
        seq = SequenceDefinition("alter", "foo_id_seq", restart_with=100, owned_by="none", cycle=True)
        assert str(seq) == 'ALTER SEQUENCE "foo_id_seq" CYCLE OWNED BY NONE RESTART WITH 100;'

    def test_owned_by_mapping(self):
        seq = SequenceDefinition("alter", "s", owned_by={"table": "foo", "column": "id"})
        assert str(seq) == 'ALTER SEQUENCE "s" OWNED BY "foo"."id";'

    def test_schema_scope(self):
        with with_schema("geo"):
            assert str(SequenceDefinition("create", "s")) == 'CREATE SEQUENCE "geo"."s";'

    def test_invalid(self):
        with pytest.raises(InvalidSequenceAction):
            SequenceDefinition("replace", "s")
        with pytest.raises(InvalidSequenceOptions):
            SequenceDefinition("create", "s", owned_by="foo")


class TestSequenceBuilder:
    """Sequence DROP/RENAME/SET SCHEMA and setval."""

    def test_drop(self):
        assert render(SequenceBuilder.drop("a", if_exists=True, cascade=True)) == (
            'DROP SEQUENCE IF EXISTS "a" CASCADE;'
        )

    def test_rename_and_set_schema(self):
        assert render(SequenceBuilder.rename("a", "b")) == 'ALTER SEQUENCE "a" RENAME TO "b";'
        assert render(SequenceBuilder.set_schema("a", "geo")) == 'ALTER SEQUENCE "a" SET SCHEMA "geo";'

    def test_set_value(self):
        assert render(SequenceBuilder.set_value("foo_id_seq", 10)) == (
            "SELECT setval('foo_id_seq', 10, true);"
        )
        assert render(SequenceBuilder.set_value("foo_id_seq", 1, is_called=False)) == (
            "SELECT setval('foo_id_seq', 1, false);"
        )


# ============================================================================
# TABLESPACES
# ============================================================================

class TestTablespaceBuilder:
    """Tablespace DDL."""

    def test_create(self):
        assert render(TablespaceBuilder.create("fast", "/ssd/pg", owner="jdoe")) == (
            "CREATE TABLESPACE \"fast\" OWNER \"jdoe\" LOCATION '/ssd/pg';"
        )

    def test_drop_rename_owner(self):
        assert render(TablespaceBuilder.drop("fast", if_exists=True)) == (
            'DROP TABLESPACE IF EXISTS "fast";'
        )
        assert render(TablespaceBuilder.rename("fast", "faster")) == (
            'ALTER TABLESPACE "fast" RENAME TO "faster";'
        )
        assert render(TablespaceBuilder.owner_to("fast", "jdoe")) == (
            'ALTER TABLESPACE "fast" OWNER TO "jdoe";'
        )

    def test_set_parameters(self):
        stmt = TablespaceBuilder.set_parameters("fast", seq_page_cost=2.0, random_page_cost=5.0)
        assert render(stmt) == (
            'ALTER TABLESPACE "fast" SET (\n'
            '  "seq_page_cost" = 2.0,\n'
            '  "random_page_cost" = 5.0\n'
            ");"
        )

    def test_reset_parameters(self):
        assert render(TablespaceBuilder.reset_parameters("fast", "seq_page_cost")) == (
            'ALTER TABLESPACE "fast" RESET (\n'
            '  "seq_page_cost"\n'
            ");"
        )

    def test_invalid_parameter(self):
        with pytest.raises(InvalidTablespaceParameter):
            TablespaceBuilder.set_parameters("fast", effective_io_concurrency=2)
