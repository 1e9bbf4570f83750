# ============================================================================
# TABLE AND CONSTRAINT BUILDER TESTS
# ============================================================================
# STATUS: Tests - CREATE TABLE, ALTER TABLE, table constraints
# PURPOSE: Verify table bodies, lifted column constraints and ALTER forms
# ============================================================================
"""
Table and Constraint Builder Tests

Covers:
1. Constraint clauses (CHECK, UNIQUE, PRIMARY KEY, FOREIGN KEY, EXCLUDE)
2. CREATE TABLE bodies, modifiers and option validation
3. ALTER TABLE column, trigger and cluster statements

Run with:
    pytest tests/test_tables.py -v
"""

import pytest

from core.ddl.constraints import (
    CheckConstraint,
    ConstraintBuilder,
    ExcludeConstraint,
    ForeignKeyConstraint,
    PrimaryKeyConstraint,
    UniqueConstraint,
)
from core.ddl.tables import LikeOptions, TableBuilder, TableDefinition
from core.errors import (
    FeatureNotSupportedError,
    InvalidDeferrableOption,
    InvalidExcludeConstraint,
    InvalidForeignKeyAction,
    InvalidLikeTypes,
    InvalidMatchType,
    InvalidTableOptions,
)
from core.quoting import with_schema


def render(stmt):
    return stmt.as_string(None)


# ============================================================================
# CONSTRAINTS
# ============================================================================

class TestCheckConstraint:
    """CHECK clauses."""

    def test_plain(self):
        assert str(CheckConstraint("bar > 10")) == "CHECK (bar > 10)"

    def test_named_not_valid_no_inherit(self):
        c = CheckConstraint("bar > 10", name="bar_check", not_valid=True, no_inherit=True)
        assert str(c) == 'CONSTRAINT "bar_check" CHECK (bar > 10) NOT VALID NO INHERIT'


class TestUniqueAndPrimaryKey:
    """Index-backed constraints."""

    def test_unique_with_storage(self):
        c = UniqueConstraint(["a", "b"], storage_parameters="FILLFACTOR=10", tablespace="fast")
        assert str(c) == 'UNIQUE ("a", "b") WITH (FILLFACTOR=10) USING INDEX TABLESPACE "fast"'

    def test_primary_key(self):
        assert str(PrimaryKeyConstraint("id", name="foo_pk")) == 'CONSTRAINT "foo_pk" PRIMARY KEY ("id")'


class TestForeignKeyConstraint:
    """FOREIGN KEY clauses."""

    def test_full_form(self):
        c = ForeignKeyConstraint(
            "bar_id", "bar", "id",
            match="full", on_delete="set_null", on_update="cascade", deferrable="deferred",
        )
        assert str(c) == (
            'FOREIGN KEY ("bar_id") REFERENCES "bar" ("id") MATCH FULL '
            "ON DELETE SET NULL ON UPDATE CASCADE DEFERRABLE INITIALLY DEFERRED"
        )

    def test_deferrable_flags(self):
        assert str(ForeignKeyConstraint("a", "b", deferrable=True)).endswith(" DEFERRABLE")
        assert str(ForeignKeyConstraint("a", "b", deferrable=False)).endswith(" NOT DEFERRABLE")
        assert str(ForeignKeyConstraint("a", "b", deferrable="IMMEDIATE")).endswith(
            " DEFERRABLE INITIALLY IMMEDIATE"
        )

    def test_reference_uses_scope_at_definition(self):
        with with_schema("geo"):
            c = ForeignKeyConstraint("bar_id", "bar")
        assert str(c) == 'FOREIGN KEY ("bar_id") REFERENCES "geo"."bar"'

    def test_invalid_options(self):
        with pytest.raises(InvalidMatchType):
            ForeignKeyConstraint("a", "b", match="partial")
        with pytest.raises(InvalidForeignKeyAction):
            ForeignKeyConstraint("a", "b", on_delete="explode")
        with pytest.raises(InvalidDeferrableOption):
            ForeignKeyConstraint("a", "b", deferrable="later")
        with pytest.raises(InvalidDeferrableOption):
            ForeignKeyConstraint("a", "b", deferrable="true")


class TestExcludeConstraint:
    """EXCLUDE clauses."""

    def test_using_and_where(self):
        c = ExcludeConstraint(
            [{"element": "circle", "with": "&&"}, {"element": "square", "operator": "="}],
            using="gist",
            conditions="active",
        )
        assert str(c) == 'EXCLUDE USING "gist" (circle WITH &&, square WITH =) WHERE (active)'

    def test_rejects_non_mappings(self):
        with pytest.raises(InvalidExcludeConstraint):
            ExcludeConstraint(["circle"])
        with pytest.raises(InvalidExcludeConstraint):
            ExcludeConstraint("circle")


class TestConstraintBuilder:
    """ALTER TABLE constraint statements."""

    def test_add(self):
        stmt = ConstraintBuilder.add("foo", CheckConstraint("bar > 0"))
        assert render(stmt) == 'ALTER TABLE "foo" ADD CHECK (bar > 0);'

    def test_drop_and_validate(self):
        assert render(ConstraintBuilder.drop("foo", "bar_check", cascade=True)) == (
            'ALTER TABLE "foo" DROP CONSTRAINT "bar_check" CASCADE;'
        )
        assert render(ConstraintBuilder.validate("foo", "bar_check")) == (
            'ALTER TABLE "foo" VALIDATE CONSTRAINT "bar_check";'
        )


# ============================================================================
# CREATE TABLE
# ============================================================================

class TestTableDefinition:
    """CREATE TABLE rendering."""

    def test_implicit_primary_key_and_lifted_constraints(self):
        t = TableDefinition("foo")
        t.integer("bar_id", references="bar")
        t.text("name", null=False, unique=True)
        t.integer("qty", default=1, check="qty > 0")

        assert render(t.to_sql()) == (
            'CREATE TABLE "foo" (\n'
            '  "id" serial primary key,\n'
            '  "bar_id" integer,\n'
            '  "name" text NOT NULL,\n'
            '  "qty" integer DEFAULT 1,\n'
            '  FOREIGN KEY ("bar_id") REFERENCES "bar",\n'
            '  UNIQUE ("name"),\n'
            "  CHECK (qty > 0)\n"
            ");"
        )

    def test_column_types(self):
        t = TableDefinition("foo", id=False)
        t.string("code", 10)
        t.decimal("price", 10, 2)
        t.column("created", "timestamptz", default={"expression": "now()"})

        assert render(t.to_sql()) == (
            'CREATE TABLE "foo" (\n'
            '  "code" character varying(10),\n'
            '  "price" decimal(10, 2),\n'
            '  "created" timestamptz DEFAULT now()\n'
            ");"
        )

    def test_modifiers_and_trailing_clauses(self):
        t = TableDefinition(
            "foo",
            temporary=True,
            if_not_exists=True,
            id=False,
            inherits="parent",
            storage_parameters={"fillfactor": 10},
            on_commit="delete_rows",
            tablespace="fast",
        )
        t.integer("a")

        assert render(t.to_sql()) == (
            'CREATE TEMPORARY TABLE IF NOT EXISTS "foo" (\n'
            '  "a" integer\n'
            ")\n"
            'INHERITS ("parent")\n'
            'WITH ("fillfactor" = 10)\n'
            "ON COMMIT DELETE ROWS\n"
            'TABLESPACE "fast";'
        )

    def test_like(self):
        t = TableDefinition("foo", id=False)
        t.like("bar", including=["defaults", "constraints"], excluding="indexes")
        assert render(t.to_sql()) == (
            'CREATE TABLE "foo" (\n'
            '  LIKE "bar" INCLUDING DEFAULTS INCLUDING CONSTRAINTS EXCLUDING INDEXES\n'
            ");"
        )

    def test_invalid_like_types(self):
        with pytest.raises(InvalidLikeTypes):
            LikeOptions("bar", including="everything")

    def test_of_type(self):
        t = TableDefinition("foo", of_type="bar_type")
        assert render(t.to_sql()) == 'CREATE TABLE "foo" OF "bar_type";'

    def test_of_type_rejects_columns(self):
        t = TableDefinition("foo", of_type="bar_type")
        t.integer("a")
        with pytest.raises(InvalidTableOptions):
            t.to_sql()

    def test_invalid_on_commit(self):
        with pytest.raises(InvalidTableOptions) as exc_info:
            TableDefinition("foo", on_commit="never")
        assert "ON COMMIT" in str(exc_info.value)

    def test_unlogged_is_version_gated(self, legacy):
        t = TableDefinition("foo", features=legacy, unlogged=True)
        with pytest.raises(FeatureNotSupportedError):
            t.to_sql()

    def test_unlogged_on_modern_server(self, modern):
        t = TableDefinition("foo", features=modern, unlogged=True, id=False)
        t.integer("a")
        assert render(t.to_sql()).startswith('CREATE UNLOGGED TABLE "foo"')

    def test_force_drop_and_indexes(self):
        t = TableDefinition("foo", force=True, cascade_drop=True)
        t.integer("a")
        t.index("foo_a_idx", "a")

        stmts = [render(s) for s in t.statements()]
        assert stmts[0] == 'DROP TABLE IF EXISTS "foo" CASCADE;'
        assert stmts[1].startswith('CREATE TABLE "foo"')
        assert stmts[2] == 'CREATE INDEX "foo_a_idx" ON "foo"("a");'

    def test_schema_scope(self):
        with with_schema("geo"):
            t = TableDefinition("foo", id=False)
            t.integer("a")
            assert render(t.to_sql()).startswith('CREATE TABLE "geo"."foo"')


# ============================================================================
# ALTER TABLE
# ============================================================================

class TestTableBuilder:
    """Statements on existing tables."""

    def test_drop_many(self):
        assert render(TableBuilder.drop("foo", ["bar", "baz"], if_exists=True)) == (
            'DROP TABLE IF EXISTS "foo", "bar", "baz";'
        )

    def test_rename_drops_new_schema(self):
        assert render(TableBuilder.rename(("geo", "foo"), ("geo", "bar"))) == (
            'ALTER TABLE "geo"."foo" RENAME TO "bar";'
        )

    def test_set_schema(self):
        assert render(TableBuilder.set_schema("foo", "geo")) == 'ALTER TABLE "foo" SET SCHEMA "geo";'

    def test_add_column(self):
        assert render(TableBuilder.add_column("foo", "bar", "text", default="x", null=False)) == (
            'ALTER TABLE "foo" ADD COLUMN "bar" text DEFAULT \'x\' NOT NULL;'
        )

    def test_change_column_default(self):
        assert render(TableBuilder.change_column_default("foo", "bar", 5)) == (
            'ALTER TABLE "foo" ALTER COLUMN "bar" SET DEFAULT 5;'
        )
        assert render(TableBuilder.change_column_default("foo", "bar", None)) == (
            'ALTER TABLE "foo" ALTER COLUMN "bar" DROP DEFAULT;'
        )

    def test_change_column_null_backfills(self):
        stmts = [render(s) for s in TableBuilder.change_column_null("foo", "bar", False, 0)]
        assert stmts == [
            'UPDATE "foo" SET "bar" = 0 WHERE "bar" IS NULL;',
            'ALTER TABLE "foo" ALTER COLUMN "bar" SET NOT NULL;',
        ]

    def test_change_column(self):
        stmts = [render(s) for s in TableBuilder.change_column("foo", "bar", "bigint", null=True)]
        assert stmts == [
            'ALTER TABLE "foo" ALTER COLUMN "bar" TYPE bigint;',
            'ALTER TABLE "foo" ALTER COLUMN "bar" DROP NOT NULL;',
        ]

    def test_triggers(self):
        assert [render(s) for s in TableBuilder.set_triggers("foo", False)] == [
            'ALTER TABLE "foo" DISABLE TRIGGER ALL;'
        ]
        assert [render(s) for s in TableBuilder.set_triggers("foo", True, "a", "b")] == [
            'ALTER TABLE "foo" ENABLE TRIGGER "a";',
            'ALTER TABLE "foo" ENABLE TRIGGER "b";',
        ]

    def test_cluster(self):
        assert render(TableBuilder.cluster()) == "CLUSTER;"
        assert render(TableBuilder.cluster(verbose=True)) == "CLUSTER VERBOSE;"
        assert render(TableBuilder.cluster("foo", using="foo_idx", verbose=True)) == (
            'CLUSTER VERBOSE "foo" USING "foo_idx";'
        )

