# ============================================================================
# CATALOG INTROSPECTION QUERIES
# ============================================================================
# STATUS: Infrastructure - System catalog reads
# PURPOSE: Queries for views, roles, sequences, types, foreign keys, versions
# ============================================================================
"""
Catalog Introspection Queries

Static SELECTs against pg_catalog used by the adapter's introspection
helpers, plus converters from dict rows to pydantic models.

Usage:
    from infrastructure.catalog import CatalogQueries, foreign_key_rows

    rows = repo.fetch_all(CatalogQueries.foreign_keys("foos"))
    refs = foreign_key_rows(rows)
"""

from typing import Any, List, Mapping, Optional

from psycopg import sql

from core.models import ForeignKeyReference, PostGISVersion
from core.quoting import quote_generic_with_schema


_FOREIGN_KEY_PAIRS = """
    SELECT
        conrelid,
        confrelid,
        conkey[i] AS conkey,
        confkey[i] AS confkey
    FROM (
        SELECT
            conrelid,
            confrelid,
            conkey,
            confkey,
            generate_series(1, array_upper(conkey, 1)) AS i
        FROM pg_constraint
        WHERE contype = 'f'
    ) ss
"""


class CatalogQueries:
    """
    Introspection SELECTs.

    All methods are static and return sql.Composable objects.
    """

    @staticmethod
    def views() -> sql.SQL:
        return sql.SQL(
            "SELECT viewname FROM pg_views WHERE schemaname = ANY (current_schemas(false))"
        )

    @staticmethod
    def view_exists(view: str, schema: Optional[str] = None) -> sql.Composed:
        schema_filter = (
            sql.SQL("schemaname = {}").format(sql.Literal(schema))
            if schema
            else sql.SQL("schemaname = ANY (current_schemas(false))")
        )
        return sql.SQL("SELECT COUNT(*) AS count FROM pg_views WHERE viewname = {} AND {}").format(
            sql.Literal(view), schema_filter
        )

    @staticmethod
    def materialized_views() -> sql.SQL:
        return sql.SQL(
            "SELECT matviewname FROM pg_matviews WHERE schemaname = ANY (current_schemas(false))"
        )

    @staticmethod
    def roles() -> sql.SQL:
        return sql.SQL("SELECT rolname FROM pg_roles")

    @staticmethod
    def languages() -> sql.SQL:
        return sql.SQL("SELECT lanname FROM pg_language")

    @staticmethod
    def sequences() -> sql.SQL:
        return sql.SQL("SELECT c.relname FROM pg_class c WHERE c.relkind = 'S'")

    @staticmethod
    def types() -> sql.SQL:
        return sql.SQL(
            "SELECT t.typname FROM pg_type t "
            "LEFT JOIN pg_catalog.pg_namespace n ON n.oid = t.typnamespace "
            "WHERE (t.typrelid = 0 OR ("
            "SELECT c.relkind = 'c' FROM pg_catalog.pg_class c WHERE c.oid = t.typrelid"
            ")) AND NOT EXISTS ("
            "SELECT 1 FROM pg_catalog.pg_type el WHERE el.oid = t.typelem AND el.typarray = t.oid"
            ") AND n.nspname NOT IN ('information_schema')"
        )

    @staticmethod
    def enum_values(name: Any) -> sql.Composed:
        return sql.SQL("SELECT unnest(enum_range(NULL::{})) AS value").format(
            quote_generic_with_schema(name)
        )

    @staticmethod
    def foreign_keys(table: str) -> sql.Composed:
        """Foreign keys declared on table, one row per column pair."""
        return sql.SQL(
            "SELECT confrelid::regclass::text AS table_name, "
            "a.attname AS column_name, af.attname AS referenced_column "
            "FROM pg_attribute af, pg_attribute a, pg_class c, ("
            + _FOREIGN_KEY_PAIRS +
            ") ss2 "
            "WHERE c.oid = conrelid AND c.relname = {} "
            "AND af.attnum = confkey AND af.attrelid = confrelid "
            "AND a.attnum = conkey AND a.attrelid = conrelid"
        ).format(sql.Literal(str(table)))

    @staticmethod
    def referenced_foreign_keys(table: str) -> sql.Composed:
        """Foreign keys on other tables that point at table."""
        return sql.SQL(
            "SELECT c2.relname AS table_name, "
            "a.attname AS column_name, af.attname AS referenced_column "
            "FROM pg_attribute af, pg_attribute a, pg_class c1, pg_class c2, ("
            + _FOREIGN_KEY_PAIRS +
            ") ss2 "
            "WHERE confrelid = c1.oid AND conrelid = c2.oid AND c1.relname = {} "
            "AND af.attnum = confkey AND af.attrelid = confrelid "
            "AND a.attnum = conkey AND a.attrelid = conrelid"
        ).format(sql.Literal(str(table)))

    @staticmethod
    def server_version() -> sql.SQL:
        return sql.SQL("SHOW server_version")

    @staticmethod
    def function_exists(name: str) -> sql.Composed:
        return sql.SQL("SELECT COUNT(*) AS count FROM pg_proc WHERE proname = {}").format(
            sql.Literal(name)
        )

    @staticmethod
    def postgis_full_version() -> sql.SQL:
        return sql.SQL("SELECT postgis_full_version() AS version")


# ============================================================================
# ROW CONVERSION
# ============================================================================

def row_values(row: Any) -> List[Any]:
    """Column values of a dict row or a tuple row, in select order."""
    if isinstance(row, Mapping):
        return list(row.values())
    return list(row)


def first_column(rows: List[Any]) -> List[Any]:
    return [row_values(row)[0] for row in rows]


def foreign_key_rows(rows: List[Any]) -> List[ForeignKeyReference]:
    refs = []
    for row in rows:
        table, column, referenced_column = row_values(row)[:3]
        refs.append(ForeignKeyReference(
            table=table, column=column, referenced_column=referenced_column
        ))
    return refs


def postgis_version_row(rows: List[Any]) -> Optional[PostGISVersion]:
    if not rows:
        return None
    return PostGISVersion.parse(first_column(rows)[0])


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CatalogQueries",
    "row_values",
    "first_column",
    "foreign_key_rows",
    "postgis_version_row",
]
