# ============================================================================
# DDL UTILITIES
# ============================================================================
# STATUS: Core - Shared composition helpers for statement builders
# PURPOSE: Option validation, keyword rendering and common ALTER/DROP forms
# ============================================================================
"""
DDL Utilities - Shared SQL Generation Patterns.

All helpers return psycopg.sql composables. Caller-supplied SQL fragments
(expressions, storage parameters, queries) are embedded verbatim with
sql.SQL; every identifier goes through the quoting module.

Usage:
    from core.ddl.ddl_utils import CommonDDL, terminate

    stmt = CommonDDL.drop("TABLE", ["foo", "bar"], quote_table_name, cascade=True)
    stmt.as_string(None)   # DROP TABLE "foo", "bar" CASCADE;
"""

from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Type

from psycopg import sql

from core.errors import PostgreSQLExtensionsError
from core.quoting import (
    as_list,
    quote_generic,
    quote_generic_ignore_schema,
    quote_role,
    quote_schema,
)

Quoter = Callable[[Any], sql.Composable]


# ============================================================================
# COMPOSITION HELPERS
# ============================================================================

def compose(parts: Iterable[Optional[sql.Composable]]) -> sql.Composed:
    """Concatenate composables, skipping None."""
    return sql.Composed([p for p in parts if p is not None])


def terminate(stmt: sql.Composable) -> sql.Composed:
    """Append the statement terminator."""
    return sql.Composed([stmt, sql.SQL(";")])


def join_statements(stmts: Sequence[sql.Composable]) -> sql.Composed:
    """Join several statements with ';\\n' and terminate the last one."""
    if not stmts:
        return sql.Composed([])
    return terminate(sql.SQL(";\n").join(stmts))


def join_words(parts: Iterable[Optional[sql.Composable]]) -> sql.Composed:
    """Space-separate the non-empty parts."""
    return sql.SQL(" ").join([p for p in parts if p is not None])


def keyword(value: Any) -> sql.SQL:
    """Render an option symbol as an SQL keyword (set_null -> SET NULL)."""
    return sql.SQL(str(value).replace("_", " ").upper())


def number(value: Any) -> sql.SQL:
    """Render a numeric option unquoted."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        try:
            value = int(value)
        except (TypeError, ValueError):
            value = float(value)
    return sql.SQL(str(value))


def literals(values: Any) -> sql.Composed:
    """Comma-separated quoted literals."""
    return sql.SQL(", ").join(sql.Literal(str(v)) for v in as_list(values))


def quoted_list(values: Any, quote: Quoter = quote_generic) -> sql.Composed:
    """Comma-separated values passed through a quoting function."""
    return sql.SQL(", ").join(quote(v) for v in as_list(values))


def options_from_mapping_or_string(options: Any) -> sql.Composable:
    """
    Render storage options.

    A mapping becomes '"key" = value' pairs with raw values; anything
    else is embedded verbatim.
    """
    if isinstance(options, Mapping):
        return sql.SQL(", ").join(
            sql.SQL("{} = {}").format(quote_generic(k), sql.SQL(str(v)))
            for k, v in options.items()
        )
    return sql.SQL(str(options))


# ============================================================================
# VALIDATION
# ============================================================================

def assert_valid_option(
    value: Any,
    valid: Iterable[str],
    error: Type[PostgreSQLExtensionsError],
) -> str:
    """
    Normalize an option symbol and check it against a lookup table.

    Returns:
        The lower-cased option string

    Raises:
        error: If the value is not in the table
    """
    normalized = str(value).lower()
    if normalized not in valid:
        raise error(value)
    return normalized


def assert_valid_options(
    values: Any,
    valid: Iterable[str],
    error: Type[PostgreSQLExtensionsError],
) -> List[str]:
    """Validate every value; the error carries all offending values."""
    valid = set(valid)
    normalized = [str(v).lower() for v in as_list(values)]
    bad = [v for v in normalized if v not in valid]
    if bad:
        raise error(bad)
    return normalized


# ============================================================================
# COMMON STATEMENT FORMS
# ============================================================================

class CommonDDL:
    """
    Builders for statement shapes shared by many object kinds.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def drop(
        kind: str,
        names: Any,
        quote: Quoter = quote_generic,
        if_exists: bool = False,
        cascade: bool = False,
    ) -> sql.Composed:
        """DROP <kind> [IF EXISTS ]names[ CASCADE];"""
        return terminate(compose([
            sql.SQL(f"DROP {kind} "),
            sql.SQL("IF EXISTS ") if if_exists else None,
            quoted_list(names, quote),
            sql.SQL(" CASCADE") if cascade else None,
        ]))

    @staticmethod
    def rename(
        kind: str,
        name: Any,
        new_name: Any,
        quote: Quoter = quote_generic,
    ) -> sql.Composed:
        """ALTER <kind> name RENAME TO new_name;"""
        return sql.SQL("ALTER {} {} RENAME TO {};").format(
            sql.SQL(kind), quote(name), quote_generic_ignore_schema(new_name)
        )

    @staticmethod
    def owner_to(
        kind: str,
        name: Any,
        role: Any,
        quote: Quoter = quote_generic,
    ) -> sql.Composed:
        """ALTER <kind> name OWNER TO role;"""
        return sql.SQL("ALTER {} {} OWNER TO {};").format(
            sql.SQL(kind), quote(name), quote_role(role)
        )

    @staticmethod
    def set_schema(
        kind: str,
        name: Any,
        schema: Any,
        quote: Quoter = quote_generic,
    ) -> sql.Composed:
        """ALTER <kind> name SET SCHEMA schema;"""
        return sql.SQL("ALTER {} {} SET SCHEMA {};").format(
            sql.SQL(kind), quote(name), quote_schema(schema)
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "Quoter",
    "compose",
    "terminate",
    "join_statements",
    "join_words",
    "keyword",
    "number",
    "literals",
    "quoted_list",
    "options_from_mapping_or_string",
    "assert_valid_option",
    "assert_valid_options",
    "CommonDDL",
]
