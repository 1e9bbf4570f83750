# ============================================================================
# IDENTIFIER QUOTING AND SCHEMA SCOPING
# ============================================================================
# STATUS: Core - Identifier composition for every DDL builder
# PURPOSE: Quote names, qualify them with schemas, manage scoped schemas
# ============================================================================
"""
Identifier Quoting and Schema Scoping.

All quoting helpers return psycopg.sql composables, never strings, so
builders can compose them directly.

Object names may be given as:
    "foo"                  -> "foo"
    {"bar": "foo"}         -> "bar"."foo"
    ("bar", "foo")         -> "bar"."foo"
    "bar.foo"              -> "bar"."foo"   (table and view names only)

A schema called "public" (any case) is rendered as the bare keyword PUBLIC.

Schema scoping:
    Names without an explicit schema are prefixed with the innermost
    scoped schema. Scopes are a per-thread stack.

Usage:
    from core.quoting import with_schema, quote_table_name

    with with_schema("geo"):
        quote_table_name("foo")      # "geo"."foo"
        with ignore_scoped_schema():
            quote_table_name("foo")  # "foo"
"""

import threading
from contextlib import contextmanager
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from psycopg import sql

Name = Union[str, Mapping[str, str], Tuple[str, str]]


# ============================================================================
# SCHEMA SCOPE STACK
# ============================================================================

_scope = threading.local()


def _get_scope_stack() -> list:
    """Get thread-local scoped schema stack."""
    if not hasattr(_scope, "stack"):
        _scope.stack = []
    return _scope.stack


def scoped_schemas() -> List[Optional[str]]:
    """Snapshot of the current thread's scoped schemas, outermost first."""
    return list(_get_scope_stack())


def current_scoped_schema() -> Optional[str]:
    """Innermost scoped schema, or None."""
    stack = _get_scope_stack()
    if stack:
        return stack[-1]
    return None


@contextmanager
def with_schema(schema: Optional[str]):
    """
    Prefix unqualified names with a schema for the duration of the block.

    Args:
        schema: Schema name, or None to suspend scoping
    """
    stack = _get_scope_stack()
    stack.append(str(schema) if schema is not None else None)
    try:
        yield schema
    finally:
        stack.pop()


@contextmanager
def ignore_scoped_schema():
    """Suspend schema scoping inside a with_schema block."""
    with with_schema(None):
        yield


# ============================================================================
# NAME HANDLING
# ============================================================================

def split_name(name: Name) -> Tuple[Optional[str], str]:
    """
    Split a possibly schema-qualified name into (schema, name).

    Dotted strings are not split here; see quote_table_name.
    """
    if isinstance(name, Mapping):
        if len(name) != 1:
            raise ValueError(f"Expected a single schema/name pair, got {name!r}")
        schema, obj = next(iter(name.items()))
        return str(schema), str(obj)
    if isinstance(name, (tuple, list)):
        if len(name) != 2:
            raise ValueError(f"Expected a (schema, name) pair, got {name!r}")
        return str(name[0]), str(name[1])
    return None, str(name)


def unqualified_name(name: Name) -> str:
    """Object name without any schema part."""
    return split_name(name)[1]


def as_list(value: Any) -> list:
    """Normalize None, scalars and iterables to a list."""
    if value is None:
        return []
    if isinstance(value, (str, bytes, Mapping)):
        return [value]
    if isinstance(value, Iterable):
        return list(value)
    return [value]


# ============================================================================
# QUOTING
# ============================================================================

def quote_generic(name: Any) -> sql.Identifier:
    """Double-quote a single identifier."""
    return sql.Identifier(str(name))


def quote_schema(schema: Any) -> sql.Composable:
    """Quote a schema name, rendering public as PUBLIC."""
    if str(schema).upper() == "PUBLIC":
        return sql.SQL("PUBLIC")
    return quote_generic(schema)


def quote_role(role: Any) -> sql.Composable:
    """Quote a role name, rendering public as PUBLIC."""
    if str(role).upper() == "PUBLIC":
        return sql.SQL("PUBLIC")
    return quote_generic(role)


def quote_generic_with_schema(name: Name) -> sql.Composable:
    """Quote a name, qualifying it with its schema or the scoped schema."""
    schema, obj = split_name(name)
    if schema is None:
        schema = current_scoped_schema()
    if schema:
        return sql.SQL("{}.{}").format(quote_schema(schema), quote_generic(obj))
    return quote_generic(obj)


def quote_generic_ignore_schema(name: Name) -> sql.Identifier:
    """Quote a name, dropping any schema part and ignoring scoping."""
    return quote_generic(unqualified_name(name))


def quote_table_name(name: Name) -> sql.Composable:
    """
    Quote a table name.

    Explicit schemas and the scoped schema win; otherwise a dotted string
    is split into schema and table.
    """
    if isinstance(name, str) and "." in name and current_scoped_schema() is None:
        schema, table = name.split(".", 1)
        return quote_generic_with_schema((schema, table))
    return quote_generic_with_schema(name)


def quote_identifiers(names: Any) -> sql.Composed:
    """Comma-separated quoted identifiers."""
    return sql.SQL(", ").join(quote_generic(n) for n in as_list(names))


def quote_table_names(names: Any) -> sql.Composed:
    """Comma-separated quoted table names."""
    return sql.SQL(", ").join(quote_table_name(n) for n in as_list(names))


quote_view_name = quote_table_name
quote_sequence = quote_generic_with_schema
quote_function = quote_generic_with_schema
quote_column_name = quote_generic
quote_rule = quote_generic
quote_language = quote_generic
quote_tablespace = quote_generic


# ============================================================================
# VALUES
# ============================================================================

def is_expression(value: Any) -> bool:
    """True for {"expression": "..."} raw SQL markers."""
    return isinstance(value, Mapping) and "expression" in value


def quote_value(value: Any) -> sql.Composable:
    """Raw SQL for expression markers, a literal otherwise."""
    if is_expression(value):
        return sql.SQL(str(value["expression"]))
    return sql.Literal(value)


def raw(text: Any) -> sql.SQL:
    """Embed caller-supplied SQL text verbatim."""
    return sql.SQL(str(text))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "Name",
    "scoped_schemas",
    "current_scoped_schema",
    "with_schema",
    "ignore_scoped_schema",
    "split_name",
    "unqualified_name",
    "as_list",
    "quote_generic",
    "quote_schema",
    "quote_role",
    "quote_generic_with_schema",
    "quote_generic_ignore_schema",
    "quote_table_name",
    "quote_identifiers",
    "quote_table_names",
    "quote_view_name",
    "quote_sequence",
    "quote_function",
    "quote_column_name",
    "quote_rule",
    "quote_language",
    "quote_tablespace",
    "is_expression",
    "quote_value",
    "raw",
]
