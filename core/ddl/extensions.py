# ============================================================================
# EXTENSION BUILDERS
# ============================================================================
# STATUS: Core - CREATE/ALTER/DROP EXTENSION statements
# PURPOSE: Extension lifecycle and ADD/DROP of member objects
# ============================================================================
"""
Extension Builders.

Every statement here needs PostgreSQL 9.1 or later.

Usage:
    from core.ddl.extensions import ExtensionAlterer, ExtensionBuilder

    ExtensionBuilder.create("hstore", if_not_exists=True, schema="ext")
    # CREATE EXTENSION IF NOT EXISTS "hstore" SCHEMA "ext";

    alterer = ExtensionAlterer("hstore")
    alterer.add_table("foo")
    alterer.drop_cast("integer", "text")
    # ALTER EXTENSION "hstore" ADD TABLE "foo";
    # ALTER EXTENSION "hstore" DROP CAST ("integer" AS "text");
"""

from typing import Any, List, Mapping, Optional, Sequence

from psycopg import sql

from core.ddl.ddl_utils import CommonDDL, compose, join_statements, keyword, quoted_list
from core.features import Features, resolve_features
from core.quoting import as_list, quote_function, quote_generic, quote_schema


SIMPLE_MEMBER_KINDS = (
    "collation",
    "conversion",
    "domain",
    "foreign_data_wrapper",
    "foreign_table",
    "language",
    "schema",
    "sequence",
    "server",
    "table",
    "text_search_configuration",
    "text_search_dictionary",
    "text_search_parser",
    "text_search_template",
    "type",
    "view",
)

MEMBER_KINDS = SIMPLE_MEMBER_KINDS + (
    "aggregate",
    "cast",
    "function",
    "operator",
    "operator_class",
    "operator_family",
)


def _positional(args: Sequence[Any], *keys: str) -> List[Any]:
    """Pull keyed values out of a single mapping argument, else use args in order."""
    if len(args) == 1 and isinstance(args[0], Mapping):
        return [args[0].get(k) for k in keys]
    flat = [a for arg in args for a in as_list(arg)]
    return flat + [None] * (len(keys) - len(flat))


class ExtensionAlterer:
    """
    ALTER EXTENSION ... ADD|DROP <member> statements.

    Statements are collected by add_<kind>/drop_<kind> calls, or by
    keyword arguments of the same names at construction. An empty
    alterer renders nothing.
    """

    def __init__(self, name: Any, features: Optional[Features] = None, **actions: Any):
        resolve_features(features).check("extensions")
        self.name = name
        self.statements: List[sql.Composable] = []
        for action, value in actions.items():
            verb, _, kind = action.partition("_")
            if verb not in ("add", "drop") or kind not in MEMBER_KINDS:
                raise ValueError(f"Unknown extension action - {action}")
            args = value if isinstance(value, (tuple, list)) else (value,)
            self._append(verb, kind, *args)

    def empty(self) -> bool:
        return not self.statements

    def _member_sql(self, kind: str, args: Sequence[Any]) -> sql.Composable:
        if kind in SIMPLE_MEMBER_KINDS:
            return sql.SQL("{} {}").format(keyword(kind), quote_generic(args[0]))
        if kind == "aggregate":
            if len(args) == 1 and isinstance(args[0], Mapping):
                name, types = args[0].get("name"), args[0].get("types")
            else:
                name, types = args[0], list(args[1:])
            return sql.SQL("AGGREGATE {} ({})").format(quote_generic(name), quoted_list(types))
        if kind == "cast":
            source, target = _positional(args, "source", "target")[:2]
            return sql.SQL("CAST ({} AS {})").format(quote_generic(source), quote_generic(target))
        if kind == "function":
            if len(args) == 1 and isinstance(args[0], Mapping):
                name, arguments = args[0].get("name"), as_list(args[0].get("arguments"))
            else:
                name, arguments = args[0], list(args[1:])
            return sql.SQL("FUNCTION {}({})").format(
                quote_function(name), sql.SQL(", ".join(str(a) for a in arguments))
            )
        if kind == "operator":
            name, left, right = _positional(args, "name", "left_type", "right_type")[:3]
            return sql.SQL("OPERATOR {} ({}, {})").format(
                quote_generic(name), quote_generic(left), quote_generic(right)
            )
        name, method = _positional(args, "name", "indexing_method")[:2]
        return sql.SQL("{} {} USING {}").format(keyword(kind), quote_generic(name), quote_generic(method))

    def _append(self, verb: str, kind: str, *args: Any) -> "ExtensionAlterer":
        self.statements.append(sql.SQL("ALTER EXTENSION {} {} {}").format(
            quote_generic(self.name), sql.SQL(verb.upper()), self._member_sql(kind, args)
        ))
        return self

    def add(self, kind: str, *args: Any) -> "ExtensionAlterer":
        if kind not in MEMBER_KINDS:
            raise ValueError(f"Unknown extension member kind - {kind}")
        return self._append("add", kind, *args)

    def drop(self, kind: str, *args: Any) -> "ExtensionAlterer":
        if kind not in MEMBER_KINDS:
            raise ValueError(f"Unknown extension member kind - {kind}")
        return self._append("drop", kind, *args)

    def to_sql(self) -> sql.Composed:
        return join_statements(self.statements)


def _member_method(verb: str, kind: str):
    def method(self: ExtensionAlterer, *args: Any) -> ExtensionAlterer:
        return self._append(verb, kind, *args)
    method.__name__ = f"{verb}_{kind}"
    method.__doc__ = f"{verb.upper()} {kind.replace('_', ' ').upper()} member."
    return method


for _kind in MEMBER_KINDS:
    setattr(ExtensionAlterer, f"add_{_kind}", _member_method("add", _kind))
    setattr(ExtensionAlterer, f"drop_{_kind}", _member_method("drop", _kind))
del _kind


class ExtensionBuilder:
    """
    CREATE/DROP/UPDATE EXTENSION.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def create(
        name: Any,
        if_not_exists: bool = False,
        schema: Optional[Any] = None,
        version: Optional[Any] = None,
        old_version: Optional[Any] = None,
        features: Optional[Features] = None,
    ) -> sql.Composed:
        resolve_features(features).check("extensions")
        return compose([
            sql.SQL("CREATE EXTENSION "),
            sql.SQL("IF NOT EXISTS ") if if_not_exists else None,
            quote_generic(name),
            sql.SQL(" SCHEMA {}").format(quote_generic(schema)) if schema else None,
            sql.SQL(" VERSION {}").format(quote_generic(version)) if version else None,
            sql.SQL(" FROM {}").format(quote_generic(old_version)) if old_version else None,
            sql.SQL(";"),
        ])

    @staticmethod
    def drop(
        *names: Any,
        if_exists: bool = False,
        cascade: bool = False,
        features: Optional[Features] = None,
    ) -> sql.Composed:
        resolve_features(features).check("extensions")
        names = [n for name in names for n in as_list(name)]
        return CommonDDL.drop("EXTENSION", names, quote_generic, if_exists=if_exists, cascade=cascade)

    @staticmethod
    def update(name: Any, new_version: Optional[Any] = None, features: Optional[Features] = None) -> sql.Composed:
        resolve_features(features).check("extensions")
        return compose([
            sql.SQL("ALTER EXTENSION {} UPDATE").format(quote_generic(name)),
            sql.SQL(" TO {}").format(quote_generic(new_version)) if new_version else None,
            sql.SQL(";"),
        ])

    @staticmethod
    def set_schema(name: Any, schema: Any, features: Optional[Features] = None) -> sql.Composed:
        resolve_features(features).check("extensions")
        return sql.SQL("ALTER EXTENSION {} SET SCHEMA {};").format(
            quote_generic(name), quote_schema(schema)
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "MEMBER_KINDS",
    "ExtensionAlterer",
    "ExtensionBuilder",
]
