# ============================================================================
# VIEW BUILDERS
# ============================================================================
# STATUS: Core - CREATE/ALTER/DROP VIEW statements
# PURPOSE: View definitions and fixed-order ALTER VIEW action lists
# ============================================================================
"""
View Builders.

Usage:
    from core.ddl.views import ViewDefinition, ViewAlterer

    ViewDefinition("foos_view", "SELECT * FROM foos", replace=True)
    # CREATE OR REPLACE VIEW "foos_view" AS SELECT * FROM foos;

    ViewAlterer("foos_view", owner_to="jdoe", rename_to="bars_view")
    # ALTER VIEW "foos_view" OWNER TO "jdoe";
    # ALTER VIEW "foos_view" RENAME TO "bars_view";
"""

from typing import Any, List, Optional

from psycopg import sql

from core.ddl.ddl_utils import (
    CommonDDL,
    compose,
    join_statements,
    options_from_mapping_or_string,
    quoted_list,
)
from core.errors import PostgreSQLExtensionsError
from core.features import Features, resolve_features
from core.quoting import (
    as_list,
    quote_column_name,
    quote_generic,
    quote_generic_ignore_schema,
    quote_role,
    quote_schema,
    quote_view_name,
)


class ViewDefinition:
    """
    CREATE [OR REPLACE ][TEMPORARY ][RECURSIVE ]VIEW builder.

    Options:
        replace, temporary, recursive: Statement modifiers
        columns: Explicit column names
        with_options: Raw string or mapping of view options
    """

    def __init__(self, name: Any, query: str, features: Optional[Features] = None, **options: Any):
        self.name = name
        self.query = query
        self.features = resolve_features(features)
        self.options = options

    def to_sql(self) -> sql.Composed:
        options = self.options
        if options.get("recursive"):
            self.features.check("view_recursive")

        parts = [
            sql.SQL("CREATE "),
            sql.SQL("OR REPLACE ") if options.get("replace") else None,
            sql.SQL("TEMPORARY ") if options.get("temporary") else None,
            sql.SQL("RECURSIVE ") if options.get("recursive") else None,
            sql.SQL("VIEW {} ").format(quote_view_name(self.name)),
        ]
        if options.get("columns"):
            parts.append(sql.SQL("({}) ").format(quoted_list(options["columns"], quote_column_name)))
        if options.get("with_options"):
            self.features.check("view_set_options")
            parts.append(sql.SQL("WITH ({}) ").format(
                options_from_mapping_or_string(options["with_options"])
            ))
        parts.append(sql.SQL("AS {};").format(sql.SQL(str(self.query))))
        return compose(parts)


class ViewAlterer:
    """
    ALTER VIEW statements.

    Actions are applied in ACTIONS order regardless of how they were
    passed. set_default takes a (column, expression) pair.
    """

    kind = "VIEW"
    error = PostgreSQLExtensionsError
    ACTIONS = (
        "set_default",
        "drop_default",
        "owner_to",
        "rename_to",
        "set_schema",
        "set_options",
        "reset_options",
    )

    def __init__(
        self,
        name: Any,
        features: Optional[Features] = None,
        if_exists: Optional[bool] = None,
        **actions: Any,
    ):
        self.name = name
        self.features = resolve_features(features)
        self.if_exists = if_exists
        unknown = set(actions) - set(self.ACTIONS)
        if unknown:
            raise self.error(
                sorted(unknown), message=f"Unknown {self.kind} actions - {sorted(unknown)}"
            )
        self.actions = actions

    def _head(self) -> sql.Composed:
        if self.if_exists is not None:
            self.features.check("view_if_exists")
        return compose([
            sql.SQL(f"ALTER {self.kind} "),
            sql.SQL("IF EXISTS ") if self.if_exists else None,
            quote_view_name(self.name),
            sql.SQL(" "),
        ])

    def _default_value(self, value: Any) -> sql.Composable:
        return sql.SQL(str(value))

    def _action_sql(self, action: str, value: Any) -> Optional[sql.Composable]:
        if action == "set_default":
            column, expression = value
            return sql.SQL("ALTER COLUMN {} SET DEFAULT {}").format(
                quote_column_name(column), self._default_value(expression)
            )
        if action == "drop_default":
            return sql.SQL("ALTER COLUMN {} DROP DEFAULT").format(quote_column_name(value))
        if action == "owner_to":
            return sql.SQL("OWNER TO {}").format(quote_role(value))
        if action == "rename_to":
            return sql.SQL("RENAME TO {}").format(quote_generic_ignore_schema(value))
        if action == "set_schema":
            return sql.SQL("SET SCHEMA {}").format(quote_schema(value))
        if action == "set_options":
            self.features.check("view_set_options")
            return sql.SQL("SET ({})").format(options_from_mapping_or_string(value))
        if action == "reset_options":
            self.features.check("view_set_options")
            return sql.SQL("RESET ({})").format(
                sql.SQL(", ").join(quote_generic(v) for v in as_list(value))
            )
        return None

    def statements(self) -> List[sql.Composable]:
        stmts = []
        for action in self.ACTIONS:
            if action not in self.actions:
                continue
            tail = self._action_sql(action, self.actions[action])
            if tail is not None:
                stmts.append(self._head() + tail)
        return stmts

    def to_sql(self) -> sql.Composed:
        return join_statements(self.statements())


class ViewBuilder:
    """
    DROP VIEW.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def drop(*names: Any, if_exists: bool = False, cascade: bool = False) -> sql.Composed:
        names = [n for name in names for n in as_list(name)]
        return CommonDDL.drop("VIEW", names, quote_view_name, if_exists=if_exists, cascade=cascade)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ViewDefinition",
    "ViewAlterer",
    "ViewBuilder",
]
