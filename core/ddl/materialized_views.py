# ============================================================================
# MATERIALIZED VIEW BUILDERS
# ============================================================================
# STATUS: Core - CREATE/ALTER/REFRESH/DROP MATERIALIZED VIEW statements
# PURPOSE: Materialized views with storage options, tablespaces and clustering
# ============================================================================
"""
Materialized View Builders.

Every statement here needs PostgreSQL 9.3 or later.

Usage:
    from core.ddl.materialized_views import MaterializedViewDefinition

    MaterializedViewDefinition("foos_view", "SELECT * FROM foos", with_data=False)
    # CREATE MATERIALIZED VIEW "foos_view" AS SELECT * FROM foos WITH NO DATA;
"""

from typing import Any, Optional

from psycopg import sql

from core.ddl.ddl_utils import (
    CommonDDL,
    compose,
    options_from_mapping_or_string,
    quoted_list,
)
from core.ddl.views import ViewAlterer
from core.errors import InvalidMaterializedViewOptions
from core.features import Features, resolve_features
from core.quoting import (
    as_list,
    quote_column_name,
    quote_generic,
    quote_tablespace,
    quote_value,
    quote_view_name,
)


class MaterializedViewDefinition:
    """
    CREATE MATERIALIZED VIEW builder.

    Options:
        columns: Explicit column names
        with_options: Raw string or mapping of storage options
        tablespace: Storage tablespace
        with_data: False appends WITH NO DATA
    """

    def __init__(self, name: Any, query: str, features: Optional[Features] = None, **options: Any):
        self.name = name
        self.query = query
        self.features = resolve_features(features)
        self.options = options

    def to_sql(self) -> sql.Composed:
        self.features.check("materialized_views")
        options = self.options

        parts = [sql.SQL("CREATE MATERIALIZED VIEW {} ").format(quote_view_name(self.name))]
        if options.get("columns"):
            parts.append(sql.SQL("({}) ").format(quoted_list(options["columns"], quote_column_name)))
        if options.get("with_options"):
            parts.append(sql.SQL("WITH ({}) ").format(
                options_from_mapping_or_string(options["with_options"])
            ))
        if options.get("tablespace"):
            parts.append(sql.SQL("TABLESPACE {} ").format(quote_tablespace(options["tablespace"])))
        parts.append(sql.SQL("AS {}").format(sql.SQL(str(self.query))))
        if "with_data" in options and not options["with_data"]:
            parts.append(sql.SQL(" WITH NO DATA"))
        parts.append(sql.SQL(";"))
        return compose(parts)


class MaterializedViewAlterer(ViewAlterer):
    """
    ALTER MATERIALIZED VIEW statements.

    Adds set_tablespace, cluster_on and remove_cluster to the view
    actions. set_default takes (column, value) where value is a literal
    or an {"expression": ...} mapping.
    """

    kind = "MATERIALIZED VIEW"
    error = InvalidMaterializedViewOptions
    ACTIONS = ViewAlterer.ACTIONS + ("set_tablespace", "cluster_on", "remove_cluster")

    def _head(self) -> sql.Composed:
        self.features.check("materialized_views")
        return compose([
            sql.SQL(f"ALTER {self.kind} "),
            sql.SQL("IF EXISTS ") if self.if_exists else None,
            quote_view_name(self.name),
            sql.SQL(" "),
        ])

    def _default_value(self, value: Any) -> sql.Composable:
        return quote_value(value)

    def _action_sql(self, action: str, value: Any) -> Optional[sql.Composable]:
        if action == "set_tablespace":
            return sql.SQL("SET TABLESPACE {}").format(quote_tablespace(value))
        if action == "cluster_on":
            return sql.SQL("CLUSTER ON {}").format(quote_generic(value))
        if action == "remove_cluster":
            return sql.SQL("SET WITHOUT CLUSTER") if value else None
        return super()._action_sql(action, value)


class MaterializedViewBuilder:
    """
    DROP and REFRESH MATERIALIZED VIEW.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def drop(*names: Any, if_exists: bool = False, cascade: bool = False) -> sql.Composed:
        names = [n for name in names for n in as_list(name)]
        return CommonDDL.drop(
            "MATERIALIZED VIEW", names, quote_view_name, if_exists=if_exists, cascade=cascade
        )

    @staticmethod
    def refresh(name: Any, with_data: bool = True) -> sql.Composed:
        return compose([
            sql.SQL("REFRESH MATERIALIZED VIEW {}").format(quote_view_name(name)),
            None if with_data else sql.SQL(" WITH NO DATA"),
            sql.SQL(";"),
        ])


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "MaterializedViewDefinition",
    "MaterializedViewAlterer",
    "MaterializedViewBuilder",
]
