# ============================================================================
# SCHEMA BUILDERS
# ============================================================================
# STATUS: Core - CREATE/ALTER/DROP SCHEMA statements
# PURPOSE: Schema lifecycle and ownership
# ============================================================================
"""
Schema Builders.

Usage:
    from core.ddl.schemas import SchemaBuilder

    SchemaBuilder.create("geo", authorization="jdoe")
    # CREATE SCHEMA "geo" AUTHORIZATION "jdoe";
"""

from typing import Any, Optional

from psycopg import sql

from core.ddl.ddl_utils import CommonDDL, compose
from core.features import Features, resolve_features
from core.quoting import as_list, quote_role, quote_schema


class SchemaBuilder:
    """
    Schema DDL.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def create(
        name: Any,
        authorization: Optional[Any] = None,
        if_not_exists: bool = False,
        features: Optional[Features] = None,
    ) -> sql.Composed:
        if if_not_exists:
            resolve_features(features).check("create_schema_if_not_exists")
        return compose([
            sql.SQL("CREATE SCHEMA "),
            sql.SQL("IF NOT EXISTS ") if if_not_exists else None,
            quote_schema(name),
            sql.SQL(" AUTHORIZATION {}").format(quote_role(authorization)) if authorization else None,
            sql.SQL(";"),
        ])

    @staticmethod
    def create_authorization(role: Any) -> sql.Composed:
        """CREATE SCHEMA AUTHORIZATION role; names the schema after the role."""
        return sql.SQL("CREATE SCHEMA AUTHORIZATION {};").format(quote_role(role))

    @staticmethod
    def drop(*names: Any, if_exists: bool = False, cascade: bool = False) -> sql.Composed:
        names = [n for name in names for n in as_list(name)]
        return CommonDDL.drop("SCHEMA", names, quote_schema, if_exists=if_exists, cascade=cascade)

    @staticmethod
    def rename(name: Any, new_name: Any) -> sql.Composed:
        return sql.SQL("ALTER SCHEMA {} RENAME TO {};").format(
            quote_schema(name), quote_schema(new_name)
        )

    @staticmethod
    def owner_to(name: Any, role: Any) -> sql.Composed:
        return CommonDDL.owner_to("SCHEMA", name, role, quote_schema)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "SchemaBuilder",
]
