# ============================================================================
# TYPE BUILDERS
# ============================================================================
# STATUS: Core - Enum types and generic type DDL
# PURPOSE: CREATE TYPE ... AS ENUM, ADD VALUE, DROP/RENAME/OWNER/SCHEMA
# ============================================================================
"""
Type Builders.

Usage:
    from core.ddl.types import TypeBuilder

    TypeBuilder.create_enum("status", "active", "retired")
    # CREATE TYPE "status" AS ENUM ('active', 'retired');

    TypeBuilder.add_enum_value("status", "pending", before="active")
    # ALTER TYPE "status" ADD VALUE 'pending' BEFORE 'active';
"""

from typing import Any, Optional

from psycopg import sql

from core.ddl.ddl_utils import CommonDDL, compose, literals
from core.errors import InvalidAddEnumValueOptions
from core.features import Features, resolve_features
from core.quoting import as_list, quote_generic_with_schema


class TypeBuilder:
    """
    Type DDL.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def create_enum(name: Any, *values: Any) -> sql.Composed:
        values = [v for value in values for v in as_list(value)]
        return sql.SQL("CREATE TYPE {} AS ENUM ({});").format(
            quote_generic_with_schema(name), literals(values)
        )

    @staticmethod
    def add_enum_value(
        enum: Any,
        value: Any,
        before: Optional[Any] = None,
        after: Optional[Any] = None,
        if_not_exists: bool = False,
        features: Optional[Features] = None,
    ) -> sql.Composed:
        if before and after:
            raise InvalidAddEnumValueOptions(
                (before, after), message="Can't use both before and after options together"
            )
        if if_not_exists and not resolve_features(features).supports("add_enum_value_if_not_exists"):
            raise InvalidAddEnumValueOptions(
                "if_not_exists",
                message="The if_not_exists option is only available in PostgreSQL 9.3+.",
            )

        return compose([
            sql.SQL("ALTER TYPE {} ADD VALUE ").format(quote_generic_with_schema(enum)),
            sql.SQL("IF NOT EXISTS ") if if_not_exists else None,
            sql.Literal(str(value)),
            sql.SQL(" BEFORE {}").format(sql.Literal(str(before))) if before else None,
            sql.SQL(" AFTER {}").format(sql.Literal(str(after))) if after else None,
            sql.SQL(";"),
        ])

    @staticmethod
    def drop(*names: Any, if_exists: bool = False, cascade: bool = False) -> sql.Composed:
        names = [n for name in names for n in as_list(name)]
        return CommonDDL.drop("TYPE", names, quote_generic_with_schema, if_exists=if_exists, cascade=cascade)

    @staticmethod
    def rename(name: Any, new_name: Any) -> sql.Composed:
        return CommonDDL.rename("TYPE", name, new_name, quote_generic_with_schema)

    @staticmethod
    def set_schema(name: Any, schema: Any) -> sql.Composed:
        return CommonDDL.set_schema("TYPE", name, schema, quote_generic_with_schema)

    @staticmethod
    def owner_to(name: Any, role: Any) -> sql.Composed:
        return CommonDDL.owner_to("TYPE", name, role, quote_generic_with_schema)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "TypeBuilder",
]
