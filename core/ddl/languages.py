# ============================================================================
# PROCEDURAL LANGUAGE BUILDERS
# ============================================================================
# STATUS: Core - CREATE/ALTER/DROP PROCEDURAL LANGUAGE statements
# PURPOSE: Procedural language registration and ownership
# ============================================================================
"""
Procedural Language Builders.

Usage:
    from core.ddl.languages import LanguageBuilder

    LanguageBuilder.create("plpgsql", trusted=True, call_handler="plpgsql_call_handler")
    # CREATE TRUSTED PROCEDURAL LANGUAGE "plpgsql" HANDLER "plpgsql_call_handler";
"""

from typing import Any, Optional

from psycopg import sql

from core.ddl.ddl_utils import CommonDDL, compose
from core.quoting import quote_language


class LanguageBuilder:
    """
    Procedural language DDL.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def create(
        name: Any,
        trusted: bool = False,
        call_handler: Optional[Any] = None,
        validator: Optional[str] = None,
    ) -> sql.Composed:
        return compose([
            sql.SQL("CREATE "),
            sql.SQL("TRUSTED ") if trusted else None,
            sql.SQL("PROCEDURAL LANGUAGE {}").format(quote_language(name)),
            sql.SQL(" HANDLER {}").format(quote_language(call_handler)) if call_handler else None,
            sql.SQL(" VALIDATOR {}").format(sql.SQL(str(validator))) if validator else None,
            sql.SQL(";"),
        ])

    @staticmethod
    def drop(name: Any, if_exists: bool = False, cascade: bool = False) -> sql.Composed:
        return CommonDDL.drop(
            "PROCEDURAL LANGUAGE", name, quote_language, if_exists=if_exists, cascade=cascade
        )

    @staticmethod
    def rename(name: Any, new_name: Any) -> sql.Composed:
        return CommonDDL.rename("PROCEDURAL LANGUAGE", name, new_name, quote_language)

    @staticmethod
    def owner_to(name: Any, role: Any) -> sql.Composed:
        return CommonDDL.owner_to("PROCEDURAL LANGUAGE", name, role, quote_language)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "LanguageBuilder",
]
