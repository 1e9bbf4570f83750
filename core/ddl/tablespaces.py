# ============================================================================
# TABLESPACE BUILDERS
# ============================================================================
# STATUS: Core - CREATE/ALTER/DROP TABLESPACE statements
# PURPOSE: Tablespace lifecycle and planner cost parameters
# ============================================================================
"""
Tablespace Builders.

Only seq_page_cost and random_page_cost may be set or reset.

Usage:
    from core.ddl.tablespaces import TablespaceBuilder

    TablespaceBuilder.set_parameters("foo", seq_page_cost=2.0)
    # ALTER TABLESPACE "foo" SET (
    #   "seq_page_cost" = 2.0
    # );
"""

from typing import Any, Optional

from psycopg import sql

from core.ddl.ddl_utils import CommonDDL, assert_valid_option, compose
from core.errors import InvalidTablespaceParameter
from core.quoting import as_list, quote_generic, quote_role, quote_tablespace


TABLESPACE_PARAMETERS = ("seq_page_cost", "random_page_cost")


def _parameter(name: Any) -> sql.Identifier:
    return quote_generic(assert_valid_option(name, TABLESPACE_PARAMETERS, InvalidTablespaceParameter))


class TablespaceBuilder:
    """
    Tablespace DDL.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def create(name: Any, location: str, owner: Optional[Any] = None) -> sql.Composed:
        return compose([
            sql.SQL("CREATE TABLESPACE {} ").format(quote_tablespace(name)),
            sql.SQL("OWNER {} ").format(quote_role(owner)) if owner else None,
            sql.SQL("LOCATION {};").format(sql.Literal(str(location))),
        ])

    @staticmethod
    def drop(name: Any, if_exists: bool = False) -> sql.Composed:
        return CommonDDL.drop("TABLESPACE", name, quote_tablespace, if_exists=if_exists)

    @staticmethod
    def rename(name: Any, new_name: Any) -> sql.Composed:
        return CommonDDL.rename("TABLESPACE", name, new_name, quote_tablespace)

    @staticmethod
    def owner_to(name: Any, role: Any) -> sql.Composed:
        return CommonDDL.owner_to("TABLESPACE", name, role, quote_tablespace)

    @staticmethod
    def set_parameters(name: Any, **parameters: Any) -> sql.Composed:
        """ALTER TABLESPACE name SET (param = value, ...), one parameter per line."""
        items = sql.SQL(",").join(
            sql.SQL("\n  {} = {}").format(_parameter(k), sql.SQL(str(v)))
            for k, v in parameters.items()
        )
        return sql.SQL("ALTER TABLESPACE {} SET ({}\n);").format(quote_tablespace(name), items)

    @staticmethod
    def reset_parameters(name: Any, *parameters: Any) -> sql.Composed:
        items = sql.SQL(",").join(
            sql.SQL("\n  {}").format(_parameter(p)) for param in parameters for p in as_list(param)
        )
        return sql.SQL("ALTER TABLESPACE {} RESET ({}\n);").format(quote_tablespace(name), items)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "TABLESPACE_PARAMETERS",
    "TablespaceBuilder",
]
