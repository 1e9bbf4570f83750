# ============================================================================
# COLUMN DEFINITIONS
# ============================================================================
# STATUS: Core - Column clauses for CREATE TABLE and ALTER TABLE
# PURPOSE: Render "name" type[ DEFAULT x][ NOT NULL]
# ============================================================================
"""
Column Definitions.

Defaults are rendered as literals unless given as {"expression": "..."},
which is embedded verbatim.
"""

from typing import Any, Optional

from psycopg import sql

from core.ddl.ddl_utils import compose
from core.quoting import quote_column_name, quote_value


class ColumnDefinition:
    """A single column: name, raw SQL type, default and nullability."""

    def __init__(
        self,
        name: str,
        sql_type: str,
        default: Any = None,
        null: Optional[bool] = None,
    ):
        self.name = name
        self.sql_type = sql_type
        self.default = default
        self.null = null

    def options_sql(self) -> sql.Composed:
        """DEFAULT and NOT NULL suffix."""
        parts = []
        if self.default is not None:
            parts.append(sql.SQL(" DEFAULT {}").format(quote_value(self.default)))
        if self.null is False:
            parts.append(sql.SQL(" NOT NULL"))
        return compose(parts)

    def to_sql(self) -> sql.Composed:
        return compose([
            quote_column_name(self.name),
            sql.SQL(" "),
            sql.SQL(str(self.sql_type)),
            self.options_sql(),
        ])

    def __repr__(self) -> str:
        return f"ColumnDefinition({self.name!r}, {self.sql_type!r})"


__all__ = ["ColumnDefinition"]
