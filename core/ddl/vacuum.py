# ============================================================================
# VACUUM BUILDER
# ============================================================================
# STATUS: Core - VACUUM statements
# PURPOSE: Parenthesised (9.0+) or legacy keyword VACUUM options
# ============================================================================
"""
VACUUM Builder.

Usage:
    from core.ddl.vacuum import VacuumDefinition

    VacuumDefinition("foo", full=True, analyze=True)
    # VACUUM (FULL, ANALYZE) "foo";
"""

from typing import Any, Optional

from psycopg import sql

from core.ddl.ddl_utils import compose, quoted_list
from core.features import Features, resolve_features
from core.quoting import as_list, quote_column_name, quote_table_name


VACUUM_OPTIONS = ("full", "freeze", "verbose", "analyze")


class VacuumDefinition:
    """
    VACUUM builder.

    Options:
        full, freeze, verbose, analyze: Boolean flags
        columns: Column names; forces analyze and needs a table
    """

    def __init__(self, table: Optional[Any] = None, features: Optional[Features] = None, **options: Any):
        if as_list(options.get("columns")):
            if not table:
                raise ValueError("You must specify a table when using the columns option.")
            options["analyze"] = True
        self.table = table
        self.features = resolve_features(features)
        self.options = options

    def to_sql(self) -> sql.Composed:
        flags = [sql.SQL(o.upper()) for o in VACUUM_OPTIONS if self.options.get(o)]
        parts = [sql.SQL("VACUUM")]
        if flags:
            if self.features.supports("vacuum_options_list"):
                parts.append(sql.SQL(" ({})").format(sql.SQL(", ").join(flags)))
            else:
                parts.append(sql.SQL(" {}").format(sql.SQL(" ").join(flags)))
        if self.table:
            parts.append(sql.SQL(" {}").format(quote_table_name(self.table)))
        if as_list(self.options.get("columns")):
            parts.append(sql.SQL(" ({})").format(quoted_list(self.options["columns"], quote_column_name)))
        parts.append(sql.SQL(";"))
        return compose(parts)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "VACUUM_OPTIONS",
    "VacuumDefinition",
]
