# ============================================================================
# INDEX BUILDERS
# ============================================================================
# STATUS: Core - CREATE/DROP/ALTER INDEX statements
# PURPOSE: Index definitions with expressions, opclasses, ordering and storage
# ============================================================================
"""
Index Builders.

Columns may be plain names or mappings:
    {"column": "name", "opclass": "text_pattern_ops"}
    {"expression": "COALESCE(bar_id, 0)"}
    {"column": "bar_id", "order": "asc", "nulls": "last"}

Usage:
    from core.ddl.indexes import IndexDefinition

    idx = IndexDefinition("foo_search_idx", "foo", "search", using="gin")
    idx.to_sql().as_string(None)
    # CREATE INDEX "foo_search_idx" ON "foo" USING "gin"("search");
"""

from typing import Any, Mapping

from psycopg import sql

from core.ddl.ddl_utils import (
    CommonDDL,
    compose,
    keyword,
    options_from_mapping_or_string,
    terminate,
)
from core.errors import (
    InvalidIndexColumnDefinition,
    InvalidIndexFillFactor,
    InvalidIndexOptions,
)
from core.quoting import (
    as_list,
    quote_column_name,
    quote_generic,
    quote_table_name,
    quote_tablespace,
)


INDEX_ORDERS = ("asc", "desc")
INDEX_NULLS = ("first", "last")


class IndexDefinition:
    """
    CREATE [UNIQUE ]INDEX [CONCURRENTLY ]name ON table[ USING method](columns)

    Options:
        unique, concurrently: Statement modifiers
        using: Index method (btree, gin, gist, ...)
        fill_factor: 0-100
        index_parameters: Raw string or mapping of storage parameters
        tablespace: Index tablespace
        conditions / where: Partial index predicate
    """

    def __init__(self, name: str, table: Any, columns: Any, **options: Any):
        self._assert_valid_columns(columns)
        self._assert_valid_fill_factor(options.get("fill_factor"))

        self.name = name
        self.table = table
        self.columns = columns
        self.options = options

    @staticmethod
    def _assert_valid_columns(columns: Any) -> None:
        for column in as_list(columns):
            if not isinstance(column, Mapping):
                continue
            if "column" in column and "expression" in column:
                raise InvalidIndexColumnDefinition(
                    column,
                    message=f"Can't specify both column and expression in a column definition - {column!r}",
                )
            if "column" not in column and "expression" not in column:
                raise InvalidIndexColumnDefinition(
                    column,
                    message=f"Must specify either column or expression in a column definition - {column!r}",
                )
            if column.get("order") and str(column["order"]).lower() not in INDEX_ORDERS:
                raise InvalidIndexColumnDefinition(
                    column, message=f"Invalid order value - {column!r}"
                )
            if column.get("nulls") and str(column["nulls"]).lower() not in INDEX_NULLS:
                raise InvalidIndexColumnDefinition(
                    column, message=f"Invalid nulls value - {column!r}"
                )

    @staticmethod
    def _assert_valid_fill_factor(fill_factor: Any) -> None:
        if fill_factor is None:
            return
        try:
            ff = int(fill_factor)
        except (TypeError, ValueError):
            raise InvalidIndexFillFactor(fill_factor)
        if ff < 0 or ff > 100:
            raise InvalidIndexFillFactor(fill_factor)

    @staticmethod
    def _column_sql(column: Any) -> sql.Composable:
        if not isinstance(column, Mapping):
            return quote_column_name(column)

        if column.get("column") is not None:
            parts = [quote_column_name(column["column"])]
        else:
            parts = [sql.SQL("({})").format(sql.SQL(str(column["expression"])))]

        if column.get("opclass"):
            parts.append(sql.SQL(" {}").format(quote_generic(column["opclass"])))
        if column.get("order"):
            parts.append(sql.SQL(" {}").format(keyword(column["order"])))
        if column.get("nulls"):
            parts.append(sql.SQL(" NULLS {}").format(keyword(column["nulls"])))
        return compose(parts)

    def to_sql(self) -> sql.Composed:
        options = self.options
        parts = [
            sql.SQL("CREATE "),
            sql.SQL("UNIQUE ") if options.get("unique") else None,
            sql.SQL("INDEX "),
            sql.SQL("CONCURRENTLY ") if options.get("concurrently") else None,
            sql.SQL("{} ON {}").format(quote_generic(self.name), quote_table_name(self.table)),
        ]
        if options.get("using"):
            parts.append(sql.SQL(" USING {}").format(quote_generic(options["using"])))

        parts.append(sql.SQL("({})").format(
            sql.SQL(", ").join(self._column_sql(c) for c in as_list(self.columns))
        ))

        if options.get("fill_factor") is not None:
            parts.append(sql.SQL(" WITH (FILLFACTOR = {})").format(
                sql.SQL(str(int(options["fill_factor"])))
            ))
        if options.get("index_parameters"):
            parts.append(sql.SQL(" WITH ({})").format(
                options_from_mapping_or_string(options["index_parameters"])
            ))
        if options.get("tablespace"):
            parts.append(sql.SQL(" TABLESPACE {}").format(quote_tablespace(options["tablespace"])))

        conditions = options.get("conditions") or options.get("where")
        if conditions:
            parts.append(sql.SQL(" WHERE ({})").format(sql.SQL(str(conditions))))

        return terminate(compose(parts))

    def __str__(self) -> str:
        return self.to_sql().as_string(None)


class IndexBuilder:
    """
    DROP and ALTER INDEX statements.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def drop(
        *names: Any,
        concurrently: bool = False,
        if_exists: bool = False,
        cascade: bool = False,
    ) -> sql.Composed:
        names = [n for name in names for n in as_list(name)]
        if concurrently and cascade:
            raise InvalidIndexOptions(
                names, message="The concurrently and cascade options cannot be used together."
            )
        if concurrently and len(names) > 1:
            raise InvalidIndexOptions(
                names, message="The concurrently option can only be used on a single index."
            )

        kind = "INDEX CONCURRENTLY" if concurrently else "INDEX"
        return CommonDDL.drop(kind, names, quote_generic, if_exists=if_exists, cascade=cascade)

    @staticmethod
    def rename(name: str, new_name: str) -> sql.Composed:
        return CommonDDL.rename("INDEX", name, new_name)

    @staticmethod
    def set_tablespace(name: str, tablespace: str) -> sql.Composed:
        return sql.SQL("ALTER INDEX {} SET TABLESPACE {};").format(
            quote_generic(name), quote_tablespace(tablespace)
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "INDEX_ORDERS",
    "INDEX_NULLS",
    "IndexDefinition",
    "IndexBuilder",
]
