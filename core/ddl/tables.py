# ============================================================================
# TABLE BUILDERS
# ============================================================================
# STATUS: Core - CREATE TABLE definitions and ALTER TABLE statements
# PURPOSE: Table bodies with lifted column constraints, LIKE, INHERITS, storage
# ============================================================================
"""
Table Builders.

TableDefinition collects columns, LIKE clauses and table constraints, then
renders a single CREATE TABLE statement. Inline column options (check,
references, unique, primary_key) are lifted into table-level constraint
clauses. Indexes and PostGIS side statements are collected as
post-processing statements that run after the CREATE.

Usage:
    from core.ddl.tables import TableDefinition

    t = TableDefinition("foo")
    t.integer("bar_id", references="bar")
    t.text("name", null=False)
    t.to_sql().as_string(None)
    # CREATE TABLE "foo" (
    #   "id" serial primary key,
    #   "bar_id" integer,
    #   "name" text NOT NULL,
    #   FOREIGN KEY ("bar_id") REFERENCES "bar"
    # );
"""

from typing import Any, List, Mapping, Optional

from psycopg import sql

from core.config import get_defaults
from core.ddl.columns import ColumnDefinition
from core.ddl.constraints import (
    CheckConstraint,
    Constraint,
    ExcludeConstraint,
    ForeignKeyConstraint,
    PrimaryKeyConstraint,
    UniqueConstraint,
)
from core.ddl.ddl_utils import (
    CommonDDL,
    assert_valid_option,
    assert_valid_options,
    compose,
    keyword,
    options_from_mapping_or_string,
    terminate,
)
from core.ddl.geometry import GeometryColumnDefinition
from core.ddl.indexes import IndexDefinition
from core.errors import InvalidLikeTypes, InvalidTableOptions
from core.features import Features, resolve_features
from core.logging import ComponentType, get_logger
from core.quoting import (
    Name,
    as_list,
    quote_column_name,
    quote_generic,
    quote_table_name,
    quote_table_names,
    quote_tablespace,
    quote_value,
)

logger = get_logger(__name__, ComponentType.DDL)


LIKE_TYPES = ("defaults", "constraints", "indexes", "storage", "comments", "all")
ON_COMMIT_VALUES = ("preserve_rows", "delete_rows", "drop")


# ============================================================================
# LIKE
# ============================================================================

class LikeOptions:
    """LIKE parent [INCLUDING x ...][EXCLUDING y ...]"""

    def __init__(self, parent_table: Name, including: Any = None, excluding: Any = None):
        self.parent_table = parent_table
        self.including = assert_valid_options(including, LIKE_TYPES, InvalidLikeTypes)
        self.excluding = assert_valid_options(excluding, LIKE_TYPES, InvalidLikeTypes)

    def to_sql(self) -> sql.Composed:
        parts = [sql.SQL("LIKE {}").format(quote_table_name(self.parent_table))]
        parts.extend(sql.SQL(" INCLUDING {}").format(keyword(i)) for i in self.including)
        parts.extend(sql.SQL(" EXCLUDING {}").format(keyword(e)) for e in self.excluding)
        return compose(parts)


# ============================================================================
# TABLE DEFINITION
# ============================================================================

class TableDefinition:
    """
    CREATE TABLE builder.

    Options:
        temporary, unlogged, if_not_exists: Statement modifiers
        of_type: Typed table (no columns, LIKE or inherits allowed)
        inherits: Parent table(s)
        storage_parameters: Raw string or mapping for WITH (...)
        on_commit: preserve_rows, delete_rows or drop
        tablespace: Table tablespace
        options: Raw text appended after the body
        id: False to skip the implicit primary key column
        primary_key: Name of the implicit primary key column
        force: Drop the table first (cascade_drop adds CASCADE)
    """

    def __init__(self, name: Name, features: Optional[Features] = None, **options: Any):
        self.name = name
        self.features = resolve_features(features)
        self.options = options
        self.columns: List[ColumnDefinition] = []
        self.like_options: Optional[LikeOptions] = None
        self.table_constraints: List[Constraint] = []
        self.post_processing: List[sql.Composed] = []

        if options.get("on_commit") is not None:
            try:
                assert_valid_option(options["on_commit"], ON_COMMIT_VALUES, InvalidTableOptions)
            except InvalidTableOptions:
                raise InvalidTableOptions(
                    options["on_commit"],
                    message=f"Invalid ON COMMIT value - {options['on_commit']}",
                ) from None

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    def column(
        self,
        name: str,
        sql_type: str,
        default: Any = None,
        null: Optional[bool] = None,
        check: Any = None,
        references: Any = None,
        unique: Any = None,
        primary_key: Any = None,
    ) -> "TableDefinition":
        """Add a column, lifting inline constraints to the table."""
        self.columns.append(ColumnDefinition(name, sql_type, default=default, null=null))

        if check:
            for c in as_list(check):
                if isinstance(c, Mapping):
                    c = dict(c)
                    expression = c.pop("expression")
                    self.table_constraints.append(CheckConstraint(expression, **c))
                else:
                    self.table_constraints.append(CheckConstraint(c))

        if references:
            if isinstance(references, Mapping):
                ref_options = dict(references)
                ref_table = ref_options.pop("table")
                ref_column = ref_options.pop("column", None)
            elif isinstance(references, (list, tuple)):
                ref_table = references[0]
                ref_column = references[1] if len(references) > 1 else None
                ref_options = {}
            else:
                ref_table, ref_column, ref_options = references, None, {}
            self.table_constraints.append(
                ForeignKeyConstraint(name, ref_table, ref_column, **ref_options)
            )

        if unique:
            unique_options = dict(unique) if isinstance(unique, Mapping) else {}
            self.table_constraints.append(UniqueConstraint(name, **unique_options))

        if primary_key:
            pk_options = dict(primary_key) if isinstance(primary_key, Mapping) else {}
            self.table_constraints.append(PrimaryKeyConstraint(name, **pk_options))

        return self

    def integer(self, name: str, **options: Any) -> "TableDefinition":
        return self.column(name, "integer", **options)

    def bigint(self, name: str, **options: Any) -> "TableDefinition":
        return self.column(name, "bigint", **options)

    def smallint(self, name: str, **options: Any) -> "TableDefinition":
        return self.column(name, "smallint", **options)

    def string(self, name: str, limit: Optional[int] = None, **options: Any) -> "TableDefinition":
        sql_type = f"character varying({int(limit)})" if limit else "character varying"
        return self.column(name, sql_type, **options)

    def text(self, name: str, **options: Any) -> "TableDefinition":
        return self.column(name, "text", **options)

    def boolean(self, name: str, **options: Any) -> "TableDefinition":
        return self.column(name, "boolean", **options)

    def date(self, name: str, **options: Any) -> "TableDefinition":
        return self.column(name, "date", **options)

    def time(self, name: str, **options: Any) -> "TableDefinition":
        return self.column(name, "time", **options)

    def timestamp(self, name: str, **options: Any) -> "TableDefinition":
        return self.column(name, "timestamp", **options)

    def timestamptz(self, name: str, **options: Any) -> "TableDefinition":
        return self.column(name, "timestamptz", **options)

    def float(self, name: str, **options: Any) -> "TableDefinition":
        return self.column(name, "float", **options)

    def decimal(
        self,
        name: str,
        precision: Optional[int] = None,
        scale: Optional[int] = None,
        **options: Any,
    ) -> "TableDefinition":
        sql_type = "decimal"
        if precision is not None:
            sql_type = f"decimal({int(precision)}, {int(scale or 0)})"
        return self.column(name, sql_type, **options)

    def binary(self, name: str, **options: Any) -> "TableDefinition":
        return self.column(name, "bytea", **options)

    def json(self, name: str, **options: Any) -> "TableDefinition":
        return self.column(name, "json", **options)

    def jsonb(self, name: str, **options: Any) -> "TableDefinition":
        return self.column(name, "jsonb", **options)

    def uuid(self, name: str, **options: Any) -> "TableDefinition":
        return self.column(name, "uuid", **options)

    # ------------------------------------------------------------------
    # Spatial columns
    # ------------------------------------------------------------------

    def spatial(self, name: str, **options: Any) -> "TableDefinition":
        """Add a PostGIS column with its constraints, index and catalog rows."""
        column = GeometryColumnDefinition(name, self.features, **options)
        self.columns.append(column)
        self.table_constraints.extend(column.table_constraints)
        self.post_processing.extend(column.post_processing(self.name))
        return self

    geometry = spatial

    def geography(self, name: str, **options: Any) -> "TableDefinition":
        options.setdefault("srid", self.features.unknown_srids()["geography"])
        options["spatial_column_type"] = "geography"
        return self.spatial(name, **options)

    # ------------------------------------------------------------------
    # Table-level entries
    # ------------------------------------------------------------------

    def like(self, parent_table: Name, including: Any = None, excluding: Any = None) -> "TableDefinition":
        self.like_options = LikeOptions(parent_table, including, excluding)
        return self

    def check_constraint(self, expression: str, **options: Any) -> "TableDefinition":
        self.table_constraints.append(CheckConstraint(expression, **options))
        return self

    def unique_constraint(self, columns: Any, **options: Any) -> "TableDefinition":
        self.table_constraints.append(UniqueConstraint(columns, **options))
        return self

    def primary_key_constraint(self, columns: Any, **options: Any) -> "TableDefinition":
        self.table_constraints.append(PrimaryKeyConstraint(columns, **options))
        return self

    def foreign_key(
        self,
        columns: Any,
        ref_table: Name,
        ref_columns: Any = None,
        **options: Any,
    ) -> "TableDefinition":
        self.table_constraints.append(
            ForeignKeyConstraint(columns, ref_table, ref_columns, **options)
        )
        return self

    def exclude(self, excludes: Any, **options: Any) -> "TableDefinition":
        self.table_constraints.append(ExcludeConstraint(excludes, **options))
        return self

    def index(self, name: str, columns: Any, **options: Any) -> "TableDefinition":
        """Queue a CREATE INDEX to run after the table is created."""
        self.post_processing.append(IndexDefinition(name, self.name, columns, **options).to_sql())
        return self

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _check_options(self) -> None:
        options = self.options
        if options.get("of_type"):
            if self.columns:
                raise InvalidTableOptions(
                    options["of_type"], message="Cannot specify columns while using the of_type option"
                )
            if self.like_options is not None or options.get("like"):
                raise InvalidTableOptions(
                    options["of_type"], message="Cannot specify both the like and of_type options"
                )
            if options.get("inherits"):
                raise InvalidTableOptions(
                    options["of_type"], message="Cannot specify both the inherits and of_type options"
                )

        if "if_not_exists" in options:
            self.features.check("create_table_if_not_exists")
        if "unlogged" in options:
            self.features.check("create_table_unlogged")

    def _primary_key_column(self) -> Optional[sql.Composed]:
        if self.options.get("id") is False or self.options.get("of_type"):
            return None
        ddl = get_defaults().ddl
        name = self.options.get("primary_key") or ddl.primary_key
        return sql.SQL("{} {}").format(quote_column_name(name), sql.SQL(ddl.primary_key_type))

    def to_sql(self) -> sql.Composed:
        self._check_options()
        options = self.options

        parts = [
            sql.SQL("CREATE "),
            sql.SQL("TEMPORARY ") if options.get("temporary") else None,
            sql.SQL("UNLOGGED ") if options.get("unlogged") else None,
            sql.SQL("TABLE "),
            sql.SQL("IF NOT EXISTS ") if options.get("if_not_exists") else None,
            quote_table_name(self.name),
        ]
        if options.get("of_type"):
            parts.append(sql.SQL(" OF {}").format(quote_table_name(options["of_type"])))

        items = [self._primary_key_column()]
        items.extend(c.to_sql() for c in self.columns)
        if self.like_options is not None:
            items.append(self.like_options.to_sql())
        items.extend(c.to_sql() for c in self.table_constraints)
        items = [i for i in items if i is not None]

        if items:
            parts.append(sql.SQL(" (\n  {}\n)").format(sql.SQL(",\n  ").join(items)))

        if options.get("inherits"):
            parts.append(sql.SQL("\nINHERITS ({})").format(quote_table_names(options["inherits"])))
        if options.get("storage_parameters"):
            parts.append(sql.SQL("\nWITH ({})").format(
                options_from_mapping_or_string(options["storage_parameters"])
            ))
        if options.get("on_commit"):
            parts.append(sql.SQL("\nON COMMIT {}").format(keyword(options["on_commit"])))
        if options.get("options"):
            parts.append(sql.SQL("\n{}").format(sql.SQL(str(options["options"]))))
        if options.get("tablespace"):
            parts.append(sql.SQL("\nTABLESPACE {}").format(quote_tablespace(options["tablespace"])))

        return terminate(compose(parts))

    def statements(self) -> List[sql.Composed]:
        """Optional force-drop, the CREATE, then post-processing statements."""
        stmts = []
        if self.options.get("force"):
            stmts.append(TableBuilder.drop(
                self.name, if_exists=True, cascade=bool(self.options.get("cascade_drop"))
            ))
        stmts.append(self.to_sql())
        stmts.extend(self.post_processing)
        logger.debug(
            f"Table {self.name}: {len(self.columns)} columns, "
            f"{len(self.table_constraints)} constraints, {len(self.post_processing)} post-processing"
        )
        return stmts


# ============================================================================
# ALTER / DROP STATEMENTS
# ============================================================================

class TableBuilder:
    """
    Statements on existing tables.

    All methods are static and return sql.Composed objects (or lists of
    them where one call produces several statements).
    """

    @staticmethod
    def drop(*names: Any, if_exists: bool = False, cascade: bool = False) -> sql.Composed:
        names = [n for name in names for n in as_list(name)]
        return CommonDDL.drop("TABLE", names, quote_table_name, if_exists=if_exists, cascade=cascade)

    @staticmethod
    def rename(name: Name, new_name: Name) -> sql.Composed:
        return CommonDDL.rename("TABLE", name, new_name, quote_table_name)

    @staticmethod
    def set_schema(name: Name, schema: str) -> sql.Composed:
        return CommonDDL.set_schema("TABLE", name, schema, quote_table_name)

    @staticmethod
    def add_column(
        table: Name,
        column: str,
        sql_type: str,
        default: Any = None,
        null: Optional[bool] = None,
    ) -> sql.Composed:
        return terminate(sql.SQL("ALTER TABLE {} ADD COLUMN {}").format(
            quote_table_name(table),
            ColumnDefinition(column, sql_type, default=default, null=null).to_sql(),
        ))

    @staticmethod
    def change_column_default(table: Name, column: str, default: Any) -> sql.Composed:
        head = sql.SQL("ALTER TABLE {} ALTER COLUMN {}").format(
            quote_table_name(table), quote_column_name(column)
        )
        if default is None:
            return terminate(head + sql.SQL(" DROP DEFAULT"))
        return terminate(head + sql.SQL(" SET DEFAULT {}").format(quote_value(default)))

    @staticmethod
    def change_column_null(
        table: Name,
        column: str,
        null: bool,
        default: Any = None,
    ) -> List[sql.Composed]:
        stmts = []
        if not null and default is not None:
            stmts.append(sql.SQL("UPDATE {table} SET {column} = {value} WHERE {column} IS NULL;").format(
                table=quote_table_name(table),
                column=quote_column_name(column),
                value=quote_value(default),
            ))
        stmts.append(sql.SQL("ALTER TABLE {} ALTER COLUMN {} {} NOT NULL;").format(
            quote_table_name(table),
            quote_column_name(column),
            sql.SQL("DROP" if null else "SET"),
        ))
        return stmts

    @staticmethod
    def change_column(
        table: Name,
        column: str,
        sql_type: str,
        default: Any = None,
        null: Optional[bool] = None,
    ) -> List[sql.Composed]:
        stmts = [sql.SQL("ALTER TABLE {} ALTER COLUMN {} TYPE {};").format(
            quote_table_name(table), quote_column_name(column), sql.SQL(str(sql_type))
        )]
        if default is not None:
            stmts.append(TableBuilder.change_column_default(table, column, default))
        if null is not None:
            stmts.extend(TableBuilder.change_column_null(table, column, null, default))
        return stmts

    @staticmethod
    def set_triggers(table: Name, enable: bool, *triggers: str) -> List[sql.Composed]:
        """One ENABLE/DISABLE TRIGGER statement per trigger, or TRIGGER ALL."""
        action = sql.SQL("ENABLE" if enable else "DISABLE")
        targets = [quote_generic(t) for t in triggers] or [sql.SQL("ALL")]
        return [
            sql.SQL("ALTER TABLE {} {} TRIGGER {};").format(quote_table_name(table), action, t)
            for t in targets
        ]

    @staticmethod
    def cluster(
        table: Optional[Name] = None,
        using: Optional[str] = None,
        verbose: bool = False,
    ) -> sql.Composed:
        if table is None:
            return sql.SQL("CLUSTER VERBOSE;" if verbose else "CLUSTER;")
        parts = [
            sql.SQL("CLUSTER "),
            sql.SQL("VERBOSE ") if verbose else None,
            quote_table_name(table),
        ]
        if using:
            parts.append(sql.SQL(" USING {}").format(quote_generic(using)))
        return terminate(compose(parts))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "LIKE_TYPES",
    "ON_COMMIT_VALUES",
    "LikeOptions",
    "TableDefinition",
    "TableBuilder",
]
