# ============================================================================
# CONSTRAINT BUILDERS
# ============================================================================
# STATUS: Core - CHECK, UNIQUE, PRIMARY KEY, FOREIGN KEY and EXCLUDE clauses
# PURPOSE: Table constraint clauses for CREATE TABLE and ALTER TABLE ... ADD
# ============================================================================
"""
Constraint Builders.

Constraint objects render a bare clause (no trailing semicolon) so the same
object can be placed inside a CREATE TABLE body or appended to
ALTER TABLE ... ADD.

Usage:
    from core.ddl.constraints import ForeignKeyConstraint, ConstraintBuilder

    fk = ForeignKeyConstraint("bar_id", "bar", on_delete="cascade")
    fk.to_sql().as_string(None)
    # FOREIGN KEY ("bar_id") REFERENCES "bar" ON DELETE CASCADE

    ConstraintBuilder.add("foo", fk).as_string(None)
    # ALTER TABLE "foo" ADD FOREIGN KEY ("bar_id") REFERENCES "bar" ON DELETE CASCADE;
"""

from typing import Any, Mapping, Optional

from psycopg import sql

from core.ddl.ddl_utils import (
    assert_valid_option,
    compose,
    keyword,
    options_from_mapping_or_string,
    quoted_list,
    terminate,
)
from core.errors import (
    InvalidDeferrableOption,
    InvalidExcludeConstraint,
    InvalidForeignKeyAction,
    InvalidMatchType,
)
from core.quoting import (
    current_scoped_schema,
    quote_column_name,
    quote_generic,
    quote_table_name,
    quote_tablespace,
    with_schema,
)


DEFERRABLE_TYPES = ("immediate", "deferred")
MATCH_TYPES = ("full", "simple")
ACTION_TYPES = ("no_action", "restrict", "cascade", "set_null", "set_default")


# ============================================================================
# BASE
# ============================================================================

class Constraint:
    """
    Base table constraint.

    Common options:
        name: Constraint name, rendered as CONSTRAINT "name"
        deferrable: True, False, "immediate" or "deferred"
        not_valid: Append NOT VALID (skip checking existing rows)
    """

    def __init__(self, **options: Any):
        self.options = options
        deferrable = options.get("deferrable")
        if deferrable is not None and not isinstance(deferrable, bool):
            options["deferrable"] = assert_valid_option(
                deferrable, DEFERRABLE_TYPES, InvalidDeferrableOption
            )

    def _constraint_name(self) -> Optional[sql.Composable]:
        if self.options.get("name"):
            return sql.SQL("CONSTRAINT {} ").format(quote_generic(self.options["name"]))
        return None

    def _deferrable(self) -> Optional[sql.Composable]:
        deferrable = self.options.get("deferrable")
        if deferrable is True:
            return sql.SQL(" DEFERRABLE")
        if deferrable is False:
            return sql.SQL(" NOT DEFERRABLE")
        if deferrable is None:
            return None
        return sql.SQL(" DEFERRABLE INITIALLY {}").format(keyword(deferrable))

    def _index_options(self) -> list:
        """WITH (...) and USING INDEX TABLESPACE, shared by index-backed constraints."""
        parts = []
        params = self.options.get("storage_parameters") or self.options.get("index_parameters")
        if params:
            parts.append(sql.SQL(" WITH ({})").format(options_from_mapping_or_string(params)))
        if self.options.get("tablespace"):
            parts.append(sql.SQL(" USING INDEX TABLESPACE {}").format(
                quote_tablespace(self.options["tablespace"])
            ))
        return parts

    def _body(self) -> sql.Composable:
        raise NotImplementedError

    def _suffix(self) -> list:
        parts = []
        if self.options.get("not_valid"):
            parts.append(sql.SQL(" NOT VALID"))
        return parts

    def to_sql(self) -> sql.Composed:
        return compose([self._constraint_name(), self._body(), *self._suffix()])

    def __str__(self) -> str:
        return self.to_sql().as_string(None)


# ============================================================================
# CONSTRAINT KINDS
# ============================================================================

class CheckConstraint(Constraint):
    """CHECK (expression), optionally NO INHERIT."""

    def __init__(self, expression: str, **options: Any):
        self.expression = expression
        super().__init__(**options)

    def _body(self) -> sql.Composable:
        return sql.SQL("CHECK ({})").format(sql.SQL(str(self.expression)))

    def _suffix(self) -> list:
        parts = super()._suffix()
        if self.options.get("no_inherit"):
            parts.append(sql.SQL(" NO INHERIT"))
        return parts


class UniqueConstraint(Constraint):
    """UNIQUE (columns) with optional index storage options."""

    clause = "UNIQUE"

    def __init__(self, columns: Any, **options: Any):
        self.columns = columns
        super().__init__(**options)

    def _body(self) -> sql.Composable:
        return compose([
            sql.SQL("{} ({})").format(
                sql.SQL(self.clause), quoted_list(self.columns, quote_column_name)
            ),
            *self._index_options(),
        ])


class PrimaryKeyConstraint(UniqueConstraint):
    """PRIMARY KEY (columns) with optional index storage options."""

    clause = "PRIMARY KEY"


class ForeignKeyConstraint(Constraint):
    """
    FOREIGN KEY (columns) REFERENCES table [(ref_columns)].

    Options:
        match: full or simple
        on_delete, on_update: no_action, restrict, cascade, set_null, set_default
        deferrable: see Constraint
    """

    def __init__(
        self,
        columns: Any,
        ref_table: Any,
        ref_columns: Any = None,
        **options: Any,
    ):
        if options.get("match"):
            assert_valid_option(options["match"], MATCH_TYPES, InvalidMatchType)
        for action in ("on_delete", "on_update"):
            if options.get(action):
                assert_valid_option(options[action], ACTION_TYPES, InvalidForeignKeyAction)

        self.columns = columns
        self.ref_table = ref_table
        self.ref_columns = ref_columns
        # Referenced table is resolved against the scope active at definition time
        self.schema = current_scoped_schema()
        super().__init__(**options)

    def _body(self) -> sql.Composable:
        with with_schema(self.schema):
            ref_table = quote_table_name(self.ref_table)

        parts = [
            sql.SQL("FOREIGN KEY ({}) REFERENCES {}").format(
                quoted_list(self.columns, quote_column_name), ref_table
            )
        ]
        if self.ref_columns:
            parts.append(sql.SQL(" ({})").format(
                quoted_list(self.ref_columns, quote_column_name)
            ))
        if self.options.get("match"):
            parts.append(sql.SQL(" MATCH {}").format(keyword(self.options["match"])))
        if self.options.get("on_delete"):
            parts.append(sql.SQL(" ON DELETE {}").format(keyword(self.options["on_delete"])))
        if self.options.get("on_update"):
            parts.append(sql.SQL(" ON UPDATE {}").format(keyword(self.options["on_update"])))
        parts.append(self._deferrable())
        return compose(parts)


class ExcludeConstraint(Constraint):
    """
    EXCLUDE [USING method] (element WITH operator, ...).

    Excludes are a mapping or a list of mappings with "element" and
    "with" (or "operator") keys.
    """

    def __init__(self, excludes: Any, **options: Any):
        if isinstance(excludes, Mapping):
            excludes = [excludes]
        elif isinstance(excludes, (list, tuple)):
            if any(not isinstance(e, Mapping) for e in excludes):
                raise InvalidExcludeConstraint(
                    excludes, message="Expected a list of mappings for excludes"
                )
            excludes = list(excludes)
        else:
            raise InvalidExcludeConstraint(
                excludes, message="Expected either a mapping or a list of mappings"
            )
        self.excludes = excludes
        super().__init__(**options)

    def _body(self) -> sql.Composable:
        parts = [sql.SQL("EXCLUDE")]
        if self.options.get("using"):
            parts.append(sql.SQL(" USING {}").format(quote_column_name(self.options["using"])))

        elements = sql.SQL(", ").join(
            sql.SQL("{} WITH {}").format(
                sql.SQL(str(e["element"])),
                sql.SQL(str(e.get("with") or e.get("operator"))),
            )
            for e in self.excludes
        )
        parts.append(sql.SQL(" ({})").format(elements))
        parts.extend(self._index_options())

        conditions = self.options.get("conditions") or self.options.get("where")
        if conditions:
            parts.append(sql.SQL(" WHERE ({})").format(sql.SQL(str(conditions))))
        return compose(parts)


# ============================================================================
# ALTER TABLE STATEMENTS
# ============================================================================

class ConstraintBuilder:
    """
    ALTER TABLE statements for constraints.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def add(table: Any, constraint: Constraint) -> sql.Composed:
        return terminate(sql.SQL("ALTER TABLE {} ADD {}").format(
            quote_table_name(table), constraint.to_sql()
        ))

    @staticmethod
    def drop(table: Any, name: str, cascade: bool = False) -> sql.Composed:
        stmt = sql.SQL("ALTER TABLE {} DROP CONSTRAINT {}").format(
            quote_table_name(table), quote_generic(name)
        )
        if cascade:
            stmt = stmt + sql.SQL(" CASCADE")
        return terminate(stmt)

    @staticmethod
    def validate(table: Any, name: str) -> sql.Composed:
        return terminate(sql.SQL("ALTER TABLE {} VALIDATE CONSTRAINT {}").format(
            quote_table_name(table), quote_generic(name)
        ))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DEFERRABLE_TYPES",
    "MATCH_TYPES",
    "ACTION_TYPES",
    "Constraint",
    "CheckConstraint",
    "UniqueConstraint",
    "PrimaryKeyConstraint",
    "ForeignKeyConstraint",
    "ExcludeConstraint",
    "ConstraintBuilder",
]
