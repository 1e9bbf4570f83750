# ============================================================================
# TRIGGER BUILDERS
# ============================================================================
# STATUS: Core - CREATE/ALTER/DROP TRIGGER statements
# PURPOSE: Row and statement triggers on tables
# ============================================================================
"""
Trigger Builders.

Usage:
    from core.ddl.triggers import TriggerDefinition

    TriggerDefinition("foo", "before", "update", "bar", "do_it", for_each="row")
    # CREATE TRIGGER "foo" BEFORE UPDATE ON "bar" FOR EACH ROW EXECUTE PROCEDURE "do_it"();
"""

from typing import Any

from psycopg import sql

from core.ddl.ddl_utils import assert_valid_option, assert_valid_options, compose, keyword, quoted_list
from core.errors import InvalidTriggerCallType, InvalidTriggerEvent, InvalidTriggerForEach
from core.quoting import (
    as_list,
    quote_column_name,
    quote_function,
    quote_generic,
    quote_generic_ignore_schema,
    quote_table_name,
)


TRIGGER_CALL_TYPES = ("before", "after", "instead_of")
TRIGGER_EVENTS = ("insert", "update", "delete", "truncate")
TRIGGER_FOR_EACH = ("row", "statement")


class TriggerDefinition:
    """
    CREATE TRIGGER builder.

    Options:
        for_each: row or statement
        of: Column names for UPDATE OF
        args: Raw function arguments
        when: Raw WHEN condition
    """

    def __init__(self, name: Any, called: str, events: Any, table: Any, function: Any, **options: Any):
        self.called = assert_valid_option(called, TRIGGER_CALL_TYPES, InvalidTriggerCallType)
        self.events = assert_valid_options(events, TRIGGER_EVENTS, InvalidTriggerEvent)
        if options.get("for_each") is not None:
            options["for_each"] = assert_valid_option(
                options["for_each"], TRIGGER_FOR_EACH, InvalidTriggerForEach
            )
        self.name = name
        self.table = table
        self.function = function
        self.options = options

    def to_sql(self) -> sql.Composed:
        options = self.options
        return compose([
            sql.SQL("CREATE TRIGGER {} {} ").format(quote_generic(self.name), keyword(self.called)),
            sql.SQL(" OR ").join(keyword(e) for e in self.events),
            sql.SQL(" OF {}").format(quoted_list(options["of"], quote_column_name))
            if as_list(options.get("of")) else None,
            sql.SQL(" ON {}").format(quote_table_name(self.table)),
            sql.SQL(" FOR EACH {}").format(keyword(options["for_each"])) if options.get("for_each") else None,
            sql.SQL(" WHEN ({})").format(sql.SQL(str(options["when"]))) if options.get("when") else None,
            sql.SQL(" EXECUTE PROCEDURE {}({});").format(
                quote_function(self.function), sql.SQL(str(options.get("args") or ""))
            ),
        ])


class TriggerBuilder:
    """
    DROP and RENAME TRIGGER.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def drop(name: Any, table: Any, if_exists: bool = False, cascade: bool = False) -> sql.Composed:
        return compose([
            sql.SQL("DROP TRIGGER "),
            sql.SQL("IF EXISTS ") if if_exists else None,
            sql.SQL("{} ON {}").format(quote_generic(name), quote_table_name(table)),
            sql.SQL(" CASCADE") if cascade else None,
            sql.SQL(";"),
        ])

    @staticmethod
    def rename(name: Any, table: Any, new_name: Any) -> sql.Composed:
        return sql.SQL("ALTER TRIGGER {} ON {} RENAME TO {};").format(
            quote_generic(name), quote_table_name(table), quote_generic_ignore_schema(new_name)
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "TRIGGER_CALL_TYPES",
    "TRIGGER_EVENTS",
    "TRIGGER_FOR_EACH",
    "TriggerDefinition",
    "TriggerBuilder",
]
