# ============================================================================
# EVENT TRIGGER BUILDERS
# ============================================================================
# STATUS: Core - CREATE/ALTER/DROP EVENT TRIGGER statements
# PURPOSE: DDL event triggers with WHEN filters
# ============================================================================
"""
Event Trigger Builders.

Every statement here needs PostgreSQL 9.3 or later.

Usage:
    from core.ddl.event_triggers import EventTriggerDefinition

    EventTriggerDefinition("foo", "ddl_command_start", "bar",
                           when={"tag": "CREATE TABLE"})
    # CREATE EVENT TRIGGER "foo" ON "ddl_command_start"
    #   WHEN "tag" IN ('CREATE TABLE')
    #   EXECUTE PROCEDURE "bar"();
"""

from typing import Any, Mapping, Optional

from psycopg import sql

from core.ddl.ddl_utils import CommonDDL, assert_valid_option, compose, literals
from core.errors import InvalidEventTriggerEventType
from core.features import Features, resolve_features
from core.quoting import quote_function, quote_generic


EVENT_TRIGGER_EVENTS = ("ddl_command_start", "ddl_command_end", "sql_drop", "table_rewrite")


class EventTriggerDefinition:
    """
    CREATE EVENT TRIGGER builder.

    Options:
        when: Mapping of filter variable to value(s), ANDed together
    """

    def __init__(
        self,
        name: Any,
        event: str,
        function: Any,
        features: Optional[Features] = None,
        **options: Any,
    ):
        resolve_features(features).check("event_triggers")
        self.event = assert_valid_option(event, EVENT_TRIGGER_EVENTS, InvalidEventTriggerEventType)
        self.name = name
        self.function = function
        self.options = options

    def to_sql(self) -> sql.Composed:
        when: Mapping[str, Any] = self.options.get("when") or {}
        parts = [sql.SQL("CREATE EVENT TRIGGER {} ON {}").format(
            quote_generic(self.name), quote_generic(self.event)
        )]
        if when:
            filters = sql.SQL("\n  AND ").join(
                sql.SQL("{} IN ({})").format(quote_generic(k), literals(v))
                for k, v in when.items()
            )
            parts.append(sql.SQL("\n  WHEN {}\n ").format(filters))
        parts.append(sql.SQL(" EXECUTE PROCEDURE {}();").format(quote_function(self.function)))
        return compose(parts)


class EventTriggerBuilder:
    """
    DROP/ALTER EVENT TRIGGER.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def drop(name: Any, if_exists: bool = False, cascade: bool = False) -> sql.Composed:
        return CommonDDL.drop("EVENT TRIGGER", name, quote_generic, if_exists=if_exists, cascade=cascade)

    @staticmethod
    def rename(name: Any, new_name: Any) -> sql.Composed:
        return CommonDDL.rename("EVENT TRIGGER", name, new_name)

    @staticmethod
    def owner_to(name: Any, role: Any) -> sql.Composed:
        return CommonDDL.owner_to("EVENT TRIGGER", name, role)

    @staticmethod
    def enable(name: Any, always: bool = False, replica: bool = False) -> sql.Composed:
        if always and replica:
            raise ValueError("Cannot use replica and always together when enabling an event trigger.")
        return compose([
            sql.SQL("ALTER EVENT TRIGGER {} ENABLE").format(quote_generic(name)),
            sql.SQL(" ALWAYS") if always else None,
            sql.SQL(" REPLICA") if replica else None,
            sql.SQL(";"),
        ])

    @staticmethod
    def disable(name: Any) -> sql.Composed:
        return sql.SQL("ALTER EVENT TRIGGER {} DISABLE;").format(quote_generic(name))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "EVENT_TRIGGER_EVENTS",
    "EventTriggerDefinition",
    "EventTriggerBuilder",
]
