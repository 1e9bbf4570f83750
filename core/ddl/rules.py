# ============================================================================
# RULE BUILDERS
# ============================================================================
# STATUS: Core - CREATE/ALTER/DROP RULE statements
# PURPOSE: Query rewrite rules on tables and views
# ============================================================================
"""
Rule Builders.

Usage:
    from core.ddl.rules import RuleDefinition

    RuleDefinition("ignore_root", "update", "foos", "instead", "nothing",
                   conditions="user_id = 0")
    # CREATE RULE "ignore_root" AS ON UPDATE TO "foos" WHERE user_id = 0 DO INSTEAD NOTHING;
"""

from typing import Any, Optional

from psycopg import sql

from core.ddl.ddl_utils import assert_valid_option, compose
from core.errors import InvalidRuleAction, InvalidRuleEvent
from core.features import Features, resolve_features
from core.quoting import quote_generic_ignore_schema, quote_rule, quote_table_name


RULE_EVENTS = ("select", "insert", "update", "delete")
RULE_ACTIONS = ("instead", "also")


def _commands_sql(commands: Any) -> sql.Composable:
    if isinstance(commands, (list, tuple)):
        return sql.SQL("({})").format(sql.SQL("; ".join(str(c) for c in commands)))
    if str(commands).upper() == "NOTHING":
        return sql.SQL("NOTHING")
    return sql.SQL(str(commands))


class RuleDefinition:
    """
    CREATE [OR REPLACE ]RULE builder.

    commands may be "nothing", a list of statements, or a single raw
    statement.

    Options:
        force: CREATE OR REPLACE
        conditions: Raw WHERE condition
    """

    def __init__(self, name: Any, event: str, table: Any, action: str, commands: Any, **options: Any):
        self.event = assert_valid_option(event, RULE_EVENTS, InvalidRuleEvent)
        self.action = assert_valid_option(action, RULE_ACTIONS, InvalidRuleAction)
        self.name = name
        self.table = table
        self.commands = commands
        self.options = options

    def to_sql(self) -> sql.Composed:
        conditions = self.options.get("conditions")
        return compose([
            sql.SQL("CREATE "),
            sql.SQL("OR REPLACE ") if self.options.get("force") else None,
            sql.SQL("RULE {} AS ON {} TO {} ").format(
                quote_rule(self.name), sql.SQL(self.event.upper()), quote_table_name(self.table)
            ),
            sql.SQL("WHERE {} ").format(sql.SQL(str(conditions))) if conditions else None,
            sql.SQL("DO {} {};").format(sql.SQL(self.action.upper()), _commands_sql(self.commands)),
        ])


class RuleBuilder:
    """
    DROP and RENAME RULE.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def drop(name: Any, table: Any, if_exists: bool = False, cascade: bool = False) -> sql.Composed:
        return compose([
            sql.SQL("DROP RULE "),
            sql.SQL("IF EXISTS ") if if_exists else None,
            sql.SQL("{} ON {}").format(quote_rule(name), quote_table_name(table)),
            sql.SQL(" CASCADE") if cascade else None,
            sql.SQL(";"),
        ])

    @staticmethod
    def rename(name: Any, table: Any, new_name: Any, features: Optional[Features] = None) -> sql.Composed:
        resolve_features(features).check("rename_rule")
        return sql.SQL("ALTER RULE {} ON {} RENAME TO {};").format(
            quote_rule(name), quote_table_name(table), quote_generic_ignore_schema(new_name)
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "RULE_EVENTS",
    "RULE_ACTIONS",
    "RuleDefinition",
    "RuleBuilder",
]
