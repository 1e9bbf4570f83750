# ============================================================================
# ROLE BUILDERS
# ============================================================================
# STATUS: Core - CREATE/ALTER/DROP/SET ROLE statements
# PURPOSE: Role attributes, membership clauses and session role switching
# ============================================================================
"""
Role Builders.

Usage:
    from core.ddl.roles import RoleDefinition, RoleBuilder

    RoleDefinition("create", "jdoe", login=True, password="secret")
    # CREATE ROLE "jdoe" LOGIN PASSWORD 'secret';

    RoleBuilder.set_role("admin", duration="local")
    # SET LOCAL ROLE "admin";
"""

from datetime import date, datetime
from typing import Any, Optional

from psycopg import sql

from core.ddl.ddl_utils import CommonDDL, assert_valid_option, join_words, number, quoted_list
from core.errors import InvalidRoleAction, InvalidRoleDuration
from core.quoting import as_list, quote_role


ROLE_ACTIONS = ("create", "alter")
ROLE_DURATIONS = ("session", "local")


def _timestamp(value: Any) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class RoleDefinition:
    """
    CREATE ROLE / ALTER ROLE builder.

    Options:
        superuser, create_db, create_role, login: Boolean attributes
        inherit: False renders NOINHERIT
        connection_limit: Integer limit
        password: Role password
        encrypted_password: True for ENCRYPTED, False for UNENCRYPTED
        valid_until: Date, datetime or string
        in_role, role, admin: Role names
    """

    def __init__(self, action: str, name: Any, **options: Any):
        self.action = assert_valid_option(action, ROLE_ACTIONS, InvalidRoleAction)
        self.name = name
        self.options = options

    def to_sql(self) -> sql.Composed:
        options = self.options
        parts = [sql.SQL("{} ROLE {}").format(sql.SQL(self.action.upper()), quote_role(self.name))]

        if options.get("superuser"):
            parts.append(sql.SQL("SUPERUSER"))
        if options.get("create_db"):
            parts.append(sql.SQL("CREATEDB"))
        if options.get("create_role"):
            parts.append(sql.SQL("CREATEROLE"))
        if "inherit" in options and not options["inherit"]:
            parts.append(sql.SQL("NOINHERIT"))
        if options.get("login"):
            parts.append(sql.SQL("LOGIN"))
        if options.get("connection_limit") is not None:
            parts.append(sql.SQL("CONNECTION LIMIT {}").format(number(int(options["connection_limit"]))))

        if options.get("password"):
            if "encrypted_password" in options:
                parts.append(sql.SQL("ENCRYPTED" if options["encrypted_password"] else "UNENCRYPTED"))
            parts.append(sql.SQL("PASSWORD {}").format(sql.Literal(str(options["password"]))))

        if options.get("valid_until"):
            parts.append(sql.SQL("VALID UNTIL {}").format(
                sql.Literal(_timestamp(options["valid_until"]))
            ))

        for key, clause in (("in_role", "IN ROLE"), ("role", "ROLE"), ("admin", "ADMIN")):
            if as_list(options.get(key)):
                parts.append(sql.SQL("{} {}").format(
                    sql.SQL(clause), quoted_list(options[key], quote_role)
                ))

        return join_words(parts) + sql.SQL(";")

    def __str__(self) -> str:
        return self.to_sql().as_string(None)


class RoleBuilder:
    """
    DROP ROLE and session role statements.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def drop(*names: Any, if_exists: bool = False) -> sql.Composed:
        names = [n for name in names for n in as_list(name)]
        return CommonDDL.drop("ROLE", names, quote_role, if_exists=if_exists)

    @staticmethod
    def set_role(role: Any, duration: Optional[str] = None) -> sql.Composed:
        """SET [SESSION |LOCAL ]ROLE role;"""
        prefix = None
        if duration:
            duration = assert_valid_option(duration, ROLE_DURATIONS, InvalidRoleDuration)
            prefix = sql.SQL(duration.upper())
        return join_words([sql.SQL("SET"), prefix, sql.SQL("ROLE {};").format(quote_role(role))])

    @staticmethod
    def reset_role() -> sql.SQL:
        return sql.SQL("RESET ROLE;")

    @staticmethod
    def current_role() -> sql.SQL:
        return sql.SQL("SELECT current_role;")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ROLE_ACTIONS",
    "ROLE_DURATIONS",
    "RoleDefinition",
    "RoleBuilder",
]
