# ============================================================================
# PERMISSION BUILDERS
# ============================================================================
# STATUS: Core - GRANT/REVOKE privileges and role membership
# PURPOSE: Per-object-type privilege validation and statement composition
# ============================================================================
"""
Permission Builders.

Privileges are validated against PRIVILEGE_TYPES for the object type;
"all" renders ALL. Roles go through quote_role, so "public" becomes the
PUBLIC keyword.

Usage:
    from core.ddl.permissions import GrantPrivilege, RevokePrivilege

    GrantPrivilege("table", "foo", ["select", "update"], "nobody")
    # GRANT SELECT, UPDATE ON TABLE "foo" TO "nobody";

    GrantPrivilege("table", None, "select", "nobody", all="public")
    # GRANT SELECT ON ALL TABLES IN SCHEMA PUBLIC TO "nobody";
"""

from typing import Any, Dict, Optional, Tuple

from psycopg import sql

from core.ddl.ddl_utils import Quoter, assert_valid_options, compose, quoted_list
from core.errors import InvalidPrivilegeTypes
from core.features import Features, resolve_features
from core.quoting import (
    quote_generic,
    quote_generic_ignore_schema,
    quote_role,
    quote_schema,
    quote_table_name,
    quote_view_name,
    raw,
)


TABLE_PRIVILEGES = ("select", "insert", "update", "delete", "truncate", "references", "trigger", "all")

PRIVILEGE_TYPES: Dict[str, Tuple[str, ...]] = {
    "table": TABLE_PRIVILEGES,
    "sequence": ("usage", "select", "update", "all"),
    "database": ("create", "connect", "temporary", "all"),
    "function": ("execute", "all"),
    "language": ("usage", "all"),
    "schema": ("create", "usage", "all"),
    "tablespace": ("create", "all"),
    "view": TABLE_PRIVILEGES,
    "materialized_view": TABLE_PRIVILEGES,
}

# (type keyword, object quoter); a None keyword omits it from ON.
OBJECT_RENDERING: Dict[str, Tuple[Optional[str], Quoter]] = {
    "table": ("TABLE", quote_table_name),
    "sequence": ("SEQUENCE", quote_table_name),
    "database": ("DATABASE", quote_generic),
    "function": ("FUNCTION", raw),
    "language": ("LANGUAGE", quote_generic),
    "schema": ("SCHEMA", quote_generic_ignore_schema),
    "tablespace": ("TABLESPACE", quote_generic),
    "view": (None, quote_view_name),
    "materialized_view": (None, quote_view_name),
}

MASS_PRIVILEGE_TYPES = {
    "table": "TABLES",
    "sequence": "SEQUENCES",
    "function": "FUNCTIONS",
}


class Privilege:
    """
    Shared state for GRANT and REVOKE.

    Args:
        object_type: A key of PRIVILEGE_TYPES
        objects: Object names (ignored when all= is given)
        privileges: Privilege names valid for the object type
        roles: Grantee or revokee roles
        features: Server features, for the ALL ... IN SCHEMA gate

    Options:
        all: Schema name; renders ON ALL <TYPE>S IN SCHEMA "s"
    """

    def __init__(
        self,
        object_type: str,
        objects: Any,
        privileges: Any,
        roles: Any,
        features: Optional[Features] = None,
        **options: Any,
    ):
        if object_type not in PRIVILEGE_TYPES:
            raise InvalidPrivilegeTypes(
                object_type, message=f"Invalid privilege object type - {object_type}"
            )
        try:
            self.privileges = assert_valid_options(
                privileges, PRIVILEGE_TYPES[object_type], InvalidPrivilegeTypes
            )
        except InvalidPrivilegeTypes as e:
            raise InvalidPrivilegeTypes(
                e.value, message=f"Invalid privileges for {object_type} - {e.value}"
            ) from None

        self.object_type = object_type
        self.objects = objects
        self.roles = roles
        self.features = resolve_features(features)
        self.options = options

    def _privileges_sql(self) -> sql.Composed:
        return sql.SQL(", ").join(sql.SQL(p.upper()) for p in self.privileges)

    def _on_sql(self) -> sql.Composed:
        schema = self.options.get("all")
        if schema:
            if self.object_type not in MASS_PRIVILEGE_TYPES:
                raise InvalidPrivilegeTypes(
                    self.object_type,
                    message=f"ALL ... IN SCHEMA is not available for {self.object_type}",
                )
            self.features.check("modify_mass_privileges")
            return sql.SQL("ON ALL {} IN SCHEMA {}").format(
                sql.SQL(MASS_PRIVILEGE_TYPES[self.object_type]), quote_schema(schema)
            )

        type_keyword, quote = OBJECT_RENDERING[self.object_type]
        return compose([
            sql.SQL("ON "),
            sql.SQL(type_keyword + " ") if type_keyword else None,
            quoted_list(self.objects, quote),
        ])

    def _roles_sql(self) -> sql.Composed:
        return quoted_list(self.roles, quote_role)

    def __str__(self) -> str:
        return self.to_sql().as_string(None)


class GrantPrivilege(Privilege):
    """GRANT PRIVS ON <TYPE> objects TO roles[ WITH GRANT OPTION];"""

    def to_sql(self) -> sql.Composed:
        return compose([
            sql.SQL("GRANT {} {} TO {}").format(
                self._privileges_sql(), self._on_sql(), self._roles_sql()
            ),
            sql.SQL(" WITH GRANT OPTION") if self.options.get("with_grant_option") else None,
            sql.SQL(";"),
        ])


class RevokePrivilege(Privilege):
    """REVOKE [GRANT OPTION FOR ]PRIVS ON <TYPE> objects FROM roles[ CASCADE];"""

    def to_sql(self) -> sql.Composed:
        return compose([
            sql.SQL("REVOKE "),
            sql.SQL("GRANT OPTION FOR ") if self.options.get("grant_option_for") else None,
            sql.SQL("{} {} FROM {}").format(
                self._privileges_sql(), self._on_sql(), self._roles_sql()
            ),
            sql.SQL(" CASCADE") if self.options.get("cascade") else None,
            sql.SQL(";"),
        ])


class RoleMembershipBuilder:
    """
    GRANT/REVOKE role membership.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def grant(roles: Any, role_names: Any, with_admin_option: bool = False) -> sql.Composed:
        return compose([
            sql.SQL("GRANT {} TO {}").format(
                quoted_list(roles, quote_role), quoted_list(role_names, quote_role)
            ),
            sql.SQL(" WITH ADMIN OPTION") if with_admin_option else None,
            sql.SQL(";"),
        ])

    @staticmethod
    def revoke(
        roles: Any,
        role_names: Any,
        with_admin_option: bool = False,
        cascade: bool = False,
    ) -> sql.Composed:
        return compose([
            sql.SQL("REVOKE "),
            sql.SQL("ADMIN OPTION FOR ") if with_admin_option else None,
            sql.SQL("{} FROM {}").format(
                quoted_list(roles, quote_role), quoted_list(role_names, quote_role)
            ),
            sql.SQL(" CASCADE") if cascade else None,
            sql.SQL(";"),
        ])


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "PRIVILEGE_TYPES",
    "Privilege",
    "GrantPrivilege",
    "RevokePrivilege",
    "RoleMembershipBuilder",
]
