# ============================================================================
# DDL ERRORS
# ============================================================================
# STATUS: Core - Exception hierarchy for statement builders
# PURPOSE: Typed validation errors raised before any SQL is sent
# ============================================================================
"""
DDL Errors

Every builder validates its options against static lookup tables before
composing SQL. A failed check raises one of the exceptions below.

All validation errors derive from PostgreSQLExtensionsError, which is a
ValueError, so callers that only care about "bad input" can catch that.
"""

from typing import Any, Optional


class PostgreSQLExtensionsError(ValueError):
    """Base exception for invalid DDL builder input."""

    label = "option"

    def __init__(
        self,
        value: Any = None,
        message: Optional[str] = None,
        field: Optional[str] = None,
    ):
        self.value = value
        self.field = field or self.label
        super().__init__(message or f"Invalid {self.label} - {value}")


class FeatureNotSupportedError(PostgreSQLExtensionsError):
    """Raised when the server is too old for a requested feature."""

    label = "feature"

    def __init__(self, feature: str, server_version: Optional[str] = None):
        self.feature = feature
        self.server_version = server_version
        super().__init__(
            feature,
            message=(
                f'The feature "{feature}" is not supported by server. '
                f"(Server version {server_version}.)"
            ),
        )


# ============================================================================
# CONSTRAINTS / TABLES / INDEXES
# ============================================================================

class InvalidForeignKeyAction(PostgreSQLExtensionsError):
    label = "foreign key action"


class InvalidMatchType(PostgreSQLExtensionsError):
    label = "MATCH type"


class InvalidDeferrableOption(PostgreSQLExtensionsError):
    label = "deferrable option"


class InvalidExcludeConstraint(PostgreSQLExtensionsError):
    label = "exclude constraint"


class InvalidLikeTypes(PostgreSQLExtensionsError):
    label = "LIKE type(s)"


class InvalidTableOptions(PostgreSQLExtensionsError):
    label = "table options"


class InvalidIndexColumnDefinition(PostgreSQLExtensionsError):
    label = "index column definition"


class InvalidIndexFillFactor(PostgreSQLExtensionsError):
    label = "index fill factor"


class InvalidIndexOptions(PostgreSQLExtensionsError):
    label = "index options"


# ============================================================================
# FUNCTIONS / VIEWS
# ============================================================================

class InvalidFunctionBehavior(PostgreSQLExtensionsError):
    label = "function behavior"


class InvalidFunctionOnNullInputType(PostgreSQLExtensionsError):
    label = "function ON NULL INPUT type"


class InvalidFunctionSecurityType(PostgreSQLExtensionsError):
    label = "function SECURITY type"


class InvalidFunctionAction(PostgreSQLExtensionsError):
    label = "function action"


class InvalidMaterializedViewOptions(PostgreSQLExtensionsError):
    label = "materialized view options"


# ============================================================================
# ROLES / PERMISSIONS / TABLESPACES
# ============================================================================

class InvalidRoleAction(PostgreSQLExtensionsError):
    label = "role action"


class InvalidRoleDuration(PostgreSQLExtensionsError):
    label = "role duration"


class InvalidPrivilegeTypes(PostgreSQLExtensionsError):
    label = "privilege type(s)"


class InvalidTablespaceParameter(PostgreSQLExtensionsError):
    label = "tablespace parameter"


class SessionConnectionRequired(PostgreSQLExtensionsError):
    """Session settings such as SET ROLE need a connection the caller keeps."""

    label = "connection"


# ============================================================================
# SEQUENCES / RULES / TRIGGERS / TYPES
# ============================================================================

class InvalidSequenceAction(PostgreSQLExtensionsError):
    label = "sequence action"


class InvalidSequenceOptions(PostgreSQLExtensionsError):
    label = "sequence options"


class InvalidRuleEvent(PostgreSQLExtensionsError):
    label = "rule event"


class InvalidRuleAction(PostgreSQLExtensionsError):
    label = "rule action"


class InvalidTriggerCallType(PostgreSQLExtensionsError):
    label = "trigger call type"


class InvalidTriggerEvent(PostgreSQLExtensionsError):
    label = "trigger event(s)"


class InvalidTriggerForEach(PostgreSQLExtensionsError):
    label = "trigger FOR EACH type"


class InvalidEventTriggerEventType(PostgreSQLExtensionsError):
    label = "event trigger event type"


class InvalidAddEnumValueOptions(PostgreSQLExtensionsError):
    label = "ADD VALUE options"


# ============================================================================
# POSTGIS / COPY
# ============================================================================

class InvalidGeometryType(PostgreSQLExtensionsError):
    label = "PostGIS geometry type"


class InvalidSpatialColumnType(PostgreSQLExtensionsError):
    label = "PostGIS spatial column type"


class InvalidGeometryDimensions(PostgreSQLExtensionsError):
    label = "PostGIS geometry dimensions"


class InvalidCopyFromOptions(PostgreSQLExtensionsError):
    label = "COPY FROM options"


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "PostgreSQLExtensionsError",
    "FeatureNotSupportedError",
    "InvalidForeignKeyAction",
    "InvalidMatchType",
    "InvalidDeferrableOption",
    "InvalidExcludeConstraint",
    "InvalidLikeTypes",
    "InvalidTableOptions",
    "InvalidIndexColumnDefinition",
    "InvalidIndexFillFactor",
    "InvalidIndexOptions",
    "InvalidFunctionBehavior",
    "InvalidFunctionOnNullInputType",
    "InvalidFunctionSecurityType",
    "InvalidFunctionAction",
    "InvalidMaterializedViewOptions",
    "InvalidRoleAction",
    "InvalidRoleDuration",
    "InvalidPrivilegeTypes",
    "InvalidTablespaceParameter",
    "SessionConnectionRequired",
    "InvalidSequenceAction",
    "InvalidSequenceOptions",
    "InvalidRuleEvent",
    "InvalidRuleAction",
    "InvalidTriggerCallType",
    "InvalidTriggerEvent",
    "InvalidTriggerForEach",
    "InvalidEventTriggerEventType",
    "InvalidAddEnumValueOptions",
    "InvalidGeometryType",
    "InvalidSpatialColumnType",
    "InvalidGeometryDimensions",
    "InvalidCopyFromOptions",
]
