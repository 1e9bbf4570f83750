# ============================================================================
# DDL MODULE
# ============================================================================
# STATUS: Core - Statement builders for every supported object kind
# PURPOSE: Export definition, alterer and builder classes
# ============================================================================

from core.ddl.columns import ColumnDefinition
from core.ddl.constraints import (
    CheckConstraint,
    Constraint,
    ConstraintBuilder,
    ExcludeConstraint,
    ForeignKeyConstraint,
    PrimaryKeyConstraint,
    UniqueConstraint,
)
from core.ddl.copy import CopyFromDefinition
from core.ddl.ddl_utils import CommonDDL
from core.ddl.event_triggers import EventTriggerBuilder, EventTriggerDefinition
from core.ddl.extensions import ExtensionAlterer, ExtensionBuilder
from core.ddl.functions import FunctionAlterer, FunctionBuilder, FunctionDefinition
from core.ddl.geometry import GeometryBuilder, GeometryColumnDefinition
from core.ddl.indexes import IndexBuilder, IndexDefinition
from core.ddl.languages import LanguageBuilder
from core.ddl.materialized_views import (
    MaterializedViewAlterer,
    MaterializedViewBuilder,
    MaterializedViewDefinition,
)
from core.ddl.permissions import GrantPrivilege, RevokePrivilege, RoleMembershipBuilder
from core.ddl.roles import RoleBuilder, RoleDefinition
from core.ddl.rules import RuleBuilder, RuleDefinition
from core.ddl.schemas import SchemaBuilder
from core.ddl.sequences import SequenceBuilder, SequenceDefinition
from core.ddl.tables import LikeOptions, TableBuilder, TableDefinition
from core.ddl.tablespaces import TablespaceBuilder
from core.ddl.text_search import TextSearchBuilder
from core.ddl.triggers import TriggerBuilder, TriggerDefinition
from core.ddl.types import TypeBuilder
from core.ddl.vacuum import VacuumDefinition
from core.ddl.views import ViewAlterer, ViewBuilder, ViewDefinition

__all__ = [
    # Tables and columns
    "ColumnDefinition",
    "LikeOptions",
    "TableDefinition",
    "TableBuilder",
    "GeometryColumnDefinition",
    "GeometryBuilder",
    # Constraints and indexes
    "Constraint",
    "CheckConstraint",
    "UniqueConstraint",
    "PrimaryKeyConstraint",
    "ForeignKeyConstraint",
    "ExcludeConstraint",
    "ConstraintBuilder",
    "IndexDefinition",
    "IndexBuilder",
    # Functions, views, rules, triggers
    "FunctionDefinition",
    "FunctionAlterer",
    "FunctionBuilder",
    "ViewDefinition",
    "ViewAlterer",
    "ViewBuilder",
    "MaterializedViewDefinition",
    "MaterializedViewAlterer",
    "MaterializedViewBuilder",
    "RuleDefinition",
    "RuleBuilder",
    "TriggerDefinition",
    "TriggerBuilder",
    "EventTriggerDefinition",
    "EventTriggerBuilder",
    # Roles and permissions
    "RoleDefinition",
    "RoleBuilder",
    "GrantPrivilege",
    "RevokePrivilege",
    "RoleMembershipBuilder",
    # Other objects
    "SchemaBuilder",
    "SequenceDefinition",
    "SequenceBuilder",
    "TablespaceBuilder",
    "ExtensionAlterer",
    "ExtensionBuilder",
    "LanguageBuilder",
    "TextSearchBuilder",
    "TypeBuilder",
    # Maintenance and bulk load
    "VacuumDefinition",
    "CopyFromDefinition",
    # Shared
    "CommonDDL",
]
