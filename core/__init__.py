# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export errors, feature gates, schema scoping and models
# ============================================================================

from core.__version__ import __version__
from core.errors import FeatureNotSupportedError, PostgreSQLExtensionsError
from core.features import Features
from core.models import ForeignKeyReference, PostGISVersion
from core.quoting import ignore_scoped_schema, with_schema

__all__ = [
    "__version__",
    # Errors
    "PostgreSQLExtensionsError",
    "FeatureNotSupportedError",
    # Features
    "Features",
    # Schema scoping
    "with_schema",
    "ignore_scoped_schema",
    # Models
    "ForeignKeyReference",
    "PostGISVersion",
]
