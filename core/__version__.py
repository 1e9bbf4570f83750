# ============================================================================
# VERSION - POSTGRESQL DDL EXTENSIONS
# ============================================================================
"""
Version information for the PostgreSQL DDL extensions.

Single source of truth for the package version; pyproject.toml reads it.
"""
__version__ = "0.1.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))
