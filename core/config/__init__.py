# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for DDL rendering and
database connectivity.
"""

from core.config.defaults import (
    ServerDefaults,
    ConnectionDefaults,
    DDLDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "ServerDefaults",
    "ConnectionDefaults",
    "DDLDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
