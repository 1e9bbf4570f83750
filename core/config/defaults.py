# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Server versions, connection settings and DDL rendering defaults
# ============================================================================
"""
Configuration Defaults

Provides defaults for feature detection, database connectivity and DDL
rendering. All values can be overridden via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class ServerDefaults:
    """
    Assumed server capabilities.

    Used to gate version-specific DDL when no live server has been
    sniffed (dry runs, offline rendering).
    """
    server_version: str = "16.0"
    postgis_version: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ServerDefaults":
        """Create from environment variables."""
        return cls(
            server_version=os.getenv("POSTGRES_SERVER_VERSION", "16.0"),
            postgis_version=os.getenv("POSTGIS_VERSION") or None,
        )


@dataclass(frozen=True)
class ConnectionDefaults:
    """
    Database connection settings.

    DATABASE_URL wins over the individual POSTGRES_* components.
    """
    database_url: Optional[str] = None
    host: str = "localhost"
    port: str = "5432"
    database: str = "postgres"
    user: str = "postgres"
    password: str = ""
    sslmode: str = "prefer"

    # Pool sizing
    pool_min_size: int = 1
    pool_max_size: int = 5

    @property
    def conninfo(self) -> str:
        """Connection string for psycopg."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}"
            f"/{self.database}?sslmode={self.sslmode}"
        )

    @property
    def safe_conninfo(self) -> str:
        """Connection target with credentials stripped, for logging."""
        return self.conninfo.split("@")[-1]

    @classmethod
    def from_env(cls) -> "ConnectionDefaults":
        """Create from environment variables."""
        return cls(
            database_url=os.getenv("DATABASE_URL") or None,
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=os.getenv("POSTGRES_PORT", "5432"),
            database=os.getenv("POSTGRES_DB", "postgres"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", ""),
            sslmode=os.getenv("POSTGRES_SSLMODE", "prefer"),
            pool_min_size=int(os.getenv("POSTGRES_POOL_MIN_SIZE", 1)),
            pool_max_size=int(os.getenv("POSTGRES_POOL_MAX_SIZE", 5)),
        )


@dataclass(frozen=True)
class DDLDefaults:
    """
    Defaults for statement rendering.

    Controls the implicit primary key of CREATE TABLE, function body
    quoting and COPY streaming.
    """
    primary_key: str = "id"
    primary_key_type: str = "serial primary key"
    function_delimiter: str = "$$"
    copy_block_size: int = 64 * 1024  # bytes per COPY write

    @classmethod
    def from_env(cls) -> "DDLDefaults":
        """Create from environment variables."""
        return cls(
            function_delimiter=os.getenv("DDL_FUNCTION_DELIMITER", "$$"),
            copy_block_size=int(os.getenv("DDL_COPY_BLOCK_SIZE", 64 * 1024)),
        )


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    server: ServerDefaults = field(default_factory=ServerDefaults)
    connection: ConnectionDefaults = field(default_factory=ConnectionDefaults)
    ddl: DDLDefaults = field(default_factory=DDLDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            server=ServerDefaults.from_env(),
            connection=ConnectionDefaults.from_env(),
            ddl=DDLDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ServerDefaults",
    "ConnectionDefaults",
    "DDLDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
