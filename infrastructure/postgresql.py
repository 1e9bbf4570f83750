# ============================================================================
# POSTGRESQL CONNECTION INFRASTRUCTURE
# ============================================================================
# STATUS: Infrastructure - PostgreSQL connection handling
# PURPOSE: Direct and pooled connections with safe resource management
# ============================================================================
"""
PostgreSQL Connection Infrastructure

Provides database connectivity for the DDL adapter:
- Direct connections (one per statement batch)
- A process-wide psycopg_pool ConnectionPool
- Context managers for safe resource management

Connection settings come from core.config (DATABASE_URL, or the
individual POSTGRES_* variables).

Usage:
    from infrastructure.postgresql import PostgreSQLRepository, init_pool

    repo = PostgreSQLRepository()
    with repo.get_cursor() as cur:
        cur.execute("SELECT 1")

    pool = init_pool()
    pooled = PostgreSQLRepository(pool=pool)
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Optional

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from core.config import get_defaults

logger = logging.getLogger(__name__)


def _target(conninfo: str) -> str:
    """host:port/db part of a connection string, without credentials."""
    return conninfo.split("@")[-1]


# ============================================================================
# POSTGRESQL REPOSITORY BASE
# ============================================================================

class PostgreSQLRepository:
    """
    Base repository for PostgreSQL database operations.

    Borrows connections from a pool when one is given, otherwise opens
    a direct connection per use.

    Usage:
        repo = PostgreSQLRepository()
        with repo.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        pool: Optional[ConnectionPool] = None,
    ):
        """
        Initialize PostgreSQL repository.

        Args:
            connection_string: Optional explicit connection string
            pool: Optional connection pool to borrow from
        """
        self._conn_string = connection_string
        self._conn_string_lock = threading.Lock()
        self.pool = pool

    @property
    def conn_string(self) -> str:
        """Get or build connection string (lazy, thread-safe)."""
        if self._conn_string is None:
            with self._conn_string_lock:
                if self._conn_string is None:
                    self._conn_string = get_defaults().connection.conninfo
        return self._conn_string

    @contextmanager
    def get_connection(self):
        """
        Context manager for PostgreSQL connections.

        Yields:
            psycopg connection with dict_row factory
        """
        if self.pool is not None:
            with self.pool.connection() as conn:
                conn.row_factory = dict_row
                yield conn
            return

        conn = None
        try:
            conn = psycopg.connect(self.conn_string, row_factory=dict_row)
            logger.debug(f"Connected to {_target(self.conn_string)}")
            yield conn

        except psycopg.Error as e:
            logger.error(f"PostgreSQL error on {_target(self.conn_string)}: {e}")
            if conn:
                conn.rollback()
            raise

        finally:
            if conn:
                conn.close()

    @contextmanager
    def get_cursor(self, conn=None):
        """
        Context manager for PostgreSQL cursors.

        Args:
            conn: Optional existing connection (for transactions)

        Yields:
            psycopg cursor
        """
        if conn:
            # Use existing connection - caller controls transaction
            with conn.cursor() as cursor:
                yield cursor
        else:
            with self.get_connection() as conn:
                with conn.cursor() as cursor:
                    yield cursor
                    conn.commit()

    def execute(self, query: Any, params: tuple = None) -> None:
        """Execute a statement without returning results."""
        with self.get_cursor() as cur:
            cur.execute(query, params)

    def fetch_one(self, query: Any, params: tuple = None) -> Optional[Dict[str, Any]]:
        """Execute query and fetch one result."""
        with self.get_cursor() as cur:
            cur.execute(query, params)
            return cur.fetchone()

    def fetch_all(self, query: Any, params: tuple = None) -> list:
        """Execute query and fetch all results."""
        with self.get_cursor() as cur:
            cur.execute(query, params)
            return cur.fetchall()


# ============================================================================
# CONNECTION POOL
# ============================================================================

_pool: Optional[ConnectionPool] = None
_pool_lock = threading.Lock()


def init_pool(
    min_size: Optional[int] = None,
    max_size: Optional[int] = None,
    connection_string: Optional[str] = None,
) -> ConnectionPool:
    """
    Initialize the global connection pool.

    Args:
        min_size: Minimum connections to maintain
        max_size: Maximum connections allowed
        connection_string: Override connection string (defaults to config)

    Returns:
        ConnectionPool instance
    """
    global _pool

    with _pool_lock:
        if _pool is not None:
            logger.warning("Pool already initialized, returning existing pool")
            return _pool

        settings = get_defaults().connection
        conninfo = connection_string or settings.conninfo
        min_size = min_size if min_size is not None else settings.pool_min_size
        max_size = max_size if max_size is not None else settings.pool_max_size

        logger.info(f"Initializing connection pool: {_target(conninfo)}")
        _pool = ConnectionPool(
            conninfo=conninfo,
            min_size=min_size,
            max_size=max_size,
            open=False,
        )
        _pool.open()
        logger.info(f"Connection pool opened (min={min_size}, max={max_size})")

    return _pool


def get_pool() -> ConnectionPool:
    """Get the global connection pool, initializing if needed."""
    if _pool is None:
        return init_pool()
    return _pool


def close_pool() -> None:
    """Close the global connection pool."""
    global _pool

    with _pool_lock:
        if _pool is not None:
            _pool.close()
            _pool = None
            logger.info("Connection pool closed")


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

_default_repo: Optional[PostgreSQLRepository] = None
_repo_lock = threading.Lock()


def get_postgres_repository() -> PostgreSQLRepository:
    """
    Shared repository for adapters created without a connection.

    Borrows from the global pool once init_pool() has run; until then
    each use opens a direct connection.
    """
    global _default_repo
    with _repo_lock:
        if _default_repo is None or _default_repo.pool is not _pool:
            _default_repo = PostgreSQLRepository(pool=_pool)
    return _default_repo


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "PostgreSQLRepository",
    "get_postgres_repository",
    "init_pool",
    "get_pool",
    "close_pool",
]
