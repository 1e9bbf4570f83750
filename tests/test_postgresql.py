# ============================================================================
# POSTGRESQL REPOSITORY TESTS
# ============================================================================
# STATUS: Tests - Direct and pooled connection handling
# PURPOSE: Verify commit/rollback/close behavior without a live server
# ============================================================================
"""
PostgreSQL Repository Tests

Covers:
1. Direct connections: dict rows, commit after cursor use, close
2. Rollback and re-raise on driver errors
3. Pool borrowing
4. Global pool lifecycle and the shared repository

Run with:
    pytest tests/test_postgresql.py -v
"""

from unittest.mock import MagicMock, patch

import psycopg
import pytest
from psycopg.rows import dict_row

import infrastructure.postgresql as postgresql
from infrastructure.postgresql import (
    PostgreSQLRepository,
    close_pool,
    get_pool,
    get_postgres_repository,
    init_pool,
)


@pytest.fixture(autouse=True)
def no_global_pool():
    """Keep the module-level pool and repository out of other tests."""
    postgresql._pool = None
    postgresql._default_repo = None
    yield
    postgresql._pool = None
    postgresql._default_repo = None


# ============================================================================
# DIRECT CONNECTIONS
# ============================================================================

class TestDirectConnection:
    """One connection per use."""

    def test_cursor_commits_and_closes(self):
        with patch("infrastructure.postgresql.psycopg.connect") as connect:
            conn = connect.return_value
            repo = PostgreSQLRepository("postgresql://u:secret@db:5432/app")
            with repo.get_cursor() as cur:
                cur.execute("SELECT 1")

        connect.assert_called_once_with("postgresql://u:secret@db:5432/app", row_factory=dict_row)
        conn.commit.assert_called_once()
        conn.close.assert_called_once()

    def test_conn_string_from_defaults(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/app")
        assert PostgreSQLRepository().conn_string == "postgresql://u:p@db:5432/app"

    def test_driver_error_rolls_back(self):
        with patch("infrastructure.postgresql.psycopg.connect") as connect:
            conn = connect.return_value
            repo = PostgreSQLRepository("postgresql://u:secret@db:5432/app")
            with patch.object(postgresql, "logger") as logger:
                with pytest.raises(psycopg.OperationalError):
                    with repo.get_connection():
                        raise psycopg.OperationalError("server closed the connection")

        conn.rollback.assert_called_once()
        conn.close.assert_called_once()
        message = logger.error.call_args[0][0]
        assert "db:5432/app" in message
        assert "secret" not in message

    def test_fetch_all(self):
        with patch("infrastructure.postgresql.psycopg.connect") as connect:
            cur = connect.return_value.cursor.return_value.__enter__.return_value
            cur.fetchall.return_value = [{"rolname": "postgres"}]

            rows = PostgreSQLRepository("postgresql://db/app").fetch_all("SELECT rolname FROM pg_roles")

        assert rows == [{"rolname": "postgres"}]
        cur.execute.assert_called_once_with("SELECT rolname FROM pg_roles", None)

    def test_existing_connection_is_not_committed(self):
        conn = MagicMock()
        with PostgreSQLRepository("postgresql://db/app").get_cursor(conn) as cur:
            cur.execute("SELECT 1")

        conn.commit.assert_not_called()


# ============================================================================
# POOL
# ============================================================================

class TestPool:
    """psycopg_pool ConnectionPool handling."""

    def test_borrows_from_pool(self):
        pool = MagicMock()
        conn = pool.connection.return_value.__enter__.return_value

        with patch("infrastructure.postgresql.psycopg.connect") as connect:
            with PostgreSQLRepository(pool=pool).get_cursor() as cur:
                cur.execute("SELECT 1")

        connect.assert_not_called()
        assert conn.row_factory is dict_row
        conn.commit.assert_called_once()

    def test_init_pool_uses_defaults(self, monkeypatch):
        monkeypatch.setenv("POSTGRES_POOL_MAX_SIZE", "8")
        with patch("infrastructure.postgresql.ConnectionPool") as pool_class:
            pool = init_pool(connection_string="postgresql://db/app")

            assert init_pool() is pool
            assert get_pool() is pool
            pool_class.assert_called_once_with(
                conninfo="postgresql://db/app", min_size=1, max_size=8, open=False
            )
            pool.open.assert_called_once()

            close_pool()
            pool.close.assert_called_once()
            assert postgresql._pool is None

    def test_shared_repository_follows_pool(self):
        direct = get_postgres_repository()
        assert direct.pool is None
        assert get_postgres_repository() is direct

        with patch("infrastructure.postgresql.ConnectionPool"):
            pool = init_pool(connection_string="postgresql://db/app")
            pooled = get_postgres_repository()

        assert pooled is not direct
        assert pooled.pool is pool
