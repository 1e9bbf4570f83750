# ============================================================================
# POSTGRESQL EXTENSIONS ADAPTER TESTS
# ============================================================================
# STATUS: Tests - Dry-run recording, cursor sourcing, error logging
# PURPOSE: Verify PostgreSQLExtensions against mocked connections
# ============================================================================
"""
PostgreSQL Extensions Adapter Tests

Covers:
1. Dry-run mode records statements without touching a cursor
2. Cursor sourcing: explicit connection, explicit repository, shared repository
3. Driver errors are logged with the failing statement and re-raised
4. COPY FROM streaming in configured block sizes
5. Feature detection from server_version and postgis_full_version()
6. Catalog introspection helpers
7. Generated grant_/revoke_ and text search wrappers
8. Statement lists run on one connection in one transaction
9. SET ROLE and RESET ROLE need a bound connection

Run with:
    pytest tests/test_adapter.py -v
"""

from unittest.mock import MagicMock, patch

import psycopg
import pytest

from core.config import reset_defaults
from core.errors import FeatureNotSupportedError, SessionConnectionRequired
from core.features import Features
from core.models import ForeignKeyReference
from infrastructure.extensions import PostgreSQLExtensions


POSTGIS_BANNER = (
    'POSTGIS="2.1.0 r12050" GEOS="3.4.2-CAPI-1.8.2 r3921" '
    'PROJ="Rel. 4.8.0, 6 March 2012" LIBXML="2.9.1" USE_STATS'
)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def dry(modern):
    """Dry-run adapter on a modern server."""
    return PostgreSQLExtensions(features=modern, dry_run=True)


@pytest.fixture
def conn():
    return MagicMock()


@pytest.fixture
def cur(conn):
    """Cursor yielded by conn.cursor() as a context manager."""
    return conn.cursor.return_value.__enter__.return_value


@pytest.fixture
def live(conn, modern):
    return PostgreSQLExtensions(connection=conn, features=modern)


# ============================================================================
# DRY RUN
# ============================================================================

class TestDryRun:
    """Statements are recorded and logged, never executed."""

    def test_create_table_with_callback(self, dry):
        dry.create_table("foos", lambda t: t.string("name", null=False), id=False)

        assert dry.statements == [
            'CREATE TABLE "foos" (\n'
            '  "name" character varying NOT NULL\n'
            ");"
        ]

    def test_schema_scope(self, dry):
        with dry.with_schema("geo"):
            dry.create_view("v", "SELECT 1")
        dry.create_view("w", "SELECT 2")

        assert dry.statements == [
            'CREATE VIEW "geo"."v" AS SELECT 1;',
            'CREATE VIEW "w" AS SELECT 2;',
        ]

    def test_without_triggers(self, dry):
        with dry.without_triggers("foos"):
            dry.drop_table("bars")

        assert dry.statements == [
            'ALTER TABLE "foos" DISABLE TRIGGER ALL;',
            'DROP TABLE "bars";',
            'ALTER TABLE "foos" ENABLE TRIGGER ALL;',
        ]

    def test_without_triggers_reenables_on_error(self, dry):
        with pytest.raises(RuntimeError):
            with dry.without_triggers("foos", "audit"):
                raise RuntimeError("migration failed")

        assert dry.statements == [
            'ALTER TABLE "foos" DISABLE TRIGGER "audit";',
            'ALTER TABLE "foos" ENABLE TRIGGER "audit";',
        ]

    def test_generated_privilege_wrappers(self, dry):
        dry.grant_table_privileges("foo", "select", "nobody")
        dry.revoke_schema_privileges("geo", "usage", "public")

        assert dry.statements == [
            'GRANT SELECT ON TABLE "foo" TO "nobody";',
            'REVOKE USAGE ON SCHEMA "geo" FROM PUBLIC;',
        ]

    def test_generated_text_search_wrappers(self, dry):
        dry.drop_text_search_dictionary("foo", if_exists=True)

        assert dry.statements == ['DROP TEXT SEARCH DICTIONARY IF EXISTS "foo";']
        assert hasattr(dry, "alter_text_search_configuration_owner")
        assert not hasattr(dry, "alter_text_search_template_owner")
        assert not hasattr(dry, "alter_text_search_parser_owner")

    def test_create_user_logs_in(self, dry):
        dry.create_user("jdoe")
        dry.create_user("batch", login=False)

        assert dry.statements == [
            'CREATE ROLE "jdoe" LOGIN;',
            'CREATE ROLE "batch";',
        ]

    def test_empty_alterers_emit_nothing(self, dry):
        dry.alter_function("foo", "integer")
        dry.alter_extension("hstore")
        dry.alter_extension("hstore", lambda e: e.add_table("foo"))

        assert dry.statements == ['ALTER EXTENSION "hstore" ADD TABLE "foo";']

    def test_feature_gate(self, legacy):
        pg = PostgreSQLExtensions(features=legacy, dry_run=True)

        with pytest.raises(FeatureNotSupportedError):
            pg.refresh_materialized_view("foos_mv")
        assert pg.statements == []

    def test_queries_return_nothing(self, dry):
        assert dry.views() == []
        assert dry.role_exists("postgres") is False
        assert dry.current_role() is None
        assert len(dry.statements) == 3

    def test_detect_features_keeps_current(self, dry, modern):
        assert dry.detect_features() == modern
        assert dry.statements == []

    def test_features_default_to_configuration(self, monkeypatch):
        monkeypatch.setenv("POSTGRES_SERVER_VERSION", "9.1")
        reset_defaults()

        pg = PostgreSQLExtensions(dry_run=True)
        assert pg.features == Features("9.1")


# ============================================================================
# EXECUTION
# ============================================================================

class TestExecution:
    """Statements run on the cursor they are given."""

    def test_explicit_connection(self, live, cur):
        live.drop_table("foos", cascade=True)

        cur.execute.assert_called_once()
        stmt = cur.execute.call_args[0][0]
        assert stmt.as_string(None) == 'DROP TABLE "foos" CASCADE;'
        assert live.statements == ['DROP TABLE "foos" CASCADE;']

    def test_statement_lists_run_in_order(self, live, cur):
        live.change_column("foos", "bar", "bigint", null=False)

        executed = [c[0][0].as_string(None) for c in cur.execute.call_args_list]
        assert executed == [
            'ALTER TABLE "foos" ALTER COLUMN "bar" TYPE bigint;',
            'ALTER TABLE "foos" ALTER COLUMN "bar" SET NOT NULL;',
        ]

    def test_explicit_repository(self, modern):
        repository = MagicMock()
        repo_conn = repository.get_connection.return_value.__enter__.return_value
        repo_cur = repo_conn.cursor.return_value.__enter__.return_value

        pg = PostgreSQLExtensions(repository=repository, features=modern)
        pg.create_schema("geo")

        repository.get_connection.assert_called_once_with()
        repo_conn.transaction.assert_called_once_with()
        assert repo_cur.execute.call_args[0][0].as_string(None) == 'CREATE SCHEMA "geo";'

    def test_shared_repository(self, modern):
        with patch("infrastructure.extensions.get_postgres_repository") as get_repo:
            repo_conn = get_repo.return_value.get_connection.return_value.__enter__.return_value
            repo_cur = repo_conn.cursor.return_value.__enter__.return_value
            pg = PostgreSQLExtensions(features=modern)
            pg.drop_role("jdoe")

        get_repo.assert_called_once_with()
        assert repo_cur.execute.call_args[0][0].as_string(None) == 'DROP ROLE "jdoe";'

    def test_statement_list_uses_one_connection(self, modern):
        repository = MagicMock()
        repo_conn = repository.get_connection.return_value.__enter__.return_value
        repo_cur = repo_conn.cursor.return_value.__enter__.return_value

        pg = PostgreSQLExtensions(repository=repository, features=modern)
        pg.create_table(
            "foos",
            lambda t: (t.string("name"), t.index("foos_name_idx", "name")),
            id=False,
            force=True,
        )

        repository.get_connection.assert_called_once_with()
        repo_conn.transaction.assert_called_once_with()
        executed = [c[0][0].as_string(None) for c in repo_cur.execute.call_args_list]
        assert executed == pg.statements
        assert len(executed) == 3

    def test_failed_statement_rolls_back_the_list(self, live, conn, cur):
        cur.execute.side_effect = [None, psycopg.OperationalError("boom")]
        live.logger = MagicMock()

        with pytest.raises(psycopg.OperationalError):
            live.change_column("foos", "bar", "bigint", null=False)

        assert cur.execute.call_count == 2
        conn.transaction.assert_called_once_with()
        exc_type = conn.transaction.return_value.__exit__.call_args[0][0]
        assert exc_type is psycopg.OperationalError
        assert live.logger.error.call_args[1]["extra"]["statement"] == (
            'ALTER TABLE "foos" ALTER COLUMN "bar" SET NOT NULL;'
        )

    def test_driver_error_logged_and_raised(self, live, cur):
        cur.execute.side_effect = psycopg.OperationalError("boom")
        live.logger = MagicMock()

        with pytest.raises(psycopg.OperationalError):
            live.drop_schema("geo")

        live.logger.error.assert_called_once()
        message = live.logger.error.call_args[0][0]
        extra = live.logger.error.call_args[1]["extra"]
        assert message == "execute failed: boom"
        assert extra == {"statement": 'DROP SCHEMA "geo";', "error_type": "OperationalError"}

    def test_query_returns_rows(self, live, cur):
        cur.fetchall.return_value = [{"rolname": "postgres"}, {"rolname": "jdoe"}]

        assert live.roles() == ["postgres", "jdoe"]
        assert live.role_exists("jdoe")


class TestSessionRole:
    """SET ROLE only makes sense on a connection the caller holds."""

    def test_requires_bound_connection(self, modern):
        repository = MagicMock()
        pg = PostgreSQLExtensions(repository=repository, features=modern)

        with pytest.raises(SessionConnectionRequired):
            pg.set_role("jdoe")
        with pytest.raises(SessionConnectionRequired):
            pg.reset_role()

        repository.get_connection.assert_not_called()
        assert pg.statements == []

    def test_bound_connection(self, live, cur):
        live.set_role("jdoe", "local")
        live.reset_role()

        executed = [c[0][0].as_string(None) for c in cur.execute.call_args_list]
        assert executed == ['SET LOCAL ROLE "jdoe";', "RESET ROLE;"]

    def test_dry_run_records(self, dry):
        dry.set_role("jdoe")
        assert dry.statements == ['SET ROLE "jdoe";']


# ============================================================================
# COPY FROM
# ============================================================================

class TestCopyFrom:
    """Local files stream over COPY FROM STDIN."""

    def test_streams_in_blocks(self, live, cur, tmp_path, monkeypatch):
        monkeypatch.setenv("DDL_COPY_BLOCK_SIZE", "4")
        reset_defaults()
        path = tmp_path / "foos.csv"
        path.write_bytes(b"abcdefghij")

        live.copy_from("foos", str(path), csv=True)

        copy = cur.copy.return_value.__enter__.return_value
        assert [c[0][0] for c in copy.write.call_args_list] == [b"abcd", b"efgh", b"ij"]
        assert cur.copy.call_args[0][0].as_string(None) == 'COPY "foos" FROM STDIN CSV;'
        cur.execute.assert_not_called()

    def test_server_file_is_executed(self, live, cur):
        live.copy_from("foos", "/srv/foos.csv", local=False)

        assert cur.execute.call_args[0][0].as_string(None) == "COPY \"foos\" FROM '/srv/foos.csv';"
        cur.copy.assert_not_called()

    def test_dry_run_does_not_open_file(self, dry):
        dry.copy_from("foos", "/does/not/exist.csv")

        assert dry.statements == ['COPY "foos" FROM STDIN;']


# ============================================================================
# INTROSPECTION
# ============================================================================

class TestIntrospection:
    """Catalog lookups through the adapter."""

    def test_detect_features(self, conn, cur):
        cur.fetchall.side_effect = [
            [{"server_version": "9.3.4"}],
            [{"count": 1}],
            [{"version": POSTGIS_BANNER}],
        ]
        pg = PostgreSQLExtensions(connection=conn, features=Features("8.4"))

        features = pg.detect_features()

        assert features == Features("9.3.4", "2.1.0")
        assert pg.features is features
        assert features.supports("materialized_views")

    def test_detect_features_without_postgis(self, conn, cur):
        cur.fetchall.side_effect = [[("16.2",)], [(0,)]]
        pg = PostgreSQLExtensions(connection=conn)

        assert pg.detect_features() == Features("16.2")
        assert len(pg.statements) == 2

    def test_view_exists(self, live, cur):
        cur.fetchall.return_value = [{"count": 1}]
        assert live.view_exists("foos_view", schema="geo")

        cur.fetchall.return_value = [{"count": 0}]
        assert not live.view_exists("bars_view")

    def test_foreign_keys(self, live, cur):
        cur.fetchall.return_value = [("bars", "bar_id", "id")]

        assert live.foreign_keys("foos") == [
            ForeignKeyReference(table="bars", column="bar_id", referenced_column="id")
        ]

    def test_enum_values(self, live, cur):
        cur.fetchall.return_value = [{"value": "active"}, {"value": "retired"}]

        assert live.enum_values("status") == ["active", "retired"]
        assert live.statements == ['SELECT unnest(enum_range(NULL::"status")) AS value']
