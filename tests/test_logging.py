# ============================================================================
# STRUCTURED LOGGING TESTS
# ============================================================================
# STATUS: Tests - DDL context, formatters, statement logging
# PURPOSE: Verify that logged statements carry the operation that made them
# ============================================================================
"""
Structured Logging Tests

Covers:
1. log_context nesting, inheritance and tags
2. ContextLogger record fields
3. JSON and console formatters
4. configure_logging handler selection
5. log_statement levels for dry runs and executed statements

Run with:
    pytest tests/test_logging.py -v
"""

import json
import logging

import pytest

from core.logging import (
    ComponentType,
    ConsoleFormatter,
    JSONFormatter,
    configure_logging,
    current_log_context,
    get_logger,
    log_context,
    log_statement,
)


def make_record(message, **data):
    record = logging.LogRecord("ddl", logging.INFO, __file__, 1, message, None, None)
    record.extra = data
    return record


@pytest.fixture
def root_logger():
    """Drop handlers installed by configure_logging and restore the level."""
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, (ConsoleFormatter, JSONFormatter)):
            root.removeHandler(handler)
    root.setLevel(level)


# ============================================================================
# CONTEXT
# ============================================================================

class TestLogContext:
    """Thread-local DDL context."""

    def test_empty_outside_blocks(self):
        assert current_log_context().as_fields() == {}

    def test_nesting_inherits(self):
        with log_context(operation="create_table", object_name="foos"):
            with log_context(schema="geo", object_name=None, attempt=2):
                assert current_log_context().as_fields() == {
                    "operation": "create_table",
                    "object_name": "foos",
                    "schema": "geo",
                    "attempt": 2,
                }
            assert current_log_context().schema is None
        assert current_log_context().operation is None


class TestContextLogger:
    """Records carry context and component."""

    def test_fields_on_record(self, caplog):
        logger = get_logger("tests.logging", ComponentType.ADAPTER)

        with caplog.at_level(logging.INFO, logger="tests.logging"):
            with log_context(operation="drop_view", object_type="view"):
                logger.info("Dropping", extra={"object_type": "materialized_view"})

        record = caplog.records[0]
        assert record.extra == {
            "operation": "drop_view",
            "object_type": "materialized_view",
            "component": "adapter",
        }


# ============================================================================
# FORMATTERS
# ============================================================================

class TestFormatters:
    """JSON and console output."""

    def test_json(self):
        record = make_record("SQL: DROP TABLE foos;", statement="DROP TABLE foos;", operation="drop_table")
        entry = json.loads(JSONFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["message"] == "SQL: DROP TABLE foos;"
        assert entry["statement"] == "DROP TABLE foos;"
        assert entry["data"] == {"operation": "drop_table"}
        assert entry["timestamp"].endswith("Z")

    def test_console_context_labels(self):
        record = make_record("Created", operation="create_view", object_name="daily", schema="geo")
        line = ConsoleFormatter().format(record)

        assert "[op=create_view name=daily schema=geo]: Created" in line

    def test_console_statement_line(self):
        record = make_record("execute failed", statement="DROP SCHEMA geo;")
        assert ConsoleFormatter().format(record).endswith("\n    DROP SCHEMA geo;")

        record = make_record("SQL: DROP SCHEMA geo;", statement="DROP SCHEMA geo;")
        assert "\n" not in ConsoleFormatter().format(record)


class TestConfigureLogging:
    """Root handler installation."""

    def test_console_by_default(self, root_logger):
        handler = configure_logging("debug")

        assert root_logger.handlers == [handler]
        assert isinstance(handler.formatter, ConsoleFormatter)
        assert root_logger.level == logging.DEBUG

    def test_json_from_env(self, root_logger, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.setenv("LOG_LEVEL", "warning")

        handler = configure_logging()

        assert isinstance(handler.formatter, JSONFormatter)
        assert root_logger.level == logging.WARNING

    def test_unknown_level(self, root_logger):
        configure_logging("chatty")
        assert root_logger.level == logging.INFO


# ============================================================================
# STATEMENTS
# ============================================================================

class TestLogStatement:
    """Dry runs at INFO, executed statements at DEBUG."""

    def test_dry_run(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="ddl"):
            log_statement('DROP TABLE "foos";', dry_run=True)
            log_statement('DROP TABLE "bars";')

        assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
            (logging.INFO, '[DRY RUN] DROP TABLE "foos";'),
            (logging.DEBUG, 'SQL: DROP TABLE "bars";'),
        ]
        assert caplog.records[0].extra["dry_run"] is True
        assert caplog.records[0].extra["component"] == "ddl"
