# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Statement logging with DDL context
# PURPOSE: Every generated or executed statement is logged with the
#          operation and object it belongs to
# ============================================================================
"""
Structured Logging

Loggers here carry a thread-local DDL context (operation, object type,
object name, schema) so a statement logged deep inside the adapter can be
traced back to the call that produced it.

Output is either one JSON object per line (LOG_FORMAT=json) or a console
line followed by the SQL text.

Usage:
    from core.logging import configure_logging, get_logger, log_context

    configure_logging("DEBUG")
    logger = get_logger(__name__, ComponentType.ADAPTER)

    with log_context(operation="create_table", object_type="table", object_name="foos"):
        logger.info("Creating table", extra={"columns": 5})
"""

import json
import logging
import os
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union


class ComponentType(str, Enum):
    """Which layer emitted a record."""
    DDL = "ddl"
    ADAPTER = "adapter"


@dataclass(frozen=True)
class DDLContext:
    """What the current statement is about."""
    operation: Optional[str] = None
    object_type: Optional[str] = None
    object_name: Optional[str] = None
    schema: Optional[str] = None
    tags: Dict[str, Any] = field(default_factory=dict)

    def merged(self, **values: Any) -> "DDLContext":
        """Child context: known fields override, anything else becomes a tag."""
        known = {f.name for f in fields(self)} - {"tags"}
        updates = {k: v for k, v in values.items() if k in known}
        tags = {**self.tags, **{k: v for k, v in values.items() if k not in known}}
        return replace(self, tags=tags, **updates)

    def as_fields(self) -> Dict[str, Any]:
        result = {
            name: getattr(self, name)
            for name in ("operation", "object_type", "object_name", "schema")
            if getattr(self, name) is not None
        }
        result.update(self.tags)
        return result


_local = threading.local()


def _stack() -> list:
    if not hasattr(_local, "stack"):
        _local.stack = []
    return _local.stack


def current_log_context() -> DDLContext:
    stack = _stack()
    return stack[-1] if stack else DDLContext()


@contextmanager
def log_context(**values: Any):
    """
    Push DDL context for the duration of the block.

    Nested blocks inherit the outer context. Passing None for a field
    keeps the inherited value.

    Example:
        with log_context(operation="drop_view", object_name="daily"):
            logger.info("Dropping view")
    """
    values = {k: v for k, v in values.items() if v is not None}
    context = current_log_context().merged(**values)

    stack = _stack()
    stack.append(context)
    try:
        yield context
    finally:
        stack.pop()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return dict(getattr(record, "extra", None) or {})


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        data = _record_fields(record)
        entry: Dict[str, Any] = {
            "timestamp": _timestamp(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        statement = data.pop("statement", None)
        if statement is not None:
            entry["statement"] = statement
        if data:
            entry["data"] = data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Readable single-line output for terminals.

    Context fields are shown inline; a statement attached to the record
    is not repeated when the message already contains it.
    """

    LABELS = (
        ("operation", "op"),
        ("object_type", "type"),
        ("object_name", "name"),
        ("schema", "schema"),
        ("error_type", "error"),
    )

    def format(self, record: logging.LogRecord) -> str:
        data = _record_fields(record)
        labels = [f"{short}={data[key]}" for key, short in self.LABELS if data.get(key)]
        context = f" [{' '.join(labels)}]" if labels else ""

        line = (
            f"{datetime.now().strftime('%Y-%m-%d %H:%M:%S')} "
            f"{record.levelname:<8} {record.name}{context}: {record.getMessage()}"
        )

        statement = data.get("statement")
        if statement and statement not in record.getMessage():
            line += f"\n    {statement}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


class ContextLogger(logging.LoggerAdapter):
    """
    Adds the current DDL context and component to every record.

    Caller-supplied extra keys win over context fields. The combined
    mapping is stored on the record as `extra` for the formatters.
    """

    def process(self, msg, kwargs):
        data = current_log_context().as_fields()
        if self.extra and self.extra.get("component"):
            data["component"] = self.extra["component"]
        data.update(kwargs.get("extra") or {})

        kwargs["extra"] = {"extra": data}
        return msg, kwargs


def get_logger(name: str, component: Optional[ComponentType] = None) -> ContextLogger:
    return ContextLogger(
        logging.getLogger(name),
        {"component": component.value if component else None},
    )


def configure_logging(
    level: Union[str, int, None] = None,
    json_output: Optional[bool] = None,
) -> logging.Handler:
    """
    Install a single stdout handler on the root logger.

    Args:
        level: Log level; defaults to LOG_LEVEL, then INFO
        json_output: JSON lines; defaults to LOG_FORMAT=json

    Returns:
        The installed handler
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    if json_output is None:
        json_output = os.getenv("LOG_FORMAT", "").lower() == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_output else ConsoleFormatter())

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    return handler


# ============================================================================
# STATEMENT LOGGING
# ============================================================================

def log_statement(
    statement: str,
    dry_run: bool = False,
    logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None,
) -> None:
    """
    Log a rendered SQL statement.

    Dry-run statements go out at INFO so they show with default settings;
    executed statements go out at DEBUG.
    """
    if logger is None:
        logger = get_logger("ddl", ComponentType.DDL)

    data = {"statement": statement, "dry_run": dry_run}
    if dry_run:
        logger.info(f"[DRY RUN] {statement}", extra=data)
    else:
        logger.debug(f"SQL: {statement}", extra=data)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "DDLContext",
    "JSONFormatter",
    "ConsoleFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "current_log_context",
    "log_statement",
]
