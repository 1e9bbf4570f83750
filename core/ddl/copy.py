# ============================================================================
# COPY FROM BUILDER
# ============================================================================
# STATUS: Core - COPY ... FROM statements
# PURPOSE: Bulk loads from STDIN, server-side files or programs
# ============================================================================
"""
COPY FROM Builder.

The builder only renders the statement. Streaming a local file through
FROM STDIN is the adapter's job (see infrastructure.extensions).

Usage:
    from core.ddl.copy import CopyFromDefinition

    CopyFromDefinition("foo", "/tmp/foo.csv", columns=["a", "b"], csv={"header": True})
    # COPY "foo" ("a", "b") FROM STDIN CSV HEADER;
"""

from typing import Any, Mapping, Optional

from psycopg import sql

from core.ddl.ddl_utils import compose, quoted_list
from core.errors import InvalidCopyFromOptions
from core.features import Features, resolve_features
from core.quoting import as_list, quote_column_name, quote_table_name


COPY_FROM_GATES = (
    ("program", "copy_from_program", "9.3"),
    ("freeze", "copy_from_freeze", "9.3"),
    ("encoding", "copy_from_encoding", "9.1"),
)


class CopyFromDefinition:
    """
    COPY table FROM builder.

    Options:
        columns: Target columns
        local: Read from STDIN (default True); ignored for programs
        program: Treat path as a shell command (FROM PROGRAM)
        freeze, binary, oids: Flags
        delimiter, null_as, encoding: Quoted option values
        csv: True, or a mapping with header, quote, escape, force_not_null
    """

    def __init__(self, table: Any, path: str, features: Optional[Features] = None, **options: Any):
        options.setdefault("local", True)
        features = resolve_features(features)
        for option, feature, version in COPY_FROM_GATES:
            if options.get(option) and not features.supports(feature):
                raise InvalidCopyFromOptions(
                    option,
                    message=f"The {option} option is only available in PostgreSQL {version}+.",
                )
        self.table = table
        self.path = path
        self.options = options

    @property
    def streams_local_file(self) -> bool:
        """True when the file is sent by the client over FROM STDIN."""
        return bool(self.options.get("local")) and not self.options.get("program")

    def _source_sql(self) -> sql.Composable:
        if self.options.get("program"):
            return sql.SQL(" FROM PROGRAM {}").format(sql.Literal(str(self.path)))
        if self.options.get("local"):
            return sql.SQL(" FROM STDIN")
        return sql.SQL(" FROM {}").format(sql.Literal(str(self.path)))

    def _csv_sql(self) -> Optional[sql.Composable]:
        csv = self.options.get("csv")
        if not csv:
            return None
        parts = [sql.SQL(" CSV")]
        if isinstance(csv, Mapping):
            if csv.get("header"):
                parts.append(sql.SQL(" HEADER"))
            if csv.get("quote"):
                parts.append(sql.SQL(" QUOTE AS {}").format(sql.Literal(str(csv["quote"]))))
            if csv.get("escape"):
                parts.append(sql.SQL(" ESCAPE AS {}").format(sql.Literal(str(csv["escape"]))))
            not_null = csv.get("force_not_null", csv.get("not_null"))
            if as_list(not_null):
                parts.append(sql.SQL(" FORCE NOT NULL {}").format(quoted_list(not_null, quote_column_name)))
        return compose(parts)

    def to_sql(self) -> sql.Composed:
        options = self.options
        parts = [sql.SQL("COPY {}").format(quote_table_name(self.table))]
        if as_list(options.get("columns")):
            parts.append(sql.SQL(" ({})").format(quoted_list(options["columns"], quote_column_name)))
        parts.append(self._source_sql())

        for flag in ("freeze", "binary", "oids"):
            if options.get(flag):
                parts.append(sql.SQL(f" {flag.upper()}"))
        if options.get("delimiter"):
            parts.append(sql.SQL(" DELIMITER AS {}").format(sql.Literal(str(options["delimiter"]))))
        if options.get("null_as") is not None:
            parts.append(sql.SQL(" NULL AS {}").format(sql.Literal(str(options["null_as"]))))
        if options.get("encoding"):
            parts.append(sql.SQL(" ENCODING {}").format(sql.Literal(str(options["encoding"]))))

        parts.append(self._csv_sql())
        parts.append(sql.SQL(";"))
        return compose(parts)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CopyFromDefinition",
]
