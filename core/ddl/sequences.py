# ============================================================================
# SEQUENCE BUILDERS
# ============================================================================
# STATUS: Core - CREATE/ALTER/DROP SEQUENCE and setval
# PURPOSE: Sequence options, ownership and value resets
# ============================================================================
"""
Sequence Builders.

Usage:
    from core.ddl.sequences import SequenceDefinition

    SequenceDefinition("create", "foo_id_seq", increment=2, owned_by=("foo", "id"))
    # CREATE SEQUENCE "foo_id_seq" INCREMENT BY 2 OWNED BY "foo"."id";
"""

from typing import Any, Mapping, Optional

from psycopg import sql

from core.ddl.ddl_utils import CommonDDL, assert_valid_option, join_words, number
from core.errors import InvalidSequenceAction, InvalidSequenceOptions
from core.quoting import as_list, quote_column_name, quote_sequence, quote_table_name


SEQUENCE_ACTIONS = ("create", "alter")


def _owned_by_pair(owned_by: Any) -> Optional[tuple]:
    """(table, column) for an OWNED BY option, or None for "none"."""
    if isinstance(owned_by, str) and owned_by.lower() == "none":
        return None
    if isinstance(owned_by, Mapping) and sorted(owned_by) == ["column", "table"]:
        return owned_by["table"], owned_by["column"]
    if isinstance(owned_by, (tuple, list)) and len(owned_by) == 2:
        return owned_by[0], owned_by[1]
    raise InvalidSequenceOptions(owned_by, message=f"Invalid owned_by options - {owned_by!r}")


class SequenceDefinition:
    """
    CREATE SEQUENCE / ALTER SEQUENCE builder.

    Options:
        temporary: CREATE TEMPORARY SEQUENCE (create only)
        increment, start, cache: Integers
        min_value, max_value: Integer, or None/False for NO MINVALUE/NO MAXVALUE
        cycle: True for CYCLE, False for NO CYCLE
        owned_by: (table, column), {"table": ..., "column": ...} or "none"
        restart_with: Integer (alter only)
    """

    def __init__(self, action: str, name: Any, **options: Any):
        self.action = assert_valid_option(action, SEQUENCE_ACTIONS, InvalidSequenceAction)
        if "owned_by" in options:
            _owned_by_pair(options["owned_by"])
        self.name = name
        self.options = options

    def to_sql(self) -> sql.Composed:
        options = self.options
        if self.action == "create":
            parts = [sql.SQL("CREATE"), sql.SQL("TEMPORARY") if options.get("temporary") else None]
        else:
            parts = [sql.SQL("ALTER")]
        parts.append(sql.SQL("SEQUENCE {}").format(quote_sequence(self.name)))

        if options.get("increment") is not None:
            parts.append(sql.SQL("INCREMENT BY {}").format(number(int(options["increment"]))))

        for key, clause in (("min_value", "MINVALUE"), ("max_value", "MAXVALUE")):
            if key in options:
                value = options[key]
                if value is None or value is False:
                    parts.append(sql.SQL(f"NO {clause}"))
                else:
                    parts.append(sql.SQL(f"{clause} {{}}").format(number(int(value))))

        if options.get("start") is not None:
            parts.append(sql.SQL("START WITH {}").format(number(int(options["start"]))))
        if options.get("cache") is not None:
            parts.append(sql.SQL("CACHE {}").format(number(int(options["cache"]))))
        if "cycle" in options:
            parts.append(sql.SQL("CYCLE" if options["cycle"] else "NO CYCLE"))

        if "owned_by" in options:
            pair = _owned_by_pair(options["owned_by"])
            if pair is None:
                parts.append(sql.SQL("OWNED BY NONE"))
            else:
                parts.append(sql.SQL("OWNED BY {}.{}").format(
                    quote_table_name(pair[0]), quote_column_name(pair[1])
                ))

        if self.action == "alter" and "restart_with" in options:
            parts.append(sql.SQL("RESTART WITH {}").format(number(int(options["restart_with"]))))

        return join_words(parts) + sql.SQL(";")

    def __str__(self) -> str:
        return self.to_sql().as_string(None)


class SequenceBuilder:
    """
    DROP/RENAME/SET SCHEMA for sequences, plus setval.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def drop(*names: Any, if_exists: bool = False, cascade: bool = False) -> sql.Composed:
        names = [n for name in names for n in as_list(name)]
        return CommonDDL.drop("SEQUENCE", names, quote_sequence, if_exists=if_exists, cascade=cascade)

    @staticmethod
    def rename(name: Any, new_name: Any) -> sql.Composed:
        return CommonDDL.rename("SEQUENCE", name, new_name, quote_sequence)

    @staticmethod
    def set_schema(name: Any, schema: Any) -> sql.Composed:
        return CommonDDL.set_schema("SEQUENCE", name, schema, quote_sequence)

    @staticmethod
    def set_value(name: Any, value: int, is_called: bool = True) -> sql.Composed:
        """SELECT setval('name', value, true|false);"""
        return sql.SQL("SELECT setval({}, {}, {});").format(
            sql.Literal(str(name)),
            number(int(value)),
            sql.SQL("true" if is_called else "false"),
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "SEQUENCE_ACTIONS",
    "SequenceDefinition",
    "SequenceBuilder",
]
