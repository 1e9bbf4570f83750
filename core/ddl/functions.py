# ============================================================================
# FUNCTION BUILDERS
# ============================================================================
# STATUS: Core - CREATE/ALTER/DROP FUNCTION statements
# PURPOSE: Function definitions with behaviour, security, cost and SET options
# ============================================================================
"""
Function Builders.

Usage:
    from core.ddl.functions import FunctionDefinition, FunctionAlterer

    fn = FunctionDefinition("test", "integer", "integer", "sql", "select 10;")
    print(fn.to_sql().as_string(None))
    # CREATE FUNCTION "test"(integer) RETURNS integer AS $$
    # select 10;
    # $$
    # LANGUAGE "sql";

    alterer = FunctionAlterer("my_function", "integer")
    alterer.rename_to("another_function")
    alterer.owner_to("jdoe")
"""

from typing import Any, List, Optional

from psycopg import sql

from core.config import get_defaults
from core.ddl.ddl_utils import (
    assert_valid_option,
    compose,
    join_statements,
    keyword,
    number,
    terminate,
)
from core.errors import (
    InvalidFunctionAction,
    InvalidFunctionBehavior,
    InvalidFunctionOnNullInputType,
    InvalidFunctionSecurityType,
)
from core.quoting import (
    as_list,
    quote_function,
    quote_generic,
    quote_generic_ignore_schema,
    quote_language,
    quote_role,
    quote_schema,
)


BEHAVIORS = ("immutable", "stable", "volatile")
ON_NULL_INPUTS = ("called", "returns", "strict")
SECURITIES = ("invoker", "definer")

ON_NULL_INPUT_SQL = {
    "called": "CALLED ON NULL INPUT",
    "returns": "RETURNS NULL ON NULL INPUT",
    "strict": "STRICT",
}


def _signature(name: Any, args: Any) -> sql.Composed:
    """name(args) with args embedded verbatim."""
    return sql.SQL("{}({})").format(quote_function(name), sql.SQL(str(args or "")))


def _behavior(value: Any) -> sql.SQL:
    return keyword(assert_valid_option(value, BEHAVIORS, InvalidFunctionBehavior))


def _on_null_input(value: Any) -> sql.SQL:
    value = assert_valid_option(value, ON_NULL_INPUTS, InvalidFunctionOnNullInputType)
    return sql.SQL(ON_NULL_INPUT_SQL[value])


def _security(value: Any) -> sql.Composed:
    value = assert_valid_option(value, SECURITIES, InvalidFunctionSecurityType)
    return sql.SQL("SECURITY {}").format(keyword(value))


def set_options(options: Any) -> List[sql.Composable]:
    """
    SET clauses for function configuration parameters.

    A mapping renders SET TIME ZONE "v", SET "k" FROM CURRENT or
    SET "k" TO "v"; strings are embedded after SET verbatim.
    """
    clauses: List[sql.Composable] = []
    if isinstance(options, dict):
        for key, value in options.items():
            if str(key).upper() == "TIME ZONE":
                clauses.append(sql.SQL("SET TIME ZONE {}").format(quote_generic(value)))
            elif value == "from_current":
                clauses.append(sql.SQL("SET {} FROM CURRENT").format(quote_generic(key)))
            else:
                clauses.append(sql.SQL("SET {} TO {}").format(quote_generic(key), quote_generic(value)))
    else:
        clauses.extend(sql.SQL("SET {}").format(sql.SQL(str(s))) for s in as_list(options))
    return clauses


class FunctionDefinition:
    """
    CREATE [OR REPLACE ]FUNCTION builder.

    Options:
        force: CREATE OR REPLACE
        delimiter: Body quote delimiter (default $$)
        behavior: immutable, stable or volatile
        on_null_input: called, returns or strict
        security: invoker or definer
        cost, rows: Planner estimates
        set: Configuration parameters (see set_options)

    For language "c" the body is an (obj_file, link_symbol) pair.
    """

    def __init__(
        self,
        name: Any,
        args: Any,
        returns: str,
        language: str,
        body: Any,
        **options: Any,
    ):
        for key, check in (
            ("behavior", _behavior),
            ("on_null_input", _on_null_input),
            ("security", _security),
        ):
            if options.get(key) is not None:
                check(options[key])

        options.setdefault("delimiter", get_defaults().ddl.function_delimiter)
        self.name = name
        self.args = args
        self.returns = returns
        self.language = language
        self.body = body
        self.options = options

    def _body_sql(self) -> sql.Composable:
        if str(self.language).lower() == "c":
            obj_file, link_symbol = self.body
            return sql.SQL("{}, {}\n").format(sql.Literal(str(obj_file)), sql.Literal(str(link_symbol)))
        delimiter = sql.SQL(self.options["delimiter"])
        return sql.SQL("{d}\n{body}\n{d}\n").format(d=delimiter, body=sql.SQL(str(self.body)))

    def to_sql(self) -> sql.Composed:
        options = self.options
        parts = [
            sql.SQL("CREATE "),
            sql.SQL("OR REPLACE ") if options.get("force") else None,
            sql.SQL("FUNCTION {} RETURNS {} AS ").format(
                _signature(self.name, self.args), sql.SQL(str(self.returns))
            ),
            self._body_sql(),
            sql.SQL("LANGUAGE {}").format(quote_language(self.language)),
        ]

        lines = []
        if options.get("behavior"):
            lines.append(_behavior(options["behavior"]))
        if options.get("on_null_input"):
            lines.append(_on_null_input(options["on_null_input"]))
        if options.get("security"):
            lines.append(_security(options["security"]))
        if options.get("cost") is not None:
            lines.append(sql.SQL("COST {}").format(number(int(options["cost"]))))
        if options.get("rows") is not None:
            lines.append(sql.SQL("ROWS {}").format(number(int(options["rows"]))))
        if options.get("set"):
            lines.extend(set_options(options["set"]))

        parts.extend(sql.SQL("\n    {}").format(line) for line in lines)
        return terminate(compose(parts))


class FunctionAlterer:
    """
    ALTER FUNCTION statements, one per action.

    After rename_to, later statements address the function by its new name.
    """

    ACTIONS = (
        "rename_to",
        "owner_to",
        "set_schema",
        "behavior",
        "on_null_input",
        "security",
        "cost",
        "rows",
        "set",
        "reset",
    )

    def __init__(self, name: Any, args: Any = None, **actions: Any):
        self.name = name
        self.args = args
        self._new_name: Optional[Any] = None
        self.statements: List[sql.Composable] = []
        for action, value in actions.items():
            self.add(action, value)

    def add(self, action: str, value: Any) -> "FunctionAlterer":
        if action not in self.ACTIONS:
            raise InvalidFunctionAction(action)
        self.statements.append(self._build_statement(action, value))
        return self

    def rename_to(self, value: Any) -> "FunctionAlterer":
        return self.add("rename_to", value)

    def owner_to(self, value: Any) -> "FunctionAlterer":
        return self.add("owner_to", value)

    def set_schema(self, value: Any) -> "FunctionAlterer":
        return self.add("set_schema", value)

    def behavior(self, value: Any) -> "FunctionAlterer":
        return self.add("behavior", value)

    def on_null_input(self, value: Any) -> "FunctionAlterer":
        return self.add("on_null_input", value)

    def security(self, value: Any) -> "FunctionAlterer":
        return self.add("security", value)

    def cost(self, value: Any) -> "FunctionAlterer":
        return self.add("cost", value)

    def rows(self, value: Any) -> "FunctionAlterer":
        return self.add("rows", value)

    def set(self, value: Any) -> "FunctionAlterer":
        return self.add("set", value)

    def reset(self, value: Any) -> "FunctionAlterer":
        return self.add("reset", value)

    def empty(self) -> bool:
        return not self.statements

    def _build_statement(self, action: str, value: Any) -> sql.Composed:
        head = sql.SQL("ALTER FUNCTION {} ").format(
            _signature(self._new_name or self.name, self.args)
        )

        if action == "rename_to":
            tail = sql.SQL("RENAME TO {}").format(quote_generic_ignore_schema(value))
            self._new_name = value
        elif action == "owner_to":
            tail = sql.SQL("OWNER TO {}").format(quote_role(value))
        elif action == "set_schema":
            tail = sql.SQL("SET SCHEMA {}").format(quote_schema(value))
        elif action == "behavior":
            tail = _behavior(value)
        elif action == "on_null_input":
            tail = _on_null_input(value)
        elif action == "security":
            tail = _security(value)
        elif action == "cost":
            tail = sql.SQL("COST {}").format(number(int(value)))
        elif action == "rows":
            tail = sql.SQL("ROWS {}").format(number(int(value)))
        elif action == "set":
            tail = sql.SQL("\n").join(set_options(value))
        elif value == "all":
            tail = sql.SQL("RESET ALL")
        else:
            tail = sql.SQL(" ").join(
                sql.SQL("RESET {}").format(quote_generic(v)) for v in as_list(value)
            )
        return head + tail

    def to_sql(self) -> sql.Composed:
        return join_statements(self.statements)


class FunctionBuilder:
    """
    DROP FUNCTION.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def drop(name: Any, args: Any = None, if_exists: bool = False, cascade: bool = False) -> sql.Composed:
        return terminate(compose([
            sql.SQL("DROP FUNCTION "),
            sql.SQL("IF EXISTS ") if if_exists else None,
            _signature(name, args),
            sql.SQL(" CASCADE") if cascade else None,
        ]))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "BEHAVIORS",
    "ON_NULL_INPUTS",
    "SECURITIES",
    "set_options",
    "FunctionDefinition",
    "FunctionAlterer",
    "FunctionBuilder",
]
