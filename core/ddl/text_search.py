# ============================================================================
# TEXT SEARCH BUILDERS
# ============================================================================
# STATUS: Core - Text search configurations, dictionaries, templates, parsers
# PURPOSE: CREATE/ALTER/DROP TEXT SEARCH statements
# ============================================================================
"""
Text Search Builders.

Object names are schema-qualified through quote_generic_with_schema, so
{"pg_catalog": "english"} renders "pg_catalog"."english" and scoped
schemas apply.

Usage:
    from core.ddl.text_search import TextSearchBuilder

    TextSearchBuilder.create_dictionary("foo", {"pg_catalog": "snowball"}, language="english")
    # CREATE TEXT SEARCH DICTIONARY "foo" (TEMPLATE = "pg_catalog"."snowball", "language" = 'english');
"""

from typing import Any, Optional

from psycopg import sql

from core.ddl.ddl_utils import CommonDDL, compose, quoted_list
from core.quoting import (
    as_list,
    ignore_scoped_schema,
    quote_function,
    quote_generic,
    quote_generic_with_schema,
)


CONFIGURATION = "TEXT SEARCH CONFIGURATION"
DICTIONARY = "TEXT SEARCH DICTIONARY"
TEMPLATE = "TEXT SEARCH TEMPLATE"
PARSER = "TEXT SEARCH PARSER"


def _key_values(options: dict) -> sql.Composed:
    return sql.SQL(", ").join(
        sql.SQL("{} = {}").format(quote_generic(k), sql.Literal(str(v))) for k, v in options.items()
    )


def _alter_configuration(name: Any) -> sql.Composed:
    return sql.SQL("ALTER {} {} ").format(sql.SQL(CONFIGURATION), quote_generic_with_schema(name))


class TextSearchBuilder:
    """
    Text search DDL.

    All methods are static and return sql.Composed objects.
    """

    # ------------------------------------------------------------------------
    # Shared forms
    # ------------------------------------------------------------------------

    @staticmethod
    def drop(kind: str, name: Any, if_exists: bool = False, cascade: bool = False) -> sql.Composed:
        return CommonDDL.drop(kind, name, quote_generic_with_schema, if_exists=if_exists, cascade=cascade)

    @staticmethod
    def rename(kind: str, name: Any, new_name: Any) -> sql.Composed:
        return CommonDDL.rename(kind, name, new_name, quote_generic_with_schema)

    @staticmethod
    def owner_to(kind: str, name: Any, role: Any) -> sql.Composed:
        return CommonDDL.owner_to(kind, name, role, quote_generic_with_schema)

    @staticmethod
    def set_schema(kind: str, name: Any, schema: Any) -> sql.Composed:
        return CommonDDL.set_schema(kind, name, schema, quote_generic_with_schema)

    # ------------------------------------------------------------------------
    # Configurations
    # ------------------------------------------------------------------------

    @staticmethod
    def create_configuration(
        name: Any,
        parser_name: Optional[Any] = None,
        source_config: Optional[Any] = None,
    ) -> sql.Composed:
        """CREATE TEXT SEARCH CONFIGURATION from a parser or by copying another."""
        if parser_name and source_config:
            raise ValueError("You can't define both parser_name and source_config options.")
        if not parser_name and not source_config:
            raise ValueError("You must provide either a parser_name or a source_config.")

        with ignore_scoped_schema():
            if parser_name:
                source = sql.SQL("PARSER = {}").format(quote_generic_with_schema(parser_name))
            else:
                source = sql.SQL("COPY = {}").format(quote_generic_with_schema(source_config))

        return sql.SQL("CREATE {} {} ({});").format(
            sql.SQL(CONFIGURATION), quote_generic_with_schema(name), source
        )

    @staticmethod
    def add_configuration_mapping(name: Any, tokens: Any, dictionaries: Any) -> sql.Composed:
        return _alter_configuration(name) + sql.SQL("ADD MAPPING FOR {} WITH {};").format(
            quoted_list(tokens), quoted_list(dictionaries)
        )

    @staticmethod
    def alter_configuration_mapping(name: Any, tokens: Any, dictionaries: Any) -> sql.Composed:
        return _alter_configuration(name) + sql.SQL("ALTER MAPPING FOR {} WITH {};").format(
            quoted_list(tokens), quoted_list(dictionaries)
        )

    @staticmethod
    def replace_configuration_dictionary(name: Any, old_dictionary: Any, new_dictionary: Any) -> sql.Composed:
        return _alter_configuration(name) + sql.SQL("ALTER MAPPING REPLACE {} WITH {};").format(
            quote_generic(old_dictionary), quote_generic(new_dictionary)
        )

    @staticmethod
    def alter_configuration_mapping_replace_dictionary(
        name: Any,
        mappings: Any,
        old_dictionary: Any,
        new_dictionary: Any,
    ) -> sql.Composed:
        if not as_list(mappings):
            raise ValueError("Expected one or more mappings to alter.")
        return _alter_configuration(name) + sql.SQL("ALTER MAPPING FOR {} REPLACE {} WITH {};").format(
            quoted_list(mappings), quote_generic(old_dictionary), quote_generic(new_dictionary)
        )

    @staticmethod
    def drop_configuration_mapping(name: Any, *mappings: Any, if_exists: bool = False) -> sql.Composed:
        mappings = [m for mapping in mappings for m in as_list(mapping)]
        if not mappings:
            raise ValueError("Expected one or more mappings to drop.")
        return compose([
            _alter_configuration(name),
            sql.SQL("DROP MAPPING "),
            sql.SQL("IF EXISTS ") if if_exists else None,
            sql.SQL("FOR {};").format(quoted_list(mappings)),
        ])

    # ------------------------------------------------------------------------
    # Dictionaries
    # ------------------------------------------------------------------------

    @staticmethod
    def create_dictionary(name: Any, template: Any, **options: Any) -> sql.Composed:
        return compose([
            sql.SQL("CREATE {} {} (TEMPLATE = {}").format(
                sql.SQL(DICTIONARY), quote_generic_with_schema(name), quote_generic_with_schema(template)
            ),
            sql.SQL(", {}").format(_key_values(options)) if options else None,
            sql.SQL(");"),
        ])

    @staticmethod
    def alter_dictionary(name: Any, **options: Any) -> sql.Composed:
        if not options:
            raise ValueError("Expected some options to alter.")
        return sql.SQL("ALTER {} {} ({});").format(
            sql.SQL(DICTIONARY), quote_generic_with_schema(name), _key_values(options)
        )

    # ------------------------------------------------------------------------
    # Templates and parsers
    # ------------------------------------------------------------------------

    @staticmethod
    def create_template(name: Any, lexize: Any, init: Optional[Any] = None) -> sql.Composed:
        if not lexize:
            raise ValueError("Expected to see a lexize option.")
        return compose([
            sql.SQL("CREATE {} {} (").format(sql.SQL(TEMPLATE), quote_generic_with_schema(name)),
            sql.SQL("INIT = {}, ").format(quote_function(init)) if init else None,
            sql.SQL("LEXIZE = {});").format(quote_function(lexize)),
        ])

    @staticmethod
    def create_parser(
        name: Any,
        start: Any,
        gettoken: Any,
        end: Any,
        lextypes: Any,
        headline: Optional[Any] = None,
    ) -> sql.Composed:
        missing = [k for k, v in (
            ("start", start), ("gettoken", gettoken), ("end", end), ("lextypes", lextypes)
        ) if not v]
        if missing:
            raise ValueError(f"Missing options: {missing}.")
        return compose([
            sql.SQL("CREATE {} {} (").format(sql.SQL(PARSER), quote_generic_with_schema(name)),
            sql.SQL("START = {}, GETTOKEN = {}, END = {}, LEXTYPES = {}").format(
                quote_function(start), quote_function(gettoken), quote_function(end), quote_function(lextypes)
            ),
            sql.SQL(", HEADLINE = {}").format(quote_function(headline)) if headline else None,
            sql.SQL(");"),
        ])


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CONFIGURATION",
    "DICTIONARY",
    "TEMPLATE",
    "PARSER",
    "TextSearchBuilder",
]
