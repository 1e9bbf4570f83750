# ============================================================================
# QUOTING AND FEATURE GATE TESTS
# ============================================================================
# STATUS: Tests - Identifier quoting, schema scoping, version gates, config
# PURPOSE: Verify the building blocks every statement builder relies on
# ============================================================================
"""
Quoting and Feature Gate Tests

Covers:
1. Identifier, schema, role and table quoting
2. with_schema / ignore_scoped_schema scoping (nesting, thread isolation)
3. Version parsing and feature gates
4. Environment-driven defaults

Run with:
    pytest tests/test_quoting.py -v
"""

import threading

import pytest

from core.config import get_defaults, reset_defaults
from core.errors import FeatureNotSupportedError
from core.features import Features, parse_version
from core.quoting import (
    as_list,
    current_scoped_schema,
    ignore_scoped_schema,
    quote_generic,
    quote_generic_ignore_schema,
    quote_generic_with_schema,
    quote_role,
    quote_schema,
    quote_table_name,
    quote_value,
    split_name,
    with_schema,
)


def render(stmt):
    return stmt.as_string(None)


# ============================================================================
# QUOTING
# ============================================================================

class TestQuoting:
    """Identifier quoting."""

    def test_generic_is_double_quoted(self):
        assert render(quote_generic("foo")) == '"foo"'

    def test_embedded_quotes_are_doubled(self):
        assert render(quote_generic('fo"o')) == '"fo""o"'

    def test_public_schema_and_role_are_keywords(self):
        assert render(quote_schema("public")) == "PUBLIC"
        assert render(quote_role("PUBLIC")) == "PUBLIC"
        assert render(quote_role("jdoe")) == '"jdoe"'

    def test_schema_pair_forms(self):
        assert render(quote_generic_with_schema(("geo", "foo"))) == '"geo"."foo"'
        assert render(quote_generic_with_schema({"geo": "foo"})) == '"geo"."foo"'

    def test_dotted_table_name_is_split(self):
        assert render(quote_table_name("geo.foo")) == '"geo"."foo"'

    def test_ignore_schema_drops_qualifier(self):
        assert render(quote_generic_ignore_schema(("geo", "foo"))) == '"foo"'

    def test_split_name_rejects_bad_pairs(self):
        with pytest.raises(ValueError):
            split_name(("a", "b", "c"))

    def test_as_list(self):
        assert as_list(None) == []
        assert as_list("a") == ["a"]
        assert as_list(("a", "b")) == ["a", "b"]

    def test_quote_value_literal_and_expression(self):
        assert render(quote_value("x")) == "'x'"
        assert render(quote_value({"expression": "now()"})) == "now()"


# ============================================================================
# SCHEMA SCOPING
# ============================================================================

class TestSchemaScoping:
    """Thread-local with_schema stack."""

    def test_scope_qualifies_unqualified_names(self):
        with with_schema("geo"):
            assert render(quote_table_name("foo")) == '"geo"."foo"'
        assert render(quote_table_name("foo")) == '"foo"'

    def test_explicit_schema_wins_over_scope(self):
        with with_schema("geo"):
            assert render(quote_table_name(("other", "foo"))) == '"other"."foo"'

    def test_nested_scopes(self):
        with with_schema("outer"):
            with with_schema("inner"):
                assert current_scoped_schema() == "inner"
            assert current_scoped_schema() == "outer"
        assert current_scoped_schema() is None

    def test_ignore_scoped_schema(self):
        with with_schema("geo"):
            with ignore_scoped_schema():
                assert render(quote_table_name("foo")) == '"foo"'
            assert render(quote_table_name("foo")) == '"geo"."foo"'

    def test_scope_popped_on_error(self):
        with pytest.raises(RuntimeError):
            with with_schema("geo"):
                raise RuntimeError("boom")
        assert current_scoped_schema() is None

    def test_scopes_are_per_thread(self):
        seen = []

        def worker():
            seen.append(current_scoped_schema())

        with with_schema("geo"):
            t = threading.Thread(target=worker)
            t.start()
            t.join()

        assert seen == [None]


# ============================================================================
# FEATURES
# ============================================================================

class TestFeatures:
    """Server version gates."""

    def test_parse_version(self):
        assert parse_version("9.3.4") == (9, 3, 4)
        assert parse_version("PostgreSQL 9.1.2 on x86_64") == (9, 1, 2)
        assert parse_version("16beta1") == (16,)
        assert parse_version(None) == ()

    def test_supports(self, modern, legacy):
        assert modern.supports("materialized_views") is True
        assert legacy.supports("materialized_views") is False
        assert Features("9.1").supports("extensions") is True

    def test_check_raises_with_details(self, legacy):
        with pytest.raises(FeatureNotSupportedError) as exc_info:
            legacy.check("extensions")

        assert exc_info.value.feature == "extensions"
        assert exc_info.value.server_version == "8.4.20"
        assert isinstance(exc_info.value, ValueError)

    def test_unknown_feature(self, modern):
        with pytest.raises(KeyError):
            modern.supports("time_travel")

    def test_postgis_gate(self, modern, no_postgis):
        assert modern.supports("postgis") is True
        assert no_postgis.supports("postgis") is False

    def test_unknown_srid_depends_on_postgis(self, modern, legacy):
        assert modern.unknown_srid == 0
        assert legacy.unknown_srid == -1


# ============================================================================
# CONFIGURATION
# ============================================================================

class TestDefaults:
    """Environment-driven defaults."""

    def test_builtin_defaults(self):
        defaults = get_defaults()
        assert defaults.server.server_version == "16.0"
        assert defaults.server.postgis_version is None
        assert defaults.ddl.function_delimiter == "$$"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("POSTGRES_SERVER_VERSION", "9.2")
        monkeypatch.setenv("POSTGIS_VERSION", "2.0.1")
        reset_defaults()

        features = Features.from_defaults()
        assert features.server_version == "9.2"
        assert features.postgis_version == "2.0.1"

    def test_database_url_wins(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/app")
        reset_defaults()

        connection = get_defaults().connection
        assert connection.conninfo == "postgresql://u:p@db:5432/app"
        assert connection.safe_conninfo == "db:5432/app"
