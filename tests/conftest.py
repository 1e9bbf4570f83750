# ============================================================================
# SHARED TEST FIXTURES
# ============================================================================
# STATUS: Tests - Environment isolation and server feature fixtures
# PURPOSE: Keep configured defaults out of rendered SQL
# ============================================================================

import pytest

from core.config import reset_defaults
from core.features import Features

_ENV_VARS = (
    "POSTGRES_SERVER_VERSION",
    "POSTGIS_VERSION",
    "DATABASE_URL",
    "DDL_FUNCTION_DELIMITER",
    "DDL_COPY_BLOCK_SIZE",
    "LOG_FORMAT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_defaults(monkeypatch):
    """Every test starts from built-in defaults."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_defaults()
    yield
    reset_defaults()


@pytest.fixture
def modern():
    """PostgreSQL 9.3 with PostGIS 2.1."""
    return Features("9.3.4", "2.1.0")


@pytest.fixture
def legacy():
    """PostgreSQL 8.4 with PostGIS 1.5."""
    return Features("8.4.20", "1.5.8")


@pytest.fixture
def no_postgis():
    """PostgreSQL 9.3 without PostGIS."""
    return Features("9.3.4")
