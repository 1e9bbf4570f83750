# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Database connectivity and DDL execution
# PURPOSE: Connection handling, catalog queries and the DDL adapter
# ============================================================================
"""
Infrastructure module for PostgreSQL DDL extensions.

Provides:
- PostgreSQLRepository: Direct or pooled connections with dict rows
- CatalogQueries: Introspection SELECTs against pg_catalog
- PostgreSQLExtensions: One method per DDL operation, with dry-run

Usage:
    from infrastructure import PostgreSQLExtensions, init_pool, PostgreSQLRepository

    pg = PostgreSQLExtensions(repository=PostgreSQLRepository(pool=init_pool()))
    pg.detect_features()
    pg.create_schema("reporting", if_not_exists=True)
"""

from infrastructure.postgresql import (
    PostgreSQLRepository,
    get_postgres_repository,
    init_pool,
    get_pool,
    close_pool,
)
from infrastructure.catalog import CatalogQueries
from infrastructure.extensions import PostgreSQLExtensions

__all__ = [
    # PostgreSQL
    'PostgreSQLRepository',
    'get_postgres_repository',
    'init_pool',
    'get_pool',
    'close_pool',
    # Catalog
    'CatalogQueries',
    # Adapter
    'PostgreSQLExtensions',
]
