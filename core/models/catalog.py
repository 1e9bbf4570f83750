# ============================================================================
# CATALOG MODELS
# ============================================================================
# STATUS: Core - Typed rows returned by catalog introspection
# PURPOSE: Foreign key references and PostGIS version information
# ============================================================================
"""
Catalog Models

Pydantic models for rows read back from the PostgreSQL system catalogs.
"""

import re
from typing import Optional

from pydantic import BaseModel, Field


class ForeignKeyReference(BaseModel):
    """
    One column of a foreign key, as seen from either end.

    For foreign_keys(table), `table` is the referenced table.
    For referenced_foreign_keys(table), `table` is the referencing table.
    """

    table: str = Field(description="Table on the other end of the foreign key")
    column: str = Field(description="Foreign key column on the referencing table")
    referenced_column: str = Field(
        description="Column on the referenced table"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"table": "users", "column": "user_id", "referenced_column": "id"}
            ]
        }
    }


_POSTGIS_PATTERNS = {
    "lib": re.compile(r'POSTGIS="([^"]+)"'),
    "geos": re.compile(r'GEOS="([^"]+)"'),
    "proj": re.compile(r'PROJ="([^"]+)"'),
    "libxml": re.compile(r'LIBXML="([^"]+)"'),
}


class PostGISVersion(BaseModel):
    """Component versions parsed from postgis_full_version()."""

    lib: Optional[str] = Field(default=None, description="PostGIS library version")
    geos: Optional[str] = None
    proj: Optional[str] = None
    libxml: Optional[str] = None
    use_stats: bool = False

    @classmethod
    def parse(cls, version_string: Optional[str]) -> Optional["PostGISVersion"]:
        """
        Parse a postgis_full_version() banner.

        Returns None for an empty banner (PostGIS not installed).
        """
        if not version_string:
            return None

        values = {}
        for key, pattern in _POSTGIS_PATTERNS.items():
            match = pattern.search(version_string)
            values[key] = match.group(1).split(" ")[0] if match else None

        return cls(use_stats="USE_STATS" in version_string, **values)
