# ============================================================================
# SERVER FEATURE GATES
# ============================================================================
# STATUS: Core - Version-conditional DDL support
# PURPOSE: Decide which statements a given PostgreSQL/PostGIS can accept
# ============================================================================
"""
Server Feature Gates.

Builders that emit version-specific syntax call Features.check() before
composing anything, so an unsupported statement fails fast with
FeatureNotSupportedError instead of a server-side syntax error.

Usage:
    from core.features import Features

    features = Features("9.2.4")
    features.supports("extensions")         # True
    features.check("materialized_views")    # raises FeatureNotSupportedError
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from core.config import get_defaults
from core.errors import FeatureNotSupportedError


# Minimum server version per feature
FEATURE_VERSIONS: Dict[str, str] = {
    # 9.3
    "add_enum_value_if_not_exists": "9.3",
    "copy_from_freeze": "9.3",
    "copy_from_program": "9.3",
    "create_schema_if_not_exists": "9.3",
    "event_triggers": "9.3",
    "materialized_views": "9.3",
    "rename_rule": "9.3",
    "view_recursive": "9.3",

    # 9.1
    "copy_from_encoding": "9.1",
    "create_table_if_not_exists": "9.1",
    "create_table_unlogged": "9.1",
    "extensions": "9.1",
    "foreign_tables": "9.1",
    "view_if_exists": "9.1",
    "view_set_options": "9.1",

    # 9.0
    "modify_mass_privileges": "9.0",
    "vacuum_options_list": "9.0",
}

POSTGIS_FEATURES = ("postgis",)

_VERSION_RE = re.compile(r"(\d+(?:\.\d+)*)")


def parse_version(version: Optional[str]) -> Tuple[int, ...]:
    """
    Parse a version string into a comparable tuple.

    Accepts bare versions ("9.3.4") and banners
    ("PostgreSQL 9.3.4 on x86_64...", "16beta1").
    """
    if not version:
        return ()
    match = _VERSION_RE.search(str(version))
    if not match:
        return ()
    return tuple(int(part) for part in match.group(1).split("."))


@dataclass(frozen=True)
class Features:
    """
    Server capabilities used to gate DDL.

    Attributes:
        server_version: PostgreSQL server version string
        postgis_version: PostGIS library version, or None if not installed
    """
    server_version: str
    postgis_version: Optional[str] = None

    @classmethod
    def from_defaults(cls) -> "Features":
        """Build from configured (not sniffed) versions."""
        server = get_defaults().server
        return cls(server.server_version, server.postgis_version)

    def server_at_least(self, version: str) -> bool:
        return parse_version(self.server_version) >= parse_version(version)

    def postgis_at_least(self, version: str) -> bool:
        if not self.postgis_version:
            return False
        return parse_version(self.postgis_version) >= parse_version(version)

    def supports(self, feature: str) -> bool:
        """True if the server supports the named feature."""
        if feature in POSTGIS_FEATURES:
            return bool(self.postgis_version)
        if feature not in FEATURE_VERSIONS:
            raise KeyError(f"Unknown feature: {feature}")
        return self.server_at_least(FEATURE_VERSIONS[feature])

    def check(self, feature: str) -> None:
        """Raise FeatureNotSupportedError unless the feature is supported."""
        if not self.supports(feature):
            raise FeatureNotSupportedError(feature, self.server_version)

    def unknown_srids(self) -> Dict[str, int]:
        """SRID values PostGIS uses for "unknown" per spatial column type."""
        if self.postgis_at_least("2.0"):
            return {"geometry": 0, "geography": 0}
        return {"geometry": -1, "geography": 0}

    @property
    def unknown_srid(self) -> int:
        return self.unknown_srids()["geometry"]


def resolve_features(features: Optional[Features]) -> Features:
    """Use the given features, falling back to configured defaults."""
    return features if features is not None else Features.from_defaults()


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "FEATURE_VERSIONS",
    "POSTGIS_FEATURES",
    "parse_version",
    "Features",
    "resolve_features",
]
