# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# ============================================================================
"""
Models Module - Central Export Point

Pydantic models for catalog introspection results.
"""

from core.models.catalog import ForeignKeyReference, PostGISVersion

__all__ = [
    "ForeignKeyReference",
    "PostGISVersion",
]
