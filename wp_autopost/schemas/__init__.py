"""Schemas layer - Pydantic models for API validation.

Schemas define the shape of data for API requests and responses.
They handle validation, serialization, and documentation.
"""

from wp_autopost.schemas.taxonomy import (
    TaxonomyNamesRequest,
    TaxonomyNamesResponse,
    TaxonomyResolveRequest,
    TaxonomyResolveResponse,
    WPSiteCredentials,
)

__all__ = [
    "TaxonomyNamesRequest",
    "TaxonomyNamesResponse",
    "TaxonomyResolveRequest",
    "TaxonomyResolveResponse",
    "WPSiteCredentials",
]
