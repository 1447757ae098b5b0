"""Taxonomy API router.

REST endpoints used by the publishing workflow:
- Resolve category/tag names to WordPress term ids (creating missing tags)
- List existing names to steer metadata generation
"""

from functools import lru_cache

from fastapi import APIRouter, Depends

from wp_autopost.core.config import get_settings
from wp_autopost.core.logging import get_logger
from wp_autopost.schemas.taxonomy import (
    TaxonomyNamesRequest,
    TaxonomyNamesResponse,
    TaxonomyResolveRequest,
    TaxonomyResolveResponse,
)
from wp_autopost.services.taxonomy_cache import TaxonomyCache
from wp_autopost.services.taxonomy_reconciliation import (
    fetch_existing_names,
    resolve_taxonomy_ids,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/taxonomy", tags=["Taxonomy"])


@lru_cache
def get_taxonomy_cache() -> TaxonomyCache:
    """Get the process-wide taxonomy cache."""
    return TaxonomyCache(ttl_seconds=get_settings().taxonomy_cache_ttl)


@router.post("/resolve", response_model=TaxonomyResolveResponse)
async def resolve_taxonomies(
    body: TaxonomyResolveRequest,
    cache: TaxonomyCache = Depends(get_taxonomy_cache),
) -> TaxonomyResolveResponse:
    """Resolve category/tag names to term ids.

    Unknown categories are dropped; unknown tags are created unless
    ``create_missing_tags`` is false. Responds 502 when the site's
    taxonomy listings cannot be read at all.
    """
    logger.info(
        "Resolving taxonomies",
        extra={
            "site_url": body.site_url,
            "category_count": len(body.category_names),
            "tag_count": len(body.tag_names),
        },
    )
    result = await resolve_taxonomy_ids(
        body.site_url,
        body.username,
        body.app_password,
        category_names=body.category_names,
        tag_names=body.tag_names,
        cache=cache,
        create_missing_tags=body.create_missing_tags,
    )
    return TaxonomyResolveResponse(**result.to_dict())


@router.post("/names", response_model=TaxonomyNamesResponse)
async def list_taxonomy_names(
    body: TaxonomyNamesRequest,
    cache: TaxonomyCache = Depends(get_taxonomy_cache),
) -> TaxonomyNamesResponse:
    """List existing category/tag names for the metadata prompt."""
    names = await fetch_existing_names(
        body.site_url, body.username, body.app_password, cache=cache
    )
    return TaxonomyNamesResponse(categories=names.categories, tags=names.tags)
