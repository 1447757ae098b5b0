"""Exhaustive paginated fetch of a site's categories or tags.

Builds a TaxonomyIndex (lookup key -> term id) for one taxonomy kind.
Listing failures never raise: pagination stops and whatever was collected
is returned, with the failure recorded on the result.
"""

import asyncio
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from wp_autopost.core.config import get_settings
from wp_autopost.core.logging import get_logger, wordpress_logger
from wp_autopost.integrations.wordpress import (
    TaxonomyKind,
    WordPressClient,
    WordPressError,
    parse_term_id,
)
from wp_autopost.services.taxonomy_names import normalize_taxonomy_name

logger = get_logger(__name__)


class TaxonomyIndex:
    """Lookup table from normalized name/slug to term id for one taxonomy kind."""

    def __init__(self, kind: TaxonomyKind) -> None:
        self.kind = kind
        self._ids: dict[str, int] = {}
        self._term_count = 0

    def add_term(self, item: dict[str, Any]) -> bool:
        """Index one listing item under its name and slug keys.

        Items without a positive integer id or a string name are ignored.
        Returns True when the item was indexed.
        """
        term_id = parse_term_id(item.get("id"))
        name = item.get("name")
        if term_id is None or not isinstance(name, str):
            return False

        keys = [normalize_taxonomy_name(name), name.lower()]
        slug = item.get("slug")
        if isinstance(slug, str) and slug:
            keys.extend([normalize_taxonomy_name(slug), slug.lower()])

        for key in keys:
            self._ids[key] = term_id
        self._term_count += 1
        return True

    def get(self, key: str) -> int | None:
        return self._ids.get(key)

    def keys(self) -> list[str]:
        return list(self._ids)

    @property
    def term_count(self) -> int:
        """Number of listing items indexed (not keys)."""
        return self._term_count

    def __contains__(self, key: object) -> bool:
        return key in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    @classmethod
    def from_mapping(cls, kind: TaxonomyKind, mapping: dict[str, int]) -> "TaxonomyIndex":
        """Build an index from ready-made lookup keys."""
        index = cls(kind)
        index._ids.update(mapping)
        index._term_count = len(set(mapping.values()))
        return index


@dataclass
class TaxonomyFetchResult:
    """Outcome of one exhaustive taxonomy listing."""

    kind: TaxonomyKind
    index: TaxonomyIndex
    pages_fetched: int = 0
    complete: bool = True
    error: str | None = None
    error_type: str | None = None

    @property
    def reachable(self) -> bool:
        """False when the very first page could not be fetched."""
        return self.complete or self.pages_fetched > 0


async def fetch_all_taxonomies(
    client: WordPressClient,
    kind: TaxonomyKind,
    per_page: int | None = None,
    page_delay: float | None = None,
) -> TaxonomyFetchResult:
    """Fetch every page of a taxonomy listing into a fresh index.

    Pages are requested sequentially from page 1 and stop on an empty page,
    a short page, or the last page announced by ``X-WP-TotalPages``. A short
    delay separates successive requests.

    Args:
        client: WordPress client for the site.
        kind: "categories" or "tags".
        per_page: Page size (WordPress caps this at 100). Defaults to settings.
        page_delay: Seconds between pages. Defaults to settings.

    Returns:
        TaxonomyFetchResult whose index may be partial when ``complete`` is
        False.
    """
    settings = get_settings()
    if per_page is None:
        per_page = settings.wordpress_per_page
    if page_delay is None:
        page_delay = settings.wordpress_page_delay

    result = TaxonomyFetchResult(kind=kind, index=TaxonomyIndex(kind))
    page = 1

    while True:
        try:
            listing = await client.list_terms(kind, page, per_page)
        except WordPressError as e:
            result.complete = False
            result.error = str(e)
            result.error_type = type(e).__name__
            wordpress_logger.taxonomy_fetch_failed(kind, page, str(e), type(e).__name__)
            break

        result.pages_fetched += 1
        items = listing.items
        wordpress_logger.taxonomy_page_fetched(kind, page, len(items))

        if not items:
            break

        skipped = 0
        for item in items:
            if not isinstance(item, dict) or not result.index.add_term(item):
                skipped += 1
        if skipped:
            logger.debug(
                "Skipped malformed taxonomy items",
                extra={"kind": kind, "page": page, "skipped": skipped},
            )

        if len(items) < per_page:
            break
        if listing.total_pages is not None and page >= listing.total_pages:
            break

        page += 1
        await asyncio.sleep(page_delay)

    wordpress_logger.taxonomy_fetch_complete(
        kind, result.pages_fetched, len(result.index), result.complete
    )
    return result


def list_prompt_names(index: TaxonomyIndex, limit: int) -> list[str]:
    """Existing names worth offering to a metadata prompt.

    Skips empty keys and slug-like keys containing underscores, keeps index
    order, and caps the list at ``limit``.
    """
    names: list[str] = []
    for key in index:
        if len(names) >= limit:
            break
        if key and "_" not in key:
            names.append(key)
    return names
