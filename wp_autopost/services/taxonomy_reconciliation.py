"""Taxonomy reconciliation for a single publish request.

Turns requested category/tag names into WordPress term ids:

    IDLE -> FETCHING_TAXONOMIES -> RESOLVING_NAMES
         -> CREATING_MISSING_TAGS (only when tags are missing) -> DONE

Categories are a closed list curated by the site owner: misses are dropped.
Tags are an open list: misses are created. Local failures only reduce the
number of matches; the sole hard failure is a site whose listings cannot be
read at all.
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from wp_autopost.core.config import get_settings
from wp_autopost.core.logging import get_logger, wordpress_logger
from wp_autopost.integrations.wordpress import TaxonomyKind, WordPressClient
from wp_autopost.services.tag_creation import create_missing_tags
from wp_autopost.services.taxonomy_cache import TaxonomyCache
from wp_autopost.services.taxonomy_fetch import (
    TaxonomyFetchResult,
    TaxonomyIndex,
    fetch_all_taxonomies,
    list_prompt_names,
)
from wp_autopost.services.taxonomy_matching import resolve_ids

logger = get_logger(__name__)


class ReconciliationState(Enum):
    """Reconciliation states."""

    IDLE = "idle"
    FETCHING_TAXONOMIES = "fetching_taxonomies"
    RESOLVING_NAMES = "resolving_names"
    CREATING_MISSING_TAGS = "creating_missing_tags"
    DONE = "done"


class TaxonomyUnavailableError(Exception):
    """Raised when none of the requested taxonomy listings could be read."""

    def __init__(self, site_url: str, errors: dict[str, str]) -> None:
        detail = "; ".join(f"{kind}: {error}" for kind, error in errors.items())
        super().__init__(f"Could not read taxonomies from {site_url}: {detail}")
        self.site_url = site_url
        self.errors = errors


@dataclass
class ResolutionResult:
    """Term ids for a post, plus what could not be resolved."""

    category_ids: list[int] = field(default_factory=list)
    tag_ids: list[int] = field(default_factory=list)
    unmatched_categories: list[str] = field(default_factory=list)
    unmatched_tags: list[str] = field(default_factory=list)
    created_tag_ids: list[int] = field(default_factory=list)
    failed_tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "category_ids": self.category_ids,
            "tag_ids": self.tag_ids,
            "unmatched_categories": self.unmatched_categories,
            "unmatched_tags": self.unmatched_tags,
            "created_tag_ids": self.created_tag_ids,
            "failed_tags": self.failed_tags,
        }


@dataclass
class ExistingTaxonomyNames:
    """Existing category/tag names offered to the metadata prompt."""

    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


class TaxonomyReconciler:
    """Resolves category/tag names for one site, creating missing tags.

    One instance serves one reconciliation; its ``state`` reflects progress.
    Indexes live only for the call unless a TaxonomyCache is supplied.

    Args:
        client: WordPress client for the target site.
        cache: Optional TTL cache shared across calls.
        create_missing_tags: Create tags that resolve to nothing.
        page_delay: Delay between listing pages. Defaults to settings.
    """

    def __init__(
        self,
        client: WordPressClient,
        cache: TaxonomyCache | None = None,
        create_missing_tags: bool = True,
        page_delay: float | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._create_missing_tags = create_missing_tags
        self._page_delay = page_delay
        self._state = ReconciliationState.IDLE

    @property
    def state(self) -> ReconciliationState:
        """Get current reconciliation state."""
        return self._state

    def _transition(self, new_state: ReconciliationState) -> None:
        previous_state = self._state.value
        self._state = new_state
        wordpress_logger.reconciliation_state_change(
            self._client.site_url, previous_state, new_state.value
        )

    async def _load_index(self, kind: TaxonomyKind) -> TaxonomyFetchResult:
        """Serve an index from cache or fetch it from the site."""
        site_url = self._client.site_url
        if self._cache is not None:
            cached = self._cache.get(site_url, kind, self._client.username)
            if cached is not None:
                return TaxonomyFetchResult(kind=kind, index=cached)

        result = await fetch_all_taxonomies(
            self._client, kind, page_delay=self._page_delay
        )
        # Partial indexes would hide terms until expiry
        if self._cache is not None and result.complete:
            self._cache.put(site_url, result.index, self._client.username)
        return result

    async def load_indexes(
        self, kinds: list[TaxonomyKind]
    ) -> dict[TaxonomyKind, TaxonomyIndex]:
        """Load the requested kinds concurrently.

        Raises:
            TaxonomyUnavailableError: If every requested listing failed on
                its first page.
        """
        if not kinds:
            return {}

        results = await asyncio.gather(*(self._load_index(kind) for kind in kinds))

        if all(not r.reachable for r in results):
            errors = {r.kind: r.error or "unreachable" for r in results}
            logger.error(
                "WordPress taxonomies unavailable",
                extra={"site_url": self._client.site_url, "errors": errors},
            )
            raise TaxonomyUnavailableError(self._client.site_url, errors)

        for r in results:
            if not r.complete:
                logger.warning(
                    "Using partial taxonomy index",
                    extra={
                        "site_url": self._client.site_url,
                        "kind": r.kind,
                        "pages_fetched": r.pages_fetched,
                        "error": r.error,
                    },
                )

        return {r.kind: r.index for r in results}

    async def reconcile(
        self,
        category_names: list[str] | None = None,
        tag_names: list[str] | None = None,
    ) -> ResolutionResult:
        """Resolve category and tag names to ids.

        Args:
            category_names: Requested category names.
            tag_names: Requested tag names.

        Returns:
            ResolutionResult with ids in input order, each id once.

        Raises:
            TaxonomyUnavailableError: If no requested listing could be read.
        """
        category_names = category_names or []
        tag_names = tag_names or []
        result = ResolutionResult()
        start_time = time.monotonic()

        kinds: list[TaxonomyKind] = []
        if category_names:
            kinds.append("categories")
        if tag_names:
            kinds.append("tags")

        self._transition(ReconciliationState.FETCHING_TAXONOMIES)
        try:
            indexes = await self.load_indexes(kinds)
        except TaxonomyUnavailableError:
            self._transition(ReconciliationState.DONE)
            raise

        self._transition(ReconciliationState.RESOLVING_NAMES)
        if "categories" in indexes:
            categories = resolve_ids(category_names, indexes["categories"])
            result.category_ids = categories.ids
            result.unmatched_categories = categories.unmatched
            if categories.unmatched:
                logger.info(
                    "Dropping unknown categories",
                    extra={"categories": categories.unmatched},
                )

        if "tags" in indexes:
            tags = resolve_ids(tag_names, indexes["tags"])
            result.tag_ids = tags.ids
            result.unmatched_tags = tags.unmatched

        if result.unmatched_tags and self._create_missing_tags:
            self._transition(ReconciliationState.CREATING_MISSING_TAGS)
            creation = await create_missing_tags(self._client, result.unmatched_tags)
            result.created_tag_ids = creation.created_ids
            result.failed_tags = creation.failed + creation.skipped
            for tag_id in creation.created_ids:
                if tag_id not in result.tag_ids:
                    result.tag_ids.append(tag_id)
            if creation.created_ids and self._cache is not None:
                self._cache.invalidate(self._client.site_url)

        self._transition(ReconciliationState.DONE)
        wordpress_logger.reconciliation_complete(
            self._client.site_url,
            len(result.category_ids),
            len(result.tag_ids),
            len(result.created_tag_ids),
            (time.monotonic() - start_time) * 1000,
        )
        return result


async def resolve_taxonomy_ids(
    site_url: str,
    username: str,
    app_password: str,
    category_names: list[str] | None = None,
    tag_names: list[str] | None = None,
    cache: TaxonomyCache | None = None,
    create_missing_tags: bool = True,
) -> ResolutionResult:
    """Open a client for the site and reconcile names in one call."""
    async with WordPressClient(site_url, username, app_password) as client:
        reconciler = TaxonomyReconciler(
            client, cache=cache, create_missing_tags=create_missing_tags
        )
        return await reconciler.reconcile(category_names, tag_names)


async def fetch_existing_names(
    site_url: str,
    username: str,
    app_password: str,
    cache: TaxonomyCache | None = None,
) -> ExistingTaxonomyNames:
    """List existing category/tag names for the metadata prompt.

    Unreadable listings yield empty lists; prompt hints are optional.
    """
    settings = get_settings()
    async with WordPressClient(site_url, username, app_password) as client:
        reconciler = TaxonomyReconciler(client, cache=cache)
        try:
            indexes = await reconciler.load_indexes(["categories", "tags"])
        except TaxonomyUnavailableError:
            return ExistingTaxonomyNames()

    names = ExistingTaxonomyNames(
        categories=list_prompt_names(
            indexes["categories"], settings.taxonomy_prompt_category_limit
        ),
        tags=list_prompt_names(indexes["tags"], settings.taxonomy_prompt_tag_limit),
    )
    logger.info(
        "WordPress taxonomies fetched",
        extra={
            "site_url": site_url,
            "categories_count": len(names.categories),
            "tags_count": len(names.tags),
        },
    )
    return names
