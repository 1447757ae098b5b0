"""In-process TTL cache for fetched site taxonomies.

One entry per site URL and username holding the category and/or tag index.
An entry expires as a whole: once stale, or once the site's tags change,
every index for that site is dropped together.

The cache is an explicit object handed to the reconciler, never a module
global, so callers control its lifetime and tests control its clock.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from wp_autopost.core.logging import get_logger
from wp_autopost.integrations.wordpress import TaxonomyKind
from wp_autopost.services.taxonomy_fetch import TaxonomyIndex

logger = get_logger(__name__)


@dataclass
class CacheStats:
    """Statistics for cache operations."""

    hits: int = 0
    misses: int = 0
    invalidations: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total


@dataclass
class CachedSiteTaxonomies:
    """Cached indexes for one site."""

    site_url: str
    username: str
    expires_at: float
    indexes: dict[TaxonomyKind, TaxonomyIndex] = field(default_factory=dict)


def _site_key(site_url: str) -> str:
    return site_url.strip().rstrip("/").lower()


def _cache_key(site_url: str, username: str) -> tuple[str, str]:
    return _site_key(site_url), username


class TaxonomyCache:
    """Taxonomy index cache keyed by site and username, with a fixed TTL.

    A hit only proves that the same username listed the site recently; the
    application password of the current request is not checked until it
    makes a live call (such as tag creation).

    Args:
        ttl_seconds: Lifetime of a site entry. Zero or less disables caching.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[tuple[str, str], CachedSiteTaxonomies] = {}
        self.stats = CacheStats()

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    def _live_entry(
        self, site_url: str, username: str
    ) -> CachedSiteTaxonomies | None:
        key = _cache_key(site_url, username)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            logger.debug("Taxonomy cache entry expired", extra={"site_url": entry.site_url})
            return None
        return entry

    def get(
        self, site_url: str, kind: TaxonomyKind, username: str = ""
    ) -> TaxonomyIndex | None:
        """Return the cached index, or None when absent or stale."""
        if not self.enabled:
            return None
        entry = self._live_entry(site_url, username)
        index = entry.indexes.get(kind) if entry else None
        if index is None:
            self.stats.misses += 1
        else:
            self.stats.hits += 1
        return index

    def put(self, site_url: str, index: TaxonomyIndex, username: str = "") -> None:
        """Store an index for a site.

        A new entry starts a fresh TTL; adding the other kind to a live entry
        keeps its original expiry so both kinds expire together.
        """
        if not self.enabled:
            return
        entry = self._live_entry(site_url, username)
        if entry is None:
            entry = CachedSiteTaxonomies(
                site_url=site_url,
                username=username,
                expires_at=self._clock() + self._ttl,
            )
            self._entries[_cache_key(site_url, username)] = entry
        entry.indexes[index.kind] = index

    def invalidate(self, site_url: str) -> None:
        """Drop every cached index for a site, for every username."""
        site_key = _site_key(site_url)
        stale = [key for key in self._entries if key[0] == site_key]
        for key in stale:
            del self._entries[key]
        if stale:
            self.stats.invalidations += 1
            logger.debug("Taxonomy cache invalidated", extra={"site_url": site_url})

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
