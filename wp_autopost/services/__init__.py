"""Services layer - Business logic and orchestration.

Services coordinate integrations to implement business use cases. They
contain no direct HTTP access - that's delegated to integrations.
"""

from wp_autopost.services.tag_creation import TagCreationResult, create_missing_tags
from wp_autopost.services.taxonomy_cache import CacheStats, TaxonomyCache
from wp_autopost.services.taxonomy_fetch import (
    TaxonomyFetchResult,
    TaxonomyIndex,
    fetch_all_taxonomies,
    list_prompt_names,
)
from wp_autopost.services.taxonomy_matching import (
    NameResolution,
    find_fuzzy_match,
    resolve_ids,
)
from wp_autopost.services.taxonomy_names import (
    coerce_name_list,
    normalize_taxonomy_name,
)
from wp_autopost.services.taxonomy_reconciliation import (
    ExistingTaxonomyNames,
    ReconciliationState,
    ResolutionResult,
    TaxonomyReconciler,
    TaxonomyUnavailableError,
    fetch_existing_names,
    resolve_taxonomy_ids,
)

__all__ = [
    # Names
    "coerce_name_list",
    "normalize_taxonomy_name",
    # Fetch
    "TaxonomyFetchResult",
    "TaxonomyIndex",
    "fetch_all_taxonomies",
    "list_prompt_names",
    # Matching
    "NameResolution",
    "find_fuzzy_match",
    "resolve_ids",
    # Tag creation
    "TagCreationResult",
    "create_missing_tags",
    # Cache
    "CacheStats",
    "TaxonomyCache",
    # Reconciliation
    "ExistingTaxonomyNames",
    "ReconciliationState",
    "ResolutionResult",
    "TaxonomyReconciler",
    "TaxonomyUnavailableError",
    "fetch_existing_names",
    "resolve_taxonomy_ids",
]
