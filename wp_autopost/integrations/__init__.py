"""External service integrations."""

from wp_autopost.integrations.wordpress import (
    TAXONOMY_KINDS,
    TaxonomyKind,
    WordPressAuthError,
    WordPressClient,
    WordPressConnectionError,
    WordPressError,
    WordPressRateLimitError,
    WordPressTimeoutError,
    WPTaxonomyPage,
    parse_term_id,
)

__all__ = [
    "TAXONOMY_KINDS",
    "TaxonomyKind",
    "WordPressAuthError",
    "WordPressClient",
    "WordPressConnectionError",
    "WordPressError",
    "WordPressRateLimitError",
    "WordPressTimeoutError",
    "WPTaxonomyPage",
    "parse_term_id",
]
