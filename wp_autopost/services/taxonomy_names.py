"""Taxonomy name canonicalization.

Category and tag names reach us from humans, from WordPress (HTML-escaped),
and from LLM output (smart quotes, dashes, stray whitespace). Everything is
reduced to one lookup key before comparison.
"""

import re
from typing import Any

# Applied in order after lower-casing, so entity names are lower-case.
HTML_ENTITY_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#039;", "'"),
    ("&#39;", "'"),
    ("&ndash;", "-"),
    ("&mdash;", "--"),
    ("&hellip;", "..."),
)

UNICODE_REPLACEMENTS: dict[str, str] = {
    "\u2018": "'",  # left single quote
    "\u2019": "'",  # right single quote
    "\u201a": "'",  # low single quote
    "\u201b": "'",  # reversed single quote
    "\u201c": '"',  # left double quote
    "\u201d": '"',  # right double quote
    "\u201e": '"',  # low double quote
    "\u201f": '"',  # reversed double quote
    "\u2026": "...",  # ellipsis
    "\u2013": "-",  # en dash
    "\u2014": "--",  # em dash
    "\u00a0": " ",  # non-breaking space
}

_UNICODE_TABLE = str.maketrans(UNICODE_REPLACEMENTS)
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_taxonomy_name(name: str | None) -> str:
    """Canonicalize a category/tag name for matching.

    Lower-cases, decodes a fixed set of HTML entities, maps Unicode
    punctuation variants to ASCII, collapses whitespace and trims.

    The result is idempotent: normalizing a normalized name returns it
    unchanged.

    Example:
        >>> normalize_taxonomy_name("Cat &amp; Dog’s  Guide")
        "cat & dog's guide"
    """
    if not name:
        return ""

    normalized = name.lower()

    # Repeat until stable so "&amp;amp;" cannot decode differently on a
    # second pass.
    previous = None
    while previous != normalized:
        previous = normalized
        for entity, replacement in HTML_ENTITY_REPLACEMENTS:
            normalized = normalized.replace(entity, replacement)

    normalized = normalized.translate(_UNICODE_TABLE)
    return _WHITESPACE_RE.sub(" ", normalized).strip()


def coerce_name_list(value: Any) -> list[str]:
    """Coerce a loosely-typed names value into a clean list of strings.

    LLM metadata may carry categories/tags as a list, a single
    comma-separated string, or nothing at all.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items: list[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        return []

    names: list[str] = []
    for item in items:
        if not isinstance(item, str):
            continue
        stripped = item.strip()
        if stripped:
            names.append(stripped)
    return names
