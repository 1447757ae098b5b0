"""Map requested taxonomy names onto known term ids.

Exact lookup on the normalized name first, then a permissive substring
fallback that tolerates small phrasing drift in LLM output
("fishing rod" vs "fishing rods").
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from wp_autopost.core.logging import get_logger
from wp_autopost.services.taxonomy_fetch import TaxonomyIndex
from wp_autopost.services.taxonomy_names import normalize_taxonomy_name

logger = get_logger(__name__)


def find_fuzzy_match(target: str, candidates: Iterable[str]) -> str | None:
    """Find the candidate that best contains (or is contained in) target.

    An exact member wins outright. Otherwise the substring matches are
    ranked by how close their length is to the target's; ties go to the
    first candidate seen. Returns None when nothing qualifies.
    """
    if not target:
        return None

    pool = [c for c in candidates if c]
    if target in pool:
        return target

    matches = [c for c in pool if target in c or c in target]
    if not matches:
        return None

    # min() keeps the first of equally close candidates
    return min(matches, key=lambda c: abs(len(c) - len(target)))


@dataclass
class NameResolution:
    """Outcome of resolving names against one TaxonomyIndex."""

    ids: list[int] = field(default_factory=list)
    unmatched: list[str] = field(default_factory=list)
    fuzzy_matches: dict[str, str] = field(default_factory=dict)


def resolve_ids(names: list[str], index: TaxonomyIndex) -> NameResolution:
    """Resolve names to ids in input order.

    Each id appears once even when several names land on it. Names that
    normalize to nothing are ignored; names with no exact or fuzzy match
    are returned in ``unmatched`` as given.
    """
    resolution = NameResolution()
    candidates: list[str] | None = None

    for name in names:
        key = normalize_taxonomy_name(name)
        if not key:
            continue

        term_id = index.get(key)
        if term_id is None:
            if candidates is None:
                candidates = index.keys()
            match = find_fuzzy_match(key, candidates)
            if match is not None:
                term_id = index.get(match)
                resolution.fuzzy_matches[name] = match
                logger.debug(
                    "Fuzzy taxonomy match",
                    extra={"kind": index.kind, "requested": name, "matched": match},
                )

        if term_id is None:
            resolution.unmatched.append(name)
        elif term_id not in resolution.ids:
            resolution.ids.append(term_id)

    return resolution
