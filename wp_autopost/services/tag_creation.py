"""Create tags that do not exist on the site yet.

Tags are an open list: any requested tag that resolved to nothing is
created. Every creation is independent; one failure never stops the rest.
"""

from dataclasses import dataclass, field

from wp_autopost.core.config import get_settings
from wp_autopost.core.logging import wordpress_logger
from wp_autopost.integrations.wordpress import (
    WordPressClient,
    WordPressError,
    parse_term_id,
)
from wp_autopost.services.taxonomy_names import normalize_taxonomy_name


@dataclass
class TagCreationResult:
    """Outcome of a tag creation batch."""

    created_ids: list[int] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def _existing_term_id(error: WordPressError) -> int | None:
    """Term id from a ``term_exists`` conflict, if the response carries one."""
    if error.status_code != 400 or error.error_code != "term_exists":
        return None
    data = (error.response_body or {}).get("data")
    if not isinstance(data, dict):
        return None
    return parse_term_id(data.get("term_id"))


async def create_missing_tags(
    client: WordPressClient,
    names: list[str],
    max_length: int | None = None,
) -> TagCreationResult:
    """Create each named tag and collect the new ids.

    Names longer than ``max_length`` are skipped with a warning. Names that
    normalize to the same key are only created once. A ``term_exists``
    conflict (the tag appeared since the listing) yields the existing id.

    Returns:
        TagCreationResult with ids in order of successful creation.
    """
    if max_length is None:
        max_length = get_settings().wordpress_tag_name_max_length

    result = TagCreationResult()
    seen: set[str] = set()

    for name in names:
        if len(name) > max_length:
            wordpress_logger.tag_skipped(name, max_length)
            result.skipped.append(name)
            continue

        key = normalize_taxonomy_name(name)
        if not key or key in seen:
            continue
        seen.add(key)

        try:
            created = await client.create_tag(name)
        except WordPressError as e:
            existing_id = _existing_term_id(e)
            if existing_id is not None:
                wordpress_logger.tag_created(name, existing_id, existed=True)
                if existing_id not in result.created_ids:
                    result.created_ids.append(existing_id)
                continue
            wordpress_logger.tag_creation_failed(name, str(e), type(e).__name__)
            result.failed.append(name)
            continue

        tag_id = parse_term_id(created.get("id"))
        if tag_id is None:
            wordpress_logger.tag_creation_failed(
                name, "Response did not include an id", "InvalidResponse"
            )
            result.failed.append(name)
            continue

        wordpress_logger.tag_created(name, tag_id)
        result.created_ids.append(tag_id)

    return result
