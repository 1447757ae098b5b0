"""Pydantic v2 schemas for taxonomy API endpoints.

Schemas for taxonomy resolution requests and responses:
- TaxonomyResolveRequest: Names to resolve for one WordPress site
- TaxonomyResolveResponse: Resolved ids plus unresolved names
- TaxonomyNamesRequest / TaxonomyNamesResponse: Existing names for prompts
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from wp_autopost.services.taxonomy_names import coerce_name_list


class WPSiteCredentials(BaseModel):
    """WordPress site and application-password credentials."""

    site_url: str = Field(..., description="WordPress site URL (e.g. https://example.com)")
    username: str = Field(..., description="WordPress username")
    app_password: str = Field(..., description="WordPress application password")

    @field_validator("site_url")
    @classmethod
    def validate_site_url(cls, v: str) -> str:
        """Validate the site URL has an http(s) scheme."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("Invalid WordPress URL format")
        return v.rstrip("/")

    @field_validator("username", "app_password")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject blank credentials."""
        if not v.strip():
            raise ValueError("cannot be empty")
        return v


class TaxonomyResolveRequest(WPSiteCredentials):
    """Request to resolve category/tag names into term ids."""

    category_names: list[str] = Field(
        default_factory=list,
        description="Category names (list or comma-separated string)",
        examples=[["Fishing", "Gear Reviews"]],
    )
    tag_names: list[str] = Field(
        default_factory=list,
        description="Tag names (list or comma-separated string)",
        examples=[["bass", "fly fishing"]],
    )
    create_missing_tags: bool = Field(
        True,
        description="Create tags that do not exist on the site",
    )

    @field_validator("category_names", "tag_names", mode="before")
    @classmethod
    def coerce_names(cls, v: Any) -> list[str]:
        """Accept a list, a comma-separated string, or null."""
        return coerce_name_list(v)


class TaxonomyResolveResponse(BaseModel):
    """Resolved term ids for a post."""

    category_ids: list[int] = Field(default_factory=list)
    tag_ids: list[int] = Field(default_factory=list)
    unmatched_categories: list[str] = Field(
        default_factory=list, description="Requested categories with no match (dropped)"
    )
    unmatched_tags: list[str] = Field(
        default_factory=list, description="Requested tags with no existing match"
    )
    created_tag_ids: list[int] = Field(
        default_factory=list, description="Ids of tags created by this request"
    )
    failed_tags: list[str] = Field(
        default_factory=list, description="Tags that could not be created"
    )


class TaxonomyNamesRequest(WPSiteCredentials):
    """Request for existing category/tag names."""


class TaxonomyNamesResponse(BaseModel):
    """Existing names suitable for the metadata prompt."""

    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
