"""Tests for the taxonomy API endpoints.

Tests cover:
- POST /api/v1/taxonomy/resolve success and tag creation
- Comma-separated name coercion
- Request validation errors (422)
- Unreachable WordPress site (502)
- POST /api/v1/taxonomy/names
- Health check and request id header
"""

from collections.abc import Generator
from typing import Any
from unittest.mock import patch

import httpx
import pytest
from httpx import AsyncClient

from wp_autopost.integrations.wordpress import WordPressClient

SITE_URL = "https://blog.example.com"


@pytest.fixture
def routed_site(wp_site) -> Generator[Any, None, None]:
    """Send every client the API opens to the fake site."""

    def factory(site_url: str, username: str, app_password: str) -> WordPressClient:
        return WordPressClient(
            site_url,
            username,
            app_password,
            transport=httpx.MockTransport(wp_site.handler),
        )

    with patch(
        "wp_autopost.services.taxonomy_reconciliation.WordPressClient",
        side_effect=factory,
    ):
        yield wp_site


def _payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "site_url": SITE_URL,
        "username": "editor",
        "app_password": "abcd efgh ijkl mnop",
    }
    payload.update(overrides)
    return payload


class TestResolveEndpoint:
    """Tests for POST /api/v1/taxonomy/resolve."""

    @pytest.mark.asyncio
    async def test_resolves_and_creates_tags(
        self, async_client: AsyncClient, routed_site
    ) -> None:
        routed_site.terms["categories"] = [{"id": 5, "name": "Tech", "slug": "tech"}]
        routed_site.next_tag_id = 20

        response = await async_client.post(
            "/api/v1/taxonomy/resolve",
            json=_payload(
                category_names=["Tech", "Fishing"], tag_names=["bass", "fly fishing"]
            ),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["category_ids"] == [5]
        assert data["unmatched_categories"] == ["Fishing"]
        assert data["tag_ids"] == [20, 21]
        assert data["created_tag_ids"] == [20, 21]
        assert data["failed_tags"] == []

    @pytest.mark.asyncio
    async def test_accepts_comma_separated_names(
        self, async_client: AsyncClient, routed_site
    ) -> None:
        routed_site.terms["tags"] = [
            {"id": 7, "name": "Bass", "slug": "bass"},
            {"id": 8, "name": "Lures", "slug": "lures"},
        ]

        response = await async_client.post(
            "/api/v1/taxonomy/resolve",
            json=_payload(tag_names="bass, lures"),
        )

        assert response.status_code == 200
        assert response.json()["tag_ids"] == [7, 8]

    @pytest.mark.asyncio
    async def test_null_names_resolve_to_nothing(
        self, async_client: AsyncClient, routed_site
    ) -> None:
        response = await async_client.post(
            "/api/v1/taxonomy/resolve",
            json=_payload(category_names=None, tag_names=None),
        )

        assert response.status_code == 200
        assert response.json()["category_ids"] == []
        assert routed_site.requests == []

    @pytest.mark.asyncio
    async def test_create_missing_tags_disabled(
        self, async_client: AsyncClient, routed_site
    ) -> None:
        response = await async_client.post(
            "/api/v1/taxonomy/resolve",
            json=_payload(tag_names=["bass"], create_missing_tags=False),
        )

        assert response.status_code == 200
        assert response.json()["unmatched_tags"] == ["bass"]
        assert routed_site.create_requests() == []

    @pytest.mark.asyncio
    async def test_second_request_served_from_cache(
        self, async_client: AsyncClient, routed_site
    ) -> None:
        routed_site.terms["categories"] = [{"id": 5, "name": "Tech", "slug": "tech"}]
        body = _payload(category_names=["Tech"])

        await async_client.post("/api/v1/taxonomy/resolve", json=body)
        await async_client.post("/api/v1/taxonomy/resolve", json=body)

        assert len(routed_site.listing_requests("categories")) == 1

    @pytest.mark.asyncio
    async def test_invalid_site_url(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/v1/taxonomy/resolve",
            json=_payload(site_url="blog.example.com"),
        )

        assert response.status_code == 422
        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert "site_url" in data["error"]

    @pytest.mark.asyncio
    async def test_blank_password(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/v1/taxonomy/resolve",
            json=_payload(app_password="   "),
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unreachable_site(
        self, async_client: AsyncClient, routed_site
    ) -> None:
        routed_site.unreachable = True

        response = await async_client.post(
            "/api/v1/taxonomy/resolve",
            json=_payload(category_names=["Tech"], tag_names=["bass"]),
        )

        assert response.status_code == 502
        data = response.json()
        assert data["code"] == "TAXONOMY_UNAVAILABLE"
        assert "request_id" in data
        assert "abcd efgh ijkl mnop" not in response.text


class TestNamesEndpoint:
    """Tests for POST /api/v1/taxonomy/names."""

    @pytest.mark.asyncio
    async def test_lists_existing_names(
        self, async_client: AsyncClient, routed_site
    ) -> None:
        routed_site.terms["categories"] = [
            {"id": 1, "name": "Fishing", "slug": "fishing"}
        ]
        routed_site.terms["tags"] = [{"id": 2, "name": "Bass", "slug": "bass"}]

        response = await async_client.post("/api/v1/taxonomy/names", json=_payload())

        assert response.status_code == 200
        assert response.json() == {"categories": ["fishing"], "tags": ["bass"]}

    @pytest.mark.asyncio
    async def test_unreachable_site_returns_empty_lists(
        self, async_client: AsyncClient, routed_site
    ) -> None:
        routed_site.unreachable = True

        response = await async_client.post("/api/v1/taxonomy/names", json=_payload())

        assert response.status_code == 200
        assert response.json() == {"categories": [], "tags": []}


class TestHealth:
    """Tests for the health endpoint and request middleware."""

    @pytest.mark.asyncio
    async def test_health(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_request_id_header(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health")

        assert response.headers.get("X-Request-ID")
