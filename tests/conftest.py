"""Pytest configuration and fixtures.

Provides fixtures for:
- Settings override for testing (no throttling delays)
- A fake WordPress site served through httpx.MockTransport
- WordPress client wired to the fake site
- FastAPI async test client
"""

import json
from collections.abc import AsyncGenerator, Generator
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from wp_autopost.api.v1.taxonomy import get_taxonomy_cache
from wp_autopost.core.config import get_settings
from wp_autopost.integrations.wordpress import WordPressClient

SITE_URL = "https://blog.example.com"

# ---------------------------------------------------------------------------
# Settings Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def test_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Override settings so tests never sleep between pages or retries."""
    monkeypatch.setenv("WORDPRESS_PAGE_DELAY", "0")
    monkeypatch.setenv("WORDPRESS_RETRY_DELAY", "0")
    monkeypatch.setenv("LOG_FORMAT", "text")
    get_settings.cache_clear()
    get_taxonomy_cache.cache_clear()
    yield
    get_settings.cache_clear()
    get_taxonomy_cache.cache_clear()


# ---------------------------------------------------------------------------
# Fake WordPress Site
# ---------------------------------------------------------------------------


class FakeWordPressSite:
    """In-memory WordPress taxonomy endpoints for httpx.MockTransport.

    Serves ``GET /wp-json/wp/v2/{categories,tags}`` with page/per_page
    paging and ``POST /wp-json/wp/v2/tags``. Failures and redirect loops
    can be injected per listing page or per tag name.
    """

    def __init__(
        self,
        categories: list[dict[str, Any]] | None = None,
        tags: list[dict[str, Any]] | None = None,
        next_tag_id: int = 1000,
    ) -> None:
        self.terms: dict[str, list[dict[str, Any]]] = {
            "categories": list(categories or []),
            "tags": list(tags or []),
        }
        self.next_tag_id = next_tag_id
        self.requests: list[httpx.Request] = []
        self.failing_pages: dict[str, set[int]] = {"categories": set(), "tags": set()}
        self.failing_tags: set[str] = set()
        self.redirect_pages: dict[str, set[int]] = {"categories": set(), "tags": set()}
        self.redirect_tags: set[str] = set()
        self.unreachable = False
        self.send_total_pages = True

    def listing_requests(self, kind: str) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == "GET" and r.url.path.endswith(f"/wp/v2/{kind}")
        ]

    def create_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("Name or service not known", request=request)

        kind = request.url.path.rsplit("/", 1)[-1]
        if request.method == "GET" and kind in self.terms:
            return self._list(kind, request)
        if request.method == "POST" and kind == "tags":
            return self._create_tag(request)
        return httpx.Response(404, json={"code": "rest_no_route", "message": "No route"})

    def _list(self, kind: str, request: httpx.Request) -> httpx.Response:
        page = int(request.url.params.get("page", "1"))
        per_page = int(request.url.params.get("per_page", "10"))
        if page in self.redirect_pages[kind]:
            return httpx.Response(302, headers={"Location": str(request.url)})
        if page in self.failing_pages[kind]:
            return httpx.Response(
                500, json={"code": "internal_error", "message": "Database error"}
            )

        items = self.terms[kind]
        chunk = items[(page - 1) * per_page : page * per_page]
        headers = {"X-WP-Total": str(len(items))}
        if self.send_total_pages:
            total_pages = max(1, -(-len(items) // per_page))
            headers["X-WP-TotalPages"] = str(total_pages)
        return httpx.Response(200, json=chunk, headers=headers)

    def _create_tag(self, request: httpx.Request) -> httpx.Response:
        name = json.loads(request.content)["name"]
        if name in self.redirect_tags:
            return httpx.Response(307, headers={"Location": str(request.url)})
        if name in self.failing_tags:
            return httpx.Response(
                500, json={"code": "db_insert_error", "message": "Could not insert term"}
            )
        for tag in self.terms["tags"]:
            if tag["name"].lower() == name.lower():
                return httpx.Response(
                    400,
                    json={
                        "code": "term_exists",
                        "message": "A term with the name provided already exists.",
                        "data": {"status": 400, "term_id": tag["id"]},
                    },
                )
        tag = {"id": self.next_tag_id, "name": name, "slug": name.lower().replace(" ", "-")}
        self.next_tag_id += 1
        self.terms["tags"].append(tag)
        return httpx.Response(201, json=tag)


def make_terms(count: int, start_id: int = 1, prefix: str = "Term") -> list[dict[str, Any]]:
    """Build ``count`` listing items with sequential ids."""
    return [
        {"id": start_id + i, "name": f"{prefix} {i}", "slug": f"{prefix.lower()}-{i}"}
        for i in range(count)
    ]


@pytest.fixture
def wp_site() -> FakeWordPressSite:
    """Empty fake WordPress site."""
    return FakeWordPressSite()


@pytest.fixture(name="make_terms")
def make_terms_fixture() -> Any:
    """Factory for sequential listing items."""
    return make_terms


@pytest.fixture
async def wp_client(wp_site: FakeWordPressSite) -> AsyncGenerator[WordPressClient, None]:
    """WordPress client talking to the fake site."""
    client = WordPressClient(
        SITE_URL,
        "editor",
        "abcd efgh ijkl mnop",
        transport=httpx.MockTransport(wp_site.handler),
    )
    yield client
    await client.close()


# ---------------------------------------------------------------------------
# FastAPI Test Client Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def app():
    """Create FastAPI app for testing."""
    from wp_autopost.main import create_app

    return create_app()


@pytest.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for testing async endpoints."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
