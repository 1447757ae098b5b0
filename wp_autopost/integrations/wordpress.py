"""WordPress REST API client for taxonomy listing and tag creation.

Uses httpx with HTTP Basic Auth (application passwords). Handles paged
category/tag listing and single-tag creation.

Features:
- Async HTTP client using httpx
- Retry on 429 Too Many Requests with exponential backoff
- httpx transport errors translated into a WordPressError hierarchy
- Outbound call logging with timing (credentials never logged)
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Literal, cast

import httpx

from wp_autopost.core.config import get_settings
from wp_autopost.core.logging import get_logger, wordpress_logger

logger = get_logger(__name__)

TaxonomyKind = Literal["categories", "tags"]

TAXONOMY_KINDS: tuple[TaxonomyKind, ...] = ("categories", "tags")


@dataclass
class WPTaxonomyPage:
    """One page of a taxonomy listing."""

    kind: TaxonomyKind
    page: int
    items: list[dict[str, Any]]
    total_pages: int | None = None


class WordPressError(Exception):
    """Base exception for WordPress API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body

    @property
    def error_code(self) -> str | None:
        """WordPress error code from the response body (e.g. ``term_exists``)."""
        if not self.response_body:
            return None
        code = self.response_body.get("code")
        return str(code) if code is not None else None


class WordPressTimeoutError(WordPressError):
    """Raised when a request times out."""

    pass


class WordPressConnectionError(WordPressError):
    """Raised when the site cannot be reached or the request breaks off.

    Covers DNS failures, refused connections, TLS errors, redirect loops and
    undecodable bodies.
    """

    pass


class WordPressRateLimitError(WordPressError):
    """Raised when still rate limited (429) after all retries."""

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        response_body: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code=429, response_body=response_body)
        self.retry_after = retry_after


class WordPressAuthError(WordPressError):
    """Raised when authentication fails (401/403)."""

    pass


def _parse_retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def parse_term_id(value: Any) -> int | None:
    """Return a positive WordPress term id, or None for anything else.

    Accepts ints and digit strings; rejects bools, zero and junk.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int) and value > 0:
        return value
    if isinstance(value, str) and value.isdigit() and int(value) > 0:
        return int(value)
    return None


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


class WordPressClient:
    """WordPress REST API client using httpx + Basic Auth.

    Args:
        site_url: The WordPress site URL (e.g. https://example.com).
        username: WordPress username.
        app_password: WordPress application password.
        timeout: Request timeout in seconds. Defaults to settings.
        max_retries: Retry attempts on 429. Defaults to settings.
        retry_delay: Base retry delay, doubled each attempt. Defaults to settings.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        site_url: str,
        username: str,
        app_password: str,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()

        self._site_url = site_url.rstrip("/")
        self._username = username
        self._api_base = f"{self._site_url}/wp-json/wp/v2"
        self._timeout = timeout if timeout is not None else settings.wordpress_timeout
        self._max_retries = (
            max_retries if max_retries is not None else settings.wordpress_max_retries
        )
        self._retry_delay = (
            retry_delay if retry_delay is not None else settings.wordpress_retry_delay
        )
        self._client = httpx.AsyncClient(
            auth=(username, app_password),
            timeout=self._timeout,
            follow_redirects=True,
            transport=transport,
        )

    @property
    def site_url(self) -> str:
        """Site URL without trailing slash."""
        return self._site_url

    @property
    def username(self) -> str:
        """WordPress username the client authenticates as."""
        return self._username

    async def __aenter__(self) -> "WordPressClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request, retrying on 429 and translating failures.

        Raises:
            WordPressTimeoutError: If the request times out.
            WordPressConnectionError: If the site is unreachable.
            WordPressRateLimitError: If still rate limited after retries.
            WordPressAuthError: On 401/403.
            WordPressError: On any other non-2xx response.
        """
        url = f"{self._api_base}/{endpoint}"

        for attempt in range(self._max_retries + 1):
            wordpress_logger.api_call_start(method, endpoint, retry_attempt=attempt)
            start_time = time.monotonic()
            try:
                response = await self._client.request(
                    method, url, params=params, json=json
                )
            except httpx.TimeoutException as e:
                duration_ms = (time.monotonic() - start_time) * 1000
                wordpress_logger.api_call_error(
                    method, endpoint, duration_ms, None, str(e), "TimeoutError", attempt
                )
                raise WordPressTimeoutError(
                    f"Request to {endpoint} timed out after {self._timeout}s"
                ) from e
            except httpx.TransportError as e:
                duration_ms = (time.monotonic() - start_time) * 1000
                wordpress_logger.api_call_error(
                    method, endpoint, duration_ms, None, str(e), type(e).__name__, attempt
                )
                raise WordPressConnectionError(
                    f"Could not reach {self._site_url}: {e}"
                ) from e
            except httpx.RequestError as e:
                # Redirect loops, undecodable bodies
                duration_ms = (time.monotonic() - start_time) * 1000
                wordpress_logger.api_call_error(
                    method, endpoint, duration_ms, None, str(e), type(e).__name__, attempt
                )
                raise WordPressConnectionError(
                    f"Request to {self._site_url} failed: {e}"
                ) from e

            duration_ms = (time.monotonic() - start_time) * 1000
            status_code = response.status_code

            if status_code == 429:
                retry_after = _parse_retry_after(response)
                if attempt < self._max_retries:
                    delay = retry_after or self._retry_delay * (2**attempt)
                    wordpress_logger.rate_limit(endpoint, delay, attempt + 1)
                    await asyncio.sleep(delay)
                    continue
                wordpress_logger.api_call_error(
                    method, endpoint, duration_ms, 429, "Rate limited", "RateLimitError", attempt
                )
                raise WordPressRateLimitError(
                    "WordPress API rate limit exceeded",
                    retry_after=retry_after,
                    response_body=_safe_json(response),
                )

            if status_code in (401, 403):
                wordpress_logger.auth_failure(endpoint, status_code)
                raise WordPressAuthError(
                    f"WordPress authentication failed ({status_code})",
                    status_code=status_code,
                    response_body=_safe_json(response),
                )

            if status_code >= 400:
                body = _safe_json(response)
                body_dict = body if isinstance(body, dict) else None
                message = (body_dict or {}).get("message") or response.reason_phrase
                wordpress_logger.api_call_error(
                    method, endpoint, duration_ms, status_code, str(message), "HTTPError", attempt
                )
                raise WordPressError(
                    f"WordPress API error: {message}",
                    status_code=status_code,
                    response_body=body_dict,
                )

            wordpress_logger.api_call_success(method, endpoint, duration_ms, status_code)
            return response

        # Unreachable: the last attempt either returns or raises
        raise WordPressRateLimitError("WordPress API rate limit exceeded")

    async def list_terms(
        self, kind: TaxonomyKind, page: int, per_page: int = 100
    ) -> WPTaxonomyPage:
        """Fetch one page of categories or tags.

        Raises:
            WordPressError: On transport failure, non-2xx, or a non-list body.
        """
        response = await self._request(
            "GET", kind, params={"page": page, "per_page": per_page}
        )
        data = _safe_json(response)
        if not isinstance(data, list):
            logger.warning(
                "Unexpected taxonomy listing body",
                extra={"kind": kind, "page": page, "body_type": type(data).__name__},
            )
            raise WordPressError(
                f"Unexpected {kind} listing response on page {page}",
                status_code=response.status_code,
            )

        total_pages: int | None = None
        header = response.headers.get("X-WP-TotalPages")
        if header is not None and header.isdigit():
            total_pages = int(header)

        return WPTaxonomyPage(
            kind=kind,
            page=page,
            items=cast(list[dict[str, Any]], data),
            total_pages=total_pages,
        )

    async def create_tag(self, name: str) -> dict[str, Any]:
        """Create a tag and return the created term.

        Raises:
            WordPressError: On failure. A ``term_exists`` conflict carries
                ``error_code == "term_exists"`` and the existing id in
                ``response_body["data"]["term_id"]``.
        """
        response = await self._request("POST", "tags", json={"name": name})
        data = _safe_json(response)
        if not isinstance(data, dict):
            raise WordPressError(
                "Unexpected tag creation response", status_code=response.status_code
            )
        return cast(dict[str, Any], data)

    async def close(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()
        logger.debug("WordPress client closed", extra={"site_url": self._site_url})
