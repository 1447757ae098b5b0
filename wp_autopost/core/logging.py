"""Structured logging configuration.

All logs go to stdout for the hosting platform to capture.
Uses JSON format for structured logging in production.

ERROR LOGGING REQUIREMENTS:
- Log all outbound WordPress calls with endpoint, method, timing
- Log rate limits (429) and auth failures (401/403) at WARNING level
- Include retry attempt number in logs
- Never log application passwords
- Log reconciliation state transitions
"""

import logging
import sys
from datetime import UTC, datetime
from typing import Any

from pythonjsonlogger import jsonlogger

from wp_autopost.core.config import get_settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[name-defined]
    """Custom JSON formatter with additional fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(UTC).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def setup_logging() -> None:
    """Configure application logging.

    Uses JSON format in production, text format in development.
    """
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper()))

    # Clear existing handlers
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    formatter: logging.Formatter
    if settings.log_format == "json":
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Set log levels for noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)


class WordPressLogger:
    """Logger for WordPress REST API and taxonomy operations.

    Logs all outbound API calls with endpoint, method, timing.
    Handles timeouts, rate limits (429), auth failures (401/403).
    Includes retry attempt number in logs.
    """

    def __init__(self) -> None:
        self.logger = get_logger("wordpress")

    def api_call_start(
        self, method: str, endpoint: str, retry_attempt: int = 0
    ) -> None:
        """Log outbound API call start at DEBUG level."""
        self.logger.debug(
            f"WordPress API call: {method} {endpoint}",
            extra={
                "method": method,
                "endpoint": endpoint,
                "retry_attempt": retry_attempt,
            },
        )

    def api_call_success(
        self, method: str, endpoint: str, duration_ms: float, status_code: int
    ) -> None:
        """Log successful API call at DEBUG level."""
        self.logger.debug(
            f"WordPress API call completed: {method} {endpoint}",
            extra={
                "method": method,
                "endpoint": endpoint,
                "duration_ms": round(duration_ms, 2),
                "status_code": status_code,
                "success": True,
            },
        )

    def api_call_error(
        self,
        method: str,
        endpoint: str,
        duration_ms: float,
        status_code: int | None,
        error: str,
        error_type: str,
        retry_attempt: int = 0,
    ) -> None:
        """Log failed API call at WARNING or ERROR level based on status."""
        # 4xx at WARNING, 5xx and transport errors at ERROR
        level = logging.WARNING if status_code and 400 <= status_code < 500 else logging.ERROR
        self.logger.log(
            level,
            f"WordPress API call failed: {method} {endpoint}",
            extra={
                "method": method,
                "endpoint": endpoint,
                "duration_ms": round(duration_ms, 2),
                "status_code": status_code,
                "error": error,
                "error_type": error_type,
                "retry_attempt": retry_attempt,
                "success": False,
            },
        )

    def rate_limit(
        self, endpoint: str, delay: float, retry_attempt: int
    ) -> None:
        """Log rate limit (429) at WARNING level."""
        self.logger.warning(
            "WordPress API rate limited, retrying",
            extra={
                "endpoint": endpoint,
                "delay_seconds": delay,
                "retry_attempt": retry_attempt,
            },
        )

    def auth_failure(self, endpoint: str, status_code: int) -> None:
        """Log authentication failure (401/403) at WARNING level."""
        self.logger.warning(
            f"WordPress authentication failed ({status_code})",
            extra={"endpoint": endpoint, "status_code": status_code},
        )

    def taxonomy_page_fetched(self, kind: str, page: int, item_count: int) -> None:
        """Log a fetched taxonomy listing page at DEBUG level."""
        self.logger.debug(
            f"Fetched {kind} page {page}",
            extra={"kind": kind, "page": page, "item_count": item_count},
        )

    def taxonomy_fetch_failed(
        self, kind: str, page: int, error: str, error_type: str
    ) -> None:
        """Log a listing failure that truncated pagination."""
        self.logger.error(
            f"Error fetching {kind}",
            extra={
                "kind": kind,
                "page": page,
                "error": error,
                "error_type": error_type,
            },
        )

    def taxonomy_fetch_complete(
        self, kind: str, pages: int, key_count: int, complete: bool
    ) -> None:
        """Log the end of a taxonomy listing."""
        self.logger.info(
            f"WordPress {kind} fetched",
            extra={
                "kind": kind,
                "pages": pages,
                "key_count": key_count,
                "complete": complete,
            },
        )

    def tag_created(self, name: str, tag_id: int, existed: bool = False) -> None:
        """Log creation of a new tag."""
        self.logger.info(
            f"Created new tag: {name}" if not existed else f"Tag already exists: {name}",
            extra={"tag_name": name, "tag_id": tag_id, "existed": existed},
        )

    def tag_creation_failed(self, name: str, error: str, error_type: str) -> None:
        """Log a failed tag creation at ERROR level."""
        self.logger.error(
            f"Failed to create tag: {name}",
            extra={"tag_name": name, "error": error, "error_type": error_type},
        )

    def tag_skipped(self, name: str, max_length: int) -> None:
        """Log a tag skipped for exceeding the length limit."""
        self.logger.warning(
            f"Skipping tag that exceeds length limit: {name[:50]}...",
            extra={"tag_length": len(name), "max_length": max_length},
        )

    def reconciliation_state_change(
        self, site_url: str, previous_state: str, new_state: str
    ) -> None:
        """Log reconciliation state transition at DEBUG level."""
        self.logger.debug(
            "Taxonomy reconciliation state change",
            extra={
                "site_url": site_url,
                "previous_state": previous_state,
                "new_state": new_state,
            },
        )

    def reconciliation_complete(
        self,
        site_url: str,
        category_count: int,
        tag_count: int,
        created_count: int,
        duration_ms: float,
    ) -> None:
        """Log completed reconciliation at INFO level."""
        self.logger.info(
            "Taxonomy reconciliation complete",
            extra={
                "site_url": site_url,
                "category_count": category_count,
                "tag_count": tag_count,
                "created_tag_count": created_count,
                "duration_ms": round(duration_ms, 2),
            },
        )


# Singleton WordPress logger
wordpress_logger = WordPressLogger()
