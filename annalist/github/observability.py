"""Structured log events for GitHub REST fetches.

Every fetch ends in exactly one event: a cache hit, a revalidation, a
completed network fetch, or a failure. Events are emitted as
``[event.type] key=value`` lines through femtologging.
"""

from __future__ import annotations

import enum

from annalist.logging import get_logger, log_debug, log_info, log_warning

from .errors import RemoteFetchError

logger = get_logger(__name__)


class FetchEventType(enum.StrEnum):
    """Structured log event types for cached fetches."""

    CACHE_HIT = "github.fetch.cache_hit"
    REVALIDATED = "github.fetch.revalidated"
    COMPLETED = "github.fetch.completed"
    FAILED = "github.fetch.failed"


class FetchEventLogger:
    """Emit cached-fetch events via femtologging."""

    def log_cache_hit(self, *, cache_key: str, age_ms: int) -> None:
        """Log a fresh entry served without a network call."""
        log_debug(
            logger,
            "[%s] cache_key=%s age_ms=%d",
            FetchEventType.CACHE_HIT,
            cache_key,
            age_ms,
        )

    def log_revalidated(self, *, cache_key: str) -> None:
        """Log a stale entry confirmed unchanged by a 304 response."""
        log_debug(
            logger,
            "[%s] cache_key=%s",
            FetchEventType.REVALIDATED,
            cache_key,
        )

    def log_completed(
        self, *, cache_key: str, status_code: int, etag: str | None
    ) -> None:
        """Log a payload fetched from the network and cached."""
        log_info(
            logger,
            "[%s] cache_key=%s status=%d etag=%s",
            FetchEventType.COMPLETED,
            cache_key,
            status_code,
            etag,
        )

    def log_failed(self, *, cache_key: str, error: RemoteFetchError) -> None:
        """Log a fetch that raised :class:`RemoteFetchError`."""
        log_warning(
            logger,
            "[%s] cache_key=%s status=%s rate_limit_remaining=%s "
            "rate_limit_reset=%s error=%s",
            FetchEventType.FAILED,
            cache_key,
            error.status_code,
            error.rate_limit_remaining,
            error.rate_limit_reset,
            error,
        )
