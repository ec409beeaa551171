"""Common time utilities."""

from __future__ import annotations

import datetime as dt
import time


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def epoch_ms() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def from_epoch_seconds(value: int) -> dt.datetime:
    """Convert epoch seconds (as sent in rate-limit headers) to aware UTC."""
    return dt.datetime.fromtimestamp(value, tz=dt.UTC)


def parse_github_datetime(value: str) -> dt.datetime:
    """Parse a GitHub ISO-8601 timestamp into an aware UTC datetime.

    Raises
    ------
    ValueError
        If the value is not ISO-8601 or carries no timezone.

    """
    text = value.replace("Z", "+00:00")
    parsed = dt.datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        msg = f"GitHub datetime missing timezone: {value}"
        raise ValueError(msg)
    return parsed.astimezone(dt.UTC)
