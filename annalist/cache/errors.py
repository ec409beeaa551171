"""Cache store errors.

Neither error escapes a store's public ``read``/``write`` methods: a read
error is reported as a miss and a write error is logged and dropped.
"""

from __future__ import annotations


class CacheError(RuntimeError):
    """Base class for cache store failures."""

    def __init__(self, message: str, *, key: str) -> None:
        """Initialise with a message and the affected cache key."""
        self.key = key
        super().__init__(message)


class CacheReadError(CacheError):
    """Raised when a cache entry cannot be read or decoded."""

    @classmethod
    def unreadable(cls, key: str, reason: object) -> CacheReadError:
        """Return an error for an entry whose file could not be read."""
        return cls(f"cache entry {key!r} unreadable: {reason}", key=key)

    @classmethod
    def malformed(cls, key: str, reason: object) -> CacheReadError:
        """Return an error for an entry with corrupt or mis-shaped content."""
        return cls(f"cache entry {key!r} malformed: {reason}", key=key)

    @classmethod
    def key_mismatch(cls, key: str, stored_key: str) -> CacheReadError:
        """Return an error for an entry stored under a different key."""
        return cls(f"cache entry {key!r} holds data for {stored_key!r}", key=key)


class CacheWriteError(CacheError):
    """Raised when a cache entry cannot be persisted."""

    @classmethod
    def unwritable(cls, key: str, reason: object) -> CacheWriteError:
        """Return an error for an entry that could not be written."""
        return cls(f"cache entry {key!r} not written: {reason}", key=key)
