"""Typed cache entry structures."""

from __future__ import annotations

import typing as typ

import msgspec


class CacheEntry(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """A cached API payload with its freshness metadata.

    Attributes
    ----------
    key : str
        Cache key the entry was stored under.
    stored_at : int
        Epoch milliseconds when the payload was fetched or last revalidated.
        Persisted as ``storedAt``.
    revalidation_token : str | None
        Entity tag from the response that produced the payload. Persisted as
        ``revalidationToken``.
    payload : Any
        Decoded JSON body of the response.

    """

    key: str
    stored_at: int
    payload: typ.Any
    revalidation_token: str | None = None

    def age_ms(self, now_ms: int) -> int:
        """Return how long ago the entry was stored, in milliseconds."""
        return now_ms - self.stored_at

    def touched(self, now_ms: int) -> CacheEntry:
        """Return a copy with only ``stored_at`` advanced to ``now_ms``."""
        return msgspec.structs.replace(self, stored_at=now_ms)


def cache_key(namespace: str, resource: str, *identifiers: object) -> str:
    """Build a ``{namespace}:{resource}:{identifiers...}`` cache key.

    Examples
    --------
    >>> cache_key("marble:changelog", "commit", "abc123")
    'marble:changelog:commit:abc123'

    """
    parts = [namespace, resource, *(str(part) for part in identifiers)]
    return ":".join(parts)
