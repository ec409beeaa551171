"""Local cache store for remote API responses."""

from __future__ import annotations

from .errors import CacheError, CacheReadError, CacheWriteError
from .models import CacheEntry, cache_key
from .store import CacheStore, FilesystemCacheStore, MemoryCacheStore

__all__ = [
    "CacheEntry",
    "CacheError",
    "CacheReadError",
    "CacheStore",
    "CacheWriteError",
    "FilesystemCacheStore",
    "MemoryCacheStore",
    "cache_key",
]
