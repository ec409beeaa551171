"""Unit tests for cache entries and cache store adapters."""

from __future__ import annotations

import hashlib
import typing as typ

import msgspec
import pytest

from annalist.cache import (
    CacheEntry,
    CacheStore,
    FilesystemCacheStore,
    MemoryCacheStore,
    cache_key,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

_KEY = "reef:changelog:commit:abc123"


def _entry(key: str = _KEY, *, stored_at: int = 1_000) -> CacheEntry:
    return CacheEntry(
        key=key,
        stored_at=stored_at,
        payload={"sha": "abc123", "files": []},
        revalidation_token='W/"etag-1"',
    )


class TestCacheEntry:
    """Tests for CacheEntry helpers."""

    def test_age_is_measured_from_stored_at(self) -> None:
        """age_ms subtracts stored_at from the supplied time."""
        assert _entry(stored_at=1_000).age_ms(4_500) == 3_500

    def test_touched_advances_only_stored_at(self) -> None:
        """touched keeps payload, key and token."""
        original = _entry()
        touched = original.touched(9_000)

        assert touched.stored_at == 9_000
        assert touched.payload == original.payload
        assert touched.revalidation_token == original.revalidation_token
        assert touched.key == original.key

    def test_encodes_with_camel_case_field_names(self) -> None:
        """Persisted field names are storedAt and revalidationToken."""
        encoded = msgspec.json.decode(msgspec.json.encode(_entry()))

        assert set(encoded) == {"key", "storedAt", "payload", "revalidationToken"}

    def test_cache_key_joins_parts(self) -> None:
        """cache_key joins namespace, resource and identifiers with colons."""
        key = cache_key("reef:changelog", "commits", "octo/reef", "main", "page", 2)
        assert key == "reef:changelog:commits:octo/reef:main:page:2"


class TestMemoryCacheStore:
    """Tests for the in-memory adapter."""

    @pytest.mark.asyncio
    async def test_round_trips_entries(self) -> None:
        """A written entry is returned by read."""
        store = MemoryCacheStore()
        await store.write(_KEY, _entry())

        assert await store.read(_KEY) == _entry()
        assert _KEY in store
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_missing_key_is_a_miss(self) -> None:
        """Unknown keys read as None."""
        assert await MemoryCacheStore().read("nope") is None

    def test_satisfies_protocol(self) -> None:
        """MemoryCacheStore is a CacheStore."""
        assert isinstance(MemoryCacheStore(), CacheStore)


class TestFilesystemCacheStore:
    """Tests for the filesystem adapter."""

    @pytest.mark.asyncio
    async def test_round_trips_entries(self, tmp_path: Path) -> None:
        """Entries survive a fresh store over the same directory."""
        await FilesystemCacheStore(tmp_path).write(_KEY, _entry())

        assert await FilesystemCacheStore(tmp_path).read(_KEY) == _entry()

    def test_file_name_is_key_digest(self, tmp_path: Path) -> None:
        """Keys are hashed so separators never reach the filesystem."""
        digest = hashlib.sha256(_KEY.encode("utf-8")).hexdigest()

        assert FilesystemCacheStore(tmp_path).path_for(_KEY) == (
            tmp_path / f"{digest}.json"
        )

    @pytest.mark.asyncio
    async def test_missing_file_is_a_miss(self, tmp_path: Path) -> None:
        """A key that was never written reads as None."""
        assert await FilesystemCacheStore(tmp_path).read(_KEY) is None

    @pytest.mark.asyncio
    async def test_corrupt_file_is_a_miss(self, tmp_path: Path) -> None:
        """Undecodable documents are treated as absent."""
        store = FilesystemCacheStore(tmp_path)
        store.path_for(_KEY).write_text("{not json", encoding="utf-8")

        assert await store.read(_KEY) is None

    @pytest.mark.asyncio
    async def test_mis_shaped_file_is_a_miss(self, tmp_path: Path) -> None:
        """Documents missing required fields are treated as absent."""
        store = FilesystemCacheStore(tmp_path)
        store.path_for(_KEY).write_text('{"key": "x"}', encoding="utf-8")

        assert await store.read(_KEY) is None

    @pytest.mark.asyncio
    async def test_foreign_key_is_a_miss(self, tmp_path: Path) -> None:
        """A document recorded under another key is not returned."""
        store = FilesystemCacheStore(tmp_path)
        foreign = msgspec.json.encode(_entry("other:key"))
        store.path_for(_KEY).write_bytes(foreign)

        assert await store.read(_KEY) is None

    @pytest.mark.asyncio
    async def test_unwritable_directory_does_not_raise(self, tmp_path: Path) -> None:
        """Write failures are dropped and later reads miss."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = FilesystemCacheStore(blocker / "cache")

        await store.write(_KEY, _entry())

        assert await store.read(_KEY) is None

    @pytest.mark.asyncio
    async def test_write_replaces_previous_entry(self, tmp_path: Path) -> None:
        """A second write for the same key wins."""
        store = FilesystemCacheStore(tmp_path)
        await store.write(_KEY, _entry(stored_at=1))
        await store.write(_KEY, _entry(stored_at=2))

        entry = await store.read(_KEY)
        assert entry is not None
        assert entry.stored_at == 2
        assert not list(tmp_path.glob("*.tmp")), "Expected no leftover temp files"

    def test_satisfies_protocol(self, tmp_path: Path) -> None:
        """FilesystemCacheStore is a CacheStore."""
        assert isinstance(FilesystemCacheStore(tmp_path), CacheStore)
