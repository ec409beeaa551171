"""Cache store protocol and adapters.

The store is an optimisation, never a correctness requirement. Adapters
therefore report any read problem as a miss and drop any write problem after
logging it; neither :class:`CacheReadError` nor :class:`CacheWriteError`
leaves ``read``/``write``.

Usage
-----
Persist entries under a directory:

>>> import asyncio
>>> from pathlib import Path
>>> store = FilesystemCacheStore(Path("/var/cache/annalist"))
>>> entry = CacheEntry(key="ns:commit:abc", stored_at=0, payload={})
>>> asyncio.run(store.write(entry.key, entry))

"""

from __future__ import annotations

import asyncio
import hashlib
import os
import typing as typ

import msgspec

from annalist.logging import get_logger, log_debug, log_warning

from .errors import CacheReadError, CacheWriteError
from .models import CacheEntry

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = get_logger(__name__)

_ENTRY_DECODER = msgspec.json.Decoder(CacheEntry)
_ENTRY_ENCODER = msgspec.json.Encoder()


@typ.runtime_checkable
class CacheStore(typ.Protocol):
    """Key/value persistence for :class:`CacheEntry` records."""

    async def read(self, key: str) -> CacheEntry | None:
        """Return the entry stored under ``key``, or ``None`` on a miss."""
        ...

    async def write(self, key: str, entry: CacheEntry) -> None:
        """Store ``entry`` under ``key`` on a best-effort basis."""
        ...


class MemoryCacheStore:
    """Process-local cache store backed by a dictionary."""

    def __init__(self) -> None:
        """Initialise an empty store."""
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        """Return the number of stored entries."""
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        """Return whether an entry exists for ``key``."""
        return key in self._entries

    async def read(self, key: str) -> CacheEntry | None:
        """Return the entry stored under ``key``, or ``None``."""
        return self._entries.get(key)

    async def write(self, key: str, entry: CacheEntry) -> None:
        """Store ``entry`` under ``key``."""
        self._entries[key] = entry


class FilesystemCacheStore:
    """Cache store writing one JSON document per key under a directory.

    File names are the SHA-256 of the key, so arbitrary key characters
    (``:``, ``/``) never reach the filesystem. Each document also records
    its key, and a document whose key differs from the requested one is
    treated as a miss.

    Parameters
    ----------
    base_path
        Directory holding the cache documents. Created on first write.

    """

    def __init__(self, base_path: Path) -> None:
        """Initialise the store with its cache directory."""
        self._base_path = base_path

    @property
    def base_path(self) -> Path:
        """Return the cache directory."""
        return self._base_path

    def path_for(self, key: str) -> Path:
        """Return the document path used for ``key``."""
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._base_path / f"{digest}.json"

    async def read(self, key: str) -> CacheEntry | None:
        """Return the entry stored under ``key``, or ``None`` on any failure."""
        try:
            return await asyncio.to_thread(self._read_entry, key)
        except CacheReadError as exc:
            log_debug(logger, "Cache miss for %s: %s", key, exc)
            return None

    async def write(self, key: str, entry: CacheEntry) -> None:
        """Persist ``entry``; failures are logged and dropped."""
        try:
            await asyncio.to_thread(self._write_entry, key, entry)
        except CacheWriteError as exc:
            log_warning(logger, "Ignoring cache write failure: %s", exc)

    def _read_entry(self, key: str) -> CacheEntry | None:
        path = self.path_for(key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise CacheReadError.unreadable(key, exc) from exc

        try:
            entry = _ENTRY_DECODER.decode(raw)
        except (msgspec.DecodeError, msgspec.ValidationError) as exc:
            raise CacheReadError.malformed(key, exc) from exc

        if entry.key != key:
            raise CacheReadError.key_mismatch(key, entry.key)
        return entry

    def _write_entry(self, key: str, entry: CacheEntry) -> None:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            encoded = _ENTRY_ENCODER.encode(entry)
        except (msgspec.EncodeError, TypeError) as exc:
            raise CacheWriteError.unwritable(key, exc) from exc

        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(encoded)
            os.replace(tmp_path, path)
        except OSError as exc:
            raise CacheWriteError.unwritable(key, exc) from exc
