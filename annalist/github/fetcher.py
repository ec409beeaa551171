"""Cached GitHub REST fetcher with ETag revalidation.

A fetch first consults the cache store. Entries younger than the caller's
TTL are returned without touching the network. Older entries are revalidated
with ``If-None-Match`` when they carry an entity tag; a ``304`` only advances
the entry's timestamp. Any other non-success response raises
:class:`RemoteFetchError` and leaves the cache untouched.
"""

from __future__ import annotations

import dataclasses
import typing as typ
from http import HTTPStatus

import httpx
import msgspec

from annalist.cache import CacheEntry
from annalist.common.time import epoch_ms

from .config import GITHUB_API_VERSION
from .errors import RemoteFetchError
from .observability import FetchEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from annalist.cache import CacheStore

    from .config import GitHubSourceConfig

_HTTP_SUCCESS_MIN = 200
_HTTP_SUCCESS_MAX = 299


@dataclasses.dataclass(frozen=True, slots=True)
class FetchResult:
    """Payload returned by :meth:`CachedFetcher.fetch`."""

    data: typ.Any
    served_from_cache: bool


def _header_int(response: httpx.Response, name: str) -> int | None:
    raw = response.headers.get(name, "").strip()
    if raw.isascii() and raw.isdigit():
        return int(raw)
    return None


def _error_message(response: httpx.Response) -> str | None:
    try:
        body = msgspec.json.decode(response.content)
    except msgspec.DecodeError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None


def _http_error(url: str, response: httpx.Response) -> RemoteFetchError:
    return RemoteFetchError.http_error(
        url,
        response.status_code,
        message=_error_message(response),
        rate_limit_remaining=_header_int(response, "x-ratelimit-remaining"),
        rate_limit_reset=_header_int(response, "x-ratelimit-reset"),
    )


class CachedFetcher:
    """Fetch JSON from the GitHub REST API through a cache store.

    Parameters
    ----------
    config
        Source configuration; supplies timeout and user agent for an owned
        HTTP client.
    store
        Cache store shared by every loader of a pass.
    http_client
        Optional ``httpx.AsyncClient``; tests inject one built on
        ``httpx.MockTransport``. When omitted the fetcher owns its client.
    clock
        Returns the current time in epoch milliseconds.
    event_logger
        Structured event sink; defaults to :class:`FetchEventLogger`.

    """

    def __init__(
        self,
        config: GitHubSourceConfig,
        store: CacheStore,
        *,
        http_client: httpx.AsyncClient | None = None,
        clock: cabc.Callable[[], int] = epoch_ms,
        event_logger: FetchEventLogger | None = None,
    ) -> None:
        """Initialise the fetcher with its cache and transport."""
        self._store = store
        self._clock = clock
        self._events = event_logger or FetchEventLogger()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={"User-Agent": config.user_agent},
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch(
        self,
        url: str,
        *,
        cache_key: str,
        ttl: dt.timedelta,
    ) -> FetchResult:
        """Return the JSON payload for ``url``, from cache when fresh.

        Raises
        ------
        RemoteFetchError
            If the request fails, returns a non-success status other than a
            usable ``304``, or returns a body that is not JSON.

        """
        now = self._clock()
        cached = await self._store.read(cache_key)
        ttl_ms = int(ttl.total_seconds() * 1000)

        if cached is not None and cached.age_ms(now) < ttl_ms:
            self._events.log_cache_hit(cache_key=cache_key, age_ms=cached.age_ms(now))
            return FetchResult(data=cached.payload, served_from_cache=True)

        try:
            response = await self._get(url, cached)
            if response.status_code == HTTPStatus.NOT_MODIFIED and cached is not None:
                await self._store.write(cache_key, cached.touched(now))
                self._events.log_revalidated(cache_key=cache_key)
                return FetchResult(data=cached.payload, served_from_cache=True)

            if not _HTTP_SUCCESS_MIN <= response.status_code <= _HTTP_SUCCESS_MAX:
                raise _http_error(url, response)

            data = self._decode(url, response)
        except RemoteFetchError as exc:
            self._events.log_failed(cache_key=cache_key, error=exc)
            raise

        etag = response.headers.get("etag")
        await self._store.write(
            cache_key,
            CacheEntry(
                key=cache_key,
                stored_at=now,
                payload=data,
                revalidation_token=etag,
            ),
        )
        self._events.log_completed(
            cache_key=cache_key, status_code=response.status_code, etag=etag
        )
        return FetchResult(data=data, served_from_cache=False)

    async def _get(self, url: str, cached: CacheEntry | None) -> httpx.Response:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if cached is not None and cached.revalidation_token:
            headers["If-None-Match"] = cached.revalidation_token
        try:
            return await self._client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise RemoteFetchError.transport(url, exc) from exc

    @staticmethod
    def _decode(url: str, response: httpx.Response) -> object:
        try:
            return msgspec.json.decode(response.content)
        except msgspec.DecodeError as exc:
            raise RemoteFetchError.malformed(url, response.status_code) from exc
