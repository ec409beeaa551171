"""Commit list and commit detail loaders.

Both loaders go through a shared :class:`CachedFetcher`. Cache keys are
disjoint per resource (``commits`` pages vs individual ``commit`` shas), so
the two loaders never overwrite each other's entries.
"""

from __future__ import annotations

import typing as typ

from annalist.cache import cache_key
from annalist.logging import get_logger, log_info, log_warning

from .errors import RemoteFetchError
from .models import (
    CommitDetail,
    CommitRef,
    commit_detail_from_payload,
    commit_ref_from_payload,
)

if typ.TYPE_CHECKING:
    from .config import GitHubSourceConfig
    from .fetcher import CachedFetcher

logger = get_logger(__name__)


class CommitListLoader:
    """Page through the branch history up to ``config.max_commits``."""

    def __init__(self, fetcher: CachedFetcher, config: GitHubSourceConfig) -> None:
        """Initialise the loader with a fetcher and source configuration."""
        self._fetcher = fetcher
        self._config = config

    def page_cache_key(self, page: int) -> str:
        """Return the cache key for list ``page``."""
        config = self._config
        return cache_key(
            config.cache_namespace,
            "commits",
            config.slug,
            config.branch,
            "page",
            page,
        )

    async def load_commits(self) -> list[CommitRef]:
        """Return commits most-recent-first, capped at ``max_commits``.

        Pages are requested strictly in order. Loading stops at the first
        page that is not a JSON array or holds fewer than ``per_page``
        items. A sha seen on an earlier page is not listed twice.

        Raises
        ------
        RemoteFetchError
            If the first page cannot be fetched. Failures on later pages are
            logged and the commits gathered so far are returned.

        """
        config = self._config
        commits: list[CommitRef] = []
        seen: set[str] = set()

        for page in range(1, config.max_pages + 1):
            try:
                result = await self._fetcher.fetch(
                    config.commits_page_url(page),
                    cache_key=self.page_cache_key(page),
                    ttl=config.list_ttl,
                )
            except RemoteFetchError as exc:
                if page == 1:
                    raise
                log_warning(
                    logger,
                    "Commit list page %d failed for %s; keeping %d commits: %s",
                    page,
                    config.slug,
                    len(commits),
                    exc,
                )
                break

            items = result.data
            if not isinstance(items, list):
                break
            for item in items:
                ref = commit_ref_from_payload(item, fallback_url=config.commit_web_url)
                # Pages can shift between a cached and a refetched page.
                if ref is None or ref.sha in seen:
                    continue
                seen.add(ref.sha)
                commits.append(ref)
            if len(items) < config.per_page or len(commits) >= config.max_commits:
                break

        log_info(logger, "Loaded %d commits for %s", len(commits), config.slug)
        return commits[: config.max_commits]


class CommitDetailLoader:
    """Fetch file-level statistics for individual commits."""

    def __init__(self, fetcher: CachedFetcher, config: GitHubSourceConfig) -> None:
        """Initialise the loader with a fetcher and source configuration."""
        self._fetcher = fetcher
        self._config = config

    def detail_cache_key(self, sha: str) -> str:
        """Return the cache key for commit ``sha``."""
        return cache_key(self._config.cache_namespace, "commit", sha)

    async def load_detail(self, sha: str) -> CommitDetail:
        """Return the :class:`CommitDetail` for ``sha``.

        Raises
        ------
        RemoteFetchError
            If the detail cannot be fetched.

        """
        result = await self._fetcher.fetch(
            self._config.commit_url(sha),
            cache_key=self.detail_cache_key(sha),
            ttl=self._config.detail_ttl,
        )
        return commit_detail_from_payload(sha, result.data)
