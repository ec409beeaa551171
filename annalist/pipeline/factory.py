"""Assemble and run a changelog build from configuration.

Usage
-----
Build the page described by the environment::

    import asyncio

    from annalist.github import GitHubSourceConfig
    from annalist.pipeline import ChangelogConfig, write_changelog

    outcome = asyncio.run(
        write_changelog(GitHubSourceConfig.from_env(), ChangelogConfig.from_env())
    )

"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import typing as typ

from annalist.cache import FilesystemCacheStore, MemoryCacheStore
from annalist.github import CachedFetcher, CommitDetailLoader, CommitListLoader
from annalist.logging import get_logger, log_info
from annalist.render import HtmlPageOptions, HtmlRenderTarget

from .service import ChangelogPipeline, PipelineDependencies

if typ.TYPE_CHECKING:
    from pathlib import Path

    import httpx

    from annalist.cache import CacheStore
    from annalist.github import GitHubSourceConfig

    from .config import ChangelogConfig
    from .service import PipelineOutcome

__all__ = ["ChangelogBuild", "build_cache_store", "build_changelog", "write_changelog"]

logger = get_logger(__name__)


@dc.dataclass(frozen=True, slots=True)
class ChangelogBuild:
    """A rendered page and how its pass ended."""

    outcome: PipelineOutcome
    html: str


def build_cache_store(config: ChangelogConfig) -> CacheStore:
    """Return a filesystem store when a cache directory is set, else memory."""
    if config.cache_dir is not None:
        return FilesystemCacheStore(config.cache_dir)
    return MemoryCacheStore()


async def build_changelog(
    source: GitHubSourceConfig,
    config: ChangelogConfig,
    *,
    store: CacheStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ChangelogBuild:
    """Run one pass and render the page in memory.

    Parameters
    ----------
    source
        Repository to read.
    config
        Build settings.
    store
        Cache store; defaults to :func:`build_cache_store`.
    http_client
        Optional client, mainly for tests; the fetcher owns one otherwise.

    """
    fetcher = CachedFetcher(
        source, store or build_cache_store(config), http_client=http_client
    )
    target = HtmlRenderTarget(
        HtmlPageOptions(title=config.title, app_store_url=config.app_store_url)
    )
    try:
        pipeline = ChangelogPipeline(
            PipelineDependencies(
                source=source,
                list_loader=CommitListLoader(fetcher, source),
                detail_loader=CommitDetailLoader(fetcher, source),
            ),
            config=config,
        )
        outcome = await pipeline.run(target)
    finally:
        await fetcher.aclose()
    return ChangelogBuild(outcome=outcome, html=target.render())


def _write_page(path: Path, html: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(html, encoding="utf-8")


async def write_changelog(
    source: GitHubSourceConfig,
    config: ChangelogConfig,
    *,
    store: CacheStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> PipelineOutcome:
    """Run one pass and write the page to ``config.resolved_output_path``."""
    build = await build_changelog(source, config, store=store, http_client=http_client)
    output = config.resolved_output_path
    await asyncio.to_thread(_write_page, output, build.html)
    log_info(logger, "Wrote changelog for %s to %s", source.slug, output)
    return build.outcome
