"""Orchestrate one load-and-render pass of the changelog.

A pass loads the commit list, adds a placeholder view per commit, then
fetches and summarises commit details through the bounded runner, patching
each commit's view as its detail settles. Failures are contained at three
levels:

- the commit list failing to load ends the pass with an error panel;
- one commit's detail failing marks only that commit as unavailable;
- anything else escaping the orchestration ends the pass with a generic
  failure panel.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

from annalist.common.time import utcnow
from annalist.concurrency import run_bounded
from annalist.github.errors import RemoteFetchError
from annalist.logging import get_logger, log_exception
from annalist.overrides import Override, find_override, load_overrides
from annalist.render import ErrorPanel, format_date
from annalist.summary import build_narrative_rules, explain, summarize

from .errors import PerCommitDetailError
from .observability import PipelineEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from annalist.github.config import GitHubSourceConfig
    from annalist.github.models import CommitDetail, CommitRef
    from annalist.render import RenderTarget

    from .config import ChangelogConfig

logger = get_logger(__name__)


class CommitListSource(typ.Protocol):
    """Anything that can list the branch history."""

    async def load_commits(self) -> list[CommitRef]:
        """Return commits most-recent-first."""
        ...


class CommitDetailSource(typ.Protocol):
    """Anything that can load one commit's detail."""

    async def load_detail(self, sha: str) -> CommitDetail:
        """Return the detail for ``sha``."""
        ...


class PipelineStatus(enum.StrEnum):
    """How a pass ended."""

    RENDERED = "rendered"
    EMPTY = "empty"
    LIST_FAILED = "list_failed"
    FAILED = "failed"


@dc.dataclass(frozen=True, slots=True)
class PipelineOutcome:
    """Result of one pass.

    Attributes
    ----------
    status
        How the pass ended.
    commits
        Number of commits rendered.
    failed_details
        Shas whose detail could not be rendered.

    """

    status: PipelineStatus
    commits: int = 0
    failed_details: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        """Return whether the commit list was loaded and rendered."""
        return self.status is PipelineStatus.RENDERED

    @property
    def list_loaded(self) -> bool:
        """Return whether the commit list was fetched, even if empty."""
        return self.status in {PipelineStatus.RENDERED, PipelineStatus.EMPTY}


@dc.dataclass(frozen=True, slots=True)
class PipelineDependencies:
    """Collaborators for :class:`ChangelogPipeline`."""

    source: GitHubSourceConfig
    list_loader: CommitListSource
    detail_loader: CommitDetailSource


def _rate_limit_text(error: RemoteFetchError) -> str:
    reset_at = error.rate_limit_reset_at
    if reset_at is None:
        return ""
    return f" Rate limit resets at {reset_at.strftime('%H:%M:%S')} UTC."


class ChangelogPipeline:
    """Run changelog passes against a render target."""

    def __init__(
        self,
        dependencies: PipelineDependencies,
        *,
        config: ChangelogConfig,
        event_logger: PipelineEventLogger | None = None,
    ) -> None:
        """Initialise the pipeline with its loaders and configuration."""
        self._deps = dependencies
        self._config = config
        self._events = event_logger or PipelineEventLogger()
        self._rules = build_narrative_rules(
            test_area=config.test_area, app_area=config.app_area
        )

    async def run(
        self,
        target: RenderTarget,
        *,
        overrides: cabc.Mapping[str, Override] | None = None,
    ) -> PipelineOutcome:
        """Run one pass, rendering into ``target``.

        Parameters
        ----------
        target
            Display surface for the pass.
        overrides
            Annotations keyed by sha prefix. When ``None`` they are read from
            the configured overrides document.

        Returns
        -------
        PipelineOutcome
            How the pass ended. This method does not raise for load or
            render failures; they are reported on ``target``.

        """
        started_at = utcnow()
        slug = self._deps.source.slug
        self._events.log_run_started(repo_slug=slug)
        try:
            outcome = await self._run(target, overrides, started_at)
        except Exception as exc:  # noqa: BLE001 - last-resort boundary for the pass
            log_exception(logger, f"Changelog pass failed for {slug}", exc)
            target.show_error(
                ErrorPanel(
                    title="Changelog failed to load",
                    message=str(exc) or "Unknown error",
                    href=self._deps.source.history_web_url(),
                )
            )
            target.set_status("unable to load commits")
            self._events.log_run_failed(
                repo_slug=slug, error=exc, duration=utcnow() - started_at
            )
            return PipelineOutcome(status=PipelineStatus.FAILED)
        return outcome

    async def _run(
        self,
        target: RenderTarget,
        overrides: cabc.Mapping[str, Override] | None,
        started_at: dt.datetime,
    ) -> PipelineOutcome:
        source = self._deps.source
        target.set_status("loading commits…")
        if overrides is None:
            overrides = await load_overrides(self._config.resolved_overrides_path)

        try:
            commits = await self._deps.list_loader.load_commits()
        except RemoteFetchError as exc:
            target.show_error(
                ErrorPanel(
                    title="Could not load changelog",
                    message=f"{exc}{_rate_limit_text(exc)}",
                    href=source.history_web_url(),
                    link_text="view commits on github",
                )
            )
            target.set_status("unable to load commits")
            self._events.log_run_failed(
                repo_slug=source.slug, error=exc, duration=utcnow() - started_at
            )
            return PipelineOutcome(status=PipelineStatus.LIST_FAILED)

        if not commits:
            target.show_error(
                ErrorPanel(
                    title="No commits found",
                    message="GitHub returned an empty commit list.",
                    href=source.history_web_url(),
                )
            )
            target.set_status("no commits found")
            return PipelineOutcome(status=PipelineStatus.EMPTY)

        latest = format_date(commits[0].authored_at)
        target.set_status(
            f"latest commit: {latest}" if latest else "latest commit loaded"
        )
        for index, commit in enumerate(commits):
            target.add_commit(commit, expanded=index < self._config.expanded_count)

        async def _render(commit: CommitRef) -> None:
            await self._render_commit(commit, target, overrides)

        failures = await run_bounded(
            commits, _render, concurrency=self._config.concurrency
        )
        failed = tuple(commit.sha for commit, _ in failures)
        self._events.log_run_completed(
            repo_slug=source.slug,
            commits=len(commits),
            failed_details=len(failed),
            duration=utcnow() - started_at,
        )
        return PipelineOutcome(
            status=PipelineStatus.RENDERED,
            commits=len(commits),
            failed_details=failed,
        )

    async def _render_commit(
        self,
        commit: CommitRef,
        target: RenderTarget,
        overrides: cabc.Mapping[str, Override],
    ) -> None:
        try:
            detail = await self._deps.detail_loader.load_detail(commit.sha)
            override = find_override(overrides, commit.sha)
            summary = summarize(detail, override=override, rules=self._rules)
            target.apply_detail(commit, detail, summary, explain(commit, override))
        except Exception as exc:
            error = PerCommitDetailError(commit.sha, exc)
            self._events.log_detail_failed(sha=commit.sha, error=exc)
            target.apply_error(commit, error)
            raise error from exc
