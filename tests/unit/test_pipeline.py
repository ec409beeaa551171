"""Unit tests for the changelog pipeline orchestration."""

from __future__ import annotations

import dataclasses
import datetime as dt
import typing as typ

import pytest

from annalist.cache import MemoryCacheStore
from annalist.github import (
    CachedFetcher,
    CommitDetailLoader,
    CommitListLoader,
    GitHubSourceConfig,
    RemoteFetchError,
)
from annalist.github.models import CommitDetail, CommitRef, FileChange
from annalist.overrides import Override
from annalist.pipeline import (
    ChangelogConfig,
    ChangelogPipeline,
    PerCommitDetailError,
    PipelineDependencies,
    PipelineEventLogger,
    PipelineStatus,
)
from annalist.render import HtmlRenderTarget
from tests.helpers.github_api import commit_item, detail_payload, file_item

if typ.TYPE_CHECKING:
    from pathlib import Path

    from annalist.summary import CommitExplanation, CommitSummary
    from tests.helpers.github_api import FakeGitHub

_SOURCE = GitHubSourceConfig(owner="octo", repo="reef")


def _commit(sha: str, *, day: int = 5) -> CommitRef:
    return CommitRef(
        sha=sha,
        subject=f"Commit {sha}",
        authored_at=dt.datetime(2024, 3, day, tzinfo=dt.UTC),
        html_url=_SOURCE.commit_web_url(sha),
    )


@dataclasses.dataclass(slots=True)
class _ListSource:
    commits: list[CommitRef] = dataclasses.field(default_factory=list)
    error: Exception | None = None

    async def load_commits(self) -> list[CommitRef]:
        if self.error is not None:
            raise self.error
        return list(self.commits)


@dataclasses.dataclass(slots=True)
class _DetailSource:
    failing: set[str] = dataclasses.field(default_factory=set)
    requested: list[str] = dataclasses.field(default_factory=list)

    async def load_detail(self, sha: str) -> CommitDetail:
        self.requested.append(sha)
        if sha in self.failing:
            raise RemoteFetchError.http_error(_SOURCE.commit_url(sha), 502)
        return CommitDetail(
            sha=sha,
            files=(FileChange(filename="marble/View.swift", additions=1, changes=1),),
            additions=1,
        )


class _RecordingEvents(PipelineEventLogger):
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, object]]] = []

    def log_run_started(self, *, repo_slug: str) -> None:
        self.events.append(("started", {"repo_slug": repo_slug}))

    def log_run_completed(self, **kwargs: typ.Any) -> None:  # noqa: ANN401
        self.events.append(("completed", kwargs))

    def log_run_failed(self, **kwargs: typ.Any) -> None:  # noqa: ANN401
        self.events.append(("failed", kwargs))

    def log_detail_failed(self, **kwargs: typ.Any) -> None:  # noqa: ANN401
        self.events.append(("detail_failed", kwargs))


def _pipeline(
    tmp_path: Path,
    list_source: _ListSource,
    detail_source: _DetailSource | None = None,
    *,
    events: PipelineEventLogger | None = None,
    **config: typ.Any,  # noqa: ANN401
) -> ChangelogPipeline:
    return ChangelogPipeline(
        PipelineDependencies(
            source=_SOURCE,
            list_loader=list_source,
            detail_loader=detail_source or _DetailSource(),
        ),
        config=ChangelogConfig(site_root=tmp_path, **config),
        event_logger=events,
    )


@pytest.mark.asyncio
async def test_renders_every_commit(tmp_path: Path) -> None:
    """A healthy pass renders all commits and reports the latest date."""
    commits = [_commit(f"sha{index}", day=10 - index) for index in range(5)]
    details = _DetailSource()
    events = _RecordingEvents()
    target = HtmlRenderTarget()

    outcome = await _pipeline(
        tmp_path, _ListSource(commits), details, events=events
    ).run(target, overrides={})

    assert outcome.status is PipelineStatus.RENDERED
    assert outcome.ok
    assert outcome.commits == 5
    assert outcome.failed_details == ()
    assert sorted(details.requested) == [commit.sha for commit in commits]
    assert target.status == "latest commit: Mar 10, 2024"
    assert [name for name, _ in events.events] == ["started", "completed"]
    page = target.render()
    assert page.count(" open>") == 3, "Expected the first three details open"
    assert "loading details…" not in page


@pytest.mark.asyncio
async def test_one_failed_detail_does_not_stop_the_others(tmp_path: Path) -> None:
    """A failing commit is marked unavailable and the rest still render."""
    commits = [_commit("good1"), _commit("bad"), _commit("good2")]
    events = _RecordingEvents()
    target = HtmlRenderTarget()

    outcome = await _pipeline(
        tmp_path, _ListSource(commits), _DetailSource(failing={"bad"}), events=events
    ).run(target, overrides={})

    assert outcome.status is PipelineStatus.RENDERED
    assert outcome.failed_details == ("bad",)
    page = target.render()
    assert page.count("Details unavailable (GitHub API error).") == 2
    assert page.count("Changed 1 files (+1/-0)") == 4
    detail_events = [data for name, data in events.events if name == "detail_failed"]
    assert [data["sha"] for data in detail_events] == ["bad"]


@pytest.mark.asyncio
async def test_list_failure_shows_rate_limit_panel(tmp_path: Path) -> None:
    """A failing commit list ends the pass with a rate-limit hint."""
    error = RemoteFetchError.http_error(
        _SOURCE.commits_page_url(1),
        403,
        message="API rate limit exceeded",
        rate_limit_remaining=0,
        rate_limit_reset=int(
            dt.datetime(2024, 3, 5, 14, 7, 9, tzinfo=dt.UTC).timestamp()
        ),
    )
    details = _DetailSource()
    target = HtmlRenderTarget()

    outcome = await _pipeline(tmp_path, _ListSource(error=error), details).run(
        target, overrides={}
    )

    assert outcome.status is PipelineStatus.LIST_FAILED
    assert not outcome.list_loaded
    assert details.requested == []
    assert target.status == "unable to load commits"
    (panel,) = target.panels
    assert panel.title == "Could not load changelog"
    assert panel.message == (
        "API rate limit exceeded Rate limit resets at 14:07:09 UTC."
    )
    assert panel.href == "https://github.com/octo/reef/commits/main"
    assert panel.link_text == "view commits on github"


@pytest.mark.asyncio
async def test_unrepresentable_reset_keeps_list_failure_panel(tmp_path: Path) -> None:
    """An out-of-range reset header drops the hint but not the panel."""
    error = RemoteFetchError.http_error(
        _SOURCE.commits_page_url(1),
        403,
        message="API rate limit exceeded",
        rate_limit_remaining=0,
        rate_limit_reset=99_999_999_999_999,
    )
    target = HtmlRenderTarget()

    outcome = await _pipeline(tmp_path, _ListSource(error=error)).run(
        target, overrides={}
    )

    assert outcome.status is PipelineStatus.LIST_FAILED
    (panel,) = target.panels
    assert panel.title == "Could not load changelog"
    assert panel.message == "API rate limit exceeded"
    assert "Could not load changelog" in target.render()


@pytest.mark.asyncio
async def test_empty_history(tmp_path: Path) -> None:
    """An empty commit list is reported, not treated as a failure."""
    target = HtmlRenderTarget()

    outcome = await _pipeline(tmp_path, _ListSource([])).run(target, overrides={})

    assert outcome.status is PipelineStatus.EMPTY
    assert outcome.list_loaded
    assert not outcome.ok
    assert target.status == "no commits found"
    assert [panel.title for panel in target.panels] == ["No commits found"]
    assert target.panels[0].message == "GitHub returned an empty commit list."


@pytest.mark.asyncio
async def test_unexpected_failure_is_contained(tmp_path: Path) -> None:
    """Errors outside the list and detail paths end the pass with a panel."""
    events = _RecordingEvents()
    target = HtmlRenderTarget()

    outcome = await _pipeline(
        tmp_path, _ListSource(error=KeyError("boom")), events=events
    ).run(target, overrides={})

    assert outcome.status is PipelineStatus.FAILED
    assert [panel.title for panel in target.panels] == ["Changelog failed to load"]
    assert target.status == "unable to load commits"
    assert events.events[-1][0] == "failed"


@pytest.mark.asyncio
async def test_overrides_document_is_read_when_not_supplied(tmp_path: Path) -> None:
    """Overrides default to the document under the site root."""
    document = tmp_path / "changelog" / "overrides.json"
    document.parent.mkdir()
    document.write_text(
        '{"sha1": {"summary": ["Hand-written bullet"], "why": "Because."}}',
        encoding="utf-8",
    )
    target = HtmlRenderTarget()

    await _pipeline(tmp_path, _ListSource([_commit("sha1")])).run(target)

    page = target.render()
    assert "Hand-written bullet" in page
    assert "<p>Because.</p>" in page


@pytest.mark.asyncio
async def test_supplied_overrides_apply_by_prefix(tmp_path: Path) -> None:
    """Explicit overrides are matched by sha prefix."""
    target = HtmlRenderTarget()

    await _pipeline(tmp_path, _ListSource([_commit("abcdef1234")])).run(
        target, overrides={"abc": Override(why="Prefix match.")}
    )

    assert "<p>Prefix match.</p>" in target.render()


@pytest.mark.asyncio
async def test_expanded_count_is_configurable(tmp_path: Path) -> None:
    """expanded_count controls how many detail blocks start open."""
    commits = [_commit(f"sha{index}") for index in range(4)]
    target = HtmlRenderTarget()

    await _pipeline(tmp_path, _ListSource(commits), expanded_count=1).run(
        target, overrides={}
    )

    assert target.render().count(" open>") == 1


def test_per_commit_error_keeps_cause() -> None:
    """PerCommitDetailError exposes the sha and underlying failure."""
    cause = RuntimeError("boom")
    error = PerCommitDetailError("abc", cause)

    assert (error.sha, error.cause, str(error)) == ("abc", cause, "boom")


class _SummaryRecordingTarget(HtmlRenderTarget):
    def __init__(self) -> None:
        super().__init__()
        self.summaries: dict[str, CommitSummary] = {}

    def apply_detail(
        self,
        commit: CommitRef,
        detail: CommitDetail,
        summary: CommitSummary,
        explanation: CommitExplanation,
    ) -> None:
        self.summaries[commit.sha] = summary
        super().apply_detail(commit, detail, summary, explanation)


@pytest.mark.asyncio
async def test_warm_cache_rebuild_is_identical(
    tmp_path: Path, fake_github: FakeGitHub, memory_store: MemoryCacheStore
) -> None:
    """A second pass over a warm cache yields the same summaries and page."""
    fake_github.pages = {
        1: [commit_item("aaa111", "Add onboarding"), commit_item("bbb222", "Fix")]
    }
    fake_github.details = {
        "aaa111": detail_payload(
            "aaa111",
            [
                file_item("Tests/OnboardingTests.swift", 30, 2),
                file_item("marble/Onboarding.swift", 12, 0),
            ],
        ),
        "bbb222": detail_payload(
            "bbb222",
            [
                file_item("marble/App.swift", 3, 1),
                file_item("Tests/__Snapshots__/App.png", 0, 0, changes=1),
            ],
        ),
    }
    source = fake_github.config
    targets: list[_SummaryRecordingTarget] = []
    for _ in range(2):
        fetcher = CachedFetcher(source, memory_store, http_client=fake_github.client())
        pipeline = ChangelogPipeline(
            PipelineDependencies(
                source=source,
                list_loader=CommitListLoader(fetcher, source),
                detail_loader=CommitDetailLoader(fetcher, source),
            ),
            config=ChangelogConfig(site_root=tmp_path),
        )
        target = _SummaryRecordingTarget()
        await pipeline.run(target, overrides={})
        targets.append(target)

    first, second = targets
    assert len(fake_github.requests) == 3, "Expected the second pass to hit cache"

    def _digest(target: _SummaryRecordingTarget) -> dict[str, tuple[object, ...]]:
        return {
            sha: (summary.bullets, summary.areas, summary.key_files)
            for sha, summary in target.summaries.items()
        }

    assert set(first.summaries) == {"aaa111", "bbb222"}
    assert _digest(first) == _digest(second)
    assert first.render() == second.render()
