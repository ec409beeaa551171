"""Emit structured observability events for changelog passes.

Usage
-----
>>> event_logger = PipelineEventLogger()
>>> event_logger.log_run_started(repo_slug="enzo-prism/marble")

"""

from __future__ import annotations

import enum
import typing as typ

from annalist.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    import datetime as dt

logger = get_logger(__name__)


class PipelineEventType(enum.StrEnum):
    """Structured log event types for changelog passes."""

    RUN_STARTED = "changelog.run.started"
    RUN_COMPLETED = "changelog.run.completed"
    RUN_FAILED = "changelog.run.failed"
    DETAIL_FAILED = "changelog.detail.failed"


class PipelineEventLogger:
    """Emit changelog pass events via femtologging."""

    def log_run_started(self, *, repo_slug: str) -> None:
        """Log the start of a pass."""
        log_info(logger, "[%s] repo_slug=%s", PipelineEventType.RUN_STARTED, repo_slug)

    def log_run_completed(
        self,
        *,
        repo_slug: str,
        commits: int,
        failed_details: int,
        duration: dt.timedelta,
    ) -> None:
        """Log a pass that rendered its commit list."""
        log_info(
            logger,
            "[%s] repo_slug=%s commits=%d failed_details=%d duration_seconds=%.3f",
            PipelineEventType.RUN_COMPLETED,
            repo_slug,
            commits,
            failed_details,
            duration.total_seconds(),
        )

    def log_run_failed(
        self,
        *,
        repo_slug: str,
        error: BaseException,
        duration: dt.timedelta,
    ) -> None:
        """Log a pass that could not render its commit list."""
        log_error(
            logger,
            "[%s] repo_slug=%s error_type=%s duration_seconds=%.3f error=%s",
            PipelineEventType.RUN_FAILED,
            repo_slug,
            type(error).__name__,
            duration.total_seconds(),
            error,
        )

    def log_detail_failed(self, *, sha: str, error: BaseException) -> None:
        """Log one commit whose detail could not be rendered."""
        log_warning(
            logger,
            "[%s] sha=%s error_type=%s error=%s",
            PipelineEventType.DETAIL_FAILED,
            sha,
            type(error).__name__,
            error,
        )
