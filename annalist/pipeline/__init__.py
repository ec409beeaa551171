"""Changelog load-and-render pipeline."""

from __future__ import annotations

from .config import ChangelogConfig
from .errors import PerCommitDetailError, PipelineError
from .factory import ChangelogBuild, build_cache_store, build_changelog, write_changelog
from .observability import PipelineEventLogger, PipelineEventType
from .service import (
    ChangelogPipeline,
    PipelineDependencies,
    PipelineOutcome,
    PipelineStatus,
)

__all__ = [
    "ChangelogBuild",
    "ChangelogConfig",
    "ChangelogPipeline",
    "PerCommitDetailError",
    "PipelineDependencies",
    "PipelineError",
    "PipelineEventLogger",
    "PipelineEventType",
    "PipelineOutcome",
    "PipelineStatus",
    "build_cache_store",
    "build_changelog",
    "write_changelog",
]
