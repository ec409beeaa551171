"""Human-readable summaries derived from commit file lists."""

from __future__ import annotations

from .models import AreaCount, CommitExplanation, CommitSummary
from .narrative import (
    DEFAULT_NARRATIVE_RULES,
    ROOT_AREA,
    NarrativeRule,
    build_narrative_rules,
    narrate,
)
from .summarizer import (
    area_breakdown,
    explain,
    is_snapshot_file,
    key_files,
    summarize,
)

__all__ = [
    "DEFAULT_NARRATIVE_RULES",
    "ROOT_AREA",
    "AreaCount",
    "CommitExplanation",
    "CommitSummary",
    "NarrativeRule",
    "area_breakdown",
    "build_narrative_rules",
    "explain",
    "is_snapshot_file",
    "key_files",
    "narrate",
    "summarize",
]
