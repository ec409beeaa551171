"""Typed summary results."""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class AreaCount:
    """Number of changed files under one top-level path segment."""

    area: str
    count: int

    def label(self) -> str:
        """Return the ``area (count)`` form used in bullets."""
        return f"{self.area} ({self.count})"


@dataclasses.dataclass(frozen=True, slots=True)
class CommitSummary:
    """Derived description of a commit's changes.

    Attributes
    ----------
    bullets
        Complete computed bullets, shown in the detail view.
    compact_bullets
        Bullets for the summary card: override bullets when supplied,
        otherwise the first few computed bullets.
    areas
        Changed-file counts per top-level area, largest first.
    key_files
        Up to three most-changed non-snapshot files.
    narrative
        Heuristic sentence about where the work happened, if derivable.

    """

    bullets: tuple[str, ...]
    compact_bullets: tuple[str, ...]
    areas: tuple[AreaCount, ...]
    key_files: tuple[str, ...]
    narrative: str | None


@dataclasses.dataclass(frozen=True, slots=True)
class CommitExplanation:
    """The "Why" paragraph and supporting notes for a commit."""

    why: str
    notes: tuple[str, ...]
