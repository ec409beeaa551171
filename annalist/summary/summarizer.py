"""Summarise a commit from its changed-file list."""

from __future__ import annotations

import re
import typing as typ

from .models import AreaCount, CommitExplanation, CommitSummary
from .narrative import DEFAULT_NARRATIVE_RULES, ROOT_AREA, NarrativeRule, narrate

if typ.TYPE_CHECKING:
    from annalist.github.models import CommitDetail, CommitRef, FileChange
    from annalist.overrides import Override

_SNAPSHOT_DIR = "/__Snapshots__/"
_IMAGE_SUFFIX = re.compile(r"\.(png|jpe?g|webp|gif)$", re.IGNORECASE)
_AREAS_SHOWN = 3
_KEY_FILE_LIMIT = 3
COMPACT_BULLET_LIMIT = 3


def is_snapshot_file(filename: str) -> bool:
    """Return whether ``filename`` is a generated snapshot or image."""
    if not filename:
        return False
    return _SNAPSHOT_DIR in filename or _IMAGE_SUFFIX.search(filename) is not None


def area_breakdown(files: typ.Iterable[FileChange]) -> tuple[AreaCount, ...]:
    """Count files per top-level directory, largest area first.

    Files at the repository root are grouped under ``(root)``. Areas with
    equal counts keep the order in which they were first seen.
    """
    counts: dict[str, int] = {}
    for change in files:
        head, sep, _ = change.filename.partition("/")
        area = head if sep else ROOT_AREA
        counts[area] = counts.get(area, 0) + 1
    ranked = sorted(counts.items(), key=lambda pair: pair[1], reverse=True)
    return tuple(AreaCount(area=area, count=count) for area, count in ranked)


def key_files(
    files: typ.Iterable[FileChange], *, limit: int = _KEY_FILE_LIMIT
) -> tuple[str, ...]:
    """Return the most-changed non-snapshot filenames."""
    candidates = [change for change in files if not is_snapshot_file(change.filename)]
    candidates.sort(key=lambda change: change.changes, reverse=True)
    return tuple(change.filename for change in candidates[:limit])


def _areas_line(areas: typ.Sequence[AreaCount]) -> str:
    if not areas:
        return "Areas: (unknown)"
    shown = ", ".join(area.label() for area in areas[:_AREAS_SHOWN])
    hidden = len(areas) - _AREAS_SHOWN
    more = f" +{hidden} more" if hidden > 0 else ""
    return f"Areas: {shown}{more}"


def _override_bullets(override: Override | None) -> tuple[str, ...]:
    if override is None:
        return ()
    return tuple(bullet for bullet in override.summary if bullet)


def summarize(
    detail: CommitDetail,
    *,
    override: Override | None = None,
    rules: typ.Sequence[NarrativeRule] = DEFAULT_NARRATIVE_RULES,
    compact_limit: int = COMPACT_BULLET_LIMIT,
) -> CommitSummary:
    """Derive bullets, areas, key files and a narrative for ``detail``.

    The computed bullets are always, in order: the file and line totals,
    the areas line, the key-files line (only when any file qualifies) and
    the narrative (only when derivable). A non-empty override ``summary``
    replaces the compact bullets; the full computed list is kept for the
    detail view either way.
    """
    areas = area_breakdown(detail.files)
    top_files = key_files(detail.files)
    sentence = narrate(areas, rules)

    bullets = [
        f"Changed {len(detail.files)} files (+{detail.additions}/-{detail.deletions})",
        _areas_line(areas),
    ]
    if top_files:
        bullets.append(f"Key files: {', '.join(top_files)}")
    if sentence:
        bullets.append(sentence)

    compact = _override_bullets(override) or tuple(bullets[:compact_limit])
    return CommitSummary(
        bullets=tuple(bullets),
        compact_bullets=compact,
        areas=areas,
        key_files=top_files,
        narrative=sentence,
    )


def explain(commit: CommitRef, override: Override | None = None) -> CommitExplanation:
    """Return the "Why" text and notes for ``commit``.

    The override's ``why`` replaces the subject when it is non-blank. When
    the override supplies ``details`` they replace the commit body
    paragraphs, even if that leaves no notes.
    """
    why = commit.subject
    notes = commit.body_paragraphs
    if override is not None:
        if override.why and override.why.strip():
            why = override.why.strip()
        if override.details is not None:
            notes = tuple(note.strip() for note in override.details if note.strip())
    return CommitExplanation(why=why, notes=notes)
