"""Typed commit structures built from GitHub REST payloads.

GitHub payloads are decoded as plain JSON and then narrowed here with
explicit shape checks and safe defaults, so the rest of the pipeline never
touches raw dictionaries.
"""

from __future__ import annotations

import datetime as dt
import re
import typing as typ

import msgspec

from annalist.common.time import parse_github_datetime

_NO_MESSAGE = "(no commit message)"
_PARAGRAPH_BREAK = re.compile(r"\n{2,}")
_WHITESPACE = re.compile(r"\s+")


class FileChange(msgspec.Struct, kw_only=True, frozen=True):
    """One file touched by a commit.

    Attributes
    ----------
    filename : str
        Repository-relative path.
    additions, deletions : int
        Line counts reported by GitHub.
    changes : int
        Total changed lines; ``additions + deletions`` when GitHub omits it.

    """

    filename: str
    additions: int = 0
    deletions: int = 0
    changes: int = 0


class CommitRef(msgspec.Struct, kw_only=True, frozen=True):
    """A commit as listed on the branch history."""

    sha: str
    subject: str
    authored_at: dt.datetime | None
    html_url: str
    body_paragraphs: tuple[str, ...] = ()


class CommitDetail(msgspec.Struct, kw_only=True, frozen=True):
    """Per-commit statistics and file list."""

    sha: str
    files: tuple[FileChange, ...] = ()
    additions: int = 0
    deletions: int = 0
    html_url: str | None = None


def _as_int(value: object) -> int:
    # bool is an int subclass but never a valid count
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def _as_dict(value: object) -> dict[str, typ.Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def commit_subject(message: object) -> str:
    """Return the first line of a commit message, or a placeholder."""
    text = message if isinstance(message, str) else ""
    first_line = text.split("\n", 1)[0].strip()
    return first_line or _NO_MESSAGE


def commit_body_paragraphs(message: object) -> tuple[str, ...]:
    """Split the lines after the subject into whitespace-collapsed paragraphs."""
    text = message if isinstance(message, str) else ""
    _, _, rest = text.partition("\n")
    body = rest.strip()
    if not body:
        return ()
    paragraphs = (
        _WHITESPACE.sub(" ", chunk).strip() for chunk in _PARAGRAPH_BREAK.split(body)
    )
    return tuple(paragraph for paragraph in paragraphs if paragraph)


def _authored_at(commit: dict[str, typ.Any]) -> dt.datetime | None:
    for role in ("author", "committer"):
        raw = _as_dict(commit.get(role)).get("date")
        if not isinstance(raw, str) or not raw:
            continue
        try:
            return parse_github_datetime(raw)
        except ValueError:
            continue
    return None


def commit_ref_from_payload(
    item: object,
    *,
    fallback_url: typ.Callable[[str], str],
) -> CommitRef | None:
    """Build a :class:`CommitRef` from a commit list item.

    Returns ``None`` when the item is not an object or has no string
    ``sha``.

    Parameters
    ----------
    item
        One element of the ``GET /commits`` array.
    fallback_url
        Produces the web URL for a sha when ``html_url`` is missing.

    """
    if not isinstance(item, dict):
        return None
    sha = _as_str(item.get("sha"))
    if sha is None:
        return None

    commit = _as_dict(item.get("commit"))
    message = commit.get("message")
    return CommitRef(
        sha=sha,
        subject=commit_subject(message),
        authored_at=_authored_at(commit),
        html_url=_as_str(item.get("html_url")) or fallback_url(sha),
        body_paragraphs=commit_body_paragraphs(message),
    )


def file_change_from_payload(item: object) -> FileChange | None:
    """Build a :class:`FileChange`, or ``None`` when ``filename`` is missing."""
    if not isinstance(item, dict):
        return None
    filename = item.get("filename")
    if not isinstance(filename, str):
        return None

    additions = _as_int(item.get("additions"))
    deletions = _as_int(item.get("deletions"))
    raw_changes = item.get("changes")
    changes = (
        raw_changes
        if isinstance(raw_changes, int) and not isinstance(raw_changes, bool)
        else additions + deletions
    )
    return FileChange(
        filename=filename,
        additions=additions,
        deletions=deletions,
        changes=changes,
    )


def commit_detail_from_payload(sha: str, payload: object) -> CommitDetail:
    """Build a :class:`CommitDetail` from a ``GET /commits/{sha}`` body.

    Missing or mis-shaped fields fall back to empty values rather than
    failing, since a partial detail still renders usefully.
    """
    body = _as_dict(payload)
    raw_files = body.get("files")
    files = tuple(
        change
        for change in (
            file_change_from_payload(item)
            for item in (raw_files if isinstance(raw_files, list) else [])
        )
        if change is not None
    )
    stats = _as_dict(body.get("stats"))
    return CommitDetail(
        sha=sha,
        files=files,
        additions=_as_int(stats.get("additions")),
        deletions=_as_int(stats.get("deletions")),
        html_url=_as_str(body.get("html_url")),
    )
