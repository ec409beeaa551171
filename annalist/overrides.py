"""Operator-authored annotations for individual commits.

Overrides live in a JSON document mapping a commit sha, or a sha prefix, to
replacement text::

    {
      "_comment": "keys starting with an underscore are ignored",
      "3f2a9c1": {
        "summary": ["Rebuilt onboarding flow"],
        "why": "First-run users dropped off at the permissions step.",
        "details": ["Permissions are now requested in context."]
      }
    }

A missing or malformed document never fails a build; it yields no
overrides.
"""

from __future__ import annotations

import asyncio
import typing as typ

import msgspec

from annalist.logging import get_logger, log_info, log_warning

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

logger = get_logger(__name__)

_COMMENT_PREFIX = "_"


class Override(msgspec.Struct, kw_only=True, frozen=True):
    """Replacement text for one commit.

    Attributes
    ----------
    summary : tuple[str, ...]
        Bullets that replace the compact summary when non-empty.
    why : str | None
        Replacement for the "Why" paragraph.
    details : tuple[str, ...] | None
        Replacement for the commit body notes; ``None`` keeps the body.

    """

    summary: tuple[str, ...] = ()
    why: str | None = None
    details: tuple[str, ...] | None = None


class OverridesLoadError(RuntimeError):
    """Raised when the overrides document cannot be used."""

    @classmethod
    def unreadable(cls, path: Path, reason: object) -> OverridesLoadError:
        """Return an error for a document that could not be read."""
        return cls(f"overrides {path} unreadable: {reason}")

    @classmethod
    def malformed(cls, path: Path, reason: object) -> OverridesLoadError:
        """Return an error for a document that is not a JSON object."""
        return cls(f"overrides {path} malformed: {reason}")


def _strings(value: object) -> tuple[str, ...] | None:
    if not isinstance(value, list):
        return None
    return tuple(item for item in value if isinstance(item, str))


def _override_from_entry(value: object) -> Override | None:
    if not isinstance(value, dict):
        return None
    why = value.get("why")
    return Override(
        summary=_strings(value.get("summary")) or (),
        why=why if isinstance(why, str) else None,
        details=_strings(value.get("details")),
    )


def parse_overrides(raw: bytes, *, source: Path) -> dict[str, Override]:
    """Decode an overrides document, skipping comment keys and bad entries.

    Raises
    ------
    OverridesLoadError
        If the document is not a JSON object.

    """
    try:
        document = msgspec.json.decode(raw)
    except msgspec.DecodeError as exc:
        raise OverridesLoadError.malformed(source, exc) from exc
    if not isinstance(document, dict):
        raise OverridesLoadError.malformed(source, "expected a JSON object")

    overrides: dict[str, Override] = {}
    for key, value in document.items():
        if key.startswith(_COMMENT_PREFIX) or not key:
            continue
        override = _override_from_entry(value)
        if override is None:
            log_warning(logger, "Skipping malformed override for %s", key)
            continue
        overrides[key] = override
    return overrides


def _read_document(path: Path) -> bytes | None:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise OverridesLoadError.unreadable(path, exc) from exc


async def load_overrides(path: Path | None) -> dict[str, Override]:
    """Load overrides from ``path``; any failure yields an empty mapping."""
    if path is None:
        return {}
    try:
        raw = await asyncio.to_thread(_read_document, path)
        if raw is None:
            return {}
        overrides = parse_overrides(raw, source=path)
    except OverridesLoadError as exc:
        log_warning(logger, "Ignoring overrides: %s", exc)
        return {}

    log_info(logger, "Loaded %d overrides from %s", len(overrides), path)
    return overrides


def find_override(
    overrides: cabc.Mapping[str, Override],
    sha: str,
) -> Override | None:
    """Return the override for ``sha``, preferring the longest matching key.

    An exact key wins outright; otherwise the longest key that prefixes
    ``sha`` is used. Comment keys (leading ``_``) never match.

    Examples
    --------
    >>> entries = {"abc": Override(why="short"), "abcdef12": Override(why="long")}
    >>> find_override(entries, "abcdef1234").why
    'long'

    """
    exact = overrides.get(sha)
    if exact is not None:
        return exact

    best_key: str | None = None
    for key in overrides:
        if key.startswith(_COMMENT_PREFIX) or not key or not sha.startswith(key):
            continue
        if best_key is None or len(key) > len(best_key):
            best_key = key
    return overrides[best_key] if best_key is not None else None
