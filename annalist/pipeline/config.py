"""Configuration for changelog passes.

This module provides the ChangelogConfig dataclass which controls where the
page is written, where responses are cached, how many detail fetches run at
once, and how summaries are worded.

Usage
-----
Create a configuration with defaults:

>>> config = ChangelogConfig()
>>> config.concurrency
4

Or load from environment variables:

>>> import os
>>> os.environ["ANNALIST_CONCURRENCY"] = "2"
>>> ChangelogConfig.from_env().concurrency
2

"""

from __future__ import annotations

import dataclasses as dc
import os
from pathlib import Path

from annalist.concurrency import DEFAULT_CONCURRENCY

OVERRIDES_RELATIVE_PATH = Path("changelog") / "overrides.json"
OUTPUT_RELATIVE_PATH = Path("changelog") / "index.html"


@dc.dataclass(frozen=True, slots=True)
class ChangelogConfig:
    """Configuration for building the changelog page.

    Attributes
    ----------
    site_root
        Content root served by the static site server. The page and the
        overrides document live under ``{site_root}/changelog/``.
    cache_dir
        Directory for persisted API responses. ``None`` keeps responses in
        memory for the duration of the process.
    overrides_path
        Explicit overrides document; defaults to
        ``{site_root}/changelog/overrides.json``.
    output_path
        Explicit page location; defaults to
        ``{site_root}/changelog/index.html``.
    concurrency
        Maximum number of commit detail fetches in flight.
    expanded_count
        Number of leading detail blocks rendered open.
    test_area, app_area
        Top-level directory names used by the narrative heuristic.
    title
        Page title.
    app_store_url
        Optional link shown on every detail block.

    """

    site_root: Path = Path()
    cache_dir: Path | None = None
    overrides_path: Path | None = None
    output_path: Path | None = None
    concurrency: int = DEFAULT_CONCURRENCY
    expanded_count: int = 3
    test_area: str = "Tests"
    app_area: str = "marble"
    title: str = "Changelog"
    app_store_url: str | None = None

    @property
    def resolved_overrides_path(self) -> Path:
        """Return the overrides document location."""
        return self.overrides_path or self.site_root / OVERRIDES_RELATIVE_PATH

    @property
    def resolved_output_path(self) -> Path:
        """Return the page location."""
        return self.output_path or self.site_root / OUTPUT_RELATIVE_PATH

    @staticmethod
    def _parse_int(env_var: str, default: int, *, minimum: int) -> int:
        """Read an integer env var no smaller than ``minimum``."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            msg = f"{env_var} must be an integer, got: {raw!r}"
            raise ValueError(msg) from exc
        if value < minimum:
            msg = f"{env_var} must be at least {minimum}, got: {value}"
            raise ValueError(msg)
        return value

    @staticmethod
    def _optional_path(env_var: str) -> Path | None:
        raw = os.environ.get(env_var, "").strip()
        return Path(raw) if raw else None

    @classmethod
    def from_env(cls) -> ChangelogConfig:
        """Create configuration from environment variables.

        Reads ``ANNALIST_SITE_ROOT``, ``ANNALIST_CACHE_DIR``,
        ``ANNALIST_OVERRIDES_PATH``, ``ANNALIST_OUTPUT_PATH``,
        ``ANNALIST_CONCURRENCY`` (positive integer),
        ``ANNALIST_EXPANDED_COUNT`` (non-negative integer),
        ``ANNALIST_TEST_AREA``, ``ANNALIST_APP_AREA``, ``ANNALIST_TITLE``
        and ``ANNALIST_APP_STORE_URL``.

        Raises
        ------
        ValueError
            If an integer variable is malformed or out of range.

        """
        defaults = cls()
        return cls(
            site_root=cls._optional_path("ANNALIST_SITE_ROOT") or defaults.site_root,
            cache_dir=cls._optional_path("ANNALIST_CACHE_DIR"),
            overrides_path=cls._optional_path("ANNALIST_OVERRIDES_PATH"),
            output_path=cls._optional_path("ANNALIST_OUTPUT_PATH"),
            concurrency=cls._parse_int(
                "ANNALIST_CONCURRENCY", defaults.concurrency, minimum=1
            ),
            expanded_count=cls._parse_int(
                "ANNALIST_EXPANDED_COUNT", defaults.expanded_count, minimum=0
            ),
            test_area=os.environ.get("ANNALIST_TEST_AREA", "").strip()
            or defaults.test_area,
            app_area=os.environ.get("ANNALIST_APP_AREA", "").strip()
            or defaults.app_area,
            title=os.environ.get("ANNALIST_TITLE", "").strip() or defaults.title,
            app_store_url=os.environ.get("ANNALIST_APP_STORE_URL", "").strip()
            or None,
        )
