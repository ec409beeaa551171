"""Build the changelog page for a GitHub repository."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses as dc
import os
from pathlib import Path

from annalist.github import GitHubConfigError, GitHubSourceConfig
from annalist.logging import configure_logging, get_logger, log_error, log_warning
from annalist.pipeline import ChangelogConfig, write_changelog

logger = get_logger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--site-root",
        type=Path,
        default=None,
        help="Content root; the page is written under {site-root}/changelog/",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Page location (default {site-root}/changelog/index.html)",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help="Directory for cached API responses (default: in-memory)",
    )
    parser.add_argument(
        "--overrides",
        type=Path,
        default=None,
        help="Overrides document (default {site-root}/changelog/overrides.json)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default ANNALIST_LOG_LEVEL or INFO)",
    )
    return parser


def _apply_args(config: ChangelogConfig, args: argparse.Namespace) -> ChangelogConfig:
    changes: dict[str, Path] = {}
    if args.site_root is not None:
        changes["site_root"] = args.site_root
    if args.output is not None:
        changes["output_path"] = args.output
    if args.cache_dir is not None:
        changes["cache_dir"] = args.cache_dir
    if args.overrides is not None:
        changes["overrides_path"] = args.overrides
    return dc.replace(config, **changes)


def main(argv: list[str] | None = None) -> int:
    """Build and write the changelog page.

    Repository coordinates come from ``ANNALIST_GITHUB_*`` variables; build
    settings come from ``ANNALIST_*`` variables, overridden by the flags.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 when the commit list loaded, 1 otherwise.

    """
    args = _parser().parse_args(argv)

    level = args.log_level or os.environ.get("ANNALIST_LOG_LEVEL", "INFO")
    normalized, invalid = configure_logging(level)
    if invalid:
        log_warning(
            logger, "Invalid log level %r, falling back to %s", level, normalized
        )

    try:
        source = GitHubSourceConfig.from_env()
        config = _apply_args(ChangelogConfig.from_env(), args)
    except (GitHubConfigError, ValueError) as exc:
        log_error(logger, "Invalid configuration: %s", exc)
        return 1

    outcome = asyncio.run(write_changelog(source, config))
    print(
        f"changelog for {source.slug}: {outcome.status} "
        f"({outcome.commits} commits / {len(outcome.failed_details)} without detail)"
        f" -> {config.resolved_output_path}"
    )
    return 0 if outcome.list_loaded else 1


if __name__ == "__main__":
    raise SystemExit(main())
