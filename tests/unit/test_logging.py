"""Unit tests for femtologging integration helpers.

Run with:
    pytest tests/unit/test_logging.py
"""

from __future__ import annotations

import pytest

from annalist.logging import (
    configure_logging,
    format_log_message,
    log_debug,
    log_error,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)


class _FakeLogger:
    """Collects log calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message


@pytest.mark.parametrize(
    ("input_level", "expected_level", "expected_invalid"),
    [
        ("warning", "WARNING", False),
        (" debug ", "DEBUG", False),
        ("TRACE", "TRACE", False),
        (None, "INFO", True),
        ("", "INFO", True),
        ("nope", "INFO", True),
    ],
)
def test_normalize_log_level(
    input_level: str | None,
    expected_level: str,
    expected_invalid: bool,  # noqa: FBT001
) -> None:
    """Normalize log levels and flag invalid inputs."""
    level, invalid = normalize_log_level(input_level)

    assert level == expected_level, (
        f"Expected {input_level!r} to normalize to {expected_level}."
    )
    assert invalid is expected_invalid, (
        f"Expected invalid flag to be {expected_invalid} for {input_level!r}."
    )


def test_format_log_message_uses_percent_formatting() -> None:
    """Percent formatting produces the expected message."""
    assert format_log_message("fetched %d commits for %s", 3, "octo/reef") == (
        "fetched 3 commits for octo/reef"
    )


def test_format_log_message_without_args_is_verbatim() -> None:
    """Templates are not interpolated when no arguments are given."""
    assert format_log_message("100% cached") == "100% cached"


@pytest.mark.parametrize(
    ("helper", "level"),
    [
        (log_debug, "DEBUG"),
        (log_info, "INFO"),
        (log_warning, "WARNING"),
        (log_error, "ERROR"),
    ],
)
def test_helpers_format_and_pass_level(helper: object, level: str) -> None:
    """Each helper formats its message and emits its level."""
    logger = _FakeLogger()

    helper(logger, "hello %s", "world")  # type: ignore[operator]

    assert logger.calls == [(level, "hello world", None, False)]


def test_log_warning_forwards_exc_info() -> None:
    """log_warning forwards exc_info to the logger."""
    logger = _FakeLogger()
    exc = ValueError("boom")

    log_warning(logger, "warning: %s", "oops", exc_info=exc)

    assert logger.calls == [("WARNING", "warning: oops", exc, False)]


def test_log_exception_uses_message_verbatim() -> None:
    """log_exception forwards the exception and skips interpolation."""
    logger = _FakeLogger()
    exc = ValueError("boom")

    log_exception(logger, "failed at 100%", exc)

    assert logger.calls == [("ERROR", "failed at 100%", exc, False)]


@pytest.mark.parametrize(
    ("input_level", "expected_normalized", "expected_invalid"),
    [("DEBUG", "DEBUG", False), ("nope", "INFO", True)],
)
def test_configure_logging(
    monkeypatch: pytest.MonkeyPatch,
    input_level: str,
    expected_normalized: str,
    expected_invalid: bool,  # noqa: FBT001
) -> None:
    """configure_logging normalizes input levels and flags invalid values."""
    captured: dict[str, object] = {}

    def fake_basic_config(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr("annalist.logging.basicConfig", fake_basic_config)

    normalized, invalid = configure_logging(input_level)

    assert (normalized, invalid) == (expected_normalized, expected_invalid)
    assert captured == {"level": expected_normalized, "force": False}
