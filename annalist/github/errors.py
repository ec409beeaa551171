"""GitHub REST errors."""

from __future__ import annotations

import typing as typ

from annalist.common.time import from_epoch_seconds

if typ.TYPE_CHECKING:
    import datetime as dt


class RemoteFetchError(RuntimeError):
    """Raised when a GitHub REST request does not yield a usable payload.

    Attributes
    ----------
    status_code
        HTTP status of the failed response, or ``None`` for transport
        failures.
    rate_limit_remaining
        Value of ``x-ratelimit-remaining`` when the response carried one.
    rate_limit_reset
        Value of ``x-ratelimit-reset`` (epoch seconds) when present.
    url
        Request URL.

    """

    def __init__(
        self,
        message: str,
        *,
        url: str,
        status_code: int | None = None,
        rate_limit_remaining: int | None = None,
        rate_limit_reset: int | None = None,
    ) -> None:
        """Initialise with a message and the response diagnostics."""
        self.url = url
        self.status_code = status_code
        self.rate_limit_remaining = rate_limit_remaining
        self.rate_limit_reset = rate_limit_reset
        super().__init__(message)

    @property
    def rate_limit_reset_at(self) -> dt.datetime | None:
        """Return the rate-limit reset time as an aware UTC datetime.

        ``None`` when the header was absent or names an unrepresentable time.
        """
        if self.rate_limit_reset is None:
            return None
        try:
            return from_epoch_seconds(self.rate_limit_reset)
        except (OverflowError, ValueError, OSError):
            return None

    @classmethod
    def http_error(
        cls,
        url: str,
        status_code: int,
        *,
        message: str | None = None,
        rate_limit_remaining: int | None = None,
        rate_limit_reset: int | None = None,
    ) -> RemoteFetchError:
        """Return an error for a non-success HTTP response."""
        return cls(
            message or f"request failed ({status_code})",
            url=url,
            status_code=status_code,
            rate_limit_remaining=rate_limit_remaining,
            rate_limit_reset=rate_limit_reset,
        )

    @classmethod
    def transport(cls, url: str, exc: BaseException) -> RemoteFetchError:
        """Return an error for a request that never produced a response."""
        return cls(f"request to {url} failed: {exc}", url=url)

    @classmethod
    def malformed(cls, url: str, status_code: int) -> RemoteFetchError:
        """Return an error for a success response whose body is not JSON."""
        return cls(
            f"response from {url} is not valid JSON",
            url=url,
            status_code=status_code,
        )


class GitHubConfigError(RuntimeError):
    """Raised when the GitHub source configuration is invalid."""

    @classmethod
    def missing_repository(cls) -> GitHubConfigError:
        """Return an error when owner or repository name is not configured."""
        return cls("ANNALIST_GITHUB_OWNER and ANNALIST_GITHUB_REPO are required")

    @classmethod
    def blank_field(cls, field: str) -> GitHubConfigError:
        """Return an error when a required field is empty."""
        return cls(f"GitHub source {field} must be non-empty")
