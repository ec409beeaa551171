"""Errors specific to the changelog pipeline."""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for changelog pipeline errors."""


class PerCommitDetailError(PipelineError):
    """Raised when one commit's detail cannot be loaded or summarised.

    The pipeline renders this error on the affected commit only; it never
    aborts the pass.

    Attributes
    ----------
    sha
        Commit whose detail failed.
    cause
        The underlying loader or summariser failure.

    """

    def __init__(self, sha: str, cause: BaseException) -> None:
        """Initialise with the affected sha and the underlying failure."""
        self.sha = sha
        self.cause = cause
        super().__init__(str(cause) or type(cause).__name__)
