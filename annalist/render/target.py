"""RenderTarget protocol for displaying a changelog pass.

This module defines the port through which the pipeline hands commits,
summaries and failures to a display. The pipeline never reaches into a
particular markup or widget toolkit; it only calls these methods, always
keyed by the commit so that out-of-order detail completion patches the
right view.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from annalist.github.models import CommitDetail, CommitRef
    from annalist.summary import CommitExplanation, CommitSummary


@dc.dataclass(frozen=True, slots=True)
class ErrorPanel:
    """A page-level failure notice.

    Attributes
    ----------
    title
        Short heading, e.g. "Could not load changelog".
    message
        Explanation shown under the heading.
    href
        Optional link for the reader to follow instead.
    link_text
        Label for ``href``.

    """

    title: str
    message: str
    href: str | None = None
    link_text: str = "view on github"


@typ.runtime_checkable
class RenderTarget(typ.Protocol):
    """Display surface for one changelog pass."""

    def set_status(self, text: str) -> None:
        """Show a one-line status such as the latest commit date."""
        ...

    def add_commit(self, commit: CommitRef, *, expanded: bool) -> None:
        """Add placeholder views for ``commit`` in list order."""
        ...

    def apply_detail(
        self,
        commit: CommitRef,
        detail: CommitDetail,
        summary: CommitSummary,
        explanation: CommitExplanation,
    ) -> None:
        """Replace the placeholders for ``commit`` with its summary."""
        ...

    def apply_error(self, commit: CommitRef, error: BaseException) -> None:
        """Mark the views for ``commit`` as having no details."""
        ...

    def show_error(self, panel: ErrorPanel) -> None:
        """Show a page-level failure notice."""
        ...
