"""Static HTML implementation of :class:`RenderTarget`.

The target keeps one view per commit sha, in list order, and renders the
whole page on demand from the packaged ``changelog.html.j2`` template. Each
commit gets a compact summary card and a collapsible detail block; both start
as "loading details…" placeholders and are patched when the commit's detail
arrives or fails.

Usage
-----
>>> target = HtmlRenderTarget(HtmlPageOptions(title="marble changelog"))
>>> target.set_status("loading commits…")
>>> page = target.render()

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from annalist.common.slug import short_sha
from annalist.summary import is_snapshot_file

if typ.TYPE_CHECKING:
    import datetime as dt

    from annalist.github.models import CommitDetail, CommitRef, FileChange
    from annalist.summary import CommitExplanation, CommitSummary

    from .target import ErrorPanel

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "changelog.html.j2"

_UNAVAILABLE = "Details unavailable (GitHub API error)."

_environment = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml", "j2"]),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)


@dc.dataclass(frozen=True, slots=True)
class HtmlPageOptions:
    """Page-level settings for :class:`HtmlRenderTarget`.

    Attributes
    ----------
    title
        Document title and top-level heading.
    stylesheet_href
        Optional stylesheet linked from the document head.
    app_store_url
        Optional link added to every detail block's actions.

    """

    title: str = "Changelog"
    stylesheet_href: str | None = None
    app_store_url: str | None = None


def format_date(value: dt.datetime | None) -> str:
    """Format a timestamp as ``Mon DD, YYYY``, or ``""`` when unknown."""
    if value is None:
        return ""
    return value.strftime("%b %d, %Y")


@dc.dataclass(slots=True)
class _CommitView:
    commit: CommitRef
    expanded: bool
    url: str
    summary: CommitSummary | None = None
    explanation: CommitExplanation | None = None
    files: tuple[FileChange, ...] = ()
    error: str | None = None

    @property
    def state(self) -> str:
        if self.error is not None:
            return "error"
        if self.summary is not None and self.explanation is not None:
            return "loaded"
        return "loading"

    @property
    def date(self) -> str:
        return format_date(self.commit.authored_at)

    @property
    def abbrev_sha(self) -> str:
        return short_sha(self.commit.sha)

    @property
    def snapshot_files(self) -> list[FileChange]:
        return [f for f in self.files if is_snapshot_file(f.filename)]

    @property
    def other_files(self) -> list[FileChange]:
        return [f for f in self.files if not is_snapshot_file(f.filename)]


class HtmlRenderTarget:
    """Collect a changelog pass and render it as one HTML document."""

    def __init__(self, options: HtmlPageOptions | None = None) -> None:
        """Initialise an empty page."""
        self._options = options or HtmlPageOptions()
        self._status = ""
        self._panels: list[ErrorPanel] = []
        self._views: dict[str, _CommitView] = {}

    @property
    def status(self) -> str:
        """Return the current status line."""
        return self._status

    @property
    def panels(self) -> tuple[ErrorPanel, ...]:
        """Return the page-level error panels shown so far."""
        return tuple(self._panels)

    def set_status(self, text: str) -> None:
        """Set the status line."""
        self._status = text

    def add_commit(self, commit: CommitRef, *, expanded: bool) -> None:
        """Add placeholder views for ``commit``."""
        self._views[commit.sha] = _CommitView(
            commit=commit, expanded=expanded, url=commit.html_url
        )

    def apply_detail(
        self,
        commit: CommitRef,
        detail: CommitDetail,
        summary: CommitSummary,
        explanation: CommitExplanation,
    ) -> None:
        """Fill in the views for ``commit``."""
        view = self._views.get(commit.sha)
        if view is None:
            return
        view.summary = summary
        view.explanation = explanation
        view.files = detail.files
        view.url = detail.html_url or commit.html_url
        view.error = None

    def apply_error(self, commit: CommitRef, error: BaseException) -> None:
        """Mark the views for ``commit`` as unavailable."""
        view = self._views.get(commit.sha)
        if view is None:
            return
        view.summary = None
        view.error = str(error) or "Unknown error"

    def show_error(self, panel: ErrorPanel) -> None:
        """Add a page-level error panel."""
        self._panels.append(panel)

    def render(self) -> str:
        """Render the complete HTML document.

        All text reaches the markup through the template's autoescaping, so
        commit subjects and override prose may contain arbitrary characters.
        """
        template = _environment.get_template(TEMPLATE_NAME)
        return template.render(
            options=self._options,
            status=self._status,
            panels=self._panels,
            views=list(self._views.values()),
            unavailable=_UNAVAILABLE,
        )
