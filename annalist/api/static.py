"""Static file sink serving the generated site.

Request paths are mapped to candidate files under the content root:

- ``/`` → ``/index.html``
- ``/dir/`` → ``/dir/index.html``
- ``/page`` (no extension) → ``/page.html``, ``/page/index.html``, ``/page``
- anything else → itself

Candidates are tried in order. A candidate resolving outside the content
root ends the request with ``400``; running out of candidates gives
``404``.

Usage
-----
Register the sink on the Falcon app::

    app.add_sink(StaticSiteSink(Path("site")), prefix="/")

"""

from __future__ import annotations

import asyncio
import posixpath
import typing as typ
import urllib.parse
from pathlib import Path

import falcon

from annalist.logging import get_logger, log_error

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = [
    "MIME_TYPES",
    "PathEscapeError",
    "StaticSiteSink",
    "candidate_paths",
    "resolve_within",
]

logger = get_logger(__name__)

MIME_TYPES: dict[str, str] = {
    ".html": "text/html; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".js": "text/javascript; charset=utf-8",
    ".json": "application/json; charset=utf-8",
    ".svg": "image/svg+xml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}
_DEFAULT_MIME = "application/octet-stream"
_TEXT = "text/plain; charset=utf-8"


class PathEscapeError(ValueError):
    """Raised when a request path resolves outside the content root."""


def candidate_paths(raw_path: str) -> list[str]:
    """Return the URL paths to try, in order, for ``raw_path``."""
    try:
        url_path = urllib.parse.unquote(raw_path, errors="strict")
    except UnicodeDecodeError:
        url_path = raw_path

    if url_path == "/":
        return ["/index.html"]
    if url_path.endswith("/"):
        return [f"{url_path}index.html"]
    if not posixpath.splitext(url_path)[1]:
        return [f"{url_path}.html", f"{url_path}/index.html", url_path]
    return [url_path]


def resolve_within(root: Path, url_path: str) -> Path:
    """Return the file for ``url_path`` under ``root``.

    Raises
    ------
    PathEscapeError
        If the resolved path is not inside ``root``.

    """
    candidate = (root / url_path.lstrip("/")).resolve()
    if not candidate.is_relative_to(root):
        msg = f"{url_path!r} escapes {root}"
        raise PathEscapeError(msg)
    return candidate


def _read_first(root: Path, candidates: list[str]) -> tuple[Path, bytes] | None:
    for url_path in candidates:
        path = resolve_within(root, url_path)
        try:
            return path, path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            continue
    return None


class StaticSiteSink:
    """Falcon ASGI sink serving files below a content root.

    Parameters
    ----------
    root
        Content root. Resolved once at construction.

    """

    def __init__(self, root: Path) -> None:
        """Initialise the sink with its content root."""
        self._root = root.resolve()

    @property
    def root(self) -> Path:
        """Return the resolved content root."""
        return self._root

    async def __call__(self, req: Request, resp: Response, **_kwargs: object) -> None:
        """Serve the file for ``req.path``."""
        resp.set_header("Cache-Control", "no-store")
        if req.method not in {"GET", "HEAD"}:
            resp.status = falcon.HTTP_405
            resp.set_header("Allow", "GET, HEAD")
            resp.content_type = _TEXT
            resp.text = "method not allowed"
            return

        try:
            found = await asyncio.to_thread(
                _read_first, self._root, candidate_paths(req.path)
            )
        except PathEscapeError:
            resp.status = falcon.HTTP_400
            resp.content_type = _TEXT
            resp.text = "bad request"
            return
        except OSError as exc:
            log_error(logger, "Failed to serve %s: %s", req.path, exc)
            resp.status = falcon.HTTP_500
            resp.content_type = _TEXT
            resp.text = "server error"
            return

        if found is None:
            resp.status = falcon.HTTP_404
            resp.content_type = _TEXT
            resp.text = "not found"
            return

        path, data = found
        resp.status = falcon.HTTP_200
        resp.content_type = MIME_TYPES.get(path.suffix.lower(), _DEFAULT_MIME)
        resp.data = data
