"""Application factory for the Annalist static site server.

This module provides ``create_app()`` which builds a Falcon ASGI
application serving the generated changelog site from a content root,
with a ``/health`` probe alongside.

Usage
-----
Serve the current directory::

    from pathlib import Path

    app = create_app(Path("."))

"""

from __future__ import annotations

import typing as typ

import falcon.asgi

from annalist.api.health import HealthResource
from annalist.api.static import StaticSiteSink

if typ.TYPE_CHECKING:
    from pathlib import Path

__all__ = ["create_app"]


def create_app(site_root: Path) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    site_root
        Directory whose files are served. Paths resolving outside it are
        rejected.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    app = falcon.asgi.App()
    # Routes take precedence over sinks, so /health is never shadowed.
    app.add_route("/health", HealthResource())
    app.add_sink(StaticSiteSink(site_root), prefix="/")
    return app
