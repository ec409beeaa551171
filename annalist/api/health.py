"""Liveness probe for the static site server."""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["HealthResource"]


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Respond with HTTP 200 while the process is serving."""
        resp.status = HTTPStatus.OK
        resp.media = {"status": "ok"}
