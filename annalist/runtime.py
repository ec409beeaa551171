"""Annalist static site server entrypoint.

This module provides the ASGI application factory used by Granian. It
delegates to :func:`annalist.api.app.create_app` while keeping the
``annalist.runtime:create_app`` entrypoint stable.

Configuration is driven by environment variables:

- ``ANNALIST_SITE_ROOT``: Content root to serve (default ``.``)
- ``ANNALIST_HOST``: Bind address (default ``127.0.0.1``)
- ``ANNALIST_PORT``: Listen port (default ``5173``)
- ``ANNALIST_LOG_LEVEL``: Log level (default ``INFO``)

Run the server directly with ``python -m annalist.runtime``.
"""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path

from annalist.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid ANNALIST_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def _site_root() -> Path:
    raw = os.environ.get("ANNALIST_SITE_ROOT", "").strip()
    return Path(raw) if raw else Path()


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application serving ``ANNALIST_SITE_ROOT``."""
    from annalist.api.app import create_app as _create_api_app

    return _create_api_app(_site_root())


def main() -> None:
    """Start the static site server using Granian.

    Reads ``ANNALIST_HOST``, ``ANNALIST_PORT`` and ``ANNALIST_LOG_LEVEL`` from
    the environment and starts the ASGI server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("ANNALIST_HOST", "127.0.0.1")
    port = _parse_port(os.environ.get("ANNALIST_PORT", "5173"))
    log_level_str = os.environ.get("ANNALIST_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid ANNALIST_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Serving %s on http://%s:%d (log_level=%s)",
        _site_root().resolve(),
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "annalist.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
