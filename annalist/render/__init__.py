"""Render targets for changelog passes."""

from __future__ import annotations

from .html import HtmlPageOptions, HtmlRenderTarget, format_date
from .target import ErrorPanel, RenderTarget

__all__ = [
    "ErrorPanel",
    "HtmlPageOptions",
    "HtmlRenderTarget",
    "RenderTarget",
    "format_date",
]
