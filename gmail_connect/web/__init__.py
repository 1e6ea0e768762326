"""Server-rendered HTML pages."""

from .pages import render_error, render_index, render_legal, render_success

__all__ = ["render_error", "render_index", "render_legal", "render_success"]
