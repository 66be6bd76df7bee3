"""Report rendering: console and file tables, share image."""

from .image import clamp_map_count, render_image, save_image
from .table import build_rich_table, render_html, render_markdown, render_report_html

__all__ = [
    "build_rich_table",
    "clamp_map_count",
    "render_html",
    "render_image",
    "render_markdown",
    "render_report_html",
    "save_image",
]
