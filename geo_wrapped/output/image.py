"""Shareable JPEG summary image for GeoGuessr Wrapped."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from ..core.types import Report

MIN_IMAGE_MAPS = 1
MAX_IMAGE_MAPS = 20
DEFAULT_IMAGE_MAPS = 15

WIDTH = 800
BASE_HEIGHT = 200
LINE_HEIGHT = 50
FOOTER_HEIGHT = 80
MARGIN = 60

# Purple site palette, top to bottom
_GRADIENT = ((0.0, (0x17, 0x12, 0x35)), (0.5, (0x21, 0x1A, 0x4C)), (1.0, (0x10, 0x10, 0x1C)))
_AMBER = (0xFB, 0xBF, 0x24, 255)
_PODIUM = {0: (0xFB, 0xBF, 0x24), 1: (0xC0, 0xC0, 0xC0), 2: (0xCD, 0x7F, 0x32)}
_DARK_TEXT = (0x17, 0x12, 0x35, 255)

_BOLD_FONTS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "/usr/share/fonts/truetype/noto/NotoSans-Bold.ttf",
]
_REGULAR_FONTS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf",
]


def clamp_map_count(value: Any, default: int = DEFAULT_IMAGE_MAPS) -> int:
    """Bound a user supplied map count to 1..20; unparsable or zero values use default."""
    try:
        count = int(value)
    except (TypeError, ValueError):
        count = 0
    if not count:
        count = default
    return min(max(count, MIN_IMAGE_MAPS), MAX_IMAGE_MAPS)


def image_height(map_count: int) -> int:
    return BASE_HEIGHT + map_count * LINE_HEIGHT + FOOTER_HEIGHT


def load_font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    candidates = (_BOLD_FONTS if bold else []) + _REGULAR_FONTS
    for path in candidates:
        if os.path.exists(path):
            return ImageFont.truetype(path, size=size)
    return ImageFont.load_default(size=size)


def render_image(report: Report, map_count: Any = DEFAULT_IMAGE_MAPS) -> Image.Image:
    """Draw the top maps of a report onto a new RGB image.

    Args:
        report: Aggregated report; only read
        map_count: Number of rows requested, clamped to 1..20

    Returns:
        Image 800 px wide whose height grows with the requested row count
    """
    map_count = clamp_map_count(map_count)
    height = image_height(map_count)
    img = _gradient_canvas(WIDTH, height)
    draw = ImageDraw.Draw(img, "RGBA")

    center = WIDTH // 2
    draw.text((center, 60), f"GeoGuessr Wrapped {report.year}", font=load_font(36, bold=True),
              fill=(255, 255, 255, 255), anchor="ms")
    draw.text((center, 90), f"Top {map_count} Most Played Maps", font=load_font(18),
              fill=(255, 255, 255, 204), anchor="ms")
    draw.text((center, 130), f"{report.total_games} Games Played", font=load_font(24, bold=True),
              fill=_AMBER, anchor="ms")

    max_text_width = WIDTH - 2 * MARGIN - 100
    rank_font = load_font(14, bold=True)
    count_font = load_font(24, bold=True)
    share_font = load_font(16)

    y = 180
    for index, counter in enumerate(report.all_maps[:map_count]):
        cx, cy, radius = MARGIN + 10, y - 12, 18
        if index in _PODIUM:
            _draw_glow(img, (cx, cy), radius, _PODIUM[index])
            circle_fill = _PODIUM[index] + (255,)
        else:
            circle_fill = (255, 255, 255, 38)
        draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius], fill=circle_fill)
        draw.text((cx, cy), str(index + 1), font=rank_font,
                  fill=_DARK_TEXT if index < 3 else (255, 255, 255, 230), anchor="mm")

        name_font = load_font(24, bold=True) if index < 3 else load_font(22)
        name = fit_text(draw, counter.map_name, name_font, max_text_width)
        draw.text((MARGIN + 40, y - 5), name, font=name_font, fill=(255, 255, 255, 242), anchor="ls")

        draw.text((WIDTH - MARGIN, y - 10), str(counter.count), font=count_font,
                  fill=_AMBER, anchor="rs")
        draw.text((WIDTH - MARGIN, y + 8), f"{report.share(counter):.1f}%", font=share_font,
                  fill=(255, 255, 255, 153), anchor="rs")
        y += LINE_HEIGHT

    draw.text((center, height - 30), "Generated by GeoGuessr Wrapped", font=load_font(14),
              fill=(255, 255, 255, 102), anchor="ms")
    return img


def fit_text(draw: ImageDraw.ImageDraw, text: str, font: Any, max_width: float) -> str:
    """Truncate text with an ellipsis until it fits, keeping at least 10 characters."""
    if draw.textlength(text, font=font) <= max_width:
        return text
    while draw.textlength(text + "...", font=font) > max_width and len(text) > 10:
        text = text[:-1]
    return text + "..."


def save_image(img: Image.Image, output_path: Path, quality: int = 90) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    img.save(output_path, format="JPEG", quality=quality)
    return output_path


def _gradient_canvas(width: int, height: int) -> Image.Image:
    img = Image.new("RGB", (width, height), _GRADIENT[0][1])
    draw = ImageDraw.Draw(img)
    for y in range(height):
        t = y / max(height - 1, 1)
        draw.line([(0, y), (width, y)], fill=_gradient_color(t))
    return img


def _gradient_color(t: float) -> tuple[int, int, int]:
    for (start, c1), (stop, c2) in zip(_GRADIENT, _GRADIENT[1:]):
        if t <= stop:
            local = (t - start) / (stop - start)
            return tuple(int(a + (b - a) * local) for a, b in zip(c1, c2))
    return _GRADIENT[-1][1]


def _draw_glow(img: Image.Image, center: tuple[int, int], radius: int, color: tuple[int, int, int]) -> None:
    glow = Image.new("RGBA", img.size, (0, 0, 0, 0))
    cx, cy = center
    ImageDraw.Draw(glow).ellipse(
        [cx - radius - 2, cy - radius - 2, cx + radius + 2, cy + radius + 2],
        fill=color + (160,),
    )
    glow = glow.filter(ImageFilter.GaussianBlur(6))
    img.paste(glow, (0, 0), glow)
