"""Drawing primitives used by the overlay renderer.

`Canvas` is the minimal surface the renderer needs (stroke/fill rectangles,
stroke a polyline, measure/draw text). `PilCanvas` implements it over
PIL.ImageDraw so overlays can be produced headless.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional, Sequence

from PIL import Image, ImageDraw, ImageFont

Color = tuple[int, int, int, int]

# Common fonts on many systems, tried in order after any configured font
FONT_CANDIDATES = (
    "DejaVuSans-Bold.ttf",
    "DejaVuSans.ttf",
    "LiberationSans-Bold.ttf",
    "LiberationSans-Regular.ttf",
    "Arial Bold.ttf",
    "Arial.ttf",
    "/Library/Fonts/Arial.ttf",
    "/System/Library/Fonts/Supplemental/Arial.ttf",
)


class Canvas:
    """Raster surface with the handful of operations overlays are made of."""

    @property
    def size(self) -> tuple[int, int]:
        raise NotImplementedError

    def stroke_rect(self, x: float, y: float, width: float, height: float, color: Color, line_width: float):
        raise NotImplementedError

    def stroke_path(self, points: Sequence[tuple[float, float]], color: Color, line_width: float):
        raise NotImplementedError

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color, radius: float = 0):
        raise NotImplementedError

    def measure_text(self, text: str, font_size: float) -> float:
        raise NotImplementedError

    def draw_text(self, x: float, baseline: float, text: str, font_size: float, color: Color):
        raise NotImplementedError


@lru_cache(maxsize=64)
def load_font(size: float, font_path: Optional[str] = None):
    """Load a TrueType font at `size` pixels.

    Tries `font_path`, then FONT_CANDIDATES, then Pillow's bundled default
    font. Fonts are cached per (size, path) so repeated renders measure text
    identically.
    """
    candidates = ([font_path] if font_path else []) + list(FONT_CANDIDATES)
    for c in candidates:
        try:
            font = ImageFont.truetype(c, size)
            logging.debug(f"[canvas] loaded font {c} at {size:.2f}px")
            return font
        except OSError as exc:
            logging.debug(f"[canvas] font candidate failed: {c} -> {exc}")
    logging.warning("[canvas] no TrueType font candidates available; using Pillow default font")
    return ImageFont.load_default(size=size)


class PilCanvas(Canvas):
    """Canvas drawing onto a PIL image in place.

    Strokes are centred on the geometric outline; translucent colours blend
    with the underlying pixels.
    """

    def __init__(self, image: Image.Image, font_path: Optional[str] = None):
        if image.mode not in ("RGB", "RGBA"):
            raise ValueError(f"PilCanvas requires an RGB or RGBA image, got {image.mode}")
        self.image = image
        self.font_path = font_path
        self._draw = ImageDraw.Draw(image, "RGBA")

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def _font(self, font_size: float):
        return load_font(float(font_size), self.font_path)

    def stroke_rect(self, x, y, width, height, color, line_width):
        lw = max(1, int(round(line_width)))
        half = lw / 2.0
        self._draw.rectangle(
            (x - half, y - half, x + width + half, y + height + half),
            outline=color,
            width=lw,
        )

    def stroke_path(self, points, color, line_width):
        lw = max(1, int(round(line_width)))
        self._draw.line([(float(px), float(py)) for px, py in points], fill=color, width=lw, joint="curve")

    def fill_rect(self, x, y, width, height, color, radius=0):
        box = (x, y, x + width, y + height)
        if radius > 0:
            self._draw.rounded_rectangle(box, radius=radius, fill=color)
        else:
            self._draw.rectangle(box, fill=color)

    def measure_text(self, text, font_size):
        return float(self._draw.textlength(text, font=self._font(font_size)))

    def draw_text(self, x, baseline, text, font_size, color):
        font = self._font(font_size)
        if isinstance(font, ImageFont.FreeTypeFont):
            self._draw.text((x, baseline), text, font=font, fill=color, anchor="ls")
        else:
            # Bitmap fonts only support top-left anchoring
            self._draw.text((x, baseline - font_size), text, font=font, fill=color)
