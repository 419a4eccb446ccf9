"""Bounding-box overlay rendering.

Draws detection boxes, optional corner accents, confidence labels and
detection numbers onto a copy of a base image. Geometry scales with the
image width so overlays read the same on phone photos and drone frames.
"""

from __future__ import annotations

import io
import logging
import math
import os
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from PIL import Image

from .canvas import Canvas, PilCanvas
from .constants import (
    ACCENT_COLOR,
    CORNER_LENGTH_RATIO,
    CORNER_LINE_WIDTH,
    INDEX_FONT_SIZE,
    INDEX_INSET,
    INDEX_TEXT_COLOR,
    LABEL_TEXT_COLOR,
    PLACEHOLDER_LABEL,
)
from .domain import DetectionInstance, clamp_confidence
from .overlay_config import OverlayOptions


class ImageDecodeError(ValueError):
    """The base image could not be decoded, so no overlay can be produced."""


@dataclass(frozen=True)
class LabelLayout:
    text: str
    font_size: float
    padding: float
    x: float
    y: float
    width: float
    height: float
    baseline: float
    relocated: bool  # True when the label was moved below the box


def _scaled(spec: tuple[float, float], image_width: int) -> float:
    minimum, fraction = spec
    return max(minimum, image_width * fraction)


def format_percent(confidence: float) -> int:
    """Clamp to [0, 1] and round half-up to a whole percentage."""
    return int(math.floor(clamp_confidence(confidence) * 100 + 0.5))


def label_text(instance: DetectionInstance, variant: str) -> str:
    pct = format_percent(instance.confidence)
    if OverlayOptions(variant=variant).geometry["show_label_name"]:
        name = (instance.label or "").strip() or PLACEHOLDER_LABEL
        return f"{name} {pct}%"
    return f"{pct}%"


def layout_label(
    instance: DetectionInstance,
    image_width: int,
    measure: Callable[[str, float], float],
    variant: str = "detail",
) -> LabelLayout:
    """Compute label text, size and position for one instance.

    The label sits directly above the box. If that would cross the image's
    top edge it is placed directly below the box instead. No horizontal
    adjustment is made; labels may overflow the right edge.
    """
    geom = OverlayOptions(variant=variant).geometry
    x, y, _, h = (float(v) for v in instance.bbox)
    text = label_text(instance, variant)
    font_size = _scaled(geom["font_size"], image_width)
    padding = font_size * geom["padding_ratio"]
    width = measure(text, font_size) + padding * 2
    height = font_size + padding * 2
    gap = geom["gap"]

    label_y = y - height - gap
    relocated = label_y < 0
    if relocated:
        label_y = y + h + gap

    return LabelLayout(
        text=text,
        font_size=font_size,
        padding=padding,
        x=x,
        y=label_y,
        width=width,
        height=height,
        baseline=label_y + font_size + padding * geom["baseline_ratio"],
        relocated=relocated,
    )


def corner_accent_paths(x: float, y: float, w: float, h: float) -> list[list[tuple[float, float]]]:
    """Four L-shaped polylines (top-left, top-right, bottom-left, bottom-right)."""
    c = min(w, h) * CORNER_LENGTH_RATIO
    return [
        [(x, y + c), (x, y), (x + c, y)],
        [(x + w - c, y), (x + w, y), (x + w, y + c)],
        [(x, y + h - c), (x, y + h), (x + c, y + h)],
        [(x + w - c, y + h), (x + w, y + h), (x + w, y + h - c)],
    ]


def draw_overlay(canvas: Canvas, instances: Sequence[DetectionInstance], options: OverlayOptions) -> int:
    """Draw every valid instance onto `canvas` in list order. Returns the number drawn."""
    geom = options.validate().geometry
    image_width = canvas.size[0]
    box_width = _scaled(geom["line_width"], image_width)
    corner_width = _scaled(CORNER_LINE_WIDTH, image_width)
    index_font = _scaled(INDEX_FONT_SIZE, image_width)

    drawn = 0
    for idx, inst in enumerate(instances):
        if not inst.is_valid():
            logging.warning(f"[overlay] skipping instance #{idx + 1}: invalid bbox {inst.bbox!r}")
            continue
        x, y, w, h = (float(v) for v in inst.bbox)

        canvas.stroke_rect(x, y, w, h, ACCENT_COLOR, box_width)

        if options.show_corner_accents:
            for path in corner_accent_paths(x, y, w, h):
                canvas.stroke_path(path, ACCENT_COLOR, corner_width)

        label = layout_label(inst, image_width, canvas.measure_text, options.variant)
        canvas.fill_rect(label.x, label.y, label.width, label.height, ACCENT_COLOR, radius=geom["corner_radius"])
        canvas.draw_text(label.x + label.padding, label.baseline, label.text, label.font_size, LABEL_TEXT_COLOR)

        if options.show_index:
            canvas.draw_text(x + INDEX_INSET, y + h - INDEX_INSET, f"#{idx + 1}", index_font, INDEX_TEXT_COLOR)
        drawn += 1

    logging.debug(f"[overlay] drew {drawn}/{len(instances)} instances on {canvas.size[0]}x{canvas.size[1]} canvas")
    return drawn


def decode_image(source) -> Image.Image:
    """Return a loaded PIL image from an Image, encoded bytes or a file path.

    Raises ValueError for None and ImageDecodeError when decoding fails.
    """
    if source is None:
        raise ValueError("render requires a base image")
    if isinstance(source, Image.Image):
        return source
    try:
        if isinstance(source, (bytes, bytearray, memoryview)):
            img = Image.open(io.BytesIO(bytes(source)))
        elif isinstance(source, (str, os.PathLike)):
            img = Image.open(source)
        else:
            raise ImageDecodeError(f"unsupported base image type {type(source).__name__}")
        img.load()
    except ImageDecodeError:
        raise
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"could not decode base image: {e}") from e
    return img


def render(
    base_image,
    instances: Sequence[DetectionInstance],
    options: Optional[OverlayOptions] = None,
    font_path: Optional[str] = None,
) -> Image.Image:
    """Return a new image with `instances` drawn over `base_image`.

    The output has the same size as the input and the input is left
    untouched. With no instances the result is a pixel-identical copy.
    """
    opts = (options or OverlayOptions()).validate()
    image = decode_image(base_image)

    out = image.copy()
    if not instances:
        return out
    if out.mode not in ("RGB", "RGBA"):
        out = out.convert("RGBA" if "A" in out.getbands() or "transparency" in out.info else "RGB")

    draw_overlay(PilCanvas(out, font_path=font_path), instances, opts)
    return out


__all__ = [
    "ImageDecodeError",
    "LabelLayout",
    "corner_accent_paths",
    "decode_image",
    "draw_overlay",
    "format_percent",
    "label_text",
    "layout_label",
    "render",
]
