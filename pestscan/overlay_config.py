"""Configuration objects for overlay rendering.

Provides a structured options class to keep render() signatures short.
"""

from dataclasses import dataclass

from .constants import OVERLAY_GEOMETRY

VARIANTS = tuple(OVERLAY_GEOMETRY)


@dataclass(frozen=True)
class OverlayOptions:
    """Options for drawing detections onto an image."""

    variant: str = "detail"
    """'detail' (live preview: label name + percentage) or 'report' (printable: percentage only)"""

    show_index: bool = False
    """Draw the 1-based detection number near each box's bottom-left corner"""

    show_corner_accents: bool = False
    """Draw L-shaped accents on the four corners of each box"""

    def validate(self) -> "OverlayOptions":
        if self.variant not in OVERLAY_GEOMETRY:
            raise ValueError(f"unknown overlay variant {self.variant!r}; expected one of {VARIANTS}")
        return self

    @property
    def geometry(self) -> dict:
        return OVERLAY_GEOMETRY[self.validate().variant]

    @classmethod
    def from_settings(cls, settings: dict) -> "OverlayOptions":
        return cls(
            variant=settings.get("variant", "detail"),
            show_index=bool(settings.get("show_index", False)),
            show_corner_accents=bool(settings.get("show_corner_accents", False)),
        ).validate()
