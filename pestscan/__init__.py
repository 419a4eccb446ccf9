"""Detection interpretation for pest-scan photographs: severity, overlays and analytics."""

from .domain import DetectionInstance, DetectionRecord, Region, Severity
from .grouping import group_by, group_by_day, group_by_region
from .overlay import ImageDecodeError, render
from .overlay_config import OverlayOptions
from .severity import classify
from .summary import summarize

__all__ = [
    "DetectionInstance",
    "DetectionRecord",
    "ImageDecodeError",
    "OverlayOptions",
    "Region",
    "Severity",
    "classify",
    "group_by",
    "group_by_day",
    "group_by_region",
    "render",
    "summarize",
]
