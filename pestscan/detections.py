"""Detection-service payload normalization and record construction.

Provides `normalize_instances()` which converts the shapes the inference
service (and older stored records) use into a stable list of
DetectionInstance objects, and `build_record()` which derives the count and
mean confidence of a completed analysis.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence

import numpy as np

from .constants import PLACEHOLDER_LABEL
from .domain import DetectionInstance, DetectionRecord, Region, confidence_value

_LABEL_KEYS = ("label", "disease", "class", "name", "class_name")
_CONFIDENCE_KEYS = ("confidence", "score", "prob")


def _to_list(x) -> Optional[list]:
    """Convert array-likes (lists, tuples, numpy arrays) to a flat Python list. None on failure."""
    if x is None:
        return None
    try:
        return np.asarray(x, dtype=float).ravel().tolist()
    except (TypeError, ValueError):
        return None


def _bbox_from(o: dict) -> Optional[tuple[float, float, float, float]]:
    """Extract (x, y, width, height) from a detection dict.

    - 'bbox' as a sequence is already x/y/width/height
    - 'bbox' as a mapping with x1/y1/x2/y2 is converted to x/y/width/height
    - 'xyxy' as a sequence is converted the same way
    """
    box = o.get("bbox")
    if isinstance(box, dict):
        try:
            x1, y1 = float(box["x1"]), float(box["y1"])
            x2, y2 = float(box["x2"]), float(box["y2"])
        except (KeyError, TypeError, ValueError):
            return None
        return (x1, y1, x2 - x1, y2 - y1)
    if box is not None:
        values = _to_list(box)
        if values is None or len(values) != 4:
            return None
        return (values[0], values[1], values[2], values[3])
    xyxy = _to_list(o.get("xyxy"))
    if xyxy is not None and len(xyxy) == 4:
        return (xyxy[0], xyxy[1], xyxy[2] - xyxy[0], xyxy[3] - xyxy[1])
    return None


def _label_from(o: dict) -> str:
    for k in _LABEL_KEYS:
        v = o.get(k)
        if v is not None and str(v).strip():
            return str(v).strip()
    return PLACEHOLDER_LABEL


def _confidence_from(o: dict) -> float:
    for k in _CONFIDENCE_KEYS:
        v = o.get(k)
        if v is None:
            continue
        try:
            conf = float(v[0]) if isinstance(v, (list, tuple)) else float(v)
        except (TypeError, ValueError, IndexError):
            return 0.0
        return conf if math.isfinite(conf) else 0.0
    return 0.0


def normalize_instances(objects: Any) -> List[DetectionInstance]:
    """Normalize detection-service output into List[DetectionInstance].

    Cases handled:
    - None / empty -> []
    - a service response dict with a 'detections' list
    - DetectionInstance objects (passed through)
    - dicts with 'bbox' ([x, y, w, h] or {x1, y1, x2, y2}) or 'xyxy', a
      confidence under 'confidence'/'score'/'prob' and a label under
      'label'/'disease'/'class'/'name'

    Entries without a usable bbox are dropped. Geometric validity (positive
    size, finite values) is NOT checked here; the renderer skips such
    instances, while counts still include them.
    """
    if not objects:
        return []

    if isinstance(objects, dict):
        objects = objects.get("detections") or []

    if not isinstance(objects, (list, tuple)):
        objects = [objects]

    out: List[DetectionInstance] = []
    for idx, o in enumerate(objects):
        if o is None:
            continue
        if isinstance(o, DetectionInstance):
            out.append(o)
            continue
        if not isinstance(o, dict):
            logging.debug(f"[detections] skipping entry {idx}: unsupported type {type(o).__name__}")
            continue
        bbox = _bbox_from(o)
        if bbox is None:
            logging.warning(f"[detections] skipping entry {idx}: no usable bbox in {sorted(o.keys())}")
            continue
        out.append(DetectionInstance(bbox=bbox, confidence=_confidence_from(o), label=_label_from(o)))
    return out


def mean_confidence(instances: Sequence[DetectionInstance]) -> float:
    """Mean of raw instance confidences; 0.0 for an empty sequence.

    Values outside [0, 1] are averaged as-is. Clamping happens only when a
    confidence is formatted for display. Missing or NaN confidences count as 0.
    """
    if not instances:
        return 0.0
    return float(sum(confidence_value(i.confidence) for i in instances) / len(instances))


def build_record(
    record_id: str,
    instances: Iterable[DetectionInstance],
    created_at: datetime,
    region: Region | None = None,
    total_count: int | None = None,
    **extra,
) -> DetectionRecord:
    """Create the record for a completed analysis.

    `total_count` defaults to the number of instances; pass it explicitly only
    for historical analyses whose instance payload was not retained.
    """
    items = tuple(instances)
    count = len(items) if total_count is None else int(total_count)
    if count < 0:
        raise ValueError(f"total_count must be non-negative, got {count}")
    record = DetectionRecord(
        id=record_id,
        created_at=created_at,
        instances=items,
        total_count=count,
        avg_confidence=mean_confidence(items),
        region=region,
        **extra,
    )
    logging.debug(
        f"[detections] built record {record_id}: count={count} avg_conf={record.avg_confidence:.4f} "
        f"severity={record.severity.value}"
    )
    return record
