"""Core data types: severity classes, detection instances and records."""

from __future__ import annotations

import json
import logging
import math
import numbers
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from .constants import PLACEHOLDER_LABEL


class Severity(str, Enum):
    """Infestation severity, derived solely from a detection count."""

    LOW = "low"
    MODERATE = "moderate"
    SEVERE = "severe"

    def __str__(self) -> str:
        return self.value


def confidence_value(value) -> float:
    """Raw confidence as a float; None, NaN and non-numeric values read as 0.0."""
    try:
        conf = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(conf):
        return 0.0
    return conf


def clamp_confidence(value) -> float:
    return min(1.0, max(0.0, confidence_value(value)))


@dataclass(frozen=True)
class DetectionInstance:
    """One located object. bbox is (x, y, width, height) in source-image pixels."""

    bbox: tuple[float, float, float, float]
    confidence: float = 0.0
    label: str = PLACEHOLDER_LABEL

    def is_valid(self) -> bool:
        """True when all bbox values are finite and width/height are positive."""
        try:
            x, y, w, h = (float(v) for v in self.bbox)
        except (TypeError, ValueError):
            return False
        if not all(math.isfinite(v) for v in (x, y, w, h)):
            return False
        return w > 0 and h > 0

    def clamped_confidence(self) -> float:
        return clamp_confidence(self.confidence)

    def to_dict(self) -> dict:
        return {"bbox": list(self.bbox), "confidence": self.confidence, "label": self.label}


@dataclass(frozen=True)
class Region:
    """Structured location of an analysis. Only used for grouping and export columns."""

    province: str | None = None
    municipality: str | None = None
    barangay: str | None = None
    farm_name: str | None = None
    farm_owner: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    location_method: str | None = None

    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def describe(self) -> str:
        """'Province, Municipality, Barangay' with missing parts dropped, or 'N/A'."""
        parts = [p for p in (self.province, self.municipality, self.barangay) if p]
        return ", ".join(parts) if parts else "N/A"

    @classmethod
    def from_raw(cls, details: dict) -> Region | None:
        region = cls(
            province=details.get("province") or None,
            municipality=details.get("municipality") or None,
            barangay=details.get("barangay") or None,
            farm_name=details.get("farmName") or details.get("farm_name") or None,
            farm_owner=details.get("farmOwner") or details.get("farm_owner") or None,
            latitude=_optional_float(details.get("latitude")),
            longitude=_optional_float(details.get("longitude")),
            location_method=details.get("locationMethod") or details.get("location_method") or None,
        )
        if region == cls():
            return None
        return region


@dataclass(frozen=True)
class DetectionRecord:
    """One completed analysis of one image. Never mutated by pestscan."""

    id: str
    created_at: datetime
    instances: tuple[DetectionInstance, ...] = ()
    total_count: int = 0
    avg_confidence: float = 0.0
    region: Region | None = None
    image_url: str | None = None
    processing_time_ms: int | None = None
    notes: str | None = None

    def __post_init__(self):
        if isinstance(self.total_count, bool) or not isinstance(self.total_count, numbers.Integral):
            raise ValueError(f"record {self.id}: total_count must be an int, got {type(self.total_count).__name__}")
        if self.total_count < 0:
            raise ValueError(f"record {self.id}: total_count must be non-negative, got {self.total_count}")

    @property
    def severity(self) -> Severity:
        # Always recomputed from total_count; never read from stored payloads.
        from .severity import classify

        return classify(self.total_count)

    @property
    def province(self) -> str | None:
        return self.region.province if self.region else None

    def created_at_utc(self) -> datetime:
        """created_at as an aware UTC datetime (naive values are read as UTC)."""
        if self.created_at.tzinfo is None:
            return self.created_at.replace(tzinfo=timezone.utc)
        return self.created_at.astimezone(timezone.utc)

    @classmethod
    def from_dict(cls, payload: dict) -> DetectionRecord:
        """Build a record from the storage collaborator's JSON shape.

        Accepts either a `detections` list or a `detections_data` JSON string.
        Any stored `severity` is ignored.
        """
        from .detections import mean_confidence, normalize_instances

        raw_instances = payload.get("detections")
        if raw_instances is None and payload.get("detections_data"):
            try:
                raw_instances = json.loads(payload["detections_data"])
            except (TypeError, ValueError) as e:
                logging.warning(f"[domain] record {payload.get('id')}: unreadable detections_data: {e}")
                raw_instances = []
        instances = tuple(normalize_instances(raw_instances or []))

        total = payload.get("total_detections")
        if total is None:
            total = payload.get("total_count")
        total_count = int(total) if total is not None else len(instances)

        if instances:
            avg_conf = mean_confidence(instances)
        else:
            avg_conf = float(payload.get("avg_confidence") or 0.0)

        processing = payload.get("processing_time")
        return cls(
            id=str(payload.get("id", "")),
            created_at=parse_timestamp(payload.get("created_date") or payload.get("created_at")),
            instances=instances,
            total_count=total_count,
            avg_confidence=avg_conf,
            region=Region.from_raw(payload),
            image_url=payload.get("image_url") or None,
            processing_time_ms=int(processing) if processing not in (None, "") else None,
            notes=payload.get("notes") or None,
        )

    def to_dict(self) -> dict:
        region = self.region or Region()
        return {
            "id": self.id,
            "created_date": self.created_at.isoformat(),
            "detections": [inst.to_dict() for inst in self.instances],
            "total_detections": self.total_count,
            "avg_confidence": self.avg_confidence,
            "severity": self.severity.value,
            "province": region.province,
            "municipality": region.municipality,
            "barangay": region.barangay,
            "farmName": region.farm_name,
            "farmOwner": region.farm_owner,
            "latitude": region.latitude,
            "longitude": region.longitude,
            "locationMethod": region.location_method,
            "image_url": self.image_url,
            "processing_time": self.processing_time_ms,
            "notes": self.notes,
        }


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 string (a trailing 'Z' is accepted) or pass a datetime through."""
    if isinstance(value, datetime):
        return value
    if not value:
        raise ValueError("record is missing created_date")
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _optional_float(value) -> float | None:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
