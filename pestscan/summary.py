"""Summary statistics over a snapshot of detection records."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from .constants import DEFAULT_TOP_N, PHILIPPINES_CENTER, RECENT_RECORDS_LIMIT
from .domain import DetectionRecord
from .grouping import SeverityGroup, group_by_region, ungrouped_totals


@dataclass
class Summary:
    total: int = 0
    low: int = 0
    moderate: int = 0
    severe: int = 0
    avg_insects_per_record: float = 0.0
    top_regions: list[SeverityGroup] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "low": self.low,
            "moderate": self.moderate,
            "severe": self.severe,
            "avgInsectsPerRecord": self.avg_insects_per_record,
            "topRegions": [g.as_dict() for g in self.top_regions],
        }


def _round1(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def summarize(records: Sequence[DetectionRecord], top_n: int = DEFAULT_TOP_N) -> Summary:
    """Totals per severity, mean insects per record and the top-N provinces."""
    if top_n is not None and top_n <= 0:
        raise ValueError(f"top_n must be positive, got {top_n}")
    records = list(records)
    if not records:
        return Summary()
    counts = ungrouped_totals(records)
    avg = _round1(sum(r.total_count for r in records) / len(records))
    return Summary(
        total=counts.total,
        low=counts.low,
        moderate=counts.moderate,
        severe=counts.severe,
        avg_insects_per_record=avg,
        top_regions=group_by_region(records, top_n=top_n),
    )


def map_center(records: Sequence[DetectionRecord]) -> tuple[float, float]:
    """Mean coordinate of geotagged records, or the Philippines centre when there are none."""
    points = [(r.region.latitude, r.region.longitude) for r in records if r.region and r.region.has_coordinates()]
    if not points:
        return PHILIPPINES_CENTER
    lat = sum(p[0] for p in points) / len(points)
    lng = sum(p[1] for p in points) / len(points)
    return (lat, lng)


def recent_records(records: Sequence[DetectionRecord], limit: int = RECENT_RECORDS_LIMIT) -> list[DetectionRecord]:
    """Newest records first; records with equal timestamps keep input order."""
    ordered = sorted(records, key=lambda r: r.created_at_utc(), reverse=True)
    return ordered[: max(0, limit)]
