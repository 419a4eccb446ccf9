"""Grouping of detection records by region or calendar day.

One generic `group_by()` feeds every ranked view (province charts, top-N
lists) and the daily trend series:
1. Key extraction (records with a None key are left out of every group)
2. Per-group severity counts, with severity recomputed from total_count
3. Ordering: count-ranked with first-seen tie-break, or chronological for days
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass, field

from .domain import DetectionRecord, Severity
from .severity import classify


@dataclass
class SeverityCounts:
    low: int = 0
    moderate: int = 0
    severe: int = 0
    total: int = 0

    def add(self, severity: Severity) -> None:
        setattr(self, severity.value, getattr(self, severity.value) + 1)
        self.total += 1

    def as_dict(self) -> dict[str, int]:
        return {"low": self.low, "moderate": self.moderate, "severe": self.severe, "total": self.total}


@dataclass
class SeverityGroup:
    key: Hashable
    counts: SeverityCounts = field(default_factory=SeverityCounts)

    def as_dict(self) -> dict:
        return {"key": self.key, **self.counts.as_dict()}


KeyFn = Callable[[DetectionRecord], Hashable | None]


def _collect(records: Iterable[DetectionRecord], key_fn: KeyFn) -> list[SeverityGroup]:
    """Groups in first-seen order of their keys."""
    groups: dict[Hashable, SeverityGroup] = {}
    skipped = 0
    for record in records:
        key = key_fn(record)
        if key is None:
            skipped += 1
            continue
        group = groups.get(key)
        if group is None:
            group = groups[key] = SeverityGroup(key=key)
        group.counts.add(classify(record.total_count))
    if skipped:
        logging.debug(f"[grouping] {skipped} records had no key and were left out of groups")
    return list(groups.values())


def group_by(records: Iterable[DetectionRecord], key_fn: KeyFn, top_n: int | None = None) -> list[SeverityGroup]:
    """Group records by `key_fn` and rank groups by record count.

    Ties keep the order in which each group's first record appeared in
    `records` (Python's sort is stable and groups are collected in
    first-seen order). `top_n` truncates after ranking.
    """
    if top_n is not None and top_n <= 0:
        raise ValueError(f"top_n must be positive, got {top_n}")
    groups = _collect(records, key_fn)
    groups.sort(key=lambda g: g.counts.total, reverse=True)
    if top_n is not None:
        groups = groups[:top_n]
    return groups


def region_key(record: DetectionRecord) -> str | None:
    """Province name, or None when the record has no province."""
    province = record.province
    if province is None:
        return None
    province = str(province).strip()
    return province or None


def day_key(record: DetectionRecord) -> str:
    """UTC calendar day of created_at as YYYY-MM-DD."""
    return record.created_at_utc().date().isoformat()


def group_by_region(records: Iterable[DetectionRecord], top_n: int | None = None) -> list[SeverityGroup]:
    return group_by(records, region_key, top_n=top_n)


def group_by_day(records: Iterable[DetectionRecord]) -> list[SeverityGroup]:
    """Daily buckets in chronological order.

    Only days that have records appear; there is no gap filling and no
    truncation.
    """
    groups = _collect(records, day_key)
    groups.sort(key=lambda g: g.key)
    return groups


def ungrouped_totals(records: Sequence[DetectionRecord]) -> SeverityCounts:
    """Severity counts over every record, keyed or not."""
    counts = SeverityCounts()
    for record in records:
        counts.add(classify(record.total_count))
    return counts


__all__ = [
    "SeverityCounts",
    "SeverityGroup",
    "day_key",
    "group_by",
    "group_by_day",
    "group_by_region",
    "region_key",
    "ungrouped_totals",
]
