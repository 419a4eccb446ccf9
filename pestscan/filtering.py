import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone

from .constants import FILTER_WINDOWS, PHILIPPINE_PROVINCES
from .domain import DetectionRecord, Severity


@dataclass(frozen=True)
class RecordFilter:
    """Severity / province / date filters applied before aggregation and export.

    Empty fields do not filter. `date_from` and `date_to` are inclusive
    calendar days (UTC). `window` is a named look-back ('today', 'week',
    'month', 'quarter', 'year') counted in whole days from `now`.
    """

    severity: Severity | None = None
    province: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    window: str | None = None

    def __post_init__(self):
        if self.severity is not None:
            object.__setattr__(self, "severity", Severity(self.severity))
        if self.window is not None and self.window not in FILTER_WINDOWS:
            raise ValueError(f"unknown filter window {self.window!r}; expected one of {tuple(FILTER_WINDOWS)}")
        if self.province and self.province not in PHILIPPINE_PROVINCES:
            logging.warning(f"[filtering] province {self.province!r} is not a known Philippine province")

    def active(self) -> bool:
        return bool(self.severity or self.province or self.date_from or self.date_to or self.window)

    def matches(self, record: DetectionRecord, now: datetime) -> bool:
        if self.severity is not None and record.severity != self.severity:
            return False
        if self.province and record.province != self.province:
            return False
        day = record.created_at_utc().date()
        if self.date_from and day < self.date_from:
            return False
        if self.date_to and day > self.date_to:
            return False
        if self.window:
            age_days = (now - record.created_at_utc()).days
            limit = FILTER_WINDOWS[self.window]
            if limit == 0:
                return age_days == 0
            return age_days <= limit
        return True

    def apply(self, records: list[DetectionRecord], now: datetime | None = None) -> list[DetectionRecord]:
        if not records or not self.active():
            return list(records) if records else []
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        out = [r for r in records if self.matches(r, now)]
        logging.debug(
            "[filtering] severity=%s province=%s from=%s to=%s window=%s -> %d/%d",
            self.severity,
            self.province,
            self.date_from,
            self.date_to,
            self.window,
            len(out),
            len(records),
        )
        return out


__all__ = ["RecordFilter"]
