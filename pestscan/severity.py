"""Severity classification and the guidance shown for each class."""

from __future__ import annotations

import numbers
from dataclasses import dataclass

from .constants import AVERAGE_DETECTIONS, LOWER_THAN_AVERAGE_RATIO, MODERATE_MIN_COUNT, SEVERE_MIN_COUNT
from .domain import Severity


def classify(count: int) -> Severity:
    """Map a detection count to its severity class.

    count >= 10 is severe, 5..9 moderate, anything below 5 (including 0) low.
    Negative or non-integer counts raise ValueError.
    """
    if isinstance(count, bool) or not isinstance(count, numbers.Integral):
        raise ValueError(f"detection count must be an int, got {type(count).__name__}")
    count = int(count)
    if count < 0:
        raise ValueError(f"detection count must be non-negative, got {count}")
    if count >= SEVERE_MIN_COUNT:
        return Severity.SEVERE
    if count >= MODERATE_MIN_COUNT:
        return Severity.MODERATE
    return Severity.LOW


def compare_to_average(count: int, average: float = AVERAGE_DETECTIONS) -> str:
    """'higher' above the average, 'lower' below 70% of it, otherwise 'moderate'."""
    if count > average:
        return "higher"
    if count < average * LOWER_THAN_AVERAGE_RATIO:
        return "lower"
    return "moderate"


_LEVEL_PERCENT = {Severity.LOW: 33, Severity.MODERATE: 66, Severity.SEVERE: 100}


def severity_level_percent(severity: Severity) -> int:
    """Fill level of the severity meter."""
    return _LEVEL_PERCENT[Severity(severity)]


@dataclass(frozen=True)
class Guidance:
    title: str
    timeline: str
    risk: str
    spread: str
    impact: str
    actions: tuple[tuple[str, str], ...]
    next_steps: tuple[str, ...]


SEVERITY_GUIDANCE: dict[Severity, Guidance] = {
    Severity.SEVERE: Guidance(
        title="SEVERE INFESTATION DETECTED",
        timeline="Immediate action required within 24 hours",
        risk="Critical threat to coconut plantation",
        spread="High probability of rapid spread to neighboring trees",
        impact="Significant economic losses if not addressed immediately",
        actions=(
            ("Immediate Treatment", "Apply approved insecticide treatment to all affected trees within 24 hours. Contact PCA for recommended chemicals."),
            ("Quarantine Zone", "Establish 50-meter quarantine radius around affected area. Mark trees clearly and restrict movement."),
            ("Intensive Monitoring", "Inspect all trees within 100-meter radius daily for the next 2 weeks. Document new cases immediately."),
            ("Notify Stakeholders", "Inform neighboring farm owners and local PCA office. Coordinate community response plan."),
        ),
        next_steps=(
            "Schedule follow-up inspection in 3 days",
            "Document treatment application with photos",
            "Report results to PCA field officer",
            "Monitor weather conditions affecting treatment efficacy",
        ),
    ),
    Severity.MODERATE: Guidance(
        title="MODERATE INFESTATION DETECTED",
        timeline="Action required within 3-5 days",
        risk="Moderate threat requiring prompt attention",
        spread="Potential for expansion if left untreated",
        impact="Economic losses likely without intervention",
        actions=(
            ("Targeted Treatment", "Apply localized treatment to affected trees. Use biological control methods first if available."),
            ("Enhanced Monitoring", "Inspect affected area and 25-meter radius every 3 days. Track population trends."),
            ("Cultural Control", "Remove heavily infested fronds. Improve tree nutrition and water management."),
            ("Follow-up Scanning", "Re-scan area in 7-10 days to assess treatment effectiveness and population changes."),
        ),
        next_steps=(
            "Create monitoring schedule for next 2 weeks",
            "Source appropriate treatment materials",
            "Train workers on proper application techniques",
            "Keep detailed records for trend analysis",
        ),
    ),
    Severity.LOW: Guidance(
        title="LOW INFESTATION DETECTED",
        timeline="Regular monitoring recommended",
        risk="Minimal immediate threat",
        spread="Low probability of rapid expansion",
        impact="Negligible economic impact with proper monitoring",
        actions=(
            ("Continue Monitoring", "Maintain weekly visual inspections of affected area. Use this app for monthly scans."),
            ("Maintain Tree Health", "Ensure proper fertilization and irrigation. Healthy trees resist pest pressure better."),
            ("Early Detection System", "Train farm workers to spot early signs. Install yellow sticky traps if available."),
            ("Document Progress", "Keep photographic records. Track population trends over time using this app."),
        ),
        next_steps=(
            "Set calendar reminder for weekly checks",
            "Review farm sanitation practices",
            "Schedule next AI scan in 30 days",
            "Share findings with PCA for regional database",
        ),
    ),
}


__all__ = ["classify", "compare_to_average", "severity_level_percent", "Guidance", "SEVERITY_GUIDANCE"]
