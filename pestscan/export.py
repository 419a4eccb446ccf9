"""Export content: CSV rows and the plain-text reports.

Only the content is produced here; callers decide where it is written.
"""

from __future__ import annotations

import csv
from datetime import date, datetime
from typing import IO, Sequence

from .domain import DetectionRecord, Region, Severity
from .severity import SEVERITY_GUIDANCE
from .summary import Summary

EXPORT_HEADERS = [
    "Detection ID",
    "Date",
    "Time",
    "Province",
    "Municipality",
    "Barangay",
    "Farm Name",
    "Farm Owner",
    "Latitude",
    "Longitude",
    "Severity",
    "Total Insects",
    "Avg Confidence",
    "Processing Time (ms)",
    "Location Method",
    "Notes",
]

PHOTO_HEADER = "Photo URL"

REPORT_RULE = "=" * 48


def _blank(value) -> str:
    return "" if value is None else str(value)


def format_confidence(avg_confidence: float) -> str:
    """Average confidence as 'NN.N%' (raw value, not clamped)."""
    return f"{(avg_confidence or 0.0) * 100:.1f}%"


def record_to_row(record: DetectionRecord, include_photos: bool = False) -> list[str]:
    region = record.region or Region()
    row = [
        record.id,
        record.created_at.strftime("%Y-%m-%d"),
        record.created_at.strftime("%H:%M:%S"),
        _blank(region.province),
        _blank(region.municipality),
        _blank(region.barangay),
        _blank(region.farm_name),
        _blank(region.farm_owner),
        _blank(region.latitude),
        _blank(region.longitude),
        record.severity.value,
        str(record.total_count),
        format_confidence(record.avg_confidence),
        _blank(record.processing_time_ms),
        _blank(region.location_method),
        _blank(record.notes),
    ]
    if include_photos:
        row.append(_blank(record.image_url))
    return row


def write_csv(records: Sequence[DetectionRecord], stream: IO[str], include_photos: bool = False) -> int:
    """Write a header plus one fully quoted row per record. Returns the number of rows."""
    if not records:
        raise ValueError("No detections to export")
    writer = csv.writer(stream, quoting=csv.QUOTE_ALL, lineterminator="\n")
    headers = EXPORT_HEADERS + ([PHOTO_HEADER] if include_photos else [])
    writer.writerow(headers)
    for record in records:
        writer.writerow(record_to_row(record, include_photos=include_photos))
    return len(records)


def _record_block(index: int, record: DetectionRecord) -> str:
    region = record.region or Region()
    if region.has_coordinates():
        coords = f"{region.latitude:.6f}, {region.longitude:.6f}"
    else:
        coords = "N/A"
    lines = [
        f"Detection #{index}",
        f"Date: {record.created_at.strftime('%Y-%m-%d %H:%M:%S')}",
        f"Location: {region.describe()}",
        f"Severity: {record.severity.value.upper()}",
        f"Total Detections: {record.total_count}",
        f"Confidence: {format_confidence(record.avg_confidence)}",
    ]
    if region.farm_name:
        lines.append(f"Farm: {region.farm_name}")
    lines.append(f"Coordinates: {coords}")
    return "\n".join(lines)


def format_summary_report(records: Sequence[DetectionRecord], summary: Summary, generated_at: datetime) -> str:
    """Plain-text analytics report: summary statistics, top provinces, per-record details."""
    if not records:
        raise ValueError("No detections to export")
    lines = [
        "COCOLISAP DETECTION ANALYTICS REPORT",
        f"Generated: {generated_at.strftime('%B %d, %Y - %H:%M:%S')}",
        REPORT_RULE,
        "",
        "SUMMARY STATISTICS",
        "-" * 18,
        f"Total Detections: {summary.total}",
        f"Severe Cases: {summary.severe}",
        f"Moderate Cases: {summary.moderate}",
        f"Low Cases: {summary.low}",
        f"Average Insects per Detection: {summary.avg_insects_per_record:.1f}",
        "",
        "TOP AFFECTED PROVINCES",
        "-" * 22,
    ]
    if summary.top_regions:
        for idx, group in enumerate(summary.top_regions, 1):
            lines.append(f"{idx}. {group.key}: {group.counts.total} detections")
    else:
        lines.append("No province data")
    lines += ["", "DETAILED DATA", "-" * 13]
    lines.append("\n---\n".join(_record_block(i, r) for i, r in enumerate(records, 1)))
    lines += ["", REPORT_RULE, "Philippine Coconut Authority - Cocolisap Monitoring System"]
    return "\n".join(lines)


SECTION_RULE = "=" * 48

PRIORITY_ACTIONS = {
    Severity.SEVERE: (
        "HIGH PRIORITY ACTIONS:",
        (
            "Immediate field inspection of {n} severe cases",
            "Deploy treatment teams to affected areas within 24 hours",
            "Establish quarantine zones around severe infestation sites",
            "Notify farm owners and neighboring properties",
        ),
    ),
    Severity.MODERATE: (
        "MEDIUM PRIORITY ACTIONS:",
        (
            "Schedule treatment for {n} moderate cases within 3-5 days",
            "Enhance monitoring frequency in affected areas",
            "Coordinate with local agricultural officers",
        ),
    ),
    Severity.LOW: (
        "ONGOING MONITORING:",
        (
            "Continue regular inspections of {n} low-risk areas",
            "Maintain early warning system",
            "Document population trends",
        ),
    ),
}


def _section(title: str) -> list[str]:
    return ["", SECTION_RULE, title, SECTION_RULE]


def _share(count: int, total: int) -> str:
    if not total:
        return "0.0%"
    return f"{count / total * 100:.1f}%"


def _format_generated(ts: datetime) -> str:
    hour = ts.hour % 12 or 12
    return f"{ts.strftime('%B')} {ts.day}, {ts.year} {hour}:{ts.strftime('%M %p')}"


def format_export_summary(
    records: Sequence[DetectionRecord],
    summary: Summary,
    date_from: date | None = None,
    date_to: date | None = None,
    generated_at: datetime | None = None,
) -> str:
    """Plain-text summary report for a filtered export.

    Per-severity shares, the action timeline of each class present, the
    ranked provinces of `summary`, priority recommendations and data-quality
    notes (GPS and province coverage, the filtered date range).
    """
    if not records:
        raise ValueError("No detections to export")
    generated_at = generated_at or datetime.now()
    counts = {Severity.SEVERE: summary.severe, Severity.MODERATE: summary.moderate, Severity.LOW: summary.low}

    lines = [
        "COCOLISAP DETECTION SUMMARY REPORT",
        "Philippine Coconut Authority",
        f"Generated: {_format_generated(generated_at)}",
    ]
    lines += _section("STATISTICS OVERVIEW")
    lines.append(f"Total Detections: {summary.total}")
    for severity, n in counts.items():
        lines.append(f"{severity.value.capitalize()} Cases: {n} ({_share(n, summary.total)})")
    lines.append(f"Average Insects per Detection: {summary.avg_insects_per_record:.1f}")

    lines += _section("SEVERITY BREAKDOWN")
    for severity, n in counts.items():
        if n:
            lines.append(f"{severity.value.upper()} ({n} cases): {SEVERITY_GUIDANCE[severity].timeline}")

    lines += _section("TOP AFFECTED PROVINCES")
    if summary.top_regions:
        for idx, group in enumerate(summary.top_regions, 1):
            lines.append(f"{idx}. {group.key}: {group.counts.total} detections")
    else:
        lines.append("No province data")

    lines += _section("RECOMMENDATIONS")
    for severity, n in counts.items():
        if not n:
            continue
        heading, actions = PRIORITY_ACTIONS[severity]
        lines.append(heading)
        lines += [f"- {action.format(n=n)}" for action in actions]
        lines.append("")
    if lines[-1] == "":
        lines.pop()

    with_gps = sum(1 for r in records if r.region and r.region.has_coordinates())
    with_province = sum(1 for r in records if r.province)
    lines += _section("DATA QUALITY NOTES")
    lines += [
        f"Detections with GPS: {with_gps}",
        f"Detections with Province: {with_province}",
        f"Date Range: {date_from.isoformat() if date_from else 'All time'} to "
        f"{date_to.isoformat() if date_to else 'Present'}",
        "",
        "This report was generated automatically by the Cocolisap Detection System.",
        "For questions, contact Philippine Coconut Authority Field Operations.",
    ]
    return "\n".join(lines)


__all__ = [
    "EXPORT_HEADERS",
    "PHOTO_HEADER",
    "format_confidence",
    "format_export_summary",
    "format_summary_report",
    "record_to_row",
    "write_csv",
]
