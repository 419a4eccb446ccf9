"""Command-line entry point: render overlays, summarize and export records.

Usage:
    python -m pestscan render photo.jpg detections.json -o annotated.png --variant report
    python -m pestscan summarize records.json --top 10 --window month
    python -m pestscan export records.json --csv out.csv --photos
    python -m pestscan export records.json --summary summary.txt --from 2024-01-01
"""

from __future__ import annotations

import argparse
import io
import json
import logging
import os
import sys
from datetime import date, datetime

from .constants import EXPORT_SUMMARY_TOP_N
from .detections import normalize_instances
from .domain import DetectionRecord
from .export import format_export_summary, format_summary_report, write_csv
from .filtering import RecordFilter
from .overlay import ImageDecodeError, render
from .overlay_config import VARIANTS, OverlayOptions
from .settings import load_settings
from .severity import compare_to_average
from .summary import map_center, summarize

LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"


def configure_logging(log_file: str | None = None) -> None:
    """Configure root logging once from $LOG_LEVEL, optionally also to a file."""
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    # Only call basicConfig if no handlers are configured (prevents duplicate handlers)
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=level, format=LOG_FORMAT)

    # Reduce verbosity from PIL image plugins
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("PIL.PngImagePlugin").setLevel(logging.WARNING)
    logging.getLogger("PIL.JpegImagePlugin").setLevel(logging.WARNING)

    if log_file:
        try:
            fh = logging.FileHandler(log_file, mode="a")
            fh.setLevel(level)
            fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s:%(name)s:%(message)s"))
            logging.getLogger().addHandler(fh)
            logging.info(f"Logging also written to file: {log_file}")
        except OSError as e:
            logging.warning(f"Could not open log file {log_file}: {e}")


def load_records(path: str) -> list[DetectionRecord]:
    """Read a JSON list of stored records (or an object with a 'records' list)."""
    with open(path) as f:
        payload = json.load(f)
    if isinstance(payload, dict):
        payload = payload.get("records") or []
    records = [DetectionRecord.from_dict(item) for item in payload]
    logging.info(f"[cli] loaded {len(records)} records from {path}")
    return records


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")


def _record_filter(args) -> RecordFilter:
    return RecordFilter(
        severity=args.severity,
        province=args.province,
        date_from=args.date_from,
        date_to=args.date_to,
        window=args.window,
    )


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--severity", choices=["low", "moderate", "severe"], default=None)
    p.add_argument("--province", default=None)
    p.add_argument("--from", dest="date_from", type=_parse_day, default=None, help="first day (YYYY-MM-DD)")
    p.add_argument("--to", dest="date_to", type=_parse_day, default=None, help="last day (YYYY-MM-DD)")
    p.add_argument("--window", choices=["today", "week", "month", "quarter", "year"], default=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pestscan", description="Pest-detection overlays and analytics")
    parser.add_argument("--log-file", "-l", help="Path to write log output (appends)", default=None)
    parser.add_argument("--config", help="Settings JSON (default: $PESTSCAN_CONFIG or ~/.pestscan_config.json)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_render = sub.add_parser("render", help="Draw detections onto an image")
    p_render.add_argument("image")
    p_render.add_argument("detections", help="Detection-service JSON response or list of detections")
    p_render.add_argument("-o", "--output", required=True)
    p_render.add_argument("--variant", choices=VARIANTS, default=None)
    p_render.add_argument("--index", dest="show_index", action="store_true", default=None)
    p_render.add_argument("--no-index", dest="show_index", action="store_false")
    p_render.add_argument("--corners", dest="show_corner_accents", action="store_true", default=None)
    p_render.add_argument("--no-corners", dest="show_corner_accents", action="store_false")

    p_sum = sub.add_parser("summarize", help="Print summary statistics as JSON")
    p_sum.add_argument("records")
    p_sum.add_argument("--top", type=int, default=None)
    _add_filter_args(p_sum)

    p_exp = sub.add_parser("export", help="Write CSV data or a plain-text report")
    p_exp.add_argument("records")
    target = p_exp.add_mutually_exclusive_group(required=True)
    target.add_argument("--csv", dest="csv_path")
    target.add_argument("--report", dest="report_path", help="Analytics report with per-record details")
    target.add_argument("--summary", dest="summary_path", help="Summary report with recommendations")
    p_exp.add_argument("--photos", action="store_true", help="Include the photo URL column")
    p_exp.add_argument("--top", type=int, default=None)
    _add_filter_args(p_exp)
    return parser


def cmd_render(args, settings: dict) -> int:
    with open(args.detections) as f:
        instances = normalize_instances(json.load(f))
    options = OverlayOptions(
        variant=args.variant or settings["variant"],
        show_index=settings["show_index"] if args.show_index is None else args.show_index,
        show_corner_accents=(
            settings["show_corner_accents"] if args.show_corner_accents is None else args.show_corner_accents
        ),
    )
    out = render(args.image, instances, options, font_path=settings.get("font_path"))
    out.save(args.output)
    logging.info(f"[cli] wrote overlay with {len(instances)} detections to {args.output}")
    return 0


def _top_n(args, default: int) -> int:
    return default if args.top is None else args.top


def cmd_summarize(args, settings: dict) -> int:
    records = _record_filter(args).apply(load_records(args.records))
    summary = summarize(records, top_n=_top_n(args, settings["top_n"]))
    payload = summary.as_dict()
    payload["mapCenter"] = list(map_center(records))
    payload["comparedToAverage"] = compare_to_average(
        summary.avg_insects_per_record, average=settings["average_detections"]
    )
    json.dump(payload, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


def _write_text(path: str, text: str) -> None:
    with open(path, "w", newline="") as f:
        f.write(text)


def cmd_export(args, settings: dict) -> int:
    records = _record_filter(args).apply(load_records(args.records))
    # Content is built in full before the target file is opened
    if args.csv_path:
        buf = io.StringIO()
        n = write_csv(records, buf, include_photos=args.photos)
        _write_text(args.csv_path, buf.getvalue())
        logging.info(f"Successfully exported {n} detections to CSV: {args.csv_path}")
    elif args.summary_path:
        summary = summarize(records, top_n=_top_n(args, EXPORT_SUMMARY_TOP_N))
        report = format_export_summary(
            records, summary, date_from=args.date_from, date_to=args.date_to, generated_at=datetime.now()
        )
        _write_text(args.summary_path, report)
        logging.info(f"Wrote export summary for {len(records)} detections to {args.summary_path}")
    else:
        summary = summarize(records, top_n=_top_n(args, settings["top_n"]))
        report = format_summary_report(records, summary, generated_at=datetime.now())
        _write_text(args.report_path, report)
        logging.info(f"Wrote summary report for {len(records)} detections to {args.report_path}")
    return 0


COMMANDS = {"render": cmd_render, "summarize": cmd_summarize, "export": cmd_export}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_file)
    settings = load_settings(args.config)
    try:
        return COMMANDS[args.command](args, settings)
    except (ImageDecodeError, ValueError, OSError) as e:
        logging.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
