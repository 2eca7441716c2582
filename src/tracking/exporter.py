# src/tracking/exporter.py — v2
"""Diagnostics export: request logs to CSV/JSON, usage summary text."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from storegate.quota.limits import classify_usage
from storegate.quota.models import QuotaStatus
from storegate.tracking.models import RequestLogEntry, RequestStats

logger = logging.getLogger(__name__)

CSV_FIELDNAMES = [
    "id", "operation_type", "resource_name", "document_id", "started_at",
    "duration_ms", "succeeded", "error_message", "served_from_cache",
]


def export_logs_csv(entries: list[RequestLogEntry], path: Path) -> None:
    """Export request log entries as CSV for spreadsheet analysis.

    Args:
        entries: Entries from RequestLog.get_logs().
        path: Output file path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDNAMES)
        writer.writeheader()
        for entry in entries:
            row = entry.model_dump()
            row["started_at"] = entry.started_at.isoformat()
            writer.writerow(row)
    logger.info("Exported %d request log entries to %s", len(entries), path)


def export_stats_json(stats: RequestStats, path: Path) -> None:
    """Export request statistics as formatted JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(stats.model_dump_json(indent=2), encoding="utf-8")


def export_usage_summary(stats: RequestStats, status: QuotaStatus) -> str:
    """Generate a human-readable summary of request stats and quota usage.

    Args:
        stats: Request log statistics.
        status: Current quota status.

    Returns:
        Formatted summary string.
    """
    metrics = status.metrics
    limits = status.limits
    lines: list[str] = [
        "=== Store Usage Summary ===",
        f"Window start : {metrics.window_started_at.isoformat()}",
        f"Usage level  : {classify_usage(status)}",
        "",
        "--- Quota ---",
        f"  reads   | {metrics.read_count:8,} / {limits.daily_read_limit:8,} | {status.read_pct:6.2f}%",
        f"  writes  | {metrics.write_count:8,} / {limits.daily_write_limit:8,} | {status.write_pct:6.2f}%",
        f"  deletes | {metrics.delete_count:8,} / {limits.daily_delete_limit:8,} | {status.delete_pct:6.2f}%",
        "",
        "--- Requests (current log window) ---",
        f"  total    : {stats.total_requests}",
        f"  read     : {stats.read_requests} ({stats.cached_requests} from cache)",
        f"  write    : {stats.write_requests}",
        f"  delete   : {stats.delete_requests}",
        f"  listen   : {stats.listen_requests}",
        f"  failed   : {stats.failed_requests}",
        f"  avg time : {stats.average_duration_ms:.1f}ms",
    ]

    if status.is_over_limit:
        lines.append("\nQuota exceeded: store operations will be rejected until reset.")
    elif status.is_near_limit:
        lines.append("\nQuota near limit.")

    return "\n".join(lines)
