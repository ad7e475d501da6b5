"""
Lightweight runtime counters for store mutations, due scans and text-parsing calls, exposed by the admin API.
"""

from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass
class RuntimeMetrics:
    reminders_created: int = 0
    reminders_updated: int = 0
    reminders_deleted: int = 0
    scan_count: int = 0
    due_notified_count: int = 0
    parse_call_count: int = 0
    parse_error_count: int = 0
    parse_total_latency_ms: float = 0.0
    last_scan_at: float | None = None

    def record_created(self) -> None:
        self.reminders_created += 1

    def record_updated(self) -> None:
        self.reminders_updated += 1

    def record_deleted(self) -> None:
        self.reminders_deleted += 1

    def record_scan(self, notified: int) -> None:
        self.scan_count += 1
        self.due_notified_count += notified
        self.last_scan_at = time.time()

    def record_parse_call(self, latency_ms: float, error: bool = False) -> None:
        self.parse_call_count += 1
        self.parse_total_latency_ms += max(0.0, latency_ms)
        if error:
            self.parse_error_count += 1

    def snapshot(self) -> dict:
        avg_latency_ms = 0.0
        if self.parse_call_count > 0:
            avg_latency_ms = self.parse_total_latency_ms / self.parse_call_count

        return {
            "reminders_created": self.reminders_created,
            "reminders_updated": self.reminders_updated,
            "reminders_deleted": self.reminders_deleted,
            "scan_count": self.scan_count,
            "due_notified_count": self.due_notified_count,
            "parse_call_count": self.parse_call_count,
            "parse_error_count": self.parse_error_count,
            "parse_avg_latency_ms": round(avg_latency_ms, 2),
            "last_scan_at_epoch": self.last_scan_at,
            "last_scan_at_utc": (
                time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(self.last_scan_at))
                if self.last_scan_at is not None
                else None
            ),
        }


runtime_metrics = RuntimeMetrics()


__all__ = ["RuntimeMetrics", "runtime_metrics"]
