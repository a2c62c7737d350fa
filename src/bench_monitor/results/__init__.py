"""Results module - Per-container metrics logs."""

from __future__ import annotations

from bench_monitor.results.metrics_writer import (
    MetricsWriter,
    format_timestamp,
    load_metrics,
    sanitize_name,
)

__all__ = ["MetricsWriter", "format_timestamp", "load_metrics", "sanitize_name"]
