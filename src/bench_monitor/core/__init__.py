"""Core module - configuration and schemas."""

from __future__ import annotations

from bench_monitor.core.config import load_config
from bench_monitor.core.constants import (
    ALL_CONTAINERS,
    LOCAL_HOST,
    METRICS_HEADER,
    NORMALIZED_COLUMNS,
    NOT_AVAILABLE,
    RESULT_COLUMNS,
)
from bench_monitor.core.schemas import MonitorConfig, ResourceReport

__all__ = [
    "ALL_CONTAINERS",
    "LOCAL_HOST",
    "METRICS_HEADER",
    "MonitorConfig",
    "NORMALIZED_COLUMNS",
    "NOT_AVAILABLE",
    "RESULT_COLUMNS",
    "ResourceReport",
    "load_config",
]
