"""Container resource monitor for benchmark sessions - Core package."""

from __future__ import annotations

from bench_monitor.core.schemas import MonitorConfig, ResourceReport

__version__ = "0.1.0"

__all__ = [
    "MonitorConfig",
    "ResourceReport",
    "__version__",
]
