"""Monitoring module - Resource monitoring for Docker containers.

Provides:
- DockerMonitor: Polling monitor for local and remote containers
- ContainerRegistry: Container discovery across Docker endpoints

Shared utilities:
- stat_computer: Metric computation from raw stats snapshots
- aggregator: Report rows and unit normalization
"""

from __future__ import annotations

from bench_monitor.monitoring.aggregator import build_report, normalize_stats, summarize_target
from bench_monitor.monitoring.base import (
    BaseMonitor,
    ChartBuilder,
    ContainerStatSeries,
    MetricSample,
    MonitorTarget,
)
from bench_monitor.monitoring.docker_monitor import DockerMonitor, MonitorState
from bench_monitor.monitoring.registry import ContainerRegistry, partition_targets
from bench_monitor.monitoring.stat_computer import compute_sample

__all__ = [
    "BaseMonitor",
    "ChartBuilder",
    "ContainerRegistry",
    "ContainerStatSeries",
    "DockerMonitor",
    "MetricSample",
    "MonitorState",
    "MonitorTarget",
    "build_report",
    "compute_sample",
    "normalize_stats",
    "partition_targets",
    "summarize_target",
]
