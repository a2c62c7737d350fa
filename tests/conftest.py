"""Shared fixtures for monitor tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from bench_monitor.monitoring.base import MonitorTarget


def build_stats(
    container_id: str = "c1",
    usage: int = 500,
    inactive_file: int = 100,
    limit: int = 1000,
    total_usage: int = 1200,
    system_usage: int = 2000,
    pre_total_usage: int = 1000,
    pre_system_usage: int = 1000,
    online_cpus: int | None = 4,
    percpu: list[int] | None = None,
    rx: int = 0,
    tx: int = 0,
    read: int = 0,
    write: int = 0,
) -> dict[str, Any]:
    """Create a Docker stats response (stream=False) with sane defaults."""
    cpu_usage: dict[str, Any] = {"total_usage": total_usage}
    if percpu is not None:
        cpu_usage["percpu_usage"] = percpu
    cpu_stats: dict[str, Any] = {"cpu_usage": cpu_usage, "system_cpu_usage": system_usage}
    if online_cpus is not None:
        cpu_stats["online_cpus"] = online_cpus

    return {
        "id": container_id,
        "name": f"/{container_id}",
        "memory_stats": {
            "usage": usage,
            "limit": limit,
            "stats": {"inactive_file": inactive_file},
        },
        "cpu_stats": cpu_stats,
        "precpu_stats": {
            "cpu_usage": {"total_usage": pre_total_usage},
            "system_cpu_usage": pre_system_usage,
        },
        "networks": {"eth0": {"rx_bytes": rx, "tx_bytes": tx}},
        "blkio_stats": {
            "io_service_bytes_recursive": [
                {"major": 8, "minor": 0, "op": "Read", "value": read},
                {"major": 8, "minor": 0, "op": "Write", "value": write},
            ],
        },
    }


@pytest.fixture
def make_stats():
    """Factory for Docker stats responses."""
    return build_stats


@pytest.fixture
def make_target():
    """Factory for targets whose handle returns the given stats."""

    def _make(
        container_id: str = "c1",
        name: str = "peer0",
        stats: dict[str, Any] | list[dict[str, Any]] | None = None,
        host_key: str = "localhost",
    ) -> MonitorTarget:
        handle = MagicMock()
        handle.id = container_id
        if isinstance(stats, list):
            handle.stats.side_effect = stats
        else:
            handle.stats.return_value = (
                stats if stats is not None else build_stats(container_id=container_id)
            )
        return MonitorTarget(id=container_id, name=name, host_key=host_key, handle=handle)

    return _make
