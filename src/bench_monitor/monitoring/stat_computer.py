"""Metric computation from raw Docker stats snapshots.

Each helper extracts one metric from the JSON returned by
``container.stats(stream=False)``, handling the nested structure and
potentially missing fields. Nothing here raises: malformed input degrades
to zero for the affected metric.
"""

from __future__ import annotations

import logging
from typing import Any

from bench_monitor.monitoring.base import MetricSample

logger = logging.getLogger(__name__)


def compute_memory(stats: dict[str, Any]) -> tuple[float, float]:
    """Calculate effective memory usage and its share of the memory limit.

    Reclaimable page cache (``inactive_file`` on cgroups v2,
    ``total_inactive_file`` on v1) is subtracted from the reported usage.

    Returns:
        Tuple of (usage_bytes, usage_ratio)
    """
    try:
        memory_stats = stats.get("memory_stats") or {}
        usage = memory_stats.get("usage") or 0
        detail = memory_stats.get("stats") or {}
        cache = detail.get("inactive_file", detail.get("total_inactive_file", 0)) or 0
        effective = max(usage - cache, 0)

        limit = memory_stats.get("limit") or stats.get("mem_limit") or 0
        ratio = effective / limit if limit > 0 else 0.0
        return effective, ratio
    except (TypeError, AttributeError) as e:
        logger.debug(f"Malformed memory stats: {e}")
        return 0, 0.0


def cores_in_use(cpu_stats: dict[str, Any]) -> int:
    """Count the CPU cores available to the container.

    Prefers the daemon-reported ``online_cpus``; otherwise counts the per-core
    usage entries that are non-zero. Returns 1 when no per-core data exists.
    """
    online = cpu_stats.get("online_cpus")
    if online:
        return online
    percpu = (cpu_stats.get("cpu_usage") or {}).get("percpu_usage")
    if percpu is None:
        return 1
    return sum(1 for usage in percpu if usage > 0)


def compute_cpu_percent(
    stats: dict[str, Any], previous: dict[str, Any] | None = None
) -> float:
    """Calculate CPU percentage from the delta between two readings.

    Args:
        stats: Current snapshot
        previous: Earlier snapshot; defaults to the ``precpu_stats`` embedded
            in the current one

    Returns:
        CPU percent (100 per fully used core), 0.0 when there is no previous
        reading or either delta is not positive
    """
    try:
        cpu_stats = stats.get("cpu_stats") or {}
        if previous is not None:
            precpu_stats = previous.get("cpu_stats") or {}
        else:
            precpu_stats = stats.get("precpu_stats") or {}

        # No previous reading: a delta against zero would be the lifetime average
        if not precpu_stats.get("system_cpu_usage"):
            return 0.0

        cpu_delta = (cpu_stats.get("cpu_usage") or {}).get("total_usage", 0) - (
            precpu_stats.get("cpu_usage") or {}
        ).get("total_usage", 0)

        system_delta = cpu_stats.get("system_cpu_usage", 0) - precpu_stats.get(
            "system_cpu_usage", 0
        )

        if system_delta > 0 and cpu_delta > 0:
            return (cpu_delta / system_delta) * cores_in_use(cpu_stats) * 100.0

        return 0.0
    except (TypeError, AttributeError) as e:
        logger.debug(f"Malformed CPU stats: {e}")
        return 0.0


def compute_network_io(stats: dict[str, Any]) -> tuple[int, int]:
    """Sum received and transmitted bytes across all interfaces.

    Returns:
        Tuple of (rx_bytes, tx_bytes)
    """
    rx = tx = 0
    networks = stats.get("networks") or {}
    try:
        for interface in networks.values():
            rx += interface.get("rx_bytes", 0)
            tx += interface.get("tx_bytes", 0)
    except (TypeError, AttributeError) as e:
        logger.debug(f"Malformed network stats: {e}")
        return 0, 0
    return rx, tx


def compute_block_io(stats: dict[str, Any]) -> tuple[int, int]:
    """Parse block I/O statistics from Docker stats.

    Extracts read and write bytes from io_service_bytes_recursive. Entries
    for other operations (sync, async, total...) are ignored.

    Returns:
        Tuple of (read_bytes, write_bytes)
    """
    blkio_stats = stats.get("blkio_stats") or {}

    # io_service_bytes_recursive is null on some cgroups v2 hosts
    io_bytes = blkio_stats.get("io_service_bytes_recursive") or []

    read_bytes = 0
    write_bytes = 0

    try:
        for entry in io_bytes:
            op = (entry.get("op") or "").lower()
            value = entry.get("value", 0)
            if op == "read":
                read_bytes += value
            elif op == "write":
                write_bytes += value
    except (TypeError, AttributeError) as e:
        logger.debug(f"Malformed block I/O stats: {e}")
        return 0, 0

    return read_bytes, write_bytes


def compute_sample(
    stats: dict[str, Any], previous: dict[str, Any] | None = None
) -> MetricSample:
    """Convert one raw stats snapshot into metric values.

    Args:
        stats: Raw stats dict from ``container.stats(stream=False)``
        previous: Earlier snapshot of the same container, used for CPU deltas

    Returns:
        MetricSample with memory, CPU, network and disk values
    """
    mem_usage, mem_percent = compute_memory(stats)
    net_rx, net_tx = compute_network_io(stats)
    blk_read, blk_write = compute_block_io(stats)

    return MetricSample(
        mem_usage=mem_usage,
        mem_percent=mem_percent,
        cpu_percent=compute_cpu_percent(stats, previous),
        netIO_rx=net_rx,
        netIO_tx=net_tx,
        blockIO_rx=blk_read,
        blockIO_wx=blk_write,
    )


def has_precpu(stats: dict[str, Any]) -> bool:
    """Whether the snapshot carries its own previous CPU reading.

    One-shot stats requests leave ``precpu_stats`` empty; callers then need
    to supply the previous snapshot themselves.
    """
    precpu_stats = stats.get("precpu_stats") or {}
    return bool(precpu_stats.get("system_cpu_usage"))
