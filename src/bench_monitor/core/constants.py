"""Shared constants for the benchmark monitor.

Centralized constants to avoid duplication and ensure consistency across modules.
"""

from __future__ import annotations

# Placeholder for report cells that could not be computed.
NOT_AVAILABLE = "N/A"

# Identifier that selects every running container on a host.
ALL_CONTAINERS = "all"

# Host key used for the local Docker daemon.
LOCAL_HOST = "localhost"

# Column order of the per-container metrics CSV files.
METRICS_HEADER = (
    "time",
    "key",
    "name",
    "mem_usage",
    "mem_percent",
    "cpu_percent",
    "netIO_rx",
    "netIO_tx",
    "blockIO_rx",
    "blockIO_wx",
)

# Column order of a report row.
RESULT_COLUMNS = (
    "Name",
    "Memory(max)",
    "Memory(avg)",
    "CPU%(max)",
    "CPU%(avg)",
    "Traffic In",
    "Traffic Out",
    "Disc Read",
    "Disc Write",
)

# Report columns holding byte counts, rescaled to a shared unit per report.
NORMALIZED_COLUMNS = (
    "Memory(max)",
    "Memory(avg)",
    "Traffic In",
    "Traffic Out",
    "Disc Write",
    "Disc Read",
)
