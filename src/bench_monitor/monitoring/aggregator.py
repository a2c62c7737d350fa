"""Reduction of collected series into report rows.

Memory and CPU are summarized as peak and average. Network and disk
counters are cumulative on the Docker side, so their usage over the
session is the last reading minus the first. Byte columns are then
rescaled so every row of a report shares one unit.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any

from bench_monitor.core.constants import NORMALIZED_COLUMNS, NOT_AVAILABLE, RESULT_COLUMNS
from bench_monitor.core.schemas import ResourceReport
from bench_monitor.monitoring.base import ChartBuilder, ContainerStatSeries, MonitorTarget

logger = logging.getLogger(__name__)

BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")


def new_result_row() -> dict[str, Any]:
    """Return a report row with every column set to N/A."""
    return dict.fromkeys(RESULT_COLUMNS, NOT_AVAILABLE)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _delta(values: Sequence[float]) -> float | str:
    return values[-1] - values[0] if values else NOT_AVAILABLE


def summarize_target(
    target: MonitorTarget, series: ContainerStatSeries, cpu_cores: int = 1
) -> dict[str, Any]:
    """Build the report row for one container.

    Args:
        target: Container being summarized
        series: Its collected metric series
        cpu_cores: Divisor applied to CPU percentages

    Returns:
        Row keyed by report column, N/A where a series is empty
    """
    row = new_result_row()
    row["Name"] = target.name

    if series.mem_usage:
        row["Memory(max)"] = max(series.mem_usage)
        row["Memory(avg)"] = sum(series.mem_usage) / len(series.mem_usage)

    if series.cpu_percent:
        cpu_max = max(series.cpu_percent)
        cpu_avg = sum(series.cpu_percent) / len(series.cpu_percent)
        row["CPU%(max)"] = round(cpu_max, 2) / cpu_cores
        row["CPU%(avg)"] = round(cpu_avg, 2) / cpu_cores

    row["Traffic In"] = _delta(series.netIO_rx)
    row["Traffic Out"] = _delta(series.netIO_tx)
    row["Disc Read"] = _delta(series.blockIO_rx)
    row["Disc Write"] = _delta(series.blockIO_wx)
    return row


def pick_byte_unit(value: float) -> tuple[str, int]:
    """Choose the largest binary unit keeping ``value`` at or above 1.

    Returns:
        Tuple of (unit label, divisor)
    """
    magnitude = abs(value)
    index = 0
    while magnitude >= 1024 and index < len(BYTE_UNITS) - 1:
        magnitude /= 1024
        index += 1
    return BYTE_UNITS[index], 1024**index


def normalize_stats(column: str, rows: list[dict[str, Any]]) -> None:
    """Rescale a byte column of every row to one shared unit.

    The unit is chosen from the largest numeric value in the column; values
    are rounded to three decimals and the column is renamed
    ``"<column> [<unit>]"`` at the same position. Non-numeric cells (N/A)
    are kept as-is.

    Args:
        column: Report column to rescale
        rows: Report rows, modified in place
    """
    values = [row[column] for row in rows if _is_number(row.get(column))]
    largest = max(values, key=abs) if values else 0
    unit, divisor = pick_byte_unit(largest)
    renamed = f"{column} [{unit}]"

    for index, row in enumerate(rows):
        if column not in row:
            continue
        updated = {}
        for key, value in row.items():
            if key != column:
                updated[key] = value
            elif _is_number(value):
                updated[renamed] = round(value / divisor, 3)
            else:
                updated[renamed] = value
        rows[index] = updated


def build_report(
    targets: Sequence[MonitorTarget],
    series: Mapping[str, ContainerStatSeries],
    test_label: str,
    *,
    cpu_usage_normalization: bool = False,
    charting: dict[str, Any] | None = None,
    chart_builder: ChartBuilder | None = None,
    monitor_kind: str = "DockerMonitor",
) -> ResourceReport:
    """Summarize every target and hand the rows to the chart builder.

    Any failure is logged and results in an empty report, never a partial one.

    Args:
        targets: Monitored containers
        series: Collected series keyed by container ID
        test_label: Label of the benchmark round
        cpu_usage_normalization: Scale CPU percentages to a single core
        charting: Chart types to request, if any
        chart_builder: Chart collaborator called when ``charting`` is set
        monitor_kind: Monitor name passed to the chart builder

    Returns:
        ResourceReport with one row per target
    """
    try:
        cpu_cores = (os.cpu_count() or 1) if cpu_usage_normalization else 1

        rows = [summarize_target(t, series[t.id], cpu_cores) for t in targets]

        for column in NORMALIZED_COLUMNS:
            normalize_stats(column, rows)

        chart_stats: Any = []
        if charting:
            if chart_builder is None:
                logger.warning("Charting is configured but no chart builder was provided")
            else:
                chart_stats = chart_builder.retrieve_chart_stats(
                    monitor_kind, charting, test_label, rows
                )

        return ResourceReport(resource_stats=rows, chart_stats=chart_stats)
    except Exception:
        logger.exception(f"Failed to read monitoring data for {test_label}")
        return ResourceReport()
