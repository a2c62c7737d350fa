"""Per-container metrics logs.

Every monitored container gets a CSV file ``metrics-<name>-full.csv`` that
receives one row per successful sampling tick. Rows hold the latest value
of each metric series, so the file is a complete raw time series of the run.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

from bench_monitor.core.constants import METRICS_HEADER

if TYPE_CHECKING:
    from bench_monitor.monitoring.base import ContainerStatSeries, MonitorTarget

logger = logging.getLogger(__name__)


def sanitize_name(name: str) -> str:
    """Remove path separators so a container name is a safe file name."""
    return name.replace("/", "").replace("\\", "")


def format_timestamp(epoch_seconds: float) -> str:
    """Render epoch seconds as ISO-8601 UTC with millisecond precision."""
    moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class MetricsWriter:
    """Writes the raw metric time series of each container to CSV.

    Write failures are logged and swallowed: losing a log line must never
    interrupt sampling.
    """

    def __init__(self, metrics_dir: Path | str = Path("metrics")) -> None:
        self.metrics_dir = Path(metrics_dir)

    def log_path(self, name: str) -> Path:
        """Path of the metrics file for a container name."""
        return self.metrics_dir / f"metrics-{sanitize_name(name)}-full.csv"

    def create_log(self, name: str) -> Path:
        """Create (or truncate) the metrics file for a container.

        Args:
            name: Container display name

        Returns:
            Path to the created file
        """
        path = self.log_path(name)
        try:
            self.metrics_dir.mkdir(parents=True, exist_ok=True)
            pd.DataFrame(columns=list(METRICS_HEADER)).to_csv(path, index=False)
        except OSError as e:
            logger.error(f"Could not create metrics file {path}: {e}")
        return path

    def append_sample(
        self, target: MonitorTarget, series: ContainerStatSeries, timestamp: float
    ) -> bool:
        """Append the most recent sample of a container to its file.

        Args:
            target: Container the series belongs to
            series: Series holding at least one sample
            timestamp: Epoch seconds of the tick that produced the sample

        Returns:
            True if the row was written
        """
        path = self.log_path(target.name)
        try:
            latest = series.latest()
            row = {
                "time": format_timestamp(timestamp),
                "key": target.id,
                "name": target.name,
                "mem_usage": latest.mem_usage,
                "mem_percent": latest.mem_percent,
                "cpu_percent": latest.cpu_percent,
                "netIO_rx": latest.netIO_rx,
                "netIO_tx": latest.netIO_tx,
                "blockIO_rx": latest.blockIO_rx,
                "blockIO_wx": latest.blockIO_wx,
            }
            pd.DataFrame([row], columns=list(METRICS_HEADER)).to_csv(
                path, mode="a", header=False, index=False
            )
            return True
        except (OSError, IndexError) as e:
            logger.error(f"Got an error trying to append metrics to {path}: {e}")
            return False


def load_metrics(path: Path | str) -> pd.DataFrame:
    """Load a metrics file written by MetricsWriter.

    Args:
        path: Path to a ``metrics-*-full.csv`` file

    Returns:
        DataFrame with a parsed ``time`` column

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Metrics file not found: {path}")
    df = pd.read_csv(path)
    df["time"] = pd.to_datetime(df["time"], utc=True)
    return df
