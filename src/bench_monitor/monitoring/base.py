"""Base monitor interface and shared data types.

All monitors implement :class:`BaseMonitor` so a benchmark session can drive
them through the same start/stop/restart/report lifecycle. Monitors keep
their own state; nothing here is shared between instances.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any, Protocol

from bench_monitor.core.schemas import ResourceReport

if TYPE_CHECKING:
    import docker.models.containers


@dataclass(frozen=True)
class MonitorTarget:
    """One container on one Docker endpoint."""

    id: str  # Full container ID as reported by the daemon
    name: str  # Display name, prefixed with the host for remote targets
    host_key: str  # "localhost" or the remote hostname
    handle: docker.models.containers.Container = field(compare=False, repr=False)


@dataclass(frozen=True)
class MetricSample:
    """Metric values computed from a single stats snapshot."""

    mem_usage: float = 0  # Bytes, page cache excluded
    mem_percent: float = 0.0  # Ratio of the memory limit (0.4 == 40%)
    cpu_percent: float = 0.0
    netIO_rx: int = 0  # Cumulative bytes across interfaces
    netIO_tx: int = 0
    blockIO_rx: int = 0  # Cumulative bytes read across devices
    blockIO_wx: int = 0


@dataclass
class ContainerStatSeries:
    """Ordered metric series for one target, one entry per successful tick."""

    mem_usage: list[float] = field(default_factory=list)
    mem_percent: list[float] = field(default_factory=list)
    cpu_percent: list[float] = field(default_factory=list)
    netIO_rx: list[int] = field(default_factory=list)
    netIO_tx: list[int] = field(default_factory=list)
    blockIO_rx: list[int] = field(default_factory=list)
    blockIO_wx: list[int] = field(default_factory=list)

    def append(self, sample: MetricSample) -> None:
        for f in fields(self):
            getattr(self, f.name).append(getattr(sample, f.name))

    def clear(self) -> None:
        """Empty every series in place."""
        for f in fields(self):
            getattr(self, f.name).clear()

    def copy(self) -> ContainerStatSeries:
        return ContainerStatSeries(**{f.name: list(getattr(self, f.name)) for f in fields(self)})

    def latest(self) -> MetricSample:
        """Return the most recent values as a MetricSample.

        Raises:
            IndexError: If no sample has been recorded yet
        """
        return MetricSample(**{f.name: getattr(self, f.name)[-1] for f in fields(self)})

    def __len__(self) -> int:
        return len(self.mem_usage)


class ChartBuilder(Protocol):
    """Collaborator that turns report rows into chart data."""

    def retrieve_chart_stats(
        self,
        monitor_kind: str,
        chart_types: dict[str, Any],
        test_label: str,
        resource_stats: list[dict[str, Any]],
    ) -> Any: ...


class BaseMonitor(ABC):
    """Abstract base class for resource monitors.

    Implementations:
    - DockerMonitor: Docker containers on local or remote daemons
    """

    @abstractmethod
    def start(self) -> None:
        """Begin sampling."""

    @abstractmethod
    def stop(self) -> None:
        """Stop sampling and discard all collected state."""

    @abstractmethod
    def restart(self) -> None:
        """Clear collected data and resume sampling the same targets."""

    @abstractmethod
    def get_statistics(self, test_label: str) -> ResourceReport:
        """Summarize the data collected since the last (re)start.

        Args:
            test_label: Label of the benchmark round being reported

        Returns:
            ResourceReport with one row per target
        """
