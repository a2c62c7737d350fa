"""Resource monitoring for Docker containers.

This module implements a polling monitor that samples resource usage of a
set of running containers for the duration of a benchmark session:
- Memory usage (page cache excluded) and share of the memory limit
- CPU utilization from cumulative CPU time deltas
- Network and block I/O byte counters

Each tick fans out one stats request per container. A tick either records a
sample for every container or for none of them, so all series of a session
stay aligned with the shared timestamp series.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from enum import Enum
from typing import Any

from bench_monitor.core.schemas import MonitorConfig, ResourceReport
from bench_monitor.monitoring.aggregator import build_report
from bench_monitor.monitoring.base import (
    BaseMonitor,
    ChartBuilder,
    ContainerStatSeries,
    MonitorTarget,
)
from bench_monitor.monitoring.registry import ContainerRegistry
from bench_monitor.monitoring.stat_computer import compute_sample, has_precpu
from bench_monitor.results.metrics_writer import MetricsWriter

logger = logging.getLogger(__name__)

# Upper bound on waiting for the scheduler or an in-flight tick to finish
JOIN_TIMEOUT = 2.0


class MonitorState(str, Enum):
    """Lifecycle states of a DockerMonitor."""

    IDLE = "idle"
    DISCOVERED = "discovered"
    SAMPLING = "sampling"
    RESTARTING = "restarting"
    STOPPED = "stopped"


class DockerMonitor(BaseMonitor):
    """Polling resource monitor for local and remote Docker containers.

    Targets are discovered on the first ``start()`` and kept across
    ``restart()`` calls; ``stop()`` forgets them so the next start discovers
    again. Ticks run on short-lived threads fired by a scheduler thread. A
    tick fired while the previous one is still reading is skipped, so slow
    daemons lower the sampling rate instead of building a backlog.

    Example:
        ```python
        monitor = DockerMonitor(MonitorConfig(containers=["peer0", "orderer"]))
        monitor.start()
        # ... run the benchmark round ...
        report = monitor.get_statistics("round-1")
        monitor.stop()
        ```
    """

    def __init__(
        self,
        config: MonitorConfig,
        registry: ContainerRegistry | None = None,
        writer: MetricsWriter | None = None,
        chart_builder: ChartBuilder | None = None,
    ) -> None:
        """Initialize the monitor.

        Args:
            config: Session configuration
            registry: Container discovery, defaults to a new ContainerRegistry
            writer: Metrics log writer, defaults to one writing to
                ``config.metrics_dir``
            chart_builder: Collaborator producing chart data for reports
        """
        self._config = config
        self._registry = registry if registry is not None else ContainerRegistry()
        self._writer = writer if writer is not None else MetricsWriter(config.metrics_dir)
        self._chart_builder = chart_builder

        self._targets: list[MonitorTarget] = []
        self._stats: dict[str, ContainerStatSeries] = {}
        self._time: list[float] = []
        self._last_snapshots: dict[str, dict[str, Any]] = {}
        self._state = MonitorState.IDLE

        # Held for the duration of a tick; ticks never queue behind it
        self._reading = threading.Lock()
        # Guards targets, series and the session generation
        self._lock = threading.Lock()
        # Bumped on every reset so late ticks cannot write into a new session
        self._generation = 0

        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None
        self._tick_threads: list[threading.Thread] = []

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def targets(self) -> list[MonitorTarget]:
        with self._lock:
            return list(self._targets)

    @property
    def time(self) -> list[float]:
        """Timestamps (epoch seconds) of every recorded tick."""
        with self._lock:
            return list(self._time)

    def series(self, target_id: str) -> ContainerStatSeries:
        """Return a copy of the series collected for a container.

        Raises:
            KeyError: If the container is not monitored
        """
        with self._lock:
            return self._stats[target_id].copy()

    def discover(self) -> list[MonitorTarget]:
        """Resolve the configured containers and allocate empty series."""
        found = self._registry.find(self._config.containers)

        targets: list[MonitorTarget] = []
        seen: set[str] = set()
        for target in found:
            if target.id in seen:
                logger.warning(f"Container {target.name} matched more than once, keeping first")
                continue
            seen.add(target.id)
            targets.append(target)

        with self._lock:
            self._targets = targets
            self._stats = {t.id: ContainerStatSeries() for t in targets}
            self._last_snapshots = {}

        self._state = MonitorState.DISCOVERED
        return targets

    def start(self) -> None:
        """Discover targets if needed, sample once, then sample periodically."""
        if self._state == MonitorState.SAMPLING:
            logger.warning("Monitor already running")
            return

        if not self._targets:
            self.discover()

        for target in self.targets:
            self._writer.create_log(target.name)

        self._state = MonitorState.SAMPLING
        self._wait_for_read()
        self.read_container_stats()
        self._schedule()
        logger.debug(
            f"Started monitoring {len(self._targets)} container(s) "
            f"every {self._config.interval}s"
        )

    def restart(self) -> None:
        """Clear collected data in place and start sampling the same targets."""
        self._cancel_schedule()
        self._state = MonitorState.RESTARTING

        with self._lock:
            self._generation += 1
            for series in self._stats.values():
                series.clear()
            self._time.clear()
            self._last_snapshots.clear()

        self.start()

    def stop(self) -> None:
        """Stop sampling and forget all targets and data."""
        self._cancel_schedule()

        with self._lock:
            self._generation += 1
            self._targets = []
            self._stats = {}
            self._time = []
            self._last_snapshots = {}

        self._registry.close()
        self._state = MonitorState.STOPPED

        # Let in-flight requests and log appends settle
        time.sleep(self._config.stop_grace_seconds)

    def get_statistics(self, test_label: str) -> ResourceReport:
        """Summarize the data collected since the last (re)start."""
        with self._lock:
            targets = list(self._targets)
            series = {tid: s.copy() for tid, s in self._stats.items()}

        return build_report(
            targets,
            series,
            test_label,
            cpu_usage_normalization=self._config.cpu_usage_normalization,
            charting=self._config.charting,
            chart_builder=self._chart_builder,
            monitor_kind=type(self).__name__,
        )

    def read_container_stats(self) -> bool:
        """Run one sampling tick across all targets.

        Returns:
            True if a sample was recorded for every target, False if the tick
            was skipped or abandoned
        """
        if not self._reading.acquire(blocking=False):
            logger.debug("Previous stats read still in progress, skipping tick")
            return False

        try:
            with self._lock:
                targets = list(self._targets)
                generation = self._generation

            if not targets:
                return False

            try:
                snapshots = self._fetch_snapshots(targets)
            except Exception as e:
                logger.error(f"Error reading monitor statistics: {e}")
                return False

            return self._record(targets, snapshots, generation, time.time())
        finally:
            self._reading.release()

    def _fetch_snapshots(self, targets: list[MonitorTarget]) -> list[dict[str, Any]]:
        """Request stats for every target concurrently.

        Raises:
            Exception: The first error raised by any request
        """
        pool = ThreadPoolExecutor(max_workers=len(targets), thread_name_prefix="docker-stats")
        try:
            futures = [pool.submit(t.handle.stats, stream=False) for t in targets]
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
            for future in done:
                error = future.exception()
                if error is not None:
                    raise error
            return [future.result() for future in futures]
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

    def _record(
        self,
        targets: list[MonitorTarget],
        snapshots: list[dict[str, Any]],
        generation: int,
        timestamp: float,
    ) -> bool:
        """Append one sample per target and persist it."""
        mismatched = [
            t.name
            for t, stats in zip(targets, snapshots)
            if stats.get("id") and stats.get("id") != t.id
        ]
        if mismatched:
            logger.warning(
                f"Inconsistent container id within statistics gathering for "
                f"{', '.join(mismatched)}, discarding tick"
            )
            return False

        with self._lock:
            if generation != self._generation:
                logger.debug("Monitor was reset while reading stats, discarding tick")
                return False

            self._time.append(timestamp)
            for target, stats in zip(targets, snapshots):
                previous = None if has_precpu(stats) else self._last_snapshots.get(target.id)
                series = self._stats[target.id]
                series.append(compute_sample(stats, previous))
                self._last_snapshots[target.id] = stats
                self._writer.append_sample(target, series, timestamp)

        return True

    def _wait_for_read(self) -> None:
        """Wait for a tick started before a reset to release the read lock."""
        if self._reading.acquire(timeout=JOIN_TIMEOUT):
            self._reading.release()
        else:
            logger.debug("Previous stats read still in progress, first sample may be skipped")

    def _schedule(self) -> None:
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._tick_loop,
            args=(self._stop_event,),
            name="docker-monitor",
            daemon=True,
        )
        self._thread.start()

    def _tick_loop(self, stop_event: threading.Event) -> None:
        """Fire a tick every interval until cancelled."""
        while not stop_event.wait(self._config.interval):
            tick = threading.Thread(
                target=self.read_container_stats, name="docker-monitor-tick", daemon=True
            )
            self._tick_threads = [t for t in self._tick_threads if t.is_alive()]
            self._tick_threads.append(tick)
            tick.start()

    def _cancel_schedule(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()

        current = threading.current_thread()
        if self._thread is not None and self._thread is not current:
            self._thread.join(timeout=JOIN_TIMEOUT)

        # The scheduler is gone, so the tick list no longer changes
        for tick in self._tick_threads:
            if tick is not current:
                tick.join(timeout=JOIN_TIMEOUT)

        self._stop_event = None
        self._thread = None
        self._tick_threads = []
