"""Container discovery against local and remote Docker daemons.

Targets are given either as bare container names (local daemon) or as
remote locators such as ``http://10.0.0.5:2375/peer0``. The special name
``all`` selects every running container on its host. Discovery problems
are logged and skipped host by host; they never abort the whole lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from urllib.parse import urlsplit

import docker
import docker.errors

from bench_monitor.core.constants import ALL_CONTAINERS, LOCAL_HOST
from bench_monitor.monitoring.base import MonitorTarget

logger = logging.getLogger(__name__)


@dataclass
class HostFilter:
    """Container names requested on a single Docker endpoint."""

    host: str
    port: int | None = None
    names: set[str] = field(default_factory=set)

    @property
    def wants_all(self) -> bool:
        return ALL_CONTAINERS in self.names


def _strip_slash(name: str) -> str:
    """Docker API names carry a leading '/', the SDK strips it."""
    return name.lstrip("/")


def partition_targets(containers: Iterable[str]) -> dict[str, HostFilter]:
    """Group target identifiers by the host they live on.

    Malformed remote locators (no host, no port or no container name) are
    logged and dropped.

    Args:
        containers: Container names or ``scheme://host:port/name`` locators

    Returns:
        Mapping of host key to the names requested on it
    """
    filters: dict[str, HostFilter] = {}

    for item in containers:
        if "://" not in item:
            local = filters.setdefault(LOCAL_HOST, HostFilter(host=LOCAL_HOST))
            local.names.add(_strip_slash(item))
            continue

        try:
            remote = urlsplit(item)
            hostname, port = remote.hostname, remote.port
        except ValueError:
            hostname = port = None
            remote = None
        name = _strip_slash(remote.path) if remote is not None else ""

        if not hostname or port is None or not name:
            logger.warning(f"Unrecognized container locator, skipping: {item}")
            continue

        host = filters.setdefault(hostname, HostFilter(host=hostname, port=port))
        if host.port != port:
            logger.warning(
                f"Host {hostname} already registered with port {host.port}, ignoring port {port}"
            )
        host.names.add(name)

    return filters


class ContainerRegistry:
    """Resolves target specifications into live container handles.

    Docker clients are created lazily per host and reused for the lifetime
    of the registry.

    Example:
        ```python
        registry = ContainerRegistry()
        targets = registry.find(["peer0", "http://10.0.0.5:2375/orderer"])
        ```
    """

    def __init__(self, timeout: int = 60) -> None:
        """Initialize the registry.

        Args:
            timeout: Docker API timeout in seconds for created clients
        """
        self._timeout = timeout
        self._clients: dict[str, docker.DockerClient] = {}

    def client_for(self, host: HostFilter) -> docker.DockerClient:
        """Return (creating if needed) the Docker client for a host."""
        client = self._clients.get(host.host)
        if client is None:
            if host.host == LOCAL_HOST:
                client = docker.from_env(timeout=self._timeout)
            else:
                client = docker.DockerClient(
                    base_url=f"tcp://{host.host}:{host.port}", timeout=self._timeout
                )
            self._clients[host.host] = client
        return client

    def find(self, containers: Iterable[str]) -> list[MonitorTarget]:
        """Discover running containers matching the given identifiers.

        Args:
            containers: Container names or remote locators

        Returns:
            Matched targets in daemon listing order, grouped by host. Empty
            when nothing matched or no host was reachable.
        """
        targets: list[MonitorTarget] = []

        for host_key, host in partition_targets(containers).items():
            try:
                client = self.client_for(host)
                running = client.containers.list()
            except (docker.errors.DockerException, OSError) as e:
                logger.error(f"Error retrieving containers from {host_key}: {e}")
                continue

            if not running:
                logger.error(f"Could not find any running container on {host_key}")
                continue

            matched = 0
            for container in running:
                name = _strip_slash(container.name)
                if not host.wants_all and name not in host.names:
                    continue
                targets.append(
                    MonitorTarget(
                        id=container.id,
                        name=name if host_key == LOCAL_HOST else f"{host_key}/{name}",
                        host_key=host_key,
                        handle=container,
                    )
                )
                matched += 1

            logger.debug(f"Matched {matched} of {len(running)} containers on {host_key}")

        logger.info(f"Discovered {len(targets)} container(s) to monitor")
        return targets

    def close(self) -> None:
        """Close every Docker client opened by this registry."""
        for host_key, client in self._clients.items():
            try:
                client.close()
            except Exception as e:
                logger.debug(f"Error closing Docker client for {host_key}: {e}")
        self._clients.clear()
