"""Tests for container discovery."""

from unittest.mock import MagicMock, patch

import docker.errors

from bench_monitor.monitoring.registry import ContainerRegistry, partition_targets


def mock_container(container_id: str, name: str) -> MagicMock:
    container = MagicMock()
    container.id = container_id
    container.name = name
    return container


def mock_client(*containers: MagicMock) -> MagicMock:
    client = MagicMock()
    client.containers.list.return_value = list(containers)
    return client


class TestPartitionTargets:
    """Tests for grouping identifiers by host."""

    def test_local_and_remote(self):
        """Test bare names go local and locators go to their host."""
        filters = partition_targets(
            ["peer0", "/orderer", "http://10.0.0.5:2375/peer1", "http://10.0.0.5:2375/peer2"]
        )

        assert set(filters) == {"localhost", "10.0.0.5"}
        assert filters["localhost"].names == {"peer0", "orderer"}
        assert filters["10.0.0.5"].port == 2375
        assert filters["10.0.0.5"].names == {"peer1", "peer2"}

    def test_malformed_locators_skipped(self, caplog):
        """Test locators missing host, port or name are dropped with a warning."""
        filters = partition_targets(
            ["http://10.0.0.5/peer1", "http://10.0.0.5:2375/", "http://:2375/peer1", "peer0"]
        )

        assert list(filters) == ["localhost"]
        assert caplog.text.count("Unrecognized container locator") == 3

    def test_wildcard(self):
        """Test the all keyword is detected per host."""
        filters = partition_targets(["all", "http://10.0.0.5:2375/peer1"])

        assert filters["localhost"].wants_all is True
        assert filters["10.0.0.5"].wants_all is False


class TestContainerRegistry:
    """Tests for ContainerRegistry.find."""

    def test_exact_name_match(self):
        """Test only containers with matching names are returned."""
        client = mock_client(mock_container("id-a", "peer0"), mock_container("id-b", "peer1"))
        with patch("bench_monitor.monitoring.registry.docker.from_env", return_value=client):
            targets = ContainerRegistry().find(["peer1"])

        assert [t.id for t in targets] == ["id-b"]
        assert targets[0].name == "peer1"
        assert targets[0].host_key == "localhost"
        assert targets[0].handle is client.containers.list.return_value[1]

    def test_wildcard_takes_all(self):
        """Test all selects every running container."""
        client = mock_client(mock_container("id-a", "peer0"), mock_container("id-b", "peer1"))
        with patch("bench_monitor.monitoring.registry.docker.from_env", return_value=client):
            targets = ContainerRegistry().find(["all"])

        assert [t.id for t in targets] == ["id-a", "id-b"]

    def test_remote_names_prefixed(self):
        """Test remote containers are named after their host."""
        remote = mock_client(mock_container("id-r", "peer0"))
        with patch(
            "bench_monitor.monitoring.registry.docker.DockerClient", return_value=remote
        ) as client_cls:
            targets = ContainerRegistry().find(["http://10.0.0.5:2375/peer0"])

        client_cls.assert_called_once_with(base_url="tcp://10.0.0.5:2375", timeout=60)
        assert [t.name for t in targets] == ["10.0.0.5/peer0"]
        assert targets[0].host_key == "10.0.0.5"

    def test_unreachable_host_skipped(self):
        """Test a failing host does not stop discovery on the others."""
        local = mock_client(mock_container("id-a", "peer0"))
        remote = MagicMock()
        remote.containers.list.side_effect = docker.errors.DockerException("connection refused")

        with (
            patch("bench_monitor.monitoring.registry.docker.from_env", return_value=local),
            patch("bench_monitor.monitoring.registry.docker.DockerClient", return_value=remote),
        ):
            targets = ContainerRegistry().find(["http://10.0.0.5:2375/peer1", "peer0"])

        assert [t.id for t in targets] == ["id-a"]

    def test_local_daemon_missing(self):
        """Test a missing local daemon yields no targets instead of raising."""
        with patch(
            "bench_monitor.monitoring.registry.docker.from_env",
            side_effect=docker.errors.DockerException("no socket"),
        ):
            assert ContainerRegistry().find(["peer0"]) == []

    def test_no_match_is_not_an_error(self):
        """Test an empty result when nothing matches."""
        client = mock_client(mock_container("id-a", "peer0"))
        with patch("bench_monitor.monitoring.registry.docker.from_env", return_value=client):
            assert ContainerRegistry().find(["orderer"]) == []

    def test_clients_reused_and_closed(self):
        """Test one client per host for the registry lifetime."""
        client = mock_client(mock_container("id-a", "peer0"))
        registry = ContainerRegistry()
        with patch(
            "bench_monitor.monitoring.registry.docker.from_env", return_value=client
        ) as from_env:
            registry.find(["peer0"])
            registry.find(["peer0"])
            assert from_env.call_count == 1

        registry.close()
        client.close.assert_called_once()
