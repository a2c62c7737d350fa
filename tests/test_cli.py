"""Tests for the command-line interface."""

from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from bench_monitor.cli import app
from bench_monitor.core.config import load_config
from bench_monitor.core.schemas import ResourceReport
from bench_monitor.monitoring.base import ContainerStatSeries, MetricSample, MonitorTarget
from bench_monitor.results.metrics_writer import MetricsWriter

runner = CliRunner()


class TestCli:
    """Tests for CLI commands that need no Docker daemon."""

    def test_init_config_is_loadable(self, tmp_path):
        """Test the sample configuration validates."""
        output = tmp_path / "monitor.yaml"

        result = runner.invoke(app, ["init-config", "--output", str(output)])

        assert result.exit_code == 0
        config = load_config(output)
        assert "http://192.168.1.20:2375/all" in config.containers

    def test_summarize(self, tmp_path):
        """Test summarizing a metrics log."""
        writer = MetricsWriter(tmp_path)
        target = MonitorTarget(id="abc", name="peer0", host_key="localhost", handle=MagicMock())
        series = ContainerStatSeries()
        writer.create_log("peer0")
        for i, rx in enumerate([1000, 4000]):
            series.append(MetricSample(mem_usage=100, cpu_percent=10.0 * i, netIO_rx=rx))
            writer.append_sample(target, series, float(i))

        result = runner.invoke(app, ["summarize", str(writer.log_path("peer0"))])

        assert result.exit_code == 0
        assert "3,000" in result.output

    def test_summarize_missing_file(self, tmp_path):
        """Test a missing log exits with an error."""
        result = runner.invoke(app, ["summarize", str(tmp_path / "nope.csv")])

        assert result.exit_code == 1

    def test_watch_bad_config(self, tmp_path):
        """Test an invalid config exits before monitoring."""
        path = tmp_path / "monitor.yaml"
        path.write_text("containers: []\n")

        result = runner.invoke(app, ["watch", "--config", str(path)])

        assert result.exit_code == 1

    def test_watch_overrides_config(self, tmp_path):
        """Test --interval and --metrics-dir replace the file's settings."""
        path = tmp_path / "monitor.yaml"
        path.write_text("containers: [peer0]\ninterval: 5\nmetrics_dir: from-file\n")
        out_dir = tmp_path / "out"

        with patch("bench_monitor.cli.DockerMonitor") as monitor_cls:
            monitor = monitor_cls.return_value
            monitor.targets = [MagicMock()]
            monitor.get_statistics.return_value = ResourceReport()

            result = runner.invoke(
                app,
                [
                    "watch",
                    "--config", str(path),
                    "--duration", "0",
                    "--interval", "0.5",
                    "--metrics-dir", str(out_dir),
                ],
            )

        assert result.exit_code == 0, result.output
        monitor_config = monitor_cls.call_args.args[0]
        assert monitor_config.interval == 0.5
        assert monitor_config.metrics_dir == out_dir
        monitor.start.assert_called_once()
        monitor.stop.assert_called_once()
