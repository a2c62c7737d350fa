"""CLI for the benchmark monitor.

Provides a rich command-line interface using Typer for:
- Watching containers for the duration of a benchmark
- Summarizing metrics logs written by a previous run
- Generating a sample configuration
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bench_monitor.core.config import load_config
from bench_monitor.core.schemas import MonitorConfig, ResourceReport
from bench_monitor.monitoring.docker_monitor import DockerMonitor
from bench_monitor.results.metrics_writer import load_metrics
from bench_monitor.utils.logging import get_logger, setup_logging

app = typer.Typer(
    name="bench-monitor",
    help="Docker resource monitor for benchmark sessions",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

SUMMARY_COLUMNS = ("mem_usage", "mem_percent", "cpu_percent")
COUNTER_COLUMNS = ("netIO_rx", "netIO_tx", "blockIO_rx", "blockIO_wx")


@app.command()
def watch(
    config: Path = typer.Option(
        ..., "--config", "-c", help="Path to monitor configuration file (YAML/JSON)"
    ),
    duration: float | None = typer.Option(
        None, "--duration", "-d", help="Seconds to monitor (default: until Ctrl-C)"
    ),
    label: str = typer.Option("watch", "--label", help="Label of the monitored round"),
    interval: float | None = typer.Option(
        None, "--interval", "-i", help="Sampling interval in seconds (overrides config)"
    ),
    metrics_dir: Path | None = typer.Option(
        None, "--metrics-dir", "-o", help="Directory for metrics CSV files (overrides config)"
    ),
    log_level: str = typer.Option("INFO", "--log-level", "-l", help="Logging level"),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file in addition to console"
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Output logs in JSON format (for programmatic parsing)"
    ),
) -> None:
    """Monitor containers and print a resource report when done."""
    setup_logging(
        level=log_level, log_file=log_file, json_format=json_logs, rich_console=not json_logs
    )

    try:
        monitor_config = load_config(
            config, overrides={"interval": interval, "metrics_dir": metrics_dir}
        )
    except Exception as e:
        console.print(f"[bold red]Error loading config: {escape(str(e))}[/]")
        raise typer.Exit(1) from e

    _show_config_summary(monitor_config)

    monitor = DockerMonitor(monitor_config)
    monitor.start()

    if not monitor.targets:
        console.print("[bold yellow]No matching containers found[/]")
        monitor.stop()
        raise typer.Exit(1)

    console.print(f"[bold blue]Monitoring {len(monitor.targets)} container(s)...[/]")
    try:
        if duration is None:
            while True:
                time.sleep(1.0)
        else:
            time.sleep(duration)
    except KeyboardInterrupt:
        logger.info("Interrupted, collecting report")

    report = monitor.get_statistics(label)
    monitor.stop()

    _show_report_table(report, title=f"Resource usage: {label}")
    console.print(f"[dim]Metrics written to {monitor_config.metrics_dir}[/]")


@app.command()
def summarize(
    path: Path = typer.Argument(..., help="Metrics CSV file written by 'watch'"),
) -> None:
    """Print peak/average usage from a metrics log."""
    try:
        df = load_metrics(path)
    except FileNotFoundError as e:
        console.print(f"[bold red]{e}[/]")
        raise typer.Exit(1) from e

    if df.empty:
        console.print("[bold yellow]Metrics file has no samples[/]")
        return

    table = Table(title=f"{df['name'].iloc[0]} ({len(df)} samples)")
    table.add_column("Metric", style="cyan")
    table.add_column("Max", style="white")
    table.add_column("Avg", style="white")
    table.add_column("Delta", style="green")

    for column in SUMMARY_COLUMNS:
        table.add_row(column, f"{df[column].max():,.3f}", f"{df[column].mean():,.3f}", "")
    for column in COUNTER_COLUMNS:
        delta = int(df[column].iloc[-1] - df[column].iloc[0])
        table.add_row(column, "", "", f"{delta:,}")

    duration = (df["time"].iloc[-1] - df["time"].iloc[0]).total_seconds()
    console.print(table)
    console.print(f"[dim]Duration: {duration:.1f}s[/]")


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("monitor.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# Docker resource monitor configuration
name: "Fabric network"

# Local container names, remote locators (http://host:port/name),
# or "all" to watch every running container on a host
containers:
  - peer0.org1.example.com
  - orderer.example.com
  - http://192.168.1.20:2375/all

# Sampling interval (seconds)
interval: 1

# Report CPU relative to a single core
cpu_usage_normalization: false

# Per-container CSV logs
metrics_dir: "./metrics"
"""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(sample_config)
    console.print(f"[bold green]Sample configuration written to {output}[/]")


def _show_config_summary(config: MonitorConfig) -> None:
    """Display a summary of the monitor configuration."""
    table = Table(title="Monitor Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Name", config.name)
    table.add_row("Containers", ", ".join(config.containers))
    table.add_row("Interval", f"{config.interval}s")
    table.add_row("CPU Normalization", str(config.cpu_usage_normalization))
    table.add_row("Metrics Dir", str(config.metrics_dir))

    console.print(table)


def _format_cell(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:,.2f}"
    return escape(str(value))


def _show_report_table(report: ResourceReport, title: str) -> None:
    """Display report rows, one line per container."""
    if report.is_empty:
        console.print("[bold yellow]No resource data collected[/]")
        return

    table = Table(title=title)
    columns = list(report.resource_stats[0].keys())
    for column in columns:
        table.add_column(escape(column), style="cyan" if column == "Name" else "white")

    for row in report.resource_stats:
        table.add_row(*(_format_cell(row.get(column)) for column in columns))

    console.print(table)


if __name__ == "__main__":
    app()
