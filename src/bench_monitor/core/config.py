"""Configuration loading utilities.

Supports YAML and JSON configuration files with schema validation. A monitor
section may stand alone or sit under a ``monitor:`` key of a larger
benchmark file, and command-line values can be layered on top before
validation.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from bench_monitor.core.schemas import MonitorConfig

MONITOR_SECTION = "monitor"


def _read_file(path: Path) -> Any:
    suffix = path.suffix.lower()
    with open(path, encoding="utf-8") as f:
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(f)
        if suffix == ".json":
            return json.load(f)
    raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")


def load_config(
    path: Path | str, overrides: dict[str, Any] | None = None
) -> MonitorConfig:
    """Load and validate a monitor configuration file.

    Args:
        path: Path to YAML or JSON configuration file
        overrides: Settings replacing those from the file; ``None`` values
            are ignored so unset CLI options keep the file's value

    Returns:
        Validated MonitorConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported or the file is not a mapping
        pydantic.ValidationError: If config is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    data = _read_file(path)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration must be a mapping, got {type(data).__name__}")

    if MONITOR_SECTION in data:
        data = data[MONITOR_SECTION] or {}

    merged = dict(data)
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})

    return MonitorConfig.model_validate(merged)
