"""Pydantic schemas for the benchmark monitor.

This module defines the data contracts used throughout the monitor:
the session configuration and the report handed back to callers.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator


class MonitorConfig(BaseModel):
    """Configuration for a Docker resource monitoring session.

    Attributes:
        name: Human-readable label for the session
        containers: Container names (local daemon), remote locators of the
            form ``http://host:port/name``, or ``all`` to watch every running
            container on a host
        interval: Sampling interval in seconds
        cpu_usage_normalization: Divide CPU percentages by the host core count
        charting: Chart types handed to the chart builder, if any
        metrics_dir: Directory receiving the per-container CSV logs
        stop_grace_seconds: Time given to in-flight I/O when stopping
    """

    name: str = Field(default="Docker Monitor", description="Session label")
    containers: list[str] = Field(..., min_length=1, description="Monitoring targets")
    interval: float = Field(default=1.0, gt=0, le=3600, description="Sampling interval (s)")
    cpu_usage_normalization: bool = Field(default=False)
    charting: dict[str, Any] | None = Field(default=None, description="Chart type options")
    metrics_dir: Path = Field(default=Path("metrics"), description="Per-container CSV directory")
    stop_grace_seconds: float = Field(default=0.1, ge=0, le=10)

    model_config = {"extra": "forbid"}

    @field_validator("containers")
    @classmethod
    def strip_container_names(cls, v: list[str]) -> list[str]:
        """Drop surrounding whitespace and empty entries."""
        names = [c.strip() for c in v if c and c.strip()]
        if not names:
            raise ValueError("At least one container name or locator is required")
        return names


class ResourceReport(BaseModel):
    """Summary produced by a monitor on request.

    ``resource_stats`` holds one row per watched container, keyed by report
    column. ``chart_stats`` is whatever the chart builder returned.
    """

    resource_stats: list[dict[str, Any]] = Field(default_factory=list)
    chart_stats: Any = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.resource_stats
