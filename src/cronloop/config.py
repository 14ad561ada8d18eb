"""Configuration management for cronloop."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from cronloop.errors import InvalidConfigError

CRONLOOP_DIR = Path.home() / ".cronloop"
CONFIG_FILE = CRONLOOP_DIR / "config.yaml"

# Environment overrides, highest priority
ENV_OVERRIDES = {
    "CRONLOOP_TICK_INTERVAL_MS": "tick_interval_ms",
    "CRONLOOP_DRIFT_THRESHOLD_HOURS": "drift_threshold_hours",
    "CRONLOOP_TIMEZONE": "timezone",
}


class SchedulerConfig(BaseModel):
    """Runtime configuration for a Scheduler."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    tick_interval_ms: int = Field(default=100, gt=0, description="Polling cadence in ms")
    drift_threshold_hours: int = Field(
        default=3,
        gt=0,
        description="Whole-hour gap between ticks treated as a clock jump",
    )
    timezone: str = Field(default="local", description="Timezone for expressions")

    @field_validator("tick_interval_ms", "drift_threshold_hours", mode="before")
    @classmethod
    def reject_non_integers(cls, v: Any) -> Any:
        """Refuse booleans and fractional values that pydantic would coerce."""
        if isinstance(v, bool) or (isinstance(v, float) and not v.is_integer()):
            msg = f"Expected a positive integer, got {v!r}"
            raise ValueError(msg)
        return v

    @property
    def tick_interval(self) -> float:
        """Tick interval in seconds."""
        return self.tick_interval_ms / 1000

    @classmethod
    def from_value(cls, value: Any) -> SchedulerConfig:
        """Build a config from None, an existing config, or a mapping.

        Args:
            value: Constructor input.

        Returns:
            A validated SchedulerConfig.

        Raises:
            InvalidConfigError: If value is not a mapping or fails validation.
        """
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            msg = f"Configuration must be a mapping, got {type(value).__name__}"
            raise InvalidConfigError(msg)

        try:
            return cls(**dict(value))
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise InvalidConfigError(f"Invalid configuration: {errors}") from e


def get_cronloop_config(path: Path | None = None) -> dict[str, object]:
    """Load the raw cronloop configuration file.

    Args:
        path: Config file location (defaults to ~/.cronloop/config.yaml).

    Returns:
        Configuration dictionary, empty if file doesn't exist.
    """
    config_path = path or CONFIG_FILE
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            config = yaml.safe_load(f)
            return config if isinstance(config, dict) else {}
    except (yaml.YAMLError, OSError):
        return {}


def load_config(path: Path | None = None) -> SchedulerConfig:
    """Load scheduler configuration from file and environment.

    Checks in order of priority:
    1. CRONLOOP_* environment variables
    2. The ``scheduler`` section of ~/.cronloop/config.yaml
    3. Built-in defaults

    Args:
        path: Optional config file location.

    Returns:
        The merged SchedulerConfig.

    Raises:
        InvalidConfigError: If the merged values fail validation.
    """
    section = get_cronloop_config(path).get("scheduler") or {}
    if not isinstance(section, dict):
        raise InvalidConfigError("The 'scheduler' config section must be a mapping")

    values: dict[str, Any] = dict(section)
    for env_name, key in ENV_OVERRIDES.items():
        if (raw := os.environ.get(env_name)) is not None:
            values[key] = raw

    return SchedulerConfig.from_value(values)
