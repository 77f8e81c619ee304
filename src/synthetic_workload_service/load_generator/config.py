"""Configuration helpers for the ramping load test."""

from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    Field,
    NonNegativeInt,
    PositiveFloat,
    field_validator,
    model_validator,
)

from .schedule import RampSchedule, Stage

DEFAULT_BASE_URL = "http://localhost:3000"
BASE_URL_ENV = "BASE_URL"


class StageConfig(BaseModel):
    """One ramp stage, e.g. ``{duration: 10s, target: 5}``."""

    duration: str
    target: NonNegativeInt

    @field_validator("duration")
    @classmethod
    def _validate_duration(cls, value: str) -> str:
        parse_duration(value)
        return value

    def to_stage(self) -> Stage:
        return Stage(
            duration_seconds=parse_duration(self.duration).total_seconds(),
            target=self.target,
        )


class ThresholdConfig(BaseModel):
    p95_ms: PositiveFloat = Field(default=2000.0, description="Overall p95 latency ceiling.")
    max_error_rate: float = Field(default=0.1, ge=0.0, le=1.0)


def _default_stages() -> list[StageConfig]:
    return [
        StageConfig(duration="10s", target=5),
        StageConfig(duration="30s", target=10),
        StageConfig(duration="10s", target=0),
    ]


class LoadTestConfig(BaseModel):
    base_url: str = Field(default=DEFAULT_BASE_URL)
    api_prefix: str = Field(default="/api")
    think_time: float = Field(default=0.5, ge=0.0, description="Pause after each call.")
    request_timeout: PositiveFloat = Field(default=30.0)
    cpu_n_min: NonNegativeInt = Field(default=20)
    cpu_n_max: NonNegativeInt = Field(default=29)
    stages: list[StageConfig] = Field(default_factory=_default_stages)
    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)
    output_dir: Path = Field(default=Path("results"))

    @field_validator("stages")
    @classmethod
    def _ensure_stages(cls, value: list[StageConfig]) -> list[StageConfig]:
        if not value:
            msg = "At least one stage should be defined in the load test config"
            raise ValueError(msg)
        return value

    @field_validator("output_dir", mode="before")
    @classmethod
    def _expand_output_dir(cls, value: Any) -> Path:
        return Path(value).expanduser()

    @model_validator(mode="after")
    def _check_cpu_range(self) -> "LoadTestConfig":
        if self.cpu_n_min > self.cpu_n_max:
            raise ValueError("cpu_n_min must not exceed cpu_n_max")
        return self

    @property
    def api_url(self) -> str:
        prefix = self.api_prefix.strip().strip("/")
        base = self.base_url.rstrip("/")
        return f"{base}/{prefix}" if prefix else base

    def schedule(self) -> RampSchedule:
        return RampSchedule([stage.to_stage() for stage in self.stages])


def parse_duration(value: str) -> timedelta:
    """Parse duration strings like `30s`, `5m`, `1h`."""

    units = {
        "s": 1,
        "m": 60,
        "h": 3600,
    }
    value = value.strip().lower()
    if not value:
        raise ValueError("Duration cannot be empty")

    suffix = value[-1]
    if suffix not in units:
        raise ValueError(f"Unsupported duration unit: {suffix}")

    amount = float(value[:-1]) if value[:-1] else 0.0
    if amount <= 0:
        raise ValueError("Duration must be positive")
    seconds = amount * units[suffix]
    return timedelta(seconds=seconds)


def load_config(path: Path | None = None) -> LoadTestConfig:
    """Load a YAML config (or defaults) and apply the ``BASE_URL`` override."""

    data: dict[str, Any] = {}
    if path is not None:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        if loaded is None:
            raise ValueError(f"Load test config is empty: {path}")
        data = dict(loaded)

    env_base_url = os.getenv(BASE_URL_ENV)
    if env_base_url:
        data["base_url"] = env_base_url
    return LoadTestConfig.model_validate(data)


__all__ = [
    "DEFAULT_BASE_URL",
    "LoadTestConfig",
    "StageConfig",
    "ThresholdConfig",
    "load_config",
    "parse_duration",
]
