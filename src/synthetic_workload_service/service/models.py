"""Result models returned by the workload endpoints."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WorkloadModel(BaseModel):
    """Immutable value object serialised with camelCase field names."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class HealthStatus(WorkloadModel):
    status: Literal["ok"] = "ok"
    timestamp: int


class CpuResult(WorkloadModel):
    result: int
    input: int
    duration_ms: int = Field(ge=0)


class MemoryResult(WorkloadModel):
    array_size: int
    sum: str
    duration_ms: int = Field(ge=0)


class IoDelayResult(WorkloadModel):
    requested_delay: int = Field(ge=0)
    actual_duration_ms: int = Field(ge=0)


class EchoHeaders(WorkloadModel):
    content_type: str | None = None
    user_agent: str | None = None


class EchoResult(WorkloadModel):
    received_at: int
    body: Any = None
    headers: EchoHeaders


class PayloadItem(WorkloadModel):
    id: int
    name: str
    value: float = Field(ge=0.0, lt=1.0)


class PayloadResult(WorkloadModel):
    size: Literal["small", "medium", "large", "xlarge"]
    item_count: int
    data: list[PayloadItem]


__all__ = [
    "CpuResult",
    "EchoHeaders",
    "EchoResult",
    "HealthStatus",
    "IoDelayResult",
    "MemoryResult",
    "PayloadItem",
    "PayloadResult",
]
