"""Bounded synthetic workloads: CPU, memory, I/O delay, echo and payloads.

Every operation is a total function of its input. Numeric arguments are
clamped into ``[0, ceiling]`` instead of being rejected, and unknown payload
size labels fall back to ``small``, so a load generator can hammer the
endpoints with arbitrary values without provoking errors.
"""

from __future__ import annotations

import asyncio
import random
import time
from typing import Any

from .models import (
    CpuResult,
    EchoHeaders,
    EchoResult,
    HealthStatus,
    IoDelayResult,
    MemoryResult,
    PayloadItem,
    PayloadResult,
)

MAX_FIBONACCI_N = 45
MAX_ARRAY_SIZE = 10_000_000
MAX_DELAY_MS = 10_000

PAYLOAD_SIZES: dict[str, int] = {
    "small": 100,
    "medium": 1_000,
    "large": 10_000,
    "xlarge": 100_000,
}
DEFAULT_PAYLOAD_SIZE = "small"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def clamp(value: int, ceiling: int) -> int:
    """Constrain ``value`` to ``[0, ceiling]``."""

    return max(0, min(value, ceiling))


def fibonacci(num: int) -> int:
    """Naive exponential-time Fibonacci; the cost is the point."""

    if num <= 1:
        return num
    return fibonacci(num - 1) + fibonacci(num - 2)


class WorkloadService:
    """Stateless producer of synthetic workloads.

    Instances hold no per-call state, so a single instance can be shared by
    every request the process serves.
    """

    def health_check(self) -> HealthStatus:
        return HealthStatus(status="ok", timestamp=_now_ms())

    def cpu_intensive(self, n: int) -> CpuResult:
        """Compute F(min(n, 45)) recursively, reporting the original ``n``."""

        limited_n = clamp(n, MAX_FIBONACCI_N)
        start = time.perf_counter()
        result = fibonacci(limited_n)
        return CpuResult(result=result, input=n, duration_ms=_elapsed_ms(start))

    def memory_intensive(self, size: int) -> MemoryResult:
        """Allocate ``min(size, 10_000_000)`` records and sum their values."""

        limited_size = clamp(size, MAX_ARRAY_SIZE)
        start = time.perf_counter()

        records = [
            {"id": index, "value": random.random(), "data": f"item-{index}"}
            for index in range(limited_size)
        ]
        total = sum(record["value"] for record in records)

        return MemoryResult(
            array_size=len(records),
            sum=f"{total:.2f}",
            duration_ms=_elapsed_ms(start),
        )

    async def io_delay(self, delay: int) -> IoDelayResult:
        """Suspend cooperatively for at least ``min(delay, 10_000)`` ms."""

        limited_delay = clamp(delay, MAX_DELAY_MS)
        start = time.perf_counter()

        # The event loop clock may wake a hair early; top up until the
        # reported whole milliseconds reach the requested delay.
        remaining = limited_delay / 1000
        while True:
            await asyncio.sleep(remaining)
            elapsed = _elapsed_ms(start)
            if elapsed >= limited_delay:
                break
            remaining = (limited_delay - elapsed) / 1000

        return IoDelayResult(requested_delay=limited_delay, actual_duration_ms=elapsed)

    def echo(
        self,
        body: Any,
        content_type: str | None = None,
        user_agent: str | None = None,
    ) -> EchoResult:
        return EchoResult(
            received_at=_now_ms(),
            body=body,
            headers=EchoHeaders(content_type=content_type, user_agent=user_agent),
        )

    def variable_payload(self, size: str) -> PayloadResult:
        """Generate the fixed item quota for ``size`` (unknown labels → small)."""

        label = size if size in PAYLOAD_SIZES else DEFAULT_PAYLOAD_SIZE
        item_count = PAYLOAD_SIZES[label]
        data = [
            PayloadItem(id=index, name=f"Item {index}", value=random.random())
            for index in range(item_count)
        ]
        return PayloadResult(size=label, item_count=item_count, data=data)


__all__ = [
    "DEFAULT_PAYLOAD_SIZE",
    "MAX_ARRAY_SIZE",
    "MAX_DELAY_MS",
    "MAX_FIBONACCI_N",
    "PAYLOAD_SIZES",
    "WorkloadService",
    "clamp",
    "fibonacci",
]
