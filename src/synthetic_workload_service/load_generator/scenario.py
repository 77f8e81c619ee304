"""Per-virtual-user request sequence with response checks."""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from ..logging import get_logger

LOGGER = get_logger(__name__)

MEMORY_SIZES = (10_000, 50_000, 100_000)
IO_DELAYS = (50, 100, 200)
PAYLOAD_SIZES = ("small", "medium", "large")

Check = Callable[[Any], bool]


@dataclass(slots=True, frozen=True)
class Sample:
    endpoint: str
    duration_ms: float
    ok: bool
    status: int | None = None


def _check_health(body: Any) -> bool:
    return isinstance(body, dict) and body.get("status") == "ok"


def _check_cpu(body: Any) -> bool:
    return isinstance(body, dict) and body.get("result") is not None


def _check_memory(body: Any) -> bool:
    return isinstance(body, dict) and body.get("arraySize") is not None


def _check_io(body: Any) -> bool:
    if not isinstance(body, dict):
        return False
    return (body.get("actualDurationMs") or 0) >= (body.get("requestedDelay") or 0)


def _check_echo(body: Any) -> bool:
    if not isinstance(body, dict) or not isinstance(body.get("body"), dict):
        return False
    return body["body"].get("action") == "load-test"


def _check_payload(body: Any) -> bool:
    return isinstance(body, dict) and isinstance(body.get("data"), list)


async def _timed_request(
    client: httpx.AsyncClient,
    endpoint: str,
    method: str,
    url: str,
    check: Check,
    **kwargs: Any,
) -> Sample:
    """Issue one request and evaluate its status and body check."""

    start = time.perf_counter()
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.HTTPError as exc:
        duration_ms = (time.perf_counter() - start) * 1000
        LOGGER.warning("%s request failed: %s", endpoint, exc)
        return Sample(endpoint=endpoint, duration_ms=duration_ms, ok=False)

    duration_ms = (time.perf_counter() - start) * 1000
    ok = response.status_code == 200
    if ok:
        try:
            ok = check(response.json())
        except ValueError:
            ok = False
    if not ok:
        LOGGER.debug("%s check failed with status %s", endpoint, response.status_code)
    return Sample(
        endpoint=endpoint,
        duration_ms=duration_ms,
        ok=ok,
        status=response.status_code,
    )


class UserScenario:
    """The six-call sequence one virtual user repeats.

    ``client`` must be configured with the service's API URL as ``base_url``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        think_time: float = 0.5,
        cpu_n_range: tuple[int, int] = (20, 29),
        rng: random.Random | None = None,
    ) -> None:
        self.client = client
        self.think_time = think_time
        self.cpu_n_range = cpu_n_range
        self.rng = rng or random.Random()

    def health(self) -> Awaitable[Sample]:
        return _timed_request(self.client, "health", "GET", "/health", _check_health)

    def cpu_intensive(self) -> Awaitable[Sample]:
        n = self.rng.randint(*self.cpu_n_range)
        return _timed_request(
            self.client, "cpu_intensive", "GET", "/cpu-intensive", _check_cpu, params={"n": n}
        )

    def memory_intensive(self) -> Awaitable[Sample]:
        size = self.rng.choice(MEMORY_SIZES)
        return _timed_request(
            self.client,
            "memory_intensive",
            "GET",
            "/memory-intensive",
            _check_memory,
            params={"size": size},
        )

    def io_delay(self) -> Awaitable[Sample]:
        delay = self.rng.choice(IO_DELAYS)
        return _timed_request(
            self.client, "io_delay", "GET", "/io-delay", _check_io, params={"delay": delay}
        )

    def echo(self) -> Awaitable[Sample]:
        payload = {
            "userId": self.rng.randrange(1000),
            "action": "load-test",
            "timestamp": int(time.time() * 1000),
        }
        return _timed_request(self.client, "echo", "POST", "/echo", _check_echo, json=payload)

    def variable_payload(self) -> Awaitable[Sample]:
        size = self.rng.choice(PAYLOAD_SIZES)
        return _timed_request(
            self.client, "payload", "GET", f"/payload/{size}", _check_payload
        )

    async def iterate(self) -> list[Sample]:
        """Run the full sequence once, pausing ``think_time`` after each call."""

        samples: list[Sample] = []
        for step in (
            self.health,
            self.cpu_intensive,
            self.memory_intensive,
            self.io_delay,
            self.echo,
            self.variable_payload,
        ):
            samples.append(await step())
            if self.think_time > 0:
                await asyncio.sleep(self.think_time)
        return samples


__all__ = ["IO_DELAYS", "MEMORY_SIZES", "PAYLOAD_SIZES", "Sample", "UserScenario"]
