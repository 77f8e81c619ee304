"""Async ramping-VU load generator for the workload service."""

from __future__ import annotations

import argparse
import asyncio
import signal
import time
from pathlib import Path

import httpx

from ..logging import get_logger, log_structured
from .config import LoadTestConfig, load_config
from .report import LoadTestSummary, MetricsRecorder, format_summary, write_summary
from .scenario import UserScenario

LOGGER = get_logger(__name__)
TICK_SECONDS = 0.1


class ServiceUnavailableError(RuntimeError):
    """Raised when the pre-flight health check does not return 200."""


async def setup(client: httpx.AsyncClient) -> None:
    """Verify the target is healthy before ramping up any users."""

    try:
        response = await client.get("/health")
    except httpx.HTTPError as exc:
        raise ServiceUnavailableError(f"Server is not reachable: {exc}") from exc
    if response.status_code != 200:
        raise ServiceUnavailableError(f"Server is not healthy! Status: {response.status_code}")


async def virtual_user(
    scenario: UserScenario,
    recorder: MetricsRecorder,
    stop_event: asyncio.Event,
) -> None:
    """Repeat the scenario until asked to stop; the current iteration completes."""

    while not stop_event.is_set():
        recorder.extend(await scenario.iterate())


class LoadTestRunner:
    """Spawns and retires virtual users to follow the ramp schedule."""

    def __init__(
        self,
        config: LoadTestConfig,
        *,
        client: httpx.AsyncClient | None = None,
        tick: float = TICK_SECONDS,
    ) -> None:
        self.config = config
        self.schedule = config.schedule()
        self.recorder = MetricsRecorder()
        self.tick = tick
        self._client = client
        self._abort = asyncio.Event()
        self._users: list[tuple[asyncio.Task[None], asyncio.Event]] = []

    def abort(self) -> None:
        self._abort.set()

    @property
    def active_users(self) -> int:
        return len(self._users)

    def _spawn(self, client: httpx.AsyncClient) -> None:
        stop_event = asyncio.Event()
        scenario = UserScenario(
            client,
            think_time=self.config.think_time,
            cpu_n_range=(self.config.cpu_n_min, self.config.cpu_n_max),
        )
        task = asyncio.create_task(virtual_user(scenario, self.recorder, stop_event))
        self._users.append((task, stop_event))

    def _retire(self, count: int) -> list[asyncio.Task[None]]:
        retired: list[asyncio.Task[None]] = []
        for _ in range(count):
            task, stop_event = self._users.pop()
            stop_event.set()
            retired.append(task)
        return retired

    async def run(self) -> LoadTestSummary:
        owns_client = self._client is None
        client = self._client or httpx.AsyncClient(
            base_url=self.config.api_url,
            timeout=self.config.request_timeout,
        )
        retiring: list[asyncio.Task[None]] = []
        try:
            await setup(client)
            log_structured(
                LOGGER,
                "load test started",
                target=self.config.api_url,
                max_vus=self.schedule.max_target,
                duration_s=self.schedule.total_duration,
            )
            started = time.monotonic()
            while not self._abort.is_set():
                target = self.schedule.target_at(time.monotonic() - started)
                if target is None:
                    break
                if target != self.active_users:
                    LOGGER.debug("Adjusting virtual users %s -> %s", self.active_users, target)
                if target > self.active_users:
                    for _ in range(target - self.active_users):
                        self._spawn(client)
                elif target < self.active_users:
                    retiring.extend(self._retire(self.active_users - target))
                retiring = [task for task in retiring if not task.done()]
                await asyncio.sleep(self.tick)

            retiring.extend(self._retire(self.active_users))
            await asyncio.gather(*retiring)
            log_structured(
                LOGGER,
                "load test completed",
                elapsed_s=round(time.monotonic() - started, 2),
                requests=self.recorder.total_requests,
            )
        finally:
            for task in [*retiring, *(task for task, _ in self._users)]:
                task.cancel()
            if owns_client:
                await client.aclose()

        return self.recorder.summarize(self.config.thresholds)


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser for the load generator."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with stages, thresholds and request options",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Service base URL (overrides config and the BASE_URL env variable)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory receiving the JSON summary (default: results)",
    )
    return parser


async def _run_async(config: LoadTestConfig) -> LoadTestSummary:
    runner = LoadTestRunner(config)
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, runner.abort)
    return await runner.run()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = load_config(args.config)
    overrides: dict[str, object] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.output_dir:
        overrides["output_dir"] = args.output_dir
    if overrides:
        config = config.model_copy(update=overrides)

    LOGGER.info("Starting load test against %s", config.api_url)
    try:
        summary = asyncio.run(_run_async(config))
    except ServiceUnavailableError as exc:
        LOGGER.error("%s", exc)
        return 2

    print(format_summary(summary))
    path = write_summary(summary, config.output_dir)
    log_structured(LOGGER, "summary written", path=path, passed=summary.passed)
    return 0 if summary.passed else 1


if __name__ == "__main__":
    raise SystemExit(main())
