"""Locust workload definition hitting the synthetic workload service.

Run with ``locust -f tools/load_generator/locust_tasks.py --host http://localhost:3000``.
"""

from __future__ import annotations

import random
import time

import gevent
from locust import HttpUser, LoadTestShape, constant, task

from synthetic_workload_service.load_generator.scenario import (
    IO_DELAYS,
    MEMORY_SIZES,
    PAYLOAD_SIZES,
)
from synthetic_workload_service.load_generator.schedule import RampSchedule

API_PREFIX = "/api"
CPU_N_RANGE = (20, 29)
THINK_TIME = 0.5
SCHEDULE = RampSchedule()


class WorkloadServiceUser(HttpUser):
    # Pauses happen after every call inside the sequence.
    wait_time = constant(0)

    @task
    def run_sequence(self) -> None:
        self._get("/health", lambda body: body.get("status") == "ok")
        self._get(
            "/cpu-intensive",
            lambda body: body.get("result") is not None,
            params={"n": random.randint(*CPU_N_RANGE)},
        )
        self._get(
            "/memory-intensive",
            lambda body: body.get("arraySize") is not None,
            params={"size": random.choice(MEMORY_SIZES)},
        )
        self._get(
            "/io-delay",
            lambda body: body.get("actualDurationMs", 0) >= body.get("requestedDelay", 0),
            params={"delay": random.choice(IO_DELAYS)},
        )
        payload = {
            "userId": random.randrange(1000),
            "action": "load-test",
            "timestamp": int(time.time() * 1000),
        }
        with self.client.post(
            f"{API_PREFIX}/echo", json=payload, name="/echo", catch_response=True
        ) as resp:
            self._verify(resp, lambda body: (body.get("body") or {}).get("action") == "load-test")
        gevent.sleep(THINK_TIME)
        size = random.choice(PAYLOAD_SIZES)
        self._get(
            f"/payload/{size}",
            lambda body: isinstance(body.get("data"), list),
            name="/payload/[size]",
        )

    def _get(self, path, check, params=None, name=None) -> None:
        with self.client.get(
            f"{API_PREFIX}{path}",
            params=params,
            name=name or path,
            catch_response=True,
        ) as resp:
            self._verify(resp, check)
        gevent.sleep(THINK_TIME)

    @staticmethod
    def _verify(resp, check) -> None:
        if resp.status_code != 200:
            resp.failure(f"Unexpected: {resp.status_code}")
            return
        try:
            ok = check(resp.json())
        except ValueError:
            ok = False
        if ok:
            resp.success()
        else:
            resp.failure("response check failed")


class RampShape(LoadTestShape):
    """Follow the same ramp as the asyncio runner (10s→5, 30s→10, 10s→0)."""

    def tick(self):
        target = SCHEDULE.target_at(self.get_run_time())
        if target is None:
            return None
        return target, max(SCHEDULE.max_target, 1)
