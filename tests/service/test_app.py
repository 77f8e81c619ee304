"""Tests for the FastAPI dispatch layer."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from synthetic_workload_service.service import workloads
from synthetic_workload_service.service.app import (
    build_router,
    coerce_int,
    create_app,
    decode_body,
    endpoint_label,
)
from synthetic_workload_service.service.workloads import WorkloadService
from synthetic_workload_service.settings import Settings

SETTINGS = Settings(api_prefix="/api")
APP = create_app(SETTINGS)
CLIENT = TestClient(APP)
ROUTER = build_router(WorkloadService())


def _get_endpoint(path: str) -> Callable[..., Any]:
    for route in ROUTER.routes:
        if isinstance(route, APIRoute) and route.path == path:
            return route.endpoint
    raise AssertionError(f"Route {path} not found")


@pytest.fixture
def cheap_fibonacci(monkeypatch: pytest.MonkeyPatch) -> list[int]:
    calls: list[int] = []

    def fake(num: int) -> int:
        calls.append(num)
        return num

    monkeypatch.setattr(workloads, "fibonacci", fake)
    return calls


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, 7),
        ("", 7),
        ("abc", 7),
        ("1.5", 7),
        ("1_0", 7),
        ("\u0661\u0662", 7),
        ("+", 7),
        (" 12 ", 12),
        ("+4", 4),
        ("-3", -3),
        ("0", 0),
    ],
)
def test_coerce_int_defaults_instead_of_failing(raw: str | None, expected: int) -> None:
    assert coerce_int(raw, 7) == expected


def test_health_handler_returns_ok() -> None:
    handler = _get_endpoint("/health")
    result = handler()
    assert result.status == "ok"


def test_health_endpoint_json_shape() -> None:
    response = CLIENT.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert isinstance(body["timestamp"], int)


def test_cpu_endpoint_computes_fibonacci() -> None:
    response = CLIENT.get("/api/cpu-intensive", params={"n": 10})
    assert response.status_code == 200
    body = response.json()
    assert body["result"] == 55
    assert body["input"] == 10
    assert body["durationMs"] >= 0


@pytest.mark.parametrize("query", [{}, {"n": "not-a-number"}])
def test_cpu_endpoint_defaults_depth(query: dict[str, str], cheap_fibonacci: list[int]) -> None:
    response = CLIENT.get("/api/cpu-intensive", params=query)
    assert response.status_code == 200
    assert response.json()["input"] == 35
    assert cheap_fibonacci == [35]


def test_cpu_endpoint_clamps_depth(cheap_fibonacci: list[int]) -> None:
    response = CLIENT.get("/api/cpu-intensive", params={"n": 99})
    assert response.json()["input"] == 99
    assert cheap_fibonacci == [45]


def test_memory_endpoint_defaults_size() -> None:
    response = CLIENT.get("/api/memory-intensive", params={"size": "lots"})
    assert response.status_code == 200
    body = response.json()
    assert body["arraySize"] == 100_000
    assert isinstance(body["sum"], str)


def test_io_delay_endpoint_reports_actual_duration() -> None:
    response = CLIENT.get("/api/io-delay", params={"delay": 25})
    body = response.json()
    assert body["requestedDelay"] == 25
    assert body["actualDurationMs"] >= 25


def test_io_delay_endpoint_defaults_delay() -> None:
    body = CLIENT.get("/api/io-delay").json()
    assert body["requestedDelay"] == 100
    assert body["actualDurationMs"] >= 100


def test_echo_endpoint_reflects_json_and_headers() -> None:
    payload = {"userId": 7, "action": "load-test", "tags": [None, {"a": 1}]}
    response = CLIENT.post("/api/echo", json=payload, headers={"User-Agent": "k6-ish"})
    assert response.status_code == 200
    body = response.json()
    assert body["body"] == payload
    assert body["headers"]["contentType"] == "application/json"
    assert body["headers"]["userAgent"] == "k6-ish"
    assert isinstance(body["receivedAt"], int)


def test_echo_endpoint_accepts_form_and_text() -> None:
    form = CLIENT.post("/api/echo", data={"a": "1", "b": "two"}).json()
    assert form["body"] == {"a": "1", "b": "two"}

    text = CLIENT.post(
        "/api/echo", content=b"{not json", headers={"Content-Type": "text/plain"}
    ).json()
    assert text["body"] == "{not json"
    assert text["headers"]["contentType"] == "text/plain"


def test_decode_body_handles_empty_and_scalars() -> None:
    assert decode_body(b"", "application/json") is None
    assert decode_body(b"null", "application/json") is None
    assert decode_body(b"[1, 2]", None) == [1, 2]
    assert decode_body(b"42", "application/json; charset=utf-8") == 42


@pytest.mark.parametrize(
    ("label", "count", "resolved"),
    [("small", 100, "small"), ("large", 10_000, "large"), ("huge", 100, "small")],
)
def test_payload_endpoint(label: str, count: int, resolved: str) -> None:
    body = CLIENT.get(f"/api/payload/{label}").json()
    assert body["size"] == resolved
    assert body["itemCount"] == count
    assert len(body["data"]) == count
    assert set(body["data"][0]) == {"id", "name", "value"}


def test_metrics_endpoint_exposes_prometheus_text() -> None:
    CLIENT.get("/api/health")
    response = CLIENT.get(SETTINGS.metrics_path)
    assert response.status_code == 200
    text = response.text
    assert "workload_service_requests_total" in text
    assert 'endpoint="/api/health"' in text


def test_api_prefix_is_normalized() -> None:
    assert Settings(api_prefix="api/").api_prefix == "/api"
    assert Settings(api_prefix="/").api_prefix == ""
    app = create_app(Settings(api_prefix=""))
    response = TestClient(app).get("/health")
    assert response.status_code == 200


def test_io_delay_endpoint_ignores_python_only_literals() -> None:
    body = CLIENT.get("/api/io-delay", params={"delay": "1_0"}).json()
    assert body["requestedDelay"] == 100


def test_decode_body_keeps_non_strict_json_as_text() -> None:
    assert decode_body(b'{"x": NaN}', "application/json") == '{"x": NaN}'
    assert decode_body(b"[Infinity]", "application/json") == "[Infinity]"
    deep = b"[" * 100_000 + b"]" * 100_000
    assert decode_body(deep, "application/json") == deep.decode()


def test_echo_endpoint_survives_pathological_json() -> None:
    deep = b"[" * 100_000 + b"]" * 100_000
    response = CLIENT.post("/api/echo", content=deep, headers={"Content-Type": "application/json"})
    assert response.status_code == 200
    assert response.json()["body"] == deep.decode()

    nan = CLIENT.post(
        "/api/echo", content=b'{"x": NaN}', headers={"Content-Type": "application/json"}
    )
    assert nan.json()["body"] == '{"x": NaN}'


class _Route:
    def __init__(self, path: str) -> None:
        self.path = path


@pytest.mark.parametrize(
    ("prefix", "path", "expected"),
    [
        ("/api", "/health", "/api/health"),
        ("/api", "/api/health", "/api/health"),
        ("/api", "/payload/{size}", "/api/payload/{size}"),
        ("", "/health", "/health"),
    ],
)
def test_endpoint_label_carries_prefix_once(prefix: str, path: str, expected: str) -> None:
    assert endpoint_label(prefix, _Route(path)) == expected


def test_endpoint_label_for_unmatched_requests() -> None:
    assert endpoint_label("/api", None) == "unmatched"
