"""FastAPI application exposing the synthetic workload endpoints."""

from __future__ import annotations

import json
import re
import time
from collections.abc import Awaitable, Callable
from typing import Annotated, Any
from urllib.parse import parse_qsl

from fastapi import APIRouter, FastAPI, Header, Query, Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .. import __version__
from ..logging import get_logger, log_structured
from ..metrics import IN_FLIGHT, REQUEST_COUNTER, REQUEST_LATENCY
from ..settings import Settings, get_settings
from .models import (
    CpuResult,
    EchoResult,
    HealthStatus,
    IoDelayResult,
    MemoryResult,
    PayloadResult,
)
from .workloads import WorkloadService

LOGGER = get_logger(__name__)

DEFAULT_CPU_N = 35
DEFAULT_MEMORY_SIZE = 100_000
DEFAULT_DELAY_MS = 100

INTEGER_LITERAL = re.compile(r"[+-]?[0-9]+", re.ASCII)


def coerce_int(raw: str | None, default: int) -> int:
    """Parse a query value, falling back to ``default`` instead of failing."""

    if raw is None:
        return default
    value = raw.strip()
    if not INTEGER_LITERAL.fullmatch(value):
        return default
    return int(value)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON constant {token}")


def decode_body(raw: bytes, content_type: str | None) -> Any:
    """Best-effort decoding of an echo body; never rejects the request.

    Bodies that are not strict JSON (``NaN``, nesting deeper than the
    interpreter can follow) are echoed back as text.
    """

    if not raw:
        return None
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    text = raw.decode("utf-8", errors="replace")
    if media_type == "application/x-www-form-urlencoded":
        return dict(parse_qsl(text, keep_blank_values=True))
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return text


def endpoint_label(api_prefix: str, route: Any) -> str:
    """Metrics label for a matched route: the full path template."""

    path = getattr(route, "path", None)
    if path is None:
        return "unmatched"
    if api_prefix and path != api_prefix and not path.startswith(f"{api_prefix}/"):
        path = f"{api_prefix}{path}"
    return path


def build_router(service: WorkloadService) -> APIRouter:
    """Map HTTP verbs and paths onto ``service`` calls."""

    router = APIRouter(tags=["workload"])

    @router.get("/health", response_model=HealthStatus, tags=["system"])
    def health() -> HealthStatus:
        return service.health_check()

    # CPU and memory handlers are sync so FastAPI runs them in its threadpool.
    @router.get("/cpu-intensive", response_model=CpuResult)
    def cpu_intensive(n: Annotated[str | None, Query()] = None) -> CpuResult:
        return service.cpu_intensive(coerce_int(n, DEFAULT_CPU_N))

    @router.get("/memory-intensive", response_model=MemoryResult)
    def memory_intensive(size: Annotated[str | None, Query()] = None) -> MemoryResult:
        return service.memory_intensive(coerce_int(size, DEFAULT_MEMORY_SIZE))

    @router.get("/io-delay", response_model=IoDelayResult)
    async def io_delay(delay: Annotated[str | None, Query()] = None) -> IoDelayResult:
        return await service.io_delay(coerce_int(delay, DEFAULT_DELAY_MS))

    @router.post("/echo", response_model=EchoResult)
    async def echo(
        request: Request,
        content_type: Annotated[str | None, Header()] = None,
        user_agent: Annotated[str | None, Header()] = None,
    ) -> EchoResult:
        body = decode_body(await request.body(), content_type)
        return service.echo(body, content_type, user_agent)

    @router.get("/payload/{size}", response_model=PayloadResult)
    def variable_payload(size: str) -> PayloadResult:
        return service.variable_payload(size)

    return router


def create_app(settings: Settings, service: WorkloadService | None = None) -> FastAPI:
    """Factory for the workload FastAPI application."""

    service = service or WorkloadService()
    app = FastAPI(title=settings.service_name, version=__version__)
    app.include_router(build_router(service), prefix=settings.api_prefix)

    @app.middleware("http")
    async def record_request(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path == settings.metrics_path:
            return await call_next(request)

        start = time.perf_counter()
        status_code = 500
        IN_FLIGHT.inc()
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            IN_FLIGHT.dec()
            elapsed = time.perf_counter() - start
            endpoint = endpoint_label(settings.api_prefix, request.scope.get("route"))
            REQUEST_LATENCY.labels(endpoint=endpoint).observe(elapsed)
            REQUEST_COUNTER.labels(
                endpoint=endpoint, method=request.method, status=status_code
            ).inc()
            log_structured(
                LOGGER,
                "request served",
                method=request.method,
                path=request.url.path,
                status=status_code,
                duration_ms=round(elapsed * 1000, 2),
            )

    @app.get(settings.metrics_path, tags=["system"], response_class=PlainTextResponse)
    def metrics() -> PlainTextResponse:
        data = generate_latest()
        return PlainTextResponse(content=data, media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app(get_settings())


def run() -> None:  # pragma: no cover - thin wrapper for uvicorn
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "synthetic_workload_service.service.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
