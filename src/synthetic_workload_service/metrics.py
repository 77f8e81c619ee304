"""Prometheus collectors shared by the workload service."""

from prometheus_client import Counter, Gauge, Histogram


REQUEST_LATENCY = Histogram(
    "workload_service_request_latency_seconds",
    "Latency of synthetic workload requests.",
    labelnames=("endpoint",),
    buckets=(0.005, 0.01, 0.05, 0.1, 0.2, 0.5, 1, 2, 5, 10, 30),
)
REQUEST_COUNTER = Counter(
    "workload_service_requests_total",
    "Number of requests served by the workload service.",
    labelnames=("endpoint", "method", "status"),
)
IN_FLIGHT = Gauge(
    "workload_service_in_flight_requests",
    "Requests currently being served.",
)


__all__ = ["REQUEST_LATENCY", "REQUEST_COUNTER", "IN_FLIGHT"]
