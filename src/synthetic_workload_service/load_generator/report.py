"""Latency aggregation, threshold evaluation and summary export."""

from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Iterable

import numpy as np

from .config import ThresholdConfig
from .scenario import Sample


@dataclass(slots=True)
class TrendStats:
    count: int
    avg: float
    min: float
    med: float
    p90: float
    p95: float
    max: float

    @classmethod
    def from_durations(cls, durations: Iterable[float]) -> "TrendStats":
        values = np.asarray(list(durations), dtype=float)
        if values.size == 0:
            return cls(count=0, avg=0.0, min=0.0, med=0.0, p90=0.0, p95=0.0, max=0.0)
        p50, p90, p95 = np.percentile(values, [50, 90, 95])
        return cls(
            count=int(values.size),
            avg=float(values.mean()),
            min=float(values.min()),
            med=float(p50),
            p90=float(p90),
            p95=float(p95),
            max=float(values.max()),
        )


@dataclass(slots=True)
class LoadTestSummary:
    total_requests: int
    failed_checks: int
    error_rate: float
    overall: TrendStats
    endpoints: dict[str, TrendStats] = field(default_factory=dict)
    breaches: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.breaches

    def serialize(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["passed"] = self.passed
        return payload


class MetricsRecorder:
    """Collects samples from every VU; only touched from the event loop."""

    def __init__(self) -> None:
        self._durations: dict[str, list[float]] = defaultdict(list)
        self._checks = 0
        self._failures = 0

    def record(self, sample: Sample) -> None:
        self._durations[sample.endpoint].append(sample.duration_ms)
        self._checks += 1
        if not sample.ok:
            self._failures += 1

    def extend(self, samples: Iterable[Sample]) -> None:
        for sample in samples:
            self.record(sample)

    @property
    def total_requests(self) -> int:
        return self._checks

    def summarize(self, thresholds: ThresholdConfig | None = None) -> LoadTestSummary:
        all_durations = [value for values in self._durations.values() for value in values]
        summary = LoadTestSummary(
            total_requests=self._checks,
            failed_checks=self._failures,
            error_rate=self._failures / self._checks if self._checks else 0.0,
            overall=TrendStats.from_durations(all_durations),
            endpoints={
                endpoint: TrendStats.from_durations(values)
                for endpoint, values in sorted(self._durations.items())
            },
        )
        if thresholds is not None:
            summary.breaches = evaluate(summary, thresholds)
        return summary


def evaluate(summary: LoadTestSummary, thresholds: ThresholdConfig) -> list[str]:
    """Return human readable descriptions of every breached threshold."""

    breaches: list[str] = []
    if summary.overall.count and summary.overall.p95 >= thresholds.p95_ms:
        breaches.append(
            f"p95 latency {summary.overall.p95:.1f}ms exceeds {thresholds.p95_ms:.1f}ms"
        )
    if summary.error_rate >= thresholds.max_error_rate:
        breaches.append(
            f"error rate {summary.error_rate:.2%} exceeds {thresholds.max_error_rate:.2%}"
        )
    return breaches


def format_summary(summary: LoadTestSummary) -> str:
    """Render a plain-text table of per-endpoint latency trends."""

    header = f"{'endpoint':<18}{'count':>7}{'avg':>10}{'med':>10}{'p90':>10}{'p95':>10}{'max':>10}"
    lines = [header, "-" * len(header)]
    rows = [*summary.endpoints.items(), ("overall", summary.overall)]
    for name, stats in rows:
        lines.append(
            f"{name:<18}{stats.count:>7}{stats.avg:>10.1f}{stats.med:>10.1f}"
            f"{stats.p90:>10.1f}{stats.p95:>10.1f}{stats.max:>10.1f}"
        )
    lines.append("")
    lines.append(
        f"requests={summary.total_requests} failed={summary.failed_checks} "
        f"error_rate={summary.error_rate:.2%}"
    )
    verdict = "PASSED" if summary.passed else "FAILED: " + "; ".join(summary.breaches)
    lines.append(f"thresholds {verdict}")
    return "\n".join(lines)


def write_summary(summary: LoadTestSummary, output_dir: Path) -> Path:
    """Persist the summary as ``summary-<timestamp>.json`` in ``output_dir``."""

    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(tz=UTC).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
    path = output_dir / f"summary-{timestamp}.json"
    path.write_text(json.dumps(summary.serialize(), indent=2), encoding="utf-8")
    return path


__all__ = [
    "LoadTestSummary",
    "MetricsRecorder",
    "TrendStats",
    "evaluate",
    "format_summary",
    "write_summary",
]
