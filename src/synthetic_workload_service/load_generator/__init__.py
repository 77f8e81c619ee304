"""Ramping virtual-user load generator targeting the workload endpoints."""

from .config import LoadTestConfig, ThresholdConfig, load_config, parse_duration
from .report import LoadTestSummary, MetricsRecorder, TrendStats
from .runner import LoadTestRunner, ServiceUnavailableError, main
from .scenario import Sample, UserScenario
from .schedule import DEFAULT_STAGES, RampSchedule, Stage

__all__ = [
    "DEFAULT_STAGES",
    "LoadTestConfig",
    "LoadTestRunner",
    "LoadTestSummary",
    "MetricsRecorder",
    "RampSchedule",
    "Sample",
    "ServiceUnavailableError",
    "Stage",
    "ThresholdConfig",
    "TrendStats",
    "UserScenario",
    "load_config",
    "main",
    "parse_duration",
]
