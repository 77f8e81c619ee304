"""Synthetic workload service: bounded CPU, memory, I/O and payload endpoints."""

from .app import create_app
from .workloads import WorkloadService, fibonacci

__all__ = ["WorkloadService", "create_app", "fibonacci"]
