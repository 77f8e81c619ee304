"""Pytest configuration and shared fixtures."""

import os

os.environ.setdefault("WORKLOAD_LOG_LEVEL", "WARNING")
os.environ.setdefault("WORKLOAD_API_PREFIX", "/api")
