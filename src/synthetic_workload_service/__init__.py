"""Synthetic workload service and its companion load generator."""

from importlib import metadata


__all__ = ["__version__"]


try:
    __version__ = metadata.version("synthetic-workload-service")
except metadata.PackageNotFoundError:  # pragma: no cover - during local dev without install
    __version__ = "0.1.0"
