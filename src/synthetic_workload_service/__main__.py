"""Allow ``python -m synthetic_workload_service`` to start the server."""

from .service.app import run

if __name__ == "__main__":  # pragma: no cover - process entry point
    run()
