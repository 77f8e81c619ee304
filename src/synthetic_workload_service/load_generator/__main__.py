"""Allow ``python -m synthetic_workload_service.load_generator``."""

from .runner import main

if __name__ == "__main__":  # pragma: no cover - process entry point
    raise SystemExit(main())
