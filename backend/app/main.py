from __future__ import annotations

from fastapi import Depends, FastAPI

from gateway.health import HealthChecker

from . import schemas
from .core.config import settings

app = FastAPI(title="Trade Desk Client", version="0.1.0", debug=settings.debug)


@app.get("/healthz", tags=["system"])
def healthcheck() -> dict[str, str]:
    """Basic readiness probe consumed by infrastructure monitors."""

    return {"status": "ok"}


def _health_checker() -> HealthChecker:
    """Provide the upstream probe wired to the configured API base URL."""

    return HealthChecker(settings=settings)


@app.get("/health/upstream", response_model=schemas.HealthReport, tags=["system"])
async def upstream_health(checker: HealthChecker = Depends(_health_checker)):
    """Probe the remote market API and report per-endpoint reachability."""

    return await checker.run()
