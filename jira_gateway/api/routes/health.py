import time

from fastapi import APIRouter, Request

from jira_gateway.core.config import read_version

router = APIRouter(prefix="", tags=["health"])

_started_at = time.time()


@router.get(
    "/health",
    summary="Health check",
    description="Returns service liveness status, version and uptime.",
)
# PUBLIC_INTERFACE
def health(request: Request):
    """Basic liveness endpoint."""
    return {
        "status": "ok",
        "version": read_version(),
        "uptime_seconds": int(time.time() - _started_at),
        "request_id": getattr(request.state, "request_id", None),
    }


@router.get(
    "/ready",
    summary="Readiness check",
    description="Reports whether default JIRA credentials are configured. Requests still succeed with mock data when they are not.",
)
# PUBLIC_INTERFACE
def ready(request: Request):
    """Readiness endpoint indicating if default JIRA credentials exist."""
    configured = request.app.state.gateway_router.defaults.complete
    return {
        "status": "ready",
        "jiraConfigured": configured,
        "mode": "live" if configured else "mock",
    }
