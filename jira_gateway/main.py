from __future__ import annotations

import time
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from jira_gateway.api.routes.health import router as health_router
from jira_gateway.api.routes.jira import GATEWAY_PATH, router as jira_router
from jira_gateway.core.config import Settings, get_settings, read_version
from jira_gateway.core.errors import install_exception_handlers
from jira_gateway.middleware.cors import install_cors
from jira_gateway.services.mock_data import MockTicketSynthesizer
from jira_gateway.services.router import ClientFactory, GatewayRouter
from jira_gateway.utils.logging import configure_logging, logger


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that attaches a unique request_id to each incoming request
    and includes it in response headers and structured logs.
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or f"req-{int(time.time() * 1000)}"
        start = time.perf_counter()
        request.state.request_id = request_id

        response = await call_next(request)

        duration_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request_completed",
            extra={
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": getattr(response, "status_code", 0),
                "duration_ms": duration_ms,
            },
        )
        return response


def build_app(
    settings: Optional[Settings] = None,
    synthesizer: Optional[MockTicketSynthesizer] = None,
    client_factory: Optional[ClientFactory] = None,
) -> FastAPI:
    """
    PUBLIC_INTERFACE
    Create and configure the FastAPI application, including routes, middleware, and exception handlers.

    ``synthesizer`` and ``client_factory`` override the defaults, mainly for tests.
    """
    settings = settings or get_settings()

    # Configure logging early
    configure_logging(level=settings.LOG_LEVEL)

    app = FastAPI(
        title="WSJF JIRA Gateway",
        description=(
            "Serverless gateway that proxies ticket queries and updates to JIRA, "
            "falling back to synthesized tickets when JIRA is unavailable."
        ),
        version=read_version(),
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {"name": "health", "description": "Service information and health"},
            {"name": "jira", "description": "JIRA action gateway"},
        ],
    )

    # Credentials and mock bounds are fixed for the lifetime of the process
    app.state.gateway_router = GatewayRouter(
        defaults=settings.default_credentials(),
        synthesizer=synthesizer
        or MockTicketSynthesizer(min_count=settings.MOCK_MIN_TICKETS, max_count=settings.MOCK_MAX_TICKETS),
        client_factory=client_factory,
        max_results=settings.JIRA_SEARCH_MAX_RESULTS,
        timeout=settings.JIRA_TIMEOUT_SECONDS,
    )

    # CORS is registered last so it is outermost and answers OPTIONS before routing
    app.add_middleware(RequestIDMiddleware)
    install_cors(app, settings.APP_CORS_ORIGINS)

    app.include_router(jira_router)
    app.include_router(health_router)

    @app.get("/", tags=["health"], summary="Service info")
    async def root(request: Request) -> Dict[str, Any]:
        """
        PUBLIC_INTERFACE
        Returns basic service information including the action endpoint and docs URL.
        """
        return {
            "name": "WSJF JIRA Gateway",
            "endpoint": GATEWAY_PATH,
            "docs_url": str(request.base_url) + "docs",
            "request_id": getattr(request.state, "request_id", None),
        }

    install_exception_handlers(app)

    if not app.state.gateway_router.defaults.complete:
        logger.info(
            "jira_defaults_incomplete",
            extra={"missing": app.state.gateway_router.defaults.missing()},
        )

    return app


app = build_app()

# For local runs: uvicorn jira_gateway.main:app --host 0.0.0.0 --port 3001
