from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from starlette.responses import Response

ALLOW_METHODS = "GET,OPTIONS,PATCH,DELETE,POST,PUT"
ALLOW_HEADERS = (
    "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, Content-MD5, "
    "Content-Type, Date, X-Api-Version, X-Request-ID"
)


def cors_headers(allowed_origins: Optional[List[str]], origin: Optional[str]) -> Dict[str, str]:
    """
    Headers attached to every response. An unset or wildcard origin list allows
    any origin; otherwise the request Origin is echoed back only when listed.
    """
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
    }
    if not allowed_origins or "*" in allowed_origins:
        headers["Access-Control-Allow-Origin"] = "*"
    elif origin and origin in allowed_origins:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Vary"] = "Origin"
    return headers


# PUBLIC_INTERFACE
def install_cors(app: FastAPI, allowed_origins: Optional[List[str]] = None) -> None:
    """
    Emit CORS headers on every response and answer any OPTIONS request with an
    empty 200, before routing.
    """
    # The 500 handler runs outside this middleware and reads the list from here
    app.state.cors_origins = allowed_origins

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        headers = cors_headers(allowed_origins, request.headers.get("origin"))
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=headers)
        response = await call_next(request)
        response.headers.update(headers)
        return response
