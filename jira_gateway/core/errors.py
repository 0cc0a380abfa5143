from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jira_gateway.middleware.cors import cors_headers
from jira_gateway.models.schemas import ErrorResponse
from jira_gateway.utils.logging import logger


def _error_json(error: str, status_code: int, details: Optional[Any] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, details=details).model_dump(exclude_none=True),
    )


# PUBLIC_INTERFACE
def install_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers for locally rejected requests and bugs."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            return _error_json("Method not allowed", exc.status_code)
        return _error_json(str(exc.detail), exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
            for err in exc.errors()
        ]
        logger.info(
            "invalid_request",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "path": request.url.path,
                "errors": errors,
            },
        )
        return _error_json("Invalid request", status.HTTP_400_BAD_REQUEST, errors)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "unhandled_exception",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "path": request.url.path,
                "method": request.method,
            },
        )
        response = _error_json("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)
        allowed = getattr(request.app.state, "cors_origins", None)
        response.headers.update(cors_headers(allowed, request.headers.get("origin")))
        return response
