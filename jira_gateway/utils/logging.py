import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional


class RequestIDFilter(logging.Filter):
    """Inject request_id if present in record.extra"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = None
        return True


# Standard LogRecord attributes, plus uvicorn's color_message
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "request_id",
    "taskName",
    "color_message",
}


class ExtraFormatter(logging.Formatter):
    """Append fields passed via ``extra`` as key=value pairs after the message."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = [f"{k}={v}" for k, v in sorted(vars(record).items()) if k not in _RESERVED]
        if fields:
            line = f"{line} {' '.join(fields)}"
        return line


logger = logging.getLogger("jira_gateway")


# PUBLIC_INTERFACE
def configure_logging(level: str = "INFO") -> None:
    """
    Configure structured logging for the application and uvicorn loggers.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(stream=sys.stdout)
    formatter = ExtraFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s request_id=%(request_id)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
    handler.setFormatter(formatter)
    handler.addFilter(RequestIDFilter())

    root.setLevel(log_level)
    root.addHandler(handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv_logger = logging.getLogger(name)
        uv_logger.setLevel(log_level)
        for h in list(uv_logger.handlers):
            uv_logger.removeHandler(h)
        uv_logger.addHandler(handler)

    # httpx logs every outbound call at INFO; jira_http_request covers that at DEBUG
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))


# PUBLIC_INTERFACE
@contextmanager
def timed_log_debug(message: str, request_id: Optional[str] = None, extra: Optional[Dict[str, Any]] = None):
    """
    Context manager to time a code block and log duration at debug level.

    Usage:
        with timed_log_debug("jira_http_request", extra={"method": "GET", "path": "/myself"}):
            # do work
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = int((time.perf_counter() - start) * 1000)
        data = {"request_id": request_id, "duration_ms": duration_ms}
        if extra:
            data.update(extra)
        logger.debug(message, extra=data)
