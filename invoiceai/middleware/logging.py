"""
Request logging

JSON access logs with a per-request id. The id is taken from an incoming
X-Request-ID header when present, echoed on the response and attached to
every log record emitted while the request is being handled.
"""

import json
import logging
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from invoiceai.principal import PRINCIPAL_SESSION_KEY

REQUEST_ID_HEADER = "X-Request-ID"
ACCESS_LOGGER = "invoiceai.access"
QUIET_PATHS = {"/health"}

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

EXTRA_FIELDS = ("user_id", "method", "path", "status_code", "duration_ms", "client_ip")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("")
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", ""),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)
        return json.dumps(log_data, default=str)


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or (request.client.host if request.client else "unknown")


def _session_user_id(request: Request) -> str | None:
    # Absent when the app has no SessionMiddleware
    if "session" not in request.scope:
        return None
    principal = request.session.get(PRINCIPAL_SESSION_KEY) or {}
    return principal.get("user_id")


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Times each request and writes one access-log line for it."""

    def __init__(self, app: ASGIApp, logger_name: str = ACCESS_LOGGER):
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_var.set(request_id)
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            self._log_request(request, 500, time.perf_counter() - start_time, error=str(e))
            request_id_var.reset(token)
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        self._log_request(request, response.status_code, time.perf_counter() - start_time)
        request_id_var.reset(token)
        return response

    def _log_request(self, request: Request, status_code: int, elapsed: float, error: str | None = None) -> None:
        if request.url.path in QUIET_PATHS:
            return

        if status_code >= 500:
            log_level = logging.ERROR
        elif status_code >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        duration_ms = round(elapsed * 1000, 2)
        extra = {
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "duration_ms": duration_ms,
            "client_ip": _client_ip(request),
        }
        user_id = _session_user_id(request)
        if user_id:
            extra["user_id"] = user_id

        message = f"{request.method} {request.url.path} - {status_code} ({duration_ms:.2f}ms)"
        if error:
            message += f" - Error: {error}"
        self.logger.log(log_level, message, extra=extra)


def setup_structured_logging(log_level: str = "INFO", json_format: bool = True) -> None:
    """
    Configure the root logger.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        json_format: JSON lines when True, a plain text format otherwise
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"))
    handler.addFilter(RequestIdFilter())
    root_logger.addHandler(handler)

    for logger_name, logger_level in {
        "invoiceai": level,
        ACCESS_LOGGER: level,
        "uvicorn.access": logging.WARNING,
        "sqlalchemy.engine": logging.WARNING,
        "httpx": logging.WARNING,
    }.items():
        logging.getLogger(logger_name).setLevel(logger_level)


def get_request_id() -> str:
    return request_id_var.get("")
