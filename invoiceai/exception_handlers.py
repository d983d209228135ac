"""
Global Exception Handlers for InvoiceAI

Centralized translation of exceptions into HTTP responses.

Error Response Format:
{
    "message": "Generated invoice failed validation",
    "errors": [{"field": "items", "message": "Field required", "type": "missing"}]
}

``errors`` is present only for schema-validation failures.
"""

import logging
from typing import Any, Union

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from invoiceai.exceptions import InvoiceAIError

logger = logging.getLogger(__name__)


def create_error_response(
    status_code: int,
    message: str,
    errors: list[dict[str, Any]] | None = None,
) -> JSONResponse:
    """
    Create a standardized error response.

    Args:
        status_code: HTTP status code
        message: Human-readable error message
        errors: Individual validation errors, for schema failures only

    Returns:
        JSONResponse with the standard error body
    """
    content: dict[str, Any] = {"message": message}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)


def format_validation_errors(exc: Union[RequestValidationError, PydanticValidationError]) -> list[dict[str, Any]]:
    """Flatten pydantic error entries into ``{field, message, type}`` dicts."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        errors.append({"field": field, "message": error["msg"], "type": error["type"]})
    return errors


async def invoiceai_exception_handler(request: Request, exc: InvoiceAIError) -> JSONResponse:
    """Handle the application's own exceptions."""
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        f"{type(exc).__name__}: {exc.message}",
        extra={"status_code": exc.status_code, "path": request.url.path},
    )

    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        errors=exc.errors,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle standard HTTP exceptions."""
    logger.warning(
        f"HTTPException: {exc.detail}",
        extra={"status_code": exc.status_code, "path": request.url.path},
    )

    return create_error_response(status_code=exc.status_code, message=str(exc.detail))


async def validation_exception_handler(
    request: Request, exc: Union[RequestValidationError, PydanticValidationError]
) -> JSONResponse:
    """Handle request body/query validation errors as 400s."""
    errors = format_validation_errors(exc)

    logger.warning(f"Validation error on {request.url.path}", extra={"path": request.url.path})

    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Validation error",
        errors=errors,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without exposing internals."""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        exc_info=True,
        extra={"path": request.url.path, "method": request.method},
    )

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An unexpected error occurred. Please try again later.",
    )


def register_exception_handlers(app) -> None:
    """
    Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(InvoiceAIError, invoiceai_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PydanticValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    logger.info("Exception handlers registered successfully")
