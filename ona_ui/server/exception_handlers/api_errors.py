"""
Handlers for expected API errors.

Service errors carry their own code and status. Request validation failures
become ``VALIDATION_ERROR`` with the offending fields, and HTTP errors raised
by routing (unknown path, wrong method) get the code of their status.
"""

from typing import Any, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ona_ui.core.errors import ServiceError, error_code_for_status
from ona_ui.core.logging_config import get_logger
from ona_ui.core.models.io import ErrorBody, ErrorResponse

logger = get_logger(__name__)


def error_response(
    status_code: int, code: str, message: str, details: Optional[Any] = None, headers: Optional[dict] = None
) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(code=code, message=message, details=details))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"), headers=headers)


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.code} in {request.method} {request.url.path}: {exc.message}", exc_info=exc)
    else:
        logger.info(f"{exc.code} ({exc.status_code}) in {request.method} {request.url.path}: {exc.message}")
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(part) for part in error.get("loc", ())), "message": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    logger.info(f"Request validation failed for {request.method} {request.url.path}: {len(errors)} errors")
    return error_response(422, "VALIDATION_ERROR", "Request validation failed", errors)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Route {request.method} {request.url.path} not found"
    else:
        message = str(exc.detail)
    return error_response(
        exc.status_code, error_code_for_status(exc.status_code), message, headers=getattr(exc, "headers", None)
    )
