"""
Service-layer exceptions.

Every business error raised by the services carries a machine readable
``code`` and the HTTP ``status_code`` the API layer should answer with.
The server's exception handlers turn them into the error envelope.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base class of all expected business errors."""

    def __init__(
        self,
        message: str,
        code: str = "SERVICE_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details


class UnauthorizedError(ServiceError):
    def __init__(self, message: str = "Authentication required", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "UNAUTHORIZED", 401, details)


class ForbiddenError(ServiceError):
    def __init__(self, message: str = "Access denied", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "FORBIDDEN", 403, details)


class NotFoundError(ServiceError):
    def __init__(self, resource: str, identifier: Any = None) -> None:
        message = f"{resource} not found" if identifier is None else f"{resource} '{identifier}' not found"
        super().__init__(message, "NOT_FOUND", 404, {"resource": resource})


class ValidationError(ServiceError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "VALIDATION_ERROR", 422, details)


class ConflictError(ServiceError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "CONFLICT", 409, details)


class PremiumRequiredError(ServiceError):
    def __init__(
        self, message: str = "A premium license is required for this resource", details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, "PREMIUM_REQUIRED", 402, details)


# HTTP status → envelope error code
STATUS_ERROR_CODES: Dict[int, str] = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    402: "PREMIUM_REQUIRED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    429: "RATE_LIMIT_EXCEEDED",
    500: "INTERNAL_ERROR",
}


def error_code_for_status(status_code: int) -> str:
    if status_code in STATUS_ERROR_CODES:
        return STATUS_ERROR_CODES[status_code]
    return "INTERNAL_ERROR" if status_code >= 500 else "BAD_REQUEST"
