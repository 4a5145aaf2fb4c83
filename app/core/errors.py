"""
Application errors and their JSON envelope.

Services raise these instead of HTTPException so the same failure kinds are
reported the same way no matter which route triggered them. Every error is
rendered as ``{"message": ..., "error": <kind>, "details": {...}}``.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.logger import logger


class ErrorKind(str, Enum):
    VALIDATION_ERROR = "validation_error"
    AUTHENTICATION_REQUIRED = "authentication_required"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PERSISTENCE_ERROR = "persistence_error"
    UPSTREAM_ERROR = "upstream_error"


class ForbiddenReason(str, Enum):
    ROLE_MISMATCH = "role_mismatch"
    NOT_OWNER = "not_owner"


class AppError(Exception):
    """Base class for every error surfaced to API callers."""

    kind: ErrorKind = ErrorKind.PERSISTENCE_ERROR
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body = {"message": self.message, "error": self.kind.value}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION_ERROR
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid value for '{field}': {reason}", {"field": field, "reason": reason})


class AuthenticationRequired(AppError):
    kind = ErrorKind.AUTHENTICATION_REQUIRED
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class Forbidden(AppError):
    kind = ErrorKind.FORBIDDEN
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, reason: ForbiddenReason, message: str):
        self.reason = reason
        super().__init__(message, {"reason": reason.value})


class NotFound(AppError):
    kind = ErrorKind.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} not found")


class Conflict(AppError):
    kind = ErrorKind.CONFLICT
    status_code = status.HTTP_409_CONFLICT


class PersistenceError(AppError):
    """Storage failure. The original exception is logged, never returned."""

    kind = ErrorKind.PERSISTENCE_ERROR
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, action: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(f"Could not {action}")


class UpstreamError(AppError):
    kind = ErrorKind.UPSTREAM_ERROR
    status_code = status.HTTP_502_BAD_GATEWAY


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, PersistenceError):
        logger.error(f"{request.method} {request.url.path}: {exc.message}: {exc.cause!r}")
    headers = None
    if isinstance(exc, AuthenticationRequired):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    error = ValidationError(field or "request", first.get("msg", "invalid request"))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
