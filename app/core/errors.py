"""
Custom exception hierarchy for the Weekly Tally API.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.
"""
from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from app.core.logging import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class TallyException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class NotFoundError(TallyException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource.capitalize()} {resource_id!r} does not exist.",
            details={"resource": resource, "id": resource_id},
        )


class ForbiddenError(TallyException):
    http_status = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"

    def __init__(self, entry_id: str, user_id: str):
        super().__init__(
            message=f"User {user_id!r} does not own entry {entry_id!r}.",
            details={"entry_id": entry_id, "user_id": user_id},
        )


class ServiceUnavailableError(TallyException):
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "SERVICE_UNAVAILABLE"

    def __init__(self, service: str):
        super().__init__(
            message=f"{service} is not configured.",
            details={"service": service},
        )


class UploadError(TallyException):
    http_status = status.HTTP_502_BAD_GATEWAY
    code = "UPLOAD_FAILED"

    def __init__(self, message: str):
        super().__init__(message=message)


class DeleteError(TallyException):
    """Raised inside the image store only; folded into a False return there."""
    http_status = status.HTTP_502_BAD_GATEWAY
    code = "DELETE_FAILED"

    def __init__(self, public_id: str, reason: str):
        super().__init__(
            message=f"Could not delete image {public_id!r}: {reason}",
            details={"public_id": public_id},
        )


class InvalidFieldError(TallyException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str):
        super().__init__(
            message=message,
            details={"errors": [{"field": field, "message": message, "type": "value_error"}]},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def tally_exception_handler(request: Request, exc: TallyException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
