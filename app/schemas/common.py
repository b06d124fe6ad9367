"""
Shared schema primitives used across the API.
"""
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Standard error envelope returned for all 4xx/5xx responses."""
    model_config = ConfigDict(from_attributes=True)

    code: str
    message: str
    details: Optional[dict[str, Any]] = None


# Reused in the `responses=` table of every router.
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    403: {"model": ErrorResponse, "description": "Requester does not own the entry."},
    404: {"model": ErrorResponse, "description": "Referenced user / entry does not exist."},
    422: {"model": ErrorResponse, "description": "Validation error."},
}


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
