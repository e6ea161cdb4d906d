"""
Common schema types used across the API.
"""

from typing import Any, List, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    request_id: Optional[str] = None


class FieldError(BaseModel):
    """One failed field in a validation error."""

    field: str
    message: str
    type: str


class ValidationErrorResponse(BaseModel):
    """Request validation error response."""

    detail: str = "Validation error"
    errors: List[FieldError]
    request_id: Optional[str] = None


class SuccessResponse(BaseModel):
    """Standard success response."""

    message: str
    data: Optional[Any] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    database: str = "connected"
