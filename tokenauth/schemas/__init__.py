"""
Pydantic schemas for API request/response validation.
"""

from tokenauth.schemas.common import (
    ErrorResponse,
    FieldError,
    ValidationErrorResponse,
    SuccessResponse,
    HealthResponse,
)
from tokenauth.schemas.auth import Credentials, TokenResponse

__all__ = [
    # Common
    "ErrorResponse",
    "FieldError",
    "ValidationErrorResponse",
    "SuccessResponse",
    "HealthResponse",
    # Auth
    "Credentials",
    "TokenResponse",
]
