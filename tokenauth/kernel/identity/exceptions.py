"""Authentication error taxonomy.

Every error is terminal for the request. The API layer renders them through a
single exception handler using ``status_code`` and ``detail``; messages never
carry passwords or raw tokens.
"""

from __future__ import annotations

from fastapi import status


class AuthError(Exception):
    """Base exception for authentication errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    detail: str = "Authentication error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.detail
        super().__init__(self.detail)


class UnauthorizedError(AuthError):
    """Raised when sign-in credentials are rejected.

    The same error covers an unknown email and a wrong password.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid email or password"


class ForbiddenError(AuthError):
    """Raised when a refresh is refused (no session, stale token, lost race)."""

    status_code = status.HTTP_403_FORBIDDEN
    detail = "Access denied"


class ConflictError(AuthError):
    """Raised when an account already exists for an email."""

    status_code = status.HTTP_409_CONFLICT
    detail = "Email already registered"


class InvalidTokenError(AuthError):
    """Raised when a token is malformed, wrongly signed, of the wrong kind or expired."""

    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid or expired token"


class UnavailableError(AuthError):
    """Raised when the credential store cannot be reached."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Credential store unavailable"
