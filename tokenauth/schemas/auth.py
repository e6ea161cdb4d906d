"""
Authentication schemas.
"""

from pydantic import BaseModel, EmailStr, Field


class Credentials(BaseModel):
    """Email/password pair for sign-up and sign-in."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    """Authentication token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
