"""
JWT token issuing and verification.

Access and refresh tokens are signed with separate secrets, so a token of one
kind never verifies as the other.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from tokenauth.config import Settings, get_settings
from tokenauth.kernel.identity.exceptions import InvalidTokenError


class TokenKind(str, Enum):
    """The two token kinds."""
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenKeys:
    """Signing material and lifetimes, loaded once at startup."""

    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=7)

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("Token secrets must not be empty")
        if self.access_secret == self.refresh_secret:
            raise ValueError("Access and refresh tokens require distinct secrets")
        if self.access_ttl <= timedelta(0) or self.refresh_ttl <= timedelta(0):
            raise ValueError("Token lifetimes must be positive")

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenKeys":
        return cls(
            access_secret=settings.access_token_secret,
            refresh_secret=settings.refresh_token_secret,
            algorithm=settings.algorithm,
            access_ttl=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_ttl=timedelta(days=settings.refresh_token_expire_days),
        )

    def secret_for(self, kind: TokenKind) -> str:
        if kind is TokenKind.ACCESS:
            return self.access_secret
        return self.refresh_secret

    def ttl_for(self, kind: TokenKind) -> timedelta:
        if kind is TokenKind.ACCESS:
            return self.access_ttl
        return self.refresh_ttl


class TokenClaims(BaseModel):
    """Verified claims extracted from a token."""

    user_id: uuid.UUID
    email: str
    kind: TokenKind
    jti: str
    issued_at: datetime
    expires_at: datetime


class TokenPair(BaseModel):
    """Access and refresh token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # Seconds until access token expires


class JWTManager:
    """
    JWT token creation and verification.

    Handles access tokens (short-lived) and refresh tokens (long-lived).
    Stateless: never consults the credential store.
    """

    def __init__(self, keys: TokenKeys):
        self.keys = keys

    def _issue(self, kind: TokenKind, user_id: uuid.UUID, email: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "email": email,
            "iat": now,
            "exp": now + self.keys.ttl_for(kind),
            # Unique per token so two tokens minted in the same second differ
            "jti": str(uuid.uuid4()),
            "type": kind.value,
        }
        return jwt.encode(payload, self.keys.secret_for(kind), algorithm=self.keys.algorithm)

    def issue_access_token(self, user_id: uuid.UUID, email: str) -> str:
        """Create a signed access token."""
        return self._issue(TokenKind.ACCESS, user_id, email)

    def issue_refresh_token(self, user_id: uuid.UUID, email: str) -> str:
        """Create a signed refresh token."""
        return self._issue(TokenKind.REFRESH, user_id, email)

    def create_token_pair(self, user_id: uuid.UUID, email: str) -> TokenPair:
        """
        Create both access and refresh tokens.

        Args:
            user_id: User's unique identifier
            email: User's email

        Returns:
            TokenPair with the access token lifetime in seconds
        """
        return TokenPair(
            access_token=self.issue_access_token(user_id, email),
            refresh_token=self.issue_refresh_token(user_id, email),
            expires_in=int(self.keys.access_ttl.total_seconds()),
        )

    def verify(self, token: str, expected_kind: TokenKind) -> TokenClaims:
        """
        Verify and decode a token of the expected kind.

        Args:
            token: Encoded JWT
            expected_kind: Which secret the token must be signed with

        Returns:
            TokenClaims for a valid token

        Raises:
            InvalidTokenError: Bad structure, signature, expiry, claims or kind
        """
        try:
            payload = jwt.decode(
                token,
                self.keys.secret_for(expected_kind),
                algorithms=[self.keys.algorithm],
                options={
                    "require_exp": True,
                    "require_iat": True,
                    "require_sub": True,
                    "require_jti": True,
                },
            )
        except (JWTError, AttributeError, TypeError) as e:
            raise InvalidTokenError() from e

        if payload.get("type") != expected_kind.value:
            raise InvalidTokenError()

        try:
            return TokenClaims(
                user_id=payload["sub"],
                email=payload["email"],
                kind=expected_kind,
                jti=payload["jti"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError, OverflowError, ValidationError) as e:
            raise InvalidTokenError() from e


# Default manager instance
_jwt_manager: Optional[JWTManager] = None


def get_jwt_manager() -> JWTManager:
    """Get or create the default JWT manager."""
    global _jwt_manager
    if _jwt_manager is None:
        _jwt_manager = JWTManager(TokenKeys.from_settings(get_settings()))
    return _jwt_manager


# Convenience functions
def verify_access_token(token: str) -> TokenClaims:
    """Verify an access token."""
    return get_jwt_manager().verify(token, TokenKind.ACCESS)


def verify_refresh_token(token: str) -> TokenClaims:
    """Verify a refresh token."""
    return get_jwt_manager().verify(token, TokenKind.REFRESH)
