"""
Identity Core - credential verification and refresh-token rotation.
"""

from tokenauth.kernel.identity.exceptions import (
    AuthError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    InvalidTokenError,
    UnavailableError,
)
from tokenauth.kernel.identity.password import SecretHasher, hash_secret, verify_secret
from tokenauth.kernel.identity.jwt import (
    JWTManager,
    TokenKeys,
    TokenKind,
    TokenPair,
    TokenClaims,
    verify_access_token,
    verify_refresh_token,
)
from tokenauth.kernel.identity.identity_service import IdentityService

__all__ = [
    "AuthError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "InvalidTokenError",
    "UnavailableError",
    "SecretHasher",
    "hash_secret",
    "verify_secret",
    "JWTManager",
    "TokenKeys",
    "TokenKind",
    "TokenPair",
    "TokenClaims",
    "verify_access_token",
    "verify_refresh_token",
    "IdentityService",
]
