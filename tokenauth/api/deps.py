"""
FastAPI dependencies for authentication and database sessions.
"""

from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tokenauth.database import async_session_maker
from tokenauth.kernel.identity.exceptions import InvalidTokenError
from tokenauth.kernel.identity.identity_service import IdentityService
from tokenauth.kernel.identity.jwt import TokenClaims, verify_access_token, verify_refresh_token
from tokenauth.kernel.store.sql import SqlCredentialStore


# Security scheme
security = HTTPBearer(auto_error=False)

BearerCredentials = Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]


async def get_db() -> AsyncSession:
    """Dependency that yields database sessions."""
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_identity_service(db: DbSession) -> IdentityService:
    """Identity service bound to the request's session."""
    return IdentityService(SqlCredentialStore(db))


Identity = Annotated[IdentityService, Depends(get_identity_service)]


def _require_bearer(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if not credentials or not credentials.credentials:
        raise InvalidTokenError("Not authenticated")
    return credentials.credentials


async def get_access_claims(credentials: BearerCredentials) -> TokenClaims:
    """Claims of a valid access token, or 401."""
    token = _require_bearer(credentials)
    return verify_access_token(token)


@dataclass(frozen=True)
class RefreshCredentials:
    """A signature-checked refresh token and its claims."""

    claims: TokenClaims
    token: str


async def get_refresh_credentials(credentials: BearerCredentials) -> RefreshCredentials:
    """Claims and raw value of a valid refresh token, or 401."""
    token = _require_bearer(credentials)
    claims = verify_refresh_token(token)
    return RefreshCredentials(claims=claims, token=token)


CurrentUser = Annotated[TokenClaims, Depends(get_access_claims)]
RefreshGrant = Annotated[RefreshCredentials, Depends(get_refresh_credentials)]
