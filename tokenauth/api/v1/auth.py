"""
Authentication endpoints.
"""

from fastapi import APIRouter, status

from tokenauth.api.deps import CurrentUser, Identity, RefreshGrant
from tokenauth.kernel.identity.jwt import TokenPair
from tokenauth.schemas.auth import Credentials, TokenResponse
from tokenauth.schemas.common import ErrorResponse, SuccessResponse, ValidationErrorResponse

router = APIRouter()


def _token_response(token_pair: TokenPair) -> TokenResponse:
    return TokenResponse(
        access_token=token_pair.access_token,
        refresh_token=token_pair.refresh_token,
        token_type=token_pair.token_type,
        expires_in=token_pair.expires_in,
    )


@router.post(
    "/local/signup",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_409_CONFLICT: {"model": ErrorResponse},
        status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ValidationErrorResponse},
    },
)
async def sign_up(data: Credentials, identity: Identity):
    """
    Register a new account.

    Returns access and refresh tokens; the account starts with an active session.
    """
    token_pair = await identity.sign_up(email=data.email, password=data.password)
    return _token_response(token_pair)


@router.post(
    "/local/signin",
    response_model=TokenResponse,
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ValidationErrorResponse},
    },
)
async def sign_in(data: Credentials, identity: Identity):
    """
    Authenticate with email and password.

    Replaces any previous session for the account.
    """
    token_pair = await identity.sign_in(email=data.email, password=data.password)
    return _token_response(token_pair)


@router.post("/logout", response_model=SuccessResponse)
async def log_out(user: CurrentUser, identity: Identity):
    """End the session of the access token's owner."""
    await identity.log_out(user.user_id)
    return SuccessResponse(message="Logged out successfully")


@router.post(
    "/refresh",
    response_model=TokenResponse,
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
    },
)
async def refresh(grant: RefreshGrant, identity: Identity):
    """
    Exchange the refresh token (sent as the bearer credential) for a new pair.

    Implements refresh token rotation - the presented token is invalidated.
    """
    token_pair = await identity.refresh(grant.claims.user_id, grant.token)
    return _token_response(token_pair)
