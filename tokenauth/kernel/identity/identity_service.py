"""
Identity service: sign-up, sign-in, log-out and refresh-token rotation.

Each user is either in NO_SESSION (no stored refresh hash) or ACTIVE_SESSION
(exactly one live refresh token, stored as an argon2 digest). Sign-in and
refresh always mint a new refresh token and replace the stored digest; log-out
clears it.
"""

import asyncio
import uuid
from typing import Optional

from tokenauth.kernel.identity.exceptions import ForbiddenError, UnauthorizedError
from tokenauth.kernel.identity.jwt import JWTManager, TokenPair, get_jwt_manager
from tokenauth.kernel.identity.password import SecretHasher, get_secret_hasher
from tokenauth.kernel.models.user import SessionState, User
from tokenauth.kernel.store.protocol import CredentialStore
from tokenauth.logging_config import get_logger

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class IdentityService:
    """
    Service for credential verification and session management.

    Usage:
        service = IdentityService(SqlCredentialStore(session))
        tokens = await service.sign_in("alice@example.com", "pw123")
        tokens = await service.refresh(user_id, tokens.refresh_token)
    """

    def __init__(
        self,
        store: CredentialStore,
        jwt_manager: Optional[JWTManager] = None,
        hasher: Optional[SecretHasher] = None,
    ):
        self.store = store
        self.jwt_manager = jwt_manager or get_jwt_manager()
        self.hasher = hasher or get_secret_hasher()

    async def _hash(self, plaintext: str) -> str:
        # argon2 is CPU-bound; keep it off the event loop
        return await asyncio.to_thread(self.hasher.hash, plaintext)

    async def _verify(self, digest: Optional[str], plaintext: str) -> bool:
        return await asyncio.to_thread(self.hasher.verify, digest, plaintext)

    async def _open_session(self, user: User) -> TokenPair:
        """Issue a token pair and make its refresh token the only live one."""
        token_pair = self.jwt_manager.create_token_pair(user.id, user.email)
        refresh_hash = await self._hash(token_pair.refresh_token)
        await self.store.set_refresh_hash(user.id, refresh_hash)
        return token_pair

    async def sign_up(self, email: str, password: str) -> TokenPair:
        """
        Register a new user and open a session for them.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            The first token pair for the new account

        Raises:
            ConflictError: If the email is already registered
        """
        password_hash = await self._hash(password)
        user = await self.store.create(normalize_email(email), password_hash)
        token_pair = await self._open_session(user)

        logger.info("User signed up", extra={"event": "signed_up", "user_id": str(user.id)})
        return token_pair

    async def sign_in(self, email: str, password: str) -> TokenPair:
        """
        Authenticate with email and password.

        A successful sign-in replaces any existing session (last login wins).

        Raises:
            UnauthorizedError: Unknown email or wrong password, indistinguishably
        """
        user = await self.store.find_by_email(normalize_email(email))
        if user is None:
            logger.info(
                "Sign-in rejected",
                extra={"event": "sign_in_rejected", "reason": "unknown_email"},
            )
            raise UnauthorizedError()

        if not await self._verify(user.password_hash, password):
            logger.info(
                "Sign-in rejected",
                extra={"event": "sign_in_rejected", "user_id": str(user.id), "reason": "bad_password"},
            )
            raise UnauthorizedError()

        token_pair = await self._open_session(user)
        logger.info("User signed in", extra={"event": "signed_in", "user_id": str(user.id)})
        return token_pair

    async def log_out(self, user_id: uuid.UUID) -> bool:
        """
        End the user's session, if any.

        Best-effort and idempotent: never fails for a missing session.

        Returns:
            True if a session was cleared
        """
        cleared = await self.store.clear_refresh_hash(user_id)
        logger.info(
            "User logged out",
            extra={"event": "logged_out", "user_id": str(user_id), "session_cleared": cleared},
        )
        return cleared

    async def refresh(self, user_id: uuid.UUID, refresh_token: str) -> TokenPair:
        """
        Rotate the session: redeem the live refresh token for a new pair.

        The presented token becomes permanently unusable once this succeeds.

        Args:
            user_id: Subject of the presented (already signature-checked) token
            refresh_token: The raw refresh token

        Returns:
            A new token pair

        Raises:
            ForbiddenError: No such user, no session, token does not match the
                live one, or a concurrent rotation won the race
        """
        user = await self.store.find_by_id(user_id)
        if user is None or user.session_state is SessionState.NO_SESSION:
            logger.info(
                "Refresh rejected",
                extra={"event": "refresh_rejected", "user_id": str(user_id), "reason": "no_session"},
            )
            raise ForbiddenError()

        stored_hash = user.refresh_token_hash
        if not await self._verify(stored_hash, refresh_token):
            logger.info(
                "Refresh rejected",
                extra={"event": "refresh_rejected", "user_id": str(user_id), "reason": "token_mismatch"},
            )
            raise ForbiddenError()

        token_pair = self.jwt_manager.create_token_pair(user.id, user.email)
        new_hash = await self._hash(token_pair.refresh_token)
        if not await self.store.update_refresh_hash(user.id, stored_hash, new_hash):
            logger.info(
                "Refresh rejected",
                extra={"event": "refresh_rejected", "user_id": str(user_id), "reason": "lost_rotation_race"},
            )
            raise ForbiddenError()

        logger.info("Session refreshed", extra={"event": "refreshed", "user_id": str(user.id)})
        return token_pair
