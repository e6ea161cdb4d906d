"""
SQLAlchemy implementation of the credential store.
"""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from tokenauth.kernel.identity.exceptions import ConflictError, UnavailableError
from tokenauth.kernel.models.user import User
from tokenauth.logging_config import get_logger

logger = get_logger(__name__)


class SqlCredentialStore:
    """
    Credential store backed by an async SQLAlchemy session.

    Every write commits on its own, so a conditional update is settled by the
    database row lock before the call returns.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _connection_guard(self, operation: str) -> AsyncIterator[None]:
        """Translate connectivity failures into UnavailableError."""
        try:
            yield
        except IntegrityError:
            raise
        except (OperationalError, InterfaceError, OSError) as e:
            logger.warning(
                "Credential store unavailable",
                extra={"operation": operation, "error": type(e).__name__},
            )
            raise UnavailableError() from e
        except DBAPIError as e:
            if e.connection_invalidated:
                logger.warning(
                    "Credential store connection invalidated",
                    extra={"operation": operation},
                )
                raise UnavailableError() from e
            raise

    async def find_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        query = (
            select(User)
            .where(User.email == email)
            .execution_options(populate_existing=True)
        )
        async with self._connection_guard("find_by_email"):
            result = await self.session.execute(query)
            return result.scalar_one_or_none()

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get a user by ID."""
        query = (
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        async with self._connection_guard("find_by_id"):
            result = await self.session.execute(query)
            return result.scalar_one_or_none()

    async def create(self, email: str, password_hash: str) -> User:
        """
        Insert a new user.

        Raises:
            ConflictError: If the email is already registered
        """
        user = User(email=email, password_hash=password_hash)
        async with self._connection_guard("create"):
            self.session.add(user)
            try:
                await self.session.commit()
            except IntegrityError as e:
                await self.session.rollback()
                raise ConflictError() from e
        return user

    async def _write_refresh_hash(self, condition, new_hash: Optional[str], operation: str) -> bool:
        stmt = (
            update(User)
            .where(condition)
            .values(
                refresh_token_hash=new_hash,
                session_changed_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        async with self._connection_guard(operation):
            result = await self.session.execute(stmt)
            await self.session.commit()
        return result.rowcount == 1

    async def update_refresh_hash(
        self,
        user_id: uuid.UUID,
        expected_hash: Optional[str],
        new_hash: Optional[str],
    ) -> bool:
        """Conditionally replace the refresh-token hash (compare-and-swap)."""
        if expected_hash is None:
            matches = User.refresh_token_hash.is_(None)
        else:
            matches = User.refresh_token_hash == expected_hash
        return await self._write_refresh_hash(
            (User.id == user_id) & matches, new_hash, "update_refresh_hash"
        )

    async def set_refresh_hash(self, user_id: uuid.UUID, new_hash: str) -> bool:
        """Overwrite the refresh-token hash."""
        return await self._write_refresh_hash(User.id == user_id, new_hash, "set_refresh_hash")

    async def clear_refresh_hash(self, user_id: uuid.UUID) -> bool:
        """Clear the refresh-token hash if set."""
        return await self._write_refresh_hash(
            (User.id == user_id) & User.refresh_token_hash.is_not(None),
            None,
            "clear_refresh_hash",
        )
