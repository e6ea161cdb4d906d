"""Credential store protocol definition.

The identity service depends only on this protocol. Each operation is atomic
on its own; the refresh-hash writes are conditional so that concurrent
rotations are decided by the store, not by the caller.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tokenauth.kernel.models.user import User


@runtime_checkable
class CredentialStore(Protocol):
    """Protocol for user credential persistence.

    Implementations raise ``ConflictError`` from ``create`` when the email is
    taken and ``UnavailableError`` when the backend cannot be reached.
    """

    async def find_by_email(self, email: str) -> Optional[User]:
        """Look up a user by normalized email."""
        ...

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Look up a user by id."""
        ...

    async def create(self, email: str, password_hash: str) -> User:
        """Create a user with no active session.

        Uniqueness of ``email`` is enforced by the backend, never by a
        preceding lookup.
        """
        ...

    async def update_refresh_hash(
        self,
        user_id: uuid.UUID,
        expected_hash: Optional[str],
        new_hash: Optional[str],
    ) -> bool:
        """Compare-and-swap the stored refresh-token hash.

        Succeeds only if the stored value still equals ``expected_hash``
        (``None`` meaning no session). Returns False on mismatch.
        """
        ...

    async def set_refresh_hash(self, user_id: uuid.UUID, new_hash: str) -> bool:
        """Overwrite the stored refresh-token hash regardless of its value."""
        ...

    async def clear_refresh_hash(self, user_id: uuid.UUID) -> bool:
        """Clear the stored hash if one is present. Returns whether it was."""
        ...
