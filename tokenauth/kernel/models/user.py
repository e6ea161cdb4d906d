"""
User model for credential and session state.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tokenauth.kernel.models.base import Base, TimestampMixin, generate_uuid


class SessionState(str, Enum):
    """Per-user session state derived from the stored refresh-token hash."""
    NO_SESSION = "no_session"
    ACTIVE_SESSION = "active_session"


class User(Base, TimestampMixin):
    """User account model.

    ``refresh_token_hash`` holds the argon2 digest of the single live refresh
    token, or NULL when the user has no session. ``session_changed_at`` records
    when that digest was last replaced or cleared.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    refresh_token_hash: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
    )
    # Stamped by every write that actually changes refresh_token_hash
    session_changed_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True,
        default=None,
    )

    @property
    def session_state(self) -> SessionState:
        if self.refresh_token_hash is None:
            return SessionState.NO_SESSION
        return SessionState.ACTIVE_SESSION

    def __repr__(self) -> str:
        return f"<User {self.id}>"
