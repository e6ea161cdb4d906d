"""
Kernel Data Models

SQLAlchemy models for persisted credentials and session state.
"""

from tokenauth.kernel.models.base import Base, TimestampMixin, generate_uuid
from tokenauth.kernel.models.user import User, SessionState

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    # User
    "User",
    "SessionState",
]
