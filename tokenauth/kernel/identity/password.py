"""
Secret hashing using argon2id.

Used for both passwords and refresh-token fingerprints. Every digest embeds
its own random salt, so hashing the same input twice yields different digests.
"""

from functools import lru_cache
from typing import Optional

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError

from tokenauth.config import get_settings


class SecretHasher:
    """One-way hash and verify service for secrets."""

    def __init__(
        self,
        time_cost: Optional[int] = None,
        memory_cost: Optional[int] = None,
        parallelism: Optional[int] = None,
    ):
        if time_cost is None or memory_cost is None or parallelism is None:
            settings = get_settings()
            time_cost = time_cost or settings.argon2_time_cost
            memory_cost = memory_cost or settings.argon2_memory_cost
            parallelism = parallelism or settings.argon2_parallelism
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )

    def hash(self, plaintext: str) -> str:
        """
        Hash a secret.

        Args:
            plaintext: Secret to hash (password or raw refresh token)

        Returns:
            Encoded argon2id digest with embedded salt and parameters
        """
        return self._hasher.hash(plaintext)

    def verify(self, digest: Optional[str], plaintext: str) -> bool:
        """
        Verify a secret against a stored digest.

        Never raises: a mismatch, an empty digest or a malformed digest all
        return False.
        """
        if not digest:
            return False
        try:
            return self._hasher.verify(digest, plaintext)
        except (VerificationError, InvalidHashError, UnicodeEncodeError):
            # Non-ASCII digests fail to encode before argon2 can reject them
            return False


@lru_cache
def get_secret_hasher() -> SecretHasher:
    """Get the hasher configured from settings."""
    return SecretHasher()


# Convenience functions
def hash_secret(plaintext: str) -> str:
    """Hash a secret."""
    return get_secret_hasher().hash(plaintext)


def verify_secret(digest: Optional[str], plaintext: str) -> bool:
    """Verify a secret."""
    return get_secret_hasher().verify(digest, plaintext)
