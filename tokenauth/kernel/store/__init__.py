"""
Credential Store - persistence of users and their session fingerprint.
"""

from tokenauth.kernel.store.protocol import CredentialStore
from tokenauth.kernel.store.sql import SqlCredentialStore

__all__ = [
    "CredentialStore",
    "SqlCredentialStore",
]
