"""
Pytest fixtures for tokenauth tests.
"""

import os

# Settings are read once per process; set them before tokenauth is imported.
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret-0123456789abcdefghijklmnop")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret-0123456789abcdefghijklmnop")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("ARGON2_PARALLELISM", "1")

from typing import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tokenauth.config import get_settings
from tokenauth.database import create_engine, create_session_maker
from tokenauth.kernel.identity.identity_service import IdentityService
from tokenauth.kernel.identity.jwt import JWTManager, TokenKeys
from tokenauth.kernel.identity.password import SecretHasher
from tokenauth.kernel.models.base import Base
from tokenauth.kernel.store.sql import SqlCredentialStore


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Create a file-backed SQLite engine so separate sessions use separate connections."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'tokenauth-test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    return create_session_maker(db_engine)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def store(db_session: AsyncSession) -> SqlCredentialStore:
    return SqlCredentialStore(db_session)


@pytest.fixture
def token_keys() -> TokenKeys:
    """Signing keys matching the application settings."""
    return TokenKeys.from_settings(get_settings())


@pytest.fixture
def jwt_manager(token_keys: TokenKeys) -> JWTManager:
    return JWTManager(token_keys)


@pytest.fixture
def hasher() -> SecretHasher:
    """Argon2 hasher with minimal cost so tests stay fast."""
    return SecretHasher(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture
def identity_service(
    store: SqlCredentialStore,
    jwt_manager: JWTManager,
    hasher: SecretHasher,
) -> IdentityService:
    return IdentityService(store, jwt_manager=jwt_manager, hasher=hasher)


@pytest_asyncio.fixture
async def service_factory(
    session_maker,
    jwt_manager: JWTManager,
    hasher: SecretHasher,
) -> AsyncGenerator[Callable[[], Awaitable[IdentityService]], None]:
    """Build identity services that each own a separate session, like concurrent requests."""
    sessions: list[AsyncSession] = []

    async def make() -> IdentityService:
        session = session_maker()
        sessions.append(session)
        return IdentityService(
            SqlCredentialStore(session),
            jwt_manager=jwt_manager,
            hasher=hasher,
        )

    yield make

    for session in sessions:
        await session.close()
