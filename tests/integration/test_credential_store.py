"""Integration tests for the SQL credential store."""

import uuid

import pytest

from tokenauth.database import create_engine, create_session_maker
from tokenauth.kernel.identity.exceptions import ConflictError, UnavailableError
from tokenauth.kernel.models.user import SessionState
from tokenauth.kernel.store.protocol import CredentialStore
from tokenauth.kernel.store.sql import SqlCredentialStore


class TestSqlCredentialStore:
    """Tests for SqlCredentialStore against SQLite."""

    def test_satisfies_protocol(self, store: SqlCredentialStore):
        assert isinstance(store, CredentialStore)

    async def test_create_and_find(self, store: SqlCredentialStore):
        user = await store.create("alice@example.com", "$argon2id$digest")

        by_email = await store.find_by_email("alice@example.com")
        by_id = await store.find_by_id(user.id)

        assert by_email is not None and by_email.id == user.id
        assert by_id is not None and by_id.email == "alice@example.com"
        assert by_id.session_state is SessionState.NO_SESSION

    async def test_missing_user_is_none(self, store: SqlCredentialStore):
        assert await store.find_by_email("nobody@example.com") is None
        assert await store.find_by_id(uuid.uuid4()) is None

    async def test_duplicate_email_conflicts(self, store: SqlCredentialStore):
        await store.create("alice@example.com", "digest-1")

        with pytest.raises(ConflictError):
            await store.create("alice@example.com", "digest-2")

        # The session stays usable after the failed insert
        assert await store.find_by_email("alice@example.com") is not None

    async def test_compare_and_swap(self, store: SqlCredentialStore):
        user = await store.create("alice@example.com", "digest")

        assert await store.update_refresh_hash(user.id, None, "h1") is True
        assert await store.update_refresh_hash(user.id, None, "h2") is False
        assert await store.update_refresh_hash(user.id, "stale", "h2") is False
        assert await store.update_refresh_hash(user.id, "h1", "h2") is True

        reloaded = await store.find_by_id(user.id)
        assert reloaded.refresh_token_hash == "h2"

    async def test_compare_and_swap_unknown_user(self, store: SqlCredentialStore):
        assert await store.update_refresh_hash(uuid.uuid4(), None, "h1") is False

    async def test_set_overwrites_any_value(self, store: SqlCredentialStore):
        user = await store.create("alice@example.com", "digest")

        assert await store.set_refresh_hash(user.id, "h1") is True
        assert await store.set_refresh_hash(user.id, "h2") is True

        reloaded = await store.find_by_id(user.id)
        assert reloaded.refresh_token_hash == "h2"

    async def test_clear_is_conditional(self, store: SqlCredentialStore):
        user = await store.create("alice@example.com", "digest")
        await store.set_refresh_hash(user.id, "h1")

        assert await store.clear_refresh_hash(user.id) is True
        assert await store.clear_refresh_hash(user.id) is False

        reloaded = await store.find_by_id(user.id)
        assert reloaded.session_state is SessionState.NO_SESSION

    async def test_session_change_is_stamped(self, store: SqlCredentialStore):
        user = await store.create("alice@example.com", "digest")
        assert (await store.find_by_id(user.id)).session_changed_at is None

        await store.set_refresh_hash(user.id, "h1")
        opened = (await store.find_by_id(user.id)).session_changed_at
        assert opened is not None

        assert await store.update_refresh_hash(user.id, "stale", "h2") is False
        assert (await store.find_by_id(user.id)).session_changed_at == opened

        await store.clear_refresh_hash(user.id)
        cleared = (await store.find_by_id(user.id)).session_changed_at
        assert cleared >= opened

        assert await store.clear_refresh_hash(user.id) is False
        assert (await store.find_by_id(user.id)).session_changed_at == cleared

    async def test_writes_visible_to_other_sessions(self, session_maker):
        async with session_maker() as writer_session, session_maker() as reader_session:
            writer = SqlCredentialStore(writer_session)
            reader = SqlCredentialStore(reader_session)
            user = await writer.create("alice@example.com", "digest")
            await reader.find_by_id(user.id)

            await writer.set_refresh_hash(user.id, "h1")

            seen = await reader.find_by_id(user.id)
            assert seen.refresh_token_hash == "h1"

    async def test_unreachable_database_is_unavailable(self, tmp_path):
        engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'db.sqlite'}")
        try:
            async with create_session_maker(engine)() as session:
                with pytest.raises(UnavailableError):
                    await SqlCredentialStore(session).find_by_email("alice@example.com")
        finally:
            await engine.dispose()
