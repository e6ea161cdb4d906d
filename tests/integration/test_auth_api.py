"""Integration tests for auth API endpoints."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt

from tokenauth.api.deps import get_db
from tokenauth.kernel.identity.jwt import TokenKeys
from tokenauth.main import app

AUTH = "/api/v1/auth"
CREDENTIALS = {"email": "alice@example.com", "password": "pw123"}


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(session_maker):
    """Async HTTP client with database sessions bound to the test database."""

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def _sign_up(client: AsyncClient, credentials: dict = CREDENTIALS) -> dict:
    response = await client.post(f"{AUTH}/local/signup", json=credentials)
    assert response.status_code == 201
    return response.json()


class TestSignUpAndSignIn:
    """Tests for /local/signup and /local/signin."""

    async def test_sign_up_returns_tokens(self, client: AsyncClient):
        response = await client.post(f"{AUTH}/local/signup", json=CREDENTIALS)

        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 15 * 60
        assert data["access_token"] and data["refresh_token"]
        assert "X-Request-ID" in response.headers

    async def test_duplicate_sign_up_conflicts(self, client: AsyncClient):
        await _sign_up(client)

        response = await client.post(f"{AUTH}/local/signup", json=CREDENTIALS)

        assert response.status_code == 409

    async def test_invalid_email_rejected(self, client: AsyncClient):
        response = await client.post(
            f"{AUTH}/local/signup",
            json={"email": "not-an-email", "password": "pw123"},
        )

        assert response.status_code == 422
        body = response.json()
        assert body["detail"] == "Validation error"
        assert body["errors"][0]["field"] == "body.email"
        assert body["request_id"] == response.headers["X-Request-ID"]
        assert "pw123" not in response.text

    async def test_empty_password_rejected(self, client: AsyncClient):
        response = await client.post(
            f"{AUTH}/local/signup",
            json={"email": "alice@example.com", "password": ""},
        )

        assert response.status_code == 422

    async def test_sign_in_success(self, client: AsyncClient):
        await _sign_up(client)

        response = await client.post(f"{AUTH}/local/signin", json=CREDENTIALS)

        assert response.status_code == 200
        assert "refresh_token" in response.json()

    async def test_sign_in_failures_look_the_same(self, client: AsyncClient):
        await _sign_up(client)

        wrong_password = await client.post(
            f"{AUTH}/local/signin",
            json={"email": "alice@example.com", "password": "wrong"},
        )
        unknown_email = await client.post(
            f"{AUTH}/local/signin",
            json={"email": "bob@example.com", "password": "pw123"},
        )

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json()
        assert wrong_password.headers["WWW-Authenticate"] == "Bearer"


class TestRefresh:
    """Tests for /refresh."""

    async def test_rotation_and_replay(self, client: AsyncClient):
        t1 = await _sign_up(client)

        first = await client.post(f"{AUTH}/refresh", headers=_bearer(t1["refresh_token"]))
        assert first.status_code == 200
        t2 = first.json()

        replay = await client.post(f"{AUTH}/refresh", headers=_bearer(t1["refresh_token"]))
        assert replay.status_code == 403

        again = await client.post(f"{AUTH}/refresh", headers=_bearer(t2["refresh_token"]))
        assert again.status_code == 200

    async def test_missing_token_unauthorized(self, client: AsyncClient):
        response = await client.post(f"{AUTH}/refresh")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_access_token_cannot_refresh(self, client: AsyncClient):
        tokens = await _sign_up(client)

        response = await client.post(f"{AUTH}/refresh", headers=_bearer(tokens["access_token"]))

        assert response.status_code == 401

    async def test_expired_refresh_token_unauthorized(self, client: AsyncClient, token_keys: TokenKeys):
        await _sign_up(client)
        issued = datetime.now(timezone.utc) - timedelta(days=8)
        token = jwt.encode(
            {
                "sub": str(uuid.uuid4()),
                "email": "alice@example.com",
                "iat": issued,
                "exp": issued + token_keys.refresh_ttl,
                "jti": str(uuid.uuid4()),
                "type": "refresh",
            },
            token_keys.refresh_secret,
            algorithm=token_keys.algorithm,
        )

        response = await client.post(f"{AUTH}/refresh", headers=_bearer(token))

        assert response.status_code == 401

    async def test_garbage_token_unauthorized(self, client: AsyncClient):
        response = await client.post(f"{AUTH}/refresh", headers=_bearer("not-a-jwt"))

        assert response.status_code == 401


class TestLogOut:
    """Tests for /logout."""

    async def test_log_out_invalidates_refresh_token(self, client: AsyncClient):
        tokens = await _sign_up(client)

        response = await client.post(f"{AUTH}/logout", headers=_bearer(tokens["access_token"]))
        assert response.status_code == 200
        assert response.json()["message"]

        refresh = await client.post(f"{AUTH}/refresh", headers=_bearer(tokens["refresh_token"]))
        assert refresh.status_code == 403

    async def test_log_out_twice_succeeds(self, client: AsyncClient):
        tokens = await _sign_up(client)

        await client.post(f"{AUTH}/logout", headers=_bearer(tokens["access_token"]))
        response = await client.post(f"{AUTH}/logout", headers=_bearer(tokens["access_token"]))

        assert response.status_code == 200

    async def test_log_out_requires_access_token(self, client: AsyncClient):
        tokens = await _sign_up(client)

        anonymous = await client.post(f"{AUTH}/logout")
        with_refresh = await client.post(f"{AUTH}/logout", headers=_bearer(tokens["refresh_token"]))

        assert anonymous.status_code == 401
        assert with_refresh.status_code == 401


class TestMisc:
    """Health and request correlation."""

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_request_id_is_echoed(self, client: AsyncClient):
        response = await client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    async def test_malformed_request_id_replaced(self, client: AsyncClient):
        response = await client.get("/health", headers={"X-Request-ID": "bad id with spaces!"})

        assert response.headers["X-Request-ID"] != "bad id with spaces!"
