"""
Wonder Journal Backend — Auth, Health and Error Envelope Route Tests
======================================================================

What:  End-to-end tests for /auth/*, /health and the shared error body.
How:   httpx AsyncClient over ASGITransport against a fresh SQLite schema.

What we test:
    ✅ Login returns a token carrying the username
    ✅ Wrong password / unknown user → 401
    ✅ Register → 201 token; duplicate username → 400
    ✅ Invalid bodies → 400 with one message per field
    ✅ Error responses use {"error": {"message", "status"}} everywhere
"""

import pytest

from wonder_journal.helpers.security import decode_token


class TestLogin:

    @pytest.mark.asyncio
    async def test_login(self, seed, test_client):
        response = await test_client.post(
            "/auth/token", json={"username": "u1", "password": "password1"}
        )
        assert response.status_code == 200
        payload = decode_token(response.json()["token"])
        assert payload["username"] == "u1"
        assert payload["isAdmin"] is False

    @pytest.mark.asyncio
    async def test_login_admin_claim(self, seed, test_client):
        response = await test_client.post(
            "/auth/token", json={"username": "admin", "password": "password3"}
        )
        assert decode_token(response.json()["token"])["isAdmin"] is True

    @pytest.mark.asyncio
    async def test_wrong_password(self, seed, test_client):
        response = await test_client.post(
            "/auth/token", json={"username": "u1", "password": "nope"}
        )
        assert response.status_code == 401
        assert response.json()["error"] == {
            "message": "Invalid username/password",
            "status": 401,
        }

    @pytest.mark.asyncio
    async def test_unknown_user(self, seed, test_client):
        response = await test_client.post(
            "/auth/token", json={"username": "ghost", "password": "password1"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_field(self, seed, test_client):
        response = await test_client.post("/auth/token", json={"username": "u1"})
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["status"] == 400
        assert isinstance(error["message"], list)
        assert error["message"][0].startswith("password")


class TestRegister:

    NEW_USER = {
        "username": "new",
        "password": "password",
        "firstName": "First",
        "lastName": "Last",
        "email": "new@email.com",
    }

    @pytest.mark.asyncio
    async def test_register(self, db, test_client):
        response = await test_client.post("/auth/register", json=self.NEW_USER)
        assert response.status_code == 201
        assert decode_token(response.json()["token"])["username"] == "new"

        login = await test_client.post(
            "/auth/token", json={"username": "new", "password": "password"}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_register_cannot_make_admin(self, db, test_client):
        response = await test_client.post(
            "/auth/register", json={**self.NEW_USER, "isAdmin": True}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_username(self, seed, test_client):
        response = await test_client.post(
            "/auth/register", json={**self.NEW_USER, "username": "u1"}
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Duplicate username: u1"

    @pytest.mark.asyncio
    async def test_invalid_fields(self, db, test_client):
        response = await test_client.post(
            "/auth/register",
            json={**self.NEW_USER, "email": "not-an-email", "password": "abc"},
        )
        assert response.status_code == 400
        messages = response.json()["error"]["message"]
        assert len(messages) == 2
        assert any(m.startswith("email") for m in messages)
        assert any(m.startswith("password") for m in messages)


class TestEnvelopeAndHealth:

    @pytest.mark.asyncio
    async def test_unknown_route(self, test_client):
        response = await test_client.get("/nowhere")
        assert response.status_code == 404
        assert response.json()["error"]["status"] == 404

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/nowhere", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"
        assert response.json()["request_id"] == "abc123"

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
