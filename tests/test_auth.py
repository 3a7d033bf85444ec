"""Tests for the /auth routes and role selection."""
from sqlalchemy import select

from ideahub.db.models import User


class TestRegisterAndLogin:

    async def test_register_creates_user_with_profile(self, client, query):
        resp = await client.post("/auth/register", json={"email": "Ada@Example.com", "password": "secret1"})
        assert resp.status_code == 201
        body = resp.json()
        assert body["access_token"] and body["refresh_token"]

        users = await query(select(User))
        assert len(users) == 1
        assert users[0].email == "ada@example.com"
        assert users[0].username == "ada"
        assert users[0].role is None
        assert users[0].is_premium is False

    async def test_register_rejects_duplicate_email(self, client):
        payload = {"email": "dup@example.com", "password": "secret1"}
        assert (await client.post("/auth/register", json=payload)).status_code == 201
        resp = await client.post("/auth/register", json=payload)
        assert resp.status_code == 400

    async def test_register_rejects_short_password(self, client):
        resp = await client.post("/auth/register", json={"email": "a@example.com", "password": "123"})
        assert resp.status_code == 422

    async def test_login_with_valid_and_invalid_password(self, client):
        await client.post("/auth/register", json={"email": "bob@example.com", "password": "hunter22"})

        ok = await client.post("/auth/login", json={"email": "bob@example.com", "password": "hunter22"})
        assert ok.status_code == 200
        assert "access_token" in ok.json()

        bad = await client.post("/auth/login", json={"email": "bob@example.com", "password": "wrong-pass"})
        assert bad.status_code == 401


class TestSession:

    async def test_me_requires_auth(self, client):
        resp = await client.get("/auth/me")
        assert resp.status_code == 401

    async def test_me_reports_missing_role_until_selected(self, client):
        reg = await client.post("/auth/register", json={"email": "new@example.com", "password": "secret1"})
        client.cookies.clear()
        headers = {"Authorization": f"Bearer {reg.json()['access_token']}"}

        me = await client.get("/auth/me", headers=headers)
        assert me.status_code == 200
        assert me.json()["needs_role"] is True
        assert me.json()["user"]["email"] == "new@example.com"

        role = await client.put("/users/me/role", json={"role": "investor"}, headers=headers)
        assert role.status_code == 200
        assert role.json()["role"] == "investor"

        me = await client.get("/auth/me", headers=headers)
        assert me.json()["needs_role"] is False

    async def test_invalid_role_is_rejected(self, client, make_user):
        _, headers = await make_user(role=None)
        resp = await client.put("/users/me/role", json={"role": "admin"}, headers=headers)
        assert resp.status_code == 422

    async def test_cookie_session_and_logout(self, client):
        await client.post("/auth/register", json={"email": "c@example.com", "password": "secret1"})
        # register sets the auth cookies on the client
        assert (await client.get("/auth/me")).status_code == 200

        out = await client.post("/auth/logout")
        assert out.status_code == 200
        client.cookies.clear()
        assert (await client.get("/auth/me")).status_code == 401

    async def test_refresh_issues_new_tokens(self, client):
        reg = await client.post("/auth/register", json={"email": "r@example.com", "password": "secret1"})
        refresh = reg.json()["refresh_token"]
        client.cookies.clear()

        resp = await client.post("/auth/refresh", params={"refresh_token": refresh})
        assert resp.status_code == 200
        assert resp.json()["access_token"]

        bad = await client.post("/auth/refresh", params={"refresh_token": "garbage"})
        assert bad.status_code == 401
