from __future__ import annotations
import uuid

import httpx
import pytest
from httpx import AsyncClient

from app.main import app
from app.security import decode_token
from helpers import auth_headers, make_user


def _client() -> AsyncClient:
    return AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


async def _register_and_login(ac: AsyncClient, email: str = "Tony@Example.com") -> tuple[str, dict]:
    r = await ac.post("/auth/register", json={"email": email, "password": "hardflip900", "display_name": "birdman"})
    assert r.status_code == 201, r.text
    uid = r.json()["id"]
    r = await ac.post("/auth/login", json={"email": email, "password": "hardflip900"})
    assert r.status_code == 200, r.text
    return uid, r.json()


@pytest.mark.asyncio
async def test_register_login_me():
    async with _client() as ac:
        uid, tokens = await _register_and_login(ac)
        claims = decode_token(tokens["access"])
        assert claims["sub"] == uid
        assert claims["type"] == "access"
        assert claims["roles"] == []

        r = await ac.get("/auth/me", headers={"Authorization": f"Bearer {tokens['access']}"})
        assert r.status_code == 200
        me = r.json()
        assert me["email"] == "tony@example.com"
        assert me["display_name"] == "birdman"
        assert me["total_points"] == 0
        assert me["stats"] == {"games_played": 0, "games_won": 0, "games_lost": 0,
                               "tricks_landed": 0, "tricks_missed": 0}


@pytest.mark.asyncio
async def test_duplicate_email_and_bad_password():
    async with _client() as ac:
        await _register_and_login(ac)
        r = await ac.post("/auth/register", json={"email": "tony@example.com", "password": "another-one"})
        assert r.status_code == 409
        assert r.json()["error"]["message"] == "Email already registered"

        r = await ac.post("/auth/login", json={"email": "tony@example.com", "password": "wrong-pass"})
        assert r.status_code == 401
        assert r.json()["error"] == {"code": "unauthenticated", "message": "Invalid credentials"}

        r = await ac.post("/auth/register", json={"email": "short@example.com", "password": "short"})
        assert r.status_code == 422


@pytest.mark.asyncio
async def test_refresh_token_is_not_an_access_token():
    async with _client() as ac:
        _, tokens = await _register_and_login(ac)
        r = await ac.get("/auth/me", headers={"Authorization": f"Bearer {tokens['refresh']}"})
        assert r.status_code == 401
        assert r.json()["error"]["message"] == "Wrong token type"

        r = await ac.post("/auth/refresh", headers={"Authorization": f"Bearer {tokens['access']}"})
        assert r.status_code == 401

        r = await ac.post("/auth/refresh")
        assert r.status_code == 401


@pytest.mark.asyncio
async def test_role_grant_shows_up_after_refresh():
    admin = await make_user(roles=["admin"])
    async with _client() as ac:
        uid, tokens = await _register_and_login(ac)
        user_hdrs = {"Authorization": f"Bearer {tokens['access']}"}
        assert (await ac.get("/submissions", headers=user_hdrs)).status_code == 403

        # only admins may grant
        r = await ac.post(f"/admin/users/{uid}/roles", json={"roles": ["mod"]}, headers=user_hdrs)
        assert r.status_code == 403

        r = await ac.post(f"/admin/users/{uid}/roles", json={"roles": ["mod", "mod"]},
                          headers=auth_headers(admin.id, ["admin"]))
        assert r.status_code == 200, r.text
        assert r.json()["roles"] == ["mod"]

        r = await ac.post(f"/admin/users/{uuid.uuid4()}/roles", json={"roles": ["mod"]},
                          headers=auth_headers(admin.id, ["admin"]))
        assert r.status_code == 404

        r = await ac.post("/auth/refresh", headers={"Authorization": f"Bearer {tokens['refresh']}"})
        assert r.status_code == 200
        fresh = r.json()["access"]
        assert decode_token(fresh)["roles"] == ["mod"]
        assert (await ac.get("/submissions", headers={"Authorization": f"Bearer {fresh}"})).status_code == 200


@pytest.mark.asyncio
async def test_public_profile():
    u = await make_user(display_name="gonz", total_points=120)
    async with _client() as ac:
        r = await ac.get(f"/users/{u.id}", headers=auth_headers(uuid.uuid4()))
        assert r.status_code == 200
        assert r.json()["display_name"] == "gonz"
        assert r.json()["total_points"] == 120

        r = await ac.get(f"/users/{uuid.uuid4()}", headers=auth_headers(uuid.uuid4()))
        assert r.status_code == 404
