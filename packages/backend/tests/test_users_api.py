"""User API tests — /users/me, PATCH /users and the 401 paths."""

import uuid
from datetime import timedelta

import pytest

from conftest import signup, unique_email
from shelf.auth.jwt import TokenIssuer
from shelf.main import app


@pytest.mark.asyncio
async def test_me(client):
    email = unique_email("me")
    headers = await signup(client, email)

    r = await client.get("/users/me", headers=headers)
    assert r.status_code == 200
    user = r.json()
    assert user["email"] == email
    assert "id" in user
    assert "password_hash" not in user


@pytest.mark.asyncio
async def test_me_without_token(client):
    r = await client.get("/users/me")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "header",
    ["Bearer invalid_token_here", "Token abc", "Bearer", "Basic dXNlcjpwYXNz"],
)
async def test_me_with_bad_header(client, header):
    r = await client.get("/users/me", headers={"Authorization": header})
    assert r.status_code == 401
    assert r.json() == {"detail": "Not authenticated"}


@pytest.mark.asyncio
async def test_me_with_expired_token(client):
    issuer = app.state.token_issuer
    token = issuer.issue(str(uuid.uuid4()), "x@y.com", ttl=timedelta(seconds=-10)).access_token

    r = await client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json() == {"detail": "Not authenticated"}


@pytest.mark.asyncio
async def test_me_with_token_from_other_secret(client):
    forger = TokenIssuer(secret="not-the-server-secret-0123456789abcdef012")
    token = forger.issue(str(uuid.uuid4()), "x@y.com").access_token

    r = await client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_me_for_identity_that_no_longer_exists(client):
    """The guard trusts the claim; the handler finds no record."""
    token = app.state.token_issuer.issue(str(uuid.uuid4()), "gone@y.com").access_token

    r = await client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_edit_user(client, auth_headers):
    r = await client.patch("/users", json={"first_name": "Ada"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["first_name"] == "Ada"
    assert r.json()["last_name"] is None

    r = await client.patch("/users", json={"last_name": "Lovelace"}, headers=auth_headers)
    assert r.json()["first_name"] == "Ada"
    assert r.json()["last_name"] == "Lovelace"


@pytest.mark.asyncio
async def test_edit_user_cannot_change_email(client):
    email = unique_email("fixed")
    headers = await signup(client, email)

    r = await client.patch(
        "/users", json={"email": "new@example.com", "first_name": "X"}, headers=headers
    )
    assert r.status_code == 200
    assert r.json()["email"] == email


@pytest.mark.asyncio
async def test_edit_user_requires_token(client):
    r = await client.patch("/users", json={"first_name": "Ada"})
    assert r.status_code == 401
