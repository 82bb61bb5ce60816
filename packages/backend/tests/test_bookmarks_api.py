"""Bookmark API tests — CRUD for the owner, 403 for everyone else."""

import uuid

import pytest

from conftest import signup, unique_email

NESTJS = {
    "title": "NestJS",
    "link": "https://nestjs.com/",
    "description": "A framework for building efficient, scalable Node.js server-side applications.",
}


async def _create(client, headers, body=None) -> dict:
    r = await client.post("/bookmarks", json=body or NESTJS, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


# ═══════════════════════════════════════════════════════════
# Owner CRUD
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_bookmark_lifecycle(client, auth_headers):
    r = await client.get("/bookmarks", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == []

    bookmark = await _create(client, auth_headers)
    assert bookmark["title"] == "NestJS"
    assert bookmark["link"] == "https://nestjs.com/"
    bookmark_id = bookmark["id"]

    r = await client.get("/bookmarks", headers=auth_headers)
    assert len(r.json()) == 1

    r = await client.get(f"/bookmarks/{bookmark_id}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["id"] == bookmark_id

    r = await client.patch(
        f"/bookmarks/{bookmark_id}", json={"title": "NodeJS"}, headers=auth_headers
    )
    assert r.status_code == 200
    assert r.json()["title"] == "NodeJS"
    assert r.json()["link"] == "https://nestjs.com/"

    r = await client.delete(f"/bookmarks/{bookmark_id}", headers=auth_headers)
    assert r.status_code == 204

    r = await client.get("/bookmarks", headers=auth_headers)
    assert r.json() == []


@pytest.mark.asyncio
async def test_create_with_title_only(client, auth_headers):
    bookmark = await _create(client, auth_headers, {"title": "Just a title"})
    assert bookmark["link"] is None
    assert bookmark["description"] is None


@pytest.mark.asyncio
async def test_patch_can_clear_optional_fields(client, auth_headers):
    bookmark = await _create(client, auth_headers)
    r = await client.patch(
        f"/bookmarks/{bookmark['id']}", json={"description": None}, headers=auth_headers
    )
    assert r.status_code == 200
    assert r.json()["description"] is None
    assert r.json()["title"] == "NestJS"


@pytest.mark.asyncio
async def test_list_only_shows_own_bookmarks(client, auth_headers):
    other = await signup(client, unique_email("other"))
    await _create(client, auth_headers, {"title": "mine"})
    await _create(client, other, {"title": "theirs"})

    r = await client.get("/bookmarks", headers=auth_headers)
    assert [b["title"] for b in r.json()] == ["mine"]


# ═══════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"title": ""}, {"link": "https://x.com"}])
async def test_create_requires_title(client, auth_headers, body):
    r = await client.post("/bookmarks", json=body, headers=auth_headers)
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_patch_rejects_null_title(client, auth_headers):
    bookmark = await _create(client, auth_headers)
    r = await client.patch(
        f"/bookmarks/{bookmark['id']}", json={"title": None}, headers=auth_headers
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_invalid_bookmark_id_is_400(client, auth_headers):
    r = await client.get("/bookmarks/not-a-uuid", headers=auth_headers)
    assert r.status_code == 400


# ═══════════════════════════════════════════════════════════
# Authorization
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_requires_token(client):
    r = await client.get("/bookmarks")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_guard_runs_before_body_validation(client):
    """An unauthenticated request with a bad body is a 401, not a 400."""
    r = await client.post("/bookmarks", json={})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_other_user_cannot_touch_bookmark(client, auth_headers):
    bookmark = await _create(client, auth_headers)
    url = f"/bookmarks/{bookmark['id']}"
    intruder = await signup(client, unique_email("intruder"))

    r = await client.get(url, headers=intruder)
    assert r.status_code == 403
    assert r.json() == {"detail": "Access to resource is denied"}

    r = await client.patch(url, json={"title": "pwned"}, headers=intruder)
    assert r.status_code == 403

    r = await client.delete(url, headers=intruder)
    assert r.status_code == 403

    # Owner still sees it untouched
    r = await client.get(url, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["title"] == "NestJS"


@pytest.mark.asyncio
async def test_missing_bookmark_looks_like_someone_elses(client, auth_headers):
    url = f"/bookmarks/{uuid.uuid4()}"
    for method in ("get", "patch", "delete"):
        kwargs = {"json": {"title": "renamed"}} if method == "patch" else {}
        r = await getattr(client, method)(url, headers=auth_headers, **kwargs)
        assert r.status_code == 403
        assert r.json() == {"detail": "Access to resource is denied"}
