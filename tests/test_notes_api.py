"""Note API tests — CRUD and ownership enforcement over HTTP."""

import uuid
from datetime import timedelta

import pytest


async def _create(client, headers, title="Groceries", content="milk, eggs"):
    r = await client.post(
        "/api/notes", json={"title": title, "content": content}, headers=headers
    )
    assert r.status_code == 201, r.text
    return r.json()


# ═══════════════════════════════════════════════════════════
# Authentication is required
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/api/notes"),
        ("POST", "/api/notes"),
        ("GET", f"/api/notes/{uuid.uuid4()}"),
        ("PUT", f"/api/notes/{uuid.uuid4()}"),
        ("DELETE", f"/api/notes/{uuid.uuid4()}"),
    ],
)
async def test_notes_require_token(client, method, path):
    r = await client.request(method, path)
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_expired_token_rejected(client, register, services):
    user, _ = await register()
    expired = services.tokens.issue(user["id"], expires_delta=timedelta(seconds=-1))
    r = await client.get("/api/notes", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# CRUD by the owner
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_and_get_note(client, register):
    user, headers = await register()
    note = await _create(client, headers)
    assert note["owner_id"] == user["id"]

    r = await client.get(f"/api/notes/{note['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json()["title"] == "Groceries"


@pytest.mark.asyncio
async def test_client_supplied_owner_ignored(client, register):
    user, headers = await register()
    other, _ = await register()
    r = await client.post(
        "/api/notes",
        json={"title": "t", "content": "c", "owner_id": other["id"]},
        headers=headers,
    )
    assert r.status_code == 201
    assert r.json()["owner_id"] == user["id"]


@pytest.mark.asyncio
async def test_list_returns_only_own_notes(client, register):
    _, alice = await register()
    _, bob = await register()
    await _create(client, alice, title="alice-1")
    await _create(client, bob, title="bob-1")
    await _create(client, alice, title="alice-2")

    r = await client.get("/api/notes", headers=alice)
    assert r.status_code == 200
    assert [n["title"] for n in r.json()] == ["alice-2", "alice-1"]


@pytest.mark.asyncio
async def test_update_note(client, register):
    _, headers = await register()
    note = await _create(client, headers)

    r = await client.put(
        f"/api/notes/{note['id']}", json={"content": "bread"}, headers=headers
    )
    assert r.status_code == 200
    assert r.json()["content"] == "bread"
    assert r.json()["title"] == "Groceries"


@pytest.mark.asyncio
async def test_update_with_no_fields(client, register):
    _, headers = await register()
    note = await _create(client, headers)
    r = await client.put(f"/api/notes/{note['id']}", json={}, headers=headers)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_update_cannot_change_owner(client, register):
    user, headers = await register()
    other, _ = await register()
    note = await _create(client, headers)
    r = await client.put(
        f"/api/notes/{note['id']}",
        json={"title": "x", "owner_id": other["id"]},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json()["owner_id"] == user["id"]


@pytest.mark.asyncio
async def test_delete_note(client, register):
    _, headers = await register()
    note = await _create(client, headers)

    r = await client.delete(f"/api/notes/{note['id']}", headers=headers)
    assert r.status_code == 204

    r = await client.get(f"/api/notes/{note['id']}", headers=headers)
    assert r.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body", [{"title": "", "content": "c"}, {"title": "   ", "content": "c"}, {"title": "t"}]
)
async def test_create_rejects_invalid_body(client, register, body):
    _, headers = await register()
    r = await client.post("/api/notes", json=body, headers=headers)
    assert r.status_code == 422


# ═══════════════════════════════════════════════════════════
# Ownership
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_other_user_gets_forbidden(client, register):
    _, alice = await register()
    _, bob = await register()
    note = await _create(client, alice, title="private")
    url = f"/api/notes/{note['id']}"

    r = await client.get(url, headers=bob)
    assert r.status_code == 403
    assert "private" not in r.text

    r = await client.put(url, json={"title": "pwned"}, headers=bob)
    assert r.status_code == 403

    r = await client.delete(url, headers=bob)
    assert r.status_code == 403

    # Untouched for the owner
    r = await client.get(url, headers=alice)
    assert r.status_code == 200
    assert r.json()["title"] == "private"


@pytest.mark.asyncio
@pytest.mark.parametrize("note_id", [str(uuid.uuid4()), "not-a-uuid"])
async def test_missing_note_not_found(client, register, note_id):
    _, headers = await register()
    for method in ("GET", "DELETE"):
        r = await client.request(method, f"/api/notes/{note_id}", headers=headers)
        assert r.status_code == 404
    r = await client.put(f"/api/notes/{note_id}", json={"title": "x"}, headers=headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_register_login_scenario(client):
    """a@x.com registers, logs in twice, and can't touch another user's note."""
    r = await client.post(
        "/api/auth/register", json={"email": "a@x.com", "password": "secret1"}
    )
    u1 = r.json()["user"]["id"]
    t1 = r.json()["token"]

    r = await client.post("/api/auth/login", json={"email": "a@x.com", "password": "secret1"})
    assert r.status_code == 200
    t2 = r.json()["token"]
    assert t1 != t2

    r = await client.post("/api/auth/login", json={"email": "a@x.com", "password": "wrong"})
    assert r.status_code == 401

    note = await _create(client, {"Authorization": f"Bearer {t1}"})
    assert note["owner_id"] == u1

    r = await client.post(
        "/api/auth/register", json={"email": "b@x.com", "password": "secret2"}
    )
    t_u2 = r.json()["token"]
    r = await client.delete(
        f"/api/notes/{note['id']}", headers={"Authorization": f"Bearer {t_u2}"}
    )
    assert r.status_code == 403
