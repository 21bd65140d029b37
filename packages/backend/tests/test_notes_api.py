"""Notes API tests — CRUD through the real token gate."""

import uuid

import pytest
import pytest_asyncio

from conftest import bearer


@pytest_asyncio.fixture()
async def alice(make_identity):
    return await make_identity(login="alice@example.com", name="Alice")


@pytest_asyncio.fixture()
async def bob(make_identity):
    return await make_identity(login="bob@example.com", name="Bob")


async def _create(client, identity, **body):
    body = {"title": "Shopping", "content": "milk, eggs", **body}
    r = await client.post("/api/v1/notes", json=body, headers=bearer(identity))
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.asyncio
async def test_notes_require_authentication(client):
    assert (await client.get("/api/v1/notes")).status_code == 401
    assert (
        await client.post("/api/v1/notes", json={"title": "t", "content": "c"})
    ).status_code == 401
    assert (await client.delete(f"/api/v1/notes/{uuid.uuid4()}")).status_code == 401


@pytest.mark.asyncio
async def test_create_note_defaults(client, alice):
    note = await _create(client, alice)

    assert note["id"]
    assert note["title"] == "Shopping"
    assert note["category"] == "General"
    assert note["tags"] == []
    assert note["owner_id"] == str(alice.id)
    assert note["created_at"] == note["updated_at"]


@pytest.mark.asyncio
async def test_owner_cannot_be_chosen_by_the_client(client, alice, bob):
    r = await client.post(
        "/api/v1/notes",
        json={"title": "t", "content": "c", "owner_id": str(bob.id)},
        headers=bearer(alice),
    )
    assert r.status_code == 201
    assert r.json()["owner_id"] == str(alice.id)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body,field",
    [
        ({"title": "", "content": "milk"}, "title"),
        ({"content": "milk"}, "title"),
        ({"title": "Shopping", "content": ""}, "content"),
        ({"title": None, "content": "milk"}, "title"),
        ({"title": 42, "content": "milk"}, "title"),
        ({"title": "Shopping", "content": None}, "content"),
        ({"title": "Shopping", "content": "milk", "tags": ["a", 3]}, "tags"),
        ({"title": "Shopping", "content": "milk", "tags": "errand"}, "tags"),
        ({"title": "Shopping", "content": "milk", "category": 7}, "category"),
    ],
)
async def test_create_validation_names_the_field(client, alice, body, field):
    r = await client.post("/api/v1/notes", json=body, headers=bearer(alice))
    assert r.status_code == 400
    assert r.json()["detail"]["field"] == field

    listed = await client.get("/api/v1/notes", headers=bearer(alice))
    assert listed.json() == []


@pytest.mark.asyncio
async def test_get_update_delete_own_note(client, alice):
    note = await _create(client, alice)
    url = f"/api/v1/notes/{note['id']}"

    r = await client.get(url, headers=bearer(alice))
    assert r.status_code == 200
    assert r.json()["content"] == "milk, eggs"

    r = await client.put(url, json={"tags": ["errand"]}, headers=bearer(alice))
    assert r.status_code == 200
    updated = r.json()
    assert updated["tags"] == ["errand"]
    assert updated["title"] == "Shopping"
    assert updated["content"] == "milk, eggs"
    assert updated["category"] == "General"
    assert updated["updated_at"] != updated["created_at"]

    r = await client.patch(url, json={"category": "Work"}, headers=bearer(alice))
    assert r.status_code == 200
    assert r.json()["category"] == "Work"
    assert r.json()["tags"] == ["errand"]

    r = await client.delete(url, headers=bearer(alice))
    assert r.status_code == 200
    assert r.json() == {"deleted": True}

    r = await client.get(url, headers=bearer(alice))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_update_validation_names_the_field(client, alice):
    note = await _create(client, alice)
    r = await client.put(
        f"/api/v1/notes/{note['id']}", json={"title": ""}, headers=bearer(alice)
    )
    assert r.status_code == 400
    assert r.json()["detail"]["field"] == "title"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body,field",
    [
        ({"title": None}, "title"),
        ({"content": 5}, "content"),
        ({"tags": ["a", 3]}, "tags"),
        ({"tags": None}, "tags"),
    ],
)
async def test_patch_with_null_or_mistyped_field_is_400(client, alice, body, field):
    note = await _create(client, alice)
    r = await client.patch(
        f"/api/v1/notes/{note['id']}", json=body, headers=bearer(alice)
    )
    assert r.status_code == 400
    assert r.json()["detail"]["field"] == field
    assert "message" in r.json()["detail"]


@pytest.mark.asyncio
async def test_foreign_note_is_indistinguishable_from_missing(client, alice, bob):
    note = await _create(client, alice, title="Diary", content="private")
    foreign = f"/api/v1/notes/{note['id']}"
    missing = f"/api/v1/notes/{uuid.uuid4()}"
    garbage = "/api/v1/notes/not-a-uuid"

    for url in (foreign, missing, garbage):
        responses = [
            await client.get(url, headers=bearer(bob)),
            await client.put(url, json={"title": "pwned"}, headers=bearer(bob)),
            await client.delete(url, headers=bearer(bob)),
        ]
        for r in responses:
            assert r.status_code == 404
            assert r.json() == {"detail": "Note not found"}

    r = await client.get(foreign, headers=bearer(alice))
    assert r.status_code == 200
    assert r.json()["title"] == "Diary"


@pytest.mark.asyncio
async def test_list_is_per_owner(client, alice, bob):
    await _create(client, alice, title="A1")
    await _create(client, bob, title="B1")
    await _create(client, alice, title="A2")

    r = await client.get("/api/v1/notes", headers=bearer(alice))
    assert r.status_code == 200
    assert sorted(n["title"] for n in r.json()) == ["A1", "A2"]

    r = await client.get("/api/v1/notes", headers=bearer(bob))
    assert [n["title"] for n in r.json()] == ["B1"]


@pytest.mark.asyncio
async def test_list_puts_recently_updated_first(client, alice):
    first = await _create(client, alice, title="First")
    await _create(client, alice, title="Second")

    await client.patch(
        f"/api/v1/notes/{first['id']}", json={"content": "touched"}, headers=bearer(alice)
    )

    r = await client.get("/api/v1/notes", headers=bearer(alice))
    assert [n["title"] for n in r.json()] == ["First", "Second"]
