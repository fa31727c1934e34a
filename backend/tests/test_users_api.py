"""
Parcel Server — User Endpoint Tests
====================================

What we test:
    ✅ First sign-in registers (201) with role forced to 'user'
    ✅ Repeat sign-in writes nothing and answers 200 {inserted: false}
    ✅ Search is case-insensitive, literal, and capped at 10
    ✅ Role changes are admin-only, restricted to admin/user, idempotent
    ✅ Role lookup by email
"""

import pytest
from bson import ObjectId

from conftest import bearer


async def _user_id(store, email):
    document = await store.users.find_one({"email": email})
    return str(document["_id"])


class TestRegisterUser:

    @pytest.mark.asyncio
    async def test_first_sign_in(self, test_client, store):
        response = await test_client.post(
            "/users", json={"email": "carol@example.com", "name": "Carol", "role": "admin"}
        )

        assert response.status_code == 201
        assert ObjectId.is_valid(response.json()["insertedId"])
        stored = await store.users.find_one({"email": "carol@example.com"})
        assert stored["role"] == "user"
        assert stored["name"] == "Carol"
        assert stored["created_at"]

    @pytest.mark.asyncio
    async def test_existing_user(self, test_client, store):
        before = len(store.users.documents)

        response = await test_client.post("/users", json={"email": "alice@example.com"})

        assert response.status_code == 200
        assert response.json() == {"message": "user already exists", "inserted": False}
        assert len(store.users.documents) == before

    @pytest.mark.asyncio
    async def test_client_id_is_ignored(self, test_client, store):
        response = await test_client.post(
            "/users", json={"email": "dave@example.com", "_id": "u1", "id": "u2"}
        )

        assert response.status_code == 201
        stored = await store.users.find_one({"email": "dave@example.com"})
        assert isinstance(stored["_id"], ObjectId)
        assert "id" not in stored

    @pytest.mark.asyncio
    async def test_email_required(self, test_client):
        response = await test_client.post("/users", json={"name": "Nobody"})
        assert response.status_code == 400


class TestSearchUsers:

    @pytest.mark.asyncio
    async def test_case_insensitive_substring(self, test_client):
        response = await test_client.get("/users/search", params={"email": "ALICE"})

        assert response.status_code == 200
        assert [u["email"] for u in response.json()] == ["alice@example.com"]

    @pytest.mark.asyncio
    async def test_query_is_literal(self, test_client, store):
        await store.users.insert_one({"email": "a.b@example.com", "role": "user"})
        await store.users.insert_one({"email": "axb@example.com", "role": "user"})

        response = await test_client.get("/users/search", params={"email": "a.b"})

        assert [u["email"] for u in response.json()] == ["a.b@example.com"]

    @pytest.mark.asyncio
    async def test_result_cap(self, test_client, store):
        for i in range(15):
            await store.users.insert_one({"email": f"bulk{i}@example.com", "role": "user"})

        response = await test_client.get("/users/search", params={"email": "bulk"})

        assert len(response.json()) == 10

    @pytest.mark.asyncio
    async def test_missing_query(self, test_client):
        response = await test_client.get("/users/search")

        assert response.status_code == 400
        assert response.json()["message"] == "Missing email query"


class TestUpdateRole:

    @pytest.mark.asyncio
    async def test_admin_promotes_user(self, test_client, store):
        user_id = await _user_id(store, "alice@example.com")

        response = await test_client.patch(
            f"/users/{user_id}/role", json={"role": "admin"}, headers=bearer("admin-token")
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "User role updated to admin"
        assert body["result"]["matchedCount"] == 1
        assert body["result"]["modifiedCount"] == 1

    @pytest.mark.asyncio
    async def test_same_role_is_noop(self, test_client, store):
        user_id = await _user_id(store, "alice@example.com")

        response = await test_client.patch(
            f"/users/{user_id}/role", json={"role": "user"}, headers=bearer("admin-token")
        )

        assert response.status_code == 200
        assert response.json()["result"]["modifiedCount"] == 0

    @pytest.mark.asyncio
    async def test_rider_role_not_assignable(self, test_client, store):
        user_id = await _user_id(store, "alice@example.com")

        response = await test_client.patch(
            f"/users/{user_id}/role", json={"role": "rider"}, headers=bearer("admin-token")
        )

        assert response.status_code == 400
        assert (await store.users.find_one({"email": "alice@example.com"}))["role"] == "user"

    @pytest.mark.asyncio
    async def test_unknown_user(self, test_client):
        response = await test_client.patch(
            f"/users/{ObjectId()}/role", json={"role": "admin"}, headers=bearer("admin-token")
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_id(self, test_client):
        response = await test_client.patch(
            "/users/xyz/role", json={"role": "admin"}, headers=bearer("admin-token")
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_non_admin_forbidden(self, test_client, store):
        user_id = await _user_id(store, "bob@example.com")

        response = await test_client.patch(
            f"/users/{user_id}/role", json={"role": "admin"}, headers=bearer("user-token")
        )

        assert response.status_code == 403
        assert (await store.users.find_one({"email": "bob@example.com"}))["role"] == "user"


class TestGetRole:

    @pytest.mark.asyncio
    async def test_known_user(self, test_client):
        response = await test_client.get("/users/admin@example.com/role")

        assert response.status_code == 200
        assert response.json() == {"role": "admin"}

    @pytest.mark.asyncio
    async def test_unknown_user(self, test_client):
        response = await test_client.get("/users/nobody@example.com/role")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_missing_role_field_defaults_to_user(self, test_client, store):
        await store.users.insert_one({"email": "legacy@example.com"})

        response = await test_client.get("/users/legacy@example.com/role")

        assert response.status_code == 200
        assert response.json() == {"role": "user"}
