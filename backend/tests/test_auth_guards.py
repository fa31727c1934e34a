"""
Parcel Server — Authorization Guard Tests
==========================================

What:  The credential, self-access and admin-role checks, both called
       directly and through protected routes.

What we test:
    ✅ Missing or rejected bearer token → 401 "unauthorized access"
    ✅ Self-access mismatch or missing email → 403 "forbidden access"
    ✅ Admin-only routes reject users without the admin role (403)
    ✅ Error bodies carry the request id
"""

import pytest

from conftest import bearer
from parcel_server.auth import verify_admin, verify_self_access
from parcel_server.exceptions import ForbiddenError
from parcel_server.services.identity import DecodedIdentity


def _identity(email):
    return DecodedIdentity(uid="uid-1", email=email)


class TestGuardFunctions:
    """Guards called as plain coroutines with resolved dependencies."""

    @pytest.mark.asyncio
    async def test_self_access_matches(self):
        identity = _identity("alice@example.com")
        assert await verify_self_access(email="alice@example.com", identity=identity) is identity

    @pytest.mark.asyncio
    async def test_self_access_requires_email(self):
        with pytest.raises(ForbiddenError):
            await verify_self_access(email=None, identity=_identity("alice@example.com"))

    @pytest.mark.asyncio
    async def test_admin_allowed(self, store):
        await store.users.insert_one({"email": "admin@example.com", "role": "admin"})
        identity = _identity("admin@example.com")
        assert await verify_admin(identity=identity, store=store) is identity

    @pytest.mark.asyncio
    async def test_rider_is_not_admin(self, store):
        await store.users.insert_one({"email": "rider@example.com", "role": "rider"})
        with pytest.raises(ForbiddenError):
            await verify_admin(identity=_identity("rider@example.com"), store=store)

    @pytest.mark.asyncio
    async def test_unregistered_is_not_admin(self, store):
        with pytest.raises(ForbiddenError):
            await verify_admin(identity=_identity("nobody@example.com"), store=store)


class TestCredentialCheck:

    @pytest.mark.asyncio
    async def test_missing_header(self, test_client):
        response = await test_client.get("/payments", params={"email": "alice@example.com"})

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "unauthorized"
        assert body["message"] == "unauthorized access"

    @pytest.mark.asyncio
    async def test_rejected_token(self, test_client):
        response = await test_client.get(
            "/payments", params={"email": "alice@example.com"}, headers=bearer("forged")
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_bearer_scheme(self, test_client):
        response = await test_client.get(
            "/payments",
            params={"email": "alice@example.com"},
            headers={"Authorization": "Basic YWxpY2U6c2VjcmV0"},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_error_body_echoes_request_id(self, test_client):
        response = await test_client.get(
            "/riders/pending", headers={"X-Request-ID": "req-42"}
        )

        assert response.status_code == 401
        assert response.json()["request_id"] == "req-42"
        assert response.headers["X-Request-ID"] == "req-42"


class TestRoleCheck:

    @pytest.mark.asyncio
    async def test_user_denied_admin_route(self, test_client):
        response = await test_client.get("/riders/pending", headers=bearer("user-token"))

        assert response.status_code == 403
        assert response.json()["message"] == "forbidden access"

    @pytest.mark.asyncio
    async def test_unregistered_caller_denied(self, test_client):
        response = await test_client.get("/riders/active", headers=bearer("ghost-token"))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_allowed(self, test_client):
        response = await test_client.get("/riders/pending", headers=bearer("admin-token"))

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_self_access_without_email(self, test_client):
        response = await test_client.get("/payments", headers=bearer("user-token"))
        assert response.status_code == 403
