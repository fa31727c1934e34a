"""
Parcel Server — Middleware Tests
=================================

What we test:
    ✅ Safe client request IDs are echoed; unsafe ones are replaced
    ✅ Access log names the route template and the authenticated caller
    ✅ Anonymous requests log caller=-; /health is not logged
    ✅ Denied requests log at WARNING
"""

import logging

import pytest

from conftest import bearer
from parcel_server.middleware.logging import access_level
from parcel_server.middleware.request_id import resolve_request_id

ACCESS_LOGGER = "parcel_server.access"


def _access_records(caplog):
    return [r for r in caplog.records if r.name == ACCESS_LOGGER]


class TestRequestId:

    def test_safe_id_kept(self):
        assert resolve_request_id("checkout-7f3a.v2") == "checkout-7f3a.v2"

    @pytest.mark.parametrize("supplied", [None, "", "a b", "x\ninjected", "z" * 65])
    def test_unsafe_id_replaced(self, supplied):
        generated = resolve_request_id(supplied)
        assert generated != supplied
        assert len(generated) == 8

    @pytest.mark.asyncio
    async def test_header_replaced_on_response(self, test_client):
        response = await test_client.get("/", headers={"X-Request-ID": "bad id"})
        assert response.headers["X-Request-ID"] != "bad id"


class TestAccessLog:

    @pytest.mark.asyncio
    async def test_authenticated_caller_and_route_template(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)

        await test_client.get(
            "/parcels", params={"email": "alice@example.com"}, headers=bearer("user-token")
        )

        [record] = _access_records(caplog)
        assert record.caller == "alice@example.com"
        assert record.route == "/parcels"
        assert record.levelno == logging.INFO
        assert "caller=alice@example.com" in record.getMessage()

    @pytest.mark.asyncio
    async def test_path_ids_collapsed_to_template(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)

        await test_client.get("/parcels/65a1f0c9a2b3c4d5e6f70812")

        [record] = _access_records(caplog)
        assert record.route == "/parcels/{parcel_id}"
        assert record.caller == "-"
        assert record.status == 404

    @pytest.mark.asyncio
    async def test_denied_request_logged_as_warning(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)

        await test_client.get("/riders/pending", headers=bearer("user-token"))

        [record] = _access_records(caplog)
        assert record.levelno == logging.WARNING
        assert record.caller == "alice@example.com"

    @pytest.mark.asyncio
    async def test_health_not_logged(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)

        await test_client.get("/health")

        assert _access_records(caplog) == []

    def test_levels(self):
        assert access_level(200) == logging.INFO
        assert access_level(404) == logging.INFO
        assert access_level(401) == logging.WARNING
        assert access_level(503) == logging.ERROR
