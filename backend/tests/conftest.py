"""
Parcel Server — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── fake_client:        in-memory stand-in for AsyncMongoClient
    ├── store:              real DocumentStore over fake_client
    ├── identity_verifier:  token → email table instead of Firebase
    ├── payment_gateway:    AsyncMock intent creation instead of Stripe
    ├── app:                create_app() with the doubles on app.state
    └── test_client:        HTTPX AsyncClient bound to `app`

Test Identities:
    "user-token"   → alice@example.com  (role: user)
    "other-token"  → bob@example.com    (role: user)
    "admin-token"  → admin@example.com  (role: admin)
    "ghost-token"  → ghost@example.com  (no user document)
"""

import copy
import os
import re
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any parcel_server import so the settings singleton picks them up
os.environ["MONGODB_URI"] = "mongodb://localhost:27017"
os.environ["PAYMENT_GATEWAY_KEY"] = "sk_test_not_real"
os.environ["FB_SERVICE_KEY"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from parcel_server.database import DocumentStore  # noqa: E402
from parcel_server.exceptions import UnauthorizedError  # noqa: E402
from parcel_server.services.identity import DecodedIdentity  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Document Store
# ══════════════════════════════════════════════════════════════════════════

def _matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for key, expected in query.items():
        actual = document.get(key)
        if isinstance(expected, dict) and "$regex" in expected:
            flags = re.IGNORECASE if "i" in expected.get("$options", "") else 0
            if actual is None or not re.search(expected["$regex"], str(actual), flags):
                return False
        elif actual != expected:
            return False
    return True


class FakeCursor:
    """Supports the chain the services use: find().sort().limit().to_list()."""

    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._documents = sorted(
            self._documents,
            key=lambda doc: (doc.get(key) is not None, doc.get(key)),
            reverse=direction == -1,
        )
        return self

    def limit(self, count: int) -> "FakeCursor":
        self._documents = self._documents[:count]
        return self

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        return [copy.deepcopy(doc) for doc in self._documents[:length]]


class FakeCollection:
    """
    Minimal async collection with equality and $regex matching.

    Set `fail_on` to a set of method names (or "*") and assign `error` to
    make those calls raise, e.g. a pymongo.errors.PyMongoError.
    """

    def __init__(self, name: str):
        self.name = name
        self.documents: List[Dict[str, Any]] = []
        self.fail_on: set = set()
        self.error: Optional[Exception] = None

    def _maybe_fail(self, operation: str) -> None:
        if self.error is not None and (operation in self.fail_on or "*" in self.fail_on):
            raise self.error

    def _first(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return next((doc for doc in self.documents if _matches(doc, query)), None)

    def find(self, query: Optional[Dict[str, Any]] = None) -> FakeCursor:
        self._maybe_fail("find")
        return FakeCursor([doc for doc in self.documents if _matches(doc, query or {})])

    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self._maybe_fail("find_one")
        document = self._first(query)
        return copy.deepcopy(document) if document is not None else None

    async def insert_one(self, document: Dict[str, Any]):
        self._maybe_fail("insert_one")
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(acknowledged=True, inserted_id=document["_id"])

    def _apply(self, document: Dict[str, Any], update: Dict[str, Any]) -> bool:
        changed = False
        for key, value in update.get("$set", {}).items():
            if document.get(key) != value:
                document[key] = value
                changed = True
        return changed

    async def update_one(self, query: Dict[str, Any], update: Dict[str, Any]):
        self._maybe_fail("update_one")
        document = self._first(query)
        if document is None:
            return SimpleNamespace(acknowledged=True, matched_count=0, modified_count=0)
        modified = 1 if self._apply(document, update) else 0
        return SimpleNamespace(acknowledged=True, matched_count=1, modified_count=modified)

    async def find_one_and_update(self, query: Dict[str, Any], update: Dict[str, Any]):
        self._maybe_fail("find_one_and_update")
        document = self._first(query)
        if document is None:
            return None
        before = copy.deepcopy(document)
        self._apply(document, update)
        return before

    async def delete_one(self, query: Dict[str, Any]):
        self._maybe_fail("delete_one")
        document = self._first(query)
        if document is None:
            return SimpleNamespace(acknowledged=True, deleted_count=0)
        self.documents.remove(document)
        return SimpleNamespace(acknowledged=True, deleted_count=1)


class FakeDatabase:
    def __init__(self):
        self._collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]


class FakeClient:
    """Stands in for AsyncMongoClient: databases by name, admin ping, close."""

    def __init__(self):
        self._databases: Dict[str, FakeDatabase] = {}
        self.admin = SimpleNamespace(command=AsyncMock(return_value={"ok": 1.0}))
        self.close = AsyncMock()

    def __getitem__(self, name: str) -> FakeDatabase:
        if name not in self._databases:
            self._databases[name] = FakeDatabase()
        return self._databases[name]


# ══════════════════════════════════════════════════════════════════════════
# Provider Doubles
# ══════════════════════════════════════════════════════════════════════════

TEST_IDENTITIES = {
    "user-token": "alice@example.com",
    "other-token": "bob@example.com",
    "admin-token": "admin@example.com",
    "ghost-token": "ghost@example.com",
}


class StubIdentityVerifier:
    """Accepts only the tokens in TEST_IDENTITIES."""

    def __init__(self, identities: Dict[str, str], configured: bool = True):
        self.identities = identities
        self.configured = configured

    async def verify(self, token: str) -> DecodedIdentity:
        email = self.identities.get(token)
        if email is None:
            raise UnauthorizedError(context={"reason": "unknown test token"})
        return DecodedIdentity(uid=f"uid-{email}", email=email, claims={"email": email})


def bearer(token: str) -> Dict[str, str]:
    """Authorization header for one of the TEST_IDENTITIES tokens."""
    return {"Authorization": f"Bearer {token}"}


async def seed_users(store: DocumentStore) -> None:
    await store.users.insert_one({"email": "alice@example.com", "role": "user"})
    await store.users.insert_one({"email": "bob@example.com", "role": "user"})
    await store.users.insert_one({"email": "admin@example.com", "role": "admin"})


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def store(fake_client):
    """
    A real DocumentStore whose client is the in-memory FakeClient.

    Usage:
        async def test_create(store):
            await parcel_service.create_parcel(store, ParcelCreate(...))
            assert len(store.parcels.documents) == 1
    """
    return DocumentStore(fake_client, "parcelDB")


@pytest.fixture
def identity_verifier():
    return StubIdentityVerifier(dict(TEST_IDENTITIES))


@pytest.fixture
def payment_gateway():
    gateway = SimpleNamespace(
        configured=True,
        create_payment_intent=AsyncMock(return_value="pi_123_secret_456"),
    )
    return gateway


@pytest_asyncio.fixture
async def app(store, identity_verifier, payment_gateway):
    """
    Fresh application with the doubles installed on app.state.

    ASGITransport does not run the lifespan, so nothing real is opened.
    """
    from parcel_server.main import create_app

    application = create_app()
    application.state.store = store
    application.state.identity_verifier = identity_verifier
    application.state.payment_gateway = payment_gateway
    await seed_users(store)
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient configured to talk to the app in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
