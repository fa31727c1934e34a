"""
Parcel Server — Document Store Client
======================================

What:  One async MongoDB client, the four collections the API uses, and the
       FastAPI dependency that hands the store to route handlers.
How:   `DocumentStore.from_settings()` builds a pymongo `AsyncMongoClient`
       (Stable API v1). The lifespan in main.py opens it once, stores it on
       `app.state.store`, and closes it on shutdown.
Who:   Route handlers receive it via `Depends(get_store)` and pass it to the
       domain services.

Connection Pooling:
    The driver keeps its own connection pool per client and is safe for
    concurrent use from many coroutines. The application shares exactly one
    client and adds no locking of its own.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

from parcel_server.config import settings
from parcel_server.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    Explicitly constructed handle over the parcel database.

    Collections:
        parcels   : delivery bookings
        payments  : immutable payment records
        users     : sign-in profiles with a role
        riders    : rider applications with an activation status
    """

    PARCELS = "parcels"
    PAYMENTS = "payments"
    USERS = "users"
    RIDERS = "riders"

    def __init__(self, client, database_name: str):
        self.client = client
        self.database = client[database_name]

    @classmethod
    def from_settings(cls) -> "DocumentStore":
        """Build the store from the application settings (no I/O yet)."""
        client = AsyncMongoClient(
            settings.mongo_connection_uri,
            server_api=ServerApi("1", strict=True, deprecation_errors=True),
            serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
            tz_aware=True,
        )
        return cls(client, settings.database_name)

    # ── Collections ───────────────────────────────────────────────────────
    @property
    def parcels(self):
        return self.database[self.PARCELS]

    @property
    def payments(self):
        return self.database[self.PAYMENTS]

    @property
    def users(self):
        return self.database[self.USERS]

    @property
    def riders(self):
        return self.database[self.RIDERS]

    # ── Lifecycle ─────────────────────────────────────────────────────────
    async def ping(self) -> bool:
        """
        What:  Round-trips a `ping` command to the deployment.
        Returns: True if the server answered, False otherwise (never raises).
        """
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning("Document store ping failed: %s", str(e))
            return False

    async def close(self) -> None:
        """Closes every pooled connection held by the client."""
        await self.client.close()


# ── Error Translation ─────────────────────────────────────────────────────
@contextmanager
def translate_store_errors(operation: str, **context: Any) -> Iterator[None]:
    """
    Wraps driver calls so any PyMongoError becomes a DatabaseError (500).

    Usage:
        with translate_store_errors("list parcels", created_by=email):
            docs = await store.parcels.find(query).to_list(length=None)

    The driver message is logged here and never returned to the client.
    """
    try:
        yield
    except PyMongoError as e:
        logger.error("Store operation '%s' failed: %s | Context: %s", operation, str(e), context)
        raise DatabaseError(
            message=f"Could not {operation}. Please try again later.",
            context={"operation": operation, "error_type": type(e).__name__, **context},
        )


# ── Store Dependency ──────────────────────────────────────────────────────
def get_store(request: Request) -> DocumentStore:
    """
    FastAPI dependency returning the store opened by the lifespan.

    Raises:
        DatabaseError: the app was started without a store (500).
    """
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise DatabaseError(
            message="The database connection is not available.",
            context={"reason": "store not initialized"},
        )
    return store
