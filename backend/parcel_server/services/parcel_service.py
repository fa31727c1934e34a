"""
Parcel Server — Parcel Service
===============================

What:  Booking operations over the `parcels` collection.
Who:   Called by routes/parcels.py and by the owner-or-admin guard.

Operations:
    list_parcels()   find with equality filters, newest `createdAt` first
    get_parcel()     find by id (400 malformed id, 404 missing)
    create_parcel()  insert the booking body with server-side defaults
    delete_parcel()  delete by id
"""

import logging
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING

from parcel_server.database import DocumentStore, translate_store_errors
from parcel_server.exceptions import NotFoundError
from parcel_server.models import (
    DeliveryStatus,
    Parcel,
    PaymentStatus,
    parse_enum,
    parse_object_id,
)
from parcel_server.models.document import as_utc, new_document, utc_now
from parcel_server.schemas.common import DeleteResult, InsertResult
from parcel_server.schemas.parcel import ParcelCreate

logger = logging.getLogger(__name__)


class ParcelService:
    """Stateless; every method receives the store handle it should use."""

    async def list_parcels(
        self,
        store: DocumentStore,
        created_by: Optional[str] = None,
        payment_status: Optional[str] = None,
        delivery_status: Optional[str] = None,
    ) -> List[Parcel]:
        """
        List parcels matching every supplied filter, newest first.

        All filters are optional and combine with AND. Status values are
        checked before the query runs (400 on an unknown value).
        """
        query: Dict[str, Any] = {}
        if created_by:
            query["created_by"] = created_by
        status = parse_enum(PaymentStatus, payment_status, "payment_status")
        if status is not None:
            query["payment_status"] = status.value
        delivery = parse_enum(DeliveryStatus, delivery_status, "delivery_status")
        if delivery is not None:
            query["delivery_status"] = delivery.value

        with translate_store_errors("list parcels", query=query):
            cursor = store.parcels.find(query).sort("createdAt", DESCENDING)
            documents = await cursor.to_list(length=None)

        return [Parcel.from_document(doc) for doc in documents]

    async def get_parcel(self, store: DocumentStore, parcel_id: str) -> Parcel:
        oid = parse_object_id(parcel_id, "parcel")
        with translate_store_errors("retrieve the parcel", parcel_id=parcel_id):
            document = await store.parcels.find_one({"_id": oid})
        if document is None:
            raise NotFoundError(resource="parcel", resource_id=parcel_id)
        return Parcel.from_document(document)

    async def create_parcel(self, store: DocumentStore, payload: ParcelCreate) -> InsertResult:
        """
        Insert a booking.

        The body is stored as sent, including undeclared fields but without
        any client `_id`. Statuses default to unpaid/pending. `createdAt` is
        stored as a UTC date (now, when omitted) so the newest-first sort
        compares instants rather than offset-bearing strings.
        """
        document = new_document(payload, exclude={"createdAt"})
        document["createdAt"] = as_utc(payload.createdAt) if payload.createdAt else utc_now()

        with translate_store_errors("create the parcel", created_by=payload.created_by):
            result = await store.parcels.insert_one(document)

        logger.info("Parcel %s booked by %s", result.inserted_id, payload.created_by)
        return InsertResult.from_driver(result)

    async def delete_parcel(self, store: DocumentStore, parcel_id: str) -> DeleteResult:
        oid = parse_object_id(parcel_id, "parcel")
        with translate_store_errors("delete the parcel", parcel_id=parcel_id):
            result = await store.parcels.delete_one({"_id": oid})
        logger.info("Parcel %s deleted (count=%d)", parcel_id, result.deleted_count)
        return DeleteResult.from_driver(result)

    async def mark_paid(self, store: DocumentStore, parcel_id: str) -> int:
        """
        Set `payment_status` to paid. Returns the matched count so the caller
        can tell a missing parcel from an already-paid one.
        """
        oid = parse_object_id(parcel_id, "parcel")
        with translate_store_errors("update the parcel payment status", parcel_id=parcel_id):
            result = await store.parcels.update_one(
                {"_id": oid},
                {"$set": {"payment_status": PaymentStatus.PAID.value}},
            )
        return result.matched_count


# ── Singleton Instance ────────────────────────────────────────────────────
parcel_service = ParcelService()
