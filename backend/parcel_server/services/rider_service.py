"""
Parcel Server — Rider Service
==============================

What:  Rider applications and their activation lifecycle over `riders`.
Who:   Called by routes/riders.py.

Activation (PATCH /riders/{id} with status='active'):
    1. riders.find_one_and_update  status=active (returns the prior document)
    2. users.update_one            role=rider for the rider's email (or the request
                                   body's email when the application has none)

    Step 2 is best effort: a failure there is logged and does not undo
    step 1 or change the response.
"""

import logging
from typing import List

from parcel_server.database import DocumentStore, translate_store_errors
from parcel_server.exceptions import DatabaseError, ValidationError
from parcel_server.models import Rider, RiderStatus, parse_enum, parse_object_id
from parcel_server.models.document import new_document, utc_now
from parcel_server.schemas.common import InsertResult
from parcel_server.schemas.rider import RiderCreate, RiderStatusResponse, RiderStatusUpdate
from parcel_server.services.user_service import user_service

logger = logging.getLogger(__name__)


class RiderService:
    """
    Rider applications over `riders`.

    Activation also grants the `rider` role via UserService. The grant
    targets the rider document's email; the request-body email is used
    only when the stored application has none.
    """

    async def apply(self, store: DocumentStore, payload: RiderCreate) -> InsertResult:
        document = new_document(payload)
        document["status"] = RiderStatus.PENDING.value
        document["created_at"] = utc_now().isoformat()

        with translate_store_errors("submit the rider application", email=payload.email):
            result = await store.riders.insert_one(document)

        logger.info("Rider application %s from %s", result.inserted_id, payload.email)
        return InsertResult.from_driver(result)

    async def list_by_status(self, store: DocumentStore, status: RiderStatus) -> List[Rider]:
        with translate_store_errors("list riders", status=status.value):
            documents = await store.riders.find({"status": status.value}).to_list(length=None)
        return [Rider.from_document(doc) for doc in documents]

    async def list_available(self, store: DocumentStore, district: str) -> List[Rider]:
        if not district:
            raise ValidationError(message="District is required", field="district")
        with translate_store_errors("list riders", district=district):
            documents = await store.riders.find({"district": district}).to_list(length=None)
        return [Rider.from_document(doc) for doc in documents]

    async def update_status(
        self, store: DocumentStore, rider_id: str, payload: RiderStatusUpdate
    ) -> RiderStatusResponse:
        """
        Change a rider's status; activation also grants the user 'rider' role.

        Returns success=False with modifiedCount=0 when no rider has the id
        (the route answers 404). Re-applying the current status matches the
        rider and reports success with modifiedCount=0.
        """
        oid = parse_object_id(rider_id, "rider")
        status = parse_enum(RiderStatus, payload.status, "status")

        with translate_store_errors("update the rider status", rider_id=rider_id):
            rider_doc = await store.riders.find_one_and_update(
                {"_id": oid},
                {"$set": {"status": status.value}},
            )

        if rider_doc is None:
            return RiderStatusResponse(success=False, modified_count=0)

        modified = 0 if rider_doc.get("status") == status.value else 1
        logger.info("Rider %s status %s -> %s", rider_id, rider_doc.get("status"), status.value)

        if status is RiderStatus.ACTIVE:
            email = rider_doc.get("email") or payload.email
            if email:
                try:
                    await user_service.grant_rider_role(store, email)
                except DatabaseError:
                    logger.error("Rider %s activated but role update for %s failed", rider_id, email)
            else:
                logger.warning("Rider %s activated without an email; no user role updated", rider_id)

        return RiderStatusResponse(success=True, modified_count=modified)


# ── Singleton Instance ────────────────────────────────────────────────────
rider_service = RiderService()
