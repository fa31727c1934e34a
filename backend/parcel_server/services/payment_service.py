"""
Parcel Server — Payment Service
================================

What:  Payment history and payment confirmation.
Who:   Called by routes/payments.py.

Confirmation Flow (POST /payments):
    ┌──────────────────────┐    ┌──────────────────────┐
    │ parcels.update_one   │───▶│ payments.insert_one  │
    │ payment_status=paid  │    │ immutable record     │
    └──────────────────────┘    └──────────────────────┘

    The two writes are independent. If the insert fails after the update
    succeeded, the parcel stays 'paid' without a payment record; the failure
    is logged with both identifiers and reported as a 500. Duplicate
    confirmations for one parcel each produce their own payment record.
"""

import logging
from typing import List

from pymongo import DESCENDING

from parcel_server.database import DocumentStore, translate_store_errors
from parcel_server.exceptions import DatabaseError, NotFoundError
from parcel_server.models import Payment
from parcel_server.models.document import utc_now
from parcel_server.schemas.payment import PaymentConfirm, PaymentConfirmResponse
from parcel_server.services.parcel_service import parcel_service

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Payment records over `payments`, plus the parcel status flip that a
    confirmation performs through ParcelService.mark_paid.
    """

    async def list_payments(self, store: DocumentStore, email: str) -> List[Payment]:
        """Payments made by `email`, most recent `paid_at` first."""
        query = {"email": email} if email else {}
        with translate_store_errors("list payments", email=email):
            cursor = store.payments.find(query).sort("paid_at", DESCENDING)
            documents = await cursor.to_list(length=None)
        return [Payment.from_document(doc) for doc in documents]

    async def confirm_payment(
        self, store: DocumentStore, payload: PaymentConfirm
    ) -> PaymentConfirmResponse:
        """
        Mark the parcel paid, then record the payment.

        Raises:
            ValidationError: `parcelId` is not a valid id (400, nothing written)
            NotFoundError:   no parcel has that id (404, nothing written)
            DatabaseError:   either write failed (500)
        """
        matched = await parcel_service.mark_paid(store, payload.parcelId)
        if not matched:
            raise NotFoundError(resource="parcel", resource_id=payload.parcelId)

        paid_at = utc_now()
        document = {
            "parcelId": payload.parcelId,
            "email": payload.email,
            "amount": payload.amount,
            "paymentMethod": payload.paymentMethod,
            "transactionId": payload.transactionId,
            "paid_at_string": paid_at.isoformat(),
            "paid_at": paid_at,
        }

        try:
            with translate_store_errors(
                "record the payment",
                parcel_id=payload.parcelId,
                transaction_id=payload.transactionId,
            ):
                result = await store.payments.insert_one(document)
        except DatabaseError:
            # Parcel is already 'paid' at this point; nothing rolls it back
            logger.error(
                "Parcel %s marked paid but payment %s was not recorded",
                payload.parcelId,
                payload.transactionId,
            )
            raise

        logger.info(
            "Payment %s recorded for parcel %s (amount=%s)",
            payload.transactionId,
            payload.parcelId,
            payload.amount,
        )
        return PaymentConfirmResponse(
            message="Payment recorded and parcel marked as paid",
            inserted_id=str(result.inserted_id),
        )


# ── Singleton Instance ────────────────────────────────────────────────────
payment_service = PaymentService()
