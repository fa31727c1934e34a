"""
Parcel Server — Parcel Record
==============================

What:  Typed view of a document in the `parcels` collection.

Lifecycle:
    1. Inserted by a booking request (payment_status='unpaid', delivery_status='pending')
    2. payment_status flips to 'paid' when a payment is confirmed
    3. Deleted by its owner or an admin; never otherwise updated in place
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from parcel_server.models.document import DocumentRecord


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class DeliveryStatus(str, Enum):
    """Shares its vocabulary with RiderStatus."""

    PENDING = "pending"
    ACTIVE = "active"
    CANCELLED = "cancelled"


class Parcel(DocumentRecord):
    created_by: Optional[str] = None
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    delivery_status: DeliveryStatus = DeliveryStatus.PENDING
    # Stored as a UTC date; documents written by older clients may hold an ISO string
    createdAt: Optional[Union[datetime, str]] = None
