"""
Parcel Server — Typed Entity Records
=====================================

One pydantic record per collection. Records are built from raw documents at
the store boundary (`Record.from_document(doc)`), so services and routes
never handle bare dicts from the driver.
"""

from parcel_server.models.document import DocumentRecord, parse_enum, parse_object_id
from parcel_server.models.parcel import DeliveryStatus, Parcel, PaymentStatus
from parcel_server.models.payment import Payment
from parcel_server.models.rider import Rider, RiderStatus
from parcel_server.models.user import ASSIGNABLE_ROLES, User, UserRole

__all__ = [
    "ASSIGNABLE_ROLES",
    "DeliveryStatus",
    "DocumentRecord",
    "Parcel",
    "Payment",
    "PaymentStatus",
    "Rider",
    "RiderStatus",
    "User",
    "UserRole",
    "parse_enum",
    "parse_object_id",
]
