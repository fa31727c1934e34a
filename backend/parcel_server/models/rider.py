"""
Parcel Server — Rider Record
=============================

What:  Typed view of a document in the `riders` collection.

Lifecycle:
    pending ──▶ active      (linked user's role becomes 'rider')
        └─────▶ cancelled
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from parcel_server.models.document import DocumentRecord


class RiderStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    CANCELLED = "cancelled"


class Rider(DocumentRecord):
    email: Optional[str] = None
    district: Optional[str] = None
    status: RiderStatus = RiderStatus.PENDING
    created_at: Optional[Union[datetime, str]] = None
