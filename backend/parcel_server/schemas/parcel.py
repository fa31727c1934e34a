"""
Parcel Server — Parcel Request Schemas
=======================================

Booking bodies are stored as sent. Only the fields the API itself reads are
declared; everything else passes through to the document untouched, except
`_id` / `id`, which the store assigns.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from parcel_server.models.parcel import DeliveryStatus, PaymentStatus


class ParcelCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    created_by: Optional[str] = Field(default=None, description="Email of the booking user")
    payment_status: PaymentStatus = Field(default=PaymentStatus.UNPAID)
    delivery_status: DeliveryStatus = Field(default=DeliveryStatus.PENDING)
    createdAt: Optional[datetime] = Field(
        default=None,
        description="Booking time (ISO-8601); stored as a UTC date, stamped by the server when omitted",
    )
