"""
Parcel Server — Rider Request/Response Schemas
===============================================
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RiderCreate(BaseModel):
    """Rider application form; fields beyond email/district are stored as sent."""

    model_config = ConfigDict(extra="allow")

    email: str = Field(min_length=1)
    district: str = Field(min_length=1)


class RiderStatusUpdate(BaseModel):
    status: str = Field(description="New status: pending, active or cancelled")
    # Fallback for the user-role side effect when the rider document has no email
    email: Optional[str] = None


class RiderStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    modified_count: int = Field(alias="modifiedCount")
