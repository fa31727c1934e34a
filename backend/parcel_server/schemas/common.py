"""
Parcel Server — Shared Response Schemas
========================================

What:  Write-result envelopes, the uniform error body and the health report.
Wire format: write results use the camelCase keys clients already parse
             (`insertedId`, `matchedCount`, `modifiedCount`, `deletedCount`).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class InsertResult(BaseModel):
    """Returned by every creation endpoint (HTTP 201)."""

    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = Field(default=True)
    inserted_id: str = Field(alias="insertedId", description="Identifier of the new document")

    @classmethod
    def from_driver(cls, result) -> "InsertResult":
        return cls(acknowledged=result.acknowledged, inserted_id=str(result.inserted_id))


class UpdateResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = Field(default=True)
    matched_count: int = Field(alias="matchedCount")
    modified_count: int = Field(alias="modifiedCount")

    @classmethod
    def from_driver(cls, result) -> "UpdateResult":
        return cls(
            acknowledged=result.acknowledged,
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )


class DeleteResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = Field(default=True)
    deleted_count: int = Field(alias="deletedCount")

    @classmethod
    def from_driver(cls, result) -> "DeleteResult":
        return cls(acknowledged=result.acknowledged, deleted_count=result.deleted_count)


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Example:
        {
            "error": "forbidden",
            "message": "forbidden access",
            "details": {},
            "request_id": "1f0c9a2b"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Document store connectivity: connected, disconnected")
    payments: str = Field(description="Payment gateway: configured, not_configured")
    identity: str = Field(description="Identity provider: configured, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
