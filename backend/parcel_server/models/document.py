"""
Parcel Server — Document Record Base
=====================================

What:  Shared plumbing for turning raw MongoDB documents into typed records.
How:   `DocumentRecord.from_document()` renames `_id` to a string `id`,
       stringifies nested ObjectIds, and validates the result against the
       record's declared fields. A document that breaks the contract (for
       example an unknown status written by another client) surfaces as a
       DatabaseError instead of leaking a pydantic error.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from parcel_server.exceptions import DatabaseError, ValidationError

RecordT = TypeVar("RecordT", bound="DocumentRecord")
EnumT = TypeVar("EnumT", bound=Enum)


def _stringify_ids(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _stringify_ids(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_stringify_ids(v) for v in value]
    return value


def parse_object_id(value: str, resource: str = "document") -> ObjectId:
    """
    Validates a path/body identifier before it reaches the store.

    Raises:
        ValidationError: `value` is not a 24-hex-digit ObjectId (400).
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationError(
            message=f"Invalid {resource} id '{value}'",
            field="id",
            context={"resource": resource},
        )


def parse_enum(enum_cls: Type[EnumT], value: Optional[str], field: str) -> Optional[EnumT]:
    """Maps a raw string onto `enum_cls`, or raises a 400 naming the valid values."""
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            message=f"Invalid {field} '{value}'. Must be one of: {allowed}",
            field=field,
            context={"allowed": [member.value for member in enum_cls]},
        )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC; aware ones are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Identifiers are always assigned by the store
RESERVED_KEYS = ("_id", "id")


def new_document(payload: BaseModel, exclude: Optional[set] = None) -> Dict[str, Any]:
    """
    Dump a request body (declared and pass-through fields) for insert_one.

    Client-sent `_id` / `id` keys are dropped so every stored document gets
    an ObjectId the id-based routes can address.
    """
    document = payload.model_dump(mode="json", exclude=exclude)
    for key in RESERVED_KEYS:
        document.pop(key, None)
    return document


class DocumentRecord(BaseModel):
    """
    Base class for the four stored entities.

    Extra fields are kept: the collections are schema-less and clients store
    booking/profile details the API does not interpret.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, use_enum_values=False)

    id: str

    @classmethod
    def from_document(cls: Type[RecordT], document: Mapping[str, Any]) -> RecordT:
        data: Dict[str, Any] = _stringify_ids(dict(document))
        if "_id" in data:
            data["id"] = data.pop("_id")
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise DatabaseError(
                message="A stored record could not be read. Please try again later.",
                context={
                    "record": cls.__name__,
                    "id": data.get("id"),
                    "errors": e.errors(include_url=False),
                },
            )
