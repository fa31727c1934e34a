"""
Parcel Server — User Request/Response Schemas
==============================================
"""

from pydantic import BaseModel, ConfigDict, Field

from parcel_server.schemas.common import UpdateResult


class UserCreate(BaseModel):
    """
    Sign-in profile sent after every login. Extra profile fields (name,
    photo, timestamps) are stored as sent; `role` is always set server-side.
    """

    model_config = ConfigDict(extra="allow")

    email: str = Field(min_length=1)


class UserExistsResponse(BaseModel):
    message: str = "user already exists"
    inserted: bool = False


class RoleUpdate(BaseModel):
    role: str = Field(description="New role: admin or user")


class RoleUpdateResponse(BaseModel):
    message: str
    result: UpdateResult


class RoleResponse(BaseModel):
    role: str
