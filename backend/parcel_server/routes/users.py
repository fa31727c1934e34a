"""
Parcel Server — User Route Handlers
====================================

Endpoints:
    POST  /users               public      register on first sign-in
    GET   /users/search        public      email substring search (max 10)
    PATCH /users/{id}/role     admin-only  set role to admin or user
    GET   /users/{email}/role  public      role lookup for client-side routing
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from parcel_server.auth import ADMIN_ONLY
from parcel_server.database import DocumentStore, get_store
from parcel_server.models import User
from parcel_server.schemas.common import ErrorResponse, InsertResult
from parcel_server.schemas.user import (
    RoleResponse,
    RoleUpdate,
    RoleUpdateResponse,
    UserCreate,
    UserExistsResponse,
)
from parcel_server.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "",
    status_code=201,
    response_model=InsertResult,
    responses={200: {"description": "User already exists", "model": UserExistsResponse}},
    summary="Register a user on first sign-in",
)
async def register_user(payload: UserCreate, store: DocumentStore = Depends(get_store)):
    """
    Inserts the user (201) unless the email is already registered, in which
    case nothing is written and `{message, inserted: false}` comes back with 200.
    """
    result = await user_service.register(store, payload)
    if isinstance(result, UserExistsResponse):
        return JSONResponse(status_code=200, content=result.model_dump())
    return result


@router.get(
    "/search",
    response_model=List[User],
    responses={400: {"description": "Missing email query", "model": ErrorResponse}},
    summary="Search users by email",
)
async def search_users(
    email: Optional[str] = Query(default=None, description="Case-insensitive email fragment"),
    store: DocumentStore = Depends(get_store),
) -> List[User]:
    return await user_service.search(store, email or "")


@router.patch(
    "/{user_id}/role",
    response_model=RoleUpdateResponse,
    dependencies=ADMIN_ONLY,
    responses={
        400: {"description": "Malformed id or unknown role", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Caller is not an admin", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Change a user's role",
)
async def update_user_role(
    user_id: str,
    payload: RoleUpdate,
    store: DocumentStore = Depends(get_store),
) -> RoleUpdateResponse:
    return await user_service.update_role(store, user_id, payload.role)


@router.get(
    "/{email}/role",
    response_model=RoleResponse,
    responses={
        400: {"description": "Missing email", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Get a user's role by email",
)
async def get_user_role(email: str, store: DocumentStore = Depends(get_store)) -> RoleResponse:
    role = await user_service.get_role(store, email.strip())
    return RoleResponse(role=role)
