"""
Parcel Server — Parcel Route Handlers
======================================

Endpoints:
    GET    /parcels        self-only       list the caller's parcels, newest first
    GET    /parcels/{id}   public          one parcel (400 bad id, 404 missing)
    POST   /parcels        public          book a parcel (201)
    DELETE /parcels/{id}   owner-or-admin  delete a parcel
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from parcel_server.auth import verify_owner_or_admin, verify_self_access
from parcel_server.database import DocumentStore, get_store
from parcel_server.models import Parcel
from parcel_server.schemas.common import DeleteResult, ErrorResponse, InsertResult
from parcel_server.schemas.parcel import ParcelCreate
from parcel_server.services.identity import DecodedIdentity
from parcel_server.services.parcel_service import parcel_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/parcels", tags=["Parcels"])


@router.get(
    "",
    response_model=List[Parcel],
    responses={
        400: {"description": "Unknown status filter", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "email is not the caller's", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List the caller's parcels",
)
async def list_parcels(
    payment_status: Optional[str] = Query(default=None, description="unpaid or paid"),
    delivery_status: Optional[str] = Query(
        default=None, description="pending, active or cancelled"
    ),
    identity: DecodedIdentity = Depends(verify_self_access),
    store: DocumentStore = Depends(get_store),
) -> List[Parcel]:
    """
    Filters combine with AND; `email` (checked by the self-access guard)
    selects on `created_by`. Sorted by `createdAt` descending.
    """
    return await parcel_service.list_parcels(
        store,
        created_by=identity.email,
        payment_status=payment_status,
        delivery_status=delivery_status,
    )


@router.get(
    "/{parcel_id}",
    response_model=Parcel,
    responses={
        400: {"description": "Malformed parcel id", "model": ErrorResponse},
        404: {"description": "Parcel not found", "model": ErrorResponse},
    },
    summary="Get a parcel by id",
)
async def get_parcel(parcel_id: str, store: DocumentStore = Depends(get_store)) -> Parcel:
    return await parcel_service.get_parcel(store, parcel_id)


@router.post(
    "",
    status_code=201,
    response_model=InsertResult,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="Book a parcel",
)
async def create_parcel(
    payload: ParcelCreate,
    store: DocumentStore = Depends(get_store),
) -> InsertResult:
    return await parcel_service.create_parcel(store, payload)


@router.delete(
    "/{parcel_id}",
    response_model=DeleteResult,
    responses={
        400: {"description": "Malformed parcel id", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Caller is neither owner nor admin", "model": ErrorResponse},
        404: {"description": "Parcel not found", "model": ErrorResponse},
    },
    summary="Delete a parcel",
)
async def delete_parcel(
    parcel: Parcel = Depends(verify_owner_or_admin),
    store: DocumentStore = Depends(get_store),
) -> DeleteResult:
    return await parcel_service.delete_parcel(store, parcel.id)
