"""
Parcel Server — Rider Route Handlers
=====================================

Endpoints:
    POST  /riders             public      submit a rider application (201)
    GET   /riders/pending     admin-only  applications awaiting review
    GET   /riders/active      admin-only  approved riders
    GET   /riders/available   public      riders in a district
    PATCH /riders/{id}        admin-only  approve / cancel an application
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from parcel_server.auth import ADMIN_ONLY
from parcel_server.database import DocumentStore, get_store
from parcel_server.models import Rider, RiderStatus
from parcel_server.schemas.common import ErrorResponse, InsertResult
from parcel_server.schemas.rider import RiderCreate, RiderStatusResponse, RiderStatusUpdate
from parcel_server.services.rider_service import rider_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/riders", tags=["Riders"])

_ADMIN_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Caller is not an admin", "model": ErrorResponse},
}


@router.post("", status_code=201, response_model=InsertResult, summary="Apply as a rider")
async def apply_as_rider(
    payload: RiderCreate,
    store: DocumentStore = Depends(get_store),
) -> InsertResult:
    return await rider_service.apply(store, payload)


@router.get(
    "/pending",
    response_model=List[Rider],
    dependencies=ADMIN_ONLY,
    responses=_ADMIN_ERRORS,
    summary="List pending rider applications",
)
async def list_pending_riders(store: DocumentStore = Depends(get_store)) -> List[Rider]:
    return await rider_service.list_by_status(store, RiderStatus.PENDING)


@router.get(
    "/active",
    response_model=List[Rider],
    dependencies=ADMIN_ONLY,
    responses=_ADMIN_ERRORS,
    summary="List active riders",
)
async def list_active_riders(store: DocumentStore = Depends(get_store)) -> List[Rider]:
    return await rider_service.list_by_status(store, RiderStatus.ACTIVE)


@router.get(
    "/available",
    response_model=List[Rider],
    responses={400: {"description": "Missing district", "model": ErrorResponse}},
    summary="List riders in a district",
)
async def list_available_riders(
    district: Optional[str] = Query(default=None),
    store: DocumentStore = Depends(get_store),
) -> List[Rider]:
    return await rider_service.list_available(store, district or "")


@router.patch(
    "/{rider_id}",
    response_model=RiderStatusResponse,
    dependencies=ADMIN_ONLY,
    responses={
        **_ADMIN_ERRORS,
        400: {"description": "Malformed id or unknown status", "model": ErrorResponse},
        404: {"description": "Rider not found", "model": RiderStatusResponse},
    },
    summary="Change a rider's status",
)
async def update_rider_status(
    rider_id: str,
    payload: RiderStatusUpdate,
    store: DocumentStore = Depends(get_store),
):
    result = await rider_service.update_status(store, rider_id, payload)
    if not result.success:
        return JSONResponse(status_code=404, content=result.model_dump(by_alias=True))
    return result
