"""
Parcel Server — Payment Route Handlers
=======================================

Endpoints:
    GET  /payments                self-only  the caller's payment history
    POST /payments                public     confirm a payment (201)
    POST /create-payment-intent   public     Stripe client secret for checkout
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from parcel_server.auth import verify_self_access
from parcel_server.database import DocumentStore, get_store
from parcel_server.models import Payment
from parcel_server.schemas.common import ErrorResponse
from parcel_server.schemas.payment import (
    PaymentConfirm,
    PaymentConfirmResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
)
from parcel_server.services.identity import DecodedIdentity
from parcel_server.services.payment_gateway import PaymentGateway, get_payment_gateway
from parcel_server.services.payment_service import payment_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Payments"])


@router.get(
    "/payments",
    response_model=List[Payment],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "email is not the caller's", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List the caller's payments",
)
async def list_payments(
    identity: DecodedIdentity = Depends(verify_self_access),
    store: DocumentStore = Depends(get_store),
) -> List[Payment]:
    return await payment_service.list_payments(store, identity.email)


@router.post(
    "/payments",
    status_code=201,
    response_model=PaymentConfirmResponse,
    responses={
        400: {"description": "Malformed parcel id", "model": ErrorResponse},
        404: {"description": "Parcel not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Confirm a payment and mark the parcel paid",
)
async def confirm_payment(
    payload: PaymentConfirm,
    store: DocumentStore = Depends(get_store),
) -> PaymentConfirmResponse:
    return await payment_service.confirm_payment(store, payload)


@router.post(
    "/create-payment-intent",
    response_model=PaymentIntentResponse,
    responses={500: {"description": "Payment provider error", "model": ErrorResponse}},
    summary="Create a Stripe payment intent",
)
async def create_payment_intent(
    payload: PaymentIntentRequest,
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> PaymentIntentResponse:
    client_secret = await gateway.create_payment_intent(payload.amount_in_cents)
    return PaymentIntentResponse(client_secret=client_secret)
