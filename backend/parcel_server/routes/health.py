"""
Parcel Server — Health Check Route
===================================

What:  Dependency health for monitoring and load balancer health checks.
How:   Pings the document store and reports whether the payment gateway and
       identity verifier have credentials.

    Status levels:
    - healthy:   store reachable, both providers configured (HTTP 200)
    - degraded:  store reachable, a provider lacks credentials (HTTP 200)
    - unhealthy: store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from parcel_server import __version__
from parcel_server.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Document store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    state = request.app.state
    overall = "healthy"

    store = getattr(state, "store", None)
    database = "connected" if store is not None and await store.ping() else "disconnected"
    if database == "disconnected":
        overall = "unhealthy"

    gateway = getattr(state, "payment_gateway", None)
    payments = "configured" if gateway is not None and gateway.configured else "not_configured"

    verifier = getattr(state, "identity_verifier", None)
    identity = "configured" if verifier is not None and verifier.configured else "not_configured"

    if overall == "healthy" and "not_configured" in (payments, identity):
        overall = "degraded"

    report = HealthResponse(
        status=overall,
        version=__version__,
        database=database,
        payments=payments,
        identity=identity,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        logger.warning("Health check: document store unreachable")
        return JSONResponse(status_code=503, content=report.model_dump())
    return report
