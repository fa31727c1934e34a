"""
Parcel Server — Liveness Route
===============================

GET / answers with a plain-text message so a browser or uptime check can see
the process is serving requests. It touches no dependency; GET /health does.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["Root"])

LIVENESS_MESSAGE = "Parcel Server is running!"


@router.get("/", response_class=PlainTextResponse, summary="Liveness message")
async def root() -> str:
    """Always answers 200 with LIVENESS_MESSAGE while the process is serving."""
    return LIVENESS_MESSAGE
