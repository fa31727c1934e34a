"""
Parcel Server — Access Log Middleware
======================================

What:  One `parcel_server.access` line per request, naming who called which
       route and how it ended:

           PATCH /riders/{rider_id} 200 12.4ms caller=admin@example.com [1f0c9a2b]

How:   The route is logged as its template (`/parcels/{parcel_id}`), so
       parcel and rider ids do not fragment the log. The caller is the email
       the credential check stored on `request.state.identity`; requests
       that never passed it log `caller=-`. Severity follows the status
       class: 5xx ERROR, 401/403 WARNING, anything else INFO.
       /health is skipped.

Not logged: request bodies, query strings and the Authorization header.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

from parcel_server.middleware.request_id import request_id_var

logger = logging.getLogger("parcel_server.access")

ANONYMOUS = "-"
_QUIET_PATHS = frozenset({"/health"})


def route_template(request: Request) -> str:
    """The matched route's path template, or the raw path when nothing matched."""
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match is Match.FULL:
            return getattr(route, "path", request.url.path)
    return request.url.path


def caller_email(request: Request) -> str:
    identity = getattr(request.state, "identity", None)
    return getattr(identity, "email", None) or ANONYMOUS


def access_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status in (401, 403):
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        route = route_template(request)
        caller = caller_email(request)
        request_id = request_id_var.get("")
        logger.log(
            access_level(response.status_code),
            "%s %s %d %.1fms caller=%s [%s]",
            request.method,
            route,
            response.status_code,
            elapsed_ms,
            caller,
            request_id,
            extra={
                "request_id": request_id,
                "route": route,
                "caller": caller,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
