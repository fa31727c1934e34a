"""
Parcel Server — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`parcel_server.main:app`), the `parcel-server` console
       script, and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routes (+ guards):                                      │
    │  ┌──────────┐ ┌──────────┐ ┌────────┐ ┌────────┐         │
    │  │ /parcels │ │/payments │ │ /users │ │/riders │  / /health
    │  └──────────┘ └──────────┘ └────────┘ └────────┘         │
    │                                                          │
    │  Exception Handlers:                                     │
    │  400 Validation │ 401 │ 403 │ 404 │ 500 Database/Payment │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate provider configuration (log, do not exit)
    3. Open the document store, ping it
    4. Build the payment gateway and identity verifier

    Shutdown:
    1. Close the document store client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from parcel_server import __version__
from parcel_server.config import settings
from parcel_server.database import DocumentStore
from parcel_server.exceptions import (
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    PaymentProviderError,
    UnauthorizedError,
    ValidationError,
)
from parcel_server.middleware.logging import RequestLoggingMiddleware
from parcel_server.middleware.request_id import RequestIDMiddleware, request_id_var
from parcel_server.routes import health, parcels, payments, riders, root, users
from parcel_server.services.identity import IdentityVerifier
from parcel_server.services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: 2024-01-15T12:00:00 [INFO] parcel_server.access: GET /parcels 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("stripe").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the external collaborators on startup and release them on shutdown.

    Anything already placed on app.state (tests inject doubles there) is kept.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("Parcel Server starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    owns_store = getattr(app.state, "store", None) is None
    if owns_store:
        app.state.store = DocumentStore.from_settings()
    if await app.state.store.ping():
        logger.info("Connected to document store, database=%s", settings.database_name)
    else:
        logger.error("Document store unreachable; requests will fail until it recovers")

    if getattr(app.state, "payment_gateway", None) is None:
        app.state.payment_gateway = PaymentGateway(
            api_key=settings.payment_gateway_key,
            currency=settings.payment_currency,
        )
    if getattr(app.state, "identity_verifier", None) is None:
        app.state.identity_verifier = IdentityVerifier(service_key=settings.fb_service_key)

    logger.info("Server is listening on port %d", settings.port)
    logger.info("=" * 60)

    yield

    logger.info("Parcel Server shutting down...")
    if owns_store:
        await app.state.store.close()
        app.state.store = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details=None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details is not None:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy onto HTTP responses.

        ValidationError / RequestValidationError → 400
        UnauthorizedError                        → 401
        ForbiddenError                           → 403
        NotFoundError                            → 404
        DatabaseError / PaymentProviderError     → 500 (generic message)
        Exception (fallback)                     → 500

    5xx bodies never include driver or provider details; those are logged.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"Invalid request: {location} {first.get('msg', '')}".strip()
        logger.warning("[%s] Request validation error: %s", request_id_var.get(""), message)
        return JSONResponse(
            status_code=400,
            content=_error_body(
                "validation_error",
                message,
                {"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]},
            ),
        )

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        logger.info("[%s] Unauthorized: %s", request_id_var.get(""), exc.context)
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthorized", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        return JSONResponse(status_code=403, content=_error_body("forbidden", exc.message))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=_error_body("not_found", exc.message))

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error", "An internal error occurred. Please try again later."
            ),
        )

    @app.exception_handler(PaymentProviderError)
    async def handle_payment_provider_error(request: Request, exc: PaymentProviderError):
        logger.error(
            "[%s] Payment provider error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(status_code=500, content=_error_body("server_error", exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Parcel Server API",
        description=(
            "Parcel delivery booking backend: parcels, payments, users and riders, "
            "backed by MongoDB with Stripe payments and Firebase authentication."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(root.router)
    app.include_router(health.router)
    app.include_router(parcels.router)
    app.include_router(payments.router)
    app.include_router(users.router)
    app.include_router(riders.router)

    return app


app = create_app()


def run() -> None:
    """Console-script entry point: serve `app` with uvicorn on the configured port."""
    import uvicorn

    uvicorn.run(
        "parcel_server.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
