"""
Parcel Server — Authorization Guards
=====================================

What:  The guard chain that runs in front of protected route handlers.
How:   Each guard is a FastAPI dependency. It either returns an enriched
       value (the decoded identity, or the parcel being deleted) or raises an
       application error that ends the request before the handler runs.

Guard Chain:
    ┌────────────────┐    ┌──────────────────────┐
    │ verify_token   │───▶│ verify_self_access   │  403 unless ?email == token email
    │ 401 on failure │    ├──────────────────────┤
    └────────────────┘───▶│ verify_admin         │  403 unless users.role == admin
                      └──▶├──────────────────────┤
                          │ verify_owner_or_admin│  403 unless created_by == token email or admin
                          └──────────────────────┘

    Every second-stage guard declares `verify_token` as its own dependency,
    so none of them can run without a decoded identity.

Sensitivity Classes:
    public          : no guard
    self-only       : Depends(verify_self_access)
    owner-or-admin  : Depends(verify_owner_or_admin)
    admin-only      : dependencies=ADMIN_ONLY
"""

import logging
from typing import Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from parcel_server.database import DocumentStore, get_store
from parcel_server.exceptions import ForbiddenError, UnauthorizedError
from parcel_server.models import Parcel, UserRole
from parcel_server.services.identity import DecodedIdentity, IdentityVerifier
from parcel_server.services.parcel_service import parcel_service
from parcel_server.services.user_service import user_service

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must produce our 401 body, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_identity_verifier(request: Request) -> IdentityVerifier:
    verifier = getattr(request.app.state, "identity_verifier", None)
    if verifier is None:
        raise UnauthorizedError(context={"reason": "identity verifier not initialized"})
    return verifier


# ── Stage 1: Credential Check ─────────────────────────────────────────────
async def verify_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> DecodedIdentity:
    """
    Require `Authorization: Bearer <token>` and a token the provider accepts.

    On success the identity is also stored on `request.state.identity`,
    where the access log picks up the caller email.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(context={"reason": "missing bearer token"})

    identity = await verifier.verify(credentials.credentials)
    request.state.identity = identity
    return identity


# ── Stage 2: Self-Access Check ────────────────────────────────────────────
async def verify_self_access(
    email: Optional[str] = Query(default=None, description="Email whose records are requested"),
    identity: DecodedIdentity = Depends(verify_token),
) -> DecodedIdentity:
    if not email or email != identity.email:
        logger.warning("Self-access denied: %s requested records of %s", identity.email, email)
        raise ForbiddenError(context={"requested": email})
    return identity


# ── Stage 3: Admin-Role Check ─────────────────────────────────────────────
async def verify_admin(
    identity: DecodedIdentity = Depends(verify_token),
    store: DocumentStore = Depends(get_store),
) -> DecodedIdentity:
    user = await user_service.find_by_email(store, identity.email)
    if user is None or user.role is not UserRole.ADMIN:
        logger.warning("Admin access denied for %s", identity.email)
        raise ForbiddenError(context={"required_role": UserRole.ADMIN.value})
    return identity


# ── Ownership Check (parcel deletion) ─────────────────────────────────────
async def verify_owner_or_admin(
    parcel_id: str,
    identity: DecodedIdentity = Depends(verify_token),
    store: DocumentStore = Depends(get_store),
) -> Parcel:
    """
    Allow the parcel's creator or any admin. Returns the parcel so the
    handler does not read it again; 400/404 come from the lookup.
    """
    parcel = await parcel_service.get_parcel(store, parcel_id)
    if parcel.created_by == identity.email:
        return parcel

    user = await user_service.find_by_email(store, identity.email)
    if user is not None and user.role is UserRole.ADMIN:
        return parcel

    logger.warning("Parcel %s delete denied for %s", parcel_id, identity.email)
    raise ForbiddenError(context={"parcel_id": parcel_id})


# ── Sensitivity Classes ───────────────────────────────────────────────────
ADMIN_ONLY = [Depends(verify_admin)]
