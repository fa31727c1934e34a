"""
Parcel Server — Identity Verifier (Firebase Admin)
===================================================

What:  Validates bearer ID tokens issued by Firebase Authentication and
       yields the decoded identity (uid + email claim).
How:   `firebase_admin.auth.verify_id_token` checks signature, expiry,
       audience and issuer. The SDK call is blocking (it may fetch Google's
       public certificates), so it runs in a worker thread.
Who:   Constructed once in the lifespan (`app.state.identity_verifier`);
       used by the credential check in auth.py.

Credentials:
    FB_SERVICE_KEY holds the service-account JSON, base64-encoded. The
    Firebase app is initialized lazily on first use and reused afterwards.
"""

import asyncio
import base64
import json
import logging
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError
from pydantic import BaseModel, Field

from parcel_server.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


class DecodedIdentity(BaseModel):
    """Verified claims of the caller. `email` drives every authorization check."""

    uid: str
    email: str
    claims: Dict[str, Any] = Field(default_factory=dict)


class IdentityVerifier:
    """
    Firebase ID-token checker bound to one named firebase_admin app.

    Error Handling:
        Every rejection (missing key, bad signature, expired token, no email
        claim) is logged with its reason and raised as UnauthorizedError (401).
    """

    APP_NAME = "parcel-server"

    def __init__(self, service_key: str, app_name: Optional[str] = None):
        self._service_key = service_key
        self._app_name = app_name or self.APP_NAME
        self._app: Optional[firebase_admin.App] = None

    @property
    def configured(self) -> bool:
        return bool(self._service_key)

    def _get_app(self) -> firebase_admin.App:
        if self._app is not None:
            return self._app
        try:
            self._app = firebase_admin.get_app(self._app_name)
        except ValueError:
            service_account = json.loads(base64.b64decode(self._service_key).decode("utf-8"))
            self._app = firebase_admin.initialize_app(
                credentials.Certificate(service_account),
                name=self._app_name,
            )
            logger.info(
                "Firebase app '%s' initialized for project %s",
                self._app_name,
                service_account.get("project_id", "unknown"),
            )
        return self._app

    async def verify(self, token: str) -> DecodedIdentity:
        """
        Verify `token` and return the caller's identity.

        Raises:
            UnauthorizedError: provider not configured, token rejected, or
                               the token carries no email claim (401).
        """
        if not self.configured:
            logger.error("Bearer token received but FB_SERVICE_KEY is not configured")
            raise UnauthorizedError(context={"reason": "identity provider not configured"})

        try:
            app = self._get_app()
            claims = await asyncio.to_thread(auth.verify_id_token, token, app=app)
        except (ValueError, FirebaseError) as e:
            # ValueError covers malformed tokens and unreadable service keys
            logger.warning("ID token rejected: %s: %s", type(e).__name__, str(e))
            raise UnauthorizedError(context={"reason": type(e).__name__})

        email = claims.get("email")
        if not email:
            logger.warning("ID token for uid=%s has no email claim", claims.get("uid"))
            raise UnauthorizedError(context={"reason": "email claim missing"})

        return DecodedIdentity(uid=claims.get("uid", ""), email=email, claims=claims)
