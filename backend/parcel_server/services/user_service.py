"""
Parcel Server — User Service
=============================

What:  Sign-in registration, lookup, search and role management over `users`.
Who:   Called by routes/users.py, the admin-role guard, and RiderService
       (role side effect of rider activation).
"""

import logging
import re
from typing import List, Optional, Union

from parcel_server.database import DocumentStore, translate_store_errors
from parcel_server.exceptions import NotFoundError, ValidationError
from parcel_server.models import ASSIGNABLE_ROLES, User, UserRole, parse_object_id
from parcel_server.models.document import new_document, utc_now
from parcel_server.schemas.common import InsertResult, UpdateResult
from parcel_server.schemas.user import RoleUpdateResponse, UserCreate, UserExistsResponse

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


class UserService:
    """Stateless; `users` holds one document per signed-in email."""

    async def find_by_email(self, store: DocumentStore, email: str) -> Optional[User]:
        with translate_store_errors("look up the user", email=email):
            document = await store.users.find_one({"email": email})
        return User.from_document(document) if document else None

    async def register(
        self, store: DocumentStore, payload: UserCreate
    ) -> Union[InsertResult, UserExistsResponse]:
        """
        Insert the user unless one with the same email exists.

        This is a read-then-insert, not an upsert: two concurrent first
        sign-ins for one email can both insert.
        """
        existing = await self.find_by_email(store, payload.email)
        if existing is not None:
            logger.debug("User %s already registered", payload.email)
            return UserExistsResponse()

        document = new_document(payload)
        now = utc_now().isoformat()
        document["role"] = UserRole.USER.value
        document.setdefault("created_at", now)
        document.setdefault("last_log_in", now)

        with translate_store_errors("create the user", email=payload.email):
            result = await store.users.insert_one(document)

        logger.info("User %s registered", payload.email)
        return InsertResult.from_driver(result)

    async def search(self, store: DocumentStore, email_query: str) -> List[User]:
        """Case-insensitive substring match on email, capped at SEARCH_LIMIT."""
        if not email_query:
            raise ValidationError(message="Missing email query", field="email")

        pattern = re.escape(email_query)
        with translate_store_errors("search users", query=email_query):
            cursor = store.users.find({"email": {"$regex": pattern, "$options": "i"}})
            documents = await cursor.limit(SEARCH_LIMIT).to_list(length=None)
        return [User.from_document(doc) for doc in documents]

    async def update_role(
        self, store: DocumentStore, user_id: str, role: str
    ) -> RoleUpdateResponse:
        """
        Set the role of one user. Only admin/user are assignable here.

        Raises:
            ValidationError: bad id or role (400, no write)
            NotFoundError:   no user has that id (404)
        """
        oid = parse_object_id(user_id, "user")
        if role not in {r.value for r in ASSIGNABLE_ROLES}:
            raise ValidationError(
                message=f"Invalid role '{role}'. Must be one of: admin, user",
                field="role",
            )

        with translate_store_errors("update the user role", user_id=user_id):
            result = await store.users.update_one({"_id": oid}, {"$set": {"role": role}})

        if result.matched_count == 0:
            raise NotFoundError(resource="user", resource_id=user_id)

        logger.info("User %s role set to %s", user_id, role)
        return RoleUpdateResponse(
            message=f"User role updated to {role}",
            result=UpdateResult.from_driver(result),
        )

    async def get_role(self, store: DocumentStore, email: str) -> str:
        if not email:
            raise ValidationError(message="Email is required", field="email")
        user = await self.find_by_email(store, email)
        if user is None:
            raise NotFoundError(resource="user", resource_id=email)
        return user.role.value

    async def grant_rider_role(self, store: DocumentStore, email: str) -> int:
        """Returns the number of user documents modified (0 or 1)."""
        with translate_store_errors("grant the rider role", email=email):
            result = await store.users.update_one(
                {"email": email},
                {"$set": {"role": UserRole.RIDER.value}},
            )
        return result.modified_count


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
