"""
Parcel Server — User Record
============================

What:  Typed view of a document in the `users` collection.
       One document per signed-in email; uniqueness is checked before insert,
       not enforced by an index.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from parcel_server.models.document import DocumentRecord


class UserRole(str, Enum):
    USER = "user"
    RIDER = "rider"
    ADMIN = "admin"


# Roles an admin may assign directly; 'rider' is only granted by rider activation
ASSIGNABLE_ROLES = (UserRole.ADMIN, UserRole.USER)


class User(DocumentRecord):
    email: str
    role: UserRole = UserRole.USER
    created_at: Optional[Union[datetime, str]] = None
    last_log_in: Optional[Union[datetime, str]] = None
