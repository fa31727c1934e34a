"""
Parcel Server — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for each error class the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) map them to
       HTTP status codes and a uniform JSON error body.
Who:   Raised by services, guards and the store adapter; caught by handlers.

Exception Hierarchy:
    ParcelServerError (base)
    ├── ValidationError        → 400 Bad Request
    ├── UnauthorizedError      → 401 Unauthorized
    ├── ForbiddenError         → 403 Forbidden
    ├── NotFoundError          → 404 Not Found
    ├── DatabaseError          → 500 Internal Server Error
    └── PaymentProviderError   → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class ParcelServerError(Exception):
    """
    Base exception for all Parcel Server application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned for 5xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ParcelServerError):
    """
    Raised when client input fails a business-rule check.

    When:    Malformed identifier, unrecognized role/status value, missing
             required query parameter.
    HTTP:    400 Bad Request. No store operation is attempted.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(ParcelServerError):
    """
    Raised by the credential check.

    When:    Missing/malformed Authorization header, or the identity
             provider rejected the bearer token.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "unauthorized access",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(ParcelServerError):
    """
    Raised by the self-access, owner and admin-role checks.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "forbidden access",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ParcelServerError):
    """
    Raised when a direct entity lookup yields nothing.

    The driver returns None for missing documents; services convert that
    into NotFoundError so the handler maps it to 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(ParcelServerError):
    """
    Raised when a document store operation fails.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the driver error
    is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PaymentProviderError(ParcelServerError):
    """
    Raised when the payment gateway rejects or fails a request.

    HTTP:    500 Internal Server Error. Not retried: a repeated intent
             creation would create a second intent at the provider.
    """

    def __init__(
        self,
        message: str = "The payment provider could not process the request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
