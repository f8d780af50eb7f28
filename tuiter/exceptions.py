"""
Tuiter Backend — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for the failure kinds the API distinguishes.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses.
Who:   Raised by stores, services and auth helpers; caught by global handlers
       or, on endpoints with a fixed legacy status, by the route itself.

Exception Hierarchy:
    TuiterError (base)
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 403 Forbidden (duplicate username)
    ├── UnauthenticatedError     → 403 Forbidden (no session profile)
    ├── InvalidCredentialsError  → 403 Forbidden (login failed)
    └── StoreError               → 500 Internal Server Error
        └── AnnotationError      → 500 (a fan-out lookup failed)

The 403 mappings keep the status codes existing clients already handle.
"""

from typing import Any, Dict, Optional


class TuiterError(Exception):
    """
    Base exception for all Tuiter application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(TuiterError):
    """
    Raised when a requested user, tuit or join record does not exist.

    SQLAlchemy returns None for missing rows; routes that need a 404
    convert that None into this exception.
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


class ConflictError(TuiterError):
    """Raised when a username is already taken."""

    def __init__(
        self,
        message: str = "Username is already taken",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthenticatedError(TuiterError):
    """Raised when an endpoint needs a session profile and none is present."""

    def __init__(
        self,
        message: str = "You are not logged in",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(TuiterError):
    """Raised when a username/password pair does not match a stored user."""

    def __init__(
        self,
        message: str = "Invalid username or password",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreError(TuiterError):
    """
    Raised when a record store operation fails.

    Security Note:
        The message returned to the client is always generic. The original
        exception type and the operation name go into ``context`` for the logs.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AnnotationError(StoreError):
    """
    Raised when any like/dislike/bookmark lookup of an annotation fan-out fails.

    Annotation is all-or-nothing: a failed lookup is never read as
    "no record", and no partially decorated list is returned.
    """

    def __init__(
        self,
        relation: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["relation"] = relation
        super().__init__(
            message=f"Could not load {relation} for the requested tuits.",
            context=ctx,
        )
        self.relation = relation
