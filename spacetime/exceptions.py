"""
Spacetime API — Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for the different error scenarios.
Why:   Custom exceptions enable targeted error handling with the right HTTP
       status code without leaking internal details to the client.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) turn them into
       responses.
Who:   Raised by the security and service layers; caught by global handlers.

Exception Hierarchy:
    SpacetimeError (base)
    ├── AuthenticationError  → 401 Unauthorized (JSON body)
    ├── AccessDeniedError    → 401 Unauthorized (empty body)
    ├── NotFoundError        → 404 Not Found
    └── DatabaseError        → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class SpacetimeError(Exception):
    """
    Base exception for all Spacetime application errors.

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


class AuthenticationError(SpacetimeError):
    """
    Raised when the bearer credential is absent, malformed, or invalid.

    HTTP:  401 Unauthorized, with a `WWW-Authenticate: Bearer` challenge.
    """

    def __init__(
        self,
        message: str = "Not authenticated",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AccessDeniedError(SpacetimeError):
    """
    Raised when the caller is authenticated but may not touch a memory.

    HTTP:  401 Unauthorized with an EMPTY body. The response never says
           whether the memory exists as private or who owns it.
    """

    def __init__(
        self,
        resource_id: Optional[str] = None,
        caller: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id:
            ctx["resource_id"] = resource_id
        if caller:
            ctx["caller"] = caller
        super().__init__(message="Access to this resource is not allowed", context=ctx)


class NotFoundError(SpacetimeError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; the service layer converts
    that into this exception so the handler can answer 404.
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


class DatabaseError(SpacetimeError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the original
    error type is kept in `context` for the server-side log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
