"""
Blog API Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by the post store, the route handlers and the server module.

Exception Hierarchy:
    BlogAPIError (base)
    ├── ValidationError   → 400 Bad Request (client can fix)
    ├── NotFoundError     → 404 Not Found
    ├── StorageError      → 500 Internal Server Error (not retried)
    └── ServerStateError  → lifecycle misuse (start while running)
"""

from typing import Any, Dict, Optional


class BlogAPIError(Exception):
    """
    Base exception for all Blog API errors.

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


class ValidationError(BlogAPIError):
    """
    Raised when client input fails validation.

    When:    Missing or empty required field, path/body id mismatch.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Missing `title` in request body",
            "details": {"field": "title"}
        }
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


class NotFoundError(BlogAPIError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE /posts/{id} with an unknown id.
    HTTP:    404 Not Found

    The store itself returns None for lookups; this exception is raised where
    a missing record ends the request (the handler, update and delete).
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


class StorageError(BlogAPIError):
    """
    Raised when database operations fail unexpectedly.

    When:    Database unreachable, connection lost mid-query, constraint violation.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. The original
    exception type is kept in `context` and logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ServerStateError(BlogAPIError):
    """Raised when the HTTP server is started while it is already running."""

    def __init__(
        self,
        message: str = "Server is already running",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
