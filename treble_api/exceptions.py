"""
Treble API — Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for the error scenarios of the API.
Why:   Services raise these instead of building HTTP responses; the global
       handlers registered in main.py turn them into JSON with the right
       status code.
How:   Each exception carries a user-safe message and an optional context
       dict that is logged but never returned to the client.

Exception Hierarchy:
    TrebleError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    │   └── DuplicateSlugError   → 400 Bad Request (slug already taken)
    ├── NotFoundError            → 404 Not Found
    ├── DatabaseError            → 500 Internal Server Error
    └── WordListError            → startup failure (never reaches a request)
"""

from typing import Any, Dict, Optional


class TrebleError(Exception):
    """
    Base exception for all Treble application errors.

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


class ValidationError(TrebleError):
    """
    Raised when client input fails validation.

    When:    Missing required field, blocked term, disallowed file extension,
             empty search query.
    HTTP:    400 Bad Request
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


class DuplicateSlugError(ValidationError):
    """
    Raised when a create request reuses an existing slug.

    Raised both by the pre-insert lookup and when the unique index rejects
    a concurrent insert, so callers see one error either way.
    """

    def __init__(self, slug: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["slug"] = slug
        super().__init__(
            message="This pattern ID already exists. Please try again.",
            field="slug",
            context=ctx,
        )
        self.slug = slug


class NotFoundError(TrebleError):
    """
    Raised when a requested resource does not exist.

    When:    GET /pattern/{slug} or POST /like/{slug} with an unknown slug.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(TrebleError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The response body always carries a generic message; whatever the driver
    reported stays in `context` and the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class WordListError(TrebleError):
    """Raised when the blocked-term resource cannot be read at startup."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Could not load blocked terms from '{path}': {reason}",
            context={"path": path},
        )
        self.path = path
