"""
KK's Cafe Backend - Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the drink menu service.
Why:   Each failure class maps to exactly one HTTP status code and response
       shape. Services raise them; global handlers in main.py render them.
How:   Every exception carries a user-facing message and a context dict.
       The context is logged server-side and only returned to the client
       where it is safe to do so (validation details).

Exception Hierarchy:
    CafeError (base)
    ├── ValidationError          → 400 Bad Request
    │   └── UploadRejectedError  → 400 Bad Request (file type / size / count)
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict (stale If-Match)
    └── StorageError             → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class CafeError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, not always returned)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CafeError):
    """
    Raised when client input fails validation.

    When:    Missing or blank name/description.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Name and description are required",
            "details": {"field": "name"}
        }
    """

    error_code = "validation_error"

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


class UploadRejectedError(ValidationError):
    """
    Raised by the upload boundary before the drink service is invoked.

    When:    Disallowed extension or MIME type, file over the size limit,
             too many files in one request.
    HTTP:    400 Bad Request
    """

    error_code = "upload_rejected"

    def __init__(
        self,
        message: str = "Only image files are allowed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, field="images", context=context)


class NotFoundError(CafeError):
    """
    Raised when a requested resource does not exist.

    When:    PUT/DELETE/GET /api/drinks/{id} with an unknown id.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class ConflictError(CafeError):
    """
    Raised when an If-Match precondition no longer matches the stored record.

    What:    Someone else changed (or deleted and recreated) the drink since
             the client last read it.
    HTTP:    409 Conflict
    Recovery:
        Client re-reads the drink (GET /api/drinks/{id}), takes the fresh
        ETag, and retries its edit.
    """

    def __init__(
        self,
        message: str = "The drink was modified by another request. Reload and try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(CafeError):
    """
    Raised when the record store cannot be read or written.

    When:    Corrupt JSON, unreadable file, failed write/replace, database errors.
    HTTP:    500 Internal Server Error

    Security Note:
        The client always receives a generic message. File paths and the
        underlying OS / parser error stay in the server log.

    A missing store file is NOT a StorageError; it is an empty menu.
    """

    def __init__(
        self,
        message: str = "The drink store could not be accessed. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
