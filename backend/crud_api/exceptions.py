"""
Document CRUD Gateway — Custom Exception Hierarchy
===================================================

What:  Application-specific exceptions for the outcomes a CRUD request can have.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch the first three
       and return plain-text responses with the matching HTTP status code.
Who:   Raised by the document service, the database dependency and middleware.
When:  During request processing.

Exception Hierarchy:
    CrudApiError (base)
    ├── DocumentNotFoundError       → 404 Not Found (read only)
    ├── DocumentOperationError      → 500 Internal Server Error
    ├── DatabaseNotConfiguredError  → 500 Internal Server Error
    └── RateLimitExceededError      → 429, built and rendered by RateLimitMiddleware

The database layer's own exceptions (permission denied, unavailable, invalid
argument, NotFound on update) are never surfaced individually: they all become
DocumentOperationError with a static per-operation message.
"""

from typing import Any, Dict, Optional


class CrudApiError(Exception):
    """
    Base exception for all gateway errors.

    Attributes:
        message:  Client-facing error text (safe to return in the response body)
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


class DocumentNotFoundError(CrudApiError):
    """
    Raised when a read targets a document that does not exist.

    When:    GET /read/{collection}/{id} and the snapshot reports exists=False.
    HTTP:    404 Not Found

    Firestore returns a snapshot (not an exception) for missing documents;
    the service converts that into this exception.
    """

    def __init__(
        self,
        collection: Optional[str] = None,
        document_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if collection is not None:
            ctx["collection"] = collection
        if document_id is not None:
            ctx["document_id"] = document_id
        super().__init__(message="Document not found", context=ctx)
        self.collection = collection
        self.document_id = document_id


class DocumentOperationError(CrudApiError):
    """
    Raised when a database call fails for any reason.

    What:    Wraps whatever the database client (or body parsing) raised.
    When:    Network failure, permission denial, malformed input, missing
             document on update, etc. No distinction is made between causes.
    HTTP:    500 Internal Server Error

    The message is the static per-operation text from OPERATION_MESSAGES;
    the original exception is chained (__cause__) and logged server-side.
    """

    OPERATION_MESSAGES = {
        "create": "Error creating document",
        "read": "Error reading document",
        "update": "Error updating document",
        "delete": "Error deleting document",
    }

    def __init__(
        self,
        operation: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = self.OPERATION_MESSAGES.get(operation, "Error processing document")
        ctx = context or {}
        ctx["operation"] = operation
        super().__init__(message=message, context=ctx)
        self.operation = operation


class DatabaseNotConfiguredError(CrudApiError):
    """
    Raised when a CRUD route runs but no database handle is available.

    When:    Firestore initialization failed or was skipped at startup and no
             handle was injected into create_app().
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Database is not configured",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(CrudApiError):
    """
    Describes a client that exceeded the per-IP request rate limit.

    Never raised: RateLimitMiddleware runs outside the app's exception
    handlers, so it builds one of these for the message and retry_after and
    returns the 429 response (with Retry-After) directly.
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
