"""
NegotiateAI Backend - Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for each error scenario.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) map them to
       HTTP status codes and `{success: false, ...}` JSON bodies.
Who:   Raised by the gateway, normalizer, pipelines and services.

Exception Hierarchy:
    NegotiateAIError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── AuthenticationError      → 401 Unauthorized
    ├── AuthorizationError       → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── GatewayError             → recovered by pipelines (503 if it escapes)
    ├── ParseError               → recovered by pipelines (never surfaced)
    ├── PersistenceError         → 500 Internal Server Error
    └── ClientDisconnectedError  → 499 (client closed the request)

GatewayError and ParseError are part of normal operation: the analysis and
suggestion pipelines catch them and return fixed fallback values.
"""

from typing import Any, Dict, Optional


class NegotiateAIError(Exception):
    """
    Base exception for all NegotiateAI application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, never returned verbatim)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NegotiateAIError):
    """
    Raised when client input fails validation.

    When:    Missing or blank text, text shorter than the suggestion minimum,
             rating out of range, duplicate email on registration.
    HTTP:    400 Bad Request

    Example response:
        {
            "success": false,
            "error": "validation_error",
            "message": "Text is required for analysis",
            "details": {"field": "text"}
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


class AuthenticationError(NegotiateAIError):
    """
    Raised when credentials are missing, invalid or expired.

    HTTP:    401 Unauthorized (with `WWW-Authenticate: Bearer`)
    """

    def __init__(
        self,
        message: str = "Not authorized, token missing or invalid",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(NegotiateAIError):
    """
    Raised when an authenticated user touches a record they do not own.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Not authorized to access this resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NegotiateAIError):
    """
    Raised when a requested resource does not exist.

    When:    GET /api/analysis/{id} with an unknown id, feedback for a
             missing analysis, profile lookup for a deleted user.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing rows; services convert that into
    NotFoundError so HTTP concerns stay out of the query code.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class GatewayError(NegotiateAIError):
    """
    Raised when the external model call fails.

    What:    Network error, provider error, deadline exceeded, or a response
             with no text content.
    When:    At most once per pipeline invocation (there are no retries).
    HTTP:    Normally never surfaced. Pipelines replace the result with a
             fallback value. Mapped to 503 only if it escapes a caller.
    """

    def __init__(
        self,
        message: str = "The AI service is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ParseError(NegotiateAIError):
    """
    Raised when model output cannot be turned into the expected structure.

    What:    Neither the whole response nor its first balanced JSON substring
             parsed, or the parsed value failed structural validation.
    HTTP:    Never surfaced. The normalizer swaps in the call-site fallback.
    """

    def __init__(
        self,
        message: str = "Could not interpret the AI response",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PersistenceError(NegotiateAIError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. SQL text,
        constraint names and driver errors are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ClientDisconnectedError(NegotiateAIError):
    """
    Raised when the caller disconnects while a gateway call is in flight.

    The outbound task is cancelled and nothing is persisted.
    HTTP:    499 (nginx convention; the client never reads it)
    """

    def __init__(
        self,
        message: str = "Client closed the request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
