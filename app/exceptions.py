from typing import Any, Mapping, Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP status.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Internal error"
    default_code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code or self.default_code

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(AppError):
    """Raised when input data is invalid or a precondition for a service call is not met."""

    http_status = 400
    default_message = "Invalid input"
    default_code = "SERVICE_VALIDATION_ERROR"


class NotFoundError(AppError):
    """Raised when a requested resource was not found (or is owned by someone else)."""

    http_status = 404
    default_message = "Not found"
    default_code = "NOT_FOUND"


class ConflictError(AppError):
    """Raised when a resource conflict occurs (e.g., duplicate username)."""

    http_status = 409
    default_message = "Conflict"
    default_code = "CONFLICT"


class UnauthorizedError(AppError):
    """Raised when authentication fails or no valid session is present."""

    http_status = 401
    default_message = "Unauthorized"
    default_code = "UNAUTHORIZED"


class ExtractionFailedError(AppError):
    """Raised when the image-understanding call errored or returned unusable content.

    ``diagnostic`` keeps the raw upstream output (or exception text) for logging;
    it is never sent back to the client.
    """

    http_status = 500
    default_message = "Failed to process receipt"
    default_code = "EXTRACTION_FAILED"

    def __init__(self, message: Optional[str] = None, diagnostic: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message, code=code)
        self.diagnostic = diagnostic


class PersistenceError(AppError):
    """Raised when the backing store is unavailable."""

    http_status = 500
    default_message = "Storage unavailable"
    default_code = "PERSISTENCE_ERROR"
