"""Custom exception hierarchy."""

from typing import Any, List, Optional


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class NotFoundError(AppError):
    """Raised when a document or sub-record does not exist."""

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(f"{resource} with ID {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(AppError):
    """Raised when a lifecycle transition is not legal from the current status."""
    pass


class ValidationError(AppError):
    """Raised when input validation fails.

    Always carries the full list of violations so callers can present every
    problem at once. Items are either human-readable strings (requirement and
    completeness checks) or pydantic error dicts (shape validation).
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[Any]] = None,
        original_error: Exception = None,
    ):
        super().__init__(message, original_error=original_error)
        self.errors = list(errors) if errors else [message]


class DatabaseError(AppError):
    """Raised when a database operation fails."""
    pass


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass


class APIClientError(AppError):
    """Raised when an external API call fails."""
    pass


class PdfGenerationError(APIClientError):
    """Raised when the PDF generation webhook rejects or fails a request."""
    pass
