"""
Custom exceptions for the application.

Every exception carries a stable ``code`` (returned to clients) and the HTTP
status it maps to in the API layer.
"""
from typing import Optional


class FlashcardsException(Exception):
    """Base exception for all application exceptions."""
    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str = "", details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(FlashcardsException):
    """Raised when validation fails."""
    code = "VALIDATION_ERROR"
    status_code = 400


class InvalidRating(ValidationError):
    """Raised when a review rating is outside 1-4."""
    pass


class AuthenticationError(FlashcardsException):
    """Raised when authentication fails."""
    code = "UNAUTHORIZED"
    status_code = 401


class NotFoundError(FlashcardsException):
    """Raised when a requested resource is not found (or not owned by the caller)."""
    code = "NOT_FOUND"
    status_code = 404


class NoDueCards(NotFoundError):
    """Raised when a learning session is started with nothing due."""
    code = "NO_FLASHCARDS"


class ConflictError(FlashcardsException):
    """Raised when there's a conflict (e.g., duplicate entry)."""
    code = "CONFLICT"
    status_code = 409


class DuplicateSession(ConflictError):
    """Raised when a queue is seeded twice for the same session."""
    code = "DUPLICATE_SESSION"


class NotQueueHead(ConflictError):
    """Raised when a review targets a card that is not at the head of the session queue."""
    code = "NOT_QUEUE_HEAD"


class SessionEnded(ConflictError):
    """Raised when a review is submitted to an ended learning session."""
    pass


class LLMError(FlashcardsException):
    """Raised when the text-generation provider fails or returns garbage."""
    code = "LLM_ERROR"
    status_code = 502


class ServiceUnavailableError(FlashcardsException):
    """Raised when the text-generation provider is temporarily unavailable."""
    code = "SERVICE_UNAVAILABLE"
    status_code = 503


class DatabaseError(FlashcardsException):
    """Raised when a persistence call fails."""
    code = "DATABASE_ERROR"
    status_code = 500
