"""
Domain exceptions for the Align application.

This module defines domain-level exceptions that represent business rule violations
and the failure modes of the conversation pipeline.
These exceptions are independent of infrastructure concerns.
"""

from typing import Any


class AlignException(Exception):
    """
    Base exception for all Align application errors.

    All custom exceptions should inherit from this class to allow
    for consistent error handling and logging.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error code for API responses
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AlignException):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(AlignException):
    """Raised when the request carries no valid identity token."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, "AUTHENTICATION_ERROR")


class ResourceNotFoundException(AlignException):
    """
    Raised when a requested resource is not found.

    Also raised for resources owned by another subject, so callers
    cannot tell the two cases apart.
    """

    def __init__(self, resource_type: str, resource_id: str | int):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": str(resource_id)},
        )


class UpstreamModelError(AlignException):
    """
    Raised when the language model call fails.

    Never surfaced to clients: the mediation engine converts it
    into the mode's fallback reply.
    """

    def __init__(self, reason: str):
        super().__init__(
            f"Language model call failed: {reason}",
            "UPSTREAM_MODEL_ERROR",
            {"reason": reason},
        )


class PersistenceError(AlignException):
    """Raised when a storage operation fails (constraint or connectivity)."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Persistence failure during {operation}",
            "PERSISTENCE_ERROR",
            {"operation": operation, "reason": reason},
        )


class ConcurrentAppendError(PersistenceError):
    """Raised when another writer appended to the session first."""

    def __init__(self, session_id: int, expected_count: int):
        super().__init__(
            "append",
            f"session {session_id} no longer has {expected_count} messages",
        )
        self.error_code = "CONCURRENT_APPEND"


class TurnCancelledError(AlignException):
    """Raised when the client went away while the reply was being drafted."""

    def __init__(self, kind: str):
        super().__init__(
            f"{kind} turn cancelled by client disconnect",
            "TURN_CANCELLED",
            {"kind": kind},
        )
