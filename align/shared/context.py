"""
Request context management using contextvars.

Async-safe storage for request-scoped data: the correlation ID set by the
correlation middleware and the subject resolved by the identity gate. Both
are read by the logging filter so every record of a request carries them.

Usage:
    set_current_subject(42)
    subject_id = get_current_subject_id()  # 42, or None outside a request
"""

from contextvars import ContextVar

_current_subject_id: ContextVar[int | None] = ContextVar("current_subject_id", default=None)

# Set and reset by CorrelationIDMiddleware around each request
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def set_current_subject(subject_id: int | None) -> None:
    """Set the authenticated subject for this request."""
    _current_subject_id.set(subject_id)


def get_current_subject_id() -> int | None:
    """Subject resolved by the identity gate, or None if not authenticated."""
    return _current_subject_id.get()


def get_correlation_id() -> str:
    """Get the correlation ID for the current request"""
    return correlation_id_var.get()
