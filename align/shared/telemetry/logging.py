"""Logging configuration for Align application"""
import logging
import sys

from align.infrastructure.config.settings import Settings
from align.shared.context import get_correlation_id, get_current_subject_id

LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[%(correlation_id)s subject=%(subject_id)s] %(message)s"
)

# Chatty third-party loggers kept at WARNING unless debugging
NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore", "openai")


class RequestContextFilter(logging.Filter):
    """Stamp records with the correlation ID and the authenticated subject"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        subject_id = get_current_subject_id()
        record.subject_id = "-" if subject_id is None else subject_id
        return True


def setup_logging(settings: Settings) -> None:
    """Configure application-wide logging from the app's settings"""
    log_level = logging.DEBUG if settings.debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(log_level)
    # Replace a handler from an earlier setup_logging call, leave others alone
    for existing in list(root.handlers):
        if any(isinstance(f, RequestContextFilter) for f in existing.filters):
            root.removeHandler(existing)
    root.addHandler(handler)

    noisy_level = logging.DEBUG if settings.debug else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)


def get_logger(name: str) -> logging.Logger:
    """Get logger for module"""
    return logging.getLogger(name)
