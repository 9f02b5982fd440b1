"""Test logging configuration and request context stamping"""

import logging

import pytest

from align.infrastructure.config.settings import Settings
from align.shared.context import correlation_id_var, set_current_subject
from align.shared.telemetry.logging import (
    NOISY_LOGGERS,
    RequestContextFilter,
    setup_logging,
)


def _settings(**overrides) -> Settings:
    return Settings(database_url="sqlite+aiosqlite:///x.db", secret_key="k", **overrides)


@pytest.fixture
def root_logger():
    """Restore root and third-party logger state after each test"""
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    noisy = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, noisy_level in noisy.items():
        logging.getLogger(name).setLevel(noisy_level)


class TestSetupLogging:
    def test_debug_setting_controls_level(self, root_logger):
        setup_logging(_settings(debug=True))

        assert root_logger.level == logging.DEBUG

    def test_noisy_loggers_quieted_outside_debug(self, root_logger):
        setup_logging(_settings(debug=False))

        assert root_logger.level == logging.INFO
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_repeated_setup_installs_one_handler(self, root_logger):
        setup_logging(_settings())
        setup_logging(_settings())

        stamped = [
            h
            for h in root_logger.handlers
            if any(isinstance(f, RequestContextFilter) for f in h.filters)
        ]
        assert len(stamped) == 1


class TestRequestContextFilter:
    def _record(self) -> logging.LogRecord:
        return logging.LogRecord("align.test", logging.INFO, __file__, 1, "turn", (), None)

    def test_stamps_correlation_and_subject(self):
        """
        GIVEN a request with a correlation ID and an authenticated subject
        WHEN a record is logged
        THEN both are attached to it.
        """
        token = correlation_id_var.set("req-123")
        set_current_subject(42)
        try:
            record = self._record()
            RequestContextFilter().filter(record)
        finally:
            correlation_id_var.reset(token)
            set_current_subject(None)

        assert record.correlation_id == "req-123"
        assert record.subject_id == 42

    def test_placeholders_outside_a_request(self):
        record = self._record()

        RequestContextFilter().filter(record)

        assert record.correlation_id == "-"
        assert record.subject_id == "-"
