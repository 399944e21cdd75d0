"""
Tests for structured logging setup and connection context binding.
"""

import logging

import pytest
import structlog

from ..config import LoggingConfig
from ..structured_logging import enhanced_logging_config
from ..structured_logging.enhanced_logging_config import get_logger, log_exception_once, setup_enhanced_logging
from ..structured_logging.logging_context import (
    bind_connection_context,
    clear_connection_context,
    get_current_context,
    unbind_room_context,
)


@pytest.fixture
def restore_logging_state():
    """Restore global logging state touched by setup_enhanced_logging."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    state = (enhanced_logging_config._logging_state.initialized, enhanced_logging_config._logging_state.signature)
    yield
    logging.disable(logging.NOTSET)
    root_logger.handlers = handlers
    root_logger.setLevel(level)
    enhanced_logging_config._logging_state.initialized, enhanced_logging_config._logging_state.signature = state
    structlog.reset_defaults()


class TestConnectionContext:
    def test_bind_skips_none_values(self):
        clear_connection_context()
        bind_connection_context(connection_id="c1", room_code=None, role=None)

        assert get_current_context() == {"connection_id": "c1"}
        clear_connection_context()

    def test_bind_accumulates(self):
        clear_connection_context()
        bind_connection_context(connection_id="c1")
        bind_connection_context(room_code="4821", role="host")

        assert get_current_context() == {"connection_id": "c1", "room_code": "4821", "role": "host"}
        clear_connection_context()
        assert get_current_context() == {}

    def test_unbind_room_keeps_connection_id(self):
        clear_connection_context()
        bind_connection_context(connection_id="c1", room_code="4821", role="client")

        unbind_room_context()

        assert get_current_context() == {"connection_id": "c1"}
        unbind_room_context()
        assert get_current_context() == {"connection_id": "c1"}
        clear_connection_context()


class TestSetupEnhancedLogging:
    @pytest.mark.parametrize("log_format", ["json", "human", "colored"])
    def test_setup_configures_root_level(self, restore_logging_state, log_format):
        setup_enhanced_logging(LoggingConfig(level="WARNING", format=log_format), force_reconfigure=True)

        assert logging.getLogger().level == logging.WARNING
        assert enhanced_logging_config._logging_state.initialized

    def test_setup_is_idempotent(self, restore_logging_state):
        setup_enhanced_logging(LoggingConfig(level="WARNING"), force_reconfigure=True)
        setup_enhanced_logging(LoggingConfig(level="DEBUG"))

        assert logging.getLogger().level == logging.WARNING

    def test_disable_logging(self, restore_logging_state):
        setup_enhanced_logging(LoggingConfig(disable_logging=True), force_reconfigure=True)

        assert logging.root.manager.disable == logging.CRITICAL


class TestLogExceptionOnce:
    def test_logs_only_once(self, mocker):
        bound_logger = mocker.Mock()
        error = RuntimeError("boom")

        log_exception_once(bound_logger, "error", "Failure", exc=error)
        log_exception_once(bound_logger, "error", "Failure", exc=error)

        bound_logger.error.assert_called_once_with("Failure", error_type="RuntimeError", error="boom")

    def test_get_logger_returns_bound_logger(self):
        assert hasattr(get_logger("shiprelay.test"), "info")
