"""
Structlog-based logging configuration for the ShipRelay server.

This is the main entry point for the logging system. All application code
obtains loggers through get_logger(); setup_enhanced_logging() is called once
at startup, before the first log line that should reach the configured output.
"""

# pylint: disable=too-few-public-methods  # Reason: Logging state holder with focused responsibility

import json
import logging
import sys
from typing import TYPE_CHECKING, Any, cast

import structlog
from structlog.contextvars import merge_contextvars
from structlog.stdlib import BoundLogger, LoggerFactory

if TYPE_CHECKING:
    from ..config.models import LoggingConfig

# Infrastructure code may use structlog.get_logger() directly; everything else uses get_logger().
logger = structlog.get_logger(__name__)


class _LoggingState:
    """State container for logging initialization to avoid global statements."""

    initialized: bool = False
    signature: str | None = None


_logging_state = _LoggingState()


def _select_renderer(log_format: str) -> Any:
    """Map a configured log format onto a structlog renderer."""
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    if log_format == "human":
        return structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "logger", "event"])
    return structlog.dev.ConsoleRenderer(colors=True)


def configure_enhanced_structlog(log_level: str = "INFO", log_format: str = "colored") -> None:
    """
    Configure structlog on top of the standard library logging module.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: One of "json", "human" or "colored"
    """
    base_processors = [
        # Connection context (connection_id, room_code, role) bound per WebSocket
        merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(stream_handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    structlog.configure(
        processors=base_processors + [_select_renderer(log_format)],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=False,
    )


def setup_enhanced_logging(logging_config: "LoggingConfig", *, force_reconfigure: bool = False) -> None:
    """
    Set up logging from the validated logging configuration.

    Args:
        logging_config: The LOGGING_* configuration group
        force_reconfigure: When True, reconfigure even if logging is already initialized
    """
    config_signature = json.dumps(logging_config.model_dump(), sort_keys=True, default=str)

    if _logging_state.initialized and not force_reconfigure:
        get_logger("shiprelay.structured_logging.setup").debug(
            "setup_enhanced_logging skipped; logging system already initialized",
            config_signature=_logging_state.signature,
        )
        return

    if logging_config.disable_logging:
        configure_enhanced_structlog("CRITICAL", logging_config.format)
        logging.disable(logging.CRITICAL)
    else:
        logging.disable(logging.NOTSET)
        configure_enhanced_structlog(logging_config.level, logging_config.format)
        _configure_enhanced_uvicorn_logging()

        get_logger("shiprelay.structured_logging.enhanced").info(
            "Logging system initialized",
            environment=logging_config.environment,
            log_level=logging_config.level,
            log_format=logging_config.format,
        )

    _logging_state.initialized = True
    _logging_state.signature = config_signature


def _configure_enhanced_uvicorn_logging() -> None:
    """Route uvicorn's loggers through the root handler."""
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.propagate = True


def get_logger(name: str) -> Any:  # Returns BoundLogger but typed as Any for flexibility
    """
    Get a structlog logger with the specified name.

    This is the public API for obtaining loggers. All application code
    should use this function rather than calling structlog.get_logger()
    directly.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def log_exception_once(
    bound_logger: BoundLogger,
    level: str,
    message: str,
    *,
    exc: Exception | None = None,
    mark_logged: bool = True,
    **kwargs: Any,
) -> None:
    """
    Log an exception once, respecting exceptions that have already been logged.

    Args:
        bound_logger: Structlog bound logger instance.
        level: Logging level to use (for example, "error" or "warning").
        message: Log message to emit.
        exc: Optional exception to include in the log entry.
        mark_logged: When True, mark the exception as logged to prevent duplicates.
        **kwargs: Additional key-value pairs for structured logging.
    """
    if exc is not None:
        if getattr(exc, "already_logged", False):
            return
        kwargs.setdefault("error_type", type(exc).__name__)
        kwargs.setdefault("error", str(exc))

    log_method = getattr(bound_logger, level.lower(), bound_logger.error)
    log_method(message, **kwargs)

    if exc is not None and mark_logged:
        marker = getattr(exc, "mark_logged", None)
        if callable(marker):
            marker()  # pylint: disable=not-callable
        else:
            cast(Any, exc).already_logged = True
