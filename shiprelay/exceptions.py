"""
Exception hierarchy for the ShipRelay server.

None of these errors is fatal to the process: protocol errors cause the
offending frame to be dropped, room errors become REJECT replies.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

from .error_types import ErrorMessages, ErrorSeverity, ErrorType
from .structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ErrorContext:
    """Contextual information attached to a relay error."""

    connection_id: str | None = None
    room_code: str | None = None
    role: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for logging."""
        return {
            "connection_id": self.connection_id,
            "room_code": self.room_code,
            "role": self.role,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class ShipRelayError(Exception):
    """
    Base exception for all ShipRelay errors.

    Carries structured context and a user-friendly message, and logs itself
    at construction with the severity of its subclass.
    """

    error_type: ClassVar[ErrorType | None] = None
    severity: ClassVar[ErrorSeverity] = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        details: dict[str, Any] | None = None,
        user_friendly: str | None = None,
    ):
        """
        Initialize a ShipRelay error.

        Args:
            message: Technical error message
            context: Error context information
            details: Additional error details
            user_friendly: Message safe to show to a peer
        """
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.details = details or {}
        self.user_friendly = user_friendly or message
        self.timestamp = datetime.now()

        self._log_error()

    def _log_error(self) -> None:
        """Log the error with structured context."""
        log_method = {
            ErrorSeverity.LOW: logger.info,
            ErrorSeverity.MEDIUM: logger.warning,
            ErrorSeverity.HIGH: logger.error,
        }[self.severity]
        log_method(
            "ShipRelay error occurred",
            error_type=self.__class__.__name__,
            message=self.message,
            context=self.context.to_dict(),
            details=self.details,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for diagnostics."""
        return {
            "error_type": self.__class__.__name__,
            "category": self.error_type.value if self.error_type else None,
            "message": self.message,
            "user_friendly": self.user_friendly,
            "context": self.context.to_dict(),
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ProtocolError(ShipRelayError):
    """An inbound frame could not be decoded into a routable envelope."""

    error_type = ErrorType.MALFORMED_MESSAGE

    def __init__(self, message: str, context: ErrorContext | None = None, field: str | None = None, **kwargs):
        super().__init__(message, context, **kwargs)
        self.field = field
        if field:
            self.details["field"] = field


class UnknownMessageTypeError(ShipRelayError):
    """An envelope carried a type tag the router does not know."""

    error_type = ErrorType.UNKNOWN_MESSAGE_TYPE
    severity = ErrorSeverity.LOW

    def __init__(self, message_type: str, context: ErrorContext | None = None, **kwargs):
        super().__init__(f"Unknown message type: {message_type}", context, **kwargs)
        self.message_type = message_type
        self.details["message_type"] = message_type


class RoomNotFoundError(ShipRelayError):
    """A JOIN named a room code with no live session."""

    error_type = ErrorType.ROOM_NOT_FOUND
    severity = ErrorSeverity.LOW

    def __init__(self, room_code: str, context: ErrorContext | None = None, **kwargs):
        kwargs.setdefault("user_friendly", ErrorMessages.ROOM_NOT_FOUND)
        super().__init__(f"Room {room_code} not found", context, **kwargs)
        self.room_code = room_code
        self.details["room_code"] = room_code


class RoomFullError(ShipRelayError):
    """A JOIN targeted a session that already has a client."""

    error_type = ErrorType.ROOM_FULL
    severity = ErrorSeverity.LOW

    def __init__(self, room_code: str, context: ErrorContext | None = None, **kwargs):
        kwargs.setdefault("user_friendly", ErrorMessages.ROOM_FULL)
        super().__init__(f"Room {room_code} already has a client", context, **kwargs)
        self.room_code = room_code
        self.details["room_code"] = room_code

