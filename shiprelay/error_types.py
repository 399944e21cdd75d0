"""
Centralized error types and constants for ShipRelay.

Defines the error categories used by the exception hierarchy and the
user-visible reason strings carried by REJECT messages.
"""

from enum import Enum


class ErrorType(Enum):
    """Standardized error types for consistent categorization."""

    # Protocol
    MALFORMED_MESSAGE = "malformed_message"
    UNKNOWN_MESSAGE_TYPE = "unknown_message_type"

    # Room lifecycle
    ROOM_NOT_FOUND = "room_not_found"
    ROOM_FULL = "room_full"


class ErrorSeverity(Enum):
    """Error severity levels for logging and handling."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ErrorMessages:
    """Reason strings sent to peers in REJECT messages."""

    ROOM_NOT_FOUND = "Room not found"
    ROOM_FULL = "Room full"
