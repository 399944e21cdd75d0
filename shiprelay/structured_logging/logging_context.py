"""
Context management utilities for connection-scoped logging.

Each WebSocket handler runs in its own asyncio task, so contextvars bound
here are visible to every log line emitted while that connection's frames
are being processed.
"""

from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, unbind_contextvars


def bind_connection_context(
    connection_id: str | None = None,
    room_code: str | None = None,
    role: str | None = None,
    **kwargs: Any,
) -> None:
    """
    Bind connection context to the current logging context.

    Args:
        connection_id: Identifier of the WebSocket connection
        room_code: Room the connection belongs to, once assigned
        role: "host" or "client", once assigned
        **kwargs: Additional context variables
    """
    context_vars = {
        "connection_id": connection_id,
        "room_code": room_code,
        "role": role,
        **kwargs,
    }

    # Remove None values
    context_vars = {k: v for k, v in context_vars.items() if v is not None}

    bind_contextvars(**context_vars)


def clear_connection_context() -> None:
    """Clear the current connection context from logging."""
    clear_contextvars()


def unbind_room_context() -> None:
    """Drop room_code and role, keeping the connection id bound."""
    unbind_contextvars("room_code", "role")


def get_current_context() -> dict[str, Any]:
    """Get the current logging context."""
    return structlog.contextvars.get_contextvars()
