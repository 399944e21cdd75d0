"""
Data models for connection management.

This module defines the per-connection annotations the relay keeps in a side
table keyed by connection id, rather than on the transport object itself.
"""

from dataclasses import dataclass
from enum import Enum


class PeerRole(str, Enum):
    """Role a connection plays in its room."""

    HOST = "host"
    CLIENT = "client"


@dataclass
class ConnectionMetadata:
    """
    Mutable state for one live connection.

    `is_alive` starts True so a new connection survives at least one full
    liveness cycle; `room_code` and `role` are set together once the
    connection hosts or joins a room.
    """

    connection_id: str
    connected_at: float
    is_alive: bool = True
    room_code: str | None = None
    role: PeerRole | None = None
    last_seen_at: float | None = None

    @property
    def is_bound(self) -> bool:
        return self.room_code is not None

    def bind(self, room_code: str, role: PeerRole) -> None:
        """Associate the connection with a room."""
        self.room_code = room_code
        self.role = role

    def unbind(self) -> None:
        """Forget the room association."""
        self.room_code = None
        self.role = None
