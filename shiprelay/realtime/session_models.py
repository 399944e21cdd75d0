"""
Data models for rooms.

A Session pairs one host connection with at most one client connection and
records the screen geometry each side reported. The shared game area is the
per-axis minimum of the two screens, computed when the client joins.
"""

import time
from dataclasses import dataclass, field

from .transport import PeerConnection


@dataclass(frozen=True)
class ScreenSize:
    """Screen geometry reported by a peer, in pixels."""

    width: int
    height: int

    def intersect(self, other: "ScreenSize") -> "ScreenSize":
        """Largest area that fits on both screens."""
        return ScreenSize(width=min(self.width, other.width), height=min(self.height, other.height))


@dataclass(eq=False)
class Session:
    """
    One room.

    Open for relay only once a client has joined and the game size is known.
    Connections are compared by identity.
    """

    code: str
    host: PeerConnection
    host_screen: ScreenSize
    client: PeerConnection | None = None
    client_screen: ScreenSize | None = None
    game_size: ScreenSize | None = None
    created_at: float = field(default_factory=time.time)

    @property
    def game_width(self) -> int | None:
        return self.game_size.width if self.game_size else None

    @property
    def game_height(self) -> int | None:
        return self.game_size.height if self.game_size else None

    @property
    def is_matched(self) -> bool:
        return self.client is not None and self.game_size is not None

    def has_participant(self, peer: PeerConnection) -> bool:
        return peer is self.host or (self.client is not None and peer is self.client)

    def counterpart_of(self, peer: PeerConnection) -> PeerConnection | None:
        """The other participant: the client for the host, the host for the client."""
        if peer is self.host:
            return self.client
        if self.client is not None and peer is self.client:
            return self.host
        return None

    def attach_client(self, client: PeerConnection, client_screen: ScreenSize) -> ScreenSize:
        """
        Seat the client and negotiate the shared game size.

        Returns:
            ScreenSize: The negotiated game area
        """
        self.client = client
        self.client_screen = client_screen
        self.game_size = self.host_screen.intersect(client_screen)
        return self.game_size
