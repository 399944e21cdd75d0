"""
Connection registry for ShipRelay real-time communication.

Tracks every live connection and its metadata independently of whether the
connection belongs to a room. All mutation happens on the event loop thread
between awaits, so no locking is needed.
"""

import time
from typing import Any

from ..structured_logging.enhanced_logging_config import get_logger
from .connection_models import ConnectionMetadata, PeerRole
from .transport import PeerConnection

logger = get_logger(__name__)


class ConnectionManager:
    """Registry of live connections and their liveness/room annotations."""

    def __init__(self) -> None:
        # Active connections by connection id
        self.active_peers: dict[str, PeerConnection] = {}
        # Connection metadata tracking
        self.connection_metadata: dict[str, ConnectionMetadata] = {}

    def register(self, peer: PeerConnection) -> ConnectionMetadata:
        """
        Start tracking a newly opened connection.

        Args:
            peer: The accepted connection

        Returns:
            ConnectionMetadata: Fresh metadata, marked alive and unbound
        """
        metadata = ConnectionMetadata(connection_id=peer.connection_id, connected_at=time.time())
        self.active_peers[peer.connection_id] = peer
        self.connection_metadata[peer.connection_id] = metadata
        logger.debug("Connection registered", connection_id=peer.connection_id, total=len(self.active_peers))
        return metadata

    def unregister(self, peer: PeerConnection) -> ConnectionMetadata | None:
        """
        Stop tracking a connection.

        Returns:
            The connection's last metadata, or None if it was already removed
        """
        if self.active_peers.get(peer.connection_id) is not peer:
            return None
        del self.active_peers[peer.connection_id]
        metadata = self.connection_metadata.pop(peer.connection_id, None)
        logger.debug("Connection unregistered", connection_id=peer.connection_id, total=len(self.active_peers))
        return metadata

    def get_metadata(self, peer: PeerConnection) -> ConnectionMetadata | None:
        if self.active_peers.get(peer.connection_id) is not peer:
            return None
        return self.connection_metadata.get(peer.connection_id)

    def is_registered(self, peer: PeerConnection) -> bool:
        return self.get_metadata(peer) is not None

    def mark_alive(self, peer: PeerConnection) -> bool:
        """
        Record that the connection showed signs of life (any inbound frame).

        Returns:
            bool: False if the connection is no longer registered
        """
        metadata = self.get_metadata(peer)
        if metadata is None:
            return False
        metadata.is_alive = True
        metadata.last_seen_at = time.time()
        return True

    def snapshot(self) -> list[tuple[PeerConnection, ConnectionMetadata]]:
        """Copy of the registry, safe to iterate across awaits."""
        return [
            (peer, self.connection_metadata[connection_id])
            for connection_id, peer in list(self.active_peers.items())
            if connection_id in self.connection_metadata
        ]

    def get_connection_count(self) -> int:
        return len(self.active_peers)

    def get_stats(self) -> dict[str, Any]:
        """Counts of connections by role and liveness."""
        metadata = list(self.connection_metadata.values())
        return {
            "total_connections": len(metadata),
            "hosts": sum(1 for m in metadata if m.role is PeerRole.HOST),
            "clients": sum(1 for m in metadata if m.role is PeerRole.CLIENT),
            "unbound": sum(1 for m in metadata if not m.is_bound),
            "awaiting_pong": sum(1 for m in metadata if not m.is_alive),
        }
