"""
Tests for the connection registry.
"""

from ..realtime.connection_models import PeerRole
from .conftest import FakePeer


class TestConnectionManager:
    """Registration, liveness flags and stats."""

    def test_register_starts_alive_and_unbound(self, connection_manager):
        peer = FakePeer()

        metadata = connection_manager.register(peer)

        assert metadata.connection_id == peer.connection_id
        assert metadata.is_alive is True
        assert not metadata.is_bound
        assert connection_manager.get_metadata(peer) is metadata
        assert connection_manager.get_connection_count() == 1

    def test_unregister_is_idempotent(self, connection_manager):
        peer = FakePeer()
        metadata = connection_manager.register(peer)

        assert connection_manager.unregister(peer) is metadata
        assert connection_manager.unregister(peer) is None
        assert not connection_manager.is_registered(peer)

    def test_lookup_is_by_identity(self, connection_manager):
        """A different object reusing a connection id is not the registered connection."""
        connection_manager.register(FakePeer("dup"))
        impostor = FakePeer("dup")

        assert connection_manager.get_metadata(impostor) is None
        assert connection_manager.unregister(impostor) is None
        assert connection_manager.get_connection_count() == 1

    def test_mark_alive(self, connection_manager):
        peer = FakePeer()
        metadata = connection_manager.register(peer)
        metadata.is_alive = False

        assert connection_manager.mark_alive(peer) is True
        assert metadata.is_alive is True
        assert metadata.last_seen_at is not None
        assert connection_manager.mark_alive(FakePeer()) is False

    def test_snapshot_is_a_copy(self, connection_manager):
        peer = FakePeer()
        connection_manager.register(peer)

        snapshot = connection_manager.snapshot()
        connection_manager.unregister(peer)

        assert [p for p, _ in snapshot] == [peer]
        assert connection_manager.snapshot() == []

    def test_stats(self, connection_manager):
        host, client, idle = FakePeer(), FakePeer(), FakePeer()
        connection_manager.register(host).bind("1234", PeerRole.HOST)
        connection_manager.register(client).bind("1234", PeerRole.CLIENT)
        connection_manager.register(idle).is_alive = False

        assert connection_manager.get_stats() == {
            "total_connections": 3,
            "hosts": 1,
            "clients": 1,
            "unbound": 1,
            "awaiting_pong": 1,
        }
