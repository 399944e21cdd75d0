"""
Room lifecycle: create, join, and teardown.

Each operation applies its whole state change synchronously before its first
await, so no other connection's frame can observe a half-created or
half-joined room. Notifications are sent afterwards, best-effort.
"""

from ..exceptions import RoomFullError, RoomNotFoundError
from ..structured_logging.enhanced_logging_config import get_logger
from ..structured_logging.logging_context import bind_connection_context, unbind_room_context
from .connection_manager import ConnectionManager
from .connection_models import ConnectionMetadata, PeerRole
from .envelope import (
    ClientJoinedMessage,
    DisconnectMessage,
    HostedMessage,
    HostRequest,
    JoinedMessage,
    JoinRequest,
    OutboundMessage,
    RejectMessage,
    ScreenSizeMessage,
)
from .session_models import ScreenSize, Session
from .session_table import SessionTable
from .transport import PeerConnection

logger = get_logger(__name__)


class SessionLifecycleManager:
    """Creates rooms, seats joining clients, and tears rooms down on disconnect."""

    def __init__(
        self,
        connection_manager: ConnectionManager,
        session_table: SessionTable,
        protocol_version: int = 1,
    ) -> None:
        self.connection_manager = connection_manager
        self.session_table = session_table
        self.protocol_version = protocol_version

    async def create_session(self, peer: PeerConnection, request: HostRequest) -> Session | None:
        """
        Create a room hosted by `peer` and acknowledge it with HOSTED.

        A connection already in a room leaves it first, and its old
        counterpart receives DISCONNECT.

        Returns:
            The new session, or None if the peer is unregistered
        """
        metadata = self.connection_manager.get_metadata(peer)
        if metadata is None:
            logger.debug("Ignoring HOST from unregistered connection", connection_id=peer.connection_id)
            return None

        released = self._detach(peer, metadata)
        session = self.session_table.create(peer, ScreenSize(request.screen_w, request.screen_h))
        metadata.bind(session.code, PeerRole.HOST)
        bind_connection_context(room_code=session.code, role=PeerRole.HOST.value)
        logger.info(
            "Room created",
            room_code=session.code,
            host_screen_w=request.screen_w,
            host_screen_h=request.screen_h,
        )

        await self._notify_released(released)
        await self._send(peer, HostedMessage(room_code=session.code, version=self.protocol_version))
        return session

    async def join_session(self, peer: PeerConnection, request: JoinRequest) -> Session | None:
        """
        Seat `peer` as the client of the room named in the request.

        On success both participants receive SCREEN_SIZE, then the host
        receives CLIENT_JOINED and the joiner receives JOINED. A missing or
        full room is answered with REJECT and changes nothing, including the
        joiner's current room. A host naming its own code finds the room full.

        Returns:
            The joined session, or None if the join was rejected
        """
        metadata = self.connection_manager.get_metadata(peer)
        if metadata is None:
            logger.debug("Ignoring JOIN from unregistered connection", connection_id=peer.connection_id)
            return None

        try:
            session = self.session_table.require_joinable(request.room_code, joiner=peer)
        except (RoomNotFoundError, RoomFullError) as e:
            await self._send(peer, RejectMessage(reason=e.user_friendly))
            return None

        released = self._detach(peer, metadata)
        game_size = session.attach_client(peer, ScreenSize(request.screen_w, request.screen_h))
        metadata.bind(session.code, PeerRole.CLIENT)
        bind_connection_context(room_code=session.code, role=PeerRole.CLIENT.value)
        logger.info(
            "Client joined room",
            room_code=session.code,
            game_width=game_size.width,
            game_height=game_size.height,
        )

        await self._notify_released(released)

        size_message = ScreenSizeMessage(game_w=game_size.width, game_h=game_size.height)
        await self._send(session.host, size_message)
        await self._send(peer, size_message)
        await self._send(session.host, ClientJoinedMessage(version=self.protocol_version))
        await self._send(peer, JoinedMessage(version=self.protocol_version))
        return session

    def relay_target(self, peer: PeerConnection) -> PeerConnection | None:
        """
        Counterpart that a relay frame from `peer` should reach.

        Returns None when the sender has no room, the room is gone, or the
        room has no counterpart yet; callers drop the frame in that case.
        """
        metadata = self.connection_manager.get_metadata(peer)
        if metadata is None or metadata.room_code is None:
            return None
        session = self.session_table.get(metadata.room_code)
        if session is None or not session.has_participant(peer):
            return None
        if metadata.role is PeerRole.HOST:
            return session.client
        return session.host

    async def handle_disconnect(self, peer: PeerConnection) -> Session | None:
        """
        Single entry point for every connection close.

        Unregisters the connection and tears down its room. Safe to call more
        than once for the same connection; later calls do nothing.

        Returns:
            The destroyed session, if there was one
        """
        metadata = self.connection_manager.unregister(peer)
        if metadata is None:
            return None
        return await self.teardown(peer, metadata)

    async def teardown(self, peer: PeerConnection, metadata: ConnectionMetadata) -> Session | None:
        """
        Destroy the room `peer` belongs to and send DISCONNECT to the other side.

        The room is removed whether or not the notification is delivered.
        """
        released = self._detach(peer, metadata)
        await self._notify_released(released)
        return released[0] if released else None

    def _detach(
        self, peer: PeerConnection, metadata: ConnectionMetadata
    ) -> tuple[Session, PeerConnection | None] | None:
        """Synchronously remove `peer`'s room and clear both sides' bindings."""
        room_code = metadata.room_code
        role = metadata.role
        if room_code is None:
            return None
        metadata.unbind()
        unbind_room_context()

        session = self.session_table.get(room_code)
        if session is None or not session.has_participant(peer):
            return None

        self.session_table.remove(room_code)
        counterpart = session.counterpart_of(peer)
        if counterpart is not None:
            counterpart_metadata = self.connection_manager.get_metadata(counterpart)
            if counterpart_metadata is not None and counterpart_metadata.room_code == room_code:
                counterpart_metadata.unbind()

        logger.info(
            "Player disconnected from room",
            room_code=room_code,
            role=role.value if role else None,
            counterpart_present=counterpart is not None,
        )
        return session, counterpart

    async def _notify_released(self, released: tuple[Session, PeerConnection | None] | None) -> None:
        if released is None:
            return
        _session, counterpart = released
        if counterpart is not None and counterpart.is_open():
            await self._send(counterpart, DisconnectMessage())

    async def _send(self, peer: PeerConnection, message: OutboundMessage) -> None:
        await peer.send_text(message.to_json())
