"""
Message routing for inbound relay frames.

Maps each message kind to a handler, replacing an if/elif chain with an
O(1) lookup. Control kinds go to the session lifecycle manager; every
peer-to-peer kind shares one content-agnostic relay handler.
"""

from abc import ABC, abstractmethod
from typing import cast

from ..exceptions import ErrorContext, ProtocolError, UnknownMessageTypeError
from ..structured_logging.enhanced_logging_config import get_logger
from .connection_manager import ConnectionManager
from .envelope import (
    HANDSHAKE_MESSAGE_TYPES,
    RELAY_MESSAGE_TYPES,
    HostRequest,
    InboundMessage,
    JoinRequest,
    MessageType,
    RelayEnvelope,
    parse_envelope,
)
from .session_lifecycle import SessionLifecycleManager
from .transport import PeerConnection

logger = get_logger(__name__)


class MessageHandler(ABC):
    """Abstract base class for message handlers."""

    @abstractmethod
    async def handle(self, peer: PeerConnection, message: InboundMessage) -> None:
        """
        Handle a decoded message.

        Args:
            peer: The sending connection
            message: The decoded envelope
        """


class HostMessageHandler(MessageHandler):
    """Handler for room creation requests."""

    def __init__(self, lifecycle: SessionLifecycleManager) -> None:
        self.lifecycle = lifecycle

    async def handle(self, peer: PeerConnection, message: InboundMessage) -> None:
        await self.lifecycle.create_session(peer, cast(HostRequest, message))


class JoinMessageHandler(MessageHandler):
    """Handler for room join requests."""

    def __init__(self, lifecycle: SessionLifecycleManager) -> None:
        self.lifecycle = lifecycle

    async def handle(self, peer: PeerConnection, message: InboundMessage) -> None:
        await self.lifecycle.join_session(peer, cast(JoinRequest, message))


class RelayMessageHandler(MessageHandler):
    """
    Forwards a frame unchanged to the sender's counterpart.

    Frames from a connection with no room, or whose counterpart is absent or
    closed, are dropped silently.
    """

    def __init__(self, lifecycle: SessionLifecycleManager) -> None:
        self.lifecycle = lifecycle

    async def handle(self, peer: PeerConnection, message: InboundMessage) -> None:
        envelope = cast(RelayEnvelope, message)
        target = self.lifecycle.relay_target(peer)
        if target is None or not target.is_open():
            logger.debug("Dropping relay frame without open counterpart", message_type=envelope.kind.value)
            return
        await target.send_text(envelope.raw)


class PongMessageHandler(MessageHandler):
    """Handler for explicit PONG replies to the liveness PING."""

    def __init__(self, connection_manager: ConnectionManager) -> None:
        self.connection_manager = connection_manager

    async def handle(self, peer: PeerConnection, message: InboundMessage) -> None:
        self.connection_manager.mark_alive(peer)


class MessageRouter:
    """Decodes inbound frames and dispatches them by message kind."""

    def __init__(self, lifecycle: SessionLifecycleManager, connection_manager: ConnectionManager) -> None:
        self.connection_manager = connection_manager
        relay_handler = RelayMessageHandler(lifecycle)
        self._handlers: dict[MessageType, MessageHandler] = {
            MessageType.HOST: HostMessageHandler(lifecycle),
            MessageType.JOIN: JoinMessageHandler(lifecycle),
            MessageType.PONG: PongMessageHandler(connection_manager),
        }
        for message_type in RELAY_MESSAGE_TYPES | HANDSHAKE_MESSAGE_TYPES:
            self._handlers[message_type] = relay_handler

    def register_handler(self, message_type: MessageType, handler: MessageHandler) -> None:
        """
        Register a handler for a message kind, replacing any existing one.

        Args:
            message_type: The message kind to handle
            handler: The handler instance
        """
        self._handlers[message_type] = handler
        logger.debug("Registered handler for message type", message_type=message_type.value)

    def get_handler(self, message_type: MessageType) -> MessageHandler | None:
        return self._handlers.get(message_type)

    def get_supported_message_types(self) -> list[MessageType]:
        return list(self._handlers.keys())

    async def route(self, peer: PeerConnection, raw: str) -> None:
        """
        Decode one frame from `peer` and dispatch it.

        Any frame, even one that is then dropped, counts as a sign of life
        for the liveness monitor. Malformed frames and unknown kinds are
        dropped; the sender never receives an error response.
        """
        self.connection_manager.mark_alive(peer)
        context = ErrorContext(connection_id=peer.connection_id)
        try:
            message = parse_envelope(raw, context)
        except (ProtocolError, UnknownMessageTypeError):
            # Already logged by the exception itself
            return

        handler = self.get_handler(message.kind)
        if handler is None:
            logger.info("Unknown message type", message_type=message.kind.value)
            return
        await handler.handle(peer, message)
