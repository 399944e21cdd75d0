"""
WebSocket handler for ShipRelay real-time communication.

Owns one connection from accept to close: registers it, feeds every inbound
frame to the message router, and runs disconnect handling exactly once when
the socket goes away.
"""

from typing import TYPE_CHECKING

from fastapi import WebSocket, WebSocketDisconnect

from ..structured_logging.enhanced_logging_config import get_logger, log_exception_once
from ..structured_logging.logging_context import bind_connection_context, clear_connection_context
from .message_router import MessageRouter
from .transport import WebSocketPeer

if TYPE_CHECKING:
    from ..container import ApplicationContainer

logger = get_logger(__name__)


def _decode_frame(message: dict) -> str | None:
    """Extract the text payload of an ASGI receive event, or None to drop it."""
    text = message.get("text")
    if text is not None:
        return text
    data = message.get("bytes")
    if data is None:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Dropping binary frame that is not valid UTF-8", size=len(data))
        return None


async def _handle_websocket_message_loop(websocket: WebSocket, peer: WebSocketPeer, router: MessageRouter) -> None:
    """Handle the main WebSocket message loop."""
    while True:
        try:
            message = await websocket.receive()
        except WebSocketDisconnect:
            logger.info("WebSocket disconnected", connection_id=peer.connection_id)
            break
        except RuntimeError as e:
            logger.warning("WebSocket connection lost", connection_id=peer.connection_id, error=str(e))
            break

        if message["type"] == "websocket.disconnect":
            logger.info("WebSocket disconnected", connection_id=peer.connection_id, code=message.get("code"))
            break

        raw = _decode_frame(message)
        if raw is None:
            continue

        try:
            await router.route(peer, raw)
        except Exception as e:  # pylint: disable=broad-except  # Reason: a handler bug must not kill the connection
            log_exception_once(
                logger,
                "error",
                "Error handling WebSocket message",
                exc=e,
                connection_id=peer.connection_id,
                exc_info=True,
            )


async def handle_websocket_connection(websocket: WebSocket, container: "ApplicationContainer") -> None:
    """
    Serve one WebSocket connection until it closes.

    Args:
        websocket: The not-yet-accepted WebSocket
        container: Application container holding the relay services
    """
    await websocket.accept()

    peer = WebSocketPeer(websocket)
    container.connection_manager.register(peer)
    bind_connection_context(connection_id=peer.connection_id)
    client = websocket.client
    logger.info(
        "New connection",
        connection_id=peer.connection_id,
        client_host=client.host if client else None,
        total_connections=container.connection_manager.get_connection_count(),
    )

    try:
        await _handle_websocket_message_loop(websocket, peer, container.message_router)
    finally:
        peer.mark_closed()
        await container.session_lifecycle.handle_disconnect(peer)
        clear_connection_context()
