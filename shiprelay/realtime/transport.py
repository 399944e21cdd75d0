"""
Transport boundary for relay connections.

The relay core only needs four things from a connection: an identity, an
is-open check, best-effort text sends, and a way to probe or terminate it.
PeerConnection describes that surface; WebSocketPeer implements it over a
FastAPI/Starlette WebSocket.
"""

import asyncio
import uuid
from typing import Protocol, runtime_checkable

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from ..structured_logging.enhanced_logging_config import get_logger
from .envelope import PingMessage

logger = get_logger(__name__)

# Close code used when the liveness monitor drops an unresponsive peer (1001 = going away)
LIVENESS_TIMEOUT_CLOSE_CODE = 1001


@runtime_checkable
class PeerConnection(Protocol):
    """A single live transport link to a game client."""

    connection_id: str

    def is_open(self) -> bool: ...

    async def send_text(self, data: str) -> None: ...

    async def probe(self) -> None: ...

    async def terminate(self) -> None: ...


class WebSocketPeer:
    """PeerConnection backed by an accepted Starlette WebSocket."""

    def __init__(self, websocket: WebSocket, connection_id: str | None = None) -> None:
        self.websocket = websocket
        self.connection_id = connection_id or str(uuid.uuid4())
        self._closed = False

    def __repr__(self) -> str:
        return f"WebSocketPeer(connection_id={self.connection_id!r})"

    def mark_closed(self) -> None:
        """Record that the transport reported a close."""
        self._closed = True

    def is_open(self) -> bool:
        if self._closed:
            return False
        state = getattr(self.websocket, "application_state", None)
        client_state = getattr(self.websocket, "client_state", None)
        return state == WebSocketState.CONNECTED and client_state != WebSocketState.DISCONNECTED

    async def send_text(self, data: str) -> None:
        """
        Send a text frame, fire-and-forget.

        Delivery is best-effort: a closed or broken socket is logged and
        otherwise treated like a successful send.
        """
        if not self.is_open():
            logger.debug("Skipping send to closed connection", connection_id=self.connection_id)
            return
        try:
            await self.websocket.send_text(data)
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            logger.debug(
                "Send to connection failed",
                connection_id=self.connection_id,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def probe(self) -> None:
        """Send a liveness probe; the peer answers with PONG."""
        await self.send_text(PingMessage().to_json())

    async def terminate(self) -> None:
        """Forcibly close the connection after a missed liveness probe."""
        if not self.is_open():
            self._closed = True
            return
        self._closed = True
        try:
            await asyncio.wait_for(
                self.websocket.close(code=LIVENESS_TIMEOUT_CLOSE_CODE, reason="Liveness timeout"),
                timeout=2.0,
            )
        except (TimeoutError, RuntimeError, OSError) as e:
            logger.debug("Error closing connection", connection_id=self.connection_id, error=str(e))
