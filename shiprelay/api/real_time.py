"""
Real-time communication API endpoints for the ShipRelay server.

Game clients may connect either at the root path or at /ws; both routes run
the same relay handler.
"""

from fastapi import APIRouter, WebSocket

from ..realtime.websocket_handler import handle_websocket_connection
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

realtime_router = APIRouter(tags=["realtime"])

# 1013 = try again later
SERVICE_UNAVAILABLE_CLOSE_CODE = 1013


@realtime_router.websocket("/")
@realtime_router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """WebSocket endpoint for relay traffic between a host and a client."""
    container = getattr(websocket.app.state, "container", None)
    if container is None:
        # Must accept before closing with an application close code
        await websocket.accept()
        logger.warning("Rejecting WebSocket connection, relay services not initialized")
        await websocket.close(code=SERVICE_UNAVAILABLE_CLOSE_CODE)
        return

    await handle_websocket_connection(websocket, container)
