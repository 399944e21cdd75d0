"""
ShipRelay Server - Main Application Entry Point

Run with `shiprelay` (the console script) or point any ASGI server at
`shiprelay.main:app`.
"""

import uvicorn

from .app.factory import create_app
from .config import get_config
from .structured_logging.enhanced_logging_config import get_logger, setup_enhanced_logging

# Early logging setup - must happen before the app logs anything
config = get_config()
setup_enhanced_logging(config.logging)

logger = get_logger(__name__)
logger.info("Logging setup completed", environment=config.logging.environment)

app = create_app()


def main() -> None:
    """Main entry point for the ShipRelay server."""
    app_config = get_config()
    server_config = app_config.server
    heartbeat_interval = app_config.relay.heartbeat_interval
    logger.info("Starting ShipRelay server", host=server_config.host, port=server_config.port)
    uvicorn.run(
        "shiprelay.main:app",
        host=server_config.host,
        port=server_config.port,
        reload=server_config.reload,
        # Use our structlog setup for all logging
        log_config=None,
        access_log=True,
        # Protocol-level pings close dead sockets even if no frame ever arrives
        ws_ping_interval=heartbeat_interval,
        ws_ping_timeout=heartbeat_interval,
    )


if __name__ == "__main__":
    main()
