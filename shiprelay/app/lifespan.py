"""Application lifecycle management for the ShipRelay server.

Creates the ApplicationContainer on startup (unless one was injected by the
app factory), starts its background services, and shuts them down again when
the server stops.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..container import ApplicationContainer
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger("shiprelay.lifespan")

__all__ = ["lifespan"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    The container lives on app.state.container for the duration of the
    application so routes can reach the relay services.
    """
    logger.info("Starting ShipRelay server...")

    container = getattr(app.state, "container", None)
    if container is None:
        container = ApplicationContainer()
        app.state.container = container
    await container.initialize()

    logger.info("ShipRelay server ready")
    try:
        yield
    finally:
        logger.info("Shutting down ShipRelay server...")
        await container.shutdown()
        logger.info("ShipRelay server shutdown complete")
