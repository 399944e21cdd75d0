"""
FastAPI application factory for the ShipRelay server.

This module handles FastAPI app creation and router registration.
"""

from fastapi import FastAPI

from ..api.monitoring import monitoring_router
from ..api.real_time import realtime_router
from ..container import ApplicationContainer
from ..structured_logging.enhanced_logging_config import get_logger
from .lifespan import lifespan

logger = get_logger(__name__)


def create_app(container: ApplicationContainer | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        container: Pre-built container to use instead of creating one at startup

    Returns:
        FastAPI: The configured FastAPI application instance
    """
    app = FastAPI(
        title="ShipRelay",
        description="WebSocket relay pairing spaceship game hosts and clients",
        version="0.1.0",
        lifespan=lifespan,
    )
    if container is not None:
        app.state.container = container

    app.include_router(monitoring_router)
    app.include_router(realtime_router)

    logger.debug("FastAPI application created", routes=[getattr(route, "path", None) for route in app.routes])
    return app
