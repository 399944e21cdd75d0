"""
Application container for the ShipRelay server.

Builds the relay services in dependency order and owns their lifecycle, so
routes and tests reach every service through one object stored on
`app.state.container` instead of module-level globals.
"""

import random
from typing import Any

from .config import AppConfig, get_config
from .realtime.connection_manager import ConnectionManager
from .realtime.message_router import MessageRouter
from .realtime.monitoring.liveness_monitor import LivenessMonitor
from .realtime.session_lifecycle import SessionLifecycleManager
from .realtime.session_table import SessionTable
from .structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


class ApplicationContainer:
    """
    Dependency container for the relay services.

    Services are constructed eagerly (they have no I/O); `initialize()` only
    starts the background liveness task and must run inside the event loop.
    """

    def __init__(self, config: AppConfig | None = None, rng: random.Random | None = None) -> None:
        """
        Initialize the container.

        Args:
            config: Application configuration (defaults to get_config())
            rng: Random source for room codes (injectable for tests)
        """
        self.config = config or get_config()
        relay_config = self.config.relay

        self.connection_manager = ConnectionManager()
        self.session_table = SessionTable(
            code_min=relay_config.room_code_min,
            code_max=relay_config.room_code_max,
            max_code_attempts=relay_config.max_code_attempts,
            rng=rng,
        )
        self.session_lifecycle = SessionLifecycleManager(
            self.connection_manager,
            self.session_table,
            protocol_version=relay_config.protocol_version,
        )
        self.message_router = MessageRouter(self.session_lifecycle, self.connection_manager)
        self.liveness_monitor = LivenessMonitor(
            self.connection_manager,
            self.session_lifecycle.handle_disconnect,
            heartbeat_interval=relay_config.heartbeat_interval,
        )
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Start background services."""
        if self._initialized:
            logger.debug("ApplicationContainer already initialized")
            return
        logger.info("Initializing ApplicationContainer...")
        self.liveness_monitor.start()
        self._initialized = True
        logger.info(
            "ApplicationContainer initialized",
            heartbeat_interval=self.liveness_monitor.heartbeat_interval,
            protocol_version=self.session_lifecycle.protocol_version,
        )

    async def shutdown(self) -> None:
        """Stop background services."""
        logger.info("Shutting down ApplicationContainer...")
        await self.liveness_monitor.stop()
        self._initialized = False
        logger.info("ApplicationContainer shutdown complete")

    def get_stats(self) -> dict[str, Any]:
        return {
            "connections": self.connection_manager.get_stats(),
            "rooms": self.session_table.get_stats(),
            "liveness": self.liveness_monitor.get_stats(),
        }
