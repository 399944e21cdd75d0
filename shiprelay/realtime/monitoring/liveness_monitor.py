"""
Liveness monitoring for relay connections.

Every cycle, each open connection that has sent nothing since the previous
probe is terminated and handed to the disconnect handler; every other
connection is marked unacknowledged and probed again. Any inbound frame counts
as an acknowledgment, PONG included, so a peer is dropped on the second cycle
after it falls silent.
"""

import asyncio
import contextlib
import time
from collections.abc import Awaitable, Callable
from typing import Any

from ...structured_logging.enhanced_logging_config import get_logger
from ..connection_manager import ConnectionManager
from ..transport import PeerConnection

logger = get_logger(__name__)


class LivenessMonitor:
    """
    Periodic probe-and-reap loop.

    The disconnect callback is the same one the WebSocket handler calls on an
    ordinary close, so a reaped connection's room is torn down with the usual
    DISCONNECT notification.
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        disconnect_callback: Callable[[PeerConnection], Awaitable[Any]],
        heartbeat_interval: float = 30.0,
    ) -> None:
        """
        Initialize the liveness monitor.

        Args:
            connection_manager: Registry of live connections
            disconnect_callback: Handler run for every terminated connection
            heartbeat_interval: Seconds between probe cycles
        """
        self.connection_manager = connection_manager
        self.disconnect_callback = disconnect_callback
        self.heartbeat_interval = heartbeat_interval

        self._task: asyncio.Task[None] | None = None
        self.cycles_completed = 0
        self.connections_terminated = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_cycle(self) -> list[str]:
        """
        Run one probe cycle over every open connection.

        Returns:
            list[str]: Ids of the connections terminated in this cycle
        """
        start_time = time.time()
        terminated: list[str] = []
        probed = 0

        for peer, metadata in self.connection_manager.snapshot():
            if not peer.is_open():
                continue
            try:
                if not metadata.is_alive:
                    logger.info("Terminating unresponsive connection", connection_id=peer.connection_id)
                    terminated.append(peer.connection_id)
                    await peer.terminate()
                    await self.disconnect_callback(peer)
                    continue

                metadata.is_alive = False
                await peer.probe()
                probed += 1
            except Exception as e:  # pylint: disable=broad-except  # Reason: one broken connection must not stop the cycle for the rest
                logger.error(
                    "Error during liveness check",
                    connection_id=peer.connection_id,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )

        self.cycles_completed += 1
        self.connections_terminated += len(terminated)
        logger.debug(
            "Liveness cycle completed",
            duration_ms=(time.time() - start_time) * 1000,
            probed=probed,
            terminated=len(terminated),
        )
        return terminated

    async def periodic_liveness_task(self) -> None:
        """Run probe cycles forever at the configured interval."""
        logger.info("Starting periodic liveness checks", interval_seconds=self.heartbeat_interval)
        try:
            while True:
                await asyncio.sleep(self.heartbeat_interval)
                await self.run_cycle()
        except asyncio.CancelledError:
            logger.info("Periodic liveness task cancelled")
            raise

    def start(self) -> None:
        """Start the periodic task on the running event loop."""
        if self.is_running:
            logger.warning("Liveness task already running")
            return
        self._task = asyncio.create_task(self.periodic_liveness_task(), name="liveness_monitor/periodic_check")

    async def stop(self) -> None:
        """Cancel the periodic task and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        logger.info("Stopping periodic liveness task")
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def get_stats(self) -> dict[str, Any]:
        return {
            "running": self.is_running,
            "heartbeat_interval": self.heartbeat_interval,
            "cycles_completed": self.cycles_completed,
            "connections_terminated": self.connections_terminated,
        }
