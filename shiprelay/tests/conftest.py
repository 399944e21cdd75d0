"""
Test configuration and fixtures for the ShipRelay test suite.

This module provides core fixtures and test isolation: environment defaults
set before the package is imported, a config reset around every test, and an
in-memory peer transport.
"""

import json
import os
import random
import uuid
from collections.abc import Generator
from typing import Any

import pytest

# Set environment variables before anything imports the config
os.environ.setdefault("SERVER_PORT", "54731")
os.environ.setdefault("SERVER_HOST", "127.0.0.1")
os.environ.setdefault("LOGGING_ENVIRONMENT", "unit_test")
os.environ.setdefault("LOGGING_LEVEL", "DEBUG")
os.environ.setdefault("LOGGING_FORMAT", "human")

from ..config import reset_config  # noqa: E402
from ..realtime.connection_manager import ConnectionManager  # noqa: E402
from ..realtime.message_router import MessageRouter  # noqa: E402
from ..realtime.session_lifecycle import SessionLifecycleManager  # noqa: E402
from ..realtime.session_table import SessionTable  # noqa: E402


class FakePeer:
    """In-memory PeerConnection that records every frame sent to it."""

    def __init__(self, connection_id: str | None = None, open_: bool = True) -> None:
        self.connection_id = connection_id or str(uuid.uuid4())
        self.open = open_
        self.sent: list[str] = []
        self.probes = 0
        self.terminated = False

    def __repr__(self) -> str:
        return f"FakePeer(connection_id={self.connection_id!r})"

    def is_open(self) -> bool:
        return self.open

    async def send_text(self, data: str) -> None:
        if self.open:
            self.sent.append(data)

    async def probe(self) -> None:
        self.probes += 1

    async def terminate(self) -> None:
        self.terminated = True
        self.open = False

    @property
    def messages(self) -> list[dict[str, Any]]:
        """Decoded frames, in send order."""
        return [json.loads(frame) for frame in self.sent]

    @property
    def message_types(self) -> list[str]:
        return [message["type"] for message in self.messages]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture(autouse=True)
def reset_config_between_tests() -> Generator[None, None, None]:
    """Ensure every test sees configuration freshly loaded from the environment."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def connection_manager() -> ConnectionManager:
    return ConnectionManager()


@pytest.fixture
def session_table() -> SessionTable:
    """Session table with a seeded random source for repeatable room codes."""
    return SessionTable(rng=random.Random(1234))


@pytest.fixture
def lifecycle(connection_manager, session_table) -> SessionLifecycleManager:
    return SessionLifecycleManager(connection_manager, session_table, protocol_version=1)


@pytest.fixture
def router(lifecycle, connection_manager) -> MessageRouter:
    return MessageRouter(lifecycle, connection_manager)


@pytest.fixture
def make_peer(connection_manager):
    """Factory creating a FakePeer already registered with the connection manager."""

    def _make_peer(connection_id: str | None = None) -> FakePeer:
        peer = FakePeer(connection_id)
        connection_manager.register(peer)
        return peer

    return _make_peer


def host_frame(screen_w: int = 800, screen_h: int = 600) -> str:
    return json.dumps({"type": "HOST", "screenW": screen_w, "screenH": screen_h})


def join_frame(room_code: Any, screen_w: int = 1024, screen_h: int = 500) -> str:
    return json.dumps({"type": "JOIN", "roomCode": room_code, "screenW": screen_w, "screenH": screen_h})
