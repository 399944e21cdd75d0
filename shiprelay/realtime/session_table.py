"""
Authoritative in-memory mapping of room codes to sessions.

Room codes are decimal strings drawn uniformly at random from a configured
range (1000-9999 by default). A draw that hits a live code is discarded and
redrawn. Creation never fails: if every draw collides, the last code drawn is
reused and the new session replaces the old one under that code.
"""

import random
from typing import Any

from ..exceptions import RoomFullError, RoomNotFoundError
from ..structured_logging.enhanced_logging_config import get_logger
from .session_models import ScreenSize, Session
from .transport import PeerConnection

logger = get_logger(__name__)


class SessionTable:
    """Room code to Session mapping with code allocation."""

    def __init__(
        self,
        code_min: int = 1000,
        code_max: int = 9999,
        max_code_attempts: int = 100,
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize the table.

        Args:
            code_min: Smallest code that may be issued
            code_max: Largest code that may be issued
            max_code_attempts: Random draws tried before giving up on a free code
            rng: Random source (injectable for deterministic tests)
        """
        self.code_min = code_min
        self.code_max = code_max
        self.max_code_attempts = max_code_attempts
        self._rng = rng or random.Random()
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, code: object) -> bool:
        return code in self._sessions

    def generate_code(self) -> str:
        """Draw one code uniformly from the configured range."""
        return str(self._rng.randint(self.code_min, self.code_max))

    def allocate_code(self) -> str:
        """
        Draw a code, preferring one no live session holds.

        Returns:
            str: A free code, or the last code drawn if every draw collided
        """
        code = self.generate_code()
        for attempt in range(1, self.max_code_attempts + 1):
            if code not in self._sessions:
                if attempt > 1:
                    logger.debug("Room code collision resolved", room_code=code, attempts=attempt)
                return code
            if attempt < self.max_code_attempts:
                code = self.generate_code()

        logger.warning(
            "No free room code found, reusing a live code",
            room_code=code,
            attempts=self.max_code_attempts,
            live_rooms=len(self._sessions),
        )
        return code

    def create(self, host: PeerConnection, host_screen: ScreenSize) -> Session:
        """
        Insert a new, unmatched session under a freshly allocated code.

        A session already holding the code is replaced; its participants are
        no longer members of any live room.
        """
        code = self.allocate_code()
        replaced = self._sessions.get(code)
        if replaced is not None:
            logger.warning(
                "Replacing live room with colliding code",
                room_code=code,
                replaced_matched=replaced.is_matched,
            )
        session = Session(code=code, host=host, host_screen=host_screen)
        self._sessions[code] = session
        return session

    def get(self, code: str) -> Session | None:
        return self._sessions.get(code)

    def require_joinable(self, code: str, joiner: PeerConnection | None = None) -> Session:
        """
        Look up a session a new client may join.

        Args:
            code: Room code named in the JOIN
            joiner: The joining connection; its own room has no free seat for it

        Raises:
            RoomNotFoundError: No live session has this code
            RoomFullError: The session already has a client, or the joiner is its host
        """
        session = self._sessions.get(code)
        if session is None:
            raise RoomNotFoundError(code)
        if session.client is not None:
            raise RoomFullError(code)
        if joiner is not None and session.has_participant(joiner):
            raise RoomFullError(code, details={"joiner_is_host": True})
        return session

    def remove(self, code: str) -> Session | None:
        return self._sessions.pop(code, None)

    def sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def get_stats(self) -> dict[str, Any]:
        matched = sum(1 for session in self._sessions.values() if session.is_matched)
        return {
            "rooms": len(self._sessions),
            "matched_rooms": matched,
            "waiting_rooms": len(self._sessions) - matched,
        }
