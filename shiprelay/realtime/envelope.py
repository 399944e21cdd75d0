"""
Wire protocol for ShipRelay real-time messages.

Every frame is a JSON object with a `type` discriminator. Inbound frames are
decoded into one variant of a tagged union:

- HostRequest / JoinRequest: control messages that mutate room state
- PongMessage: liveness probe acknowledgment
- RelayEnvelope: any peer-to-peer kind; carries the original frame text so it
  can be forwarded byte-for-byte without ever being inspected

Outbound messages are pydantic models serialized with their wire aliases.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError, field_validator

from ..exceptions import ErrorContext, ProtocolError, UnknownMessageTypeError


class MessageType(str, Enum):
    """Every message kind that appears on the wire."""

    HOST = "HOST"
    HOSTED = "HOSTED"
    JOIN = "JOIN"
    REJECT = "REJECT"
    SCREEN_SIZE = "SCREEN_SIZE"
    CLIENT_JOINED = "CLIENT_JOINED"
    JOINED = "JOINED"
    HELLO = "HELLO"
    SHIP_IMAGES = "SHIP_IMAGES"
    WELCOME = "WELCOME"
    MOVE = "MOVE"
    SPAWN = "SPAWN"
    DELETE = "DELETE"
    FIRE = "FIRE"
    DAMAGE = "DAMAGE"
    COLLISION = "COLLISION"
    DISCONNECT = "DISCONNECT"
    PING = "PING"
    PONG = "PONG"


# Game-state kinds forwarded verbatim between the two participants
RELAY_MESSAGE_TYPES: frozenset[MessageType] = frozenset(
    {
        MessageType.SCREEN_SIZE,
        MessageType.SHIP_IMAGES,
        MessageType.WELCOME,
        MessageType.MOVE,
        MessageType.SPAWN,
        MessageType.DELETE,
        MessageType.FIRE,
        MessageType.DAMAGE,
        MessageType.COLLISION,
    }
)

# Handshake kinds; routed exactly like relay kinds
HANDSHAKE_MESSAGE_TYPES: frozenset[MessageType] = frozenset({MessageType.HELLO})


# --- Inbound ---------------------------------------------------------------


class _InboundModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind: ClassVar[MessageType]


class HostRequest(_InboundModel):
    """Request to create a room, carrying the host's screen size."""

    kind: ClassVar[MessageType] = MessageType.HOST

    screen_w: PositiveInt = Field(alias="screenW")
    screen_h: PositiveInt = Field(alias="screenH")


class JoinRequest(_InboundModel):
    """Request to join an existing room by code."""

    kind: ClassVar[MessageType] = MessageType.JOIN

    room_code: str = Field(alias="roomCode", min_length=1)
    screen_w: PositiveInt = Field(alias="screenW")
    screen_h: PositiveInt = Field(alias="screenH")

    @field_validator("room_code", mode="before")
    @classmethod
    def coerce_room_code(cls, v: Any) -> Any:
        """Clients may send the code as a number; room codes are keyed by their decimal string."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str):
            return v.strip()
        return v


class PongMessage(_InboundModel):
    """Acknowledgment of a liveness probe."""

    kind: ClassVar[MessageType] = MessageType.PONG


@dataclass(frozen=True)
class RelayEnvelope:
    """A peer-to-peer frame; `raw` is the exact text received."""

    kind: MessageType
    raw: str


InboundMessage = HostRequest | JoinRequest | PongMessage | RelayEnvelope

_CONTROL_MODELS: dict[MessageType, type[_InboundModel]] = {
    MessageType.HOST: HostRequest,
    MessageType.JOIN: JoinRequest,
    MessageType.PONG: PongMessage,
}


def parse_envelope(raw: str, context: ErrorContext | None = None) -> InboundMessage:
    """
    Decode one inbound text frame.

    Args:
        raw: Frame text as received from the transport
        context: Optional error context identifying the sender

    Returns:
        The decoded message variant

    Raises:
        ProtocolError: If the frame is not a JSON object with a string `type`,
            or a control message is missing its routing fields
        UnknownMessageTypeError: If `type` is not a kind peers may send
    """
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise ProtocolError("Invalid message: frame is not valid JSON", context, details={"error": str(e)}) from e

    if not isinstance(payload, dict):
        raise ProtocolError("Invalid message: envelope must be a JSON object", context)

    message_type = payload.get("type")
    if not isinstance(message_type, str):
        raise ProtocolError("Invalid message: envelope has no string type", context, field="type")

    try:
        kind = MessageType(message_type)
    except ValueError:
        raise UnknownMessageTypeError(message_type, context) from None

    if kind in RELAY_MESSAGE_TYPES or kind in HANDSHAKE_MESSAGE_TYPES:
        return RelayEnvelope(kind=kind, raw=raw)

    model = _CONTROL_MODELS.get(kind)
    if model is None:
        # Server-to-peer kinds (HOSTED, REJECT, ...) are not accepted inbound
        raise UnknownMessageTypeError(message_type, context)

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        fields = [".".join(str(loc) for loc in error["loc"]) for error in e.errors()]
        raise ProtocolError(
            f"Invalid {kind.value} message",
            context,
            field=fields[0] if fields else None,
            details={"fields": fields},
        ) from e


# --- Outbound --------------------------------------------------------------


class OutboundMessage(BaseModel):
    """Base for server-originated messages."""

    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> str:
        """Serialize with wire field names."""
        return self.model_dump_json(by_alias=True)


class HostedMessage(OutboundMessage):
    type: Literal["HOSTED"] = "HOSTED"
    room_code: str = Field(alias="roomCode")
    version: int


class RejectMessage(OutboundMessage):
    type: Literal["REJECT"] = "REJECT"
    reason: str


class ScreenSizeMessage(OutboundMessage):
    type: Literal["SCREEN_SIZE"] = "SCREEN_SIZE"
    game_w: int = Field(alias="gameW")
    game_h: int = Field(alias="gameH")


class ClientJoinedMessage(OutboundMessage):
    type: Literal["CLIENT_JOINED"] = "CLIENT_JOINED"
    version: int


class JoinedMessage(OutboundMessage):
    type: Literal["JOINED"] = "JOINED"
    version: int


class DisconnectMessage(OutboundMessage):
    type: Literal["DISCONNECT"] = "DISCONNECT"


class PingMessage(OutboundMessage):
    type: Literal["PING"] = "PING"
