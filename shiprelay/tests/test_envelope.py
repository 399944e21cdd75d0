"""
Tests for the relay wire protocol.

Covers decoding of inbound frames into the tagged union and the exact field
names used by server-originated messages.
"""

import json

import pytest

from ..exceptions import ErrorContext, ProtocolError, UnknownMessageTypeError
from ..realtime.envelope import (
    HANDSHAKE_MESSAGE_TYPES,
    RELAY_MESSAGE_TYPES,
    ClientJoinedMessage,
    DisconnectMessage,
    HostedMessage,
    HostRequest,
    JoinedMessage,
    JoinRequest,
    MessageType,
    PingMessage,
    PongMessage,
    RejectMessage,
    RelayEnvelope,
    ScreenSizeMessage,
    parse_envelope,
)


class TestParseControlMessages:
    """Decoding of HOST, JOIN and PONG."""

    def test_host_request(self):
        """HOST decodes into a HostRequest with the screen size."""
        message = parse_envelope('{"type": "HOST", "screenW": 800, "screenH": 600}')

        assert isinstance(message, HostRequest)
        assert message.kind is MessageType.HOST
        assert message.screen_w == 800
        assert message.screen_h == 600

    def test_join_request(self):
        """JOIN decodes into a JoinRequest."""
        message = parse_envelope('{"type": "JOIN", "roomCode": "4821", "screenW": 1024, "screenH": 500}')

        assert isinstance(message, JoinRequest)
        assert message.room_code == "4821"
        assert message.screen_w == 1024
        assert message.screen_h == 500

    def test_join_numeric_room_code_is_coerced_to_string(self):
        """A room code sent as a JSON number matches the string key."""
        message = parse_envelope('{"type": "JOIN", "roomCode": 4821, "screenW": 10, "screenH": 10}')

        assert isinstance(message, JoinRequest)
        assert message.room_code == "4821"

    def test_extra_fields_are_ignored(self):
        """Unknown fields on control messages do not cause rejection."""
        message = parse_envelope('{"type": "HOST", "screenW": 1, "screenH": 2, "name": "Ace"}')

        assert isinstance(message, HostRequest)

    def test_pong(self):
        """PONG decodes into a PongMessage."""
        assert isinstance(parse_envelope('{"type": "PONG"}'), PongMessage)

    @pytest.mark.parametrize(
        "payload, field",
        [
            ({"type": "HOST", "screenH": 600}, "screenW"),
            ({"type": "HOST", "screenW": 0, "screenH": 600}, "screenW"),
            ({"type": "HOST", "screenW": 800, "screenH": "tall"}, "screenH"),
            ({"type": "JOIN", "screenW": 800, "screenH": 600}, "roomCode"),
            ({"type": "JOIN", "roomCode": "", "screenW": 800, "screenH": 600}, "roomCode"),
        ],
    )
    def test_control_message_with_invalid_fields(self, payload, field):
        """Control messages missing routing fields raise ProtocolError naming the field."""
        with pytest.raises(ProtocolError) as exc_info:
            parse_envelope(json.dumps(payload))

        assert exc_info.value.field == field


class TestParseRelayMessages:
    """Decoding of peer-to-peer kinds."""

    @pytest.mark.parametrize("kind", sorted(RELAY_MESSAGE_TYPES | HANDSHAKE_MESSAGE_TYPES, key=lambda k: k.value))
    def test_relay_kinds_keep_raw_text(self, kind):
        """Relay kinds are wrapped with the exact frame text, untouched."""
        raw = '{"type":"%s",  "x": 1.50, "nested": {"a": [1, 2]}}' % kind.value

        message = parse_envelope(raw)

        assert isinstance(message, RelayEnvelope)
        assert message.kind is kind
        assert message.raw == raw

    def test_relay_payload_is_not_validated(self):
        """Relay frames carry arbitrary payloads."""
        message = parse_envelope('{"type": "MOVE"}')

        assert isinstance(message, RelayEnvelope)


class TestParseErrors:
    """Frames that cannot be routed."""

    @pytest.mark.parametrize("raw", ["not json", "{", "", "[1, 2]", '"MOVE"', "42", "null"])
    def test_not_a_json_object(self, raw):
        """Anything other than a JSON object is a protocol error."""
        with pytest.raises(ProtocolError):
            parse_envelope(raw)

    @pytest.mark.parametrize("raw", ['{"x": 1}', '{"type": 7}', '{"type": null}'])
    def test_missing_or_non_string_type(self, raw):
        """The type discriminator must be a string."""
        with pytest.raises(ProtocolError) as exc_info:
            parse_envelope(raw)

        assert exc_info.value.field == "type"

    def test_unknown_type(self):
        """An unrecognized type raises UnknownMessageTypeError."""
        with pytest.raises(UnknownMessageTypeError) as exc_info:
            parse_envelope('{"type": "TELEPORT"}')

        assert exc_info.value.message_type == "TELEPORT"

    @pytest.mark.parametrize("kind", ["HOSTED", "REJECT", "CLIENT_JOINED", "JOINED", "DISCONNECT", "PING"])
    def test_server_only_kinds_are_rejected_inbound(self, kind):
        """Kinds only the server sends are treated as unknown when a peer sends them."""
        with pytest.raises(UnknownMessageTypeError):
            parse_envelope(json.dumps({"type": kind}))

    def test_error_carries_sender_context(self):
        """The supplied context is attached to the raised error."""
        context = ErrorContext(connection_id="conn-1")

        with pytest.raises(ProtocolError) as exc_info:
            parse_envelope("garbage", context)

        assert exc_info.value.context.connection_id == "conn-1"


class TestOutboundMessages:
    """Serialized form of server-originated messages."""

    def test_hosted(self):
        assert json.loads(HostedMessage(room_code="4821", version=1).to_json()) == {
            "type": "HOSTED",
            "roomCode": "4821",
            "version": 1,
        }

    def test_reject(self):
        assert json.loads(RejectMessage(reason="Room full").to_json()) == {"type": "REJECT", "reason": "Room full"}

    def test_screen_size(self):
        assert json.loads(ScreenSizeMessage(game_w=800, game_h=500).to_json()) == {
            "type": "SCREEN_SIZE",
            "gameW": 800,
            "gameH": 500,
        }

    def test_join_acknowledgments(self):
        assert json.loads(ClientJoinedMessage(version=1).to_json()) == {"type": "CLIENT_JOINED", "version": 1}
        assert json.loads(JoinedMessage(version=1).to_json()) == {"type": "JOINED", "version": 1}

    def test_bare_messages(self):
        """DISCONNECT and PING carry only their type."""
        assert json.loads(DisconnectMessage().to_json()) == {"type": "DISCONNECT"}
        assert json.loads(PingMessage().to_json()) == {"type": "PING"}
