import json

import pydantic
import pytest

from rover_protocol import (
    CommandMessage,
    CommandPayload,
    CommandResponseMessage,
    CommandResponsePayload,
    PingMessage,
    Position,
    ProtocolError,
    StatusMessage,
    UnsupportedMessageTypeError,
    encode_message,
    parse_message,
)


def test_command_message_serializes_envelope_fields():
    message = CommandMessage(source="mission-control", payload=CommandPayload(commands=["F", "L"]))

    body = json.loads(encode_message(message))

    assert body["type"] == "COMMAND"
    assert body["payload"] == {"commands": ["F", "L"]}
    assert body["source"] == "mission-control"
    assert body["id"].startswith("msg-")
    assert isinstance(body["timestamp"], int)


def test_message_ids_are_unique():
    first = PingMessage(source="a")
    second = PingMessage(source="a")

    assert first.id != second.id


def test_command_response_uses_camel_case_and_omits_missing_obstacle():
    message = CommandResponseMessage(
        source="rover",
        payload=CommandResponsePayload(
            success=True,
            message="1 commands executed successfully - moved",
            final_position=Position(x=1, y=2),
            final_direction="EAST",
            path_taken=[Position(x=1, y=2)],
        ),
    )

    payload = json.loads(encode_message(message))["payload"]

    assert payload["finalPosition"] == {"x": 1, "y": 2}
    assert payload["finalDirection"] == "EAST"
    assert payload["pathTaken"] == [{"x": 1, "y": 2}]
    assert "obstacleDetected" not in payload


def test_parse_status_message_from_wire_json():
    raw = json.dumps(
        {
            "id": "msg-1",
            "type": "STATUS",
            "payload": {
                "roverId": "curiosity",
                "position": {"x": 3, "y": 4},
                "direction": "SOUTH",
                "battery": 99.5,
                "state": "ACTIVE",
            },
            "timestamp": 1700000000000,
            "source": "curiosity",
        }
    )

    message = parse_message(raw)

    assert isinstance(message, StatusMessage)
    assert message.payload.rover_id == "curiosity"
    assert message.payload.position == Position(x=3, y=4)


def test_parse_rejects_invalid_json():
    with pytest.raises(ProtocolError):
        parse_message("{not json")


def test_parse_rejects_non_object():
    with pytest.raises(ProtocolError):
        parse_message("[1, 2]")


def test_parse_rejects_nesting_too_deep_to_decode():
    with pytest.raises(ProtocolError):
        parse_message("[" * 100000)


def test_parse_rejects_unknown_type():
    with pytest.raises(UnsupportedMessageTypeError) as excinfo:
        parse_message(json.dumps({"type": "SELF_DESTRUCT", "payload": {}, "source": "x"}))

    assert excinfo.value.message_type == "SELF_DESTRUCT"


def test_parse_rejects_invalid_command_letter():
    raw = json.dumps({"type": "COMMAND", "payload": {"commands": ["F", "X"]}, "source": "x"})

    with pytest.raises(ProtocolError) as excinfo:
        parse_message(raw)

    assert not isinstance(excinfo.value, UnsupportedMessageTypeError)


def test_positions_are_hashable_and_compare_by_value():
    cells = {Position(x=1, y=1), Position(x=1, y=1), Position(x=2, y=1)}

    assert len(cells) == 2
    assert Position(x=-1, y=5).wrapped(4, 4) == Position(x=3, y=1)


def test_envelope_is_immutable_once_built():
    message = PingMessage(source="mission-control")

    with pytest.raises(pydantic.ValidationError):
        message.source = "someone-else"
