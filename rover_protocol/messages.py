import json
import time
import uuid
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError


Direction = Literal["NORTH", "EAST", "SOUTH", "WEST"]
Command = Literal["F", "B", "L", "R"]
ActivityState = Literal["ACTIVE", "INACTIVE"]
MessageType = Literal[
    "COMMAND",
    "STATUS",
    "COMMAND_RESPONSE",
    "OBSTACLE_DISCOVERED",
    "PING",
    "PONG",
    "ERROR",
]


class ProtocolError(ValueError):
    """Raised when an inbound frame cannot be decoded into a protocol message."""


class UnsupportedMessageTypeError(ProtocolError):
    def __init__(self, message_type: Any):
        self.message_type = message_type
        super().__init__(f"Unsupported message type: {message_type}")


def new_message_id() -> str:
    return f"msg-{uuid.uuid4().hex}"


def now_millis() -> int:
    return int(time.time() * 1000)


class Position(BaseModel):
    """Grid cell. Frozen so positions can be kept in sets and compared by value."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int

    def wrapped(self, width: int, height: int) -> "Position":
        return Position(x=self.x % width, y=self.y % height)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CommandPayload(_WireModel):
    commands: List[Command] = Field(..., description="Ordered movement commands (F, B, L, R).")


class StatusPayload(_WireModel):
    rover_id: str = Field(..., alias="roverId", description="Identity of the reporting rover.")
    position: Position
    direction: Direction
    battery: float = Field(..., ge=0, le=100, description="Battery level in percent.")
    state: ActivityState


class CommandResponsePayload(_WireModel):
    success: bool
    message: str = Field(..., description="Human-readable outcome of the command sequence.")
    final_position: Position = Field(..., alias="finalPosition")
    final_direction: Direction = Field(..., alias="finalDirection")
    obstacle_detected: Optional[Position] = Field(
        default=None, alias="obstacleDetected", description="Cell that blocked the sequence, if any."
    )
    path_taken: Optional[List[Position]] = Field(
        default=None, alias="pathTaken", description="Cells entered by the rover, in order."
    )


class ObstacleDiscoveredPayload(_WireModel):
    position: Position
    discovered_at: int = Field(..., alias="discoveredAt", description="Epoch milliseconds.")


class PingPayload(_WireModel):
    pass


class PongPayload(_WireModel):
    status: Literal["alive"] = "alive"


class ErrorPayload(_WireModel):
    error: str


class MessageEnvelope(_WireModel):
    """Common envelope of every message exchanged between rover and mission control."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(default_factory=new_message_id, description="Unique message identifier.")
    type: MessageType
    payload: Any
    timestamp: int = Field(default_factory=now_millis, description="Epoch milliseconds at send time.")
    source: str = Field(..., description="Identity of the sender.")


class CommandMessage(MessageEnvelope):
    type: Literal["COMMAND"] = "COMMAND"
    payload: CommandPayload


class StatusMessage(MessageEnvelope):
    type: Literal["STATUS"] = "STATUS"
    payload: StatusPayload


class CommandResponseMessage(MessageEnvelope):
    type: Literal["COMMAND_RESPONSE"] = "COMMAND_RESPONSE"
    payload: CommandResponsePayload


class ObstacleDiscoveredMessage(MessageEnvelope):
    type: Literal["OBSTACLE_DISCOVERED"] = "OBSTACLE_DISCOVERED"
    payload: ObstacleDiscoveredPayload


class PingMessage(MessageEnvelope):
    type: Literal["PING"] = "PING"
    payload: PingPayload = Field(default_factory=PingPayload)


class PongMessage(MessageEnvelope):
    type: Literal["PONG"] = "PONG"
    payload: PongPayload = Field(default_factory=PongPayload)


class ErrorMessage(MessageEnvelope):
    type: Literal["ERROR"] = "ERROR"
    payload: ErrorPayload


MESSAGE_MODELS: Dict[str, Type[MessageEnvelope]] = {
    "COMMAND": CommandMessage,
    "STATUS": StatusMessage,
    "COMMAND_RESPONSE": CommandResponseMessage,
    "OBSTACLE_DISCOVERED": ObstacleDiscoveredMessage,
    "PING": PingMessage,
    "PONG": PongMessage,
    "ERROR": ErrorMessage,
}


def encode_message(message: MessageEnvelope) -> str:
    return message.model_dump_json(by_alias=True, exclude_none=True)


def parse_message(raw: str | bytes) -> MessageEnvelope:
    """
    Decode a JSON text frame into its typed message model.

    Raises UnsupportedMessageTypeError when the ``type`` field is unknown and
    ProtocolError for any other decoding or validation failure.
    """
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise ProtocolError(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ProtocolError("Message must be a JSON object")

    msg_type = data.get("type")
    model = MESSAGE_MODELS.get(msg_type) if isinstance(msg_type, str) else None
    if model is None:
        raise UnsupportedMessageTypeError(msg_type)
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ProtocolError(f"Invalid {msg_type} message: {exc.error_count()} validation error(s)") from exc
