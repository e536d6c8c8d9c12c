"""Wire protocol shared by the rover and mission control."""

from .messages import (
    ActivityState,
    Command,
    CommandMessage,
    CommandPayload,
    CommandResponseMessage,
    CommandResponsePayload,
    Direction,
    ErrorMessage,
    ErrorPayload,
    MESSAGE_MODELS,
    MessageEnvelope,
    ObstacleDiscoveredMessage,
    ObstacleDiscoveredPayload,
    PingMessage,
    PingPayload,
    PongMessage,
    PongPayload,
    Position,
    ProtocolError,
    StatusMessage,
    StatusPayload,
    UnsupportedMessageTypeError,
    encode_message,
    new_message_id,
    now_millis,
    parse_message,
)

__all__ = [
    "ActivityState",
    "Command",
    "CommandMessage",
    "CommandPayload",
    "CommandResponseMessage",
    "CommandResponsePayload",
    "Direction",
    "ErrorMessage",
    "ErrorPayload",
    "MESSAGE_MODELS",
    "MessageEnvelope",
    "ObstacleDiscoveredMessage",
    "ObstacleDiscoveredPayload",
    "PingMessage",
    "PingPayload",
    "PongMessage",
    "PongPayload",
    "Position",
    "ProtocolError",
    "StatusMessage",
    "StatusPayload",
    "UnsupportedMessageTypeError",
    "encode_message",
    "new_message_id",
    "now_millis",
    "parse_message",
]
