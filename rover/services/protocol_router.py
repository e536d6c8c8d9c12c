import logging
from typing import Any, List, Optional

import tornado.websocket

from rover.models import ExecutionResult
from rover.services.navigation_engine import NavigationEngine
from rover_protocol import (
    CommandMessage,
    CommandResponseMessage,
    CommandResponsePayload,
    ErrorMessage,
    ErrorPayload,
    MessageEnvelope,
    ObstacleDiscoveredMessage,
    ObstacleDiscoveredPayload,
    PingMessage,
    PongMessage,
    ProtocolError,
    StatusMessage,
    StatusPayload,
    UnsupportedMessageTypeError,
    encode_message,
    now_millis,
    parse_message,
)


logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Open mission control connections served by this rover."""

    def __init__(self):
        self._connections: set = set()

    def add(self, connection: Any) -> None:
        self._connections.add(connection)

    def discard(self, connection: Any) -> None:
        self._connections.discard(connection)

    def snapshot(self) -> List[Any]:
        return list(self._connections)

    def __contains__(self, connection: Any) -> bool:
        return connection in self._connections

    def __len__(self) -> int:
        return len(self._connections)


class ProtocolRouter:
    """
    Dispatches inbound protocol messages to the navigation engine.

    A connection is any object exposing ``write_message(str)`` and ``close()``
    (a Tornado WebSocket handler in production). Handling is synchronous: a
    COMMAND is fully resolved, including the STATUS broadcast, before control
    returns to the IOLoop.
    """

    def __init__(self, engine: NavigationEngine, rover_id: str, registry: Optional[ConnectionRegistry] = None):
        self.engine = engine
        self.rover_id = rover_id
        self.registry = registry if registry is not None else ConnectionRegistry()

    def open_connection(self, connection: Any) -> None:
        self.registry.add(connection)
        logger.info("Mission control connected (%d open)", len(self.registry))
        self._send(connection, self.status_message())

    def close_connection(self, connection: Any) -> None:
        if connection in self.registry:
            self.registry.discard(connection)
            logger.info("Mission control disconnected (%d open)", len(self.registry))

    def handle_message(self, connection: Any, raw: str | bytes) -> None:
        try:
            message = parse_message(raw)
        except UnsupportedMessageTypeError as exc:
            logger.warning("%s", exc)
            self._send_error(connection, str(exc))
            return
        except ProtocolError as exc:
            logger.warning("Rejected malformed message: %s", exc)
            self._send_error(connection, f"Invalid message format: {exc}")
            return

        logger.info("Received %s (id=%s) from %s", message.type, message.id, message.source)
        if isinstance(message, CommandMessage):
            self._handle_command(connection, message)
        elif isinstance(message, PingMessage):
            self._send(connection, PongMessage(source=self.rover_id))
        else:
            self._send_error(connection, f"Unsupported message type: {message.type}")

    def status_message(self) -> StatusMessage:
        state = self.engine.get_state()
        return StatusMessage(
            source=self.rover_id,
            payload=StatusPayload(
                rover_id=self.rover_id,
                position=state.position,
                direction=state.direction,
                battery=state.battery,
                state=state.state,
            ),
        )

    def broadcast_status(self) -> None:
        status = self.status_message()
        for connection in self.registry.snapshot():
            self._send(connection, status)

    def shutdown(self) -> None:
        for connection in self.registry.snapshot():
            self.registry.discard(connection)
            connection.close(code=1001, reason="rover shutting down")
        logger.info("All mission control connections closed")

    def _handle_command(self, connection: Any, message: CommandMessage) -> None:
        commands = message.payload.commands
        logger.info("Executing %d commands: %s", len(commands), "".join(commands))
        result = self.engine.execute_sequence(commands)
        self._log_result(result)

        self._send(
            connection,
            CommandResponseMessage(
                source=self.rover_id,
                payload=CommandResponsePayload(
                    success=result.success,
                    message=result.message,
                    final_position=result.final_state.position,
                    final_direction=result.final_state.direction,
                    obstacle_detected=result.obstacle_detected,
                    path_taken=result.path,
                ),
            ),
        )
        if result.obstacle_detected is not None:
            logger.info("Reporting obstacle at %s", result.obstacle_detected)
            self._send(
                connection,
                ObstacleDiscoveredMessage(
                    source=self.rover_id,
                    payload=ObstacleDiscoveredPayload(
                        position=result.obstacle_detected,
                        discovered_at=now_millis(),
                    ),
                ),
            )
        self.broadcast_status()

    def _log_result(self, result: ExecutionResult) -> None:
        for event in result.events:
            if event.kind in ("BLOCKED", "BATTERY_DEPLETED"):
                logger.warning("%s on %s at %s facing %s", event.kind, event.command, event.position, event.direction)
            else:
                logger.debug("%s on %s -> %s facing %s", event.kind, event.command, event.position, event.direction)
        state = result.final_state
        logger.info("%s; now at %s facing %s, battery %.1f%%", result.message, state.position, state.direction, state.battery)

    def _send_error(self, connection: Any, error: str) -> None:
        self._send(connection, ErrorMessage(source=self.rover_id, payload=ErrorPayload(error=error)))

    def _send(self, connection: Any, message: MessageEnvelope) -> bool:
        try:
            connection.write_message(encode_message(message))
        except tornado.websocket.WebSocketClosedError:
            logger.debug("Dropping closed connection while sending %s", message.type)
            self.registry.discard(connection)
            return False
        return True
