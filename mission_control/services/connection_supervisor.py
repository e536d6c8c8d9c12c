import functools
import logging
from typing import Any, Callable, Literal, Optional, Sequence

from tornado.httpclient import HTTPClientError, HTTPRequest
from tornado.ioloop import IOLoop, PeriodicCallback
from tornado.websocket import WebSocketClosedError, WebSocketError, websocket_connect

from mission_control.config import MissionControlConfig
from mission_control.services.map_reconstructor import MapReconstructor
from rover_protocol import (
    Command,
    CommandMessage,
    CommandPayload,
    MessageEnvelope,
    PingMessage,
    ProtocolError,
    encode_message,
    parse_message,
)


logger = logging.getLogger(__name__)

ConnectionState = Literal["DISCONNECTED", "CONNECTING", "CONNECTED"]


class ConnectionSupervisor:
    """
    Owns the ground station's single connection to the rover.

    DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED. While connected a
    PING is sent every ``ping_interval`` seconds. Losing the connection
    cancels the keepalive, forgets the rover's position, flags the map for a
    reset on the next STATUS and retries after ``reconnect_interval`` seconds,
    indefinitely and without backoff.
    """

    def __init__(
        self,
        config: MissionControlConfig,
        reconstructor: MapReconstructor,
        connector: Callable[..., Any] = websocket_connect,
        on_message: Optional[Callable[[MessageEnvelope], None]] = None,
    ):
        self.config = config
        self.reconstructor = reconstructor
        self.on_message = on_message
        self.state: ConnectionState = "DISCONNECTED"
        self.connection_attempts = 0
        self._connector = connector
        self._connection = None
        self._ping_timer: Optional[PeriodicCallback] = None
        self._reconnect_handle: Optional[object] = None
        self._stopped = False
        # Incremented per attempt so callbacks from stale sockets are ignored.
        self._epoch = 0
        self._closed_while_connecting = False

    @property
    def connected(self) -> bool:
        return self.state == "CONNECTED"

    @property
    def reconnect_scheduled(self) -> bool:
        return self._reconnect_handle is not None

    @property
    def keepalive_running(self) -> bool:
        return self._ping_timer is not None and self._ping_timer.is_running()

    def start(self) -> None:
        self._stopped = False
        IOLoop.current().spawn_callback(self.connect)

    async def connect(self) -> bool:
        if self._stopped or self.state != "DISCONNECTED":
            return self.connected
        self._cancel_reconnect()
        self._epoch += 1
        epoch = self._epoch
        self._closed_while_connecting = False
        self.state = "CONNECTING"
        self.connection_attempts += 1
        logger.info("Connecting to rover at %s (attempt %d)", self.config.rover_url, self.connection_attempts)

        try:
            connection = await self._connector(
                self._build_request(),
                on_message_callback=functools.partial(self._on_message, epoch),
            )
        except (OSError, HTTPClientError, WebSocketError) as exc:
            logger.warning("Connection to rover failed: %s", exc)
            self._connection_failed()
            return False

        if epoch != self._epoch or self._stopped:
            connection.close()
            return False
        if self._closed_while_connecting:
            logger.warning("Rover closed the connection during the handshake")
            self._connection_failed()
            return False

        self._connection = connection
        self._enter_connected()
        return True

    def send_command(self, commands: Sequence[Command]) -> bool:
        if not self.connected:
            logger.error("Cannot send commands %s: not connected to rover", "".join(commands))
            return False
        message = CommandMessage(source=self.config.source, payload=CommandPayload(commands=list(commands)))
        if self._write(message):
            logger.info("Sent commands: %s", "".join(commands))
            return True
        return False

    def stop(self) -> None:
        self._stopped = True
        self._epoch += 1
        self._cancel_reconnect()
        self._stop_keepalive()
        connection, self._connection = self._connection, None
        self.state = "DISCONNECTED"
        if connection is not None:
            connection.close()
        logger.info("Mission control connection stopped")

    def _build_request(self) -> HTTPRequest:
        headers = {}
        if self.config.auth_token:
            headers["Authorization"] = f"Bearer {self.config.auth_token}"
        return HTTPRequest(self.config.rover_url, headers=headers)

    def _on_message(self, epoch: int, raw: Optional[str | bytes]) -> None:
        if epoch != self._epoch:
            return
        if raw is None:
            if self.connected:
                self._leave_connected("connection closed")
            else:
                self._closed_while_connecting = True
            return

        try:
            message = parse_message(raw)
        except ProtocolError as exc:
            logger.warning("Discarding unreadable rover message: %s", exc)
            return
        self.reconstructor.apply(message)
        if self.on_message is not None:
            self.on_message(message)

    def _enter_connected(self) -> None:
        self.state = "CONNECTED"
        self.connection_attempts = 0
        self._cancel_reconnect()
        self._stop_keepalive()
        self._ping_timer = PeriodicCallback(self._send_ping, self.config.ping_interval * 1000)
        self._ping_timer.start()
        logger.info("Connected to rover at %s", self.config.rover_url)

    def _leave_connected(self, reason: str) -> None:
        logger.warning("Lost connection to rover: %s", reason)
        self.state = "DISCONNECTED"
        self._epoch += 1
        self._stop_keepalive()
        self._connection = None
        self.reconstructor.forget_rover()
        self.reconstructor.mark_reset_pending()
        self._schedule_reconnect()

    def _connection_failed(self) -> None:
        self.state = "DISCONNECTED"
        self._schedule_reconnect()

    def _schedule_reconnect(self) -> None:
        if self._stopped:
            return
        self._cancel_reconnect()
        logger.info("Reconnecting in %.1fs", self.config.reconnect_interval)
        self._reconnect_handle = IOLoop.current().call_later(self.config.reconnect_interval, self._reconnect)

    def _reconnect(self) -> None:
        self._reconnect_handle = None
        IOLoop.current().spawn_callback(self.connect)

    def _cancel_reconnect(self) -> None:
        if self._reconnect_handle is not None:
            IOLoop.current().remove_timeout(self._reconnect_handle)
            self._reconnect_handle = None

    def _stop_keepalive(self) -> None:
        if self._ping_timer is not None:
            self._ping_timer.stop()
            self._ping_timer = None

    def _send_ping(self) -> None:
        if self.connected:
            self._write(PingMessage(source=self.config.source))

    def _write(self, message: MessageEnvelope) -> bool:
        try:
            self._connection.write_message(encode_message(message))
        except WebSocketClosedError:
            self._leave_connected(f"write of {message.type} failed")
            return False
        return True
