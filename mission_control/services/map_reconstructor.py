import logging
from typing import Iterable, Optional

from mission_control.models import KnownRoverState, MissionMapModel, MissionSummary
from mission_control.services.path_tracer import trace_path
from rover_protocol import (
    CommandResponseMessage,
    ErrorMessage,
    MessageEnvelope,
    ObstacleDiscoveredMessage,
    PongMessage,
    Position,
    StatusMessage,
    now_millis,
)


logger = logging.getLogger(__name__)


class MapReconstructor:
    """
    Rebuilds the explored world from rover messages alone.

    The model only grows, except for one reset on the first STATUS received
    after ``mark_reset_pending`` (called when a connection is lost, since the
    next connection may reach a different rover).
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError("map dimensions must be positive")
        self.width = width
        self.height = height
        self.model = MissionMapModel()
        self._reset_pending = False
        # Last cell of the most recent pathTaken, already marked exactly.
        self._replayed_end: Optional[Position] = None

    @property
    def reset_pending(self) -> bool:
        return self._reset_pending

    def mark_reset_pending(self) -> None:
        self._reset_pending = True

    def forget_rover(self) -> None:
        self.model.last_known_rover_state = None

    def reset(self) -> None:
        self.model.explored.clear()
        self.model.obstacles.clear()
        self.model.last_known_rover_state = None
        self._replayed_end = None

    def apply(self, message: MessageEnvelope) -> None:
        if isinstance(message, StatusMessage):
            self.apply_status(message)
        elif isinstance(message, CommandResponseMessage):
            self.apply_command_response(message)
        elif isinstance(message, ObstacleDiscoveredMessage):
            self.apply_obstacle(message)
        elif isinstance(message, PongMessage):
            if self.model.last_known_rover_state is not None:
                self.model.last_known_rover_state.last_contact = now_millis()
        elif isinstance(message, ErrorMessage):
            logger.warning("Rover reported an error: %s", message.payload.error)
        else:
            logger.debug("Ignoring %s message from %s", message.type, message.source)

    def apply_status(self, message: StatusMessage) -> None:
        if self._reset_pending:
            logger.info("First status after reconnect from '%s': resetting map", message.payload.rover_id)
            self.reset()
            self._reset_pending = False

        payload = message.payload
        position = self._normalize(payload.position)
        previous = self.model.last_known_rover_state
        if previous is not None and previous.position != position and position != self._replayed_end:
            self._mark_explored(trace_path(previous.position, position, self.width, self.height))
        else:
            self._mark_explored([position])
        self._replayed_end = None

        self.model.last_known_rover_state = KnownRoverState(
            rover_id=payload.rover_id,
            position=position,
            direction=payload.direction,
            battery=payload.battery,
            state=payload.state,
            last_contact=now_millis(),
        )
        logger.info("Rover status: %s facing %s, battery %.1f%%", position, payload.direction, payload.battery)

    def apply_command_response(self, message: CommandResponseMessage) -> None:
        payload = message.payload
        logger.info("Command response (%s): %s", "ok" if payload.success else "failed", payload.message)
        if payload.path_taken:
            cells = [self._normalize(position) for position in payload.path_taken]
            self._mark_explored(cells)
            self._replayed_end = cells[-1]

    def apply_obstacle(self, message: ObstacleDiscoveredMessage) -> bool:
        """Register the obstacle unless a known one has the same coordinate. Returns True if new."""
        position = self._normalize(message.payload.position)
        if position in self.model.obstacles:
            return False
        self.model.obstacles.append(position)
        logger.info("New obstacle at %s (%d known)", position, len(self.model.obstacles))
        return True

    def summary(self, connected: bool = False) -> MissionSummary:
        total_area = self.width * self.height
        explored_area = len(self.model.explored)
        return MissionSummary(
            connected=connected,
            rover=self.model.last_known_rover_state,
            explored_area=explored_area,
            total_area=total_area,
            exploration_percentage=round(explored_area * 100 / total_area),
            obstacles_found=len(self.model.obstacles),
        )

    def _mark_explored(self, cells: Iterable[Position]) -> None:
        self.model.explored.update(cells)

    def _normalize(self, position: Position) -> Position:
        return position.wrapped(self.width, self.height)
