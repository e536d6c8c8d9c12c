from typing import List, Optional, Sequence, Tuple

from rover.models import ExecutionResult, NavigationEvent, PlanetConfig, RoverState
from rover_protocol import Command, Direction, Position


BATTERY_COST_PER_COMMAND = 0.5

# Clockwise order: a right turn is +1, a left turn is -1.
HEADINGS: Tuple[Direction, ...] = ("NORTH", "EAST", "SOUTH", "WEST")

STEP_VECTORS = {
    "NORTH": (0, -1),
    "EAST": (1, 0),
    "SOUTH": (0, 1),
    "WEST": (-1, 0),
}


def turn(direction: Direction, command: Command) -> Direction:
    offset = 1 if command == "R" else -1
    return HEADINGS[(HEADINGS.index(direction) + offset) % len(HEADINGS)]


def opposite(direction: Direction) -> Direction:
    return HEADINGS[(HEADINGS.index(direction) + 2) % len(HEADINGS)]


class NavigationEngine:
    """
    Authoritative rover state on a toroidal planet.

    The engine never talks to the network and has no listeners: every call to
    ``execute_sequence`` returns an ``ExecutionResult`` describing what
    happened, including the events a caller may want to log.

    Every processed command costs ``BATTERY_COST_PER_COMMAND``, rotations and
    blocked moves included. Once the battery reaches zero the rover is
    INACTIVE and refuses the rest of any sequence.
    """

    def __init__(
        self,
        planet: PlanetConfig,
        position: Position,
        direction: Direction,
        battery: float = 100.0,
    ):
        if direction not in HEADINGS:
            raise ValueError(f"unknown direction: {direction}")
        self._planet = planet
        self._position = position.wrapped(planet.width, planet.height)
        self._direction: Direction = direction
        self._battery = max(0.0, min(100.0, float(battery)))

    @property
    def planet(self) -> PlanetConfig:
        return self._planet

    @property
    def is_active(self) -> bool:
        return self._battery > 0

    def get_state(self) -> RoverState:
        return RoverState(
            position=self._position,
            direction=self._direction,
            battery=self._battery,
            state="ACTIVE" if self.is_active else "INACTIVE",
        )

    def execute_sequence(self, commands: Sequence[Command]) -> ExecutionResult:
        unknown = [command for command in commands if command not in ("F", "B", "L", "R")]
        if unknown:
            raise ValueError(f"unknown command(s): {unknown!r}")

        start_position = self._position
        start_direction = self._direction
        total = len(commands)
        path: List[Position] = []
        events: List[NavigationEvent] = []

        for index, command in enumerate(commands, start=1):
            if not self.is_active:
                events.append(self._event("BATTERY_DEPLETED", command, self._position))
                return self._result(
                    success=False,
                    message=f"Stopped after {index - 1}/{total} commands: battery depleted",
                    path=path,
                    events=events,
                    commands_executed=index - 1,
                )

            self._battery = max(0.0, self._battery - BATTERY_COST_PER_COMMAND)

            if command in ("L", "R"):
                self._direction = turn(self._direction, command)
                events.append(self._event("TURNED", command, self._position))
                continue

            target, wrapped = self._step_target(command)
            if target in self._planet.obstacles:
                events.append(self._event("BLOCKED", command, target))
                return self._result(
                    success=False,
                    message=f"Stopped after {index}/{total} commands: obstacle detected at {target}",
                    path=path,
                    events=events,
                    commands_executed=index,
                    obstacle=target,
                )

            self._position = target
            path.append(target)
            events.append(self._event("WRAPPED" if wrapped else "MOVED", command, target))

        return self._result(
            success=True,
            message=self._success_message(total, start_position, start_direction),
            path=path,
            events=events,
            commands_executed=total,
        )

    def _step_target(self, command: Command) -> Tuple[Position, bool]:
        """Return the candidate cell for a move and whether reaching it crosses a planet edge."""
        heading = self._direction if command == "F" else opposite(self._direction)
        dx, dy = STEP_VECTORS[heading]
        raw_x = self._position.x + dx
        raw_y = self._position.y + dy
        target = Position(
            x=(raw_x + self._planet.width) % self._planet.width,
            y=(raw_y + self._planet.height) % self._planet.height,
        )
        return target, (target.x, target.y) != (raw_x, raw_y)

    def _success_message(self, total: int, start_position: Position, start_direction: Direction) -> str:
        moved = self._position != start_position
        turned = self._direction != start_direction
        message = f"{total} commands executed successfully"
        if moved and turned:
            message += " - moved and turned"
        elif moved:
            message += " - moved"
        elif turned:
            message += " - turned"
        return message

    def _event(self, kind: str, command: Command, position: Position) -> NavigationEvent:
        return NavigationEvent(kind=kind, command=command, position=position, direction=self._direction)

    def _result(
        self,
        success: bool,
        message: str,
        path: List[Position],
        events: List[NavigationEvent],
        commands_executed: int,
        obstacle: Optional[Position] = None,
    ) -> ExecutionResult:
        return ExecutionResult(
            success=success,
            message=message,
            final_state=self.get_state(),
            obstacle_detected=obstacle,
            path=path,
            commands_executed=commands_executed,
            events=events,
        )
