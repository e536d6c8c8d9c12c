import sys
from typing import Callable, List

from tornado.ioloop import IOLoop

from mission_control.services.connection_supervisor import ConnectionSupervisor
from mission_control.services.console_renderer import render_map
from mission_control.services.map_reconstructor import MapReconstructor
from rover_protocol import (
    Command,
    CommandResponseMessage,
    ErrorMessage,
    MessageEnvelope,
    ObstacleDiscoveredMessage,
)


MOVEMENT_KEYS = {"f": "F", "b": "B", "l": "L", "r": "R"}

HELP_TEXT = """Commands:
  f / b        move forward / backward
  l / r        turn left / right
               chain them, e.g. ffrff
  map, m       show the reconstructed map
  status       show mission status
  help, h      show this help
  quit, exit   leave mission control"""


def parse_commands(text: str) -> List[Command]:
    """Turn an operator line such as ``"ff rf"`` into wire commands."""
    commands = []
    for char in text.lower():
        if char.isspace():
            continue
        if char not in MOVEMENT_KEYS:
            raise ValueError(f"unknown command '{char}'")
        commands.append(MOVEMENT_KEYS[char])
    return commands


class OperatorConsole:
    def __init__(
        self,
        supervisor: ConnectionSupervisor,
        reconstructor: MapReconstructor,
        output: Callable[[str], None] = print,
    ):
        self.supervisor = supervisor
        self.reconstructor = reconstructor
        self.output = output

    def handle_line(self, line: str) -> bool:
        """Process one operator line. Returns False when the operator quits."""
        text = line.strip().lower()
        if not text:
            return True
        if text in ("quit", "exit"):
            return False
        if text in ("map", "m"):
            self.output(render_map(self.reconstructor.model, self.reconstructor.width, self.reconstructor.height))
        elif text == "status":
            self.output(self._format_status())
        elif text in ("help", "h"):
            self.output(HELP_TEXT)
        else:
            try:
                commands = parse_commands(text)
            except ValueError as exc:
                self.output(f"{exc} (type 'help' for the list of commands)")
                return True
            if not self.supervisor.send_command(commands):
                self.output("Not connected to the rover; command not sent")
        return True

    def show_message(self, message: MessageEnvelope) -> None:
        if isinstance(message, CommandResponseMessage):
            payload = message.payload
            self.output(
                f"[{'OK' if payload.success else 'FAILED'}] {payload.message} "
                f"-> {payload.final_position} {payload.final_direction}"
            )
        elif isinstance(message, ObstacleDiscoveredMessage):
            self.output(f"Obstacle discovered at {message.payload.position}")
        elif isinstance(message, ErrorMessage):
            self.output(f"Rover error: {message.payload.error}")

    async def run(self) -> None:
        self.output(HELP_TEXT)
        loop = IOLoop.current()
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line or not self.handle_line(line):
                break

    def _format_status(self) -> str:
        summary = self.reconstructor.summary(connected=self.supervisor.connected)
        lines = [
            f"Connection: {'connected' if summary.connected else self.supervisor.state.lower()}",
            f"Explored: {summary.explored_area}/{summary.total_area} cells ({summary.exploration_percentage}%)",
            f"Obstacles found: {summary.obstacles_found}",
        ]
        if summary.rover is None:
            lines.append("Rover: position unknown")
        else:
            rover = summary.rover
            lines.append(
                f"Rover {rover.rover_id}: {rover.position} facing {rover.direction}, "
                f"battery {rover.battery:.1f}% ({rover.state})"
            )
        return "\n".join(lines)
