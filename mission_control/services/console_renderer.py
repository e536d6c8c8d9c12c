from mission_control.models import MissionMapModel
from rover_protocol import Position


DIRECTION_SYMBOLS = {"NORTH": "^", "EAST": ">", "SOUTH": "v", "WEST": "<"}
OBSTACLE_SYMBOL = "#"
EXPLORED_SYMBOL = "."
UNKNOWN_SYMBOL = "?"


def render_map(model: MissionMapModel, width: int, height: int) -> str:
    """Text grid of the reconstructed map with column and row headers, row 0 at the top."""
    rover = model.last_known_rover_state
    obstacles = set(model.obstacles)
    lines = ["  " + "".join(f"{x:>2}" for x in range(width))]
    for y in range(height):
        row = f"{y:>2}"
        for x in range(width):
            cell = Position(x=x, y=y)
            if rover is not None and rover.position == cell:
                symbol = DIRECTION_SYMBOLS[rover.direction]
            elif cell in obstacles:
                symbol = OBSTACLE_SYMBOL
            elif cell in model.explored:
                symbol = EXPLORED_SYMBOL
            else:
                symbol = UNKNOWN_SYMBOL
            row += f"{symbol:>2}"
        lines.append(row)
    return "\n".join(lines)
