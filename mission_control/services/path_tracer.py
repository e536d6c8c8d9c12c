"""
Straight-line path reconstruction on a toroidal grid.

Only single-step transitions (two adjacent cells, possibly across an edge)
are reconstructed exactly. Longer jumps are a best-effort approximation: each
axis takes the shorter way around the torus (the direct way on a tie) and the
line is rasterised with a Bresenham error accumulator, so diagonal steps may
appear that the rover never made.

The rover sends one STATUS per command sequence, so multi-cell jumps are
common. When the preceding COMMAND_RESPONSE carried a pathTaken ending at the
new position, the map reconstructor uses that exact path and skips tracing.
"""
from typing import List

from rover_protocol import Position


def shortest_delta(start: int, end: int, size: int) -> int:
    """Signed displacement from start to end along one wrapped axis."""
    direct = end - start
    wrapped = direct - size if direct > 0 else direct + size
    return direct if abs(direct) <= abs(wrapped) else wrapped


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def trace_path(start: Position, end: Position, width: int, height: int) -> List[Position]:
    """Return the cells from start to end inclusive, both normalised into the grid."""
    start = start.wrapped(width, height)
    end = end.wrapped(width, height)
    dx = shortest_delta(start.x, end.x, width)
    dy = shortest_delta(start.y, end.y, height)

    path = [start]
    x, y = start.x, start.y
    step_x, step_y = _sign(dx), _sign(dy)
    major, minor = max(abs(dx), abs(dy)), min(abs(dx), abs(dy))
    x_is_major = abs(dx) >= abs(dy)
    error = 0

    for _ in range(major):
        error += minor
        minor_step = 2 * error >= major
        if minor_step:
            error -= major
        if x_is_major:
            x += step_x
            if minor_step:
                y += step_y
        else:
            y += step_y
            if minor_step:
                x += step_x
        path.append(Position(x=x % width, y=y % height))

    return path
