from typing import FrozenSet, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from rover_protocol import ActivityState, Command, Direction, Position


class PlanetConfig(BaseModel):
    """Toroidal planet the rover drives on. Fixed for the lifetime of the process."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(..., gt=0, description="Number of columns; x wraps modulo width.")
    height: int = Field(..., gt=0, description="Number of rows; y wraps modulo height.")
    obstacles: FrozenSet[Position] = Field(default_factory=frozenset, description="Impassable cells.")

    @model_validator(mode="after")
    def validate_obstacles_on_planet(self):
        for obstacle in self.obstacles:
            if not self.contains(obstacle):
                raise ValueError(f"obstacle {obstacle} lies outside the {self.width}x{self.height} planet")
        return self

    def contains(self, position: Position) -> bool:
        return 0 <= position.x < self.width and 0 <= position.y < self.height


class RoverState(BaseModel):
    """Snapshot of the rover as owned by the navigation engine."""

    model_config = ConfigDict(frozen=True)

    position: Position
    direction: Direction
    battery: float = Field(..., ge=0, le=100)
    state: ActivityState


class NavigationEvent(BaseModel):
    kind: Literal["MOVED", "WRAPPED", "TURNED", "BLOCKED", "BATTERY_DEPLETED"]
    command: Command
    position: Position = Field(..., description="Rover position after the command (target cell when blocked).")
    direction: Direction


class ExecutionResult(BaseModel):
    """Outcome of one command sequence."""

    success: bool
    message: str
    final_state: RoverState
    obstacle_detected: Optional[Position] = None
    path: List[Position] = Field(default_factory=list, description="Cells entered, in order.")
    commands_executed: int = 0
    events: List[NavigationEvent] = Field(default_factory=list)
