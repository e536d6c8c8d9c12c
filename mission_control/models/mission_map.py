from typing import List, Optional, Set

from pydantic import BaseModel, Field

from rover_protocol import ActivityState, Direction, Position


class KnownRoverState(BaseModel):
    """Last rover state observed through STATUS messages."""

    rover_id: str
    position: Position
    direction: Direction
    battery: float
    state: ActivityState
    last_contact: int = Field(..., description="Epoch milliseconds of the last message from this rover.")


class MissionMapModel(BaseModel):
    explored: Set[Position] = Field(default_factory=set)
    obstacles: List[Position] = Field(default_factory=list, description="Deduplicated, in discovery order.")
    last_known_rover_state: Optional[KnownRoverState] = None


class MissionSummary(BaseModel):
    connected: bool
    rover: Optional[KnownRoverState] = None
    explored_area: int
    total_area: int
    exploration_percentage: int
    obstacles_found: int
