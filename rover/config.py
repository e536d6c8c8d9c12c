import os
from typing import List

from pydantic import BaseModel, Field, model_validator

from rover.models import PlanetConfig
from rover_protocol import Direction, Position


DEFAULT_OBSTACLES = "3,3;5,5;7,1;1,7;8,8"


def parse_obstacles(raw: str) -> List[Position]:
    """Parse ``"x,y;x,y"`` into positions. Blank entries are ignored."""
    positions = []
    for chunk in raw.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            x, y = (int(part) for part in chunk.split(","))
        except ValueError as exc:
            raise ValueError(f"invalid obstacle '{chunk}', expected 'x,y'") from exc
        positions.append(Position(x=x, y=y))
    return positions


class VehicleConfig(BaseModel):
    address: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    rover_id: str = "curiosity-rover"
    initial_position: Position = Position(x=2, y=2)
    initial_direction: Direction = "NORTH"
    initial_battery: float = Field(default=100.0, ge=0, le=100)
    planet: PlanetConfig = PlanetConfig(
        width=10, height=10, obstacles=frozenset(parse_obstacles(DEFAULT_OBSTACLES))
    )

    @model_validator(mode="after")
    def validate_start_cell(self):
        if not self.planet.contains(self.initial_position):
            raise ValueError(
                f"initial position {self.initial_position} is outside the "
                f"{self.planet.width}x{self.planet.height} planet"
            )
        if self.initial_position in self.planet.obstacles:
            raise ValueError(f"initial position {self.initial_position} is on an obstacle")
        return self

    @classmethod
    def from_env(cls) -> "VehicleConfig":
        return cls(
            address=os.getenv("ROVER_ADDRESS", "0.0.0.0"),
            port=int(os.getenv("ROVER_PORT", "8080")),
            rover_id=os.getenv("ROVER_ID", "curiosity-rover"),
            initial_position=Position(x=int(os.getenv("ROVER_X", "2")), y=int(os.getenv("ROVER_Y", "2"))),
            initial_direction=os.getenv("ROVER_DIRECTION", "NORTH").upper(),
            initial_battery=float(os.getenv("ROVER_BATTERY", "100")),
            planet=PlanetConfig(
                width=int(os.getenv("PLANET_WIDTH", "10")),
                height=int(os.getenv("PLANET_HEIGHT", "10")),
                obstacles=frozenset(parse_obstacles(os.getenv("PLANET_OBSTACLES", DEFAULT_OBSTACLES))),
            ),
        )
