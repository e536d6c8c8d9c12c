import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class MissionControlConfig(BaseModel):
    rover_url: str = "ws://localhost:8080/ws/control"
    reconnect_interval: float = Field(default=5.0, gt=0, description="Seconds between reconnect attempts.")
    ping_interval: float = Field(default=10.0, gt=0, description="Seconds between keepalive PINGs.")
    map_width: int = Field(default=10, gt=0)
    map_height: int = Field(default=10, gt=0)
    source: str = "mission-control"
    auth_token: Optional[str] = Field(default=None, description="Bearer token presented to the rover.")

    @field_validator("rover_url")
    @classmethod
    def validate_rover_url(cls, value):
        if not value.startswith(("ws://", "wss://")):
            raise ValueError("rover_url must be a ws:// or wss:// URL")
        return value

    @classmethod
    def from_env(cls) -> "MissionControlConfig":
        return cls(
            rover_url=os.getenv("MISSION_ROVER_URL", "ws://localhost:8080/ws/control"),
            reconnect_interval=float(os.getenv("MISSION_RECONNECT_INTERVAL", "5")),
            ping_interval=float(os.getenv("MISSION_PING_INTERVAL", "10")),
            map_width=int(os.getenv("MISSION_MAP_WIDTH", "10")),
            map_height=int(os.getenv("MISSION_MAP_HEIGHT", "10")),
            source=os.getenv("MISSION_SOURCE", "mission-control"),
            auth_token=os.getenv("MISSION_CONTROL_TOKEN") or None,
        )
