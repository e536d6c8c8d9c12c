"""Pydantic models for the rover's navigation state."""

from .navigation import ExecutionResult, NavigationEvent, PlanetConfig, RoverState

__all__ = [
    "ExecutionResult",
    "NavigationEvent",
    "PlanetConfig",
    "RoverState",
]
