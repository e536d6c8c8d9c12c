"""Pydantic models for the ground station's reconstructed world."""

from .mission_map import KnownRoverState, MissionMapModel, MissionSummary

__all__ = [
    "KnownRoverState",
    "MissionMapModel",
    "MissionSummary",
]
