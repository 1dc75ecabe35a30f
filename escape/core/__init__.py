"""
Core domain models and pure logic for the escape mission engine.

This module contains the domain models and the proximity, mission
and simulation logic that are independent of external I/O.
"""

from .models import (
    Coordinate, DangerZonePolygon, GameMode, HazardType, Mission,
    MissionResult, MissionState, PointOfInterest, ScoreComponents, ZombieAgent
)
from .events import (
    MissionCompletedEvent, MissionStateChanged, ReachedEvent, SessionEvent,
    ZombieHitEvent, ZoneEnteredEvent
)

__all__ = [
    "Coordinate", "DangerZonePolygon", "GameMode", "HazardType", "Mission",
    "MissionResult", "MissionState", "PointOfInterest", "ScoreComponents", "ZombieAgent",
    "MissionCompletedEvent", "MissionStateChanged", "ReachedEvent", "SessionEvent",
    "ZombieHitEvent", "ZoneEnteredEvent",
]
