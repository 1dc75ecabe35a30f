"""
Core domain models for the escape mission engine.

This module defines the core domain models using Pydantic v2
for type safety and validation.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import FrozenSet, List, Optional
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field

class HazardType(str, Enum):
    """재난 유형 (원본 저장 값 그대로 사용)"""
    FLOOD = "Flood"
    LANDSLIDE = "Landslide"
    STORM_SURGE = "Storm Surge"
    EARTHQUAKE = "Earthquake"
    TSUNAMI = "Tsunami"
    FIRE = "Fire"
    INLAND_FLOOD = "Inland Flood"
    VOLCANO = "Volcano"

class MissionState(str, Enum):
    """미션 상태 (저장소의 status 컬럼 값)"""
    NO_MISSION = "none"
    IN_PROGRESS = "creating"
    ACTIVE = "have"
    COMPLETED = "done"

class GameMode(str, Enum):
    """게임 모드"""
    DEFAULT = "default"
    ZEN = "zen"
    MAPLESS = "mapless"

    @property
    def has_zombies(self) -> bool:
        return self in (GameMode.DEFAULT, GameMode.MAPLESS)

    @property
    def shows_map(self) -> bool:
        return self in (GameMode.DEFAULT, GameMode.ZEN)

    @property
    def tracks_score(self) -> bool:
        return self in (GameMode.DEFAULT, GameMode.MAPLESS)

class Coordinate(BaseModel):
    """위경도 좌표 (불변 값 타입)"""
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

# 삽입 순서가 곧 변의 순서
DangerZonePolygon = List[Coordinate]

class PointOfInterest(BaseModel):
    """대피소 등 관심 지점 (읽기 전용 스냅샷)"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    coordinate: Coordinate
    hazard_support: FrozenSet[HazardType] = Field(default_factory=frozenset)
    address: str = ""

    def supports(self, hazard: HazardType) -> bool:
        """해당 재난 유형을 지원하는지 확인합니다."""
        return hazard in self.hazard_support

class Mission(BaseModel):
    """미션 모델"""
    id: str
    title: str
    overview: str = ""
    hazard_type: Optional[HazardType] = None
    region: Optional[str] = None
    status: MissionState = MissionState.NO_MISSION
    steps: Optional[int] = None
    distance_meters: Optional[float] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class ZombieAgent(BaseModel):
    """좀비 에이전트 (매 틱마다 갱신됨)"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    coordinate: Coordinate
    heading_radians: float
    speed_meters_per_second: float

class ScoreComponents(BaseModel):
    """점수 구성 요소"""
    base_points: int
    distance_points: int
    bonus_points: int
    route_efficiency_multiplier: float
    final_points: int

class MissionResult(BaseModel):
    """완료된 미션의 결과"""
    mission_id: str
    point_of_interest_id: str
    start: Optional[Coordinate] = None
    end: Optional[Coordinate] = None
    actual_distance_meters: float
    optimal_distance_meters: float
    steps: Optional[int] = None
    score: Optional[ScoreComponents] = None
