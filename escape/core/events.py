"""
Event models emitted by the escape mission engine.

Events are plain data notifications that the session runtime hands
to an event sink (MQTT outbox, in-memory collector, ...).
"""

from datetime import datetime, timezone
from typing import Literal, Union
from pydantic import BaseModel, Field
from .models import MissionState, PointOfInterest

def _now() -> datetime:
    return datetime.now(timezone.utc)

class ReachedEvent(BaseModel):
    """관심 지점 도달 이벤트"""
    type: Literal["reached"] = "reached"
    point_of_interest_id: str
    occurred_at: datetime = Field(default_factory=_now)

class ZoneEnteredEvent(BaseModel):
    """위험 구역 진입 이벤트"""
    type: Literal["zone_entered"] = "zone_entered"
    zone_index: int
    occurred_at: datetime = Field(default_factory=_now)

class MissionStateChanged(BaseModel):
    """미션 상태 전이 이벤트"""
    type: Literal["state_changed"] = "state_changed"
    from_state: MissionState
    to_state: MissionState
    trigger: str
    occurred_at: datetime = Field(default_factory=_now)

class MissionCompletedEvent(BaseModel):
    """미션 완료 이벤트 (배지/점수 부여는 외부에서 처리)"""
    type: Literal["completed"] = "completed"
    mission_id: str
    point_of_interest: PointOfInterest
    occurred_at: datetime = Field(default_factory=_now)

class ZombieHitEvent(BaseModel):
    """좀비 접촉 이벤트"""
    type: Literal["zombie_hit"] = "zombie_hit"
    agent_id: str
    occurred_at: datetime = Field(default_factory=_now)

SessionEvent = Union[
    ReachedEvent,
    ZoneEnteredEvent,
    MissionStateChanged,
    MissionCompletedEvent,
    ZombieHitEvent,
]
