"""
Mission lifecycle state machine for the escape mission engine.

States: none -> creating -> have -> done. Every command returns the
events produced by the transition; commands that are not valid for
the current state raise InvalidTransitionError.
"""

from typing import List, Optional
from .models import Mission, MissionState, PointOfInterest
from .events import MissionCompletedEvent, MissionStateChanged, SessionEvent
from escape.observability.logging_setup import get_logger

log = get_logger("escape.mission")

class InvalidTransitionError(ValueError):
    """현재 상태에서 허용되지 않는 명령"""

    def __init__(self, from_state: MissionState, attempted: str):
        self.from_state = from_state
        self.attempted = attempted
        super().__init__(f"'{attempted}' is not allowed in state '{from_state.value}'")

class MissionStateMachine:
    """미션 상태 머신"""

    def __init__(self):
        self._state = MissionState.NO_MISSION
        self._mission: Optional[Mission] = None

    @property
    def state(self) -> MissionState:
        return self._state

    @property
    def mission(self) -> Optional[Mission]:
        return self._mission

    def request(self) -> List[SessionEvent]:
        """외부 생성기에 새 미션을 요청했음을 기록합니다."""
        self._require("request", MissionState.NO_MISSION)
        return [self._transition(MissionState.IN_PROGRESS, "request")]

    def received(self, mission: Mission) -> List[SessionEvent]:
        """
        생성된 미션을 할당하고 활성화합니다.

        Args:
            mission: 생성기에서 받은 미션 (status는 ACTIVE로 덮어씀)
        """
        self._require("received", MissionState.IN_PROGRESS)
        self._mission = mission.model_copy(update={"status": MissionState.ACTIVE})
        return [self._transition(MissionState.ACTIVE, "received")]

    def proximity_reached(self, poi: PointOfInterest) -> List[SessionEvent]:
        """
        관심 지점 도달 신호를 반영합니다.

        미션에 재난 유형이 없거나 관심 지점이 해당 유형을 지원하면 완료로 전이합니다.
        유형이 맞지 않으면 상태를 유지하고 빈 목록을 반환합니다.

        Args:
            poi: 도달한 관심 지점

        Returns:
            상태 변경 이벤트와 완료 이벤트, 또는 빈 목록
        """
        self._require("proximity_reached", MissionState.ACTIVE)

        hazard = self._mission.hazard_type
        if hazard is not None and not poi.supports(hazard):
            log.debug(f"재난 유형 불일치로 완료 보류 poi:{poi.id} hazard:{hazard.value}")
            return []

        self._mission = self._mission.model_copy(update={"status": MissionState.COMPLETED})
        changed = self._transition(MissionState.COMPLETED, "proximity_reached")
        completed = MissionCompletedEvent(mission_id=self._mission.id, point_of_interest=poi)
        log.info(f"미션 완료 mission:{self._mission.id} poi:{poi.id}")
        return [changed, completed]

    def cancel(self) -> List[SessionEvent]:
        """진행 중이거나 활성 상태인 미션을 취소합니다."""
        self._require("cancel", MissionState.ACTIVE, MissionState.IN_PROGRESS)
        self._mission = None
        return [self._transition(MissionState.NO_MISSION, "cancel")]

    def reset(self) -> List[SessionEvent]:
        """완료된 미션을 정리하고 초기 상태로 돌아갑니다."""
        self._require("reset", MissionState.COMPLETED)
        self._mission = None
        return [self._transition(MissionState.NO_MISSION, "reset")]

    def update_progress(self, *, steps: Optional[int] = None,
                        distance_meters: Optional[float] = None) -> None:
        """활성 미션의 걸음 수/이동 거리를 갱신합니다."""
        self._require("update_progress", MissionState.ACTIVE)
        update = {}
        if steps is not None:
            update["steps"] = steps
        if distance_meters is not None:
            update["distance_meters"] = distance_meters
        if update:
            self._mission = self._mission.model_copy(update=update)

    def _require(self, attempted: str, *allowed: MissionState) -> None:
        if self._state not in allowed:
            log.warning(f"허용되지 않는 전이 state:{self._state.value} command:{attempted}")
            raise InvalidTransitionError(self._state, attempted)

    def _transition(self, to_state: MissionState, trigger: str) -> MissionStateChanged:
        event = MissionStateChanged(from_state=self._state, to_state=to_state, trigger=trigger)
        log.info(f"미션 상태 전이 {self._state.value} -> {to_state.value} trigger:{trigger}")
        self._state = to_state
        return event
