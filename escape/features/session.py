"""
Mission session runtime for the escape mission engine.

A MissionSession owns every piece of per-mission state (tracker,
state machine, danger zones, zombies, travelled route) for one
session key. SessionRegistry keeps sessions isolated from each other.
"""

import random
from typing import Dict, Iterator, List, Optional, Sequence
from escape.common.geo import distance_meters
from escape.common.polygon import generate_danger_zones
from escape.core.events import ReachedEvent, SessionEvent, ZombieHitEvent, ZoneEnteredEvent
from escape.core.mission import MissionStateMachine
from escape.core.models import (
    Coordinate, DangerZonePolygon, GameMode, Mission, MissionResult, MissionState, PointOfInterest
)
from escape.core.proximity import ProximityTracker, filter_by_hazards, filter_nearby
from escape.core.score import calculate_score
from escape.core.zombies import ZombieAgentSimulator
from escape.settings import Settings
from escape.observability.logging_setup import get_logger

log = get_logger("escape.session")

class MissionSession:
    """단일 세션의 미션 런타임"""

    def __init__(self,
                 session_id: str,
                 settings: Optional[Settings] = None,
                 *,
                 points: Optional[Sequence[PointOfInterest]] = None,
                 game_mode: GameMode = GameMode.DEFAULT,
                 rng: Optional[random.Random] = None):
        """
        초기화합니다.

        Args:
            session_id: 세션 키
            settings: 애플리케이션 설정
            points: 후보 관심 지점 (순서 유지)
            game_mode: 게임 모드
            rng: 위험 구역/좀비 생성용 난수 생성기
        """
        self.session_id = session_id
        self.settings = settings or Settings()
        self.game_mode = game_mode
        self.rng = rng or random.Random()

        self.machine = MissionStateMachine()
        self.tracker = ProximityTracker()
        self.zombies = ZombieAgentSimulator(self.rng)
        self.zones: List[DangerZonePolygon] = []

        self._points: List[PointOfInterest] = list(points or [])
        self.last_location: Optional[Coordinate] = None
        self.start_location: Optional[Coordinate] = None
        self._route_anchor: Optional[Coordinate] = None
        self.travelled_meters = 0.0
        self.reached_point: Optional[PointOfInterest] = None

    @property
    def state(self) -> MissionState:
        return self.machine.state

    @property
    def mission(self) -> Optional[Mission]:
        return self.machine.mission

    @property
    def points(self) -> List[PointOfInterest]:
        return list(self._points)

    def set_points(self, points: Sequence[PointOfInterest]) -> None:
        """후보 관심 지점을 교체합니다."""
        self._points = list(points)
        log.debug(f"관심 지점 갱신 session:{self.session_id} count:{len(self._points)}")

    def candidates(self) -> List[PointOfInterest]:
        """현재 미션의 재난 유형으로 거른 후보 지점 목록."""
        mission = self.mission
        if mission is None or mission.hazard_type is None:
            return list(self._points)
        return filter_by_hazards(self._points, {mission.hazard_type})

    def nearby_points(self) -> List[PointOfInterest]:
        """마지막 위치 주변의 후보 지점 (지도 표시용). 위치가 없으면 빈 목록."""
        if self.last_location is None:
            return []
        return filter_nearby(self.candidates(), self.last_location,
                             self.settings.proximity.nearby_radius_km)

    # ---- 미션 명령 ----

    def request_mission(self) -> List[SessionEvent]:
        return self.machine.request()

    def receive_mission(self, mission: Mission,
                        origin: Optional[Coordinate] = None) -> List[SessionEvent]:
        """
        생성된 미션을 활성화하고 위험 구역/좀비를 준비합니다.

        Args:
            mission: 생성기에서 받은 미션
            origin: 위험 구역/좀비 생성 기준 좌표 (없으면 마지막 위치 또는 첫 위치 갱신 시)
        """
        events = self.machine.received(mission)

        self._clear_runtime()
        origin = origin or self.last_location
        if origin is not None:
            self._prepare_field(origin)

        return events

    def cancel_mission(self) -> List[SessionEvent]:
        events = self.machine.cancel()
        self._clear_runtime()
        return events

    def reset_mission(self) -> List[SessionEvent]:
        events = self.machine.reset()
        self._clear_runtime()
        return events

    # ---- 위치/틱 처리 ----

    def handle_location(self, location: Coordinate) -> List[SessionEvent]:
        """
        위치 갱신을 처리하고 발생한 이벤트를 반환합니다.

        활성 미션이 없으면 마지막 위치만 기록합니다.

        Args:
            location: 사용자 위치

        Returns:
            도달/완료/구역 진입 이벤트 목록 (발생 순서)
        """
        self.last_location = location

        if self.state != MissionState.ACTIVE:
            return []

        # 경로 거리는 미션 출발점 이후의 위치만으로 누적
        if self.start_location is None:
            self._prepare_field(location)
        elif self._route_anchor is not None:
            self.travelled_meters += distance_meters(self._route_anchor, location)
            self.machine.update_progress(distance_meters=self.travelled_meters)
        self._route_anchor = location

        events: List[SessionEvent] = []

        poi = self.tracker.check_reached(location, self.candidates(),
                                         self.settings.proximity.radius_meters)
        if poi is not None:
            events.append(ReachedEvent(point_of_interest_id=poi.id))
            completion = self.machine.proximity_reached(poi)
            if completion:
                self.reached_point = poi
                self.zombies.clear()
            events.extend(completion)

        # 완료 후에는 위험 구역이 의미 없음
        if self.state == MissionState.ACTIVE:
            index = self.tracker.check_entered_zone(location, self.zones)
            if index is not None:
                events.append(ZoneEnteredEvent(zone_index=index))

        return events

    def tick(self, dt_seconds: float) -> List[SessionEvent]:
        """좀비를 한 스텝 진행하고 접촉 이벤트를 반환합니다."""
        if self.last_location is None or not self.zombies.active:
            return []

        cfg = self.settings.zombie
        hit_ids = self.zombies.tick(self.last_location, dt_seconds,
                                    hit_radius_m=cfg.hit_radius_meters,
                                    follow_strength=cfg.follow_strength)
        return [ZombieHitEvent(agent_id=agent_id) for agent_id in hit_ids]

    def result(self, is_new_badge: bool = False) -> Optional[MissionResult]:
        """완료된 미션의 결과와 점수를 계산합니다."""
        if self.state != MissionState.COMPLETED or self.reached_point is None:
            return None

        optimal = 0.0
        if self.start_location is not None:
            optimal = distance_meters(self.start_location, self.reached_point.coordinate)

        score = None
        if self.game_mode.tracks_score:
            score = calculate_score(self.travelled_meters, optimal, is_new_badge)

        return MissionResult(
            mission_id=self.mission.id,
            point_of_interest_id=self.reached_point.id,
            start=self.start_location,
            end=self.last_location,
            actual_distance_meters=self.travelled_meters,
            optimal_distance_meters=optimal,
            steps=self.mission.steps,
            score=score,
        )

    def snapshot(self) -> dict:
        """세션 상태 요약 (HTTP 응답용)."""
        return {
            "session_id": self.session_id,
            "state": self.state.value,
            "game_mode": self.game_mode.value,
            "shows_map": self.game_mode.shows_map,
            "mission": self.mission.model_dump(mode="json") if self.mission else None,
            "points": len(self._points),
            "zones": len(self.zones),
            "zombies": len(self.zombies.agents),
            "reached": sorted(self.tracker.reached_ids),
            "entered": sorted(self.tracker.entered_indices),
            "travelled_meters": round(self.travelled_meters, 2),
        }

    def _prepare_field(self, origin: Coordinate) -> None:
        self.start_location = origin
        self._route_anchor = origin

        dz = self.settings.danger_zone
        if dz.enabled:
            self.zones = generate_danger_zones(
                origin,
                count_range=dz.count_range,
                sides_range=dz.sides_range,
                radius_range_m=dz.radius_range_m,
                offset_range_m=dz.offset_range_m,
                rng=self.rng,
            )

        if self.game_mode.has_zombies:
            z = self.settings.zombie
            self.zombies.spawn(origin, count=z.count,
                               min_dist_m=z.min_spawn_distance_m, max_dist_m=z.max_spawn_distance_m,
                               min_speed=z.min_speed, max_speed=z.max_speed)

        log.info(f"미션 필드 준비 session:{self.session_id} zones:{len(self.zones)} "
                 f"zombies:{len(self.zombies.agents)}")

    def _clear_runtime(self) -> None:
        self.tracker.reset()
        self.zones = []
        self.zombies.clear()
        self.start_location = None
        self._route_anchor = None
        self.travelled_meters = 0.0
        self.reached_point = None

class SessionRegistry:
    """세션 키별로 격리된 MissionSession 저장소"""

    def __init__(self, settings: Optional[Settings] = None,
                 points: Optional[Sequence[PointOfInterest]] = None):
        self.settings = settings or Settings()
        self.default_points: List[PointOfInterest] = list(points or [])
        self._sessions: Dict[str, MissionSession] = {}

    def get_or_create(self, session_id: str, *,
                      game_mode: GameMode = GameMode.DEFAULT,
                      rng: Optional[random.Random] = None) -> MissionSession:
        session = self._sessions.get(session_id)
        if session is None:
            session = MissionSession(session_id, self.settings,
                                     points=self.default_points,
                                     game_mode=game_mode, rng=rng)
            self._sessions[session_id] = session
            log.info(f"세션 생성 session:{session_id} mode:{game_mode.value}")
        return session

    def get(self, session_id: str) -> Optional[MissionSession]:
        return self._sessions.get(session_id)

    def drop(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.zombies.clear()
        log.info(f"세션 종료 session:{session_id}")
        return True

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[MissionSession]:
        return iter(list(self._sessions.values()))
