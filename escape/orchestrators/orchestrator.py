"""
Session orchestrator for the escape mission engine.

This module coordinates the session registry with the event sink:
location updates and mission commands are applied to the owning
session and every resulting event is forwarded to the sink. A
periodic loop advances the zombie simulation of every session.
"""

import asyncio
import time
from typing import List, Optional
from escape.core.events import SessionEvent
from escape.core.models import Coordinate, GameMode, Mission, MissionState
from escape.features.session import MissionSession, SessionRegistry
from escape.ports.events import EventSinkPort
from escape.observability import metrics
from escape.observability.logging_setup import get_logger, with_context

log = get_logger("escape.orchestrator")

class Orchestrator:
    """세션 오케스트레이터"""

    def __init__(self,
                 registry: SessionRegistry,
                 sink: EventSinkPort,
                 *,
                 tick_interval_sec: float = 1.0,
                 metrics_interval_sec: float = 30.0):
        """
        초기화합니다.

        Args:
            registry: 세션 저장소
            sink: 이벤트 전달 포트
            tick_interval_sec: 좀비 틱 간격 (초)
            metrics_interval_sec: 게이지 메트릭 갱신 간격 (초)
        """
        self.registry = registry
        self.sink = sink
        self.tick_interval = tick_interval_sec
        self.metrics_interval = metrics_interval_sec
        self.start_time = time.time()
        self._running = False

        log.info("오케스트레이터 초기화됨")

    # ---- 명령 처리 ----

    def session(self, session_id: str, game_mode: GameMode = GameMode.DEFAULT) -> MissionSession:
        session = self.registry.get_or_create(session_id, game_mode=game_mode)
        metrics.active_sessions.set(len(self.registry))
        return session

    async def submit_location(self, session_id: str, location: Coordinate) -> List[SessionEvent]:
        """위치 갱신을 세션에 반영하고 이벤트를 발행합니다."""
        metrics.locations_received.inc()
        session = self.session(session_id)

        with with_context(session=session_id), metrics.location_seconds.time():
            events = session.handle_location(location)

        await self._publish(session_id, events)
        return events

    async def request_mission(self, session_id: str) -> List[SessionEvent]:
        events = self.session(session_id).request_mission()
        await self._publish(session_id, events)
        return events

    async def receive_mission(self, session_id: str, mission: Mission,
                              origin: Optional[Coordinate] = None) -> List[SessionEvent]:
        events = self.session(session_id).receive_mission(mission, origin)
        await self._publish(session_id, events)
        return events

    async def cancel_mission(self, session_id: str) -> List[SessionEvent]:
        events = self.session(session_id).cancel_mission()
        await self._publish(session_id, events)
        return events

    async def reset_mission(self, session_id: str) -> List[SessionEvent]:
        events = self.session(session_id).reset_mission()
        await self._publish(session_id, events)
        return events

    def drop_session(self, session_id: str) -> bool:
        dropped = self.registry.drop(session_id)
        metrics.active_sessions.set(len(self.registry))
        return dropped

    # ---- 주기 처리 ----

    async def tick_once(self, dt_seconds: float) -> int:
        """
        모든 활성 세션의 좀비를 한 스텝 진행합니다.

        Returns:
            발행된 접촉 이벤트 수
        """
        published = 0
        with metrics.tick_seconds.time():
            batches = [(s.session_id, s.tick(dt_seconds)) for s in self.registry
                       if s.state == MissionState.ACTIVE]

        for session_id, events in batches:
            await self._publish(session_id, events)
            published += len(events)
        return published

    async def start(self) -> None:
        """틱 루프와 메트릭 루프를 시작합니다."""
        self._running = True
        log.info(f"오케스트레이터 시작됨 tick_interval:{self.tick_interval}s")
        await asyncio.gather(self._tick_loop(), self._update_metrics())

    async def stop(self) -> None:
        self._running = False
        log.info("오케스트레이터 중지")

    async def _tick_loop(self) -> None:
        last = time.monotonic()
        while self._running:
            await asyncio.sleep(self.tick_interval)
            now = time.monotonic()
            await self.tick_once(now - last)
            last = now

    async def _update_metrics(self):
        """주기적으로 게이지 메트릭을 업데이트합니다."""
        while self._running:
            metrics.uptime_seconds.set(time.time() - self.start_time)
            metrics.active_sessions.set(len(self.registry))

            # Outbox 크기 메트릭 업데이트 (MQTT 싱크인 경우)
            outbox = getattr(self.sink, "outbox", None)
            if outbox is not None:
                try:
                    metrics.outbox_size.set(await outbox.get_count())
                except Exception as e:
                    log.error(f"메트릭 업데이트 오류: {e}")

            await asyncio.sleep(self.metrics_interval)

    async def _publish(self, session_id: str, events: List[SessionEvent]) -> None:
        for event in events:
            self._count(event)
            try:
                await self.sink.publish_event(session_id, event)
            except Exception as e:
                metrics.sink_errors.inc()
                log.error(f"이벤트 전달 실패 session:{session_id} type:{event.type} error:{e}")

    @staticmethod
    def _count(event: SessionEvent) -> None:
        if event.type == "reached":
            metrics.points_reached.inc()
        elif event.type == "zone_entered":
            metrics.zones_entered.inc()
        elif event.type == "zombie_hit":
            metrics.zombie_hits.inc()
        elif event.type == "state_changed":
            metrics.mission_transitions.labels(
                from_state=event.from_state.value,
                to_state=event.to_state.value
            ).inc()
