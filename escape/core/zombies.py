"""
Zombie chase simulation for the escape mission engine.

Agents are spawned around a center point and, on every tick, steer
toward the user with some random wobble. The caller owns the timer
and invokes tick() on its own schedule.
"""

import math
import random
from typing import List, Optional, Set
from .models import Coordinate, ZombieAgent
from escape.common.geo import bearing_between, distance_meters, offset
from escape.observability.logging_setup import get_logger

log = get_logger("escape.zombies")

# 방향 무작위 흔들림 (라디안)
HEADING_JITTER_RAD = 0.5

class ZombieAgentSimulator:
    """좀비 에이전트 시뮬레이터"""

    def __init__(self, rng: Optional[random.Random] = None):
        """
        초기화합니다.

        Args:
            rng: 난수 생성기 (테스트에서는 시드 고정)
        """
        self.rng = rng or random.Random()
        self._agents: List[ZombieAgent] = []
        self._hit_ids: Set[str] = set()

    @property
    def agents(self) -> List[ZombieAgent]:
        return list(self._agents)

    @property
    def hit_ids(self) -> Set[str]:
        return set(self._hit_ids)

    @property
    def active(self) -> bool:
        return bool(self._agents)

    def spawn(self,
              center: Coordinate,
              count: int = 10,
              min_dist_m: float = 50.0,
              max_dist_m: float = 300.0,
              min_speed: float = 0.5,
              max_speed: float = 2.0) -> List[ZombieAgent]:
        """
        중심점 주변에 좀비를 생성합니다. 기존 좀비와 접촉 기록은 제거됩니다.

        Args:
            center: 생성 중심 좌표
            count: 생성할 좀비 수
            min_dist_m: 최소 생성 거리 (미터)
            max_dist_m: 최대 생성 거리 (미터)
            min_speed: 최소 속도 (m/s)
            max_speed: 최대 속도 (m/s)

        Returns:
            생성된 좀비 목록
        """
        self._agents = []
        self._hit_ids.clear()

        for _ in range(count):
            distance = self.rng.uniform(min_dist_m, max_dist_m)
            angle = self.rng.uniform(0, 2 * math.pi)
            self._agents.append(ZombieAgent(
                coordinate=offset(center, distance, angle),
                heading_radians=self.rng.uniform(0, 2 * math.pi),
                speed_meters_per_second=self.rng.uniform(min_speed, max_speed),
            ))

        log.info(f"좀비 생성됨 count:{len(self._agents)}")
        return self.agents

    def tick(self,
             user_location: Coordinate,
             dt_seconds: float,
             hit_radius_m: float = 4.0,
             follow_strength: float = 0.7) -> List[str]:
        """
        모든 좀비를 한 스텝 이동시키고 새로 접촉한 좀비 id를 반환합니다.

        접촉 판정은 이동 전 위치 기준이며, 같은 좀비는 한 번만 보고됩니다.

        Args:
            user_location: 사용자 위치
            dt_seconds: 경과 시간 (초)
            hit_radius_m: 접촉 판정 반경 (미터)
            follow_strength: 사용자 추적 가중치 (0~1)

        Returns:
            이번 틱에 새로 접촉한 좀비 id 목록
        """
        new_hits: List[str] = []

        for agent in self._agents:
            angle_to_user = bearing_between(agent.coordinate, user_location)

            distance_to_user = distance_meters(agent.coordinate, user_location)
            if distance_to_user <= hit_radius_m and agent.id not in self._hit_ids:
                self._hit_ids.add(agent.id)
                new_hits.append(agent.id)
                log.info(f"좀비 접촉 id:{agent.id} distance:{distance_to_user:.1f}m")

            # 추적 방향과 현재 방향을 섞고 무작위 흔들림 추가
            jitter = self.rng.uniform(-HEADING_JITTER_RAD, HEADING_JITTER_RAD)
            agent.heading_radians = (angle_to_user * follow_strength
                                     + agent.heading_radians * (1 - follow_strength)
                                     + jitter)

            step = agent.speed_meters_per_second * dt_seconds
            agent.coordinate = offset(agent.coordinate, step, agent.heading_radians)

        return new_hits

    def clear(self) -> None:
        """모든 좀비와 접촉 기록을 제거합니다."""
        self._agents = []
        self._hit_ids.clear()
        log.debug("좀비 제거됨")
