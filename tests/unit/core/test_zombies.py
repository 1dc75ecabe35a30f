"""
좀비 시뮬레이터 단위 테스트
"""

import random
import pytest
from escape.common.geo import distance_meters, offset
from escape.core.models import ZombieAgent
from escape.core.zombies import ZombieAgentSimulator


class TestSpawn:
    """좀비 생성 테스트"""

    def test_spawn_count_and_ranges(self, user_location, seeded_rng):
        sim = ZombieAgentSimulator(seeded_rng)
        agents = sim.spawn(user_location, count=25)

        assert len(agents) == 25
        assert sim.active is True
        for agent in agents:
            # 오프셋 근사 오차 허용
            assert 45 <= distance_meters(user_location, agent.coordinate) <= 305
            assert 0.5 <= agent.speed_meters_per_second <= 2.0

    def test_spawn_unique_ids(self, user_location, seeded_rng):
        sim = ZombieAgentSimulator(seeded_rng)
        agents = sim.spawn(user_location)
        assert len({a.id for a in agents}) == len(agents) == 10

    def test_spawn_replaces_previous(self, user_location, seeded_rng):
        sim = ZombieAgentSimulator(seeded_rng)
        first = sim.spawn(user_location, count=3)
        second = sim.spawn(user_location, count=2)

        assert len(sim.agents) == 2
        assert not {a.id for a in first} & {a.id for a in second}

    def test_spawn_zero(self, user_location):
        sim = ZombieAgentSimulator(random.Random(1))
        assert sim.spawn(user_location, count=0) == []
        assert sim.active is False


class TestTick:
    """좀비 이동/접촉 테스트"""

    def test_hit_reported_once(self, user_location):
        """접촉은 좀비당 한 번만 보고됨"""
        sim = ZombieAgentSimulator(random.Random(3))
        near = ZombieAgent(coordinate=user_location, heading_radians=0.0, speed_meters_per_second=0.0)
        far = ZombieAgent(coordinate=offset(user_location, 1000, 0.0),
                          heading_radians=0.0, speed_meters_per_second=0.5)
        sim._agents = [near, far]

        hits = [sim.tick(user_location, 1.0) for _ in range(5)]

        assert hits[0] == [near.id]
        assert all(h == [] for h in hits[1:])
        assert sim.hit_ids == {near.id}

    def test_hit_checked_before_move(self, user_location):
        """이동 전 위치가 반경 밖이면 이번 틱에는 접촉 없음"""
        sim = ZombieAgentSimulator(random.Random(3))
        agent = ZombieAgent(coordinate=offset(user_location, 6, 0.0),
                            heading_radians=3.14159, speed_meters_per_second=10.0)
        sim._agents = [agent]

        assert sim.tick(user_location, 1.0, hit_radius_m=4.0, follow_strength=1.0) == []

    def test_agents_approach_user(self, user_location):
        """추적 가중치 1이면 매 틱 사용자에게 가까워짐"""
        sim = ZombieAgentSimulator(random.Random(9))
        agent = ZombieAgent(coordinate=offset(user_location, 200, 1.0),
                            heading_radians=0.0, speed_meters_per_second=2.0)
        sim._agents = [agent]

        before = distance_meters(agent.coordinate, user_location)
        for _ in range(10):
            sim.tick(user_location, 1.0, follow_strength=1.0)
        after = distance_meters(sim.agents[0].coordinate, user_location)

        assert after < before

    def test_step_length_matches_speed(self, user_location):
        """한 틱 이동 거리 = 속도 x 경과 시간"""
        sim = ZombieAgentSimulator(random.Random(2))
        start = offset(user_location, 500, 2.0)
        agent = ZombieAgent(coordinate=start, heading_radians=0.0, speed_meters_per_second=1.5)
        sim._agents = [agent]

        sim.tick(user_location, 2.0)

        assert distance_meters(start, sim.agents[0].coordinate) == pytest.approx(3.0, rel=0.02)

    def test_tick_without_agents(self, user_location):
        sim = ZombieAgentSimulator()
        assert sim.tick(user_location, 1.0) == []


class TestClear:
    def test_clear(self, user_location, seeded_rng):
        sim = ZombieAgentSimulator(seeded_rng)
        sim.spawn(user_location)
        sim._hit_ids.add("x")

        sim.clear()

        assert sim.agents == []
        assert sim.hit_ids == set()
        assert sim.active is False
