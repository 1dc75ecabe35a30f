"""
정규화 함수 단위 테스트

이 모듈은 미션 생성기 페이로드와 대피소 행의 변환을 테스트합니다.
"""

import pytest
from datetime import datetime, timezone
from escape.core.models import HazardType, MissionState
from escape.core.normalize import to_hazard, to_mission, to_point_of_interest


class TestToMission:
    """미션 변환 테스트"""

    def test_full_payload(self):
        raw = {
            "id": "m-1",
            "title": "지진 발생",
            "overview": "가까운 대피소로 이동하세요",
            "disaster_type": "Earthquake",
            "evacuation_region": "Chiyoda",
            "status": "have",
            "steps": 100,
            "distances": 250.5,
            "created_at": 1700000000,
        }
        mission = to_mission(raw)

        assert mission.id == "m-1"
        assert mission.hazard_type == HazardType.EARTHQUAKE
        assert mission.region == "Chiyoda"
        assert mission.status == MissionState.ACTIVE
        assert mission.steps == 100
        assert mission.distance_meters == 250.5
        assert mission.created_at == datetime.fromtimestamp(1700000000, tz=timezone.utc)

    def test_wrapped_payload(self):
        """{"mission": {...}} 형태도 허용"""
        mission = to_mission({"mission": {"id": "m-2", "title": "홍수"}})

        assert mission.id == "m-2"
        assert mission.status == MissionState.NO_MISSION
        assert mission.hazard_type is None

    def test_zombie_type_has_no_hazard(self):
        mission = to_mission({"id": "z", "title": "좀비", "disaster_type": "Zombie"})
        assert mission.hazard_type is None

    def test_iso_created_at(self):
        mission = to_mission({"id": "m", "title": "t", "created_at": "2025-01-02T03:04:05Z"})
        assert mission.created_at == datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    @pytest.mark.parametrize("raw", [
        {"title": "id 없음"},
        {"id": "m"},
        {"id": "m", "title": "t", "disaster_type": "Meteor"},
        {"id": "m", "title": "t", "status": "unknown"},
        {"id": "m", "title": "t", "steps": "many"},
    ])
    def test_invalid_payload(self, raw):
        with pytest.raises(ValueError):
            to_mission(raw)

    def test_invalid_created_at(self):
        with pytest.raises(ValueError):
            to_mission({"id": "m", "title": "t", "created_at": "not-a-date"})


class TestToPointOfInterest:
    """대피소 행 변환 테스트"""

    def test_row_with_flags(self):
        row = {
            "id": "s1",
            "name": " 중앙공원 ",
            "latitude": "35.68",
            "longitude": "139.76",
            "is_earthquake": "1",
            "is_fire": True,
            "is_flood": "0",
            "is_tsunami": "",
        }
        poi = to_point_of_interest(row)

        assert poi.id == "s1"
        assert poi.name == "중앙공원"
        assert poi.coordinate.latitude == 35.68
        assert poi.hazard_support == {HazardType.EARTHQUAKE, HazardType.FIRE}

    def test_common_id_fallback(self):
        poi = to_point_of_interest({"common_id": 42, "name": "A", "latitude": 1, "longitude": 2})
        assert poi.id == "42"
        assert poi.hazard_support == frozenset()

    def test_missing_name(self):
        with pytest.raises(ValueError):
            to_point_of_interest({"id": "x", "latitude": 1, "longitude": 2})

    def test_bad_coordinates(self):
        with pytest.raises(ValueError):
            to_point_of_interest({"id": "x", "name": "X", "latitude": "north", "longitude": 2})


class TestToHazard:
    @pytest.mark.parametrize("value,expected", [
        ("Flood", HazardType.FLOOD),
        ("Storm Surge", HazardType.STORM_SURGE),
        ("Zombie", None),
        (None, None),
        ("", None),
    ])
    def test_to_hazard(self, value, expected):
        assert to_hazard(value) == expected
