"""
테스트 설정 및 픽스처

이 모듈은 pytest 설정과 공통 픽스처를 제공합니다.
"""

import pytest
import random
import tempfile
import os
from unittest.mock import AsyncMock
from escape.settings import Settings
from escape.core.models import Coordinate, HazardType, PointOfInterest


@pytest.fixture
def temp_db_path():
    """임시 데이터베이스 파일 경로"""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        temp_path = f.name
    yield temp_path
    # 테스트 후 파일 정리
    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest.fixture
def sample_settings():
    """테스트용 설정"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    settings.observability.http_port = 8080
    settings.dry_run = True
    return settings


@pytest.fixture
def seeded_rng():
    """시드 고정 난수 생성기"""
    return random.Random(42)


@pytest.fixture
def user_location():
    """테스트용 사용자 위치 (도쿄)"""
    return Coordinate(latitude=35.6812, longitude=139.7671)


@pytest.fixture
def sample_points():
    """테스트용 대피소 데이터"""
    return [
        PointOfInterest(
            id="p1", name="대피소1",
            coordinate=Coordinate(latitude=35.6813, longitude=139.7672),
            hazard_support=frozenset({HazardType.EARTHQUAKE, HazardType.FIRE}),
        ),
        PointOfInterest(
            id="p2", name="대피소2",
            coordinate=Coordinate(latitude=35.6812, longitude=139.7671),
            hazard_support=frozenset({HazardType.FLOOD}),
        ),
        PointOfInterest(
            id="p3", name="대피소3",
            coordinate=Coordinate(latitude=35.7000, longitude=139.8000),
            hazard_support=frozenset({HazardType.TSUNAMI}),
        ),
    ]


@pytest.fixture
def square_polygon():
    """테스트용 정사각형 폴리곤 (경도 0~1, 위도 0~1)"""
    return [
        Coordinate(longitude=0.0, latitude=0.0),
        Coordinate(longitude=0.0, latitude=1.0),
        Coordinate(longitude=1.0, latitude=1.0),
        Coordinate(longitude=1.0, latitude=0.0),
    ]


@pytest.fixture
def mock_mqtt_client():
    """테스트용 MQTT 클라이언트"""
    return AsyncMock()


# pytest 설정
def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "slow: 느린 테스트 마커"
    )
    config.addinivalue_line(
        "markers", "integration: 통합 테스트 마커"
    )


def pytest_collection_modifyitems(config, items):
    """테스트 아이템 수정"""
    for item in items:
        # 느린 테스트 마커 추가
        if "performance" in item.name or "stress" in item.name:
            item.add_marker(pytest.mark.slow)
        
        # 통합 테스트 마커 추가
        if "integration" in item.name:
            item.add_marker(pytest.mark.integration)
