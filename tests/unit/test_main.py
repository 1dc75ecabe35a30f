"""
애플리케이션 진입점 단위 테스트
"""

import pytest
from escape.main import build_settings, load_points
from escape.settings import Settings


class TestBuildSettings:
    """환경 변수 설정 로드 테스트"""

    def test_defaults(self, monkeypatch):
        for name in ("DRY_RUN", "PROXIMITY_RADIUS_M", "ZOMBIE_COUNT", "HTTP_PORT", "POINTS_FILE"):
            monkeypatch.delenv(name, raising=False)

        s = build_settings()

        assert s.dry_run is False
        assert s.proximity.radius_meters == 30.0
        assert s.zombie.count == 10
        assert s.observability.http_port == 8099

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("DRY_RUN", "true")
        monkeypatch.setenv("PROXIMITY_RADIUS_M", "50")
        monkeypatch.setenv("DANGER_ZONES_ENABLED", "0")
        monkeypatch.setenv("ZOMBIE_COUNT", "3")
        monkeypatch.setenv("LOCAL_MQTT_HOST", "broker")
        monkeypatch.setenv("LOCAL_MQTT_PORT", "8883")
        monkeypatch.setenv("LOCAL_MQTT_TLS", "yes")
        monkeypatch.setenv("LOCAL_TOPIC_PREFIX", "game")
        monkeypatch.setenv("HTTP_PORT", "9000")

        s = build_settings()

        assert s.dry_run is True
        assert s.proximity.radius_meters == 50.0
        assert s.danger_zone.enabled is False
        assert s.zombie.count == 3
        assert s.local_mqtt.host == "broker"
        assert s.local_mqtt.port == 8883
        assert s.local_mqtt.tls is True
        assert s.local_mqtt.topic_prefix == "game"
        assert s.observability.http_port == 9000


class TestLoadPoints:
    """대피소 데이터 로드 테스트"""

    def test_no_file_configured(self):
        assert load_points(Settings()) == []

    def test_missing_file(self, tmp_path):
        s = Settings()
        s.points.file_path = str(tmp_path / "missing.csv")
        assert load_points(s) == []

    def test_csv_file(self, tmp_path):
        path = tmp_path / "points.csv"
        path.write_text("id,name,latitude,longitude\na,A,35.0,139.0\n", encoding="utf-8")
        s = Settings()
        s.points.file_path = str(path)

        points = load_points(s)
        assert [p.id for p in points] == ["a"]
