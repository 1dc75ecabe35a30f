# escape/settings.py
from __future__ import annotations
from typing import Tuple
from pydantic import BaseModel, Field

class Proximity(BaseModel):
    radius_meters: float = 30.0               # 대피소 도달 판정 반경
    nearby_radius_km: float = 1.5             # 후보 대피소 검색 반경

class DangerZone(BaseModel):
    enabled: bool = True
    count_range: Tuple[int, int] = (5, 8)
    sides_range: Tuple[int, int] = (4, 7)
    radius_range_m: Tuple[float, float] = (50.0, 150.0)
    offset_range_m: Tuple[float, float] = (100.0, 800.0)

class Zombie(BaseModel):
    count: int = 10
    min_spawn_distance_m: float = 50.0
    max_spawn_distance_m: float = 300.0
    min_speed: float = 0.5                    # m/s
    max_speed: float = 2.0                    # m/s
    hit_radius_meters: float = 4.0
    follow_strength: float = 0.7
    tick_interval_sec: float = 1.0

class Points(BaseModel):
    file_path: str = ""                       # csv | xlsx, 비어 있으면 API로 주입

class LocalMQTT(BaseModel):
    host: str = "localhost"
    port: int = 1883
    username: str | None = None
    password: str | None = None
    tls: bool = False
    client_id: str | None = None
    keepalive: int = 30
    topic_prefix: str = "escape"
    qos: int = 1
    retain: bool = False
    lwt_topic: str = "escape/state"

class Observability(BaseModel):
    http_port: int = 8099
    metrics_enabled: bool = True
    service_name: str = "escape-mission-engine"
    build_version: str = "0.1.0"
    build_date: str = "2025-11-01"
    log_level: str = "INFO"
    log_format: str = "dev"                   # dev | json

class Reliability(BaseModel):
    outbox_path: str = "/data/outbox.db"
    publish_max_retries: int = 10
    backoff_initial_sec: float = 0.5
    backoff_max_sec: float = 30.0

class Settings(BaseModel):
    # 상위 플래그(옵션)
    dry_run: bool = False                     # True면 MQTT 대신 메모리 싱크 사용

    # 하위 섹션 (기본값/팩토리로 누락 방지)
    proximity: Proximity = Field(default_factory=Proximity)
    danger_zone: DangerZone = Field(default_factory=DangerZone)
    zombie: Zombie = Field(default_factory=Zombie)
    points: Points = Field(default_factory=Points)
    local_mqtt: LocalMQTT = Field(default_factory=LocalMQTT)
    observability: Observability = Field(default_factory=Observability)
    reliability: Reliability = Field(default_factory=Reliability)
