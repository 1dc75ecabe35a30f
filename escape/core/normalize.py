"""
Normalization functions for the escape mission engine.

This module contains pure functions for converting raw generator
payloads and shelter rows into internal domain models.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
from jsonschema import validate
from jsonschema.exceptions import ValidationError
from .models import Coordinate, HazardType, Mission, MissionState, PointOfInterest
from escape.observability.logging_setup import get_logger

log = get_logger("escape.normalize")

MISSION_SCHEMA = json.loads((Path(__file__).parent / "mission_schema.json").read_text(encoding="utf-8"))

# 대피소 행의 재난 유형 플래그 컬럼
HAZARD_COLUMNS = {
    "is_flood": HazardType.FLOOD,
    "is_landslide": HazardType.LANDSLIDE,
    "is_storm_surge": HazardType.STORM_SURGE,
    "is_earthquake": HazardType.EARTHQUAKE,
    "is_tsunami": HazardType.TSUNAMI,
    "is_fire": HazardType.FIRE,
    "is_inland_flood": HazardType.INLAND_FLOOD,
    "is_volcano": HazardType.VOLCANO,
}

_TRUTHY = {"1", "true", "yes", "y", "on", "o", "○"}

def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in _TRUTHY

def _to_datetime(value: Any) -> datetime:
    # 생성기는 epoch 초를 돌려주고 저장소는 ISO 문자열을 돌려줌
    if value is None:
        return datetime.now(timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))

def to_hazard(value: Optional[str]) -> Optional[HazardType]:
    """재난 유형 문자열을 HazardType으로 변환합니다. 알 수 없는 값(Zombie 등)은 None."""
    if not value:
        return None
    try:
        return HazardType(value)
    except ValueError:
        log.debug(f"관심 지점 필터 대상이 아닌 재난 유형: {value}")
        return None

def to_mission(raw: Dict[str, Any]) -> Mission:
    """
    미션 생성기 페이로드를 Mission 모델로 변환합니다.

    Args:
        raw: 생성기/저장소에서 받은 미션 딕셔너리

    Returns:
        변환된 Mission

    Raises:
        ValueError: 스키마 검증 또는 변환 실패
    """
    # 생성기 응답은 {"mission": {...}} 형태일 수 있음
    if "mission" in raw and isinstance(raw["mission"], dict):
        raw = raw["mission"]

    try:
        validate(instance=raw, schema=MISSION_SCHEMA)
    except ValidationError as e:
        log.error(f"미션 스키마 검증 실패: {e.message}")
        raise ValueError(f"Mission schema validation failed: {e.message}")

    try:
        created_at = _to_datetime(raw.get("created_at"))
    except (ValueError, OverflowError, OSError) as e:
        raise ValueError(f"Invalid created_at: {raw.get('created_at')!r}") from e

    mission = Mission(
        id=str(raw["id"]),
        title=raw["title"],
        overview=raw.get("overview") or "",
        hazard_type=to_hazard(raw.get("disaster_type")),
        region=raw.get("evacuation_region"),
        status=MissionState(raw.get("status") or MissionState.NO_MISSION.value),
        steps=raw.get("steps"),
        distance_meters=raw.get("distances"),
        created_at=created_at,
    )
    log.debug(f"미션 정규화 완료 id:{mission.id}")
    return mission

def to_point_of_interest(raw: Dict[str, Any]) -> PointOfInterest:
    """
    대피소 행을 PointOfInterest로 변환합니다.

    Args:
        raw: id, name, latitude, longitude, is_* 플래그를 가진 딕셔너리

    Returns:
        변환된 PointOfInterest

    Raises:
        ValueError: 필수 값 누락 또는 좌표 변환 실패
    """
    poi_id = raw.get("id") or raw.get("common_id")
    name = raw.get("name")
    if poi_id is None or poi_id == "" or not name:
        raise ValueError(f"id/name is required: {raw}")

    try:
        lat = float(raw["latitude"])
        lon = float(raw["longitude"])
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid coordinates for point {poi_id}") from e

    hazards = frozenset(h for col, h in HAZARD_COLUMNS.items() if _flag(raw.get(col)))

    return PointOfInterest(
        id=str(poi_id),
        name=str(name).strip(),
        coordinate=Coordinate(latitude=lat, longitude=lon),
        hazard_support=hazards,
        address=str(raw.get("address") or "").strip(),
    )
