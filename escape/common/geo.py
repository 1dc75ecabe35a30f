"""
Geographic utilities for the escape mission engine.

This module provides geographic calculations including
haversine distance, short-range coordinate offsets and
bounding boxes.
"""

import math
from typing import Tuple
from escape.core.models import Coordinate

# 지구 반지름 (미터). 모든 거리 계산은 이 상수 하나만 사용한다.
EARTH_RADIUS_M = 6_371_000.0

# 위도 1도 ≈ 111km
METERS_PER_DEGREE = 111_000.0

def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """
    두 지점 간의 Haversine 거리를 계산합니다 (미터).

    Args:
        a: 첫 번째 지점
        b: 두 번째 지점

    Returns:
        두 지점 간의 거리 (미터)
    """
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)

    # Haversine 공식
    h = (math.sin(d_lat / 2) ** 2 +
         math.cos(math.radians(a.latitude)) * math.cos(math.radians(b.latitude)) *
         math.sin(d_lon / 2) ** 2)
    # 대척점 부근 부동소수점 오차로 1을 넘지 않도록
    h = min(1.0, h)
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_M * c

def offset(origin: Coordinate, distance_m: float, bearing_rad: float) -> Coordinate:
    """
    기준점에서 주어진 방위와 거리만큼 이동한 좌표를 계산합니다.

    등장방형 근사이므로 10km 이내의 짧은 거리에서만 유효하며,
    극 부근(cos(lat) → 0)에서는 경도 오프셋이 발산합니다.

    Args:
        origin: 기준 좌표
        distance_m: 이동 거리 (미터)
        bearing_rad: 방위 (라디안, 0 = 북쪽, π/2 = 동쪽)

    Returns:
        이동한 좌표
    """
    lat_offset = (distance_m * math.cos(bearing_rad)) / METERS_PER_DEGREE
    lon_offset = (distance_m * math.sin(bearing_rad)) / (
        METERS_PER_DEGREE * math.cos(math.radians(origin.latitude))
    )
    return Coordinate(
        latitude=origin.latitude + lat_offset,
        longitude=origin.longitude + lon_offset,
    )

def bearing_between(origin: Coordinate, target: Coordinate) -> float:
    """기준점에서 목표점을 향하는 방위(라디안)를 도 단위 공간에서 계산합니다."""
    return math.atan2(target.longitude - origin.longitude,
                      target.latitude - origin.latitude)

def bounding_box(center: Coordinate, radius_km: float) -> Tuple[float, float, float, float]:
    """
    중심점 주변 반경의 경계 상자를 계산합니다.

    Args:
        center: 중심 좌표
        radius_km: 반경 (킬로미터)

    Returns:
        (min_lat, max_lat, min_lon, max_lon)
    """
    lat_range = radius_km / 111.0
    lon_range = radius_km / (111.0 * math.cos(math.radians(center.latitude)))

    return (center.latitude - lat_range, center.latitude + lat_range,
            center.longitude - lon_range, center.longitude + lon_range)

def validate_coordinates(lat: float, lon: float) -> bool:
    """
    좌표가 유효한지 확인합니다.

    Args:
        lat: 위도
        lon: 경도

    Returns:
        좌표가 유효하면 True
    """
    return -90 <= lat <= 90 and -180 <= lon <= 180
