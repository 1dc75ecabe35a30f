"""
Polygon utilities for the escape mission engine.

This module provides point-in-polygon testing and the
randomized synthesis of danger zone polygons.
"""

import math
import random
from typing import List, Optional, Sequence, Tuple
from escape.core.models import Coordinate, DangerZonePolygon
from escape.common.geo import offset
from escape.observability.logging_setup import get_logger

log = get_logger("escape.polygon")

def point_in_polygon(point: Coordinate, polygon: Sequence[Coordinate]) -> bool:
    """
    점이 폴리곤 내부에 있는지 Ray casting 알고리즘으로 확인합니다.

    (경도, 위도)를 (x, y)로 보고 짝-홀 규칙을 적용합니다.

    Args:
        point: 확인할 점
        polygon: 폴리곤의 꼭짓점들 (삽입 순서가 변의 순서)

    Returns:
        점이 폴리곤 내부에 있으면 True, 외부에 있거나 꼭짓점이 3개 미만이면 False
    """
    n = len(polygon)
    if n < 3:
        return False

    px, py = point.longitude, point.latitude
    inside = False

    j = n - 1
    for i in range(n):
        xi, yi = polygon[i].longitude, polygon[i].latitude
        xj, yj = polygon[j].longitude, polygon[j].latitude

        # 수평 변은 광선과 교차하지 않음 (0으로 나누기 방지)
        if (yi > py) != (yj > py) and yj != yi:
            if px < (xj - xi) * (py - yi) / (yj - yi) + xi:
                inside = not inside
        j = i

    return inside

def generate_danger_zones(
    center: Coordinate,
    *,
    count_range: Tuple[int, int] = (5, 8),
    sides_range: Tuple[int, int] = (4, 7),
    radius_range_m: Tuple[float, float] = (50.0, 150.0),
    offset_range_m: Tuple[float, float] = (100.0, 800.0),
    rng: Optional[random.Random] = None
) -> List[DangerZonePolygon]:
    """
    중심점 주변에 무작위 위험 구역 폴리곤들을 생성합니다.

    Args:
        center: 기준 좌표 (보통 사용자 위치)
        count_range: 폴리곤 개수 범위 (양끝 포함)
        sides_range: 폴리곤 꼭짓점 개수 범위 (양끝 포함)
        radius_range_m: 폴리곤 기본 반경 범위 (미터)
        offset_range_m: 기준점에서 폴리곤 중심까지 거리 범위 (미터)
        rng: 난수 생성기 (테스트에서는 시드 고정)

    Returns:
        생성된 폴리곤 목록
    """
    rng = rng or random.Random()
    polygons: List[DangerZonePolygon] = []

    polygon_count = rng.randint(*count_range)

    for _ in range(polygon_count):
        base_radius = rng.uniform(*radius_range_m)

        # 폴리곤 중심을 기준점에서 무작위 방향/거리로 이동
        offset_distance = rng.uniform(*offset_range_m)
        offset_angle = rng.uniform(0, 2 * math.pi)
        zone_center = offset(center, offset_distance, offset_angle)

        # 반경에 흔들림을 주어 불규칙한 다각형 생성
        sides = rng.randint(*sides_range)
        vertices: DangerZonePolygon = []
        for i in range(sides):
            angle = (i / sides) * 2 * math.pi
            vertex_radius = base_radius * rng.uniform(0.7, 1.3)
            vertices.append(offset(zone_center, vertex_radius, angle))

        polygons.append(vertices)

    log.debug(f"위험 구역 폴리곤 생성됨 count:{len(polygons)}")
    return polygons
