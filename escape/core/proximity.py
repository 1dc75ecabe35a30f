"""
Proximity tracking for the escape mission engine.

This module implements the session-scoped deduplication of
"reached point of interest" and "entered danger zone" signals,
together with the point of interest filters used to build the
candidate list.
"""

from typing import AbstractSet, Iterable, List, Optional, Sequence, Set
from .models import Coordinate, DangerZonePolygon, HazardType, PointOfInterest
from escape.common.geo import bounding_box, distance_meters
from escape.common.polygon import point_in_polygon
from escape.observability.logging_setup import get_logger

log = get_logger("escape.proximity")

class ProximityTracker:
    """도달/진입 이벤트 중복 제거 트래커 (세션 단위)"""

    def __init__(self):
        self._reached: Set[str] = set()
        self._entered: Set[int] = set()

    @property
    def reached_ids(self) -> AbstractSet[str]:
        return frozenset(self._reached)

    @property
    def entered_indices(self) -> AbstractSet[int]:
        return frozenset(self._entered)

    def check_reached(
        self,
        user_location: Coordinate,
        candidates: Sequence[PointOfInterest],
        radius_meters: float
    ) -> Optional[PointOfInterest]:
        """
        반경 내에 있는 아직 도달하지 않은 관심 지점을 찾습니다.

        후보 순서대로 검사하며 가장 가까운 지점이 아니라 처음 일치한 지점을 반환합니다.
        반환된 지점의 id는 도달 집합에 기록됩니다.

        Args:
            user_location: 사용자 위치
            candidates: 후보 관심 지점 (호출자가 정한 순서 유지)
            radius_meters: 도달 판정 반경 (미터)

        Returns:
            새로 도달한 관심 지점 또는 None
        """
        for poi in candidates:
            # 이미 도달한 지점은 건너뛰기
            if poi.id in self._reached:
                continue

            distance = distance_meters(user_location, poi.coordinate)
            if distance <= radius_meters:
                self._reached.add(poi.id)
                log.info(f"관심 지점 도달 id:{poi.id} name:{poi.name} distance:{distance:.1f}m")
                return poi

        return None

    def check_entered_zone(
        self,
        user_location: Coordinate,
        zones: Sequence[DangerZonePolygon]
    ) -> Optional[int]:
        """
        사용자가 새로 진입한 위험 구역의 인덱스를 반환합니다.

        Args:
            user_location: 사용자 위치
            zones: 현재 세션의 위험 구역 폴리곤 목록

        Returns:
            처음으로 일치한 미진입 구역의 인덱스 또는 None
        """
        for index, polygon in enumerate(zones):
            if index in self._entered:
                continue

            if point_in_polygon(user_location, polygon):
                self._entered.add(index)
                log.info(f"위험 구역 진입 index:{index}")
                return index

        return None

    def reset(self) -> None:
        """도달/진입 기록을 초기화합니다."""
        self._reached.clear()
        self._entered.clear()

def filter_by_hazards(
    points: Iterable[PointOfInterest],
    hazards: AbstractSet[HazardType]
) -> List[PointOfInterest]:
    """
    선택된 재난 유형 중 하나라도 지원하는 관심 지점만 남깁니다.

    선택된 유형이 없으면 모든 지점을 반환합니다. 순서는 유지됩니다.
    """
    if not hazards:
        return list(points)
    return [p for p in points if any(p.supports(h) for h in hazards)]

def filter_nearby(
    points: Iterable[PointOfInterest],
    center: Coordinate,
    radius_km: float
) -> List[PointOfInterest]:
    """
    중심점 반경 내의 관심 지점만 남깁니다.

    경계 상자로 먼저 거른 뒤 정확한 Haversine 거리로 다시 확인합니다.
    """
    min_lat, max_lat, min_lon, max_lon = bounding_box(center, radius_km)
    radius_m = radius_km * 1000

    nearby = []
    for p in points:
        lat, lon = p.coordinate.latitude, p.coordinate.longitude
        if not (min_lat <= lat <= max_lat and min_lon <= lon <= max_lon):
            continue
        if distance_meters(center, p.coordinate) <= radius_m:
            nearby.append(p)
    return nearby
