"""
Mission score calculation.

Final points = (base + distance points + bonus) x route efficiency,
where route efficiency is the optimal/actual distance ratio clamped
to [0.7, 1.0].
"""

from .models import ScoreComponents

BASE_POINTS_FIXED = 1000
DISTANCE_MULTIPLIER = 0.5
NEW_BADGE_BONUS = 1500
MIN_DISTANCE_THRESHOLD_M = 10.0

MIN_EFFICIENCY = 0.7
MAX_EFFICIENCY = 1.0

def route_efficiency(actual_distance_m: float, optimal_distance_m: float) -> float:
    # 이동 거리가 너무 짧으면 1.0
    if actual_distance_m < MIN_DISTANCE_THRESHOLD_M:
        return 1.0
    return max(MIN_EFFICIENCY, min(MAX_EFFICIENCY, optimal_distance_m / actual_distance_m))

def calculate_score(actual_distance_m: float,
                    optimal_distance_m: float,
                    is_new_badge: bool = False) -> ScoreComponents:
    """
    미션 점수를 계산합니다.

    Args:
        actual_distance_m: 실제 이동 거리 (미터)
        optimal_distance_m: 출발점에서 도착 지점까지의 직선 거리 (미터)
        is_new_badge: 새 배지가 생성되었는지 여부

    Returns:
        점수 구성 요소
    """
    distance_points = int(actual_distance_m * DISTANCE_MULTIPLIER)
    bonus_points = NEW_BADGE_BONUS if is_new_badge else 0
    efficiency = route_efficiency(actual_distance_m, optimal_distance_m)

    final_points = int((BASE_POINTS_FIXED + distance_points + bonus_points) * efficiency)

    return ScoreComponents(
        base_points=BASE_POINTS_FIXED,
        distance_points=distance_points,
        bonus_points=bonus_points,
        route_efficiency_multiplier=efficiency,
        final_points=final_points,
    )
