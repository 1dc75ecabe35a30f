"""
Retry utilities for the escape mission engine.

This module provides the backoff helper used by the MQTT
publisher when the broker is unavailable.
"""

import asyncio

def backoff_delay(attempt: int, base: float, max_delay: float) -> float:
    """시도 횟수(1부터 시작)에 대한 지수 백오프 지연 시간(초)을 계산합니다."""
    return min(max_delay, base * (2 ** max(0, attempt - 1)))

async def exponential_backoff(attempt: int, base: float, max_delay: float) -> None:
    """
    지수 백오프 지연을 수행합니다.
    
    Args:
        attempt: 현재 시도 횟수 (1부터 시작)
        base: 기본 지연 시간 (초)
        max_delay: 최대 지연 시간 (초)
    """
    await asyncio.sleep(backoff_delay(attempt, base, max_delay))
