"""
Event sink port interface.

This module defines the protocol for forwarding session events
to persistence/notification collaborators.
"""

from typing import Protocol
from escape.core.events import SessionEvent

class EventSinkPort(Protocol):
    """세션 이벤트 전달 포트 인터페이스"""
    
    async def publish_event(self, session_id: str, event: SessionEvent) -> None:
        """
        이벤트를 전달합니다.
        
        Args:
            session_id: 이벤트가 발생한 세션 키
            event: 세션 이벤트
        """
        ...
