"""
In-memory event sink.

Collects published events instead of delivering them. Used for
dry runs and in tests. Only the most recent ``max_events`` are kept.
"""

from collections import deque
from typing import Deque, List, Tuple
from escape.core.events import SessionEvent
from escape.observability.logging_setup import get_logger

log = get_logger("escape.memory_sink")

class InMemoryEventSink:
    """메모리 이벤트 싱크 (dry run 용)"""

    def __init__(self, max_events: int = 1000):
        self.events: Deque[Tuple[str, SessionEvent]] = deque(maxlen=max_events)

    async def publish_event(self, session_id: str, event: SessionEvent) -> None:
        self.events.append((session_id, event))
        log.info(f"[dry-run] 이벤트 session:{session_id} type:{event.type}")

    def for_session(self, session_id: str) -> List[SessionEvent]:
        return [e for sid, e in self.events if sid == session_id]

    def clear(self) -> None:
        self.events.clear()
