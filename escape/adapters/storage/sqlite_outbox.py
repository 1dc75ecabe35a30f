"""
SQLite-based outbox for the escape mission engine.

Session events are written here first and drained to the MQTT
broker by the publisher worker, so events survive broker outages.
"""

import aiosqlite
import time
from dataclasses import dataclass
from typing import Optional
from escape.observability.logging_setup import get_logger

log = get_logger("escape.outbox")

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS outbox (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    topic TEXT NOT NULL,
    event_type TEXT NOT NULL DEFAULT '',
    payload BLOB NOT NULL,
    qos INTEGER NOT NULL DEFAULT 1,
    retain INTEGER NOT NULL DEFAULT 0,
    created_at INTEGER NOT NULL,
    attempts INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_outbox_created ON outbox(created_at);
"""

@dataclass
class OutboxItem:
    """Outbox 항목"""
    id: int
    topic: str
    event_type: str
    payload: bytes
    qos: int
    retain: bool
    attempts: int

class SQLiteOutbox:
    """SQLite 기반 이벤트 Outbox"""

    def __init__(self, path: str):
        """
        초기화합니다.

        Args:
            path: SQLite 데이터베이스 파일 경로
        """
        self.path = path
        log.info(f"SQLiteOutbox 초기화: {path}")

    async def init(self) -> None:
        """데이터베이스를 초기화합니다."""
        async with aiosqlite.connect(self.path) as db:
            await db.executescript(SCHEMA)
            await db.commit()
        log.info(f"SQLiteOutbox 스키마 초기화 완료: {self.path}")

    async def enqueue(self, topic: str, payload: bytes, qos: int = 1,
                      retain: bool = False, event_type: str = "") -> int:
        """
        이벤트를 Outbox에 추가합니다.

        Args:
            topic: MQTT 토픽
            payload: 직렬화된 이벤트
            qos: QoS 레벨
            retain: retain 플래그
            event_type: 이벤트 유형 (조회/메트릭용)

        Returns:
            생성된 항목의 ID
        """
        now = int(time.time() * 1000)

        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute(
                "INSERT INTO outbox (topic, event_type, payload, qos, retain, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (topic, event_type, payload, qos, 1 if retain else 0, now)
            )
            await db.commit()
            return cursor.lastrowid

    async def peek_oldest(self) -> Optional[OutboxItem]:
        """
        가장 오래된 항목을 조회합니다 (삭제하지 않음).

        같은 밀리초에 들어온 항목은 삽입 순서(id)로 정렬됩니다.
        """
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute(
                "SELECT id, topic, event_type, payload, qos, retain, attempts FROM outbox "
                "ORDER BY created_at ASC, id ASC LIMIT 1"
            )
            row = await cursor.fetchone()

            if row:
                return OutboxItem(
                    id=row[0],
                    topic=row[1],
                    event_type=row[2],
                    payload=row[3],
                    qos=row[4],
                    retain=bool(row[5]),
                    attempts=row[6]
                )
            return None

    async def mark_attempt(self, oid: int) -> None:
        """발송 시도 횟수를 증가시킵니다."""
        async with aiosqlite.connect(self.path) as db:
            await db.execute(
                "UPDATE outbox SET attempts = attempts + 1 WHERE id = ?",
                (oid,)
            )
            await db.commit()

    async def delete(self, oid: int) -> None:
        """항목을 삭제합니다 (발송 성공 또는 재시도 초과)."""
        async with aiosqlite.connect(self.path) as db:
            await db.execute("DELETE FROM outbox WHERE id = ?", (oid,))
            await db.commit()

    async def get_count(self) -> int:
        """현재 저장된 항목 수를 반환합니다."""
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM outbox")
            result = await cursor.fetchone()
            return result[0] if result else 0
