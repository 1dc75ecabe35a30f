"""
Local MQTT publisher adapter for the escape mission engine.

This module implements the EventSinkPort on top of a local MQTT
broker with the outbox pattern for durable event delivery.
"""

import asyncio
import json
import ssl
from typing import Optional
from aiomqtt import Client, MqttCodeError, MqttError, TLSParameters, Will
from escape.adapters.storage.sqlite_outbox import SQLiteOutbox
from escape.common.retry import exponential_backoff
from escape.core.events import SessionEvent
from escape.observability import metrics
from escape.observability.logging_setup import get_logger

log = get_logger("escape.mqtt_local")

class LocalMqttPublisher:
    """로컬 MQTT 이벤트 발송 어댑터 (Outbox 패턴)"""

    def __init__(self,
                 *,
                 broker_host: str,
                 broker_port: int,
                 topic_prefix: str,
                 outbox: SQLiteOutbox,
                 username: str | None = None,
                 password: str | None = None,
                 tls: bool = False,
                 client_id: str | None = None,
                 keepalive: int = 30,
                 lwt_topic: str = "escape/state",
                 lwt_payload_online: str = "online",
                 qos_default: int = 1,
                 retain_default: bool = False,
                 backoff_initial: float = 0.5,
                 backoff_max: float = 30.0,
                 max_retries: int = 10,
                 poll_interval: float = 1.0):
        """
        초기화합니다.

        Args:
            broker_host: MQTT 브로커 호스트
            broker_port: MQTT 브로커 포트
            topic_prefix: 토픽 접두사
            outbox: Outbox 인스턴스
            username: 사용자명
            password: 비밀번호
            tls: TLS 사용 여부
            client_id: 클라이언트 ID
            keepalive: keepalive 시간
            lwt_topic: Last Will and Testament 토픽
            lwt_payload_online: 온라인 상태 페이로드
            qos_default: 기본 QoS
            retain_default: 기본 retain 플래그
            backoff_initial: 초기 백오프 시간
            backoff_max: 최대 백오프 시간
            max_retries: 항목당 최대 재시도 횟수
            poll_interval: Outbox 폴링 간격 (초)
        """
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.topic_prefix = topic_prefix.rstrip("/")
        self.outbox = outbox
        self.username = username
        self.password = password
        self.tls = tls
        self.client_id = client_id
        self.keepalive = keepalive
        self.lwt_topic = lwt_topic
        self.lwt_payload_online = lwt_payload_online
        self.qos_default = qos_default
        self.retain_default = retain_default
        self.backoff_initial = backoff_initial
        self.backoff_max = backoff_max
        self.max_retries = max_retries
        self.poll_interval = poll_interval

        self._running = False

    def _build_client(self) -> Client:
        """aiomqtt 클라이언트를 생성합니다."""
        return Client(
            hostname=self.broker_host,
            port=self.broker_port,
            username=self.username,
            password=self.password,
            identifier=self.client_id,
            keepalive=self.keepalive,
            will=Will(topic=self.lwt_topic, payload="offline", qos=1, retain=True),
            tls_params=TLSParameters(cert_reqs=ssl.CERT_REQUIRED) if self.tls else None,
        )

    async def start(self) -> None:
        """발송 워커를 시작합니다. 연결이 끊기면 백오프 후 재연결합니다."""
        self._running = True
        reconnect_attempt = 0

        while self._running:
            try:
                async with self._build_client() as client:
                    reconnect_attempt = 0
                    await client.publish(self.lwt_topic, self.lwt_payload_online, qos=1, retain=True)
                    log.info(f"로컬 MQTT 브로커 연결됨: {self.broker_host}:{self.broker_port}")

                    while self._running:
                        await self._process_outbox(client)
                        await asyncio.sleep(self.poll_interval)
            except MqttError as e:
                reconnect_attempt += 1
                metrics.reconnects.labels(client="local").inc()
                log.error(f"로컬 MQTT 연결 오류, 재연결 시도 attempt:{reconnect_attempt} error:{e}")
                await exponential_backoff(reconnect_attempt, self.backoff_initial, self.backoff_max)

    async def _process_outbox(self, client: Client) -> None:
        """
        Outbox의 가장 오래된 이벤트를 발송합니다.

        브로커가 발송을 거부한 경우(MqttCodeError)에만 시도 횟수를 올립니다.
        """
        item = await self.outbox.peek_oldest()
        if not item:
            return

        # 최대 재시도 횟수 확인
        if item.attempts >= self.max_retries:
            log.warning(f"최대 재시도 횟수 초과, 항목 삭제: {item.id}")
            await self.outbox.delete(item.id)
            return

        # 연결 끊김(MqttError)은 start()로 전파되어 재연결. 항목은 그대로 유지
        try:
            await client.publish(
                item.topic,
                item.payload,
                qos=item.qos,
                retain=item.retain
            )
        except MqttCodeError as e:
            log.error(f"이벤트 발송 거부: id:{item.id} topic:{item.topic} error:{e}")
            metrics.publish_retries.labels(event_type=item.event_type).inc()
            await self.outbox.mark_attempt(item.id)
            await exponential_backoff(item.attempts + 1, self.backoff_initial, self.backoff_max)
            return

        await self.outbox.delete(item.id)
        metrics.events_published.labels(type=item.event_type).inc()
        log.info(f"이벤트 발송 성공: id:{item.id} topic:{item.topic}")

    async def enqueue_json(self, topic_suffix: str, payload_obj: dict,
                           qos: Optional[int] = None, retain: Optional[bool] = None,
                           event_type: str = "") -> int:
        """
        JSON 객체를 Outbox에 추가합니다.

        Args:
            topic_suffix: 토픽 접미사
            payload_obj: 발송할 JSON 객체
            qos: QoS 레벨 (None이면 기본값 사용)
            retain: retain 플래그 (None이면 기본값 사용)
            event_type: 이벤트 유형

        Returns:
            생성된 Outbox 항목의 ID
        """
        topic = f"{self.topic_prefix}/{topic_suffix}"
        payload = json.dumps(payload_obj, ensure_ascii=False).encode('utf-8')

        return await self.outbox.enqueue(
            topic,
            payload,
            self.qos_default if qos is None else qos,
            retain if retain is not None else self.retain_default,
            event_type=event_type
        )

    async def publish_event(self, session_id: str, event: SessionEvent) -> None:
        """세션 이벤트를 sessions/<session_id>/<type> 토픽으로 적재합니다."""
        payload = event.model_dump(mode="json")
        payload["session_id"] = session_id
        await self.enqueue_json(f"sessions/{session_id}/{event.type}", payload,
                                event_type=event.type)

    async def stop(self) -> None:
        """발송 워커를 중지합니다. 진행 중인 연결은 루프 종료와 함께 닫힙니다."""
        self._running = False
        log.info("로컬 MQTT 발송 워커 중지")
