# escape/main.py
import os, asyncio, signal
from typing import List, Optional
import uvicorn
from escape.settings import Settings
from escape.core.models import PointOfInterest
from escape.features.poi_loader import load_points_of_interest
from escape.features.session import SessionRegistry
from escape.adapters.memory.sink import InMemoryEventSink
from escape.adapters.mqtt_local.publisher_async import LocalMqttPublisher
from escape.adapters.storage.sqlite_outbox import SQLiteOutbox
from escape.observability.health import create_app
from escape.observability.logging_setup import setup_logging_dev, setup_logging_json, get_logger
from escape.orchestrators.orchestrator import Orchestrator

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def build_settings() -> Settings:
    s = Settings()
    # 플래그
    s.dry_run = _b("DRY_RUN", s.dry_run)

    # 근접/위험 구역
    s.proximity.radius_meters = float(os.getenv("PROXIMITY_RADIUS_M", s.proximity.radius_meters))
    s.proximity.nearby_radius_km = float(os.getenv("NEARBY_RADIUS_KM", s.proximity.nearby_radius_km))
    s.danger_zone.enabled = _b("DANGER_ZONES_ENABLED", s.danger_zone.enabled)

    # 좀비
    s.zombie.count = int(os.getenv("ZOMBIE_COUNT", s.zombie.count))
    s.zombie.hit_radius_meters = float(os.getenv("ZOMBIE_HIT_RADIUS_M", s.zombie.hit_radius_meters))
    s.zombie.tick_interval_sec = float(os.getenv("ZOMBIE_TICK_SEC", s.zombie.tick_interval_sec))

    # 대피소 데이터
    s.points.file_path = os.getenv("POINTS_FILE", s.points.file_path)

    # LOCAL MQTT
    s.local_mqtt.host  = os.getenv("LOCAL_MQTT_HOST", s.local_mqtt.host)
    s.local_mqtt.port  = int(os.getenv("LOCAL_MQTT_PORT", s.local_mqtt.port))
    s.local_mqtt.username = os.getenv("LOCAL_MQTT_USERNAME", s.local_mqtt.username)
    s.local_mqtt.password = os.getenv("LOCAL_MQTT_PASSWORD", s.local_mqtt.password)
    s.local_mqtt.client_id = os.getenv("LOCAL_MQTT_CLIENT_ID", s.local_mqtt.client_id)
    s.local_mqtt.tls = _b("LOCAL_MQTT_TLS", s.local_mqtt.tls)
    s.local_mqtt.topic_prefix = os.getenv("LOCAL_TOPIC_PREFIX", s.local_mqtt.topic_prefix)

    # 관측성
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = int(os.getenv("HTTP_PORT", s.observability.http_port))
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)
    s.observability.log_format = os.getenv("LOG_FORMAT", s.observability.log_format)

    # 신뢰성
    s.reliability.outbox_path = os.getenv("OUTBOX_PATH", s.reliability.outbox_path)
    s.reliability.publish_max_retries = int(os.getenv("PUBLISH_MAX_RETRIES", s.reliability.publish_max_retries))

    return s

def load_points(s: Settings) -> List[PointOfInterest]:
    log = get_logger()
    if not s.points.file_path:
        log.warning("POINTS_FILE 미설정, 세션별로 관심 지점을 주입해야 합니다")
        return []
    try:
        return load_points_of_interest(s.points.file_path)
    except (OSError, ValueError) as e:
        log.error(f"대피소 데이터 로드 실패 path:{s.points.file_path} error:{e}")
        return []

async def start_http(settings: Settings, orch: Orchestrator) -> asyncio.Task:
    app = create_app(settings, orch)
    return asyncio.create_task(uvicorn.Server(
        uvicorn.Config(app, host="0.0.0.0", port=settings.observability.http_port,
                       log_level=settings.observability.log_level.lower())
    ).serve())

async def main():
    s = build_settings()
    if s.observability.log_format == "json":
        setup_logging_json(level=s.observability.log_level)
    else:
        setup_logging_dev(level=s.observability.log_level)
    log = get_logger()
    log.info("설정 로드 완료")

    points = load_points(s)
    registry = SessionRegistry(s, points)

    publisher: Optional[LocalMqttPublisher] = None
    if s.dry_run:
        sink = InMemoryEventSink()
        log.info("DRY_RUN: 메모리 이벤트 싱크 사용")
    else:
        outbox = SQLiteOutbox(s.reliability.outbox_path); await outbox.init()
        publisher = LocalMqttPublisher(
            broker_host=s.local_mqtt.host,
            broker_port=s.local_mqtt.port,
            topic_prefix=s.local_mqtt.topic_prefix,
            outbox=outbox,
            username=s.local_mqtt.username,
            password=s.local_mqtt.password,
            tls=s.local_mqtt.tls,
            client_id=s.local_mqtt.client_id,
            keepalive=s.local_mqtt.keepalive,
            lwt_topic=s.local_mqtt.lwt_topic,
            qos_default=s.local_mqtt.qos,
            retain_default=s.local_mqtt.retain,
            backoff_initial=s.reliability.backoff_initial_sec,
            backoff_max=s.reliability.backoff_max_sec,
            max_retries=s.reliability.publish_max_retries,
        )
        sink = publisher
        log.info("로컬 MQTT 퍼블리셔 생성 완료")

    orch = Orchestrator(registry, sink, tick_interval_sec=s.zombie.tick_interval_sec)
    log.info("오케스트레이터 생성 완료")

    http_task = await start_http(s, orch)
    log.info(f"HTTP 서버 시작됨 port:{s.observability.http_port}")

    stop = asyncio.Future()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        try: loop.add_signal_handler(sig, lambda: (not stop.done()) and stop.set_result(True))
        except NotImplementedError: pass

    tasks = [asyncio.create_task(orch.start())]
    if publisher:
        tasks.append(asyncio.create_task(publisher.start()))

    await stop
    log.info("종료 신호 수신")
    await orch.stop()
    if publisher:
        await publisher.stop()
    for t in tasks + [http_task]:
        t.cancel()
    await asyncio.gather(*tasks, http_task, return_exceptions=True)

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
