"""
HTTP endpoints for the escape mission engine.

This module implements health, readiness, metrics and info endpoints
for operational visibility, plus the session command endpoints that
feed locations and mission commands into the orchestrator.
"""

import time
from typing import Any, Dict, List, Optional
from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel
from escape.common.geo import validate_coordinates
from escape.core.events import SessionEvent
from escape.core.mission import InvalidTransitionError
from escape.core.models import Coordinate, GameMode, MissionState
from escape.core.normalize import to_mission, to_point_of_interest
from escape.orchestrators.orchestrator import Orchestrator
from escape.settings import Settings
from escape.observability.logging_setup import get_logger

log = get_logger("escape.http")

class LocationPayload(BaseModel):
    latitude: float
    longitude: float

class MissionRequestPayload(BaseModel):
    game_mode: Optional[GameMode] = None

class MissionPayload(BaseModel):
    mission: Dict[str, Any]
    origin: Optional[LocationPayload] = None

def _dump(events: List[SessionEvent]) -> List[dict]:
    return [e.model_dump(mode="json") for e in events]

def create_app(settings: Settings, orchestrator: Orchestrator) -> FastAPI:
    """FastAPI 애플리케이션을 생성합니다."""
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="Escape mission engine"
    )

    start_time = time.time()

    @app.get("/health")
    async def health():
        """헬스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        """레디니스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ready",
            "service": settings.observability.service_name,
            "sessions": len(orchestrator.registry),
            "points": len(orchestrator.registry.default_points),
            "timestamp": time.time()
        })

    @app.get("/metrics")
    async def metrics():
        """Prometheus 메트릭 엔드포인트"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/info")
    async def info():
        """서비스 정보 엔드포인트"""
        uptime = time.time() - start_time
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "dry_run": settings.dry_run
        })

    # ---- 세션 엔드포인트 ----

    @app.get("/sessions/{session_id}")
    async def get_session(session_id: str):
        session = orchestrator.registry.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Unknown session")
        return session.snapshot()

    @app.delete("/sessions/{session_id}")
    async def delete_session(session_id: str):
        if not orchestrator.drop_session(session_id):
            raise HTTPException(status_code=404, detail="Unknown session")
        return {"ok": True}

    @app.get("/sessions/{session_id}/points")
    async def nearby_points(session_id: str):
        """마지막 위치 주변의 후보 관심 지점"""
        session = orchestrator.registry.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Unknown session")
        return {"points": [p.model_dump(mode="json") for p in session.nearby_points()]}

    @app.post("/sessions/{session_id}/points")
    async def set_points(session_id: str, payload: List[Dict[str, Any]] = Body(...)):
        """세션의 후보 관심 지점을 교체합니다."""
        try:
            points = [to_point_of_interest(raw) for raw in payload]
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

        orchestrator.session(session_id).set_points(points)
        return {"ok": True, "count": len(points)}

    @app.post("/sessions/{session_id}/mission/request")
    async def request_mission(session_id: str,
                              payload: Optional[MissionRequestPayload] = None):
        session = orchestrator.session(session_id)
        # 게임 모드는 미션이 없을 때만 변경 가능
        if payload is not None and payload.game_mode is not None \
                and session.state == MissionState.NO_MISSION:
            session.game_mode = payload.game_mode
        return await _run(orchestrator.request_mission(session_id))

    @app.post("/sessions/{session_id}/mission")
    async def receive_mission(session_id: str, payload: MissionPayload):
        try:
            mission = to_mission(payload.mission)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

        origin = None
        if payload.origin is not None:
            origin = Coordinate(latitude=payload.origin.latitude, longitude=payload.origin.longitude)
        return await _run(orchestrator.receive_mission(session_id, mission, origin))

    @app.post("/sessions/{session_id}/mission/cancel")
    async def cancel_mission(session_id: str):
        return await _run(orchestrator.cancel_mission(session_id))

    @app.post("/sessions/{session_id}/mission/reset")
    async def reset_mission(session_id: str):
        return await _run(orchestrator.reset_mission(session_id))

    @app.post("/sessions/{session_id}/location")
    async def submit_location(session_id: str, payload: LocationPayload):
        if not validate_coordinates(payload.latitude, payload.longitude):
            raise HTTPException(status_code=422, detail="Coordinates out of range")
        location = Coordinate(latitude=payload.latitude, longitude=payload.longitude)
        events = await orchestrator.submit_location(session_id, location)
        return {"events": _dump(events)}

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info",
                "session": "/sessions/{session_id}",
                "location": "/sessions/{session_id}/location"
            }
        })

    return app

async def _run(command) -> dict:
    try:
        events = await command
    except InvalidTransitionError as e:
        log.warning(f"잘못된 미션 명령: {e}")
        raise HTTPException(status_code=409, detail={
            "error": "invalid_transition",
            "from_state": e.from_state.value,
            "attempted": e.attempted
        })
    return {"events": _dump(events)}
