"""
HTTP endpoints for floodcap observability.

This module implements health, readiness, metrics, and info endpoints
for monitoring and operational visibility.
"""

from typing import Optional
from fastapi import FastAPI, HTTPException
from fastapi.responses import Response, JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
import time
from floodcap.settings import Settings
from floodcap.ports.database import DatabasePort
from floodcap.core.errors import DatabaseError
from floodcap.observability.logging_setup import get_logger

log = get_logger("floodcap.observability")

def create_app(settings: Settings, database: Optional[DatabasePort] = None) -> FastAPI:
    """FastAPI 애플리케이션을 생성합니다."""
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="Flood reporting and CAP alert service"
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
        """레디니스 체크 엔드포인트 (DB 연결 확인)"""
        if database is not None:
            try:
                await database.query("SELECT 1 AS ok;", [])
            except DatabaseError as e:
                log.error(f"레디니스 체크 실패: {e}")
                return JSONResponse({
                    "status": "unavailable",
                    "service": settings.observability.service_name,
                    "timestamp": time.time()
                }, status_code=503)
        return JSONResponse({
            "status": "ready",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/metrics")
    async def metrics():
        """Prometheus 메트릭 엔드포인트"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")

        return Response(
            generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    @app.get("/info")
    async def info():
        """서비스 정보 엔드포인트"""
        uptime = time.time() - start_time
        return JSONResponse({
            "service": settings.observability.service_name,
            "instance": settings.instance,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level
        })

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
                "info": "/info"
            }
        })

    return app
