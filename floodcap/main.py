# floodcap/main.py
import os, asyncio, signal
from typing import Optional
import uvicorn
from floodcap.settings import Settings
from floodcap.observability.health import create_app
from floodcap.observability.logging_setup import setup_logging_dev, setup_logging_file, get_logger
from floodcap.adapters.postgres import PostgresDatabase
from floodcap.core.cap import CapTransformer
from floodcap.service import FloodService

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def _pg_dsn(default: str) -> str:
    # DATABASE_URL 우선, 없으면 RDS_* / DB_* 환경 변수로 조합
    if os.getenv("DATABASE_URL"):
        return os.environ["DATABASE_URL"]
    if os.getenv("RDS_HOSTNAME"):
        return (
            f"postgresql://{os.getenv('RDS_USERNAME', 'postgres')}:{os.getenv('DB_PASSWORD', '')}"
            f"@{os.environ['RDS_HOSTNAME']}:{os.getenv('RDS_PORT', '5432')}/{os.getenv('DB_NAME', 'cognicity')}"
        )
    return default

def build_settings() -> Settings:
    s = Settings()
    s.instance = os.getenv("INSTANCE", s.instance)

    # POSTGRES
    s.pg.dsn = _pg_dsn(s.pg.dsn)
    s.pg.connect_timeout_sec = int(os.getenv("PG_CONNECT_TIMEOUT", s.pg.connect_timeout_sec))
    s.pg.reconnection_delay_sec = float(os.getenv("PG_RECONNECTION_DELAY", s.pg.reconnection_delay_sec))
    s.pg.reconnection_attempts = int(os.getenv("PG_RECONNECTION_ATTEMPTS", s.pg.reconnection_attempts))
    s.pg.tbl_reports = os.getenv("PG_TBL_REPORTS", s.pg.tbl_reports)
    s.pg.tbl_reports_unconfirmed = os.getenv("PG_TBL_REPORTS_UNCONFIRMED", s.pg.tbl_reports_unconfirmed)

    # CAP
    s.cap.timezone = os.getenv("CAP_TIMEZONE", s.cap.timezone)
    s.cap.feed_id = os.getenv("CAP_FEED_ID", s.cap.feed_id)
    s.cap.feed_title = os.getenv("CAP_FEED_TITLE", s.cap.feed_title)
    s.cap.entry_base_url = os.getenv("CAP_ENTRY_BASE_URL", s.cap.entry_base_url)
    s.cap.identifier_style = os.getenv("CAP_IDENTIFIER_STYLE", s.cap.identifier_style)

    # 관측성
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = int(os.getenv("PORT", s.observability.http_port))
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)

    # 검증 (잘못된 값이면 ValidationError)
    return Settings.model_validate(s.model_dump())

def build_service(s: Settings) -> FloodService:
    database = PostgresDatabase(
        s.pg.dsn,
        logger=get_logger("floodcap.db"),
        connect_timeout=s.pg.connect_timeout_sec,
        reconnection_attempts=s.pg.reconnection_attempts,
        reconnection_base_delay=s.pg.reconnection_delay_sec,
        reconnection_max_delay=s.pg.reconnection_delay_sec,
    )
    cap = CapTransformer(get_logger("floodcap.cap"), s.cap)
    return FloodService(s, database, logger=get_logger("floodcap.service"), cap=cap)

async def start_http(settings: Settings, service: FloodService) -> Optional[asyncio.Task]:
    app = create_app(settings, service.database)
    return asyncio.create_task(uvicorn.Server(
        uvicorn.Config(app, host="0.0.0.0", port=settings.observability.http_port, log_level="info")
    ).serve())

async def main():
    s = build_settings()
    setup_logging_dev(log_level=s.observability.log_level)
    log_dir = os.getenv("LOG_DIRECTORY")
    if log_dir:
        setup_logging_file(os.path.join(log_dir, f"{s.instance}.log"), s.observability.log_level)
    log = get_logger("floodcap")
    log.info(f"설정 로드 완료: instance={s.instance}")

    service = build_service(s)
    log.info("침수 데이터 서비스 생성 완료")

    http_task = await start_http(s, service)
    log.info(f"HTTP 서버 시작됨 port:{s.observability.http_port}")

    stop = asyncio.Future()
    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try: loop.add_signal_handler(sig, lambda: (not stop.done()) and stop.set_result(True))
            except NotImplementedError: pass
    except RuntimeError: pass

    await stop
    http_task.cancel()

if __name__ == "__main__":
    asyncio.run(main())
