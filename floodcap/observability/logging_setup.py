from __future__ import annotations
import logging
from loguru import logger

# ---- stdlib logging → loguru 인터셉트 ----
class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())

def _hook_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    # psycopg, uvicorn 로거도 loguru로 흡수
    for noisy in ("uvicorn", "uvicorn.access", "psycopg", "asyncio"):
        l = logging.getLogger(noisy)
        l.handlers = [InterceptHandler()]
        l.propagate = False

# ---- 개발 콘솔 포맷 ----
DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level:<7}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<cyan>{file}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

def setup_logging_dev(log_level: str = "INFO") -> None:
    """
    콘솔 전용 loguru 초기화.
    - 콘솔 컬러 출력
    - stdlib logging 흡수
    """
    logger.remove()  # 기본 sink 제거
    logger.configure(extra={"name": "floodcap"})
    logger.add(
        sink=lambda m: print(m, end=""),
        format=DEV_FORMAT,
        colorize=True,
        backtrace=True,
        diagnose=False,
        level=log_level.upper(),
        enqueue=False,
    )
    _hook_stdlib_logging()

def setup_logging_file(path: str, log_level: str = "INFO", rotation: str = "100 MB", retention: int = 10) -> None:
    """파일 sink 추가 (크기 기반 로테이션, 최대 보관 개수)."""
    logger.add(
        path,
        level=log_level.upper(),
        rotation=rotation,
        retention=retention,
        enqueue=True,
        serialize=True,
    )

def get_logger(name: str = "floodcap", **ctx):
    """선택적으로 컨텍스트를 바인딩한 logger 반환."""
    return logger.bind(name=name, **ctx)

def with_context(**ctx):
    """컨텍스트 매니저로 일시 컨텍스트 부여."""
    return logger.contextualize(**ctx)
