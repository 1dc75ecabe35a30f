from __future__ import annotations
import logging
import sys
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
    # uvicorn/aiosqlite 로거도 loguru로 흡수
    for noisy in ("uvicorn", "uvicorn.access", "uvicorn.error", "asyncio", "aiosqlite"):
        l = logging.getLogger(noisy)
        l.handlers = [InterceptHandler()]
        l.propagate = False

# ---- 개발 콘솔 포맷 (세션 컨텍스트가 있으면 함께 표시) ----
DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level:<7}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<cyan>{file}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

def _dev_format(record) -> str:
    if "session" in record["extra"]:
        return DEV_FORMAT + " <magenta>[session={extra[session]}]</magenta>\n{exception}"
    return DEV_FORMAT + "\n{exception}"

def setup_logging_dev(level: str = "INFO") -> None:
    """
    개발 콘솔 전용 loguru 초기화.
    - 콘솔 컬러 출력
    - stdlib logging 흡수
    """
    logger.remove()
    logger.configure(extra={"name": "escape"})
    logger.add(
        sink=sys.stdout,
        format=_dev_format,
        colorize=True,
        backtrace=True,
        diagnose=False,
        level=level.upper(),
        enqueue=False,
    )
    _hook_stdlib_logging()

def setup_logging_json(level: str = "INFO") -> None:
    """
    운영용 JSON 한 줄 로그 초기화 (로그 수집기 연동).
    extra(name, session 등)는 record.extra에 그대로 포함됩니다.
    """
    logger.remove()
    logger.configure(extra={"name": "escape"})
    logger.add(sink=sys.stdout, serialize=True, level=level.upper(), enqueue=True)
    _hook_stdlib_logging()

def get_logger(name: str = "escape", **ctx):
    """선택적으로 컨텍스트를 바인딩한 logger 반환."""
    return logger.bind(name=name, **ctx)

def with_context(**ctx):
    """컨텍스트 매니저로 일시 컨텍스트 부여."""
    return logger.contextualize(**ctx)
