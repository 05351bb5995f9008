import sys
from pathlib import Path
from contextvars import ContextVar
from typing import Optional
from loguru import logger
from docstore.config import settings

# Trace id of the current logical operation (request, job, ...)
_current_trace_id: ContextVar[Optional[str]] = ContextVar("current_trace_id", default=None)


class LogConfig:
    """Global logging configuration using Loguru."""
    @classmethod
    def setup_logging(cls, log_dir: Optional[str] = None):
        log_path = Path(log_dir or settings.LOG_DIR)
        log_path.mkdir(parents=True, exist_ok=True)

        logger.remove()

        logger.add(
            sys.stdout,
            enqueue=True,
            backtrace=True,
            diagnose=settings.DEBUG,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<magenta>Trace:{extra[trace_id]}</magenta> - <level>{message}</level>"
            ),
            level=settings.LOG_LEVEL,
        )

        logger.add(
            log_path / "docstore_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="30 days",
            compression="zip",
            enqueue=True,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | Trace:{extra[trace_id]} - {message}",
            level="DEBUG",
        )

        logger.add(
            log_path / "error_{time:YYYY-MM-DD}.log",
            level="ERROR",
            rotation="100 MB",
            enqueue=True,
        )

        logger.configure(extra={"trace_id": "system"}, patcher=_patch_trace_id)


def bind_trace_id(trace_id: Optional[str]):
    """Set trace id for the current context; returns token for reset_trace_id."""
    return _current_trace_id.set(trace_id)


def reset_trace_id(token) -> None:
    _current_trace_id.reset(token)


def _patch_trace_id(record) -> None:
    """Resolve trace_id when the record is emitted, not when the logger is bound."""
    extra = record["extra"]
    if extra.get("trace_pinned"):
        return
    current_trace_id = _current_trace_id.get()
    if current_trace_id is not None:
        extra["trace_id"] = current_trace_id
    else:
        extra.setdefault("trace_id", "unknown")


logger.configure(patcher=_patch_trace_id)


def get_logger(name: str = None, trace_id: Optional[str] = None):
    """Get logger instance; trace_id pins the id, else the context one is used per call."""
    bound = {"trace_id": trace_id, "trace_pinned": True} if trace_id else {}

    if name:
        return logger.bind(name=name, **bound)
    else:
        return logger.bind(**bound)
