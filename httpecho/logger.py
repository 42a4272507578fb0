"""
Настройка логирования с поддержкой trace_id.

Каждое соединение получает уникальный trace_id, который автоматически
добавляется во все логи через ContextVar + Filter.
"""
import logging
import time
import uuid
from contextvars import ContextVar
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

# trace_id хранится в contextvars — у каждой корутины-соединения свой
trace_id_var: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)


def generate_trace_id() -> str:
    """
    Генерирует короткий trace_id.

    Берём первые 8 символов UUID — достаточно для отладки,
    не захламляет логи.
    """
    return uuid.uuid4().hex[:8]


def get_trace_id() -> Optional[str]:
    """Текущий trace_id или None."""
    return trace_id_var.get()


def set_trace_id(trace_id: str) -> None:
    """Устанавливает trace_id для текущего контекста."""
    trace_id_var.set(trace_id)


class TraceIdFilter(logging.Filter):
    """
    Добавляет trace_id в каждую запись лога.

    Если trace_id не установлен — ставит "-".
    """
    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = trace_id_var.get() or "-"
        return True


@dataclass
class ConnectionLog:
    """
    Данные для лога соединения.

    Заполняется по ходу обработки и выводится в finally.
    """
    trace_id: str
    peer: str
    requests: int = 0
    duration_ms: float = 0
    error: str = ""


def setup_logger(level: str = "info") -> logging.Logger:
    """
    Настраивает логгер "httpecho".

    Формат: 2025-01-15 12:30:45 | INFO | [abc12345] message
    """
    logger = logging.getLogger("httpecho")
    logger.setLevel(getattr(logging, level.upper()))

    # чистим старые хэндлеры если есть (при перезапуске)
    logger.handlers.clear()

    handler = logging.StreamHandler()

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | [%(trace_id)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    handler.setFormatter(formatter)
    handler.addFilter(TraceIdFilter())
    logger.addHandler(handler)
    return logger


@contextmanager
def log_connection(logger: logging.Logger, peer: str):
    """
    Контекст для измерения времени жизни соединения.

    Использование:
        with log_connection(logger, "127.0.0.1:50000") as log:
            log.requests = await serve_connection(reader, writer)
        # автоматически залогирует с duration
    """
    log = ConnectionLog(trace_id=get_trace_id() or "-", peer=peer)
    start = time.perf_counter()

    try:
        yield log
    finally:
        log.duration_ms = (time.perf_counter() - start) * 1000
        outcome = f"error: {log.error}" if log.error else "closed"
        logger.info(
            f"{log.peer} | {log.requests} requests | "
            f"{outcome} | {log.duration_ms:.2f}ms"
        )
