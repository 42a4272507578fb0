"""
Обработка клиентского соединения.

Главная логика сервера:
- парсим запрос (request line, headers, body)
- отвечаем эхом метода и пути
- повторяем, пока клиент не закроет соединение
- на любой ошибке разрываем соединение без HTTP-ответа
"""
import asyncio
import logging
from typing import Callable, Optional

from httpecho.config import TimeoutConfig
from httpecho.logger import generate_trace_id, log_connection, set_trace_id
from httpecho.metrics import Metrics
from httpecho.timeouts import TimedReader, TimedWriter
from httpecho.utils.http import build_response, parse_request

logger = logging.getLogger("httpecho")


async def serve_connection(
    reader,
    writer,
    on_response: Optional[Callable[[], None]] = None,
) -> int:
    """
    Цикл keep-alive на одном соединении.

    reader — что угодно с readline()/readexactly(), writer — с write()/drain().
    Строго по очереди: прочитали запрос -> записали ответ -> drain()
    -> только потом читаем следующую request line.

    on_response() дёргается после каждого отправленного ответа.
    Возвращает сколько ответов отправлено. Ошибки не ловим —
    соединение принадлежит вызывающему, он и закрывает.
    """
    served = 0
    while True:
        request = await parse_request(reader)
        if request is None:
            return served

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"{request!r}")

        writer.write(build_response(request))
        await writer.drain()
        served += 1
        if on_response is not None:
            on_response()


async def handle_client(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    timeouts: TimeoutConfig,
    metrics: Metrics,
) -> None:
    """
    Обёртка над serve_connection для сервера.

    Навешивает trace_id и таймауты, логирует итог,
    всегда закрывает соединение.
    """
    set_trace_id(generate_trace_id())
    peername = writer.get_extra_info("peername")
    peer = f"{peername[0]}:{peername[1]}" if peername else "unknown"

    await metrics.connection_opened()
    failed = False

    with log_connection(logger, peer) as log:

        def count_response() -> None:
            log.requests += 1

        try:
            await serve_connection(
                TimedReader(reader, timeouts.read),
                TimedWriter(writer, timeouts.write),
                on_response=count_response,
            )
        except ValueError as e:
            # BadRequestError или слишком длинная строка из StreamReader
            failed = True
            log.error = f"bad request: {e}"
            logger.warning(f"[{peer}] Bad request: {e}")
        except TimeoutError as e:
            # ловим раньше OSError — TimeoutError его подкласс
            failed = True
            log.error = str(e)
            logger.warning(f"[{peer}] Timeout: {e}")
        except OSError as e:
            failed = True
            log.error = f"connection error: {e}"
            logger.warning(f"[{peer}] Connection error: {e}")
        except Exception as e:
            failed = True
            log.error = f"unexpected: {e}"
            logger.exception(f"[{peer}] Unexpected error: {e}")
        finally:
            await metrics.connection_closed(log.requests, failed)
            # всегда закрываем соединение с клиентом
            try:
                writer.close()
                await writer.wait_closed()
            except OSError:
                pass  # клиент мог уже отвалиться
