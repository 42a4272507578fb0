"""
Утилиты для работы с таймаутами.

asyncio.wait_for() кидает asyncio.TimeoutError без деталей,
тут мы оборачиваем его с нормальным сообщением.

Сам парсер про таймауты ничего не знает — сервер подсовывает ему
TimedReader/TimedWriter вместо голых стримов.
"""
import asyncio
from typing import TypeVar, Coroutine, Any, Optional

T = TypeVar("T")


async def with_timeout(
    coro: Coroutine[Any, Any, T],
    timeout: Optional[float],
    operation: str = ""
) -> T:
    """
    Обёртка над wait_for с понятной ошибкой.

    Вместо голого TimeoutError получаем:
    "Timeout during reading request line after 15.0s"

    timeout None или 0 — ждём сколько угодно.
    """
    if not timeout:
        return await coro
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except asyncio.TimeoutError:
        raise TimeoutError(f"Timeout during {operation} after {timeout}s")


class TimedReader:
    """
    StreamReader с таймаутом на каждую операцию.

    Таймаут на одно чтение, а не на весь запрос:
    медленный, но живой клиент не отваливается.
    """

    def __init__(self, reader: asyncio.StreamReader, timeout: Optional[float]):
        self._reader = reader
        self._timeout = timeout

    async def readline(self) -> bytes:
        return await with_timeout(self._reader.readline(), self._timeout, "reading line")

    async def readexactly(self, n: int) -> bytes:
        return await with_timeout(self._reader.readexactly(n), self._timeout, "reading body")


class TimedWriter:
    """StreamWriter, у которого drain() ограничен по времени."""

    def __init__(self, writer: asyncio.StreamWriter, timeout: Optional[float]):
        self._writer = writer
        self._timeout = timeout

    def write(self, data: bytes) -> None:
        self._writer.write(data)

    async def drain(self) -> None:
        await with_timeout(self._writer.drain(), self._timeout, "writing response")
