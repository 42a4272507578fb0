"""
Общие фикстуры.

Парсер и обработчик гоняем на настоящем asyncio.StreamReader,
в который заранее скормлены байты, и на фейковом writer'е.
"""
import asyncio
from typing import List

import pytest


class RecordingWriter:
    """
    Фейковый StreamWriter.

    events — общий журнал с ридером, чтобы проверять порядок
    "прочитали запрос -> записали -> drain -> читаем дальше".
    """

    def __init__(self, events: List[str] = None):
        self.events = events if events is not None else []
        self.chunks: List[bytes] = []
        self.closed = False
        self.drained = 0

    def write(self, data: bytes) -> None:
        self.chunks.append(data)
        self.events.append("write")

    async def drain(self) -> None:
        self.drained += 1
        self.events.append("drain")

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        pass

    def get_extra_info(self, name):
        return ("127.0.0.1", 50000) if name == "peername" else None

    @property
    def data(self) -> bytes:
        return b"".join(self.chunks)


class RecordingReader:
    """Обёртка над StreamReader, пишет в журнал каждое чтение."""

    def __init__(self, reader: asyncio.StreamReader, events: List[str]):
        self._reader = reader
        self.events = events

    async def readline(self) -> bytes:
        self.events.append("readline")
        return await self._reader.readline()

    async def readexactly(self, n: int) -> bytes:
        self.events.append("readexactly")
        return await self._reader.readexactly(n)


@pytest.fixture
def make_reader():
    """Фабрика StreamReader'ов с готовыми данными и EOF в конце."""
    def _make(data: bytes, eof: bool = True, limit: int = 2 ** 16) -> asyncio.StreamReader:
        reader = asyncio.StreamReader(limit=limit)
        reader.feed_data(data)
        if eof:
            reader.feed_eof()
        return reader
    return _make


@pytest.fixture
def writer() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture
def recorded_stream(make_reader):
    """Пара reader/writer с общим журналом событий."""
    def _make(data: bytes):
        events: List[str] = []
        return RecordingReader(make_reader(data), events), RecordingWriter(events)
    return _make
