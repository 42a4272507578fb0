"""
Простые счётчики метрик.

Живут на уровне сервера: сам обработчик соединения
ничего общего между соединениями не трогает.
"""
import asyncio
from dataclasses import dataclass, field


@dataclass
class Metrics:
    """
    In-memory счётчики.

    Lock нужен потому что инкременты идут из разных корутин
    и между ними бывают await'ы.
    """
    total_connections: int = 0
    active_connections: int = 0
    failed_connections: int = 0
    total_requests: int = 0
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    async def connection_opened(self) -> None:
        async with self._lock:
            self.total_connections += 1
            self.active_connections += 1

    async def connection_closed(self, requests: int, failed: bool = False) -> None:
        """Вызывается ровно один раз на соединение, в finally."""
        async with self._lock:
            self.active_connections -= 1
            self.total_requests += requests
            if failed:
                self.failed_connections += 1

    def snapshot(self) -> dict:
        """
        Снимок метрик для вывода.

        Не под локом — может быть слегка неконсистентным,
        но для метрик это ок.
        """
        return {
            "total_connections": self.total_connections,
            "active_connections": self.active_connections,
            "failed_connections": self.failed_connections,
            "total_requests": self.total_requests,
        }
