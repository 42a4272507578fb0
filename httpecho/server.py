"""
TCP-сервер для приёма клиентских соединений.

Использует asyncio.start_server() — низкоуровневый, но простой API.
Каждое соединение обрабатывается в отдельной корутине,
общего изменяемого состояния между ними нет (кроме счётчиков метрик).
"""
import asyncio
import logging
from typing import Optional, Set

from httpecho.client_handler import handle_client
from httpecho.config import ServerConfig
from httpecho.metrics import Metrics

logger = logging.getLogger("httpecho")


class EchoServer:
    """
    Основной класс сервера.

    Принимает TCP-соединения и делегирует обработку в handle_client().
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self.metrics = Metrics()
        self._server: Optional[asyncio.Server] = None
        # задачи живых соединений — при stop() их надо снять вручную
        self._connections: Set[asyncio.Task] = set()

    async def listen(self) -> None:
        """
        Открывает сокет и начинает принимать соединения.

        Для каждого нового соединения вызывается _handle_client_wrapper.
        """
        self._server = await asyncio.start_server(
            self._handle_client_wrapper,
            self.config.listen_host,
            self.config.listen_port,
            limit=self.config.max_line_bytes,
        )
        logger.info(f"Echo server started on {self.config.listen_host}:{self.port}")

    async def start(self) -> None:
        """Запуск сервера. Блокирует до stop()."""
        await self.listen()

        # serve_forever() блокирует до вызова close()
        async with self._server:
            await self._server.serve_forever()

    async def stop(self) -> None:
        """
        Остановка: закрываем слушающий сокет и снимаем живые соединения.

        С 3.12 wait_closed() ждёт все соединения, а keep-alive клиент
        без таймаутов может молчать сколько угодно.
        """
        if self._server:
            logger.info("Stopping echo server...")
            self._server.close()

            tasks = list(self._connections)
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

            await self._server.wait_closed()
            logger.info(f"Echo server stopped, metrics: {self.metrics.snapshot()}")

    @property
    def port(self) -> int:
        """Реальный порт — нужен когда в конфиге 0."""
        if self._server and self._server.sockets:
            return self._server.sockets[0].getsockname()[1]
        return self.config.listen_port

    async def _handle_client_wrapper(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        task = asyncio.current_task()
        self._connections.add(task)
        try:
            await handle_client(reader, writer, self.config.timeouts, self.metrics)
        finally:
            self._connections.discard(task)

    @property
    def active_connections(self) -> int:
        """Для метрик и отладки."""
        return self.metrics.active_connections
