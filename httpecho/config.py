"""
Конфигурация эхо-сервера.

Все настройки описаны как dataclasses — это проще Pydantic
и не тянет лишние зависимости.
"""
from dataclasses import dataclass, field
from typing import Optional
import yaml

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 4567
# лимит StreamReader на одну строку; у asyncio по умолчанию 64 KiB
DEFAULT_MAX_LINE_BYTES = 1024 * 1024


@dataclass
class TimeoutConfig:
    """
    Таймауты на операции с клиентским сокетом.

    Храним в миллисекундах (так удобнее в конфиге),
    но properties возвращают секунды для asyncio.wait_for().
    0 — таймаута нет, зависший клиент держит свой хэндлер сколько угодно.
    """
    read_ms: int = 0
    write_ms: int = 0

    @property
    def read(self) -> Optional[float]:
        return self.read_ms / 1000 if self.read_ms > 0 else None

    @property
    def write(self) -> Optional[float]:
        return self.write_ms / 1000 if self.write_ms > 0 else None


@dataclass
class ServerConfig:
    """
    Корневой конфиг приложения.

    Можно создать через from_yaml() или default() для разработки.
    """
    listen_host: str = DEFAULT_HOST
    listen_port: int = DEFAULT_PORT
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    max_line_bytes: int = DEFAULT_MAX_LINE_BYTES
    log_level: str = "info"

    @property
    def address(self) -> str:
        return f"{self.listen_host}:{self.listen_port}"

    @classmethod
    def from_yaml(cls, path: str) -> "ServerConfig":
        """
        Парсит YAML-конфиг.

        listen: "127.0.0.1:4567"
        timeouts:
          read_ms: 15000
          write_ms: 15000
        limits:
          max_line_bytes: 1048576
        logging:
          level: debug
        """
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        # listen может быть "127.0.0.1:4567" или просто "0.0.0.0"
        listen = str(data.get("listen", f"{DEFAULT_HOST}:{DEFAULT_PORT}"))
        if ":" in listen:
            host, port = listen.rsplit(":", 1)  # rsplit на случай IPv6
            listen_host = host
            listen_port = int(port)
        else:
            listen_host = listen
            listen_port = DEFAULT_PORT

        timeouts_data = data.get("timeouts") or {}
        timeouts = TimeoutConfig(
            read_ms=timeouts_data.get("read_ms", 0),
            write_ms=timeouts_data.get("write_ms", 0),
        )

        return cls(
            listen_host=listen_host,
            listen_port=listen_port,
            timeouts=timeouts,
            max_line_bytes=(data.get("limits") or {}).get(
                "max_line_bytes", DEFAULT_MAX_LINE_BYTES
            ),
            log_level=(data.get("logging") or {}).get("level", "info"),
        )

    @classmethod
    def default(cls) -> "ServerConfig":
        """Дефолтный конфиг: loopback, порт 4567, без таймаутов."""
        return cls()
