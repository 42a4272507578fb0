"""
Минимальный HTTP/1.x парсер.

Только то что нужно для эхо-ответа:
- request line
- headers (с повторами)
- тело, если есть Content-Length

Chunked не поддерживаем — Transfer-Encoding просто игнорируется.
"""
import asyncio
import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class BadRequestError(ValueError):
    """Запрос не удалось распарсить — соединение дальше не читаем."""


class Method(Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    CONNECT = "CONNECT"
    TRACE = "TRACE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, token: str) -> "Method":
        """
        Точное сравнение с учётом регистра.

        "get" или "FOO" -> UNKNOWN, это не ошибка.
        """
        try:
            return cls(token)
        except ValueError:
            return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value


@dataclass
class HttpRequest:
    """
    Распарсенный HTTP-запрос.

    Заголовки храним как есть (регистр не трогаем),
    повторяющиеся имена копятся в список в порядке прихода.
    body is None — заголовка Content-Length не было вообще.
    """
    method: Method
    path: str         # /api/users?id=1, без валидации
    version: str      # HTTP/1.1
    headers: Dict[str, List[str]] = field(default_factory=dict)
    body: Optional[bytes] = None

    def get_header(self, name: str) -> Optional[str]:
        """Первое значение заголовка или None."""
        values = self.headers.get(name)
        return values[0] if values else None

    @property
    def content_length(self) -> Optional[int]:
        """
        Длина тела или None если не указано.

        Ищем ровно "Content-Length" — "content-length" телом не считается.
        """
        value = self.get_header("Content-Length")
        if value is None:
            return None
        return parse_content_length(value)


# "+5" допустим, "-5", "5.0", "0x10", " 5" — нет
_CONTENT_LENGTH_RE = re.compile(r"\+?[0-9]+")


def parse_content_length(value: str) -> int:
    """Неотрицательное целое, иначе BadRequestError."""
    if not _CONTENT_LENGTH_RE.fullmatch(value):
        raise BadRequestError(f"Invalid Content-Length: {value!r}")
    # цифр не больше, чем у sys.maxsize, иначе int() даже не вызываем
    digits = value.lstrip("+").lstrip("0")
    if len(digits) > len(str(sys.maxsize)) or int(value) > sys.maxsize:
        raise BadRequestError(f"Content-Length too large: {value!r}")
    return int(value)


def _decode(raw: bytes) -> str:
    # latin-1 — каждый байт в символ, обратно кодируется один в один
    return raw.decode("latin-1")


async def read_request_line(reader: asyncio.StreamReader) -> Optional[tuple]:
    """
    Читает первую строку: GET /path HTTP/1.1

    None — клиент закрыл соединение между запросами.
    """
    line = await reader.readline()
    if not line:
        return None

    # split() на bytes режет только по ASCII-пробелам
    parts = line.strip().split()
    if len(parts) != 3:
        raise BadRequestError(f"Malformed request line: {line!r}")

    method, path, version = (_decode(p) for p in parts)
    return Method.parse(method), path, version


async def read_headers(
    reader: asyncio.StreamReader,
) -> Optional[Dict[str, List[str]]]:
    """
    Читает заголовки до пустой строки.

    None — соединение закрылось посреди заголовков,
    недочитанный запрос выбрасываем.
    """
    headers: Dict[str, List[str]] = {}
    while True:
        line = await reader.readline()
        if not line:
            return None

        line = line.strip()
        if not line:
            return headers

        # строки без ":" молча пропускаем
        name, sep, value = line.partition(b":")
        if not sep:
            continue
        headers.setdefault(_decode(name.strip()), []).append(_decode(value.strip()))


async def read_body(reader: asyncio.StreamReader, length: int) -> bytes:
    """Читает ровно length байт, обрыв посередине — ошибка."""
    try:
        return await reader.readexactly(length)
    except asyncio.IncompleteReadError as e:
        raise ConnectionError(
            f"Client disconnected while sending body "
            f"({len(e.partial)} of {length} bytes)"
        ) from e


async def parse_request(reader: asyncio.StreamReader) -> Optional[HttpRequest]:
    """
    Парсит один запрос целиком из потока.

    Формат HTTP/1.1:
    POST /path HTTP/1.1\r\n
    Content-Length: 5\r\n
    \r\n
    hello

    None — чистый конец потока (до или внутри заголовков).
    Тело читается только если есть Content-Length,
    иначе байты после пустой строки остаются в reader'е
    как начало следующего запроса.
    """
    request_line = await read_request_line(reader)
    if request_line is None:
        return None
    method, path, version = request_line

    headers = await read_headers(reader)
    if headers is None:
        return None

    request = HttpRequest(method, path, version, headers)

    length = request.content_length
    if length is not None:
        request.body = await read_body(reader, length)

    return request


def build_response(request: HttpRequest) -> bytes:
    """
    Фиксированный ответ: эхо метода и пути.

    HTTP/1.1 200 OK\r\n
    Content-Type: text/plain\r\n
    Content-Length: 11\r\n
    \r\n
    GET /hello\n
    """
    body = f"{request.method.value} {request.path}\n".encode("latin-1")
    head = (
        "HTTP/1.1 200 OK\r\n"
        "Content-Type: text/plain\r\n"
        f"Content-Length: {len(body)}\r\n"
        "\r\n"
    )
    return head.encode("latin-1") + body
