#!/usr/bin/env python3
"""
Точка входа для асинхронного HTTP эхо-сервера.

Запуск:
    python -m httpecho.main
    python -m httpecho.main --config config.yaml
"""
import argparse
import asyncio
import logging
import signal
from pathlib import Path
from typing import List, Optional

from httpecho.config import DEFAULT_HOST, DEFAULT_PORT, ServerConfig
from httpecho.server import EchoServer
from httpecho.logger import setup_logger


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Async HTTP/1.x Echo Server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="Path to YAML config file",
    )
    parser.add_argument(
        "-H", "--host",
        type=str,
        default=DEFAULT_HOST,
        help="Listen host",
    )
    parser.add_argument(
        "-p", "--port",
        type=int,
        default=DEFAULT_PORT,
        help="Listen port",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging level",
    )
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> ServerConfig:
    """Загружает конфигурацию из файла или собирает из аргументов."""
    if args.config and Path(args.config).exists():
        return ServerConfig.from_yaml(args.config)

    config = ServerConfig.default()
    config.listen_host = args.host
    config.listen_port = args.port
    config.log_level = args.log_level
    return config


async def shutdown(server: EchoServer, sig: signal.Signals) -> None:
    """Graceful shutdown при получении сигнала."""
    logging.getLogger("httpecho").info(f"Received {sig.name}, shutting down...")
    await server.stop()

    # Отменяем все активные задачи
    tasks = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
    for task in tasks:
        task.cancel()

    await asyncio.gather(*tasks, return_exceptions=True)


async def main() -> None:
    args = parse_args()

    config = load_config(args)

    # уровень из конфига, если он был — иначе из аргументов
    setup_logger(config.log_level)
    logger = logging.getLogger("httpecho")
    logger.debug(f"Config loaded: {config}")

    server = EchoServer(config)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda s=sig: asyncio.create_task(shutdown(server, s)),
        )

    try:
        await server.start()
    except asyncio.CancelledError:
        logger.info("Server shutdown complete")


def run() -> None:
    """Для console_scripts."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
