#!/usr/bin/env python3
# main.py
"""
Главная точка входа CashLink.
Запускает HTTP API движка расчётов или применяет схему БД.
"""

from __future__ import annotations

import asyncio
import sys

from cashlink.config import settings
from cashlink.common.logger import setup_logging, log_info, log_error
from cashlink.common.constants import TypeMsg
from cashlink.infra.database import init_db, close_db

MODES = ("api", "init_db")


async def run_api() -> None:
    """Запускает HTTP API. Инфраструктуру подключает lifespan приложения."""
    import uvicorn

    await log_info(
        f"Запуск CashLink API на {settings.deployment.API_HOST}:{settings.deployment.API_PORT}...",
        type_msg=TypeMsg.INFO
    )

    config = uvicorn.Config(
        "cashlink.api.app:create_app",
        factory=True,
        host=settings.deployment.API_HOST,
        port=settings.deployment.API_PORT,
        reload=False,
        log_level="debug" if settings.system.DEBUG else "info",
    )

    server = uvicorn.Server(config)
    try:
        await server.serve()
    except asyncio.CancelledError:
        await log_info("CashLink API: graceful shutdown", type_msg=TypeMsg.DEBUG)
        await server.shutdown()


async def run_init_db() -> None:
    """Подключается к PostgreSQL и применяет migrations/init.sql."""
    try:
        await init_db()
    finally:
        await close_db()


async def main(mode: str = "api") -> None:
    """
    Главная функция запуска.

    Args:
        mode: Режим запуска (api, init_db)
    """
    setup_logging()

    await log_info(
        f"CashLink v{settings.system.VERSION}: запуск в режиме '{mode}'",
        type_msg=TypeMsg.INFO
    )

    try:
        if mode == "api":
            await run_api()
        elif mode == "init_db":
            await run_init_db()
        else:
            await log_error(f"Неизвестный режим: {mode}")
    except asyncio.CancelledError:
        await log_info("Задача отменена, выполняется graceful shutdown", type_msg=TypeMsg.INFO)
    except Exception as e:
        await log_error(f"Критическая ошибка: {e}")
        raise
    finally:
        await log_info("Приложение остановлено", type_msg=TypeMsg.INFO)


def print_usage() -> None:
    """Выводит справку по использованию."""
    print("""
CashLink: движок двусторонних запросов и расчётов

Использование:
    python main.py [mode]

Режимы:
    api        HTTP API (по умолчанию)
    init_db    применить схему БД (migrations/init.sql)
    """)


if __name__ == "__main__":
    mode = "api"

    if len(sys.argv) > 1:
        arg = sys.argv[1].lower()
        if arg in ("--help", "-h"):
            print_usage()
            sys.exit(0)
        elif arg in MODES:
            mode = arg
        else:
            print(f"Неизвестный режим: {arg}")
            print_usage()
            sys.exit(1)

    try:
        asyncio.run(main(mode))
    except KeyboardInterrupt:
        print("\nОстановлено пользователем")
