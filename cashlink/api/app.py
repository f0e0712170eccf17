# cashlink/api/app.py
"""
HTTP API движка расчётов.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from cashlink import __version__
from cashlink.api.dependencies import Engine, build_postgres_engine
from cashlink.api.errors import register_error_handlers
from cashlink.api.routes import nearby_router, rides_router, stats_router, transactions_router
from cashlink.common.constants import TypeMsg
from cashlink.common.logger import log_info
from cashlink.infra.database import close_db, get_db, init_db
from cashlink.infra.event_bus import close_event_bus, get_event_bus, init_event_bus
from cashlink.infra.redis_client import close_redis, get_redis, init_redis
from cashlink.shared.models.common import HealthStatus


@asynccontextmanager
async def infra_lifespan(app: FastAPI):
    await init_db()
    await init_redis()
    await init_event_bus()
    app.state.engine = build_postgres_engine()
    await log_info("API запущен", type_msg=TypeMsg.INFO)
    try:
        yield
    finally:
        await close_event_bus()
        await close_redis()
        await close_db()


def create_app(engine: Optional[Engine] = None) -> FastAPI:
    """
    Создаёт приложение.

    Args:
        engine: Готовый движок (тесты, локальный запуск в памяти).
            Без него lifespan подключает PostgreSQL, Redis и RabbitMQ.
    """
    app = FastAPI(
        title="CashLink Settlement Engine",
        version=__version__,
        lifespan=None if engine is not None else infra_lifespan,
    )
    if engine is not None:
        app.state.engine = engine

    register_error_handlers(app)

    for router in (transactions_router, rides_router, stats_router, nearby_router):
        app.include_router(router, prefix="/api/v1")

    @app.get("/health", response_model=HealthStatus)
    async def health_check():
        dependencies: dict[str, str] = {}
        if get_db().is_connected:
            dependencies["postgres"] = "healthy" if await get_db().health_check() else "unhealthy"
        if get_redis().is_connected:
            dependencies["redis"] = "healthy" if await get_redis().health_check() else "unhealthy"
        if engine is None:
            dependencies["rabbitmq"] = "healthy" if await get_event_bus().health_check() else "unhealthy"

        status = "healthy" if all(v == "healthy" for v in dependencies.values()) else "degraded"
        return HealthStatus(
            service="cashlink",
            status=status,
            version=__version__,
            dependencies=dependencies,
        )

    return app
