# cashlink/core/matching/refresher.py
"""
Периодическое обновление поиска поблизости.
Владелец (сессия дашборда) обязан вызвать stop() при отключении.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from cashlink.common.constants import ProviderKind, TypeMsg
from cashlink.common.logger import log_error, log_info
from cashlink.core.matching.service import NearbyProvider, ProximityMatcher

NearbyCallback = Callable[[list[NearbyProvider]], Awaitable[None]]


class ProximityRefresher:
    """
    Отменяемая периодическая задача поверх ProximityMatcher.

    Example:
        async with ProximityRefresher(matcher, ProviderKind.DRIVER, 25.2, 55.3, 5, on_update):
            ...
    """

    def __init__(
        self,
        matcher: ProximityMatcher,
        kind: ProviderKind,
        lat: float,
        lng: float,
        radius_km: float | None,
        on_update: NearbyCallback,
        interval: float | None = None,
    ) -> None:
        """
        Args:
            matcher: Матчер поставщиков
            kind: agent или driver
            lat: Широта запрашивающего
            lng: Долгота запрашивающего
            radius_km: Радиус поиска (из конфига если None)
            on_update: Корутина, получающая свежий список
            interval: Период опроса в секундах (из конфига если None)
        """
        if interval is None:
            from cashlink.config import settings
            interval = settings.search.REFRESH_INTERVAL_SECONDS

        if interval <= 0:
            raise ValueError("Период опроса должен быть положительным")

        self._matcher = matcher
        self._kind = ProviderKind(kind)
        self._lat = lat
        self._lng = lng
        self._radius_km = radius_km
        self._on_update = on_update
        self._interval = interval
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def update_position(self, lat: float, lng: float) -> None:
        """Новые координаты используются со следующего тика."""
        self._lat = lat
        self._lng = lng

    async def refresh_once(self) -> list[NearbyProvider]:
        """Один поиск с передачей результата в callback."""
        nearby = await self._matcher.find_nearby(
            self._kind,
            self._lat,
            self._lng,
            radius_km=self._radius_km,
        )
        self.ticks += 1
        await self._on_update(nearby)
        return nearby

    async def start(self) -> None:
        """Запускает опрос. Первый поиск выполняется сразу."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name=f"proximity-refresh-{self._kind.value}")
        await log_info(
            f"Обновление поиска {self._kind.value} запущено (каждые {self._interval} с)",
            type_msg=TypeMsg.DEBUG,
        )

    async def stop(self) -> None:
        """Останавливает опрос и дожидается завершения задачи."""
        if self._task is None:
            return

        task, self._task = self._task, None
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

        await log_info(f"Обновление поиска {self._kind.value} остановлено", type_msg=TypeMsg.DEBUG)

    async def _run(self) -> None:
        while True:
            try:
                await self.refresh_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # Ошибка одного тика не останавливает опрос
                await log_error(f"Ошибка обновления поиска {self._kind.value}: {e}")
            await asyncio.sleep(self._interval)

    async def __aenter__(self) -> "ProximityRefresher":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
