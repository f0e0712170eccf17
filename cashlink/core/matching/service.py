# cashlink/core/matching/service.py
"""
Поиск поставщиков поблизости.
Матчер не хранит состояние: работает по снимку местоположений из каталога.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from cashlink.common.constants import ProviderKind, TypeMsg
from cashlink.common.logger import log_info
from cashlink.core.geo.distance import haversine_km, validate_coordinates
from cashlink.core.providers.directory import ProviderDirectory


@dataclass(frozen=True)
class NearbyProvider:
    """Поставщик в радиусе поиска."""
    provider_id: str
    kind: ProviderKind
    distance_km: float
    lat: float
    lng: float
    display_name: Optional[str] = None
    updated_at: Optional[datetime] = None


class ProximityMatcher:
    """Ищет онлайн-поставщиков в радиусе, ближайшие первыми."""

    def __init__(
        self,
        directory: ProviderDirectory,
        default_radius_km: float | None = None,
        max_radius_km: float | None = None,
        max_results: int | None = None,
    ) -> None:
        """
        Args:
            directory: Каталог поставщиков
            default_radius_km: Радиус по умолчанию (из конфига если None)
            max_radius_km: Максимальный радиус (из конфига если None)
            max_results: Ограничение выдачи по умолчанию (из конфига если None)
        """
        from cashlink.config import settings

        self._directory = directory
        self.default_radius_km = default_radius_km or settings.search.DEFAULT_RADIUS_KM
        self.max_radius_km = max_radius_km or settings.search.MAX_RADIUS_KM
        self.max_results = max_results or settings.search.MAX_RESULTS

    async def find_nearby(
        self,
        kind: ProviderKind,
        lat: float,
        lng: float,
        radius_km: float | None = None,
        limit: int | None = None,
    ) -> list[NearbyProvider]:
        """
        Ищет поставщиков в радиусе от точки.

        Args:
            kind: agent или driver
            lat: Широта запрашивающего
            lng: Долгота запрашивающего
            radius_km: Радиус поиска в км (из конфига если None)
            limit: Максимальное количество результатов

        Returns:
            Список поставщиков, отсортированных по расстоянию

        Raises:
            ValueError: Некорректные координаты или радиус
        """
        validate_coordinates(lat, lng)

        if radius_km is None:
            radius_km = self.default_radius_km
        if radius_km <= 0 or radius_km > self.max_radius_km:
            raise ValueError(f"Радиус должен быть в пределах (0, {self.max_radius_km}] км")

        if limit is None:
            limit = self.max_results

        snapshot = await self._directory.list_locations(ProviderKind(kind))

        found = []
        for location in snapshot:
            # Каталог уже отфильтровал KYC; онлайн проверяем здесь
            if not location.is_online:
                continue
            distance = haversine_km(lat, lng, location.lat, location.lng)
            if distance > radius_km:
                continue
            found.append((distance, NearbyProvider(
                provider_id=location.provider_id,
                kind=location.kind,
                distance_km=round(distance, 2),
                lat=location.lat,
                lng=location.lng,
                display_name=location.display_name,
                updated_at=location.updated_at,
            )))

        found.sort(key=lambda item: item[0])
        nearby = [provider for _, provider in found[:limit]]

        await log_info(
            f"Найдено {len(nearby)} ({kind}) в радиусе {radius_km} км",
            type_msg=TypeMsg.DEBUG,
        )
        return nearby
