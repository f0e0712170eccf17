# cashlink/core/providers/directory.py
"""
Каталог поставщиков.
Владеет профилями, KYC и онлайн-статусом; движок только читает из него.
"""

from __future__ import annotations

import json
from typing import Iterable, Protocol

from cashlink.common.constants import KycStatus, ProviderKind, TypeMsg
from cashlink.common.exceptions import StorageUnavailable
from cashlink.common.logger import log_error, log_info
from cashlink.core.providers.models import ProviderLocation, ProviderProfile
from cashlink.core.storage.postgres import STORAGE_ERRORS
from cashlink.infra.database import DatabaseManager
from cashlink.infra.redis_client import RedisClient


class ProviderDirectory(Protocol):
    """Контракт каталога поставщиков."""

    async def get_provider(self, provider_id: str) -> ProviderProfile | None: ...

    async def list_locations(self, kind: ProviderKind) -> list[ProviderLocation]: ...


def _to_location(profile: ProviderProfile) -> ProviderLocation:
    return ProviderLocation(
        provider_id=profile.id,
        kind=profile.kind,
        lat=profile.latitude,
        lng=profile.longitude,
        is_online=profile.is_online,
        updated_at=profile.location_updated_at,
        display_name=profile.display_name,
    )


class InMemoryProviderDirectory:
    """Каталог в памяти (локальный запуск и тесты)."""

    def __init__(self, profiles: Iterable[ProviderProfile] = ()) -> None:
        self._profiles: dict[str, ProviderProfile] = {p.id: p for p in profiles}

    def put(self, profile: ProviderProfile) -> None:
        self._profiles[profile.id] = profile

    async def get_provider(self, provider_id: str) -> ProviderProfile | None:
        return self._profiles.get(provider_id)

    async def list_locations(self, kind: ProviderKind) -> list[ProviderLocation]:
        return [
            _to_location(profile)
            for profile in self._profiles.values()
            if profile.kind == kind and profile.is_approved and profile.has_location
        ]


class PostgresProviderDirectory:
    """
    Каталог поверх таблицы provider_profiles.

    Профили кэшируются в Redis (read-through) на PROVIDER_PROFILE_TTL секунд.
    Местоположения всегда читаются из БД: снимок должен быть свежим.
    """

    _SELECT = """
        SELECT id, kind, display_name, kyc_status, is_online,
               latitude, longitude, location_updated_at, settings
        FROM provider_profiles
    """

    def __init__(
        self,
        db: DatabaseManager,
        redis: RedisClient | None = None,
        cache_ttl: int | None = None,
    ) -> None:
        """
        Args:
            db: Менеджер базы данных
            redis: Клиент Redis для кэша профилей (опционально)
            cache_ttl: TTL кэша профиля (из конфига если None)
        """
        if cache_ttl is None:
            from cashlink.config import settings
            cache_ttl = settings.redis_ttl.PROVIDER_PROFILE_TTL

        self._db = db
        self._redis = redis
        self._cache_ttl = cache_ttl

    @staticmethod
    def _cache_key(provider_id: str) -> str:
        return f"provider:{provider_id}"

    @staticmethod
    def _row_to_profile(row) -> ProviderProfile:
        data = dict(row)
        raw_settings = data.pop("settings") or {}
        if isinstance(raw_settings, str):
            raw_settings = json.loads(raw_settings)
        settings_key = "agent" if data["kind"] == ProviderKind.AGENT.value else "driver"
        return ProviderProfile.model_validate({**data, settings_key: raw_settings or None})

    async def get_provider(self, provider_id: str) -> ProviderProfile | None:
        """
        Получает профиль поставщика.

        Args:
            provider_id: ID поставщика

        Returns:
            Профиль или None
        """
        cache_key = self._cache_key(provider_id)
        if self._redis is not None and self._redis.is_connected:
            cached = await self._redis.get_model(cache_key, ProviderProfile)
            if cached is not None:
                return cached

        try:
            row = await self._db.fetchrow(f"{self._SELECT} WHERE id = $1", provider_id)
        except STORAGE_ERRORS as e:
            await log_error(f"Ошибка чтения профиля поставщика {provider_id}: {e}")
            raise StorageUnavailable("Каталог поставщиков недоступен") from e

        if row is None:
            return None

        profile = self._row_to_profile(row)
        if self._redis is not None and self._redis.is_connected:
            await self._redis.set_model(cache_key, profile, ttl=self._cache_ttl)
        return profile

    async def list_locations(self, kind: ProviderKind) -> list[ProviderLocation]:
        """
        Снимок местоположений одобренных поставщиков данного типа.

        Args:
            kind: agent или driver

        Returns:
            Список снимков (и онлайн, и офлайн: фильтрует матчер)
        """
        try:
            rows = await self._db.fetch(
                f"""
                {self._SELECT}
                WHERE kind = $1
                  AND kyc_status = $2
                  AND latitude IS NOT NULL
                  AND longitude IS NOT NULL
                """,
                kind.value,
                KycStatus.APPROVED.value,
            )
        except STORAGE_ERRORS as e:
            await log_error(f"Ошибка чтения местоположений ({kind.value}): {e}")
            raise StorageUnavailable("Каталог поставщиков недоступен") from e

        locations = [_to_location(self._row_to_profile(row)) for row in rows]
        await log_info(
            f"Снимок местоположений {kind.value}: {len(locations)}",
            type_msg=TypeMsg.DEBUG,
        )
        return locations
