# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("DB_PASSWORD", "test_password")
os.environ.setdefault("REDIS_PASSWORD", "")

from cashlink.common.constants import CashServiceType, KycStatus, ProviderKind, RideServiceType
from cashlink.core.pricing.service import RateResolver
from cashlink.core.providers.directory import InMemoryProviderDirectory
from cashlink.core.providers.models import (
    AgentSettings,
    AmountLimits,
    DriverSettings,
    NetworkFee,
    ProviderProfile,
)
from cashlink.core.storage.memory import InMemoryRecordStore


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "_comment_system": "Системные настройки",
        "PROJECT_NAME": "cashlink_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "ENVIRONMENT": "test",
        "API_PORT": 9000,
        "LOG_LEVEL": "DEBUG",
        "LOG_FORMAT": "json",
        "DB_HOST": "db.test",
        "DB_NAME": "cashlink_test",
        "REDIS_NAMESPACE": "cashlink_test",
        "PROVIDER_PROFILE_TTL": 15,
        "RABBITMQ_EXCHANGE": "cashlink.test",
        "DEFAULT_FEE_PERCENTAGE": "1.5",
        "DEFAULT_CURRENCY": "KES",
        "DEFAULT_RIDE_BASE_RATE": "30",
        "DEFAULT_RIDE_PER_KM": "2.5",
        "DEFAULT_MIN_AMOUNT": "20",
        "DEFAULT_MAX_AMOUNT": "1000",
        "DEFAULT_RADIUS_KM": 3.0,
        "REFRESH_INTERVAL_SECONDS": 10.0,
    }


@pytest.fixture
def temp_config_file(tmp_path: Path, mock_config: dict[str, Any]) -> Path:
    """Создаёт временный файл конфигурации."""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(mock_config, ensure_ascii=False, indent=2))
    return config_file


# =============================================================================
# ФИКСТУРЫ ИНФРАСТРУКТУРЫ (МОКИ)
# =============================================================================

@pytest.fixture
def mock_db() -> AsyncMock:
    """Мок менеджера базы данных."""
    db = AsyncMock()
    db.fetchrow = AsyncMock(return_value=None)
    db.fetch = AsyncMock(return_value=[])
    db.execute = AsyncMock(return_value="INSERT 0 1")
    db.fetchval = AsyncMock(return_value=None)
    return db


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Мок клиента Redis."""
    redis = AsyncMock()
    redis.is_connected = True
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.get_model = AsyncMock(return_value=None)
    redis.set_model = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def mock_event_bus() -> AsyncMock:
    """Мок шины событий."""
    event_bus = AsyncMock()
    event_bus.publish = AsyncMock(return_value=None)
    event_bus.is_connected = True
    return event_bus


# =============================================================================
# ФИКСТУРЫ ПОСТАВЩИКОВ
# =============================================================================

@pytest.fixture
def agent_profile() -> ProviderProfile:
    """Одобренный агент с лимитами 10..50000 и комиссией сети с минимумом."""
    return ProviderProfile(
        id="agent-1",
        kind=ProviderKind.AGENT,
        display_name="Agent One",
        kyc_status=KycStatus.APPROVED,
        is_online=True,
        latitude=25.2048,
        longitude=55.2708,
        agent=AgentSettings(
            rates={
                CashServiceType.CASH_TO_MOBILE: Decimal("2"),
                CashServiceType.MOBILE_TO_CASH: Decimal("2.5"),
            },
            network_fees={
                "mpesa": NetworkFee(percentage=Decimal("2"), min_fee=Decimal("5")),
            },
            limits=AmountLimits(min_amount=Decimal("10"), max_amount=Decimal("50000")),
            currency="AED",
        ),
    )


@pytest.fixture
def driver_profile() -> ProviderProfile:
    """Одобренный водитель с тарифом 25 + 3/км и фиксом в аэропорт."""
    return ProviderProfile(
        id="driver-1",
        kind=ProviderKind.DRIVER,
        display_name="Driver One",
        kyc_status=KycStatus.APPROVED,
        is_online=True,
        latitude=25.2,
        longitude=55.3,
        driver=DriverSettings(
            services={
                RideServiceType.AIRPORT_TRANSFER: True,
                RideServiceType.CITY_RIDE: True,
                RideServiceType.LONG_DISTANCE: True,
                RideServiceType.PARCEL_DELIVERY: False,
            },
            base_rate=Decimal("25"),
            per_km=Decimal("3"),
            airport_rate=Decimal("100"),
            currency="AED",
        ),
    )


@pytest.fixture
def directory(agent_profile: ProviderProfile, driver_profile: ProviderProfile) -> InMemoryProviderDirectory:
    """Каталог с одним агентом и одним водителем."""
    return InMemoryProviderDirectory([agent_profile, driver_profile])


@pytest.fixture
def rate_resolver() -> RateResolver:
    """Калькулятор с явными значениями по умолчанию."""
    return RateResolver(
        default_percentage=Decimal("2"),
        default_base_rate=Decimal("25"),
        default_per_km=Decimal("3"),
        default_currency="AED",
    )


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    """Пустое хранилище в памяти."""
    return InMemoryRecordStore()


@pytest.fixture
def fixed_now() -> datetime:
    """Фиксированный момент для статистики."""
    return datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
