# cashlink/config/loader.py
"""
Загрузчик конфигурации движка расчётов.
Базовые значения берутся из config/config.json (если файл есть),
хосты и секреты переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Путь к файлу конфигурации (можно переопределить через CASHLINK_CONFIG)."""
    override = os.getenv("CASHLINK_CONFIG")
    if override:
        return Path(override)
    return get_project_root() / "config" / "config.json"


def load_config_json(path: Path | None = None) -> dict[str, Any]:
    """
    Загружает config.json и возвращает плоский словарь.
    Ключи, начинающиеся с _comment_, отбрасываются.
    Отсутствующий файл даёт пустой словарь: действуют значения по умолчанию.
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return {k: v for k, v in data.items() if not k.startswith("_comment_")}


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "cashlink"
    VERSION: str = "1.0.0"
    DEBUG: bool = True
    ENVIRONMENT: str = "development"


class DeploymentSettings(BaseModel):
    """Параметры запуска HTTP API."""
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8085


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "DEBUG"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/cashlink.log"
    LOG_FORMAT: str = "colored"
    LOG_MAX_BYTES: int = 10485760
    LOG_BACKUP_COUNT: int = 5

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Допустимы только colored и json."""
        if v not in ("colored", "json"):
            raise ValueError(f"Неизвестный формат логов: {v}")
        return v


class DatabaseSettings(BaseModel):
    """Настройки PostgreSQL."""
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "cashlink"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_MIN_POOL_SIZE: int = 2
    DB_MAX_POOL_SIZE: int = 10
    DB_COMMAND_TIMEOUT: int = 30

    @property
    def dsn(self) -> str:
        """DSN для подключения к PostgreSQL."""
        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


class RedisSettings(BaseModel):
    """Настройки Redis."""
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""
    REDIS_NAMESPACE: str = "cashlink"
    REDIS_MAX_CONNECTIONS: int = 20

    @property
    def url(self) -> str:
        """URL для подключения к Redis."""
        auth = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        return f"redis://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


class RedisTTLSettings(BaseModel):
    """TTL кэша."""
    PROVIDER_PROFILE_TTL: int = 60


class RabbitMQSettings(BaseModel):
    """Настройки RabbitMQ."""
    RABBITMQ_HOST: str = "localhost"
    RABBITMQ_PORT: int = 5672
    RABBITMQ_USER: str = "guest"
    RABBITMQ_PASSWORD: str = "guest"
    RABBITMQ_VHOST: str = "/"
    RABBITMQ_EXCHANGE: str = "cashlink.events"

    @property
    def url(self) -> str:
        """URL для подключения к RabbitMQ."""
        return (
            f"amqp://{self.RABBITMQ_USER}:{self.RABBITMQ_PASSWORD}"
            f"@{self.RABBITMQ_HOST}:{self.RABBITMQ_PORT}{self.RABBITMQ_VHOST}"
        )


class RateSettings(BaseModel):
    """Тарифы по умолчанию, если агент или водитель их не задал."""
    DEFAULT_FEE_PERCENTAGE: Decimal = Decimal("2")
    DEFAULT_CURRENCY: str = "AED"
    DEFAULT_RIDE_BASE_RATE: Decimal = Decimal("25")
    DEFAULT_RIDE_PER_KM: Decimal = Decimal("3")
    DEFAULT_MIN_AMOUNT: Decimal = Decimal("10")
    DEFAULT_MAX_AMOUNT: Decimal = Decimal("50000")


class SearchSettings(BaseModel):
    """Настройки поиска ближайших поставщиков."""
    DEFAULT_RADIUS_KM: float = 5.0
    MAX_RADIUS_KM: float = 50.0
    REFRESH_INTERVAL_SECONDS: float = 25.0
    MAX_RESULTS: int = 50


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

# Переменные окружения, которые перекрывают значения из config.json
_ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "database": ("DB_HOST", "DB_PORT", "DB_NAME", "DB_USER", "DB_PASSWORD"),
    "redis": ("REDIS_HOST", "REDIS_PORT", "REDIS_PASSWORD"),
    "rabbitmq": ("RABBITMQ_HOST", "RABBITMQ_PORT", "RABBITMQ_USER", "RABBITMQ_PASSWORD"),
    "system": ("ENVIRONMENT",),
    "logging": ("LOG_LEVEL", "LOG_FORMAT"),
}


class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    system: SystemSettings = Field(default_factory=SystemSettings)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    redis_ttl: RedisTTLSettings = Field(default_factory=RedisTTLSettings)
    rabbitmq: RabbitMQSettings = Field(default_factory=RabbitMQSettings)
    rates: RateSettings = Field(default_factory=RateSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)

    @classmethod
    def from_config_json(cls, path: Path | None = None) -> "Settings":
        """
        Создаёт Settings из плоского config.json.
        Каждый ключ раскладывается в ту секцию, где объявлено поле с таким именем.
        Секреты и хосты переопределяются из переменных окружения.
        """
        flat = load_config_json(path)

        sections: dict[str, dict[str, Any]] = {}
        for section_name, field_info in cls.model_fields.items():
            section_model = field_info.annotation
            values = {
                key: flat[key]
                for key in section_model.model_fields
                if key in flat
            }
            for env_key in _ENV_OVERRIDES.get(section_name, ()):
                env_value = os.getenv(env_key)
                if env_value:
                    values[env_key] = env_value
            sections[section_name] = section_model(**values)

        return cls(**sections)


@lru_cache
def get_settings() -> Settings:
    """Возвращает кэшированный экземпляр настроек."""
    return Settings.from_config_json()


settings = get_settings()
