# cashlink/infra/__init__.py
"""
Инфраструктурный слой.
Работа с внешними сервисами: PostgreSQL, Redis, RabbitMQ.
"""

from cashlink.infra.database import DatabaseManager, get_db
from cashlink.infra.redis_client import RedisClient, get_redis
from cashlink.infra.event_bus import EventBus, EventPublisher, get_event_bus

__all__ = [
    "DatabaseManager",
    "get_db",
    "RedisClient",
    "get_redis",
    "EventBus",
    "EventPublisher",
    "get_event_bus",
]
