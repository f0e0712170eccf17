# cashlink/api/dependencies.py
"""
Сборка сервисов движка и зависимости FastAPI.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Header, Request

from cashlink.core.matching.service import ProximityMatcher
from cashlink.core.pricing.service import RateResolver
from cashlink.core.providers.directory import PostgresProviderDirectory, ProviderDirectory
from cashlink.core.rides.models import RideBooking
from cashlink.core.rides.service import RideBookingService
from cashlink.core.stats.service import StatsAggregator
from cashlink.core.storage.base import RecordStore
from cashlink.core.storage.memory import InMemoryRecordStore
from cashlink.core.storage.postgres import PostgresRecordStore
from cashlink.core.transactions.models import CashTransaction
from cashlink.core.transactions.service import CashTransactionService
from cashlink.infra.database import get_db
from cashlink.infra.event_bus import EventPublisher, get_event_bus
from cashlink.infra.redis_client import get_redis

TRANSACTIONS_TABLE = "cash_transactions"
RIDES_TABLE = "ride_bookings"


@dataclass
class Engine:
    """Набор сервисов движка, разделяющих хранилища и каталог."""
    transactions: CashTransactionService
    rides: RideBookingService
    stats: StatsAggregator
    matcher: ProximityMatcher


def build_engine(
    transaction_store: RecordStore[CashTransaction],
    ride_store: RecordStore[RideBooking],
    directory: ProviderDirectory,
    publisher: Optional[EventPublisher] = None,
    rate_resolver: Optional[RateResolver] = None,
) -> Engine:
    rate_resolver = rate_resolver or RateResolver()
    return Engine(
        transactions=CashTransactionService(transaction_store, directory, rate_resolver, publisher),
        rides=RideBookingService(ride_store, directory, rate_resolver, publisher),
        stats=StatsAggregator(transaction_store, ride_store),
        matcher=ProximityMatcher(directory),
    )


def build_postgres_engine() -> Engine:
    """Движок поверх PostgreSQL, Redis и RabbitMQ (после init_* в lifespan)."""
    db = get_db()
    return build_engine(
        transaction_store=PostgresRecordStore(db, TRANSACTIONS_TABLE, CashTransaction),
        ride_store=PostgresRecordStore(db, RIDES_TABLE, RideBooking),
        directory=PostgresProviderDirectory(db, get_redis()),
        publisher=get_event_bus(),
    )


def build_memory_engine(
    directory: ProviderDirectory,
    publisher: Optional[EventPublisher] = None,
) -> Engine:
    """Движок в памяти процесса (локальный запуск и тесты)."""
    return build_engine(
        transaction_store=InMemoryRecordStore(),
        ride_store=InMemoryRecordStore(),
        directory=directory,
        publisher=publisher,
    )


def get_engine(request: Request) -> Engine:
    return request.app.state.engine


def get_transaction_service(request: Request) -> CashTransactionService:
    return get_engine(request).transactions


def get_ride_service(request: Request) -> RideBookingService:
    return get_engine(request).rides


def get_stats_aggregator(request: Request) -> StatsAggregator:
    return get_engine(request).stats


def get_matcher(request: Request) -> ProximityMatcher:
    return get_engine(request).matcher


def get_actor_id(x_user_id: str = Header(..., min_length=1, description="ID действующего пользователя")) -> str:
    """Аутентификация внешняя: шлюз передаёт ID пользователя в заголовке."""
    return x_user_id
