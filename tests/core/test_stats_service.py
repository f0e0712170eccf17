# tests/core/test_stats_service.py
"""
Тесты агрегатора статистики поставщика.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from cashlink.common.constants import (
    CashServiceType,
    ProviderKind,
    RideServiceType,
    RideStatus,
    StatsPeriod,
    TransactionStatus,
)
from cashlink.core.rides.models import RideBooking
from cashlink.core.stats.service import StatsAggregator, period_start, rate, success_rate
from cashlink.core.storage.memory import InMemoryRecordStore
from cashlink.core.transactions.models import CashTransaction

AGENT = "agent-1"
DRIVER = "driver-1"


def make_tx(created_at: datetime, status: TransactionStatus = TransactionStatus.COMPLETED, **overrides) -> CashTransaction:
    confirmed = status == TransactionStatus.COMPLETED
    data = {
        "customer_id": "customer-1",
        "provider_id": AGENT,
        "service_type": CashServiceType.CASH_TO_MOBILE,
        "network": "mpesa",
        "amount": Decimal("100"),
        "fee_amount": Decimal("2"),
        "fee_percentage": Decimal("2"),
        "currency": "AED",
        "status": status,
        "customer_confirmed": confirmed,
        "agent_confirmed": confirmed,
        "created_at": created_at,
    }
    data.update(overrides)
    return CashTransaction(**data)


def make_ride(created_at: datetime, status: RideStatus = RideStatus.COMPLETED, **overrides) -> RideBooking:
    data = {
        "customer_id": "customer-1",
        "driver_id": DRIVER,
        "service_type": RideServiceType.CITY_RIDE,
        "pickup_location": "A",
        "distance_km": Decimal("10"),
        "fare": Decimal("55"),
        "currency": "AED",
        "status": status,
        "created_at": created_at,
    }
    data.update(overrides)
    return RideBooking(**data)


async def fill(store: InMemoryRecordStore, records) -> None:
    for record in records:
        await store.create(record)


@pytest.fixture
def stores() -> tuple[InMemoryRecordStore, InMemoryRecordStore]:
    return InMemoryRecordStore(), InMemoryRecordStore()


@pytest.fixture
def aggregator(stores) -> StatsAggregator:
    return StatsAggregator(*stores)


class TestHelpers:
    """Тесты вспомогательных функций."""

    def test_rate_zero_denominator(self) -> None:
        assert rate(0, 0) == 100.0

    def test_rate_rounding(self) -> None:
        assert rate(2, 3) == 66.7

    def test_success_rate_without_records_is_zero(self) -> None:
        assert success_rate(0, 0) == 0.0

    def test_success_rate_rounding(self) -> None:
        assert success_rate(1, 3) == 33.3

    @pytest.mark.parametrize(
        ("period", "expected"),
        [
            (StatsPeriod.TODAY, datetime(2024, 6, 15, tzinfo=timezone.utc)),
            (StatsPeriod.WEEK, datetime(2024, 6, 8, 12, tzinfo=timezone.utc)),
            (StatsPeriod.MONTH, datetime(2024, 6, 1, tzinfo=timezone.utc)),
            (StatsPeriod.YEAR, datetime(2024, 1, 1, tzinfo=timezone.utc)),
            (StatsPeriod.ALL, None),
        ],
    )
    def test_period_start(self, fixed_now: datetime, period: StatsPeriod, expected) -> None:
        assert period_start(period, fixed_now) == expected


class TestAgentStats:
    """Тесты статистики агента."""

    @pytest.mark.asyncio
    async def test_empty(self, aggregator: StatsAggregator, fixed_now: datetime) -> None:
        stats = await aggregator.get_provider_stats(ProviderKind.AGENT, AGENT, now=fixed_now)

        assert stats.total_count == 0
        assert stats.total_volume == Decimal("0")
        assert stats.acceptance_rate == 100.0
        assert stats.completion_rate == 100.0
        assert stats.avg_transaction_value == Decimal("0")
        assert len(stats.daily) == 7
        assert stats.success_rate == 0.0
        assert stats.all_time.total_count == 0
        assert stats.all_time.volume == Decimal("0")

    @pytest.mark.asyncio
    async def test_counts_and_totals(self, aggregator, stores, fixed_now: datetime) -> None:
        hour_ago = fixed_now - timedelta(hours=1)
        await fill(stores[0], [
            make_tx(hour_ago),
            make_tx(hour_ago, amount=Decimal("300"), fee_amount=Decimal("6"), customer_id="customer-2"),
            make_tx(hour_ago, TransactionStatus.REJECTED),
            make_tx(hour_ago, TransactionStatus.CANCELLED),
            make_tx(hour_ago, TransactionStatus.PENDING, agent_confirmed=True),
            make_tx(hour_ago, TransactionStatus.PENDING, customer_confirmed=True),
            make_tx(hour_ago, provider_id="agent-2"),
        ])

        stats = await aggregator.get_provider_stats(ProviderKind.AGENT, AGENT, now=fixed_now)

        assert stats.total_count == 6
        assert stats.completed_count == 2
        assert stats.cancelled_count == 2
        assert stats.pending_count == 2
        assert stats.total_volume == Decimal("400.00")
        assert stats.total_revenue == Decimal("8.00")
        assert stats.avg_transaction_value == Decimal("200.00")
        assert stats.avg_fee == Decimal("4.00")
        assert stats.unique_customers == 2
        assert stats.awaiting_customer == 1
        assert stats.awaiting_agent == 1
        # accepted = 2 завершённых + 1 подтверждённая агентом
        assert stats.acceptance_rate == 75.0
        assert stats.completion_rate == 66.7
        assert stats.success_rate == 33.3

    @pytest.mark.asyncio
    async def test_all_time_ignores_period(self, aggregator, stores, fixed_now: datetime) -> None:
        """Итоги за всё время считаются по всем записям независимо от периода."""
        await fill(stores[0], [
            make_tx(fixed_now - timedelta(hours=1)),
            make_tx(fixed_now - timedelta(days=40), amount=Decimal("250"), fee_amount=Decimal("5")),
            make_tx(fixed_now - timedelta(days=400), TransactionStatus.CANCELLED),
        ])

        stats = await aggregator.get_provider_stats(ProviderKind.AGENT, AGENT, StatsPeriod.TODAY, fixed_now)

        assert stats.total_count == 1
        assert stats.success_rate == 100.0
        assert stats.all_time.total_count == 3
        assert stats.all_time.count == 2
        assert stats.all_time.volume == Decimal("350.00")
        assert stats.all_time.revenue == Decimal("7.00")

    @pytest.mark.asyncio
    async def test_period_filter_keeps_windows(self, aggregator, stores, fixed_now: datetime) -> None:
        await fill(stores[0], [
            make_tx(fixed_now - timedelta(hours=1)),
            make_tx(fixed_now - timedelta(days=3)),
            make_tx(fixed_now - timedelta(days=40)),
        ])

        stats = await aggregator.get_provider_stats(ProviderKind.AGENT, AGENT, StatsPeriod.TODAY, fixed_now)

        assert stats.total_count == 1
        assert stats.today.count == 1
        assert stats.this_month.count == 2
        assert [p.count for p in stats.daily] == [0, 0, 0, 1, 0, 0, 1]
        assert stats.daily[-1].day == fixed_now.date()

    @pytest.mark.asyncio
    async def test_all_period(self, aggregator, stores, fixed_now: datetime) -> None:
        await fill(stores[0], [make_tx(fixed_now - timedelta(days=400))])

        stats = await aggregator.get_provider_stats(ProviderKind.AGENT, AGENT, StatsPeriod.ALL, fixed_now)

        assert stats.completed_count == 1

    @pytest.mark.asyncio
    async def test_breakdowns(self, aggregator, stores, fixed_now: datetime) -> None:
        hour_ago = fixed_now - timedelta(hours=1)
        await fill(stores[0], [
            make_tx(hour_ago),
            make_tx(hour_ago, network=None, service_type=CashServiceType.MOBILE_TO_CASH),
        ])

        stats = await aggregator.get_provider_stats(ProviderKind.AGENT, AGENT, now=fixed_now)

        assert set(stats.service_breakdown) == {"cash_to_mobile", "mobile_to_cash"}
        assert stats.network_breakdown["mpesa"].count == 1
        assert stats.network_breakdown["other"].volume == Decimal("100")


class TestDriverStats:
    """Тесты статистики водителя."""

    @pytest.mark.asyncio
    async def test_rides(self, aggregator, stores, fixed_now: datetime) -> None:
        hour_ago = fixed_now - timedelta(hours=1)
        await fill(stores[1], [
            make_ride(hour_ago),
            make_ride(hour_ago, fare=Decimal("45"), distance_km=Decimal("6.5")),
            make_ride(hour_ago, RideStatus.IN_PROGRESS),
            make_ride(hour_ago, RideStatus.PENDING),
            make_ride(hour_ago, RideStatus.REJECTED),
        ])

        stats = await aggregator.get_provider_stats(ProviderKind.DRIVER, DRIVER, now=fixed_now)

        assert stats.kind == ProviderKind.DRIVER
        assert stats.total_count == 5
        assert stats.completed_count == 2
        assert stats.pending_count == 2
        assert stats.cancelled_count == 1
        assert stats.total_volume == Decimal("100.00")
        assert stats.total_revenue == stats.total_volume
        assert stats.total_distance_km == Decimal("16.5")
        assert stats.acceptance_rate == 75.0
        assert stats.completion_rate == 66.7
        assert stats.network_breakdown == {}
        assert stats.success_rate == 40.0
        assert stats.all_time.total_count == 5
        assert stats.all_time.revenue == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_ratings(self, aggregator, stores, fixed_now: datetime) -> None:
        """Средняя оценка считается только по оценённым завершённым поездкам."""
        hour_ago = fixed_now - timedelta(hours=1)
        await fill(stores[1], [
            make_ride(hour_ago, driver_rating=5),
            make_ride(hour_ago, driver_rating=4),
            make_ride(hour_ago),
            make_ride(fixed_now - timedelta(days=40), driver_rating=1),
        ])

        stats = await aggregator.get_provider_stats(ProviderKind.DRIVER, DRIVER, now=fixed_now)

        assert stats.rating_count == 2
        assert stats.avg_rating == 4.5

    @pytest.mark.asyncio
    async def test_no_ratings(self, aggregator, stores, fixed_now: datetime) -> None:
        await fill(stores[1], [make_ride(fixed_now - timedelta(hours=1))])

        stats = await aggregator.get_provider_stats(ProviderKind.DRIVER, DRIVER, now=fixed_now)

        assert stats.rating_count == 0
        assert stats.avg_rating == 0.0
