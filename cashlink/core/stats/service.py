# cashlink/core/stats/service.py
"""
Агрегатор статистики поставщика.
Чистая проекция по записям хранилища: ничего не пишет.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from operator import attrgetter
from typing import Callable, Iterable, Optional, Sequence

from cashlink.common.constants import ProviderKind, RideStatus, StatsPeriod, TransactionStatus, TypeMsg
from cashlink.common.logger import log_info
from cashlink.core.pricing.service import quantize_money
from cashlink.core.rides.models import RideBooking
from cashlink.core.stats.models import AllTimeSummary, BreakdownEntry, DailyPoint, PeriodSummary, ProviderStats
from cashlink.core.storage.base import RecordStore
from cashlink.core.storage.models import RecordQuery
from cashlink.core.transactions.models import CashTransaction

ZERO = Decimal("0")
DAILY_SERIES_DAYS = 7


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def period_start(period: StatsPeriod, now: datetime) -> Optional[datetime]:
    """Начало окна периода (UTC). None для all."""
    now = _as_utc(now)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == StatsPeriod.TODAY:
        return today
    if period == StatsPeriod.WEEK:
        return now - timedelta(days=7)
    if period == StatsPeriod.MONTH:
        return today.replace(day=1)
    if period == StatsPeriod.YEAR:
        return today.replace(month=1, day=1)
    return None


def rate(numerator: int, denominator: int) -> float:
    """Процент с одним знаком; 100 при нулевом знаменателе."""
    if denominator == 0:
        return 100.0
    return round(numerator / denominator * 100, 1)


def success_rate(completed: int, total: int) -> float:
    """Процент завершённых с одним знаком; 0 при отсутствии записей."""
    if total == 0:
        return 0.0
    return round(completed / total * 100, 1)


def _summarize(records: Iterable, volume: Callable, revenue: Callable) -> PeriodSummary:
    summary = PeriodSummary()
    for record in records:
        summary.count += 1
        summary.volume += volume(record)
        summary.revenue += revenue(record)
    return summary


def _breakdown(records: Iterable, key: Callable, volume: Callable, revenue: Callable) -> dict[str, BreakdownEntry]:
    result: dict[str, BreakdownEntry] = {}
    for record in records:
        entry = result.setdefault(key(record) or "other", BreakdownEntry())
        entry.count += 1
        entry.volume += volume(record)
        entry.revenue += revenue(record)
    return result


def _windows(
    completed: Sequence,
    now: datetime,
    volume: Callable,
    revenue: Callable,
) -> tuple[PeriodSummary, PeriodSummary, list[DailyPoint]]:
    """Корзины today, this_month и дневной ряд за 7 дней по всем завершённым записям."""
    today_start = period_start(StatsPeriod.TODAY, now)
    month_start = period_start(StatsPeriod.MONTH, now)

    today = _summarize(
        (r for r in completed if _as_utc(r.created_at) >= today_start), volume, revenue
    )
    this_month = _summarize(
        (r for r in completed if _as_utc(r.created_at) >= month_start), volume, revenue
    )

    daily: list[DailyPoint] = []
    for offset in range(DAILY_SERIES_DAYS - 1, -1, -1):
        day = (today_start - timedelta(days=offset)).date()
        summary = _summarize(
            (r for r in completed if _as_utc(r.created_at).date() == day), volume, revenue
        )
        daily.append(DailyPoint(day=day, **summary.model_dump()))

    return today, this_month, daily


def _all_time(records: Sequence, completed: Sequence, volume: Callable, revenue: Callable) -> AllTimeSummary:
    summary = _summarize(completed, volume, revenue)
    return AllTimeSummary(
        total_count=len(records),
        count=summary.count,
        volume=quantize_money(summary.volume),
        revenue=quantize_money(summary.revenue),
    )


def _in_period(records: Iterable, period: StatsPeriod, now: datetime) -> list:
    start = period_start(period, now)
    if start is None:
        return list(records)
    return [r for r in records if _as_utc(r.created_at) >= start]


def aggregate_transactions(
    provider_id: str,
    records: Sequence[CashTransaction],
    period: StatsPeriod,
    now: datetime,
) -> ProviderStats:
    """
    Статистика агента.

    accepted = подтверждённые агентом (включая завершённые),
    rejected = отклонённые агентом.
    """
    now = _as_utc(now)
    volume = attrgetter("amount")
    revenue = attrgetter("fee_amount")

    in_period = _in_period(records, period, now)
    completed = [tx for tx in in_period if tx.status == TransactionStatus.COMPLETED]
    rejected = [tx for tx in in_period if tx.status == TransactionStatus.REJECTED]
    cancelled = [tx for tx in in_period if tx.status == TransactionStatus.CANCELLED]
    pending = [tx for tx in in_period if tx.status == TransactionStatus.PENDING]
    accepted = [tx for tx in in_period if tx.agent_confirmed]

    total = _summarize(completed, volume, revenue)
    all_completed = [tx for tx in records if tx.status == TransactionStatus.COMPLETED]
    today, this_month, daily = _windows(all_completed, now, volume, revenue)

    return ProviderStats(
        provider_id=provider_id,
        kind=ProviderKind.AGENT,
        period=period,
        generated_at=now,
        total_count=len(in_period),
        completed_count=len(completed),
        cancelled_count=len(cancelled) + len(rejected),
        pending_count=len(pending),
        total_volume=quantize_money(total.volume),
        total_revenue=quantize_money(total.revenue),
        unique_customers=len({tx.customer_id for tx in in_period}),
        acceptance_rate=rate(len(accepted), len(accepted) + len(rejected)),
        completion_rate=rate(len(completed), len(accepted)),
        success_rate=success_rate(len(completed), len(in_period)),
        awaiting_customer=sum(1 for tx in pending if tx.agent_confirmed and not tx.customer_confirmed),
        awaiting_agent=sum(1 for tx in pending if tx.customer_confirmed and not tx.agent_confirmed),
        avg_transaction_value=quantize_money(total.volume / total.count) if total.count else ZERO,
        avg_fee=quantize_money(total.revenue / total.count) if total.count else ZERO,
        today=today,
        this_month=this_month,
        daily=daily,
        all_time=_all_time(records, all_completed, volume, revenue),
        service_breakdown=_breakdown(completed, lambda tx: str(tx.service_type), volume, revenue),
        network_breakdown=_breakdown(completed, lambda tx: tx.network, volume, revenue),
    )


_RIDE_ACCEPTED = (RideStatus.ACCEPTED, RideStatus.IN_PROGRESS, RideStatus.COMPLETED)
_RIDE_ACTIVE = (RideStatus.PENDING, RideStatus.ACCEPTED, RideStatus.IN_PROGRESS)


def aggregate_rides(
    provider_id: str,
    records: Sequence[RideBooking],
    period: StatsPeriod,
    now: datetime,
) -> ProviderStats:
    """
    Статистика водителя. Объём и выручка равны сумме стоимости завершённых поездок.
    """
    now = _as_utc(now)
    fare = attrgetter("fare")

    in_period = _in_period(records, period, now)
    completed = [b for b in in_period if b.status == RideStatus.COMPLETED]
    rejected = [b for b in in_period if b.status == RideStatus.REJECTED]
    cancelled = [b for b in in_period if b.status == RideStatus.CANCELLED]
    accepted = [b for b in in_period if b.status in _RIDE_ACCEPTED]

    total = _summarize(completed, fare, fare)
    all_completed = [b for b in records if b.status == RideStatus.COMPLETED]
    today, this_month, daily = _windows(all_completed, now, fare, fare)
    ratings = [b.driver_rating for b in completed if b.driver_rating is not None]

    return ProviderStats(
        provider_id=provider_id,
        kind=ProviderKind.DRIVER,
        period=period,
        generated_at=now,
        total_count=len(in_period),
        completed_count=len(completed),
        cancelled_count=len(cancelled) + len(rejected),
        pending_count=sum(1 for b in in_period if b.status in _RIDE_ACTIVE),
        total_volume=quantize_money(total.volume),
        total_revenue=quantize_money(total.revenue),
        unique_customers=len({b.customer_id for b in in_period}),
        acceptance_rate=rate(len(accepted), len(accepted) + len(rejected)),
        completion_rate=rate(len(completed), len(accepted)),
        success_rate=success_rate(len(completed), len(in_period)),
        avg_transaction_value=quantize_money(total.volume / total.count) if total.count else ZERO,
        avg_rating=round(sum(ratings) / len(ratings), 2) if ratings else 0.0,
        rating_count=len(ratings),
        total_distance_km=sum((b.distance_km for b in completed), ZERO),
        today=today,
        this_month=this_month,
        daily=daily,
        all_time=_all_time(records, all_completed, fare, fare),
        service_breakdown=_breakdown(completed, lambda b: str(b.service_type), fare, fare),
    )


class StatsAggregator:
    """Статистика для дашбордов агентов и водителей."""

    def __init__(
        self,
        transaction_store: RecordStore[CashTransaction],
        ride_store: RecordStore[RideBooking],
    ) -> None:
        self.transaction_store = transaction_store
        self.ride_store = ride_store

    async def get_provider_stats(
        self,
        kind: ProviderKind,
        provider_id: str,
        period: StatsPeriod = StatsPeriod.MONTH,
        now: Optional[datetime] = None,
    ) -> ProviderStats:
        """
        Считает статистику поставщика за период.

        Читаются все записи поставщика: корзины today/this_month
        и дневной ряд не зависят от выбранного периода.

        Args:
            kind: agent или driver
            provider_id: ID поставщика
            period: Период основных показателей
            now: Текущий момент (для тестов), по умолчанию UTC now
        """
        now = _as_utc(now) if now else datetime.now(timezone.utc)
        kind = ProviderKind(kind)
        period = StatsPeriod(period)

        if kind == ProviderKind.AGENT:
            records = await self.transaction_store.query(RecordQuery(equals={"provider_id": provider_id}))
            stats = aggregate_transactions(provider_id, records, period, now)
        else:
            records = await self.ride_store.query(RecordQuery(equals={"driver_id": provider_id}))
            stats = aggregate_rides(provider_id, records, period, now)

        await log_info(
            f"Статистика {kind.value} {provider_id} за {period.value}: {stats.total_count} записей",
            type_msg=TypeMsg.DEBUG,
        )
        return stats
