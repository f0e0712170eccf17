# cashlink/core/stats/models.py
"""
Модели статистики для дашбордов поставщиков.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from cashlink.common.constants import ProviderKind, StatsPeriod


class PeriodSummary(BaseModel):
    """Завершённые записи за окно времени."""

    count: int = 0
    volume: Decimal = Decimal("0")
    revenue: Decimal = Decimal("0")


class DailyPoint(PeriodSummary):
    """Точка дневного ряда (последние 7 дней)."""

    day: date


class BreakdownEntry(PeriodSummary):
    """Разбивка по типу услуги или сети."""


class AllTimeSummary(PeriodSummary):
    """Итоги за всё время: count, volume и revenue по завершённым записям."""

    total_count: int = 0


class ProviderStats(BaseModel):
    """Сводка по записям поставщика за период."""

    provider_id: str
    kind: ProviderKind
    period: StatsPeriod
    generated_at: datetime

    total_count: int = 0
    completed_count: int = 0
    cancelled_count: int = 0  # cancelled + rejected
    pending_count: int = 0

    total_volume: Decimal = Decimal("0")
    total_revenue: Decimal = Decimal("0")
    unique_customers: int = 0

    # Проценты с одним знаком; 100 при нулевом знаменателе
    acceptance_rate: float = 100.0
    completion_rate: float = 100.0
    # Доля завершённых среди всех записей периода; 0 при пустом периоде
    success_rate: float = 0.0

    # Только для обмена наличных: кто ещё не подтвердил
    awaiting_customer: int = 0
    awaiting_agent: int = 0

    avg_transaction_value: Decimal = Decimal("0")
    avg_fee: Decimal = Decimal("0")

    # Только для поездок
    total_distance_km: Decimal = Decimal("0")
    avg_rating: float = 0.0
    rating_count: int = 0

    today: PeriodSummary = Field(default_factory=PeriodSummary)
    this_month: PeriodSummary = Field(default_factory=PeriodSummary)
    daily: list[DailyPoint] = Field(default_factory=list)
    all_time: AllTimeSummary = Field(default_factory=AllTimeSummary)

    service_breakdown: dict[str, BreakdownEntry] = Field(default_factory=dict)
    network_breakdown: dict[str, BreakdownEntry] = Field(default_factory=dict)
