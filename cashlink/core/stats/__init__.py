# cashlink/core/stats/__init__.py
"""
Статистика поставщиков.
"""

from cashlink.core.stats.models import BreakdownEntry, DailyPoint, PeriodSummary, ProviderStats
from cashlink.core.stats.service import StatsAggregator, aggregate_rides, aggregate_transactions

__all__ = [
    "BreakdownEntry",
    "DailyPoint",
    "PeriodSummary",
    "ProviderStats",
    "StatsAggregator",
    "aggregate_rides",
    "aggregate_transactions",
]
