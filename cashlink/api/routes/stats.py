# cashlink/api/routes/stats.py
from fastapi import APIRouter, Depends

from cashlink.api.dependencies import get_actor_id, get_stats_aggregator
from cashlink.common.constants import ProviderKind, StatsPeriod
from cashlink.core.stats.models import ProviderStats
from cashlink.core.stats.service import StatsAggregator

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("/{kind}", response_model=ProviderStats)
async def get_my_stats(
    kind: ProviderKind,
    period: StatsPeriod = StatsPeriod.MONTH,
    actor_id: str = Depends(get_actor_id),
    aggregator: StatsAggregator = Depends(get_stats_aggregator),
):
    """Статистика дашборда текущего поставщика."""
    return await aggregator.get_provider_stats(kind, actor_id, period)
