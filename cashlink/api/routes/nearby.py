# cashlink/api/routes/nearby.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from cashlink.api.dependencies import get_matcher
from cashlink.api.schemas import NearbyProviderResponse
from cashlink.common.constants import ProviderKind
from cashlink.core.matching.service import ProximityMatcher

router = APIRouter(prefix="/nearby", tags=["Nearby"])


@router.get("/{kind}", response_model=list[NearbyProviderResponse])
async def find_nearby(
    kind: ProviderKind,
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: Optional[float] = Query(None, gt=0),
    limit: Optional[int] = Query(None, ge=1, le=200),
    matcher: ProximityMatcher = Depends(get_matcher),
):
    """Клиент опрашивает этот эндпоинт периодически (по умолчанию раз в 25 с)."""
    found = await matcher.find_nearby(kind, lat, lng, radius_km=radius_km, limit=limit)
    return [
        NearbyProviderResponse(
            provider_id=p.provider_id,
            kind=p.kind,
            distance_km=p.distance_km,
            lat=p.lat,
            lng=p.lng,
            display_name=p.display_name,
        )
        for p in found
    ]
