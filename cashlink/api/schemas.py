# cashlink/api/schemas.py
"""
Схемы запросов и ответов HTTP API.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from cashlink.common.constants import CashServiceType, ProviderKind, RideServiceType
from cashlink.shared.models.common import TransitionResult

T = TypeVar("T")


class CreateTransactionRequest(BaseModel):
    """Запрос клиента к агенту."""

    provider_id: str = Field(..., min_length=1)
    service_type: CashServiceType
    network: Optional[str] = None
    amount: Decimal = Field(..., decimal_places=2)
    notes: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=500)


class CreateRideRequest(BaseModel):
    """Запрос клиента к водителю."""

    driver_id: str = Field(..., min_length=1)
    service_type: RideServiceType
    pickup_location: str = Field(..., min_length=1, max_length=500)
    dropoff_location: Optional[str] = Field(None, max_length=500)
    distance_km: Decimal = Field(..., ge=0)
    notes: Optional[str] = Field(None, max_length=1000)


class ReasonRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class CompleteRideRequest(BaseModel):
    driver_rating: Optional[int] = Field(None, ge=1, le=5)


class TransitionResponse(BaseModel, Generic[T]):
    """Запись после операции и факт изменения."""

    record: T
    changed: bool
    old_status: str
    new_status: str

    @classmethod
    def from_result(cls, result: TransitionResult) -> "TransitionResponse[T]":
        return cls(
            record=result.record,
            changed=result.changed,
            old_status=result.old_status,
            new_status=result.new_status,
        )


class NearbyProviderResponse(BaseModel):
    provider_id: str
    kind: ProviderKind
    distance_km: float
    lat: float
    lng: float
    display_name: Optional[str] = None
