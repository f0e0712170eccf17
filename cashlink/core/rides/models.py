# cashlink/core/rides/models.py
"""
Модель заказа поездки.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from cashlink.common.constants import PartyRole, RideServiceType, RideStatus
from cashlink.core.storage.models import StoredRecord


class RideBooking(StoredRecord):
    """Заказ поездки. Статусом управляет водитель; клиент может только отменить."""

    customer_id: str
    driver_id: str
    service_type: RideServiceType
    pickup_location: str
    dropoff_location: Optional[str] = None
    distance_km: Decimal = Field(..., ge=0)
    fare: Decimal = Field(..., ge=0)
    currency: str
    status: RideStatus = RideStatus.PENDING
    notes: Optional[str] = None

    # Временные метки переходов
    accepted_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[PartyRole] = None
    rejection_reason: Optional[str] = None

    # Оценка клиента при завершении поездки
    driver_rating: Optional[int] = Field(None, ge=1, le=5)

    @property
    def is_active(self) -> bool:
        return self.status in (RideStatus.PENDING, RideStatus.ACCEPTED, RideStatus.IN_PROGRESS)
