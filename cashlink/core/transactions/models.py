# cashlink/core/transactions/models.py
"""
Модель обменной транзакции (наличные <-> мобильные деньги).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, model_validator

from cashlink.common.constants import CashServiceType, TransactionStatus
from cashlink.core.storage.models import StoredRecord


class CashTransaction(StoredRecord):
    """
    Обменная транзакция между клиентом и агентом.

    fee_amount и fee_percentage фиксируются при создании и больше не пересчитываются.
    status == completed тогда и только тогда, когда подтвердили обе стороны.
    """

    customer_id: str
    provider_id: str
    service_type: CashServiceType
    network: Optional[str] = None
    amount: Decimal = Field(..., gt=0)
    fee_amount: Decimal = Field(..., ge=0)
    fee_percentage: Decimal = Field(..., ge=0)
    currency: str
    status: TransactionStatus = TransactionStatus.PENDING

    # Двойное подтверждение
    customer_confirmed: bool = False
    agent_confirmed: bool = False

    notes: Optional[str] = None
    location: Optional[str] = None  # Место встречи
    rejection_reason: Optional[str] = None
    cancellation_reason: Optional[str] = None
    confirmed_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_confirmation(self) -> "CashTransaction":
        both_confirmed = self.customer_confirmed and self.agent_confirmed
        if (self.status == TransactionStatus.COMPLETED) != both_confirmed:
            raise ValueError("completed допустим только при подтверждении обеих сторон")
        return self

    @property
    def total_amount(self) -> Decimal:
        return self.amount + self.fee_amount
