# cashlink/shared/events/settlement_events.py
"""
События жизненного цикла записей расчёта (обмен наличных и поездки).
Потребитель: внешний сервис уведомлений.
"""

from __future__ import annotations

from typing import Literal

from cashlink.shared.events.base import DomainEvent


class SettlementCreated(DomainEvent):
    """Событие: клиент создал запрос к поставщику."""

    event_type: Literal["settlement.created"] = "settlement.created"

    record_kind: str  # cash_transaction | ride_booking
    record_id: str
    customer_id: str
    provider_id: str
    service_type: str
    amount: str  # Decimal в строковом виде, чтобы не терять точность
    currency: str


class SettlementStatusChanged(DomainEvent):
    """Событие: статус записи изменён. Публикуется ровно один раз на переход."""

    event_type: Literal["settlement.status_changed"] = "settlement.status_changed"

    record_kind: str
    record_id: str
    customer_id: str
    provider_id: str
    old_status: str
    new_status: str
    actor_id: str | None = None
    reason: str | None = None
