# cashlink/shared/events/__init__.py
"""
Схемы доменных событий.
"""

from cashlink.shared.events.base import DomainEvent, EventMetadata
from cashlink.shared.events.settlement_events import SettlementCreated, SettlementStatusChanged

__all__ = [
    "DomainEvent",
    "EventMetadata",
    "SettlementCreated",
    "SettlementStatusChanged",
]
