# cashlink/core/storage/__init__.py
"""
Хранилище записей расчёта: контракт и адаптеры.
"""

from cashlink.core.storage.base import Mutation, RecordStore
from cashlink.core.storage.memory import InMemoryRecordStore
from cashlink.core.storage.models import RecordQuery, StoredRecord, UpdateOutcome, utcnow
from cashlink.core.storage.postgres import PostgresRecordStore

__all__ = [
    "InMemoryRecordStore",
    "Mutation",
    "PostgresRecordStore",
    "RecordQuery",
    "RecordStore",
    "StoredRecord",
    "UpdateOutcome",
    "utcnow",
]
