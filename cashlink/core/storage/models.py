# cashlink/core/storage/models.py
"""
Базовые типы хранилища записей расчёта.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredRecord(BaseModel):
    """
    Запись, которой владеет хранилище.

    Записи иммутабельны: изменение создаёт новую версию через model_copy.
    version и updated_at выставляет только хранилище.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    version: int = 0


R = TypeVar("R", bound=StoredRecord)


@dataclass(frozen=True)
class RecordQuery:
    """Фильтр выборки записей. Результат отсортирован по created_at (новые первыми)."""

    equals: dict[str, Any] = field(default_factory=dict)
    status_in: Optional[tuple[str, ...]] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    limit: Optional[int] = None


@dataclass(frozen=True)
class UpdateOutcome(Generic[R]):
    """Результат атомарного обновления записи."""

    before: R
    after: R
    changed: bool
