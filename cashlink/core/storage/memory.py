# cashlink/core/storage/memory.py
"""
Хранилище в памяти процесса (локальный запуск и тесты).
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Generic

from cashlink.common.exceptions import NotFound
from cashlink.core.storage.base import Mutation, RecordStore
from cashlink.core.storage.models import R, RecordQuery, UpdateOutcome, utcnow


class InMemoryRecordStore(RecordStore[R], Generic[R]):
    """
    Хранилище на словаре с блокировкой на каждую запись.

    Args:
        latency: Искусственная пауза между чтением и записью (секунды).
            Нужна тестам, чтобы конкурирующие update() пересеклись.
    """

    def __init__(self, latency: float = 0.0) -> None:
        self._records: dict[str, R] = {}
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._latency = latency

    def __len__(self) -> int:
        return len(self._records)

    async def create(self, record: R) -> R:
        if record.id in self._records:
            raise ValueError(f"Запись {record.id} уже существует")
        self._records[record.id] = record
        return record

    async def get(self, record_id: str) -> R | None:
        return self._records.get(record_id)

    async def update(self, record_id: str, mutate: Mutation) -> UpdateOutcome[R]:
        # Записи не удаляются: блокировка заводится только для существующих
        if record_id not in self._records:
            raise NotFound(f"Запись {record_id} не найдена", record_id=record_id)

        async with self._locks[record_id]:
            before = self._records[record_id]

            if self._latency:
                await asyncio.sleep(self._latency)

            after = mutate(before)
            if after is None or after == before:
                return UpdateOutcome(before=before, after=before, changed=False)

            after = after.model_copy(update={"version": before.version + 1, "updated_at": utcnow()})
            self._records[record_id] = after
            return UpdateOutcome(before=before, after=after, changed=True)

    async def query(self, query: RecordQuery) -> list[R]:
        result = []
        for record in self._records.values():
            if any(getattr(record, key) != value for key, value in query.equals.items()):
                continue
            if query.status_in is not None and str(record.status) not in query.status_in:
                continue
            if query.created_from is not None and record.created_at < query.created_from:
                continue
            if query.created_to is not None and record.created_at >= query.created_to:
                continue
            result.append(record)

        result.sort(key=lambda r: r.created_at, reverse=True)
        if query.limit is not None:
            result = result[: query.limit]
        return result
