# cashlink/core/storage/base.py
"""
Контракт хранилища записей расчёта.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Generic, Optional

from cashlink.core.storage.models import R, RecordQuery, UpdateOutcome

# Функция изменения: получает текущую запись, возвращает новую
# или None, если менять нечего. Исключение отменяет запись целиком.
Mutation = Callable[[R], Optional[R]]


class RecordStore(ABC, Generic[R]):
    """
    Хранилище записей с атомарным read-modify-write по одной записи.

    Единственный владелец изменяемого состояния: сервисы не пишут поля
    напрямую, а передают функцию изменения в update().
    """

    @abstractmethod
    async def create(self, record: R) -> R:
        """Сохраняет новую запись."""

    @abstractmethod
    async def get(self, record_id: str) -> R | None:
        """Возвращает запись или None."""

    @abstractmethod
    async def update(self, record_id: str, mutate: Mutation) -> UpdateOutcome[R]:
        """
        Атомарно применяет mutate к текущей версии записи.

        Два конкурентных update() одной записи выполняются последовательно:
        второй видит результат первого.

        Raises:
            NotFound: Записи нет
            StorageUnavailable: Хранилище недоступно, ничего не записано
        """

    @abstractmethod
    async def query(self, query: RecordQuery) -> list[R]:
        """Выборка записей по фильтру."""
