# cashlink/core/storage/postgres.py
"""
Хранилище записей в PostgreSQL.
Атомарность update(): SELECT ... FOR UPDATE и UPDATE в одной транзакции.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic

import asyncpg

from cashlink.common.exceptions import NotFound, StorageUnavailable
from cashlink.common.logger import log_error
from cashlink.core.storage.base import Mutation, RecordStore
from cashlink.core.storage.models import R, RecordQuery, UpdateOutcome, utcnow
from cashlink.infra.database import CONNECTION_ERRORS, DatabaseManager

STORAGE_ERRORS: tuple[type[BaseException], ...] = CONNECTION_ERRORS + (asyncpg.PostgresError,)


def _to_db(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class PostgresRecordStore(RecordStore[R], Generic[R]):
    """
    Хранилище записей одного типа в отдельной таблице.
    Колонки таблицы совпадают с полями модели.
    """

    def __init__(self, db: DatabaseManager, table: str, model: type[R]) -> None:
        """
        Args:
            db: Менеджер базы данных
            table: Имя таблицы (из кода, не из пользовательского ввода)
            model: Pydantic модель записи
        """
        self._db = db
        self._table = table
        self._model = model
        self._columns = list(model.model_fields.keys())

    def _row_to_record(self, row: asyncpg.Record) -> R:
        return self._model.model_validate(dict(row))

    def _values(self, record: R) -> list[Any]:
        return [_to_db(getattr(record, column)) for column in self._columns]

    async def _storage_failed(self, operation: str, error: BaseException) -> StorageUnavailable:
        await log_error(
            f"Ошибка хранилища {self._table} ({operation}): {error}",
            extra={"table": self._table, "operation": operation},
        )
        return StorageUnavailable(f"Хранилище {self._table} недоступно", operation=operation)

    async def create(self, record: R) -> R:
        columns = ", ".join(self._columns)
        placeholders = ", ".join(f"${i + 1}" for i in range(len(self._columns)))
        query = f"INSERT INTO {self._table} ({columns}) VALUES ({placeholders}) RETURNING *"

        try:
            row = await self._db.fetchrow(query, *self._values(record))
        except STORAGE_ERRORS as e:
            raise await self._storage_failed("create", e) from e

        return self._row_to_record(row)

    async def get(self, record_id: str) -> R | None:
        try:
            row = await self._db.fetchrow(f"SELECT * FROM {self._table} WHERE id = $1", record_id)
        except STORAGE_ERRORS as e:
            raise await self._storage_failed("get", e) from e

        return self._row_to_record(row) if row else None

    async def update(self, record_id: str, mutate: Mutation) -> UpdateOutcome[R]:
        try:
            async with self._db.transaction() as conn:
                row = await conn.fetchrow(
                    f"SELECT * FROM {self._table} WHERE id = $1 FOR UPDATE",
                    record_id,
                )
                if row is None:
                    raise NotFound(f"Запись {record_id} не найдена", record_id=record_id)

                before = self._row_to_record(row)
                after = mutate(before)
                if after is None or after == before:
                    return UpdateOutcome(before=before, after=before, changed=False)

                after = after.model_copy(
                    update={"version": before.version + 1, "updated_at": utcnow()}
                )
                columns = [c for c in self._columns if c != "id"]
                assignments = ", ".join(f"{c} = ${i + 2}" for i, c in enumerate(columns))
                await conn.execute(
                    f"UPDATE {self._table} SET {assignments} WHERE id = $1",
                    record_id,
                    *[_to_db(getattr(after, c)) for c in columns],
                )
        except STORAGE_ERRORS as e:
            raise await self._storage_failed("update", e) from e

        return UpdateOutcome(before=before, after=after, changed=True)

    async def query(self, query: RecordQuery) -> list[R]:
        conditions: list[str] = []
        args: list[Any] = []

        for column, value in query.equals.items():
            if column not in self._columns:
                raise ValueError(f"Неизвестная колонка: {column}")
            args.append(_to_db(value))
            conditions.append(f"{column} = ${len(args)}")

        if query.status_in is not None:
            args.append(list(query.status_in))
            conditions.append(f"status = ANY(${len(args)}::text[])")

        if query.created_from is not None:
            args.append(query.created_from)
            conditions.append(f"created_at >= ${len(args)}")

        if query.created_to is not None:
            args.append(query.created_to)
            conditions.append(f"created_at < ${len(args)}")

        sql = f"SELECT * FROM {self._table}"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY created_at DESC"
        if query.limit is not None:
            args.append(query.limit)
            sql += f" LIMIT ${len(args)}"

        try:
            rows = await self._db.fetch(sql, *args)
        except STORAGE_ERRORS as e:
            raise await self._storage_failed("query", e) from e

        return [self._row_to_record(row) for row in rows]
