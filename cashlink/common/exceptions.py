# cashlink/common/exceptions.py
"""
Доменные ошибки движка расчётов.
Каждая ошибка несёт машинно-читаемый код для API.
"""

from __future__ import annotations

from typing import Any


class SettlementError(Exception):
    """Базовая ошибка движка."""

    code: str = "settlement_error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class AmountOutOfRange(SettlementError):
    """Сумма вне лимитов агента."""

    code = "amount_out_of_range"


class InvalidTransition(SettlementError):
    """Недопустимый переход статуса."""

    code = "invalid_transition"

    def __init__(self, current: str, target: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Недопустимый переход из {current} в {target}",
            current=current,
            target=target,
        )
        self.current = current
        self.target = target


class NotPending(InvalidTransition):
    """Изменение записи, которая уже не в статусе pending."""

    code = "not_pending"


class Unauthorized(SettlementError):
    """Вызывающий не является стороной записи."""

    code = "unauthorized"


class NotFound(SettlementError):
    """Запись или поставщик не найдены."""

    code = "not_found"


class StorageUnavailable(SettlementError):
    """Хранилище временно недоступно. Операцию можно повторить целиком."""

    code = "storage_unavailable"


class ServiceNotOffered(SettlementError):
    """Поставщик не оказывает запрошенную услугу или не работает с сетью."""

    code = "service_not_offered"


class ProviderUnavailable(SettlementError):
    """Поставщик не может принимать запросы (не одобрен или отключён)."""

    code = "provider_unavailable"
