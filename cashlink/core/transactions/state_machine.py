# cashlink/core/transactions/state_machine.py
"""
Переходы статусов обменной транзакции.
"""

from __future__ import annotations

from datetime import datetime

from cashlink.common.constants import PartyRole, TransactionStatus
from cashlink.common.exceptions import InvalidTransition, NotPending
from cashlink.core.transactions.models import CashTransaction


class TransactionStateMachine:
    ALLOWED_TRANSITIONS = {
        TransactionStatus.PENDING: [
            TransactionStatus.COMPLETED,
            TransactionStatus.CANCELLED,
            TransactionStatus.REJECTED,
        ],
        TransactionStatus.COMPLETED: [],
        TransactionStatus.CANCELLED: [],
        TransactionStatus.REJECTED: [],
    }

    @staticmethod
    def can_transition(current_status: str, new_status: str) -> bool:
        try:
            curr = TransactionStatus(current_status)
            new = TransactionStatus(new_status)
            return new in TransactionStateMachine.ALLOWED_TRANSITIONS.get(curr, [])
        except ValueError:
            return False

    @staticmethod
    def ensure_transition(current_status: str, new_status: str) -> None:
        """
        Raises:
            NotPending: Запись уже в терминальном статусе
            InvalidTransition: Переход не предусмотрен
        """
        if TransactionStateMachine.can_transition(current_status, new_status):
            return
        if TransactionStatus(current_status) != TransactionStatus.PENDING:
            raise NotPending(
                str(current_status),
                str(new_status),
                f"Транзакция уже в статусе {current_status}",
            )
        raise InvalidTransition(str(current_status), str(new_status))


def apply_confirmation(
    tx: CashTransaction,
    role: PartyRole,
    now: datetime,
) -> CashTransaction | None:
    """
    Ставит флаг подтверждения стороны и, если вторая сторона уже
    подтвердила, завершает транзакцию в том же шаге.

    Returns:
        Новая версия записи или None, если менять нечего
    """
    if tx.status == TransactionStatus.COMPLETED:
        return None
    if tx.status != TransactionStatus.PENDING:
        raise NotPending(
            str(tx.status),
            str(TransactionStatus.COMPLETED),
            f"Нельзя подтвердить транзакцию в статусе {tx.status}",
        )

    own_flag, other_flag = (
        ("customer_confirmed", "agent_confirmed")
        if role == PartyRole.CUSTOMER
        else ("agent_confirmed", "customer_confirmed")
    )
    if getattr(tx, own_flag):
        return None

    update: dict = {own_flag: True}
    if getattr(tx, other_flag):
        TransactionStateMachine.ensure_transition(tx.status, TransactionStatus.COMPLETED)
        update.update(status=TransactionStatus.COMPLETED, confirmed_at=now)

    # model_copy не валидирует, поэтому оба флага и статус меняются вместе
    return tx.model_copy(update=update)


def apply_close(
    tx: CashTransaction,
    target: TransactionStatus,
    reason: str | None = None,
) -> CashTransaction:
    """Отмена или отклонение: только из pending, флаги не требуются."""
    TransactionStateMachine.ensure_transition(tx.status, target)
    update: dict = {"status": target}
    if target == TransactionStatus.REJECTED:
        update["rejection_reason"] = reason
    elif target == TransactionStatus.CANCELLED:
        update["cancellation_reason"] = reason
    return tx.model_copy(update=update)
