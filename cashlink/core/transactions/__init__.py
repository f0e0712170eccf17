# cashlink/core/transactions/__init__.py
"""
Обменные транзакции с двойным подтверждением.
"""

from cashlink.core.transactions.models import CashTransaction
from cashlink.core.transactions.service import CashTransactionService
from cashlink.core.transactions.state_machine import TransactionStateMachine

__all__ = ["CashTransaction", "CashTransactionService", "TransactionStateMachine"]
