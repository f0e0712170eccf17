# cashlink/core/transactions/service.py
"""
Сервис обменных транзакций с двойным подтверждением.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from cashlink.common.constants import (
    CashServiceType,
    PartyRole,
    ProviderKind,
    TransactionStatus,
    TypeMsg,
)
from cashlink.common.exceptions import (
    AmountOutOfRange,
    NotFound,
    ProviderUnavailable,
    ServiceNotOffered,
    Unauthorized,
)
from cashlink.common.logger import log_error, log_info
from cashlink.core.pricing.service import RateResolver, quantize_money
from cashlink.core.providers.directory import ProviderDirectory
from cashlink.core.providers.models import AmountLimits
from cashlink.core.storage.base import RecordStore
from cashlink.core.storage.models import RecordQuery, UpdateOutcome, utcnow
from cashlink.core.transactions.models import CashTransaction
from cashlink.core.transactions.state_machine import apply_close, apply_confirmation
from cashlink.infra.event_bus import EventPublisher
from cashlink.shared.events import SettlementCreated, SettlementStatusChanged
from cashlink.shared.events.base import DomainEvent
from cashlink.shared.models.common import TransitionResult

RECORD_KIND = "cash_transaction"


class CashTransactionService:
    """
    Сервис обменных транзакций.

    Все изменения идут через store.update(): проверка и запись
    выполняются атомарно для одной транзакции.
    """

    def __init__(
        self,
        store: RecordStore[CashTransaction],
        directory: ProviderDirectory,
        rate_resolver: Optional[RateResolver] = None,
        publisher: Optional[EventPublisher] = None,
        default_limits: Optional[AmountLimits] = None,
    ) -> None:
        """
        Args:
            store: Хранилище транзакций
            directory: Каталог поставщиков
            rate_resolver: Калькулятор комиссий
            publisher: Публикатор событий (без него события не отправляются)
            default_limits: Лимиты для агентов без собственных (из конфига если None)
        """
        from cashlink.config import settings

        self.store = store
        self.directory = directory
        self.rate_resolver = rate_resolver or RateResolver()
        self.publisher = publisher
        self.default_limits = default_limits or AmountLimits(
            min_amount=settings.rates.DEFAULT_MIN_AMOUNT,
            max_amount=settings.rates.DEFAULT_MAX_AMOUNT,
        )
        self.default_currency = settings.rates.DEFAULT_CURRENCY

    async def create(
        self,
        customer_id: str,
        provider_id: str,
        service_type: CashServiceType,
        network: Optional[str],
        amount: Decimal,
        notes: Optional[str] = None,
        location: Optional[str] = None,
    ) -> CashTransaction:
        """
        Создаёт транзакцию в статусе pending.

        Все проверки выполняются до записи.

        Raises:
            Unauthorized: Клиент совпадает с агентом
            AmountOutOfRange: Сумма вне лимитов агента или точнее копеек
            NotFound: Агент не найден
            ProviderUnavailable: Агент не одобрен
            ServiceNotOffered: Услуга или сеть не поддерживается агентом
        """
        amount = Decimal(amount)
        service_type = CashServiceType(service_type)

        if customer_id == provider_id:
            raise Unauthorized("Нельзя создать запрос самому себе", provider_id=provider_id)

        if amount <= 0:
            raise AmountOutOfRange("Сумма должна быть положительной", amount=str(amount))
        if amount != quantize_money(amount):
            raise AmountOutOfRange("Сумма не может содержать больше двух знаков после запятой", amount=str(amount))
        amount = quantize_money(amount)

        profile = await self.directory.get_provider(provider_id)
        if profile is None or profile.kind != ProviderKind.AGENT:
            raise NotFound(f"Агент {provider_id} не найден", provider_id=provider_id)

        if not profile.is_approved:
            raise ProviderUnavailable(f"Агент {provider_id} не может принимать запросы", provider_id=provider_id)

        agent = profile.agent
        if not agent.offers(service_type):
            raise ServiceNotOffered(
                f"Агент не оказывает услугу {service_type}",
                service_type=str(service_type),
            )
        if not agent.supports_network(network):
            raise ServiceNotOffered(f"Агент не работает с сетью {network}", network=network)

        limits = agent.limits or self.default_limits
        if not limits.contains(amount):
            raise AmountOutOfRange(
                f"Сумма {amount} вне лимитов {limits.min_amount}..{limits.max_amount}",
                amount=str(amount),
                min_amount=str(limits.min_amount),
                max_amount=str(limits.max_amount),
            )

        quote = self.rate_resolver.resolve_fee(agent, service_type, network, amount)

        tx = await self.store.create(
            CashTransaction(
                customer_id=customer_id,
                provider_id=provider_id,
                service_type=service_type,
                network=network,
                amount=amount,
                fee_amount=quote.fee_amount,
                fee_percentage=quote.fee_percentage,
                currency=agent.currency or self.default_currency,
                notes=notes,
                location=location,
            )
        )

        await log_info(
            f"Транзакция {tx.id} создана: {amount} {tx.currency}, комиссия {tx.fee_amount}",
            type_msg=TypeMsg.INFO,
            extra={"transaction_id": tx.id, "provider_id": provider_id},
        )
        await self._publish(
            SettlementCreated(
                record_kind=RECORD_KIND,
                record_id=tx.id,
                customer_id=customer_id,
                provider_id=provider_id,
                service_type=str(service_type),
                amount=str(amount),
                currency=tx.currency,
            )
        )
        return tx

    async def customer_confirm(self, transaction_id: str, actor_id: str) -> TransitionResult[CashTransaction]:
        """Подтверждение клиента. Повторный вызов ничего не меняет."""
        return await self._confirm(transaction_id, actor_id, PartyRole.CUSTOMER)

    async def agent_confirm(self, transaction_id: str, actor_id: str) -> TransitionResult[CashTransaction]:
        """Подтверждение агента. Повторный вызов ничего не меняет."""
        return await self._confirm(transaction_id, actor_id, PartyRole.PROVIDER)

    async def cancel(
        self,
        transaction_id: str,
        actor_id: str,
        reason: Optional[str] = None,
    ) -> TransitionResult[CashTransaction]:
        """Отмена любой стороной, только из pending."""

        def mutate(tx: CashTransaction) -> CashTransaction:
            self._ensure_party(tx, actor_id)
            return apply_close(tx, TransactionStatus.CANCELLED, reason)

        outcome = await self.store.update(transaction_id, mutate)
        return await self._finish(outcome, actor_id, reason)

    async def reject(
        self,
        transaction_id: str,
        actor_id: str,
        reason: Optional[str] = None,
    ) -> TransitionResult[CashTransaction]:
        """Отклонение агентом, только из pending."""

        def mutate(tx: CashTransaction) -> CashTransaction:
            if self._role_of(tx, actor_id) != PartyRole.PROVIDER:
                raise Unauthorized("Отклонить транзакцию может только агент", transaction_id=tx.id)
            return apply_close(tx, TransactionStatus.REJECTED, reason)

        outcome = await self.store.update(transaction_id, mutate)
        return await self._finish(outcome, actor_id, reason)

    async def get(self, transaction_id: str, actor_id: str) -> CashTransaction:
        tx = await self.store.get(transaction_id)
        if tx is None:
            raise NotFound(f"Транзакция {transaction_id} не найдена", transaction_id=transaction_id)
        self._ensure_party(tx, actor_id)
        return tx

    async def list_for_provider(
        self,
        provider_id: str,
        status: Optional[TransactionStatus] = None,
        limit: int = 50,
    ) -> list[CashTransaction]:
        return await self.store.query(
            RecordQuery(
                equals={"provider_id": provider_id},
                status_in=(str(status),) if status else None,
                limit=limit,
            )
        )

    async def list_for_customer(self, customer_id: str, limit: int = 50) -> list[CashTransaction]:
        return await self.store.query(RecordQuery(equals={"customer_id": customer_id}, limit=limit))

    # ------------------------------------------------------------------

    @staticmethod
    def _role_of(tx: CashTransaction, actor_id: str) -> PartyRole | None:
        if actor_id == tx.customer_id:
            return PartyRole.CUSTOMER
        if actor_id == tx.provider_id:
            return PartyRole.PROVIDER
        return None

    def _ensure_party(self, tx: CashTransaction, actor_id: str) -> PartyRole:
        role = self._role_of(tx, actor_id)
        if role is None:
            raise Unauthorized("Пользователь не является стороной транзакции", transaction_id=tx.id)
        return role

    async def _confirm(
        self,
        transaction_id: str,
        actor_id: str,
        role: PartyRole,
    ) -> TransitionResult[CashTransaction]:
        def mutate(tx: CashTransaction) -> CashTransaction | None:
            if self._role_of(tx, actor_id) != role:
                raise Unauthorized(
                    f"Подтвердить за сторону {role} может только она сама",
                    transaction_id=tx.id,
                )
            return apply_confirmation(tx, role, utcnow())

        outcome = await self.store.update(transaction_id, mutate)
        if not outcome.changed:
            await log_info(
                f"Транзакция {transaction_id}: подтверждение {role} уже учтено",
                type_msg=TypeMsg.DEBUG,
            )
        return await self._finish(outcome, actor_id)

    async def _finish(
        self,
        outcome: UpdateOutcome[CashTransaction],
        actor_id: str,
        reason: Optional[str] = None,
    ) -> TransitionResult[CashTransaction]:
        before, after = outcome.before, outcome.after
        result = TransitionResult(
            record=after,
            changed=outcome.changed,
            old_status=str(before.status),
            new_status=str(after.status),
        )

        # Событие только при смене статуса: ровно один раз на переход
        if outcome.changed and result.status_changed:
            await log_info(
                f"Транзакция {after.id}: {before.status} -> {after.status}",
                type_msg=TypeMsg.INFO,
                extra={"transaction_id": after.id, "actor_id": actor_id},
            )
            await self._publish(
                SettlementStatusChanged(
                    record_kind=RECORD_KIND,
                    record_id=after.id,
                    customer_id=after.customer_id,
                    provider_id=after.provider_id,
                    old_status=result.old_status,
                    new_status=result.new_status,
                    actor_id=actor_id,
                    reason=reason,
                )
            )
        return result

    async def _publish(self, event: DomainEvent) -> None:
        """Запись уже зафиксирована: ошибка публикации только логируется."""
        if self.publisher is None:
            return
        try:
            await self.publisher.publish(event)
        except Exception as e:
            await log_error(
                f"Ошибка публикации {event.event_type}: {e}",
                extra={"event_id": event.event_id},
            )
