# cashlink/core/rides/service.py
"""
Сервис заказов поездок.
В отличие от обмена наличных, ход поездки ведёт только водитель.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from cashlink.common.constants import PartyRole, ProviderKind, RideServiceType, RideStatus, TypeMsg
from cashlink.common.exceptions import (
    NotFound,
    ProviderUnavailable,
    ServiceNotOffered,
    Unauthorized,
)
from cashlink.common.logger import log_error, log_info
from cashlink.core.pricing.service import RateResolver
from cashlink.core.providers.directory import ProviderDirectory
from cashlink.core.rides.models import RideBooking
from cashlink.core.rides.state_machine import RideAction, RideStateMachine, apply_action
from cashlink.core.storage.base import RecordStore
from cashlink.core.storage.models import RecordQuery, utcnow
from cashlink.infra.event_bus import EventPublisher
from cashlink.shared.events import SettlementCreated, SettlementStatusChanged
from cashlink.shared.events.base import DomainEvent
from cashlink.shared.models.common import TransitionResult

RECORD_KIND = "ride_booking"

ACTIVE_STATUSES = (RideStatus.PENDING, RideStatus.ACCEPTED, RideStatus.IN_PROGRESS)


class RideBookingService:
    """Сервис заказов поездок."""

    def __init__(
        self,
        store: RecordStore[RideBooking],
        directory: ProviderDirectory,
        rate_resolver: Optional[RateResolver] = None,
        publisher: Optional[EventPublisher] = None,
    ) -> None:
        self.store = store
        self.directory = directory
        self.rate_resolver = rate_resolver or RateResolver()
        self.publisher = publisher

    async def create(
        self,
        customer_id: str,
        driver_id: str,
        service_type: RideServiceType,
        pickup_location: str,
        dropoff_location: Optional[str],
        distance_km: Decimal | float,
        notes: Optional[str] = None,
    ) -> RideBooking:
        """
        Создаёт заказ в статусе pending со стоимостью по тарифу водителя.

        Raises:
            Unauthorized: Клиент совпадает с водителем
            NotFound: Водитель не найден
            ProviderUnavailable: Водитель не одобрен
            ServiceNotOffered: Водитель не оказывает услугу
            ValueError: Отрицательное расстояние
        """
        service_type = RideServiceType(service_type)

        if customer_id == driver_id:
            raise Unauthorized("Нельзя заказать поездку у самого себя", driver_id=driver_id)

        profile = await self.directory.get_provider(driver_id)
        if profile is None or profile.kind != ProviderKind.DRIVER:
            raise NotFound(f"Водитель {driver_id} не найден", driver_id=driver_id)

        if not profile.is_approved:
            raise ProviderUnavailable(f"Водитель {driver_id} не может принимать заказы", driver_id=driver_id)

        if not profile.driver.offers(service_type):
            raise ServiceNotOffered(
                f"Водитель не оказывает услугу {service_type}",
                service_type=str(service_type),
            )

        quote = self.rate_resolver.resolve_fare(profile.driver, service_type, distance_km)

        booking = await self.store.create(
            RideBooking(
                customer_id=customer_id,
                driver_id=driver_id,
                service_type=service_type,
                pickup_location=pickup_location,
                dropoff_location=dropoff_location,
                distance_km=quote.distance_km,
                fare=quote.fare,
                currency=quote.currency,
                notes=notes,
            )
        )

        await log_info(
            f"Заказ поездки {booking.id} создан: {booking.fare} {booking.currency}",
            type_msg=TypeMsg.INFO,
            extra={"booking_id": booking.id, "driver_id": driver_id},
        )
        await self._publish(
            SettlementCreated(
                record_kind=RECORD_KIND,
                record_id=booking.id,
                customer_id=customer_id,
                provider_id=driver_id,
                service_type=str(service_type),
                amount=str(booking.fare),
                currency=booking.currency,
            )
        )
        return booking

    async def accept(self, booking_id: str, actor_id: str) -> TransitionResult[RideBooking]:
        return await self._apply(booking_id, actor_id, RideAction.ACCEPT)

    async def reject(
        self,
        booking_id: str,
        actor_id: str,
        reason: Optional[str] = None,
    ) -> TransitionResult[RideBooking]:
        return await self._apply(booking_id, actor_id, RideAction.REJECT, reason)

    async def cancel(
        self,
        booking_id: str,
        actor_id: str,
        reason: Optional[str] = None,
    ) -> TransitionResult[RideBooking]:
        return await self._apply(booking_id, actor_id, RideAction.CANCEL, reason)

    async def start_ride(self, booking_id: str, actor_id: str) -> TransitionResult[RideBooking]:
        return await self._apply(booking_id, actor_id, RideAction.START)

    async def complete(
        self,
        booking_id: str,
        actor_id: str,
        driver_rating: Optional[int] = None,
    ) -> TransitionResult[RideBooking]:
        return await self._apply(booking_id, actor_id, RideAction.COMPLETE, driver_rating=driver_rating)

    async def transition(
        self,
        booking_id: str,
        actor_id: str,
        new_status: RideStatus,
        reason: Optional[str] = None,
    ) -> TransitionResult[RideBooking]:
        """
        Переводит заказ в указанный статус.

        Raises:
            InvalidTransition: Переход из текущего статуса не предусмотрен
        """
        action = RideStateMachine.action_for(RideStatus(new_status))
        return await self._apply(booking_id, actor_id, action, reason)

    async def get(self, booking_id: str, actor_id: str) -> RideBooking:
        booking = await self.store.get(booking_id)
        if booking is None:
            raise NotFound(f"Заказ {booking_id} не найден", booking_id=booking_id)
        self._ensure_party(booking, actor_id)
        return booking

    async def list_for_driver(
        self,
        driver_id: str,
        statuses: Optional[Iterable[RideStatus]] = None,
        limit: Optional[int] = 50,
    ) -> list[RideBooking]:
        return await self.store.query(
            RecordQuery(
                equals={"driver_id": driver_id},
                status_in=tuple(str(s) for s in statuses) if statuses else None,
                limit=limit,
            )
        )

    async def list_active_for_driver(self, driver_id: str) -> list[RideBooking]:
        """Ожидающие, принятые и текущие заказы водителя."""
        return await self.list_for_driver(driver_id, statuses=ACTIVE_STATUSES, limit=None)

    async def list_for_customer(self, customer_id: str, limit: int = 50) -> list[RideBooking]:
        return await self.store.query(RecordQuery(equals={"customer_id": customer_id}, limit=limit))

    # ------------------------------------------------------------------

    @staticmethod
    def _ensure_party(booking: RideBooking, actor_id: str) -> PartyRole:
        if actor_id == booking.driver_id:
            return PartyRole.PROVIDER
        if actor_id == booking.customer_id:
            return PartyRole.CUSTOMER
        raise Unauthorized("Пользователь не является стороной заказа", booking_id=booking.id)

    async def _apply(
        self,
        booking_id: str,
        actor_id: str,
        action: RideAction,
        reason: Optional[str] = None,
        driver_rating: Optional[int] = None,
    ) -> TransitionResult[RideBooking]:
        def mutate(booking: RideBooking) -> RideBooking:
            role = self._ensure_party(booking, actor_id)
            return apply_action(booking, action, role, utcnow(), reason, driver_rating)

        outcome = await self.store.update(booking_id, mutate)
        before, after = outcome.before, outcome.after
        result = TransitionResult(
            record=after,
            changed=outcome.changed,
            old_status=str(before.status),
            new_status=str(after.status),
        )

        await log_info(
            f"Заказ {after.id}: {before.status} -> {after.status} ({action.value})",
            type_msg=TypeMsg.INFO,
            extra={"booking_id": after.id, "actor_id": actor_id},
        )
        await self._publish(
            SettlementStatusChanged(
                record_kind=RECORD_KIND,
                record_id=after.id,
                customer_id=after.customer_id,
                provider_id=after.driver_id,
                old_status=result.old_status,
                new_status=result.new_status,
                actor_id=actor_id,
                reason=reason,
            )
        )
        return result

    async def _publish(self, event: DomainEvent) -> None:
        if self.publisher is None:
            return
        try:
            await self.publisher.publish(event)
        except Exception as e:
            await log_error(
                f"Ошибка публикации {event.event_type}: {e}",
                extra={"event_id": event.event_id},
            )
