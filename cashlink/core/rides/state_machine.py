# cashlink/core/rides/state_machine.py
"""
Переходы статусов заказа поездки.
Каждый переход разрешён только определённой стороне.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import NamedTuple

from cashlink.common.constants import PartyRole, RideStatus
from cashlink.common.exceptions import InvalidTransition, Unauthorized
from cashlink.core.rides.models import RideBooking


class RideAction(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    CANCEL = "cancel"
    START = "start"
    COMPLETE = "complete"


class Edge(NamedTuple):
    source: RideStatus
    target: RideStatus
    actors: frozenset[PartyRole]


_DRIVER = frozenset({PartyRole.PROVIDER})
_BOTH = frozenset({PartyRole.CUSTOMER, PartyRole.PROVIDER})

MIN_RATING = 1
MAX_RATING = 5


class RideStateMachine:
    EDGES = {
        RideAction.ACCEPT: Edge(RideStatus.PENDING, RideStatus.ACCEPTED, _DRIVER),
        RideAction.REJECT: Edge(RideStatus.PENDING, RideStatus.REJECTED, _DRIVER),
        RideAction.CANCEL: Edge(RideStatus.PENDING, RideStatus.CANCELLED, _BOTH),
        RideAction.START: Edge(RideStatus.ACCEPTED, RideStatus.IN_PROGRESS, _DRIVER),
        RideAction.COMPLETE: Edge(RideStatus.IN_PROGRESS, RideStatus.COMPLETED, _DRIVER),
    }

    ALLOWED_TRANSITIONS = {
        RideStatus.PENDING: [RideStatus.ACCEPTED, RideStatus.REJECTED, RideStatus.CANCELLED],
        RideStatus.ACCEPTED: [RideStatus.IN_PROGRESS],
        RideStatus.IN_PROGRESS: [RideStatus.COMPLETED],
        RideStatus.COMPLETED: [],
        RideStatus.REJECTED: [],
        RideStatus.CANCELLED: [],
    }

    # Временная метка, которую ставит переход в статус
    TIMESTAMP_FIELDS = {
        RideStatus.ACCEPTED: "accepted_at",
        RideStatus.IN_PROGRESS: "started_at",
        RideStatus.COMPLETED: "completed_at",
        RideStatus.CANCELLED: "cancelled_at",
        RideStatus.REJECTED: "cancelled_at",
    }

    @staticmethod
    def can_transition(current_status: str, new_status: str) -> bool:
        try:
            curr = RideStatus(current_status)
            new = RideStatus(new_status)
            return new in RideStateMachine.ALLOWED_TRANSITIONS.get(curr, [])
        except ValueError:
            return False

    @staticmethod
    def action_for(new_status: RideStatus) -> RideAction:
        for action, edge in RideStateMachine.EDGES.items():
            if edge.target == new_status:
                return action
        raise InvalidTransition("*", str(new_status), f"В статус {new_status} перейти нельзя")


def apply_action(
    booking: RideBooking,
    action: RideAction,
    role: PartyRole,
    now: datetime,
    reason: str | None = None,
    driver_rating: int | None = None,
) -> RideBooking:
    """
    Применяет действие к заказу.
    Оценка водителя принимается только при завершении.

    Raises:
        InvalidTransition: Действие недопустимо в текущем статусе
        Unauthorized: Действие недоступно этой стороне
        ValueError: Оценка вне диапазона 1..5 или не при завершении
    """
    edge = RideStateMachine.EDGES[action]
    if booking.status != edge.source:
        raise InvalidTransition(str(booking.status), str(edge.target))
    if role not in edge.actors:
        raise Unauthorized(f"Действие {action.value} недоступно стороне {role}", booking_id=booking.id)

    update: dict = {
        "status": edge.target,
        RideStateMachine.TIMESTAMP_FIELDS[edge.target]: now,
    }
    if action == RideAction.CANCEL:
        update.update(cancellation_reason=reason, cancelled_by=role)
    elif action == RideAction.REJECT:
        update["rejection_reason"] = reason

    if driver_rating is not None:
        if action != RideAction.COMPLETE:
            raise ValueError("Оценку можно поставить только при завершении поездки")
        if not MIN_RATING <= driver_rating <= MAX_RATING:
            raise ValueError(f"Оценка должна быть от {MIN_RATING} до {MAX_RATING}")
        update["driver_rating"] = driver_rating

    return booking.model_copy(update=update)
