# cashlink/core/rides/__init__.py
"""
Заказы поездок.
"""

from cashlink.core.rides.models import RideBooking
from cashlink.core.rides.service import RideBookingService
from cashlink.core.rides.state_machine import RideAction, RideStateMachine

__all__ = ["RideAction", "RideBooking", "RideBookingService", "RideStateMachine"]
