# cashlink/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ProviderKind(str, Enum):
    """Тип поставщика услуг."""
    AGENT = "agent"
    DRIVER = "driver"

    def __str__(self) -> str:
        return self.value


class CashServiceType(str, Enum):
    """Услуги денежного агента."""
    CASH_TO_MOBILE = "cash_to_mobile"
    MOBILE_TO_CASH = "mobile_to_cash"
    INTERNATIONAL_TRANSFER = "international_transfer"

    def __str__(self) -> str:
        return self.value


class TransactionStatus(str, Enum):
    """Статусы обменной транзакции."""
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"

    def __str__(self) -> str:
        return self.value


class RideServiceType(str, Enum):
    """Услуги водителя."""
    AIRPORT_TRANSFER = "airport_transfer"
    CITY_RIDE = "city_ride"
    LONG_DISTANCE = "long_distance"
    PARCEL_DELIVERY = "parcel_delivery"

    def __str__(self) -> str:
        return self.value


class RideStatus(str, Enum):
    """Статусы заказа поездки."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


class PartyRole(str, Enum):
    """Сторона записи, от имени которой выполняется действие."""
    CUSTOMER = "customer"
    PROVIDER = "provider"

    def __str__(self) -> str:
        return self.value


class StatsPeriod(str, Enum):
    """Периоды для статистики дашбордов."""
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


class KycStatus(str, Enum):
    """Статусы проверки KYC (управляются внешним каталогом)."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
