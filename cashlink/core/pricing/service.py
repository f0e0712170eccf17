# cashlink/core/pricing/service.py
"""
Расчёт комиссии за обмен наличных и стоимости поездки.
Все суммы считаются в Decimal и округляются до копеек (ROUND_HALF_UP).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from cashlink.common.constants import CashServiceType, RideServiceType
from cashlink.core.providers.models import AgentSettings, DriverSettings

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def quantize_money(value: Decimal) -> Decimal:
    """Округляет сумму до 2 знаков по правилу half-up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class FeeQuote(BaseModel):
    """Результат расчёта комиссии (снимок на момент запроса)."""

    model_config = ConfigDict(frozen=True)

    fee_amount: Decimal
    fee_percentage: Decimal


class FareQuote(BaseModel):
    """Результат расчёта стоимости поездки."""

    model_config = ConfigDict(frozen=True)

    fare: Decimal
    base_rate: Decimal
    per_km: Decimal
    distance_km: Decimal
    is_flat_rate: bool = False
    currency: str


class RateResolver:
    """Калькулятор комиссий и тарифов по настройкам поставщика."""

    def __init__(
        self,
        default_percentage: Optional[Decimal] = None,
        default_base_rate: Optional[Decimal] = None,
        default_per_km: Optional[Decimal] = None,
        default_currency: Optional[str] = None,
    ) -> None:
        """Значения по умолчанию берутся из конфига, если не переданы явно."""
        from cashlink.config import settings

        rates = settings.rates
        self.default_percentage = Decimal(
            default_percentage if default_percentage is not None else rates.DEFAULT_FEE_PERCENTAGE
        )
        self.default_base_rate = Decimal(
            default_base_rate if default_base_rate is not None else rates.DEFAULT_RIDE_BASE_RATE
        )
        self.default_per_km = Decimal(
            default_per_km if default_per_km is not None else rates.DEFAULT_RIDE_PER_KM
        )
        self.default_currency = default_currency or rates.DEFAULT_CURRENCY

    def resolve_fee(
        self,
        agent: AgentSettings,
        service_type: CashServiceType,
        network: Optional[str],
        amount: Decimal,
    ) -> FeeQuote:
        """
        Рассчитывает комиссию агента.

        Порядок выбора ставки:
        1. Запись комиссии для сети (если сеть указана и настроена)
        2. Процент для типа услуги
        3. Процент по умолчанию (без минимального порога)

        Args:
            agent: Настройки агента
            service_type: Тип услуги
            network: Сеть мобильных денег (опционально)
            amount: Сумма транзакции (> 0, проверяется вызывающим)

        Returns:
            FeeQuote с комиссией и применённым процентом
        """
        amount = Decimal(amount)
        network_fee = agent.network_fees.get(network) if network else None

        if network_fee is not None:
            percentage = network_fee.percentage
        else:
            service_rate = agent.rates.get(service_type)
            percentage = service_rate if service_rate is not None else self.default_percentage

        fee = amount * percentage / HUNDRED

        if network_fee is not None:
            if network_fee.flat is not None:
                fee += network_fee.flat
            if network_fee.min_fee is not None and fee < network_fee.min_fee:
                fee = network_fee.min_fee
            if network_fee.max_fee is not None and fee > network_fee.max_fee:
                fee = network_fee.max_fee

        return FeeQuote(fee_amount=quantize_money(fee), fee_percentage=Decimal(percentage))

    def resolve_fare(
        self,
        driver: DriverSettings,
        service_type: RideServiceType,
        distance_km: Decimal | float,
    ) -> FareQuote:
        """
        Рассчитывает стоимость поездки: base_rate + per_km * distance_km.
        Для трансфера в аэропорт действует фиксированная цена, если она задана.

        Raises:
            ValueError: Отрицательное расстояние
        """
        distance = Decimal(str(distance_km))
        if distance < 0:
            raise ValueError("Расстояние не может быть отрицательным")

        base_rate = driver.base_rate if driver.base_rate is not None else self.default_base_rate
        per_km = driver.per_km if driver.per_km is not None else self.default_per_km
        currency = driver.currency or self.default_currency

        if service_type == RideServiceType.AIRPORT_TRANSFER and driver.airport_rate is not None:
            return FareQuote(
                fare=quantize_money(driver.airport_rate),
                base_rate=base_rate,
                per_km=per_km,
                distance_km=distance,
                is_flat_rate=True,
                currency=currency,
            )

        return FareQuote(
            fare=quantize_money(base_rate + per_km * distance),
            base_rate=base_rate,
            per_km=per_km,
            distance_km=distance,
            currency=currency,
        )
