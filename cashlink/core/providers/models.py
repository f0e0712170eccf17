# cashlink/core/providers/models.py
"""
Модели поставщиков услуг (денежные агенты и водители).
Настройки валидируются на границе каталога, а не в калькуляторе тарифов.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cashlink.common.constants import CashServiceType, KycStatus, ProviderKind, RideServiceType


def _default_cash_services() -> dict[CashServiceType, bool]:
    return {
        CashServiceType.CASH_TO_MOBILE: True,
        CashServiceType.MOBILE_TO_CASH: True,
        CashServiceType.INTERNATIONAL_TRANSFER: False,
    }


def _default_ride_services() -> dict[RideServiceType, bool]:
    return {service: True for service in RideServiceType}


class NetworkFee(BaseModel):
    """Комиссия для конкретной сети (бренда мобильных денег)."""

    model_config = ConfigDict(frozen=True)

    percentage: Decimal = Field(..., ge=0, le=100, description="Процент от суммы")
    min_fee: Optional[Decimal] = Field(None, ge=0, description="Минимальная комиссия")
    max_fee: Optional[Decimal] = Field(None, ge=0, description="Максимальная комиссия")
    flat: Optional[Decimal] = Field(None, ge=0, description="Фиксированная надбавка")

    @model_validator(mode="after")
    def check_bounds(self) -> "NetworkFee":
        if self.min_fee is not None and self.max_fee is not None and self.min_fee > self.max_fee:
            raise ValueError("min_fee не может превышать max_fee")
        return self


class AmountLimits(BaseModel):
    """Допустимый диапазон суммы одной транзакции."""

    model_config = ConfigDict(frozen=True)

    min_amount: Decimal = Field(..., gt=0)
    max_amount: Decimal = Field(..., gt=0)

    @model_validator(mode="after")
    def check_range(self) -> "AmountLimits":
        if self.min_amount > self.max_amount:
            raise ValueError("min_amount не может превышать max_amount")
        return self

    def contains(self, amount: Decimal) -> bool:
        return self.min_amount <= amount <= self.max_amount


class AgentSettings(BaseModel):
    """Настройки денежного агента."""

    model_config = ConfigDict(frozen=True)

    services: dict[CashServiceType, bool] = Field(default_factory=_default_cash_services)
    # Процент комиссии по типу услуги; при None или отсутствии ключа берётся процент по умолчанию
    rates: dict[CashServiceType, Optional[Decimal]] = Field(default_factory=dict)
    network_fees: dict[str, NetworkFee] = Field(default_factory=dict)
    # Пустой список: агент работает с любой сетью
    supported_networks: list[str] = Field(default_factory=list)
    limits: Optional[AmountLimits] = None
    currency: Optional[str] = None

    def offers(self, service_type: CashServiceType) -> bool:
        return self.services.get(service_type, False)

    def supports_network(self, network: str | None) -> bool:
        if network is None or not self.supported_networks:
            return True
        return network in self.supported_networks


class DriverSettings(BaseModel):
    """Настройки водителя."""

    model_config = ConfigDict(frozen=True)

    services: dict[RideServiceType, bool] = Field(default_factory=_default_ride_services)
    base_rate: Optional[Decimal] = Field(None, ge=0, description="Стартовая стоимость")
    per_km: Optional[Decimal] = Field(None, ge=0, description="Стоимость километра")
    airport_rate: Optional[Decimal] = Field(None, ge=0, description="Фикс. цена трансфера в аэропорт")
    currency: Optional[str] = None

    def offers(self, service_type: RideServiceType) -> bool:
        return self.services.get(service_type, False)


class ProviderProfile(BaseModel):
    """Профиль поставщика из внешнего каталога (только чтение)."""

    model_config = ConfigDict(frozen=True)

    id: str
    kind: ProviderKind
    display_name: Optional[str] = None
    kyc_status: KycStatus = KycStatus.PENDING
    is_online: bool = False
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    location_updated_at: Optional[datetime] = None
    agent: Optional[AgentSettings] = None
    driver: Optional[DriverSettings] = None

    @model_validator(mode="after")
    def fill_settings(self) -> "ProviderProfile":
        # У поставщика всегда есть настройки своего типа
        if self.kind == ProviderKind.AGENT and self.agent is None:
            object.__setattr__(self, "agent", AgentSettings())
        if self.kind == ProviderKind.DRIVER and self.driver is None:
            object.__setattr__(self, "driver", DriverSettings())
        return self

    @property
    def is_approved(self) -> bool:
        return self.kyc_status == KycStatus.APPROVED

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class ProviderLocation(BaseModel):
    """Снимок местоположения поставщика для поиска поблизости."""

    model_config = ConfigDict(frozen=True)

    provider_id: str
    kind: ProviderKind
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    is_online: bool
    updated_at: Optional[datetime] = None
    display_name: Optional[str] = None
