# cashlink/core/providers/__init__.py
"""
Каталог поставщиков (внешний контракт и адаптеры).
"""

from cashlink.core.providers.models import (
    AgentSettings,
    AmountLimits,
    DriverSettings,
    NetworkFee,
    ProviderLocation,
    ProviderProfile,
)
from cashlink.core.providers.directory import (
    InMemoryProviderDirectory,
    PostgresProviderDirectory,
    ProviderDirectory,
)

__all__ = [
    "AgentSettings",
    "AmountLimits",
    "DriverSettings",
    "NetworkFee",
    "ProviderLocation",
    "ProviderProfile",
    "InMemoryProviderDirectory",
    "PostgresProviderDirectory",
    "ProviderDirectory",
]
