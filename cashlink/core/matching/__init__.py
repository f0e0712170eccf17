# cashlink/core/matching/__init__.py
"""
Поиск поставщиков поблизости и его периодическое обновление.
"""

from cashlink.core.matching.refresher import ProximityRefresher
from cashlink.core.matching.service import NearbyProvider, ProximityMatcher

__all__ = ["NearbyProvider", "ProximityMatcher", "ProximityRefresher"]
