# cashlink/core/geo/__init__.py
from cashlink.core.geo.distance import haversine_km, validate_coordinates

__all__ = ["haversine_km", "validate_coordinates"]
