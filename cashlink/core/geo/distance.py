# cashlink/core/geo/distance.py
import math

EARTH_RADIUS_KM = 6371.0


def validate_coordinates(lat: float, lng: float) -> None:
    """
    Raises:
        ValueError: Координаты вне допустимого диапазона или не числа
    """
    if lat is None or lng is None or math.isnan(lat) or math.isnan(lng):
        raise ValueError("Координаты не заданы")
    if not -90 <= lat <= 90:
        raise ValueError(f"Широта вне диапазона: {lat}")
    if not -180 <= lng <= 180:
        raise ValueError(f"Долгота вне диапазона: {lng}")


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Вычисляет расстояние между двумя точками (в км) по формуле Haversine.
    """
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(dlon / 2) ** 2)

    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c
