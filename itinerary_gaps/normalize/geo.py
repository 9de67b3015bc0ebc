"""Decide whether two geocoded points refer to the same place."""

import math
from typing import Optional

from itinerary_gaps.config import EARTH_RADIUS_KM, SAME_PLACE_RADIUS_KM
from itinerary_gaps.models import GeoPoint


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates, in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _has_coords(p: GeoPoint) -> bool:
    return isinstance(p.latitude, (int, float)) and isinstance(p.longitude, (int, float))


def _city_key(p: GeoPoint) -> Optional[str]:
    return p.city.lower() if p.city else None


def are_same_place(a: GeoPoint, b: GeoPoint) -> bool:
    """True if ``a`` and ``b`` represent the same place.

    Rules, first applicable wins:
      1. Both have a city and the names match case-insensitively.
      2. Both have coordinates: same place if closer than SAME_PLACE_RADIUS_KM.
      3. Either address contains the other point's city.
    Points with nothing to compare are treated as different places.
    """
    city_a, city_b = _city_key(a), _city_key(b)

    if city_a and city_b and city_a == city_b:
        return True

    if _has_coords(a) and _has_coords(b):
        distance = haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)
        return distance < SAME_PLACE_RADIUS_KM

    address_a = (a.address or "").lower()
    address_b = (b.address or "").lower()
    return bool(city_b and city_b in address_a) or bool(city_a and city_a in address_b)


def place_label(p: GeoPoint) -> str:
    """Short human label for a point: city when known, else the address."""
    return p.city or p.address
