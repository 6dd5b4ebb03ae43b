from __future__ import annotations

import math
from dataclasses import dataclass

from ..core.constants import EARTH_RADIUS_METERS


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


def haversine_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points on a spherical earth, in meters."""
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(h)))
