"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..models.domain import Coordinates

EARTH_RADIUS_KM = 6371.0


def degrees_to_radians(degrees: float) -> float:
    return math.radians(degrees)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = degrees_to_radians(lat1), degrees_to_radians(lat2)
    d_phi = degrees_to_radians(lat2 - lat1)
    d_lambda = degrees_to_radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance(origin: Coordinates, destination: Coordinates) -> float:
    """Great-circle distance in kilometres between two coordinate pairs."""

    return haversine_km(origin.latitude, origin.longitude, destination.latitude, destination.longitude)


def travel_minutes(distance_km: float, speed_kmh: float) -> float:
    """Convert a distance into driving minutes at a flat average speed."""

    if speed_kmh <= 0:
        raise ValueError("speed_kmh must be positive")
    return distance_km / speed_kmh * 60.0
