"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

from shapely.geometry import Point, Polygon

from ..errors import InvalidCoordinate
from ..models.domain import Location

EARTH_RADIUS_KM = 6371.0


def validate_coordinate(lat: float, lon: float) -> None:
    """Raise InvalidCoordinate unless lat is in [-90, 90] and lon in [-180, 180]."""

    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidCoordinate(lat, lon)
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
        raise InvalidCoordinate(lat, lon)


def validate_location(location: Location) -> Location:
    validate_coordinate(location.latitude, location.longitude)
    return location


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(origin: Location, destination: Location) -> float:
    """Great-circle distance between two validated locations."""

    validate_location(origin)
    validate_location(destination)
    return haversine_km(origin.latitude, origin.longitude, destination.latitude, destination.longitude)


def point_in_polygon(lat: float, lon: float, polygon_coords: Sequence[tuple[float, float]]) -> bool:
    """Return True if the point is inside the polygon denoted by (lat, lon) pairs."""

    polygon = Polygon([(lng, lat) for lat, lng in polygon_coords])
    return polygon.contains(Point(lon, lat))
