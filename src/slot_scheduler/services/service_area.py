"""Service area checks for customer locations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..errors import InvalidConfiguration, OutsideServiceArea
from ..models.domain import Location
from .geospatial import point_in_polygon, validate_coordinate, validate_location

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ServiceArea:
    """A named region, given as a (lat, lon) polygon, inside which bookings are accepted."""

    name: str
    polygon: tuple[tuple[float, float], ...]

    def __post_init__(self) -> None:
        if len(self.polygon) < 3:
            raise InvalidConfiguration(f"Service area '{self.name}' needs at least 3 polygon vertices.")
        for lat, lon in self.polygon:
            validate_coordinate(lat, lon)

    def contains(self, location: Location) -> bool:
        validate_location(location)
        return point_in_polygon(location.latitude, location.longitude, self.polygon)


def find_service_area(location: Location, areas: Sequence[ServiceArea]) -> Optional[ServiceArea]:
    for area in areas:
        if area.contains(location):
            return area
    return None


def ensure_in_service_area(location: Location, areas: Sequence[ServiceArea]) -> ServiceArea:
    area = find_service_area(location, areas)
    if area is None:
        logger.info(
            f"Location ({location.latitude}, {location.longitude}) is outside all {len(areas)} service areas"
        )
        raise OutsideServiceArea(
            f"Location '{location.address or (location.latitude, location.longitude)}' is outside the service area."
        )
    return area
