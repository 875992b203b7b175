"""Travel time estimation from great-circle distance.

Uses a fixed average speed plus a parking/setup buffer instead of live routing
data, so estimates ignore traffic and road topology.
"""

from __future__ import annotations

import math

from ...models.domain import Location
from ..geospatial import distance_km
from .policy import TravelPolicy


class TravelTimeEstimator:
    def __init__(self, policy: TravelPolicy | None = None) -> None:
        self.policy = policy or TravelPolicy()

    @property
    def average_speed_kmh(self) -> float:
        return self.policy.average_speed_kmh

    @property
    def buffer_minutes(self) -> int:
        return self.policy.buffer_minutes

    def minutes_for_distance(self, km: float) -> int:
        """Whole minutes, rounded up, to drive ``km`` and park."""
        if km < 0:
            raise ValueError("distance must be >= 0")
        driving = math.ceil(km / self.average_speed_kmh * 60)
        return driving + self.buffer_minutes

    def minutes_between(self, origin: Location, destination: Location) -> int:
        return self.minutes_for_distance(distance_km(origin, destination))
