"""Error taxonomy for the slot scheduler.

Every error derives from ``ValueError``; HTTP handlers map them to 400 responses.
"""

from __future__ import annotations


class SchedulerError(ValueError):
    """Base class for all scheduler errors."""


class InvalidCoordinate(SchedulerError):
    """A location has a latitude or longitude outside the valid range."""

    def __init__(self, latitude: float, longitude: float) -> None:
        self.latitude = latitude
        self.longitude = longitude
        super().__init__(
            f"Invalid coordinate ({latitude}, {longitude}): latitude must be within [-90, 90] "
            f"and longitude within [-180, 180]."
        )


class InvalidConfiguration(SchedulerError):
    """Business hours or tuning values are inconsistent. Raised at startup."""


class InvalidRequest(SchedulerError):
    """A request argument is outside its declared domain."""


class OutsideServiceArea(SchedulerError):
    """The customer location is not covered by any configured service area."""
