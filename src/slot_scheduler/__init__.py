"""Location-aware appointment slot scheduling for field-service technicians."""

from .errors import InvalidConfiguration, InvalidCoordinate, InvalidRequest, OutsideServiceArea, SchedulerError
from .models.domain import (
    ArrivalWindow,
    CandidateSlot,
    DayAvailability,
    Location,
    ScheduledAppointment,
    ServiceType,
    SlotSegment,
)
from .services.scheduling import compute_day_availability, compute_range_availability

__all__ = [
    "compute_day_availability",
    "compute_range_availability",
    "Location",
    "ScheduledAppointment",
    "ServiceType",
    "SlotSegment",
    "CandidateSlot",
    "ArrivalWindow",
    "DayAvailability",
    "SchedulerError",
    "InvalidCoordinate",
    "InvalidConfiguration",
    "InvalidRequest",
    "OutsideServiceArea",
]
