"""Domain models for appointments, candidate slots and day availability."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class ServiceType(str, Enum):
    INSTALLATION = "installation"
    MAINTENANCE = "maintenance"
    REPAIR = "repair"
    CONSULTATION = "consultation"
    INSPECTION = "inspection"


class SlotSegment(str, Enum):
    """Where in the day a candidate slot sits relative to committed appointments."""

    OPEN_DAY = "open_day"
    BEFORE_FIRST = "before_first"
    BETWEEN = "between"
    AFTER_LAST = "after_last"


@dataclass(frozen=True, slots=True)
class Location:
    """A geocoded address. Equality is by value."""

    latitude: float
    longitude: float
    address: str = ""
    postal_code: str = ""


@dataclass(frozen=True, slots=True)
class ScheduledAppointment:
    """An already-committed booking for a technician."""

    id: str
    date: date
    start_time: str
    end_time: str
    location: Location
    duration_minutes: int
    service_type: ServiceType = ServiceType.MAINTENANCE


@dataclass(frozen=True, slots=True)
class ArrivalWindow:
    earliest: str
    latest: str
    variance_minutes: int


@dataclass(frozen=True, slots=True)
class CandidateSlot:
    start_time: str
    end_time: str
    segment: SlotSegment
    available: bool = True
    travel_time_from_previous_minutes: Optional[int] = None
    travel_time_to_next_minutes: Optional[int] = None
    previous_appointment_id: Optional[str] = None
    next_appointment_id: Optional[str] = None
    efficiency_score: int = 0
    arrival_window: Optional[ArrivalWindow] = None

    @property
    def total_travel_minutes(self) -> Optional[int]:
        """Sum of the defined travel legs, or None when the slot has no neighbours."""
        legs = [
            leg
            for leg in (self.travel_time_from_previous_minutes, self.travel_time_to_next_minutes)
            if leg is not None
        ]
        if not legs:
            return None
        return sum(legs)


@dataclass(frozen=True, slots=True)
class DayAvailability:
    date: date
    slots: tuple[CandidateSlot, ...] = field(default_factory=tuple)
    recommended_start_times: tuple[str, ...] = field(default_factory=tuple)
    day_efficiency_score: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.slots

    def recommended_slots(self) -> list[CandidateSlot]:
        by_time = {slot.start_time: slot for slot in self.slots}
        return [by_time[start] for start in self.recommended_start_times if start in by_time]
