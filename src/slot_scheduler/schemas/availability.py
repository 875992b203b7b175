"""Availability request/response schemas."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import ServiceType, SlotSegment

HHMM_PATTERN = r"^([01]?\d|2[0-3]):[0-5]\d$"


class LocationModel(BaseModel):
    latitude: float
    longitude: float
    address: str = ""
    postal_code: str = ""


class AppointmentModel(BaseModel):
    id: str
    date: date
    start_time: str = Field(..., pattern=HHMM_PATTERN)
    end_time: str = Field(..., pattern=HHMM_PATTERN)
    location: LocationModel
    duration_minutes: int = Field(..., ge=1)
    service_type: ServiceType = ServiceType.MAINTENANCE


class AvailabilityRequest(BaseModel):
    date: date
    customer_location: LocationModel
    service_duration_minutes: Optional[int] = Field(
        default=None,
        ge=1,
        description="Length of the visit; falls back to the configured default duration.",
    )
    existing_appointments: List[AppointmentModel] = Field(
        default_factory=list, description="Committed appointments for the requested day."
    )
    nearby_appointments: List[AppointmentModel] = Field(
        default_factory=list, description="Appointments on surrounding days used for clustering on empty days."
    )
    max_recommendations: Optional[int] = Field(default=None, ge=0)


class ArrivalWindowModel(BaseModel):
    earliest: str
    latest: str
    variance_minutes: int


class CandidateSlotModel(BaseModel):
    start_time: str
    end_time: str
    segment: SlotSegment
    available: bool
    travel_time_from_previous_minutes: Optional[int] = None
    travel_time_to_next_minutes: Optional[int] = None
    previous_appointment_id: Optional[str] = None
    next_appointment_id: Optional[str] = None
    efficiency_score: int = Field(..., ge=0, le=100)
    arrival_window: Optional[ArrivalWindowModel] = None
    recommended: bool = False


class DayAvailabilityResponse(BaseModel):
    date: date
    slots: List[CandidateSlotModel]
    recommended_start_times: List[str]
    day_efficiency_score: int = Field(..., ge=0, le=100)
    metadata: dict = Field(default_factory=dict)
