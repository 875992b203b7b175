"""Availability orchestration service."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from datetime import date
from typing import Callable, Sequence

from ...config import settings
from ...errors import InvalidRequest
from ...models.domain import DayAvailability, Location, ScheduledAppointment
from ...schemas.availability import (
    AppointmentModel,
    ArrivalWindowModel,
    AvailabilityRequest,
    CandidateSlotModel,
    DayAvailabilityResponse,
    LocationModel,
)
from ..geospatial import validate_location
from ..service_area import ServiceArea, ensure_in_service_area
from .efficiency import EfficiencyScorer
from .feasibility import generate_candidate_slots
from .policy import SchedulerPolicy, default_policy
from .recommendation import RecommendationSelector
from .travel import TravelTimeEstimator

logger = logging.getLogger(__name__)

NearbyPredicate = Callable[[date, ScheduledAppointment], bool]


def within_days(window_days: int) -> NearbyPredicate:
    """Nearby = any technician's appointment within ``window_days`` of the target day, excluding that day."""

    def predicate(day: date, appointment: ScheduledAppointment) -> bool:
        return appointment.date != day and abs((appointment.date - day).days) <= window_days

    return predicate


def compute_day_availability(
    day: date,
    customer_location: Location,
    service_duration_minutes: int,
    existing_appointments: Sequence[ScheduledAppointment],
    nearby_appointments: Sequence[ScheduledAppointment] = (),
    *,
    policy: SchedulerPolicy | None = None,
    service_areas: Sequence[ServiceArea] | None = None,
    nearby_predicate: NearbyPredicate | None = None,
) -> DayAvailability:
    """Feasible, scored and ranked slots for one technician day."""

    policy = policy or default_policy()
    validate_location(customer_location)
    if service_duration_minutes <= 0:
        raise InvalidRequest("Service duration must be a positive number of minutes.")
    if service_areas:
        ensure_in_service_area(customer_location, service_areas)

    predicate = nearby_predicate or within_days(policy.efficiency.nearby_window_days)
    nearby = [appointment for appointment in nearby_appointments if predicate(day, appointment)]

    candidates = generate_candidate_slots(
        day,
        customer_location,
        service_duration_minutes,
        existing_appointments,
        hours=policy.hours,
        travel=TravelTimeEstimator(policy.travel),
        max_appointments_per_day=policy.max_appointments_per_day,
    )
    scored = EfficiencyScorer(policy.efficiency).score_slots(candidates, customer_location, nearby)
    availability = RecommendationSelector(policy.recommendation).select(day, scored)

    logger.info(
        f"{day.isoformat()}: {len(availability.slots)} feasible slots, "
        f"recommended {list(availability.recommended_start_times)}, "
        f"day efficiency {availability.day_efficiency_score}"
    )
    return availability


def compute_range_availability(
    start_date: date,
    days: int,
    customer_location: Location,
    service_duration_minutes: int,
    appointments: Sequence[ScheduledAppointment],
    *,
    policy: SchedulerPolicy | None = None,
    today: date | None = None,
    service_areas: Sequence[ServiceArea] | None = None,
    max_workers: int | None = None,
) -> dict[date, DayAvailability]:
    """Availability for every bookable date in ``[start_date, start_date + days)``.

    Days are independent, so each one runs as its own task. Appointments may
    span the whole range (plus the nearby window); each day picks its own.
    """
    if days < 0:
        raise InvalidRequest("days must be >= 0")
    policy = policy or default_policy()
    validate_location(customer_location)
    today = today or date.today()

    bookable = policy.booking.bookable_dates(start_date, days, today)
    if not bookable:
        logger.info(f"No bookable dates between {start_date.isoformat()} and {days} day(s) later")
        return {}

    workers = max_workers or policy.max_parallel_days
    logger.info(f"Computing availability for {len(bookable)} day(s) with up to {workers} workers")

    results: dict[date, DayAvailability] = {}
    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_day = {
            executor.submit(
                compute_day_availability,
                day,
                customer_location,
                service_duration_minutes,
                [appointment for appointment in appointments if appointment.date == day],
                appointments,
                policy=policy,
                service_areas=service_areas,
            ): day
            for day in bookable
        }
        for future in as_completed(future_to_day):
            results[future_to_day[future]] = future.result()

    return dict(sorted(results.items()))


def find_bookable_dates(
    start_date: date,
    count: int,
    customer_location: Location,
    service_duration_minutes: int,
    appointments: Sequence[ScheduledAppointment],
    *,
    policy: SchedulerPolicy | None = None,
    today: date | None = None,
) -> list[date]:
    """First ``count`` bookable dates from ``start_date`` that still have a feasible slot."""

    policy = policy or default_policy()
    today = today or date.today()
    horizon = (policy.booking.horizon_end(today) - start_date).days + 1

    found: list[date] = []
    for day in policy.booking.bookable_dates(start_date, horizon, today):
        if len(found) >= count:
            break
        availability = compute_day_availability(
            day,
            customer_location,
            service_duration_minutes,
            [appointment for appointment in appointments if appointment.date == day],
            appointments,
            policy=policy,
        )
        if not availability.is_empty:
            found.append(day)
    return found


def _location_from_model(model: LocationModel) -> Location:
    return Location(
        latitude=model.latitude,
        longitude=model.longitude,
        address=model.address,
        postal_code=model.postal_code,
    )


def _appointment_from_model(model: AppointmentModel) -> ScheduledAppointment:
    return ScheduledAppointment(
        id=model.id,
        date=model.date,
        start_time=model.start_time,
        end_time=model.end_time,
        location=_location_from_model(model.location),
        duration_minutes=model.duration_minutes,
        service_type=model.service_type,
    )


def _to_response(availability: DayAvailability, metadata: dict) -> DayAvailabilityResponse:
    recommended = set(availability.recommended_start_times)
    slots = [
        CandidateSlotModel(
            start_time=slot.start_time,
            end_time=slot.end_time,
            segment=slot.segment,
            available=slot.available,
            travel_time_from_previous_minutes=slot.travel_time_from_previous_minutes,
            travel_time_to_next_minutes=slot.travel_time_to_next_minutes,
            previous_appointment_id=slot.previous_appointment_id,
            next_appointment_id=slot.next_appointment_id,
            efficiency_score=slot.efficiency_score,
            arrival_window=ArrivalWindowModel(
                earliest=slot.arrival_window.earliest,
                latest=slot.arrival_window.latest,
                variance_minutes=slot.arrival_window.variance_minutes,
            )
            if slot.arrival_window
            else None,
            recommended=slot.start_time in recommended,
        )
        for slot in availability.slots
    ]
    return DayAvailabilityResponse(
        date=availability.date,
        slots=slots,
        recommended_start_times=list(availability.recommended_start_times),
        day_efficiency_score=availability.day_efficiency_score,
        metadata=metadata,
    )


def process_availability_request(
    payload: AvailabilityRequest,
    *,
    policy: SchedulerPolicy | None = None,
    service_areas: Sequence[ServiceArea] | None = None,
) -> DayAvailabilityResponse:
    policy = policy or default_policy()
    if payload.max_recommendations is not None:
        policy = replace(
            policy,
            recommendation=replace(policy.recommendation, max_recommendations=payload.max_recommendations),
        )

    duration = payload.service_duration_minutes or settings.default_service_duration_minutes
    existing = [_appointment_from_model(item) for item in payload.existing_appointments]
    nearby = [_appointment_from_model(item) for item in payload.nearby_appointments]

    availability = compute_day_availability(
        payload.date,
        _location_from_model(payload.customer_location),
        duration,
        existing,
        nearby,
        policy=policy,
        service_areas=service_areas,
    )
    metadata = {
        "status": "no_availability" if availability.is_empty else "available",
        "service_duration_minutes": duration,
        "appointments_considered": sum(1 for item in existing if item.date == payload.date),
        "business_hours": {"open": policy.hours.open, "close": policy.hours.close},
    }
    return _to_response(availability, metadata)
