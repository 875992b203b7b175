"""Feasible start-time generation for a technician's day.

The day is split into segments around the committed appointments: before the
first one, between each consecutive pair, and after the last one. Each segment
gives a window ``[earliest, latest]`` of start times that leave enough time to
drive in from the previous stop and out to the next one. Start times are taken
from a grid anchored at business open.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterator, Optional, Sequence

from ...errors import InvalidRequest
from ...models.domain import CandidateSlot, Location, ScheduledAppointment, SlotSegment
from .clock import align_up, format_hhmm, parse_hhmm
from .policy import BusinessHours
from .travel import TravelTimeEstimator

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Segment:
    kind: SlotSegment
    earliest: int
    latest: int
    travel_from_previous: Optional[int] = None
    travel_to_next: Optional[int] = None
    previous_id: Optional[str] = None
    next_id: Optional[str] = None


def _appointment_minutes(appointment: ScheduledAppointment) -> tuple[int, int]:
    try:
        return parse_hhmm(appointment.start_time), parse_hhmm(appointment.end_time)
    except ValueError as exc:
        raise InvalidRequest(f"Appointment {appointment.id}: {exc}") from exc


def appointments_for_day(day: date, appointments: Sequence[ScheduledAppointment]) -> list[ScheduledAppointment]:
    """Appointments dated ``day``, ordered by start then end time."""

    same_day = [appointment for appointment in appointments if appointment.date == day]
    dropped = len(appointments) - len(same_day)
    if dropped:
        logger.warning(f"Ignoring {dropped} appointment(s) not dated {day.isoformat()}")
    return sorted(same_day, key=_appointment_minutes)


def _segments(
    customer_location: Location,
    duration_minutes: int,
    day_appointments: list[ScheduledAppointment],
    hours: BusinessHours,
    travel: TravelTimeEstimator,
) -> Iterator[_Segment]:
    last_start = hours.close_minute - duration_minutes

    if not day_appointments:
        yield _Segment(SlotSegment.OPEN_DAY, hours.open_minute, last_start)
        return

    first = day_appointments[0]
    to_first = travel.minutes_between(customer_location, first.location)
    yield _Segment(
        SlotSegment.BEFORE_FIRST,
        earliest=hours.open_minute,
        latest=min(last_start, parse_hhmm(first.start_time) - duration_minutes - to_first),
        travel_to_next=to_first,
        next_id=first.id,
    )

    # previous stop = the earlier appointment that ends last
    previous = first
    for following in day_appointments[1:]:
        from_previous = travel.minutes_between(previous.location, customer_location)
        to_next = travel.minutes_between(customer_location, following.location)
        yield _Segment(
            SlotSegment.BETWEEN,
            earliest=parse_hhmm(previous.end_time) + from_previous,
            latest=min(last_start, parse_hhmm(following.start_time) - duration_minutes - to_next),
            travel_from_previous=from_previous,
            travel_to_next=to_next,
            previous_id=previous.id,
            next_id=following.id,
        )
        if parse_hhmm(following.end_time) > parse_hhmm(previous.end_time):
            previous = following

    last = previous
    from_last = travel.minutes_between(last.location, customer_location)
    yield _Segment(
        SlotSegment.AFTER_LAST,
        earliest=parse_hhmm(last.end_time) + from_last,
        latest=last_start,
        travel_from_previous=from_last,
        previous_id=last.id,
    )


def generate_candidate_slots(
    day: date,
    customer_location: Location,
    duration_minutes: int,
    appointments: Sequence[ScheduledAppointment],
    *,
    hours: BusinessHours | None = None,
    travel: TravelTimeEstimator | None = None,
    max_appointments_per_day: int | None = None,
) -> list[CandidateSlot]:
    """Every grid-aligned start time on ``day`` that fits around the committed appointments.

    Slots are returned unscored (``efficiency_score`` is 0) in segment order.
    An empty list is a valid answer.
    """
    if duration_minutes <= 0:
        raise InvalidRequest("Service duration must be a positive number of minutes.")
    hours = hours or BusinessHours()
    travel = travel or TravelTimeEstimator()

    day_appointments = appointments_for_day(day, appointments)
    if max_appointments_per_day is not None and len(day_appointments) >= max_appointments_per_day:
        logger.warning(
            f"{day.isoformat()} already has {len(day_appointments)} appointments "
            f"(cap {max_appointments_per_day}); no slots offered"
        )
        return []

    slots: list[CandidateSlot] = []
    seen: set[int] = set()
    step = hours.slot_granularity_minutes

    for segment in _segments(customer_location, duration_minutes, day_appointments, hours, travel):
        if segment.latest < segment.earliest:
            logger.debug(
                f"Segment {segment.kind.value} on {day.isoformat()} is too short "
                f"({format_hhmm(segment.earliest)} > {format_hhmm(segment.latest)})"
            )
            continue

        start = align_up(segment.earliest, hours.open_minute, step)
        while start <= segment.latest:
            if start not in seen and not hours.in_break(start):
                seen.add(start)
                slots.append(
                    CandidateSlot(
                        start_time=format_hhmm(start),
                        end_time=format_hhmm(start + duration_minutes),
                        segment=segment.kind,
                        travel_time_from_previous_minutes=segment.travel_from_previous,
                        travel_time_to_next_minutes=segment.travel_to_next,
                        previous_appointment_id=segment.previous_id,
                        next_appointment_id=segment.next_id,
                    )
                )
            start += step

    logger.debug(
        f"Generated {len(slots)} candidate slots for {day.isoformat()} "
        f"around {len(day_appointments)} appointments"
    )
    return slots
