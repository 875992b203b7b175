import math
from datetime import date

import pytest

from slot_scheduler.errors import InvalidRequest
from slot_scheduler.models.domain import Location, ScheduledAppointment, ServiceType, SlotSegment
from slot_scheduler.services.geospatial import EARTH_RADIUS_KM
from slot_scheduler.services.scheduling.clock import parse_hhmm
from slot_scheduler.services.scheduling.feasibility import appointments_for_day, generate_candidate_slots
from slot_scheduler.services.scheduling.policy import BusinessHours
from slot_scheduler.services.scheduling.travel import TravelTimeEstimator

DAY = date(2026, 10, 20)
CUSTOMER = Location(latitude=51.44, longitude=5.47, address="Customer", postal_code="5611 AA")


def _offset(km: float) -> Location:
    """Point ``km`` north (positive) or south (negative) of the customer."""
    return Location(latitude=CUSTOMER.latitude + math.degrees(km / EARTH_RADIUS_KM), longitude=CUSTOMER.longitude)


def _appointment(
    aid: str, start: str, end: str, location: Location = CUSTOMER, day: date = DAY
) -> ScheduledAppointment:
    return ScheduledAppointment(
        id=aid,
        date=day,
        start_time=start,
        end_time=end,
        location=location,
        duration_minutes=parse_hhmm(end) - parse_hhmm(start),
        service_type=ServiceType.MAINTENANCE,
    )


def _starts(slots) -> list[str]:
    return [slot.start_time for slot in slots]


def test_empty_day_offers_every_aligned_start():
    slots = generate_candidate_slots(DAY, CUSTOMER, 120, [])

    assert _starts(slots) == [
        "08:00", "08:30", "09:00", "09:30", "10:00", "10:30", "11:00", "11:30",
        "12:00", "12:30", "13:00", "13:30", "14:00", "14:30", "15:00",
    ]
    assert all(slot.segment is SlotSegment.OPEN_DAY for slot in slots)
    assert all(slot.travel_time_from_previous_minutes is None for slot in slots)
    assert all(slot.travel_time_to_next_minutes is None for slot in slots)
    assert slots[-1].end_time == "17:00"


def test_single_blocking_appointment_at_customer_location():
    appointments = [_appointment("A1", "10:00", "12:00")]

    slots = generate_candidate_slots(DAY, CUSTOMER, 60, appointments)
    before = [slot for slot in slots if slot.segment is SlotSegment.BEFORE_FIRST]
    after = [slot for slot in slots if slot.segment is SlotSegment.AFTER_LAST]

    # 09:00 + 60 + 5 = 10:05 overruns the 10:00 appointment
    assert _starts(before) == ["08:00", "08:30"]
    assert all(slot.travel_time_to_next_minutes == 5 for slot in before)
    assert all(slot.next_appointment_id == "A1" for slot in before)
    # 12:00 + 5 min travel = 12:05, next grid point is 12:30
    assert _starts(after)[0] == "12:30"
    assert _starts(after)[-1] == "16:00"
    assert all(slot.travel_time_from_previous_minutes == 5 for slot in after)
    assert "09:00" not in _starts(slots)


def test_interior_gap_too_small_for_travel_yields_no_slots():
    appointments = [
        _appointment("A", "08:00", "10:00", _offset(19.5)),
        _appointment("B", "10:30", "12:00", _offset(-19.5)),
    ]

    slots = generate_candidate_slots(DAY, CUSTOMER, 30, appointments)

    assert not [slot for slot in slots if slot.segment is SlotSegment.BETWEEN]
    assert not [slot for slot in slots if slot.segment is SlotSegment.BEFORE_FIRST]
    after = [slot for slot in slots if slot.segment is SlotSegment.AFTER_LAST]
    # 12:00 + 35 min = 12:35 -> 13:00
    assert _starts(after)[0] == "13:00"
    assert all(slot.travel_time_from_previous_minutes == 35 for slot in after)


def test_interior_gap_carries_both_travel_times():
    appointments = [
        _appointment("A", "08:00", "09:00"),
        _appointment("B", "13:00", "14:00", _offset(19.5)),
    ]

    slots = generate_candidate_slots(DAY, CUSTOMER, 60, appointments)
    between = [slot for slot in slots if slot.segment is SlotSegment.BETWEEN]

    # earliest 09:05 -> 09:30; latest 13:00 - 60 - 35 = 11:25 -> 11:00
    assert _starts(between) == ["09:30", "10:00", "10:30", "11:00"]
    for slot in between:
        assert slot.travel_time_from_previous_minutes == 5
        assert slot.travel_time_to_next_minutes == 35
        assert slot.previous_appointment_id == "A"
        assert slot.next_appointment_id == "B"


def test_slots_respect_travel_to_and_from_neighbours():
    appointments = [
        _appointment("A", "09:00", "10:00", _offset(3.0)),
        _appointment("B", "13:00", "14:30", _offset(-8.0)),
        _appointment("C", "15:30", "16:00", _offset(12.0)),
    ]
    travel = TravelTimeEstimator()
    by_id = {item.id: item for item in appointments}
    duration = 45

    slots = generate_candidate_slots(DAY, CUSTOMER, duration, appointments)

    assert slots
    for slot in slots:
        start = parse_hhmm(slot.start_time)
        assert start + duration <= parse_hhmm("17:00")
        if slot.next_appointment_id:
            following = by_id[slot.next_appointment_id]
            travel_out = travel.minutes_between(CUSTOMER, following.location)
            assert start + duration + travel_out <= parse_hhmm(following.start_time)
        if slot.previous_appointment_id:
            previous = by_id[slot.previous_appointment_id]
            travel_in = travel.minutes_between(previous.location, CUSTOMER)
            assert parse_hhmm(previous.end_time) + travel_in <= start


def test_unsorted_input_is_sorted_before_generation():
    appointments = [
        _appointment("B", "13:00", "14:00", _offset(5.0)),
        _appointment("A", "09:00", "10:00", _offset(2.0)),
    ]

    assert generate_candidate_slots(DAY, CUSTOMER, 60, appointments) == generate_candidate_slots(
        DAY, CUSTOMER, 60, list(reversed(appointments))
    )
    assert [item.id for item in appointments_for_day(DAY, appointments)] == ["A", "B"]


def test_starts_inside_breaks_are_excluded():
    hours = BusinessHours(open="08:00", close="17:00", slot_granularity_minutes=30, breaks=(("12:00", "13:00"),))

    starts = _starts(generate_candidate_slots(DAY, CUSTOMER, 60, [], hours=hours))

    assert "11:30" in starts
    assert "12:00" not in starts
    assert "12:30" not in starts
    assert "13:00" in starts


def test_starts_follow_configured_grid():
    hours = BusinessHours(open="08:15", close="12:00", slot_granularity_minutes=45, breaks=())

    starts = _starts(generate_candidate_slots(DAY, CUSTOMER, 60, [], hours=hours))

    assert starts == ["08:15", "09:00", "09:45", "10:30"]


def test_service_longer_than_business_day_yields_nothing():
    assert generate_candidate_slots(DAY, CUSTOMER, 600, []) == []


def test_appointments_on_other_days_are_ignored():
    other_day = _appointment("X", "08:00", "16:00", day=date(2026, 10, 21))

    slots = generate_candidate_slots(DAY, CUSTOMER, 60, [other_day])

    assert slots
    assert all(slot.segment is SlotSegment.OPEN_DAY for slot in slots)


def test_daily_appointment_cap():
    appointments = [_appointment("A", "08:00", "09:00"), _appointment("B", "14:00", "15:00")]

    assert generate_candidate_slots(DAY, CUSTOMER, 60, appointments, max_appointments_per_day=2) == []
    assert generate_candidate_slots(DAY, CUSTOMER, 60, appointments, max_appointments_per_day=3)


def test_overlapping_appointments_do_not_duplicate_starts():
    appointments = [
        _appointment("A", "09:00", "15:00"),
        _appointment("B", "10:00", "11:00"),
    ]

    starts = _starts(generate_candidate_slots(DAY, CUSTOMER, 30, appointments))

    assert len(starts) == len(set(starts))
    # nothing may start while the long appointment is still running
    assert starts[0] == "08:00"
    assert starts[1] == "15:30"


@pytest.mark.parametrize("duration", [0, -30])
def test_non_positive_duration_rejected(duration):
    with pytest.raises(InvalidRequest):
        generate_candidate_slots(DAY, CUSTOMER, duration, [])


@pytest.mark.parametrize("start, end", [("9h00", "10:00"), ("09:00", "25:00")])
def test_malformed_appointment_times_rejected(start, end):
    appointment = ScheduledAppointment(
        id="BAD", date=DAY, start_time=start, end_time=end, location=CUSTOMER, duration_minutes=60
    )

    with pytest.raises(InvalidRequest, match="BAD"):
        generate_candidate_slots(DAY, CUSTOMER, 60, [appointment])
