import pytest
from pydantic import ValidationError

from slot_scheduler.models.domain import ServiceType
from slot_scheduler.schemas.availability import AppointmentModel, AvailabilityRequest


def _appointment_payload(**overrides) -> dict:
    payload = {
        "id": "A1",
        "date": "2026-10-20",
        "start_time": "09:00",
        "end_time": "10:30",
        "location": {"latitude": 51.44, "longitude": 5.47, "address": "Markt 1", "postal_code": "5611 EB"},
        "duration_minutes": 90,
        "service_type": "installation",
    }
    payload.update(overrides)
    return payload


def test_appointment_model_parses_payload():
    model = AppointmentModel(**_appointment_payload())

    assert model.service_type is ServiceType.INSTALLATION
    assert model.location.postal_code == "5611 EB"


@pytest.mark.parametrize("field, value", [("start_time", "9h"), ("end_time", "25:00"), ("duration_minutes", 0)])
def test_appointment_model_rejects_bad_fields(field, value):
    with pytest.raises(ValidationError):
        AppointmentModel(**_appointment_payload(**{field: value}))


def test_availability_request_defaults():
    request = AvailabilityRequest(date="2026-10-20", customer_location={"latitude": 51.44, "longitude": 5.47})

    assert request.service_duration_minutes is None
    assert request.existing_appointments == []
    assert request.nearby_appointments == []
    assert request.max_recommendations is None


def test_availability_request_rejects_non_positive_duration():
    with pytest.raises(ValidationError):
        AvailabilityRequest(
            date="2026-10-20",
            customer_location={"latitude": 51.44, "longitude": 5.47},
            service_duration_minutes=0,
        )
