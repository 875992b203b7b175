"""Scheduler configuration and settings management."""

from datetime import date
from typing import Annotated, Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="SLOT_SCHEDULER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Location-Aware Slot Scheduler"

    # Business hours
    business_open: str = Field(default="08:00", description="Start of the technician's working day (HH:MM).")
    business_close: str = Field(default="17:00", description="End of the technician's working day (HH:MM).")
    slot_granularity_minutes: int = Field(default=30, description="Spacing of candidate start times.")
    breaks: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(),
        description="Break intervals as 'HH:MM-HH:MM' strings; no slot may start inside one.",
    )

    # Travel estimate
    average_speed_kmh: float = Field(default=40.0, description="Average urban driving speed.")
    travel_buffer_minutes: int = Field(default=5, description="Fixed parking/setup time added to every trip.")

    # Efficiency scoring
    travel_penalty_per_minute: int = Field(default=2, ge=0)
    min_travel_score: int = Field(default=20, ge=0, le=100)
    max_score: int = Field(default=100, ge=0, le=100)
    distance_band_limits_km: Annotated[tuple[float, ...], NoDecode] = Field(default=(5.0, 10.0, 20.0, 30.0))
    distance_band_scores: Annotated[tuple[int, ...], NoDecode] = Field(default=(100, 80, 50, 30))
    outside_band_score: int = Field(default=20, ge=0, le=100)
    no_information_score: int = Field(default=100, ge=0, le=100)
    nearby_window_days: int = Field(default=2, ge=0)

    # Recommendations
    recommendation_threshold: int = Field(default=70, ge=0, le=100)
    backfill_threshold: int = Field(default=50, ge=0, le=100)
    max_recommendations: int = Field(default=3, ge=0)
    arrival_variance_ratio: float = Field(default=0.2, ge=0.0)
    default_arrival_variance_minutes: int = Field(default=15, ge=0)

    # Booking calendar
    max_appointments_per_day: Optional[int] = Field(
        default=None,
        description="Refuse new slots once a day holds this many appointments (None disables the cap).",
    )
    min_days_ahead: int = Field(default=1, ge=0)
    max_days_ahead: int = Field(default=60, ge=0)
    exclude_weekends: bool = True
    blocked_dates: Annotated[tuple[date, ...], NoDecode] = Field(
        default=(), description="Dates on which no bookings are taken."
    )
    max_parallel_days: int = Field(default=7, ge=1)
    default_service_duration_minutes: int = Field(default=120, ge=1)

    @field_validator("breaks", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("distance_band_limits_km", "distance_band_scores", "blocked_dates", mode="before")
    @classmethod
    def _parse_tuple_from_env(cls, value: Any) -> Any:
        """Split comma-separated or JSON array values; pydantic coerces the items."""
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            return tuple(item.strip() for item in value.split(",") if item.strip())
        return value


settings = Settings()
