"""Tunable scheduling parameters.

All thresholds live here; the generator, scorer and selector take them as
arguments. Every policy validates itself on construction and raises
``InvalidConfiguration``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from ...config import Settings, settings
from ...errors import InvalidConfiguration
from .booking_window import BookingWindow
from .clock import parse_hhmm


def _parse_time(value: str, label: str) -> int:
    try:
        return parse_hhmm(value)
    except ValueError as exc:
        raise InvalidConfiguration(f"{label}: {exc}") from exc


def parse_break(value: str) -> tuple[str, str]:
    """Split an 'HH:MM-HH:MM' break definition."""

    start, sep, end = value.partition("-")
    if not sep:
        raise InvalidConfiguration(f"Break '{value}' must be formatted as HH:MM-HH:MM.")
    return start.strip(), end.strip()


@dataclass(frozen=True, slots=True)
class BusinessHours:
    open: str = settings.business_open
    close: str = settings.business_close
    slot_granularity_minutes: int = settings.slot_granularity_minutes
    breaks: tuple[tuple[str, str], ...] = tuple(parse_break(item) for item in settings.breaks)
    _open_minute: int = field(init=False, repr=False, compare=False)
    _close_minute: int = field(init=False, repr=False, compare=False)
    _break_minutes: tuple[tuple[int, int], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        open_minute = _parse_time(self.open, "business open")
        close_minute = _parse_time(self.close, "business close")
        if close_minute <= open_minute:
            raise InvalidConfiguration(
                f"Business hours close ({self.close}) must be later than open ({self.open})."
            )
        if self.slot_granularity_minutes <= 0:
            raise InvalidConfiguration("slot_granularity_minutes must be positive.")
        break_minutes = []
        for start, end in self.breaks:
            start_minute = _parse_time(start, "break start")
            end_minute = _parse_time(end, "break end")
            if end_minute <= start_minute:
                raise InvalidConfiguration(f"Break {start}-{end} ends before it starts.")
            if start_minute < open_minute or end_minute > close_minute:
                raise InvalidConfiguration(
                    f"Break {start}-{end} lies outside business hours {self.open}-{self.close}."
                )
            break_minutes.append((start_minute, end_minute))

        object.__setattr__(self, "_open_minute", open_minute)
        object.__setattr__(self, "_close_minute", close_minute)
        object.__setattr__(self, "_break_minutes", tuple(break_minutes))

    @property
    def open_minute(self) -> int:
        return self._open_minute

    @property
    def close_minute(self) -> int:
        return self._close_minute

    def break_minutes(self) -> list[tuple[int, int]]:
        return list(self._break_minutes)

    def in_break(self, minute: int) -> bool:
        return any(start <= minute < end for start, end in self._break_minutes)


@dataclass(frozen=True, slots=True)
class TravelPolicy:
    average_speed_kmh: float = settings.average_speed_kmh
    buffer_minutes: int = settings.travel_buffer_minutes

    def __post_init__(self) -> None:
        if self.average_speed_kmh <= 0:
            raise InvalidConfiguration("average_speed_kmh must be positive.")
        if self.buffer_minutes < 0:
            raise InvalidConfiguration("travel buffer must be >= 0 minutes.")


@dataclass(frozen=True, slots=True)
class EfficiencyPolicy:
    travel_penalty_per_minute: int = settings.travel_penalty_per_minute
    min_travel_score: int = settings.min_travel_score
    max_score: int = settings.max_score
    distance_band_limits_km: tuple[float, ...] = settings.distance_band_limits_km
    distance_band_scores: tuple[int, ...] = settings.distance_band_scores
    outside_band_score: int = settings.outside_band_score
    no_information_score: int = settings.no_information_score
    nearby_window_days: int = settings.nearby_window_days

    def __post_init__(self) -> None:
        if len(self.distance_band_limits_km) != len(self.distance_band_scores):
            raise InvalidConfiguration("distance_band_limits_km and distance_band_scores must have the same length.")
        if list(self.distance_band_limits_km) != sorted(set(self.distance_band_limits_km)):
            raise InvalidConfiguration("distance_band_limits_km must be strictly increasing.")
        scores = (
            self.min_travel_score,
            self.max_score,
            self.outside_band_score,
            self.no_information_score,
            *self.distance_band_scores,
        )
        if any(score < 0 or score > 100 for score in scores):
            raise InvalidConfiguration("Efficiency scores must lie within [0, 100].")
        if self.min_travel_score > self.max_score:
            raise InvalidConfiguration("min_travel_score cannot exceed max_score.")
        if self.travel_penalty_per_minute < 0 or self.nearby_window_days < 0:
            raise InvalidConfiguration("Penalty and nearby window must be >= 0.")


@dataclass(frozen=True, slots=True)
class RecommendationPolicy:
    recommendation_threshold: int = settings.recommendation_threshold
    backfill_threshold: int = settings.backfill_threshold
    max_recommendations: int = settings.max_recommendations
    arrival_variance_ratio: float = settings.arrival_variance_ratio
    default_arrival_variance_minutes: int = settings.default_arrival_variance_minutes

    def __post_init__(self) -> None:
        if self.backfill_threshold > self.recommendation_threshold:
            raise InvalidConfiguration("backfill_threshold cannot exceed recommendation_threshold.")
        if self.max_recommendations < 0:
            raise InvalidConfiguration("max_recommendations must be >= 0.")
        if self.arrival_variance_ratio < 0 or self.default_arrival_variance_minutes < 0:
            raise InvalidConfiguration("Arrival variance settings must be >= 0.")


@dataclass(frozen=True, slots=True)
class SchedulerPolicy:
    hours: BusinessHours = field(default_factory=BusinessHours)
    travel: TravelPolicy = field(default_factory=TravelPolicy)
    efficiency: EfficiencyPolicy = field(default_factory=EfficiencyPolicy)
    recommendation: RecommendationPolicy = field(default_factory=RecommendationPolicy)
    booking: BookingWindow = field(default_factory=BookingWindow)
    max_appointments_per_day: Optional[int] = settings.max_appointments_per_day
    max_parallel_days: int = settings.max_parallel_days

    def __post_init__(self) -> None:
        if self.max_appointments_per_day is not None and self.max_appointments_per_day < 1:
            raise InvalidConfiguration("max_appointments_per_day must be >= 1 when set.")
        if self.max_parallel_days < 1:
            raise InvalidConfiguration("max_parallel_days must be >= 1.")

    @classmethod
    def from_settings(cls, source: Settings) -> "SchedulerPolicy":
        return cls(
            hours=BusinessHours(
                open=source.business_open,
                close=source.business_close,
                slot_granularity_minutes=source.slot_granularity_minutes,
                breaks=tuple(parse_break(item) for item in source.breaks),
            ),
            travel=TravelPolicy(
                average_speed_kmh=source.average_speed_kmh,
                buffer_minutes=source.travel_buffer_minutes,
            ),
            efficiency=EfficiencyPolicy(
                travel_penalty_per_minute=source.travel_penalty_per_minute,
                min_travel_score=source.min_travel_score,
                max_score=source.max_score,
                distance_band_limits_km=tuple(source.distance_band_limits_km),
                distance_band_scores=tuple(source.distance_band_scores),
                outside_band_score=source.outside_band_score,
                no_information_score=source.no_information_score,
                nearby_window_days=source.nearby_window_days,
            ),
            recommendation=RecommendationPolicy(
                recommendation_threshold=source.recommendation_threshold,
                backfill_threshold=source.backfill_threshold,
                max_recommendations=source.max_recommendations,
                arrival_variance_ratio=source.arrival_variance_ratio,
                default_arrival_variance_minutes=source.default_arrival_variance_minutes,
            ),
            booking=BookingWindow(
                min_days_ahead=source.min_days_ahead,
                max_days_ahead=source.max_days_ahead,
                exclude_weekends=source.exclude_weekends,
                blocked_dates=tuple(source.blocked_dates),
            ),
            max_appointments_per_day=source.max_appointments_per_day,
            max_parallel_days=source.max_parallel_days,
        )


@lru_cache(maxsize=1)
def default_policy() -> SchedulerPolicy:
    """Validated policy built from process settings, cached for the process lifetime."""
    return SchedulerPolicy.from_settings(settings)
