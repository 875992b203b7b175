"""Booking calendar rules: lead time, booking horizon, weekends and blocked dates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from ...config import settings
from ...errors import InvalidConfiguration


@dataclass(frozen=True, slots=True)
class BookingWindow:
    min_days_ahead: int = settings.min_days_ahead
    max_days_ahead: int = settings.max_days_ahead
    exclude_weekends: bool = settings.exclude_weekends
    blocked_dates: tuple[date, ...] = settings.blocked_dates

    def __post_init__(self) -> None:
        if self.min_days_ahead < 0:
            raise InvalidConfiguration("min_days_ahead must be >= 0.")
        if self.max_days_ahead < self.min_days_ahead:
            raise InvalidConfiguration("max_days_ahead must be >= min_days_ahead.")

    def is_bookable(self, day: date, today: date) -> bool:
        if day in self.blocked_dates:
            return False
        if self.exclude_weekends and day.weekday() >= 5:
            return False
        days_ahead = (day - today).days
        return self.min_days_ahead <= days_ahead <= self.max_days_ahead

    def bookable_dates(self, start: date, days: int, today: date) -> list[date]:
        """Bookable dates among ``start`` and the following ``days - 1`` days."""
        candidates = (start + timedelta(days=offset) for offset in range(max(0, days)))
        return [day for day in candidates if self.is_bookable(day, today)]

    def horizon_end(self, today: date) -> date:
        return today + timedelta(days=self.max_days_ahead)
