"""Recommendation selection and arrival windows."""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import date
from typing import Sequence

from ...models.domain import ArrivalWindow, CandidateSlot, DayAvailability
from .clock import format_hhmm, parse_hhmm
from .policy import RecommendationPolicy


class RecommendationSelector:
    def __init__(self, policy: RecommendationPolicy | None = None) -> None:
        self.policy = policy or RecommendationPolicy()

    def rank(self, slots: Sequence[CandidateSlot]) -> list[CandidateSlot]:
        """Best score first; earlier start wins a tie."""
        return sorted(slots, key=lambda slot: (-slot.efficiency_score, parse_hhmm(slot.start_time)))

    def recommend(self, ranked: Sequence[CandidateSlot]) -> list[CandidateSlot]:
        quota = self.policy.max_recommendations
        chosen = [slot for slot in ranked if slot.efficiency_score >= self.policy.recommendation_threshold][:quota]
        if len(chosen) < quota:
            backfill = [
                slot
                for slot in ranked
                if self.policy.backfill_threshold <= slot.efficiency_score < self.policy.recommendation_threshold
            ]
            chosen.extend(backfill[: quota - len(chosen)])
        return chosen

    def arrival_window(self, slot: CandidateSlot) -> ArrivalWindow:
        travel_in = slot.travel_time_from_previous_minutes
        if travel_in:
            # round first so 35 * 0.2 == 7.000000000000001 does not ceil to 8
            variance = math.ceil(round(travel_in * self.policy.arrival_variance_ratio, 6))
        else:
            variance = self.policy.default_arrival_variance_minutes
        start = parse_hhmm(slot.start_time)
        return ArrivalWindow(
            earliest=format_hhmm(start - variance),
            latest=format_hhmm(start + variance),
            variance_minutes=variance,
        )

    @staticmethod
    def day_score(slots: Sequence[CandidateSlot]) -> int:
        if not slots:
            return 0
        mean = sum(slot.efficiency_score for slot in slots) / len(slots)
        return math.floor(mean + 0.5)

    def select(self, day: date, slots: Sequence[CandidateSlot]) -> DayAvailability:
        ranked = [replace(slot, arrival_window=self.arrival_window(slot)) for slot in self.rank(slots)]
        recommended = self.recommend(ranked)
        return DayAvailability(
            date=day,
            slots=tuple(ranked),
            recommended_start_times=tuple(slot.start_time for slot in recommended),
            day_efficiency_score=self.day_score(ranked),
        )
