"""Route efficiency scoring for candidate slots."""

from __future__ import annotations

import logging
from dataclasses import replace
from statistics import fmean
from typing import Sequence

from ...models.domain import CandidateSlot, Location, ScheduledAppointment
from ..geospatial import distance_km
from .policy import EfficiencyPolicy

logger = logging.getLogger(__name__)


class EfficiencyScorer:
    """Scores slots from 0 (worst) to 100 (best).

    Precedence:

    1. A slot with travel legs scores ``100 - penalty * total_travel_minutes``,
       clamped to ``[min_travel_score, max_score]``.
    2. A slot on a day without appointments scores by mean distance to nearby
       appointments on surrounding days, mapped through the distance bands.
    3. With nothing nearby there is nothing to penalise against.
    """

    def __init__(self, policy: EfficiencyPolicy | None = None) -> None:
        self.policy = policy or EfficiencyPolicy()

    def score_travel(self, total_travel_minutes: int) -> int:
        raw = 100 - total_travel_minutes * self.policy.travel_penalty_per_minute
        return max(self.policy.min_travel_score, min(self.policy.max_score, raw))

    def score_distance(self, mean_distance_km: float) -> int:
        for limit, score in zip(self.policy.distance_band_limits_km, self.policy.distance_band_scores):
            if mean_distance_km <= limit:
                return score
        return self.policy.outside_band_score

    def score_for_day(self, customer_location: Location, nearby_appointments: Sequence[ScheduledAppointment]) -> int:
        if not nearby_appointments:
            return self.policy.no_information_score
        mean_distance = fmean(distance_km(customer_location, item.location) for item in nearby_appointments)
        score = self.score_distance(mean_distance)
        logger.debug(
            f"Mean distance {mean_distance:.2f} km to {len(nearby_appointments)} nearby appointments -> {score}"
        )
        return score

    def score_slots(
        self,
        slots: Sequence[CandidateSlot],
        customer_location: Location,
        nearby_appointments: Sequence[ScheduledAppointment] = (),
    ) -> list[CandidateSlot]:
        day_score: int | None = None
        scored: list[CandidateSlot] = []
        for slot in slots:
            total = slot.total_travel_minutes
            if total is not None:
                score = self.score_travel(total)
            else:
                if day_score is None:
                    day_score = self.score_for_day(customer_location, nearby_appointments)
                score = day_score
            scored.append(replace(slot, efficiency_score=score))
        return scored
