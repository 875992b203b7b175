"""Location-aware slot scheduling."""

from .efficiency import EfficiencyScorer
from .feasibility import generate_candidate_slots
from .policy import SchedulerPolicy, default_policy
from .recommendation import RecommendationSelector
from .service import (
    compute_day_availability,
    compute_range_availability,
    find_bookable_dates,
    process_availability_request,
    within_days,
)
from .travel import TravelTimeEstimator

__all__ = [
    "compute_day_availability",
    "compute_range_availability",
    "find_bookable_dates",
    "process_availability_request",
    "within_days",
    "generate_candidate_slots",
    "EfficiencyScorer",
    "RecommendationSelector",
    "TravelTimeEstimator",
    "SchedulerPolicy",
    "default_policy",
]
