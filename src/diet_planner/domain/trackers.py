"""Domain models for diet progress tracking."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from diet_planner.domain.plans import MacroTargets


class TrackerStatus(StrEnum):
    """Lifecycle status of a tracker."""

    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class MacroProgress:
    """Consumed grams against the target snapshot for one macro."""

    consumed: float
    target: float


@dataclass(frozen=True)
class DailyTrackerRecord:
    """Recomputed progress for one plan day."""

    day_number: int
    date: date
    completed_meals: int
    total_meals: int
    completion_percentage: int
    calories_consumed: float
    target_calories: float
    protein: MacroProgress
    carbs: MacroProgress
    fat: MacroProgress


@dataclass(frozen=True)
class DietTracker:
    """Derived progress projection for one (owner, plan) pair."""

    id: UUID
    owner_id: UUID
    plan_id: UUID
    start_date: date
    total_days: int
    target_calories: int
    target_macros: MacroTargets
    status: TrackerStatus = TrackerStatus.ACTIVE
    current_day: int = 1
    daily_trackers: dict[int, DailyTrackerRecord] = field(default_factory=dict)
    overall_completion_percentage: int = 0
    streak: int = 0
    adherence_score: int = 0
    version: int = 1
    created_at: datetime | None = None
