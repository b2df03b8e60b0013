"""Diet progress tracking with full recomputation of derived metrics."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from uuid import UUID, uuid4

from diet_planner.domain.plans import DayPlan, MacroTargets, Meal, MealPlan, PlanStatus
from diet_planner.domain.trackers import (
    DailyTrackerRecord,
    DietTracker,
    MacroProgress,
    TrackerStatus,
)
from diet_planner.errors import ForbiddenError, NotFoundError, ValidationError
from diet_planner.services.diet_plans import DietPlanRepository
from diet_planner.services.nutrition import round_half_up
from diet_planner.services.retry import retry_on_conflict

_logger = logging.getLogger(__name__)

STREAK_THRESHOLD = 70
COMPLETION_WEIGHT = 0.5
STREAK_WEIGHT = 0.3
NUTRITION_WEIGHT = 0.2


class TrackerRepository(Protocol):
    """Persistence interface for diet trackers."""

    def create_tracker(self, tracker: DietTracker) -> DietTracker:
        """Insert a tracker and return the stored row."""

    def get_tracker(self, tracker_id: UUID) -> DietTracker | None:
        """Return a tracker by id."""

    def find_active_tracker(
        self, owner_id: UUID, plan_id: UUID | None = None
    ) -> DietTracker | None:
        """Return the owner's newest active tracker, optionally for one plan."""

    def list_trackers(self, owner_id: UUID) -> list[DietTracker]:
        """Return the owner's trackers, newest first."""

    def update_tracker(
        self, tracker: DietTracker, expected_version: int
    ) -> DietTracker:
        """Replace a tracker if its stored version matches, bumping the version.

        Raises ConcurrentUpdateError when the stored version differs.
        """


def completion_percentage(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(completed / total * 100)


def recompute_day(
    day: DayPlan,
    record_date: date,
    target_calories: float,
    target_macros: MacroTargets,
) -> DailyTrackerRecord:
    """Rebuild a day's record from the plan's current eaten flags."""
    eaten = [meal for meal in day.meals if meal.eaten]
    return DailyTrackerRecord(
        day_number=day.day_number,
        date=record_date,
        completed_meals=len(eaten),
        total_meals=len(day.meals),
        completion_percentage=completion_percentage(len(eaten), len(day.meals)),
        calories_consumed=sum(meal.nutrition.calories for meal in eaten),
        target_calories=target_calories,
        protein=MacroProgress(
            consumed=sum(meal.nutrition.protein for meal in eaten),
            target=target_macros.protein,
        ),
        carbs=MacroProgress(
            consumed=sum(meal.nutrition.carbs for meal in eaten),
            target=target_macros.carbs,
        ),
        fat=MacroProgress(
            consumed=sum(meal.nutrition.fat for meal in eaten),
            target=target_macros.fat,
        ),
    )


def calculate_overall_completion(records: list[DailyTrackerRecord]) -> int:
    if not records:
        return 0
    total = sum(record.completion_percentage for record in records)
    return round_half_up(total / len(records))


def calculate_streak(
    records: list[DailyTrackerRecord], threshold: int = STREAK_THRESHOLD
) -> int:
    """Count consecutive days at or above threshold, newest date first."""
    streak = 0
    for record in sorted(
        records, key=lambda r: (r.date, r.day_number), reverse=True
    ):
        if record.completion_percentage < threshold:
            break
        streak += 1
    return streak


def calculate_nutrition_adherence(records: list[DailyTrackerRecord]) -> float:
    """Mean of capped consumed/target ratios over readings with intake."""
    readings = []
    for record in records:
        for macro in (record.protein, record.carbs, record.fat):
            if macro.target > 0 and macro.consumed > 0:
                readings.append(min(100.0, macro.consumed / macro.target * 100))
    if not readings:
        return 0.0
    return sum(readings) / len(readings)


def calculate_adherence(
    records: list[DailyTrackerRecord],
    overall_completion: int,
    streak: int,
    total_days: int,
) -> int:
    """Weighted blend of completion, streak and macro adherence, in [0, 100]."""
    if not records:
        return 0
    streak_score = streak / total_days * 100 if total_days > 0 else 0.0
    score = round_half_up(
        overall_completion * COMPLETION_WEIGHT
        + streak_score * STREAK_WEIGHT
        + calculate_nutrition_adherence(records) * NUTRITION_WEIGHT
    )
    return max(0, min(100, score))


def recompute_metrics(tracker: DietTracker) -> DietTracker:
    """Recompute the aggregate metrics from daily records."""
    records = list(tracker.daily_trackers.values())
    overall = calculate_overall_completion(records)
    streak = calculate_streak(records)
    adherence = calculate_adherence(records, overall, streak, tracker.total_days)
    return replace(
        tracker,
        overall_completion_percentage=overall,
        streak=streak,
        adherence_score=adherence,
    )


def resolve_status(tracker: DietTracker) -> DietTracker:
    """Mark an active tracker completed once every plan day is recorded."""
    if tracker.status == TrackerStatus.ACTIVE and _covers_all_days(tracker):
        return replace(tracker, status=TrackerStatus.COMPLETED)
    return tracker


def _covers_all_days(tracker: DietTracker) -> bool:
    return tracker.current_day >= tracker.total_days and all(
        number in tracker.daily_trackers
        for number in range(1, tracker.total_days + 1)
    )


def day_date(tracker: DietTracker, day_number: int) -> date:
    return tracker.start_date + timedelta(days=day_number - 1)


@dataclass
class DietTrackerService:
    """Maintains one progress tracker per (owner, plan)."""

    tracker_repository: TrackerRepository
    plan_repository: DietPlanRepository
    update_attempts: int = 3

    def create_for_plan(
        self, owner_id: UUID, plan_id: UUID
    ) -> tuple[DietTracker, bool]:
        """Return the active tracker for the plan, creating it if needed.

        The flag is True when a new tracker was created.
        """
        existing = self.tracker_repository.find_active_tracker(owner_id, plan_id)
        if existing is not None:
            return existing, False
        plan = self._load_plan(owner_id, plan_id)
        first_day = plan.find_day(1)
        if first_day is None:
            raise NotFoundError("Plan day", 1)
        now = datetime.now(tz=UTC)
        tracker = DietTracker(
            id=uuid4(),
            owner_id=owner_id,
            plan_id=plan_id,
            start_date=now.date(),
            total_days=plan.plan_duration,
            target_calories=plan.daily_calories,
            target_macros=plan.daily_macros,
            created_at=now,
        )
        tracker = recompute_metrics(
            replace(
                tracker,
                daily_trackers={
                    1: recompute_day(
                        first_day,
                        tracker.start_date,
                        tracker.target_calories,
                        tracker.target_macros,
                    )
                },
            )
        )
        created = self.tracker_repository.create_tracker(tracker)
        _logger.info(
            "Tracker created: tracker=%s plan=%s owner=%s",
            created.id,
            plan_id,
            owner_id,
        )
        return created, True

    def record_meal_eaten(  # noqa: PLR0913
        self,
        owner_id: UUID,
        tracker_id: UUID,
        day_number: int,
        meal_id: UUID,
        eaten: bool,
    ) -> tuple[DietTracker, Meal]:
        """Flip a meal's eaten flag and recompute the tracker from the plan."""

        def attempt() -> tuple[DietTracker, Meal]:
            tracker = self._load_tracker(owner_id, tracker_id)
            if tracker.status == TrackerStatus.ABANDONED:
                raise ValidationError("Tracker has been abandoned", field="trackerId")
            if not 1 <= day_number <= tracker.total_days:
                raise ValidationError(
                    f"Day number must be between 1 and {tracker.total_days}",
                    field="dayNumber",
                )
            plan = self._load_plan(owner_id, tracker.plan_id)
            day = plan.find_day(day_number)
            if day is None:
                raise NotFoundError("Plan day", day_number)
            meal = day.find_meal(meal_id)
            if meal is None:
                raise NotFoundError("Meal", meal_id)
            if meal.eaten != eaten:
                plan = self.plan_repository.update_plan(
                    plan.with_meal_eaten(day_number, meal_id, eaten),
                    expected_version=plan.version,
                )
                day = plan.find_day(day_number) or day
            record = recompute_day(
                day,
                day_date(tracker, day_number),
                tracker.target_calories,
                tracker.target_macros,
            )
            updated = resolve_status(
                recompute_metrics(
                    replace(
                        tracker,
                        daily_trackers={**tracker.daily_trackers, day_number: record},
                        current_day=max(tracker.current_day, day_number),
                    )
                )
            )
            saved = self.tracker_repository.update_tracker(
                updated, expected_version=tracker.version
            )
            if saved.status != tracker.status:
                _logger.info(
                    "Tracker status changed: tracker=%s %s -> %s",
                    tracker_id,
                    tracker.status,
                    saved.status,
                )
            return saved, day.find_meal(meal_id) or meal

        return retry_on_conflict(
            attempt, attempts=self.update_attempts, action="record_meal_eaten"
        )

    def get_active(self, owner_id: UUID) -> tuple[DietTracker, MealPlan | None]:
        tracker = self.tracker_repository.find_active_tracker(owner_id)
        if tracker is None:
            raise NotFoundError("Active diet tracker", owner_id)
        plan = self.plan_repository.get_plan(tracker.plan_id)
        return tracker, plan

    def list_trackers(self, owner_id: UUID) -> list[DietTracker]:
        return self.tracker_repository.list_trackers(owner_id)

    def get_day(
        self, owner_id: UUID, tracker_id: UUID, day_number: int
    ) -> tuple[DailyTrackerRecord, DayPlan]:
        """Return a day's record and plan day.

        Days not yet recorded get a freshly computed record that is not stored.
        """
        tracker = self._load_tracker(owner_id, tracker_id)
        if not 1 <= day_number <= tracker.total_days:
            raise ValidationError(
                f"Day number must be between 1 and {tracker.total_days}",
                field="dayNumber",
            )
        plan = self._load_plan(owner_id, tracker.plan_id)
        day = plan.find_day(day_number)
        if day is None:
            raise NotFoundError("Plan day", day_number)
        record = tracker.daily_trackers.get(day_number) or recompute_day(
            day,
            day_date(tracker, day_number),
            tracker.target_calories,
            tracker.target_macros,
        )
        return record, day

    def update_status(
        self, owner_id: UUID, tracker_id: UUID, status: TrackerStatus
    ) -> DietTracker:
        def attempt() -> DietTracker:
            tracker = self._load_tracker(owner_id, tracker_id)
            if tracker.status == status:
                return tracker
            if status == TrackerStatus.ACTIVE:
                existing = self.tracker_repository.find_active_tracker(
                    owner_id, tracker.plan_id
                )
                if existing is not None and existing.id != tracker.id:
                    raise ValidationError(
                        "Another active tracker exists for this plan",
                        field="status",
                    )
            return self.tracker_repository.update_tracker(
                replace(tracker, status=status), expected_version=tracker.version
            )

        updated = retry_on_conflict(
            attempt, attempts=self.update_attempts, action="update_status"
        )
        _logger.info("Tracker status set: tracker=%s status=%s", tracker_id, status)
        return updated

    def rebuild(self, owner_id: UUID, tracker_id: UUID) -> DietTracker:
        """Recompute every day up to the current day from the plan's eaten flags."""

        def attempt() -> DietTracker:
            tracker = self._load_tracker(owner_id, tracker_id)
            plan = self._load_plan(owner_id, tracker.plan_id)
            numbers = set(tracker.daily_trackers) | set(
                range(1, tracker.current_day + 1)
            )
            records: dict[int, DailyTrackerRecord] = {}
            for number in sorted(numbers):
                day = plan.find_day(number)
                if day is None:
                    continue
                records[number] = recompute_day(
                    day,
                    day_date(tracker, number),
                    tracker.target_calories,
                    tracker.target_macros,
                )
            rebuilt = resolve_status(
                recompute_metrics(replace(tracker, daily_trackers=records))
            )
            return self.tracker_repository.update_tracker(
                rebuilt, expected_version=tracker.version
            )

        return retry_on_conflict(
            attempt, attempts=self.update_attempts, action="rebuild"
        )

    def _load_tracker(self, owner_id: UUID, tracker_id: UUID) -> DietTracker:
        tracker = self.tracker_repository.get_tracker(tracker_id)
        if tracker is None:
            raise NotFoundError("Diet tracker", tracker_id)
        if tracker.owner_id != owner_id:
            raise ForbiddenError(
                "Not authorized to access this tracker",
                {"tracker_id": str(tracker_id)},
            )
        return tracker

    def _load_plan(self, owner_id: UUID, plan_id: UUID) -> MealPlan:
        plan = self.plan_repository.get_plan(plan_id)
        if plan is None or plan.status == PlanStatus.DELETED:
            raise NotFoundError("Diet plan", plan_id)
        if plan.owner_id != owner_id:
            raise ForbiddenError(
                "Not authorized to track this diet plan", {"plan_id": str(plan_id)}
            )
        return plan
