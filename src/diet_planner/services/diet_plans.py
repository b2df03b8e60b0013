"""Diet plan generation, retrieval and meal tracking."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from diet_planner.domain.plans import (
    DayPlan,
    Meal,
    MealPlan,
    NutritionTarget,
    PlanRequest,
    PlanStatus,
    PlanWarning,
)
from diet_planner.errors import ForbiddenError, NotFoundError, ValidationError
from diet_planner.services.generation import MealPlanOrchestrator
from diet_planner.services.nutrition import (
    compute_valid_targets,
    round_half_up,
    validate_profile,
)
from diet_planner.services.retry import retry_on_conflict

_logger = logging.getLogger(__name__)

MAX_PLAN_DURATION = 30
MIN_MEALS_PER_DAY = 2
MAX_MEALS_PER_DAY = 6


class DietPlanRepository(Protocol):
    """Persistence interface for meal plans."""

    def save_plan(self, plan: MealPlan) -> MealPlan:
        """Insert or replace a plan by id and return the stored row."""

    def get_plan(self, plan_id: UUID) -> MealPlan | None:
        """Return a plan by id, including deleted ones."""

    def get_latest_plan(self, owner_id: UUID) -> MealPlan | None:
        """Return the owner's most recent active plan."""

    def list_plans(self, owner_id: UUID) -> list[MealPlan]:
        """Return the owner's active plans, newest first."""

    def update_plan(self, plan: MealPlan, expected_version: int) -> MealPlan:
        """Replace a plan if its stored version matches, bumping the version.

        Raises ConcurrentUpdateError when the stored version differs.
        """


@dataclass(frozen=True)
class PlanGenerationOutcome:
    plan: MealPlan
    used_fallback_data: bool
    warnings: list[PlanWarning]


@dataclass(frozen=True)
class NutrientProgress:
    consumed: float
    total: float
    percentage: int


@dataclass(frozen=True)
class DayProgress:
    calories: NutrientProgress
    protein: NutrientProgress
    carbs: NutrientProgress
    fat: NutrientProgress


@dataclass(frozen=True)
class MealTrackingResult:
    plan: MealPlan
    meal: Meal
    progress: DayProgress


def validate_plan_request(request: PlanRequest) -> None:
    """Raise ValidationError for parameters the planner cannot serve."""
    validate_profile(request.profile)
    if not 1 <= request.plan_duration <= MAX_PLAN_DURATION:
        raise ValidationError(
            f"Plan duration must be between 1 and {MAX_PLAN_DURATION} days",
            field="planDuration",
        )
    if not MIN_MEALS_PER_DAY <= request.meals_per_day <= MAX_MEALS_PER_DAY:
        raise ValidationError(
            f"Meals per day must be between {MIN_MEALS_PER_DAY} "
            f"and {MAX_MEALS_PER_DAY}",
            field="mealsPerDay",
        )


def calculate_day_progress(day: DayPlan, plan: MealPlan) -> DayProgress:
    """Sum eaten meals against the plan's daily targets."""
    eaten = [meal for meal in day.meals if meal.eaten]

    def progress(consumed: float, total: float) -> NutrientProgress:
        percentage = round_half_up(consumed / total * 100) if total > 0 else 0
        return NutrientProgress(consumed=consumed, total=total, percentage=percentage)

    return DayProgress(
        calories=progress(
            sum(meal.nutrition.calories for meal in eaten), plan.daily_calories
        ),
        protein=progress(
            sum(meal.nutrition.protein for meal in eaten), plan.daily_macros.protein
        ),
        carbs=progress(
            sum(meal.nutrition.carbs for meal in eaten), plan.daily_macros.carbs
        ),
        fat=progress(sum(meal.nutrition.fat for meal in eaten), plan.daily_macros.fat),
    )


@dataclass
class DietPlanService:
    """Creates plans through the orchestrator and manages stored plans."""

    orchestrator: MealPlanOrchestrator
    repository: DietPlanRepository
    update_attempts: int = 3

    async def generate(
        self, owner_id: UUID, request: PlanRequest
    ) -> PlanGenerationOutcome:
        """Validate, compute targets, generate and persist a plan."""
        validate_plan_request(request)
        target = compute_valid_targets(request.profile)
        _logger.info(
            "Generating plan: owner=%s calories=%s days=%s meals=%s diet=%s",
            owner_id,
            target.calories,
            request.plan_duration,
            request.meals_per_day,
            request.diet_type,
        )
        result = await self.orchestrator.generate(request, target)
        plan = self.repository.save_plan(
            _new_plan(owner_id, request, target, result.days, result.used_fallback)
        )
        _logger.info(
            "Plan stored: plan=%s fallback=%s warnings=%s",
            plan.id,
            result.used_fallback,
            [warning.code for warning in result.warnings],
        )
        return PlanGenerationOutcome(
            plan=plan,
            used_fallback_data=result.used_fallback,
            warnings=result.warnings,
        )

    def get_latest(self, owner_id: UUID) -> MealPlan:
        plan = self.repository.get_latest_plan(owner_id)
        if plan is None:
            raise NotFoundError("Diet plan", f"latest for {owner_id}")
        return plan

    def list_plans(self, owner_id: UUID) -> list[MealPlan]:
        return self.repository.list_plans(owner_id)

    def get_plan(self, owner_id: UUID, plan_id: UUID) -> MealPlan:
        return self._load_owned(owner_id, plan_id)

    def get_day(self, owner_id: UUID, day_number: int) -> tuple[MealPlan, DayPlan]:
        """Return one day of the owner's latest plan."""
        if day_number < 1:
            raise ValidationError("Day number must be at least 1", field="dayNumber")
        plan = self.get_latest(owner_id)
        day = plan.find_day(day_number)
        if day is None:
            raise NotFoundError("Plan day", day_number)
        return plan, day

    def delete_plan(self, owner_id: UUID, plan_id: UUID) -> MealPlan:
        """Mark a plan deleted; it disappears from listings."""

        def attempt() -> MealPlan:
            plan = self._load_owned(owner_id, plan_id)
            return self.repository.update_plan(
                replace(plan, status=PlanStatus.DELETED), expected_version=plan.version
            )

        deleted = retry_on_conflict(
            attempt, attempts=self.update_attempts, action="delete_plan"
        )
        _logger.info("Plan deleted: plan=%s owner=%s", plan_id, owner_id)
        return deleted

    def track_meal(  # noqa: PLR0913
        self,
        owner_id: UUID,
        plan_id: UUID,
        day_number: int,
        meal_id: UUID,
        eaten: bool,
    ) -> MealTrackingResult:
        """Set a meal's eaten flag and report the day's nutrition progress."""

        def attempt() -> MealTrackingResult:
            plan = self._load_owned(owner_id, plan_id)
            day = plan.find_day(day_number)
            if day is None:
                raise NotFoundError("Plan day", day_number)
            meal = day.find_meal(meal_id)
            if meal is None:
                raise NotFoundError("Meal", meal_id)
            if meal.eaten != eaten:
                plan = self.repository.update_plan(
                    plan.with_meal_eaten(day_number, meal_id, eaten),
                    expected_version=plan.version,
                )
            updated_day = plan.find_day(day_number) or day
            return MealTrackingResult(
                plan=plan,
                meal=updated_day.find_meal(meal_id) or meal,
                progress=calculate_day_progress(updated_day, plan),
            )

        return retry_on_conflict(
            attempt, attempts=self.update_attempts, action="track_meal"
        )

    def _load_owned(self, owner_id: UUID, plan_id: UUID) -> MealPlan:
        plan = self.repository.get_plan(plan_id)
        if plan is None or plan.status == PlanStatus.DELETED:
            raise NotFoundError("Diet plan", plan_id)
        if plan.owner_id != owner_id:
            raise ForbiddenError(
                "Not authorized to access this diet plan", {"plan_id": str(plan_id)}
            )
        return plan


def _new_plan(
    owner_id: UUID,
    request: PlanRequest,
    target: NutritionTarget,
    days: list[DayPlan],
    used_fallback: bool,
) -> MealPlan:
    return MealPlan(
        id=uuid4(),
        owner_id=owner_id,
        diet_type=request.diet_type,
        plan_duration=request.plan_duration,
        meals_per_day=request.meals_per_day,
        days=days,
        daily_calories=target.calories,
        daily_macros=target.macros,
        profile=request.profile,
        plan_name=request.plan_name,
        restrictions=request.restrictions,
        used_fallback_data=used_fallback,
        created_at=datetime.now(tz=UTC),
    )
