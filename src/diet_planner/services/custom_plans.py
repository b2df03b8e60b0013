"""Free-text custom meal plan generation."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from diet_planner.domain.candidates import CandidateDay, CandidatePlan
from diet_planner.domain.custom_plans import (
    CustomDay,
    CustomMeal,
    CustomPlan,
    CustomPlanResult,
)
from diet_planner.domain.plans import MAIN_SLOTS, ZERO_NUTRITION, Nutrition
from diet_planner.errors import ValidationError
from diet_planner.services.extraction import extract_json
from diet_planner.services.generation import GenerativeClient, call_with_timeouts
from diet_planner.services.prompts import render_prompt
from diet_planner.services.repair import POSITIONAL_SLOTS, coerce_amount, text_or

_logger = logging.getLogger(__name__)

MIN_MEALS_PER_DAY = len(MAIN_SLOTS)
PLACEHOLDER_DISH = "Custom meal to be determined"
PLACEHOLDER_DESCRIPTION = "Will be customized based on your preferences"
DEGRADED_WARNING = "Partial response due to generation constraints"
MAX_REQUEST_LENGTH = 2000


class CustomPlanRepository(Protocol):
    """Persistence interface for custom plans."""

    def save_custom_plan(self, plan: CustomPlan) -> CustomPlan:
        """Insert a custom plan and return the stored row."""

    def list_custom_plans(self, owner_id: UUID) -> list[CustomPlan]:
        """Return an owner's custom plans, newest first."""


@dataclass
class CustomPlanOrchestrator:
    """Generates a plan from a free-text request without ever raising."""

    client: GenerativeClient | None
    prompt_template: str
    timeout_seconds: float = 60.0
    soft_timeout_seconds: float = 25.0

    async def generate(self, request_text: str) -> CustomPlanResult:
        """Return a plan for the request, or an empty degraded result on failure."""
        if self.client is None:
            return _degraded("generative client not configured")
        try:
            prompt = render_prompt(self.prompt_template, {"message": request_text})
            text = await call_with_timeouts(
                self.client,
                prompt,
                timeout_seconds=self.timeout_seconds,
                soft_timeout_seconds=self.soft_timeout_seconds,
            )
            raw = extract_json(text)
            candidate = CandidatePlan.from_raw(raw)
            days = [
                _build_day(day, index) for index, day in enumerate(candidate.days)
            ]
        except Exception as exc:
            _logger.exception("Custom plan generation failed")
            return _degraded(str(exc))
        return CustomPlanResult(days=days, notes=_notes(raw))


@dataclass
class CustomPlanService:
    """Creates and lists stored custom plans."""

    orchestrator: CustomPlanOrchestrator
    repository: CustomPlanRepository

    async def create(self, owner_id: UUID, request_text: str) -> CustomPlan:
        message = request_text.strip()
        if not message:
            raise ValidationError("Request text is required", field="message")
        if len(message) > MAX_REQUEST_LENGTH:
            raise ValidationError(
                f"Request text must be at most {MAX_REQUEST_LENGTH} characters",
                field="message",
            )
        _logger.info("Custom plan requested: owner=%s", owner_id)
        result = await self.orchestrator.generate(message)
        plan = CustomPlan(
            id=uuid4(),
            owner_id=owner_id,
            request_text=message,
            result=result,
            created_at=datetime.now(tz=UTC),
        )
        return self.repository.save_custom_plan(plan)

    def list_plans(self, owner_id: UUID) -> list[CustomPlan]:
        return self.repository.list_custom_plans(owner_id)


def _build_day(candidate: CandidateDay, index: int) -> CustomDay:
    """Convert a candidate day, topping it up to the three main meals."""
    meals = []
    for position, meal in enumerate(candidate.meals):
        nutrition = meal.nutrition if isinstance(meal.nutrition, dict) else {}
        meals.append(
            CustomMeal(
                type=text_or(
                    meal.type,
                    POSITIONAL_SLOTS[position % len(POSITIONAL_SLOTS)].value,
                ),
                dish_name=text_or(meal.dish_name, PLACEHOLDER_DISH),
                description=text_or(meal.description, PLACEHOLDER_DESCRIPTION),
                nutrition=Nutrition(
                    calories=coerce_amount(nutrition.get("calories"), 0.0),
                    protein=coerce_amount(nutrition.get("protein"), 0.0),
                    carbs=coerce_amount(nutrition.get("carbs"), 0.0),
                    fat=coerce_amount(nutrition.get("fat"), 0.0),
                ),
            )
        )
    while len(meals) < MIN_MEALS_PER_DAY:
        meals.append(
            CustomMeal(
                type=MAIN_SLOTS[len(meals)].value,
                dish_name=PLACEHOLDER_DISH,
                description=PLACEHOLDER_DESCRIPTION,
                nutrition=ZERO_NUTRITION,
            )
        )
    day_number = candidate.day_number
    if day_number is None:
        day_number = index + 1
    return CustomDay(day_number=day_number, meals=meals)


def _degraded(reason: str) -> CustomPlanResult:
    _logger.warning("Custom plan degraded: %s", reason)
    return CustomPlanResult(
        days=[],
        notes=[f"Failed to generate complete plan: {reason}"],
        warning=DEGRADED_WARNING,
    )


def _notes(raw: object) -> list[str]:
    if not isinstance(raw, dict):
        return []
    notes = raw.get("notes")
    if isinstance(notes, str):
        return [notes] if notes.strip() else []
    if isinstance(notes, list):
        return [str(note) for note in notes if str(note).strip()]
    return []
