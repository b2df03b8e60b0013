"""Normalize candidate plans into structurally valid day plans."""

import logging
import math
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from diet_planner.domain.candidates import CandidateDay, CandidateMeal, CandidatePlan
from diet_planner.domain.plans import (
    MAIN_SLOTS,
    SLOT_ORDER,
    DayPlan,
    Meal,
    MealSlot,
    Nutrition,
    PlanWarning,
)
from diet_planner.errors import RepairExhausted
from diet_planner.services.templates import MealTemplate, PlanTemplateLibrary

_logger = logging.getLogger(__name__)

# Slot assumed for a meal with no usable type, cycled by its index in the day.
POSITIONAL_SLOTS: tuple[MealSlot, ...] = MAIN_SLOTS + (MealSlot.SNACK,)

_SLOT_ALIASES: dict[str, MealSlot] = {
    "breakfast": MealSlot.BREAKFAST,
    "lunch": MealSlot.LUNCH,
    "dinner": MealSlot.DINNER,
    "snack": MealSlot.SNACK,
    "snacks": MealSlot.SNACK,
    "evening snack": MealSlot.EVENING_SNACK,
    "mid-morning snack": MealSlot.MID_MORNING_SNACK,
    "mid morning snack": MealSlot.MID_MORNING_SNACK,
    "morning snack": MealSlot.MID_MORNING_SNACK,
}

INCOMPLETE_DAYS = "INCOMPLETE_DAYS"
EXTRA_DAYS_DROPPED = "EXTRA_DAYS_DROPPED"


@dataclass(frozen=True)
class RepairOutcome:
    days: list[DayPlan]
    warnings: list[PlanWarning] = field(default_factory=list)
    synthesized_days: list[int] = field(default_factory=list)
    dropped_days: list[int] = field(default_factory=list)


def required_slots(meals_per_day: int) -> tuple[MealSlot, ...]:
    """Slots a day must contain, in the fixed addition order."""
    return SLOT_ORDER[:meals_per_day]


def parse_slot(value: object) -> MealSlot | None:
    if not isinstance(value, str):
        return None
    key = " ".join(value.strip().lower().replace("_", " ").split())
    return _SLOT_ALIASES.get(key)


@dataclass
class PlanStructureRepairer:
    """Brings a candidate plan to an exact day count and meals per day."""

    templates: PlanTemplateLibrary

    def repair(
        self,
        candidate: CandidatePlan,
        plan_duration: int,
        meals_per_day: int,
        diet_type: str,
    ) -> RepairOutcome:
        """Return days 1..plan_duration with exactly meals_per_day meals each.

        Missing days are built from templates, days outside the range or
        repeated are dropped, and every meal is completed field by field.
        Running this on its own output changes nothing.
        """
        by_number: dict[int, CandidateDay] = {}
        dropped: list[int] = []
        for index, day in enumerate(candidate.days):
            number = day.day_number if day.day_number is not None else index + 1
            if number < 1 or number > plan_duration or number in by_number:
                dropped.append(number)
                continue
            by_number[number] = day

        days: list[DayPlan] = []
        synthesized: list[int] = []
        for number in range(1, plan_duration + 1):
            candidate_day = by_number.get(number)
            if candidate_day is None:
                synthesized.append(number)
                days.append(self.templated_day(number, meals_per_day, diet_type))
                continue
            days.append(
                self._repair_day(candidate_day, number, meals_per_day, diet_type)
            )

        warnings: list[PlanWarning] = []
        if synthesized:
            _logger.warning(
                "Plan repair synthesized days=%s of duration=%s from templates",
                synthesized,
                plan_duration,
            )
            warnings.append(
                PlanWarning(
                    code=INCOMPLETE_DAYS,
                    message=(
                        f"Generated plan was missing {len(synthesized)} day(s); "
                        "they were filled with template meals."
                    ),
                    details={"days": synthesized},
                )
            )
        if dropped:
            _logger.warning(
                "Plan repair dropped out-of-range or duplicate days=%s", dropped
            )
            warnings.append(
                PlanWarning(
                    code=EXTRA_DAYS_DROPPED,
                    message=(
                        f"Generated plan contained {len(dropped)} extra day(s) "
                        "that were discarded."
                    ),
                    details={"days": dropped},
                )
            )
        return RepairOutcome(
            days=days,
            warnings=warnings,
            synthesized_days=synthesized,
            dropped_days=dropped,
        )

    def templated_day(
        self, day_number: int, meals_per_day: int, diet_type: str
    ) -> DayPlan:
        meals = [
            self.templates.meal_for(diet_type, slot, day_number)
            for slot in required_slots(meals_per_day)
        ]
        return DayPlan(day_number=day_number, meals=meals)

    def build_templated_days(
        self, plan_duration: int, meals_per_day: int, diet_type: str
    ) -> list[DayPlan]:
        """Build a complete plan purely from templates."""
        return [
            self.templated_day(number, meals_per_day, diet_type)
            for number in range(1, plan_duration + 1)
        ]

    def _repair_day(
        self,
        candidate: CandidateDay,
        day_number: int,
        meals_per_day: int,
        diet_type: str,
    ) -> DayPlan:
        repaired = [
            self._repair_meal(meal, index, day_number, diet_type)
            for index, meal in enumerate(candidate.meals)
        ]

        mains = MAIN_SLOTS[: min(meals_per_day, len(MAIN_SLOTS))]
        ordered: list[Meal] = []
        used: set[int] = set()
        for slot in mains:
            position = next(
                (i for i, meal in enumerate(repaired) if meal.slot == slot), None
            )
            if position is None:
                ordered.append(self.templates.meal_for(diet_type, slot, day_number))
            else:
                ordered.append(repaired[position])
                used.add(position)
        ordered.extend(meal for i, meal in enumerate(repaired) if i not in used)

        present = {meal.slot for meal in ordered}
        for slot in SLOT_ORDER:
            if len(ordered) >= meals_per_day:
                break
            if slot not in present:
                ordered.append(self.templates.meal_for(diet_type, slot, day_number))
                present.add(slot)
        return DayPlan(day_number=day_number, meals=ordered[:meals_per_day])

    def _repair_meal(
        self, candidate: CandidateMeal, index: int, day_number: int, diet_type: str
    ) -> Meal:
        slot = parse_slot(candidate.type) or POSITIONAL_SLOTS[
            index % len(POSITIONAL_SLOTS)
        ]
        template = self.templates.template_for(diet_type, slot, day_number)
        return Meal(
            id=_parse_uuid(candidate.id) or uuid4(),
            slot=slot,
            dish_name=text_or(candidate.dish_name, template.dish_name),
            description=text_or(candidate.description, template.description),
            nutrition=_repair_nutrition(candidate.nutrition, template),
            eaten=candidate.eaten if isinstance(candidate.eaten, bool) else False,
        )


def ensure_plan_structure(
    days: list[DayPlan], plan_duration: int, meals_per_day: int
) -> None:
    """Raise RepairExhausted if days violate the plan invariants."""
    numbers = [day.day_number for day in days]
    if numbers != list(range(1, plan_duration + 1)):
        raise RepairExhausted(
            "Repaired plan has wrong day numbering",
            {"expected": plan_duration, "actual": numbers},
        )
    mains = set(MAIN_SLOTS[: min(meals_per_day, len(MAIN_SLOTS))])
    for day in days:
        if len(day.meals) != meals_per_day:
            raise RepairExhausted(
                "Repaired day has wrong meal count",
                {"day": day.day_number, "meals": len(day.meals)},
            )
        if not mains.issubset({meal.slot for meal in day.meals}):
            raise RepairExhausted(
                "Repaired day is missing a main meal", {"day": day.day_number}
            )


def text_or(value: object, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _parse_uuid(value: object) -> UUID | None:
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return UUID(value)
    except ValueError:
        return None


def _repair_nutrition(raw: object, template: MealTemplate) -> Nutrition:
    if not isinstance(raw, dict):
        return template.nutrition
    fallback = template.nutrition
    return Nutrition(
        calories=coerce_amount(raw.get("calories"), fallback.calories),
        protein=coerce_amount(raw.get("protein"), fallback.protein),
        carbs=coerce_amount(raw.get("carbs"), fallback.carbs),
        fat=coerce_amount(raw.get("fat"), fallback.fat),
    )


def coerce_amount(value: object, default: float) -> float:
    """Read a non-negative number, accepting numeric strings like "12g"."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().lower().removesuffix("kcal").removesuffix("g").strip()
        try:
            number = float(cleaned)
        except ValueError:
            return default
    else:
        return default
    if not math.isfinite(number):
        return default
    return max(number, 0.0)
