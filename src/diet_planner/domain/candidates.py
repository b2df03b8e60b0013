"""Untrusted plan shapes parsed from generative output.

A candidate only records what the model sent; nothing here is validated.
The repairer is the single place that turns a candidate into DayPlan objects.
"""

import re
from dataclasses import dataclass, field

from diet_planner.errors import InvalidPlanStructure

_DAY_KEY = re.compile(r"(\d+)")
_WRAPPER_KEYS = ("mealPlan", "meal_plan", "plan", "dietPlan", "diet_plan")


@dataclass(frozen=True)
class CandidateMeal:
    """A meal as it arrived; any field may be missing or mistyped."""

    type: object = None
    dish_name: object = None
    description: object = None
    nutrition: object = None
    id: object = None
    eaten: object = None

    @classmethod
    def from_raw(cls, raw: object, type_hint: object = None) -> "CandidateMeal":
        if not isinstance(raw, dict):
            return cls(type=type_hint)
        meal_type = _first(raw, "type", "mealType", "meal_type", "slot")
        return cls(
            type=meal_type if meal_type is not None else type_hint,
            dish_name=_first(raw, "dishName", "dish_name", "name", "dish"),
            description=_first(raw, "description", "desc"),
            nutrition=_first(raw, "nutrition", "nutritionalInfo", "macros"),
            id=_first(raw, "id", "_id"),
            eaten=raw.get("eaten"),
        )


@dataclass(frozen=True)
class CandidateDay:
    """A day as it arrived; the day number and meal list may be absent."""

    day_number: int | None = None
    meals: list[CandidateMeal] = field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: object, key_hint: object = None) -> "CandidateDay":
        if isinstance(raw, list):
            return cls(
                day_number=_parse_day_number(key_hint),
                meals=_parse_meals(raw),
            )
        if not isinstance(raw, dict):
            return cls(day_number=_parse_day_number(key_hint))
        day_number = _parse_day_number(_first(raw, "dayNumber", "day_number", "day"))
        if day_number is None:
            day_number = _parse_day_number(key_hint)
        meals_raw = _first(raw, "meals", "mealPlan", "items")
        return cls(day_number=day_number, meals=_parse_meals(meals_raw))


@dataclass(frozen=True)
class CandidatePlan:
    """A plan as parsed from model output, days in the order received."""

    days: list[CandidateDay] = field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: object) -> "CandidatePlan":
        """Normalize list- and dict-shaped day collections into one sequence.

        Raises InvalidPlanStructure when no days collection can be found.
        An empty collection is accepted; the repairer synthesizes every day.
        """
        if isinstance(raw, list):
            return cls(days=[CandidateDay.from_raw(day) for day in raw])
        if not isinstance(raw, dict):
            raise InvalidPlanStructure("Plan payload is not an object")
        days_raw = _first(raw, "days", "Days", "dailyPlans")
        if days_raw is None:
            for key in _WRAPPER_KEYS:
                if isinstance(raw.get(key), dict | list):
                    return cls.from_raw(raw[key])
            raise InvalidPlanStructure("Plan payload has no days collection")
        if isinstance(days_raw, list):
            return cls(days=[CandidateDay.from_raw(day) for day in days_raw])
        if isinstance(days_raw, dict):
            return cls(
                days=[
                    CandidateDay.from_raw(value, key_hint=key)
                    for key, value in days_raw.items()
                ]
            )
        raise InvalidPlanStructure(
            "Plan days collection has an unsupported shape",
            {"type": type(days_raw).__name__},
        )


def _parse_meals(raw: object) -> list[CandidateMeal]:
    if isinstance(raw, list):
        return [CandidateMeal.from_raw(meal) for meal in raw]
    if isinstance(raw, dict):
        # Keyed by slot name, e.g. {"Breakfast": {...}}.
        return [
            CandidateMeal.from_raw(meal, type_hint=key) for key, meal in raw.items()
        ]
    return []


def _first(raw: dict[str, object], *keys: str) -> object:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _parse_day_number(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        match = _DAY_KEY.search(value)
        if match:
            return int(match.group(1))
    return None
