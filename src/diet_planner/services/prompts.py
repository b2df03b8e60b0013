"""Prompt template loading and rendering."""

import re
from functools import cache
from pathlib import Path

from diet_planner.domain.plans import NutritionTarget, PlanRequest

PROMPTS_DIR = Path(__file__).resolve().parents[1] / "prompts"
MEAL_PLAN_PROMPT = "meal_plan.txt"
CUSTOM_MEAL_PROMPT = "custom_meal.txt"

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


@cache
def load_prompt(name: str) -> str:
    """Read a prompt template shipped with the package."""
    return (PROMPTS_DIR / name).read_text(encoding="utf-8")


def render_prompt(template: str, values: dict[str, object]) -> str:
    """Substitute {{name}} placeholders; unknown names are left as-is."""

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in values:
            return match.group(0)
        return str(values[name])

    return _PLACEHOLDER.sub(substitute, template)


def meal_plan_values(
    request: PlanRequest, target: NutritionTarget
) -> dict[str, object]:
    profile = request.profile
    return {
        "age": profile.age,
        "weight": _number(profile.weight_kg),
        "height": _number(profile.height_cm),
        "gender": profile.gender,
        "activityLevel": profile.activity_level,
        "goal": profile.goal,
        "fitnessGoal": request.fitness_goal or profile.goal,
        "planDuration": request.plan_duration,
        "mealPerDay": request.meals_per_day,
        "dietType": request.diet_type.value,
        "restrictionsAndAllergies": ", ".join(request.restrictions) or "None",
        "dailyCalories": target.calories,
        "protein": target.protein,
        "carbs": target.carbs,
        "fat": target.fat,
    }


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
