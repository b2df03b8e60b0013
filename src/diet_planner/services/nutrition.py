"""Calorie and macro target calculations."""

import math

from diet_planner.domain.plans import MacroTargets, NutritionTarget, UserProfile
from diet_planner.errors import ValidationError

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "lightly-active": 1.375,
    "moderately-active": 1.55,
    "very-active": 1.725,
    "extra-active": 1.9,
}
DEFAULT_ACTIVITY_MULTIPLIER = 1.55

GOALS = ("weight-loss", "maintenance", "weight-gain")
GOAL_CALORIE_OFFSETS: dict[str, int] = {"weight-loss": -500, "weight-gain": 500}

# (protein grams per kg, share of calories from fat)
GOAL_MACRO_SPLITS: dict[str, tuple[float, float]] = {
    "weight-loss": (2.0, 0.25),
    "weight-gain": (1.8, 0.30),
}
DEFAULT_MACRO_SPLIT = (1.6, 0.30)


def round_half_up(value: float) -> int:
    """Round halves towards positive infinity."""
    return math.floor(value + 0.5)


def calculate_bmr(weight_kg: float, height_cm: float, age: int, gender: str) -> float:
    """Basal metabolic rate via Mifflin-St Jeor."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    return base + 5 if gender == "male" else base - 161


def calculate_tdee(bmr: float, activity_level: str) -> float:
    multiplier = ACTIVITY_MULTIPLIERS.get(activity_level, DEFAULT_ACTIVITY_MULTIPLIER)
    return bmr * multiplier


def calculate_calories(tdee: float, goal: str) -> int:
    return round_half_up(tdee + GOAL_CALORIE_OFFSETS.get(goal, 0))


def calculate_macros(calories: int, weight_kg: float, goal: str) -> MacroTargets:
    """Split calories into protein, fat and carbs in grams.

    Carbs take whatever protein and fat leave over, so extreme inputs can
    produce a negative carb figure. The value is returned as computed.
    """
    protein_per_kg, fat_share = GOAL_MACRO_SPLITS.get(goal, DEFAULT_MACRO_SPLIT)
    protein = round_half_up(weight_kg * protein_per_kg)
    fat = round_half_up(calories * fat_share / 9)
    carbs = round_half_up((calories - protein * 4 - fat * 9) / 4)
    return MacroTargets(protein=protein, carbs=carbs, fat=fat)


def compute_targets(profile: UserProfile) -> NutritionTarget:
    """Derive daily calorie and macro targets for a profile."""
    bmr = calculate_bmr(
        profile.weight_kg, profile.height_cm, profile.age, profile.gender
    )
    tdee = calculate_tdee(bmr, profile.activity_level)
    calories = calculate_calories(tdee, profile.goal)
    macros = calculate_macros(calories, profile.weight_kg, profile.goal)
    return NutritionTarget(
        calories=calories,
        protein=macros.protein,
        carbs=macros.carbs,
        fat=macros.fat,
    )


def validate_profile(profile: UserProfile) -> None:
    """Raise ValidationError for body metrics the formulas cannot use."""
    if profile.age <= 0:
        raise ValidationError("Age must be positive", field="age")
    if profile.weight_kg <= 0:
        raise ValidationError("Weight must be positive", field="weight")
    if profile.height_cm <= 0:
        raise ValidationError("Height must be positive", field="height")
    for field_name, value in (
        ("gender", profile.gender),
        ("activityLevel", profile.activity_level),
        ("goal", profile.goal),
    ):
        if not value or not value.strip():
            raise ValidationError(f"{field_name} is required", field=field_name)


def compute_valid_targets(profile: UserProfile) -> NutritionTarget:
    """Validate a profile and derive targets, rejecting negative carbs."""
    validate_profile(profile)
    target = compute_targets(profile)
    if target.carbs < 0:
        raise ValidationError(
            "Goal leaves no calories for carbohydrates with this profile",
            field="goal",
        )
    return target
