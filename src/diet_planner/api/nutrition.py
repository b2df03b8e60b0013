"""Nutrition target calculator endpoint."""

from fastapi import APIRouter

from diet_planner.api.models import ProfileBody
from diet_planner.services.nutrition import (
    calculate_bmr,
    calculate_tdee,
    compute_valid_targets,
)

router = APIRouter(prefix="/nutrition", tags=["nutrition"])


@router.post("/targets")
async def nutrition_targets(body: ProfileBody) -> dict[str, object]:
    """Return BMR, TDEE and daily targets for a profile.

    Profiles whose targets would leave negative carbs are rejected.
    """
    profile = body.to_profile()
    target = compute_valid_targets(profile)
    bmr = calculate_bmr(
        profile.weight_kg, profile.height_cm, profile.age, profile.gender
    )
    return {
        "bmr": bmr,
        "tdee": calculate_tdee(bmr, profile.activity_level),
        "dailyCalories": target.calories,
        "macros": {
            "protein": target.protein,
            "carbs": target.carbs,
            "fat": target.fat,
        },
    }
