"""Convert domain objects into camelCase JSON bodies."""

from diet_planner.domain.custom_plans import CustomPlan
from diet_planner.domain.plans import (
    DayPlan,
    MacroTargets,
    Meal,
    MealPlan,
    Nutrition,
    PlanWarning,
)
from diet_planner.domain.trackers import DailyTrackerRecord, DietTracker
from diet_planner.services.diet_plans import DayProgress, NutrientProgress


def nutrition_body(nutrition: Nutrition) -> dict[str, float]:
    return {
        "calories": nutrition.calories,
        "protein": nutrition.protein,
        "carbs": nutrition.carbs,
        "fat": nutrition.fat,
    }


def macros_body(macros: MacroTargets) -> dict[str, int]:
    return {"protein": macros.protein, "carbs": macros.carbs, "fat": macros.fat}


def meal_body(meal: Meal) -> dict[str, object]:
    return {
        "id": str(meal.id),
        "type": meal.slot.value,
        "dishName": meal.dish_name,
        "description": meal.description,
        "nutrition": nutrition_body(meal.nutrition),
        "eaten": meal.eaten,
    }


def day_body(day: DayPlan) -> dict[str, object]:
    return {
        "dayNumber": day.day_number,
        "meals": [meal_body(meal) for meal in day.meals],
    }


def warning_body(warning: PlanWarning) -> dict[str, object]:
    return {
        "code": warning.code,
        "message": warning.message,
        "details": warning.details,
    }


def plan_body(plan: MealPlan) -> dict[str, object]:
    """Full plan representation including every day."""
    return {
        "id": str(plan.id),
        "planName": plan.plan_name,
        "dietType": plan.diet_type.value,
        "planDuration": plan.plan_duration,
        "mealsPerDay": plan.meals_per_day,
        "dailyCalories": plan.daily_calories,
        "dailyMacros": macros_body(plan.daily_macros),
        "restrictionsAndAllergies": list(plan.restrictions),
        "status": plan.status.value,
        "usedFallbackData": plan.used_fallback_data,
        "createdAt": plan.created_at.isoformat() if plan.created_at else None,
        "days": [day_body(day) for day in plan.days],
    }


def plan_summary_body(plan: MealPlan) -> dict[str, object]:
    body = plan_body(plan)
    del body["days"]
    return body


def _progress_body(progress: NutrientProgress) -> dict[str, object]:
    return {
        "consumed": progress.consumed,
        "total": progress.total,
        "percentage": progress.percentage,
    }


def day_progress_body(progress: DayProgress) -> dict[str, object]:
    return {
        "calories": _progress_body(progress.calories),
        "protein": _progress_body(progress.protein),
        "carbs": _progress_body(progress.carbs),
        "fat": _progress_body(progress.fat),
    }


def record_body(record: DailyTrackerRecord) -> dict[str, object]:
    return {
        "dayNumber": record.day_number,
        "date": record.date.isoformat(),
        "completedMeals": record.completed_meals,
        "totalMeals": record.total_meals,
        "completionPercentage": record.completion_percentage,
        "caloriesConsumed": record.calories_consumed,
        "targetCalories": record.target_calories,
        "nutrition": {
            name: {"consumed": macro.consumed, "target": macro.target}
            for name, macro in (
                ("protein", record.protein),
                ("carbs", record.carbs),
                ("fat", record.fat),
            )
        },
    }


def tracker_body(tracker: DietTracker) -> dict[str, object]:
    """Tracker with its daily records ordered by day number."""
    return {
        "id": str(tracker.id),
        "dietPlanId": str(tracker.plan_id),
        "startDate": tracker.start_date.isoformat(),
        "totalDays": tracker.total_days,
        "currentDay": tracker.current_day,
        "status": tracker.status.value,
        "targetCalories": tracker.target_calories,
        "targetMacros": macros_body(tracker.target_macros),
        "overallCompletionPercentage": tracker.overall_completion_percentage,
        "streak": tracker.streak,
        "adherenceScore": tracker.adherence_score,
        "dailyTrackers": [
            record_body(tracker.daily_trackers[number])
            for number in sorted(tracker.daily_trackers)
        ],
        "createdAt": tracker.created_at.isoformat() if tracker.created_at else None,
    }


def custom_plan_body(plan: CustomPlan) -> dict[str, object]:
    return {
        "id": str(plan.id),
        "message": plan.request_text,
        "days": [
            {
                "dayNumber": day.day_number,
                "meals": [
                    {
                        "type": meal.type,
                        "dishName": meal.dish_name,
                        "description": meal.description,
                        "nutrition": nutrition_body(meal.nutrition),
                    }
                    for meal in day.meals
                ],
            }
            for day in plan.result.days
        ],
        "notes": plan.result.notes,
        "warning": plan.result.warning,
        "createdAt": plan.created_at.isoformat() if plan.created_at else None,
    }
