"""Supabase repository for custom meal plans."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from diet_planner.domain.custom_plans import (
    CustomDay,
    CustomMeal,
    CustomPlan,
    CustomPlanResult,
)
from diet_planner.domain.plans import Nutrition
from diet_planner.errors import DatabaseError
from diet_planner.services.custom_plans import CustomPlanRepository

_TABLE = "custom_meal_plans"


@dataclass
class SupabaseCustomPlanRepository(CustomPlanRepository):
    """Supabase implementation for custom plans."""

    client: Client

    def save_custom_plan(self, plan: CustomPlan) -> CustomPlan:
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "id": str(plan.id),
                    "owner_id": str(plan.owner_id),
                    "message": plan.request_text,
                    "days": [
                        {
                            "day_number": day.day_number,
                            "meals": [_meal_to_payload(meal) for meal in day.meals],
                        }
                        for day in plan.result.days
                    ],
                    "notes": plan.result.notes,
                    "warning": plan.result.warning,
                    "created_at": plan.created_at.isoformat()
                    if plan.created_at
                    else None,
                }
            )
            .execute()
        )
        if not response.data:
            raise DatabaseError("Failed to save custom meal plan")
        return _parse_plan(response.data[0])

    def list_custom_plans(self, owner_id: UUID) -> list[CustomPlan]:
        response = (
            self.client.table(_TABLE)
            .select("id, owner_id, message, days, notes, warning, created_at")
            .eq("owner_id", str(owner_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_plan(row) for row in response.data or []]


def _meal_to_payload(meal: CustomMeal) -> dict[str, object]:
    return {
        "type": meal.type,
        "dish_name": meal.dish_name,
        "description": meal.description,
        "nutrition": {
            "calories": meal.nutrition.calories,
            "protein": meal.nutrition.protein,
            "carbs": meal.nutrition.carbs,
            "fat": meal.nutrition.fat,
        },
    }


def _parse_plan(row: dict[str, object]) -> CustomPlan:
    days = []
    for raw_day in row.get("days") or []:
        meals = []
        for raw_meal in raw_day.get("meals") or []:
            nutrition = raw_meal.get("nutrition") or {}
            meals.append(
                CustomMeal(
                    type=str(raw_meal.get("type", "")),
                    dish_name=str(raw_meal.get("dish_name", "")),
                    description=str(raw_meal.get("description", "")),
                    nutrition=Nutrition(
                        calories=float(nutrition.get("calories", 0.0)),
                        protein=float(nutrition.get("protein", 0.0)),
                        carbs=float(nutrition.get("carbs", 0.0)),
                        fat=float(nutrition.get("fat", 0.0)),
                    ),
                )
            )
        days.append(CustomDay(day_number=int(raw_day["day_number"]), meals=meals))
    created_at = row.get("created_at")
    return CustomPlan(
        id=UUID(str(row["id"])),
        owner_id=UUID(str(row["owner_id"])),
        request_text=str(row.get("message", "")),
        result=CustomPlanResult(
            days=days,
            notes=list(row.get("notes") or []),
            warning=row.get("warning") or None,
        ),
        created_at=datetime.fromisoformat(created_at) if created_at else None,
    )
