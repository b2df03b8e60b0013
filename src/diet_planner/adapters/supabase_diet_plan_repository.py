"""Supabase repository for meal plans."""

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from diet_planner.domain.plans import (
    DietType,
    MacroTargets,
    MealPlan,
    PlanStatus,
    UserProfile,
    days_from_payload,
    days_to_payload,
)
from diet_planner.errors import ConcurrentUpdateError, DatabaseError
from diet_planner.services.diet_plans import DietPlanRepository

_TABLE = "diet_plans"
_COLUMNS = (
    "id, owner_id, plan_name, diet_type, plan_duration, meals_per_day, "
    "daily_calories, daily_macros, profile, restrictions, days, status, "
    "used_fallback_data, version, created_at"
)


@dataclass
class SupabaseDietPlanRepository(DietPlanRepository):
    """Supabase implementation for meal plans."""

    client: Client

    def save_plan(self, plan: MealPlan) -> MealPlan:
        """Upsert a plan row by id."""
        response = self.client.table(_TABLE).upsert(_to_row(plan)).execute()
        if not response.data:
            raise DatabaseError("Failed to save diet plan", {"plan_id": str(plan.id)})
        return _parse_plan(response.data[0])

    def get_plan(self, plan_id: UUID) -> MealPlan | None:
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("id", str(plan_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_plan(response.data[0])

    def get_latest_plan(self, owner_id: UUID) -> MealPlan | None:
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("owner_id", str(owner_id))
            .eq("status", PlanStatus.ACTIVE.value)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_plan(response.data[0])

    def list_plans(self, owner_id: UUID) -> list[MealPlan]:
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("owner_id", str(owner_id))
            .eq("status", PlanStatus.ACTIVE.value)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_plan(row) for row in response.data or []]

    def update_plan(self, plan: MealPlan, expected_version: int) -> MealPlan:
        """Write the plan only if the stored version still matches."""
        row = _to_row(replace(plan, version=expected_version + 1))
        row["updated_at"] = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table(_TABLE)
            .update(row)
            .eq("id", str(plan.id))
            .eq("version", expected_version)
            .execute()
        )
        if not response.data:
            raise ConcurrentUpdateError(
                "Diet plan was modified concurrently",
                {"plan_id": str(plan.id), "expected_version": expected_version},
            )
        return _parse_plan(response.data[0])


def _to_row(plan: MealPlan) -> dict[str, object]:
    profile = plan.profile
    return {
        "id": str(plan.id),
        "owner_id": str(plan.owner_id),
        "plan_name": plan.plan_name,
        "diet_type": plan.diet_type.value,
        "plan_duration": plan.plan_duration,
        "meals_per_day": plan.meals_per_day,
        "daily_calories": plan.daily_calories,
        "daily_macros": {
            "protein": plan.daily_macros.protein,
            "carbs": plan.daily_macros.carbs,
            "fat": plan.daily_macros.fat,
        },
        "profile": {
            "age": profile.age,
            "weight_kg": profile.weight_kg,
            "height_cm": profile.height_cm,
            "gender": profile.gender,
            "activity_level": profile.activity_level,
            "goal": profile.goal,
        },
        "restrictions": list(plan.restrictions),
        "days": days_to_payload(plan.days),
        "status": plan.status.value,
        "used_fallback_data": plan.used_fallback_data,
        "version": plan.version,
        "created_at": plan.created_at.isoformat() if plan.created_at else None,
    }


def _parse_plan(row: dict[str, object]) -> MealPlan:
    macros = row.get("daily_macros") or {}
    profile = row.get("profile") or {}
    created_at = row.get("created_at")
    return MealPlan(
        id=UUID(str(row["id"])),
        owner_id=UUID(str(row["owner_id"])),
        plan_name=row.get("plan_name"),
        diet_type=DietType(row["diet_type"]),
        plan_duration=int(row["plan_duration"]),
        meals_per_day=int(row["meals_per_day"]),
        daily_calories=int(row["daily_calories"]),
        daily_macros=MacroTargets(
            protein=int(macros.get("protein", 0)),
            carbs=int(macros.get("carbs", 0)),
            fat=int(macros.get("fat", 0)),
        ),
        profile=UserProfile(
            age=int(profile.get("age", 0)),
            weight_kg=float(profile.get("weight_kg", 0.0)),
            height_cm=float(profile.get("height_cm", 0.0)),
            gender=str(profile.get("gender", "")),
            activity_level=str(profile.get("activity_level", "")),
            goal=str(profile.get("goal", "")),
        ),
        restrictions=tuple(row.get("restrictions") or ()),
        days=days_from_payload(row.get("days")),
        status=PlanStatus(row.get("status", PlanStatus.ACTIVE.value)),
        used_fallback_data=bool(row.get("used_fallback_data", False)),
        version=int(row.get("version", 1)),
        created_at=datetime.fromisoformat(created_at) if created_at else None,
    )
