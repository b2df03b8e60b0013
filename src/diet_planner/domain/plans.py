"""Domain models for generated meal plans."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class MealSlot(StrEnum):
    """Meal slots, declared in the order they are added when scaling a day."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snack"
    EVENING_SNACK = "Evening Snack"
    MID_MORNING_SNACK = "Mid-morning Snack"


SLOT_ORDER: tuple[MealSlot, ...] = tuple(MealSlot)
MAIN_SLOTS: tuple[MealSlot, ...] = (MealSlot.BREAKFAST, MealSlot.LUNCH, MealSlot.DINNER)


class DietType(StrEnum):
    """Dietary category that constrains template selection."""

    VEG = "veg"
    NON_VEG = "non-veg"
    BOTH = "both"
    VEGAN = "vegan"


class PlanStatus(StrEnum):
    """Lifecycle status of a stored plan."""

    ACTIVE = "active"
    DELETED = "deleted"


@dataclass(frozen=True)
class Nutrition:
    """Calories and macros (grams) for one meal."""

    calories: float
    protein: float
    carbs: float
    fat: float


ZERO_NUTRITION = Nutrition(calories=0.0, protein=0.0, carbs=0.0, fat=0.0)


@dataclass(frozen=True)
class MacroTargets:
    """Daily macro targets in grams."""

    protein: int
    carbs: int
    fat: int


@dataclass(frozen=True)
class NutritionTarget:
    """Daily calorie and macro targets derived from a profile and goal."""

    calories: int
    protein: int
    carbs: int
    fat: int

    @property
    def macros(self) -> MacroTargets:
        return MacroTargets(protein=self.protein, carbs=self.carbs, fat=self.fat)


@dataclass(frozen=True)
class UserProfile:
    """Body metrics and goal used for target calculations."""

    age: int
    weight_kg: float
    height_cm: float
    gender: str
    activity_level: str
    goal: str


@dataclass(frozen=True)
class PlanRequest:
    """Validated parameters for generating a plan."""

    profile: UserProfile
    plan_duration: int
    meals_per_day: int
    diet_type: DietType
    restrictions: tuple[str, ...] = ()
    plan_name: str | None = None
    fitness_goal: str | None = None


@dataclass(frozen=True)
class Meal:
    """A single meal within a day."""

    id: UUID
    slot: MealSlot
    dish_name: str
    description: str
    nutrition: Nutrition
    eaten: bool = False


@dataclass(frozen=True)
class DayPlan:
    """Meals for one day of a plan."""

    day_number: int
    meals: list[Meal]

    def find_meal(self, meal_id: UUID) -> Meal | None:
        for meal in self.meals:
            if meal.id == meal_id:
                return meal
        return None


@dataclass(frozen=True)
class PlanWarning:
    """Non-fatal notice attached to a generated plan."""

    code: str
    message: str
    details: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class MealPlan:
    """A stored multi-day meal plan."""

    id: UUID
    owner_id: UUID
    diet_type: DietType
    plan_duration: int
    meals_per_day: int
    days: list[DayPlan]
    daily_calories: int
    daily_macros: MacroTargets
    profile: UserProfile
    status: PlanStatus = PlanStatus.ACTIVE
    plan_name: str | None = None
    restrictions: tuple[str, ...] = ()
    used_fallback_data: bool = False
    version: int = 1
    created_at: datetime | None = None

    def find_day(self, day_number: int) -> DayPlan | None:
        for day in self.days:
            if day.day_number == day_number:
                return day
        return None

    def with_meal_eaten(
        self, day_number: int, meal_id: UUID, eaten: bool
    ) -> "MealPlan":
        """Return a copy with one meal's eaten flag replaced."""
        days = []
        for day in self.days:
            if day.day_number != day_number:
                days.append(day)
                continue
            meals = [
                replace(meal, eaten=eaten) if meal.id == meal_id else meal
                for meal in day.meals
            ]
            days.append(replace(day, meals=meals))
        return replace(self, days=days)


def meal_to_payload(meal: Meal) -> dict[str, object]:
    """Serialize a meal into its stored JSON shape."""
    return {
        "id": str(meal.id),
        "type": meal.slot.value,
        "dish_name": meal.dish_name,
        "description": meal.description,
        "nutrition": {
            "calories": meal.nutrition.calories,
            "protein": meal.nutrition.protein,
            "carbs": meal.nutrition.carbs,
            "fat": meal.nutrition.fat,
        },
        "eaten": meal.eaten,
    }


def days_to_payload(days: list[DayPlan]) -> list[dict[str, object]]:
    """Serialize days into the stored JSON shape."""
    return [
        {
            "day_number": day.day_number,
            "meals": [meal_to_payload(meal) for meal in day.meals],
        }
        for day in days
    ]


def days_from_payload(payload: object) -> list[DayPlan]:
    """Parse days previously written by days_to_payload."""
    if not isinstance(payload, list):
        return []
    days = []
    for raw_day in payload:
        if not isinstance(raw_day, dict):
            continue
        meals = [
            _meal_from_payload(raw_meal)
            for raw_meal in raw_day.get("meals") or []
            if isinstance(raw_meal, dict)
        ]
        days.append(DayPlan(day_number=int(raw_day["day_number"]), meals=meals))
    return sorted(days, key=lambda day: day.day_number)


def _meal_from_payload(raw: dict[str, object]) -> Meal:
    nutrition = raw.get("nutrition") or {}
    return Meal(
        id=UUID(str(raw["id"])),
        slot=MealSlot(str(raw["type"])),
        dish_name=str(raw.get("dish_name", "")),
        description=str(raw.get("description", "")),
        nutrition=Nutrition(
            calories=float(nutrition.get("calories", 0.0)),
            protein=float(nutrition.get("protein", 0.0)),
            carbs=float(nutrition.get("carbs", 0.0)),
            fat=float(nutrition.get("fat", 0.0)),
        ),
        eaten=bool(raw.get("eaten", False)),
    )
