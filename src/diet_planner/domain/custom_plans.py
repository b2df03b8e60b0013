"""Domain models for free-text custom meal plans."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from diet_planner.domain.plans import Nutrition


@dataclass(frozen=True)
class CustomMeal:
    type: str
    dish_name: str
    description: str
    nutrition: Nutrition


@dataclass(frozen=True)
class CustomDay:
    day_number: int
    meals: list[CustomMeal]


@dataclass(frozen=True)
class CustomPlanResult:
    """Outcome of a custom generation; degraded results carry notes and a warning."""

    days: list[CustomDay] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    warning: str | None = None


@dataclass(frozen=True)
class CustomPlan:
    """A stored custom plan."""

    id: UUID
    owner_id: UUID
    request_text: str
    result: CustomPlanResult
    created_at: datetime | None = None
