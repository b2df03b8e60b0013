"""Pydantic request bodies for the HTTP API."""

from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from diet_planner.domain.plans import DietType, PlanRequest, UserProfile
from diet_planner.domain.trackers import TrackerStatus


class ApiModel(BaseModel):
    """Accepts camelCase or snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProfileBody(ApiModel):
    """Body metrics and goal."""

    age: int
    weight: float
    height: float
    gender: str
    activity_level: str
    goal: str

    def to_profile(self) -> UserProfile:
        return UserProfile(
            age=self.age,
            weight_kg=self.weight,
            height_cm=self.height,
            gender=self.gender.strip().lower(),
            activity_level=self.activity_level.strip().lower(),
            goal=self.goal.strip().lower(),
        )


class PlanGenerationBody(ProfileBody):
    """Parameters for generating a diet plan."""

    plan_duration: int = 7
    meals_per_day: int = Field(
        default=3,
        validation_alias=AliasChoices("mealsPerDay", "mealPerDay", "meals_per_day"),
    )
    diet_type: DietType = DietType.NON_VEG
    restrictions_and_allergies: list[str] = Field(default_factory=list)
    plan_name: str | None = None
    fitness_goal: str | None = None

    @field_validator("restrictions_and_allergies", mode="before")
    @classmethod
    def _split_restrictions(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    def to_request(self) -> PlanRequest:
        return PlanRequest(
            profile=self.to_profile(),
            plan_duration=self.plan_duration,
            meals_per_day=self.meals_per_day,
            diet_type=self.diet_type,
            restrictions=tuple(self.restrictions_and_allergies),
            plan_name=self.plan_name,
            fitness_goal=self.fitness_goal,
        )


class PlanMealBody(ApiModel):
    """Marks a meal of a plan eaten or not eaten."""

    plan_id: UUID
    day_number: int
    meal_id: UUID
    eaten: bool


class TrackerCreateBody(ApiModel):
    diet_plan_id: UUID = Field(
        validation_alias=AliasChoices("dietPlanId", "planId", "diet_plan_id")
    )


class TrackerMealBody(ApiModel):
    tracker_id: UUID
    day_number: int
    meal_id: UUID
    eaten: bool


class TrackerStatusBody(ApiModel):
    tracker_id: UUID
    status: TrackerStatus


class CustomPlanBody(ApiModel):
    """Free-text request for a custom plan."""

    message: str = Field(
        validation_alias=AliasChoices("message", "userSentence", "request")
    )
