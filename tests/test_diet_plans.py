"""Tests for the diet plan service."""

import asyncio
import json
from uuid import UUID, uuid4

import pytest

from diet_planner.domain.plans import PlanStatus
from diet_planner.errors import (
    ConcurrentUpdateError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from diet_planner.services.diet_plans import DietPlanService
from diet_planner.services.generation import FALLBACK_DATA
from tests.conftest import (
    FakeGenerativeClient,
    InMemoryDietPlanRepository,
    make_plan,
    make_profile,
    make_request,
)


def test_generate_stores_plan_with_targets(
    diet_plan_service: DietPlanService,
    plan_repository: InMemoryDietPlanRepository,
    generative_client: FakeGenerativeClient,
    owner_id: UUID,
) -> None:
    generative_client.responses.append(
        json.dumps(
            {
                "days": [
                    {
                        "dayNumber": 1,
                        "meals": [
                            {"type": "Breakfast", "dishName": "Besan Chilla"},
                            {"type": "Lunch", "dishName": "Kadhi Chawal"},
                            {"type": "Dinner", "dishName": "Khichdi"},
                        ],
                    }
                ]
            }
        )
    )

    outcome = asyncio.run(
        diet_plan_service.generate(
            owner_id, make_request(plan_duration=1, plan_name="Week one")
        )
    )

    assert outcome.used_fallback_data is False
    plan = outcome.plan
    assert plan_repository.get_plan(plan.id) == plan
    assert plan.owner_id == owner_id
    assert plan.plan_name == "Week one"
    assert plan.daily_calories == 2056
    assert plan.daily_macros.protein == 140
    assert [meal.dish_name for meal in plan.days[0].meals] == [
        "Besan Chilla",
        "Kadhi Chawal",
        "Khichdi",
    ]


def test_generate_flags_fallback_data(
    diet_plan_service: DietPlanService, owner_id: UUID
) -> None:
    outcome = asyncio.run(diet_plan_service.generate(owner_id, make_request()))

    assert outcome.used_fallback_data is True
    assert outcome.plan.used_fallback_data is True
    assert outcome.warnings[0].code == FALLBACK_DATA
    assert len(outcome.plan.days) == 3


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"profile": make_profile(age=0)}, "age"),
        ({"profile": make_profile(weight_kg=-1.0)}, "weight"),
        ({"profile": make_profile(height_cm=0.0)}, "height"),
        ({"profile": make_profile(gender=" ")}, "gender"),
        ({"profile": make_profile(activity_level="")}, "activityLevel"),
        ({"plan_duration": 0}, "planDuration"),
        ({"plan_duration": 31}, "planDuration"),
        ({"meals_per_day": 1}, "mealsPerDay"),
        ({"meals_per_day": 7}, "mealsPerDay"),
    ],
)
def test_generate_validates_request(
    diet_plan_service: DietPlanService,
    generative_client: FakeGenerativeClient,
    owner_id: UUID,
    overrides: dict[str, object],
    field: str,
) -> None:
    with pytest.raises(ValidationError) as exc_info:
        asyncio.run(diet_plan_service.generate(owner_id, make_request(**overrides)))

    assert exc_info.value.field == field
    assert generative_client.prompts == []


def test_generate_rejects_negative_carb_targets(
    diet_plan_service: DietPlanService, owner_id: UUID
) -> None:
    profile = make_profile(
        weight_kg=200.0,
        height_cm=50.0,
        age=90,
        gender="female",
        activity_level="sedentary",
    )

    with pytest.raises(ValidationError) as exc_info:
        asyncio.run(diet_plan_service.generate(owner_id, make_request(profile=profile)))

    assert exc_info.value.field == "goal"


def test_latest_list_and_delete(
    diet_plan_service: DietPlanService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    with pytest.raises(NotFoundError):
        diet_plan_service.get_latest(owner_id)

    older = plan_repository.save_plan(make_plan(owner_id))
    newer = plan_repository.save_plan(make_plan(owner_id))
    plan_repository.save_plan(make_plan(uuid4()))

    assert diet_plan_service.get_latest(owner_id).id == newer.id
    assert [p.id for p in diet_plan_service.list_plans(owner_id)] == [
        newer.id,
        older.id,
    ]

    deleted = diet_plan_service.delete_plan(owner_id, newer.id)

    assert deleted.status == PlanStatus.DELETED
    assert diet_plan_service.get_latest(owner_id).id == older.id
    with pytest.raises(NotFoundError):
        diet_plan_service.get_plan(owner_id, newer.id)


def test_get_plan_checks_owner(
    diet_plan_service: DietPlanService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = plan_repository.save_plan(make_plan(uuid4()))

    with pytest.raises(ForbiddenError):
        diet_plan_service.get_plan(owner_id, plan.id)
    with pytest.raises(ForbiddenError):
        diet_plan_service.delete_plan(owner_id, plan.id)


def test_get_day_from_latest_plan(
    diet_plan_service: DietPlanService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = plan_repository.save_plan(make_plan(owner_id))

    found_plan, day = diet_plan_service.get_day(owner_id, 2)

    assert found_plan.id == plan.id
    assert day.day_number == 2
    with pytest.raises(ValidationError):
        diet_plan_service.get_day(owner_id, 0)
    with pytest.raises(NotFoundError):
        diet_plan_service.get_day(owner_id, 4)


def test_track_meal_reports_day_progress(
    diet_plan_service: DietPlanService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = plan_repository.save_plan(make_plan(owner_id))
    breakfast = plan.days[0].meals[0]

    result = diet_plan_service.track_meal(owner_id, plan.id, 1, breakfast.id, True)

    assert result.meal.eaten is True
    assert result.plan.version == 2
    assert result.progress.calories.consumed == 300.0
    assert result.progress.calories.total == 2056
    assert result.progress.calories.percentage == 15
    assert result.progress.protein.percentage == 7


def test_track_meal_skips_write_when_unchanged(
    diet_plan_service: DietPlanService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = plan_repository.save_plan(make_plan(owner_id))
    meal = plan.days[0].meals[0]

    result = diet_plan_service.track_meal(owner_id, plan.id, 1, meal.id, False)

    assert plan_repository.update_calls == 0
    assert result.progress.calories.consumed == 0


def test_track_meal_unknown_meal(
    diet_plan_service: DietPlanService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = plan_repository.save_plan(make_plan(owner_id))

    with pytest.raises(NotFoundError):
        diet_plan_service.track_meal(owner_id, plan.id, 1, uuid4(), True)
    with pytest.raises(NotFoundError):
        diet_plan_service.track_meal(owner_id, plan.id, 9, uuid4(), True)


def test_delete_plan_gives_up_on_persistent_conflicts(
    diet_plan_service: DietPlanService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = plan_repository.save_plan(make_plan(owner_id))
    plan_repository.conflicts_to_raise = 3

    with pytest.raises(ConcurrentUpdateError):
        diet_plan_service.delete_plan(owner_id, plan.id)

    assert plan_repository.update_calls == 3
