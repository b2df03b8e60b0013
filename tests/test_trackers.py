"""Tests for diet progress tracking."""

from datetime import date, timedelta
from uuid import UUID, uuid4

import pytest

from diet_planner.domain.plans import MacroTargets, MealPlan
from diet_planner.domain.trackers import (
    DailyTrackerRecord,
    MacroProgress,
    TrackerStatus,
)
from diet_planner.errors import (
    ConcurrentUpdateError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from diet_planner.services.trackers import (
    DietTrackerService,
    calculate_adherence,
    calculate_nutrition_adherence,
    calculate_overall_completion,
    calculate_streak,
    completion_percentage,
)
from tests.conftest import (
    InMemoryDietPlanRepository,
    InMemoryTrackerRepository,
    make_plan,
)


def _record(
    day_number: int, completion: int, consumed: float = 0.0
) -> DailyTrackerRecord:
    macro = MacroProgress(consumed=consumed, target=100.0)
    return DailyTrackerRecord(
        day_number=day_number,
        date=date(2026, 1, 1) + timedelta(days=day_number - 1),
        completed_meals=0,
        total_meals=4,
        completion_percentage=completion,
        calories_consumed=0.0,
        target_calories=2000.0,
        protein=macro,
        carbs=macro,
        fat=macro,
    )


def _stored_plan(
    plan_repository: InMemoryDietPlanRepository, owner_id: UUID, **kwargs: int
) -> MealPlan:
    return plan_repository.save_plan(make_plan(owner_id, **kwargs))


def test_completion_percentage_rounds() -> None:
    assert completion_percentage(3, 4) == 75
    assert completion_percentage(1, 3) == 33
    assert completion_percentage(2, 3) == 67
    assert completion_percentage(0, 0) == 0


def test_streak_counts_from_latest_day() -> None:
    records = [_record(1, 100), _record(2, 50), _record(3, 70), _record(4, 90)]

    assert calculate_streak(records) == 2
    assert calculate_streak([]) == 0


def test_streak_never_grows_when_a_day_drops() -> None:
    records = [_record(1, 100), _record(2, 100), _record(3, 100)]
    before = calculate_streak(records)

    records[2] = _record(3, 20)

    assert calculate_streak(records) <= before
    assert calculate_streak(records) == 0


def test_overall_completion_averages_days() -> None:
    assert calculate_overall_completion([_record(1, 100), _record(2, 25)]) == 63
    assert calculate_overall_completion([]) == 0


def test_nutrition_adherence_ignores_empty_readings() -> None:
    assert calculate_nutrition_adherence([_record(1, 0)]) == 0.0
    assert calculate_nutrition_adherence([_record(1, 50, consumed=250.0)]) == 100.0


def test_adherence_stays_within_bounds() -> None:
    records = [_record(1, 100, consumed=500.0), _record(2, 100, consumed=500.0)]

    assert calculate_adherence([], 0, 0, 2) == 0
    assert calculate_adherence(records, 100, 2, 2) == 100
    assert calculate_adherence(records, 100, 5, 2) == 100
    assert calculate_adherence(records, 100, 2, 0) == 70


def test_create_for_plan_records_first_day(
    tracker_service: DietTrackerService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = _stored_plan(plan_repository, owner_id)

    tracker, created = tracker_service.create_for_plan(owner_id, plan.id)

    assert created is True
    assert tracker.status == TrackerStatus.ACTIVE
    assert tracker.total_days == 3
    assert tracker.target_calories == 2056
    assert tracker.target_macros == MacroTargets(protein=140, carbs=246, fat=57)
    assert list(tracker.daily_trackers) == [1]
    assert tracker.daily_trackers[1].total_meals == 4
    assert tracker.daily_trackers[1].date == tracker.start_date
    assert tracker.adherence_score == 0


def test_create_for_plan_returns_existing_tracker(
    tracker_service: DietTrackerService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = _stored_plan(plan_repository, owner_id)
    first, _ = tracker_service.create_for_plan(owner_id, plan.id)

    second, created = tracker_service.create_for_plan(owner_id, plan.id)

    assert created is False
    assert second.id == first.id


def test_single_day_tracker_starts_active(
    tracker_service: DietTrackerService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = _stored_plan(plan_repository, owner_id, plan_duration=1)

    tracker, _ = tracker_service.create_for_plan(owner_id, plan.id)

    assert tracker.status == TrackerStatus.ACTIVE


def test_create_for_missing_or_foreign_plan(
    tracker_service: DietTrackerService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = _stored_plan(plan_repository, uuid4())

    with pytest.raises(NotFoundError):
        tracker_service.create_for_plan(owner_id, uuid4())
    with pytest.raises(ForbiddenError):
        tracker_service.create_for_plan(owner_id, plan.id)


def test_record_meal_eaten_recomputes_metrics(
    tracker_service: DietTrackerService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = _stored_plan(plan_repository, owner_id)
    tracker, _ = tracker_service.create_for_plan(owner_id, plan.id)
    meals = plan.days[0].meals

    for meal in meals[:3]:
        tracker, eaten_meal = tracker_service.record_meal_eaten(
            owner_id, tracker.id, 1, meal.id, True
        )

    assert eaten_meal.eaten is True
    record = tracker.daily_trackers[1]
    assert record.completed_meals == 3
    assert record.completion_percentage == 75
    assert record.calories_consumed == 1130.0
    assert record.protein == MacroProgress(consumed=40.0, target=140)
    assert tracker.overall_completion_percentage == 75
    assert tracker.streak == 1
    assert tracker.adherence_score == 58
    stored_plan = plan_repository.get_plan(plan.id)
    assert stored_plan is not None
    assert [meal.eaten for meal in stored_plan.days[0].meals] == [
        True,
        True,
        True,
        False,
    ]


def test_unmarking_a_meal_lowers_completion(
    tracker_service: DietTrackerService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = _stored_plan(plan_repository, owner_id)
    tracker, _ = tracker_service.create_for_plan(owner_id, plan.id)
    meal_id = plan.days[1].meals[0].id

    tracker, _ = tracker_service.record_meal_eaten(
        owner_id, tracker.id, 2, meal_id, True
    )
    tracker, meal = tracker_service.record_meal_eaten(
        owner_id, tracker.id, 2, meal_id, False
    )

    assert meal.eaten is False
    assert tracker.current_day == 2
    assert tracker.daily_trackers[2].completion_percentage == 0
    assert tracker.daily_trackers[2].date == tracker.start_date + timedelta(days=1)


def test_tracker_completes_when_every_day_recorded(
    tracker_service: DietTrackerService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = _stored_plan(plan_repository, owner_id, plan_duration=2, meals_per_day=2)
    tracker, _ = tracker_service.create_for_plan(owner_id, plan.id)

    for day in plan.days:
        for meal in day.meals:
            tracker, _ = tracker_service.record_meal_eaten(
                owner_id, tracker.id, day.day_number, meal.id, True
            )

    assert tracker.status == TrackerStatus.COMPLETED
    assert tracker.overall_completion_percentage == 100
    assert tracker.streak == 2
    assert 0 <= tracker.adherence_score <= 100


def test_record_meal_rejects_bad_input(
    tracker_service: DietTrackerService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = _stored_plan(plan_repository, owner_id)
    tracker, _ = tracker_service.create_for_plan(owner_id, plan.id)
    meal_id = plan.days[0].meals[0].id

    with pytest.raises(ValidationError):
        tracker_service.record_meal_eaten(owner_id, tracker.id, 4, meal_id, True)
    with pytest.raises(NotFoundError):
        tracker_service.record_meal_eaten(owner_id, tracker.id, 1, uuid4(), True)
    with pytest.raises(ForbiddenError):
        tracker_service.record_meal_eaten(uuid4(), tracker.id, 1, meal_id, True)

    tracker_service.update_status(owner_id, tracker.id, TrackerStatus.ABANDONED)
    with pytest.raises(ValidationError):
        tracker_service.record_meal_eaten(owner_id, tracker.id, 1, meal_id, True)


def test_record_meal_retries_on_version_conflict(
    tracker_service: DietTrackerService,
    plan_repository: InMemoryDietPlanRepository,
    tracker_repository: InMemoryTrackerRepository,
    owner_id: UUID,
) -> None:
    plan = _stored_plan(plan_repository, owner_id)
    tracker, _ = tracker_service.create_for_plan(owner_id, plan.id)
    tracker_repository.conflicts_to_raise = 2

    updated, _ = tracker_service.record_meal_eaten(
        owner_id, tracker.id, 1, plan.days[0].meals[0].id, True
    )

    assert tracker_repository.update_calls == 3
    assert updated.version == tracker.version + 1
    assert updated.daily_trackers[1].completed_meals == 1


def test_record_meal_gives_up_after_repeated_conflicts(
    tracker_service: DietTrackerService,
    plan_repository: InMemoryDietPlanRepository,
    tracker_repository: InMemoryTrackerRepository,
    owner_id: UUID,
) -> None:
    plan = _stored_plan(plan_repository, owner_id)
    tracker, _ = tracker_service.create_for_plan(owner_id, plan.id)
    tracker_repository.conflicts_to_raise = 5

    with pytest.raises(ConcurrentUpdateError):
        tracker_service.record_meal_eaten(
            owner_id, tracker.id, 1, plan.days[0].meals[0].id, True
        )

    assert tracker_repository.update_calls == 3


def test_get_active_and_list(
    tracker_service: DietTrackerService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    with pytest.raises(NotFoundError):
        tracker_service.get_active(owner_id)

    plan = _stored_plan(plan_repository, owner_id)
    tracker, _ = tracker_service.create_for_plan(owner_id, plan.id)

    active, active_plan = tracker_service.get_active(owner_id)
    assert active.id == tracker.id
    assert active_plan is not None
    assert active_plan.id == plan.id
    assert [t.id for t in tracker_service.list_trackers(owner_id)] == [tracker.id]


def test_get_day_computes_unrecorded_days(
    tracker_service: DietTrackerService,
    plan_repository: InMemoryDietPlanRepository,
    tracker_repository: InMemoryTrackerRepository,
    owner_id: UUID,
) -> None:
    plan = _stored_plan(plan_repository, owner_id)
    tracker, _ = tracker_service.create_for_plan(owner_id, plan.id)

    record, day = tracker_service.get_day(owner_id, tracker.id, 3)

    assert record.day_number == 3
    assert record.completion_percentage == 0
    assert day.day_number == 3
    stored = tracker_repository.get_tracker(tracker.id)
    assert stored is not None
    assert 3 not in stored.daily_trackers
    with pytest.raises(ValidationError):
        tracker_service.get_day(owner_id, tracker.id, 0)


def test_reactivation_blocked_by_other_active_tracker(
    tracker_service: DietTrackerService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = _stored_plan(plan_repository, owner_id)
    first, _ = tracker_service.create_for_plan(owner_id, plan.id)
    abandoned = tracker_service.update_status(
        owner_id, first.id, TrackerStatus.ABANDONED
    )
    second, created = tracker_service.create_for_plan(owner_id, plan.id)

    assert abandoned.status == TrackerStatus.ABANDONED
    assert created is True
    assert second.id != first.id
    with pytest.raises(ValidationError):
        tracker_service.update_status(owner_id, first.id, TrackerStatus.ACTIVE)


def test_rebuild_picks_up_plan_changes(
    tracker_service: DietTrackerService,
    plan_repository: InMemoryDietPlanRepository,
    owner_id: UUID,
) -> None:
    plan = _stored_plan(plan_repository, owner_id)
    tracker, _ = tracker_service.create_for_plan(owner_id, plan.id)
    stored = plan_repository.get_plan(plan.id)
    assert stored is not None
    for meal in stored.days[0].meals:
        stored = plan_repository.update_plan(
            stored.with_meal_eaten(1, meal.id, True), expected_version=stored.version
        )

    rebuilt = tracker_service.rebuild(owner_id, tracker.id)

    assert rebuilt.daily_trackers[1].completion_percentage == 100
    assert rebuilt.overall_completion_percentage == 100
    assert rebuilt.streak == 1
