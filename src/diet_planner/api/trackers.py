"""Diet tracker endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, Response, status

from diet_planner.api.dependencies import get_owner_id
from diet_planner.api.models import (
    TrackerCreateBody,
    TrackerMealBody,
    TrackerStatusBody,
)
from diet_planner.api.serializers import (
    day_body,
    meal_body,
    plan_body,
    record_body,
    tracker_body,
)

if TYPE_CHECKING:
    from diet_planner.containers import AppContainer

router = APIRouter(prefix="/diet-trackers", tags=["diet-trackers"])


@router.post("")
async def create_tracker(
    body: TrackerCreateBody,
    request: Request,
    response: Response,
    owner_id: UUID = Depends(get_owner_id),
) -> dict[str, object]:
    """Start tracking a plan, or return the tracker that already exists."""
    container: AppContainer = request.app.state.container
    tracker, created = container.tracker_service.create_for_plan(
        owner_id, body.diet_plan_id
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
        message = "Diet tracker created"
    else:
        message = "Active diet tracker already exists for this plan"
    return {"message": message, "tracker": tracker_body(tracker)}


@router.post("/track-meal")
async def track_meal(
    body: TrackerMealBody, request: Request, owner_id: UUID = Depends(get_owner_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    tracker, meal = container.tracker_service.record_meal_eaten(
        owner_id, body.tracker_id, body.day_number, body.meal_id, body.eaten
    )
    return {
        "message": "Meal tracking updated",
        "meal": meal_body(meal),
        "tracker": tracker_body(tracker),
    }


@router.get("/active")
async def active_tracker(
    request: Request, owner_id: UUID = Depends(get_owner_id)
) -> dict[str, object]:
    """Return the caller's active tracker with its plan."""
    container: AppContainer = request.app.state.container
    tracker, plan = container.tracker_service.get_active(owner_id)
    return {
        "tracker": tracker_body(tracker),
        "dietPlan": plan_body(plan) if plan else None,
    }


@router.get("")
async def list_trackers(
    request: Request, owner_id: UUID = Depends(get_owner_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    trackers = container.tracker_service.list_trackers(owner_id)
    return {"trackers": [tracker_body(tracker) for tracker in trackers]}


@router.get("/{tracker_id}/days/{day_number}")
async def tracker_day(
    tracker_id: UUID,
    day_number: int,
    request: Request,
    owner_id: UUID = Depends(get_owner_id),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    record, day = container.tracker_service.get_day(owner_id, tracker_id, day_number)
    return {"dayTracker": record_body(record), "dayPlan": day_body(day)}


@router.post("/update-status")
async def update_status(
    body: TrackerStatusBody, request: Request, owner_id: UUID = Depends(get_owner_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    tracker = container.tracker_service.update_status(
        owner_id, body.tracker_id, body.status
    )
    return {"message": "Tracker status updated", "tracker": tracker_body(tracker)}


@router.post("/{tracker_id}/rebuild")
async def rebuild_tracker(
    tracker_id: UUID, request: Request, owner_id: UUID = Depends(get_owner_id)
) -> dict[str, object]:
    """Recompute every recorded day from the plan."""
    container: AppContainer = request.app.state.container
    tracker = container.tracker_service.rebuild(owner_id, tracker_id)
    return {"message": "Tracker rebuilt", "tracker": tracker_body(tracker)}
