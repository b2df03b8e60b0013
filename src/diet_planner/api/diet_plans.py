"""Diet plan endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, status

from diet_planner.api.dependencies import get_owner_id
from diet_planner.api.models import PlanGenerationBody, PlanMealBody
from diet_planner.api.serializers import (
    day_body,
    day_progress_body,
    meal_body,
    plan_body,
    plan_summary_body,
    warning_body,
)
from diet_planner.services.generation import FALLBACK_DATA

if TYPE_CHECKING:
    from diet_planner.containers import AppContainer

router = APIRouter(prefix="/diet-plans", tags=["diet-plans"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def generate_plan(
    body: PlanGenerationBody,
    request: Request,
    owner_id: UUID = Depends(get_owner_id),
) -> dict[str, object]:
    """Generate and store a plan for the caller."""
    container: AppContainer = request.app.state.container
    outcome = await container.diet_plan_service.generate(owner_id, body.to_request())
    fallback = next((w for w in outcome.warnings if w.code == FALLBACK_DATA), None)
    return {
        "message": "Diet plan generated successfully",
        "plan": plan_body(outcome.plan),
        "usedFallbackData": outcome.used_fallback_data,
        "warning": fallback.message if fallback else None,
        "warnings": [warning_body(warning) for warning in outcome.warnings],
    }


@router.get("")
async def list_plans(
    request: Request, owner_id: UUID = Depends(get_owner_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    plans = container.diet_plan_service.list_plans(owner_id)
    return {"plans": [plan_summary_body(plan) for plan in plans]}


@router.get("/latest")
async def latest_plan(
    request: Request, owner_id: UUID = Depends(get_owner_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return {"plan": plan_body(container.diet_plan_service.get_latest(owner_id))}


@router.get("/days/{day_number}")
async def plan_day(
    day_number: int, request: Request, owner_id: UUID = Depends(get_owner_id)
) -> dict[str, object]:
    """Return one day of the caller's latest plan."""
    container: AppContainer = request.app.state.container
    plan, day = container.diet_plan_service.get_day(owner_id, day_number)
    return {"planId": str(plan.id), "day": day_body(day)}


@router.post("/track-meal")
async def track_meal(
    body: PlanMealBody, request: Request, owner_id: UUID = Depends(get_owner_id)
) -> dict[str, object]:
    """Mark a plan meal eaten and return the day's progress."""
    container: AppContainer = request.app.state.container
    result = container.diet_plan_service.track_meal(
        owner_id, body.plan_id, body.day_number, body.meal_id, body.eaten
    )
    return {
        "message": "Meal tracking updated",
        "meal": meal_body(result.meal),
        "dayProgress": day_progress_body(result.progress),
    }


@router.get("/{plan_id}")
async def get_plan(
    plan_id: UUID, request: Request, owner_id: UUID = Depends(get_owner_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return {"plan": plan_body(container.diet_plan_service.get_plan(owner_id, plan_id))}


@router.delete("/{plan_id}")
async def delete_plan(
    plan_id: UUID, request: Request, owner_id: UUID = Depends(get_owner_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    container.diet_plan_service.delete_plan(owner_id, plan_id)
    return {"message": "Diet plan deleted", "planId": str(plan_id)}
