"""Free-text custom meal plan endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, status

from diet_planner.api.dependencies import get_owner_id
from diet_planner.api.models import CustomPlanBody
from diet_planner.api.serializers import custom_plan_body

if TYPE_CHECKING:
    from diet_planner.containers import AppContainer

router = APIRouter(prefix="/custom-meal-plans", tags=["custom-meal-plans"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_custom_plan(
    body: CustomPlanBody, request: Request, owner_id: UUID = Depends(get_owner_id)
) -> dict[str, object]:
    """Generate a plan from a free-text request.

    Generation problems come back as notes and a warning, never as an error.
    """
    container: AppContainer = request.app.state.container
    plan = await container.custom_plan_service.create(owner_id, body.message)
    return {"plan": custom_plan_body(plan)}


@router.get("")
async def list_custom_plans(
    request: Request, owner_id: UUID = Depends(get_owner_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    plans = container.custom_plan_service.list_plans(owner_id)
    return {"plans": [custom_plan_body(plan) for plan in plans]}
