"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from diet_planner.adapters.gemini_client import HttpxGeminiClient
from diet_planner.adapters.openai_client import OpenAIGenerativeClient
from diet_planner.adapters.supabase_custom_plan_repository import (
    SupabaseCustomPlanRepository,
)
from diet_planner.adapters.supabase_diet_plan_repository import (
    SupabaseDietPlanRepository,
)
from diet_planner.adapters.supabase_tracker_repository import SupabaseTrackerRepository
from diet_planner.config import Settings, resolve_provider
from diet_planner.services.custom_plans import CustomPlanOrchestrator, CustomPlanService
from diet_planner.services.diet_plans import DietPlanService
from diet_planner.services.generation import MealPlanOrchestrator
from diet_planner.services.prompts import (
    CUSTOM_MEAL_PROMPT,
    MEAL_PLAN_PROMPT,
    load_prompt,
)
from diet_planner.services.repair import PlanStructureRepairer
from diet_planner.services.templates import PlanTemplateLibrary
from diet_planner.services.trackers import DietTrackerService

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    diet_plan_service: DietPlanService
    tracker_service: DietTrackerService
    custom_plan_service: CustomPlanService
    close_resources: Callable[[], Awaitable[None]]


def build_generative_client(
    settings: Settings,
) -> OpenAIGenerativeClient | HttpxGeminiClient | None:
    """Create the configured generative client, or None when it has no key."""
    provider = resolve_provider(settings)
    if provider == "openai" and settings.openai_api_key:
        return OpenAIGenerativeClient.create(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.generation_timeout_seconds,
        )
    if provider == "gemini" and settings.gemini_api_key:
        return HttpxGeminiClient.create(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.generation_timeout_seconds,
        )
    _logger.warning(
        "No generative client configured for provider=%s; plans will use templates",
        settings.generative_provider,
    )
    return None


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    plan_repository = SupabaseDietPlanRepository(supabase_client)
    tracker_repository = SupabaseTrackerRepository(supabase_client)
    custom_plan_repository = SupabaseCustomPlanRepository(supabase_client)
    generative_client = build_generative_client(resolved_settings)
    repairer = PlanStructureRepairer(PlanTemplateLibrary.default())
    orchestrator = MealPlanOrchestrator(
        client=generative_client,
        repairer=repairer,
        prompt_template=load_prompt(MEAL_PLAN_PROMPT),
        timeout_seconds=resolved_settings.generation_timeout_seconds,
        soft_timeout_seconds=resolved_settings.generation_soft_timeout_seconds,
    )
    custom_orchestrator = CustomPlanOrchestrator(
        client=generative_client,
        prompt_template=load_prompt(CUSTOM_MEAL_PROMPT),
        timeout_seconds=resolved_settings.generation_timeout_seconds,
        soft_timeout_seconds=resolved_settings.generation_soft_timeout_seconds,
    )
    diet_plan_service = DietPlanService(
        orchestrator=orchestrator,
        repository=plan_repository,
        update_attempts=resolved_settings.tracker_update_attempts,
    )
    tracker_service = DietTrackerService(
        tracker_repository=tracker_repository,
        plan_repository=plan_repository,
        update_attempts=resolved_settings.tracker_update_attempts,
    )
    custom_plan_service = CustomPlanService(
        orchestrator=custom_orchestrator,
        repository=custom_plan_repository,
    )

    async def close_resources() -> None:
        if generative_client is not None:
            await generative_client.close()

    return AppContainer(
        settings=resolved_settings,
        diet_plan_service=diet_plan_service,
        tracker_service=tracker_service,
        custom_plan_service=custom_plan_service,
        close_resources=close_resources,
    )
