"""Meal plan generation with template fallback."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from diet_planner.domain.candidates import CandidatePlan
from diet_planner.domain.plans import DayPlan, NutritionTarget, PlanRequest, PlanWarning
from diet_planner.errors import (
    GenerationError,
    RepairExhausted,
    UpstreamTimeout,
    UpstreamUnavailable,
)
from diet_planner.services.extraction import extract_json
from diet_planner.services.prompts import meal_plan_values, render_prompt
from diet_planner.services.repair import PlanStructureRepairer, ensure_plan_structure

_logger = logging.getLogger(__name__)

FALLBACK_DATA = "FALLBACK_DATA"
FALLBACK_MESSAGE = (
    "Using sample meal plan data. AI-based generation is currently unavailable."
)


class GenerativeClient(Protocol):
    """Interface for text generation backends."""

    async def generate(self, prompt: str) -> str:
        """Return the raw model text for a prompt."""


class GenerationStage(StrEnum):
    REQUESTING = "requesting"
    EXTRACTING = "extracting"
    REPAIRING = "repairing"
    DONE = "done"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class GenerationResult:
    days: list[DayPlan]
    used_fallback: bool
    stage: GenerationStage
    warnings: list[PlanWarning] = field(default_factory=list)


async def call_with_timeouts(
    client: GenerativeClient,
    prompt: str,
    *,
    timeout_seconds: float,
    soft_timeout_seconds: float,
) -> str:
    """Run one generate call under a soft warning and a hard timeout.

    The soft timeout only logs; the call keeps running until the hard limit.
    Non-generation failures are wrapped in UpstreamUnavailable.
    """
    task = asyncio.ensure_future(client.generate(prompt))
    try:
        if 0 < soft_timeout_seconds < timeout_seconds:
            done, _ = await asyncio.wait({task}, timeout=soft_timeout_seconds)
            if not done:
                _logger.warning(
                    "Generation still running after soft timeout of %.1fs",
                    soft_timeout_seconds,
                )
                return await asyncio.wait_for(
                    task, timeout=timeout_seconds - soft_timeout_seconds
                )
            return task.result()
        return await asyncio.wait_for(task, timeout=timeout_seconds)
    except TimeoutError as exc:
        raise UpstreamTimeout(
            f"Generation timed out after {timeout_seconds:.1f}s",
            {"timeout_seconds": timeout_seconds},
        ) from exc
    except GenerationError:
        raise
    except Exception as exc:
        _logger.exception("Generative client call failed")
        raise UpstreamUnavailable(
            "Generative client call failed", {"reason": str(exc)}
        ) from exc


@dataclass
class MealPlanOrchestrator:
    """Drives one generation attempt and guarantees a complete plan."""

    client: GenerativeClient | None
    repairer: PlanStructureRepairer
    prompt_template: str
    timeout_seconds: float = 60.0
    soft_timeout_seconds: float = 25.0

    async def generate(
        self, request: PlanRequest, target: NutritionTarget
    ) -> GenerationResult:
        """Return a valid plan for the request, falling back to templates.

        Upstream, parsing and repair failures never escape; they produce a
        templated plan flagged with a FALLBACK_DATA warning.
        """
        if self.client is None:
            return self._fallback(
                request, UpstreamUnavailable.code, "client not configured"
            )

        stage = GenerationStage.REQUESTING
        try:
            _logger.debug("Generation stage=%s", stage)
            prompt = render_prompt(
                self.prompt_template, meal_plan_values(request, target)
            )
            text = await call_with_timeouts(
                self.client,
                prompt,
                timeout_seconds=self.timeout_seconds,
                soft_timeout_seconds=self.soft_timeout_seconds,
            )

            stage = GenerationStage.EXTRACTING
            _logger.debug("Generation stage=%s chars=%s", stage, len(text))
            candidate = CandidatePlan.from_raw(extract_json(text))

            stage = GenerationStage.REPAIRING
            _logger.debug(
                "Generation stage=%s candidate_days=%s", stage, len(candidate.days)
            )
            outcome = self.repairer.repair(
                candidate,
                request.plan_duration,
                request.meals_per_day,
                request.diet_type,
            )
            ensure_plan_structure(
                outcome.days, request.plan_duration, request.meals_per_day
            )
        except RepairExhausted as exc:
            _logger.exception("Repaired plan failed structural checks")
            return self._fallback(request, exc.code, exc.message)
        except GenerationError as exc:
            return self._fallback(request, exc.code, exc.message, stage)

        _logger.debug("Generation stage=%s", GenerationStage.DONE)
        return GenerationResult(
            days=outcome.days,
            used_fallback=False,
            stage=GenerationStage.DONE,
            warnings=outcome.warnings,
        )

    def _fallback(
        self,
        request: PlanRequest,
        code: str,
        reason: str,
        stage: GenerationStage | None = None,
    ) -> GenerationResult:
        _logger.warning(
            "Falling back to template plan: code=%s stage=%s reason=%s",
            code,
            stage,
            reason,
        )
        days = self.repairer.build_templated_days(
            request.plan_duration, request.meals_per_day, request.diet_type
        )
        return GenerationResult(
            days=days,
            used_fallback=True,
            stage=GenerationStage.FALLBACK,
            warnings=[
                PlanWarning(
                    code=FALLBACK_DATA,
                    message=FALLBACK_MESSAGE,
                    details={"reason": code},
                )
            ],
        )
