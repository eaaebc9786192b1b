"""Single-meal replacement with a macro-preserving fallback.

One generative call, validated in single-meal mode. Any failure (no backend,
exception, timeout, rejected response) falls back to a catalog recipe whose
calories and macros are overwritten with the replaced meal's values, so the
day's totals do not move.
"""

from __future__ import annotations

import sys
from typing import Optional

from pydantic import ValidationError

from agents import AgentPersona, create_replacement_chef_agent
from llm_client import LiteLLMTextClient, TextGenerationClient
from llm_config import GenerationSettings, get_generation_settings
from meal_catalog import select_replacement
from meal_plan_generator import normalize_meal
from observability import log_generation_tier, log_rejected_response, setup_structured_logger
from response_validator import ResponseValidator
from schemas import (
    GeneratedMeal,
    MealTemplate,
    ReplacementPreferences,
    UserNutritionProfile,
)
from tasks import create_replacement_meal_task

logger = setup_structured_logger("meal_plan.replacement")

_PRESERVED_MACROS = ("calories", "protein_g", "carbs_g", "fats_g")


def fallback_replacement(current: MealTemplate) -> GeneratedMeal:
    """Catalog replacement carrying the current meal's timing and macros."""
    timing = current.meal_timing.value
    recipe = select_replacement(timing, current.name)
    recipe["meal_timing"] = timing
    for field in _PRESERVED_MACROS:
        recipe[field] = getattr(current, field)
    return GeneratedMeal.model_validate(recipe)


class ReplacementGenerator:
    """Propose a replacement for one scheduled meal."""

    def __init__(
        self,
        client: Optional[TextGenerationClient] = None,
        settings: Optional[GenerationSettings] = None,
        agent: Optional[AgentPersona] = None,
    ) -> None:
        self.settings = settings or get_generation_settings()
        self.client = client or LiteLLMTextClient(self.settings)
        self.agent = agent or create_replacement_chef_agent()
        self.validator = ResponseValidator()

    def _generate_ai(
        self,
        current: MealTemplate,
        preferences: Optional[ReplacementPreferences],
        targets: UserNutritionProfile,
    ) -> Optional[GeneratedMeal]:
        if not self.client.is_configured():
            print("⚠️ No generative backend configured, using fallback replacement", file=sys.stderr)
            return None

        current_meal = current.model_dump(
            mode="json", exclude={"template_id", "created_at", "image_url"}
        )
        task = create_replacement_meal_task(
            self.agent, current_meal, targets, preferences, self.settings.replacement_budget
        )

        try:
            text = self.client.complete(
                system_prompt=task.system_prompt,
                user_prompt=task.user_prompt,
                max_tokens=task.budget.max_tokens,
                temperature=task.budget.temperature,
                timeout=self.settings.timeout_seconds,
            )
        except Exception as e:  # pylint: disable=broad-except
            print(f"   ❌ Replacement call failed: {type(e).__name__}: {e}", file=sys.stderr)
            return None

        parsed = self.validator.validate_meal(text)
        if parsed is None:
            log_rejected_response(logger, "replacement meal", text)
            return None

        # The slot's timing never changes
        parsed["meal_timing"] = current.meal_timing.value
        if not isinstance(parsed.get("calories"), (int, float)) or isinstance(
            parsed.get("calories"), bool
        ):
            parsed["calories"] = current.calories

        try:
            return GeneratedMeal.model_validate(normalize_meal(parsed))
        except ValidationError as e:
            print(f"   💥 Replacement failed schema normalization: {e}", file=sys.stderr)
            return None

    def replace(
        self,
        current_template: MealTemplate,
        preferences: Optional[ReplacementPreferences] = None,
        targets: Optional[UserNutritionProfile] = None,
    ) -> GeneratedMeal:
        """Return a replacement meal; never raises.

        Args:
            current_template: Template currently in the slot
            preferences: Optional dietary category and prep-time limit
            targets: Restrictions and daily targets of the plan owner

        Returns:
            GeneratedMeal with the same meal_timing as current_template
        """
        print(f"🔄 Generating replacement for '{current_template.name}'...", file=sys.stderr)
        targets = targets or UserNutritionProfile()

        meal = self._generate_ai(current_template, preferences, targets)
        if meal is not None:
            log_generation_tier(
                logger, "replacement_ai", degraded=False, replaced=current_template.name
            )
            return meal

        log_generation_tier(
            logger, "replacement_fallback", degraded=True, replaced=current_template.name
        )
        return fallback_replacement(current_template)
