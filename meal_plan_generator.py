"""Tiered weekly meal plan generation.

The generator walks an ordered list of strategies until one returns a plan:

1. BulkGenerationStrategy: one call for the whole week
2. ChunkedGenerationStrategy: one call per day, failed days replaced with
   deterministic days
3. DeterministicStrategy: catalog-based week, always succeeds

Each strategy returns a GeneratedMealPlan or None. Exceptions never cross a
strategy boundary, so MealPlanGenerator.generate always yields a valid plan.
"""

from __future__ import annotations

import concurrent.futures
import sys
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from agents import AgentPersona, create_meal_planning_agent
from llm_client import LiteLLMTextClient, TextGenerationClient
from llm_config import GenerationSettings, get_generation_settings
from macro_calculator import calculate_nutrition_summary
from meal_catalog import (
    DEFAULT_MEAL_IMAGE_URL,
    select_for_day,
)
from observability import log_generation_tier, log_rejected_response, setup_structured_logger
from profile_builder import generate_meal_timings
from response_validator import ResponseValidator
from schemas import (
    DayPlan,
    GeneratedMeal,
    GeneratedMealPlan,
    MealTiming,
    UserNutritionProfile,
)
from tasks import PromptTask, create_single_day_task, create_weekly_plan_task
from validation_config import DAYS_PER_WEEK, day_name_for_index

logger = setup_structured_logger("meal_plan.generator")

DETERMINISTIC_SHOPPING_TIPS = [
    "Buy proteins in bulk and freeze individual portions",
    "Shop for fresh produce twice a week",
]
DETERMINISTIC_PREP_SUGGESTIONS = [
    "Cook grains in batches at the start of the week",
    "Pre-cut vegetables and store them in airtight containers",
]


def profile_timings(profile: UserNutritionProfile) -> List[MealTiming]:
    """Slots for one day; derived from the counts when not precomputed."""
    timings = list(profile.meal_timings) or generate_meal_timings(
        profile.meals_per_day, profile.snacks_per_day
    )
    return timings or [MealTiming.BREAKFAST, MealTiming.LUNCH, MealTiming.DINNER]


# ============================================================================
# Deterministic synthesis
# ============================================================================


def deterministic_day(profile: UserNutritionProfile, day_index: int) -> DayPlan:
    """Catalog day for one day_index; a pure function of profile and index.

    Daily targets are split evenly across the day's meals.
    """
    timings = profile_timings(profile)
    meal_count = len(timings)

    meals = []
    for timing in timings:
        recipe = select_for_day(timing.value, day_index)
        recipe.update(
            {
                "meal_timing": timing.value,
                "calories": round(profile.target_calories_daily / meal_count),
                "protein_g": round(profile.target_protein_daily / meal_count),
                "carbs_g": round(profile.target_carbs_daily / meal_count),
                "fats_g": round(profile.target_fats_daily / meal_count),
            }
        )
        meals.append(GeneratedMeal.model_validate(recipe))

    return DayPlan(day=day_name_for_index(day_index), day_index=day_index, meals=meals)


def assemble_plan(
    days: Sequence[DayPlan],
    profile: UserNutritionProfile,
    shopping_tips: Optional[List[str]] = None,
    meal_prep_suggestions: Optional[List[str]] = None,
) -> GeneratedMealPlan:
    """Wrap seven days into a plan with a recomputed nutrition summary."""
    days = list(days)
    return GeneratedMealPlan(
        weekly_plan=days,
        weekly_nutrition_summary=calculate_nutrition_summary(days, profile),
        shopping_tips=shopping_tips or [],
        meal_prep_suggestions=meal_prep_suggestions or [],
    )


def deterministic_plan(profile: UserNutritionProfile) -> GeneratedMealPlan:
    days = [deterministic_day(profile, day_index) for day_index in range(DAYS_PER_WEEK)]
    return assemble_plan(
        days,
        profile,
        shopping_tips=list(DETERMINISTIC_SHOPPING_TIPS),
        meal_prep_suggestions=list(DETERMINISTIC_PREP_SUGGESTIONS),
    )


# ============================================================================
# Normalization of validated AI payloads
# ============================================================================


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _normalize_ingredients(raw: Any) -> List[Dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    ingredients = []
    for item in raw:
        if isinstance(item, str) and item.strip():
            ingredients.append({"name": item.strip()})
        elif isinstance(item, dict) and str(item.get("name") or "").strip():
            ingredients.append(
                {
                    "name": str(item["name"]).strip(),
                    "quantity": _to_float(item.get("quantity")),
                    "unit": item.get("unit") or None,
                    "category": item.get("category") or None,
                }
            )
    return ingredients


def normalize_meal(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Fill defaults on a validated meal dict so it fits GeneratedMeal."""
    meal = {key: value for key, value in raw.items() if value is not None}
    meal["name"] = str(raw["name"]).strip()
    meal["meal_timing"] = str(raw["meal_timing"]).strip().upper()
    meal["ingredients"] = _normalize_ingredients(raw.get("ingredients"))
    meal["allergens"] = _string_list(raw.get("allergens"))
    for key in ("protein_g", "carbs_g", "fats_g", "fiber_g", "sugar_g", "sodium_mg"):
        meal[key] = _to_float(raw.get(key)) or 0
    meal.setdefault("image_url", DEFAULT_MEAL_IMAGE_URL)
    if not isinstance(meal.get("dietary_category"), str) or not meal["dietary_category"]:
        meal["dietary_category"] = "BALANCED"
    meal["is_optional"] = bool(raw.get("is_optional", False))
    return meal


def build_day(raw_day: Dict[str, Any], day_index: int) -> Optional[DayPlan]:
    """Canonicalise a validated day; None if it still does not fit the schema."""
    try:
        return DayPlan(
            day=day_name_for_index(day_index),
            day_index=day_index,
            meals=[normalize_meal(meal) for meal in raw_day["meals"]],
        )
    except (ValidationError, KeyError, TypeError) as e:
        print(f"   💥 Day {day_index} failed schema normalization: {e}", file=sys.stderr)
        return None


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int, float)) and str(item).strip()]


# ============================================================================
# Strategies
# ============================================================================


class _AIStrategy:
    """Shared plumbing for tiers that call the generative backend."""

    name = "ai"

    def __init__(
        self,
        client: TextGenerationClient,
        settings: GenerationSettings,
        agent: Optional[AgentPersona] = None,
    ) -> None:
        self.client = client
        self.settings = settings
        self.agent = agent or create_meal_planning_agent()

    def _call(self, task: PromptTask, label: str) -> Optional[str]:
        """One generative call; any exception (timeouts included) becomes None."""
        try:
            return self.client.complete(
                system_prompt=task.system_prompt,
                user_prompt=task.user_prompt,
                max_tokens=task.budget.max_tokens,
                temperature=task.budget.temperature,
                timeout=self.settings.timeout_seconds,
            )
        except Exception as e:  # pylint: disable=broad-except
            print(f"   ❌ {label} call failed: {type(e).__name__}: {e}", file=sys.stderr)
            logger.warning(
                f"{label} call failed",
                extra={
                    "extra_fields": {
                        "tier": self.name,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                },
            )
            return None


class BulkGenerationStrategy(_AIStrategy):
    """Tier 1: the whole week in a single call."""

    name = "bulk"

    def generate(self, profile: UserNutritionProfile) -> Optional[GeneratedMealPlan]:
        if not self.client.is_configured():
            return None

        timings = [timing.value for timing in profile_timings(profile)]
        task = create_weekly_plan_task(self.agent, profile, self.settings.bulk_budget)

        print("🤖 Generating weekly meal plan (bulk)...", file=sys.stderr)
        text = self._call(task, "Bulk plan")
        if text is None:
            return None

        parsed = ResponseValidator(timings).validate_plan(text)
        if parsed is None:
            log_rejected_response(logger, "bulk plan", text)
            print("🔄 Bulk response rejected, escalating...", file=sys.stderr)
            return None

        days = [build_day(raw_day, idx) for idx, raw_day in enumerate(parsed["weekly_plan"])]
        if any(day is None for day in days):
            return None

        print("✅ Bulk meal plan accepted", file=sys.stderr)
        return assemble_plan(
            days,
            profile,
            shopping_tips=_string_list(parsed.get("shopping_tips")),
            meal_prep_suggestions=_string_list(parsed.get("meal_prep_suggestions")),
        )


class ChunkedGenerationStrategy(_AIStrategy):
    """Tier 2: one call per day; a failed day becomes a deterministic day.

    Days are generated sequentially unless `max_workers` > 1, in which case a
    bounded thread pool runs them concurrently. Either way one day's failure
    never affects the others.
    """

    name = "chunked"

    def __init__(
        self,
        client: TextGenerationClient,
        settings: GenerationSettings,
        agent: Optional[AgentPersona] = None,
        max_workers: Optional[int] = None,
    ) -> None:
        super().__init__(client, settings, agent)
        self.max_workers = max(1, max_workers or settings.chunk_workers)
        self.last_failed_days: List[int] = []

    def _generate_single_day(
        self, profile: UserNutritionProfile, day_index: int
    ) -> Optional[DayPlan]:
        day_name = day_name_for_index(day_index)
        try:
            task = create_single_day_task(
                self.agent, profile, day_name, day_index, self.settings.day_budget
            )
            text = self._call(task, f"{day_name} plan")
            if text is None:
                return None
            timings = [timing.value for timing in profile_timings(profile)]
            parsed = ResponseValidator(timings).validate_day(text, day_name, day_index)
            if parsed is None:
                log_rejected_response(logger, f"{day_name} plan", text)
                return None
            return build_day(parsed, day_index)
        except Exception as e:  # pylint: disable=broad-except
            print(f"\n❌ {day_name}: Error - {e}\n", file=sys.stderr)
            return None

    def _generate_days_sequential(self, profile: UserNutritionProfile) -> Dict[int, Optional[DayPlan]]:
        return {
            day_index: self._generate_single_day(profile, day_index)
            for day_index in range(DAYS_PER_WEEK)
        }

    def _generate_days_parallel(self, profile: UserNutritionProfile) -> Dict[int, Optional[DayPlan]]:
        max_workers = min(self.max_workers, DAYS_PER_WEEK)
        results: Dict[int, Optional[DayPlan]] = {}
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(self._generate_single_day, profile, day_index): day_index
                for day_index in range(DAYS_PER_WEEK)
            }
            for future in concurrent.futures.as_completed(futures):
                results[futures[future]] = future.result()
        return results

    def generate(self, profile: UserNutritionProfile) -> Optional[GeneratedMealPlan]:
        if not self.client.is_configured():
            return None

        print(
            f"🔄 Generating meal plan day by day (workers={self.max_workers})...",
            file=sys.stderr,
        )
        if self.max_workers > 1:
            results = self._generate_days_parallel(profile)
        else:
            results = self._generate_days_sequential(profile)

        self.last_failed_days = sorted(idx for idx, day in results.items() if day is None)
        if len(self.last_failed_days) == DAYS_PER_WEEK:
            print("❌ Every day failed in chunked generation", file=sys.stderr)
            return None

        if self.last_failed_days:
            print(
                f"\n⚠️  {len(self.last_failed_days)} day(s) replaced with catalog days: "
                f"{', '.join(day_name_for_index(i) for i in self.last_failed_days)}\n",
                file=sys.stderr,
            )

        days = [
            results.get(day_index) or deterministic_day(profile, day_index)
            for day_index in range(DAYS_PER_WEEK)
        ]
        return assemble_plan(days, profile)


class DeterministicStrategy:
    """Tier 3: catalog week. Never fails."""

    name = "deterministic"

    def generate(self, profile: UserNutritionProfile) -> Optional[GeneratedMealPlan]:
        print("📋 Using deterministic catalog meal plan", file=sys.stderr)
        return deterministic_plan(profile)


# ============================================================================
# Orchestrator
# ============================================================================


class MealPlanGenerator:
    """Walk the strategy ladder until one returns a plan."""

    def __init__(
        self,
        client: Optional[TextGenerationClient] = None,
        settings: Optional[GenerationSettings] = None,
        strategies: Optional[Sequence[Any]] = None,
    ) -> None:
        self.settings = settings or get_generation_settings()
        self.client = client or LiteLLMTextClient(self.settings)
        self.strategies = list(strategies) if strategies is not None else [
            BulkGenerationStrategy(self.client, self.settings),
            ChunkedGenerationStrategy(self.client, self.settings),
            DeterministicStrategy(),
        ]

    def generate(self, profile: UserNutritionProfile) -> GeneratedMealPlan:
        """Return a seven-day plan; never raises."""
        for position, strategy in enumerate(self.strategies):
            try:
                plan = strategy.generate(profile)
            except Exception as e:  # pylint: disable=broad-except
                print(f"   ❌ Strategy {strategy.name} raised: {e}", file=sys.stderr)
                plan = None

            if plan is not None:
                failed_days = getattr(strategy, "last_failed_days", [])
                log_generation_tier(
                    logger,
                    strategy.name,
                    degraded=position > 0 or strategy.name == "deterministic",
                    failed_days=list(failed_days),
                )
                return plan

        log_generation_tier(logger, "deterministic", degraded=True, reason="ladder_exhausted")
        return deterministic_plan(profile)
