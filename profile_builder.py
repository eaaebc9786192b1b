"""Assemble a UserNutritionProfile from user, questionnaire and goal data."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from schemas import MealPlanConfig, MealTiming, UserContext, UserNutritionProfile
from validation_config import (
    DEFAULT_AGE,
    DEFAULT_HEIGHT_CM,
    DEFAULT_TARGETS,
    DEFAULT_WEIGHT_KG,
    MAX_MAIN_MEAL_SLOTS,
    MAX_SNACK_SLOTS,
    cooking_time_label,
)

_MAIN_MEAL_ORDER = [MealTiming.BREAKFAST, MealTiming.LUNCH, MealTiming.DINNER]
_SNACK_ORDER = [
    MealTiming.MORNING_SNACK,
    MealTiming.AFTERNOON_SNACK,
    MealTiming.EVENING_SNACK,
]


def generate_meal_timings(meals_per_day: int, snacks_per_day: int) -> List[MealTiming]:
    """Derive the daily slot list from meal and snack counts.

    Main meals add BREAKFAST, LUNCH, DINNER in that order; counts above three
    add no further slots. Snacks add MORNING, AFTERNOON, EVENING likewise.
    """
    mains = _MAIN_MEAL_ORDER[: max(0, min(meals_per_day, MAX_MAIN_MEAL_SLOTS))]
    snacks = _SNACK_ORDER[: max(0, min(snacks_per_day, MAX_SNACK_SLOTS))]
    return mains + snacks


def _first_value(source: Optional[Dict[str, Any]], key: str, default: Any) -> Any:
    """Value from an optional dict; missing, None and 0 all fall back."""
    if not source:
        return default
    value = source.get(key)
    return value if value else default


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return [item for item in value if item]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [value]


def build_user_profile(
    config: MealPlanConfig,
    context: Optional[UserContext] = None,
) -> UserNutritionProfile:
    """Merge every known source into one generation profile.

    Args:
        config: Meal structure requested by the caller
        context: User basics, latest questionnaire and nutrition goals; any
            part may be missing

    Returns:
        UserNutritionProfile with defaults applied to missing values
    """
    context = context or UserContext()
    user = context.user
    questionnaire = context.questionnaire
    goals = context.nutrition_goals

    return UserNutritionProfile(
        age=_first_value(user, "age", DEFAULT_AGE),
        weight_kg=_first_value(user, "weight_kg", DEFAULT_WEIGHT_KG),
        height_cm=_first_value(user, "height_cm", DEFAULT_HEIGHT_CM),
        target_calories_daily=_first_value(goals, "goal_calories", DEFAULT_TARGETS.calories),
        target_protein_daily=_first_value(goals, "goal_protein_g", DEFAULT_TARGETS.protein_g),
        target_carbs_daily=_first_value(goals, "goal_carbs_g", DEFAULT_TARGETS.carbs_g),
        target_fats_daily=_first_value(goals, "goal_fats_g", DEFAULT_TARGETS.fats_g),
        meals_per_day=config.meals_per_day,
        snacks_per_day=config.snacks_per_day,
        rotation_frequency_days=config.rotation_frequency_days,
        include_leftovers=config.include_leftovers,
        fixed_meal_times=config.fixed_meal_times,
        dietary_preferences=list(config.dietary_preferences),
        excluded_ingredients=list(config.excluded_ingredients),
        allergies=_as_list(_first_value(questionnaire, "allergies", [])),
        physical_activity_level=_first_value(
            questionnaire, "physical_activity_level", "MODERATE"
        ),
        sport_frequency=_first_value(questionnaire, "sport_frequency", "TWO_TO_THREE"),
        main_goal=_first_value(questionnaire, "main_goal", "GENERAL_HEALTH"),
        dietary_preferences_questionnaire=[
            str(item) for item in _as_list(_first_value(questionnaire, "dietary_preferences", []))
        ],
        avoided_foods=[
            str(item) for item in _as_list(_first_value(questionnaire, "avoided_foods", []))
        ],
        meal_texture_preference=_first_value(
            questionnaire, "meal_texture_preference", "VARIED"
        ),
        available_cooking_time=cooking_time_label(config.meals_per_day),
        meal_timings=generate_meal_timings(config.meals_per_day, config.snacks_per_day),
    )
