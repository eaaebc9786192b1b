"""Centralized defaults and thresholds for meal plan generation.

Single source of truth for values shared across:
- profile_builder.py (default daily targets, cooking time label)
- response_validator.py (expected day count, canonical day names)
- meal_plan_generator.py / macro_calculator.py (week length)
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class MacroTargets:
    """Daily macro targets (kcal and grams)."""

    calories: float = 2000
    protein_g: float = 150
    carbs_g: float = 250
    fats_g: float = 67


# Used whenever the user has no nutrition goal on record
DEFAULT_TARGETS = MacroTargets()

DEFAULT_AGE = 30
DEFAULT_WEIGHT_KG = 70
DEFAULT_HEIGHT_CM = 170

# Sunday first: day_index 0..6 maps onto this list
DAY_NAMES: List[str] = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]

DAYS_PER_WEEK = len(DAY_NAMES)

# Main meals and snacks are each capped at three distinct slots
MAX_MAIN_MEAL_SLOTS = 3
MAX_SNACK_SLOTS = 3

# Averages always divide by a full week, even when days are empty
NUTRITION_AVERAGE_DAYS = 7

# Per-axis adherence cap before blending
MAX_AXIS_ADHERENCE = 100.0


def cooking_time_label(meals_per_day: int) -> str:
    """Coarse cooking-time budget used as prompt context only.

    Args:
        meals_per_day: Number of main meals requested

    Returns:
        "minimal" (15-30 min total), "moderate" (30-60 min) or "extensive" (60+ min)
    """
    if meals_per_day <= 2:
        return "minimal"
    if meals_per_day == 3:
        return "moderate"
    return "extensive"


def day_name_for_index(day_index: int) -> str:
    """Canonical day name for a 0=Sunday..6=Saturday index."""
    return DAY_NAMES[day_index % DAYS_PER_WEEK]
