"""
Weekly nutrition aggregation and goal-adherence scoring.

Everything here is plain arithmetic over meals that already passed
validation; no model output is trusted for totals. Generated plans carry a
summary recomputed here rather than the one the model claimed.
"""

from typing import Any, Dict, Iterable, List, Mapping, Union

from schemas import DayPlan, GeneratedMeal, WeeklyNutritionSummary
from validation_config import MAX_AXIS_ADHERENCE, NUTRITION_AVERAGE_DAYS

MACRO_FIELDS = ("calories", "protein_g", "carbs_g", "fats_g")
BREAKDOWN_FIELDS = MACRO_FIELDS + ("fiber_g", "sugar_g", "sodium_mg")

MealLike = Union[GeneratedMeal, Mapping[str, Any]]


def _meal_value(meal: MealLike, field: str) -> float:
    if isinstance(meal, Mapping):
        value = meal.get(field, 0)
    else:
        value = getattr(meal, field, 0)
    return float(value or 0)


def calculate_daily_totals(
    meals: Iterable[MealLike], fields: Iterable[str] = MACRO_FIELDS
) -> Dict[str, float]:
    """Calculate total macros for a day from all meals.

    Args:
        meals: GeneratedMeal objects or meal dicts
        fields: Which numeric fields to sum

    Returns:
        Dict with daily totals per field
    """
    fields = tuple(fields)
    totals = {field: 0.0 for field in fields}
    for meal in meals:
        for field in fields:
            totals[field] += _meal_value(meal, field)
    return totals


def axis_adherence(average: float, target: float) -> float:
    """Percent of target reached, capped at 100; a zero target scores 0."""
    if not target or target <= 0:
        return 0.0
    return min(MAX_AXIS_ADHERENCE, average / target * 100)


def calculate_nutrition_summary(
    weekly_plan: Iterable[DayPlan], profile: Any
) -> WeeklyNutritionSummary:
    """Weekly averages and blended goal adherence.

    Sums every meal in the plan and divides by seven regardless of how many
    days hold meals. Calorie and protein adherence are each capped at 100
    before being averaged, so overshooting one axis cannot lift the score.

    Args:
        weekly_plan: The plan's days
        profile: Anything exposing target_calories_daily and
            target_protein_daily (a UserNutritionProfile or a MealPlan)

    Returns:
        WeeklyNutritionSummary with every value rounded to an integer
    """
    totals = {field: 0.0 for field in MACRO_FIELDS}
    for day in weekly_plan:
        day_totals = calculate_daily_totals(day.meals)
        for field in MACRO_FIELDS:
            totals[field] += day_totals[field]

    return summary_from_totals(totals, profile)


def summary_from_totals(totals: Mapping[str, float], profile: Any) -> WeeklyNutritionSummary:
    """Build the weekly summary from whole-week macro totals."""
    averages = {field: totals[field] / NUTRITION_AVERAGE_DAYS for field in MACRO_FIELDS}

    calorie_adherence = axis_adherence(averages["calories"], profile.target_calories_daily)
    protein_adherence = axis_adherence(averages["protein_g"], profile.target_protein_daily)

    return WeeklyNutritionSummary(
        avg_daily_calories=round(averages["calories"]),
        avg_daily_protein=round(averages["protein_g"]),
        avg_daily_carbs=round(averages["carbs_g"]),
        avg_daily_fats=round(averages["fats_g"]),
        goal_adherence_percentage=round((calorie_adherence + protein_adherence) / 2),
    )


def calculate_plan_breakdown(
    weekly_view: Mapping[str, Mapping[str, List[Mapping[str, Any]]]],
) -> Dict[str, Any]:
    """Per-day and weekly totals for a stored plan view.

    Args:
        weekly_view: {day_name: {meal_timing: [meal views]}} as returned by
            MealPlanService.get_weekly_plan (macros already portion-scaled)

    Returns:
        Dict with "days" (per-day totals), "weekly_totals" and
        "daily_averages" (averaged over the days present in the view)
    """
    days: Dict[str, Dict[str, float]] = {}
    weekly_totals = {field: 0.0 for field in BREAKDOWN_FIELDS}

    for day_name, timings in weekly_view.items():
        meals = [meal for timing_meals in timings.values() for meal in timing_meals]
        day_totals = calculate_daily_totals(meals, BREAKDOWN_FIELDS)
        days[day_name] = {field: round(value, 1) for field, value in day_totals.items()}
        for field in BREAKDOWN_FIELDS:
            weekly_totals[field] += day_totals[field]

    day_count = len(days)
    daily_averages = {
        field: round(weekly_totals[field] / day_count, 1) if day_count else 0.0
        for field in BREAKDOWN_FIELDS
    }

    return {
        "days": days,
        "weekly_totals": {field: round(value, 1) for field, value in weekly_totals.items()},
        "daily_averages": daily_averages,
    }
