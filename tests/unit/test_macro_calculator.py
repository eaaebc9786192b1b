"""Unit tests for weekly nutrition aggregation."""
import pytest

from macro_calculator import (
    axis_adherence,
    calculate_nutrition_summary,
    calculate_plan_breakdown,
)
from schemas import DayPlan, GeneratedMeal, UserNutritionProfile
from validation_config import DAY_NAMES


def _day(day_index, calories, protein):
    return DayPlan(
        day=DAY_NAMES[day_index],
        day_index=day_index,
        meals=[
            GeneratedMeal(
                name=f"Meal {day_index}",
                meal_timing="LUNCH",
                calories=calories,
                protein_g=protein,
                carbs_g=100,
                fats_g=30,
            )
        ],
    )


@pytest.mark.priority_high
@pytest.mark.unit
class TestNutritionSummary:

    def test_on_target_week_scores_100(self):
        profile = UserNutritionProfile()
        week = [_day(i, 2000, 150) for i in range(7)]

        summary = calculate_nutrition_summary(week, profile)

        assert summary.avg_daily_calories == 2000
        assert summary.avg_daily_protein == 150
        assert summary.avg_daily_carbs == 100
        assert summary.avg_daily_fats == 30
        assert summary.goal_adherence_percentage == 100

    def test_overshoot_capped_per_axis(self):
        profile = UserNutritionProfile()
        week = [_day(0, 3000, 225)] + [_day(i, 2000, 150) for i in range(1, 7)]

        summary = calculate_nutrition_summary(week, profile)

        assert summary.goal_adherence_percentage <= 100

    def test_overshoot_cannot_mask_undershoot(self):
        profile = UserNutritionProfile()
        week = [_day(i, 4000, 75) for i in range(7)]

        summary = calculate_nutrition_summary(week, profile)

        # calories capped at 100, protein at 50
        assert summary.goal_adherence_percentage == 75

    def test_always_divides_by_seven(self):
        profile = UserNutritionProfile()
        summary = calculate_nutrition_summary([_day(0, 1400, 70)], profile)
        assert summary.avg_daily_calories == 200
        assert summary.avg_daily_protein == 10

    def test_zero_target_axis_scores_zero(self):
        profile = UserNutritionProfile(target_protein_daily=0)
        week = [_day(i, 2000, 150) for i in range(7)]
        assert calculate_nutrition_summary(week, profile).goal_adherence_percentage == 50

    def test_axis_adherence(self):
        assert axis_adherence(50, 100) == 50
        assert axis_adherence(150, 100) == 100
        assert axis_adherence(10, 0) == 0


@pytest.mark.priority_medium
@pytest.mark.unit
class TestPlanBreakdown:

    def test_per_day_and_average(self):
        view = {
            "Sunday": {
                "BREAKFAST": [{"calories": 400, "protein_g": 20}],
                "LUNCH": [{"calories": 600, "protein_g": 40, "sodium_mg": 500}],
            },
            "Monday": {"DINNER": [{"calories": 1000, "protein_g": 60}]},
        }

        breakdown = calculate_plan_breakdown(view)

        assert breakdown["days"]["Sunday"]["calories"] == 1000
        assert breakdown["days"]["Sunday"]["sodium_mg"] == 500
        assert breakdown["weekly_totals"]["protein_g"] == 120
        assert breakdown["daily_averages"]["calories"] == 1000

    def test_empty_view(self):
        breakdown = calculate_plan_breakdown({})
        assert breakdown["days"] == {}
        assert breakdown["daily_averages"]["calories"] == 0
