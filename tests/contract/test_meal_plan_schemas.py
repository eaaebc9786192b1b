"""Contract tests for the pydantic records exchanged between stages."""
import pytest
from pydantic import ValidationError

from meal_plan_generator import deterministic_day
from schemas import (
    DayPlan,
    GeneratedMeal,
    GeneratedMealPlan,
    MealPlan,
    MealPlanConfig,
    MealPreference,
    MealTiming,
    ReplacementPreferences,
    ScheduleEntry,
    UserNutritionProfile,
)
from tests.fixtures.meal_plans import make_day, make_meal


@pytest.mark.priority_high
@pytest.mark.contract
class TestGeneratedMeal:

    def test_string_instructions_become_steps(self):
        meal = GeneratedMeal.model_validate(
            make_meal("Soup", instructions=["Chop.", "  ", "Simmer."])
        )

        assert [(s.step, s.text) for s in meal.instructions] == [(1, "Chop."), (3, "Simmer.")]

    def test_difficulty_clamped(self):
        assert GeneratedMeal.model_validate(make_meal("Soup", difficulty_level=5)).difficulty_level == 3
        assert GeneratedMeal.model_validate(make_meal("Soup", difficulty_level="hard")).difficulty_level == 2

    def test_null_macros_default_to_zero(self):
        meal = GeneratedMeal.model_validate(make_meal("Soup", protein_g=None, fiber_g=None))

        assert meal.protein_g == 0
        assert meal.fiber_g == 0

    def test_negative_calories_rejected(self):
        with pytest.raises(ValidationError):
            GeneratedMeal.model_validate(make_meal("Soup", calories=-1))

    def test_unknown_timing_rejected(self):
        with pytest.raises(ValidationError):
            GeneratedMeal.model_validate(make_meal("Soup", meal_timing="BRUNCH"))

    def test_zero_portion_becomes_one(self):
        assert GeneratedMeal.model_validate(make_meal("Soup", portion_multiplier=0)).portion_multiplier == 1.0


@pytest.mark.priority_high
@pytest.mark.contract
class TestGeneratedMealPlan:

    def test_requires_seven_days(self):
        with pytest.raises(ValidationError):
            GeneratedMealPlan(weekly_plan=[DayPlan.model_validate(make_day(i)) for i in range(6)])

    def test_days_must_be_in_order(self):
        days = [DayPlan.model_validate(make_day(i)) for i in range(7)]
        days[0], days[1] = days[1], days[0]

        with pytest.raises(ValidationError):
            GeneratedMealPlan(weekly_plan=days)

    def test_day_needs_meals(self):
        with pytest.raises(ValidationError):
            DayPlan(day="Sunday", day_index=0, meals=[])

    def test_deterministic_days_fit_contract(self):
        profile = UserNutritionProfile(meal_timings=[MealTiming.LUNCH, MealTiming.DINNER])
        days = [deterministic_day(profile, i) for i in range(7)]

        plan = GeneratedMealPlan(weekly_plan=days)

        assert all(len(day.meals) == 2 for day in plan.weekly_plan)


@pytest.mark.priority_medium
@pytest.mark.contract
class TestCallerRecords:

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": ""},
            {"meals_per_day": 0},
            {"meals_per_day": 7},
            {"snacks_per_day": 4},
        ],
    )
    def test_invalid_config_rejected(self, overrides):
        data = {"name": "Plan", "meals_per_day": 3, "snacks_per_day": 0, **overrides}

        with pytest.raises(ValidationError):
            MealPlanConfig(**data)

    def test_rating_bounds(self):
        with pytest.raises(ValidationError):
            MealPreference(user_id="u", template_id="t", preference_type="rating", rating=6)

    def test_unknown_preference_type_rejected(self):
        with pytest.raises(ValidationError):
            MealPreference(user_id="u", template_id="t", preference_type="love")

    def test_schedule_order_is_one_based(self):
        with pytest.raises(ValidationError):
            ScheduleEntry(
                schedule_id="s", plan_id="p", template_id="t",
                day_of_week=0, meal_timing="LUNCH", meal_order=0,
            )

    def test_replacement_prep_time_positive(self):
        with pytest.raises(ValidationError):
            ReplacementPreferences(max_prep_time=0)

    def test_allergy_names_accept_objects(self):
        profile = UserNutritionProfile(allergies=["peanut", {"name": "shellfish"}, {"severity": "high"}, ""])

        assert profile.allergy_names() == ["peanut", "shellfish"]

    def test_default_timestamps_are_utc_aware(self):
        plan = MealPlan(plan_id="p", user_id="u", name="Plan", meals_per_day=3, snacks_per_day=0)
        preference = MealPreference(user_id="u", template_id="t", preference_type="favorite")

        assert plan.start_date.utcoffset().total_seconds() == 0
        assert preference.updated_at.utcoffset().total_seconds() == 0
