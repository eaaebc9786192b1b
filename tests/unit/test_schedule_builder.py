"""Unit tests for template deduplication and schedule building."""
import pytest

from meal_plan_generator import deterministic_plan
from profile_builder import build_user_profile
from schedule_builder import store_templates_and_schedule
from schemas import DayPlan, GeneratedMeal, GeneratedMealPlan, MealPlanConfig
from validation_config import DAY_NAMES


def _plan_with_repeats():
    days = []
    for idx in range(7):
        meals = [
            GeneratedMeal(name="Porridge", meal_timing="BREAKFAST", calories=300),
            GeneratedMeal(name=f"Lunch {idx % 2}", meal_timing="LUNCH", calories=500),
            GeneratedMeal(name="Nuts", meal_timing="AFTERNOON_SNACK", calories=150),
            GeneratedMeal(name="Fruit", meal_timing="AFTERNOON_SNACK", calories=100, portion_multiplier=2),
        ]
        days.append(DayPlan(day=DAY_NAMES[idx], day_index=idx, meals=meals))
    return GeneratedMealPlan(weekly_plan=days)


@pytest.mark.priority_high
@pytest.mark.unit
class TestScheduleBuilder:

    def test_duplicate_names_share_template(self, store):
        entries = store_templates_and_schedule(store, "plan-1", _plan_with_repeats())

        assert len(entries) == 28
        template_ids = {entry.template_id for entry in entries}
        # Porridge, Lunch 0, Lunch 1, Nuts, Fruit
        assert len(template_ids) == 5

        porridge_ids = {e.template_id for e in entries if e.meal_timing.value == "BREAKFAST"}
        assert len(porridge_ids) == 1

    def test_meal_order_is_per_day_and_timing(self, store):
        entries = store_templates_and_schedule(store, "plan-1", _plan_with_repeats())

        sunday_snacks = [e for e in entries if e.day_of_week == 0 and e.meal_timing.value == "AFTERNOON_SNACK"]
        assert [e.meal_order for e in sunday_snacks] == [1, 2]
        sunday_lunch = [e for e in entries if e.day_of_week == 0 and e.meal_timing.value == "LUNCH"]
        assert [e.meal_order for e in sunday_lunch] == [1]

    def test_portion_multiplier_copied(self, store):
        entries = store_templates_and_schedule(store, "plan-1", _plan_with_repeats())
        fruit = [e for e in entries if e.meal_order == 2]
        assert all(e.portion_multiplier == 2 for e in fruit)

    def test_map_is_scoped_to_one_pass(self, store):
        plan = _plan_with_repeats()
        first = store_templates_and_schedule(store, "plan-1", plan)
        second = store_templates_and_schedule(store, "plan-2", plan)

        assert {e.template_id for e in first}.isdisjoint({e.template_id for e in second})

    def test_caller_supplied_map_is_filled(self, store):
        template_ids = {}
        store_templates_and_schedule(store, "plan-1", _plan_with_repeats(), template_ids)
        assert set(template_ids) == {"Porridge", "Lunch 0", "Lunch 1", "Nuts", "Fruit"}

    def test_entries_persisted(self, store):
        profile = build_user_profile(MealPlanConfig(name="p", meals_per_day=3))
        store_templates_and_schedule(store, "plan-1", deterministic_plan(profile))

        stored = store.find_schedule_entries("plan-1")
        assert len(stored) == 21
        assert all(store.get_template(e.template_id) is not None for e in stored)
