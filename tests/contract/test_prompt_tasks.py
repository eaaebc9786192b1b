"""Prompt tasks carry the profile, the slot set and the right budget."""
import pytest

from agents import create_meal_planning_agent, create_replacement_chef_agent
from llm_config import BULK_PLAN_BUDGET, REPLACEMENT_BUDGET, SINGLE_DAY_BUDGET
from profile_builder import build_user_profile
from schemas import MealPlanConfig, ReplacementPreferences, UserContext
from tasks import (
    create_replacement_meal_task,
    create_single_day_task,
    create_weekly_plan_task,
)


@pytest.fixture
def snack_profile():
    return build_user_profile(
        MealPlanConfig(
            name="Plan",
            meals_per_day=3,
            snacks_per_day=1,
            excluded_ingredients=["mushroom"],
        ),
        UserContext(
            questionnaire={"allergies": [{"name": "peanut"}]},
            nutrition_goals={"goal_calories": 2400},
        ),
    )


@pytest.mark.priority_medium
@pytest.mark.contract
class TestPromptTasks:

    def test_weekly_task(self, snack_profile):
        task = create_weekly_plan_task(create_meal_planning_agent(), snack_profile)

        assert task.budget == BULK_PLAN_BUDGET
        assert "exactly 4 meals" in task.system_prompt
        assert "BREAKFAST, LUNCH, DINNER, MORNING_SNACK" in task.system_prompt
        assert "mushroom" in task.system_prompt
        assert "peanut" in task.system_prompt
        assert "2400" in task.system_prompt
        assert task.system_prompt.startswith("You are a ")

    def test_single_day_task(self, snack_profile):
        task = create_single_day_task(create_meal_planning_agent(), snack_profile, "Tuesday", 2)

        assert task.budget == SINGLE_DAY_BUDGET
        assert task.user_prompt == "Generate meals for Tuesday"
        assert '"day_index": 2' in task.system_prompt
        assert "Create 4 meals" in task.system_prompt

    def test_replacement_task(self, snack_profile):
        current = {"name": "Beef Stir Fry", "meal_timing": "DINNER", "calories": 700, "protein_g": 45}

        task = create_replacement_meal_task(
            create_replacement_chef_agent(),
            current,
            snack_profile,
            ReplacementPreferences(dietary_category="VEGETARIAN", max_prep_time=25),
        )

        assert task.budget == REPLACEMENT_BUDGET
        assert "Beef Stir Fry" in task.system_prompt
        assert "VEGETARIAN" in task.system_prompt
        assert "25 minutes" in task.system_prompt
        assert "Target calories: 700" in task.system_prompt
        assert "DINNER" in task.expected_output
