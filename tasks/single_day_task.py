"""Task for generating one day of a plan."""

from __future__ import annotations

from agents.persona import AgentPersona
from llm_config import SINGLE_DAY_BUDGET, CallBudget
from schemas import UserNutritionProfile

from .meal_schema import single_day_example
from .prompt_task import PromptTask, join_values


def create_single_day_task(
    agent: AgentPersona,
    profile: UserNutritionProfile,
    day: str,
    day_index: int,
    budget: CallBudget = SINGLE_DAY_BUDGET,
) -> PromptTask:
    """Create a task for generating meals for a single day."""
    timings = [timing.value for timing in profile.meal_timings]
    first_timing = timings[0] if timings else "BREAKFAST"

    description = f"""
Generate meals for {day} only. Create {len(timings)} meals with timings: {join_values(timings)}.

USER PROFILE:
- Target daily calories: {profile.target_calories_daily}
- Target daily protein: {profile.target_protein_daily}g
- Target daily carbs: {profile.target_carbs_daily}g
- Target daily fats: {profile.target_fats_daily}g
- Dietary preferences: {join_values(profile.dietary_preferences)}
- Excluded ingredients: {join_values(profile.excluded_ingredients)}
- Allergies: {join_values(profile.allergy_names())}
- Available cooking time: {profile.available_cooking_time}

Respond with valid JSON for ONE day, keeping "day" and "day_index" exactly as shown:
{single_day_example(day, day_index, first_timing)}
"""

    return PromptTask(
        agent=agent,
        description=description,
        user_prompt=f"Generate meals for {day}",
        expected_output=f"One JSON object for {day} (day_index {day_index}) with a meals array",
        budget=budget,
    )
