"""Task for generating a complete seven-day plan in one call."""

from __future__ import annotations

from agents.persona import AgentPersona
from llm_config import BULK_PLAN_BUDGET, CallBudget
from schemas import UserNutritionProfile

from .meal_schema import weekly_plan_example
from .prompt_task import PromptTask, join_values


def create_weekly_plan_task(
    agent: AgentPersona,
    profile: UserNutritionProfile,
    budget: CallBudget = BULK_PLAN_BUDGET,
) -> PromptTask:
    """Create the bulk task requesting all seven days at once."""
    timings = [timing.value for timing in profile.meal_timings]
    first_timing = timings[0] if timings else "BREAKFAST"

    description = f"""
Create a personalized 7-day meal plan based on the user's profile, preferences, and goals.

CRITICAL REQUIREMENTS:
1. Create exactly 7 days of meals (Sunday through Saturday), day_index 0 to 6
2. Each day must have exactly {len(timings)} meals, one for each timing
3. Use these meal timings: {join_values(timings)}
4. All meals must meet the user's dietary restrictions and preferences
5. Avoid all excluded ingredients and allergens: {join_values(profile.excluded_ingredients + profile.allergy_names())}
6. Balance nutrition across the week to meet daily targets
7. Consider cooking skill level: {profile.cooking_skill_level}
8. Available cooking time: {profile.available_cooking_time}

USER PROFILE:
- Age: {profile.age}
- Weight: {profile.weight_kg}kg
- Height: {profile.height_cm}cm
- Target daily calories: {profile.target_calories_daily}
- Target daily protein: {profile.target_protein_daily}g
- Target daily carbs: {profile.target_carbs_daily}g
- Target daily fats: {profile.target_fats_daily}g
- Dietary preferences: {join_values(profile.dietary_preferences + profile.dietary_preferences_questionnaire)}
- Avoided foods: {join_values(profile.avoided_foods)}
- Allergies: {join_values(profile.allergy_names())}
- Activity level: {profile.physical_activity_level}
- Sport frequency: {profile.sport_frequency}
- Main goal: {profile.main_goal}
- Meal texture preference: {profile.meal_texture_preference}
- Kitchen equipment: {join_values(profile.kitchen_equipment)}
- Leftovers allowed: {"yes" if profile.include_leftovers else "no"}

IMPORTANT: Your response must be a valid, complete JSON object. End with proper closing braces and brackets.

Respond with a valid JSON object in this exact format:
{weekly_plan_example(first_timing)}
"""

    return PromptTask(
        agent=agent,
        description=description,
        user_prompt=(
            "Please create my personalized 7-day meal plan. "
            "Ensure the response is complete and valid JSON."
        ),
        expected_output="One JSON object with a weekly_plan array of exactly 7 days",
        budget=budget,
    )
