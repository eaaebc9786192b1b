"""Task for proposing one replacement meal."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from agents.persona import AgentPersona
from llm_config import REPLACEMENT_BUDGET, CallBudget
from schemas import ReplacementPreferences, UserNutritionProfile

from .meal_schema import replacement_meal_example
from .prompt_task import PromptTask, join_values


def create_replacement_meal_task(
    agent: AgentPersona,
    current_meal: Dict[str, Any],
    profile: UserNutritionProfile,
    preferences: Optional[ReplacementPreferences] = None,
    budget: CallBudget = REPLACEMENT_BUDGET,
) -> PromptTask:
    """Create the single-meal replacement task.

    Args:
        agent: Persona answering the prompt
        current_meal: The meal being replaced, as a JSON-friendly dict
        profile: Targets and restrictions of the plan owner
        preferences: Optional dietary category and prep-time limit

    Returns:
        PromptTask for one replacement meal
    """
    preferences = preferences or ReplacementPreferences()
    meal_timing = str(current_meal.get("meal_timing", "LUNCH"))
    max_prep = preferences.max_prep_time or "No limit"

    description = f"""
CURRENT MEAL TO REPLACE:
{json.dumps(current_meal, indent=2, default=str)}

USER PREFERENCES:
- Dietary preferences: {join_values(profile.dietary_preferences)}
- Excluded ingredients: {join_values(profile.excluded_ingredients)}
- Allergies: {join_values(profile.allergy_names())}
- Preferred dietary category: {preferences.dietary_category or "Any"}
- Max prep time: {max_prep} minutes

NUTRITION TARGETS:
- Target calories: {current_meal.get("calories", profile.target_calories_daily)}
- Target protein: {current_meal.get("protein_g", profile.target_protein_daily)}g

Respond with a valid JSON object in this exact format:
{replacement_meal_example(meal_timing)}
"""

    return PromptTask(
        agent=agent,
        description=description,
        user_prompt=(
            "Please generate a suitable replacement meal based on my preferences "
            "and requirements."
        ),
        expected_output=f"One JSON meal object with meal_timing {meal_timing}",
        budget=budget,
    )
