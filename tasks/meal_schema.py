"""JSON shapes the model is asked to reproduce."""

import json
from typing import Any, Dict

from meal_catalog import DEFAULT_MEAL_IMAGE_URL


def example_meal(meal_timing: str = "BREAKFAST") -> Dict[str, Any]:
    """Example meal object embedded in prompts."""
    return {
        "name": "Meal Name",
        "description": "Brief description",
        "meal_timing": meal_timing,
        "dietary_category": "BALANCED",
        "prep_time_minutes": 15,
        "difficulty_level": 1,
        "calories": 400,
        "protein_g": 20,
        "carbs_g": 45,
        "fats_g": 15,
        "fiber_g": 8,
        "sugar_g": 10,
        "sodium_mg": 600,
        "ingredients": [
            {"name": "Ingredient", "quantity": 50, "unit": "g", "category": "Grains"}
        ],
        "instructions": [{"step": 1, "text": "Cooking instruction"}],
        "allergens": [],
        "image_url": DEFAULT_MEAL_IMAGE_URL,
        "portion_multiplier": 1.0,
        "is_optional": False,
    }


def weekly_plan_example(meal_timing: str = "BREAKFAST") -> str:
    payload = {
        "weekly_plan": [
            {"day": "Sunday", "day_index": 0, "meals": [example_meal(meal_timing)]}
        ],
        "weekly_nutrition_summary": {
            "avg_daily_calories": 2000,
            "avg_daily_protein": 150,
            "avg_daily_carbs": 250,
            "avg_daily_fats": 67,
            "goal_adherence_percentage": 95,
        },
        "shopping_tips": ["Tip 1", "Tip 2"],
        "meal_prep_suggestions": ["Suggestion 1", "Suggestion 2"],
    }
    return json.dumps(payload, indent=2)


def single_day_example(day: str, day_index: int, meal_timing: str = "BREAKFAST") -> str:
    payload = {"day": day, "day_index": day_index, "meals": [example_meal(meal_timing)]}
    return json.dumps(payload, indent=2)


def replacement_meal_example(meal_timing: str) -> str:
    payload = example_meal(meal_timing)
    payload["name"] = "New Meal Name"
    payload["description"] = "Brief description of the replacement meal"
    payload.pop("portion_multiplier")
    payload.pop("is_optional")
    payload["replacement_reason"] = "Brief explanation of why this is a good replacement"
    return json.dumps(payload, indent=2)
