"""Canned model responses for meal plan tests."""
import json

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
MAIN_TIMINGS = ["BREAKFAST", "LUNCH", "DINNER"]


def make_meal(name, meal_timing="LUNCH", calories=500, **overrides):
    meal = {
        "name": name,
        "description": f"{name} description",
        "meal_timing": meal_timing,
        "dietary_category": "BALANCED",
        "prep_time_minutes": 20,
        "difficulty_level": 2,
        "calories": calories,
        "protein_g": 30,
        "carbs_g": 50,
        "fats_g": 15,
        "fiber_g": 6,
        "sugar_g": 5,
        "sodium_mg": 300,
        "ingredients": [
            {"name": "Tomato", "quantity": 100, "unit": "g", "category": "Vegetables"}
        ],
        "instructions": [{"step": 1, "text": "Cook it."}],
        "allergens": [],
    }
    meal.update(overrides)
    return meal


def make_day(day_index, timings=MAIN_TIMINGS, prefix="AI"):
    return {
        "day": DAY_NAMES[day_index],
        "day_index": day_index,
        "meals": [
            make_meal(f"{prefix} {DAY_NAMES[day_index]} {timing.title()}", timing)
            for timing in timings
        ],
    }


def make_week(timings=MAIN_TIMINGS, days=7):
    return {
        "weekly_plan": [make_day(i % 7, timings) for i in range(days)],
        "weekly_nutrition_summary": {
            "avg_daily_calories": 9999,
            "avg_daily_protein": 0,
            "avg_daily_carbs": 0,
            "avg_daily_fats": 0,
            "goal_adherence_percentage": 100,
        },
        "shopping_tips": ["Buy in bulk"],
        "meal_prep_suggestions": ["Cook rice on Sunday"],
    }


def week_response(timings=MAIN_TIMINGS, days=7):
    """Bulk response wrapped the way models usually answer."""
    return "Here is your plan:\n```json\n" + json.dumps(make_week(timings, days)) + "\n```"


def day_response(day_index, timings=MAIN_TIMINGS):
    return json.dumps(make_day(day_index, timings))


TRUNCATED_WEEK_RESPONSE = json.dumps(make_week())[:-40]
