"""Prompt tasks for meal plan generation."""
from .prompt_task import PromptTask
from .weekly_plan_task import create_weekly_plan_task
from .single_day_task import create_single_day_task
from .replacement_meal_task import create_replacement_meal_task

__all__ = [
    "PromptTask",
    "create_weekly_plan_task",
    "create_single_day_task",
    "create_replacement_meal_task",
]
