"""Prompt personas for meal plan generation."""
from .persona import AgentPersona
from .meal_planning_agent import create_meal_planning_agent
from .replacement_chef_agent import create_replacement_chef_agent

__all__ = [
    "AgentPersona",
    "create_meal_planning_agent",
    "create_replacement_chef_agent",
]
