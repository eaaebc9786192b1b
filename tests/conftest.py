"""Shared test fixtures for meal plan generation tests."""
import pytest

from llm_config import GenerationSettings
from meal_plan_store import InMemoryMealPlanStore
from profile_builder import build_user_profile
from retry_utils import reset_llm_circuit_breaker
from schemas import MealPlanConfig


@pytest.fixture(autouse=True)
def _reset_circuit_breaker():
    """Keep breaker state from leaking between tests."""
    reset_llm_circuit_breaker()
    yield
    reset_llm_circuit_breaker()


@pytest.fixture
def settings():
    """Settings with a fake key so AI tiers are attempted."""
    return GenerationSettings(api_key="test-key", timeout_seconds=5.0)


@pytest.fixture
def unconfigured_settings():
    """No API key: every plan comes from the deterministic tier."""
    return GenerationSettings(api_key=None)


@pytest.fixture
def store():
    return InMemoryMealPlanStore()


@pytest.fixture
def plan_config():
    return MealPlanConfig(name="Test Plan", meals_per_day=3, snacks_per_day=0)


@pytest.fixture
def profile(plan_config):
    return build_user_profile(plan_config)
