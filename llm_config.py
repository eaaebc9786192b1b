"""Centralized LLM configuration - single source of truth.

All model names, endpoints, timeouts and per-call budgets for meal plan
generation. The generator, the replacement generator and the litellm client
all read from here.

Environment is loaded from .env without clobbering explicit overrides.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv


def load_env_with_optional_override() -> None:
    """Load .env without clobbering explicit environment overrides."""

    load_dotenv(override=False)
    if os.getenv("DOTENV_FORCE_OVERRIDE", "").strip().lower() in {"1", "true", "yes", "on"}:
        load_dotenv(override=True)


# Load environment immediately while respecting explicit overrides
load_env_with_optional_override()

DEFAULT_MODEL = "gpt-4o"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_TIMEZONE = "UTC"


@dataclass(frozen=True)
class CallBudget:
    """Token and sampling budget for one kind of generative call."""

    max_tokens: int
    temperature: float


# Bulk week, single day and single replacement meal
BULK_PLAN_BUDGET = CallBudget(max_tokens=8000, temperature=0.3)
SINGLE_DAY_BUDGET = CallBudget(max_tokens=2000, temperature=0.3)
REPLACEMENT_BUDGET = CallBudget(max_tokens=1500, temperature=0.4)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class GenerationSettings:
    """Runtime settings for the generative backend.

    A missing API key means no backend is configured: every plan is
    produced by the deterministic tier.
    """

    api_key: Optional[str] = None
    api_base: Optional[str] = None
    model: str = DEFAULT_MODEL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    chunk_workers: int = 1
    circuit_failure_threshold: int = 5
    circuit_recovery_timeout: float = 60.0
    timezone: str = DEFAULT_TIMEZONE
    bulk_budget: CallBudget = field(default=BULK_PLAN_BUDGET)
    day_budget: CallBudget = field(default=SINGLE_DAY_BUDGET)
    replacement_budget: CallBudget = field(default=REPLACEMENT_BUDGET)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


def get_generation_settings() -> GenerationSettings:
    """Build settings from environment variables.

    Returns:
        GenerationSettings populated from OPENAI_* and MEAL_PLAN_* variables
    """
    return GenerationSettings(
        api_key=os.getenv("OPENAI_API_KEY") or None,
        api_base=os.getenv("OPENAI_API_BASE") or None,
        model=os.getenv("MEAL_PLAN_MODEL", DEFAULT_MODEL),
        timeout_seconds=_env_float("MEAL_PLAN_LLM_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
        chunk_workers=max(1, _env_int("MEAL_PLAN_CHUNK_WORKERS", 1)),
        circuit_failure_threshold=max(1, _env_int("MEAL_PLAN_CIRCUIT_FAILURE_THRESHOLD", 5)),
        circuit_recovery_timeout=_env_float("MEAL_PLAN_CIRCUIT_RECOVERY_TIMEOUT", 60.0),
        timezone=os.getenv("MEAL_PLAN_TIMEZONE", DEFAULT_TIMEZONE),
    )
