"""Pydantic models for meal plan generation, storage and shopping lists."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class MealTiming(str, Enum):
    """Enumerated daily meal slot."""

    BREAKFAST = "BREAKFAST"
    LUNCH = "LUNCH"
    DINNER = "DINNER"
    MORNING_SNACK = "MORNING_SNACK"
    AFTERNOON_SNACK = "AFTERNOON_SNACK"
    EVENING_SNACK = "EVENING_SNACK"

    @classmethod
    def values(cls) -> List[str]:
        return [timing.value for timing in cls]


class PreferenceType(str, Enum):
    FAVORITE = "favorite"
    DISLIKE = "dislike"
    RATING = "rating"


# ============================================================================
# Caller input & profile
# ============================================================================


class MealPlanConfig(BaseModel):
    """Meal structure requested by the caller when creating a plan."""

    name: str = Field(..., min_length=1, description="Plan name")
    meals_per_day: int = Field(default=3, ge=1, le=6, description="Main meals per day")
    snacks_per_day: int = Field(default=0, ge=0, le=3, description="Snacks per day")
    rotation_frequency_days: int = Field(default=7, ge=1, le=14)
    include_leftovers: bool = False
    fixed_meal_times: bool = False
    dietary_preferences: List[str] = Field(default_factory=list)
    excluded_ingredients: List[str] = Field(default_factory=list)


class UserContext(BaseModel):
    """Everything known about the user before a plan is generated.

    Each part is optional; missing parts fall back to defaults when the
    profile is built.
    """

    user: Optional[Dict[str, Any]] = Field(
        default=None, description="Basic info (age, weight_kg, height_cm)"
    )
    questionnaire: Optional[Dict[str, Any]] = Field(
        default=None, description="Latest completed questionnaire"
    )
    nutrition_goals: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Latest nutrition goal record (goal_calories, goal_protein_g, ...)",
    )


class UserNutritionProfile(BaseModel):
    """Generation request assembled fresh for every plan; never persisted."""

    age: int = 30
    weight_kg: float = 70
    height_cm: float = 170

    target_calories_daily: float = 2000
    target_protein_daily: float = 150
    target_carbs_daily: float = 250
    target_fats_daily: float = 67

    meals_per_day: int = 3
    snacks_per_day: int = 0
    rotation_frequency_days: int = 7
    include_leftovers: bool = False
    fixed_meal_times: bool = False

    dietary_preferences: List[str] = Field(default_factory=list)
    excluded_ingredients: List[str] = Field(default_factory=list)
    allergies: List[Any] = Field(default_factory=list)

    physical_activity_level: str = "MODERATE"
    sport_frequency: str = "TWO_TO_THREE"
    main_goal: str = "GENERAL_HEALTH"
    dietary_preferences_questionnaire: List[str] = Field(default_factory=list)
    avoided_foods: List[str] = Field(default_factory=list)
    meal_texture_preference: str = "VARIED"

    cooking_skill_level: str = "intermediate"
    available_cooking_time: str = "moderate"
    kitchen_equipment: List[str] = Field(
        default_factory=lambda: ["oven", "stovetop", "microwave"]
    )

    meal_timings: List[MealTiming] = Field(
        default_factory=list, description="Slots derived from meals/snacks per day"
    )

    def allergy_names(self) -> List[str]:
        """Allergies may arrive as plain strings or as {"name": ...} objects."""
        names = []
        for allergy in self.allergies:
            if isinstance(allergy, dict):
                name = allergy.get("name")
                if name:
                    names.append(str(name))
            elif allergy:
                names.append(str(allergy))
        return names


# ============================================================================
# Generated plan (transient)
# ============================================================================


class Ingredient(BaseModel):
    name: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    category: Optional[str] = None


class InstructionStep(BaseModel):
    step: int
    text: str


def _coerce_instructions(value: Any) -> List[Any]:
    """Accept bare strings as well as {"step", "text"} objects."""
    if not isinstance(value, list):
        return []
    steps: List[Any] = []
    for idx, item in enumerate(value, start=1):
        if isinstance(item, str):
            if item.strip():
                steps.append({"step": idx, "text": item.strip()})
        elif isinstance(item, dict):
            text = item.get("text") or item.get("instruction") or ""
            if str(text).strip():
                steps.append({"step": item.get("step") or idx, "text": str(text)})
    return steps


class GeneratedMeal(BaseModel):
    """A single meal as produced by a generation tier."""

    model_config = {"extra": "ignore"}

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    meal_timing: MealTiming
    dietary_category: str = "BALANCED"
    prep_time_minutes: Optional[int] = 30
    difficulty_level: Optional[int] = Field(default=2, ge=1, le=3)
    calories: float = Field(..., ge=0)
    protein_g: float = 0
    carbs_g: float = 0
    fats_g: float = 0
    fiber_g: float = 0
    sugar_g: float = 0
    sodium_mg: float = 0
    ingredients: List[Ingredient] = Field(default_factory=list)
    instructions: List[InstructionStep] = Field(default_factory=list)
    allergens: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    portion_multiplier: float = 1.0
    is_optional: bool = False

    @field_validator("instructions", mode="before")
    @classmethod
    def normalize_instructions(cls, v):
        return _coerce_instructions(v)

    @field_validator("ingredients", "allergens", mode="before")
    @classmethod
    def ensure_list(cls, v):
        return v if isinstance(v, list) else []

    @field_validator("difficulty_level", mode="before")
    @classmethod
    def clamp_difficulty(cls, v):
        """Models occasionally answer on a 1-5 scale."""
        if v is None:
            return 2
        try:
            return max(1, min(3, int(v)))
        except (TypeError, ValueError):
            return 2

    @field_validator(
        "protein_g", "carbs_g", "fats_g", "fiber_g", "sugar_g", "sodium_mg",
        mode="before",
    )
    @classmethod
    def default_macro(cls, v):
        return 0 if v is None else v

    @field_validator("prep_time_minutes", mode="before")
    @classmethod
    def round_prep_time(cls, v):
        if v is None:
            return None
        try:
            return int(round(float(v)))
        except (TypeError, ValueError):
            return None

    @field_validator("portion_multiplier", mode="before")
    @classmethod
    def default_portion(cls, v):
        return v or 1.0


class DayPlan(BaseModel):
    day: str = Field(..., min_length=1)
    day_index: int = Field(..., ge=0, le=6)
    meals: List[GeneratedMeal] = Field(..., min_length=1)


class WeeklyNutritionSummary(BaseModel):
    avg_daily_calories: int = 0
    avg_daily_protein: int = 0
    avg_daily_carbs: int = 0
    avg_daily_fats: int = 0
    goal_adherence_percentage: int = 0


class GeneratedMealPlan(BaseModel):
    """A complete week: exactly seven days, Sunday first."""

    weekly_plan: List[DayPlan] = Field(..., min_length=7, max_length=7)
    weekly_nutrition_summary: WeeklyNutritionSummary = Field(
        default_factory=WeeklyNutritionSummary
    )
    shopping_tips: List[str] = Field(default_factory=list)
    meal_prep_suggestions: List[str] = Field(default_factory=list)

    @field_validator("weekly_plan")
    @classmethod
    def check_day_indexes(cls, v: List[DayPlan]) -> List[DayPlan]:
        if [day.day_index for day in v] != list(range(7)):
            raise ValueError("weekly_plan day_index values must be 0..6 in order")
        return v


# ============================================================================
# Persisted records
# ============================================================================


class MealTemplate(BaseModel):
    """Deduplicated recipe row; append-only."""

    template_id: str
    name: str
    description: Optional[str] = None
    meal_timing: MealTiming
    dietary_category: str = "BALANCED"
    prep_time_minutes: Optional[int] = None
    difficulty_level: Optional[int] = None
    calories: float = 0
    protein_g: float = 0
    carbs_g: float = 0
    fats_g: float = 0
    fiber_g: float = 0
    sugar_g: float = 0
    sodium_mg: float = 0
    ingredients: List[Ingredient] = Field(default_factory=list)
    instructions: List[InstructionStep] = Field(default_factory=list)
    allergens: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ScheduleEntry(BaseModel):
    """Pointer from a plan slot to a template; the only mutable link."""

    schedule_id: str
    plan_id: str
    template_id: str
    day_of_week: int = Field(..., ge=0, le=6)
    meal_timing: MealTiming
    meal_order: int = Field(..., ge=1)
    portion_multiplier: float = 1.0
    is_optional: bool = False


class MealPlan(BaseModel):
    """The owning plan record with its configuration and daily targets."""

    plan_id: str
    user_id: str
    name: str
    plan_type: str = "WEEKLY"
    meals_per_day: int
    snacks_per_day: int
    rotation_frequency_days: int = 7
    include_leftovers: bool = False
    fixed_meal_times: bool = False
    target_calories_daily: float = 2000
    target_protein_daily: float = 150
    target_carbs_daily: float = 250
    target_fats_daily: float = 67
    dietary_preferences: List[str] = Field(default_factory=list)
    excluded_ingredients: List[str] = Field(default_factory=list)
    start_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_active: bool = True


class ShoppingListItem(BaseModel):
    name: str
    quantity: float
    unit: str
    category: str
    estimated_cost: float
    is_purchased: bool = False


class ShoppingList(BaseModel):
    """Snapshot for one (plan_id, week_start_date) request."""

    shopping_list_id: str
    user_id: str
    plan_id: str
    name: str
    week_start_date: str
    items: Dict[str, List[ShoppingListItem]] = Field(default_factory=dict)
    total_estimated_cost: float = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MealPreference(BaseModel):
    user_id: str
    template_id: str
    preference_type: PreferenceType
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    notes: Optional[str] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ReplacementPreferences(BaseModel):
    """Optional caller hints for a single-meal swap."""

    dietary_category: Optional[str] = None
    max_prep_time: Optional[int] = Field(default=None, ge=1)
