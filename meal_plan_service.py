"""Public operations over meal plans.

MealPlanService is what an HTTP layer (or any other caller) talks to. It
owns no generation logic itself: it builds profiles, asks the generator for
a plan, persists templates and schedule, and assembles read views.

Generation never fails from the caller's point of view. Store errors
(PersistenceFailure), lookups of unknown plans or slots (MealPlanNotFound,
UnknownScheduleReference) and bad preference requests (InvalidMealPreference)
propagate.
"""

import sys
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union

import pytz
from pydantic import ValidationError

from exceptions import InvalidMealPreference, MealPlanNotFound, UnknownScheduleReference
from llm_config import GenerationSettings, get_generation_settings
from macro_calculator import calculate_plan_breakdown, summary_from_totals
from meal_plan_generator import MealPlanGenerator
from meal_plan_store import InMemoryMealPlanStore, MealPlanStore
from observability import log_operation, setup_structured_logger
from profile_builder import build_user_profile
from replacement_generator import ReplacementGenerator
from schedule_builder import new_record_id, store_templates_and_schedule, template_from_meal
from schemas import (
    MealPlan,
    MealPlanConfig,
    MealPreference,
    MealTemplate,
    MealTiming,
    PreferenceType,
    ReplacementPreferences,
    ScheduleEntry,
    ShoppingList,
    UserContext,
    UserNutritionProfile,
)
from shopping_list import build_shopping_list
from validation_config import DAY_NAMES

logger = setup_structured_logger("meal_plan.service")

_SCALED_FIELDS = ("calories", "protein_g", "carbs_g", "fats_g", "fiber_g", "sugar_g", "sodium_mg")

WeeklyView = Dict[str, Dict[str, List[Dict[str, Any]]]]


def default_week_start(timezone_name: str) -> str:
    """ISO date of the current week's Sunday in the given timezone."""
    try:
        tz = pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError:
        print(f"⚠️  Unknown timezone '{timezone_name}', using UTC", file=sys.stderr)
        tz = pytz.utc
    today = datetime.now(tz).date()
    return (today - timedelta(days=(today.weekday() + 1) % 7)).isoformat()


def meal_view(entry: ScheduleEntry, template: MealTemplate) -> Dict[str, Any]:
    """Template fields with nutrition scaled by the entry's portion multiplier."""
    view = template.model_dump(mode="json", exclude={"created_at"})
    for field in _SCALED_FIELDS:
        view[field] = (getattr(template, field) or 0) * entry.portion_multiplier
    view.update(
        {
            "schedule_id": entry.schedule_id,
            "meal_order": entry.meal_order,
            "portion_multiplier": entry.portion_multiplier,
            "is_optional": entry.is_optional,
        }
    )
    return view


class MealPlanService:
    """Create, read, modify and shop for weekly meal plans."""

    def __init__(
        self,
        store: Optional[MealPlanStore] = None,
        generator: Optional[MealPlanGenerator] = None,
        replacement_generator: Optional[ReplacementGenerator] = None,
        settings: Optional[GenerationSettings] = None,
    ):
        self.settings = settings or get_generation_settings()
        self.store = store if store is not None else InMemoryMealPlanStore()
        self.generator = generator or MealPlanGenerator(settings=self.settings)
        self.replacement_generator = replacement_generator or ReplacementGenerator(
            settings=self.settings
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_owned_plan(self, user_id: str, plan_id: str) -> MealPlan:
        plan = self.store.get_plan(plan_id)
        if plan is None or plan.user_id != user_id:
            raise MealPlanNotFound(f"Meal plan {plan_id} not found for user {user_id}")
        return plan

    def get_active_plan(self, user_id: str) -> MealPlan:
        """Most recent active plan of the user."""
        plans = self.store.find_plans(user_id, active_only=True)
        if not plans:
            raise MealPlanNotFound(f"No active meal plan found for user {user_id}")
        return plans[0]

    def _resolve_plan(self, user_id: str, plan_id: Optional[str]) -> MealPlan:
        return self._get_owned_plan(user_id, plan_id) if plan_id else self.get_active_plan(user_id)

    def _templates_for(self, entries: List[ScheduleEntry]) -> Dict[str, MealTemplate]:
        templates: Dict[str, MealTemplate] = {}
        for entry in entries:
            if entry.template_id not in templates:
                template = self.store.get_template(entry.template_id)
                if template is not None:
                    templates[entry.template_id] = template
        return templates

    @staticmethod
    def _profile_for_plan(
        plan: MealPlan, context: Optional[UserContext] = None
    ) -> UserNutritionProfile:
        """Rebuild a profile from the stored plan; stored targets win."""
        config = MealPlanConfig(
            name=plan.name,
            meals_per_day=plan.meals_per_day,
            snacks_per_day=plan.snacks_per_day,
            rotation_frequency_days=plan.rotation_frequency_days,
            include_leftovers=plan.include_leftovers,
            fixed_meal_times=plan.fixed_meal_times,
            dietary_preferences=plan.dietary_preferences,
            excluded_ingredients=plan.excluded_ingredients,
        )
        profile = build_user_profile(config, context)
        return profile.model_copy(
            update={
                "target_calories_daily": plan.target_calories_daily,
                "target_protein_daily": plan.target_protein_daily,
                "target_carbs_daily": plan.target_carbs_daily,
                "target_fats_daily": plan.target_fats_daily,
            }
        )

    # ------------------------------------------------------------------
    # Plans
    # ------------------------------------------------------------------

    def create_plan(
        self,
        user_id: str,
        config: MealPlanConfig,
        context: Optional[UserContext] = None,
    ) -> MealPlan:
        """Generate and persist a new active plan.

        The plan is written inactive and only activated once its whole
        schedule is stored; the user's previously active plans are switched
        off after that. A PersistenceFailure part way through leaves the
        previous active plan in place.
        """
        with log_operation(logger, "create_plan", user_id=user_id, plan_name=config.name):
            print(f"🤖 Creating meal plan '{config.name}' for user {user_id}", file=sys.stderr)
            profile = build_user_profile(config, context)
            generated = self.generator.generate(profile)

            previous_active = self.store.find_plans(user_id, active_only=True)

            plan = self.store.create_plan(
                MealPlan(
                    plan_id=new_record_id(),
                    user_id=user_id,
                    name=config.name,
                    meals_per_day=config.meals_per_day,
                    snacks_per_day=config.snacks_per_day,
                    rotation_frequency_days=config.rotation_frequency_days,
                    include_leftovers=config.include_leftovers,
                    fixed_meal_times=config.fixed_meal_times,
                    target_calories_daily=profile.target_calories_daily,
                    target_protein_daily=profile.target_protein_daily,
                    target_carbs_daily=profile.target_carbs_daily,
                    target_fats_daily=profile.target_fats_daily,
                    dietary_preferences=config.dietary_preferences,
                    excluded_ingredients=config.excluded_ingredients,
                    is_active=False,
                )
            )

            store_templates_and_schedule(self.store, plan.plan_id, generated)
            plan = self.store.update_plan(plan.plan_id, is_active=True)
            for previous in previous_active:
                self.store.update_plan(previous.plan_id, is_active=False)

            print(f"✅ Meal plan {plan.plan_id} created", file=sys.stderr)
            return plan

    def get_weekly_plan(self, user_id: str, plan_id: Optional[str] = None) -> WeeklyView:
        """{day_name: {meal_timing: [meal views]}} for a plan (active by default)."""
        with log_operation(logger, "get_weekly_plan", user_id=user_id, plan_id=plan_id):
            plan = self._resolve_plan(user_id, plan_id)
            entries = self.store.find_schedule_entries(plan.plan_id)
            templates = self._templates_for(entries)

            weekly: WeeklyView = {day_name: {} for day_name in DAY_NAMES}
            for entry in entries:
                template = templates.get(entry.template_id)
                if template is None:
                    continue
                day = weekly[DAY_NAMES[entry.day_of_week]]
                day.setdefault(entry.meal_timing.value, []).append(meal_view(entry, template))
            return weekly

    def deactivate_plan(self, user_id: str, plan_id: str) -> MealPlan:
        with log_operation(logger, "deactivate_plan", user_id=user_id, plan_id=plan_id):
            self._get_owned_plan(user_id, plan_id)
            return self.store.update_plan(plan_id, is_active=False)

    def duplicate_plan(self, user_id: str, plan_id: str, new_name: str) -> MealPlan:
        """Copy a plan's schedule under a new, inactive plan.

        Templates are shared between the two plans, never copied.
        """
        with log_operation(logger, "duplicate_plan", user_id=user_id, plan_id=plan_id):
            source = self._get_owned_plan(user_id, plan_id)
            duplicate = self.store.create_plan(
                source.model_copy(
                    update={
                        "plan_id": new_record_id(),
                        "name": new_name,
                        "start_date": datetime.now(timezone.utc),
                        "is_active": False,
                    }
                )
            )
            for entry in self.store.find_schedule_entries(plan_id):
                self.store.create_schedule_entry(
                    entry.model_copy(
                        update={"schedule_id": new_record_id(), "plan_id": duplicate.plan_id}
                    )
                )
            return duplicate

    # ------------------------------------------------------------------
    # Replacement
    # ------------------------------------------------------------------

    def replace_meal(
        self,
        user_id: str,
        plan_id: str,
        day_of_week: int,
        meal_timing: Union[str, MealTiming],
        meal_order: int,
        preferences: Optional[ReplacementPreferences] = None,
        context: Optional[UserContext] = None,
    ) -> Dict[str, Any]:
        """Swap the meal in one slot for a newly generated one.

        A new template is created and the schedule entry repointed; the old
        template stays in the store. Concurrent replacements of the same
        slot are last-write-wins.

        Raises:
            MealPlanNotFound: unknown plan for this user
            UnknownScheduleReference: no entry or template for the slot
        """
        timing_value = meal_timing.value if isinstance(meal_timing, MealTiming) else str(meal_timing).upper()
        with log_operation(
            logger,
            "replace_meal",
            user_id=user_id,
            plan_id=plan_id,
            day_of_week=day_of_week,
            meal_timing=timing_value,
            meal_order=meal_order,
        ):
            plan = self._get_owned_plan(user_id, plan_id)
            if timing_value not in MealTiming.values():
                raise UnknownScheduleReference(f"Unknown meal timing: {meal_timing}")

            entry = self.store.find_schedule_entry(plan_id, day_of_week, timing_value, meal_order)
            if entry is None:
                raise UnknownScheduleReference(
                    f"No meal scheduled for day {day_of_week}, {timing_value} #{meal_order}"
                )
            current = self.store.get_template(entry.template_id)
            if current is None:
                raise UnknownScheduleReference(f"Template {entry.template_id} not found")

            meal = self.replacement_generator.replace(
                current, preferences, self._profile_for_plan(plan, context)
            )
            new_template = self.store.create_template(template_from_meal(meal))
            self.store.update_schedule_entry(entry.schedule_id, template_id=new_template.template_id)

            print(f"✅ Replaced '{current.name}' with '{new_template.name}'", file=sys.stderr)
            return {"success": True, "new_meal": new_template}

    # ------------------------------------------------------------------
    # Shopping list
    # ------------------------------------------------------------------

    def generate_shopping_list(
        self,
        user_id: str,
        plan_id: str,
        week_start_date: Optional[str] = None,
    ) -> ShoppingList:
        """Build and save a fresh shopping list snapshot for one week."""
        week_start_date = week_start_date or default_week_start(self.settings.timezone)
        with log_operation(
            logger,
            "generate_shopping_list",
            user_id=user_id,
            plan_id=plan_id,
            week_start_date=week_start_date,
        ):
            self._get_owned_plan(user_id, plan_id)
            entries = self.store.find_schedule_entries(plan_id)
            draft = build_shopping_list(entries, self._templates_for(entries), week_start_date)

            return self.store.create_shopping_list(
                ShoppingList(
                    shopping_list_id=new_record_id(),
                    user_id=user_id,
                    plan_id=plan_id,
                    name=draft.name,
                    week_start_date=draft.week_start_date,
                    items=draft.items,
                    total_estimated_cost=draft.total_estimated_cost,
                )
            )

    # ------------------------------------------------------------------
    # Preferences & nutrition
    # ------------------------------------------------------------------

    def save_meal_preference(
        self,
        user_id: str,
        template_id: str,
        preference_type: Union[str, PreferenceType],
        rating: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> MealPreference:
        """Upsert on (user, template, preference type).

        Raises:
            UnknownScheduleReference: the template does not exist
            InvalidMealPreference: unknown preference type or rating outside 1-5
        """
        with log_operation(logger, "save_meal_preference", user_id=user_id, template_id=template_id):
            if self.store.get_template(template_id) is None:
                raise UnknownScheduleReference(f"Template {template_id} not found")
            try:
                preference = MealPreference(
                    user_id=user_id,
                    template_id=template_id,
                    preference_type=preference_type,
                    rating=rating,
                    notes=notes,
                )
            except ValidationError as e:
                raise InvalidMealPreference(
                    f"Invalid preference {preference_type!r} for template {template_id}: {e}"
                ) from e
            return self.store.upsert_preference(preference)

    def get_nutrition_summary(self, user_id: str, plan_id: Optional[str] = None) -> Dict[str, Any]:
        """Weekly averages, adherence and per-day totals of a stored plan."""
        with log_operation(logger, "get_nutrition_summary", user_id=user_id, plan_id=plan_id):
            plan = self._resolve_plan(user_id, plan_id)
            breakdown = calculate_plan_breakdown(self.get_weekly_plan(user_id, plan.plan_id))
            summary = summary_from_totals(breakdown["weekly_totals"], plan)
            return {
                "plan_id": plan.plan_id,
                "weekly_summary": summary.model_dump(),
                **breakdown,
            }
