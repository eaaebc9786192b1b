"""Turn a validated plan into template and schedule records."""

import sys
import uuid
from collections import defaultdict
from typing import DefaultDict, Dict, List, Optional, Tuple

from meal_plan_store import MealPlanStore
from schemas import GeneratedMeal, GeneratedMealPlan, MealTemplate, ScheduleEntry

_RECIPE_FIELDS = (
    "name",
    "description",
    "meal_timing",
    "dietary_category",
    "prep_time_minutes",
    "difficulty_level",
    "calories",
    "protein_g",
    "carbs_g",
    "fats_g",
    "fiber_g",
    "sugar_g",
    "sodium_mg",
    "ingredients",
    "instructions",
    "allergens",
    "image_url",
)


def new_record_id() -> str:
    return str(uuid.uuid4())


def template_from_meal(meal: GeneratedMeal, template_id: Optional[str] = None) -> MealTemplate:
    """Copy a meal's recipe fields into a new template row."""
    data = meal.model_dump(include=set(_RECIPE_FIELDS))
    return MealTemplate(template_id=template_id or new_record_id(), **data)


def store_templates_and_schedule(
    store: MealPlanStore,
    plan_id: str,
    plan: GeneratedMealPlan,
    template_ids: Optional[Dict[str, str]] = None,
) -> List[ScheduleEntry]:
    """Persist one template per distinct meal name and one entry per slot.

    Args:
        store: Persistence collaborator
        plan_id: Owning plan
        plan: Validated seven-day plan
        template_ids: name -> template_id map for this pass; a fresh map is
            used when omitted so separate passes never share templates

    Returns:
        The created schedule entries, in plan order

    Raises:
        PersistenceFailure: propagated from the store
    """
    template_ids = {} if template_ids is None else template_ids
    entries: List[ScheduleEntry] = []
    created_templates = 0

    print("💾 Storing meal templates and schedule...", file=sys.stderr)

    for day in plan.weekly_plan:
        slot_counts: DefaultDict[Tuple[int, str], int] = defaultdict(int)
        for meal in day.meals:
            if meal.name not in template_ids:
                template = store.create_template(template_from_meal(meal))
                template_ids[meal.name] = template.template_id
                created_templates += 1

            slot = (day.day_index, meal.meal_timing.value)
            slot_counts[slot] += 1

            entry = ScheduleEntry(
                schedule_id=new_record_id(),
                plan_id=plan_id,
                template_id=template_ids[meal.name],
                day_of_week=day.day_index,
                meal_timing=meal.meal_timing,
                meal_order=slot_counts[slot],
                portion_multiplier=meal.portion_multiplier or 1.0,
                is_optional=meal.is_optional,
            )
            entries.append(store.create_schedule_entry(entry))

    print(
        f"✅ Stored {created_templates} templates and {len(entries)} schedule entries",
        file=sys.stderr,
    )
    return entries
