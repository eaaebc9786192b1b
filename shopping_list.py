"""
Shopping List Aggregation

Merges the ingredients of every scheduled meal into one priced list grouped
by category. Quantities are summed per lower-cased ingredient name without
any unit conversion: the first occurrence's unit and category win.
"""

import math
import sys
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping

from schemas import MealTemplate, ScheduleEntry, ShoppingListItem

DEFAULT_UNIT = "piece"
DEFAULT_CATEGORY = "Other"
DEFAULT_UNIT_PRICE = 1.0

# Rough unit prices, keyed by exact lower-cased ingredient name (per 100g/ml)
INGREDIENT_PRICES: Dict[str, float] = {
    # Proteins
    "chicken": 3.0,
    "beef": 5.0,
    "fish": 4.0,
    "salmon": 6.0,
    "eggs": 0.5,
    "tofu": 2.0,
    "turkey": 4.0,
    "pork": 3.5,
    "tuna": 3.0,
    "shrimp": 8.0,
    # Vegetables
    "tomato": 0.8,
    "onion": 0.5,
    "carrot": 0.6,
    "broccoli": 1.2,
    "spinach": 1.5,
    "avocado": 2.0,
    "sweet potato": 0.7,
    "potato": 0.4,
    "pepper": 1.0,
    "cucumber": 0.7,
    "lettuce": 1.0,
    "garlic": 2.0,
    "mushroom": 1.5,
    "zucchini": 0.8,
    # Grains
    "rice": 0.3,
    "brown rice": 0.4,
    "quinoa": 1.2,
    "pasta": 0.4,
    "bread": 0.8,
    "oats": 0.5,
    "flour": 0.2,
    # Dairy
    "milk": 0.1,
    "yogurt": 0.8,
    "greek yogurt": 1.2,
    "cheese": 2.5,
    "feta": 3.0,
    "butter": 1.5,
    "cream": 1.0,
    # Fruits
    "apple": 0.6,
    "banana": 0.4,
    "orange": 0.7,
    "berries": 2.0,
    "lemon": 0.8,
    "lime": 0.9,
    # Nuts & seeds
    "almonds": 4.0,
    "walnuts": 5.0,
    "seeds": 3.0,
    "peanut butter": 2.0,
    # Oils & condiments
    "olive oil": 3.0,
    "oil": 2.0,
    "vinegar": 1.0,
    "salt": 0.1,
    "honey": 2.0,
    "soy sauce": 1.5,
    # Legumes
    "beans": 0.8,
    "lentils": 1.0,
    "chickpeas": 0.9,
}


@dataclass
class AggregatedIngredient:
    quantity: float
    unit: str
    category: str


@dataclass
class ShoppingListDraft:
    """Priced, grouped items ready to be saved as a ShoppingList snapshot."""

    name: str
    week_start_date: str
    items: Dict[str, List[ShoppingListItem]] = field(default_factory=dict)
    total_estimated_cost: float = 0.0


def estimate_ingredient_cost(name: str, quantity: float, unit: str) -> float:
    """Price an aggregated quantity.

    A "kg" quantity is multiplied by 10 first, treating prices as per 100g.
    Other units are priced on the raw quantity.
    """
    unit_price = INGREDIENT_PRICES.get(name.lower(), DEFAULT_UNIT_PRICE)
    quantity_multiplier = quantity * 10 if unit == "kg" else quantity
    return round(unit_price * quantity_multiplier, 2)


def aggregate_ingredients(
    entries: Iterable[ScheduleEntry],
    templates: Mapping[str, MealTemplate],
) -> Dict[str, AggregatedIngredient]:
    """Sum (quantity or 1) * portion_multiplier per lower-cased name."""
    aggregated: Dict[str, AggregatedIngredient] = {}

    for entry in entries:
        template = templates.get(entry.template_id)
        if template is None:
            print(
                f"⚠️  Schedule entry {entry.schedule_id} points at missing template "
                f"{entry.template_id}, skipping",
                file=sys.stderr,
            )
            continue

        for ingredient in template.ingredients:
            key = ingredient.name.lower()
            amount = (ingredient.quantity or 1) * entry.portion_multiplier
            existing = aggregated.get(key)
            if existing:
                existing.quantity += amount
            else:
                aggregated[key] = AggregatedIngredient(
                    quantity=amount,
                    unit=ingredient.unit or DEFAULT_UNIT,
                    category=ingredient.category or DEFAULT_CATEGORY,
                )

    return aggregated


def build_shopping_list(
    entries: Iterable[ScheduleEntry],
    templates: Mapping[str, MealTemplate],
    week_start_date: str,
) -> ShoppingListDraft:
    """Build a priced list for one plan and week.

    Args:
        entries: The plan's schedule entries
        templates: template_id -> MealTemplate for every referenced template
        week_start_date: ISO date the list is for

    Returns:
        ShoppingListDraft with items grouped by category and a total cost
    """
    grouped: Dict[str, List[ShoppingListItem]] = {}
    total_cost = 0.0

    for name, details in aggregate_ingredients(entries, templates).items():
        item = ShoppingListItem(
            name=name,
            quantity=math.ceil(details.quantity),
            unit=details.unit,
            category=details.category,
            estimated_cost=estimate_ingredient_cost(name, details.quantity, details.unit),
        )
        grouped.setdefault(item.category, []).append(item)
        total_cost += item.estimated_cost

    return ShoppingListDraft(
        name=f"Shopping List - Week of {week_start_date}",
        week_start_date=week_start_date,
        items=grouped,
        total_estimated_cost=round(total_cost, 2),
    )
