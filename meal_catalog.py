"""Fixed per-timing meal catalog for deterministic generation.

Used by the deterministic tier (whole week or a single failed day) and by
the replacement fallback. Entries carry recipe content only; calories and
macros are assigned by the caller.
"""

from __future__ import annotations

import copy
import zlib
from typing import Any, Dict, List

from schemas import MealTiming

DEFAULT_MEAL_IMAGE_URL = "https://images.pexels.com/photos/1640777/pexels-photo-1640777.jpeg"

# Micronutrient placeholders for catalog meals
FALLBACK_FIBER_G = 5
FALLBACK_SUGAR_G = 8
FALLBACK_SODIUM_MG = 400


def _ingredient(name: str, quantity: float, unit: str, category: str) -> Dict[str, Any]:
    return {"name": name, "quantity": quantity, "unit": unit, "category": category}


MEAL_CATALOG: Dict[str, List[Dict[str, Any]]] = {
    MealTiming.BREAKFAST.value: [
        {
            "name": "Scrambled Eggs with Toast",
            "description": "Fluffy scrambled eggs served with whole grain toast",
            "dietary_category": "BALANCED",
            "prep_time_minutes": 10,
            "difficulty_level": 1,
            "ingredients": [
                _ingredient("eggs", 2, "piece", "Protein"),
                _ingredient("bread", 2, "slice", "Grains"),
                _ingredient("butter", 1, "tbsp", "Dairy"),
            ],
            "instructions": [
                "Whisk the eggs with a pinch of salt.",
                "Cook in butter over low heat, stirring gently.",
                "Serve with toasted bread.",
            ],
            "allergens": ["eggs", "gluten", "dairy"],
        },
        {
            "name": "Overnight Oats with Berries",
            "description": "Oats soaked in milk overnight, topped with fresh berries",
            "dietary_category": "VEGETARIAN",
            "prep_time_minutes": 5,
            "difficulty_level": 1,
            "ingredients": [
                _ingredient("oats", 60, "g", "Grains"),
                _ingredient("milk", 200, "ml", "Dairy"),
                _ingredient("berries", 80, "g", "Fruits"),
                _ingredient("honey", 1, "tbsp", "Condiments"),
            ],
            "instructions": [
                "Combine oats and milk in a jar.",
                "Refrigerate overnight.",
                "Top with berries and honey before serving.",
            ],
            "allergens": ["dairy", "gluten"],
        },
        {
            "name": "Greek Yogurt Parfait",
            "description": "Layers of greek yogurt, banana and almonds",
            "dietary_category": "VEGETARIAN",
            "prep_time_minutes": 5,
            "difficulty_level": 1,
            "ingredients": [
                _ingredient("greek yogurt", 200, "g", "Dairy"),
                _ingredient("banana", 1, "piece", "Fruits"),
                _ingredient("almonds", 20, "g", "Nuts"),
            ],
            "instructions": [
                "Slice the banana.",
                "Layer yogurt, banana and chopped almonds in a glass.",
            ],
            "allergens": ["dairy", "nuts"],
        },
        {
            "name": "Avocado Toast with Egg",
            "description": "Smashed avocado on toast topped with a fried egg",
            "dietary_category": "BALANCED",
            "prep_time_minutes": 10,
            "difficulty_level": 1,
            "ingredients": [
                _ingredient("bread", 2, "slice", "Grains"),
                _ingredient("avocado", 1, "piece", "Vegetables"),
                _ingredient("eggs", 1, "piece", "Protein"),
                _ingredient("lemon", 0.5, "piece", "Fruits"),
            ],
            "instructions": [
                "Toast the bread.",
                "Mash avocado with lemon juice and spread on the toast.",
                "Fry the egg and place it on top.",
            ],
            "allergens": ["eggs", "gluten"],
        },
    ],
    MealTiming.LUNCH.value: [
        {
            "name": "Grilled Chicken Salad",
            "description": "Fresh mixed greens with grilled chicken breast",
            "dietary_category": "HIGH_PROTEIN",
            "prep_time_minutes": 20,
            "difficulty_level": 2,
            "ingredients": [
                _ingredient("chicken breast", 150, "g", "Protein"),
                _ingredient("mixed greens", 100, "g", "Vegetables"),
                _ingredient("olive oil", 2, "tbsp", "Oils"),
            ],
            "instructions": [
                "Season and grill the chicken for 6 minutes per side.",
                "Slice the chicken and toss with the greens.",
                "Dress with olive oil.",
            ],
            "allergens": [],
        },
        {
            "name": "Quinoa Chickpea Bowl",
            "description": "Quinoa with roasted chickpeas, cucumber and tomato",
            "dietary_category": "VEGAN",
            "prep_time_minutes": 25,
            "difficulty_level": 2,
            "ingredients": [
                _ingredient("quinoa", 80, "g", "Grains"),
                _ingredient("chickpeas", 120, "g", "Legumes"),
                _ingredient("cucumber", 100, "g", "Vegetables"),
                _ingredient("tomato", 100, "g", "Vegetables"),
                _ingredient("olive oil", 1, "tbsp", "Oils"),
            ],
            "instructions": [
                "Cook the quinoa according to package directions.",
                "Roast chickpeas with olive oil until crisp.",
                "Combine with diced cucumber and tomato.",
            ],
            "allergens": [],
        },
        {
            "name": "Turkey Wrap",
            "description": "Whole wheat wrap with turkey, lettuce and tomato",
            "dietary_category": "BALANCED",
            "prep_time_minutes": 10,
            "difficulty_level": 1,
            "ingredients": [
                _ingredient("turkey", 120, "g", "Protein"),
                _ingredient("bread", 1, "piece", "Grains"),
                _ingredient("lettuce", 50, "g", "Vegetables"),
                _ingredient("tomato", 60, "g", "Vegetables"),
            ],
            "instructions": [
                "Lay the wrap flat and layer turkey, lettuce and tomato.",
                "Roll tightly and cut in half.",
            ],
            "allergens": ["gluten"],
        },
        {
            "name": "Lentil Soup",
            "description": "Hearty lentil soup with carrot and onion",
            "dietary_category": "VEGAN",
            "prep_time_minutes": 35,
            "difficulty_level": 2,
            "ingredients": [
                _ingredient("lentils", 100, "g", "Legumes"),
                _ingredient("carrot", 80, "g", "Vegetables"),
                _ingredient("onion", 60, "g", "Vegetables"),
                _ingredient("garlic", 5, "g", "Vegetables"),
            ],
            "instructions": [
                "Sweat onion, carrot and garlic in a pot.",
                "Add lentils and water, simmer for 25 minutes.",
                "Season and blend partially.",
            ],
            "allergens": [],
        },
        {
            "name": "Tuna Pasta Salad",
            "description": "Pasta tossed with tuna, pepper and a light vinaigrette",
            "dietary_category": "BALANCED",
            "prep_time_minutes": 20,
            "difficulty_level": 1,
            "ingredients": [
                _ingredient("pasta", 80, "g", "Grains"),
                _ingredient("tuna", 100, "g", "Protein"),
                _ingredient("pepper", 80, "g", "Vegetables"),
                _ingredient("vinegar", 1, "tbsp", "Condiments"),
            ],
            "instructions": [
                "Cook and cool the pasta.",
                "Mix with flaked tuna and diced pepper.",
                "Dress with vinegar.",
            ],
            "allergens": ["fish", "gluten"],
        },
    ],
    MealTiming.DINNER.value: [
        {
            "name": "Baked Salmon with Rice",
            "description": "Oven-baked salmon fillet with brown rice and vegetables",
            "dietary_category": "HIGH_PROTEIN",
            "prep_time_minutes": 30,
            "difficulty_level": 2,
            "ingredients": [
                _ingredient("salmon fillet", 150, "g", "Protein"),
                _ingredient("brown rice", 80, "g", "Grains"),
                _ingredient("broccoli", 100, "g", "Vegetables"),
            ],
            "instructions": [
                "Bake the salmon at 200C for 15 minutes.",
                "Cook the rice.",
                "Steam the broccoli and serve together.",
            ],
            "allergens": ["fish"],
        },
        {
            "name": "Beef Stir Fry",
            "description": "Beef strips stir-fried with vegetables and soy sauce",
            "dietary_category": "BALANCED",
            "prep_time_minutes": 25,
            "difficulty_level": 2,
            "ingredients": [
                _ingredient("beef", 150, "g", "Protein"),
                _ingredient("pepper", 100, "g", "Vegetables"),
                _ingredient("onion", 60, "g", "Vegetables"),
                _ingredient("rice", 80, "g", "Grains"),
                _ingredient("soy sauce", 1, "tbsp", "Condiments"),
            ],
            "instructions": [
                "Cook the rice.",
                "Stir-fry beef strips over high heat.",
                "Add vegetables and soy sauce, cook 4 minutes more.",
            ],
            "allergens": ["soy"],
        },
        {
            "name": "Tofu Vegetable Curry",
            "description": "Tofu and vegetables simmered in a mild curry sauce",
            "dietary_category": "VEGAN",
            "prep_time_minutes": 30,
            "difficulty_level": 2,
            "ingredients": [
                _ingredient("tofu", 150, "g", "Protein"),
                _ingredient("spinach", 80, "g", "Vegetables"),
                _ingredient("sweet potato", 150, "g", "Vegetables"),
                _ingredient("rice", 70, "g", "Grains"),
            ],
            "instructions": [
                "Dice tofu and sweet potato.",
                "Simmer in curry sauce until the potato is tender.",
                "Stir in spinach and serve over rice.",
            ],
            "allergens": ["soy"],
        },
        {
            "name": "Roast Chicken with Potatoes",
            "description": "Herb roasted chicken with potatoes and carrots",
            "dietary_category": "BALANCED",
            "prep_time_minutes": 45,
            "difficulty_level": 2,
            "ingredients": [
                _ingredient("chicken", 180, "g", "Protein"),
                _ingredient("potato", 200, "g", "Vegetables"),
                _ingredient("carrot", 100, "g", "Vegetables"),
                _ingredient("olive oil", 1, "tbsp", "Oils"),
            ],
            "instructions": [
                "Toss potatoes and carrots in olive oil.",
                "Roast with the chicken at 200C for 40 minutes.",
            ],
            "allergens": [],
        },
        {
            "name": "Shrimp Zucchini Pasta",
            "description": "Garlic shrimp with pasta and sauteed zucchini",
            "dietary_category": "BALANCED",
            "prep_time_minutes": 25,
            "difficulty_level": 2,
            "ingredients": [
                _ingredient("shrimp", 150, "g", "Protein"),
                _ingredient("pasta", 80, "g", "Grains"),
                _ingredient("zucchini", 120, "g", "Vegetables"),
                _ingredient("garlic", 5, "g", "Vegetables"),
            ],
            "instructions": [
                "Cook the pasta.",
                "Saute garlic, zucchini and shrimp for 5 minutes.",
                "Toss everything together.",
            ],
            "allergens": ["shellfish", "gluten"],
        },
    ],
    MealTiming.MORNING_SNACK.value: [
        {
            "name": "Apple with Peanut Butter",
            "description": "Sliced apple with a spoon of peanut butter",
            "dietary_category": "VEGETARIAN",
            "prep_time_minutes": 3,
            "difficulty_level": 1,
            "ingredients": [
                _ingredient("apple", 1, "piece", "Fruits"),
                _ingredient("peanut butter", 1, "tbsp", "Nuts"),
            ],
            "instructions": ["Slice the apple and serve with peanut butter."],
            "allergens": ["peanuts"],
        },
        {
            "name": "Banana and Almonds",
            "description": "A banana with a handful of almonds",
            "dietary_category": "VEGAN",
            "prep_time_minutes": 1,
            "difficulty_level": 1,
            "ingredients": [
                _ingredient("banana", 1, "piece", "Fruits"),
                _ingredient("almonds", 20, "g", "Nuts"),
            ],
            "instructions": ["Serve the banana with almonds."],
            "allergens": ["nuts"],
        },
    ],
    MealTiming.AFTERNOON_SNACK.value: [
        {
            "name": "Yogurt with Honey",
            "description": "Plain yogurt drizzled with honey",
            "dietary_category": "VEGETARIAN",
            "prep_time_minutes": 2,
            "difficulty_level": 1,
            "ingredients": [
                _ingredient("yogurt", 150, "g", "Dairy"),
                _ingredient("honey", 1, "tsp", "Condiments"),
            ],
            "instructions": ["Drizzle honey over the yogurt."],
            "allergens": ["dairy"],
        },
        {
            "name": "Carrot Sticks with Hummus",
            "description": "Crunchy carrot sticks with chickpea hummus",
            "dietary_category": "VEGAN",
            "prep_time_minutes": 5,
            "difficulty_level": 1,
            "ingredients": [
                _ingredient("carrot", 100, "g", "Vegetables"),
                _ingredient("chickpeas", 60, "g", "Legumes"),
            ],
            "instructions": ["Cut carrots into sticks and serve with hummus."],
            "allergens": ["sesame"],
        },
        {
            "name": "Orange and Walnuts",
            "description": "Fresh orange with a few walnuts",
            "dietary_category": "VEGAN",
            "prep_time_minutes": 2,
            "difficulty_level": 1,
            "ingredients": [
                _ingredient("orange", 1, "piece", "Fruits"),
                _ingredient("walnuts", 15, "g", "Nuts"),
            ],
            "instructions": ["Peel the orange and serve with walnuts."],
            "allergens": ["nuts"],
        },
    ],
    MealTiming.EVENING_SNACK.value: [
        {
            "name": "Cottage Cheese with Cucumber",
            "description": "Light cottage cheese with sliced cucumber",
            "dietary_category": "HIGH_PROTEIN",
            "prep_time_minutes": 3,
            "difficulty_level": 1,
            "ingredients": [
                _ingredient("cheese", 100, "g", "Dairy"),
                _ingredient("cucumber", 80, "g", "Vegetables"),
            ],
            "instructions": ["Serve cottage cheese topped with cucumber slices."],
            "allergens": ["dairy"],
        },
        {
            "name": "Warm Milk with Oats",
            "description": "A small bowl of oats cooked in milk",
            "dietary_category": "VEGETARIAN",
            "prep_time_minutes": 5,
            "difficulty_level": 1,
            "ingredients": [
                _ingredient("milk", 200, "ml", "Dairy"),
                _ingredient("oats", 30, "g", "Grains"),
            ],
            "instructions": ["Simmer oats in milk for 4 minutes."],
            "allergens": ["dairy", "gluten"],
        },
    ],
}


def catalog_for_timing(meal_timing: str) -> List[Dict[str, Any]]:
    """Catalog entries for a timing; unknown timings fall back to LUNCH."""
    return MEAL_CATALOG.get(str(meal_timing).upper(), MEAL_CATALOG[MealTiming.LUNCH.value])


def _recipe_fields(entry: Dict[str, Any]) -> Dict[str, Any]:
    recipe = copy.deepcopy(entry)
    recipe["instructions"] = [
        {"step": idx, "text": text} for idx, text in enumerate(entry["instructions"], start=1)
    ]
    recipe.setdefault("image_url", DEFAULT_MEAL_IMAGE_URL)
    recipe["fiber_g"] = FALLBACK_FIBER_G
    recipe["sugar_g"] = FALLBACK_SUGAR_G
    recipe["sodium_mg"] = FALLBACK_SODIUM_MG
    return recipe


def select_for_day(meal_timing: str, day_index: int) -> Dict[str, Any]:
    """Catalog recipe at day_index mod catalog length (pure)."""
    entries = catalog_for_timing(meal_timing)
    return _recipe_fields(entries[day_index % len(entries)])


def stable_index(key: str, modulo: int) -> int:
    """Process-independent index for a string key (hash() is salted per run)."""
    return zlib.crc32(key.encode("utf-8")) % modulo


def select_replacement(meal_timing: str, current_name: str) -> Dict[str, Any]:
    """Pick a catalog recipe for a replacement, avoiding the current name when possible."""
    entries = catalog_for_timing(meal_timing)
    candidates = [
        entry for entry in entries if entry["name"].lower() != (current_name or "").lower()
    ] or entries
    return _recipe_fields(candidates[stable_index(current_name or "", len(candidates))])
