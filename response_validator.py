"""Structural and semantic validation of generative responses.

Every check communicates rejection with a sentinel (None / False); nothing
here raises for control flow. A response is trusted only after:

1. cleaning (markdown fences, thought blocks),
2. a structural pre-check (balanced braces/brackets, proper ending),
3. parsing (json.loads, then one json_repair attempt),
4. semantic checks for the requested mode (full plan, single day, single meal).
"""

from __future__ import annotations

import json
import math
import re
import sys
from typing import Any, Dict, Iterable, List, Optional

import json_repair

from schemas import MealTiming
from validation_config import DAYS_PER_WEEK

# json_repair is slow on very large inputs; a full week is well under this
MAX_REPAIR_CHARS = 150000

_VALID_TIMINGS = frozenset(MealTiming.values())


def clean_json_text(text: str) -> str:
    """Remove markdown fences and thought blocks from a response."""
    text = (text or "").strip()

    text = re.sub(r"<thought>.*?</thought>", "", text, flags=re.DOTALL)
    text = re.sub(r"```(?:json)?\s*\n?", "", text)
    text = re.sub(r"\n?\s*```", "", text)

    return text.strip()


def extract_json_span(text: str) -> Optional[str]:
    """Return the span from the first opening to the last closing character.

    Leading reasoning and trailing chatter are dropped; everything in
    between is kept verbatim so that truncation stays detectable.
    """
    openings = [pos for pos in (text.find("{"), text.find("[")) if pos != -1]
    if not openings:
        return None
    start = min(openings)
    end = max(text.rfind("}"), text.rfind("]"))
    if end < start:
        return None
    return text[start : end + 1]


def has_balanced_delimiters(text: str) -> bool:
    """Brace and bracket counts match across the whole text."""
    open_braces = text.count("{")
    close_braces = text.count("}")
    open_brackets = text.count("[")
    close_brackets = text.count("]")

    if open_braces != close_braces or open_brackets != close_brackets:
        print(
            f"   💥 Mismatched braces/brackets: "
            f"{{{open_braces}/{close_braces}, [{open_brackets}/{close_brackets}]",
            file=sys.stderr,
        )
        return False
    return True


def is_valid_json_structure(json_string: str) -> bool:
    """Fast structural pre-check run before any parsing.

    Brace and bracket counts must match and the trimmed text must end with a
    closing character.
    """
    if not has_balanced_delimiters(json_string):
        return False

    trimmed = json_string.strip()
    if not trimmed.endswith("}") and not trimmed.endswith("]"):
        print("   💥 JSON doesn't end with proper closing character", file=sys.stderr)
        return False

    return True


def parse_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Clean, pre-check and parse a response into a dict.

    Returns:
        The parsed object, or None when any stage rejects the text
    """
    cleaned = clean_json_text(text)
    # Counted on the whole response: stray delimiters in prose still reject
    if not has_balanced_delimiters(cleaned):
        return None

    span = extract_json_span(cleaned)
    if span is None:
        print("   💥 No JSON found in response", file=sys.stderr)
        return None

    if not is_valid_json_structure(span):
        return None

    try:
        parsed = json.loads(span)
    except json.JSONDecodeError as e:
        if len(span) >= MAX_REPAIR_CHARS:
            print(
                f"   💥 JSON parsing failed and input too large to repair ({len(span)} chars): {e}",
                file=sys.stderr,
            )
            return None
        try:
            parsed = json_repair.repair_json(span, return_objects=True)
        except Exception as repair_error:  # pylint: disable=broad-except
            print(f"   💥 json_repair failed: {repair_error}", file=sys.stderr)
            return None
        print("   🔧 json_repair recovered a malformed response", file=sys.stderr)

    if not isinstance(parsed, dict):
        print(f"   💥 Expected a JSON object, got {type(parsed).__name__}", file=sys.stderr)
        return None

    return parsed


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_valid_meal_timing(value: Any) -> bool:
    return isinstance(value, str) and value.strip().upper() in _VALID_TIMINGS


def is_valid_meal(meal: Any) -> bool:
    """Non-empty name, enumerated meal_timing and numeric calories >= 0."""
    if not isinstance(meal, dict):
        return False
    if not _non_empty_string(meal.get("name")):
        return False
    if not is_valid_meal_timing(meal.get("meal_timing")):
        return False
    calories = meal.get("calories")
    return _is_number(calories) and calories >= 0


def _has_valid_meals(day: Dict[str, Any]) -> bool:
    meals = day.get("meals")
    if not isinstance(meals, list) or not meals:
        return False
    for meal in meals:
        if not is_valid_meal(meal):
            print(f"   💥 Invalid meal structure: {str(meal)[:200]}", file=sys.stderr)
            return False
    return True


def validate_meal_plan_structure(parsed: Dict[str, Any]) -> bool:
    """Full-plan mode: exactly seven days, each with a name and valid meals."""
    weekly_plan = parsed.get("weekly_plan")
    if not isinstance(weekly_plan, list):
        print("   💥 Missing or invalid weekly_plan array", file=sys.stderr)
        return False

    if len(weekly_plan) != DAYS_PER_WEEK:
        print(f"   💥 Expected {DAYS_PER_WEEK} days, got {len(weekly_plan)}", file=sys.stderr)
        return False

    for day in weekly_plan:
        if not isinstance(day, dict) or not _non_empty_string(day.get("day")):
            print(f"   💥 Invalid day structure: {str(day)[:200]}", file=sys.stderr)
            return False
        if not _has_valid_meals(day):
            return False

    return True


def _day_index_matches(value: Any, day_index: int) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value == day_index
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip()) == day_index
    return False


def validate_day_structure(parsed: Dict[str, Any], day: str, day_index: int) -> bool:
    """Single-day mode: valid meals and the day/day_index that was requested."""
    returned_day = parsed.get("day")
    if not _non_empty_string(returned_day) or returned_day.strip().lower() != day.lower():
        print(f"   💥 Day mismatch: requested {day}, got {returned_day!r}", file=sys.stderr)
        return False

    if not _day_index_matches(parsed.get("day_index"), day_index):
        print(
            f"   💥 day_index mismatch: requested {day_index}, got {parsed.get('day_index')!r}",
            file=sys.stderr,
        )
        return False

    return _has_valid_meals(parsed)


def validate_replacement_meal(parsed: Dict[str, Any]) -> bool:
    """Single-meal mode: only name and meal_timing are required."""
    return _non_empty_string(parsed.get("name")) and is_valid_meal_timing(
        parsed.get("meal_timing")
    )


def meals_match_timings(meals: Iterable[Dict[str, Any]], timings: List[str]) -> bool:
    """Check a day's meals against the profile's derived slots.

    The day must carry one meal per slot and no slot outside the set.
    """
    meals = list(meals)
    if len(meals) != len(timings):
        print(
            f"   💥 Expected {len(timings)} meals for the day, got {len(meals)}",
            file=sys.stderr,
        )
        return False
    allowed = set(timings)
    for meal in meals:
        timing = str(meal.get("meal_timing", "")).strip().upper()
        if timing not in allowed:
            print(f"   💥 Meal timing {timing} not requested for this profile", file=sys.stderr)
            return False
    return True


class ResponseValidator:
    """Entry points used by the generation tiers.

    Each method returns the parsed payload on success and None on rejection.
    When `expected_timings` is given, meals must also fit the profile's
    slot set.
    """

    def __init__(self, expected_timings: Optional[List[str]] = None) -> None:
        self.expected_timings = list(expected_timings) if expected_timings else None

    def validate_plan(self, text: str) -> Optional[Dict[str, Any]]:
        parsed = parse_json_object(text)
        if parsed is None or not validate_meal_plan_structure(parsed):
            return None
        if self.expected_timings is not None:
            for day in parsed["weekly_plan"]:
                if not meals_match_timings(day["meals"], self.expected_timings):
                    return None
        return parsed

    def validate_day(self, text: str, day: str, day_index: int) -> Optional[Dict[str, Any]]:
        parsed = parse_json_object(text)
        if parsed is None or not validate_day_structure(parsed, day, day_index):
            return None
        if self.expected_timings is not None and not meals_match_timings(
            parsed["meals"], self.expected_timings
        ):
            return None
        return parsed

    def validate_meal(self, text: str) -> Optional[Dict[str, Any]]:
        parsed = parse_json_object(text)
        if parsed is None or not validate_replacement_meal(parsed):
            return None
        return parsed
