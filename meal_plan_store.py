"""Persistence collaborator for plans, templates, schedules and shopping lists.

MealPlanStore is the create/find/update protocol the service depends on.
InMemoryMealPlanStore implements it with dicts guarded by a lock, and can
mirror its tables to a JSON snapshot file so a local run survives restarts.
"""

import json
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Type, TypeVar

from pydantic import BaseModel, ValidationError

from exceptions import PersistenceFailure
from schemas import (
    MealPlan,
    MealPreference,
    MealTemplate,
    MealTiming,
    ScheduleEntry,
    ShoppingList,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

_TIMING_ORDER = {timing.value: idx for idx, timing in enumerate(MealTiming)}


def schedule_sort_key(entry: ScheduleEntry):
    """Order entries by day, then timing, then position within the slot."""
    timing = entry.meal_timing.value if isinstance(entry.meal_timing, MealTiming) else entry.meal_timing
    return (entry.day_of_week, _TIMING_ORDER.get(timing, len(_TIMING_ORDER)), entry.meal_order)


class MealPlanStore(Protocol):
    """Create/find/update operations over the five record kinds."""

    def create_plan(self, plan: MealPlan) -> MealPlan: ...
    def get_plan(self, plan_id: str) -> Optional[MealPlan]: ...
    def find_plans(self, user_id: str, active_only: bool = False) -> List[MealPlan]: ...
    def update_plan(self, plan_id: str, **changes: Any) -> MealPlan: ...

    def create_template(self, template: MealTemplate) -> MealTemplate: ...
    def get_template(self, template_id: str) -> Optional[MealTemplate]: ...

    def create_schedule_entry(self, entry: ScheduleEntry) -> ScheduleEntry: ...
    def find_schedule_entries(self, plan_id: str) -> List[ScheduleEntry]: ...
    def find_schedule_entry(
        self, plan_id: str, day_of_week: int, meal_timing: str, meal_order: int
    ) -> Optional[ScheduleEntry]: ...
    def update_schedule_entry(self, schedule_id: str, **changes: Any) -> ScheduleEntry: ...

    def create_shopping_list(self, shopping_list: ShoppingList) -> ShoppingList: ...
    def find_shopping_lists(
        self, plan_id: str, week_start_date: Optional[str] = None
    ) -> List[ShoppingList]: ...

    def upsert_preference(self, preference: MealPreference) -> MealPreference: ...
    def find_preferences(self, user_id: str) -> List[MealPreference]: ...


class InMemoryMealPlanStore:
    """Dict-backed MealPlanStore with an optional JSON snapshot file.

    Every mutation happens under one lock. Snapshot write errors raise
    PersistenceFailure; an unreadable snapshot starts the store empty.
    """

    _TABLES: Dict[str, Type[BaseModel]] = {
        "plans": MealPlan,
        "templates": MealTemplate,
        "schedule": ScheduleEntry,
        "shopping_lists": ShoppingList,
        "preferences": MealPreference,
    }

    def __init__(self, snapshot_file: Optional[Path] = None):
        self.snapshot_file = Path(snapshot_file) if snapshot_file else None
        self._lock = threading.Lock()
        self._tables: Dict[str, Dict[str, BaseModel]] = {name: {} for name in self._TABLES}
        self._load_snapshot()

    # ------------------------------------------------------------------
    # Snapshot file
    # ------------------------------------------------------------------

    def _load_snapshot(self):
        """Load tables from disk, skipping rows that no longer validate."""
        if not self.snapshot_file or not self.snapshot_file.exists():
            return
        try:
            with open(self.snapshot_file, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            print(f"Warning: Could not load meal plan snapshot: {e}")
            return

        for name, model in self._TABLES.items():
            for key, row in (data.get(name) or {}).items():
                try:
                    self._tables[name][key] = model.model_validate(row)
                except ValidationError as e:
                    print(f"Warning: Skipping invalid {name} row {key}: {e}")

    def _save_snapshot(self):
        """Write all tables to disk; caller holds the lock."""
        if not self.snapshot_file:
            return
        payload = {
            name: {key: row.model_dump(mode="json") for key, row in rows.items()}
            for name, rows in self._tables.items()
        }
        try:
            with open(self.snapshot_file, "w") as f:
                json.dump(payload, f, indent=2)
        except (IOError, OSError) as e:
            raise PersistenceFailure(f"Could not save meal plan snapshot: {e}") from e

    # ------------------------------------------------------------------
    # Generic helpers
    # ------------------------------------------------------------------

    def _insert(self, table: str, key: str, row: ModelT) -> ModelT:
        with self._lock:
            rows = self._tables[table]
            if key in rows:
                raise PersistenceFailure(f"Duplicate {table} key: {key}")
            rows[key] = row.model_copy(deep=True)
            try:
                self._save_snapshot()
            except PersistenceFailure:
                del rows[key]
                raise
        return row.model_copy(deep=True)

    def _get(self, table: str, key: str) -> Optional[Any]:
        with self._lock:
            row = self._tables[table].get(key)
            return row.model_copy(deep=True) if row is not None else None

    def _update(self, table: str, key: str, changes: Dict[str, Any]) -> Any:
        with self._lock:
            rows = self._tables[table]
            if key not in rows:
                raise PersistenceFailure(f"Unknown {table} key: {key}")
            try:
                updated = type(rows[key]).model_validate(
                    {**rows[key].model_dump(), **changes}
                )
            except ValidationError as e:
                raise PersistenceFailure(f"Invalid update for {table} {key}: {e}") from e
            previous = rows[key]
            rows[key] = updated
            try:
                self._save_snapshot()
            except PersistenceFailure:
                rows[key] = previous
                raise
            return updated.model_copy(deep=True)

    def _select(self, table: str, predicate) -> List[Any]:
        with self._lock:
            return [row.model_copy(deep=True) for row in self._tables[table].values() if predicate(row)]

    # ------------------------------------------------------------------
    # Plans
    # ------------------------------------------------------------------

    def create_plan(self, plan: MealPlan) -> MealPlan:
        return self._insert("plans", plan.plan_id, plan)

    def get_plan(self, plan_id: str) -> Optional[MealPlan]:
        return self._get("plans", plan_id)

    def find_plans(self, user_id: str, active_only: bool = False) -> List[MealPlan]:
        plans = self._select(
            "plans",
            lambda p: p.user_id == user_id and (p.is_active or not active_only),
        )
        return sorted(plans, key=lambda p: p.start_date, reverse=True)

    def update_plan(self, plan_id: str, **changes: Any) -> MealPlan:
        return self._update("plans", plan_id, changes)

    # ------------------------------------------------------------------
    # Templates (append-only)
    # ------------------------------------------------------------------

    def create_template(self, template: MealTemplate) -> MealTemplate:
        return self._insert("templates", template.template_id, template)

    def get_template(self, template_id: str) -> Optional[MealTemplate]:
        return self._get("templates", template_id)

    # ------------------------------------------------------------------
    # Schedule
    # ------------------------------------------------------------------

    def create_schedule_entry(self, entry: ScheduleEntry) -> ScheduleEntry:
        return self._insert("schedule", entry.schedule_id, entry)

    def find_schedule_entries(self, plan_id: str) -> List[ScheduleEntry]:
        entries = self._select("schedule", lambda e: e.plan_id == plan_id)
        return sorted(entries, key=schedule_sort_key)

    def find_schedule_entry(
        self, plan_id: str, day_of_week: int, meal_timing: str, meal_order: int
    ) -> Optional[ScheduleEntry]:
        timing = MealTiming(str(meal_timing).upper())
        matches = self._select(
            "schedule",
            lambda e: e.plan_id == plan_id
            and e.day_of_week == day_of_week
            and e.meal_timing == timing
            and e.meal_order == meal_order,
        )
        return matches[0] if matches else None

    def update_schedule_entry(self, schedule_id: str, **changes: Any) -> ScheduleEntry:
        return self._update("schedule", schedule_id, changes)

    # ------------------------------------------------------------------
    # Shopping lists (one snapshot per call, never merged)
    # ------------------------------------------------------------------

    def create_shopping_list(self, shopping_list: ShoppingList) -> ShoppingList:
        return self._insert("shopping_lists", shopping_list.shopping_list_id, shopping_list)

    def find_shopping_lists(
        self, plan_id: str, week_start_date: Optional[str] = None
    ) -> List[ShoppingList]:
        lists = self._select(
            "shopping_lists",
            lambda s: s.plan_id == plan_id
            and (week_start_date is None or s.week_start_date == week_start_date),
        )
        return sorted(lists, key=lambda s: s.created_at)

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------

    @staticmethod
    def _preference_key(preference: MealPreference) -> str:
        return f"{preference.user_id}:{preference.template_id}:{preference.preference_type.value}"

    def upsert_preference(self, preference: MealPreference) -> MealPreference:
        key = self._preference_key(preference)
        with self._lock:
            rows = self._tables["preferences"]
            previous = rows.get(key)
            rows[key] = preference.model_copy(deep=True)
            try:
                self._save_snapshot()
            except PersistenceFailure:
                if previous is None:
                    del rows[key]
                else:
                    rows[key] = previous
                raise
        return preference.model_copy(deep=True)

    def find_preferences(self, user_id: str) -> List[MealPreference]:
        return self._select("preferences", lambda p: p.user_id == user_id)
