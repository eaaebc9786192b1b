"""End-to-end service flows over the in-memory store."""
import json
import re

import pytest

from exceptions import (
    InvalidMealPreference,
    MealPlanError,
    MealPlanNotFound,
    PersistenceFailure,
    UnknownScheduleReference,
)
from meal_plan_generator import MealPlanGenerator
from meal_plan_service import MealPlanService, default_week_start
from meal_plan_store import InMemoryMealPlanStore
from replacement_generator import ReplacementGenerator
from schemas import UserContext
from tests.fixtures.fake_client import FakeTextClient
from tests.fixtures.meal_plans import DAY_NAMES, make_meal, week_response

USER = "user-1"


class FailingStore(InMemoryMealPlanStore):
    """Raises PersistenceFailure once a write method has succeeded `after` times."""

    def __init__(self):
        super().__init__()
        self.failures = {}

    def fail(self, method, after=0):
        self.failures[method] = after

    def _check(self, method):
        if method not in self.failures:
            return
        if self.failures[method] == 0:
            raise PersistenceFailure(f"{method} unavailable")
        self.failures[method] -= 1

    def create_template(self, template):
        self._check("create_template")
        return super().create_template(template)

    def create_schedule_entry(self, entry):
        self._check("create_schedule_entry")
        return super().create_schedule_entry(entry)

    def update_schedule_entry(self, schedule_id, **changes):
        self._check("update_schedule_entry")
        return super().update_schedule_entry(schedule_id, **changes)

    def create_shopping_list(self, shopping_list):
        self._check("create_shopping_list")
        return super().create_shopping_list(shopping_list)


def _service(store, settings, client):
    return MealPlanService(
        store=store,
        generator=MealPlanGenerator(client, settings),
        replacement_generator=ReplacementGenerator(client, settings),
        settings=settings,
    )


@pytest.fixture
def offline_service(store, unconfigured_settings):
    return _service(store, unconfigured_settings, FakeTextClient(configured=False))


@pytest.mark.priority_high
@pytest.mark.integration
class TestPlanLifecycle:

    def test_create_plan_stores_full_schedule(self, offline_service, store, plan_config):
        plan = offline_service.create_plan(USER, plan_config)

        entries = store.find_schedule_entries(plan.plan_id)
        assert len(entries) == 21
        assert plan.is_active
        assert plan.target_calories_daily == 2000
        assert all(entry.meal_order == 1 for entry in entries)

    def test_goals_flow_into_plan_targets(self, offline_service, plan_config):
        context = UserContext(nutrition_goals={"goal_calories": 2600, "goal_protein_g": 0})

        plan = offline_service.create_plan(USER, plan_config, context)

        assert plan.target_calories_daily == 2600
        assert plan.target_protein_daily == 150

    def test_new_plan_deactivates_previous(self, offline_service, store, plan_config):
        first = offline_service.create_plan(USER, plan_config)
        second = offline_service.create_plan(USER, plan_config)

        assert store.get_plan(first.plan_id).is_active is False
        assert offline_service.get_active_plan(USER).plan_id == second.plan_id

    def test_other_users_plans_untouched(self, offline_service, store, plan_config):
        other = offline_service.create_plan("user-2", plan_config)
        offline_service.create_plan(USER, plan_config)

        assert store.get_plan(other.plan_id).is_active is True

    def test_weekly_view_has_every_day(self, offline_service, plan_config):
        offline_service.create_plan(USER, plan_config)

        weekly = offline_service.get_weekly_plan(USER)

        assert list(weekly) == DAY_NAMES
        for timings in weekly.values():
            assert sorted(timings) == ["BREAKFAST", "DINNER", "LUNCH"]
            assert all(len(meals) == 1 for meals in timings.values())

    def test_ai_plan_persisted(self, store, settings, plan_config):
        service = _service(store, settings, FakeTextClient([week_response()]))

        plan = service.create_plan(USER, plan_config)

        weekly = service.get_weekly_plan(USER, plan.plan_id)
        assert weekly["Monday"]["LUNCH"][0]["name"] == "AI Monday Lunch"

    def test_deactivate_and_not_found(self, offline_service, plan_config):
        plan = offline_service.create_plan(USER, plan_config)

        offline_service.deactivate_plan(USER, plan.plan_id)

        with pytest.raises(MealPlanNotFound):
            offline_service.get_active_plan(USER)
        with pytest.raises(MealPlanNotFound):
            offline_service.get_weekly_plan("someone-else", plan.plan_id)

    def test_duplicate_shares_templates(self, offline_service, store, plan_config):
        plan = offline_service.create_plan(USER, plan_config)

        duplicate = offline_service.duplicate_plan(USER, plan.plan_id, "Copy")

        original = store.find_schedule_entries(plan.plan_id)
        copied = store.find_schedule_entries(duplicate.plan_id)
        assert duplicate.is_active is False
        assert duplicate.name == "Copy"
        assert [e.template_id for e in copied] == [e.template_id for e in original]
        assert {e.schedule_id for e in copied}.isdisjoint(e.schedule_id for e in original)


@pytest.mark.priority_high
@pytest.mark.integration
class TestReplaceMeal:

    def test_replace_repoints_slot_and_keeps_old_template(self, offline_service, store, plan_config):
        plan = offline_service.create_plan(USER, plan_config)
        entry = store.find_schedule_entry(plan.plan_id, 1, "LUNCH", 1)
        old = store.get_template(entry.template_id)

        result = offline_service.replace_meal(USER, plan.plan_id, 1, "lunch", 1)

        new_meal = result["new_meal"]
        assert result["success"] is True
        assert new_meal.template_id != old.template_id
        assert new_meal.meal_timing == old.meal_timing
        assert new_meal.calories == old.calories
        assert store.get_template(old.template_id) is not None
        assert store.find_schedule_entry(plan.plan_id, 1, "LUNCH", 1).template_id == new_meal.template_id

    def test_replace_with_ai_meal(self, store, settings, plan_config):
        reply = json.dumps(make_meal("Miso Salmon Bowl", "DINNER", 640))
        client = FakeTextClient([week_response(), reply])
        service = _service(store, settings, client)
        plan = service.create_plan(USER, plan_config)

        result = service.replace_meal(USER, plan.plan_id, 4, "DINNER", 1)

        assert result["new_meal"].name == "Miso Salmon Bowl"
        weekly = service.get_weekly_plan(USER, plan.plan_id)
        assert weekly["Thursday"]["DINNER"][0]["name"] == "Miso Salmon Bowl"

    @pytest.mark.parametrize(
        "day,timing,order",
        [(1, "LUNCH", 2), (1, "MORNING_SNACK", 1), (1, "BRUNCH", 1)],
    )
    def test_unknown_slot(self, offline_service, plan_config, day, timing, order):
        plan = offline_service.create_plan(USER, plan_config)

        with pytest.raises(UnknownScheduleReference):
            offline_service.replace_meal(USER, plan.plan_id, day, timing, order)

    def test_unknown_plan(self, offline_service):
        with pytest.raises(MealPlanNotFound):
            offline_service.replace_meal(USER, "missing", 0, "LUNCH", 1)


@pytest.mark.priority_medium
@pytest.mark.integration
class TestShoppingAndPreferences:

    def test_each_call_is_a_new_snapshot(self, offline_service, store, plan_config):
        plan = offline_service.create_plan(USER, plan_config)

        first = offline_service.generate_shopping_list(USER, plan.plan_id, "2026-10-11")
        second = offline_service.generate_shopping_list(USER, plan.plan_id, "2026-10-11")

        assert first.shopping_list_id != second.shopping_list_id
        assert first.items == second.items
        assert first.name == "Shopping List - Week of 2026-10-11"
        assert len(store.find_shopping_lists(plan.plan_id, "2026-10-11")) == 2
        assert first.total_estimated_cost == round(
            sum(item.estimated_cost for items in first.items.values() for item in items), 2
        )

    def test_default_week_start_is_sunday(self, offline_service, plan_config):
        plan = offline_service.create_plan(USER, plan_config)

        shopping = offline_service.generate_shopping_list(USER, plan.plan_id)

        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", shopping.week_start_date)
        assert shopping.week_start_date == default_week_start("UTC")

    def test_preference_upsert(self, offline_service, store, plan_config):
        plan = offline_service.create_plan(USER, plan_config)
        template_id = store.find_schedule_entries(plan.plan_id)[0].template_id

        offline_service.save_meal_preference(USER, template_id, "rating", rating=3)
        offline_service.save_meal_preference(USER, template_id, "rating", rating=5, notes="Great")

        prefs = store.find_preferences(USER)
        assert len(prefs) == 1
        assert prefs[0].rating == 5
        assert prefs[0].notes == "Great"

    def test_preference_unknown_template(self, offline_service):
        with pytest.raises(UnknownScheduleReference):
            offline_service.save_meal_preference(USER, "missing", "favorite")

    @pytest.mark.parametrize(
        "preference_type,rating",
        [("love", None), ("rating", 6), ("rating", 0)],
    )
    def test_invalid_preference_is_domain_error(
        self, offline_service, store, plan_config, preference_type, rating
    ):
        plan = offline_service.create_plan(USER, plan_config)
        template_id = store.find_schedule_entries(plan.plan_id)[0].template_id

        with pytest.raises(InvalidMealPreference) as excinfo:
            offline_service.save_meal_preference(USER, template_id, preference_type, rating=rating)

        assert isinstance(excinfo.value, MealPlanError)
        assert store.find_preferences(USER) == []

    def test_nutrition_summary(self, offline_service, plan_config):
        plan = offline_service.create_plan(USER, plan_config)

        summary = offline_service.get_nutrition_summary(USER, plan.plan_id)

        # three meals of round(2000 / 3) kcal each day
        assert summary["weekly_summary"]["avg_daily_calories"] == 2001
        assert summary["weekly_summary"]["goal_adherence_percentage"] == 100
        assert set(summary["days"]) == set(DAY_NAMES)
        assert summary["daily_averages"]["calories"] == 2001.0


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def failing_service(failing_store, unconfigured_settings):
    return _service(failing_store, unconfigured_settings, FakeTextClient(configured=False))


@pytest.mark.priority_high
@pytest.mark.integration
class TestPersistenceFailures:
    """Store errors reach the caller and leave earlier data usable."""

    def test_schedule_failure_keeps_previous_plan_active(self, failing_service, failing_store, plan_config):
        first = failing_service.create_plan(USER, plan_config)
        failing_store.fail("create_schedule_entry", after=5)

        with pytest.raises(PersistenceFailure):
            failing_service.create_plan(USER, plan_config)

        active = failing_service.get_active_plan(USER)
        assert active.plan_id == first.plan_id
        assert len(failing_store.find_schedule_entries(active.plan_id)) == 21

        partial = [p for p in failing_store.find_plans(USER) if p.plan_id != first.plan_id]
        assert len(partial) == 1
        assert partial[0].is_active is False
        assert len(failing_store.find_schedule_entries(partial[0].plan_id)) == 5

    def test_template_failure_on_first_plan_leaves_no_active_plan(self, failing_service, failing_store, plan_config):
        failing_store.fail("create_template")

        with pytest.raises(PersistenceFailure):
            failing_service.create_plan(USER, plan_config)

        with pytest.raises(MealPlanNotFound):
            failing_service.get_active_plan(USER)

    @pytest.mark.parametrize("method", ["create_template", "update_schedule_entry"])
    def test_replace_failure_keeps_old_meal_in_slot(self, failing_service, failing_store, plan_config, method):
        plan = failing_service.create_plan(USER, plan_config)
        old_template_id = failing_store.find_schedule_entry(plan.plan_id, 2, "DINNER", 1).template_id
        failing_store.fail(method)

        with pytest.raises(PersistenceFailure):
            failing_service.replace_meal(USER, plan.plan_id, 2, "DINNER", 1)

        entry = failing_store.find_schedule_entry(plan.plan_id, 2, "DINNER", 1)
        assert entry.template_id == old_template_id
        weekly = failing_service.get_weekly_plan(USER, plan.plan_id)
        assert weekly["Tuesday"]["DINNER"][0]["template_id"] == old_template_id

    def test_shopping_list_failure_stores_nothing(self, failing_service, failing_store, plan_config):
        plan = failing_service.create_plan(USER, plan_config)
        failing_store.fail("create_shopping_list")

        with pytest.raises(PersistenceFailure):
            failing_service.generate_shopping_list(USER, plan.plan_id, "2026-10-11")

        assert failing_store.find_shopping_lists(plan.plan_id, "2026-10-11") == []
