"""Tests for incremental condition re-evaluation."""

from __future__ import annotations

import pytest

from rilay.core.conditions import ConditionTracker, collect_changed_paths, when
from rilay.core.ir import ConditionalBehavior, ConditionEvaluationResult


class TestCollectChangedPaths:
    def test_no_change(self) -> None:
        assert collect_changed_paths({"a": 1, "b": {"c": 2}}, {"a": 1, "b": {"c": 2}}) == []

    def test_scalar_change(self) -> None:
        assert collect_changed_paths({"a": 1, "b": 2}, {"a": 1, "b": 3}) == ["b"]

    def test_nested_change_reports_ancestors(self) -> None:
        previous = {"address": {"city": "Paris", "zip": "75001"}}
        current = {"address": {"city": "Lyon", "zip": "75001"}}
        assert collect_changed_paths(previous, current) == ["address", "address.city"]

    def test_added_and_removed_keys(self) -> None:
        assert collect_changed_paths({"a": 1}, {"b": 1}) == ["a", "b"]

    def test_type_change(self) -> None:
        assert collect_changed_paths({"flag": 1}, {"flag": True}) == ["flag"]

    def test_mapping_replaced_by_scalar(self) -> None:
        assert collect_changed_paths({"a": {"b": 1}}, {"a": None}) == ["a", "a.b"]

    def test_subtree_added(self) -> None:
        assert collect_changed_paths({}, {"user": {"age": 25, "name": "Ann"}}) == [
            "user",
            "user.age",
            "user.name",
        ]

    def test_subtree_removed(self) -> None:
        assert collect_changed_paths({"user": {"age": 25}}, {}) == ["user", "user.age"]

    def test_list_grows(self) -> None:
        assert collect_changed_paths({"tags": ["a"]}, {"tags": ["a", "b"]}) == ["tags", "tags.1"]

    def test_list_item_change(self) -> None:
        previous = {"items": [{"qty": 1}, {"qty": 2}]}
        current = {"items": [{"qty": 5}, {"qty": 2}]}
        assert collect_changed_paths(previous, current) == ["items", "items.0", "items.0.qty"]

    def test_mapping_replaced_by_list(self) -> None:
        assert collect_changed_paths({"a": {}}, {"a": []}) == ["a"]


@pytest.fixture
def tracker() -> ConditionTracker:
    return ConditionTracker(
        {
            "phone": ConditionalBehavior(visible=when("contact").equals("phone")),
            "email": ConditionalBehavior(visible=when("contact").equals("email")),
            "city": ConditionalBehavior(required=when("address").exists()),
            "notes": None,
        }
    )


class TestConditionTracker:
    def test_evaluate_all(self, tracker: ConditionTracker) -> None:
        results = tracker.evaluate_all({"contact": "email"})
        assert results["phone"].visible is False
        assert results["email"].visible is True
        assert results["city"].required is False
        assert results["notes"] == ConditionEvaluationResult()

    def test_update_reports_only_changed_fields(self, tracker: ConditionTracker) -> None:
        tracker.evaluate_all({"contact": "email"})
        changed = tracker.update({"contact": "phone"})
        assert set(changed) == {"phone", "email"}
        assert changed["phone"].visible is True
        assert changed["email"].visible is False
        assert tracker.is_visible("phone") is True

    def test_update_without_change(self, tracker: ConditionTracker) -> None:
        tracker.evaluate_all({"contact": "email"})
        assert tracker.update({"contact": "email"}) == {}

    def test_unrelated_change(self, tracker: ConditionTracker) -> None:
        tracker.evaluate_all({"contact": "email"})
        assert tracker.update({"contact": "email", "other": 1}) == {}

    def test_nested_change_notifies_ancestor_dependency(self, tracker: ConditionTracker) -> None:
        tracker.evaluate_all({"contact": "email"})
        changed = tracker.update({"contact": "email", "address": {"city": "Paris"}})
        assert list(changed) == ["city"]
        assert tracker.is_required("city") is True

    def test_first_update_evaluates_everything(self, tracker: ConditionTracker) -> None:
        changed = tracker.update({"contact": "phone"})
        assert set(changed) == {"phone", "email", "city", "notes"}

    def test_explicit_changed_paths(self, tracker: ConditionTracker) -> None:
        tracker.evaluate_all({"contact": "email"})
        assert tracker.update({"contact": "phone"}, changed_paths=["unrelated"]) == {}
        assert tracker.is_visible("phone") is False

    def test_in_place_mutation_detected(self, tracker: ConditionTracker) -> None:
        data = {"contact": "email"}
        tracker.evaluate_all(data)
        data["contact"] = "phone"
        assert set(tracker.update(data)) == {"phone", "email"}

    def test_register_after_data(self, tracker: ConditionTracker) -> None:
        tracker.evaluate_all({"contact": "phone", "vip": True})
        tracker.register("discount", ConditionalBehavior(visible=when("vip").equals(True)))
        assert tracker.is_visible("discount") is True
        assert tracker.graph.get_affected_fields("vip") == ["discount"]

    def test_unregister(self, tracker: ConditionTracker) -> None:
        tracker.evaluate_all({"contact": "phone"})
        tracker.unregister("phone")
        assert tracker.get_result("phone") is None
        assert tracker.graph.get_affected_fields("contact") == ["email"]
        assert set(tracker.update({"contact": "email"})) == {"email"}

    def test_defaults_for_unknown_field(self, tracker: ConditionTracker) -> None:
        assert tracker.is_visible("unknown") is True
        assert tracker.is_disabled("unknown") is False
        assert tracker.is_readonly("unknown") is False


# =============================================================================
# Nested data
# =============================================================================


class TestNestedUpdates:
    def test_subtree_added(self) -> None:
        tracker = ConditionTracker({"adult": ConditionalBehavior(visible=when("user.age").greater_than(18))})
        tracker.evaluate_all({})
        changed = tracker.update({"user": {"age": 25}})
        assert list(changed) == ["adult"]
        assert tracker.is_visible("adult") is True

    def test_subtree_replaced_by_none(self) -> None:
        tracker = ConditionTracker({"f": ConditionalBehavior(visible=when("a.b").exists())})
        tracker.evaluate_all({"a": {"b": 1}})
        assert tracker.is_visible("f") is True
        tracker.update({"a": None})
        assert tracker.is_visible("f") is False

    def test_list_item_change(self) -> None:
        tracker = ConditionTracker({"bulk": ConditionalBehavior(visible=when("items.0.qty").greater_than(3))})
        tracker.evaluate_all({"items": [{"qty": 1}]})
        assert tracker.is_visible("bulk") is False
        tracker.update({"items": [{"qty": 5}]})
        assert tracker.is_visible("bulk") is True
