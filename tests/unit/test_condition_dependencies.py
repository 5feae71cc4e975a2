"""Tests for condition dependency extraction."""

from __future__ import annotations

from rilay.core.conditions import (
    all_of,
    extract_all_dependencies,
    extract_condition_dependencies,
    when,
)
from rilay.core.ir import ComparisonCondition, ConditionalBehavior, StepConditionalBehavior


class TestExtractConditionDependencies:
    def test_none(self) -> None:
        assert extract_condition_dependencies(None) == []

    def test_leaf(self) -> None:
        assert extract_condition_dependencies(when("step1.field1").equals("x")) == ["step1.field1"]

    def test_combinator(self) -> None:
        condition = when("field1").equals("value").and_(when("field2").exists())
        assert extract_condition_dependencies(condition) == ["field1", "field2"]

    def test_deduplicated(self) -> None:
        condition = when("x").equals(1).or_(when("x").not_equals(2))
        assert extract_condition_dependencies(condition) == ["x"]

    def test_first_seen_order(self) -> None:
        condition = all_of(when("b").exists(), when("a").exists(), when("b").equals(1))
        assert extract_condition_dependencies(condition) == ["b", "a"]

    def test_deeply_nested(self) -> None:
        condition = when("f0").exists()
        for i in range(1, 40):
            condition = condition.or_(when(f"f{i}").exists())
        assert extract_condition_dependencies(condition) == [f"f{i}" for i in range(40)]

    def test_blank_field_skipped(self) -> None:
        blank = ComparisonCondition.model_construct(field="  ")
        condition = all_of(blank, when("a").exists())
        assert extract_condition_dependencies(condition) == ["a"]

    def test_method_form(self) -> None:
        assert when("a").exists().and_(when("b").exists()).dependencies() == ["a", "b"]


class TestExtractAllDependencies:
    def test_mapping(self) -> None:
        behaviors = {
            "visible": when("a").exists(),
            "disabled": None,
            "required": when("b").exists().and_(when("a").equals(1)),
        }
        assert extract_all_dependencies(behaviors) == ["a", "b"]

    def test_empty(self) -> None:
        assert extract_all_dependencies({}) == []
        assert extract_all_dependencies(ConditionalBehavior()) == []

    def test_field_behavior(self) -> None:
        behavior = ConditionalBehavior(
            visible=when("country").equals("FR"),
            readonly=when("locked").equals(True),
        )
        assert extract_all_dependencies(behavior) == ["country", "locked"]

    def test_step_behavior(self) -> None:
        behavior = StepConditionalBehavior(
            visible=when("plan").equals("pro"),
            skippable=when("plan").equals("free"),
        )
        assert extract_all_dependencies(behavior) == ["plan"]
