"""Tests for field/step behavior evaluation and repeatable scoping."""

from __future__ import annotations

from rilay.core.conditions import (
    evaluate,
    evaluate_behavior,
    evaluate_behaviors,
    evaluate_step_behavior,
    scope_conditions,
    when,
)
from rilay.core.ir import (
    CompoundCondition,
    ConditionalBehavior,
    ConditionEvaluationResult,
    StepConditionalBehavior,
    StepConditionResult,
)


class TestEvaluateBehavior:
    def test_no_behavior_uses_defaults(self) -> None:
        assert evaluate_behavior(None, {}) == ConditionEvaluationResult(
            visible=True, disabled=False, required=False, readonly=False
        )

    def test_custom_defaults(self) -> None:
        defaults = ConditionEvaluationResult(visible=False)
        assert evaluate_behavior(None, {}, defaults) is defaults
        result = evaluate_behavior(ConditionalBehavior(required=when("a").exists()), {"a": 1}, defaults)
        assert result.visible is False
        assert result.required is True

    def test_all_slots(self) -> None:
        behavior = ConditionalBehavior(
            visible=when("type").equals("company"),
            disabled=when("locked").equals(True),
            required=when("country").in_(["FR", "BE"]),
            readonly=when("status").equals("submitted"),
        )
        data = {"type": "company", "locked": False, "country": "FR", "status": "draft"}
        assert evaluate_behavior(behavior, data) == ConditionEvaluationResult(
            visible=True, disabled=False, required=True, readonly=False
        )

    def test_missing_data_hides(self) -> None:
        behavior = ConditionalBehavior(visible=when("age").greater_than(18))
        assert evaluate_behavior(behavior, {}).visible is False

    def test_many(self) -> None:
        results = evaluate_behaviors(
            {
                "phone": ConditionalBehavior(visible=when("contact").equals("phone")),
                "email": ConditionalBehavior(visible=when("contact").equals("email")),
                "notes": None,
            },
            {"contact": "phone"},
        )
        assert results["phone"].visible is True
        assert results["email"].visible is False
        assert results["notes"] == ConditionEvaluationResult()


class TestEvaluateStepBehavior:
    def test_no_behavior(self) -> None:
        assert evaluate_step_behavior(None, {}) == StepConditionResult(visible=True, skippable=False)
        assert evaluate_step_behavior(None, {}, allow_skip=True).skippable is True

    def test_conditions(self) -> None:
        behavior = StepConditionalBehavior(
            visible=when("plan").not_equals("free"),
            skippable=when("hasCompany").equals(False),
        )
        result = evaluate_step_behavior(behavior, {"plan": "pro", "hasCompany": False})
        assert result == StepConditionResult(visible=True, skippable=True)

    def test_allow_skip_wins(self) -> None:
        behavior = StepConditionalBehavior(skippable=when("x").equals(1))
        assert evaluate_step_behavior(behavior, {"x": 2}).skippable is False
        assert evaluate_step_behavior(behavior, {"x": 2}, allow_skip=True).skippable is True


class TestScopeConditions:
    template_fields = {"name", "qty", "price", "type"}

    def test_template_reference_prefixed(self) -> None:
        behavior = ConditionalBehavior(visible=when("type").equals("physical"))
        scoped = scope_conditions(behavior, "items", "k2", self.template_fields)
        assert scoped.visible == when("items[k2].type").equals("physical")

    def test_global_reference_untouched(self) -> None:
        behavior = ConditionalBehavior(visible=when("country").equals("US"))
        scoped = scope_conditions(behavior, "items", "k2", self.template_fields)
        assert scoped.visible == behavior.visible

    def test_nested_and_all_slots(self) -> None:
        behavior = ConditionalBehavior(
            visible=when("type").equals("physical").or_(
                when("qty").greater_than(0).and_(when("country").equals("US"))
            ),
            disabled=when("name").equals("locked"),
        )
        scoped = scope_conditions(behavior, "items", "k0", self.template_fields)

        assert isinstance(scoped.visible, CompoundCondition)
        assert scoped.visible.dependencies() == ["items[k0].type", "items[k0].qty", "country"]
        assert scoped.disabled == when("items[k0].name").equals("locked")
        assert scoped.required is None

    def test_input_behavior_unchanged(self) -> None:
        behavior = ConditionalBehavior(visible=when("type").equals("physical"))
        scope_conditions(behavior, "items", "k1", self.template_fields)
        assert behavior.visible == when("type").equals("physical")

    def test_scoped_condition_reads_flat_item_values(self) -> None:
        behavior = ConditionalBehavior(
            visible=when("type").equals("physical").and_(when("country").equals("US"))
        )
        scoped = scope_conditions(behavior, "items", "k1", self.template_fields)
        data = {"country": "US", "items[k0].type": "digital", "items[k1].type": "physical"}
        assert evaluate(scoped.visible, data) is True
