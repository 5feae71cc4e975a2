"""
Evaluate the conditional behaviors of fields and workflow steps.

A field's behavior has up to four conditions (visible, disabled, required,
readonly); a step's has two (visible, skippable). An absent condition leaves
the slot at its default.
"""

from __future__ import annotations

from collections.abc import Mapping, Set

from rilay.core.conditions.evaluator import DataContext, evaluate
from rilay.core.ir.conditions import (
    ComparisonCondition,
    CompoundCondition,
    ConditionalBehavior,
    ConditionEvaluationResult,
    StepConditionalBehavior,
    StepConditionResult,
)

DEFAULT_RESULT = ConditionEvaluationResult()


def evaluate_behavior(
    behavior: ConditionalBehavior | None,
    data: DataContext,
    defaults: ConditionEvaluationResult = DEFAULT_RESULT,
) -> ConditionEvaluationResult:
    """Evaluate every condition of a field behavior.

    Args:
        behavior: The field's conditions, or None.
        data: Current form/workflow values.
        defaults: State used for slots without a condition.
    """
    if behavior is None:
        return defaults
    return ConditionEvaluationResult(
        visible=_slot(behavior.visible, data, defaults.visible),
        disabled=_slot(behavior.disabled, data, defaults.disabled),
        required=_slot(behavior.required, data, defaults.required),
        readonly=_slot(behavior.readonly, data, defaults.readonly),
    )


def evaluate_behaviors(
    behaviors: Mapping[str, ConditionalBehavior | None], data: DataContext
) -> dict[str, ConditionEvaluationResult]:
    """Evaluate many fields at once, keyed by field id."""
    return {field_id: evaluate_behavior(behavior, data) for field_id, behavior in behaviors.items()}


def evaluate_step_behavior(
    behavior: StepConditionalBehavior | None,
    data: DataContext,
    allow_skip: bool = False,
) -> StepConditionResult:
    """Evaluate a workflow step.

    A step is skippable if ``allow_skip`` is set or its skippable condition
    holds.
    """
    if behavior is None:
        return StepConditionResult(visible=True, skippable=allow_skip)
    return StepConditionResult(
        visible=_slot(behavior.visible, data, True),
        skippable=allow_skip or _slot(behavior.skippable, data, False),
    )


def _slot(
    condition: ComparisonCondition | CompoundCondition | None, data: DataContext, default: bool
) -> bool:
    if condition is None:
        return default
    return evaluate(condition, data)


# =============================================================================
# Repeatable groups
# =============================================================================


def scope_conditions(
    behavior: ConditionalBehavior,
    repeatable_id: str,
    item_key: str,
    template_field_ids: Set[str],
) -> ConditionalBehavior:
    """Point a template field's conditions at one repeatable item.

    References to fields of the template become ``items[k2].type``;
    references to fields outside the template are left unchanged.

    Args:
        behavior: Conditions declared on the template field.
        repeatable_id: The repeatable group id (``items``).
        item_key: Stable key of the item (``k2``).
        template_field_ids: Ids of the fields the template declares.
    """
    return ConditionalBehavior(
        **{
            slot: _scope(condition, repeatable_id, item_key, template_field_ids)
            for slot, condition in behavior.slots().items()
            if condition is not None
        }
    )


def _scope(
    condition: ComparisonCondition | CompoundCondition,
    repeatable_id: str,
    item_key: str,
    template_field_ids: Set[str],
) -> ComparisonCondition | CompoundCondition:
    if isinstance(condition, CompoundCondition):
        return condition.model_copy(
            update={
                "conditions": tuple(
                    _scope(child, repeatable_id, item_key, template_field_ids)
                    for child in condition.conditions
                )
            }
        )
    if condition.field in template_field_ids:
        return condition.model_copy(update={"field": f"{repeatable_id}[{item_key}].{condition.field}"})
    return condition
