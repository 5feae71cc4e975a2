"""
Dependency extraction for condition trees.

Lists the data paths a condition reads, so a dependency graph knows which
conditions to re-evaluate when a given path changes:

    condition = when("field1").equals("value").and_(when("step1.field2").exists())
    extract_condition_dependencies(condition)
    # ["field1", "step1.field2"]
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from rilay.core.ir.conditions import (
    ComparisonCondition,
    CompoundCondition,
    ConditionalBehavior,
    StepConditionalBehavior,
)

AnyCondition = ComparisonCondition | CompoundCondition
AnyBehavior = ConditionalBehavior | StepConditionalBehavior


def extract_condition_dependencies(condition: AnyCondition | None) -> list[str]:
    """Data paths a condition reads, deduplicated, in first-seen order."""
    if condition is None:
        return []
    seen: dict[str, None] = {}
    _collect(condition, seen)
    return list(seen)


def _collect(condition: AnyCondition, seen: dict[str, None]) -> None:
    if isinstance(condition, CompoundCondition):
        for child in condition.conditions:
            _collect(child, seen)
    elif condition.field.strip():
        seen.setdefault(condition.field)


def extract_all_dependencies(
    behaviors: Mapping[str, AnyCondition | None] | AnyBehavior,
) -> list[str]:
    """Union of the dependencies of every named condition.

    Args:
        behaviors: Named conditions, e.g. ``{"visible": ..., "required": ...}``,
            or a field/step behavior model.
    """
    if isinstance(behaviors, (ConditionalBehavior, StepConditionalBehavior)):
        behaviors = behaviors.slots()
    return _union(extract_condition_dependencies(c) for c in behaviors.values() if c is not None)


def _union(groups: Iterable[list[str]]) -> list[str]:
    seen: dict[str, None] = {}
    for group in groups:
        for path in group:
            seen.setdefault(path)
    return list(seen)
