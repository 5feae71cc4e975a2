"""
rilay condition engine.

Builder, evaluator, dependency extraction and dependency graph for the
conditions attached to form fields and workflow steps.

Usage:
    from rilay.core.conditions import ConditionDependencyGraph, evaluate, when

    condition = when("age").greater_than(18)
    evaluate(condition, {"age": 25})
    # True
"""

from rilay.core.conditions.behaviors import (
    evaluate_behavior,
    evaluate_behaviors,
    evaluate_step_behavior,
    scope_conditions,
)
from rilay.core.conditions.builder import ConditionBuilder, all_of, any_of, when
from rilay.core.conditions.dependencies import (
    extract_all_dependencies,
    extract_condition_dependencies,
)
from rilay.core.conditions.evaluator import MISSING, evaluate, resolve_path
from rilay.core.conditions.graph import ConditionDependencyGraph
from rilay.core.conditions.tracker import ConditionTracker, collect_changed_paths

__all__ = [
    "MISSING",
    "ConditionBuilder",
    "ConditionDependencyGraph",
    "ConditionTracker",
    "all_of",
    "any_of",
    "collect_changed_paths",
    "evaluate",
    "evaluate_behavior",
    "evaluate_behaviors",
    "evaluate_step_behavior",
    "extract_all_dependencies",
    "extract_condition_dependencies",
    "resolve_path",
    "scope_conditions",
    "when",
]
