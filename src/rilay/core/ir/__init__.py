"""
rilay Intermediate Representation (IR) types.

All types are re-exported from this package.
"""

from .conditions import (
    ComparisonCondition,
    CompoundCondition,
    Condition,
    ConditionalBehavior,
    ConditionEvaluationResult,
    ConditionOperator,
    ConditionValue,
    LogicalOperator,
    StepConditionalBehavior,
    StepConditionResult,
    condition_from_config,
    condition_to_config,
)

__all__ = [
    "ComparisonCondition",
    "CompoundCondition",
    "Condition",
    "ConditionEvaluationResult",
    "ConditionOperator",
    "ConditionValue",
    "ConditionalBehavior",
    "LogicalOperator",
    "StepConditionResult",
    "StepConditionalBehavior",
    "condition_from_config",
    "condition_to_config",
]
