"""
Fluent builder for condition trees.

Usage:
    from rilay.core.conditions import when

    show_vat = when("country").in_(["FR", "BE"]).and_(when("company.vat").not_exists())

Every builder method returns a new immutable ``ComparisonCondition``; the
builder itself only remembers the field path.
"""

from __future__ import annotations

import re
from typing import Any

from rilay.core.errors import ConditionConfigError
from rilay.core.ir.conditions import (
    ComparisonCondition,
    CompoundCondition,
    ConditionOperator,
    ConditionValue,
    LogicalOperator,
    coerce_condition,
)

Scalar = str | int | float | bool


class ConditionBuilder:
    """Starting point for a leaf condition on one data path."""

    __slots__ = ("_field",)

    def __init__(self, field: str):
        if not isinstance(field, str) or not field.strip():
            raise ConditionConfigError("when() needs a non-empty field path")
        self._field = field

    @property
    def field(self) -> str:
        return self._field

    def __repr__(self) -> str:
        return f"when({self._field!r})"

    def _leaf(self, operator: ConditionOperator, value: ConditionValue = None) -> ComparisonCondition:
        return ComparisonCondition(field=self._field, operator=operator, value=value)

    def equals(self, value: ConditionValue) -> ComparisonCondition:
        return self._leaf(ConditionOperator.EQUALS, value)

    def not_equals(self, value: ConditionValue) -> ComparisonCondition:
        return self._leaf(ConditionOperator.NOT_EQUALS, value)

    def greater_than(self, value: int | float) -> ComparisonCondition:
        return self._leaf(ConditionOperator.GREATER_THAN, value)

    def less_than(self, value: int | float) -> ComparisonCondition:
        return self._leaf(ConditionOperator.LESS_THAN, value)

    def greater_than_or_equal(self, value: int | float) -> ComparisonCondition:
        return self._leaf(ConditionOperator.GREATER_THAN_OR_EQUAL, value)

    def less_than_or_equal(self, value: int | float) -> ComparisonCondition:
        return self._leaf(ConditionOperator.LESS_THAN_OR_EQUAL, value)

    def contains(self, value: Scalar) -> ComparisonCondition:
        return self._leaf(ConditionOperator.CONTAINS, value)

    def not_contains(self, value: Scalar) -> ComparisonCondition:
        return self._leaf(ConditionOperator.NOT_CONTAINS, value)

    def in_(self, values: list[Scalar] | tuple[Scalar, ...]) -> ComparisonCondition:
        return self._leaf(ConditionOperator.IN, list(values))

    def not_in(self, values: list[Scalar] | tuple[Scalar, ...]) -> ComparisonCondition:
        return self._leaf(ConditionOperator.NOT_IN, list(values))

    def matches(self, pattern: str | re.Pattern[str]) -> ComparisonCondition:
        """Regex search (not anchored). Compiled patterns keep only their source."""
        if isinstance(pattern, re.Pattern):
            pattern = pattern.pattern
        return self._leaf(ConditionOperator.MATCHES, pattern)

    def exists(self) -> ComparisonCondition:
        return self._leaf(ConditionOperator.EXISTS)

    def not_exists(self) -> ComparisonCondition:
        return self._leaf(ConditionOperator.NOT_EXISTS)

    def build(self) -> ComparisonCondition:
        """A bare ``when(field)`` means the field exists."""
        return self.exists()

    def and_(self, other: Any) -> CompoundCondition:
        return self.build().and_(other)

    def or_(self, other: Any) -> CompoundCondition:
        return self.build().or_(other)


def when(field: str) -> ConditionBuilder:
    """Start a condition on ``field`` (a dot-separated data path)."""
    return ConditionBuilder(field)


def all_of(*conditions: Any) -> CompoundCondition:
    """Flat AND over any number of conditions."""
    return _group(LogicalOperator.AND, conditions)


def any_of(*conditions: Any) -> CompoundCondition:
    """Flat OR over any number of conditions."""
    return _group(LogicalOperator.OR, conditions)


def _group(logic: LogicalOperator, conditions: tuple[Any, ...]) -> CompoundCondition:
    if not conditions:
        raise ConditionConfigError(f"{logic} group needs at least one condition")
    return CompoundCondition(
        logical_operator=logic,
        conditions=tuple(coerce_condition(condition) for condition in conditions),
    )
