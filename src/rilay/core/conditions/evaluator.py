"""
Condition evaluator for rilay condition trees.

Evaluates condition nodes against a data context (nested dict of field
values). Pure evaluation: no I/O, no side effects, never raises for a
well-formed condition. Comparisons that cannot be made (missing value,
mismatched types, unknown operator) are False, so an indeterminate
visibility condition hides rather than shows.
"""

from __future__ import annotations

import functools
import logging
import re
from collections.abc import Callable, Mapping
from typing import Any, Final

from rilay.core.ir.conditions import (
    ComparisonCondition,
    CompoundCondition,
    ConditionOperator,
    LogicalOperator,
)

logger = logging.getLogger(__name__)

DataContext = Mapping[str, Any]

# Flat key of one repeatable item field, e.g. "items[k0].qty"
_REPEATABLE_KEY = re.compile(r"^[^.\[\]]+\[[^.\[\]]+\]\.")


class _Missing:
    """Marker for a path that does not resolve (distinct from ``None``)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


def evaluate(condition: ComparisonCondition | CompoundCondition, data: DataContext) -> bool:
    """Evaluate a condition tree against a data context.

    Args:
        condition: Leaf or compound condition.
        data: Dict of field name -> value. Nested dicts for dotted paths.

    Returns:
        True if the condition holds.
    """
    if isinstance(condition, CompoundCondition):
        results = (evaluate(child, data) for child in condition.conditions)
        if condition.logical_operator == LogicalOperator.OR:
            return any(results)
        return all(results)

    field_value = resolve_path(data, condition.field)
    comparator = _COMPARATORS.get(condition.operator)
    if comparator is None:
        return False
    return comparator(field_value, condition.value)


def resolve_path(data: Any, path: str) -> Any:
    """Resolve a dotted path like ``user.profile.age`` against nested data.

    Mappings are traversed by key, lists and tuples by numeric segment.
    Repeatable item fields are stored flat under keys like
    ``items[k0].qty``; such a path is also looked up as a literal top-level
    key when the walk finds nothing. Plain dotted paths never are.

    Returns:
        The resolved value, or ``MISSING`` if any segment is absent or an
        intermediate value is not a container.
    """
    value = _walk(data, path)
    if (
        value is MISSING
        and isinstance(data, Mapping)
        and _REPEATABLE_KEY.match(path)
        and path in data
    ):
        return data[path]
    return value


def _walk(data: Any, path: str) -> Any:
    current = data
    for segment in path.split("."):
        if isinstance(current, Mapping):
            if segment not in current:
                return MISSING
            current = current[segment]
        elif isinstance(current, (list, tuple)) and segment.isascii() and segment.isdigit():
            index = int(segment)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


# =============================================================================
# Comparisons
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without coercion.

    ``True`` is not ``1``, ``"1"`` is not ``1``, a missing value equals
    nothing but itself, and containers are only equal to themselves.
    """
    if left is MISSING or right is MISSING:
        return left is right
    if _is_number(left) and _is_number(right):
        return left == right
    if isinstance(left, (Mapping, list, tuple)) or isinstance(right, (Mapping, list, tuple)):
        return left is right
    return type(left) is type(right) and left == right


def _equals(field_value: Any, expected: Any) -> bool:
    return strict_equals(field_value, expected)


def _not_equals(field_value: Any, expected: Any) -> bool:
    return not strict_equals(field_value, expected)


def _numeric(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def comparator(field_value: Any, expected: Any) -> bool:
        return _is_number(field_value) and _is_number(expected) and compare(field_value, expected)

    return comparator


def _includes(items: list[Any] | tuple[Any, ...], value: Any) -> bool:
    return any(strict_equals(item, value) for item in items)


def _contains(field_value: Any, expected: Any) -> bool:
    if isinstance(field_value, str) and isinstance(expected, str):
        return expected in field_value
    if isinstance(field_value, (list, tuple)):
        return _includes(field_value, expected)
    return False


def _not_contains(field_value: Any, expected: Any) -> bool:
    if isinstance(field_value, str) and isinstance(expected, str):
        return expected not in field_value
    if isinstance(field_value, (list, tuple)):
        return not _includes(field_value, expected)
    return False


def _in(field_value: Any, expected: Any) -> bool:
    return isinstance(expected, (list, tuple)) and _includes(expected, field_value)


def _not_in(field_value: Any, expected: Any) -> bool:
    return isinstance(expected, (list, tuple)) and not _includes(expected, field_value)


@functools.lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.warning("Invalid pattern %r in condition: %s", pattern, e)
        return None


def _matches(field_value: Any, expected: Any) -> bool:
    if not isinstance(field_value, str) or not isinstance(expected, str):
        return False
    compiled = _compile(expected)
    return compiled is not None and compiled.search(field_value) is not None


def _exists(field_value: Any, expected: Any) -> bool:
    return field_value is not MISSING and field_value is not None


def _not_exists(field_value: Any, expected: Any) -> bool:
    return field_value is MISSING or field_value is None


_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    ConditionOperator.EQUALS: _equals,
    ConditionOperator.NOT_EQUALS: _not_equals,
    ConditionOperator.GREATER_THAN: _numeric(lambda a, b: a > b),
    ConditionOperator.LESS_THAN: _numeric(lambda a, b: a < b),
    ConditionOperator.GREATER_THAN_OR_EQUAL: _numeric(lambda a, b: a >= b),
    ConditionOperator.LESS_THAN_OR_EQUAL: _numeric(lambda a, b: a <= b),
    ConditionOperator.CONTAINS: _contains,
    ConditionOperator.NOT_CONTAINS: _not_contains,
    ConditionOperator.IN: _in,
    ConditionOperator.NOT_IN: _not_in,
    ConditionOperator.MATCHES: _matches,
    ConditionOperator.EXISTS: _exists,
    ConditionOperator.NOT_EXISTS: _not_exists,
}
