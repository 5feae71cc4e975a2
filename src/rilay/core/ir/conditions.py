"""
Condition expression types for rilay IR.

This module contains the condition tree attached to form fields and workflow
steps (visible / disabled / required / readonly / skippable), the behavior
containers holding those conditions, and the evaluated results handed back
to the host form layer.

Condition nodes are immutable. Combining two nodes always produces a new
``CompoundCondition``:

    when("a").equals(1).and_(when("b").equals(2))
    # CompoundCondition(and, [a == 1, b == 2])
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import StrEnum
from typing import TYPE_CHECKING, Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from rilay.core.errors import ConditionConfigError, ErrorContext

if TYPE_CHECKING:
    from rilay.core.conditions.evaluator import DataContext

logger = logging.getLogger(__name__)


class ConditionOperator(StrEnum):
    """Operators for leaf conditions."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_THAN_OR_EQUAL = "greaterThanOrEqual"
    LESS_THAN_OR_EQUAL = "lessThanOrEqual"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    IN = "in"
    NOT_IN = "notIn"
    MATCHES = "matches"
    EXISTS = "exists"
    NOT_EXISTS = "notExists"


class LogicalOperator(StrEnum):
    """Logical operators for combining conditions."""

    AND = "and"
    OR = "or"

    @classmethod
    def _missing_(cls, value: object) -> LogicalOperator | None:
        # Configs written by hand often use "AND" / "OR"
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


ScalarValue = str | int | float | bool | None
ConditionValue = ScalarValue | list[str | int | float | bool]


class _ConditionNode(BaseModel):
    """Shared combinators for condition nodes."""

    model_config = ConfigDict(frozen=True)

    def and_(self, other: Any) -> CompoundCondition:
        """Return ``self AND other`` as a new node."""
        return CompoundCondition(
            logical_operator=LogicalOperator.AND, conditions=(self, coerce_condition(other))
        )

    def or_(self, other: Any) -> CompoundCondition:
        """Return ``self OR other`` as a new node."""
        return CompoundCondition(
            logical_operator=LogicalOperator.OR, conditions=(self, coerce_condition(other))
        )

    def __and__(self, other: Any) -> CompoundCondition:
        return self.and_(other)

    def __or__(self, other: Any) -> CompoundCondition:
        return self.or_(other)

    def evaluate(self, data: DataContext) -> bool:
        """Evaluate this condition against a data context."""
        from rilay.core.conditions.evaluator import evaluate

        return evaluate(self, data)  # type: ignore[arg-type]

    def dependencies(self) -> list[str]:
        """Data paths this condition reads, in first-seen order."""
        from rilay.core.conditions.dependencies import extract_condition_dependencies

        return extract_condition_dependencies(self)  # type: ignore[arg-type]


class ComparisonCondition(_ConditionNode):
    """
    A leaf condition testing one data path.

    Examples:
        - age greaterThan 18
        - user.profile.country in [FR, BE]
        - email exists
    """

    kind: Literal["comparison"] = "comparison"
    field: str = Field(description="Dot-separated data path")
    operator: ConditionOperator = ConditionOperator.EXISTS
    value: ConditionValue = None

    @field_validator("field")
    @classmethod
    def _field_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("a comparison condition needs a field path")
        return value

    def __str__(self) -> str:
        if self.operator in (ConditionOperator.EXISTS, ConditionOperator.NOT_EXISTS):
            return f"{self.field} {self.operator}"
        return f"{self.field} {self.operator} {self.value!r}"


class CompoundCondition(_ConditionNode):
    """
    A logical combination of child conditions.

    ``a.and_(b).and_(c)`` nests as ``And(And(a, b), c)``; use
    :func:`rilay.core.conditions.builder.all_of` for a flat node.
    """

    kind: Literal["compound"] = "compound"
    logical_operator: LogicalOperator = LogicalOperator.AND
    conditions: tuple[Condition, ...] = Field(min_length=1)

    def __str__(self) -> str:
        joined = f" {self.logical_operator} ".join(str(child) for child in self.conditions)
        return f"({joined})"


Condition = Annotated[ComparisonCondition | CompoundCondition, Field(discriminator="kind")]

CompoundCondition.model_rebuild()


# =============================================================================
# Config (wire) form
# =============================================================================


def condition_from_config(
    config: Mapping[str, Any] | ComparisonCondition | CompoundCondition,
    *,
    strict: bool = True,
    source: str | None = None,
) -> ComparisonCondition | CompoundCondition:
    """Build a condition tree from its flat config form.

    The config form is ``{field, operator, value?, conditions?,
    logicalOperator?}``. A node is a combinator iff ``conditions`` is
    non-empty, in which case its own field/operator/value are ignored.

    Args:
        config: Config mapping (typically decoded JSON) or an existing node.
        strict: Reject unknown operator names. When False, the leaf is kept
            and evaluates to False.
        source: Optional label used in error messages.

    Raises:
        ConditionConfigError: If the config is malformed.
    """
    return _from_config(config, [], strict, source)


def _from_config(
    config: Any, path: list[int], strict: bool, source: str | None
) -> ComparisonCondition | CompoundCondition:
    if isinstance(config, (ComparisonCondition, CompoundCondition)):
        return config

    context = ErrorContext(path=path, source=source)
    if not isinstance(config, Mapping):
        raise ConditionConfigError(
            f"Expected a condition mapping, got {type(config).__name__}", context
        )

    children = config.get("conditions") or []
    if children:
        raw_logic = config.get("logicalOperator", config.get("logical_operator")) or "and"
        try:
            logic = LogicalOperator(raw_logic)
        except ValueError:
            raise ConditionConfigError(f"Unknown logical operator: {raw_logic!r}", context) from None
        return CompoundCondition(
            logical_operator=logic,
            conditions=tuple(
                _from_config(child, [*path, index], strict, source)
                for index, child in enumerate(children)
            ),
        )

    field = config.get("field") or ""
    if not isinstance(field, str) or not field.strip():
        raise ConditionConfigError("Condition has no field path", context)

    raw_operator = config.get("operator", ConditionOperator.EXISTS)
    if not isinstance(raw_operator, str):
        raise ConditionConfigError(f"Operator must be a string, got {raw_operator!r}", context)
    value = config.get("value")
    try:
        operator = ConditionOperator(raw_operator)
    except ValueError:
        if strict:
            raise ConditionConfigError(f"Unknown operator: {raw_operator!r}", context) from None
        logger.warning(
            "Unknown operator %r on field %r; condition will always be false",
            raw_operator,
            field,
        )
        return ComparisonCondition.model_construct(field=field, operator=raw_operator, value=value)

    try:
        return ComparisonCondition(field=field, operator=operator, value=value)
    except ValidationError as e:
        raise ConditionConfigError(f"Invalid condition: {e}", context) from e


def condition_to_config(condition: ComparisonCondition | CompoundCondition) -> dict[str, Any]:
    """Serialize a condition tree to its flat config form."""
    if isinstance(condition, CompoundCondition):
        return {
            "field": "",
            "operator": str(ConditionOperator.EXISTS),
            "conditions": [condition_to_config(child) for child in condition.conditions],
            "logicalOperator": str(condition.logical_operator),
        }
    return {
        "field": condition.field,
        "operator": str(condition.operator),
        "value": condition.value,
    }


def coerce_condition(value: Any) -> Any:
    """Accept builders and config mappings wherever a condition is expected.

    Mappings carrying ``kind`` (dumped nodes) are left for pydantic to
    validate.

    Raises:
        ConditionConfigError: If ``value`` is neither a condition, a builder
            nor a mapping.
    """
    from rilay.core.conditions.builder import ConditionBuilder

    if isinstance(value, (ComparisonCondition, CompoundCondition)):
        return value
    if isinstance(value, ConditionBuilder):
        return value.build()
    if isinstance(value, Mapping):
        return value if "kind" in value else condition_from_config(value)
    raise ConditionConfigError(f"Expected a condition, got {type(value).__name__}: {value!r}")


# =============================================================================
# Behaviors
# =============================================================================


class ConditionalBehavior(BaseModel):
    """
    Conditions attached to a form field.

    Each slot is optional; an absent slot leaves the field in its default
    state (visible, enabled, optional, editable).
    """

    visible: Condition | None = None
    disabled: Condition | None = None
    required: Condition | None = None
    readonly: Condition | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("visible", "disabled", "required", "readonly", mode="before")
    @classmethod
    def _coerce_conditions(cls, value: Any) -> Any:
        return None if value is None else coerce_condition(value)

    def slots(self) -> dict[str, ComparisonCondition | CompoundCondition | None]:
        """Named conditions, including empty slots."""
        return {
            "visible": self.visible,
            "disabled": self.disabled,
            "required": self.required,
            "readonly": self.readonly,
        }


class StepConditionalBehavior(BaseModel):
    """Conditions attached to a workflow step."""

    visible: Condition | None = None
    skippable: Condition | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("visible", "skippable", mode="before")
    @classmethod
    def _coerce_conditions(cls, value: Any) -> Any:
        return None if value is None else coerce_condition(value)

    def slots(self) -> dict[str, ComparisonCondition | CompoundCondition | None]:
        """Named conditions, including empty slots."""
        return {"visible": self.visible, "skippable": self.skippable}


class ConditionEvaluationResult(BaseModel):
    """Evaluated state of a field."""

    visible: bool = True
    disabled: bool = False
    required: bool = False
    readonly: bool = False

    model_config = ConfigDict(frozen=True)


class StepConditionResult(BaseModel):
    """Evaluated state of a workflow step."""

    visible: bool = True
    skippable: bool = False

    model_config = ConfigDict(frozen=True)
