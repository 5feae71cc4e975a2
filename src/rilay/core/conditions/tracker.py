"""
Incremental re-evaluation of field conditions.

The host form layer feeds every new data snapshot to a ``ConditionTracker``.
The tracker diffs it against the previous snapshot, asks its dependency graph
which fields read a changed path, re-evaluates only those and reports the
fields whose state actually changed.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from rilay.core.conditions.behaviors import DEFAULT_RESULT, evaluate_behavior
from rilay.core.conditions.evaluator import MISSING, DataContext
from rilay.core.conditions.graph import ConditionDependencyGraph
from rilay.core.ir.conditions import ConditionalBehavior, ConditionEvaluationResult

logger = logging.getLogger(__name__)


def collect_changed_paths(previous: DataContext, current: DataContext) -> list[str]:
    """Dotted paths whose value differs between two snapshots.

    Mappings are compared key by key and lists by index, using the same
    segments ``resolve_path`` reads. Every ancestor of a changed path is
    reported as well, so a condition on ``address`` is notified when
    ``address.city`` changes. When a subtree appears, disappears or is
    replaced by a scalar, every path inside it is reported.

    Example:
        >>> collect_changed_paths({"a": {"b": 1}, "c": 2}, {"a": {"b": 3}, "c": 2})
        ['a', 'a.b']
        >>> collect_changed_paths({}, {"user": {"age": 25}})
        ['user', 'user.age']
    """
    return _diff(previous, current, "")


def _diff(previous: Any, current: Any, prefix: str) -> list[str]:
    changed: list[str] = []
    before_children = _children(previous)
    after_children = _children(current)
    for key in dict.fromkeys([*before_children, *after_children]):
        path = f"{prefix}{key}"
        before = before_children.get(key, MISSING)
        after = after_children.get(key, MISSING)
        nested = _diff(before, after, f"{path}.")
        if nested or not _same(before, after):
            changed.append(path)
            changed.extend(nested)
    return changed


def _children(value: Any) -> dict[str, Any]:
    if isinstance(value, Mapping):
        return {str(key): child for key, child in value.items()}
    if isinstance(value, (list, tuple)):
        return {str(index): child for index, child in enumerate(value)}
    return {}


def _same(before: Any, after: Any) -> bool:
    # Container contents are compared by _diff; only the container kind matters here
    if isinstance(before, Mapping) or isinstance(after, Mapping):
        return isinstance(before, Mapping) and isinstance(after, Mapping)
    if isinstance(before, (list, tuple)) or isinstance(after, (list, tuple)):
        return isinstance(before, (list, tuple)) and isinstance(after, (list, tuple))
    return before is after or (type(before) is type(after) and before == after)


class ConditionTracker:
    """Keeps field condition results current as form data changes.

    Usage:
        tracker = ConditionTracker({"phone": ConditionalBehavior(visible=when("contact").equals("phone"))})
        tracker.evaluate_all({"contact": "email"})
        tracker.update({"contact": "phone"})
        # {"phone": ConditionEvaluationResult(visible=True, ...)}
    """

    def __init__(self, behaviors: Mapping[str, ConditionalBehavior | None] | None = None) -> None:
        self._graph = ConditionDependencyGraph()
        self._behaviors: dict[str, ConditionalBehavior | None] = {}
        self._results: dict[str, ConditionEvaluationResult] = {}
        self._snapshot: dict[str, Any] | None = None
        for field_id, behavior in (behaviors or {}).items():
            self.register(field_id, behavior)

    @property
    def graph(self) -> ConditionDependencyGraph:
        return self._graph

    @property
    def results(self) -> dict[str, ConditionEvaluationResult]:
        return dict(self._results)

    def register(self, field_id: str, behavior: ConditionalBehavior | None = None) -> None:
        """Add or replace a field; evaluated at once if data was seen."""
        self._behaviors[field_id] = behavior
        self._graph.add_field(field_id, behavior)
        if self._snapshot is not None:
            self._results[field_id] = evaluate_behavior(behavior, self._snapshot)
        else:
            self._results.pop(field_id, None)

    def unregister(self, field_id: str) -> None:
        self._behaviors.pop(field_id, None)
        self._results.pop(field_id, None)
        self._graph.remove_field(field_id)

    def evaluate_all(self, data: DataContext) -> dict[str, ConditionEvaluationResult]:
        """Evaluate every registered field against ``data``."""
        self._snapshot = copy.deepcopy(dict(data))
        self._results = {
            field_id: evaluate_behavior(behavior, self._snapshot)
            for field_id, behavior in self._behaviors.items()
        }
        return dict(self._results)

    def update(
        self, data: DataContext, changed_paths: Iterable[str] | None = None
    ) -> dict[str, ConditionEvaluationResult]:
        """Re-evaluate the fields affected by a data change.

        Args:
            data: The new data snapshot.
            changed_paths: Paths known to have changed. Computed by diffing
                against the previous snapshot when omitted.

        Returns:
            Results of the fields whose state changed. On the first call
            (no previous snapshot) every field is evaluated and returned.
        """
        if self._snapshot is None:
            return self.evaluate_all(data)

        if changed_paths is None:
            changed_paths = collect_changed_paths(self._snapshot, data)
        changed_paths = list(changed_paths)
        self._snapshot = copy.deepcopy(dict(data))

        affected = self._graph.get_affected_fields_multiple(changed_paths)
        logger.debug("Paths %s changed; re-evaluating %s", changed_paths, affected)

        changed: dict[str, ConditionEvaluationResult] = {}
        for field_id in affected:
            result = evaluate_behavior(self._behaviors.get(field_id), self._snapshot)
            if self._results.get(field_id) != result:
                self._results[field_id] = result
                changed[field_id] = result
        return changed

    def get_result(self, field_id: str) -> ConditionEvaluationResult | None:
        return self._results.get(field_id)

    def is_visible(self, field_id: str) -> bool:
        return self._results.get(field_id, DEFAULT_RESULT).visible

    def is_disabled(self, field_id: str) -> bool:
        return self._results.get(field_id, DEFAULT_RESULT).disabled

    def is_required(self, field_id: str) -> bool:
        return self._results.get(field_id, DEFAULT_RESULT).required

    def is_readonly(self, field_id: str) -> bool:
        return self._results.get(field_id, DEFAULT_RESULT).readonly
