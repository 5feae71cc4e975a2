"""
Dependency graph between fields and the data paths their conditions read.

Instead of re-evaluating every condition when any value changes, the host
asks the graph which fields depend on the changed path and re-evaluates only
those:

    graph = ConditionDependencyGraph()
    graph.add_field("dependentField", ConditionalBehavior(
        visible=when("triggerField").equals("show"),
    ))
    graph.get_affected_fields("triggerField")
    # ["dependentField"]

The graph stores only path strings, never conditions. It is not safe for
concurrent writers; callers serialize ``add_field`` / ``remove_field`` /
``clear``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from rilay.core.conditions.dependencies import extract_all_dependencies
from rilay.core.ir.conditions import ConditionalBehavior, StepConditionalBehavior

logger = logging.getLogger(__name__)


class ConditionDependencyGraph:
    """Bidirectional index: field id -> paths and path -> field ids.

    Both maps use dicts as insertion-ordered sets. They are only changed
    through ``_index`` and ``_unindex``, which keep them exact inverses.
    """

    def __init__(self) -> None:
        self._field_dependencies: dict[str, dict[str, None]] = {}
        self._reverse_dependencies: dict[str, dict[str, None]] = {}

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add_field(
        self,
        field_id: str,
        behavior: ConditionalBehavior | StepConditionalBehavior | None = None,
    ) -> None:
        """Register a field with the conditions it carries.

        Replaces any previous registration of ``field_id``. A field without
        behavior is still registered, with no dependencies.
        """
        paths = extract_all_dependencies(behavior) if behavior is not None else []
        self._unindex(field_id)
        self._index(field_id, paths)
        logger.debug("Registered %s with dependencies %s", field_id, paths)

    def remove_field(self, field_id: str) -> None:
        """Remove a field. Unknown ids are ignored."""
        if self._unindex(field_id):
            logger.debug("Removed %s", field_id)

    def clear(self) -> None:
        self._field_dependencies.clear()
        self._reverse_dependencies.clear()

    def _index(self, field_id: str, paths: Iterable[str]) -> None:
        forward = self._field_dependencies.setdefault(field_id, {})
        for path in paths:
            forward[path] = None
            self._reverse_dependencies.setdefault(path, {})[field_id] = None

    def _unindex(self, field_id: str) -> bool:
        forward = self._field_dependencies.pop(field_id, None)
        if forward is None:
            return False
        for path in forward:
            dependents = self._reverse_dependencies.get(path)
            if dependents is None:
                continue
            dependents.pop(field_id, None)
            if not dependents:
                del self._reverse_dependencies[path]
        return True

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_affected_fields(self, changed_path: str) -> list[str]:
        """Fields whose conditions read exactly ``changed_path``.

        No prefix matching: a dependency on ``step1`` is not affected by a
        change to ``step1.field1``.
        """
        return list(self._reverse_dependencies.get(changed_path, ()))

    def get_affected_fields_multiple(self, changed_paths: Iterable[str]) -> list[str]:
        """Fields affected by any of ``changed_paths``, deduplicated."""
        affected: dict[str, None] = {}
        for path in changed_paths:
            for field_id in self._reverse_dependencies.get(path, ()):
                affected[field_id] = None
        return list(affected)

    def get_dependencies(self, field_id: str) -> list[str]:
        return list(self._field_dependencies.get(field_id, ()))

    def has_dependencies(self, field_id: str) -> bool:
        return bool(self._field_dependencies.get(field_id))

    def get_all_fields(self) -> list[str]:
        return list(self._field_dependencies)

    def get_all_dependency_paths(self) -> list[str]:
        return list(self._reverse_dependencies)

    @property
    def size(self) -> int:
        """Number of registered fields."""
        return len(self._field_dependencies)

    def __len__(self) -> int:
        return len(self._field_dependencies)

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._field_dependencies

    def __repr__(self) -> str:
        return (
            f"ConditionDependencyGraph(fields={len(self._field_dependencies)}, "
            f"paths={len(self._reverse_dependencies)})"
        )

    def to_debug_object(self) -> dict[str, dict[str, list[str]]]:
        """Plain snapshot of both indexes, for inspection and tests."""
        return {
            "fields": {field_id: list(paths) for field_id, paths in self._field_dependencies.items()},
            "reverseDeps": {
                path: list(field_ids) for path, field_ids in self._reverse_dependencies.items()
            },
        }
