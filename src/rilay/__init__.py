"""
rilay - conditional visibility engine for multi-step forms and workflows.

Conditions decide whether a field is visible, disabled, required or
readonly (and whether a workflow step is visible or skippable). A
dependency graph tells the host which fields to re-check when a value
changes.
"""

from __future__ import annotations

from ._version import get_version
from .core import ir
from .core.conditions import (
    ConditionDependencyGraph,
    ConditionTracker,
    evaluate,
    extract_all_dependencies,
    extract_condition_dependencies,
    when,
)
from .core.errors import ConditionConfigError, RilayError, SettingsError
from .core.ir import ConditionalBehavior, StepConditionalBehavior

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "ConditionConfigError",
    "ConditionDependencyGraph",
    "ConditionTracker",
    "ConditionalBehavior",
    "RilayError",
    "SettingsError",
    "StepConditionalBehavior",
    "evaluate",
    "extract_all_dependencies",
    "extract_condition_dependencies",
    "when",
]
