"""
Settings for the condition engine.

Read from ``rilay.toml``:

    [conditions]
    strict_operators = true
    log_level = "WARNING"

or from ``pyproject.toml`` under ``[tool.rilay.conditions]``.
"""

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from rilay.core.errors import SettingsError

SETTINGS_FILENAME = "rilay.toml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ConditionSettings:
    """Condition engine configuration."""

    strict_operators: bool = True  # reject unknown operators when loading configs
    log_level: str = "WARNING"

    @property
    def logging_level(self) -> int:
        return logging.getLevelName(self.log_level)


def load_settings(path: Path) -> ConditionSettings:
    """Load settings from a ``rilay.toml`` or ``pyproject.toml`` file.

    Raises:
        SettingsError: If the file cannot be parsed or a value is invalid.
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise SettingsError(f"Cannot read settings from {path}: {e}") from e

    if path.name == "pyproject.toml":
        section = data.get("tool", {}).get("rilay", {}).get("conditions", {})
    else:
        section = data.get("conditions", {})
    return _parse(section, path)


def _parse(section: dict[str, Any], path: Path) -> ConditionSettings:
    strict = section.get("strict_operators", True)
    if not isinstance(strict, bool):
        raise SettingsError(f"{path}: strict_operators must be true or false")

    level = str(section.get("log_level", "WARNING")).upper()
    if level not in _LOG_LEVELS:
        raise SettingsError(f"{path}: log_level must be one of {', '.join(_LOG_LEVELS)}")

    return ConditionSettings(strict_operators=strict, log_level=level)


def find_settings(start: Path | None = None) -> ConditionSettings:
    """Walk up from ``start`` looking for settings; defaults if none found.

    ``rilay.toml`` wins over ``pyproject.toml`` in the same directory, and a
    ``pyproject.toml`` without a ``[tool.rilay]`` table is skipped.
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / SETTINGS_FILENAME
        if candidate.exists():
            return load_settings(candidate)
        pyproject = directory / "pyproject.toml"
        if pyproject.exists() and "[tool.rilay" in pyproject.read_text(encoding="utf-8"):
            return load_settings(pyproject)
    return ConditionSettings()
