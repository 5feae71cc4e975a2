"""
Error types for rilay condition configuration and settings.
"""

from dataclasses import dataclass


class RilayError(Exception):
    """Base exception for all rilay errors."""

    def __init__(self, message: str, context: "ErrorContext | None" = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ConditionConfigError(RilayError):
    """
    Raised when a condition cannot be built from its configuration.

    Examples:
    - Unknown operator name (strict mode)
    - Leaf condition without a field path
    - Combinator with an unknown logical operator
    """

    pass


class SettingsError(RilayError):
    """
    Raised when a settings file cannot be read or has invalid values.
    """

    pass


@dataclass
class ErrorContext:
    """
    Where in a condition tree an error occurred.

    Attributes:
        path: Child indices from the root, e.g. ``[0, 1]`` is the second
            child of the first child
        source: Optional name of the file or field the condition came from
    """

    path: list[int]
    source: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "visible.json: conditions[0].conditions[1]"
        """
        location = "".join(f".conditions[{index}]" for index in self.path).lstrip(".")
        location = location or "<root>"
        if self.source:
            return f"{self.source}: {location}"
        return location
