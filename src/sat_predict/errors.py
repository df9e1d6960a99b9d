"""Exception types raised by the propagation and pass prediction code."""

from typing import List, Optional


class PredictionError(Exception):
    """Base exception for prediction errors."""

    def __init__(self, message: str, suggestions: Optional[List[str]] = None):
        """Initialize with message and optional suggestions.

        Args:
            message: Error description
            suggestions: Optional list of actionable suggestions
        """
        self.message = message
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        formatted = f"{self.message}"
        if self.suggestions:
            formatted += "\n\nSuggestions:"
            for suggestion in self.suggestions:
                formatted += f"\n  - {suggestion}"
        return formatted


class InvalidOrbitalElementsError(PredictionError, ValueError):
    """Raised when an element set has malformed or out-of-range fields."""

    def __init__(self, field_name: str, value: object, reason: str):
        self.field_name = field_name
        self.value = value
        super().__init__(f"Invalid {field_name} ({value!r}): {reason}")


class SatelliteNotVisibleError(PredictionError):
    """Raised when a satellite can never rise above an observer's horizon."""

    def __init__(self, satellite_name: str, latitude: float):
        message = f"Satellite {satellite_name} will never appear above the horizon"
        suggestions = [
            f"Observer latitude {latitude:.4f} deg is beyond the orbit's reach",
            "Use a ground station closer to the satellite's ground track",
        ]
        super().__init__(message, suggestions)


class PropagationError(PredictionError):
    """Raised when the propagated orbit becomes degenerate (e.g. decayed)."""


class PassSearchError(PredictionError):
    """Raised when a pass search meets a non-finite elevation."""

    def __init__(self, when: object, elevation: float):
        self.when = when
        self.elevation = elevation
        super().__init__(
            f"Pass search aborted: elevation {elevation} at {when} is not finite"
        )


class ConfigurationError(PredictionError, ValueError):
    """Raised when a settings or scenario file cannot be used."""


class NumericNonConvergenceWarning(RuntimeWarning):
    """Issued when an iterative solver stops at its iteration cap."""
