"""
Domain-specific exception hierarchy for the schedule selector.
"""


class SelectorError(Exception):
    """Base class for all selector errors."""


class ConfigError(SelectorError, ValueError):
    """Raised when grid parameters or the configuration file are invalid."""


class UnknownSchemeError(ConfigError):
    """Raised when a selection scheme name has not been registered."""

    def __init__(self, name: str, available=()):
        self.name = name
        self.available = tuple(available)
        known = ", ".join(self.available) or "none"
        super().__init__(f"Unknown selection scheme '{name}' (registered: {known})")


class SlotNotFoundError(SelectorError, LookupError):
    """Raised when a time slot handed to a scheme is not part of the grid."""


class InvalidStateError(SelectorError):
    """Raised by a strict state machine when an event arrives in the wrong state."""
