"""
Domain layer - Pure selection logic without any I/O or rendering.
"""

from .draft_reducer import apply_gesture
from .exceptions import (
    ConfigError,
    InvalidStateError,
    SelectorError,
    SlotNotFoundError,
    UnknownSchemeError,
)
from .gesture import GestureStateMachine
from .grid_builder import build_grid
from .models import (
    Gesture,
    GestureMode,
    GestureState,
    Grid,
    Selection,
    SelectorSnapshot,
    TimeSlot,
    to_selection,
)
from .selection_schemes import SchemeRegistry, default_registry, linear, square

__all__ = [
    "apply_gesture",
    "build_grid",
    "default_registry",
    "linear",
    "square",
    "to_selection",
    "ConfigError",
    "Gesture",
    "GestureMode",
    "GestureState",
    "GestureStateMachine",
    "Grid",
    "InvalidStateError",
    "SchemeRegistry",
    "Selection",
    "SelectorError",
    "SelectorSnapshot",
    "SlotNotFoundError",
    "TimeSlot",
    "UnknownSchemeError",
]
