"""
Combines the committed selection with the slots a gesture currently covers.
"""

from typing import Iterable

from .models import GestureMode, Selection, TimeSlot


def apply_gesture(
    base: Iterable[TimeSlot],
    covered: Iterable[TimeSlot],
    mode: GestureMode,
) -> Selection:
    """
    Return the draft selection for a gesture.

    ``add`` unions the covered slots into ``base``; ``remove`` drops every
    slot of ``base`` that shares a minute with a covered slot. ``base`` is
    never modified.
    """
    base_set = frozenset(base)
    covered_set = frozenset(covered)

    if mode is GestureMode.ADD:
        return base_set | covered_set
    if mode is GestureMode.REMOVE:
        return base_set - covered_set

    raise ValueError(f"Unknown gesture mode: {mode!r}")
