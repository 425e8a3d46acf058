"""
Gesture state machine: turns start/move/end events into a draft selection.

This is pure domain logic. It knows nothing about pointers, touches or
rendering; input adapters translate device events into the primitive
events below and hosts re-render from the returned snapshots.
"""

import logging
from dataclasses import replace
from typing import Callable, Iterable, Optional

from .draft_reducer import apply_gesture
from .exceptions import InvalidStateError
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
from .selection_schemes import Resolver

logger = logging.getLogger(__name__)

CommitCallback = Callable[[Selection], None]


class GestureStateMachine:
    """
    Owns the in-progress gesture and the draft selection.

    States:
    1. IDLE - no gesture; the draft mirrors the authoritative selection
    2. ACTIVE - a gesture with a fixed mode and anchor; every move
       recomputes the draft from the authoritative selection

    Out-of-order input (a move or end without a gesture, a second start
    during a gesture, a move off the grid) is ignored, since real input
    devices produce such sequences routinely. Every transition is atomic:
    if resolving the covered slots raises, nothing changes.
    """

    def __init__(
        self,
        grid: Grid,
        resolver: Resolver,
        selection: Iterable = (),
        on_commit: Optional[CommitCallback] = None,
        timezone: str = "UTC",
        strict: bool = False,
    ):
        """
        Initialize the state machine.

        Args:
            grid: Grid the gesture slots belong to
            resolver: Bound selection scheme, see ``SchemeRegistry.resolver``
            selection: Initial authoritative selection
            on_commit: Called with the final selection when a gesture ends
            timezone: Timezone for naive datetimes handed in as slots
            strict: Raise InvalidStateError on a start during a gesture
                instead of ignoring it
        """
        self._grid = grid
        self._resolve = resolver
        self._timezone = timezone
        self._strict = strict
        self.on_commit = on_commit

        self._selection: Selection = to_selection(selection, timezone=timezone)
        self._draft: Selection = self._selection
        self._gesture: Optional[Gesture] = None
        self._pending_selection: Optional[Selection] = None

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def selection(self) -> Selection:
        """The authoritative selection the current or next gesture starts from."""
        return self._selection

    @property
    def draft(self) -> Selection:
        return self._draft

    @property
    def gesture(self) -> Optional[Gesture]:
        return self._gesture

    @property
    def state(self) -> GestureState:
        return GestureState.ACTIVE if self._gesture else GestureState.IDLE

    @property
    def is_active(self) -> bool:
        return self._gesture is not None

    def get_draft(self) -> Selection:
        return self._draft

    def snapshot(self) -> SelectorSnapshot:
        return SelectorSnapshot(draft=self._draft, gesture=self._gesture)

    def update_selection(self, selection: Iterable) -> SelectorSnapshot:
        """
        Accept a new authoritative selection from the host.

        While a gesture is active the update is held back and applied when
        the gesture ends or is cancelled; only the latest one is kept.
        """
        selection = to_selection(selection, timezone=self._timezone)

        if self._gesture is not None:
            logger.debug("Deferring external selection update until the gesture ends")
            self._pending_selection = selection
            return self.snapshot()

        self._selection = selection
        self._draft = selection
        return self.snapshot()

    def start(self, slot) -> SelectorSnapshot:
        """
        Begin a gesture anchored at ``slot``.

        The gesture removes slots if the anchor is already selected and adds
        them otherwise. The draft is updated right away so a tap shows up
        before any move.
        """
        if self._gesture is not None:
            if self._strict:
                raise InvalidStateError(
                    f"Cannot start a gesture at {slot}: a gesture anchored at "
                    f"{self._gesture.anchor} is still active"
                )
            logger.debug("Ignoring start at %s: gesture already active", slot)
            return self.snapshot()

        anchor = TimeSlot.of(slot, timezone=self._timezone)
        mode = GestureMode.REMOVE if anchor in self._selection else GestureMode.ADD
        gesture = Gesture(mode=mode, anchor=anchor)

        self._draft = self._compute_draft(gesture, anchor)
        self._gesture = gesture
        logger.debug("Started %s gesture at %s", mode.value, anchor)
        return self.snapshot()

    def move(self, slot) -> SelectorSnapshot:
        """
        Extend the gesture to ``slot``.

        ``None`` means the input left the grid and leaves the draft as it is.
        """
        if self._gesture is None or slot is None:
            return self.snapshot()

        current = TimeSlot.of(slot, timezone=self._timezone)
        self._draft = self._compute_draft(self._gesture, current)
        self._gesture = replace(self._gesture, moved=True)
        return self.snapshot()

    def end(self) -> SelectorSnapshot:
        """
        Finish the gesture and commit the draft.

        A gesture without any move is treated as a tap on the anchor.
        """
        if self._gesture is None:
            return self.snapshot()

        if not self._gesture.moved:
            self.move(self._gesture.anchor)

        committed = self._draft
        self._gesture = None
        self._selection = committed
        self._apply_pending_selection()

        logger.debug("Committed selection with %d slot(s)", len(committed))
        if self.on_commit is not None:
            self.on_commit(committed)

        return self.snapshot()

    def cancel(self) -> SelectorSnapshot:
        """Abort the gesture without committing; the selection stays untouched."""
        if self._gesture is None:
            return self.snapshot()

        logger.debug("Cancelled gesture anchored at %s", self._gesture.anchor)
        self._gesture = None
        self._draft = self._selection
        self._apply_pending_selection()
        return self.snapshot()

    def _compute_draft(self, gesture: Gesture, current: TimeSlot) -> Selection:
        covered = self._resolve(gesture.anchor, current, self._grid)
        return apply_gesture(self._selection, covered, gesture.mode)

    def _apply_pending_selection(self) -> None:
        if self._pending_selection is None:
            return
        self._selection = self._pending_selection
        self._draft = self._pending_selection
        self._pending_selection = None
