"""
Input adapters that turn pointer and touch events into gesture events.

Both adapters drive anything that implements ``GestureSinkProtocol`` (in
practice a ``GestureStateMachine``) through the same three primitives:
``start(slot)``, ``move(slot | None)`` and ``end()``. They share no state
except the ``CellLookup`` the renderer maintains.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Hashable, Iterator, Optional, Protocol

from ..domain.models import Gesture, SelectorSnapshot, TimeSlot

logger = logging.getLogger(__name__)

PointProbe = Callable[[float, float], Optional[Hashable]]


class GestureSinkProtocol(Protocol):
    """Protocol describing the gesture events the adapters emit."""

    @property
    def gesture(self) -> Optional[Gesture]:
        """The active gesture, if any."""

    def start(self, slot: TimeSlot) -> SelectorSnapshot:
        """Begin a gesture."""

    def move(self, slot: Optional[TimeSlot]) -> SelectorSnapshot:
        """Extend the gesture; None means off the grid."""

    def end(self) -> SelectorSnapshot:
        """Finish and commit the gesture."""


class CellLookup:
    """
    Maps opaque cell handles to the slot each rendered cell shows.

    The rendering layer registers a handle when a cell is mounted and
    unregisters it when the cell goes away. Several handles may point at
    the same slot. The engine only reads from it.
    """

    def __init__(self) -> None:
        self._cells: Dict[Hashable, TimeSlot] = {}

    def register(self, handle: Hashable, slot: TimeSlot) -> None:
        self._cells[handle] = slot

    def unregister(self, handle: Hashable) -> None:
        """Forget a handle. Unknown handles are ignored."""
        self._cells.pop(handle, None)

    def clear(self) -> None:
        self._cells.clear()

    def resolve(self, handle: Optional[Hashable]) -> Optional[TimeSlot]:
        """Return the slot behind ``handle``, or None for unknown or missing handles."""
        if handle is None:
            return None
        return self._cells.get(handle)

    def __contains__(self, handle: Hashable) -> bool:
        return handle in self._cells

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._cells)


class PointerInput:
    """
    Discrete input: press, hover and release on cells whose slot is known.

    The host must call :meth:`release` for a release anywhere on the input
    surface, not only on a cell, since a drag can end outside the grid.
    """

    def __init__(self, sink: GestureSinkProtocol):
        self._sink = sink

    def press(self, slot: TimeSlot) -> SelectorSnapshot:
        return self._sink.start(slot)

    def hover(self, slot: TimeSlot) -> SelectorSnapshot:
        return self._sink.move(slot)

    def release(self, slot: Optional[TimeSlot] = None) -> SelectorSnapshot:
        """
        End the gesture.

        Args:
            slot: Cell the release happened on, or None when it happened
                elsewhere on the surface
        """
        if slot is not None:
            self._sink.move(slot)
        return self._sink.end()


class TouchInput:
    """
    Continuous input: one touch point streaming coordinates.

    Touch moves are reported against the cell where the touch started, so
    the slot under the finger is found by probing the coordinates for a
    cell handle and resolving it through the ``CellLookup``.
    """

    def __init__(
        self,
        sink: GestureSinkProtocol,
        lookup: CellLookup,
        probe: Optional[PointProbe] = None,
    ):
        """
        Initialize the adapter.

        Args:
            sink: Receiver of the gesture events
            lookup: Handle-to-slot map kept current by the renderer
            probe: Function returning the cell handle at ``(x, y)``, or None
        """
        self._sink = sink
        self._lookup = lookup
        self.probe = probe
        self._dragging = False

    @property
    def dragging(self) -> bool:
        """True once a coordinate update arrived for the current touch."""
        return self._dragging

    def down(self, slot: TimeSlot) -> SelectorSnapshot:
        """
        Begin a touch on ``slot``.

        A second touch while a gesture is active is passed on to the sink,
        which ignores it; the drag state of the first touch is kept.
        """
        if self._sink.gesture is None:
            self._dragging = False
        return self._sink.start(slot)

    def update(self, x: float, y: float) -> SelectorSnapshot:
        self._dragging = True
        return self._sink.move(self.slot_at(x, y))

    def up(self) -> SelectorSnapshot:
        """
        End the touch.

        A touch that never moved is a tap, so the anchor is applied before
        the gesture ends.
        """
        gesture = self._sink.gesture
        if not self._dragging and gesture is not None:
            self._sink.move(gesture.anchor)
        self._dragging = False
        return self._sink.end()

    def slot_at(self, x: float, y: float) -> Optional[TimeSlot]:
        """Resolve a coordinate to a slot; None when it is off the grid."""
        if self.probe is None:
            logger.warning("No point probe configured; touch at (%s, %s) ignored", x, y)
            return None
        return self._lookup.resolve(self.probe(x, y))
