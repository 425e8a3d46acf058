"""
Domain models for time slots, grids and gesture state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import total_ordering
from typing import Dict, FrozenSet, Iterable, Iterator, Optional, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import ConfigError, SlotNotFoundError


@total_ordering
@dataclass(frozen=True, eq=False)
class TimeSlot:
    """
    One selectable instant in the grid.

    Two slots are the same slot when they fall into the same minute, so
    equality and hashing ignore seconds and sub-seconds. This lets plain
    ``frozenset`` operations implement minute-level union and difference.
    """
    start: DateTime
    _minute: int = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.start, DateTime):
            object.__setattr__(self, "start", pendulum.instance(self.start))
        object.__setattr__(self, "_minute", int(self.start.timestamp() // 60))

    @classmethod
    def of(cls, value, timezone: str = "UTC") -> "TimeSlot":
        """
        Build a slot from a TimeSlot, a datetime or an ISO 8601 string.

        Naive datetimes and strings without an offset are read in ``timezone``.
        """
        if isinstance(value, TimeSlot):
            return value
        if isinstance(value, datetime):
            return cls(pendulum.instance(value, tz=timezone))
        if isinstance(value, str):
            return cls(pendulum.parse(value, tz=timezone))
        raise TypeError(f"Cannot build a TimeSlot from {type(value).__name__}")

    @property
    def minute(self) -> int:
        """Minutes since the Unix epoch; the slot's identity."""
        return self._minute

    def __eq__(self, other) -> bool:
        if not isinstance(other, TimeSlot):
            return NotImplemented
        return self._minute == other._minute

    def __lt__(self, other: "TimeSlot") -> bool:
        if not isinstance(other, TimeSlot):
            return NotImplemented
        return self._minute < other._minute

    def __hash__(self) -> int:
        return hash(self._minute)

    def __str__(self) -> str:
        return self.start.format("YYYY-MM-DD HH:mm")


Selection = FrozenSet[TimeSlot]


def to_selection(values: Iterable, timezone: str = "UTC") -> Selection:
    """Copy any iterable of slots, datetimes or strings into a Selection."""
    return frozenset(TimeSlot.of(value, timezone=timezone) for value in values)


@dataclass(frozen=True)
class Grid:
    """
    Day-by-time matrix of slots.

    ``columns[d][t]`` is time row ``t`` of day ``d``.

    Invariants: at least one column, all columns have the same non-zero
    length, every column is strictly ascending and no slot appears twice.
    """
    columns: Tuple[Tuple[TimeSlot, ...], ...]
    _positions: Dict[TimeSlot, Tuple[int, int]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self):
        columns = tuple(tuple(column) for column in self.columns)
        object.__setattr__(self, "columns", columns)

        if not columns or not columns[0]:
            raise ConfigError("A grid needs at least one day with at least one slot")

        num_times = len(columns[0])
        positions: Dict[TimeSlot, Tuple[int, int]] = {}

        for day, column in enumerate(columns):
            if len(column) != num_times:
                raise ConfigError(
                    f"Day {day} has {len(column)} slots, expected {num_times}"
                )
            for time_index, slot in enumerate(column):
                if time_index and slot <= column[time_index - 1]:
                    raise ConfigError(f"Slots of day {day} are not strictly ascending at {slot}")
                if slot in positions:
                    raise ConfigError(f"Slot {slot} appears more than once in the grid")
                positions[slot] = (day, time_index)

        object.__setattr__(self, "_positions", positions)

    @property
    def num_days(self) -> int:
        return len(self.columns)

    @property
    def num_times(self) -> int:
        return len(self.columns[0])

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self) -> Iterator[Tuple[TimeSlot, ...]]:
        return iter(self.columns)

    def __getitem__(self, day: int) -> Tuple[TimeSlot, ...]:
        return self.columns[day]

    def __contains__(self, slot) -> bool:
        return slot in self._positions

    def slot_at(self, day: int, time_index: int) -> TimeSlot:
        return self.columns[day][time_index]

    def flattened(self) -> Tuple[TimeSlot, ...]:
        """All slots in chronological order: day 0 fully, then day 1, and so on."""
        return tuple(slot for column in self.columns for slot in column)

    def locate(self, slot: TimeSlot) -> Tuple[int, int]:
        """
        Return the ``(day, time)`` indices of a slot.

        Raises:
            SlotNotFoundError: If the slot is not part of this grid
        """
        try:
            return self._positions[slot]
        except KeyError:
            raise SlotNotFoundError(f"Slot {slot} is not part of the grid") from None

    def flat_index(self, slot: TimeSlot) -> int:
        """Position of the slot in :meth:`flattened` order."""
        day, time_index = self.locate(slot)
        return day * self.num_times + time_index


class GestureMode(str, Enum):
    """Whether a gesture adds slots to the selection or removes them."""
    ADD = "add"
    REMOVE = "remove"


class GestureState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


@dataclass(frozen=True)
class Gesture:
    """An in-progress drag. The anchor never changes during a gesture."""
    mode: GestureMode
    anchor: TimeSlot
    moved: bool = False


@dataclass(frozen=True)
class SelectorSnapshot:
    """
    Immutable view of the state machine after a transition.

    Hosts re-render from ``draft``, which is what should show as selected.
    """
    draft: Selection
    gesture: Optional[Gesture] = None

    @property
    def state(self) -> GestureState:
        return GestureState.ACTIVE if self.gesture else GestureState.IDLE

    @property
    def is_active(self) -> bool:
        return self.gesture is not None

    @property
    def mode(self) -> Optional[GestureMode]:
        return self.gesture.mode if self.gesture else None

    @property
    def anchor(self) -> Optional[TimeSlot]:
        return self.gesture.anchor if self.gesture else None

    def is_selected(self, slot: TimeSlot) -> bool:
        return slot in self.draft
