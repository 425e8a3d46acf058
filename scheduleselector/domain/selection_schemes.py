"""
Selection schemes: how a drag from an anchor slot to the current slot maps
onto the set of slots it covers.

A scheme is a plain function ``(anchor, current, grid) -> frozenset`` and is
looked up by name in a :class:`SchemeRegistry`. Schemes only ever see two
slots that are part of the grid; the registry takes care of the tap case
(no current slot) and of validating both slots beforehand.
"""

import logging
from typing import Callable, Dict, FrozenSet, List, Optional

from .exceptions import UnknownSchemeError
from .models import Grid, TimeSlot

logger = logging.getLogger(__name__)

SchemeFn = Callable[[TimeSlot, TimeSlot, Grid], FrozenSet[TimeSlot]]
Resolver = Callable[[TimeSlot, Optional[TimeSlot], Grid], FrozenSet[TimeSlot]]


def linear(anchor: TimeSlot, current: TimeSlot, grid: Grid) -> FrozenSet[TimeSlot]:
    """
    Every slot between anchor and current in chronological order.

    The grid is read as one sequence (day 0 fully, then day 1, ...), so a
    drag across a day boundary wraps from the end of one day into the next.
    """
    i = grid.flat_index(anchor)
    j = grid.flat_index(current)
    flattened = grid.flattened()
    return frozenset(flattened[min(i, j):max(i, j) + 1])


def square(anchor: TimeSlot, current: TimeSlot, grid: Grid) -> FrozenSet[TimeSlot]:
    """Every slot in the rectangle spanned by anchor and current as opposite corners."""
    anchor_day, anchor_time = grid.locate(anchor)
    current_day, current_time = grid.locate(current)

    days = range(min(anchor_day, current_day), max(anchor_day, current_day) + 1)
    times = range(min(anchor_time, current_time), max(anchor_time, current_time) + 1)

    return frozenset(grid.slot_at(day, time_index) for day in days for time_index in times)


BUILTIN_SCHEMES: Dict[str, SchemeFn] = {
    "linear": linear,
    "square": square,
}


class SchemeRegistry:
    """
    Named selection schemes.

    A fresh registry already knows ``linear`` and ``square``; hosts can add
    their own with :meth:`register`.
    """

    def __init__(self, include_builtins: bool = True):
        self._schemes: Dict[str, SchemeFn] = dict(BUILTIN_SCHEMES) if include_builtins else {}

    def register(self, name: str, scheme: SchemeFn, replace: bool = False) -> None:
        """
        Register a scheme under ``name``.

        Raises:
            ValueError: If the name is taken and ``replace`` is False
        """
        if not name:
            raise ValueError("Scheme name must not be empty")
        if name in self._schemes and not replace:
            raise ValueError(f"Selection scheme '{name}' is already registered")
        self._schemes[name] = scheme
        logger.debug("Registered selection scheme %s", name)

    def unregister(self, name: str) -> None:
        if name not in self._schemes:
            raise UnknownSchemeError(name, self.names())
        del self._schemes[name]

    def names(self) -> List[str]:
        return sorted(self._schemes)

    def __contains__(self, name: str) -> bool:
        return name in self._schemes

    def get(self, name: str) -> SchemeFn:
        """
        Look up a scheme by name.

        Raises:
            UnknownSchemeError: If no scheme is registered under ``name``
        """
        try:
            return self._schemes[name]
        except KeyError:
            raise UnknownSchemeError(name, self.names()) from None

    def resolve(
        self,
        name: str,
        anchor: TimeSlot,
        current: Optional[TimeSlot],
        grid: Grid,
    ) -> FrozenSet[TimeSlot]:
        """Run the named scheme; see :meth:`resolver`."""
        return self.resolver(name)(anchor, current, grid)

    def resolver(self, name: str) -> Resolver:
        """
        Bind a scheme by name, failing now if the name is unknown.

        The returned function covers only ``{anchor}`` when ``current`` is
        None and raises ``SlotNotFoundError`` if either slot is not in the grid.
        """
        scheme = self.get(name)

        def resolve(
            anchor: TimeSlot,
            current: Optional[TimeSlot],
            grid: Grid,
        ) -> FrozenSet[TimeSlot]:
            grid.locate(anchor)
            if current is None:
                return frozenset({anchor})
            grid.locate(current)
            return frozenset(scheme(anchor, current, grid))

        resolve.__name__ = f"resolve_{name}"
        return resolve


def default_registry() -> SchemeRegistry:
    return SchemeRegistry()
