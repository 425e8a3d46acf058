"""
Application service wiring the selection engine together from a config.

The service builds the grid, binds the configured selection scheme and
owns the gesture state machine plus both input adapters. Hosts talk to
``pointer`` / ``touch`` for input, read ``draft`` to render and receive
finished selections through ``on_commit``. Keeping the wiring here leaves
the domain objects independently testable.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..adapters.input_normalizer import CellLookup, PointerInput, PointProbe, TouchInput
from ..config import SelectorConfig
from ..domain.gesture import CommitCallback, GestureStateMachine
from ..domain.models import Grid, Selection, SelectorSnapshot
from ..domain.selection_schemes import SchemeFn, SchemeRegistry

logger = logging.getLogger(__name__)


class ScheduleSelector:
    """
    Facade over grid, scheme registry, state machine and input adapters.

    Configuration errors (bad grid parameters, unknown scheme) are raised
    from the constructor and from :meth:`reconfigure`.
    """

    def __init__(
        self,
        config: SelectorConfig,
        selection: Optional[Iterable] = None,
        on_commit: Optional[CommitCallback] = None,
        probe: Optional[PointProbe] = None,
        registry: Optional[SchemeRegistry] = None,
        strict: bool = False,
    ) -> None:
        """
        Initialize the selector.

        Args:
            config: Grid and scheme configuration
            selection: Authoritative selection; defaults to ``config.selection``
            on_commit: Called with the final selection after each gesture
            probe: Coordinate-to-cell-handle function for touch input
            registry: Scheme registry; a fresh one with the built-ins by default
            strict: Raise on a start during an active gesture
        """
        self._registry = registry or SchemeRegistry()
        self._strict = strict
        self.lookup = CellLookup()

        initial = config.initial_selection() if selection is None else selection
        self._machine = self._build_machine(config, initial, on_commit)
        self._config = config

        self.pointer = PointerInput(self._machine)
        self.touch = TouchInput(self._machine, self.lookup, probe=probe)

    @property
    def config(self) -> SelectorConfig:
        return self._config

    @property
    def grid(self) -> Grid:
        return self._machine.grid

    @property
    def registry(self) -> SchemeRegistry:
        return self._registry

    @property
    def machine(self) -> GestureStateMachine:
        return self._machine

    @property
    def draft(self) -> Selection:
        return self._machine.draft

    @property
    def selection(self) -> Selection:
        return self._machine.selection

    @property
    def on_commit(self) -> Optional[CommitCallback]:
        return self._machine.on_commit

    @on_commit.setter
    def on_commit(self, callback: Optional[CommitCallback]) -> None:
        self._machine.on_commit = callback

    def get_draft(self) -> Selection:
        return self._machine.get_draft()

    def snapshot(self) -> SelectorSnapshot:
        return self._machine.snapshot()

    def update_selection(self, selection: Iterable) -> SelectorSnapshot:
        return self._machine.update_selection(selection)

    def cancel(self) -> SelectorSnapshot:
        return self._machine.cancel()

    def register_scheme(self, name: str, scheme: SchemeFn, replace: bool = False) -> None:
        """Make an additional selection scheme available to :meth:`reconfigure`."""
        self._registry.register(name, scheme, replace=replace)

    def reconfigure(self, config: SelectorConfig) -> SelectorSnapshot:
        """
        Apply a new configuration.

        The grid is rebuilt from scratch and any active gesture is cancelled.
        The authoritative selection carries over. On error the previous
        configuration stays in effect.
        """
        machine = self._build_machine(config, (), self._machine.on_commit)

        # Cancelling applies any selection update held back by the gesture
        self._machine.cancel()
        machine.update_selection(self._machine.selection)
        self._machine = machine
        self._config = config
        self.lookup.clear()
        self.pointer = PointerInput(machine)
        self.touch = TouchInput(machine, self.lookup, probe=self.touch.probe)

        logger.debug(
            "Reconfigured grid: %d day(s) x %d slot(s), scheme %s",
            machine.grid.num_days,
            machine.grid.num_times,
            config.selection_scheme,
        )
        return machine.snapshot()

    def _build_machine(
        self,
        config: SelectorConfig,
        selection: Iterable,
        on_commit: Optional[CommitCallback],
    ) -> GestureStateMachine:
        resolver = self._registry.resolver(config.selection_scheme)
        grid = config.build_grid()
        return GestureStateMachine(
            grid=grid,
            resolver=resolver,
            selection=selection,
            on_commit=on_commit,
            timezone=config.timezone,
            strict=self._strict,
        )
