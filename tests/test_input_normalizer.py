"""
Tests for the pointer and touch input adapters.
"""

from typing import List, Tuple

from scheduleselector.adapters.input_normalizer import CellLookup, PointerInput, TouchInput
from scheduleselector.domain.gesture import GestureStateMachine
from scheduleselector.domain.grid_builder import build_grid
from scheduleselector.domain.selection_schemes import SchemeRegistry

TZ = "Europe/Berlin"


class RecordingSink:
    """Wraps a state machine and records the primitive events it receives."""

    def __init__(self, machine: GestureStateMachine):
        self.machine = machine
        self.events: List[Tuple[str, object]] = []

    @property
    def gesture(self):
        return self.machine.gesture

    def start(self, slot):
        self.events.append(("start", slot))
        return self.machine.start(slot)

    def move(self, slot):
        self.events.append(("move", slot))
        return self.machine.move(slot)

    def end(self):
        self.events.append(("end", None))
        return self.machine.end()


def _setup(selection=()):
    grid = build_grid("2024-11-25", 3, 9, 13, 1, timezone=TZ)
    commits: List[frozenset] = []
    machine = GestureStateMachine(
        grid=grid,
        resolver=SchemeRegistry().resolver("square"),
        selection=selection,
        on_commit=commits.append,
        timezone=TZ,
    )
    return RecordingSink(machine), grid, commits


def _mounted_lookup(grid) -> CellLookup:
    """Lookup as a renderer would fill it: one handle per cell."""
    lookup = CellLookup()
    for day, column in enumerate(grid):
        for time_index, slot in enumerate(column):
            lookup.register(f"cell-{day}-{time_index}", slot)
    return lookup


def _probe(x: float, y: float):
    """Cells are 10x10 units; anything outside the 3x4 grid is off-grid."""
    day, time_index = int(x // 10), int(y // 10)
    if 0 <= day < 3 and 0 <= time_index < 4:
        return f"cell-{day}-{time_index}"
    return None


class TestCellLookup:
    """Tests for CellLookup."""

    def test_register_and_resolve(self):
        """Several handles may resolve to the same slot."""
        grid = build_grid("2024-11-25", 1, 9, 10, 1, timezone=TZ)
        lookup = CellLookup()
        lookup.register("a", grid[0][0])
        lookup.register("b", grid[0][0])

        assert lookup.resolve("a") == grid[0][0]
        assert lookup.resolve("b") == grid[0][0]
        assert len(lookup) == 2

    def test_unknown_and_missing_handles(self):
        """Unknown handles and None resolve to None."""
        lookup = CellLookup()

        assert lookup.resolve("nope") is None
        assert lookup.resolve(None) is None

    def test_unregister(self):
        """Unmounted cells stop resolving; unknown handles are ignored."""
        grid = build_grid("2024-11-25", 1, 9, 10, 1, timezone=TZ)
        lookup = CellLookup()
        lookup.register("a", grid[0][0])

        lookup.unregister("a")
        lookup.unregister("never-registered")

        assert "a" not in lookup
        assert lookup.resolve("a") is None


class TestPointerInput:
    """Tests for the discrete pointer adapter."""

    def test_press_hover_release(self):
        """Press, hover and a release off the grid commit the dragged square."""
        sink, grid, commits = _setup()
        pointer = PointerInput(sink)

        pointer.press(grid[0][0])
        pointer.hover(grid[0][1])
        pointer.hover(grid[1][1])
        pointer.release()

        assert [name for name, _ in sink.events] == ["start", "move", "move", "end"]
        assert commits == [{grid[0][0], grid[0][1], grid[1][0], grid[1][1]}]

    def test_release_on_cell_extends_to_it(self):
        """A release on a cell counts as a final move onto that cell."""
        sink, grid, commits = _setup()
        pointer = PointerInput(sink)

        pointer.press(grid[0][0])
        pointer.release(grid[0][2])

        assert commits == [{grid[0][0], grid[0][1], grid[0][2]}]

    def test_click_toggles_single_cell(self):
        """Press then release without hover selects just the pressed cell."""
        sink, grid, commits = _setup()
        pointer = PointerInput(sink)

        pointer.press(grid[2][3])
        pointer.release()

        assert commits == [{grid[2][3]}]

    def test_release_without_press(self):
        """A release with no gesture commits nothing."""
        sink, _, commits = _setup()

        PointerInput(sink).release()

        assert commits == []


class TestTouchInput:
    """Tests for the continuous touch adapter."""

    def test_drag_resolves_coordinates(self):
        """Coordinate updates are probed and resolved to slots."""
        sink, grid, commits = _setup()
        touch = TouchInput(sink, _mounted_lookup(grid), probe=_probe)

        touch.down(grid[0][0])
        snapshot = touch.update(15, 25)
        touch.up()

        expected = {grid[day][time_index] for day in range(2) for time_index in range(3)}
        assert snapshot.draft == expected
        assert commits == [expected]
        assert sink.events[1] == ("move", grid[1][2])
        assert [name for name, _ in sink.events] == ["start", "move", "end"]

    def test_update_off_grid_keeps_draft(self):
        """Coordinates outside every cell leave the draft as it was."""
        sink, grid, _ = _setup()
        touch = TouchInput(sink, _mounted_lookup(grid), probe=_probe)

        touch.down(grid[0][0])
        inside = touch.update(5, 15)
        outside = touch.update(500, 500)

        assert outside.draft == inside.draft == {grid[0][0], grid[0][1]}
        assert sink.events[-1] == ("move", None)

    def test_unmounted_cell_is_off_grid(self):
        """A handle the renderer has unregistered resolves to nothing."""
        sink, grid, _ = _setup()
        lookup = _mounted_lookup(grid)
        lookup.unregister("cell-2-3")
        touch = TouchInput(sink, lookup, probe=_probe)

        touch.down(grid[0][0])
        snapshot = touch.update(25, 35)

        assert snapshot.draft == {grid[0][0]}

    def test_tap_synthesizes_move_to_anchor(self):
        """A touch without updates moves onto its anchor before ending."""
        sink, grid, commits = _setup(selection=[])
        touch = TouchInput(sink, _mounted_lookup(grid), probe=_probe)

        touch.down(grid[1][1])
        touch.up()

        assert sink.events == [("start", grid[1][1]), ("move", grid[1][1]), ("end", None)]
        assert commits == [{grid[1][1]}]
        assert not touch.dragging

    def test_tap_on_selected_cell_removes_it(self):
        """Tapping a selected cell deselects it."""
        sink, grid, commits = _setup()
        sink.machine.update_selection([grid[1][1], grid[0][0]])
        touch = TouchInput(sink, _mounted_lookup(grid), probe=_probe)

        touch.down(grid[1][1])
        touch.up()

        assert commits == [{grid[0][0]}]

    def test_without_probe_updates_are_off_grid(self):
        """Without a probe every update counts as off the grid."""
        sink, grid, commits = _setup()
        touch = TouchInput(sink, _mounted_lookup(grid))

        touch.down(grid[0][0])
        touch.update(15, 25)
        touch.up()

        assert commits == [{grid[0][0]}]

    def test_up_without_down(self):
        """Lifting a touch with no gesture commits nothing."""
        sink, grid, commits = _setup()

        TouchInput(sink, _mounted_lookup(grid), probe=_probe).up()

        assert commits == []
        assert sink.events == [("end", None)]

    def test_second_touch_during_drag_keeps_drag(self):
        """A stray touch-down mid-drag does not turn the first touch into a tap."""
        sink, grid, commits = _setup()
        touch = TouchInput(sink, _mounted_lookup(grid), probe=_probe)

        touch.down(grid[0][0])
        touch.update(15, 25)
        touch.down(grid[2][2])

        assert touch.dragging
        assert sink.machine.gesture.anchor == grid[0][0]

        touch.up()

        expected = {grid[day][time_index] for day in range(2) for time_index in range(3)}
        assert commits == [expected]
        assert ("move", grid[0][0]) not in sink.events
