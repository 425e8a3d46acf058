"""
Developer CLI using Typer: inspect grids and replay gesture scripts.
"""

import logging
import math
from pathlib import Path
from typing import Annotated, Any, Hashable, List, Optional, Tuple

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..config import SelectorConfig, get_default_config_path
from ..domain.exceptions import SelectorError
from ..domain.models import Grid, Selection, TimeSlot, to_selection
from ..domain.selection_schemes import SchemeRegistry
from ..services.schedule_selector import ScheduleSelector

app = typer.Typer(
    name="scheduleselector",
    help="Inspect schedule grids and replay drag-selection gestures",
    add_completion=False
)

console = Console()

CELL_EVENTS = {"press", "hover", "down"}
OPTIONAL_CELL_EVENTS = {"release"}
POINT_EVENTS = {"update"}
BARE_EVENTS = {"up", "cancel"}
EVENT_KINDS = CELL_EVENTS | OPTIONAL_CELL_EVENTS | POINT_EVENTS | BARE_EVENTS | {"select"}

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./selector.yaml")
]
SchemeOption = Annotated[
    Optional[str],
    typer.Option("--scheme", "-s", help="Selection scheme (overrides the config)")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")]


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def _load_config(config_file: Optional[Path], scheme: Optional[str]) -> SelectorConfig:
    """Load the config file if there is one, else fall back to defaults."""
    config_path = config_file or get_default_config_path()

    if config_path.exists():
        config = SelectorConfig.load_from_yaml(config_path)
    elif config_file is not None:
        raise FileNotFoundError(f"Config file not found: {config_file}")
    else:
        console.print(f"[yellow]No {config_path.name} found, using defaults.[/yellow]")
        config = SelectorConfig()

    return config.with_overrides(selection_scheme=scheme)


def render_grid(grid: Grid, selection: Selection, config: SelectorConfig, title: str = "") -> Table:
    """
    Build a table with one column per day and one row per time slot.

    Time labels run down the left side; selected cells are marked.
    """
    table = Table(title=title or None, show_header=True, header_style="bold cyan")
    table.add_column("", style="dim", justify="right")
    for column in grid:
        table.add_column(column[0].start.format(config.date_format), justify="center")

    for time_index in range(grid.num_times):
        label = grid.slot_at(0, time_index).start.format(config.time_format)
        cells = [
            "[bold green]■[/bold green]" if column[time_index] in selection else "[dim]·[/dim]"
            for column in grid
        ]
        table.add_row(label, *cells)

    return table


def unit_cell_probe(grid: Grid):
    """
    Probe for a layout where every cell is a 1x1 square.

    ``x`` runs across days and ``y`` down the time rows; the handle of a
    cell is its ``(day, time)`` pair.
    """
    def probe(x: float, y: float) -> Optional[Hashable]:
        day, time_index = math.floor(x), math.floor(y)
        if 0 <= day < grid.num_days and 0 <= time_index < grid.num_times:
            return day, time_index
        return None

    return probe


def load_script(script_path: Path) -> List[Tuple[str, Any]]:
    """
    Read a gesture script.

    The file holds a list of single-key mappings, for example::

        - press: [0, 2]     # day, time row
        - hover: [1, 3]
        - release:          # released off the grid
        - down: [2, 0]
        - update: [2.5, 4.1]  # x, y in cell units
        - up:
        - select: ["2024-11-25T09:00:00"]

    Raises:
        FileNotFoundError: If the script doesn't exist
        ValueError: If an entry is malformed
    """
    if not script_path.exists():
        raise FileNotFoundError(f"Script file not found: {script_path}")

    with open(script_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get("events", [])
    if not isinstance(data, list):
        raise ValueError("Script must be a list of events.")

    events: List[Tuple[str, Any]] = []
    for position, entry in enumerate(data, 1):
        if isinstance(entry, str):
            entry = {entry: None}
        if not isinstance(entry, dict) or len(entry) != 1:
            raise ValueError(f"Event {position}: expected a single-key mapping, got {entry!r}")

        kind, argument = next(iter(entry.items()))
        if kind not in EVENT_KINDS:
            raise ValueError(f"Event {position}: unknown event '{kind}'")
        needs_pair = kind in CELL_EVENTS | POINT_EVENTS or (
            kind in OPTIONAL_CELL_EVENTS and argument is not None
        )
        if needs_pair and not (isinstance(argument, list) and len(argument) == 2):
            raise ValueError(f"Event {position}: '{kind}' needs a [x, y] pair")
        if kind == "select" and not isinstance(argument, list):
            raise ValueError(f"Event {position}: 'select' needs a list of datetimes")

        events.append((kind, argument))

    return events


def run_script(selector: ScheduleSelector, events: List[Tuple[str, Any]]) -> None:
    """Feed scripted events into the selector's input adapters."""
    grid = selector.grid

    def cell(pair) -> TimeSlot:
        day, time_index = int(pair[0]), int(pair[1])
        if not (0 <= day < grid.num_days and 0 <= time_index < grid.num_times):
            raise ValueError(
                f"Cell [{day}, {time_index}] is outside the {grid.num_days}x{grid.num_times} grid"
            )
        return grid.slot_at(day, time_index)

    for kind, argument in events:
        if kind == "press":
            selector.pointer.press(cell(argument))
        elif kind == "hover":
            selector.pointer.hover(cell(argument))
        elif kind == "release":
            selector.pointer.release(cell(argument) if argument is not None else None)
        elif kind == "down":
            selector.touch.down(cell(argument))
        elif kind == "update":
            selector.touch.update(float(argument[0]), float(argument[1]))
        elif kind == "up":
            selector.touch.up()
        elif kind == "cancel":
            selector.cancel()
        elif kind == "select":
            selector.update_selection(to_selection(argument, timezone=selector.config.timezone))


@app.command()
def grid(
    config_file: ConfigOption = None,
    days: Annotated[Optional[int], typer.Option("--days", "-d", help="Number of days")] = None,
    chunks: Annotated[Optional[int], typer.Option("--chunks", help="Slots per hour")] = None,
    verbose: VerboseOption = False,
):
    """
    Show the configured grid and its initial selection.
    """
    _setup_logging(verbose)
    try:
        config = _load_config(config_file, None).with_overrides(
            num_days=days,
            hourly_chunks=chunks
        )
        slot_grid = config.build_grid()

        console.print()
        console.print(render_grid(slot_grid, config.initial_selection(), config, title="Schedule grid"))
        console.print(
            f"\n{slot_grid.num_days} day(s) x {slot_grid.num_times} slot(s), "
            f"scheme [bold]{config.selection_scheme}[/bold]\n"
        )

    except (FileNotFoundError, SelectorError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def replay(
    script: Annotated[Path, typer.Argument(help="YAML file with the gesture events to replay")],
    config_file: ConfigOption = None,
    scheme: SchemeOption = None,
    verbose: VerboseOption = False,
):
    """
    Replay a gesture script and show every committed selection.

    Examples:

        scheduleselector replay drag.yaml

        scheduleselector replay drag.yaml --scheme linear -c selector.yaml
    """
    _setup_logging(verbose)
    try:
        config = _load_config(config_file, scheme)
        events = load_script(script)

        commits: List[Selection] = []
        selector = ScheduleSelector(config, on_commit=commits.append)
        selector.touch.probe = unit_cell_probe(selector.grid)
        for day, column in enumerate(selector.grid):
            for time_index, slot in enumerate(column):
                selector.lookup.register((day, time_index), slot)

        run_script(selector, events)

        console.print()
        for number, committed in enumerate(commits, 1):
            console.print(f"[green]✓ Commit {number}:[/green] {len(committed)} slot(s) selected")
        if not commits:
            console.print("[yellow]⚠ No gesture was completed.[/yellow]")
        if selector.machine.is_active:
            console.print("[yellow]⚠ Script ended with a gesture still in progress.[/yellow]")

        console.print()
        console.print(render_grid(selector.grid, selector.draft, config, title="Selection"))
        console.print()

    except (FileNotFoundError, ValueError, SelectorError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def schemes():
    """
    List the available selection schemes.
    """
    table = Table(title="Selection schemes", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="bold yellow")
    table.add_column("Description", style="dim")

    registry = SchemeRegistry()
    for name in registry.names():
        doc = (registry.get(name).__doc__ or "").strip().splitlines()
        table.add_row(name, doc[0] if doc else "")

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]scheduleselector[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
