"""
Tests for the developer CLI.
"""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from scheduleselector.cli.app import app, load_script, unit_cell_probe
from scheduleselector.domain.grid_builder import build_grid

runner = CliRunner()

CONFIG = (
    "start_date: 2024-11-25\n"
    "num_days: 5\n"
    "min_time: 9\n"
    "max_time: 13\n"
    "hourly_chunks: 1\n"
    "selection_scheme: square\n"
    "timezone: Europe/Berlin\n"
)


@pytest.fixture
def config_path(tmp_path) -> Path:
    path = tmp_path / "selector.yaml"
    path.write_text(CONFIG, encoding="utf-8")
    return path


def _script(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "script.yaml"
    path.write_text(content, encoding="utf-8")
    return path


def test_schemes_lists_builtins():
    """The schemes command shows both built-in schemes."""
    result = runner.invoke(app, ["schemes"])

    assert result.exit_code == 0
    assert "linear" in result.output
    assert "square" in result.output


def test_version():
    """The version command prints the package version."""
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_grid_summary(config_path):
    """The grid command reports the grid dimensions."""
    result = runner.invoke(app, ["grid", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "5 day(s) x 4 slot(s)" in result.output


def test_grid_invalid_override(config_path):
    """Invalid overrides exit with an error."""
    result = runner.invoke(app, ["grid", "--config", str(config_path), "--days", "0"])

    assert result.exit_code == 1
    assert "num_days" in result.output


def test_replay_pointer_drag(config_path, tmp_path):
    """A scripted pointer drag is committed once."""
    script = _script(tmp_path, "- press: [0, 0]\n- hover: [1, 1]\n- release:\n")

    result = runner.invoke(app, ["replay", str(script), "--config", str(config_path)])

    assert result.exit_code == 0
    assert "Commit 1: 4 slot(s) selected" in result.output


def test_replay_with_linear_scheme(config_path, tmp_path):
    """The scheme option overrides the configured scheme."""
    script = _script(tmp_path, "- press: [0, 0]\n- hover: [1, 1]\n- release:\n")

    result = runner.invoke(
        app, ["replay", str(script), "--config", str(config_path), "--scheme", "linear"]
    )

    assert result.exit_code == 0
    assert "Commit 1: 6 slot(s) selected" in result.output


def test_replay_touch_drag_and_tap(config_path, tmp_path):
    """Touch updates are resolved through the unit-cell probe."""
    script = _script(
        tmp_path,
        "- down: [0, 0]\n- update: [2.5, 1.5]\n- up\n- down: [4, 3]\n- up\n",
    )

    result = runner.invoke(app, ["replay", str(script), "--config", str(config_path)])

    assert result.exit_code == 0
    assert "Commit 1: 6 slot(s) selected" in result.output
    assert "Commit 2: 7 slot(s) selected" in result.output


def test_replay_unknown_scheme(config_path, tmp_path):
    """An unknown scheme exits with an error."""
    script = _script(tmp_path, "- press: [0, 0]\n")

    result = runner.invoke(
        app, ["replay", str(script), "--config", str(config_path), "--scheme", "diagonal"]
    )

    assert result.exit_code == 1
    assert "Unknown selection scheme" in result.output


@pytest.mark.parametrize("cell", ["[9, 0]", "[0, 4]", "[-1, 0]", "[0, -2]"])
def test_replay_cell_outside_grid(config_path, tmp_path, cell):
    """Cells outside the grid are rejected instead of wrapping around."""
    script = _script(tmp_path, f"- press: {cell}\n- release\n")

    result = runner.invoke(app, ["replay", str(script), "--config", str(config_path)])

    assert result.exit_code == 1
    assert "outside the 5x4 grid" in result.output


class TestLoadScript:
    """Tests for gesture script parsing."""

    def test_parses_events(self, tmp_path):
        """Mappings and bare event names are both accepted."""
        script = _script(tmp_path, "events:\n  - press: [0, 1]\n  - release:\n  - cancel\n")

        assert load_script(script) == [("press", [0, 1]), ("release", None), ("cancel", None)]

    @pytest.mark.parametrize(
        "content",
        [
            "- wiggle: [0, 0]\n",
            "- press: 3\n",
            "- press: [0, 0]\n  hover: [1, 1]\n",
            "- select: 2024-11-25\n",
            "just a string\n",
        ],
    )
    def test_rejects_malformed_events(self, tmp_path, content):
        """Malformed entries raise ValueError."""
        with pytest.raises(ValueError):
            load_script(_script(tmp_path, content))


def test_unit_cell_probe():
    """Coordinates map to (day, time) handles inside the grid only."""
    probe = unit_cell_probe(build_grid("2024-11-25", 2, 9, 12, 1))

    assert probe(1.9, 0.2) == (1, 0)
    assert probe(2.0, 0.0) is None
    assert probe(-0.1, 1.0) is None
