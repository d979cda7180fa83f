"""Tests for the parts of the GUI that run without a display."""

from __future__ import annotations

import queue

import pytest

pytest.importorskip("tkinter")

from linesim import gui  # noqa: E402
from linesim.entities import TopologyError  # noqa: E402


@pytest.fixture
def studio(monkeypatch):
    errors = []
    monkeypatch.setattr(gui.messagebox, "showerror", lambda title, message, **kwargs: errors.append(message))
    window = gui.SimulatorGUI.__new__(gui.SimulatorGUI)
    window._simulation_queue = queue.Queue()
    window.errors = errors
    return window


def test_sample_lines_build(studio):
    for definition in gui._build_sample_lines().values():
        assert gui.build_line(definition.to_spec()).terminal_id == "eject"


class TestParseInt:

    def test_valid_value(self, studio):
        assert studio._parse_int("12", "Simulations", 1) == 12
        assert studio.errors == []

    @pytest.mark.parametrize("text", ["abc", "0", "inf", "1e999"])
    def test_invalid_value_reported(self, studio, text):
        assert studio._parse_int(text, "Simulations", 1) is None
        assert studio.errors == ["Simulations must be an integer ≥ 1."]


class TestExecuteSimulation:

    def test_results_are_queued(self, studio):
        spec = gui._build_sample_lines()["Demo line"].to_spec()
        studio._execute_simulation([spec], ["a"], 20, 5, 0)

        results = studio._simulation_queue.get_nowait()
        assert [result.line_name for result in results] == ["Demo line"]

    def test_line_without_segments_is_queued_as_error(self, studio):
        spec = gui.LineDefinition(name="Empty", segments=[]).to_spec()
        studio._execute_simulation([spec], ["a"], 20, 5, 0)

        assert isinstance(studio._simulation_queue.get_nowait(), TopologyError)

    def test_unexpected_failure_is_queued(self, studio, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("worker crashed")

        monkeypatch.setattr(gui, "run_monte_carlo", broken)
        spec = gui._build_sample_lines()["Demo line"].to_spec()
        studio._execute_simulation([spec], ["a"], 20, 5, 0)

        payload = studio._simulation_queue.get_nowait()
        assert isinstance(payload, RuntimeError)
        assert str(payload) == "worker crashed"
