"""Tests for the interactive command-line application."""

from __future__ import annotations

import pytest

from linesim import app
from linesim.entities import build_line


def _scripted_input(monkeypatch, responses):
    answers = iter(responses)
    monkeypatch.setattr("builtins.input", lambda _prompt="": next(answers))


def test_parse_items():
    assert app.parse_items(" a, b ,,c ") == ["a", "b", "c"]
    assert app.parse_items("") == []


def test_format_distribution():
    rows = app.format_distribution({3: 0.25, 4: 0.75}, width=8)

    assert rows[0].split() == ["Ticks", "Prob"]
    assert rows[1].split() == ["3", "0.250", "###"]
    assert rows[2].split() == ["4", "0.750", "########"]
    assert app.format_distribution({}) == ["  (no runs)"]


def test_sample_lines_are_valid():
    app._build_sample_lines()
    for line_input in app.SAMPLE_LINES.values():
        assert build_line(line_input.spec).name == line_input.name


def test_custom_line_with_shared_service(monkeypatch):
    _scripted_input(monkeypatch, ["Custom", "4", "y", "2", "1"])

    line_input = app.build_line_from_user(1)
    line = build_line(line_input.spec)

    assert line.name == "Custom"
    assert line.segment_ids == (0, 1, 2, 3)
    assert [service.description for service in line.services] == ["Constant(1)"] * 3


def test_invalid_number_is_asked_again(monkeypatch, capsys):
    _scripted_input(monkeypatch, ["abc", "-2", "5"])

    assert app._prompt_int("Count", 1, minimum=0) == 5
    assert capsys.readouterr().out.count("Please enter an integer") == 2


@pytest.mark.parametrize("seed", ["3", ""])
def test_main_prints_distribution(monkeypatch, capsys, seed):
    _scripted_input(monkeypatch, ["1", "1", "1", "a, b", "20", "200", seed])

    app.main()

    out = capsys.readouterr().out
    assert "=== Demo line ===" in out
    assert "Ticks" in out
    assert "Simulation complete" in out


def test_overflowing_number_is_asked_again(monkeypatch, capsys):
    _scripted_input(monkeypatch, ["inf", "1e999", "4"])

    assert app._prompt_int("Count", 1, minimum=0) == 4
    assert capsys.readouterr().out.count("Please enter an integer") == 2


def test_non_finite_float_is_asked_again(monkeypatch, capsys):
    _scripted_input(monkeypatch, ["nan", "inf", "2.5"])

    assert app._prompt_float("Mean", 2.0) == 2.5
    assert capsys.readouterr().out.count("Please enter a number") == 2


def test_custom_line_needs_two_segments(monkeypatch, capsys):
    _scripted_input(monkeypatch, ["Short", "1", "2", "y", "2", "0"])

    line = build_line(app.build_line_from_user(1).spec)

    assert line.segment_ids == (0, 1)
    assert "greater than or equal to 2" in capsys.readouterr().out


def test_bad_seed_is_asked_again(monkeypatch, capsys):
    _scripted_input(monkeypatch, ["1", "1", "1", "a, b", "20", "50", "x", "5"])

    app.main()

    out = capsys.readouterr().out
    assert out.count("Please enter a whole number or leave the seed blank.") == 1
    assert "Simulation complete" in out


def test_blank_seed_after_bad_seed(monkeypatch, capsys):
    _scripted_input(monkeypatch, ["1", "1", "1", "a, b", "20", "50", "1.5", ""])

    app.main()

    assert "Simulation complete" in capsys.readouterr().out
