"""Shared fixtures for line simulator tests."""

from __future__ import annotations

import pytest

from linesim.entities import build_line, serial_line_spec


@pytest.fixture
def demo_line():
    """Three segment line with the default Poisson(mean 2) service time."""
    return build_line(serial_line_spec(3, name="Demo line"))


@pytest.fixture
def constant_line():
    """Factory for serial lines whose segments all take a fixed number of ticks."""

    def factory(count: int, ticks: int, name: str = "Constant line"):
        return build_line(serial_line_spec(count, {"type": "constant", "value": ticks}, name=name))

    return factory
