"""Tests for distribution charts."""

from __future__ import annotations

from matplotlib.figure import Figure

from linesim.charts import distribution_figure, plot_distribution
from linesim.monte_carlo import MonteCarloSummary, run_monte_carlo


def test_one_bar_per_duration(demo_line):
    summary = MonteCarloSummary.from_result(run_monte_carlo(demo_line, ["a", "b"], 20, 300, base_seed=1))
    ax = Figure().add_subplot(111)

    plot_distribution(ax, summary)

    assert len(ax.patches) == len(summary.distribution)
    assert ax.get_xlabel() == "Duration (ticks)"
    assert ax.get_title() == "Demo line"


def test_placeholder_without_results():
    ax = Figure().add_subplot(111)

    plot_distribution(ax, None)

    assert [text.get_text() for text in ax.texts] == ["Run a simulation to view results"]
    assert not ax.patches


def test_figure_helper(constant_line):
    summary = MonteCarloSummary.from_result(run_monte_carlo(constant_line(2, 1), ["a"], 10, 5))
    figure = distribution_figure(summary)
    assert len(figure.axes) == 1
    assert len(figure.axes[0].patches) == 1
