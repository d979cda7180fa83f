"""Matplotlib rendering of completion time distributions."""
from __future__ import annotations

from typing import Optional

from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.ticker import MaxNLocator

from .monte_carlo import MonteCarloSummary

BAR_COLOR = "#4C78A8"
MEAN_COLOR = "#E45756"


def plot_distribution(ax: Axes, summary: Optional[MonteCarloSummary]) -> None:
    """Draw the empirical duration histogram of ``summary`` onto ``ax``."""

    ax.clear()
    if summary is None or not summary.distribution:
        ax.text(0.5, 0.5, "Run a simulation to view results", ha="center", va="center")
        return
    durations = list(summary.distribution.keys())
    probabilities = list(summary.distribution.values())
    bars = ax.bar(durations, probabilities, width=0.8, color=BAR_COLOR)
    ax.axvline(summary.mean_duration, color=MEAN_COLOR, linestyle="--", label=f"mean {summary.mean_duration:.2f}")
    ax.set_title(summary.line_name)
    ax.set_xlabel("Duration (ticks)")
    ax.set_ylabel("Probability")
    ax.xaxis.set_major_locator(MaxNLocator(integer=True))
    ax.yaxis.set_major_locator(MaxNLocator(5))
    for bar, value in zip(bars, probabilities):
        if value < 0.05:
            continue
        ax.annotate(
            f"{value:.2f}",
            xy=(bar.get_x() + bar.get_width() / 2, bar.get_height()),
            xytext=(0, 4),
            textcoords="offset points",
            ha="center",
            va="bottom",
            fontsize=8,
        )
    ax.legend(loc="upper right")
    ax.margins(x=0.05)


def distribution_figure(summary: Optional[MonteCarloSummary]) -> Figure:
    figure = Figure(figsize=(5.5, 3.8), dpi=100)
    plot_distribution(figure.add_subplot(111), summary)
    return figure
