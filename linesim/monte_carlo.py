"""Monte Carlo utilities for estimating completion time distributions."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
import logging
from statistics import mean, pstdev
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np

from .entities import Line
from .simulation import SimulationConfig, SimulationRunResult, simulate_line

logger = logging.getLogger(__name__)


@dataclass
class MonteCarloResult:
    """Stores the collection of individual simulation runs for a line."""

    line_name: str
    runs: List[SimulationRunResult]

    def durations(self) -> List[int]:
        return [run.duration for run in self.runs]

    def distribution(self) -> Dict[int, float]:
        """Empirical probability of each observed duration, sorted by duration."""

        total = len(self.runs)
        if not total:
            return {}
        counts = Counter(self.durations())
        return {duration: counts[duration] / total for duration in sorted(counts)}

    def completion_rate(self) -> float:
        if not self.runs:
            return 0.0
        return sum(1 for run in self.runs if run.finished) / len(self.runs)


@dataclass
class MonteCarloSummary:
    """Aggregated Monte Carlo statistics."""

    line_name: str
    simulations: int
    mean_duration: float
    std_duration: float
    min_duration: int
    max_duration: int
    mode_duration: int
    completion_rate: float
    distribution: Dict[int, float]

    @classmethod
    def from_result(cls, result: MonteCarloResult) -> "MonteCarloSummary":
        durations = result.durations()
        if not durations:
            raise ValueError(f"No runs recorded for line '{result.line_name}'.")
        distribution = result.distribution()
        top = max(distribution.values())
        mode_duration = min(value for value, prob in distribution.items() if prob == top)
        return cls(
            line_name=result.line_name,
            simulations=len(durations),
            mean_duration=mean(durations),
            std_duration=pstdev(durations) if len(durations) > 1 else 0.0,
            min_duration=min(durations),
            max_duration=max(durations),
            mode_duration=mode_duration,
            completion_rate=result.completion_rate(),
            distribution=distribution,
        )


def run_monte_carlo(
    line: Line,
    items: Sequence[Any],
    max_steps: int,
    simulations: int,
    base_seed: Optional[int] = None,
) -> MonteCarloResult:
    """Run ``simulations`` independent runs, each with its own random generator."""

    if simulations < 1:
        raise ValueError("At least one simulation is required.")
    items = list(items)
    logger.info(
        "Running %d simulations of %s with %d items (max %d steps)",
        simulations,
        line.name,
        len(items),
        max_steps,
    )
    config = SimulationConfig(max_steps=max_steps)
    runs: List[SimulationRunResult] = []
    for i in range(simulations):
        seed = None if base_seed is None else base_seed + i
        runs.append(simulate_line(line, items, config, rng=np.random.default_rng(seed)))
    result = MonteCarloResult(line_name=line.name, runs=runs)

    truncated = sum(1 for run in runs if not run.finished)
    if truncated:
        logger.warning(
            "%d of %d runs of %s hit the %d step budget before finishing",
            truncated,
            simulations,
            line.name,
            max_steps,
        )
    logger.info("Finished %d simulations of %s", simulations, line.name)
    return result


def estimate_duration_distribution(
    line: Line,
    items: Sequence[Any],
    max_steps: int,
    simulations: int,
    base_seed: Optional[int] = None,
) -> Dict[int, float]:
    """Empirical distribution of completion durations over independent runs."""

    return run_monte_carlo(line, items, max_steps, simulations, base_seed=base_seed).distribution()


def summarize_results(results: Iterable[MonteCarloResult]) -> List[MonteCarloSummary]:
    return [MonteCarloSummary.from_result(result) for result in results]
