"""Serial line completion time simulation package."""

from .distributions import DistributionConfig, DistributionFactory
from .entities import Line, LineSpec, Segment, SegmentRecord, TopologyError, build_line, serial_line_spec
from .monte_carlo import MonteCarloResult, MonteCarloSummary, estimate_duration_distribution, run_monte_carlo
from .simulation import LineInvariantError, SimulationConfig, simulate_line, step_transition

__all__ = [
    "DistributionConfig",
    "DistributionFactory",
    "Line",
    "LineSpec",
    "Segment",
    "SegmentRecord",
    "TopologyError",
    "build_line",
    "serial_line_spec",
    "MonteCarloResult",
    "MonteCarloSummary",
    "estimate_duration_distribution",
    "run_monte_carlo",
    "LineInvariantError",
    "SimulationConfig",
    "simulate_line",
    "step_transition",
]
