"""Tick based simulation engine for serial lines."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
import logging
from typing import Any, Deque, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .entities import Line, Segment

logger = logging.getLogger(__name__)

Chain = Tuple[Segment, ...]


class LineInvariantError(AssertionError):
    """The output sequence diverged from the input sequence; the step logic is broken."""


@dataclass(frozen=True)
class StepResult:
    """Outcome of one tick over the whole chain."""

    accepted: bool
    chain: Chain
    ejected: Any = None


def step_transition(line: Line, chain: Chain, candidate: Any, rng: np.random.Generator) -> StepResult:
    """Advance ``chain`` by one tick, offering ``candidate`` to the entry segment.

    Offers are read head to tail from the previous tick: a segment offers its
    occupant downstream only when that occupant has finished service. Decisions
    are then resolved tail to head, so a segment only learns whether it may hand
    its occupant forward after its successor has decided. Fresh service times
    are drawn in the same tail to head order.

    ``accepted`` reports whether the entry segment took ``candidate``;
    ``ejected`` is the item that left the terminal segment, if any.
    """

    if len(chain) != len(line) or not chain[-1].is_terminal:
        raise ValueError(f"Chain does not match line '{line.name}'.")

    offers: List[Any] = [candidate]
    offers.extend(segment.occupant if segment.is_ready else None for segment in chain[:-1])

    updated = list(chain)
    ejected = None
    accepted = False
    for index in range(len(chain) - 1, -1, -1):
        segment = chain[index]
        offer = offers[index]
        downstream_accepted = accepted
        accepted = False

        if segment.is_terminal:
            # immediate ejector, holds nothing
            if offer is not None:
                accepted = True
                ejected = offer
        elif segment.is_ready:
            if downstream_accepted:
                if offer is not None:
                    updated[index] = segment.holding(offer, line.services[index].sample(rng))
                    accepted = True
                else:
                    updated[index] = segment.emptied()
        elif not segment.is_empty:
            updated[index] = segment.holding(segment.occupant, segment.remaining_service - 1)
        elif offer is not None:
            updated[index] = segment.holding(offer, line.services[index].sample(rng))
            accepted = True

    return StepResult(accepted=accepted, chain=tuple(updated), ejected=ejected)


@dataclass
class SimulationConfig:
    max_steps: int
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.max_steps, bool) or not isinstance(self.max_steps, int) or self.max_steps < 0:
            raise ValueError("max_steps must be a non-negative integer.")


@dataclass
class SimulationState:
    """Mutable state of one run; replaced chain values are swapped in each tick."""

    chain: Chain
    pending_input: Deque[Any]
    collected_output: List[Any] = field(default_factory=list)
    elapsed_ticks: int = 0
    finished: bool = False


@dataclass
class SimulationRunResult:
    """Output of a single simulation run."""

    duration: int
    finished: bool
    output_items: Tuple[Any, ...]
    pending_items: Tuple[Any, ...]
    ticks_executed: int

    @property
    def truncated(self) -> bool:
        return not self.finished


def _check_output(collected: Sequence[Any], expected: Sequence[Any]) -> None:
    position = len(collected) - 1
    if position >= len(expected) or collected[position] != expected[position]:
        raise LineInvariantError(
            f"Item {collected[position]!r} left the line at position {position}, "
            f"which does not match the input order {list(expected)!r}."
        )


def simulate_line(
    line: Line,
    items: Iterable[Any],
    config: SimulationConfig,
    rng: Optional[np.random.Generator] = None,
) -> SimulationRunResult:
    """Feed ``items`` into ``line`` for at most ``config.max_steps`` ticks.

    The clock stops at the tick during which the last item leaves the line. If
    the budget runs out first, the duration equals the budget and the result is
    not finished; that is reported, not raised.
    """

    expected = list(items)
    if any(item is None for item in expected):
        raise ValueError("Items must not be None.")
    if rng is None:
        rng = np.random.default_rng(config.random_seed)

    state = SimulationState(
        chain=line.initial_chain(),
        pending_input=deque(expected),
        finished=not expected,
    )
    ticks_executed = 0
    for _ in range(config.max_steps):
        if state.finished:
            break
        candidate = state.pending_input[0] if state.pending_input else None
        result = step_transition(line, state.chain, candidate, rng)
        ticks_executed += 1
        state.chain = result.chain
        if result.accepted:
            state.pending_input.popleft()
        if result.ejected is not None:
            state.collected_output.append(result.ejected)
            _check_output(state.collected_output, expected)
        state.finished = state.collected_output == expected
        if not state.finished:
            state.elapsed_ticks += 1

    logger.debug(
        "Line %s: %d items, duration=%d, finished=%s",
        line.name,
        len(expected),
        state.elapsed_ticks,
        state.finished,
    )
    return SimulationRunResult(
        duration=state.elapsed_ticks,
        finished=state.finished,
        output_items=tuple(state.collected_output),
        pending_items=tuple(state.pending_input),
        ticks_executed=ticks_executed,
    )
