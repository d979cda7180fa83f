"""Interactive command-line application for the line simulator."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from .distributions import DEFAULT_SERVICE
from .entities import LineSpec, SegmentRecord, build_line, serial_line_spec
from .monte_carlo import MonteCarloResult, MonteCarloSummary, run_monte_carlo, summarize_results


@dataclass
class LineInput:
    name: str
    spec: LineSpec


SAMPLE_LINES: Dict[str, LineInput] = {}


def _build_sample_lines() -> None:
    global SAMPLE_LINES
    if SAMPLE_LINES:
        return
    demo = LineInput(name="Demo line", spec=serial_line_spec(3, dict(DEFAULT_SERVICE), name="Demo line"))
    long_line = LineInput(name="Long line", spec=serial_line_spec(6, dict(DEFAULT_SERVICE), name="Long line"))
    mixed_services = [
        {"type": "constant", "value": 1},
        {"type": "poisson", "mean": 4},
        {"type": "uniform", "min": 0, "max": 2},
    ]
    mixed_segments = [
        SegmentRecord(id=f"s{idx}", to=f"s{idx + 1}", service=service) for idx, service in enumerate(mixed_services)
    ]
    mixed_segments.append(SegmentRecord(id=f"s{len(mixed_services)}"))
    mixed = LineInput(name="Mixed line", spec=LineSpec(segments=mixed_segments, name="Mixed line"))
    SAMPLE_LINES = {line.name: line for line in (demo, long_line, mixed)}


def _input_with_default(prompt: str, default: Optional[str] = None) -> str:
    suffix = f" [{default}]" if default is not None else ""
    response = input(f"{prompt}{suffix}: ").strip()
    if not response and default is not None:
        return default
    return response


def _prompt_float(prompt: str, default: float, minimum: float = 0.0) -> float:
    while True:
        response = _input_with_default(prompt, f"{default}")
        try:
            value = float(response)
            if not math.isfinite(value) or value < minimum:
                raise ValueError
            return value
        except ValueError:
            print(f"Please enter a number greater than or equal to {minimum}.")


def _prompt_int(prompt: str, default: int, minimum: int = 0) -> int:
    while True:
        response = _input_with_default(prompt, f"{default}")
        try:
            value = int(float(response))
            if value < minimum:
                raise ValueError
            return value
        except (ValueError, OverflowError):
            print(f"Please enter an integer greater than or equal to {minimum}.")


def _prompt_seed() -> Optional[int]:
    while True:
        response = _input_with_default("Random seed (leave blank for random)", "")
        if not response:
            return None
        try:
            return int(response)
        except ValueError:
            print("Please enter a whole number or leave the seed blank.")


def _prompt_choice(prompt: str, options: List[str], default: Optional[str] = None) -> str:
    option_map = {str(i + 1): opt for i, opt in enumerate(options)}
    while True:
        for idx, option in enumerate(options, start=1):
            marker = "" if default != option else " (default)"
            print(f"  {idx}. {option}{marker}")
        response = _input_with_default(prompt, None if default is None else str(options.index(default) + 1))
        chosen = option_map.get(response)
        if chosen:
            return chosen
        print("Please select one of the listed options by number.")


def _prompt_service() -> Dict[str, float]:
    dist_types = ["Poisson", "Constant", "Uniform", "Geometric"]
    chosen = _prompt_choice("Select service time distribution", dist_types, default="Poisson").lower()
    if chosen == "poisson":
        return {"type": "poisson", "mean": _prompt_float("  Mean service ticks", 2.0)}
    if chosen == "constant":
        return {"type": "constant", "value": _prompt_int("  Service ticks", 2)}
    if chosen == "uniform":
        low = _prompt_int("  Minimum ticks", 0)
        high = _prompt_int("  Maximum ticks", max(low, 4), minimum=low)
        return {"type": "uniform", "min": low, "max": high}
    return {"type": "geometric", "mean": _prompt_float("  Mean service ticks", 2.0)}


def build_line_from_user(index: int) -> LineInput:
    print(f"\nConfiguring line #{index}...")
    name = _input_with_default("Line name", f"Line {index}")
    count = _prompt_int("How many segments (including the ejecting segment)?", 3, minimum=2)
    holding = count - 1
    services: List[Dict[str, float]] = []
    same = _input_with_default("Use the same service time for every segment? (y/n)", "y").lower()
    if same.startswith("y"):
        service = _prompt_service()
        services = [dict(service) for _ in range(holding)]
    else:
        for seg_index in range(holding):
            print(f"Define segment {seg_index}:")
            services.append(_prompt_service())
    records = [SegmentRecord(id=idx, to=idx + 1, service=services[idx]) for idx in range(holding)]
    records.append(SegmentRecord(id=holding))
    return LineInput(name=name, spec=LineSpec(segments=records, entry=0, terminal=holding, name=name))


def select_line_from_samples() -> LineInput:
    _build_sample_lines()
    options = list(SAMPLE_LINES.keys())
    chosen = _prompt_choice("Choose a sample line", options, default=options[0])
    return SAMPLE_LINES[chosen]


def configure_lines() -> List[LineInput]:
    print("Welcome to the Line Completion Time Simulator!")
    print("You can load one of the ready-to-run examples or describe your own line.\n")
    number_of_lines = _prompt_int("How many lines would you like to simulate?", 1, minimum=1)
    lines: List[LineInput] = []
    for idx in range(1, number_of_lines + 1):
        print(f"\nLine #{idx}")
        choice = _prompt_choice("Use a sample or build custom?", ["Sample line", "Create manually"], default="Sample line")
        if choice == "Sample line":
            lines.append(select_line_from_samples())
        else:
            lines.append(build_line_from_user(idx))
    return lines


def parse_items(text: str) -> List[str]:
    """Split a comma separated item list, dropping blanks."""

    return [part.strip() for part in text.split(",") if part.strip()]


def _format_value(value: float, unit: str = "") -> str:
    if math.isnan(value) or math.isinf(value):
        return "-"
    return f"{value:8.3f}{unit}"


def format_distribution(distribution: Dict[int, float], width: int = 40) -> List[str]:
    """Render a duration table with a proportional bar per row."""

    if not distribution:
        return ["  (no runs)"]
    peak = max(distribution.values())
    rows = [f"  {'Ticks':>6}  {'Prob':>7}"]
    for duration, probability in distribution.items():
        bar = "#" * max(1, round(width * probability / peak)) if probability > 0 else ""
        rows.append(f"  {duration:>6}  {probability:7.3f}  {bar}")
    return rows


def _print_line_summary(summary: MonteCarloSummary) -> None:
    print(f"\n=== {summary.line_name} ===")
    print(f"Duration (ticks): {_format_value(summary.mean_duration)} ± {_format_value(summary.std_duration)}")
    print(f"Range: {summary.min_duration} .. {summary.max_duration}, mode {summary.mode_duration}")
    print(f"Completed within budget: {summary.completion_rate * 100:.1f}% of {summary.simulations} runs")
    for row in format_distribution(summary.distribution):
        print(row)


def _compare_durations(summaries: List[MonteCarloSummary]) -> None:
    if len(summaries) < 2:
        return
    print("\nMean duration comparison (lower is better):")
    reference = min(summaries, key=lambda s: s.mean_duration).mean_duration
    for summary in summaries:
        delta = summary.mean_duration - reference
        indicator = "*" if abs(delta) < 1e-6 else "+"
        print(f"  {summary.line_name:<20} {_format_value(summary.mean_duration)} ({indicator}{delta:0.3f})")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    line_inputs = configure_lines()
    items = parse_items(_input_with_default("Items to process (comma separated)", "a, b"))
    max_steps = _prompt_int("Maximum ticks per run?", 20, minimum=0)
    sims = _prompt_int("Number of Monte Carlo simulations?", 1000, minimum=1)
    base_seed = _prompt_seed()

    monte_results: List[MonteCarloResult] = []
    for line_input in line_inputs:
        try:
            line = build_line(line_input.spec)
        except ValueError as exc:
            print(f"Skipping {line_input.name}: {exc}")
            continue
        print(f"{line.name}: {line.describe()}")
        monte_results.append(run_monte_carlo(line, items, max_steps, sims, base_seed=base_seed))

    summaries = summarize_results(monte_results)
    for summary in summaries:
        _print_line_summary(summary)
    _compare_durations(summaries)

    print("\nSimulation complete. Thank you for using the Line Completion Time Simulator!")


if __name__ == "__main__":
    main()
