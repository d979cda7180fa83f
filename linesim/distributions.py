"""Service time distributions for the line simulator.

Every distribution yields a whole number of ticks and draws only from the
numpy ``Generator`` it is given.
"""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Callable, Dict, Optional

import numpy as np


@dataclass
class DistributionConfig:
    """User friendly specification of a service time distribution."""

    type: str
    parameters: Dict[str, float]

    def describe(self) -> str:
        items = ", ".join(f"{k}={v:g}" for k, v in self.parameters.items())
        return f"{self.type.title()}({items})"


class Distribution:
    """Integer valued distribution of service ticks."""

    def __init__(self, sampler: Callable[[np.random.Generator], int], description: str) -> None:
        self._sampler = sampler
        self.description = description

    def sample(self, rng: np.random.Generator) -> int:
        value = self._sampler(rng)
        return max(0, int(value))

    def __repr__(self) -> str:
        return f"Distribution({self.description})"


def _require(params: Dict[str, float], key: str, dist_name: str) -> float:
    value = params.get(key)
    if value is None:
        raise ValueError(f"{dist_name} distribution requires '{key}'.")
    if not math.isfinite(value):
        raise ValueError(f"{dist_name} '{key}' must be a finite number.")
    return value


def _require_int(params: Dict[str, float], key: str, dist_name: str) -> int:
    value = _require(params, key, dist_name)
    if float(value) != int(value):
        raise ValueError(f"{dist_name} '{key}' must be a whole number of ticks.")
    if value < 0:
        raise ValueError(f"{dist_name} '{key}' must not be negative.")
    return int(value)


class DistributionFactory:
    """Factory for constructing distributions from configuration dictionaries."""

    SUPPORTED_TYPES = {"poisson", "constant", "uniform", "geometric"}

    @staticmethod
    def from_config(config: DistributionConfig) -> Distribution:
        dist_type = config.type.lower().strip()
        params = config.parameters
        if dist_type == "poisson":
            mean = _require(params, "mean", "Poisson")
            if mean < 0:
                raise ValueError("Poisson mean must not be negative.")
            description = f"Poisson(mean={mean:g})"

            def sampler(rng: np.random.Generator) -> int:
                return rng.poisson(mean)

            return Distribution(sampler, description)

        if dist_type == "constant":
            value = _require_int(params, "value", "Constant")
            description = f"Constant({value})"

            def sampler(rng: np.random.Generator) -> int:
                return value

            return Distribution(sampler, description)

        if dist_type == "uniform":
            low = _require_int(params, "min", "Uniform")
            high = _require_int(params, "max", "Uniform")
            if high < low:
                raise ValueError("Uniform distribution requires 'min' <= 'max'.")
            description = f"Uniform({low}, {high})"

            def sampler(rng: np.random.Generator) -> int:
                return rng.integers(low, high, endpoint=True)

            return Distribution(sampler, description)

        if dist_type == "geometric":
            mean = _require(params, "mean", "Geometric")
            if mean < 0:
                raise ValueError("Geometric mean must not be negative.")
            description = f"Geometric(mean={mean:g})"
            if mean == 0:
                return Distribution(lambda rng: 0, description)
            # failures before the first success
            success = 1.0 / (mean + 1.0)

            def sampler(rng: np.random.Generator) -> int:
                return rng.geometric(success) - 1

            return Distribution(sampler, description)

        raise ValueError(f"Unsupported distribution type '{config.type}'.")

    @staticmethod
    def from_dict(definition: Dict[str, float]) -> Distribution:
        dist_type = definition.get("type")
        if not dist_type:
            raise ValueError("Distribution definition requires a 'type' field.")
        params = {k: v for k, v in definition.items() if k != "type"}
        return DistributionFactory.from_config(DistributionConfig(type=dist_type, parameters=params))


DEFAULT_SERVICE = {"type": "poisson", "mean": 2}


def default_service_distribution() -> Distribution:
    """Poisson service time with a mean of two ticks."""

    return DistributionFactory.from_dict(DEFAULT_SERVICE)


def service_from_definition(definition: Optional[Dict[str, float]]) -> Distribution:
    if definition is None:
        return default_service_distribution()
    return DistributionFactory.from_dict(definition)
