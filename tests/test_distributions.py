"""Tests for service time distributions."""

from __future__ import annotations

from statistics import mean

import numpy as np
import pytest

from linesim.distributions import (
    DistributionConfig,
    DistributionFactory,
    default_service_distribution,
    service_from_definition,
)


def _draws(definition, count=5000, seed=1):
    rng = np.random.default_rng(seed)
    distribution = DistributionFactory.from_dict(definition)
    return [distribution.sample(rng) for _ in range(count)]


class TestPoisson:

    def test_mean_close_to_parameter(self):
        draws = _draws({"type": "poisson", "mean": 2})
        assert mean(draws) == pytest.approx(2.0, abs=0.15)
        assert all(isinstance(value, int) and value >= 0 for value in draws)

    def test_zero_mean_always_zero(self):
        assert set(_draws({"type": "poisson", "mean": 0}, count=100)) == {0}

    def test_large_mean(self):
        draws = _draws({"type": "poisson", "mean": 100}, count=2000)
        assert mean(draws) == pytest.approx(100.0, abs=1.5)

    def test_negative_mean_rejected(self):
        with pytest.raises(ValueError):
            DistributionFactory.from_dict({"type": "poisson", "mean": -1})

    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_non_finite_mean_rejected(self, value):
        with pytest.raises(ValueError, match="finite"):
            DistributionFactory.from_dict({"type": "poisson", "mean": value})

    def test_default_service_is_poisson_two(self):
        assert default_service_distribution().description == "Poisson(mean=2)"
        assert service_from_definition(None).description == "Poisson(mean=2)"


class TestOtherDistributions:

    def test_constant(self):
        assert set(_draws({"type": "constant", "value": 3}, count=50)) == {3}

    @pytest.mark.parametrize("value", [2.5, -1])
    def test_constant_requires_whole_non_negative_ticks(self, value):
        with pytest.raises(ValueError):
            DistributionFactory.from_dict({"type": "constant", "value": value})

    def test_constant_accepts_float_whole_number(self):
        distribution = DistributionFactory.from_dict({"type": "constant", "value": 2.0})
        assert distribution.sample(np.random.default_rng(0)) == 2

    def test_uniform_stays_in_range(self):
        draws = _draws({"type": "uniform", "min": 1, "max": 3}, count=500)
        assert set(draws) == {1, 2, 3}

    def test_uniform_bounds_checked(self):
        with pytest.raises(ValueError):
            DistributionFactory.from_dict({"type": "uniform", "min": 4, "max": 3})

    def test_geometric_mean(self):
        draws = _draws({"type": "geometric", "mean": 2})
        assert mean(draws) == pytest.approx(2.0, abs=0.2)

    def test_geometric_zero_mean(self):
        assert set(_draws({"type": "geometric", "mean": 0}, count=50)) == {0}

    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_geometric_non_finite_mean_rejected(self, value):
        with pytest.raises(ValueError, match="finite"):
            DistributionFactory.from_dict({"type": "geometric", "mean": value})

    def test_constant_non_finite_value_rejected(self):
        with pytest.raises(ValueError, match="finite"):
            DistributionFactory.from_dict({"type": "constant", "value": float("inf")})


class TestFactory:

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unsupported"):
            DistributionFactory.from_dict({"type": "weibull", "mean": 1})

    def test_missing_type(self):
        with pytest.raises(ValueError, match="type"):
            DistributionFactory.from_dict({"mean": 1})

    def test_missing_parameter_is_named(self):
        with pytest.raises(ValueError, match="'mean'"):
            DistributionFactory.from_dict({"type": "poisson"})

    def test_same_seed_same_draws(self):
        assert _draws({"type": "poisson", "mean": 2}, count=50, seed=9) == _draws(
            {"type": "poisson", "mean": 2}, count=50, seed=9
        )

    def test_config_description(self):
        assert DistributionConfig(type="poisson", parameters={"mean": 2}).describe() == "Poisson(mean=2)"
