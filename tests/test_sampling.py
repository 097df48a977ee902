"""
tests/test_sampling.py - Stratified half-tide sampling and annual estimates.
"""

import dataclasses

import numpy as np
import pytest

from tidal_lagoon.config import SAMPLES_PER_STRATUM, ConfigurationError, SimulationConfig
from tidal_lagoon.energy import LagoonSimulator
from tidal_lagoon.tides import (
    HalfTideSample,
    NaiveWindowSampler,
    StratifiedSampler,
    TidalSignalModel,
    get_sampler,
    sample_half_tides,
    stratified_design_variance,
    stratum_sizes,
)


REFERENCE_GENOME = np.array([1.36, 0.0, 2.5, 1.0])


class TestStratifiedSampler:
    """Test allocation and weights."""

    def test_weights_sum_to_year(self, day_config, day_sample):
        assert day_sample.weights.sum() == pytest.approx(day_config.half_tides_per_year)

    def test_every_stratum_sampled(self, day_sample):
        assert set(day_sample.strata) == set(day_sample.stratum_sizes)

    def test_weight_is_stratum_size_over_samples(self, day_sample):
        allocation = day_sample.allocation()
        strata = np.asarray(day_sample.strata)
        for label, n_h in allocation.items():
            expected = day_sample.stratum_sizes[label] / n_h
            np.testing.assert_allclose(day_sample.weights[strata == label], expected)

    def test_indices_unique_and_in_year(self, day_config, day_sample):
        indices = day_sample.half_tide_indices
        assert len(np.unique(indices)) == len(indices)
        assert indices.min() >= 0
        assert indices.max() < day_config.half_tides_per_year

    def test_deterministic(self, day_config, day_signal, day_sample):
        again = sample_half_tides(day_config, day_signal)
        np.testing.assert_array_equal(again.half_tide_indices, day_sample.half_tide_indices)

    def test_seed_changes_sample(self, day_config, day_signal, day_sample):
        other = StratifiedSampler(seed=day_config.seed + 1).sample(day_config, day_signal)
        assert not np.array_equal(other.half_tide_indices, day_sample.half_tide_indices)

    def test_year_samples_every_half_tide(self, year_config):
        sample = sample_half_tides(year_config, TidalSignalModel(year_config))
        assert sample.n_samples == year_config.half_tides_per_year
        np.testing.assert_allclose(sample.weights, 1.0)

    def test_sample_follows_allocation(self, day_config, day_signal, day_sample):
        table = day_signal.half_tide_table()
        assert day_sample.allocation() == StratifiedSampler().allocation_for(day_config, day_signal)
        assert day_sample.stratum_sizes == stratum_sizes(table)
        assert sum(day_sample.stratum_sizes.values()) == len(table)

    def test_default_effort(self, day_sample):
        assert day_sample.n_samples >= len(day_sample.stratum_sizes) * (SAMPLES_PER_STRATUM - 1)

    def test_allocation_bounds(self):
        sizes = {"a": 100, "b": 10, "c": 2}
        allocation = StratifiedSampler().allocate(sizes, budget=4, samples_per_stratum=8)
        assert all(1 <= allocation[k] <= sizes[k] for k in sizes)
        assert allocation["a"] > allocation["b"] >= allocation["c"]

    def test_allocation_grows_with_budget(self):
        sizes = {"a": 400, "b": 300, "c": 200}
        sampler = StratifiedSampler()
        small = sampler.allocate(sizes, budget=4, samples_per_stratum=8)
        large = sampler.allocate(sizes, budget=100, samples_per_stratum=8)
        assert all(large[k] >= small[k] for k in sizes)
        assert sum(large.values()) > sum(small.values())


class TestEstimator:
    """Test variance and confidence intervals."""

    def test_design_variance_decreases_with_horizon(self, day_signal):
        table = day_signal.half_tide_table()
        sampler = StratifiedSampler()
        variances = []
        for horizon in ("day", "week", "year"):
            config = SimulationConfig.for_horizon(horizon)
            allocation = sampler.allocation_for(config, day_signal)
            variances.append(
                stratified_design_variance(table["range_m"], table["stratum"], allocation)
            )
        assert variances[0] > variances[1] > variances[2]
        assert variances[2] == pytest.approx(0.0)

    def test_design_variance_decreases_with_effort(self, day_config, day_signal):
        """On a fixed signal, more samples per stratum give a tighter estimate."""
        table = day_signal.half_tide_table()
        variances = []
        for per_stratum in (1, 2, 4, 8, 16):
            allocation = StratifiedSampler(samples_per_stratum=per_stratum).allocation_for(
                day_config, day_signal, table
            )
            variances.append(
                stratified_design_variance(table["range_m"], table["stratum"], allocation)
            )
        assert all(a > b for a, b in zip(variances, variances[1:]))

    def test_energy_spread_shrinks_with_effort(self, day_config, day_signal):
        """Across sampler seeds, annual energy estimates tighten as effort grows."""
        spreads = []
        for per_stratum in (2, 16):
            config = dataclasses.replace(day_config, samples_per_stratum=per_stratum)
            estimates = [
                LagoonSimulator.from_signal(dataclasses.replace(config, seed=seed), day_signal)
                .simulate(REFERENCE_GENOME).annual_energy_gwh
                for seed in range(10)
            ]
            spreads.append(np.std(estimates))
        assert spreads[1] < spreads[0]

    def test_annual_total_of_ones_is_year(self, day_config, day_sample):
        ones = np.ones(day_sample.n_samples)
        assert day_sample.annual_total(ones) == pytest.approx(day_config.half_tides_per_year)
        assert day_sample.variance(ones) == pytest.approx(0.0)

    def test_confidence_interval_brackets_total(self, day_sample):
        values = np.linspace(1.0, 2.0, day_sample.n_samples)
        low, high = day_sample.confidence_interval(values)
        total = day_sample.annual_total(values)
        assert low < total < high

    def test_naive_variance_undefined(self, day_config, day_signal):
        sample = NaiveWindowSampler().sample(day_config, day_signal)
        assert np.isnan(sample.variance(np.ones(sample.n_samples)))


class TestHorizonConsistency:
    """Annual estimates agree across horizons; the naive window does not."""

    @pytest.fixture(scope="class")
    def annual_energy(self, year_simulator):
        return year_simulator.simulate(REFERENCE_GENOME).annual_energy_gwh

    @pytest.mark.parametrize("horizon", ["day", "week"])
    @pytest.mark.parametrize("seed", range(10))
    def test_stratified_matches_annual(self, horizon, seed, annual_energy, day_signal):
        config = SimulationConfig.for_horizon(horizon, seed=seed)
        simulator = LagoonSimulator.from_signal(config, day_signal)
        estimate = simulator.simulate(REFERENCE_GENOME).annual_energy_gwh
        assert estimate == pytest.approx(annual_energy, rel=0.05)

    @pytest.mark.parametrize("horizon", ["day", "week"])
    def test_naive_window_overstates(self, horizon, annual_energy):
        config = SimulationConfig.for_horizon(horizon, sampling_strategy="naive")
        estimate = LagoonSimulator.from_signal(config).simulate(REFERENCE_GENOME).annual_energy_gwh
        assert estimate > annual_energy * 1.05


class TestStrategyRegistry:
    """Test strategy lookup."""

    def test_get_sampler(self):
        assert isinstance(get_sampler("stratified"), StratifiedSampler)
        assert isinstance(get_sampler("naive"), NaiveWindowSampler)

    def test_unknown_sampler(self):
        with pytest.raises(ConfigurationError):
            get_sampler("monte-carlo")

    def test_naive_window_is_contiguous(self, day_config, day_signal):
        sample = NaiveWindowSampler().sample(day_config, day_signal)
        assert isinstance(sample, HalfTideSample)
        assert sample.n_samples == day_config.total_half_tides
        assert np.all(np.diff(sample.half_tide_indices) == 1)
        assert sample.weights.sum() == pytest.approx(day_config.half_tides_per_year)
