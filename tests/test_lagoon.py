"""
tests/test_lagoon.py - Hydraulics and lagoon operation.
"""

import numpy as np
import pytest

from tidal_lagoon.config import GRAVITY, LagoonSpec, MAX_TIDAL_LEVEL_M, MIN_TIDAL_LEVEL_M
from tidal_lagoon.costs import CostModel
from tidal_lagoon.energy import (
    LagoonSimulator,
    SimulationInstability,
    SimulationResult,
    level_change,
    orientation_factors,
    orifice_flow,
    turbine_power_mw,
)
from tidal_lagoon.optimization import initialize_population


# =============================================================================
# HYDRAULICS
# =============================================================================

class TestHydraulics:
    """Test flow and power functions."""

    def test_orifice_flow(self):
        assert orifice_flow(2.0, 5.0) == pytest.approx(2.0 * np.sqrt(2 * GRAVITY * 5.0))

    def test_orifice_flow_zero_head(self):
        assert orifice_flow(100.0, 0.0) == 0.0

    def test_orifice_flow_vectorised(self):
        flows = orifice_flow(np.array([[1.0], [2.0]]), np.array([1.0, 4.0]))
        assert flows.shape == (2, 2)
        assert flows[1, 1] == pytest.approx(4.0 * flows[0, 0])

    def test_power_below_capacity(self):
        power, flow = turbine_power_mw(100.0, 2.0, 0.9, 320.0)
        assert power == pytest.approx(0.9 * 1025 * GRAVITY * 100.0 * 2.0 * 1e-6)
        assert flow == pytest.approx(100.0)

    def test_power_throttled_at_capacity(self):
        power, flow = turbine_power_mw(20_000.0, 4.0, 0.9, 320.0)
        assert power == pytest.approx(320.0)
        assert flow < 20_000.0
        # Throttled flow still delivers exactly the capped power
        assert 0.9 * 1025 * GRAVITY * flow * 4.0 * 1e-6 == pytest.approx(320.0)

    def test_orientation_symmetric_at_zero(self):
        ebb, flood = orientation_factors(0.0, 10.0)
        assert ebb == pytest.approx(flood)
        assert ebb == pytest.approx(np.cos(np.radians(10.0)))

    def test_orientation_favours_ebb(self):
        ebb, flood = orientation_factors(10.0, 10.0)
        assert ebb == pytest.approx(1.0)
        assert flood < ebb

    def test_level_change(self):
        assert level_change(1000.0, 3600.0, 1.0e6) == pytest.approx(3.6)


# =============================================================================
# SIMULATOR
# =============================================================================

class TestLagoonSimulator:
    """Test the 0-D operation model."""

    def test_reference_energy_in_hundreds_of_gwh(self, day_simulator, reference_genome):
        result = day_simulator.simulate(reference_genome)
        assert isinstance(result, SimulationResult)
        assert 100.0 < result.annual_energy_gwh < 1500.0
        low, high = result.annual_energy_ci_gwh
        assert low < result.annual_energy_gwh < high

    def test_operating_metrics(self, day_simulator, reference_genome):
        result = day_simulator.simulate(reference_genome)
        assert 1.0 <= result.average_head_m <= 10.0
        assert result.head_variance_m2 >= 0.0
        assert result.switching_frequency > 0.0
        assert result.operational_complexity == pytest.approx(
            result.switching_frequency * (1.0 + result.head_variance_m2)
        )
        assert 0.0 < result.tidal_range_retention < 1.5

    def test_levels_stay_physical(self, day_simulator):
        genomes = initialize_population(None, 40, seed=3)
        batch = day_simulator.run(genomes)
        assert not batch["unstable"].any()
        assert batch["min_level_m"].min() >= MIN_TIDAL_LEVEL_M
        assert batch["max_level_m"].max() <= MAX_TIDAL_LEVEL_M

    def test_batch_matches_single(self, day_simulator, reference_genome):
        genomes = np.vstack([reference_genome, [1.0, 5.0, 3.0, 1.5]])
        batch = day_simulator.run(genomes)
        single = day_simulator.simulate(genomes[1])
        assert batch["annual_energy_gwh"][1] == pytest.approx(single.annual_energy_gwh)

    def test_energy_is_head_dependent(self, day_simulator):
        """Starting generation at a higher head raises the operating head."""
        low_start = day_simulator.simulate([1.36, 0.0, 1.0, 0.8])
        high_start = day_simulator.simulate([1.36, 0.0, 3.0, 0.8])
        assert high_start.average_head_m > low_start.average_head_m
        assert high_start.annual_energy_gwh != pytest.approx(low_start.annual_energy_gwh)

    def test_unreachable_threshold_gives_no_energy(self, day_simulator):
        """A start head above any tidal range never generates."""
        config = day_simulator.config
        elevations = np.full_like(day_simulator.elevations, 5.0)
        flat = LagoonSimulator(config, day_simulator.sample, elevations)
        result = flat.simulate([1.36, 0.0, 2.0, 1.0])
        assert result.annual_energy_gwh == 0.0
        assert result.switching_frequency == 0.0

    def test_discharge_coefficient_scales_flow(self, day_simulator):
        small = day_simulator.simulate([0.5, 0.0, 2.5, 1.0])
        large = day_simulator.simulate([2.0, 0.0, 2.5, 1.0])
        assert small.annual_energy_gwh != pytest.approx(large.annual_energy_gwh)

    def test_shape_mismatch_rejected(self, day_simulator):
        with pytest.raises(ValueError):
            LagoonSimulator(day_simulator.config, day_simulator.sample, day_simulator.elevations[:, :5])

    def test_sea_range_positive(self, day_simulator):
        assert np.all(day_simulator.sea_range_m > 0)


class TestInstability:
    """Test detection and containment of unphysical states."""

    @pytest.fixture
    def shifted_simulator(self, day_simulator):
        """Sea levels dropped 4 m, below the physical range at low water."""
        return LagoonSimulator(
            day_simulator.config, day_simulator.sample, day_simulator.elevations - 4.0
        )

    def test_simulate_raises(self, shifted_simulator, reference_genome):
        with pytest.raises(SimulationInstability):
            shifted_simulator.simulate(reference_genome)

    def test_batch_flags_unstable(self, shifted_simulator, reference_genome):
        batch = shifted_simulator.run(reference_genome[np.newaxis, :])
        assert batch["unstable"][0]
        assert shifted_simulator.results(batch) == [None]

    def test_non_finite_level_flagged(self, day_simulator, reference_genome):
        elevations = day_simulator.elevations.copy()
        elevations[0, 10] = np.nan
        broken = LagoonSimulator(day_simulator.config, day_simulator.sample, elevations)
        batch = broken.run(reference_genome[np.newaxis, :])
        assert batch["unstable"][0]

    def test_unstable_converted_to_penalty(self, shifted_simulator, reference_genome):
        model = CostModel()
        batch = shifted_simulator.run(reference_genome[np.newaxis, :])
        objectives, penalised = model.objective_matrix(batch)
        assert penalised[0]
        assert objectives[0, 0] == model.params.penalty_unit_cost
        assert objectives[0, 1] == 0.0

    def test_custom_range_limits(self, day_simulator, reference_genome):
        """A narrower permitted range turns a normal run unstable."""
        strict = LagoonSimulator(
            day_simulator.config, day_simulator.sample, day_simulator.elevations,
            lagoon=LagoonSpec(min_level_m=4.0, max_level_m=6.0),
        )
        with pytest.raises(SimulationInstability):
            strict.simulate(reference_genome)
