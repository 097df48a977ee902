"""
tests/test_operators.py - Genome helpers and genetic operators.
"""

import numpy as np
import pytest

from tidal_lagoon.config import GeneBounds, OptimizerConfig
from tidal_lagoon.optimization import (
    binary_tournament,
    bounds_arrays,
    create_offspring,
    genome_to_dict,
    initialize_population,
    polynomial_mutation,
    population_statistics,
    repair,
    sbx_crossover,
)


@pytest.fixture
def bounds():
    return bounds_arrays(GeneBounds())


class TestGenome:
    """Test initialisation and helpers."""

    def test_initial_population_in_bounds(self, bounds):
        lower, upper = bounds
        genomes = initialize_population(GeneBounds(), 50, seed=1)
        assert genomes.shape == (50, 4)
        assert np.all(genomes >= lower) and np.all(genomes <= upper)

    def test_initial_population_deterministic(self):
        a = initialize_population(GeneBounds(), 10, seed=5)
        b = initialize_population(GeneBounds(), 10, seed=5)
        np.testing.assert_array_equal(a, b)

    def test_initial_population_prefix_stable(self):
        """Individual i does not depend on population size."""
        small = initialize_population(GeneBounds(), 4, seed=5)
        large = initialize_population(GeneBounds(), 8, seed=5)
        np.testing.assert_array_equal(small, large[:4])

    def test_repair_clips(self, bounds):
        lower, upper = bounds
        repaired = repair(np.array([[10.0, -90.0, 0.0, 9.0]]), GeneBounds())
        np.testing.assert_array_equal(repaired[0], [upper[0], lower[1], lower[2], upper[3]])

    def test_genome_to_dict(self):
        genes = genome_to_dict([1.36, 0.0, 2.5, 1.0])
        assert genes["turbine_discharge_coefficient"] == 1.36
        assert genes["head_threshold_low_m"] == 1.0

    def test_population_statistics(self):
        genomes = initialize_population(GeneBounds(), 200, seed=2)
        stats = population_statistics(genomes)
        assert 0.2 < stats["diversity"] < 0.35
        assert stats["min"]["orientation_angle_deg"] >= -30.0

    def test_identical_population_has_no_diversity(self):
        genomes = np.tile([1.36, 0.0, 2.5, 1.0], (5, 1))
        assert population_statistics(genomes)["diversity"] == 0.0


class TestCrossover:
    """Test simulated binary crossover."""

    def test_children_in_bounds(self, bounds):
        lower, upper = bounds
        rng = np.random.default_rng(0)
        for _ in range(100):
            c1, c2 = sbx_crossover(lower, upper, lower, upper, rng)
            assert np.all(c1 >= lower) and np.all(c1 <= upper)
            assert np.all(c2 >= lower) and np.all(c2 <= upper)

    def test_identical_parents_unchanged(self, bounds):
        lower, upper = bounds
        parent = np.array([1.0, 5.0, 2.0, 1.0])
        c1, c2 = sbx_crossover(parent, parent, lower, upper, np.random.default_rng(0))
        np.testing.assert_array_equal(c1, parent)
        np.testing.assert_array_equal(c2, parent)

    def test_children_preserve_midpoint(self, bounds):
        """Unclipped SBX children are symmetric about the parents' mean."""
        lower, upper = bounds
        p1 = np.array([1.0, -5.0, 2.0, 1.5])
        p2 = np.array([1.2, 5.0, 2.4, 1.7])
        c1, c2 = sbx_crossover(p1, p2, lower, upper, np.random.default_rng(3))
        np.testing.assert_allclose(c1 + c2, p1 + p2)

    def test_deterministic(self, bounds):
        lower, upper = bounds
        p1, p2 = lower + 0.1, upper - 0.1
        a = sbx_crossover(p1, p2, lower, upper, np.random.default_rng(9))
        b = sbx_crossover(p1, p2, lower, upper, np.random.default_rng(9))
        np.testing.assert_array_equal(a[0], b[0])
        np.testing.assert_array_equal(a[1], b[1])


class TestMutation:
    """Test polynomial mutation."""

    def test_mutants_in_bounds(self, bounds):
        lower, upper = bounds
        rng = np.random.default_rng(1)
        for genome in (lower, upper, (lower + upper) / 2):
            for _ in range(50):
                mutant = polynomial_mutation(genome, lower, upper, rng, probability=1.0)
                assert np.all(mutant >= lower) and np.all(mutant <= upper)

    def test_zero_probability_unchanged(self, bounds):
        lower, upper = bounds
        genome = (lower + upper) / 2
        mutant = polynomial_mutation(genome, lower, upper, np.random.default_rng(1), probability=0.0)
        np.testing.assert_array_equal(mutant, genome)

    def test_full_probability_changes_genes(self, bounds):
        lower, upper = bounds
        genome = (lower + upper) / 2
        mutant = polynomial_mutation(genome, lower, upper, np.random.default_rng(1), probability=1.0)
        assert np.all(mutant != genome)

    def test_perturbation_is_local(self, bounds):
        """With eta = 20 most mutations move less than a quarter of the range."""
        lower, upper = bounds
        genome = (lower + upper) / 2
        rng = np.random.default_rng(4)
        steps = np.array([
            np.abs(polynomial_mutation(genome, lower, upper, rng, 1.0) - genome) / (upper - lower)
            for _ in range(200)
        ])
        assert np.mean(steps < 0.25) > 0.9


class TestSelection:
    """Test crowded binary tournament."""

    def test_lower_rank_preferred(self):
        rng = np.random.default_rng(0)
        ranks = np.array([1, 0])
        crowding = np.zeros(2)
        picks = [binary_tournament(ranks, crowding, rng) for _ in range(200)]
        assert picks.count(1) > 120

    def test_crowding_breaks_ties(self):
        rng = np.random.default_rng(0)
        ranks = np.zeros(2, dtype=int)
        crowding = np.array([0.1, np.inf])
        picks = [binary_tournament(ranks, crowding, rng) for _ in range(200)]
        assert picks.count(1) > 120


class TestOffspring:
    """Test one generation of breeding."""

    def test_offspring_shape_and_bounds(self, bounds):
        lower, upper = bounds
        config = OptimizerConfig(population_size=10, seed=3)
        parents = initialize_population(config.bounds, 10, seed=3)
        ranks = np.zeros(10, dtype=int)
        crowding = np.ones(10)
        offspring = create_offspring(parents, ranks, crowding, config, generation=1)
        assert offspring.shape == parents.shape
        assert np.all(offspring >= lower) and np.all(offspring <= upper)

    def test_offspring_deterministic(self):
        config = OptimizerConfig(population_size=10, seed=3)
        parents = initialize_population(config.bounds, 10, seed=3)
        ranks = np.arange(10)
        crowding = np.ones(10)
        a = create_offspring(parents, ranks, crowding, config, generation=2)
        b = create_offspring(parents, ranks, crowding, config, generation=2)
        c = create_offspring(parents, ranks, crowding, config, generation=3)
        np.testing.assert_array_equal(a, b)
        assert not np.array_equal(a, c)
