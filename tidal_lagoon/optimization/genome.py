"""
Design Vector Helpers
=====================

A design is a float array ordered as ``GENE_NAMES``:

    [turbine_discharge_coefficient, orientation_angle_deg,
     head_threshold_high_m, head_threshold_low_m]

A population is an array (n_individuals, n_genes).
"""

import numpy as np

from ..config import GeneBounds


def bounds_arrays(bounds=None):
    """(lower, upper) numpy arrays for a GeneBounds table."""
    bounds = bounds or GeneBounds()
    return np.asarray(bounds.lower, dtype=float), np.asarray(bounds.upper, dtype=float)


def individual_rng(seed, generation, index):
    """Random generator for one (generation, index) slot of a run."""
    return np.random.default_rng([seed, generation, index])


def initialize_population(bounds, size, seed):
    """
    Uniform random population within bounds.

    Individual i draws from its own generator (seed, 0, i), so the initial
    population does not depend on evaluation order or worker count.

    Returns:
        Array (size, n_genes)
    """
    lower, upper = bounds_arrays(bounds)
    genomes = np.empty((size, len(lower)))
    for i in range(size):
        genomes[i] = individual_rng(seed, 0, i).uniform(lower, upper)
    return genomes


def repair(genomes, bounds):
    """Clip genomes into bounds."""
    lower, upper = bounds_arrays(bounds)
    return np.clip(np.asarray(genomes, dtype=float), lower, upper)


def genome_to_dict(genome, bounds=None):
    """{gene name: value} for one design."""
    bounds = bounds or GeneBounds()
    return {name: float(value) for name, value in zip(bounds.names, genome)}


def population_statistics(genomes, bounds=None):
    """
    Per-gene statistics and overall diversity of a population.

    Diversity is the mean per-gene standard deviation relative to the gene's
    bound width (0 = identical individuals, ~0.29 = uniform spread).

    Returns:
        dict with:
            - mean, std, min, max: {gene name: value}
            - diversity: float
    """
    bounds = bounds or GeneBounds()
    genomes = np.atleast_2d(np.asarray(genomes, dtype=float))
    lower, upper = bounds_arrays(bounds)
    std = genomes.std(axis=0)

    def by_gene(values):
        return {name: float(v) for name, v in zip(bounds.names, values)}

    return {
        'mean': by_gene(genomes.mean(axis=0)),
        'std': by_gene(std),
        'min': by_gene(genomes.min(axis=0)),
        'max': by_gene(genomes.max(axis=0)),
        'diversity': float(np.mean(std / (upper - lower))),
    }
