"""
Genetic Operators
=================

Variation and selection operators for NSGA-II.

Includes:
    - sbx_crossover: Simulated binary crossover (Deb & Agrawal, 1995)
    - polynomial_mutation: Bounded polynomial mutation (Deb & Goyal, 1996)
    - binary_tournament: Crowded-comparison tournament selection
    - create_offspring: One generation of offspring

All operators are pure: randomness comes only from the ``rng`` passed in.
"""

import numpy as np

from ..config import MUTATION_ETA, SBX_ETA
from .genome import bounds_arrays, individual_rng


# =============================================================================
# CROSSOVER
# =============================================================================

def sbx_crossover(parent1, parent2, lower, upper, rng, eta=SBX_ETA, gene_probability=0.5):
    """
    Simulated binary crossover.

    Each gene is recombined with probability ``gene_probability``; genes
    where the parents coincide are copied unchanged. Children are clipped
    into bounds.

    Args:
        parent1, parent2: Parent genomes (n_genes,)
        lower, upper: Gene bounds (n_genes,)
        rng: numpy Generator
        eta: Distribution index (larger = children closer to parents)
        gene_probability: Per-gene recombination probability

    Returns:
        (child1, child2)
    """
    p1 = np.asarray(parent1, dtype=float)
    p2 = np.asarray(parent2, dtype=float)
    u = rng.random(p1.shape)
    swap = rng.random(p1.shape) < gene_probability

    beta = np.where(
        u <= 0.5,
        (2.0 * u) ** (1.0 / (eta + 1.0)),
        (1.0 / (2.0 * (1.0 - u))) ** (1.0 / (eta + 1.0)),
    )
    c1 = 0.5 * ((1.0 + beta) * p1 + (1.0 - beta) * p2)
    c2 = 0.5 * ((1.0 - beta) * p1 + (1.0 + beta) * p2)

    active = swap & (np.abs(p1 - p2) > 1e-14)
    child1 = np.where(active, c1, p1)
    child2 = np.where(active, c2, p2)
    return np.clip(child1, lower, upper), np.clip(child2, lower, upper)


# =============================================================================
# MUTATION
# =============================================================================

def polynomial_mutation(genome, lower, upper, rng, probability, eta=MUTATION_ETA):
    """
    Bounded polynomial mutation.

    Each gene mutates with ``probability``. The perturbation is scaled by
    the gene's bound width and shaped so mutants never leave the bounds.

    Args:
        genome: Genome (n_genes,)
        lower, upper: Gene bounds (n_genes,)
        rng: numpy Generator
        probability: Per-gene mutation probability
        eta: Distribution index

    Returns:
        Mutated copy of genome
    """
    x = np.asarray(genome, dtype=float)
    width = upper - lower
    mutate = rng.random(x.shape) < probability
    u = rng.random(x.shape)

    delta1 = (x - lower) / width
    delta2 = (upper - x) / width
    power = 1.0 / (eta + 1.0)

    low_side = 2.0 * u + (1.0 - 2.0 * u) * (1.0 - delta1) ** (eta + 1.0)
    high_side = 2.0 * (1.0 - u) + 2.0 * (u - 0.5) * (1.0 - delta2) ** (eta + 1.0)
    delta_q = np.where(
        u < 0.5,
        np.power(np.maximum(low_side, 0.0), power) - 1.0,
        1.0 - np.power(np.maximum(high_side, 0.0), power),
    )

    mutant = np.where(mutate, x + delta_q * width, x)
    return np.clip(mutant, lower, upper)


# =============================================================================
# SELECTION
# =============================================================================

def binary_tournament(ranks, crowding, rng):
    """
    Pick one index by crowded comparison of two random contestants.

    Lower rank wins; equal ranks are decided by larger crowding distance;
    a full tie goes to the first contestant.
    """
    a, b = rng.integers(0, len(ranks), size=2)
    if ranks[a] != ranks[b]:
        return int(a if ranks[a] < ranks[b] else b)
    if crowding[b] > crowding[a]:
        return int(b)
    return int(a)


def create_offspring(genomes, ranks, crowding, optimizer_config, generation):
    """
    Breed one generation of offspring.

    Offspring pair p of generation g uses the generator (seed, g, p), so the
    result is reproducible regardless of evaluation order.

    Args:
        genomes: Parent population (n, n_genes)
        ranks, crowding: Parent ranks and crowding distances (n,)
        optimizer_config: OptimizerConfig
        generation: Generation number (>= 1)

    Returns:
        Array (population_size, n_genes)
    """
    config = optimizer_config
    lower, upper = bounds_arrays(config.bounds)
    offspring = np.empty((config.population_size, genomes.shape[1]))

    for pair in range(config.population_size // 2):
        rng = individual_rng(config.seed, generation, pair)
        parent1 = genomes[binary_tournament(ranks, crowding, rng)]
        parent2 = genomes[binary_tournament(ranks, crowding, rng)]

        if rng.random() < config.crossover_probability:
            child1, child2 = sbx_crossover(parent1, parent2, lower, upper, rng, eta=config.sbx_eta)
        else:
            child1, child2 = parent1.copy(), parent2.copy()

        offspring[2 * pair] = polynomial_mutation(
            child1, lower, upper, rng, config.mutation_probability, eta=config.mutation_eta
        )
        offspring[2 * pair + 1] = polynomial_mutation(
            child2, lower, upper, rng, config.mutation_probability, eta=config.mutation_eta
        )

    return offspring
