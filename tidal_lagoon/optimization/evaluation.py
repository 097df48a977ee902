"""
Population Evaluation
=====================

Turns genomes into objective vectors.

The evaluation context is a frozen dataclass holding everything a worker
needs (configs, half-tide sample, episode elevations). It is shipped to
worker processes once per chunk and never mutated, so evaluation is free
of shared state. Results come back through ordered ``map`` and are
therefore identical for any worker count.

Unstable simulations are converted to the penalty objectives here; they
never abort a run.
"""

from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from itertools import repeat

import numpy as np

from ..config import CostParameters, LagoonSpec
from ..costs import CostModel, lcoe_for_config
from ..energy import LagoonSimulator, SimulationInstability
from ..tides import HalfTideSample, TidalSignalModel, sample_half_tides


# Arrays returned per design; the per-episode energy matrix stays in the worker.
RESULT_FIELDS = (
    'annual_energy_mwh',
    'annual_energy_gwh',
    'ci_low_gwh',
    'ci_high_gwh',
    'average_head_m',
    'head_variance_m2',
    'switching_frequency',
    'operational_complexity',
    'tidal_range_retention',
    'unstable',
)


@dataclass(frozen=True, eq=False)
class EvaluationContext:
    """Read-only inputs for evaluating designs."""
    sim_config: object
    lagoon: LagoonSpec
    cost_params: CostParameters
    sample: HalfTideSample
    elevations: np.ndarray

    @classmethod
    def build(cls, sim_config, lagoon=None, cost_params=None, signal=None, sample=None):
        """Sample half-tides and precompute episode elevations."""
        lagoon = lagoon or LagoonSpec()
        cost_params = cost_params or CostParameters()
        if signal is None:
            signal = TidalSignalModel(sim_config)
        if sample is None:
            sample = sample_half_tides(sim_config, signal)
        simulator = LagoonSimulator.from_signal(sim_config, signal, sample, lagoon)
        return cls(sim_config, lagoon, cost_params, sample, simulator.elevations)

    def simulator(self):
        return LagoonSimulator(self.sim_config, self.sample, self.elevations, self.lagoon)

    def cost_model(self):
        return CostModel(self.cost_params)

    def levelized_cost(self, annual_energy_mwh):
        return lcoe_for_config(annual_energy_mwh, self.sim_config, self.cost_params.total_capital_cost)


def evaluate_chunk(context, genomes):
    """
    Evaluate a block of genomes in the current process.

    Returns:
        dict with 'objectives' (n, 2), 'penalised' (n,) and the
        RESULT_FIELDS arrays
    """
    batch = context.simulator().run(genomes)
    objectives, penalised = context.cost_model().objective_matrix(batch)
    evaluated = {name: np.asarray(batch[name]) for name in RESULT_FIELDS}
    evaluated['objectives'] = objectives
    evaluated['penalised'] = penalised
    return evaluated


def _chunk_evaluator(args):
    context, genomes = args
    return evaluate_chunk(context, genomes)


def evaluate_population(context, genomes, executor=None, n_workers=1):
    """
    Evaluate a population, optionally across worker processes.

    Args:
        context: EvaluationContext
        genomes: Array (n, n_genes)
        executor: Optional ProcessPoolExecutor reused across generations
        n_workers: Number of chunks to split the population into

    Returns:
        dict like ``evaluate_chunk`` for the whole population, in input order
    """
    genomes = np.atleast_2d(np.asarray(genomes, dtype=float))
    if executor is None or n_workers <= 1 or len(genomes) < 2:
        return evaluate_chunk(context, genomes)

    chunks = [c for c in np.array_split(genomes, n_workers) if len(c)]
    parts = list(executor.map(_chunk_evaluator, zip(repeat(context), chunks)))
    return concatenate_evaluations(parts)


def concatenate_evaluations(parts):
    """Join evaluation dicts along the population axis."""
    return {key: np.concatenate([p[key] for p in parts]) for key in parts[0]}


def take_evaluations(evaluated, indices):
    """Subset of an evaluation dict."""
    return {key: value[indices] for key, value in evaluated.items()}


def evaluate_design(context, genome):
    """
    Evaluate one design.

    Returns:
        (ObjectiveVector, SimulationResult or None); None with the penalty
        objectives when the simulation was unstable
    """
    model = context.cost_model()
    try:
        result = context.simulator().simulate(genome)
    except SimulationInstability:
        return model.penalty_objectives(), None
    return model.objectives(result), result


def make_executor(n_workers):
    """Process pool for ``n_workers`` > 1, else None."""
    if n_workers <= 1:
        return None
    return ProcessPoolExecutor(max_workers=n_workers)
