"""
NSGA-II Optimization
====================

Multi-objective search over lagoon designs.

Objectives (both minimised):
    1. Unit cost of energy (£/MWh)
    2. Negative annual energy (−GWh)

Loop:
    initialise uniformly in bounds → evaluate → rank + crowding →
    binary tournament → SBX + polynomial mutation → evaluate offspring →
    elitist (μ + λ) truncation → update archive → convergence check

The run stops when the archive hypervolume has stagnated for
``stagnation_generations`` generations (converged), at
``max_generations``, or when the optional wall-clock budget runs out.

A run has two seeds. ``SimulationConfig.seed`` picks the half-tide sample
once, before the search starts; ``OptimizerConfig.seed`` roots every
genetic draw at (seed, generation, index). Holding the sample fixed while
varying the search seed (or the reverse) separates sampling noise from
search noise. The same pair of configs gives the same Pareto front for
any worker count.

Example:
    from tidal_lagoon.config import SimulationConfig, OptimizerConfig
    from tidal_lagoon.optimization import run_optimization

    result = run_optimization(
        SimulationConfig.for_horizon("day"),
        OptimizerConfig.for_horizon("day", population_size=100, max_generations=20),
    )
    for genome, cost, energy in result.as_triples():
        print(f"£{cost:.1f}/MWh  {energy:.0f} GWh/yr")
"""

import time
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from ..config import OptimizerConfig
from ..costs import ObjectiveVector
from ..energy import SimulationResult
from .archive import ParetoArchive, ParetoSolution
from .convergence import ConvergenceTracker
from .evaluation import (
    EvaluationContext,
    concatenate_evaluations,
    evaluate_population,
    make_executor,
    take_evaluations,
)
from .genome import initialize_population, population_statistics
from .operators import create_offspring
from .ranking import fast_non_dominated_sort, assign_crowding, select_next_generation


@dataclass
class Individual:
    """One member of the final population."""
    genome: np.ndarray
    objectives: ObjectiveVector
    result: SimulationResult = None
    rank: int = 0
    crowding_distance: float = 0.0
    penalised: bool = False


@dataclass
class OptimizationResult:
    """
    Outcome of an NSGA-II run.

    Attributes:
        pareto_front: ParetoSolution tuple ordered by unit cost
        population: Final population as Individuals
        generations_run: Offspring generations completed
        converged: True if the hypervolume stagnation criterion was met
        termination_reason: "converged", "max_generations" or "time_budget"
        convergence_generation: Generation at which convergence was declared
        history: Per-generation convergence records
        elapsed_seconds: Wall-clock duration
        seeds: {"sampling": SimulationConfig.seed, "search": OptimizerConfig.seed}
    """
    pareto_front: tuple
    population: list
    generations_run: int
    converged: bool
    termination_reason: str
    convergence_generation: int = None
    history: list = field(default_factory=list)
    elapsed_seconds: float = 0.0
    gene_names: tuple = ()
    summary: str = ""
    seeds: dict = field(default_factory=dict)

    def as_triples(self):
        """[(genome, unit cost £/MWh, annual energy GWh), ...] by unit cost."""
        return [(s.genome, s.unit_cost, s.annual_energy_gwh) for s in self.pareto_front]

    @property
    def annual_energy_ci_gwh(self):
        """95% confidence interval of annual energy for each Pareto solution."""
        return tuple(s.annual_energy_ci_gwh for s in self.pareto_front)

    def to_dataframe(self):
        """Pareto front as a pandas DataFrame, one row per solution."""
        return pd.DataFrame([s.to_dict(self.gene_names) for s in self.pareto_front])

    def history_frame(self):
        return pd.DataFrame(self.history).set_index('generation')


# =============================================================================
# HELPERS
# =============================================================================

def _result_at(evaluated, i):
    if evaluated['unstable'][i]:
        return None
    return SimulationResult(
        annual_energy_gwh=float(evaluated['annual_energy_gwh'][i]),
        average_head_m=float(evaluated['average_head_m'][i]),
        head_variance_m2=float(evaluated['head_variance_m2'][i]),
        operational_complexity=float(evaluated['operational_complexity'][i]),
        switching_frequency=float(evaluated['switching_frequency'][i]),
        tidal_range_retention=float(evaluated['tidal_range_retention'][i]),
        annual_energy_ci_gwh=(float(evaluated['ci_low_gwh'][i]), float(evaluated['ci_high_gwh'][i])),
    )


def _solutions(context, genomes, evaluated):
    """ParetoSolutions for every evaluated genome (levelised cost included)."""
    lcoe = context.levelized_cost(np.maximum(evaluated['annual_energy_mwh'], 0.0))
    solutions = []
    for i, genome in enumerate(genomes):
        cost, negative_energy = evaluated['objectives'][i]
        solutions.append(ParetoSolution(
            genome=tuple(float(g) for g in genome),
            unit_cost=float(cost),
            annual_energy_gwh=float(-negative_energy),
            levelized_cost=float(lcoe[i]),
            annual_energy_ci_gwh=(float(evaluated['ci_low_gwh'][i]), float(evaluated['ci_high_gwh'][i])),
            result=_result_at(evaluated, i),
        ))
    return solutions


def _individuals(genomes, evaluated, ranks, crowding):
    return [
        Individual(
            genome=genomes[i].copy(),
            objectives=ObjectiveVector(*map(float, evaluated['objectives'][i])),
            result=_result_at(evaluated, i),
            rank=int(ranks[i]),
            crowding_distance=float(crowding[i]),
            penalised=bool(evaluated['penalised'][i]),
        )
        for i in range(len(genomes))
    ]


# =============================================================================
# MAIN LOOP
# =============================================================================

def run_optimization(sim_config, optimizer_config=None, lagoon_spec=None, cost_params=None,
                     signal=None, verbose=True):
    """
    Run NSGA-II for a lagoon design problem.

    Args:
        sim_config: SimulationConfig (horizon, sampling strategy and its seed, finance)
        optimizer_config: OptimizerConfig (default: horizon defaults); its seed
            drives the search only
        lagoon_spec: LagoonSpec (default: reference lagoon)
        cost_params: CostParameters (default: reference weights)
        signal: Optional TidalSignalModel (default: built from sim_config)
        verbose: Print progress

    Returns:
        OptimizationResult
    """
    config = optimizer_config or OptimizerConfig.for_horizon(sim_config.horizon)
    config.check()
    started_at = time.perf_counter()

    context = EvaluationContext.build(sim_config, lagoon_spec, cost_params, signal)
    archive = ParetoArchive(config.archive_max_size)
    tracker = ConvergenceTracker(config.convergence_threshold, config.stagnation_generations)

    if verbose:
        print(f"Simulation: {sim_config}")
        print(f"Sampling: {context.sample.n_samples} half-tides "
              f"({context.sample.strategy}, {len(context.sample.stratum_sizes)} strata)")
        print(f"NSGA-II: population {config.population_size}, "
              f"up to {config.max_generations} generations, {config.n_workers} worker(s)")

    executor = make_executor(config.n_workers)
    try:
        genomes = initialize_population(config.bounds, config.population_size, config.seed)
        evaluated = evaluate_population(context, genomes, executor, config.n_workers)
        fronts, ranks = fast_non_dominated_sort(evaluated['objectives'])
        crowding = assign_crowding(evaluated['objectives'], fronts)

        archive.update(_solutions(context, genomes, evaluated), evaluated['penalised'])
        tracker.update(0, archive.objective_matrix(), evaluated['objectives'], evaluated['penalised'])

        termination_reason = "max_generations"
        generation = 0
        for generation in range(1, config.max_generations + 1):
            offspring = create_offspring(genomes, ranks, crowding, config, generation)
            offspring_evaluated = evaluate_population(context, offspring, executor, config.n_workers)
            archive.update(
                _solutions(context, offspring, offspring_evaluated),
                offspring_evaluated['penalised'],
            )

            pool = np.vstack([genomes, offspring])
            pool_evaluated = concatenate_evaluations([evaluated, offspring_evaluated])
            selected, ranks, crowding = select_next_generation(
                pool_evaluated['objectives'], config.population_size
            )
            genomes = pool[selected]
            evaluated = take_evaluations(pool_evaluated, selected)

            converged = tracker.update(
                generation, archive.objective_matrix(),
                evaluated['objectives'], evaluated['penalised'],
            )

            if verbose:
                record = tracker.history[-1]
                stats = population_statistics(genomes, config.bounds)
                print(f"  Gen {generation:3d}: front={record['front_size']:4d}  "
                      f"HV={record['hypervolume']:.4g}  "
                      f"max E={record['max_energy_gwh']:.1f} GWh  "
                      f"min cost=£{record['min_unit_cost']:.2f}/MWh  "
                      f"diversity={stats['diversity']:.3f}")

            if converged:
                termination_reason = "converged"
                break
            if (config.max_wall_seconds is not None
                    and time.perf_counter() - started_at > config.max_wall_seconds):
                termination_reason = "time_budget"
                break
    finally:
        if executor is not None:
            executor.shutdown()

    elapsed = time.perf_counter() - started_at
    if verbose:
        print(f"  {'✓' if tracker.converged else '✗'} {tracker.summary()}")
        print(f"  Finished in {elapsed:.1f}s ({termination_reason})")

    return OptimizationResult(
        pareto_front=archive.snapshot(),
        population=_individuals(genomes, evaluated, ranks, crowding),
        generations_run=generation,
        converged=tracker.converged,
        termination_reason=termination_reason,
        convergence_generation=tracker.convergence_generation,
        history=list(tracker.history),
        elapsed_seconds=elapsed,
        gene_names=tuple(config.bounds.names),
        summary=tracker.summary(),
        seeds={"sampling": sim_config.seed, "search": config.seed},
    )
