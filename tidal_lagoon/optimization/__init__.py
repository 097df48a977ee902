"""
Optimization Module
===================

NSGA-II search for cost/energy trade-offs of lagoon designs.

Main functions:
    - run_optimization: Full NSGA-II run → OptimizationResult
    - ParetoArchive: Non-dominated designs found over a run
    - ConvergenceTracker: Hypervolume-based stopping rule
    - evaluate_population: (Parallel) evaluation of genomes
    - fast_non_dominated_sort, crowding_distance: Pareto ranking

Example:
    from tidal_lagoon.config import SimulationConfig, OptimizerConfig
    from tidal_lagoon.optimization import run_optimization

    result = run_optimization(
        SimulationConfig.for_horizon("week"),
        OptimizerConfig.for_horizon("week", n_workers=4),
    )

    # Access results
    front = result.to_dataframe()
    print(result.termination_reason, len(result.pareto_front))
"""

# Design vectors
from .genome import (
    bounds_arrays,
    initialize_population,
    repair,
    genome_to_dict,
    population_statistics,
)

# Genetic operators
from .operators import (
    sbx_crossover,
    polynomial_mutation,
    binary_tournament,
    create_offspring,
)

# Ranking and metrics
from .ranking import (
    dominates,
    dominance_matrix,
    fast_non_dominated_sort,
    crowding_distance,
    assign_crowding,
    select_next_generation,
    hypervolume_2d,
    spacing,
)

# Archive and convergence
from .archive import (
    ParetoArchive,
    ParetoSolution,
)
from .convergence import (
    ConvergenceTracker,
)

# Evaluation
from .evaluation import (
    EvaluationContext,
    evaluate_population,
    evaluate_design,
)

# Main loop
from .nsga2 import (
    Individual,
    OptimizationResult,
    run_optimization,
)

# Result export
from .save_results import (
    save_optimization_results,
    save_optimization_json,
    save_optimization_csv,
)

__all__ = [
    # Design vectors
    "bounds_arrays",
    "initialize_population",
    "repair",
    "genome_to_dict",
    "population_statistics",
    # Operators
    "sbx_crossover",
    "polynomial_mutation",
    "binary_tournament",
    "create_offspring",
    # Ranking
    "dominates",
    "dominance_matrix",
    "fast_non_dominated_sort",
    "crowding_distance",
    "assign_crowding",
    "select_next_generation",
    "hypervolume_2d",
    "spacing",
    # Archive and convergence
    "ParetoArchive",
    "ParetoSolution",
    "ConvergenceTracker",
    # Evaluation
    "EvaluationContext",
    "evaluate_population",
    "evaluate_design",
    # Main loop
    "Individual",
    "OptimizationResult",
    "run_optimization",
    # Result export
    "save_optimization_results",
    "save_optimization_json",
    "save_optimization_csv",
]
