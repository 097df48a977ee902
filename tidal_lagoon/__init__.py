"""
Tidal Lagoon Optimization Package
=================================

A modular framework for simulating tidal lagoon operation and searching
for cost/energy trade-offs in its design.

Modules:
    - tides: Harmonic tidal signal → stratified half-tide samples
    - energy: Turbine/sluice hydraulics and lagoon simulation
    - costs: Unit cost of energy and levelised cost
    - optimization: NSGA-II, Pareto archive and convergence tracking

Example:
    from tidal_lagoon import SimulationConfig, OptimizerConfig, run_optimization

    sim_config = SimulationConfig.for_horizon("day")
    optimizer_config = OptimizerConfig.for_horizon("day", population_size=100)

    result = run_optimization(sim_config, optimizer_config)

    # Cheapest and most productive ends of the front
    cheapest = result.pareto_front[0]
    print(f"£{cheapest.unit_cost:.1f}/MWh at {cheapest.annual_energy_gwh:.0f} GWh/yr")
    print(f"Converged: {result.converged} ({result.termination_reason})")
"""

__version__ = "1.0.0"
__author__ = "Tidal Energy Project"

# Configuration
from .config import (
    ConfigurationError,
    SimulationConfig,
    LagoonSpec,
    CostParameters,
    GeneBounds,
    OptimizerConfig,
)

# Tidal signal and sampling
from .tides import (
    TidalCondition,
    TidalSignalModel,
    HalfTideSample,
    StratifiedSampler,
    NaiveWindowSampler,
    sample_half_tides,
)

# Energy simulation
from .energy import (
    LagoonSimulator,
    SimulationResult,
    SimulationInstability,
)

# Cost functions
from .costs import (
    CostModel,
    ObjectiveVector,
    calculate_lcoe,
)

# Main optimization functions
from .optimization import (
    run_optimization,
    OptimizationResult,
    ParetoArchive,
    ParetoSolution,
    Individual,
    save_optimization_results,
)

__all__ = [
    # Configuration
    "ConfigurationError",
    "SimulationConfig",
    "LagoonSpec",
    "CostParameters",
    "GeneBounds",
    "OptimizerConfig",
    # Tides
    "TidalCondition",
    "TidalSignalModel",
    "HalfTideSample",
    "StratifiedSampler",
    "NaiveWindowSampler",
    "sample_half_tides",
    # Energy
    "LagoonSimulator",
    "SimulationResult",
    "SimulationInstability",
    # Costs
    "CostModel",
    "ObjectiveVector",
    "calculate_lcoe",
    # Optimization
    "run_optimization",
    "OptimizationResult",
    "ParetoArchive",
    "ParetoSolution",
    "Individual",
    "save_optimization_results",
]
