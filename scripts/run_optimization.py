#!/usr/bin/env python3
"""
Tidal Lagoon Design Optimization
================================

Runs NSGA-II over lagoon operating designs (turbine discharge coefficient,
orientation, start/stop head thresholds) to find the trade-off between
unit cost of energy and annual energy.

A short horizon is simulated with stratified half-tide sampling, so the
annual estimate stays representative of the whole tidal year.

Usage:
    python scripts/run_optimization.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from tidal_lagoon import (
    SimulationConfig, OptimizerConfig, LagoonSpec, CostParameters,
    run_optimization, save_optimization_results,
)
from tidal_lagoon.costs import calculate_lcoe
from tidal_lagoon.optimization import genome_to_dict

# =============================================================================
# CONFIGURATION - Modify these parameters as needed
# =============================================================================

# Simulation horizon: "test", "day", "week" or "year"
HORIZON = "day"

# Sampling strategy: "stratified" (representative) or "naive" (best window × scale)
SAMPLING_STRATEGY = "stratified"

# NSGA-II settings
POPULATION_SIZE = 400
MAX_GENERATIONS = 50
N_WORKERS = 1
SEED = 42

# Output directory for JSON/CSV results
OUTPUT_DIR = ROOT_DIR / "results"

# Number of Pareto solutions to print
N_SHOW = 10

# =============================================================================
# MAIN EXECUTION
# =============================================================================


def main():
    print("=" * 70)
    print("TIDAL LAGOON DESIGN OPTIMIZATION")
    print("=" * 70)

    # -------------------------------------------------------------------------
    # Step 1: Configuration
    # -------------------------------------------------------------------------
    print("\n[1/4] Configuration...")
    sim_config = SimulationConfig.for_horizon(HORIZON, sampling_strategy=SAMPLING_STRATEGY)
    optimizer_config = OptimizerConfig.for_horizon(
        HORIZON,
        population_size=POPULATION_SIZE,
        max_generations=MAX_GENERATIONS,
        n_workers=N_WORKERS,
        seed=SEED,
    )
    lagoon = LagoonSpec()
    cost_params = CostParameters()

    print(f"      Horizon:           {HORIZON} ({sim_config.total_half_tides} half-tides)")
    print(f"      Sampling:          {SAMPLING_STRATEGY}")
    print(f"      Lagoon area:       {lagoon.surface_area_m2 / 1e6:.1f} km²")
    print(f"      Turbines:          {lagoon.number_of_turbines} × {lagoon.turbine_capacity_mw:.0f} MW")
    print(f"      Population:        {optimizer_config.population_size}")
    print(f"      Mutation prob.:    {optimizer_config.mutation_probability:.3f}")

    # -------------------------------------------------------------------------
    # Step 2: Run Optimization
    # -------------------------------------------------------------------------
    print("\n[2/4] Running NSGA-II...")
    result = run_optimization(
        sim_config,
        optimizer_config,
        lagoon_spec=lagoon,
        cost_params=cost_params,
        verbose=True,
    )

    # -------------------------------------------------------------------------
    # Step 3: Display Results
    # -------------------------------------------------------------------------
    print("\n" + "=" * 70)
    print("[3/4] PARETO FRONT")
    print("=" * 70)

    front = result.pareto_front
    print(f"\n  Solutions:        {len(front)}")
    print(f"  Generations run:  {result.generations_run}")
    print(f"  Converged:        {result.converged} ({result.termination_reason})")

    if not front:
        print("\n  No feasible designs found")
        return

    step = max(1, len(front) // N_SHOW)
    for solution in front[::step]:
        genes = genome_to_dict(solution.genome, optimizer_config.bounds)
        low, high = solution.annual_energy_ci_gwh
        print(f"\n  £{solution.unit_cost:7.2f}/MWh   {solution.annual_energy_gwh:7.1f} GWh/yr "
              f"(95% CI {low:.1f}-{high:.1f})   LCOE £{solution.levelized_cost:.0f}/MWh")
        print(f"    Cd={genes['turbine_discharge_coefficient']:.2f}  "
              f"angle={genes['orientation_angle_deg']:+.1f}°  "
              f"start={genes['head_threshold_high_m']:.2f} m  "
              f"stop={genes['head_threshold_low_m']:.2f} m")

    best_energy = max(front, key=lambda s: s.annual_energy_gwh)
    lcoe = calculate_lcoe(best_energy.annual_energy_gwh * 1000.0)
    print("\n" + "=" * 70)
    print("HIGHEST ENERGY SOLUTION")
    print("=" * 70)
    print(f"  Annual energy:     {best_energy.annual_energy_gwh:,.1f} GWh")
    print(f"  Unit cost:         £{best_energy.unit_cost:.2f}/MWh")
    print(f"  LCOE:              £{lcoe['lcoe_gbp_per_mwh']:.0f}/MWh")
    print(f"  Annual cost:       £{lcoe['annual_cost']:,.0f}/year")

    # -------------------------------------------------------------------------
    # Step 4: Save Results
    # -------------------------------------------------------------------------
    print(f"\n[4/4] Saving results...")
    save_optimization_results(
        result, OUTPUT_DIR, prefix=f"lagoon_{HORIZON}",
        sim_config=sim_config, optimizer_config=optimizer_config,
    )

    print("\n" + "=" * 70)
    print("COMPLETE")
    print("=" * 70)


if __name__ == "__main__":
    main()
