"""
Energy Module
=============

Lagoon hydraulics and energy simulation.

Main functions:
    - LagoonSimulator: Simulate designs over a weighted half-tide sample
    - SimulationResult: Annualised performance of one design
    - orifice_flow: Discharge through turbines or sluices
    - turbine_power_mw: Turbine power, throttled at capacity
    - orientation_factors: Ebb/flood discharge fractions for a turbine angle

Example:
    from tidal_lagoon.config import SimulationConfig
    from tidal_lagoon.energy import LagoonSimulator

    simulator = LagoonSimulator.from_signal(SimulationConfig.for_horizon("week"))

    # Simulate a batch of designs at once
    batch = simulator.run([[1.36, 0.0, 2.5, 1.0], [1.0, 10.0, 3.0, 1.5]])
    print(batch['annual_energy_gwh'])
"""

# Hydraulic functions
from .hydraulics import (
    orifice_flow,
    turbine_power_mw,
    orientation_factors,
    level_change,
)

# Simulator
from .lagoon import (
    LagoonSimulator,
    SimulationResult,
    SimulationInstability,
)

__all__ = [
    # Hydraulics
    "orifice_flow",
    "turbine_power_mw",
    "orientation_factors",
    "level_change",
    # Simulator
    "LagoonSimulator",
    "SimulationResult",
    "SimulationInstability",
]
