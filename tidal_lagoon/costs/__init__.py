"""
Cost Module
===========

Functions for calculating lagoon unit cost and levelised cost.

Main functions:
    - CostModel: Unit cost (£/MWh) from energy and operating head
    - ObjectiveVector: (unit cost, negative energy) pair, both minimised
    - calculate_lcoe: Levelised cost from discount rate, O&M and lifetime
    - capital_recovery_factor: Annual fraction of CapEx repaid

Example:
    from tidal_lagoon.costs import CostModel, calculate_lcoe

    model = CostModel()
    cost = model.calculate_unit_cost(energy_mwh=400_000, average_head_m=2.5)
    print(f"Unit cost: £{cost['unit_cost']:.1f}/MWh")

    lcoe = calculate_lcoe(400_000)
    print(f"LCOE: £{lcoe['lcoe_gbp_per_mwh']:.0f}/MWh")
"""

# Unit cost
from .unit_cost import (
    CostModel,
    ObjectiveVector,
)

# Levelised cost
from .levelized import (
    capital_recovery_factor,
    calculate_lcoe,
    lcoe_for_config,
)

__all__ = [
    # Unit cost
    "CostModel",
    "ObjectiveVector",
    # Levelised cost
    "capital_recovery_factor",
    "calculate_lcoe",
    "lcoe_for_config",
]
