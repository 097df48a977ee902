"""
Levelised Cost Functions
========================

Levelised cost of energy (LCOE) for a lagoon design.

    CRF  = r (1 + r)^n / ((1 + r)^n − 1)
    LCOE = (CapEx × CRF + CapEx × opex_fraction) / annual energy

With r = 0 the CRF reduces to 1 / n (straight-line recovery).
"""

import numpy as np

from ..config import (
    DISCOUNT_RATE,
    OPEX_FRACTION,
    PROJECT_LIFETIME_YEARS,
    TOTAL_CAPITAL_COST_GBP,
)


def capital_recovery_factor(discount_rate=DISCOUNT_RATE, lifetime_years=PROJECT_LIFETIME_YEARS):
    """
    Fraction of CapEx repaid each year to recover it over the lifetime.

    Args:
        discount_rate: Annual discount rate (e.g., 0.06 = 6%)
        lifetime_years: Project lifetime in years

    Returns:
        float
    """
    if lifetime_years <= 0:
        raise ValueError("lifetime_years must be positive")
    if discount_rate == 0:
        return 1.0 / lifetime_years
    growth = (1.0 + discount_rate) ** lifetime_years
    return discount_rate * growth / (growth - 1.0)


def calculate_lcoe(annual_energy_mwh, capital_cost=TOTAL_CAPITAL_COST_GBP,
                   discount_rate=DISCOUNT_RATE, opex_fraction=OPEX_FRACTION,
                   lifetime_years=PROJECT_LIFETIME_YEARS):
    """
    Calculate levelised cost of energy.

    Args:
        annual_energy_mwh: Annual energy (MWh), scalar or array
        capital_cost: Total CapEx (£)
        discount_rate: Annual discount rate
        opex_fraction: Annual O&M as a fraction of CapEx
        lifetime_years: Project lifetime in years

    Returns:
        dict with:
            - lcoe_gbp_per_mwh: Levelised cost (inf where energy <= 0)
            - annualized_capex: CapEx × CRF (£/year)
            - annual_opex: CapEx × opex_fraction (£/year)
            - annual_cost: Sum of the two (£/year)
            - crf: Capital recovery factor
    """
    crf = capital_recovery_factor(discount_rate, lifetime_years)
    annualized_capex = capital_cost * crf
    annual_opex = capital_cost * opex_fraction
    annual_cost = annualized_capex + annual_opex

    energy = np.asarray(annual_energy_mwh, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        lcoe = np.where(energy > 0, annual_cost / energy, np.inf)
    if lcoe.ndim == 0:
        lcoe = float(lcoe)

    return {
        'lcoe_gbp_per_mwh': lcoe,
        'annualized_capex': annualized_capex,
        'annual_opex': annual_opex,
        'annual_cost': annual_cost,
        'crf': crf,
    }


def lcoe_for_config(annual_energy_mwh, sim_config, capital_cost=TOTAL_CAPITAL_COST_GBP):
    """LCOE using the financial settings of a SimulationConfig."""
    return calculate_lcoe(
        annual_energy_mwh,
        capital_cost=capital_cost,
        discount_rate=sim_config.discount_rate,
        opex_fraction=sim_config.opex_fraction,
        lifetime_years=sim_config.project_lifetime_years,
    )['lcoe_gbp_per_mwh']
