"""
Unit Cost Model
===============

Unit cost of energy (£/MWh) for a simulated lagoon design.

    base         = CapEx / (E × capital_normalisation)
    operational  = h̄^head_exponent × operational_scale × maintenance_scaling
    energy       = (E / energy_reference)^energy_exponent × energy_scale
    variation    = head_variation_cost × Var(h)
    environment  = environmental_cost × (1 − range retention)
    switching    = frequency_cost × switching frequency

    unit_cost = base + operational + energy + variation + environment + switching

E is annual energy in MWh and h̄ the average operating head in m. The base
term falls with energy while the energy term rises with it, so cost and
energy conflict and the optimiser has a genuine trade-off to explore.

Designs with no energy, or whose simulation failed, get the penalty
objectives (penalty unit cost, zero energy) so they are always dominated.
"""

from collections import namedtuple

import numpy as np

from ..config import CostParameters


ObjectiveVector = namedtuple("ObjectiveVector", ["unit_cost_gbp_per_mwh", "negative_energy_gwh"])


class CostModel:
    """
    Unit cost calculator for a fixed set of cost weights.

    Args:
        params: CostParameters (default: reference weights)
    """

    def __init__(self, params=None):
        self.params = params or CostParameters()

    # -------------------------------------------------------------------------
    # Cost terms
    # -------------------------------------------------------------------------

    def base_cost(self, energy_mwh):
        p = self.params
        return p.total_capital_cost / (energy_mwh * p.capital_normalisation)

    def operational_cost(self, average_head_m):
        p = self.params
        head = np.maximum(average_head_m, 0.0)
        return head ** p.head_exponent * p.operational_scale * p.maintenance_scaling

    def energy_cost(self, energy_mwh):
        p = self.params
        return (energy_mwh / p.energy_reference_mwh) ** p.energy_exponent * p.energy_scale

    def calculate_unit_cost(self, energy_mwh, average_head_m, head_variance_m2=0.0,
                            tidal_range_retention=1.0, switching_frequency=0.0):
        """
        Calculate unit cost breakdown.

        Inputs may be scalars or arrays over designs. Entries with
        non-positive energy receive the penalty unit cost.

        Args:
            energy_mwh: Annual energy (MWh)
            average_head_m: Average operating head (m)
            head_variance_m2: Variance of operating head (m²)
            tidal_range_retention: Lagoon range / sea range (0-1)
            switching_frequency: Generation starts per half-tide

        Returns:
            dict with:
                - unit_cost: Total unit cost (£/MWh)
                - base_cost, operational_cost, energy_cost,
                  head_variation_cost, environmental_cost, frequency_cost
                - penalised: bool, energy was non-positive
        """
        p = self.params
        energy = np.asarray(energy_mwh, dtype=float)
        penalised = ~(energy > 0)
        safe_energy = np.where(penalised, 1.0, energy)

        terms = {
            'base_cost': self.base_cost(safe_energy),
            'operational_cost': self.operational_cost(np.asarray(average_head_m, dtype=float)),
            'energy_cost': self.energy_cost(safe_energy),
            'head_variation_cost': p.head_variation_cost * np.asarray(head_variance_m2, dtype=float),
            'environmental_cost': p.environmental_cost * (
                1.0 - np.clip(np.asarray(tidal_range_retention, dtype=float), 0.0, 1.0)
            ),
            'frequency_cost': p.frequency_cost * np.asarray(switching_frequency, dtype=float),
        }
        total = sum(terms.values())
        total = np.where(penalised, p.penalty_unit_cost, total)

        breakdown = {'unit_cost': total, **terms, 'penalised': penalised}
        if energy.ndim == 0:
            breakdown = {
                k: (bool(v) if k == 'penalised' else float(v)) for k, v in breakdown.items()
            }
        return breakdown

    # -------------------------------------------------------------------------
    # Objectives
    # -------------------------------------------------------------------------

    def penalty_objectives(self):
        """Objectives assigned to failed or zero-energy designs."""
        return ObjectiveVector(self.params.penalty_unit_cost, 0.0)

    def objectives(self, result):
        """ObjectiveVector for a SimulationResult (penalty if None or no energy)."""
        if result is None or not result.annual_energy_gwh > 0:
            return self.penalty_objectives()
        cost = self.calculate_unit_cost(
            result.annual_energy_mwh,
            result.average_head_m,
            result.head_variance_m2,
            result.tidal_range_retention,
            result.switching_frequency,
        )
        return ObjectiveVector(cost['unit_cost'], -result.annual_energy_gwh)

    def objective_matrix(self, batch):
        """
        Objectives for a batch from ``LagoonSimulator.run``.

        Returns:
            (objectives, penalised): array (n, 2) and bool array (n,)
        """
        energy = np.asarray(batch['annual_energy_mwh'], dtype=float)
        unstable = np.asarray(batch['unstable'], dtype=bool)
        energy = np.where(unstable | ~np.isfinite(energy), 0.0, energy)

        cost = self.calculate_unit_cost(
            energy,
            np.nan_to_num(batch['average_head_m']),
            np.nan_to_num(batch['head_variance_m2']),
            np.nan_to_num(batch['tidal_range_retention'], nan=1.0),
            np.nan_to_num(batch['switching_frequency']),
        )
        penalised = np.asarray(cost['penalised'], dtype=bool)
        objectives = np.column_stack([
            cost['unit_cost'],
            np.where(penalised, 0.0, -energy / 1000.0),
        ])
        return objectives, penalised
