"""
Convergence Tracking
====================

Decides when NSGA-II has stopped making progress.

Progress is measured by the hypervolume (pymoo HV indicator) of the
Pareto archive against a reference point fixed at the first generation
with feasible designs:

    reference = (1.1 × worst feasible unit cost, 0 GWh)

Each generation the relative hypervolume improvement is compared with
``threshold``. A generation below the threshold is stagnant; any
generation at or above it resets the count. The run has converged once
``stagnation_generations`` consecutive generations are stagnant.
"""

import numpy as np
import pandas as pd

from .ranking import hypervolume_2d, spacing


class ConvergenceTracker:
    """
    Args:
        threshold: Minimum relative hypervolume improvement
        stagnation_generations: Consecutive stagnant generations to converge
        reference_point: Optional fixed (cost, negative energy) reference
    """

    def __init__(self, threshold, stagnation_generations, reference_point=None):
        self.threshold = threshold
        self.stagnation_generations = stagnation_generations
        self.reference_point = None if reference_point is None else np.asarray(reference_point, dtype=float)
        self.history = []
        self.stagnant = 0
        self.converged = False
        self.convergence_generation = None
        self._hypervolume = None

    def set_reference(self, objectives, penalised):
        """Fix the reference point from a population's feasible objectives."""
        F = np.asarray(objectives, dtype=float)
        feasible = F[~np.asarray(penalised, dtype=bool)]
        feasible = feasible[np.all(np.isfinite(feasible), axis=1)]
        if len(feasible) == 0:
            return False
        self.reference_point = np.array([feasible[:, 0].max() * 1.1, 0.0])
        return True

    def update(self, generation, archive_objectives, population_objectives=None,
               population_penalised=None):
        """
        Record one generation.

        Args:
            generation: Generation number
            archive_objectives: Objectives of the current Pareto archive (n, 2)
            population_objectives: Current population objectives, used to fix
                the reference point on first sight of a feasible design
            population_penalised: Penalty flags for the population

        Returns:
            True once converged
        """
        archive_objectives = np.asarray(archive_objectives, dtype=float).reshape(-1, 2)
        if self.reference_point is None and population_objectives is not None:
            if population_penalised is None:
                population_penalised = np.zeros(len(population_objectives), dtype=bool)
            self.set_reference(population_objectives, population_penalised)

        if self.reference_point is None:
            hypervolume = 0.0
        else:
            hypervolume = hypervolume_2d(archive_objectives, self.reference_point)

        previous = self._hypervolume
        if previous is None:
            improvement = np.inf
        elif previous > 0:
            improvement = (hypervolume - previous) / previous
        else:
            improvement = np.inf if hypervolume > 0 else 0.0

        if improvement >= self.threshold:
            self.stagnant = 0
        else:
            self.stagnant += 1
        self._hypervolume = hypervolume

        if not self.converged and self.stagnant >= self.stagnation_generations:
            self.converged = True
            self.convergence_generation = generation

        has_front = len(archive_objectives) > 0
        self.history.append({
            'generation': generation,
            'front_size': len(archive_objectives),
            'hypervolume': hypervolume,
            'improvement': improvement,
            'stagnant_generations': self.stagnant,
            'max_energy_gwh': float(-archive_objectives[:, 1].min()) if has_front else 0.0,
            'min_unit_cost': float(archive_objectives[:, 0].min()) if has_front else np.nan,
            'spacing': spacing(archive_objectives),
        })
        return self.converged

    @property
    def hypervolume(self):
        return self._hypervolume or 0.0

    def history_frame(self):
        """History as a pandas DataFrame indexed by generation."""
        return pd.DataFrame(self.history).set_index('generation')

    def summary(self):
        """One-paragraph text summary of the run's convergence."""
        if not self.history:
            return "No generations recorded"
        last = self.history[-1]
        status = (
            f"converged at generation {self.convergence_generation}" if self.converged
            else f"not converged ({self.stagnant}/{self.stagnation_generations} stagnant)"
        )
        return (
            f"{len(self.history)} generations, {status}; "
            f"front size {last['front_size']}, hypervolume {last['hypervolume']:.4g}, "
            f"max energy {last['max_energy_gwh']:.1f} GWh, "
            f"min unit cost £{last['min_unit_cost']:.2f}/MWh"
        )
