"""
Pareto Archive
==============

Keeps the non-dominated designs found over a whole run.

Rules:
    - A candidate enters only if no member dominates it.
    - Members the candidate dominates are evicted.
    - Penalised candidates and exact duplicate objective vectors are ignored.
    - With ``max_size`` set, the most crowded member is dropped until the
      archive fits.

``snapshot()`` returns an immutable tuple ordered by unit cost, so callers
can never alter the archive through it.
"""

from dataclasses import dataclass

import numpy as np

from .ranking import crowding_distance, fast_non_dominated_sort


@dataclass(frozen=True)
class ParetoSolution:
    """One archived design."""
    genome: tuple
    unit_cost: float
    annual_energy_gwh: float
    levelized_cost: float = float("nan")
    annual_energy_ci_gwh: tuple = (float("nan"), float("nan"))
    result: object = None

    @property
    def objectives(self):
        return (self.unit_cost, -self.annual_energy_gwh)

    def to_dict(self, gene_names=None):
        genes = (
            dict(zip(gene_names, self.genome)) if gene_names
            else {f"gene_{i}": v for i, v in enumerate(self.genome)}
        )
        return {
            **genes,
            'unit_cost_gbp_per_mwh': self.unit_cost,
            'annual_energy_gwh': self.annual_energy_gwh,
            'levelized_cost_gbp_per_mwh': self.levelized_cost,
            'energy_ci_low_gwh': self.annual_energy_ci_gwh[0],
            'energy_ci_high_gwh': self.annual_energy_ci_gwh[1],
        }


class ParetoArchive:
    """
    Archive of mutually non-dominated solutions.

    Args:
        max_size: Optional cap; None keeps every non-dominated solution
    """

    def __init__(self, max_size=None):
        self.max_size = max_size
        self._members = []
        self._objectives = np.empty((0, 2))

    def __len__(self):
        return len(self._members)

    def __iter__(self):
        return iter(self.snapshot())

    def objective_matrix(self):
        """Copy of the members' objectives, shape (n, 2)."""
        return self._objectives.copy()

    def insert(self, solution, penalised=False):
        """
        Offer one solution to the archive.

        Returns:
            True if the solution was added
        """
        if penalised:
            return False
        candidate = np.asarray(solution.objectives, dtype=float)
        if not np.all(np.isfinite(candidate)):
            return False

        F = self._objectives
        if len(F):
            if np.any(np.all(F == candidate, axis=1)):
                return False
            dominated_by_member = np.all(F <= candidate, axis=1) & np.any(F < candidate, axis=1)
            if dominated_by_member.any():
                return False
            evicted = np.all(candidate <= F, axis=1) & np.any(candidate < F, axis=1)
            if evicted.any():
                keep = np.flatnonzero(~evicted)
                self._members = [self._members[i] for i in keep]
                F = F[keep]

        self._members.append(solution)
        self._objectives = np.vstack([F, candidate])
        self._truncate()
        return True

    def update(self, solutions, penalised=None):
        """
        Offer a batch of solutions.

        Only the batch's own non-dominated points are tried, which skips
        candidates that cannot enter.

        Returns:
            Number of solutions added
        """
        solutions = list(solutions)
        if penalised is None:
            penalised = np.zeros(len(solutions), dtype=bool)
        candidates = [s for s, p in zip(solutions, penalised) if not p]
        if not candidates:
            return 0

        F = np.array([s.objectives for s in candidates], dtype=float)
        fronts, _ = fast_non_dominated_sort(F)
        added = 0
        for i in fronts[0]:
            added += self.insert(candidates[i])
        return added

    def snapshot(self):
        """Immutable tuple of members ordered by unit cost."""
        order = np.lexsort((self._objectives[:, 1], self._objectives[:, 0])) if len(self) else []
        return tuple(self._members[i] for i in order)

    def _truncate(self):
        if self.max_size is None:
            return
        while len(self._members) > self.max_size:
            crowding = crowding_distance(self._objectives)
            drop = int(np.argmin(crowding))
            del self._members[drop]
            self._objectives = np.delete(self._objectives, drop, axis=0)
