"""
Pareto Ranking Functions
========================

Dominance, non-dominated sorting, crowding distance and front quality
metrics for minimisation problems.

Objective sets are arrays (n_points, n_objectives). Front assignment and
hypervolume come from pymoo; crowding and truncation stay here so the
tie-breaking order is fixed.
"""

import numpy as np
from pymoo.indicators.hv import HV
from pymoo.util.nds.non_dominated_sorting import NonDominatedSorting


def dominates(a, b):
    """True if ``a`` is no worse than ``b`` everywhere and better somewhere."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    return bool(np.all(a <= b) and np.any(a < b))


def dominance_matrix(objectives):
    """Boolean matrix D with D[i, j] = point i dominates point j."""
    F = np.asarray(objectives, dtype=float)
    no_worse = (F[:, np.newaxis, :] <= F[np.newaxis, :, :]).all(axis=2)
    better = (F[:, np.newaxis, :] < F[np.newaxis, :, :]).any(axis=2)
    return no_worse & better


def fast_non_dominated_sort(objectives):
    """
    Fast non-dominated sort (Deb et al., 2002).

    Returns:
        (fronts, ranks): list of index arrays, front 0 first, and the
        rank of every point
    """
    F = np.asarray(objectives, dtype=float)
    n = len(F)
    if n == 0:
        return [], np.empty(0, dtype=int)

    # Index order inside a front is fixed so crowding ties break the same way
    fronts = [np.sort(np.asarray(front, dtype=int)) for front in NonDominatedSorting().do(F)]
    ranks = np.full(n, -1, dtype=int)
    for rank, front in enumerate(fronts):
        ranks[front] = rank

    return fronts, ranks


def crowding_distance(objectives):
    """
    Crowding distance of the points of one front.

    Boundary points of each objective get infinity; interior points sum
    the normalised gap between their neighbours.
    """
    F = np.asarray(objectives, dtype=float)
    n = len(F)
    distance = np.zeros(n)
    if n <= 2:
        distance[:] = np.inf
        return distance

    for m in range(F.shape[1]):
        order = np.argsort(F[:, m], kind="stable")
        values = F[order, m]
        distance[order[0]] = np.inf
        distance[order[-1]] = np.inf
        span = values[-1] - values[0]
        if span <= 0:
            continue
        distance[order[1:-1]] += (values[2:] - values[:-2]) / span

    return distance


def assign_crowding(objectives, fronts):
    """Crowding distance of every point, computed within its own front."""
    F = np.asarray(objectives, dtype=float)
    distance = np.zeros(len(F))
    for front in fronts:
        distance[front] = crowding_distance(F[front])
    return distance


def select_next_generation(objectives, size):
    """
    Elitist (μ + λ) truncation.

    Whole fronts are taken in rank order; the front that overflows is cut
    by descending crowding distance (stable, so ties keep index order).

    Returns:
        (selected, ranks, crowding): indices into ``objectives`` and the
        rank and crowding distance of each selected point
    """
    F = np.asarray(objectives, dtype=float)
    fronts, ranks = fast_non_dominated_sort(F)
    crowding = assign_crowding(F, fronts)

    selected = []
    for front in fronts:
        room = size - len(selected)
        if room <= 0:
            break
        if len(front) <= room:
            selected.extend(front.tolist())
        else:
            order = np.argsort(-crowding[front], kind="stable")
            selected.extend(front[order[:room]].tolist())

    selected = np.asarray(selected, dtype=int)
    return selected, ranks[selected], crowding[selected]


# =============================================================================
# QUALITY METRICS
# =============================================================================

def _front_2d(F):
    """Non-dominated points of a two-objective set, sorted by the first objective."""
    F = F[np.lexsort((F[:, 1], F[:, 0]))]
    best_so_far = np.minimum.accumulate(F[:, 1])
    keep = np.ones(len(F), dtype=bool)
    keep[1:] = F[1:, 1] < best_so_far[:-1]
    return F[keep]


def hypervolume_2d(objectives, reference):
    """
    Area dominated by a set of two-objective points, bounded by ``reference``.

    Points that do not strictly dominate the reference contribute nothing.
    """
    F = np.asarray(objectives, dtype=float).reshape(-1, 2)
    ref = np.asarray(reference, dtype=float)
    F = F[np.all(np.isfinite(F), axis=1) & np.all(F < ref, axis=1)]
    if len(F) == 0:
        return 0.0

    return float(HV(ref_point=ref)(_front_2d(F)))


def spacing(objectives):
    """
    Schott's spacing metric: spread of nearest-neighbour (L1) distances.

    0 means perfectly even spacing. Fewer than two points gives 0. For a
    non-dominated two-objective front the nearest neighbour of a point is
    adjacent to it in cost order, so only neighbours are compared.
    """
    F = np.asarray(objectives, dtype=float)
    n = len(F)
    if n < 2:
        return 0.0
    if F.shape[1] == 2:
        F = F[np.lexsort((F[:, 1], F[:, 0]))]
        gaps = np.abs(np.diff(F, axis=0)).sum(axis=1)
        nearest = np.minimum(np.append(gaps, np.inf), np.insert(gaps, 0, np.inf))
    else:
        distances = np.abs(F[:, np.newaxis, :] - F[np.newaxis, :, :]).sum(axis=2)
        np.fill_diagonal(distances, np.inf)
        nearest = distances.min(axis=1)
    return float(np.sqrt(np.sum((nearest - nearest.mean()) ** 2) / (n - 1)))
