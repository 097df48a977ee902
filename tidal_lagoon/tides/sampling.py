"""
Half-Tide Sampling
==================

Selects which half-tides of the tidal year a run simulates, and how each
one is weighted when scaling up to an annual figure.

Strategies:
    - StratifiedSampler: draws half-tides from every season × spring-neap
      stratum in proportion to stratum duration. Each sample carries weight
      N_h / n_h, so the weighted sum is an unbiased annual estimate whatever
      the horizon.
    - NaiveWindowSampler: takes the single contiguous window (of horizon
      length) with the largest tidal range and scales it to a year. Kept as
      a negative control: short windows land on equinoctial springs and
      overstate the annual yield.

Both implement ``sample(config, signal) -> HalfTideSample``.

Estimator:
    Annual total     T̂ = Σ_h N_h × mean_h(y)
    Variance       V(T̂) = Σ_h N_h² (1 − n_h/N_h) s_h² / n_h
"""

from dataclasses import dataclass

import numpy as np
from scipy import stats

from ..config import ConfigurationError


@dataclass(frozen=True, eq=False)
class HalfTideSample:
    """
    Weighted set of half-tides chosen by a sampler.

    Attributes:
        half_tide_indices: Sampled half-tide indices, shape (n,)
        weights: Annual scale-up weight per sample, shape (n,)
        strata: Stratum label per sample
        stratum_sizes: {label: half-tides in the year}
        strategy: Name of the strategy that produced the sample
    """
    half_tide_indices: np.ndarray
    weights: np.ndarray
    strata: tuple
    stratum_sizes: dict
    strategy: str

    @property
    def n_samples(self):
        return len(self.half_tide_indices)

    @property
    def population_size(self):
        return int(sum(self.stratum_sizes.values()))

    def allocation(self):
        """{label: samples drawn}"""
        labels, counts = np.unique(np.asarray(self.strata), return_counts=True)
        return dict(zip(labels.tolist(), counts.tolist()))

    def annual_total(self, values):
        """
        Weighted annual total of per-half-tide values.

        Args:
            values: Array (..., n_samples)

        Returns:
            Array (...) of annual totals
        """
        return np.asarray(values, dtype=float) @ self.weights

    def variance(self, values):
        """
        Estimated variance of ``annual_total(values)``.

        Only defined for stratified samples; other strategies return NaN.
        Strata sampled once contribute nothing (no within-stratum spread is
        observable).
        """
        values = np.asarray(values, dtype=float)
        if self.strategy != StratifiedSampler.name:
            return np.full(values.shape[:-1], np.nan)

        strata = np.asarray(self.strata)
        total = np.zeros(values.shape[:-1])
        for label, size in self.stratum_sizes.items():
            mask = strata == label
            n_h = int(mask.sum())
            if n_h < 2 or n_h >= size:
                continue
            s2 = values[..., mask].var(axis=-1, ddof=1)
            total = total + size ** 2 * (1.0 - n_h / size) * s2 / n_h
        return total

    def confidence_interval(self, values, level=0.95):
        """
        Normal-approximation confidence interval of the annual total.

        Returns:
            (low, high) arrays
        """
        total = self.annual_total(values)
        z = stats.norm.ppf(0.5 + level / 2.0)
        half_width = z * np.sqrt(self.variance(values))
        return total - half_width, total + half_width


def stratified_design_variance(values, strata, allocation):
    """
    Sampling variance of the stratified annual estimator for a known year.

    Uses the full-year values rather than a sample, so it measures the
    estimator's precision under a given allocation.

    Args:
        values: Per-half-tide values for the whole year, shape (N,)
        strata: Stratum label per half-tide, length N
        allocation: {label: samples per stratum}

    Returns:
        float variance
    """
    values = np.asarray(values, dtype=float)
    strata = np.asarray(strata)
    variance = 0.0
    for label, n_h in allocation.items():
        population = values[strata == label]
        size = len(population)
        if size < 2 or n_h >= size:
            continue
        s2 = population.var(ddof=1)
        variance += size ** 2 * (1.0 - n_h / size) * s2 / n_h
    return float(variance)


# =============================================================================
# STRATEGIES
# =============================================================================

def stratum_sizes(table):
    """{stratum label: half-tides in stratum} from a half-tide table."""
    return {label: int(n) for label, n in table.groupby("stratum").size().items()}


class StratifiedSampler:
    """
    Proportional stratified sampling over season × spring-neap strata.

    Args:
        samples_per_stratum: Override of config.samples_per_stratum
        seed: Override of config.seed
    """

    name = "stratified"

    def __init__(self, samples_per_stratum=None, seed=None):
        self.samples_per_stratum = samples_per_stratum
        self.seed = seed

    def allocate(self, stratum_sizes, budget, samples_per_stratum):
        """
        Samples to draw from each stratum.

        Each stratum gets ``samples_per_stratum`` scaled by its relative
        duration plus its share of the horizon budget, bounded to
        [1, stratum size]. Longer horizons therefore always sample more, and
        a budget of a whole year takes every half-tide.

        Args:
            stratum_sizes: {label: half-tides in stratum}
            budget: Total half-tides the horizon allows
            samples_per_stratum: Minimum effort for a stratum of average size

        Returns:
            {label: n_h}
        """
        total = sum(stratum_sizes.values())
        n_strata = len(stratum_sizes)
        allocation = {}
        for label, size in stratum_sizes.items():
            base = samples_per_stratum * size * n_strata / total
            proportional = budget * size / total
            n_h = int(round(base + proportional))
            allocation[label] = min(max(n_h, 1), size)
        return allocation

    def allocation_for(self, config, signal, table=None):
        """Allocation for a config; ``table`` reuses an existing half-tide table."""
        if table is None:
            table = signal.half_tide_table()
        per_stratum = self.samples_per_stratum or config.samples_per_stratum
        return self.allocate(stratum_sizes(table), config.total_half_tides, per_stratum)

    def sample(self, config, signal):
        table = signal.half_tide_table()
        sizes = stratum_sizes(table)
        allocation = self.allocation_for(config, signal, table)
        rng = np.random.default_rng(config.seed if self.seed is None else self.seed)

        indices, weights, strata = [], [], []
        for label in sorted(sizes):
            members = table.index[table["stratum"] == label].to_numpy()
            n_h = allocation[label]
            if n_h < len(members):
                chosen = np.sort(rng.choice(members, size=n_h, replace=False))
            else:
                chosen = members
            indices.append(chosen)
            weights.append(np.full(len(chosen), sizes[label] / len(chosen)))
            strata.extend([label] * len(chosen))

        return HalfTideSample(
            half_tide_indices=np.concatenate(indices).astype(int),
            weights=np.concatenate(weights),
            strata=tuple(strata),
            stratum_sizes=sizes,
            strategy=self.name,
        )


class NaiveWindowSampler:
    """
    Best contiguous window scaled to a year.

    The window of ``total_half_tides`` with the largest summed tidal range
    is simulated and multiplied by (year / window). Reproduces the bias of
    optimising one good day or week and extrapolating it.
    """

    name = "naive"

    def sample(self, config, signal):
        table = signal.half_tide_table()
        sizes = stratum_sizes(table)
        n_year = len(table)
        length = min(config.total_half_tides, n_year)

        ranges = table["range_m"].to_numpy()
        window_sums = np.convolve(ranges, np.ones(length), mode="valid")
        start = int(np.argmax(window_sums))
        indices = np.arange(start, start + length)

        return HalfTideSample(
            half_tide_indices=indices,
            weights=np.full(length, n_year / length),
            strata=tuple(table["stratum"].to_numpy()[indices]),
            stratum_sizes=sizes,
            strategy=self.name,
        )


SAMPLERS = {
    StratifiedSampler.name: StratifiedSampler,
    NaiveWindowSampler.name: NaiveWindowSampler,
}


def get_sampler(name, **kwargs):
    """Instantiate a sampler by strategy name."""
    if name not in SAMPLERS:
        raise ConfigurationError(
            f"Unknown sampling strategy '{name}'. Available: {', '.join(SAMPLERS)}"
        )
    return SAMPLERS[name](**kwargs)


def sample_half_tides(config, signal):
    """Sample with the strategy named in ``config.sampling_strategy``."""
    return get_sampler(config.sampling_strategy).sample(config, signal)
