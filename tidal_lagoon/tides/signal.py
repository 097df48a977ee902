"""
Tidal Signal Model
==================

Synthesises the tidal elevation signal seen by the lagoon.

Elevation is a harmonic sum around mean sea level (chart datum):

    η(t) = MSL + Σ_k A_k(t) × cos(2π t / T_k − φ_k)

with the solar constituent's amplitude modulated over the year so that
equinoctial springs are larger than solstitial springs. With the default
M2/S2/N2 set the signal spans roughly 0.2 m – 10.3 m, inside the observed
0.15 m – 10.38 m envelope, and is never clipped.

The year is divided into half-tides of M2/2 ≈ 6.21 h. Each half-tide is
labelled with a seasonal stratum (season × spring-neap phase) which the
samplers use to pick representative half-tides.

Example:
    from tidal_lagoon.config import SimulationConfig
    from tidal_lagoon.tides import TidalSignalModel

    signal = TidalSignalModel(SimulationConfig.for_horizon("day"))
    for condition in signal:
        print(condition.timestamp, condition.elevation)
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from ..config import (
    ConfigurationError,
    DEFAULT_CONSTITUENTS,
    EQUINOCTIAL_MODULATION,
    HOURS_PER_DAY,
    HOURS_PER_YEAR,
    MAX_TIDAL_LEVEL_M,
    MEAN_SEA_LEVEL_M,
    MIN_TIDAL_LEVEL_M,
    SOLAR_CONSTITUENT,
    SPRING_EQUINOX_DAY_OF_YEAR,
)


SEASONS = {
    12: "winter", 1: "winter", 2: "winter",
    3: "spring", 4: "spring", 5: "spring",
    6: "summer", 7: "summer", 8: "summer",
    9: "autumn", 10: "autumn", 11: "autumn",
}


@dataclass(frozen=True)
class TidalCondition:
    """One elevation reading."""
    timestamp: pd.Timestamp
    elevation: float
    half_tide_index: int
    seasonal_stratum: str


def spring_neap_labels(n_bins):
    """Names of the spring-neap phase bins, springs first."""
    if n_bins == 1:
        return ("all",)
    if n_bins == 2:
        return ("springs", "neaps")
    if n_bins == 3:
        return ("springs", "mid", "neaps")
    return tuple(f"phase{k}" for k in range(n_bins))


class TidalSignalModel:
    """
    Deterministic harmonic tide for one simulation config.

    Iterating yields the ``TidalCondition`` readings of the configured
    horizon (``total_half_tides × readings_per_half_tide``). Iteration is
    lazy and can be restarted; the same config always produces the same
    sequence.

    Args:
        config: SimulationConfig
        constituents: Sequence of (name, amplitude_m, period_h, phase_rad)
        mean_level: Mean sea level above chart datum (m)
        equinoctial_modulation: Fractional swing of the solar amplitude
    """

    def __init__(self, config, constituents=DEFAULT_CONSTITUENTS,
                 mean_level=MEAN_SEA_LEVEL_M,
                 equinoctial_modulation=EQUINOCTIAL_MODULATION):
        self.config = config
        self.constituents = tuple(tuple(c) for c in constituents)
        self.mean_level = float(mean_level)
        self.equinoctial_modulation = float(equinoctial_modulation)
        self.start = pd.Timestamp(config.start_date)

        if not self.constituents:
            raise ConfigurationError("At least one tidal constituent is required")
        for name, amplitude, period, _ in self.constituents:
            if period <= 0:
                raise ConfigurationError(f"Constituent {name} has non-positive period")
            if amplitude < 0:
                raise ConfigurationError(f"Constituent {name} has negative amplitude")

        low, high = self.envelope()
        if low < MIN_TIDAL_LEVEL_M or high > MAX_TIDAL_LEVEL_M:
            raise ConfigurationError(
                f"Tidal envelope [{low:.2f}, {high:.2f}] m leaves the observed "
                f"range [{MIN_TIDAL_LEVEL_M}, {MAX_TIDAL_LEVEL_M}] m"
            )

        self._amplitudes = np.array([c[1] for c in self.constituents], dtype=float)
        self._omegas = np.array([2 * np.pi / c[2] for c in self.constituents])
        self._phases = np.array([c[3] for c in self.constituents], dtype=float)
        self._solar = np.array([c[0] == SOLAR_CONSTITUENT for c in self.constituents])
        self._start_day_of_year = self.start.dayofyear - 1

    # -------------------------------------------------------------------------
    # Sequence protocol
    # -------------------------------------------------------------------------

    def __len__(self):
        return self.config.total_half_tides * self.config.readings_per_half_tide

    def __iter__(self):
        readings = self.config.readings_per_half_tide
        for index in range(self.config.total_half_tides):
            hours = self.reading_hours(index)[:readings]
            levels = self.elevation_at(hours)
            stratum = self.stratum_of(index)
            for h, level in zip(hours, levels):
                yield TidalCondition(
                    timestamp=self.timestamp_at(h),
                    elevation=float(level),
                    half_tide_index=index,
                    seasonal_stratum=stratum,
                )

    # -------------------------------------------------------------------------
    # Elevation
    # -------------------------------------------------------------------------

    def envelope(self):
        """Lowest and highest elevation the constituent set can reach."""
        reach = 0.0
        for name, amplitude, _, _ in self.constituents:
            if name == SOLAR_CONSTITUENT:
                amplitude *= 1.0 + abs(self.equinoctial_modulation)
            reach += amplitude
        return self.mean_level - reach, self.mean_level + reach

    def elevation_at(self, hours):
        """
        Elevation (m above chart datum) at times given in hours from start.

        Args:
            hours: Scalar or array of hours

        Returns:
            Array of the same shape as ``hours``
        """
        hours = np.asarray(hours, dtype=float)
        t = hours[..., np.newaxis]
        amplitudes = np.broadcast_to(self._amplitudes, t.shape[:-1] + self._amplitudes.shape)
        if self.equinoctial_modulation and self._solar.any():
            day = self._start_day_of_year + hours / HOURS_PER_DAY
            year_days = HOURS_PER_YEAR / HOURS_PER_DAY
            swing = 1.0 + self.equinoctial_modulation * np.cos(
                4 * np.pi * (day - SPRING_EQUINOX_DAY_OF_YEAR) / year_days
            )
            amplitudes = np.where(self._solar, amplitudes * swing[..., np.newaxis], amplitudes)
        waves = amplitudes * np.cos(self._omegas * t - self._phases)
        return self.mean_level + waves.sum(axis=-1)

    def reading_hours(self, half_tide_index, count=1):
        """
        Reading times (hours) for ``count`` half-tides from ``half_tide_index``,
        including the closing reading of the last half-tide.
        """
        readings = self.config.readings_per_half_tide
        steps = np.arange(count * readings + 1)
        return (half_tide_index + steps / readings) * self.config.half_tide_duration_hours

    def readings_for(self, half_tide_indices, count=1):
        """
        Elevation readings for blocks of consecutive half-tides.

        Indices may be negative (before the start date); the harmonic signal
        is defined for all times.

        Args:
            half_tide_indices: First half-tide of each block, shape (n,)
            count: Half-tides per block

        Returns:
            Array (n, count × readings_per_half_tide + 1); the last column is
            the closing reading of the block.
        """
        indices = np.asarray(half_tide_indices, dtype=float)
        readings = self.config.readings_per_half_tide
        steps = np.arange(count * readings + 1) / readings
        hours = (indices[:, np.newaxis] + steps) * self.config.half_tide_duration_hours
        return self.elevation_at(hours)

    # -------------------------------------------------------------------------
    # Calendar and strata
    # -------------------------------------------------------------------------

    def timestamp_at(self, hours):
        return self.start + pd.to_timedelta(hours, unit="h")

    def spring_neap_fraction(self, hours):
        """
        Position in the spring-neap cycle folded onto [0, 1]:
        0 at springs (M2 and S2 in phase), 1 at neaps.
        """
        phases = {c[0]: (2 * np.pi / c[2], c[3]) for c in self.constituents}
        if "M2" not in phases or "S2" not in phases:
            return np.zeros_like(np.asarray(hours, dtype=float))
        (w_m2, p_m2), (w_s2, p_s2) = phases["M2"], phases["S2"]
        beat = (w_s2 - w_m2) * np.asarray(hours, dtype=float) - (p_s2 - p_m2)
        cycle = np.mod(beat / (2 * np.pi), 1.0)
        return 2.0 * np.minimum(cycle, 1.0 - cycle)

    def stratum_of(self, half_tide_index):
        table = self._strata_for(np.array([half_tide_index]))
        return table[0]

    def _strata_for(self, indices):
        duration = self.config.half_tide_duration_hours
        midpoints = (np.asarray(indices, dtype=float) + 0.5) * duration
        months = self.timestamp_at(midpoints).month
        bins = self.config.spring_neap_bins
        labels = spring_neap_labels(bins)
        phase_bin = np.minimum(
            (self.spring_neap_fraction(midpoints) * bins).astype(int), bins - 1
        )
        return [f"{SEASONS[m]}/{labels[b]}" for m, b in zip(months, phase_bin)]

    def half_tide_table(self, n_half_tides=None):
        """
        Summary of every half-tide in the tidal year.

        Args:
            n_half_tides: Number of half-tides (default: one year)

        Returns:
            pandas.DataFrame indexed by half_tide_index with columns
            start, season, spring_neap, stratum, range_m, mean_level_m
        """
        if n_half_tides is None:
            n_half_tides = self.config.half_tides_per_year
        indices = np.arange(n_half_tides)
        duration = self.config.half_tide_duration_hours
        levels = self.readings_for(indices)
        strata = self._strata_for(indices)

        table = pd.DataFrame({
            "half_tide_index": indices,
            "start": self.timestamp_at(indices * duration),
            "stratum": strata,
            "range_m": levels.max(axis=1) - levels.min(axis=1),
            "mean_level_m": levels.mean(axis=1),
        })
        split = table["stratum"].str.split("/", expand=True)
        table["season"] = split[0]
        table["spring_neap"] = split[1]
        return table.set_index("half_tide_index", drop=False)
