"""
Lagoon Simulator
================

0-D two-way operation of a tidal lagoon over sampled half-tides.

Each half-tide the plant runs a hold → generate → sluice cycle:

    1. Hold: gates closed while the head across the wall builds.
    2. Generate: once head ≥ high threshold, water passes the turbines.
    3. Sluice: once head falls below the low threshold, the turbines stop
       and the sluices open until the half-tide ends.

The basin level moves toward the sea by Q Δt / A_lagoon and never
overshoots it. Every sampled half-tide is simulated as a short episode
preceded by ``warmup_half_tides`` unscored half-tides, so the scored
half-tide starts from a realistic basin state.

All designs and episodes are stepped together as (designs × episodes)
numpy arrays, so a whole population is simulated in one pass.

Example:
    from tidal_lagoon.config import SimulationConfig
    from tidal_lagoon.energy import LagoonSimulator

    simulator = LagoonSimulator.from_signal(SimulationConfig.for_horizon("day"))
    result = simulator.simulate([1.36, 0.0, 2.5, 1.0])
    print(f"{result.annual_energy_gwh:.0f} GWh/yr")
"""

from dataclasses import dataclass

import numpy as np

from ..config import LagoonSpec
from ..tides import TidalSignalModel, sample_half_tides
from .hydraulics import level_change, orientation_factors, orifice_flow, turbine_power_mw


class SimulationInstability(RuntimeError):
    """Raised when the lagoon level becomes non-finite or leaves its physical range."""
    pass


@dataclass(frozen=True)
class SimulationResult:
    """Annualised performance of one design."""
    annual_energy_gwh: float
    average_head_m: float
    head_variance_m2: float
    operational_complexity: float
    switching_frequency: float = 0.0
    tidal_range_retention: float = 1.0
    annual_energy_ci_gwh: tuple = (float("nan"), float("nan"))

    @property
    def annual_energy_mwh(self):
        return self.annual_energy_gwh * 1000.0


class LagoonSimulator:
    """
    Simulates lagoon designs over a weighted half-tide sample.

    Args:
        config: SimulationConfig
        sample: HalfTideSample giving the scored half-tides and weights
        elevations: Sea level per episode, shape
            (n_samples, (warmup + 1) × readings_per_half_tide + 1)
        lagoon: LagoonSpec (default: reference lagoon)
    """

    def __init__(self, config, sample, elevations, lagoon=None):
        self.config = config
        self.sample = sample
        self.lagoon = lagoon or LagoonSpec()
        self.elevations = np.asarray(elevations, dtype=float)

        expected = (config.warmup_half_tides + 1) * config.readings_per_half_tide + 1
        if self.elevations.shape != (sample.n_samples, expected):
            raise ValueError(
                f"Episode elevations have shape {self.elevations.shape}, "
                f"expected ({sample.n_samples}, {expected})"
            )

    @classmethod
    def from_signal(cls, config, signal=None, sample=None, lagoon=None):
        """Build a simulator, sampling half-tides from ``signal`` if no sample is given."""
        if signal is None:
            signal = TidalSignalModel(config)
        if sample is None:
            sample = sample_half_tides(config, signal)
        starts = sample.half_tide_indices - config.warmup_half_tides
        elevations = signal.readings_for(starts, count=config.warmup_half_tides + 1)
        return cls(config, sample, elevations, lagoon)

    @property
    def n_episodes(self):
        return self.sample.n_samples

    @property
    def sea_range_m(self):
        """Tidal range of each scored half-tide."""
        scored = self.elevations[:, self._scored_from:]
        return scored.max(axis=1) - scored.min(axis=1)

    @property
    def _scored_from(self):
        return self.config.warmup_half_tides * self.config.readings_per_half_tide

    # -------------------------------------------------------------------------
    # Batch simulation
    # -------------------------------------------------------------------------

    def run(self, genomes):
        """
        Simulate a batch of designs.

        The turbines stop at the lower of the two thresholds, so a design
        whose low threshold exceeds its high threshold generates down to
        its high threshold.

        Args:
            genomes: Array (n_designs, 4) of (discharge coefficient,
                orientation angle, high threshold, low threshold)

        Returns:
            dict of arrays over designs:
                - annual_energy_mwh, annual_energy_gwh
                - ci_low_gwh, ci_high_gwh: 95% CI of the annual estimate
                - average_head_m, head_variance_m2
                - switching_frequency: generation starts per half-tide
                - operational_complexity
                - tidal_range_retention: lagoon range / sea range
                - min_level_m, max_level_m: extremes of the basin level
                - unstable: bool, level non-finite or out of range
                - energy_per_half_tide_mwh: (n_designs, n_episodes)
        """
        genomes = np.atleast_2d(np.asarray(genomes, dtype=float))
        lagoon = self.lagoon
        config = self.config
        readings = config.readings_per_half_tide
        n_steps = self.elevations.shape[1] - 1
        scored_from = self._scored_from
        shape = (genomes.shape[0], self.n_episodes)

        turbine_area = genomes[:, 0:1] * lagoon.turbine_area_m2
        ebb_factor, flood_factor = orientation_factors(genomes[:, 1:2], lagoon.flow_skew_deg)
        start_head = genomes[:, 2:3]
        stop_head = np.minimum(genomes[:, 3:4], start_head)
        sluice_area = lagoon.sluice_discharge_coefficient * lagoon.sluice_area_m2
        capacity = lagoon.installed_capacity_mw
        dt_hours = config.time_step_hours
        dt_seconds = dt_hours * 3600.0

        level = np.broadcast_to(self.elevations[:, 0], shape).copy()
        generating = np.zeros(shape, dtype=bool)
        sluicing = np.zeros(shape, dtype=bool)

        energy = np.zeros(shape)
        generating_steps = np.zeros(shape)
        head_sum = np.zeros(shape)
        head_sq_sum = np.zeros(shape)
        starts = np.zeros(shape)
        lagoon_low = np.full(shape, np.inf)
        lagoon_high = np.full(shape, -np.inf)
        level_low = level.copy()
        level_high = level.copy()

        with np.errstate(invalid="ignore", over="ignore"):
            for step in range(n_steps):
                if step % readings == 0:
                    generating[:] = False
                    sluicing[:] = False

                difference = level - self.elevations[:, step]
                head = np.abs(difference)

                started = ~generating & ~sluicing & (head >= start_head)
                generating |= started
                stopped = generating & (head < stop_head)
                generating &= ~stopped
                sluicing |= stopped

                factor = np.where(difference > 0, ebb_factor, flood_factor)
                turbine_flow = orifice_flow(turbine_area * factor, head)
                power, turbine_flow = turbine_power_mw(
                    turbine_flow, head, lagoon.turbine_efficiency, capacity
                )
                power = np.where(generating, power, 0.0)
                flow = np.where(generating, turbine_flow, 0.0)
                flow = flow + np.where(sluicing, orifice_flow(sluice_area, head), 0.0)

                if step >= scored_from:
                    energy += power * dt_hours
                    generating_steps += generating
                    head_sum += np.where(generating, head, 0.0)
                    head_sq_sum += np.where(generating, head ** 2, 0.0)
                    starts += started
                    np.minimum(lagoon_low, level, out=lagoon_low)
                    np.maximum(lagoon_high, level, out=lagoon_high)

                drop = np.minimum(level_change(flow, dt_seconds, lagoon.surface_area_m2), head)
                level = level - np.sign(difference) * drop

                np.minimum(level_low, level, out=level_low)
                np.maximum(level_high, level, out=level_high)

        np.minimum(lagoon_low, level, out=lagoon_low)
        np.maximum(lagoon_high, level, out=lagoon_high)

        finite = np.isfinite(level_low) & np.isfinite(level_high)
        unstable = ~finite | (level_low < lagoon.min_level_m) | (level_high > lagoon.max_level_m)
        unstable = unstable.any(axis=1)

        weights = self.sample.weights
        total_weight = weights.sum()
        annual_mwh = self.sample.annual_total(energy)
        ci_low, ci_high = self.sample.confidence_interval(energy)

        weighted_steps = generating_steps @ weights
        with np.errstate(invalid="ignore", divide="ignore"):
            average_head = np.where(weighted_steps > 0, (head_sum @ weights) / weighted_steps, 0.0)
            mean_square = np.where(weighted_steps > 0, (head_sq_sum @ weights) / weighted_steps, 0.0)
            retention = ((lagoon_high - lagoon_low) / self.sea_range_m) @ weights / total_weight
        head_variance = np.maximum(mean_square - average_head ** 2, 0.0)
        switching = (starts @ weights) / total_weight

        return {
            "annual_energy_mwh": annual_mwh,
            "annual_energy_gwh": annual_mwh / 1000.0,
            "ci_low_gwh": ci_low / 1000.0,
            "ci_high_gwh": ci_high / 1000.0,
            "average_head_m": average_head,
            "head_variance_m2": head_variance,
            "switching_frequency": switching,
            "operational_complexity": switching * (1.0 + head_variance),
            "tidal_range_retention": retention,
            "min_level_m": level_low.min(axis=1),
            "max_level_m": level_high.max(axis=1),
            "unstable": unstable,
            "energy_per_half_tide_mwh": energy,
        }

    def results(self, batch):
        """Convert ``run`` output to SimulationResult objects (None where unstable)."""
        results = []
        for i, unstable in enumerate(batch["unstable"]):
            if unstable:
                results.append(None)
                continue
            results.append(SimulationResult(
                annual_energy_gwh=float(batch["annual_energy_gwh"][i]),
                average_head_m=float(batch["average_head_m"][i]),
                head_variance_m2=float(batch["head_variance_m2"][i]),
                operational_complexity=float(batch["operational_complexity"][i]),
                switching_frequency=float(batch["switching_frequency"][i]),
                tidal_range_retention=float(batch["tidal_range_retention"][i]),
                annual_energy_ci_gwh=(float(batch["ci_low_gwh"][i]), float(batch["ci_high_gwh"][i])),
            ))
        return results

    def simulate(self, genome):
        """
        Simulate one design.

        Raises:
            SimulationInstability: If the lagoon level leaves
                [min_level_m, max_level_m] or becomes non-finite
        """
        batch = self.run(np.asarray(genome, dtype=float)[np.newaxis, :])
        if batch["unstable"][0]:
            raise SimulationInstability(
                f"Lagoon level reached [{batch['min_level_m'][0]:.3f}, "
                f"{batch['max_level_m'][0]:.3f}] m, outside "
                f"[{self.lagoon.min_level_m}, {self.lagoon.max_level_m}] m"
            )
        return self.results(batch)[0]
