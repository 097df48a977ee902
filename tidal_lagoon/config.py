"""
Configuration Constants
========================

Central location for all configuration parameters and constants used
throughout the tidal lagoon simulation and optimization system.

Module-level constants describe the reference scheme (Swansea Bay Tidal
Lagoon, Moreira et al. 2022 CoBaseTRS baselines and the 2015 CfD
economics). Runs never read these directly: they are copied into the
frozen configuration objects below, which are passed explicitly into
every evaluation.

    - SimulationConfig: horizon, sampling and economic settings
    - LagoonSpec: physical description of the lagoon
    - CostParameters: penalty weights for the cost model
    - OptimizerConfig: NSGA-II hyperparameters
    - GeneBounds: decision variable bounds table
"""

import math
import numbers
import warnings
from dataclasses import dataclass, field, replace

import pandas as pd


class ConfigurationError(ValueError):
    """Raised when a configuration is rejected before any simulation runs."""
    pass


# =============================================================================
# PHYSICAL CONSTANTS
# =============================================================================

HOURS_PER_YEAR = 8766  # Average including leap years
HOURS_PER_DAY = 24.0
GRAVITY = 9.81  # m/s²
SEAWATER_DENSITY = 1025.0  # kg/m³
WATTS_TO_MW = 1e-6


# =============================================================================
# TIDAL TIMING
# =============================================================================

M2_PERIOD_HOURS = 12.4206012  # Principal lunar semi-diurnal
S2_PERIOD_HOURS = 12.0  # Principal solar semi-diurnal
N2_PERIOD_HOURS = 12.65834751  # Larger lunar elliptic

HALF_TIDE_DURATION_HOURS = M2_PERIOD_HOURS / 2.0  # 6.21 h
READINGS_PER_HALF_TIDE = 24
# Stratified sampling floor (samples in a stratum of average size)
SAMPLES_PER_STRATUM = 32

# Spring-neap beat of M2 and S2 (~14.77 days)
SPRING_NEAP_PERIOD_HOURS = 1.0 / (1.0 / S2_PERIOD_HOURS - 1.0 / M2_PERIOD_HOURS)

# Observed water level envelope (chart datum, metres)
MIN_TIDAL_LEVEL_M = 0.15
MAX_TIDAL_LEVEL_M = 10.38
MEAN_SEA_LEVEL_M = (MIN_TIDAL_LEVEL_M + MAX_TIDAL_LEVEL_M) / 2.0  # 5.265

# Head range in which operation is energy-significant
MIN_OPERATING_HEAD_M = 0.5
MAX_OPERATING_HEAD_M = 4.0

# (name, amplitude m, period h, phase rad)
DEFAULT_CONSTITUENTS = (
    ("M2", 3.20, M2_PERIOD_HOURS, 0.0),
    ("S2", 1.10, S2_PERIOD_HOURS, 0.0),
    ("N2", 0.60, N2_PERIOD_HOURS, 0.0),
)
SOLAR_CONSTITUENT = "S2"
EQUINOCTIAL_MODULATION = 0.15  # S2 amplitude swing between equinox and solstice
SPRING_EQUINOX_DAY_OF_YEAR = 79

DEFAULT_START_DATE = "2024-01-01"

HORIZON_DAYS = {
    "test": 0.5,
    "day": 1.0,
    "week": 7.0,
    "year": HOURS_PER_YEAR / HOURS_PER_DAY,
}


# =============================================================================
# LAGOON (SWANSEA BAY REFERENCE SCHEME)
# =============================================================================

LAGOON_SURFACE_AREA_M2 = 11_500_000.0  # 11.5 km²
NUMBER_OF_TURBINES = 16
TURBINE_CAPACITY_MW = 20.0
TURBINE_DIAMETER_M = 7.35
TURBINE_EFFICIENCY = 0.90
TURBINE_DISCHARGE_COEFFICIENT = 1.36  # CoBaseTRS reference value
SLUICE_AREA_M2 = 800.0
SLUICE_DISCHARGE_COEFFICIENT = 1.0
FLOW_SKEW_DEG = 10.0  # Ebb/flood principal axes either side of the basin axis


# =============================================================================
# FINANCIAL PARAMETERS
# =============================================================================

TOTAL_CAPITAL_COST_GBP = 1_327_000_000.0  # £1.327bn
INSTALLED_CAPACITY_MW = 320.0
DISCOUNT_RATE = 0.06
OPEX_FRACTION = 0.03  # O&M as fraction of CapEx
PROJECT_LIFETIME_YEARS = 25


# =============================================================================
# COST MODEL
# =============================================================================

CAPITAL_NORMALISATION = 200.0  # Brings capital cost into the penalty magnitude
ENERGY_REFERENCE_MWH = 22_000.0
ENERGY_PENALTY_EXPONENT = 1.8
HEAD_PENALTY_EXPONENT = 2.5
OPERATIONAL_SCALE = 0.5
ENERGY_SCALE = 0.1
PENALTY_UNIT_COST = 1.0e6  # £/MWh assigned to failed or zero-energy designs


# =============================================================================
# DECISION VARIABLES
# =============================================================================

GENE_NAMES = (
    "turbine_discharge_coefficient",
    "orientation_angle_deg",
    "head_threshold_high_m",
    "head_threshold_low_m",
)

DEFAULT_GENE_BOUNDS = {
    "turbine_discharge_coefficient": (0.5, 2.0),
    "orientation_angle_deg": (-30.0, 30.0),
    "head_threshold_high_m": (MIN_OPERATING_HEAD_M, MAX_OPERATING_HEAD_M),
    "head_threshold_low_m": (MIN_OPERATING_HEAD_M, MAX_OPERATING_HEAD_M),
}


# =============================================================================
# OPTIMIZER
# =============================================================================

SBX_ETA = 20.0
MUTATION_ETA = 20.0
CROSSOVER_TYPES = ("SBX",)
MUTATION_TYPES = ("POLYNOMIAL",)
SAMPLING_STRATEGIES = ("stratified", "naive")

# Longer horizons flatten the fitness landscape; mutate harder to compensate
HORIZON_MUTATION_SCALE = {"test": 1.0, "day": 1.0, "week": 1.25, "year": 1.5}

COMPUTATIONAL_EFFORT_WARNING = 1_000_000
HIGH_MUTATION_WARNING = 0.5
LOW_CROSSOVER_WARNING = 0.5


# =============================================================================
# VALIDATION HELPERS
# =============================================================================

def _require_probability(name, value):
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be within [0, 1], got {value}")


def _require_positive(name, value):
    if not value > 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")


def _require_non_negative(name, value):
    if value < 0:
        raise ConfigurationError(f"{name} must be non-negative, got {value}")


def half_tides_for_days(days, half_tide_duration_hours=HALF_TIDE_DURATION_HOURS):
    """Number of whole half-tides in a horizon of ``days`` (at least one)."""
    return max(1, int(round(days * HOURS_PER_DAY / half_tide_duration_hours)))


def half_tides_per_year(half_tide_duration_hours=HALF_TIDE_DURATION_HOURS):
    """Number of half-tides in an average year (1412 at 6.21 h)."""
    return int(round(HOURS_PER_YEAR / half_tide_duration_hours))


# =============================================================================
# SIMULATION CONFIG
# =============================================================================

@dataclass(frozen=True)
class SimulationConfig:
    """
    Horizon, sampling and economic settings for one run.

    Created once from external input and read-only thereafter.

    Attributes:
        total_half_tides: Horizon length in half-tides. Sets the sampling
            budget: an annual horizon simulates every half-tide of the year.
        half_tide_duration_hours: Length of one rise or fall (≈6.21 h).
        readings_per_half_tide: Elevation readings (time steps) per half-tide.
        sampling_strategy: "stratified" or "naive" (best window × scale).
        samples_per_stratum: Minimum sampling effort per stratum.
        spring_neap_bins: Number of spring-neap phase bins per season.
        warmup_half_tides: Unscored half-tides simulated before each sample.
        seed: Seed for the sampler.
        start_date: Calendar start of the tidal year.
        discount_rate, opex_fraction, project_lifetime_years: Economics.
        horizon: Optional label ("day", "week", ...), informational only.
    """
    total_half_tides: int
    half_tide_duration_hours: float = HALF_TIDE_DURATION_HOURS
    readings_per_half_tide: int = READINGS_PER_HALF_TIDE
    sampling_strategy: str = "stratified"
    samples_per_stratum: int = SAMPLES_PER_STRATUM
    spring_neap_bins: int = 3
    warmup_half_tides: int = 1
    seed: int = 0
    start_date: str = DEFAULT_START_DATE
    discount_rate: float = DISCOUNT_RATE
    opex_fraction: float = OPEX_FRACTION
    project_lifetime_years: int = PROJECT_LIFETIME_YEARS
    horizon: str = "custom"

    def __post_init__(self):
        if not isinstance(self.total_half_tides, numbers.Integral) or self.total_half_tides <= 0:
            raise ConfigurationError(
                f"Horizon length must be a positive number of half-tides, "
                f"got {self.total_half_tides!r}"
            )
        _require_positive("half_tide_duration_hours", self.half_tide_duration_hours)
        if self.readings_per_half_tide < 2:
            raise ConfigurationError("readings_per_half_tide must be at least 2")
        if self.sampling_strategy not in SAMPLING_STRATEGIES:
            raise ConfigurationError(
                f"Unknown sampling strategy '{self.sampling_strategy}'. "
                f"Available: {', '.join(SAMPLING_STRATEGIES)}"
            )
        if self.samples_per_stratum < 1:
            raise ConfigurationError("samples_per_stratum must be at least 1")
        if self.spring_neap_bins < 1:
            raise ConfigurationError("spring_neap_bins must be at least 1")
        _require_non_negative("warmup_half_tides", self.warmup_half_tides)
        _require_probability("discount_rate", self.discount_rate)
        _require_probability("opex_fraction", self.opex_fraction)
        _require_positive("project_lifetime_years", self.project_lifetime_years)
        try:
            pd.Timestamp(self.start_date)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid start_date: {self.start_date}") from exc

    @classmethod
    def for_horizon(cls, horizon, **overrides):
        """
        Build a config for a named horizon ("test", "day", "week", "year").

        Args:
            horizon: Horizon name
            **overrides: Any other SimulationConfig field

        Returns:
            SimulationConfig with total_half_tides derived from the horizon
        """
        if horizon not in HORIZON_DAYS:
            raise ConfigurationError(
                f"Unknown horizon '{horizon}'. Available: {', '.join(HORIZON_DAYS)}"
            )
        duration = overrides.get("half_tide_duration_hours", HALF_TIDE_DURATION_HOURS)
        if horizon == "year":
            total = half_tides_per_year(duration)
        else:
            total = half_tides_for_days(HORIZON_DAYS[horizon], duration)
        return cls(total_half_tides=total, horizon=horizon, **overrides)

    def with_strategy(self, sampling_strategy):
        return replace(self, sampling_strategy=sampling_strategy)

    @property
    def half_tides_per_day(self):
        return HOURS_PER_DAY / self.half_tide_duration_hours

    @property
    def duration_hours(self):
        return self.total_half_tides * self.half_tide_duration_hours

    @property
    def duration_days(self):
        return self.total_half_tides / self.half_tides_per_day

    @property
    def time_step_hours(self):
        return self.half_tide_duration_hours / self.readings_per_half_tide

    @property
    def half_tides_per_year(self):
        return half_tides_per_year(self.half_tide_duration_hours)

    def __str__(self):
        return (f"{self.horizon} ({self.total_half_tides} half-tides, "
                f"{self.duration_hours:.1f} hours, {self.sampling_strategy})")


# =============================================================================
# LAGOON SPEC
# =============================================================================

@dataclass(frozen=True)
class LagoonSpec:
    """Physical description of the lagoon and its turbine/sluice plant."""
    surface_area_m2: float = LAGOON_SURFACE_AREA_M2
    number_of_turbines: int = NUMBER_OF_TURBINES
    turbine_capacity_mw: float = TURBINE_CAPACITY_MW
    turbine_diameter_m: float = TURBINE_DIAMETER_M
    turbine_efficiency: float = TURBINE_EFFICIENCY
    sluice_area_m2: float = SLUICE_AREA_M2
    sluice_discharge_coefficient: float = SLUICE_DISCHARGE_COEFFICIENT
    flow_skew_deg: float = FLOW_SKEW_DEG
    min_level_m: float = MIN_TIDAL_LEVEL_M
    max_level_m: float = MAX_TIDAL_LEVEL_M

    def __post_init__(self):
        _require_positive("surface_area_m2", self.surface_area_m2)
        _require_positive("number_of_turbines", self.number_of_turbines)
        _require_positive("turbine_capacity_mw", self.turbine_capacity_mw)
        _require_positive("turbine_diameter_m", self.turbine_diameter_m)
        _require_probability("turbine_efficiency", self.turbine_efficiency)
        _require_non_negative("sluice_area_m2", self.sluice_area_m2)
        if self.min_level_m >= self.max_level_m:
            raise ConfigurationError("min_level_m must be below max_level_m")

    @property
    def turbine_area_m2(self):
        return self.number_of_turbines * math.pi * (self.turbine_diameter_m / 2.0) ** 2

    @property
    def installed_capacity_mw(self):
        return self.number_of_turbines * self.turbine_capacity_mw


# =============================================================================
# COST PARAMETERS
# =============================================================================

@dataclass(frozen=True)
class CostParameters:
    """
    Weights of the unit cost model.

    The supplementary weights (head variation, environmental, maintenance
    scaling, switching frequency) have no empirical grounding. They default
    to neutral values so they only act when a caller sets them, e.g. for
    sensitivity analysis.
    """
    total_capital_cost: float = TOTAL_CAPITAL_COST_GBP
    capital_normalisation: float = CAPITAL_NORMALISATION
    operational_scale: float = OPERATIONAL_SCALE
    head_exponent: float = HEAD_PENALTY_EXPONENT
    energy_scale: float = ENERGY_SCALE
    energy_reference_mwh: float = ENERGY_REFERENCE_MWH
    energy_exponent: float = ENERGY_PENALTY_EXPONENT
    head_variation_cost: float = 0.0
    environmental_cost: float = 0.0
    maintenance_scaling: float = 1.0
    frequency_cost: float = 0.0
    penalty_unit_cost: float = PENALTY_UNIT_COST

    def __post_init__(self):
        _require_positive("total_capital_cost", self.total_capital_cost)
        _require_positive("capital_normalisation", self.capital_normalisation)
        _require_positive("energy_reference_mwh", self.energy_reference_mwh)
        _require_positive("penalty_unit_cost", self.penalty_unit_cost)
        for name in ("operational_scale", "energy_scale", "head_variation_cost",
                     "environmental_cost", "maintenance_scaling", "frequency_cost",
                     "head_exponent", "energy_exponent"):
            _require_non_negative(name, getattr(self, name))


# =============================================================================
# GENE BOUNDS
# =============================================================================

@dataclass(frozen=True)
class GeneBounds:
    """Ordered gene names with their [min, max] bounds."""
    names: tuple = GENE_NAMES
    lower: tuple = tuple(DEFAULT_GENE_BOUNDS[n][0] for n in GENE_NAMES)
    upper: tuple = tuple(DEFAULT_GENE_BOUNDS[n][1] for n in GENE_NAMES)

    def __post_init__(self):
        if not (len(self.names) == len(self.lower) == len(self.upper)):
            raise ConfigurationError("Gene names and bounds differ in length")
        if not self.names:
            raise ConfigurationError("At least one gene is required")
        for name, lo, hi in zip(self.names, self.lower, self.upper):
            if not (math.isfinite(lo) and math.isfinite(hi)):
                raise ConfigurationError(f"Bounds for '{name}' must be finite")
            if lo >= hi:
                raise ConfigurationError(
                    f"Degenerate bounds for '{name}': min {lo} >= max {hi}"
                )

    @classmethod
    def from_table(cls, table):
        """
        Build bounds from a {name: (min, max)} table.

        Names missing from the table keep their defaults; unknown names are
        rejected because the simulator would ignore them.
        """
        unknown = set(table) - set(GENE_NAMES)
        if unknown:
            raise ConfigurationError(f"Unknown genes: {', '.join(sorted(unknown))}")
        merged = {**DEFAULT_GENE_BOUNDS, **table}
        for name, pair in merged.items():
            if len(pair) != 2:
                raise ConfigurationError(f"Bounds for '{name}' must be (min, max)")
        return cls(
            names=GENE_NAMES,
            lower=tuple(float(merged[n][0]) for n in GENE_NAMES),
            upper=tuple(float(merged[n][1]) for n in GENE_NAMES),
        )

    def as_table(self):
        return {n: (lo, hi) for n, lo, hi in zip(self.names, self.lower, self.upper)}

    @property
    def n_genes(self):
        return len(self.names)


# =============================================================================
# OPTIMIZER CONFIG
# =============================================================================

def default_mutation_probability(horizon, n_genes=len(GENE_NAMES)):
    """1/n_genes, scaled up for longer horizons."""
    scale = HORIZON_MUTATION_SCALE.get(horizon, 1.0)
    return min(1.0, scale / n_genes)


@dataclass(frozen=True)
class OptimizerConfig:
    """
    NSGA-II hyperparameters.

    Attributes:
        population_size: Individuals per generation (even)
        max_generations: Hard generation limit
        crossover_probability: Probability of SBX per parent pair
        mutation_probability: Per-gene polynomial mutation probability
        crossover_type: Only "SBX"
        mutation_type: Only "POLYNOMIAL"
        convergence_threshold: Minimum relative hypervolume improvement
        stagnation_generations: Consecutive stagnant generations to converge
        seed: Root seed of the run
        n_workers: Evaluation processes (1 = in-process)
        max_wall_seconds: Optional wall-clock budget
        archive_max_size: Optional cap on the Pareto archive
        sbx_eta, mutation_eta: Distribution indices
        bounds: GeneBounds table
    """
    population_size: int = 400
    max_generations: int = 50
    crossover_probability: float = 0.9
    mutation_probability: float = 1.0 / len(GENE_NAMES)
    crossover_type: str = "SBX"
    mutation_type: str = "POLYNOMIAL"
    convergence_threshold: float = 0.05
    stagnation_generations: int = 10
    seed: int = 42
    n_workers: int = 1
    max_wall_seconds: float = None
    archive_max_size: int = None
    sbx_eta: float = SBX_ETA
    mutation_eta: float = MUTATION_ETA
    bounds: GeneBounds = field(default_factory=GeneBounds)

    def __post_init__(self):
        if self.population_size < 2 or self.population_size % 2:
            raise ConfigurationError(
                f"population_size must be an even number >= 2, got {self.population_size}"
            )
        if self.max_generations < 1:
            raise ConfigurationError("max_generations must be at least 1")
        _require_probability("crossover_probability", self.crossover_probability)
        _require_probability("mutation_probability", self.mutation_probability)
        if self.crossover_type.upper() not in CROSSOVER_TYPES:
            raise ConfigurationError(f"Unsupported crossover type '{self.crossover_type}'")
        if self.mutation_type.upper() not in MUTATION_TYPES:
            raise ConfigurationError(f"Unsupported mutation type '{self.mutation_type}'")
        _require_non_negative("convergence_threshold", self.convergence_threshold)
        if self.stagnation_generations < 1:
            raise ConfigurationError("stagnation_generations must be at least 1")
        if self.n_workers < 1:
            raise ConfigurationError("n_workers must be at least 1")
        if self.max_wall_seconds is not None:
            _require_positive("max_wall_seconds", self.max_wall_seconds)
        if self.archive_max_size is not None and self.archive_max_size < 2:
            raise ConfigurationError("archive_max_size must be at least 2")
        _require_non_negative("sbx_eta", self.sbx_eta)
        _require_non_negative("mutation_eta", self.mutation_eta)
        if not isinstance(self.bounds, GeneBounds):
            raise ConfigurationError("bounds must be a GeneBounds instance")

    @classmethod
    def for_horizon(cls, horizon, **overrides):
        """Defaults with the horizon-scaled mutation probability."""
        bounds = overrides.get("bounds", GeneBounds())
        overrides.setdefault(
            "mutation_probability", default_mutation_probability(horizon, bounds.n_genes)
        )
        return cls(**overrides)

    @property
    def computational_effort(self):
        return self.population_size * self.max_generations

    def check(self):
        """Warn about settings that are legal but likely unproductive."""
        if self.computational_effort > COMPUTATIONAL_EFFORT_WARNING:
            warnings.warn(
                f"High computational effort ({self.computational_effort:,} evaluations)"
            )
        if self.mutation_probability > HIGH_MUTATION_WARNING:
            warnings.warn(
                f"High mutation probability ({self.mutation_probability:.3f}) "
                f"may cause excessive disruption"
            )
        if self.crossover_probability < LOW_CROSSOVER_WARNING:
            warnings.warn(
                f"Low crossover probability ({self.crossover_probability:.3f}) "
                f"may slow convergence"
            )
