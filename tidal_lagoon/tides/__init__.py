"""
Tides Module
============

Tidal elevation signal and half-tide sampling.

Main functions:
    - TidalSignalModel: Harmonic tide with half-tide timing and strata
    - StratifiedSampler: Representative half-tides across the year
    - NaiveWindowSampler: Best-window × scale control strategy
    - sample_half_tides: Sample with the configured strategy

Example:
    from tidal_lagoon.config import SimulationConfig
    from tidal_lagoon.tides import TidalSignalModel, sample_half_tides

    config = SimulationConfig.for_horizon("week")
    signal = TidalSignalModel(config)
    sample = sample_half_tides(config, signal)
    print(sample.n_samples, sample.weights.sum())  # weights sum to a year
"""

from .signal import (
    TidalCondition,
    TidalSignalModel,
    spring_neap_labels,
)

from .sampling import (
    HalfTideSample,
    StratifiedSampler,
    NaiveWindowSampler,
    SAMPLERS,
    get_sampler,
    sample_half_tides,
    stratified_design_variance,
    stratum_sizes,
)

__all__ = [
    # Signal
    "TidalCondition",
    "TidalSignalModel",
    "spring_neap_labels",
    # Sampling
    "HalfTideSample",
    "StratifiedSampler",
    "NaiveWindowSampler",
    "SAMPLERS",
    "get_sampler",
    "sample_half_tides",
    "stratified_design_variance",
    "stratum_sizes",
]
