"""
Tidal Lagoon Test Configuration and Fixtures

Shared configs, signals and simulators. Simulators are session-scoped
because building their half-tide samples touches the whole tidal year.
"""

import numpy as np
import pytest

from tidal_lagoon.config import SimulationConfig, OptimizerConfig
from tidal_lagoon.energy import LagoonSimulator
from tidal_lagoon.tides import TidalSignalModel, sample_half_tides


# Reference operating design: CoBaseTRS discharge coefficient, no turning,
# start at 2.5 m head, stop at 1.0 m.
REFERENCE_GENOME = np.array([1.36, 0.0, 2.5, 1.0])


@pytest.fixture(scope="session")
def day_config():
    return SimulationConfig.for_horizon("day")


@pytest.fixture(scope="session")
def week_config():
    return SimulationConfig.for_horizon("week")


@pytest.fixture(scope="session")
def year_config():
    return SimulationConfig.for_horizon("year")


@pytest.fixture(scope="session")
def day_signal(day_config):
    return TidalSignalModel(day_config)


@pytest.fixture(scope="session")
def day_sample(day_config, day_signal):
    return sample_half_tides(day_config, day_signal)


@pytest.fixture(scope="session")
def day_simulator(day_config, day_signal, day_sample):
    return LagoonSimulator.from_signal(day_config, day_signal, day_sample)


@pytest.fixture(scope="session")
def year_simulator(year_config):
    return LagoonSimulator.from_signal(year_config)


@pytest.fixture
def reference_genome():
    return REFERENCE_GENOME.copy()


@pytest.fixture
def small_optimizer_config():
    """Quick NSGA-II settings for behavioural tests."""
    return OptimizerConfig(
        population_size=20,
        max_generations=4,
        stagnation_generations=10,
        seed=7,
    )
