"""
tests/test_signal.py - Harmonic tidal signal, timing and strata.
"""

import numpy as np
import pandas as pd
import pytest

from tidal_lagoon.config import (
    ConfigurationError,
    HOURS_PER_YEAR,
    M2_PERIOD_HOURS,
    MAX_TIDAL_LEVEL_M,
    MIN_TIDAL_LEVEL_M,
    S2_PERIOD_HOURS,
    SimulationConfig,
)
from tidal_lagoon.tides import TidalCondition, TidalSignalModel, spring_neap_labels


class TestIteration:
    """Test the lazy reading sequence."""

    def test_length(self, day_config, day_signal):
        readings = list(day_signal)
        assert len(readings) == len(day_signal)
        assert len(readings) == day_config.total_half_tides * day_config.readings_per_half_tide

    def test_readings_are_conditions(self, day_signal):
        first = next(iter(day_signal))
        assert isinstance(first, TidalCondition)
        assert first.half_tide_index == 0
        assert first.timestamp == pd.Timestamp("2024-01-01")

    def test_restartable_and_deterministic(self, day_config, day_signal):
        assert list(day_signal) == list(day_signal)
        assert list(TidalSignalModel(day_config)) == list(day_signal)

    def test_reading_spacing(self, day_config, day_signal):
        readings = list(day_signal)
        step = pd.Timedelta(hours=day_config.time_step_hours)
        gaps = {readings[i + 1].timestamp - readings[i].timestamp for i in range(10)}
        assert all(abs(g - step) < pd.Timedelta(seconds=1) for g in gaps)

    def test_half_tide_indices_advance(self, day_config, day_signal):
        indices = [c.half_tide_index for c in day_signal]
        assert indices[0] == 0
        assert indices[-1] == day_config.total_half_tides - 1
        assert np.all(np.diff(indices) >= 0)


class TestElevation:
    """Test elevations stay physical."""

    def test_year_within_envelope(self, day_signal):
        hours = np.arange(0.0, HOURS_PER_YEAR, 0.25)
        levels = day_signal.elevation_at(hours)
        assert levels.min() >= MIN_TIDAL_LEVEL_M
        assert levels.max() <= MAX_TIDAL_LEVEL_M
        assert np.all(np.isfinite(levels))

    def test_envelope_inside_observed_range(self, day_signal):
        low, high = day_signal.envelope()
        assert MIN_TIDAL_LEVEL_M <= low < high <= MAX_TIDAL_LEVEL_M

    def test_large_constituent_rejected(self, day_config):
        constituents = (("M2", 6.0, M2_PERIOD_HOURS, 0.0),)
        with pytest.raises(ConfigurationError):
            TidalSignalModel(day_config, constituents=constituents)

    def test_empty_constituents_rejected(self, day_config):
        with pytest.raises(ConfigurationError):
            TidalSignalModel(day_config, constituents=())

    def test_half_tide_starts_at_turning_point(self, day_signal):
        """Half-tides run from high water to low water and back."""
        levels = day_signal.readings_for(np.array([0, 1]))
        assert levels[0, 0] > levels[0, -1]
        assert levels[1, 0] < levels[1, -1]

    def test_readings_for_shape(self, day_config, day_signal):
        levels = day_signal.readings_for(np.array([-1, 5, 9]), count=2)
        assert levels.shape == (3, 2 * day_config.readings_per_half_tide + 1)

    def test_readings_for_matches_iteration(self, day_config, day_signal):
        readings = day_config.readings_per_half_tide
        from_iter = np.array([c.elevation for c in day_signal])[:readings]
        from_block = day_signal.readings_for(np.array([0]))[0, :readings]
        np.testing.assert_allclose(from_iter, from_block)


class TestStrata:
    """Test seasonal × spring-neap strata."""

    @pytest.fixture(scope="class")
    def table(self, day_signal):
        return day_signal.half_tide_table()

    def test_table_covers_year(self, day_config, table):
        assert len(table) == day_config.half_tides_per_year
        assert list(table.index[:3]) == [0, 1, 2]

    def test_twelve_strata(self, table):
        assert table["stratum"].nunique() == 12
        assert set(table["season"]) == {"winter", "spring", "summer", "autumn"}
        assert set(table["spring_neap"]) == set(spring_neap_labels(3))

    def test_first_half_tide_is_winter_springs(self, day_signal):
        assert day_signal.stratum_of(0) == "winter/springs"

    def test_springs_larger_than_neaps(self, table):
        ranges = table.groupby("spring_neap")["range_m"].mean()
        assert ranges["springs"] > ranges["mid"] > ranges["neaps"]

    def test_equinoctial_springs_larger(self, day_config):
        """Spring tides near the equinox exceed those near the solstice."""
        constituents = (
            ("M2", 3.20, M2_PERIOD_HOURS, 0.0),
            ("S2", 1.10, S2_PERIOD_HOURS, 0.0),
        )
        table = TidalSignalModel(day_config, constituents=constituents).half_tide_table()
        springs = table[table["spring_neap"] == "springs"]
        march = springs[springs["start"].dt.month == 3]["range_m"].mean()
        june = springs[springs["start"].dt.month == 6]["range_m"].mean()
        assert march > june

    def test_spring_neap_labels(self):
        assert spring_neap_labels(1) == ("all",)
        assert spring_neap_labels(2) == ("springs", "neaps")
        assert len(spring_neap_labels(5)) == 5

    def test_bin_count_follows_config(self):
        config = SimulationConfig.for_horizon("day", spring_neap_bins=2)
        table = TidalSignalModel(config).half_tide_table()
        assert table["stratum"].nunique() == 8
