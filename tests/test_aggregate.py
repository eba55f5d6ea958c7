"""Tests for compute_aggregate: pooled mean vs mean of group means."""

import random

import pytest

from station_stats.errors import EmptyDatasetError
from station_stats.example_data import rainfall_dataset, weather_dataset
from station_stats.stats_engine import (
    compute_aggregate, compute_dataset_stats, compute_group_stats,
)


def _stats(mapping):
    return {name: compute_group_stats(vals, name=name) for name, vals in mapping.items()}


def test_weather_aggregate():
    agg = compute_aggregate(compute_dataset_stats(weather_dataset()))
    assert agg.group_count == 3
    assert agg.reading_count == 12
    assert agg.pooled_mean == pytest.approx(23.525)
    assert agg.mean_of_means == pytest.approx(23.525)
    assert agg.equal_group_sizes is True
    assert agg.highest_reading.value == 27.0
    assert agg.highest_reading.group == "Station 3"
    assert agg.highest_reading.index == 2
    assert agg.lowest_reading.value == 20.5
    assert agg.lowest_reading.group == "Station 2"
    assert agg.lowest_reading.index == 0
    assert agg.range == pytest.approx(6.5)
    assert agg.highest_mean_group == "Station 3"
    assert agg.lowest_mean_group == "Station 2"


def test_rainfall_aggregate():
    agg = compute_aggregate(compute_dataset_stats(rainfall_dataset()))
    assert agg.total == 275.0
    assert agg.reading_count == 20
    assert agg.pooled_mean == pytest.approx(13.75)
    assert agg.highest_reading.group == "Bayelsa"
    assert agg.lowest_reading.group == "Kano"
    assert agg.means_spread == pytest.approx(18.0)


def test_unequal_sizes_give_different_means():
    agg = compute_aggregate(_stats({"a": [1, 2, 3], "b": [10]}))
    assert agg.pooled_mean == pytest.approx(4.0)
    assert agg.mean_of_means == pytest.approx(6.0)
    assert agg.equal_group_sizes is False
    assert agg.means_differ is True


def test_equal_sizes_means_coincide():
    rng = random.Random(3)
    for _ in range(100):
        size = rng.randint(1, 12)
        groups = {
            f"g{i}": [rng.uniform(-50, 50) for _ in range(size)]
            for i in range(rng.randint(1, 8))
        }
        agg = compute_aggregate(_stats(groups))
        assert agg.equal_group_sizes
        assert agg.pooled_mean == pytest.approx(agg.mean_of_means, rel=1e-9, abs=1e-9)


def test_unequal_sizes_means_differ():
    rng = random.Random(5)
    for _ in range(100):
        # a zero-valued singleton beside a larger positive group:
        # pooled = k*m/(k+1) while mean of means = m/2, unequal for k >= 2
        k = rng.randint(2, 15)
        big = [rng.uniform(10, 20) for _ in range(k)]
        agg = compute_aggregate(_stats({"small": [0.0], "big": big}))
        assert not agg.equal_group_sizes
        assert agg.pooled_mean != pytest.approx(agg.mean_of_means, rel=1e-6)


def test_extremes_keep_first_group_on_ties():
    agg = compute_aggregate(_stats({"b": [1, 9], "a": [1, 9]}))
    assert agg.highest_reading.group == "b"
    assert agg.lowest_reading.group == "b"


def test_empty_mapping_raises():
    with pytest.raises(EmptyDatasetError):
        compute_aggregate({})
