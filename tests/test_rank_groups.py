"""Tests for rank_groups ordering, ties and limits."""

import random

import pytest

from station_stats.data_model import RankOrder
from station_stats.example_data import rainfall_dataset
from station_stats.stats_engine import compute_dataset_stats, compute_group_stats, rank_groups


@pytest.fixture
def rainfall_stats():
    return compute_dataset_stats(rainfall_dataset())


def test_rank_by_mean_descending(rainfall_stats):
    assert rank_groups(rainfall_stats, by="mean", order=RankOrder.DESCENDING) == [
        "Bayelsa", "Rivers", "Lagos", "Enugu", "Kano",
    ]


def test_rank_by_mean_ascending(rainfall_stats):
    assert rank_groups(rainfall_stats, by="mean", order="ascending") == [
        "Kano", "Enugu", "Lagos", "Rivers", "Bayelsa",
    ]


def test_limit_truncates(rainfall_stats):
    assert rank_groups(rainfall_stats, limit=2) == ["Bayelsa", "Rivers"]


def test_limit_zero_and_oversized(rainfall_stats):
    assert rank_groups(rainfall_stats, limit=0) == []
    assert len(rank_groups(rainfall_stats, limit=50)) == 5


def test_ties_break_by_name_in_both_orders(rainfall_stats):
    # Bayelsa, Enugu and Kano share the same sample std
    ascending = rank_groups(rainfall_stats, by="std", order="ascending")
    descending = rank_groups(rainfall_stats, by="std", order="descending")
    assert ascending[:3] == ["Bayelsa", "Enugu", "Kano"]
    assert descending[-3:] == ["Bayelsa", "Enugu", "Kano"]


def test_rank_by_range_and_count():
    stats = {
        "wide": compute_group_stats([0, 10], name="wide"),
        "narrow": compute_group_stats([5, 6, 7], name="narrow"),
    }
    assert rank_groups(stats, by="range") == ["wide", "narrow"]
    assert rank_groups(stats, by="count") == ["narrow", "wide"]


def test_result_is_deterministic_permutation():
    rng = random.Random(21)
    for _ in range(50):
        names = [f"s{i:02d}" for i in range(rng.randint(1, 15))]
        rng.shuffle(names)
        stats = {
            n: compute_group_stats([float(rng.randint(0, 3))], name=n) for n in names
        }
        first = rank_groups(stats, by="mean")
        assert sorted(first) == sorted(names)
        assert rank_groups(dict(reversed(list(stats.items()))), by="mean") == first


def test_unknown_metric_raises(rainfall_stats):
    with pytest.raises(ValueError):
        rank_groups(rainfall_stats, by="mode")


def test_unknown_order_raises(rainfall_stats):
    with pytest.raises(ValueError):
        rank_groups(rainfall_stats, order="sideways")


def test_negative_limit_raises(rainfall_stats):
    with pytest.raises(ValueError):
        rank_groups(rainfall_stats, limit=-1)
