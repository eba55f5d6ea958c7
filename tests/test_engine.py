"""Tests for StatisticalReportEngine."""

import pytest

from station_stats.config import ReportOptions
from station_stats.data_model import Dataset
from station_stats.engine import StatisticalReportEngine
from station_stats.example_data import rainfall_dataset, weather_dataset


def test_analyze_rainfall():
    result = StatisticalReportEngine().analyze(rainfall_dataset())
    assert list(result.groups) == ["Lagos", "Rivers", "Bayelsa", "Kano", "Enugu"]
    assert result.groups["Lagos"].mean == pytest.approx(12.5)
    assert result.groups["Rivers"].median == pytest.approx(19.5)
    assert result.groups["Lagos"].exceeds_threshold is True
    assert result.groups["Kano"].exceeds_threshold is False
    assert result.groups["Kano"].label == "Northern Region"
    assert result.aggregate.pooled_mean == pytest.approx(13.75)


def test_options_flow_into_group_statistics():
    engine = StatisticalReportEngine(ReportOptions(std_mode="population", threshold=None))
    stats = engine.group_statistics(weather_dataset())
    assert stats["Station 1"].std == pytest.approx((1.14 / 4) ** 0.5)
    assert stats["Station 1"].exceeds_threshold is None


def test_render_weather():
    text = StatisticalReportEngine(ReportOptions(units="°C")).render(weather_dataset())
    assert "Pooled mean (all readings): 23.5" in text
    assert "Highest reading:            27.00 °C (Station 3, reading 3)" in text
    assert "Oyo: average mean" in text


def test_engine_is_stateless():
    engine = StatisticalReportEngine()
    first = engine.render(Dataset.flat([1, 2, 3]))
    engine.render(rainfall_dataset())
    assert engine.render(Dataset.flat([1, 2, 3])) == first
