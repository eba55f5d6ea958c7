"""
Station Statistics Reporter v1.0.0

Descriptive-statistics and tabular-reporting engine for grouped
numeric readings (weather-station temperatures, state rainfall, any
flat or per-group series).  Computes per-group and aggregate
statistics, threshold warnings, rankings and variability bands, and
renders them as a fixed-width text report or a group-means chart.

Usage:
    python -m station_stats data.csv --threshold 10
"""

APP_NAME = "Station Statistics Reporter"
APP_VERSION = "1.0.0"
APP_DATE = "2026-10-19"
__version__ = APP_VERSION
