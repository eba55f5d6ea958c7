"""
Statistical aggregation engine for the Station Statistics Reporter.

Pure functions over in-memory readings: descriptive statistics per
group, aggregate statistics across groups, threshold and variability
classification, and deterministic ranking.  Nothing here keeps state
between calls, so every function can be recomputed on demand.

Failure semantics
-----------------
Empty or ``None`` input raises ``EmptyDatasetError``; a non-finite
reading raises ``StatisticsError``.  No function returns ``NaN``.

The one documented coercion is the sample standard deviation of a
single reading, which is defined as ``0.0`` (there is no spread to
estimate).  Pass ``strict=True`` to ``compute_std`` to get
``InsufficientDataError`` instead.
"""

import logging
import math
from collections import OrderedDict
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np
from scipy.stats import t as t_dist

from .constants import (
    DEFAULT_MODERATE_BELOW, DEFAULT_RANK_METRIC, DEFAULT_STABLE_BELOW,
    RANK_METRICS,
)
from .data_model import (
    AggregateStatistics, Comparison, Dataset, ExtremeReading,
    GroupStatistics, LabelSummary, RankOrder, Stability, StdMode,
)
from .errors import (
    EmptyDatasetError, InsufficientDataError, InvalidThresholdError,
    StatisticsError,
)

logger = logging.getLogger(__name__)

Readings = Iterable[float]

# Accepted spellings for each comparison, besides the enum values.
_COMPARISON_ALIASES = {
    'gt': Comparison.GREATER_THAN,
    '>': Comparison.GREATER_THAN,
    'greater-than': Comparison.GREATER_THAN,
    'greater_than': Comparison.GREATER_THAN,
    'ge': Comparison.GREATER_OR_EQUAL,
    '>=': Comparison.GREATER_OR_EQUAL,
    'greater-or-equal': Comparison.GREATER_OR_EQUAL,
    'greater_or_equal': Comparison.GREATER_OR_EQUAL,
}


# =============================================================================
# Input guards
# =============================================================================

def _as_array(readings: Optional[Readings]) -> np.ndarray:
    """Convert *readings* to a 1-D float array, rejecting empty input."""
    if readings is None:
        raise EmptyDatasetError("No readings supplied (got None).")
    arr = np.asarray(list(readings), dtype=float).ravel()
    if arr.size == 0:
        raise EmptyDatasetError("Cannot compute statistics of zero readings.")
    if not np.all(np.isfinite(arr)):
        raise StatisticsError("Readings must be finite numbers (found NaN or inf).")
    return arr


def coerce_comparison(comparison: Union[Comparison, str]) -> Comparison:
    """Map an enum member or an accepted spelling (gt, >, greater-than, ge, ...) to ``Comparison``."""
    if isinstance(comparison, Comparison):
        return comparison
    key = str(comparison).strip().lower()
    if key in _COMPARISON_ALIASES:
        return _COMPARISON_ALIASES[key]
    raise InvalidThresholdError(
        f"Unknown comparison {comparison!r}; expected 'gt' or 'ge'."
    )


def _coerce_std_mode(std_mode: Union[StdMode, str]) -> StdMode:
    try:
        return StdMode(std_mode)
    except ValueError:
        raise ValueError(
            f"Unknown std mode {std_mode!r}; expected 'sample' or 'population'."
        ) from None


# =============================================================================
# Single-series statistics
# =============================================================================

def compute_mean(readings: Readings) -> float:
    """Arithmetic mean (sum / count)."""
    arr = _as_array(readings)
    return float(np.sum(arr) / arr.size)


def compute_median(readings: Readings) -> float:
    """Median of a sorted copy; the two central values are averaged for even counts."""
    arr = _as_array(readings)
    return float(np.median(arr))


def compute_std(readings: Readings,
                std_mode: Union[StdMode, str] = StdMode.SAMPLE,
                *, strict: bool = False) -> float:
    """Standard deviation with the divisor chosen by *std_mode*.

    Sample mode divides by ``n - 1``.  With a single reading that is
    undefined: the result is ``0.0`` unless *strict* is set, in which
    case ``InsufficientDataError`` is raised.  Population mode divides
    by ``n`` and is always defined.
    """
    arr = _as_array(readings)
    mode = _coerce_std_mode(std_mode)
    if mode is StdMode.SAMPLE:
        if arr.size < 2:
            if strict:
                raise InsufficientDataError(
                    "Sample standard deviation needs at least 2 readings "
                    f"(got {arr.size})."
                )
            return 0.0
        return float(np.std(arr, ddof=1))
    return float(np.std(arr, ddof=0))


def find_extremes(readings: Readings) -> Tuple[Tuple[float, int], Tuple[float, int]]:
    """Return ``((min, index), (max, index))``, first occurrence on ties."""
    arr = _as_array(readings)
    i_min = int(np.argmin(arr))
    i_max = int(np.argmax(arr))
    return (float(arr[i_min]), i_min), (float(arr[i_max]), i_max)


def _confidence_interval(arr: np.ndarray, mean_val: float) -> Tuple[float, float]:
    """95 % Student-t interval for the mean (sample std, n - 1 dof)."""
    n = arr.size
    if n < 2:
        return mean_val, mean_val
    s = float(np.std(arr, ddof=1))
    if s == 0.0:
        return mean_val, mean_val
    half = float(t_dist.ppf(0.975, n - 1)) * s / math.sqrt(n)
    return mean_val - half, mean_val + half


# =============================================================================
# Classification
# =============================================================================

def classify(stat: float, threshold: float,
             comparison: Union[Comparison, str] = Comparison.GREATER_THAN) -> bool:
    """Return ``True`` when *stat* is beyond *threshold*.

    Used for flood / extreme-value warnings.  ``"gt"`` tests
    ``stat > threshold`` and ``"ge"`` tests ``stat >= threshold``.
    """
    cmp = coerce_comparison(comparison)
    if threshold is None or not math.isfinite(threshold):
        raise InvalidThresholdError(f"Threshold must be a finite number, got {threshold!r}.")
    if stat is None or not math.isfinite(stat):
        raise InvalidThresholdError(f"Cannot classify non-finite statistic {stat!r}.")
    if cmp is Comparison.GREATER_OR_EQUAL:
        return stat >= threshold
    return stat > threshold


def validate_bands(stable_below: float, moderate_below: float) -> None:
    """Check that the variability bands are finite, non-negative and ordered."""
    for name, value in (('stable_below', stable_below),
                        ('moderate_below', moderate_below)):
        if value is None or not math.isfinite(value) or value < 0:
            raise InvalidThresholdError(
                f"{name} must be a finite non-negative number, got {value!r}."
            )
    if stable_below >= moderate_below:
        raise InvalidThresholdError(
            f"stable_below ({stable_below}) must be lower than "
            f"moderate_below ({moderate_below})."
        )


def classify_variability(std: float,
                         stable_below: float = DEFAULT_STABLE_BELOW,
                         moderate_below: float = DEFAULT_MODERATE_BELOW) -> Stability:
    """Place a standard deviation in one of three stability bands."""
    validate_bands(stable_below, moderate_below)
    if std is None or not math.isfinite(std):
        raise InvalidThresholdError(f"Cannot classify non-finite std {std!r}.")
    if std < stable_below:
        return Stability.VERY_STABLE
    if std < moderate_below:
        return Stability.MODERATELY_STABLE
    return Stability.UNSTABLE


# =============================================================================
# Group and aggregate statistics
# =============================================================================

def compute_group_stats(
    readings: Readings,
    *,
    name: str = "",
    label: str = "",
    std_mode: Union[StdMode, str] = StdMode.SAMPLE,
    threshold: Optional[float] = None,
    comparison: Union[Comparison, str] = Comparison.GREATER_THAN,
) -> GroupStatistics:
    """Compute the full summary of one group of readings.

    Parameters
    ----------
    readings : iterable of float
        Non-empty ordered readings.
    name, label : str
        Group name and optional label (region / category).
    std_mode : StdMode or str
        ``"sample"`` (divisor ``n - 1``) or ``"population"`` (divisor ``n``).
    threshold : float or None
        When given, the group mean is classified against it and the
        result stored in ``exceeds_threshold``.
    comparison : Comparison or str
        ``"gt"`` or ``"ge"``.

    Raises
    ------
    EmptyDatasetError
        If *readings* is empty or ``None``.
    """
    arr = _as_array(readings)
    mode = _coerce_std_mode(std_mode)

    mean_val = float(np.sum(arr) / arr.size)
    (min_val, i_min), (max_val, i_max) = find_extremes(arr)
    ci_low, ci_high = _confidence_interval(arr, mean_val)

    exceeds = None
    if threshold is not None:
        exceeds = classify(mean_val, threshold, comparison)

    return GroupStatistics(
        name=name,
        label=label,
        count=int(arr.size),
        total=float(np.sum(arr)),
        mean=mean_val,
        median=float(np.median(arr)),
        std=compute_std(arr, mode),
        std_mode=mode,
        minimum=min_val,
        maximum=max_val,
        minimum_index=i_min,
        maximum_index=i_max,
        ci95_low=ci_low,
        ci95_high=ci_high,
        exceeds_threshold=exceeds,
    )


def compute_dataset_stats(
    dataset: Dataset,
    *,
    std_mode: Union[StdMode, str] = StdMode.SAMPLE,
    threshold: Optional[float] = None,
    comparison: Union[Comparison, str] = Comparison.GREATER_THAN,
) -> Dict[str, GroupStatistics]:
    """Compute ``GroupStatistics`` for every group, keeping dataset order."""
    result: Dict[str, GroupStatistics] = OrderedDict()
    for name, readings in dataset.groups.items():
        result[name] = compute_group_stats(
            readings, name=name, label=dataset.label_of(name),
            std_mode=std_mode, threshold=threshold, comparison=comparison,
        )
    logger.debug("Computed statistics for %d group(s)", len(result))
    return result


def compute_aggregate(groups: Mapping[str, GroupStatistics]) -> AggregateStatistics:
    """Statistics over the union of all groups.

    ``pooled_mean`` is the grand total divided by the number of
    readings; ``mean_of_means`` is the unweighted average of the group
    means.  Both are returned: with unequal group sizes the larger
    groups pull the pooled mean toward their own mean, so the values
    differ.  Extremes keep the first group (in mapping order) that holds
    them.
    """
    if not groups:
        raise EmptyDatasetError("Cannot aggregate zero groups.")

    stats = list(groups.values())
    names = list(groups.keys())

    total = float(math.fsum(s.total for s in stats))
    reading_count = sum(s.count for s in stats)
    pooled_mean = total / reading_count
    mean_of_means = float(math.fsum(s.mean for s in stats)) / len(stats)

    hi_idx = lo_idx = 0
    hi_mean_idx = lo_mean_idx = 0
    for i, s in enumerate(stats):
        if s.maximum > stats[hi_idx].maximum:
            hi_idx = i
        if s.minimum < stats[lo_idx].minimum:
            lo_idx = i
        if s.mean > stats[hi_mean_idx].mean:
            hi_mean_idx = i
        if s.mean < stats[lo_mean_idx].mean:
            lo_mean_idx = i

    aggregate = AggregateStatistics(
        group_count=len(stats),
        reading_count=reading_count,
        total=total,
        pooled_mean=pooled_mean,
        mean_of_means=mean_of_means,
        equal_group_sizes=len({s.count for s in stats}) == 1,
        highest_reading=ExtremeReading(
            value=stats[hi_idx].maximum, group=names[hi_idx],
            index=stats[hi_idx].maximum_index,
        ),
        lowest_reading=ExtremeReading(
            value=stats[lo_idx].minimum, group=names[lo_idx],
            index=stats[lo_idx].minimum_index,
        ),
        highest_mean_group=names[hi_mean_idx],
        lowest_mean_group=names[lo_mean_idx],
        means_spread=stats[hi_mean_idx].mean - stats[lo_mean_idx].mean,
    )
    logger.debug(
        "Aggregate over %d readings: pooled mean %.6g, mean of means %.6g",
        reading_count, pooled_mean, mean_of_means,
    )
    return aggregate


# =============================================================================
# Ranking and grouping
# =============================================================================

def metric_value(stat: GroupStatistics, metric: str) -> float:
    if metric not in RANK_METRICS:
        raise ValueError(
            f"Unknown ranking metric {metric!r}; choose from {', '.join(RANK_METRICS)}."
        )
    return float(getattr(stat, metric))


def rank_groups(
    groups: Mapping[str, GroupStatistics],
    by: str = DEFAULT_RANK_METRIC,
    order: Union[RankOrder, str] = RankOrder.DESCENDING,
    limit: Optional[int] = None,
) -> List[str]:
    """Order group names by *by*, breaking ties by name ascending.

    The result is a permutation of the group names (or its first
    *limit* entries), identical for identical input.
    """
    try:
        order = RankOrder(order)
    except ValueError:
        raise ValueError(
            f"Unknown rank order {order!r}; expected 'ascending' or 'descending'."
        ) from None
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}.")

    values = {name: metric_value(stat, by) for name, stat in groups.items()}
    by_name = sorted(values)
    if order is RankOrder.ASCENDING:
        ranked = sorted(by_name, key=lambda n: values[n])
    else:
        # reverse=True keeps equal keys in their name-ascending order
        ranked = sorted(by_name, key=lambda n: values[n], reverse=True)

    if limit is not None:
        ranked = ranked[:limit]
    return ranked


def summarize_by_label(
    groups: Mapping[str, GroupStatistics],
    threshold: Optional[float] = None,
    comparison: Union[Comparison, str] = Comparison.GREATER_THAN,
) -> List[LabelSummary]:
    """Partition groups by label and average their means, labels sorted A-Z.

    Groups without a label are left out.  Warnings are counted against
    *threshold* when given, otherwise from each group's stored
    ``exceeds_threshold`` flag.
    """
    # keyed by mapping name, which need not match GroupStatistics.name
    members: Dict[str, List[Tuple[str, GroupStatistics]]] = {}
    for name, stat in groups.items():
        if stat.label:
            members.setdefault(stat.label, []).append((name, stat))

    summaries = []
    for label in sorted(members):
        entries = sorted(members[label], key=lambda item: item[0])
        stats = [s for _, s in entries]
        if threshold is None:
            warned = sum(1 for s in stats if s.exceeds_threshold)
        else:
            warned = sum(1 for s in stats if classify(s.mean, threshold, comparison))
        summaries.append(LabelSummary(
            label=label,
            groups=tuple(name for name, _ in entries),
            average_mean=float(math.fsum(s.mean for s in stats)) / len(stats),
            warning_count=warned,
        ))
    return summaries
