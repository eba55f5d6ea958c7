"""
Data model for the Station Statistics Reporter.

Immutable dataclasses representing a grouped numeric dataset and the
statistics derived from it.  A ``Dataset`` is built once by the CSV
loader (or from an in-memory mapping) and never mutated; statistics are
pure functions of it, and a ``Report`` is a read-only view rendered from
those statistics.

Missing readings are dropped before a ``Dataset`` is built, never
stored as ``NaN``.  Every group holds at least one reading.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .constants import DEFAULT_FLAT_GROUP, SEPARATOR
from .errors import EmptyDatasetError


class Comparison(str, Enum):
    """How a statistic is compared with a warning threshold."""
    GREATER_THAN = "gt"
    GREATER_OR_EQUAL = "ge"


class StdMode(str, Enum):
    """Divisor used for the standard deviation."""
    SAMPLE = "sample"          # n - 1
    POPULATION = "population"  # n


class RankOrder(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class Stability(str, Enum):
    """Variability band of a group, judged on its standard deviation."""
    VERY_STABLE = "very_stable"
    MODERATELY_STABLE = "moderately_stable"
    UNSTABLE = "unstable"


@dataclass(frozen=True)
class Dataset:
    """Ordered numeric readings partitioned into named groups.

    Parameters
    ----------
    groups : dict
        ``{group_name: (reading, ...)}`` in input order.  A flat series
        is a dataset with a single group.
    labels : dict
        Optional ``{group_name: label}`` (region, category).  Groups
        without a label are simply absent from the mapping.
    source : str or None
        Path of the file the dataset was loaded from, if any.
    """
    groups: Dict[str, Tuple[float, ...]]
    labels: Dict[str, str] = field(default_factory=dict)
    source: Optional[str] = None

    def __post_init__(self):
        if not self.groups:
            raise EmptyDatasetError("Dataset has no groups.")
        for name, readings in self.groups.items():
            if len(readings) == 0:
                raise EmptyDatasetError(f"Group '{name}' has no readings.")

    @classmethod
    def from_mapping(
        cls,
        data: Optional[Mapping[str, Iterable[float]]],
        labels: Optional[Mapping[str, str]] = None,
        source: Optional[str] = None,
    ) -> "Dataset":
        """Build a dataset from ``{name: readings}``, coercing readings to float."""
        if data is None:
            raise EmptyDatasetError("Dataset input is None.")
        groups = {
            str(name): tuple(float(v) for v in readings)
            for name, readings in data.items()
        }
        return cls(
            groups=groups,
            labels={str(k): str(v) for k, v in (labels or {}).items()},
            source=source,
        )

    @classmethod
    def flat(cls, readings: Optional[Iterable[float]],
             name: str = DEFAULT_FLAT_GROUP) -> "Dataset":
        """Wrap a single ungrouped series."""
        if readings is None:
            raise EmptyDatasetError("Dataset input is None.")
        return cls.from_mapping({name: readings})

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self.groups)

    @property
    def reading_count(self) -> int:
        return sum(len(r) for r in self.groups.values())

    def label_of(self, name: str) -> str:
        return self.labels.get(name, "")


@dataclass(frozen=True)
class GroupStatistics:
    """Read-only summary of one group.

    ``minimum_index`` / ``maximum_index`` are 0-based positions of the
    first reading holding the extreme value.  ``ci95_low`` and
    ``ci95_high`` bound the 95 % Student-t confidence interval of the
    mean; they collapse to the mean for a single reading.
    ``exceeds_threshold`` is ``None`` when no threshold was applied.
    """
    name: str
    label: str
    count: int
    total: float
    mean: float
    median: float
    std: float
    std_mode: StdMode
    minimum: float
    maximum: float
    minimum_index: int
    maximum_index: int
    ci95_low: float
    ci95_high: float
    exceeds_threshold: Optional[bool] = None

    @property
    def range(self) -> float:
        return self.maximum - self.minimum


@dataclass(frozen=True)
class ExtremeReading:
    """A single reading located by group and 0-based position."""
    value: float
    group: str
    index: int


@dataclass(frozen=True)
class AggregateStatistics:
    """Statistics over the union of all groups.

    ``pooled_mean`` weights every reading equally; ``mean_of_means``
    weights every group equally.  The two coincide exactly when all
    groups hold the same number of readings (``equal_group_sizes``) and
    generally differ otherwise.  Both are reported on purpose.
    """
    group_count: int
    reading_count: int
    total: float
    pooled_mean: float
    mean_of_means: float
    equal_group_sizes: bool
    highest_reading: ExtremeReading
    lowest_reading: ExtremeReading
    highest_mean_group: str
    lowest_mean_group: str
    means_spread: float

    @property
    def range(self) -> float:
        return self.highest_reading.value - self.lowest_reading.value

    @property
    def means_differ(self) -> bool:
        return not math.isclose(self.pooled_mean, self.mean_of_means,
                                rel_tol=1e-12, abs_tol=1e-12)


@dataclass(frozen=True)
class LabelSummary:
    """Groups sharing one label (e.g. every state in a region)."""
    label: str
    groups: Tuple[str, ...]
    average_mean: float
    warning_count: int


@dataclass(frozen=True)
class ReportSection:
    title: str
    lines: Tuple[str, ...]


@dataclass(frozen=True)
class Report:
    """Ordered, immutable sequence of rendered report sections."""
    title: str
    sections: Tuple[ReportSection, ...]
    header_lines: Tuple[str, ...] = ()

    def section(self, title: str) -> Optional[ReportSection]:
        for sec in self.sections:
            if sec.title == title:
                return sec
        return None

    def render(self) -> str:
        out = [SEPARATOR, self.title, *self.header_lines, SEPARATOR]
        for sec in self.sections:
            out.append("")
            out.append(sec.title)
            out.append(SEPARATOR)
            out.extend(sec.lines)
        out.append("")
        out.append(SEPARATOR)
        return "\n".join(out) + "\n"
