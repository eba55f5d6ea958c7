"""
StatisticalReportEngine: one object tying the statistics functions to a
set of ``ReportOptions``.

The engine keeps no state beyond its options; every call recomputes
from the dataset it is given.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .config import ReportOptions
from .data_model import AggregateStatistics, Dataset, GroupStatistics, Report
from .report import build_report
from .stats_engine import compute_aggregate, compute_dataset_stats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    dataset: Dataset
    groups: Dict[str, GroupStatistics]
    aggregate: AggregateStatistics


class StatisticalReportEngine:
    """Compute grouped statistics and build reports with fixed options."""

    def __init__(self, options: Optional[ReportOptions] = None):
        self.options = options or ReportOptions()

    def group_statistics(self, dataset: Dataset) -> Dict[str, GroupStatistics]:
        return compute_dataset_stats(
            dataset,
            std_mode=self.options.std_mode,
            threshold=self.options.threshold,
            comparison=self.options.comparison,
        )

    def analyze(self, dataset: Dataset) -> AnalysisResult:
        groups = self.group_statistics(dataset)
        aggregate = compute_aggregate(groups)
        logger.debug(
            "Analysed %d group(s) from %s", len(groups), dataset.source or "memory",
        )
        return AnalysisResult(dataset=dataset, groups=groups, aggregate=aggregate)

    def report(self, dataset: Dataset) -> Report:
        result = self.analyze(dataset)
        return build_report(result.groups, result.aggregate, self.options)

    def render(self, dataset: Dataset) -> str:
        return self.report(dataset).render()
