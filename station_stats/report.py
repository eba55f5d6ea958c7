"""
Text report builder for the Station Statistics Reporter.

Turns per-group and aggregate statistics into an immutable ``Report``
whose sections always appear in the same order:

1. Group statistics table
2. Threshold warnings
3. Aggregate summary
4. Rankings (top / bottom N)
5. Variability classification
6. Regional summary (only when groups carry labels and it is enabled)

Rendering is deterministic: groups are listed in a defined order,
numbers use a fixed width and the configured decimals, and nothing
time-dependent is printed.  The caller decides whether to print or
save the text.
"""

from typing import List, Mapping, Optional

from .config import ReportOptions
from .constants import OK_FLAG, RULE, STABILITY_LABELS, WARNING_FLAG
from .data_model import (
    AggregateStatistics, Comparison, GroupStatistics, RankOrder, Report,
    ReportSection,
)
from .errors import EmptyDatasetError
from .stats_engine import (
    classify, classify_variability, metric_value, rank_groups, summarize_by_label,
)

SECTION_GROUPS = "GROUP STATISTICS"
SECTION_WARNINGS = "THRESHOLD WARNINGS"
SECTION_AGGREGATE = "AGGREGATE SUMMARY"
SECTION_RANKINGS = "RANKINGS"
SECTION_VARIABILITY = "VARIABILITY CLASSIFICATION"
SECTION_REGIONS = "REGIONAL SUMMARY"

SECTION_ORDER = (
    SECTION_GROUPS, SECTION_WARNINGS, SECTION_AGGREGATE,
    SECTION_RANKINGS, SECTION_VARIABILITY, SECTION_REGIONS,
)

_COMPARISON_SYMBOL = {
    Comparison.GREATER_THAN: ">",
    Comparison.GREATER_OR_EQUAL: ">=",
}


class _Formatter:
    """Fixed-width number and name formatting bound to one set of options."""

    def __init__(self, options: ReportOptions):
        self.d = options.decimals
        self.w = options.number_width
        self.nw = options.name_width
        self.unit = f" {options.units}" if options.units else ""

    def num(self, value: float) -> str:
        return f"{value:>{self.w}.{self.d}f}"

    def val(self, value: float) -> str:
        """Unpadded number with units, for prose lines."""
        return f"{value:.{self.d}f}{self.unit}"

    def name(self, text: str) -> str:
        return f"{text:<{self.nw}.{self.nw}}"

    def head(self, text: str) -> str:
        return f"{text:>{self.w}}"


def _threshold_text(options: ReportOptions, fmt: _Formatter) -> str:
    symbol = _COMPARISON_SYMBOL[options.comparison]
    return f"mean {symbol} {fmt.val(options.threshold)}"


# ── Sections ─────────────────────────────────────────────────────────────

def _std_label(groups: Mapping[str, GroupStatistics]) -> str:
    modes = {s.std_mode for s in groups.values()}
    if len(modes) > 1:
        return "mixed"
    return modes.pop().value


def _is_flagged(stat: GroupStatistics, options: ReportOptions) -> Optional[bool]:
    if options.threshold is None:
        return None
    return classify(stat.mean, options.threshold, options.comparison)


def _group_table(groups: Mapping[str, GroupStatistics], options: ReportOptions,
                 fmt: _Formatter) -> List[str]:
    lines = [
        fmt.name("GROUP") + " " + " ".join(
            fmt.head(h) for h in ("COUNT", "MEAN", "MEDIAN", "STD", "MIN", "MAX")
        ) + "  STATUS",
        RULE,
    ]
    for name in sorted(groups):
        s = groups[name]
        flagged = _is_flagged(s, options)
        if flagged is None:
            status = "-"
        else:
            status = WARNING_FLAG if flagged else OK_FLAG
        lines.append(
            fmt.name(name) + " "
            + f"{s.count:>{fmt.w}d} "
            + " ".join(fmt.num(v) for v in (s.mean, s.median, s.std, s.minimum, s.maximum))
            + f"  {status}"
        )
    return lines


def _warnings(groups: Mapping[str, GroupStatistics], options: ReportOptions,
              fmt: _Formatter) -> List[str]:
    if options.threshold is None:
        return ["Threshold classification disabled."]
    flagged = {n: s for n, s in groups.items() if _is_flagged(s, options)}
    criterion = _threshold_text(options, fmt)
    if not flagged:
        return [f"No groups exceed the threshold ({criterion})."]
    lines = [f"{len(flagged)} of {len(groups)} group(s) exceed the threshold ({criterion}):"]
    for name in rank_groups(flagged, by="mean", order=RankOrder.DESCENDING):
        lines.append(f"  {fmt.name(name)} {fmt.num(flagged[name].mean)}{fmt.unit}")
    return lines


def _aggregate(groups: Mapping[str, GroupStatistics], aggregate: AggregateStatistics,
               fmt: _Formatter) -> List[str]:
    hi, lo = aggregate.highest_reading, aggregate.lowest_reading
    hi_mean = groups[aggregate.highest_mean_group].mean
    lo_mean = groups[aggregate.lowest_mean_group].mean
    lines = [
        f"Groups:                     {aggregate.group_count}",
        f"Readings:                   {aggregate.reading_count}",
        f"Total:                      {fmt.val(aggregate.total)}",
        f"Pooled mean (all readings): {fmt.val(aggregate.pooled_mean)}",
        f"Mean of group means:        {fmt.val(aggregate.mean_of_means)}",
    ]
    if aggregate.equal_group_sizes:
        lines.append("Group sizes are equal, so both means coincide.")
    elif aggregate.means_differ:
        lines.append(
            "Group sizes differ: the pooled mean weights each reading, "
            "the mean of means weights each group."
        )
    lines.extend([
        f"Highest reading:            {fmt.val(hi.value)} ({hi.group}, reading {hi.index + 1})",
        f"Lowest reading:             {fmt.val(lo.value)} ({lo.group}, reading {lo.index + 1})",
        f"Overall range:              {fmt.val(aggregate.range)}",
        f"Highest mean:               {aggregate.highest_mean_group} ({fmt.val(hi_mean)})",
        f"Lowest mean:                {aggregate.lowest_mean_group} ({fmt.val(lo_mean)})",
        f"Spread of group means:      {fmt.val(aggregate.means_spread)}",
    ])
    return lines


def _rankings(groups: Mapping[str, GroupStatistics], options: ReportOptions,
              fmt: _Formatter) -> List[str]:
    if options.top_n == 0:
        return ["Rankings disabled."]
    n = min(options.top_n, len(groups))
    metric = options.rank_by
    lines = []
    for heading, order in (
        (f"Top {n} by {metric} (highest first):", RankOrder.DESCENDING),
        (f"Bottom {n} by {metric} (lowest first):", RankOrder.ASCENDING),
    ):
        if lines:
            lines.append("")
        lines.append(heading)
        ranked = rank_groups(groups, by=metric, order=order, limit=n)
        for pos, name in enumerate(ranked, start=1):
            s = groups[name]
            lines.append(
                f"  {pos:>2}. {fmt.name(name)} {fmt.num(metric_value(s, metric))}"
                f"  (range {s.minimum:.{fmt.d}f} to {s.maximum:.{fmt.d}f})"
            )
    return lines


def _variability(groups: Mapping[str, GroupStatistics], options: ReportOptions,
                 fmt: _Formatter) -> List[str]:
    lines = [
        f"Bands on {_std_label(groups)} std: "
        f"< {options.stable_below:.{fmt.d}f} very stable, "
        f"< {options.moderate_below:.{fmt.d}f} moderately stable, otherwise unstable.",
        fmt.name("GROUP") + " " + fmt.head("MEAN") + " " + fmt.head("STD") + "  STABILITY",
        RULE,
    ]
    for name in rank_groups(groups, by="std", order=RankOrder.ASCENDING):
        s = groups[name]
        band = classify_variability(s.std, options.stable_below, options.moderate_below)
        lines.append(
            f"{fmt.name(name)} {fmt.num(s.mean)} {fmt.num(s.std)}  "
            f"{STABILITY_LABELS[band.value]}"
        )
    return lines


def _regions(groups: Mapping[str, GroupStatistics], options: ReportOptions,
             fmt: _Formatter) -> Optional[List[str]]:
    summaries = summarize_by_label(groups, options.threshold, options.comparison)
    if not summaries:
        return None
    lines = []
    for summary in summaries:
        if lines:
            lines.append("")
        lines.append(
            f"{summary.label}: average mean {fmt.val(summary.average_mean)} | "
            f"groups: {len(summary.groups)} | warnings: {summary.warning_count}"
        )
        for name in summary.groups:
            lines.append(f"  {fmt.name(name)} {fmt.num(groups[name].mean)}{fmt.unit}")
    return lines


# ── Public API ───────────────────────────────────────────────────────────

def build_report(
    groups: Mapping[str, GroupStatistics],
    aggregate: AggregateStatistics,
    options: Optional[ReportOptions] = None,
) -> Report:
    """Assemble the ordered report sections.

    Parameters
    ----------
    groups : mapping
        ``{group_name: GroupStatistics}``.
    aggregate : AggregateStatistics
        Result of ``compute_aggregate(groups)``.
    options : ReportOptions, optional
        Layout and classification settings; defaults apply when omitted.

    Raises
    ------
    EmptyDatasetError
        If *groups* is empty.
    """
    if not groups:
        raise EmptyDatasetError("Cannot build a report from zero groups.")
    options = options or ReportOptions()
    fmt = _Formatter(options)

    header = [f"Standard deviation: {_std_label(groups)}"]
    if options.threshold is not None:
        header.append(f"Warning threshold: {_threshold_text(options, fmt)}")

    sections = [
        ReportSection(SECTION_GROUPS, tuple(_group_table(groups, options, fmt))),
        ReportSection(SECTION_WARNINGS, tuple(_warnings(groups, options, fmt))),
        ReportSection(SECTION_AGGREGATE, tuple(_aggregate(groups, aggregate, fmt))),
        ReportSection(SECTION_RANKINGS, tuple(_rankings(groups, options, fmt))),
        ReportSection(SECTION_VARIABILITY, tuple(_variability(groups, options, fmt))),
    ]
    if options.include_regions:
        region_lines = _regions(groups, options, fmt)
        if region_lines:
            sections.append(ReportSection(SECTION_REGIONS, tuple(region_lines)))

    return Report(title=options.title, sections=tuple(sections),
                  header_lines=tuple(header))


def render_report(
    groups: Mapping[str, GroupStatistics],
    aggregate: AggregateStatistics,
    options: Optional[ReportOptions] = None,
) -> str:
    """Render the report as text; see ``build_report``."""
    return build_report(groups, aggregate, options).render()
