"""
Group means bar chart for the Station Statistics Reporter.

One bar per group (alphabetical), height = group mean, error bar = group
standard deviation.  Bars whose mean breaches the warning threshold are
drawn in the warning colour; the threshold and the pooled mean are
drawn as horizontal reference lines.
"""

from typing import Mapping, Optional, Union

import numpy as np
from matplotlib.figure import Figure

from .constants import CHART_PALETTE, PLOT_STYLE_LIGHT
from .data_model import AggregateStatistics, Comparison, GroupStatistics
from .stats_engine import classify


def render_group_means(
    fig: Figure,
    groups: Mapping[str, GroupStatistics],
    *,
    aggregate: Optional[AggregateStatistics] = None,
    threshold: Optional[float] = None,
    comparison: Union[Comparison, str] = Comparison.GREATER_THAN,
    units: str = "",
    title: str = "Group Means",
) -> None:
    """Render the group means chart on *fig*.

    Parameters
    ----------
    fig : matplotlib.figure.Figure
        Figure to draw on (will be cleared).
    groups : mapping
        ``{group_name: GroupStatistics}``.
    aggregate : AggregateStatistics, optional
        When given, the pooled mean is drawn and summarised.
    threshold : float or None
        Warning threshold on the mean; ``None`` draws no line.
    comparison : Comparison or str
        ``"gt"`` or ``"ge"``, as in ``classify``.
    units : str
        Unit label for the y-axis.
    title : str
        Axes title.
    """
    fig.clf()
    pal = CHART_PALETTE
    fig.set_facecolor(PLOT_STYLE_LIGHT['figure.facecolor'])
    ax = fig.add_subplot(111)
    ax.set_facecolor(PLOT_STYLE_LIGHT['axes.facecolor'])
    for spine in ax.spines.values():
        spine.set_color(PLOT_STYLE_LIGHT['axes.edgecolor'])

    if not groups:
        ax.text(0.5, 0.5, 'No groups to plot',
                transform=ax.transAxes, ha='center', va='center')
        return

    names = sorted(groups)
    means = np.array([groups[n].mean for n in names])
    stds = np.array([groups[n].std for n in names])
    x = np.arange(len(names))

    if threshold is None:
        flagged = [False] * len(names)
    else:
        flagged = [classify(m, threshold, comparison) for m in means]
    colors = [pal['warn_bar'] if f else pal['ok_bar'] for f in flagged]

    ax.bar(
        x, means, yerr=stds, color=colors, edgecolor=pal['bar_edge'],
        linewidth=0.6, capsize=3, zorder=3,
        error_kw={'ecolor': pal['error_bar'], 'elinewidth': 0.8},
    )

    # ── Reference lines ──────────────────────────────────────────────
    if threshold is not None:
        ax.axhline(
            threshold, color=pal['threshold'], linewidth=1.2, linestyle='--',
            zorder=4, label=f'Threshold ({threshold:g})',
        )
    if aggregate is not None:
        ax.axhline(
            aggregate.pooled_mean, color=pal['pooled_mean'], linewidth=1.0,
            linestyle=':', zorder=4, label='Pooled mean',
        )
        n_warn = sum(flagged)
        stats_text = (
            f"Groups: {aggregate.group_count}\n"
            f"Readings: {aggregate.reading_count}\n"
            f"Warnings: {n_warn}\n"
            f"Pooled mean: {aggregate.pooled_mean:.2f}\n"
            f"Mean of means: {aggregate.mean_of_means:.2f}"
        )
        ax.text(
            0.98, 0.95, stats_text,
            transform=ax.transAxes, ha='right', va='top',
            fontsize=6.5, family='monospace',
            color=PLOT_STYLE_LIGHT['text.color'],
            bbox=dict(
                boxstyle='round,pad=0.4', facecolor='#ffffff',
                edgecolor='#999999', alpha=0.9,
            ),
        )

    # ── Labels ───────────────────────────────────────────────────────
    ax.set_xticks(x)
    ax.set_xticklabels(names, rotation=30, ha='right', fontsize=7)
    unit_str = f" ({units})" if units else ""
    ax.set_ylabel(f"Mean{unit_str}", fontsize=8)
    ax.set_title(title, fontsize=10, fontweight='bold')
    if threshold is not None or aggregate is not None:
        ax.legend(fontsize=6, framealpha=0.9, loc='upper left')
    ax.grid(axis='y', linewidth=0.4, alpha=0.5,
            color=PLOT_STYLE_LIGHT['grid.color'])

    fig.tight_layout(pad=1.5)
