"""
Export utilities for the Station Statistics Reporter.

Writes rendered report text and chart PNGs to disk.  Report building
never touches the filesystem; these helpers are the only place that
does.
"""

import os

from matplotlib.figure import Figure

from .constants import EXPORT_DPI, EXPORT_WIDTH_INCHES


def save_report_text(text: str, filepath: str) -> str:
    """Write *text* to *filepath* (UTF-8), creating parent directories."""
    parent = os.path.dirname(filepath)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(filepath, 'w', encoding='utf-8') as fh:
        fh.write(text)
    return filepath


def export_png(
    fig: Figure,
    filepath: str,
    *,
    dpi: int = EXPORT_DPI,
    width_inches: float = EXPORT_WIDTH_INCHES,
) -> None:
    """Export figure as PNG at a fixed width.

    The figure is rescaled for the export and its original size restored
    afterwards, even on error.

    Parameters
    ----------
    fig : matplotlib.figure.Figure
    filepath : str
        Output file path (should end with ``.png``).
    dpi : int
        Export resolution (default 300).
    width_inches : float
        Figure width in inches (default 6.0).
    """
    current_w = fig.get_figwidth()
    current_h = fig.get_figheight()
    try:
        scale = width_inches / current_w if current_w > 0 else 1.0
        fig.set_size_inches(width_inches, current_h * scale)
        fig.savefig(
            filepath,
            dpi=dpi,
            bbox_inches='tight',
            facecolor=fig.get_facecolor(),
            edgecolor='none',
            pad_inches=0.1,
        )
    finally:
        fig.set_size_inches(current_w, current_h)

