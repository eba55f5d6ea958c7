"""
Constants for the Station Statistics Reporter.

Centralises default thresholds, variability bands, report layout,
named CSV column indices, and the chart palette.
"""

# ── Named column indices (avoid magic numbers) ──────────────────────────
COL_GROUP = 0
COL_LABEL = 1
COL_DATA_START = 2

# ── Threshold classification defaults ───────────────────────────────────
DEFAULT_THRESHOLD = 10.0             # flooding threshold, mm
DEFAULT_COMPARISON = "gt"            # "gt" (>) or "ge" (>=)
DEFAULT_STD_MODE = "sample"          # "sample" (n - 1) or "population" (n)

# ── Variability bands (upper bounds on std, exclusive) ──────────────────
DEFAULT_STABLE_BELOW = 1.5
DEFAULT_MODERATE_BELOW = 3.0

STABILITY_LABELS = {
    'very_stable': "Very Stable",
    'moderately_stable': "Moderately Stable",
    'unstable': "Unstable",
}

# ── Report layout ───────────────────────────────────────────────────────
DEFAULT_DECIMALS = 2
MIN_DECIMALS = 2
MAX_DECIMALS = 4
DEFAULT_TOP_N = 5
DEFAULT_RANK_METRIC = "mean"
DEFAULT_TITLE = "STATISTICAL ANALYSIS REPORT"
DEFAULT_FLAT_GROUP = "All"
NAME_WIDTH = 18
NUMBER_WIDTH = 10
REPORT_WIDTH = 64
SEPARATOR = "=" * REPORT_WIDTH
RULE = "-" * REPORT_WIDTH

WARNING_FLAG = "WARNING"
OK_FLAG = "OK"

# ── Metrics accepted by rank_groups ─────────────────────────────────────
RANK_METRICS = (
    "mean", "median", "std", "minimum", "maximum",
    "range", "count", "total",
)

# ── Chart palette (light theme, report/export) ──────────────────────────
CHART_PALETTE = {
    'ok_bar':        '#4472C4',
    'warn_bar':      '#C00000',
    'bar_edge':      '#2F5597',
    'threshold':     '#C00000',
    'pooled_mean':   '#333333',
    'error_bar':     '#404040',
}

PLOT_STYLE_LIGHT = {
    'figure.facecolor':  '#ffffff',
    'axes.facecolor':    '#ffffff',
    'axes.edgecolor':    '#333333',
    'text.color':        '#1a1a2e',
    'grid.color':        '#cccccc',
}

# ── Export settings ─────────────────────────────────────────────────────
EXPORT_DPI = 300
EXPORT_WIDTH_INCHES = 6.0
