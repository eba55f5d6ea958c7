"""
Entry point for the Station Statistics Reporter.

Usage:
    python -m station_stats readings.csv [options]
    python -m station_stats --values 10 20 30 40
    python -m station_stats --example rainfall --chart rainfall.png
"""

import argparse
import logging
import sys
from dataclasses import replace

from . import APP_NAME, APP_VERSION
from .constants import MAX_DECIMALS, MIN_DECIMALS, RANK_METRICS

PROG = "station-stats"

logger = logging.getLogger(__name__)


def _check_dependencies():
    """Verify required packages are installed."""
    missing = []
    try:
        import numpy  # noqa: F401
    except ImportError:
        missing.append("numpy")
    try:
        import scipy  # noqa: F401
    except ImportError:
        missing.append("scipy")
    try:
        import matplotlib  # noqa: F401
    except ImportError:
        missing.append("matplotlib")

    if missing:
        print(
            f"Missing required packages: {', '.join(missing)}\n"
            f"Install with: pip install {' '.join(missing)}",
            file=sys.stderr,
        )
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=f"{APP_NAME}: descriptive statistics and threshold "
                    f"report for grouped numeric readings.",
    )
    source = parser.add_argument_group("input (choose one)")
    source.add_argument("csv", nargs="?", help="CSV file: group, label, readings...")
    source.add_argument("--values", nargs="+", type=float, metavar="X",
                        help="analyse a flat list of numbers")
    source.add_argument("--example", choices=("weather", "rainfall"),
                        help="analyse a built-in sample dataset")
    source.add_argument("--no-label-column", action="store_true",
                        help="CSV readings start in column 2 (no label column)")

    opts = parser.add_argument_group("statistics and layout")
    opts.add_argument("--threshold", type=float,
                      help="warning threshold on each group mean")
    opts.add_argument("--no-threshold", action="store_true",
                      help="disable threshold warnings")
    opts.add_argument("--comparison", choices=("gt", "ge"),
                      help="threshold comparison: gt (>) or ge (>=)")
    opts.add_argument("--std", dest="std_mode", choices=("sample", "population"),
                      help="standard deviation divisor: n - 1 or n")
    opts.add_argument("--decimals", type=int,
                      help=f"decimal places ({MIN_DECIMALS}-{MAX_DECIMALS})")
    opts.add_argument("--top", dest="top_n", type=int,
                      help="groups listed at each end of the rankings")
    opts.add_argument("--rank-by", choices=RANK_METRICS,
                      help="metric used for the rankings")
    opts.add_argument("--units", help="unit suffix, e.g. mm or °C")
    opts.add_argument("--title", help="report title")
    opts.add_argument("--no-regions", action="store_true",
                      help="omit the regional summary")
    opts.add_argument("--config", help="extra TOML config file")

    out = parser.add_argument_group("output")
    out.add_argument("-o", "--output", help="write the report to this file")
    out.add_argument("--chart", help="export the group means chart as PNG")
    out.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    out.add_argument("--version", action="version",
                     version=f"{APP_NAME} {APP_VERSION}")
    return parser


def _load_dataset(args, parser):
    from .csv_parser import load_dataset_csv
    from .data_model import Dataset
    from .example_data import load_example

    chosen = [x for x in (args.csv, args.values, args.example) if x is not None]
    if len(chosen) != 1:
        parser.error("give exactly one of: a CSV path, --values, or --example")

    if args.values is not None:
        return Dataset.flat(args.values)
    if args.example is not None:
        return load_example(args.example)
    return load_dataset_csv(args.csv, label_column=not args.no_label_column)


def _resolve_options(args):
    from .config import load_config

    options = load_config(path=args.config).with_overrides(
        threshold=args.threshold,
        comparison=args.comparison,
        std_mode=args.std_mode,
        decimals=args.decimals,
        top_n=args.top_n,
        rank_by=args.rank_by,
        units=args.units,
        title=args.title,
    )
    if args.no_threshold:
        options = replace(options, threshold=None)
    if args.no_regions:
        options = replace(options, include_regions=False)
    return options


def _export_chart(result, options, path):
    from matplotlib.figure import Figure

    from .chart_group_means import render_group_means
    from .export import export_png

    fig = Figure(figsize=(8.0, 4.5))
    render_group_means(
        fig, result.groups,
        aggregate=result.aggregate,
        threshold=options.threshold,
        comparison=options.comparison,
        units=options.units,
        title=options.title.title(),
    )
    export_png(fig, path)
    logger.info("Chart written to %s", path)


def main(argv=None):
    """Run the reporter from the command line."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    _check_dependencies()

    from .engine import StatisticalReportEngine
    from .errors import StatisticsError
    from .export import save_report_text
    from .report import build_report

    try:
        dataset = _load_dataset(args, parser)
        options = _resolve_options(args)
        engine = StatisticalReportEngine(options)
        result = engine.analyze(dataset)
        text = build_report(result.groups, result.aggregate, options).render()
        if args.chart:
            _export_chart(result, options, args.chart)
        if args.output:
            save_report_text(text, args.output)
            logger.info("Report written to %s", args.output)
    except (StatisticsError, OSError, ValueError) as exc:
        print(f"{PROG}: {exc}", file=sys.stderr)
        sys.exit(1)

    if not args.output:
        sys.stdout.write(text)


if __name__ == "__main__":
    main()
