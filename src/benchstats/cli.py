#!/usr/bin/env python3
"""
Command-line front end for the benchstats engine.

Reads one or more MangoHud CSV / Afterburner HML captures, computes the
per-run series and statistics, and prints them as JSON::

    benchstats run1.csv run2.hml --method mangohud --max-points 1000
    benchstats run1.csv --summary --summary-points 100
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Optional, Sequence

from .analysis.percentile import CalculationMethod
from .config.runtime import load_config
from .core.orchestrator import RunStatsOrchestrator
from .core.summary import run_summary
from .dataio.benchmark_csv import read_benchmark_files

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="benchstats",
        description="Compute chart-ready statistics and downsampled series for benchmark captures.",
    )
    parser.add_argument("files", nargs="+", help="MangoHud .csv or Afterburner .hml capture files.")
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=None,
        help="YAML engine configuration (default: built-in settings).",
    )
    parser.add_argument(
        "-n",
        "--max-points",
        type=int,
        default=None,
        help="Downsample threshold for each series (overrides the config).",
    )
    parser.add_argument(
        "-m",
        "--method",
        type=str,
        default=None,
        help="Primary percentile method: linear or mangohud/threshold.",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Emit rounded snake_case summaries instead of the full chart payload.",
    )
    parser.add_argument(
        "--summary-points",
        type=int,
        default=0,
        help="Include up to N values per metric in --summary output (0 = none).",
    )
    parser.add_argument("--indent", type=int, default=None, help="Indent the JSON output.")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.max_points is not None and args.max_points < 2:
        parser.error("--max-points must be at least 2")

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
        if args.method:
            config = replace(config, default_method=CalculationMethod.parse(args.method))
        runs = read_benchmark_files(args.files)
    except (OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 2

    orchestrator = RunStatsOrchestrator(config)
    results = orchestrator.process_runs(runs, max_points=args.max_points)
    logger.info("Processed %d run(s)", len(results))

    if args.summary:
        payload = [run_summary(result, args.summary_points) for result in results]
    else:
        payload = [result.to_dict() for result in results]

    json.dump(payload, sys.stdout, indent=args.indent)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
