"""Numerical building blocks: percentiles, histograms, stats and downsampling.

This package gathers pure helpers that operate on NumPy arrays of benchmark
samples. Modules such as :mod:`percentile`, :mod:`density`,
:mod:`metric_stats`, :mod:`fps` and :mod:`downsample` hold no state and do no
I/O, so they can be called from worker threads, command-line scripts, or
tests alike.
"""

from .density import DensitySettings, density
from .downsample import build_series, downsample, lttb_indices
from .fps import fps_stats_from_frametime
from .metric_stats import MetricStats, compute_metric_stats
from .percentile import (
    CalculationMethod,
    percentile,
    percentile_linear,
    percentile_threshold_floor,
    resolve_percentile,
)

__all__ = [
    "CalculationMethod",
    "DensitySettings",
    "MetricStats",
    "build_series",
    "compute_metric_stats",
    "density",
    "downsample",
    "fps_stats_from_frametime",
    "lttb_indices",
    "percentile",
    "percentile_linear",
    "percentile_threshold_floor",
    "resolve_percentile",
]
