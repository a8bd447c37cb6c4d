"""Compact, rounded per-run summaries for tool/LLM consumers.

The chart payload (:meth:`RunStats.to_dict`) keeps full precision and the
rendering key names. Summaries use snake_case metric keys, two-decimal
rounding and, on request, a bounded list of values taken from the already
downsampled series.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Sequence

from ..analysis.downsample import SeriesPoint
from .metrics import Metric
from .models import RunSpecs, RunStats


def round2(value: float) -> float:
    """Round half away from zero to two decimals."""
    scaled = value * 100.0
    rounded = math.floor(abs(scaled) + 0.5)
    return math.copysign(rounded, scaled) / 100.0 if rounded else 0.0


def resample_series_values(series: Sequence[SeriesPoint], max_points: int) -> List[float]:
    """
    Return at most ``max_points`` rounded values from ``series``.

    Longer series are thinned by uniform index stepping, which keeps the
    first and last samples.
    """
    if max_points <= 0 or not series:
        return []
    if len(series) <= max_points:
        return [round2(value) for _, value in series]
    if max_points == 1:
        return [round2(series[0][1])]

    step = (len(series) - 1) / (max_points - 1)
    last = len(series) - 1
    values = []
    for i in range(max_points):
        idx = min(int(math.floor(step * i + 0.5)), last)
        values.append(round2(series[idx][1]))
    return values


def run_summary(run: RunStats, max_points: int = 0) -> Dict[str, Any]:
    """
    Summarise ``run`` using its primary-method stats.

    Metrics with no samples are left out. With ``max_points > 0`` every
    metric also carries ``data`` and the payload records ``downsampled_to``.
    """
    specs = run.specs or RunSpecs()
    summary: Dict[str, Any] = {
        "label": run.label or f"Run {run.run_index + 1}",
        "spec_os": specs.os,
        "spec_cpu": specs.cpu,
        "spec_gpu": specs.gpu,
        "spec_ram": specs.ram,
        "total_data_points": run.total_data_points,
        "metrics": {},
    }
    if specs.linux_kernel:
        summary["spec_linux_kernel"] = specs.linux_kernel
    if specs.linux_scheduler:
        summary["spec_linux_scheduler"] = specs.linux_scheduler

    for key, stats in run.stats.items():
        if stats.count == 0:
            continue
        metric = Metric.parse(key)
        entry: Dict[str, Any] = {
            "min": round2(stats.min),
            "max": round2(stats.max),
            "avg": round2(stats.avg),
            "median": round2(stats.median),
            "p01": round2(stats.p01),
            "p97": round2(stats.p97),
            "std_dev": round2(stats.stddev),
            "variance": round2(stats.variance),
            "count": stats.count,
        }
        if max_points > 0:
            series = run.series.get(key, ())
            if series:
                summary["downsampled_to"] = min(max_points, len(series))
                entry["data"] = resample_series_values(series, max_points)
        summary["metrics"][metric.snake_key] = entry
    return summary


__all__ = ["resample_series_values", "round2", "run_summary"]
