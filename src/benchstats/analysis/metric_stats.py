"""Summary statistics for one metric of one benchmark run."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple

import numpy as np
from numpy.typing import ArrayLike

from .density import BucketCenter, DensitySettings, density as density_histogram
from .percentile import MethodLike, PercentileFunc, resolve_percentile

# Ladder reported by every MetricStats, low to high.
PERCENTILE_LADDER: Tuple[int, ...] = (1, 5, 10, 25, 75, 90, 95, 97, 99)


@dataclass(frozen=True)
class MetricStats:
    """Statistics snapshot produced under a single calculation method."""

    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    median: float = 0.0
    p01: float = 0.0
    p05: float = 0.0
    p10: float = 0.0
    p25: float = 0.0
    p75: float = 0.0
    p90: float = 0.0
    p95: float = 0.0
    p97: float = 0.0
    p99: float = 0.0
    iqr: float = 0.0
    stddev: float = 0.0
    variance: float = 0.0
    count: int = 0
    density: Tuple[Tuple[BucketCenter, int], ...] = ()

    @classmethod
    def empty(cls) -> "MetricStats":
        """All-zero stats used for missing or empty metrics."""
        return cls()

    def percentiles(self) -> Dict[int, float]:
        """Return the percentile ladder keyed by percentile number."""
        return {p: getattr(self, f"p{p:02d}") for p in PERCENTILE_LADDER}

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["density"] = [[center, count] for center, count in self.density]
        return payload


def sample_variance(arr: np.ndarray) -> float:
    """Variance with Bessel's correction; ``0.0`` for fewer than two samples."""
    if arr.size <= 1:
        return 0.0
    return float(np.var(arr, ddof=1))


def _ladder(sorted_values: np.ndarray, pfunc: PercentileFunc) -> Dict[str, float]:
    return {f"p{p:02d}": float(pfunc(sorted_values, p)) for p in PERCENTILE_LADDER}


def compute_metric_stats(
    values: ArrayLike,
    method: MethodLike,
    *,
    density: DensitySettings = DensitySettings(),
) -> MetricStats:
    """
    Compute :class:`MetricStats` for ``values`` under one percentile method.

    Parameters
    ----------
    values:
        Raw samples in time order. ``None`` or empty input gives
        :meth:`MetricStats.empty`.
    method:
        :class:`~benchstats.analysis.percentile.CalculationMethod` member or
        any percentile function with the same signature.
    density:
        Trim bounds and bucket cap for the histogram.
    """
    if values is None:
        return MetricStats.empty()
    arr = np.asarray(values, dtype=float).reshape(-1)
    n = arr.size
    if n == 0:
        return MetricStats.empty()

    pfunc = resolve_percentile(method)
    ordered = np.sort(arr)
    ladder = _ladder(ordered, pfunc)
    variance = sample_variance(arr)

    return MetricStats(
        min=float(ordered[0]),
        max=float(ordered[-1]),
        avg=float(np.mean(arr)),
        median=float(pfunc(ordered, 50)),
        iqr=ladder["p75"] - ladder["p25"],
        stddev=float(np.sqrt(variance)),
        variance=variance,
        count=int(n),
        density=tuple(density_histogram(arr, pfunc, density)),
        **ladder,
    )


__all__ = ["MetricStats", "PERCENTILE_LADDER", "compute_metric_stats", "sample_variance"]
