"""FPS statistics derived from frametime samples.

Averaging instantaneous FPS values overweights fast frames. Every FPS
aggregate here is therefore taken from the frametime distribution:

* ``avg`` is ``1000 / mean(frametime)``, the harmonic mean of FPS.
* ``min``/``max`` come from the max/min frametime.
* FPS ``Px`` is ``1000 / frametime P(100 - x)``.

Two fields are taken from the converted FPS array instead: ``median`` (the
50th percentile of the converted samples, kept for compatibility with
published results) and ``stddev``/``variance``/``density``.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

from .density import DensitySettings, density as density_histogram
from .metric_stats import PERCENTILE_LADDER, MetricStats, sample_variance
from .percentile import MethodLike, resolve_percentile

MS_PER_SECOND = 1000.0


def safe_fps(frametime_ms: float) -> float:
    """Convert one frametime (ms) to FPS; non-positive frametimes give 0."""
    return MS_PER_SECOND / frametime_ms if frametime_ms > 0 else 0.0


def frametimes_to_fps(frametimes: ArrayLike) -> np.ndarray:
    """Vectorised :func:`safe_fps` returning a new ``float64`` array."""
    ft = np.asarray(frametimes, dtype=float).reshape(-1)
    fps = np.zeros_like(ft)
    valid = ft > 0
    np.divide(MS_PER_SECOND, ft, out=fps, where=valid)
    return fps


def fps_stats_from_frametime(
    frametimes: ArrayLike,
    method: MethodLike,
    *,
    density: DensitySettings = DensitySettings(),
) -> MetricStats:
    """
    Compute FPS-domain :class:`MetricStats` from frametimes in milliseconds.

    Empty input gives :meth:`MetricStats.empty`. The same percentile method
    is used for every field.
    """
    if frametimes is None:
        return MetricStats.empty()
    ft = np.asarray(frametimes, dtype=float).reshape(-1)
    n = ft.size
    if n == 0:
        return MetricStats.empty()

    pfunc = resolve_percentile(method)
    ordered_ft = np.sort(ft)

    ladder = {
        f"p{p:02d}": safe_fps(pfunc(ordered_ft, 100 - p))
        for p in PERCENTILE_LADDER
    }

    fps_values = frametimes_to_fps(ft)
    variance = sample_variance(fps_values)

    return MetricStats(
        min=safe_fps(float(ordered_ft[-1])),
        max=safe_fps(float(ordered_ft[0])),
        avg=safe_fps(float(np.mean(ft))),
        median=float(pfunc(np.sort(fps_values), 50)),
        iqr=ladder["p75"] - ladder["p25"],
        stddev=float(np.sqrt(variance)),
        variance=variance,
        count=int(n),
        density=tuple(density_histogram(fps_values, pfunc, density)),
        **ladder,
    )


__all__ = ["MS_PER_SECOND", "fps_stats_from_frametime", "frametimes_to_fps", "safe_fps"]
