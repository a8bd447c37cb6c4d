"""Shape-preserving downsampling of chart series (Largest-Triangle-Three-Buckets).

Plain stride decimation drops single-frame spikes, which are exactly what a
frametime chart has to show. LTTB keeps, for every bucket, the point that
spans the largest triangle with the previously kept point and the centroid
of the following bucket, so local peaks and dips survive.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple, TypeVar

import numpy as np
from numpy.typing import ArrayLike

SeriesPoint = Tuple[int, float]
DownsampledSeries = List[SeriesPoint]

DEFAULT_MAX_POINTS = 2000

P = TypeVar("P")


def build_series(values: ArrayLike) -> DownsampledSeries:
    """Pair every sample with its position: ``[(0, v0), (1, v1), ...]``."""
    arr = np.asarray(values, dtype=float).reshape(-1)
    return [(i, float(v)) for i, v in enumerate(arr.tolist())]


def _bucket_bounds(i: int, bucket_size: float, n: int) -> Tuple[int, int]:
    """Half-open index range of bucket ``i`` (bucket 0 starts after point 0)."""
    start = int(math.floor(i * bucket_size)) + 1
    end = min(int(math.floor((i + 1) * bucket_size)) + 1, n)
    return start, end


def lttb_indices(x: ArrayLike, y: ArrayLike, threshold: int) -> np.ndarray:
    """
    Return the indices LTTB keeps for the series ``(x, y)``.

    Parameters
    ----------
    x, y:
        Equal-length 1-D coordinates.
    threshold:
        Maximum number of indices to keep. Must be at least 2.

    Returns
    -------
    numpy.ndarray
        Ascending ``int64`` indices, always containing ``0`` and ``n - 1``
        when ``n > 0``. Buckets left empty by rounding contribute nothing,
        so degenerate inputs can yield fewer than ``threshold`` indices.
    """
    xs = np.asarray(x, dtype=float).reshape(-1)
    ys = np.asarray(y, dtype=float).reshape(-1)
    if xs.size != ys.size:
        raise ValueError(f"x and y must have the same length, got {xs.size} and {ys.size}")
    if threshold < 2:
        raise ValueError(f"threshold must be >= 2, got {threshold}")

    n = xs.size
    if n <= threshold:
        return np.arange(n, dtype=np.int64)

    bucket_count = threshold - 2
    bucket_size = (n - 2) / bucket_count if bucket_count else 0.0

    selected = [0]
    for i in range(bucket_count):
        next_start, next_end = _bucket_bounds(i + 1, bucket_size, n)
        if next_end <= next_start:
            continue
        avg_x = float(xs[next_start:next_end].mean())
        avg_y = float(ys[next_start:next_end].mean())

        start, end = _bucket_bounds(i, bucket_size, n)
        if end <= start:
            continue

        ax = xs[selected[-1]]
        ay = ys[selected[-1]]
        areas = 0.5 * np.abs(
            (ax - avg_x) * (ys[start:end] - ay) - (ax - xs[start:end]) * (avg_y - ay)
        )
        # argmax keeps the first maximum, like a strict ``>`` scan.
        selected.append(start + int(np.argmax(areas)))

    selected.append(n - 1)
    return np.asarray(selected, dtype=np.int64)


def downsample(points: Sequence[P], threshold: int = DEFAULT_MAX_POINTS) -> List[P]:
    """
    Reduce ``points`` (``(index, value)`` pairs) to at most ``threshold``.

    Series that already fit are returned as a new list with the same
    elements. Selected points are the caller's own objects, so the first and
    last entries compare identical to ``points[0]`` and ``points[-1]``.
    """
    n = len(points)
    if threshold < 2:
        raise ValueError(f"threshold must be >= 2, got {threshold}")
    if n <= threshold:
        return list(points)

    coords = np.asarray(points, dtype=float).reshape(n, 2)
    keep = lttb_indices(coords[:, 0], coords[:, 1], threshold)
    return [points[int(i)] for i in keep]


def downsample_values(values: ArrayLike, threshold: int = DEFAULT_MAX_POINTS) -> DownsampledSeries:
    """Index ``values`` with :func:`build_series` and downsample the result."""
    return downsample(build_series(values), threshold)


__all__ = [
    "DEFAULT_MAX_POINTS",
    "DownsampledSeries",
    "SeriesPoint",
    "build_series",
    "downsample",
    "downsample_values",
    "lttb_indices",
]
