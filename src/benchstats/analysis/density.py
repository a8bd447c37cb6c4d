"""Outlier-trimmed density histograms for distribution charts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike

from .percentile import MethodLike, resolve_percentile

BucketCenter = Union[int, float]
DensityHistogram = List[Tuple[BucketCenter, int]]

DEFAULT_LOW_PERCENTILE = 1.0
DEFAULT_HIGH_PERCENTILE = 97.0
LEGACY_MAX_BINS = 100


@dataclass(frozen=True)
class DensitySettings:
    """Trim bounds and optional bucket cap for one deployment."""

    low_pct: float = DEFAULT_LOW_PERCENTILE
    high_pct: float = DEFAULT_HIGH_PERCENTILE
    max_bins: Optional[int] = None  # None keeps every integer bucket.

    def __post_init__(self) -> None:
        if not (0.0 <= self.low_pct <= self.high_pct <= 100.0):
            raise ValueError(
                f"Density cutoffs must satisfy 0 <= low <= high <= 100, got {self.low_pct}/{self.high_pct}."
            )
        if self.max_bins is not None and self.max_bins < 1:
            raise ValueError(f"max_bins must be >= 1 or None, got {self.max_bins}.")


def round_half_away(values: np.ndarray) -> np.ndarray:
    """Round to the nearest integer with ties away from zero (``10.5 -> 11``)."""
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def merge_closest_buckets(histogram: DensityHistogram, max_bins: int) -> DensityHistogram:
    """
    Merge adjacent buckets until at most ``max_bins`` remain.

    Each step joins the first pair (scanning ascending) with the smallest
    gap between centers: the centers are averaged and the counts summed.
    """
    buckets = [[center, count] for center, count in histogram]
    while len(buckets) > max_bins:
        min_gap = float("inf")
        min_idx = -1
        for i in range(len(buckets) - 1):
            gap = buckets[i + 1][0] - buckets[i][0]
            if gap < min_gap:
                min_gap = gap
                min_idx = i
        left, right = buckets[min_idx], buckets[min_idx + 1]
        left[0] = (left[0] + right[0]) / 2
        left[1] += right[1]
        del buckets[min_idx + 1]
    return [(center, count) for center, count in buckets]


def density(
    values: ArrayLike,
    method: MethodLike,
    settings: DensitySettings = DensitySettings(),
) -> DensityHistogram:
    """
    Build an ascending ``(bucket, count)`` histogram of ``values``.

    Values outside ``[P(low_pct), P(high_pct)]`` of the sorted data are
    dropped, the rest rounded to the nearest integer and counted.
    ``values`` itself is never modified.
    """
    arr = np.asarray(values, dtype=float).reshape(-1)
    if arr.size == 0:
        return []

    pfunc = resolve_percentile(method)
    ordered = np.sort(arr)
    low = pfunc(ordered, settings.low_pct)
    high = pfunc(ordered, settings.high_pct)

    kept = ordered[(ordered >= low) & (ordered <= high)]
    if kept.size == 0:
        return []

    buckets, counts = np.unique(round_half_away(kept).astype(np.int64), return_counts=True)
    histogram: DensityHistogram = [(int(b), int(c)) for b, c in zip(buckets, counts)]

    if settings.max_bins is not None and len(histogram) > settings.max_bins:
        histogram = merge_closest_buckets(histogram, settings.max_bins)
    return histogram


__all__ = [
    "DEFAULT_HIGH_PERCENTILE",
    "DEFAULT_LOW_PERCENTILE",
    "DensityHistogram",
    "DensitySettings",
    "LEGACY_MAX_BINS",
    "density",
    "merge_closest_buckets",
    "round_half_away",
]
