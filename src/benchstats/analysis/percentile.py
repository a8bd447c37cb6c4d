"""Percentile conventions shared by every statistics calculator.

Two conventions are supported:

* :func:`percentile_linear` interpolates between the two closest ranks, the
  same result ``numpy.percentile(..., method="linear")`` gives.
* :func:`percentile_threshold_floor` picks ``sorted[floor(p/100 * n)]``. It
  jumps at bucket boundaries and must stay that way: historical reference
  data produced by an external overlay tool relies on this exact indexing.

Calculators never branch on the method themselves. They call
:func:`resolve_percentile` once and pass the returned function along.
"""

from __future__ import annotations

import enum
import math
from typing import Callable, Protocol, Sequence, Union

import numpy as np


class PercentileFunc(Protocol):
    """Signature of a percentile strategy over ascending-sorted data."""

    def __call__(self, sorted_values: Sequence[float] | np.ndarray, p: float) -> float:  # pragma: no cover - protocol
        ...


def percentile_linear(sorted_values: Sequence[float] | np.ndarray, p: float) -> float:
    """
    Return the ``p``-th percentile using linear interpolation.

    Parameters
    ----------
    sorted_values:
        Samples sorted ascending. Empty input yields ``0.0``.
    p:
        Percentile in ``[0, 100]``.
    """
    n = len(sorted_values)
    if n == 0:
        return 0.0
    if n == 1:
        return float(sorted_values[0])

    rank = (p / 100.0) * (n - 1)
    lower = int(math.floor(rank))
    upper = int(math.ceil(rank))
    if lower == upper or upper >= n:
        return float(sorted_values[lower])

    lo = float(sorted_values[lower])
    hi = float(sorted_values[upper])
    fraction = rank - lower
    # Same lerp as numpy: exact for lo == hi and never outside [lo, hi].
    diff = hi - lo
    if fraction >= 0.5:
        return hi - diff * (1.0 - fraction)
    return lo + diff * fraction


def percentile_threshold_floor(sorted_values: Sequence[float] | np.ndarray, p: float) -> float:
    """Return ``sorted_values[floor(p/100 * n)]`` clamped into the valid range."""
    n = len(sorted_values)
    if n == 0:
        return 0.0

    idx = int(math.floor(p / 100.0 * n))
    idx = min(max(idx, 0), n - 1)
    return float(sorted_values[idx])


class CalculationMethod(enum.Enum):
    """Selectable percentile convention; each member carries its function."""

    LINEAR_INTERPOLATION = "linear-interpolation"
    THRESHOLD_FLOOR = "threshold-floor"

    @property
    def percentile(self) -> PercentileFunc:
        return _METHOD_FUNCS[self]

    @property
    def other(self) -> "CalculationMethod":
        """The sibling convention, computed alongside this one."""
        if self is CalculationMethod.LINEAR_INTERPOLATION:
            return CalculationMethod.THRESHOLD_FLOOR
        return CalculationMethod.LINEAR_INTERPOLATION

    @classmethod
    def parse(cls, value: "str | CalculationMethod") -> "CalculationMethod":
        """
        Resolve a method from its value or a common alias.

        Accepts ``linear``/``linear-interpolation`` and
        ``threshold``/``floor``/``mangohud``/``mangohud-threshold``,
        case-insensitive with ``_`` and ``-`` treated alike.
        """
        if isinstance(value, cls):
            return value
        raw = str(value).strip().lower().replace("_", "-")
        alias = _METHOD_ALIASES.get(raw)
        if alias is None:
            raise ValueError(f"Unsupported calculation method '{value}'.")
        return alias


_METHOD_FUNCS = {
    CalculationMethod.LINEAR_INTERPOLATION: percentile_linear,
    CalculationMethod.THRESHOLD_FLOOR: percentile_threshold_floor,
}

_METHOD_ALIASES = {
    "linear": CalculationMethod.LINEAR_INTERPOLATION,
    "linear-interpolation": CalculationMethod.LINEAR_INTERPOLATION,
    "threshold": CalculationMethod.THRESHOLD_FLOOR,
    "threshold-floor": CalculationMethod.THRESHOLD_FLOOR,
    "floor": CalculationMethod.THRESHOLD_FLOOR,
    "mangohud": CalculationMethod.THRESHOLD_FLOOR,
    "mangohud-threshold": CalculationMethod.THRESHOLD_FLOOR,
}

MethodLike = Union[CalculationMethod, PercentileFunc, Callable[..., float]]


def resolve_percentile(method: MethodLike) -> PercentileFunc:
    """Return the percentile function for a method member or a bare callable."""
    if isinstance(method, CalculationMethod):
        return method.percentile
    if callable(method):
        return method
    raise TypeError(f"Expected CalculationMethod or callable, got {type(method).__name__}")


def percentile(sorted_values: Sequence[float] | np.ndarray, p: float, method: MethodLike) -> float:
    """Compute one percentile of ascending ``sorted_values`` under ``method``."""
    return float(resolve_percentile(method)(sorted_values, p))


__all__ = [
    "CalculationMethod",
    "MethodLike",
    "PercentileFunc",
    "percentile",
    "percentile_linear",
    "percentile_threshold_floor",
    "resolve_percentile",
]
