"""Shared dataclasses for raw benchmark runs and their computed statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ..analysis.downsample import SeriesPoint
from ..analysis.metric_stats import MetricStats
from ..analysis.percentile import CalculationMethod
from .metrics import Metric


@dataclass
class RunSpecs:
    os: str = ""
    cpu: str = ""
    gpu: str = ""
    ram: str = ""
    linux_kernel: str = ""
    linux_scheduler: str = ""


@dataclass
class RawRun:
    """Raw per-metric samples of one benchmark run, as captured."""

    label: str = ""
    specs: RunSpecs = field(default_factory=RunSpecs)
    data: Dict[Metric, Sequence[float]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], *, label: str = "") -> "RawRun":
        """
        Build a run from ``{"FPS": [...], "FrameTime": [...], ...}``.

        Keys may also use snake case or the ``DataFPS`` field style. Unknown
        keys raise ``ValueError``.
        """
        data = {Metric.parse(key): values for key, values in mapping.items() if values is not None}
        return cls(label=label, data=data)

    def get(self, metric: Metric) -> Sequence[float]:
        values = self.data.get(metric)
        return () if values is None else values

    @property
    def total_data_points(self) -> int:
        """Sample count, taken from FPS or else FrameTime."""
        fps = len(self.get(Metric.FPS))
        return fps if fps else len(self.get(Metric.FRAME_TIME))


def _freeze(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class RunStats:
    """
    Immutable per-run result consumed by the rendering layer.

    ``stats`` holds the ``method`` results and ``stats_alt_method`` the
    sibling convention, so the UI can switch without recomputing.
    """

    run_index: int
    method: CalculationMethod
    series: Mapping[str, Tuple[SeriesPoint, ...]]
    stats: Mapping[str, MetricStats]
    stats_alt_method: Mapping[str, MetricStats]
    label: str = ""
    specs: Optional[RunSpecs] = None
    total_data_points: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "series", _freeze({k: tuple(v) for k, v in self.series.items()}))
        object.__setattr__(self, "stats", _freeze(self.stats))
        object.__setattr__(self, "stats_alt_method", _freeze(self.stats_alt_method))

    @property
    def alt_method(self) -> CalculationMethod:
        return self.method.other

    def stats_for(self, method: CalculationMethod) -> Mapping[str, MetricStats]:
        """Return the stats computed under ``method``."""
        return self.stats if CalculationMethod.parse(method) is self.method else self.stats_alt_method

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready payload with the key names the charts expect."""
        specs = self.specs or RunSpecs()
        payload: Dict[str, Any] = {
            "label": self.label or f"Run {self.run_index + 1}",
            "runIndex": self.run_index,
            "specOS": specs.os,
            "specCPU": specs.cpu,
            "specGPU": specs.gpu,
            "specRAM": specs.ram,
            "totalDataPoints": self.total_data_points,
            "method": self.method.value,
            "altMethod": self.alt_method.value,
            "series": {key: [list(point) for point in points] for key, points in self.series.items()},
            "stats": {key: value.to_dict() for key, value in self.stats.items()},
            "statsAltMethod": {key: value.to_dict() for key, value in self.stats_alt_method.items()},
        }
        if specs.linux_kernel:
            payload["specLinuxKernel"] = specs.linux_kernel
        if specs.linux_scheduler:
            payload["specLinuxScheduler"] = specs.linux_scheduler
        return payload


__all__ = ["RawRun", "RunSpecs", "RunStats"]
