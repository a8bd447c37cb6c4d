"""Per-run assembly of downsampled series and dual-method statistics."""

from __future__ import annotations

import logging
import os
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from ..analysis.density import DensitySettings
from ..analysis.downsample import DownsampledSeries, downsample_values
from ..analysis.fps import fps_stats_from_frametime
from ..analysis.metric_stats import MetricStats, compute_metric_stats
from ..analysis.percentile import CalculationMethod
from ..config.runtime import CURRENT, EngineConfig
from ..tools.debug import time_block
from .metrics import ALL_METRICS, Metric
from .models import RawRun, RunStats

logger = logging.getLogger(__name__)

MethodStats = Dict[str, MetricStats]
ExecutorFactory = Callable[[int], Executor]
RunInput = Union[RawRun, Mapping[str, Any]]


def _thread_pool(max_workers: int) -> Executor:
    return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="benchstats")


def _as_raw_run(raw_run: RunInput) -> RawRun:
    if isinstance(raw_run, RawRun):
        return raw_run
    return RawRun.from_mapping(raw_run)


def _resolve_metrics(metrics: Optional[Iterable[Union[str, Metric]]]) -> Tuple[Metric, ...]:
    if metrics is None:
        return ALL_METRICS
    requested = set()
    for name in metrics:
        try:
            requested.add(Metric.parse(name))
        except ValueError:
            logger.warning("Ignoring unknown metric name %r", name)
    return tuple(metric for metric in ALL_METRICS if metric in requested)


def _numeric_samples(run: RawRun, tracked: Sequence[Metric]) -> RawRun:
    """
    Return a copy of ``run`` holding float arrays for the metrics used.

    FrameTime is always included since FPS stats derive from it. Samples
    that do not convert to floats raise ``ValueError`` on the calling thread.
    """
    data: Dict[Metric, np.ndarray] = {}
    for metric in (*tracked, Metric.FRAME_TIME):
        values = run.get(metric)
        try:
            data[metric] = np.asarray(values, dtype=float).reshape(-1)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{metric.value} samples must be numeric: {exc}") from exc
    return RawRun(label=run.label, specs=run.specs, data=data)


def compute_method_stats(
    raw_run: RawRun,
    metrics: Sequence[Metric],
    method: CalculationMethod,
    density: DensitySettings,
) -> MethodStats:
    """
    Compute one method's :class:`MetricStats` for every metric in ``metrics``.

    FPS is derived from FrameTime whenever that array is non-empty and from
    the FPS samples themselves otherwise.
    """
    frametimes = raw_run.get(Metric.FRAME_TIME)
    stats: MethodStats = {}
    for metric in metrics:
        if metric is Metric.FPS and len(frametimes) > 0:
            stats[metric.value] = fps_stats_from_frametime(frametimes, method, density=density)
        else:
            stats[metric.value] = compute_metric_stats(raw_run.get(metric), method, density=density)
    return stats


def build_run_series(raw_run: RawRun, metrics: Sequence[Metric], max_points: int) -> Dict[str, DownsampledSeries]:
    """LTTB-downsample every metric; missing metrics map to an empty series."""
    series: Dict[str, DownsampledSeries] = {}
    for metric in metrics:
        values = raw_run.get(metric)
        series[metric.value] = downsample_values(values, max_points) if len(values) > 0 else []
    return series


class RunStatsOrchestrator:
    """
    Turn raw benchmark runs into :class:`RunStats` snapshots.

    Parameters
    ----------
    config:
        Frozen engine settings shared by every run.
    executor_factory:
        Callable returning an :class:`~concurrent.futures.Executor` for a
        given worker count. Defaults to a thread pool.
    """

    def __init__(
        self,
        config: EngineConfig = CURRENT,
        *,
        executor_factory: ExecutorFactory | None = None,
    ) -> None:
        self._config = config
        self._executor_factory = executor_factory or _thread_pool

    @property
    def config(self) -> EngineConfig:
        return self._config

    def process_run(
        self,
        raw_run: RunInput,
        run_index: int = 0,
        max_points: Optional[int] = None,
        metrics: Optional[Iterable[Union[str, Metric]]] = None,
    ) -> RunStats:
        """
        Compute series and both methods' stats for one run.

        ``raw_run`` is a :class:`RawRun` or a ``{metric name: samples}``
        mapping. ``metrics`` limits processing to the named metrics.
        """
        run = _as_raw_run(raw_run)
        tracked = _resolve_metrics(metrics)
        threshold = self._config.max_points if max_points is None else max_points
        if threshold < 2:
            raise ValueError(f"max_points must be >= 2, got {threshold}")
        samples = _numeric_samples(run, tracked)

        if (
            Metric.FPS in tracked
            and len(samples.get(Metric.FRAME_TIME)) == 0
            and len(samples.get(Metric.FPS)) > 0
        ):
            logger.warning(
                "Run %d (%s) has no frametime data; FPS stats are computed from raw FPS samples",
                run_index,
                run.label or "unlabelled",
            )

        with time_block(f"process_run[{run_index}]", emitter=logger.debug):
            series = build_run_series(samples, tracked, threshold)
            stats, stats_alt = self._compute_both_methods(samples, tracked, run_index)

        return RunStats(
            run_index=run_index,
            method=self._config.default_method,
            series=series,
            stats=stats,
            stats_alt_method=stats_alt,
            label=run.label,
            specs=run.specs,
            total_data_points=run.total_data_points,
        )

    def _compute_both_methods(
        self,
        samples: RawRun,
        tracked: Sequence[Metric],
        run_index: int,
    ) -> Tuple[MethodStats, MethodStats]:
        method = self._config.default_method
        alt = method.other
        density = self._config.density

        if not self._config.parallel:
            return (
                compute_method_stats(samples, tracked, method, density),
                compute_method_stats(samples, tracked, alt, density),
            )

        # Samples are already validated float arrays, so anything raised here
        # comes from the pool itself.
        try:
            with self._executor_factory(2) as pool:
                primary_future = pool.submit(compute_method_stats, samples, tracked, method, density)
                alt_future = pool.submit(compute_method_stats, samples, tracked, alt, density)
                primary = primary_future.result()
                alternate = alt_future.result()
        except Exception:
            logger.exception(
                "Parallel stats computation failed for run %d; recomputing both methods inline",
                run_index,
            )
            primary = compute_method_stats(samples, tracked, method, density)
            alternate = compute_method_stats(samples, tracked, alt, density)
        return primary, alternate

    def process_runs(
        self,
        runs: Sequence[RunInput],
        *,
        max_points: Optional[int] = None,
        metrics: Optional[Iterable[Union[str, Metric]]] = None,
        max_workers: Optional[int] = None,
    ) -> List[RunStats]:
        """
        Process several runs concurrently, returning results in input order.

        The pool is capped at ``min(cpu_count, len(runs), max_run_workers)``.
        """
        if not runs:
            return []
        metric_list = None if metrics is None else list(metrics)
        workers = max_workers or min(os.cpu_count() or 4, len(runs), self._config.max_run_workers)
        workers = max(1, workers)
        if workers == 1:
            return [
                self.process_run(run, index, max_points, metric_list)
                for index, run in enumerate(runs)
            ]
        with self._executor_factory(workers) as pool:
            futures = [
                pool.submit(self.process_run, run, index, max_points, metric_list)
                for index, run in enumerate(runs)
            ]
            return [future.result() for future in futures]


def process_run(
    raw_run: RunInput,
    run_index: int = 0,
    max_points: Optional[int] = None,
    metrics: Optional[Iterable[Union[str, Metric]]] = None,
    *,
    config: EngineConfig = CURRENT,
) -> RunStats:
    """Convenience wrapper around a one-off :class:`RunStatsOrchestrator`."""
    return RunStatsOrchestrator(config).process_run(raw_run, run_index, max_points, metrics)


__all__ = [
    "ExecutorFactory",
    "RunStatsOrchestrator",
    "build_run_series",
    "compute_method_stats",
    "process_run",
]
