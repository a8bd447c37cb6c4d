import logging
from concurrent.futures import Executor, Future

import numpy as np
import pytest

from benchstats.analysis.fps import fps_stats_from_frametime
from benchstats.analysis.metric_stats import MetricStats, compute_metric_stats
from benchstats.analysis.percentile import CalculationMethod
from benchstats.config.runtime import CURRENT, EngineConfig
from benchstats.core.metrics import ALL_METRICS, Metric
from benchstats.core.models import RawRun, RunSpecs
from benchstats.core.orchestrator import RunStatsOrchestrator, process_run

LINEAR = CalculationMethod.LINEAR_INTERPOLATION
FLOOR = CalculationMethod.THRESHOLD_FLOOR


def _sample_run(n: int = 3000, seed: int = 0, label: str = "") -> RawRun:
    rng = np.random.default_rng(seed)
    frametimes = rng.uniform(6.0, 20.0, n)
    return RawRun(
        label=label,
        specs=RunSpecs(os="Linux", cpu="Ryzen", gpu="Radeon", ram="32 GB"),
        data={
            Metric.FRAME_TIME: frametimes,
            Metric.FPS: 1000.0 / frametimes,
            Metric.CPU_LOAD: rng.uniform(10.0, 90.0, n),
            Metric.GPU_TEMP: rng.uniform(50.0, 80.0, n),
        },
    )


class _FailingExecutor(Executor):
    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        future.set_exception(RuntimeError("worker crashed"))
        return future


def test_every_metric_has_stats_under_both_methods() -> None:
    result = process_run(_sample_run())
    expected = {metric.value for metric in ALL_METRICS}
    assert set(result.stats) == expected
    assert set(result.stats_alt_method) == expected
    assert set(result.series) == expected
    assert result.method is LINEAR
    assert result.alt_method is FLOOR


def test_primary_and_alternate_stats_match_direct_computation() -> None:
    run = _sample_run()
    result = process_run(run)
    cpu = run.get(Metric.CPU_LOAD)
    assert result.stats["CPULoad"] == compute_metric_stats(cpu, LINEAR)
    assert result.stats_alt_method["CPULoad"] == compute_metric_stats(cpu, FLOOR)
    assert result.stats_for(FLOOR) is result.stats_alt_method


def test_fps_stats_are_derived_from_frametime() -> None:
    run = _sample_run()
    result = process_run(run)
    frametimes = run.get(Metric.FRAME_TIME)
    assert result.stats["FPS"] == fps_stats_from_frametime(frametimes, LINEAR)
    assert result.stats["FPS"].avg == pytest.approx(1000.0 / np.mean(frametimes))


def test_missing_metrics_get_zero_stats_and_empty_series() -> None:
    result = process_run(_sample_run())
    assert result.stats["SwapUsed"] == MetricStats.empty()
    assert result.stats_alt_method["SwapUsed"] == MetricStats.empty()
    assert result.series["SwapUsed"] == ()


def test_fps_falls_back_to_raw_samples_with_warning(caplog) -> None:
    run = RawRun(label="fps-only", data={Metric.FPS: [60.0] * 100})
    with caplog.at_level(logging.WARNING, logger="benchstats.core.orchestrator"):
        result = process_run(run, metrics=["FPS"])
    assert result.stats["FPS"].avg == pytest.approx(60.0)
    assert "no frametime data" in caplog.text


def test_series_are_downsampled_to_max_points() -> None:
    result = process_run(_sample_run(5000))
    assert len(result.series["FrameTime"]) == CURRENT.max_points
    assert len(process_run(_sample_run(5000), max_points=300).series["CPULoad"]) == 300
    assert result.series["FrameTime"][0][0] == 0
    assert result.series["FrameTime"][-1][0] == 4999


def test_default_method_follows_config() -> None:
    orchestrator = RunStatsOrchestrator(EngineConfig(default_method=FLOOR))
    result = orchestrator.process_run(_sample_run())
    assert result.method is FLOOR
    assert result.stats["CPULoad"].p01 == compute_metric_stats(_sample_run().get(Metric.CPU_LOAD), FLOOR).p01


def test_parallel_and_sequential_results_agree() -> None:
    run = _sample_run()
    parallel = RunStatsOrchestrator(EngineConfig(parallel=True)).process_run(run)
    sequential = RunStatsOrchestrator(EngineConfig(parallel=False)).process_run(run)
    assert dict(parallel.stats) == dict(sequential.stats)
    assert dict(parallel.stats_alt_method) == dict(sequential.stats_alt_method)
    assert dict(parallel.series) == dict(sequential.series)


def test_failed_worker_is_recomputed_inline(caplog) -> None:
    run = _sample_run(500)
    orchestrator = RunStatsOrchestrator(executor_factory=lambda workers: _FailingExecutor())
    with caplog.at_level(logging.ERROR, logger="benchstats.core.orchestrator"):
        result = orchestrator.process_run(run)
    expected = RunStatsOrchestrator(EngineConfig(parallel=False)).process_run(run)
    assert dict(result.stats) == dict(expected.stats)
    assert dict(result.stats_alt_method) == dict(expected.stats_alt_method)
    assert "recomputing" in caplog.text


def test_metric_subset_and_mapping_input(caplog) -> None:
    result = process_run({"FrameTime": [16.0, 17.0, 15.0], "cpu_load": [40.0, 50.0, 60.0]}, metrics=["FrameTime", "CPULoad"])
    assert set(result.stats) == {"FrameTime", "CPULoad"}
    with caplog.at_level(logging.WARNING, logger="benchstats.core.orchestrator"):
        result = process_run({"FrameTime": [16.0]}, metrics=["FrameTime", "Bogus"])
    assert set(result.stats) == {"FrameTime"}
    assert "Bogus" in caplog.text


def test_results_are_immutable() -> None:
    result = process_run(_sample_run(200))
    with pytest.raises(TypeError):
        result.stats["FPS"] = MetricStats.empty()
    with pytest.raises(TypeError):
        result.series["FPS"] = ()
    with pytest.raises(AttributeError):
        result.run_index = 3


def test_input_samples_are_not_modified() -> None:
    run = _sample_run(400)
    before = {metric: np.array(values, copy=True) for metric, values in run.data.items()}
    process_run(run)
    for metric, values in run.data.items():
        np.testing.assert_array_equal(values, before[metric])


def test_process_runs_preserves_order() -> None:
    runs = [_sample_run(300, seed=i, label=f"run-{i}") for i in range(5)]
    results = RunStatsOrchestrator().process_runs(runs, max_workers=3)
    assert [r.label for r in results] == [f"run-{i}" for i in range(5)]
    assert [r.run_index for r in results] == list(range(5))
    assert RunStatsOrchestrator().process_runs([]) == []


def test_to_dict_uses_chart_key_names() -> None:
    payload = process_run(_sample_run(100), run_index=1).to_dict()
    assert payload["label"] == "Run 2"
    assert payload["runIndex"] == 1
    assert payload["specGPU"] == "Radeon"
    assert payload["totalDataPoints"] == 100
    assert payload["method"] == "linear-interpolation"
    assert payload["altMethod"] == "threshold-floor"
    assert payload["series"]["FrameTime"][0][0] == 0
    assert "specLinuxKernel" not in payload


def test_non_numeric_samples_raise_without_worker_fallback(caplog) -> None:
    run = RawRun(data={Metric.FRAME_TIME: [16.0, 17.0], Metric.CPU_LOAD: ["busy", "idle"]})
    with caplog.at_level(logging.DEBUG, logger="benchstats.core.orchestrator"):
        with pytest.raises(ValueError, match="CPULoad"):
            process_run(run)
    assert "recomputing" not in caplog.text


def test_too_small_max_points_is_rejected_up_front(caplog) -> None:
    run = RawRun(data={Metric.CPU_LOAD: range(10)})
    with caplog.at_level(logging.DEBUG, logger="benchstats.core.orchestrator"):
        with pytest.raises(ValueError, match="max_points"):
            process_run(run, max_points=1)
    assert "recomputing" not in caplog.text


def test_non_array_samples_are_accepted() -> None:
    result = process_run(RawRun(data={Metric.CPU_LOAD: range(10)}), metrics=["CPULoad"])
    assert result.stats["CPULoad"].max == 9.0
    assert result.series["CPULoad"][-1] == (9, 9.0)
