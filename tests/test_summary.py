import pytest

from benchstats.core.metrics import Metric
from benchstats.core.models import RawRun, RunSpecs
from benchstats.core.orchestrator import process_run
from benchstats.core.summary import resample_series_values, round2, run_summary


@pytest.mark.parametrize(
    "value, expected",
    [(1.234, 1.23), (0.125, 0.13), (-0.125, -0.13), (-1.5, -1.5), (0.004, 0.0), (-0.004, 0.0), (59.999, 60.0)],
)
def test_round2(value, expected) -> None:
    assert round2(value) == expected


def test_resample_keeps_first_and_last() -> None:
    series = [(i, float(i)) for i in range(101)]
    assert resample_series_values(series, 5) == [0.0, 25.0, 50.0, 75.0, 100.0]
    assert resample_series_values(series[:3], 10) == [0.0, 1.0, 2.0]
    assert resample_series_values(series, 0) == []


def _run():
    raw = RawRun(
        label="bench",
        specs=RunSpecs(os="Linux", linux_kernel="6.9"),
        data={Metric.FRAME_TIME: [10.0, 20.0, 10.0, 20.0], Metric.CPU_LOAD: [33.333, 66.667, 50.0, 50.0]},
    )
    return process_run(raw)


def test_summary_uses_snake_case_and_skips_empty_metrics() -> None:
    summary = run_summary(_run())
    assert summary["label"] == "bench"
    assert summary["spec_linux_kernel"] == "6.9"
    assert set(summary["metrics"]) == {"fps", "frame_time", "cpu_load"}
    fps = summary["metrics"]["fps"]
    assert fps["avg"] == pytest.approx(66.67)
    assert fps["count"] == 4
    assert {"min", "max", "median", "p01", "p97", "std_dev", "variance"} <= set(fps)
    assert "data" not in fps
    assert "downsampled_to" not in summary


def test_summary_with_data_points() -> None:
    summary = run_summary(_run(), max_points=2)
    assert summary["downsampled_to"] == 2
    assert summary["metrics"]["frame_time"]["data"] == [10.0, 20.0]
    assert summary["metrics"]["cpu_load"]["data"] == [33.33, 50.0]
    # FPS has stats from frametimes but no raw samples to plot.
    assert "data" not in summary["metrics"]["fps"]
