import logging

from benchstats.core.models import RawRun
from benchstats.core.metrics import Metric
from benchstats.core.orchestrator import process_run
from benchstats.tools.debug import debug_enabled, time_block


def test_time_block_is_silent_without_flag(monkeypatch) -> None:
    monkeypatch.delenv("BENCHSTATS_DEBUG", raising=False)
    calls = []
    with time_block("noop", emitter=lambda *args: calls.append(args)):
        pass
    assert not debug_enabled()
    assert calls == []


def test_time_block_reports_elapsed_time(monkeypatch) -> None:
    monkeypatch.setenv("BENCHSTATS_DEBUG", "yes")
    calls = []
    with time_block("step", emitter=lambda *args: calls.append(args)):
        pass
    assert debug_enabled()
    assert len(calls) == 1
    fmt, label, elapsed = calls[0]
    assert fmt == "%s took %.3f ms"
    assert label == "step"
    assert elapsed >= 0.0


def test_orchestrator_logs_run_timing(monkeypatch, caplog) -> None:
    monkeypatch.setenv("BENCHSTATS_DEBUG", "1")
    with caplog.at_level(logging.DEBUG, logger="benchstats.core.orchestrator"):
        process_run(RawRun(data={Metric.FRAME_TIME: [16.0, 17.0]}), run_index=4)
    assert "process_run[4] took" in caplog.text
