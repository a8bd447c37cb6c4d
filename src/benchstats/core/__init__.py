"""Run-level processing: metric names, run models, and the orchestrator.

This package sits between ingestion and the rendering layer. It resolves the
tracked metrics of a run, dispatches the statistics calculators under both
percentile conventions, downsamples every series, and packages the result as
an immutable :class:`RunStats` snapshot.
"""

from .metrics import ALL_METRICS, Metric
from .models import RawRun, RunSpecs, RunStats
from .orchestrator import RunStatsOrchestrator, process_run
from .summary import run_summary

__all__ = [
    "ALL_METRICS",
    "Metric",
    "RawRun",
    "RunSpecs",
    "RunStats",
    "RunStatsOrchestrator",
    "process_run",
    "run_summary",
]
