"""Data input helpers for benchmark capture logs.

Utility modules here keep disk-level concerns isolated from the engine:
- :mod:`benchmark_csv` parses MangoHud CSV and Afterburner HML captures into
  :class:`~benchstats.core.models.RawRun` objects.
"""

from .benchmark_csv import FileType, detect_file_type, parse_benchmark_lines, read_benchmark_file, read_benchmark_files

__all__ = [
    "FileType",
    "detect_file_type",
    "parse_benchmark_lines",
    "read_benchmark_file",
    "read_benchmark_files",
]
