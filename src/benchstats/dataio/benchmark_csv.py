"""Loaders for benchmark capture logs (MangoHud CSV, Afterburner HML).

Both formats are line-oriented CSV with a preamble:

* MangoHud: ``os,cpu,gpu,ram,kernel,driver,cpuscheduler`` / spec values /
  column header / data rows.
* Afterburner: ``..., Hardware monitoring log v...`` / spec line / column
  header / one description line per column / data rows.

Cells that do not parse as floats are skipped; only the columns mapped in
:data:`COLUMN_ALIASES` are kept.
"""

from __future__ import annotations

import enum
import logging
import math
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Sequence

import numpy as np

from ..core.metrics import Metric
from ..core.models import RawRun, RunSpecs

logger = logging.getLogger(__name__)

MAX_DATA_LINES = 100_000
MAX_STRING_LENGTH = 100
PRECISION_FACTOR = 100_000
BYTES_PER_KB = 1024

MANGOHUD_PREAMBLE = "os,cpu,gpu,ram,kernel,driver,cpuscheduler"
AFTERBURNER_MARKER = ", Hardware monitoring log v"


class FileType(enum.Enum):
    UNKNOWN = "unknown"
    MANGOHUD = "mangohud"
    AFTERBURNER = "afterburner"

    @property
    def suffix(self) -> str:
        return {FileType.MANGOHUD: ".csv", FileType.AFTERBURNER: ".hml"}.get(self, "")


COLUMN_ALIASES: Dict[str, Metric] = {
    "fps": Metric.FPS,
    "Framerate": Metric.FPS,
    "frametime": Metric.FRAME_TIME,
    "Frametime": Metric.FRAME_TIME,
    "cpu_load": Metric.CPU_LOAD,
    "CPU usage": Metric.CPU_LOAD,
    "gpu_load": Metric.GPU_LOAD,
    "GPU usage": Metric.GPU_LOAD,
    "cpu_temp": Metric.CPU_TEMP,
    "CPU temperature": Metric.CPU_TEMP,
    "cpu_power": Metric.CPU_POWER,
    "gpu_temp": Metric.GPU_TEMP,
    "GPU temperature": Metric.GPU_TEMP,
    "gpu_core_clock": Metric.GPU_CORE_CLOCK,
    "Core clock": Metric.GPU_CORE_CLOCK,
    "gpu_mem_clock": Metric.GPU_MEM_CLOCK,
    "Memory clock": Metric.GPU_MEM_CLOCK,
    "gpu_vram_used": Metric.GPU_VRAM_USED,
    "Memory usage": Metric.GPU_VRAM_USED,
    "gpu_power": Metric.GPU_POWER,
    "Power": Metric.GPU_POWER,
    "ram_used": Metric.RAM_USED,
    "RAM usage": Metric.RAM_USED,
    "swap_used": Metric.SWAP_USED,
}


def detect_file_type(first_line: str) -> FileType:
    """Identify the capture format from its first line."""
    line = first_line.strip().rstrip(", ").strip()
    if line == MANGOHUD_PREAMBLE:
        return FileType.MANGOHUD
    if AFTERBURNER_MARKER in line:
        return FileType.AFTERBURNER
    return FileType.UNKNOWN


def truncate_string(value: str) -> str:
    if len(value) > MAX_STRING_LENGTH:
        return value[:MAX_STRING_LENGTH] + "..."
    return value


def humanize_bytes(size: int) -> str:
    """Format ``size`` with decimal units (``17 GB``, ``8.6 GB``, ``512 B``)."""
    if size < 10:
        return f"{size} B"
    units = ("B", "kB", "MB", "GB", "TB", "PB", "EB")
    exp = min(int(math.floor(math.log(size) / math.log(1000))), len(units) - 1)
    val = math.floor(size / 1000**exp * 10 + 0.5) / 10
    fmt = "{:.1f} {}" if val < 10 else "{:.0f} {}"
    return fmt.format(val, units[exp])


def _parse_specs(line: str, file_type: FileType) -> RunSpecs:
    fields = [field.strip() for field in line.split(",")]
    specs = RunSpecs()
    if file_type is FileType.AFTERBURNER:
        if len(fields) < 3:
            raise ValueError("invalid specs line format")
        specs.os = "Windows"
        specs.gpu = truncate_string(fields[2])
        return specs

    def at(i: int) -> str:
        return truncate_string(fields[i]) if i < len(fields) else ""

    specs.os = at(0)
    specs.cpu = at(1)
    specs.gpu = at(2)
    specs.ram = at(3)
    if len(fields) > 3 and fields[3].isdigit():
        specs.ram = humanize_bytes(int(fields[3]) * BYTES_PER_KB)
    specs.linux_kernel = at(4)
    specs.linux_scheduler = at(6)
    return specs


def _round_precision(value: float) -> float:
    scaled = value * PRECISION_FACTOR
    return math.copysign(math.floor(abs(scaled) + 0.5), scaled) / PRECISION_FACTOR


def _afterburner_value(metric: Metric, value: float) -> float:
    # Afterburner reports the effective memory clock and sizes in MB.
    if metric is Metric.GPU_MEM_CLOCK:
        return _round_precision(value / 2)
    if metric in (Metric.GPU_VRAM_USED, Metric.RAM_USED):
        return _round_precision(value / BYTES_PER_KB)
    return value


def parse_benchmark_lines(lines: Iterable[str], label: str = "") -> RawRun:
    """
    Parse an iterable of text lines into a :class:`RawRun`.

    Raises
    ------
    ValueError
        Unknown format, truncated preamble, more than
        :data:`MAX_DATA_LINES` data rows, or no usable data columns.
    """
    it: Iterator[str] = (line.rstrip("\r\n") for line in lines)

    def next_line(what: str) -> str:
        try:
            return next(it)
        except StopIteration:
            raise ValueError(f"unexpected end of file while reading {what}") from None

    first = next_line("first line")
    file_type = detect_file_type(first)
    if file_type is FileType.UNKNOWN:
        raise ValueError(
            f"unsupported file format (expected MangoHud CSV or Afterburner HML, got: '{first[:50]}...')"
        )

    specs = _parse_specs(next_line("specs line"), file_type)
    header = [name.strip() for name in next_line("header line").split(",")]

    if file_type is FileType.AFTERBURNER:
        for _ in range(len(header)):
            next_line("afterburner header lines")

    columns: Dict[int, Metric] = {
        idx: COLUMN_ALIASES[name] for idx, name in enumerate(header) if name in COLUMN_ALIASES
    }
    collected: Dict[Metric, List[float]] = {metric: [] for metric in set(columns.values())}
    is_afterburner = file_type is FileType.AFTERBURNER

    count = 0
    for line in it:
        for idx, cell in enumerate(line.split(",")):
            metric = columns.get(idx)
            if metric is None:
                continue
            try:
                value = float(cell.strip())
            except ValueError:
                continue
            if is_afterburner:
                value = _afterburner_value(metric, value)
            collected[metric].append(value)
        count += 1
        if count == MAX_DATA_LINES:
            raise ValueError(f"file cannot have more than {MAX_DATA_LINES} data lines")

    data = {metric: np.asarray(values, dtype=float) for metric, values in collected.items() if values}
    if not data:
        raise ValueError("no valid benchmark data found in file (all data columns are empty)")

    logger.debug("Parsed %s run '%s': %d rows, metrics=%s", file_type.value, label, count, sorted(m.value for m in data))
    return RawRun(label=label, specs=specs, data=data)


def read_benchmark_file(path: str | Path) -> RawRun:
    """Load one capture file; the label is the file name without its suffix."""
    file_path = Path(path)
    with file_path.open("r", encoding="utf-8", errors="replace") as fh:
        first = fh.readline()
        file_type = detect_file_type(first)
        label = file_path.name
        if file_type.suffix and label.endswith(file_type.suffix):
            label = label[: -len(file_type.suffix)]
        try:
            return parse_benchmark_lines([first, *fh], label=label)
        except ValueError as exc:
            raise ValueError(f"file '{file_path.name}': {exc}") from exc


def read_benchmark_files(paths: Sequence[str | Path]) -> List[RawRun]:
    """Load several capture files, stopping at the first invalid one."""
    return [read_benchmark_file(path) for path in paths]


__all__ = [
    "COLUMN_ALIASES",
    "FileType",
    "MAX_DATA_LINES",
    "detect_file_type",
    "humanize_bytes",
    "parse_benchmark_lines",
    "read_benchmark_file",
    "read_benchmark_files",
    "truncate_string",
]
