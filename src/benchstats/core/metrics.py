"""The closed set of telemetry metrics tracked per benchmark run."""

from __future__ import annotations

import enum
from typing import Dict, Tuple


class Metric(str, enum.Enum):
    """Metric names as the rendering layer keys them."""

    FPS = "FPS"
    FRAME_TIME = "FrameTime"
    CPU_LOAD = "CPULoad"
    CPU_TEMP = "CPUTemp"
    CPU_POWER = "CPUPower"
    GPU_LOAD = "GPULoad"
    GPU_TEMP = "GPUTemp"
    GPU_CORE_CLOCK = "GPUCoreClock"
    GPU_MEM_CLOCK = "GPUMemClock"
    GPU_VRAM_USED = "GPUVRAMUsed"
    GPU_POWER = "GPUPower"
    RAM_USED = "RAMUsed"
    SWAP_USED = "SwapUsed"

    @property
    def snake_key(self) -> str:
        """Lower-case key used by the summary export (``frame_time`` ...)."""
        return _SNAKE_KEYS[self]

    @classmethod
    def parse(cls, name: "str | Metric") -> "Metric":
        """Resolve ``name`` from its chart key, snake key or ``Data`` field name."""
        if isinstance(name, cls):
            return name
        raw = str(name).strip()
        if raw.startswith("Data"):
            raw = raw[len("Data"):]
        for member in cls:
            if raw == member.value or raw.lower() == member.snake_key:
                return member
        raise ValueError(f"Unknown metric '{name}'")


_SNAKE_KEYS: Dict[Metric, str] = {
    Metric.FPS: "fps",
    Metric.FRAME_TIME: "frame_time",
    Metric.CPU_LOAD: "cpu_load",
    Metric.CPU_TEMP: "cpu_temp",
    Metric.CPU_POWER: "cpu_power",
    Metric.GPU_LOAD: "gpu_load",
    Metric.GPU_TEMP: "gpu_temp",
    Metric.GPU_CORE_CLOCK: "gpu_core_clock",
    Metric.GPU_MEM_CLOCK: "gpu_mem_clock",
    Metric.GPU_VRAM_USED: "gpu_vram_used",
    Metric.GPU_POWER: "gpu_power",
    Metric.RAM_USED: "ram_used",
    Metric.SWAP_USED: "swap_used",
}

# Order in which metrics are processed and emitted.
ALL_METRICS: Tuple[Metric, ...] = (
    Metric.FRAME_TIME,
    Metric.CPU_LOAD,
    Metric.GPU_LOAD,
    Metric.CPU_TEMP,
    Metric.CPU_POWER,
    Metric.GPU_TEMP,
    Metric.GPU_CORE_CLOCK,
    Metric.GPU_MEM_CLOCK,
    Metric.GPU_VRAM_USED,
    Metric.GPU_POWER,
    Metric.RAM_USED,
    Metric.SWAP_USED,
    Metric.FPS,
)

__all__ = ["ALL_METRICS", "Metric"]
