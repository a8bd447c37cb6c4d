"""Runtime configuration for the statistics engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ..analysis.density import (
    DEFAULT_HIGH_PERCENTILE,
    DEFAULT_LOW_PERCENTILE,
    LEGACY_MAX_BINS,
    DensitySettings,
)
from ..analysis.downsample import DEFAULT_MAX_POINTS
from ..analysis.percentile import CalculationMethod

logger = logging.getLogger(__name__)

ENGINE_SECTION = "engine"

# Upper bound for the run-level worker pool.
DEFAULT_MAX_RUN_WORKERS = 6


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """
    Immutable knobs shared by every run processed by one orchestrator.

    The defaults match the current deployment: 1st-97th percentile trim with
    no bucket cap. :data:`LEGACY` keeps the older 100-bucket histograms.
    """

    max_points: int = DEFAULT_MAX_POINTS
    default_method: CalculationMethod = CalculationMethod.LINEAR_INTERPOLATION
    density_low_pct: float = DEFAULT_LOW_PERCENTILE
    density_high_pct: float = DEFAULT_HIGH_PERCENTILE
    density_max_bins: Optional[int] = None

    # Dispatch the two method passes of a run to separate threads.
    parallel: bool = True
    max_run_workers: int = DEFAULT_MAX_RUN_WORKERS

    @property
    def density(self) -> DensitySettings:
        return DensitySettings(
            low_pct=self.density_low_pct,
            high_pct=self.density_high_pct,
            max_bins=self.density_max_bins,
        )

    def sanitized(self) -> EngineConfig:
        """Return a copy with derived limits applied."""
        low = min(100.0, max(0.0, float(self.density_low_pct)))
        high = min(100.0, max(low, float(self.density_high_pct)))
        max_bins = self.density_max_bins
        if max_bins is not None:
            max_bins = max(1, int(max_bins))
        return EngineConfig(
            max_points=max(3, int(self.max_points)),
            default_method=CalculationMethod.parse(self.default_method),
            density_low_pct=low,
            density_high_pct=high,
            density_max_bins=max_bins,
            parallel=bool(self.parallel),
            max_run_workers=max(1, int(self.max_run_workers)),
        )


CURRENT = EngineConfig()
LEGACY = EngineConfig(density_max_bins=LEGACY_MAX_BINS)

PRESETS: Mapping[str, EngineConfig] = {
    "current": CURRENT,
    "legacy": LEGACY,
}


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`EngineConfig`."""
    return {f.name for f in fields(EngineConfig)}


def _flatten_engine_section(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge an ``engine:`` block over the top-level keys of ``data``."""
    flat = {key: value for key, value in data.items() if key != ENGINE_SECTION}
    section = data.get(ENGINE_SECTION)
    if isinstance(section, Mapping):
        flat.update(section)
    elif section is not None:
        raise ValueError(f"'{ENGINE_SECTION}' must be a mapping, got {type(section).__name__}")
    return flat


def config_from_mapping(data: Mapping[str, Any] | None) -> EngineConfig:
    """
    Build :class:`EngineConfig` from ``data`` (ignoring unknown keys).

    Supported shape::

        engine:
          preset: legacy
          max_points: 1500
          default_method: mangohud
          density_high_pct: 99
    """
    if not data:
        return CURRENT
    flat = _flatten_engine_section(data)

    preset_name = str(flat.pop("preset", "current")).strip().lower()
    if preset_name not in PRESETS:
        raise ValueError(f"Unknown preset '{preset_name}', expected one of {sorted(PRESETS)}")

    known = _recognized_fields()
    ignored = sorted(str(key) for key in flat if key not in known)
    if ignored:
        logger.debug("Ignoring unrecognised engine settings: %s", ", ".join(ignored))

    overrides = {key: value for key, value in flat.items() if key in known}
    if "default_method" in overrides:
        overrides["default_method"] = CalculationMethod.parse(overrides["default_method"])
    return replace(PRESETS[preset_name], **overrides).sanitized()


def load_config(path: str | Path | None) -> EngineConfig:
    """
    Read a YAML engine descriptor and return the resulting config.

    ``None`` or a path that does not exist yields :data:`CURRENT`. Malformed
    YAML and documents that are not a mapping raise ``ValueError``.
    """
    if path is None:
        return CURRENT
    cfg_path = Path(path)
    if not cfg_path.is_file():
        logger.debug("No engine config at %s; using defaults", cfg_path)
        return CURRENT
    try:
        document = yaml.safe_load(cfg_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {cfg_path}: {exc}") from exc
    if document is None:
        return CURRENT
    if not isinstance(document, Mapping):
        raise ValueError(f"{cfg_path} must contain a mapping, got {type(document).__name__}")
    return config_from_mapping(document)


__all__ = [
    "CURRENT",
    "DEFAULT_MAX_RUN_WORKERS",
    "EngineConfig",
    "LEGACY",
    "PRESETS",
    "config_from_mapping",
    "load_config",
]
