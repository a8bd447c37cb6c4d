"""Configuration objects and helpers for benchstats.

This package loads optional YAML descriptors that pin one deployment's
choices: downsample budget, default percentile convention, and the density
trim/bucket settings. The resulting frozen :class:`EngineConfig` (see
:mod:`runtime`) is handed to the orchestrator at construction.
"""

from .runtime import CURRENT, LEGACY, EngineConfig, config_from_mapping, load_config

__all__ = ["CURRENT", "LEGACY", "EngineConfig", "config_from_mapping", "load_config"]
