"""Opt-in timing instrumentation for the processing pipeline.

Set ``BENCHSTATS_DEBUG=1`` to have :func:`time_block` report how long each
wrapped step takes. Reports go through :mod:`logging`, so the relevant
``benchstats`` logger must also be enabled at DEBUG level to show them.
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Callable, Iterator

ENV_FLAG = "BENCHSTATS_DEBUG"
_TRUTHY = frozenset({"1", "true", "yes", "on"})

logger = logging.getLogger(__name__)


def debug_enabled() -> bool:
    """Return True when ``BENCHSTATS_DEBUG`` holds a truthy value."""
    return os.getenv(ENV_FLAG, "").strip().lower() in _TRUTHY


@contextmanager
def time_block(label: str, *, emitter: Callable[..., None] | None = None) -> Iterator[None]:
    """
    Report the elapsed wall time of the ``with`` body when debugging is on.

    ``emitter`` is called logging-style (``emitter(fmt, *args)``) and
    defaults to this module's ``logger.debug``.
    """
    if not debug_enabled():
        yield
        return

    emit = emitter or logger.debug
    start = time.perf_counter()
    try:
        yield
    finally:
        emit("%s took %.3f ms", label, (time.perf_counter() - start) * 1000.0)
