"""Miscellaneous development helpers.

This package holds opt-in instrumentation such as :func:`debug.time_block`,
which logs elapsed time for a block when ``BENCHSTATS_DEBUG`` is set.
"""
