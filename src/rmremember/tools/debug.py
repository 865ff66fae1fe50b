"""Minimal helpers for opt-in timing of slow device operations."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)

DEBUG_RMREMEMBER = os.getenv("RMREMEMBER_DEBUG", "").lower() in {"1", "true", "yes", "on"}


def debug_enabled() -> bool:
    """Return True when lightweight instrumentation should run."""
    return DEBUG_RMREMEMBER


@contextmanager
def time_block(label: str) -> Iterator[None]:
    """
    Log the elapsed time of the block when debugging is enabled.

    The overhead is a couple of perf_counter() calls when disabled.
    """
    if not DEBUG_RMREMEMBER:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.debug("%s took %.3f ms", label, elapsed_ms)
