"""Time-related helper utilities."""

from __future__ import annotations

import time


def elapsed_ms(start: float) -> int:
    """Whole milliseconds elapsed since ``start``, a ``time.perf_counter()`` reading."""
    return int((time.perf_counter() - start) * 1000)
