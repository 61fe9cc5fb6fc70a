"""Heuristic confidence labelling for generated answers."""

from __future__ import annotations

from enum import Enum


class ConfidenceLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    VERY_LOW = "VERY_LOW"


# (minimum chunk count, answer length must exceed, label); evaluated in order.
_RULES: tuple[tuple[int, int, ConfidenceLevel], ...] = (
    (4, 300, ConfidenceLevel.HIGH),
    (2, 150, ConfidenceLevel.MEDIUM),
    (1, 50, ConfidenceLevel.LOW),
)


def score_confidence(chunk_count: int, answer_length: int) -> ConfidenceLevel:
    """Derive a coarse label from the retrieved chunk count and answer length.

    This is a placeholder policy, not a calibrated estimate of correctness.
    """
    for min_chunks, min_length, level in _RULES:
        if chunk_count >= min_chunks and answer_length > min_length:
            return level
    return ConfidenceLevel.VERY_LOW
