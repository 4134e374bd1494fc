"""Integer helpers used when choosing signature parameters."""

from __future__ import annotations

import math


def long_ln2(v: int) -> int:
    """Return floor(log2(v)), or 0 for v == 0."""
    if v < 0:
        raise ValueError(f"long_ln2 needs a non-negative value, got {v}")
    return max(v.bit_length() - 1, 0)


def long_sqrt(v: int) -> int:
    """Return the integer square root of v, rounded down."""
    if v < 0:
        raise ValueError(f"long_sqrt needs a non-negative value, got {v}")
    return math.isqrt(v)