"""
Normalization Utilities

Pure numeric helpers shared by every scorer. None of these raise:
non-numeric or non-finite input degrades to a bounded value.

All documented roundings use round_half_up(), which rounds .5 away
from zero for positives (the same as a browser's Math.round), not
Python's banker's rounding.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence


# ============================================================
# COERCION
# ============================================================

def to_float(x, default: float = 0.0) -> float:
    """Coerce to float; None, strings that don't parse, and NaN give default."""
    if isinstance(x, bool):
        return 1.0 if x else 0.0
    try:
        v = float(x)
    except (TypeError, ValueError):
        return default
    if math.isnan(v):
        return default
    return v


def to_optional_float(x) -> Optional[float]:
    """Like to_float() but keeps absence: None for missing or non-finite."""
    if x is None or isinstance(x, bool):
        return None
    try:
        v = float(x)
    except (TypeError, ValueError):
        return None
    return v if math.isfinite(v) else None


def safe_count(x) -> float:
    """Non-negative count. Negative, missing and non-finite become 0."""
    v = to_float(x)
    if not math.isfinite(v):
        return 0.0
    return max(0.0, v)


def safe_int(x) -> int:
    """Floored, non-negative integer."""
    return int(math.floor(safe_count(x)))


# ============================================================
# CLAMPING & DIVISION
# ============================================================

def clamp(x, lo: float, hi: float) -> float:
    """Clamp to [lo, hi]. +inf maps to hi; -inf, NaN and junk map to lo."""
    v = to_float(x, default=lo)
    if v == math.inf:
        return hi
    if v == -math.inf:
        return lo
    return min(hi, max(lo, v))


def clamp01(x) -> float:
    return clamp(x, 0.0, 1.0)


def clamp0to5(x) -> float:
    return clamp(x, 0.0, 5.0)


def safe_div(a: float, b: float) -> float:
    """a / max(1, b). The denominator never drops below one."""
    return to_float(a) / max(1.0, to_float(b))


# ============================================================
# ROUNDING
# ============================================================

def round_half_up(x: float, ndigits: int = 0) -> float:
    """Round half toward +inf at the given precision."""
    v = to_float(x)
    if not math.isfinite(v):
        return 0.0
    factor = 10 ** ndigits
    return math.floor(v * factor + 0.5) / factor


def round2(x: float) -> float:
    return round_half_up(x, 2)


def round3(x: float) -> float:
    return round_half_up(x, 3)


# ============================================================
# SHAPE FUNCTIONS
# ============================================================

def entropy01(counts: Sequence[float]) -> float:
    """
    Shannon entropy of a count vector, normalized to [0, 1] by the
    maximum entropy over its non-empty buckets.

    0 when the vector sums to <= 0 or holds all its mass in one bucket.
    1 when mass is spread evenly over every non-empty bucket, so
    [3, 3, 0, 0] scores the same as [3, 3].
    """
    positive = [c for c in (safe_count(x) for x in counts) if c > 0]
    if len(positive) < 2:
        return 0.0
    total = sum(positive)
    h = 0.0
    for c in positive:
        p = c / total
        h -= p * math.log(p)
    return clamp01(h / math.log(len(positive)))


def peak01(x, target: float, width: float) -> float:
    """Triangular peak: 1 at target, falling linearly to 0 at target +/- width."""
    v = to_optional_float(x)
    if v is None or width <= 0:
        return 0.0
    return clamp01(1.0 - abs(v - target) / width)


def sat(x, k: float) -> float:
    """Saturating map x / (x + k) for x >= 0. Monotone, approaches 1."""
    v = to_float(x)
    if v == math.inf:
        return 1.0
    v = max(0.0, v) if math.isfinite(v) else 0.0
    if v + k <= 0:
        return 0.0
    return v / (v + k)


def sigmoid(z: float, z_clip: float = 20.0) -> float:
    zc = clamp(z, -z_clip, z_clip)
    return 1.0 / (1.0 + math.exp(-zc))


# ============================================================
# STATISTICS
# ============================================================

def mean(xs: Iterable[float]) -> float:
    vals = [to_float(x) for x in xs]
    return sum(vals) / len(vals) if vals else 0.0


def std(xs: Iterable[float]) -> float:
    """Population standard deviation."""
    vals = [to_float(x) for x in xs]
    if not vals:
        return 0.0
    m = sum(vals) / len(vals)
    return math.sqrt(sum((v - m) ** 2 for v in vals) / len(vals))


def sample_std(xs: Iterable[float]) -> float:
    """Sample (n - 1) standard deviation; 0 for fewer than two values."""
    vals = [to_float(x) for x in xs]
    if len(vals) < 2:
        return 0.0
    m = sum(vals) / len(vals)
    return math.sqrt(sum((v - m) ** 2 for v in vals) / (len(vals) - 1))


def cv(xs: Iterable[float]) -> float:
    """Coefficient of variation (sample std / mean); 0 when mean <= 0."""
    vals = [to_float(x) for x in xs]
    m = mean(vals)
    if m <= 0:
        return 0.0
    return sample_std(vals) / m


def average(*values: Optional[float]) -> Optional[float]:
    """Mean of the non-missing values, or None when all are missing."""
    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum(present) / len(present)


def weighted_average(terms: Iterable[tuple[Optional[float], float]]) -> Optional[float]:
    """Weighted mean that skips missing terms; None if no weight survives."""
    num = 0.0
    den = 0.0
    for value, weight in terms:
        if value is None:
            continue
        num += value * weight
        den += weight
    if den <= 0:
        return None
    return num / den
