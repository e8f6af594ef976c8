"""Accuracy component (40% of RMT).

Hit rate over completed tips, with exponential recency decay so that a
creator's recent calls count for more than calls from a year ago.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

import numpy as np

from rmtscore.engine.models import CompletedTip, is_hit, to_utc


@dataclass(frozen=True)
class AccuracyResult:
    accuracy_rate: float
    """Unweighted hits / total, 0-1 (display only)."""
    weighted_accuracy_rate: float
    """Recency-weighted hit rate, 0-1."""
    accuracy_score: float
    """weighted_accuracy_rate scaled to 0-100."""
    total_completed: int
    total_hit: int


def recency_weights(
    tips: Sequence[CompletedTip],
    half_life_days: float,
    now: datetime,
) -> np.ndarray:
    """Weight each tip by 2^(-age/half_life), age in whole days since closed_at.

    Tips closed after ``now`` are treated as age 0.
    """
    if half_life_days <= 0:
        raise ValueError(f"half_life_days must be positive, got {half_life_days}")
    now = to_utc(now)
    ages = np.array(
        [max(0, (now - tip.closed_at).days) for tip in tips], dtype=float,
    )
    return np.exp2(-ages / half_life_days)


def calc_accuracy(
    tips: Sequence[CompletedTip],
    half_life_days: float,
    now: datetime,
) -> AccuracyResult:
    """Raw and recency-weighted accuracy for a set of completed tips.

    Empty input returns zeros.
    """
    if not tips:
        return AccuracyResult(
            accuracy_rate=0.0,
            weighted_accuracy_rate=0.0,
            accuracy_score=0.0,
            total_completed=0,
            total_hit=0,
        )

    hits = np.array([is_hit(tip.status) for tip in tips], dtype=float)
    weights = recency_weights(tips, half_life_days, now)

    total_hit = int(hits.sum())
    weight_total = float(weights.sum())
    weighted_rate = float((weights * hits).sum()) / weight_total if weight_total > 0 else 0.0

    return AccuracyResult(
        accuracy_rate=total_hit / len(tips),
        weighted_accuracy_rate=weighted_rate,
        accuracy_score=min(100.0, max(0.0, weighted_rate * 100)),
        total_completed=len(tips),
        total_hit=total_hit,
    )


def calc_filtered_accuracy(
    tips: Sequence[CompletedTip],
    predicate: Callable[[CompletedTip], bool],
) -> float | None:
    """Hit rate over the tips matching ``predicate``; None if none match."""
    subset = [tip for tip in tips if predicate(tip)]
    if not subset:
        return None
    hits = sum(1 for tip in subset if is_hit(tip.status))
    return hits / len(subset)
