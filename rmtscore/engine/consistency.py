"""Consistency component (20% of RMT).

Month-over-month stability of accuracy, measured by the coefficient of
variation (population std / mean) of the monthly hit rates.

  months < min_months      -> neutral_score (not enough history to judge)
  mean monthly rate == 0   -> 0 (wrong every month)
  CV >= cv_cutoff          -> 0
  otherwise                -> (1 - CV) * 100, clamped to [0, 100]

A steady 55% creator outscores an erratic 70% one. The score is independent
of the accuracy level itself; the accuracy component covers that.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from rmtscore.config.defaults import CONSISTENCY
from rmtscore.engine.models import CompletedTip, MonthlyAccuracy, is_hit


@dataclass(frozen=True)
class ConsistencyResult:
    consistency_score: float
    coefficient_of_variation: float
    """0.0 when fewer than ``min_months`` months or the mean is zero."""
    months_with_data: int
    monthly_breakdown: tuple[MonthlyAccuracy, ...]


def month_key(tip: CompletedTip) -> str:
    """UTC ``YYYY-MM`` bucket of the tip's close."""
    return tip.closed_at.strftime("%Y-%m")


def group_by_month(tips: Sequence[CompletedTip]) -> tuple[MonthlyAccuracy, ...]:
    """Per-month hit rate and tip count, sorted ascending by month."""
    buckets: dict[str, list[bool]] = defaultdict(list)
    for tip in tips:
        buckets[month_key(tip)].append(is_hit(tip.status))

    return tuple(
        MonthlyAccuracy(
            month=month,
            accuracy_rate=sum(outcomes) / len(outcomes),
            tip_count=len(outcomes),
        )
        for month, outcomes in sorted(buckets.items())
    )


def calc_consistency(
    tips: Sequence[CompletedTip],
    config: Any | None = None,
) -> ConsistencyResult:
    """Score the stability of monthly accuracy.

    Empty input scores 0 with no breakdown.
    """
    min_months = CONSISTENCY["min_months"]
    neutral_score = CONSISTENCY["neutral_score"]
    cv_cutoff = CONSISTENCY["cv_cutoff"]

    if config is not None:
        sc = getattr(config, "scoring", config)
        cc = getattr(sc, "consistency", sc)
        min_months = cc.min_months
        neutral_score = cc.neutral_score
        cv_cutoff = cc.cv_cutoff

    if not tips:
        return ConsistencyResult(
            consistency_score=0.0,
            coefficient_of_variation=0.0,
            months_with_data=0,
            monthly_breakdown=(),
        )

    breakdown = group_by_month(tips)
    months = len(breakdown)

    if months < min_months:
        return ConsistencyResult(
            consistency_score=float(neutral_score),
            coefficient_of_variation=0.0,
            months_with_data=months,
            monthly_breakdown=breakdown,
        )

    rates = np.array([m.accuracy_rate for m in breakdown], dtype=float)
    mean = float(rates.mean())

    if mean == 0:
        return ConsistencyResult(
            consistency_score=0.0,
            coefficient_of_variation=0.0,
            months_with_data=months,
            monthly_breakdown=breakdown,
        )

    if rates.max() == rates.min():
        # identical months; mean() can be off by an ulp, std() would not be 0
        cv = 0.0
    else:
        # ddof=0: population standard deviation
        cv = float(rates.std(ddof=0)) / mean

    if cv >= cv_cutoff:
        score = 0.0
    else:
        score = min(100.0, max(0.0, (1 - cv) * 100))

    return ConsistencyResult(
        consistency_score=score,
        coefficient_of_variation=cv,
        months_with_data=months,
        monthly_breakdown=breakdown,
    )
