"""RMT composition, confidence interval, and tier classification.

Functions:
  compose_rmt              — weighted sum of the 4 component scores
  calc_confidence_interval — 95% binomial margin, in score points
  classify_tier            — total scored tips -> CreatorTier
"""

from __future__ import annotations

import math

from rmtscore.config.defaults import CONFIDENCE, RMT_WEIGHTS, TIER_THRESHOLDS
from rmtscore.engine.models import CreatorTier

# ---------------------------------------------------------------------------
# RMT Composition
# ---------------------------------------------------------------------------

def clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return min(hi, max(lo, value))


def compose_rmt(
    scores: dict[str, float],
    weights: dict[str, float] | None = None,
) -> float:
    """Compute the RMT score from component scores.

    scores: {"accuracy": 72.0, "risk_adjusted": 55.0, "consistency": 80.0,
             "volume_factor": 40.0}
    weights: {"accuracy": 0.40, "risk_adjusted": 0.30, "consistency": 0.20,
              "volume_factor": 0.10} (must sum to 1.0)

    Terms are added in weight order, so the result reconstructs exactly as
    ``w_acc*acc + w_ra*ra + w_con*con + w_vol*vol``.
    """
    if weights is None:
        weights = RMT_WEIGHTS

    total = 0.0
    for key, weight in weights.items():
        total += weight * scores.get(key, 0.0)
    return clamp(total)


# ---------------------------------------------------------------------------
# Confidence Interval
# ---------------------------------------------------------------------------

def calc_confidence_interval(
    p: float,
    n: int,
    z: float = CONFIDENCE["z_score"],
) -> float:
    """Binomial-proportion margin of error, in score points.

    ci = z * sqrt(p * (1 - p) / n) * 100

    Zero when n == 0 or p == 0.
    """
    if n <= 0 or p <= 0:
        return 0.0
    variance = p * (1 - p) / n
    return z * math.sqrt(max(0.0, variance)) * 100


# ---------------------------------------------------------------------------
# Tier Classification
# ---------------------------------------------------------------------------

def classify_tier(
    total_scored_tips: int,
    thresholds: dict[str, int] | None = None,
) -> CreatorTier:
    """Classify a creator by sample size.

    Default lower bounds (inclusive):
      >= 1000: DIAMOND
      >=  500: PLATINUM
      >=  200: GOLD
      >=   50: SILVER
      >=   20: BRONZE
      <    20: UNRATED
    """
    if thresholds is None:
        thresholds = TIER_THRESHOLDS

    for tier in (
        CreatorTier.DIAMOND,
        CreatorTier.PLATINUM,
        CreatorTier.GOLD,
        CreatorTier.SILVER,
        CreatorTier.BRONZE,
    ):
        if total_scored_tips >= thresholds[tier.value]:
            return tier
    return CreatorTier.UNRATED
