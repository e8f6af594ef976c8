"""calculate_composite_score() — Central orchestrator for scoring one creator.

Computes the RMT score for a single creator's completed tips by:
  1. Validating that every tip has a terminal status
  2. Computing the 4 components (accuracy, risk-adjusted, consistency, volume)
  3. Composing the weighted RMT score
  4. Attaching confidence interval, tier, streaks and timeframe breakdown
  5. Returning a frozen ScoreResult
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from rmtscore.config.schema import RMTConfig
from rmtscore.engine.accuracy import calc_accuracy
from rmtscore.engine.composite import calc_confidence_interval, classify_tier, compose_rmt
from rmtscore.engine.consistency import calc_consistency
from rmtscore.engine.context import utc_now
from rmtscore.engine.models import CompletedTip, NonTerminalTipError, ScoreResult, is_terminal, to_utc
from rmtscore.engine.risk_adjusted import calc_risk_adjusted
from rmtscore.engine.streaks import calc_streaks
from rmtscore.engine.timeframes import calc_timeframe_accuracy
from rmtscore.engine.volume import calc_volume_factor

logger = logging.getLogger(__name__)


def validate_tips(tips: Sequence[CompletedTip]) -> None:
    """Raise NonTerminalTipError if any tip is still open."""
    for tip in tips:
        if not is_terminal(tip.status):
            label = tip.id if tip.id is not None else repr(tip)
            raise NonTerminalTipError(
                f"Tip {label} has non-terminal status {tip.status.value}"
            )


# ---------------------------------------------------------------------------
# Main scoring function
# ---------------------------------------------------------------------------

def calculate_composite_score(
    tips: Sequence[CompletedTip],
    half_life_days: float | None = None,
    *,
    now: datetime | None = None,
    config: RMTConfig | None = None,
) -> ScoreResult:
    """Calculate the RMT score for one creator.

    Parameters:
        tips: The creator's completed tips, in any order. Not modified.
        half_life_days: Recency half-life. Defaults to the configured value.
        now: Reference instant for recency decay. Read from the clock once
             when omitted; pass it explicitly for reproducible results.
        config: RMTConfig (optional). When None, uses the published defaults.

    Returns a fully populated ScoreResult. Empty input is valid and yields
    zero scores with both period bounds set to ``now``.

    Raises NonTerminalTipError if any tip has not resolved.
    """
    if config is None:
        config = RMTConfig()
    sc = config.scoring
    if half_life_days is None:
        half_life_days = sc.recency.half_life_days
    now = to_utc(now) if now is not None else utc_now()

    validate_tips(tips)
    total = len(tips)

    # --- Components (independent of each other) ---
    accuracy = calc_accuracy(tips, half_life_days, now)
    risk = calc_risk_adjusted(tips, sc.risk_adjusted)
    consistency = calc_consistency(tips, sc.consistency)
    volume = calc_volume_factor(total, sc.volume.max_expected_tips)

    # --- Composite ---
    rmt_score = compose_rmt(
        {
            "accuracy": accuracy.accuracy_score,
            "risk_adjusted": risk.risk_adjusted_score,
            "consistency": consistency.consistency_score,
            "volume_factor": volume.volume_factor_score,
        },
        sc.weights.as_dict(),
    )
    confidence = calc_confidence_interval(
        accuracy.weighted_accuracy_rate, total, sc.confidence.z_score,
    )
    tier = classify_tier(total, sc.tiers.model_dump())

    # --- Breakdowns ---
    streaks = calc_streaks(tips)
    timeframes = calc_timeframe_accuracy(tips)

    if tips:
        period_start = min(tip.tip_timestamp for tip in tips)
        period_end = max(tip.closed_at for tip in tips)
    else:
        period_start = period_end = now

    logger.debug(
        "Scored %d tips: RMT=%.2f (acc=%.1f ra=%.1f con=%.1f vol=%.1f) tier=%s",
        total,
        rmt_score,
        accuracy.accuracy_score,
        risk.risk_adjusted_score,
        consistency.consistency_score,
        volume.volume_factor_score,
        tier.value,
    )

    return ScoreResult(
        rmt_score=rmt_score,
        confidence_interval=confidence,
        tier=tier,
        accuracy_score=accuracy.accuracy_score,
        risk_adjusted_score=risk.risk_adjusted_score,
        consistency_score=consistency.consistency_score,
        volume_factor_score=volume.volume_factor_score,
        accuracy_rate=accuracy.accuracy_rate,
        weighted_accuracy_rate=accuracy.weighted_accuracy_rate,
        avg_return_pct=risk.avg_return_pct,
        avg_risk_reward_ratio=risk.avg_risk_reward_ratio,
        best_tip_return_pct=risk.best_tip_return_pct,
        worst_tip_return_pct=risk.worst_tip_return_pct,
        win_streak=streaks.win_streak,
        loss_streak=streaks.loss_streak,
        timeframe_accuracy=timeframes,
        monthly_breakdown=consistency.monthly_breakdown,
        coefficient_of_variation=consistency.coefficient_of_variation,
        months_with_data=consistency.months_with_data,
        total_scored_tips=total,
        score_period_start=period_start,
        score_period_end=period_end,
        calculated_at=now,
    )
