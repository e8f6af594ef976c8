"""Risk-adjusted return component (30% of RMT).

Rewards risk discipline, not just hit rate: each tip's realized return is
measured against the risk the creator planned (entry to stop-loss distance).

Per-tip return:
  - stored ``return_pct`` when the caller supplies one
  - otherwise derived from prices:
      STOPLOSS_HIT  -> the full planned risk, as a loss
      target hits   -> closed price for single-target tips, or the
                       multi-target weighted return (see ``_target_return``)
      EXPIRED       -> closed price vs entry (0% when no closed price)

A tip is never excluded from the averages for lacking a stored return.

Score = blend of two clamped linear maps:
  avg reward/risk  [rr_floor, rr_ceiling]         -> [0, 100]
  avg return %     [return_floor, return_ceiling] -> [0, 100]
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from rmtscore.config.defaults import RISK_ADJUSTED, RISK_ADJUSTED_BLEND, TARGET_WEIGHTS
from rmtscore.engine.models import CompletedTip, TipDirection, TipStatus, is_hit


@dataclass(frozen=True)
class TipReturn:
    tip_id: str | None
    return_pct: float
    risk_pct: float
    risk_reward_ratio: float


@dataclass(frozen=True)
class RiskAdjustedResult:
    avg_return_pct: float
    avg_risk_reward_ratio: float
    risk_adjusted_score: float
    best_tip_return_pct: float | None
    worst_tip_return_pct: float | None
    tip_details: tuple[TipReturn, ...]


def _clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return min(hi, max(lo, value))


def _pct_move(tip: CompletedTip, price: float) -> float:
    """Signed % move from entry to ``price`` in the tip's favour."""
    if tip.direction is TipDirection.BUY:
        return (price - tip.entry_price) / tip.entry_price * 100
    return (tip.entry_price - price) / tip.entry_price * 100


def _target_return(tip: CompletedTip, target_weights: dict[str, list[float]]) -> float:
    """Return for a tip that hit at least target 1.

    Single-target tips use the closed price (target 1 if unknown). Multi-target
    tips average the returns of the targets reached, weighted by how many
    targets were defined.
    """
    if tip.target2 is None and tip.target3 is None:
        price = tip.closed_price if tip.closed_price is not None else tip.target1
        return _pct_move(tip, price)

    t1 = _pct_move(tip, tip.target1)
    if tip.status is TipStatus.TARGET_1_HIT:
        return t1

    if tip.target2 is not None and tip.target3 is None:
        w1, w2 = target_weights["two_targets"]
        return w1 * t1 + w2 * _pct_move(tip, tip.target2)

    if tip.target2 is not None and tip.target3 is not None:
        t2 = _pct_move(tip, tip.target2)
        if tip.status is TipStatus.TARGET_2_HIT:
            w1, w2 = target_weights["three_targets_t2"]
            return w1 * t1 + w2 * t2
        w1, w2, w3 = target_weights["three_targets_t3"]
        return w1 * t1 + w2 * t2 + w3 * _pct_move(tip, tip.target3)

    # target3 without target2: fall back to the closed price
    price = tip.closed_price if tip.closed_price is not None else tip.target1
    return _pct_move(tip, price)


def calc_tip_return(
    tip: CompletedTip,
    min_risk_pct: float = RISK_ADJUSTED["min_risk_pct"],
    target_weights: dict[str, list[float]] | None = None,
) -> TipReturn:
    """Realized return, planned risk and reward/risk for one tip."""
    if target_weights is None:
        target_weights = TARGET_WEIGHTS

    planned_risk = abs(tip.entry_price - tip.stop_loss) / tip.entry_price * 100
    # The floor only guards the reward/risk division
    risk_pct = planned_risk if planned_risk > 0 else min_risk_pct

    stopped = tip.status is TipStatus.STOPLOSS_HIT

    if tip.return_pct is not None:
        return_pct = tip.return_pct
    elif stopped:
        return_pct = -planned_risk
    elif is_hit(tip.status):
        return_pct = _target_return(tip, target_weights)
    else:
        price = tip.closed_price if tip.closed_price is not None else tip.entry_price
        return_pct = _pct_move(tip, price)

    if tip.risk_reward_ratio is not None:
        rr = tip.risk_reward_ratio
    elif stopped:
        rr = -1.0
    else:
        rr = return_pct / risk_pct

    return TipReturn(
        tip_id=tip.id,
        return_pct=return_pct,
        risk_pct=risk_pct,
        risk_reward_ratio=rr,
    )


def normalize_linear(value: float, floor: float, ceiling: float) -> float:
    """Map [floor, ceiling] onto [0, 100], clamped."""
    return _clamp((value - floor) / (ceiling - floor) * 100)


def calc_risk_adjusted(
    tips: Sequence[CompletedTip],
    config: Any | None = None,
) -> RiskAdjustedResult:
    """Risk-adjusted return metrics and the normalized 0-100 score.

    config: RiskAdjustedConfig, or any object carrying ``scoring.risk_adjusted``.
    """
    rr_floor = RISK_ADJUSTED["rr_floor"]
    rr_ceiling = RISK_ADJUSTED["rr_ceiling"]
    ret_floor = RISK_ADJUSTED["return_floor"]
    ret_ceiling = RISK_ADJUSTED["return_ceiling"]
    min_risk_pct = RISK_ADJUSTED["min_risk_pct"]
    w_rr = RISK_ADJUSTED_BLEND["risk_reward"]
    w_ret = RISK_ADJUSTED_BLEND["return"]
    target_weights = TARGET_WEIGHTS

    if config is not None:
        sc = getattr(config, "scoring", config)
        ra = getattr(sc, "risk_adjusted", sc)
        rr_floor = ra.rr_floor
        rr_ceiling = ra.rr_ceiling
        ret_floor = ra.return_floor
        ret_ceiling = ra.return_ceiling
        min_risk_pct = ra.min_risk_pct
        w_rr = ra.blend.risk_reward
        w_ret = ra.blend.return_
        target_weights = ra.target_weights.model_dump()

    if not tips:
        return RiskAdjustedResult(
            avg_return_pct=0.0,
            avg_risk_reward_ratio=0.0,
            risk_adjusted_score=0.0,
            best_tip_return_pct=None,
            worst_tip_return_pct=None,
            tip_details=(),
        )

    details = tuple(calc_tip_return(tip, min_risk_pct, target_weights) for tip in tips)
    returns = np.array([d.return_pct for d in details], dtype=float)
    ratios = np.array([d.risk_reward_ratio for d in details], dtype=float)

    avg_return = float(returns.mean())
    avg_rr = float(ratios.mean())

    rr_score = normalize_linear(avg_rr, rr_floor, rr_ceiling)
    return_score = normalize_linear(avg_return, ret_floor, ret_ceiling)

    return RiskAdjustedResult(
        avg_return_pct=avg_return,
        avg_risk_reward_ratio=avg_rr,
        risk_adjusted_score=_clamp(w_rr * rr_score + w_ret * return_score),
        best_tip_return_pct=float(returns.max()),
        worst_tip_return_pct=float(returns.min()),
        tip_details=details,
    )
