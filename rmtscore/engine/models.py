"""Engine data model: tip enumerations, CompletedTip input, ScoreResult output.

Every status string the tip lifecycle can produce is a member of ``TipStatus``.
Only the statuses listed in ``_STATUS_OUTCOME`` are terminal; ``is_hit()``
raises ``NonTerminalTipError`` for anything else, so a status added later
cannot silently score as a miss.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class TipDirection(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class TipTimeframe(str, Enum):
    INTRADAY = "INTRADAY"
    SWING = "SWING"
    POSITIONAL = "POSITIONAL"
    LONG_TERM = "LONG_TERM"


class TipStatus(str, Enum):
    PENDING_REVIEW = "PENDING_REVIEW"
    ACTIVE = "ACTIVE"
    TARGET_1_HIT = "TARGET_1_HIT"
    TARGET_2_HIT = "TARGET_2_HIT"
    TARGET_3_HIT = "TARGET_3_HIT"
    ALL_TARGETS_HIT = "ALL_TARGETS_HIT"
    STOPLOSS_HIT = "STOPLOSS_HIT"
    EXPIRED = "EXPIRED"
    REJECTED = "REJECTED"


class CreatorTier(str, Enum):
    UNRATED = "UNRATED"
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"
    DIAMOND = "DIAMOND"


# Terminal status -> hit (True) / miss (False)
_STATUS_OUTCOME: dict[TipStatus, bool] = {
    TipStatus.TARGET_1_HIT: True,
    TipStatus.TARGET_2_HIT: True,
    TipStatus.TARGET_3_HIT: True,
    TipStatus.ALL_TARGETS_HIT: True,
    TipStatus.STOPLOSS_HIT: False,
    TipStatus.EXPIRED: False,
}

TERMINAL_STATUSES = frozenset(_STATUS_OUTCOME)
HIT_STATUSES = frozenset(s for s, hit in _STATUS_OUTCOME.items() if hit)


class NonTerminalTipError(ValueError):
    """A tip without a resolved outcome was handed to the scoring engine."""


def is_terminal(status: TipStatus) -> bool:
    return status in _STATUS_OUTCOME


def is_hit(status: TipStatus) -> bool:
    """True if the status is a target-hit variant, False for other terminal statuses.

    Raises NonTerminalTipError for statuses that have not resolved.
    """
    try:
        return _STATUS_OUTCOME[status]
    except KeyError:
        raise NonTerminalTipError(f"Tip status {status!s} is not terminal") from None


def to_utc(value: datetime) -> datetime:
    """Normalize a datetime to UTC. Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    result = float(value)
    # pandas reads empty CSV cells as NaN
    if result != result:
        return None
    return result


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CompletedTip:
    """A tip that has reached a terminal outcome. Immutable, caller-owned."""

    direction: TipDirection
    entry_price: float
    target1: float
    stop_loss: float
    timeframe: TipTimeframe
    status: TipStatus
    tip_timestamp: datetime
    closed_at: datetime
    target2: float | None = None
    target3: float | None = None
    closed_price: float | None = None
    return_pct: float | None = None
    risk_reward_ratio: float | None = None
    id: str | None = None
    creator_id: str | None = None

    def __post_init__(self) -> None:
        # Frozen: normalize through object.__setattr__
        object.__setattr__(self, "direction", TipDirection(self.direction))
        object.__setattr__(self, "timeframe", TipTimeframe(self.timeframe))
        object.__setattr__(self, "status", TipStatus(self.status))
        object.__setattr__(self, "tip_timestamp", to_utc(self.tip_timestamp))
        object.__setattr__(self, "closed_at", to_utc(self.closed_at))

    @property
    def is_hit(self) -> bool:
        return is_hit(self.status)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "CompletedTip":
        """Build a tip from a storage row or CSV record (snake_case keys)."""
        return cls(
            direction=TipDirection(str(record["direction"]).strip().upper()),
            entry_price=float(record["entry_price"]),
            target1=float(record["target1"]),
            stop_loss=float(record["stop_loss"]),
            timeframe=TipTimeframe(str(record["timeframe"]).strip().upper()),
            status=TipStatus(str(record["status"]).strip().upper()),
            tip_timestamp=_parse_datetime(record["tip_timestamp"]),
            closed_at=_parse_datetime(record["closed_at"]),
            target2=_optional_float(record.get("target2")),
            target3=_optional_float(record.get("target3")),
            closed_price=_optional_float(record.get("closed_price")),
            return_pct=_optional_float(record.get("return_pct")),
            risk_reward_ratio=_optional_float(record.get("risk_reward_ratio")),
            id=str(record["id"]) if record.get("id") is not None else None,
            creator_id=(
                str(record["creator_id"]) if record.get("creator_id") is not None else None
            ),
        )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MonthlyAccuracy:
    month: str
    """UTC month key, ``YYYY-MM``."""
    accuracy_rate: float
    tip_count: int


@dataclass(frozen=True)
class TimeframeAccuracy:
    """Accuracy per trade horizon. None means no tips in that horizon."""

    intraday: float | None = None
    swing: float | None = None
    positional: float | None = None
    long_term: float | None = None

    def get(self, timeframe: TipTimeframe) -> float | None:
        return getattr(self, timeframe.value.lower())


@dataclass(frozen=True)
class ScoreResult:
    """Point-in-time score snapshot for one creator."""

    # --- Composite ---
    rmt_score: float
    confidence_interval: float
    tier: CreatorTier

    # --- Component scores (0-100) ---
    accuracy_score: float
    risk_adjusted_score: float
    consistency_score: float
    volume_factor_score: float

    # --- Raw metrics ---
    accuracy_rate: float
    weighted_accuracy_rate: float
    avg_return_pct: float
    avg_risk_reward_ratio: float
    best_tip_return_pct: float | None
    worst_tip_return_pct: float | None

    # --- Streaks ---
    win_streak: int
    loss_streak: int

    # --- Breakdowns ---
    timeframe_accuracy: TimeframeAccuracy
    monthly_breakdown: tuple[MonthlyAccuracy, ...]
    coefficient_of_variation: float
    months_with_data: int

    # --- Metadata ---
    total_scored_tips: int
    score_period_start: datetime
    score_period_end: datetime
    calculated_at: datetime

    @property
    def is_rated(self) -> bool:
        return self.tier is not CreatorTier.UNRATED

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe dict: enums as values, datetimes as ISO-8601 strings."""
        data = asdict(self)
        data["tier"] = self.tier.value
        data["monthly_breakdown"] = [asdict(m) for m in self.monthly_breakdown]
        for key in ("score_period_start", "score_period_end", "calculated_at"):
            data[key] = getattr(self, key).isoformat()
        return data
